"""
Chain - On-chain interaction layer.

Provides the JSON-RPC client, ABI loading/encoding, and transaction
utilities for talking to an EVM node.

Uses httpx + eth-account + eth-abi instead of the heavyweight web3.py.
"""
