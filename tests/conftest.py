"""
Shared fixtures: an in-memory EVM node behind httpx.MockTransport.

The fake node understands the handful of JSON-RPC methods the client uses
and emulates the Storage contract (store(uint256) / retrieve()).  Signed
transactions are decoded with rlp so writes really go through signing.
"""

from __future__ import annotations

import json
from typing import Any, Iterator, Optional

import httpx
import pytest
import rlp
from eth_abi import decode, encode
from eth_account import Account
from eth_hash.auto import keccak

from helloworld.chain.abi import storage_abi
from helloworld.client import ContractClient
from helloworld.config import ClientConfig

TEST_PRIVATE_KEY = "0x" + "4c" * 32
CONTRACT_ADDRESS = "0x3ff10E0207bc000184aA2b0F9BC098fA2e9A70d6"
RPC_URL = "http://fake-node:7545"

STORE_SELECTOR = keccak(b"store(uint256)")[:4].hex()
RETRIEVE_SELECTOR = keccak(b"retrieve()")[:4].hex()


class FakeNode:
    """Minimal Ganache stand-in."""

    def __init__(self, chain_id: int = 1337) -> None:
        self.chain_id = chain_id
        self.stored = 0
        self.balances: dict[str, int] = {}
        self.default_balance = 100 * 10**18
        self.nonces: dict[str, int] = {}
        self.receipts: dict[str, dict[str, Any]] = {}
        self.block = 0
        self.methods: list[str] = []
        # Failure knobs
        self.refuse_connections = False
        self.mine = True
        self.revert_next = False
        self.call_result: Optional[str] = None

    def handle(self, request: httpx.Request) -> httpx.Response:
        if self.refuse_connections:
            raise httpx.ConnectError("[Errno 111] Connection refused", request=request)

        body = json.loads(request.content)
        method, params = body["method"], body["params"]
        self.methods.append(method)

        handler = getattr(self, "_" + method, None)
        if handler is None:
            error = {"code": -32601, "message": f"Method {method} not supported"}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})

        try:
            result = handler(*params)
        except NodeRejection as exc:
            error = {"code": -32000, "message": str(exc)}
            return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "error": error})
        return httpx.Response(200, json={"jsonrpc": "2.0", "id": body["id"], "result": result})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def balance_of(self, address: str) -> int:
        return self.balances.get(address.lower(), self.default_balance)

    # ---- JSON-RPC methods ----

    def _eth_chainId(self) -> str:
        return hex(self.chain_id)

    def _eth_getBalance(self, address: str, block: str) -> str:
        return hex(self.balance_of(address))

    def _eth_getTransactionCount(self, address: str, block: str) -> str:
        return hex(self.nonces.get(address.lower(), 0))

    def _eth_call(self, call: dict, block: str) -> str:
        if self.call_result is not None:
            return self.call_result
        data = call["data"][2:]
        if data[:8] == RETRIEVE_SELECTOR:
            return "0x" + encode(["uint256"], [self.stored]).hex()
        return "0x"

    def _eth_sendRawTransaction(self, raw_tx: str) -> str:
        raw = bytes.fromhex(raw_tx[2:])
        nonce, gas_price, gas, to, value, data, _v, _r, _s = rlp.decode(raw)
        sender = Account.recover_transaction(raw_tx).lower()

        cost = int.from_bytes(gas_price, "big") * int.from_bytes(gas, "big")
        if cost > self.balance_of(sender):
            raise NodeRejection("insufficient funds for gas * price + value")
        if int.from_bytes(nonce, "big") != self.nonces.get(sender, 0):
            raise NodeRejection("the tx doesn't have the correct nonce")

        self.nonces[sender] = self.nonces.get(sender, 0) + 1
        tx_hash = "0x" + keccak(raw).hex()

        status = 1
        if self.revert_next or data[:4].hex() != STORE_SELECTOR:
            self.revert_next = False
            status = 0
        else:
            (self.stored,) = decode(["uint256"], data[4:])

        if self.mine:
            self.block += 1
            self.receipts[tx_hash] = {
                "transactionHash": tx_hash,
                "blockNumber": hex(self.block),
                "from": sender,
                "to": "0x" + to.hex(),
                "gasUsed": hex(43_724),
                "status": hex(status),
            }
        return tx_hash

    def _eth_getTransactionReceipt(self, tx_hash: str) -> Optional[dict]:
        return self.receipts.get(tx_hash)


class NodeRejection(Exception):
    pass


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def config() -> ClientConfig:
    return ClientConfig.create(
        private_key=TEST_PRIVATE_KEY,
        contract_address=CONTRACT_ADDRESS,
        rpc_url=RPC_URL,
        abi=storage_abi(),
        receipt_timeout=1,
        poll_interval=0,
    )


@pytest.fixture()
def client(config: ClientConfig, node: FakeNode) -> Iterator[ContractClient]:
    with ContractClient(config, transport=node.transport()) as contract_client:
        yield contract_client
