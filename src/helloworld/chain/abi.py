"""
ABI Loader - Loads contract interfaces from compiler build output.

Accepts Truffle artifacts (build/contracts/<Name>.json), Foundry artifacts
(out/<Name>.sol/<Name>.json) and bare JSON ABI lists.  Also encodes calls
and decodes return data with eth-abi.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Union

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_hash.auto import keccak

from ..errors import DecodeError, InterfaceError, InvalidValueError

ABI = list[dict[str, Any]]

BUNDLED_ARTIFACT = Path(__file__).resolve().parent.parent / "contracts" / "Storage.json"

_INT_TYPE = re.compile(r"^(u?)int(\d*)$")


def load_abi(path: Union[str, Path]) -> ABI:
    """
    Load an ABI from a build artifact or a bare ABI file.

    Args:
        path: Path to a Truffle/Foundry artifact or a JSON ABI list

    Returns:
        ABI as a list of dicts

    Raises:
        InterfaceError: If the file is missing, not JSON, or not an ABI
    """
    abi_path = Path(path).expanduser()
    if not abi_path.is_file():
        raise InterfaceError(f"ABI not found: {abi_path}")

    try:
        with abi_path.open("r", encoding="utf-8") as f:
            artifact = json.load(f)
    except json.JSONDecodeError as exc:
        raise InterfaceError(f"ABI file {abi_path} is not valid JSON: {exc}") from exc

    if isinstance(artifact, dict):
        if "abi" not in artifact:
            raise InterfaceError(f"No 'abi' key in artifact {abi_path}")
        artifact = artifact["abi"]

    return validate_abi(artifact)


def storage_abi() -> ABI:
    """Load the bundled Storage contract ABI."""
    return load_abi(BUNDLED_ARTIFACT)


def validate_abi(abi: Any) -> ABI:
    """Check the structural shape of an ABI and return it."""
    if not isinstance(abi, list):
        raise InterfaceError(f"ABI must be a JSON array, got {type(abi).__name__}")

    for index, entry in enumerate(abi):
        if not isinstance(entry, dict):
            raise InterfaceError(f"ABI entry {index} is not an object")
        if entry.get("type", "function") != "function":
            continue
        if not isinstance(entry.get("name"), str) or not entry["name"]:
            raise InterfaceError(f"ABI function entry {index} has no name")
        for key in ("inputs", "outputs"):
            params = entry.get(key, [])
            if not isinstance(params, list) or not all(
                isinstance(p, dict) and isinstance(p.get("type"), str) for p in params
            ):
                raise InterfaceError(
                    f"ABI function {entry['name']} has malformed {key}"
                )
    return abi


def find_function(abi: ABI, function_name: str) -> dict[str, Any]:
    for entry in abi:
        if entry.get("type", "function") == "function" and entry.get("name") == function_name:
            return entry
    raise InterfaceError(f"Function {function_name} not found in ABI")


def input_types(func: dict[str, Any]) -> list[str]:
    return [inp["type"] for inp in func.get("inputs", [])]


def output_types(func: dict[str, Any]) -> list[str]:
    return [out["type"] for out in func.get("outputs", [])]


def function_selector(func: dict[str, Any]) -> bytes:
    """First 4 bytes of keccak256 over the canonical signature."""
    # NOTE: Keccak-256 != SHA3-256 (NIST). Never use hashlib.sha3_256 here.
    sig = f"{func['name']}({','.join(input_types(func))})"
    return keccak(sig.encode("utf-8"))[:4]


def integer_bounds(abi_type: str) -> tuple[int, int]:
    """
    Inclusive (min, max) for a Solidity integer type.

    Raises:
        InterfaceError: If abi_type is not uintN/intN
    """
    match = _INT_TYPE.match(abi_type)
    if match is None:
        raise InterfaceError(f"Not an integer ABI type: {abi_type}")
    bits = int(match.group(2) or 256)
    if bits % 8 or not 8 <= bits <= 256:
        raise InterfaceError(f"Invalid integer width in ABI type: {abi_type}")
    if match.group(1):
        return 0, 2**bits - 1
    return -(2 ** (bits - 1)), 2 ** (bits - 1) - 1


def is_integer_type(abi_type: str) -> bool:
    try:
        integer_bounds(abi_type)
    except InterfaceError:
        return False
    return True


def encode_call(abi: ABI, function_name: str, args: list) -> str:
    """
    ABI-encode a function call.

    Returns:
        0x-prefixed hex encoded calldata
    """
    func = find_function(abi, function_name)
    types = input_types(func)
    if len(args) != len(types):
        raise InvalidValueError(
            f"{function_name} takes {len(types)} argument(s), got {len(args)}"
        )

    try:
        encoded_args = encode(types, args) if args else b""
    except EncodingError as exc:
        raise InvalidValueError(f"Cannot encode arguments for {function_name}: {exc}") from exc

    return "0x" + function_selector(func).hex() + encoded_args.hex()


def decode_result(abi: ABI, function_name: str, data: str) -> Any:
    """
    ABI-decode a function call result.

    Returns:
        Decoded result (single value or tuple)

    Raises:
        DecodeError: If the data is empty or does not match the output types
    """
    func = find_function(abi, function_name)
    types = output_types(func)
    if not types:
        return None

    if not isinstance(data, str) or data in ("", "0x"):
        raise DecodeError(f"Empty return data from {function_name}")

    try:
        raw = bytes.fromhex(data[2:] if data.startswith("0x") else data)
        decoded = decode(types, raw)
    except (ValueError, DecodingError) as exc:
        raise DecodeError(f"Cannot decode {function_name} result {data!r}: {exc}") from exc

    if len(decoded) == 1:
        return decoded[0]
    return decoded
