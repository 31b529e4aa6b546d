"""Records parsed from node responses."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


def _quantity(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, int):
        return value
    return int(value, 16)


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    status: bool
    block_number: Optional[int] = None
    gas_used: Optional[int] = None
    data: dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_rpc(cls, tx_hash: str, payload: dict[str, Any]) -> "TxReceipt":
        return cls(
            tx_hash=payload.get("transactionHash") or tx_hash,
            status=_quantity(payload.get("status", "0x0")) == 1,
            block_number=_quantity(payload.get("blockNumber")),
            gas_used=_quantity(payload.get("gasUsed")),
            data=payload,
        )
