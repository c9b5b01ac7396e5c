"""Types shared by the transaction observer and its collaborators."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum

from ampswap.models.receipt import TxReceipt


class TxStatus(str, Enum):
    """Terminal status of an observed transaction."""

    CONFIRMED = "confirmed"
    REJECTED = "rejected"
    EXPIRED = "expired"


class ChainTxStatus(str, Enum):
    """Status of a transaction as reported by the chain."""

    PENDING = "pending"
    FINALIZED = "finalized"


@dataclass(frozen=True)
class ObservedTx:
    """A submitted transaction being tracked until it leaves the pending state.

    Attributes:
        hash: Transaction hash as returned by the sender
        deadline: Last block height at which the transaction may still land
    """

    hash: str
    deadline: int


# Called once per observed transaction when it reaches a terminal status.
# The receipt is present for CONFIRMED and REJECTED, None for EXPIRED.
OnUpdate = Callable[[ObservedTx, TxStatus, TxReceipt | None], None]


__all__ = ["ChainTxStatus", "ObservedTx", "OnUpdate", "TxStatus"]
