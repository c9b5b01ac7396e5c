"""Transaction lifecycle tracking."""

from .observer import TransactionObserver
from .types import ChainTxStatus, ObservedTx, OnUpdate, TxStatus

__all__ = ["ChainTxStatus", "ObservedTx", "OnUpdate", "TransactionObserver", "TxStatus"]
