"""Transaction receipt returned by the chain once a transaction is finalized."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class TxException(BaseModel):
    """A contract exception raised during execution."""

    line: int | None = None
    message: str = ""


class TxReceipt(BaseModel):
    """Execution outcome of a finalized transaction.

    Only `success` decides between confirmed and rejected. The remaining
    fields are kept so callers can show why a transaction reverted.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    success: bool
    cumulative_gas: int | None = None
    epoch_num: int | None = None
    # Error codes keyed by call depth
    errors: dict[str, list[int]] | None = None
    exceptions: list[TxException] | None = None
    event_logs: list[dict[str, Any]] = Field(default_factory=list)
