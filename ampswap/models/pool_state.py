"""Typed pool state parsed from pool contract JSON.

PoolState replaces the loosely shaped contract JSON with a validated, frozen
record. The only way raw state enters the engine is through
PoolState.from_contract_state (or model_validate with the same keys), so every
snapshot the quoting engine sees satisfies the reserve invariants below.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ampswap.constants import UNAMPLIFIED_AMP_BPS
from ampswap.models.types import Address, Uint128, Uint256


class PoolState(BaseModel):
    """State of one amplified AMM pool as of its last fetch.

    Mirrors the pool contract fields. Amounts are unitless integers (no
    decimals applied).

    Invariants (checked on construction):
    - token0 < token1 by numeric value of the address
    - reserve0 == 0 if and only if reserve1 == 0
    - a virtual reserve is zero only when the pool is empty
    - amp_bps >= 10000
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    address: Address
    token0: Address
    token1: Address

    reserve0: Uint128
    reserve1: Uint128
    v_reserve0: Uint128
    v_reserve1: Uint128
    amp_bps: Uint128 = UNAMPLIFIED_AMP_BPS

    # Trade-volume statistics feeding the dynamic fee
    short_ema: Uint256 = 0
    long_ema: Uint256 = 0
    current_block_volume: Uint256 = 0
    last_trade_block: Uint128 = 0

    # LP share ledger
    total_supply: Uint128 = 0
    balances: dict[Address, Uint128] = Field(default_factory=dict)
    allowances: dict[Address, dict[Address, Uint128]] = Field(default_factory=dict)

    # Carried for completeness; not used in pricing
    factory: Address | None = None
    k_last: Uint256 = 0
    r_factor_in_precision: Uint256 = 0

    @model_validator(mode="after")
    def _check_invariants(self) -> PoolState:
        if int(self.token0, 16) >= int(self.token1, 16):
            raise ValueError(
                f"token0 must be lower than token1: {self.token0} >= {self.token1}"
            )
        if (self.reserve0 == 0) != (self.reserve1 == 0):
            raise ValueError(
                f"One-sided pool {self.address}: reserves {self.reserve0}/{self.reserve1}"
            )
        if not self.is_empty and (self.v_reserve0 == 0 or self.v_reserve1 == 0):
            raise ValueError(f"Zero virtual reserve in funded pool {self.address}")
        if self.amp_bps < UNAMPLIFIED_AMP_BPS:
            raise ValueError(f"amp_bps below {UNAMPLIFIED_AMP_BPS}: {self.amp_bps}")
        return self

    @classmethod
    def from_contract_state(cls, address: str, state: dict[str, Any]) -> PoolState:
        """Build a PoolState from a GetSmartContractState result.

        Args:
            address: Pool contract address
            state: Raw contract state (decimal strings, ByStr20 keys)

        Returns:
            Validated PoolState

        Raises:
            pydantic.ValidationError: If fields are missing, malformed or
                violate the reserve invariants
        """
        return cls.model_validate({**state, "address": address})

    @property
    def is_amplified(self) -> bool:
        """True if pricing uses virtual reserves."""
        return self.amp_bps != UNAMPLIFIED_AMP_BPS

    @property
    def is_empty(self) -> bool:
        """True if the pool holds no liquidity."""
        return self.reserve0 == 0

    @property
    def tokens(self) -> tuple[str, str]:
        return self.token0, self.token1

    def contains(self, token: str) -> bool:
        """Check whether token is one side of this pool."""
        return token in (self.token0, self.token1)

    def other_token(self, token: str) -> str:
        """Get the token on the opposite side of the pool.

        Raises:
            ValueError: If token is not in the pool
        """
        if token == self.token0:
            return self.token1
        if token == self.token1:
            return self.token0
        raise ValueError(f"Token {token} not in pool {self.address}")


__all__ = ["PoolState"]
