"""Client configuration."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from ampswap.amm.pool_math import validate_slippage_bps
from ampswap.constants import DEFAULT_DEADLINE_BUFFER, DEFAULT_MAX_SLIPPAGE_BPS

ENV_PREFIX = "AMPSWAP_"


@dataclass(frozen=True)
class ClientConfig:
    """Settings for SwapClient and the quote service.

    Attributes:
        rpc_url: Zilliqa node JSON-RPC endpoint
        router_address: Router contract holding the pool list
        deadline_buffer: Blocks a submitted swap stays valid for (default: 3)
        max_slippage_bps: Tolerance applied to quoted bounds (default: 200 = 2%)
        poll_interval: Seconds between observer polls
        refresh_interval: Seconds a pool snapshot is served before the next
            request refetches it (0 refetches on every request)
        query_timeout: Seconds allowed per chain query (None waits forever)
        wzil_address: Wrapped ZIL token, the pool side of native ZIL trades
    """

    rpc_url: str = "https://api.zilliqa.com"
    router_address: str = "0x" + "0" * 40
    deadline_buffer: int = DEFAULT_DEADLINE_BUFFER
    max_slippage_bps: int = DEFAULT_MAX_SLIPPAGE_BPS
    poll_interval: float = 5.0
    refresh_interval: float = 10.0
    query_timeout: float | None = 10.0
    wzil_address: str | None = None

    def __post_init__(self) -> None:
        if self.deadline_buffer <= 0:
            raise ValueError(f"deadline_buffer must be positive, got {self.deadline_buffer}")
        validate_slippage_bps(self.max_slippage_bps)
        if self.poll_interval <= 0:
            raise ValueError(f"poll_interval must be positive, got {self.poll_interval}")
        if self.refresh_interval < 0:
            raise ValueError(f"refresh_interval cannot be negative, got {self.refresh_interval}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> ClientConfig:
        """Read AMPSWAP_* environment variables, falling back to defaults.

        AMPSWAP_RPC_URL, AMPSWAP_ROUTER_ADDRESS, AMPSWAP_DEADLINE_BUFFER,
        AMPSWAP_MAX_SLIPPAGE_BPS, AMPSWAP_POLL_INTERVAL, AMPSWAP_REFRESH_INTERVAL,
        AMPSWAP_QUERY_TIMEOUT ("none" disables the timeout) and
        AMPSWAP_WZIL_ADDRESS.
        """
        env = os.environ if environ is None else environ
        default = cls()

        def get(name: str) -> str | None:
            return env.get(ENV_PREFIX + name)

        query_timeout: float | None = default.query_timeout
        raw_timeout = get("QUERY_TIMEOUT")
        if raw_timeout is not None:
            query_timeout = None if raw_timeout.lower() in ("", "none") else float(raw_timeout)

        return cls(
            rpc_url=get("RPC_URL") or default.rpc_url,
            router_address=get("ROUTER_ADDRESS") or default.router_address,
            deadline_buffer=int(get("DEADLINE_BUFFER") or default.deadline_buffer),
            max_slippage_bps=int(get("MAX_SLIPPAGE_BPS") or default.max_slippage_bps),
            poll_interval=float(get("POLL_INTERVAL") or default.poll_interval),
            refresh_interval=float(get("REFRESH_INTERVAL") or default.refresh_interval),
            query_timeout=query_timeout,
            wzil_address=get("WZIL_ADDRESS") or default.wzil_address,
        )

