"""Best-route search over up to three consecutive pools.

The search expands paths level by level: every one-pool path first, then
every two-pool extension, then three. Within a level, pools are visited in
the order of the snapshot's token index. A candidate replaces the best only
if it is strictly better, so among equal results the first one discovered
(the shortest, then the earliest in index order) wins.

No pool appears twice in a path. Partial paths are not pruned otherwise; a
path that already reached the target token is still extended.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

import structlog

from ampswap.amm.base import INFEASIBLE, Infeasible, SwapResult
from ampswap.amm.pool_math import compute_input, compute_output
from ampswap.constants import MAX_HOPS
from ampswap.errors import NoRouteError
from ampswap.models.pool_state import PoolState
from ampswap.models.types import normalize_address
from ampswap.pools.snapshot import PoolSnapshot
from ampswap.routing.types import RouteResult
from ampswap.safe_int import SafeIntError

logger = structlog.get_logger()


@dataclass(frozen=True)
class _PartialPath:
    """Path explored so far.

    For exact input `token` is the last token reached and `amount` the
    output so far; for exact output `token` is the earliest input token and
    `amount` the input it requires.
    """

    token: str
    amount: int
    hops: tuple[SwapResult, ...]

    def uses(self, pool_address: str) -> bool:
        return any(hop.pool_address == pool_address for hop in self.hops)


class PathRouter:
    """Find the best route between two tokens in a pool snapshot.

    The snapshot is only read. Each hop is priced with the pool's fee
    advanced to current_block, which defaults to the snapshot's height.
    """

    def __init__(
        self,
        snapshot: PoolSnapshot,
        current_block: int | None = None,
        max_hops: int = MAX_HOPS,
    ) -> None:
        self.snapshot = snapshot
        self.current_block = snapshot.block_height if current_block is None else current_block
        self.max_hops = max_hops

    def best_exact_input(self, token_in: str, token_out: str, amount_in: int) -> RouteResult:
        """Route maximizing the output for an exact input.

        Raises:
            NoRouteError: If no feasible path of up to max_hops pools exists
            ValueError: If amount_in is not positive
        """
        token_in, token_out = self._validate(token_in, token_out, amount_in)

        def price(pool: PoolState, partial: _PartialPath) -> _PartialPath | None:
            result = self._price_hop(compute_output, pool, partial.token, partial.amount)
            if result is None:
                return None
            return _PartialPath(result.token_out, result.amount_out, partial.hops + (result,))

        best = self._search(
            start=_PartialPath(token_in, amount_in, ()),
            target=token_out,
            price=price,
            is_better=lambda candidate, best: candidate.amount > best.amount,
        )
        if best is None:
            raise NoRouteError(token_in, token_out)

        route = RouteResult(amount_in=amount_in, amount_out=best.amount, hops=best.hops)
        logger.debug(
            "route_found",
            kind="exact_input",
            pools=route.pool_path,
            amount_in=route.amount_in,
            amount_out=route.amount_out,
        )
        return route

    def best_exact_output(self, token_in: str, token_out: str, amount_out: int) -> RouteResult:
        """Route minimizing the input for an exact output.

        Paths are expanded backward from token_out, each hop priced for the
        input the following hop requires.

        Raises:
            NoRouteError: If no feasible path of up to max_hops pools exists
            ValueError: If amount_out is not positive
        """
        token_in, token_out = self._validate(token_in, token_out, amount_out)

        def price(pool: PoolState, partial: _PartialPath) -> _PartialPath | None:
            hop_token_in = pool.other_token(partial.token)
            result = self._price_hop(compute_input, pool, hop_token_in, partial.amount)
            if result is None:
                return None
            return _PartialPath(hop_token_in, result.amount_in, (result,) + partial.hops)

        best = self._search(
            start=_PartialPath(token_out, amount_out, ()),
            target=token_in,
            price=price,
            is_better=lambda candidate, best: candidate.amount < best.amount,
        )
        if best is None:
            raise NoRouteError(token_in, token_out)

        route = RouteResult(amount_in=best.amount, amount_out=amount_out, hops=best.hops)
        logger.debug(
            "route_found",
            kind="exact_output",
            pools=route.pool_path,
            amount_in=route.amount_in,
            amount_out=route.amount_out,
        )
        return route

    def _validate(self, token_in: str, token_out: str, amount: int) -> tuple[str, str]:
        if amount <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")
        token_in = normalize_address(token_in)
        token_out = normalize_address(token_out)
        if token_in == token_out:
            raise NoRouteError(token_in, token_out)
        return token_in, token_out

    def _search(
        self,
        start: _PartialPath,
        target: str,
        price: Callable[[PoolState, _PartialPath], _PartialPath | None],
        is_better: Callable[[_PartialPath, _PartialPath], bool],
    ) -> _PartialPath | None:
        best: _PartialPath | None = None
        frontier = [start]

        for depth in range(1, self.max_hops + 1):
            next_frontier: list[_PartialPath] = []
            for partial in frontier:
                for pool_address in self.snapshot.pools_for_token(partial.token):
                    if partial.uses(pool_address):
                        continue
                    pool = self.snapshot.get_pool(pool_address)
                    extended = price(pool, partial)
                    if extended is None:
                        continue
                    next_frontier.append(extended)
                    if extended.token != target:
                        continue
                    if best is None or is_better(extended, best):
                        logger.debug(
                            "route_improved",
                            hops=depth,
                            pools=[hop.pool_address for hop in extended.hops],
                            amount=extended.amount,
                        )
                        best = extended
            frontier = next_frontier

        return best

    def _price_hop(
        self,
        compute: Callable[[PoolState, str, int, int], SwapResult | Infeasible],
        pool: PoolState,
        token_in: str,
        amount: int,
    ) -> SwapResult | None:
        """Price one hop, returning None for candidates that cannot be used.

        An arithmetic invariant violation only discards this candidate.
        """
        try:
            result = compute(pool, token_in, amount, self.current_block)
        except SafeIntError as e:
            logger.warning("hop_pricing_failed", pool=pool.address, token_in=token_in, error=str(e))
            return None
        if result is INFEASIBLE:
            return None
        return result


__all__ = ["PathRouter"]
