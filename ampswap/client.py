"""SwapClient: quote, route, submit and track swaps against the router.

SwapClient ties the pieces together:
1. refresh() pulls pool states from a StateProvider into a new PoolSnapshot
2. quote_* routes a trade over the current snapshot and applies slippage
3. build_* turns a route, or a liquidity change, into the router contract call
4. swap_* and *_liquidity submit that call through a TransactionSender and
   observe it

ensure_fresh() refetches the pool set once the snapshot is older than
config.refresh_interval.

Quoting is synchronous and reads whatever snapshot is current when called.
Refreshing publishes a new snapshot by replacing a single reference, so a
quote in progress never sees a half-updated pool set.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any

import structlog

from ampswap.amm.base import INFEASIBLE
from ampswap.amm.pool_math import (
    epsilon_input,
    epsilon_output,
    max_amount_in,
    min_amount_out,
    optimal_liquidity_amounts,
    removal_amounts,
    v_reserve_ratio_bounds,
    validate_slippage_bps,
)
from ampswap.config import ClientConfig
from ampswap.constants import BASIS
from ampswap.errors import RpcError, StateNotLoadedError
from ampswap.models.types import normalize_address
from ampswap.observer import ObservedTx, OnUpdate, TransactionObserver, TxStatus
from ampswap.pools.snapshot import PoolSnapshot
from ampswap.providers import ChainStatusProvider, StateProvider, TransactionSender
from ampswap.routing import PathRouter, RouteResult, TokenPath

logger = structlog.get_logger()

EXACT_INPUT_TRANSITIONS = {
    1: "SwapExactTokensForTokensOnce",
    2: "SwapExactTokensForTokensTwice",
    3: "SwapExactTokensForTokensThrice",
}
EXACT_OUTPUT_TRANSITIONS = {
    1: "SwapTokensForExactTokensOnce",
    2: "SwapTokensForExactTokensTwice",
    3: "SwapTokensForExactTokensThrice",
}

# Native ZIL variants; ZIL attached to the call enters or leaves the route as wZIL
EXACT_ZIL_INPUT_TRANSITIONS = {
    1: "SwapExactZILForTokensOnce",
    2: "SwapExactZILForTokensTwice",
    3: "SwapExactZILForTokensThrice",
}
EXACT_INPUT_FOR_ZIL_TRANSITIONS = {
    1: "SwapExactTokensForZILOnce",
    2: "SwapExactTokensForZILTwice",
    3: "SwapExactTokensForZILThrice",
}
ZIL_FOR_EXACT_OUTPUT_TRANSITIONS = {
    1: "SwapZILForExactTokensOnce",
    2: "SwapZILForExactTokensTwice",
    3: "SwapZILForExactTokensThrice",
}
EXACT_ZIL_OUTPUT_TRANSITIONS = {
    1: "SwapTokensForExactZILOnce",
    2: "SwapTokensForExactZILTwice",
    3: "SwapTokensForExactZILThrice",
}


@dataclass(frozen=True)
class ContractParam:
    """One named transition argument."""

    vname: str
    type: str
    value: Any

    def to_dict(self) -> dict[str, Any]:
        return {"vname": self.vname, "type": self.type, "value": self.value}


@dataclass(frozen=True)
class ContractCall:
    """A router transition ready to be signed and sent.

    Attributes:
        transition: Router transition name
        args: Transition arguments in declaration order
        amount: ZIL attached to the call (0 unless native ZIL is paid in)
    """

    transition: str
    args: list[ContractParam] = field(default_factory=list)
    amount: int = 0

    def arg(self, vname: str) -> Any:
        """Value of a named argument."""
        for param in self.args:
            if param.vname == vname:
                return param.value
        raise KeyError(vname)

    @property
    def deadline_block(self) -> int:
        return int(self.arg("deadline_block"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "transition": self.transition,
            "args": [param.to_dict() for param in self.args],
            "amount": str(self.amount),
        }


@dataclass(frozen=True)
class RoutedQuote:
    """Best route for a trade with its slippage-adjusted bound.

    Attributes:
        route: Route found by the router
        expected_amount: Output (exact input) or required input (exact output)
        bound: Minimum acceptable output or maximum acceptable input
        slippage_bps: Price impact plus fees against the fee-free route
    """

    route: RouteResult
    expected_amount: int
    bound: int
    slippage_bps: int

    @property
    def pool_path(self) -> list[str]:
        return self.route.pool_path

    @property
    def token_path(self) -> list[TokenPath]:
        return self.route.token_path


def _pair_param(vname: str, path: TokenPath) -> ContractParam:
    return ContractParam(
        vname,
        "Pair ByStr20 ByStr20",
        {
            "constructor": "Pair",
            "argtypes": ["ByStr20", "ByStr20"],
            "arguments": [path.token_in, path.token_out],
        },
    )


def _route_params(route: RouteResult) -> list[ContractParam]:
    """pool/path arguments, numbered pool1..poolN when the route has several hops."""
    if route.hop_count == 1:
        return [
            ContractParam("pool", "ByStr20", route.pool_path[0]),
            _pair_param("path", route.token_path[0]),
        ]
    pools = [
        ContractParam(f"pool{i}", "ByStr20", address)
        for i, address in enumerate(route.pool_path, start=1)
    ]
    paths = [_pair_param(f"path{i}", path) for i, path in enumerate(route.token_path, start=1)]
    return pools + paths


class SwapClient:
    """Quote and execute swaps through the router contract.

    Args:
        state: Source of pool states and block height
        chain: Source of transaction status for the observer
        sender: Submits contract calls; required only for swap_*
        router_address: Router contract (defaults to config.router_address)
        config: Client settings (defaults to ClientConfig())
        on_update: Called once per observed transaction reaching a terminal status
    """

    def __init__(
        self,
        state: StateProvider,
        chain: ChainStatusProvider,
        sender: TransactionSender | None = None,
        router_address: str | None = None,
        config: ClientConfig | None = None,
        on_update: OnUpdate | None = None,
    ) -> None:
        self.config = config or ClientConfig()
        self.state = state
        self.chain = chain
        self.sender = sender
        self.router_address = normalize_address(router_address or self.config.router_address)
        self.observer = TransactionObserver(chain, on_update, self.config.query_timeout)
        self._deadline_buffer = self.config.deadline_buffer
        self._snapshot: PoolSnapshot | None = None
        self._block_height: int | None = None
        self._refreshed_at: float | None = None

    # --- State ---

    @property
    def snapshot(self) -> PoolSnapshot:
        """Current pool snapshot.

        Raises:
            StateNotLoadedError: Before the first refresh()
        """
        if self._snapshot is None:
            raise StateNotLoadedError("Pool state not loaded; call refresh() first")
        return self._snapshot

    @property
    def is_loaded(self) -> bool:
        return self._snapshot is not None

    @property
    def block_height(self) -> int:
        """Latest block height seen by this client."""
        if self._block_height is None:
            raise StateNotLoadedError("Block height not loaded; call refresh() first")
        return self._block_height

    async def refresh(self) -> PoolSnapshot:
        """Fetch every pool and publish a new snapshot."""
        pools = await self.state.fetch_pool_states()
        height = await self.state.current_block_height()
        version = 0 if self._snapshot is None else self._snapshot.version + 1
        snapshot = PoolSnapshot.build(pools.values(), block_height=height, version=version)
        self._snapshot = snapshot
        self._block_height = height
        self._refreshed_at = time.monotonic()
        logger.info("pools_refreshed", pools=len(snapshot), height=height, version=version)
        return snapshot

    async def ensure_fresh(self) -> PoolSnapshot:
        """Current snapshot, refetched once it is older than config.refresh_interval.

        A failed refetch keeps serving the previous snapshot.

        Raises:
            StateNotLoadedError: If nothing is loaded and the fetch fails
        """
        if self._snapshot is not None and self._refreshed_at is not None:
            if time.monotonic() - self._refreshed_at < self.config.refresh_interval:
                return self._snapshot
        try:
            return await self.refresh()
        except RpcError as e:
            if self._snapshot is None:
                raise StateNotLoadedError(f"Pool state could not be loaded: {e}") from e
            logger.warning("pools_refresh_failed", error=str(e), version=self._snapshot.version)
            return self._snapshot

    async def refresh_pool(self, address: str) -> PoolSnapshot:
        """Fetch one pool and publish a snapshot with it replaced."""
        pool = await self.state.fetch_pool_state(address)
        height = await self.state.current_block_height()
        snapshot = self.snapshot.with_pool(pool, block_height=height)
        self._snapshot = snapshot
        self._block_height = height
        logger.debug("pool_refreshed", pool=pool.address, height=height, version=snapshot.version)
        return snapshot

    async def refresh_block_height(self) -> int:
        self._block_height = await self.chain.current_block_height()
        return self._block_height

    # --- Deadline ---

    @property
    def deadline_blocks(self) -> int:
        return self._deadline_buffer

    def set_deadline_blocks(self, blocks: int) -> None:
        """Set how many blocks after the current one a swap stays valid.

        Raises:
            ValueError: If blocks is not positive
        """
        if blocks <= 0:
            raise ValueError(f"Deadline must be a positive number of blocks, got {blocks}")
        self._deadline_buffer = blocks

    def deadline_block(self) -> int:
        """Block height after which a swap built now is rejected."""
        return self.block_height + self._deadline_buffer

    # --- Quoting ---

    def _slippage(self, max_slippage_bps: int | None) -> int:
        if max_slippage_bps is None:
            return self.config.max_slippage_bps
        return validate_slippage_bps(max_slippage_bps)

    def _router(self, current_block: int | None) -> PathRouter:
        snapshot = self.snapshot
        if current_block is None:
            current_block = self._block_height
        return PathRouter(snapshot, current_block=current_block)

    def quote_exact_input(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        max_slippage_bps: int | None = None,
        current_block: int | None = None,
    ) -> RoutedQuote:
        """Best output for selling exactly amount_in of token_in.

        Raises:
            StateNotLoadedError: Before the first refresh()
            NoRouteError: If no route of up to three pools exists
        """
        slippage = self._slippage(max_slippage_bps)
        route = self._router(current_block).best_exact_input(token_in, token_out, amount_in)
        return RoutedQuote(
            route=route,
            expected_amount=route.amount_out,
            bound=min_amount_out(route.amount_out, slippage),
            slippage_bps=self._exact_input_slippage(route),
        )

    def quote_exact_output(
        self,
        token_in: str,
        token_out: str,
        amount_out: int,
        max_slippage_bps: int | None = None,
        current_block: int | None = None,
    ) -> RoutedQuote:
        """Least input for buying exactly amount_out of token_out.

        Raises:
            StateNotLoadedError: Before the first refresh()
            NoRouteError: If no route of up to three pools exists
        """
        slippage = self._slippage(max_slippage_bps)
        route = self._router(current_block).best_exact_output(token_in, token_out, amount_out)
        return RoutedQuote(
            route=route,
            expected_amount=route.amount_in,
            bound=max_amount_in(route.amount_in, slippage),
            slippage_bps=self._exact_output_slippage(route),
        )

    def _exact_input_slippage(self, route: RouteResult) -> int:
        """(epsilon - expected) / epsilon along the route, in bps."""
        snapshot = self.snapshot
        epsilon = route.amount_in
        for hop in route.hops:
            epsilon = epsilon_output(snapshot.get_pool(hop.pool_address), hop.token_in, epsilon)
        if epsilon <= route.amount_out:
            return 0
        return (epsilon - route.amount_out) * BASIS // epsilon

    def _exact_output_slippage(self, route: RouteResult) -> int:
        """(expected - epsilon) / expected along the route, in bps."""
        snapshot = self.snapshot
        epsilon = route.amount_out
        for hop in reversed(route.hops):
            required = epsilon_input(snapshot.get_pool(hop.pool_address), hop.token_in, epsilon)
            if required is INFEASIBLE:
                return 0
            epsilon = required
        if route.amount_in <= epsilon:
            return 0
        return (route.amount_in - epsilon) * BASIS // route.amount_in

    # --- Contract calls ---

    def _wzil(self) -> str:
        if self.config.wzil_address is None:
            raise ValueError("Native ZIL calls need config.wzil_address")
        return normalize_address(self.config.wzil_address)

    def _native_input(self, route: RouteResult) -> bool:
        """True if native ZIL is sold, False if it is bought.

        Raises:
            ValueError: If wZIL is not configured or is at neither end of the route
        """
        wzil = self._wzil()
        token_path = route.token_path
        if token_path[0].token_in == wzil:
            return True
        if token_path[-1].token_out == wzil:
            return False
        raise ValueError(f"Route neither starts nor ends with wZIL {wzil}")

    def _deadline_param(self, deadline_block: int | None) -> ContractParam:
        deadline = self.deadline_block() if deadline_block is None else deadline_block
        return ContractParam("deadline_block", "BNum", str(deadline))

    def build_swap_exact_input(
        self,
        route: RouteResult,
        amount_out_min: int,
        deadline_block: int | None = None,
        native: bool = False,
    ) -> ContractCall:
        """Router call selling route.amount_in for at least amount_out_min.

        With native set, the wZIL end of the route is paid or received as ZIL.
        Selling ZIL attaches route.amount_in to the call.

        Raises:
            ValueError: If the route does not have 1 to 3 hops, or native is
                set and the route does not start or end with wZIL
        """
        if route.hop_count not in EXACT_INPUT_TRANSITIONS:
            raise ValueError(f"Unsupported route length: {route.hop_count}")
        tail = [*_route_params(route), self._deadline_param(deadline_block)]
        amount_in = ContractParam("amount_in", "Uint128", str(route.amount_in))
        amount_out_min_param = ContractParam("amount_out_min", "Uint128", str(amount_out_min))

        if native and self._native_input(route):
            return ContractCall(
                transition=EXACT_ZIL_INPUT_TRANSITIONS[route.hop_count],
                args=[amount_out_min_param, *tail],
                amount=route.amount_in,
            )
        table = EXACT_INPUT_FOR_ZIL_TRANSITIONS if native else EXACT_INPUT_TRANSITIONS
        return ContractCall(
            transition=table[route.hop_count],
            args=[amount_in, amount_out_min_param, *tail],
        )

    def build_swap_exact_output(
        self,
        route: RouteResult,
        amount_in_max: int,
        deadline_block: int | None = None,
        native: bool = False,
    ) -> ContractCall:
        """Router call buying route.amount_out for at most amount_in_max.

        Paying with native ZIL attaches amount_in_max, which caps what the
        route may spend.

        Raises:
            ValueError: If the route does not have 1 to 3 hops, or native is
                set and the route does not start or end with wZIL
        """
        if route.hop_count not in EXACT_OUTPUT_TRANSITIONS:
            raise ValueError(f"Unsupported route length: {route.hop_count}")
        tail = [*_route_params(route), self._deadline_param(deadline_block)]
        amount_out = ContractParam("amount_out", "Uint128", str(route.amount_out))

        if native and self._native_input(route):
            return ContractCall(
                transition=ZIL_FOR_EXACT_OUTPUT_TRANSITIONS[route.hop_count],
                args=[amount_out, *tail],
                amount=amount_in_max,
            )
        table = EXACT_ZIL_OUTPUT_TRANSITIONS if native else EXACT_OUTPUT_TRANSITIONS
        return ContractCall(
            transition=table[route.hop_count],
            args=[amount_out, ContractParam("amount_in_max", "Uint128", str(amount_in_max)), *tail],
        )

    def build_add_liquidity(
        self,
        pool_address: str,
        token_a: str,
        amount_a_desired: int,
        amount_b_desired: int,
        amount_a_min: int | None = None,
        amount_b_min: int | None = None,
        max_slippage_bps: int | None = None,
        reserve_ratio_allowance_bps: int | None = None,
        deadline_block: int | None = None,
        native: bool = False,
    ) -> ContractCall:
        """AddLiquidity call depositing token_a and the pool's other token.

        Minimums default to the amounts the pool would actually take at its
        current ratio, less max_slippage_bps. Amplified pools also get bounds
        on their virtual reserve ratio, widened by reserve_ratio_allowance_bps
        (default: the slippage tolerance).

        With native set, the wZIL side is attached to the call as ZIL.

        Raises:
            PoolNotFoundError: If the pool is not in the snapshot
            ValueError: If token_a is not in the pool, or native is set and
                the pool has no wZIL side
        """
        pool = self.snapshot.get_pool(pool_address)
        token_a = normalize_address(token_a)
        token_b = pool.other_token(token_a)
        slippage = self._slippage(max_slippage_bps)
        allowance = slippage if reserve_ratio_allowance_bps is None else reserve_ratio_allowance_bps

        optimal_a, optimal_b = optimal_liquidity_amounts(pool, token_a, amount_a_desired, amount_b_desired)
        min_a = min_amount_out(optimal_a, slippage) if amount_a_min is None else amount_a_min
        min_b = min_amount_out(optimal_b, slippage) if amount_b_min is None else amount_b_min
        v_min, v_max = v_reserve_ratio_bounds(pool, allowance)
        bounds = ContractParam(
            "v_reserve_ratio_bounds",
            "Pair (Uint256) (Uint256)",
            {
                "constructor": "Pair",
                "argtypes": ["Uint256", "Uint256"],
                "arguments": [str(v_min), str(v_max)],
            },
        )
        deadline = self._deadline_param(deadline_block)

        if not native:
            args = [
                ContractParam("tokenA", "ByStr20", token_a),
                ContractParam("tokenB", "ByStr20", token_b),
                ContractParam("pool", "ByStr20", pool.address),
                ContractParam("amountA_desired", "Uint128", str(amount_a_desired)),
                ContractParam("amountB_desired", "Uint128", str(amount_b_desired)),
                ContractParam("amountA_min", "Uint128", str(min_a)),
                ContractParam("amountB_min", "Uint128", str(min_b)),
                bounds,
                deadline,
            ]
            return ContractCall(transition="AddLiquidity", args=args)

        wzil = self._wzil()
        if wzil == token_a:
            token, token_desired, token_min = token_b, amount_b_desired, min_b
            wzil_desired, wzil_min = amount_a_desired, min_a
        elif wzil == token_b:
            token, token_desired, token_min = token_a, amount_a_desired, min_a
            wzil_desired, wzil_min = amount_b_desired, min_b
        else:
            raise ValueError(f"Pool {pool.address} has no wZIL side")
        args = [
            ContractParam("token", "ByStr20", token),
            ContractParam("pool", "ByStr20", pool.address),
            ContractParam("amount_token_desired", "Uint128", str(token_desired)),
            ContractParam("amount_token_min", "Uint128", str(token_min)),
            ContractParam("amount_wZIL_min", "Uint128", str(wzil_min)),
            bounds,
            deadline,
        ]
        return ContractCall(transition="AddLiquidityZIL", args=args, amount=wzil_desired)

    def build_remove_liquidity(
        self,
        pool_address: str,
        liquidity: int,
        amount0_min: int | None = None,
        amount1_min: int | None = None,
        max_slippage_bps: int | None = None,
        deadline_block: int | None = None,
        native: bool = False,
    ) -> ContractCall:
        """RemoveLiquidity call burning liquidity shares of the pool.

        Minimums default to the pro-rata share of each reserve less
        max_slippage_bps. With native set, the wZIL side is paid out as ZIL.

        Raises:
            PoolNotFoundError: If the pool is not in the snapshot
            ValueError: If liquidity is out of range, or native is set and the
                pool has no wZIL side
        """
        pool = self.snapshot.get_pool(pool_address)
        slippage = self._slippage(max_slippage_bps)
        amount0, amount1 = removal_amounts(pool, liquidity)
        min0 = min_amount_out(amount0, slippage) if amount0_min is None else amount0_min
        min1 = min_amount_out(amount1, slippage) if amount1_min is None else amount1_min
        deadline = self._deadline_param(deadline_block)

        if not native:
            args = [
                ContractParam("tokenA", "ByStr20", pool.token0),
                ContractParam("tokenB", "ByStr20", pool.token1),
                ContractParam("pool", "ByStr20", pool.address),
                ContractParam("liquidity", "Uint128", str(liquidity)),
                ContractParam("amountA_min", "Uint128", str(min0)),
                ContractParam("amountB_min", "Uint128", str(min1)),
                deadline,
            ]
            return ContractCall(transition="RemoveLiquidity", args=args)

        wzil = self._wzil()
        if wzil == pool.token0:
            token, token_min, wzil_min = pool.token1, min1, min0
        elif wzil == pool.token1:
            token, token_min, wzil_min = pool.token0, min0, min1
        else:
            raise ValueError(f"Pool {pool.address} has no wZIL side")
        args = [
            ContractParam("token", "ByStr20", token),
            ContractParam("pool", "ByStr20", pool.address),
            ContractParam("liquidity", "Uint128", str(liquidity)),
            ContractParam("amount_token_min", "Uint128", str(token_min)),
            ContractParam("amount_wZIL_min", "Uint128", str(wzil_min)),
            deadline,
        ]
        return ContractCall(transition="RemoveLiquidityZIL", args=args)

    # --- Execution ---

    async def swap_exact_input(
        self,
        token_in: str,
        token_out: str,
        amount_in: int,
        amount_out_min: int | None = None,
        max_slippage_bps: int | None = None,
        native: bool = False,
    ) -> ObservedTx:
        """Route, submit and observe an exact-input swap.

        Args:
            token_in: Token sold (wZIL with native set sells ZIL)
            token_out: Token bought (wZIL with native set buys ZIL)
            amount_in: Exact amount sold
            amount_out_min: Minimum output; derived from the quote and
                max_slippage_bps when omitted
            native: Trade the wZIL end of the route as native ZIL

        Returns:
            The observed transaction, tracked until its deadline
        """
        sender = self._require_sender()
        await self.ensure_fresh()
        await self.refresh_block_height()
        quote = self.quote_exact_input(token_in, token_out, amount_in, max_slippage_bps)
        bound = quote.bound if amount_out_min is None else amount_out_min
        call = self.build_swap_exact_input(quote.route, bound, native=native)
        return await self._submit(sender, call)

    async def swap_exact_output(
        self,
        token_in: str,
        token_out: str,
        amount_out: int,
        amount_in_max: int | None = None,
        max_slippage_bps: int | None = None,
        native: bool = False,
    ) -> ObservedTx:
        """Route, submit and observe an exact-output swap."""
        sender = self._require_sender()
        await self.ensure_fresh()
        await self.refresh_block_height()
        quote = self.quote_exact_output(token_in, token_out, amount_out, max_slippage_bps)
        bound = quote.bound if amount_in_max is None else amount_in_max
        call = self.build_swap_exact_output(quote.route, bound, native=native)
        return await self._submit(sender, call)

    async def add_liquidity(
        self,
        pool_address: str,
        token_a: str,
        amount_a_desired: int,
        amount_b_desired: int,
        **kwargs: Any,
    ) -> ObservedTx:
        """Build, submit and observe an AddLiquidity call (see build_add_liquidity)."""
        sender = self._require_sender()
        await self.refresh_pool(pool_address)
        await self.refresh_block_height()
        call = self.build_add_liquidity(pool_address, token_a, amount_a_desired, amount_b_desired, **kwargs)
        return await self._submit(sender, call)

    async def remove_liquidity(self, pool_address: str, liquidity: int, **kwargs: Any) -> ObservedTx:
        """Build, submit and observe a RemoveLiquidity call (see build_remove_liquidity)."""
        sender = self._require_sender()
        await self.refresh_pool(pool_address)
        await self.refresh_block_height()
        call = self.build_remove_liquidity(pool_address, liquidity, **kwargs)
        return await self._submit(sender, call)

    def _require_sender(self) -> TransactionSender:
        if self.sender is None:
            raise RuntimeError("SwapClient has no TransactionSender; it can only quote")
        return self.sender

    async def _submit(self, sender: TransactionSender, call: ContractCall) -> ObservedTx:
        tx_hash = await sender.send(self.router_address, call)
        tx = ObservedTx(hash=tx_hash, deadline=call.deadline_block)
        logger.info(
            "tx_submitted",
            tx_hash=tx_hash,
            transition=call.transition,
            deadline=tx.deadline,
        )
        await self.observer.observe(tx)
        return tx

    # --- Observer ---

    async def observe_tx(self, tx: ObservedTx) -> None:
        await self.observer.observe(tx)

    async def poll(self) -> list[tuple[ObservedTx, TxStatus]]:
        return await self.observer.poll()

    async def get_observed(self) -> list[ObservedTx]:
        return await self.observer.get_observed()

    def start(self, interval: float | None = None) -> None:
        """Start background polling every interval (default config.poll_interval)."""
        self.observer.start(self.config.poll_interval if interval is None else interval)

    async def teardown(self) -> None:
        await self.observer.teardown()


__all__ = ["ContractCall", "ContractParam", "RoutedQuote", "SwapClient"]
