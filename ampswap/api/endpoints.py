"""Quote service endpoints."""

from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends

from ampswap.client import SwapClient
from ampswap.config import ClientConfig
from ampswap.models.quote import ObservedTxModel, QuoteRequest, QuoteResponse
from ampswap.rpc import ZilliqaRpcClient

logger = structlog.get_logger()

router = APIRouter()


@lru_cache(maxsize=1)
def get_default_client() -> SwapClient:
    """SwapClient backed by the JSON-RPC node named in AMPSWAP_* settings."""
    config = ClientConfig.from_env()
    rpc = ZilliqaRpcClient(config.rpc_url, config.router_address, timeout=config.query_timeout or 30.0)
    return SwapClient(state=rpc, chain=rpc, config=config)


def get_client() -> SwapClient:
    """Dependency provider for the swap client.

    Override this in tests to inject a client with fake providers:
        app.dependency_overrides[get_client] = lambda: client
    """
    return get_default_client()


@router.post("/quote/exact-input")
async def quote_exact_input(
    request: QuoteRequest,
    client: SwapClient = Depends(get_client),
) -> QuoteResponse:
    """Best output for selling exactly `amount` of tokenIn.

    Error Handling:
        - No route: 404
        - Pool state could not be loaded: 503
        - Node error while refreshing: 502
        - Invalid request: 422
    """
    await client.ensure_fresh()
    quote = client.quote_exact_input(
        request.token_in,
        request.token_out,
        request.amount,
        max_slippage_bps=request.max_slippage_bps,
    )
    logger.info(
        "quoted_exact_input",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_in=request.amount,
        amount_out=quote.expected_amount,
        hops=quote.route.hop_count,
    )
    return QuoteResponse.from_quote(quote)


@router.post("/quote/exact-output")
async def quote_exact_output(
    request: QuoteRequest,
    client: SwapClient = Depends(get_client),
) -> QuoteResponse:
    """Least input for buying exactly `amount` of tokenOut."""
    await client.ensure_fresh()
    quote = client.quote_exact_output(
        request.token_in,
        request.token_out,
        request.amount,
        max_slippage_bps=request.max_slippage_bps,
    )
    logger.info(
        "quoted_exact_output",
        token_in=request.token_in,
        token_out=request.token_out,
        amount_out=request.amount,
        amount_in=quote.expected_amount,
        hops=quote.route.hop_count,
    )
    return QuoteResponse.from_quote(quote)


@router.get("/observed")
async def observed(client: SwapClient = Depends(get_client)) -> list[ObservedTxModel]:
    """Transactions still awaiting confirmation, rejection or expiry."""
    return [ObservedTxModel.from_observed(tx) for tx in await client.get_observed()]
