"""Tests for the quote service endpoints."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from ampswap.api.endpoints import get_client
from ampswap.api.main import app
from ampswap.client import SwapClient
from ampswap.config import ClientConfig
from ampswap.observer import ObservedTx
from tests.helpers import (
    POOL_AB,
    POOL_AC,
    POOL_BC,
    TOKEN_A,
    TOKEN_B,
    TOKEN_C,
    TOKEN_D,
    TX_HASH_1,
    FakeChain,
    FakeState,
    make_pool,
)


def make_swap_client(load=True, config=None, failing=False):
    pools = [
        make_pool(POOL_AB, TOKEN_A, TOKEN_B),
        make_pool(POOL_BC, TOKEN_B, TOKEN_C),
        make_pool(POOL_AC, TOKEN_A, TOKEN_C, 10_000, 10_000),
    ]
    state = FakeState(pools)
    state.failing = failing
    swap_client = SwapClient(state, FakeChain(), config=config)
    if load:
        asyncio.run(swap_client.refresh())
    return swap_client


@pytest.fixture
def swap_client():
    return make_swap_client()


@pytest.fixture
def client(swap_client):
    """Test client serving quotes from a loaded SwapClient."""
    app.dependency_overrides[get_client] = lambda: swap_client
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestQuoteExactInput:
    """Tests for POST /quote/exact-input."""

    def test_single_hop(self, client):
        response = client.post(
            "/quote/exact-input",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "1000"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amountIn"] == "1000"
        assert data["amountOut"] == "997"
        assert data["expectedAmount"] == "997"
        assert data["bound"] == "977"
        assert data["slippageBps"] == 20
        assert data["slippagePercent"] == "0.20"
        assert data["poolPath"] == [POOL_AB]
        assert data["tokenPath"] == [{"in": TOKEN_A, "out": TOKEN_B}]

    def test_multihop(self, client):
        response = client.post(
            "/quote/exact-input",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_C, "amount": "1000"},
        )

        assert response.status_code == 200
        assert response.json()["poolPath"] == [POOL_AB, POOL_BC]

    def test_slippage_override(self, client):
        response = client.post(
            "/quote/exact-input",
            json={
                "tokenIn": TOKEN_A,
                "tokenOut": TOKEN_B,
                "amount": "1000",
                "maxSlippageBps": 0,
            },
        )

        assert response.json()["bound"] == "997"

    def test_mixed_case_addresses(self, client):
        response = client.post(
            "/quote/exact-input",
            json={"tokenIn": TOKEN_A.upper().replace("0X", "0x"), "tokenOut": TOKEN_B, "amount": "1000"},
        )

        assert response.status_code == 200
        assert response.json()["tokenPath"][0]["in"] == TOKEN_A


class TestQuoteExactOutput:
    """Tests for POST /quote/exact-output."""

    def test_single_hop(self, client):
        response = client.post(
            "/quote/exact-output",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "997"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["amountIn"] == "1000"
        assert data["amountOut"] == "997"
        assert data["bound"] == "1020"

    def test_output_beyond_reserves(self, client):
        response = client.post(
            "/quote/exact-output",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "2000000"},
        )

        assert response.status_code == 404


class TestErrors:
    """Tests for error status codes."""

    def test_no_route_returns_404(self, client):
        response = client.post(
            "/quote/exact-input",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_D, "amount": "1000"},
        )

        assert response.status_code == 404
        assert "No route" in response.json()["detail"]

    def test_state_not_loaded_returns_503(self):
        """Nothing loaded and the node failing: the quote cannot be served."""
        swap_client = make_swap_client(load=False, failing=True)
        app.dependency_overrides[get_client] = lambda: swap_client
        try:
            response = TestClient(app).post(
                "/quote/exact-input",
                json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "1000"},
            )
            assert response.status_code == 503
        finally:
            app.dependency_overrides.clear()

    @pytest.mark.parametrize(
        "body",
        [
            {"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "0"},
            {"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "-5"},
            {"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "abc"},
            {"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "1000", "maxSlippageBps": 10000},
            {"tokenIn": "0x1234", "tokenOut": TOKEN_B, "amount": "1000"},
            {"tokenOut": TOKEN_B, "amount": "1000"},
        ],
    )
    def test_invalid_request_returns_422(self, client, body):
        response = client.post("/quote/exact-input", json=body)

        assert response.status_code == 422

    def test_oversized_request_returns_413(self, client):
        response = client.post(
            "/quote/exact-input",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "1000"},
            headers={"Content-Length": str(20 * 1024 * 1024)},
        )

        assert response.status_code == 413
        assert response.json()["detail"] == "Request too large"


class TestObservedAndHealth:
    def test_observed_lists_pending(self, client, swap_client):
        asyncio.run(swap_client.observe_tx(ObservedTx(TX_HASH_1, deadline=120)))

        response = client.get("/observed")

        assert response.status_code == 200
        assert response.json() == [{"hash": TX_HASH_1, "deadline": 120}]

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}


class TestFreshness:
    """Tests for pool state refetched between requests."""

    def _post(self, test_client):
        return test_client.post(
            "/quote/exact-input",
            json={"tokenIn": TOKEN_A, "tokenOut": TOKEN_B, "amount": "1000"},
        )

    def test_quotes_follow_pool_changes(self):
        """A stale snapshot is refetched, so the next quote prices new reserves."""
        swap_client = make_swap_client(config=ClientConfig(refresh_interval=0))
        app.dependency_overrides[get_client] = lambda: swap_client
        try:
            test_client = TestClient(app)
            assert self._post(test_client).json()["amountOut"] == "997"

            swap_client.state.set_pool(make_pool(POOL_AB, TOKEN_A, TOKEN_B, 10_000, 10_000))
            swap_client.state.height = 150
            fetches = swap_client.state.fetch_count
            response = self._post(test_client)

            assert response.status_code == 200
            assert int(response.json()["amountOut"]) < 997
            assert swap_client.state.fetch_count == fetches + 1
            assert swap_client.block_height == 150
        finally:
            app.dependency_overrides.clear()

    def test_fresh_snapshot_is_not_refetched(self, client, swap_client):
        fetches = swap_client.state.fetch_count

        self._post(client)
        self._post(client)

        assert swap_client.state.fetch_count == fetches

    def test_failed_refetch_serves_previous_snapshot(self):
        swap_client = make_swap_client(config=ClientConfig(refresh_interval=0))
        swap_client.state.failing = True
        app.dependency_overrides[get_client] = lambda: swap_client
        try:
            response = self._post(TestClient(app))

            assert response.status_code == 200
            assert response.json()["amountOut"] == "997"
        finally:
            app.dependency_overrides.clear()
