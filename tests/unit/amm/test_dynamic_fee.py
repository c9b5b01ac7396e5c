"""Tests for the volume-driven dynamic fee."""

import pytest

from ampswap.amm.dynamic_fee import (
    advance_ema,
    advance_emas,
    calculate_r_factor,
    get_fee,
    get_final_fee,
    pool_fee,
)
from ampswap.constants import (
    FEE_C0,
    FEE_C1,
    FEE_C2,
    FEE_G,
    FEE_R0,
    FEE_U,
    LONG_ALPHA,
    PRECISION,
    SHORT_ALPHA,
)
from ampswap.math.fixed_point import get_ema, mul_in_precision, pow_in_precision
from tests.helpers import ZERO_HISTORY_FEE, make_pool

P = PRECISION


class TestRFactor:
    """Tests for the short/long EMA ratio."""

    def test_no_history_is_zero(self):
        assert calculate_r_factor(5 * P, 0) == 0

    def test_ratio_in_precision(self):
        assert calculate_r_factor(3 * P, 2 * P) == 3 * P // 2


class TestGetFee:
    """Tests for the piecewise fee curve."""

    def test_zero_r_factor(self):
        """A pool with no trade history."""
        assert get_fee(0) == ZERO_HISTORY_FEE

    def test_at_g_bump_vanishes(self):
        assert get_fee(FEE_G) == FEE_C2 // 10000

    def test_between_g_and_one(self):
        assert get_fee(9 * P // 10) == 2480413114224120

    def test_at_one(self):
        """r = 1.0 prices at exactly 0.25%."""
        assert get_fee(P) == 2500000000000000

    def test_at_u_cubic_vanishes(self):
        assert get_fee(FEE_U) == FEE_C1 // 10000

    def test_above_u(self):
        assert get_fee(13 * P // 10) == 3999999999999999

    def test_just_below_r0(self):
        assert get_fee(FEE_R0 - 1) == 5999999999999999

    @pytest.mark.parametrize("r", [FEE_R0, 2 * P, 100 * P])
    def test_saturates_at_c0(self, r):
        assert get_fee(r) == FEE_C0 == 6000000000000000

    def test_monotonic_above_g(self):
        samples = [FEE_G + i * P // 100 for i in range(0, 70)]
        fees = [get_fee(r) for r in samples]
        assert fees == sorted(fees)


class TestGetFinalFee:
    """Tests for amplification fee tiers."""

    @pytest.mark.parametrize("amp_bps", [10000, 15000, 20000])
    def test_full_fee_up_to_2x(self, amp_bps):
        assert get_final_fee(ZERO_HISTORY_FEE, amp_bps) == ZERO_HISTORY_FEE

    def test_two_thirds_up_to_5x(self):
        assert get_final_fee(ZERO_HISTORY_FEE, 50000) == 1002555749004588

    def test_one_third_up_to_20x(self):
        assert get_final_fee(ZERO_HISTORY_FEE, 200000) == 501277874502294

    def test_floor_above_20x(self):
        assert get_final_fee(ZERO_HISTORY_FEE, 200001) == 200511149800917


class TestAdvanceEmas:
    """Tests for bringing volume EMAs up to the current block."""

    def test_same_block_unchanged(self):
        assert advance_ema(7 * P, SHORT_ALPHA, P, 0) == 7 * P

    def test_never_traded_is_not_decayed(self):
        pool = make_pool(short_ema=2 * P, long_ema=P, current_block_volume=P, last_trade_block=0)
        emas = advance_emas(pool, current_block=500)
        assert emas.short_ema == 2 * P
        assert emas.long_ema == P

    def test_one_block_folds_in_volume(self):
        pool = make_pool(
            short_ema=11 * P // 10, long_ema=P, current_block_volume=P, last_trade_block=99
        )
        emas = advance_emas(pool, current_block=100)
        assert emas.short_ema == 1099962969820403629
        assert emas.long_ema == P
        assert get_fee(emas.r_factor) == 3296111114922682

    def test_skipped_blocks_decay(self):
        """Volume folds in once, then nine empty blocks decay both EMAs."""
        pool = make_pool(
            short_ema=2 * P, long_ema=P, current_block_volume=P // 2, last_trade_block=90
        )
        emas = advance_emas(pool, current_block=100)
        assert emas.short_ema == 1992790827765725257
        assert emas.long_ema == 998242291604368402

    def test_decay_raises_one_minus_alpha_not_the_ema(self):
        """Empty blocks multiply the EMA by (1 - alpha)^(skip - 1).

        Raising the EMA itself to that power would square a 2.0 average to
        roughly 4.0 over three blocks instead of decaying it.
        """
        folded = get_ema(2 * P, SHORT_ALPHA, 0)
        expected = mul_in_precision(folded, pow_in_precision(P - SHORT_ALPHA, 2))
        result = advance_ema(2 * P, SHORT_ALPHA, 0, 3)
        assert result == expected
        assert result < folded < 2 * P

    def test_pool_not_mutated(self):
        pool = make_pool(short_ema=2 * P, long_ema=P, last_trade_block=90)
        advance_emas(pool, current_block=100)
        assert pool.short_ema == 2 * P
        assert pool.last_trade_block == 90

    def test_long_decays_slower_than_short(self):
        short = advance_ema(P, SHORT_ALPHA, 0, 50)
        long = advance_ema(P, LONG_ALPHA, 0, 50)
        assert short < long < P


class TestPoolFee:
    """Tests for the composed effective fee."""

    def test_zero_history_unamplified(self):
        assert pool_fee(make_pool(), current_block=100) == ZERO_HISTORY_FEE

    def test_zero_history_amplified(self):
        pool = make_pool(amp_bps=30000, v_reserve_a=3_000_000, v_reserve_b=3_000_000)
        assert pool_fee(pool, current_block=100) == 1002555749004588
