"""Tests for constant-product curve functions."""

from cpamm.math.fixed_point import Q64x64
from cpamm.pool.curve import (
    liquidity_from_share,
    lp_tokens_to_mint,
    opposite_reserve,
    sqrt_base_quote_ratio,
    sqrt_constant_product,
)


class TestSqrtConstantProduct:
    """Tests for sqrt(base * quote)."""

    def test_perfect_square(self):
        """4M x 1M has root 2M."""
        assert sqrt_constant_product(4_000_000, 1_000_000) == Q64x64.from_int(2_000_000)

    def test_empty_side_returns_none(self):
        """An empty side gives no product."""
        assert sqrt_constant_product(0, 1_000_000) is None
        assert sqrt_constant_product(1_000_000, 0) is None


class TestSqrtBaseQuoteRatio:
    """Tests for sqrt(base / quote)."""

    def test_exact_ratio(self):
        """4M / 1M has root 2."""
        assert sqrt_base_quote_ratio(4_000_000, 1_000_000) == Q64x64.from_int(2)

    def test_balanced_pool_is_one(self):
        """Equal reserves give exactly one."""
        assert sqrt_base_quote_ratio(400_000, 400_000).is_one()

    def test_inverse_ratio(self):
        """1M / 4M has root 1/2."""
        assert sqrt_base_quote_ratio(1_000_000, 4_000_000) == Q64x64.from_ratio(1, 2)

    def test_lopsided_pool_keeps_precision(self):
        """A tiny ratio stays non-zero after narrowing."""
        ratio = sqrt_base_quote_ratio(1, 2**64 - 1)
        assert ratio is not None
        assert not ratio.is_zero()

    def test_empty_side_returns_none(self):
        """A zero reserve has no ratio."""
        assert sqrt_base_quote_ratio(0, 5) is None
        assert sqrt_base_quote_ratio(5, 0) is None


class TestOppositeReserve:
    """Tests for the reserve on the other side of the curve."""

    def test_exact(self):
        """k = 9e12 with 9M on one side leaves 1M on the other."""
        assert opposite_reserve(Q64x64.from_int(3_000_000), 9_000_000) == 1_000_000

    def test_rounds_down(self):
        """The opposite reserve is floored, in favor of the pool."""
        assert opposite_reserve(Q64x64.from_int(3_000_000), 6_000_001) == 1_499_999

    def test_recovers_non_square_product(self):
        """A truncated root still recovers the exact integer product."""
        sqrt_cp = Q64x64.sqrt_of_int(9_030_612 * 1_000_000)
        assert opposite_reserve(sqrt_cp, 9_030_612) == 1_000_000

    def test_zero_divisor_or_result_returns_none(self):
        """Zero new reserve or zero result returns None."""
        assert opposite_reserve(Q64x64.from_int(3_000_000), 0) is None
        assert opposite_reserve(Q64x64.from_int(1), 2) is None


class TestLpTokensToMint:
    """Tests for LP minting on growth of the constant product."""

    def test_proportional_growth(self):
        """Growing sqrt_cp by half mints half the supply."""
        minted = lp_tokens_to_mint(2_000_000, Q64x64.from_int(2_000_000), Q64x64.from_int(3_000_000))
        assert minted == 1_000_000

    def test_no_growth_mints_zero(self):
        """An unchanged product mints nothing."""
        value = Q64x64.from_int(2_000_000)
        assert lp_tokens_to_mint(2_000_000, value, value) == 0

    def test_shrinking_product_returns_none(self):
        """A smaller product cannot mint."""
        assert lp_tokens_to_mint(2_000_000, Q64x64.from_int(3), Q64x64.from_int(2)) is None

    def test_zero_old_product_returns_none(self):
        """A zero old product cannot be divided by."""
        assert lp_tokens_to_mint(2_000_000, Q64x64.zero(), Q64x64.from_int(2)) is None


class TestLiquidityFromShare:
    """Tests for redeeming a share of the pool."""

    def test_one_third_share(self):
        """1/3 of a 6M/1.5M pool rounds to exactly 2M/500k."""
        amounts = liquidity_from_share(
            1_000_000, 3_000_000, Q64x64.from_int(3_000_000), Q64x64.from_int(2)
        )
        assert amounts == (2_000_000, 500_000)

    def test_half_share(self):
        """Half of a 4M/1M pool is 2M/500k."""
        amounts = liquidity_from_share(
            1_000_000, 2_000_000, Q64x64.from_int(2_000_000), Q64x64.from_int(2)
        )
        assert amounts == (2_000_000, 500_000)

    def test_dust_share_returns_none(self):
        """A share too small to redeem anything returns None."""
        amounts = liquidity_from_share(
            1, 2_000_000_000, Q64x64.from_int(2_000_000), Q64x64.from_int(2)
        )
        assert amounts is None

    def test_zero_supply_returns_none(self):
        """A zero supply has no shares."""
        assert liquidity_from_share(1, 0, Q64x64.from_int(2), Q64x64.one()) is None
