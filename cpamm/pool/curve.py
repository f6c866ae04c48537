"""Constant-product curve math.

Pure functions over reserves and cached square roots. Each returns None
when the result cannot be computed (zero input, zero divisor, overflow or
a zero result); the engine maps None to the operation's error.

Reserves and LP amounts are u64, so products of two of them fit in u128
and sqrt_of_int never overflows the standard precision.
"""

from __future__ import annotations

from cpamm.math.fixed_point import Q64x64, Q64x128


def sqrt_constant_product(base_reserve: int, quote_reserve: int) -> Q64x64 | None:
    """sqrt(base * quote) in standard precision, or None if the product is zero."""
    product = base_reserve * quote_reserve
    if product == 0:
        return None
    return Q64x64.sqrt_of_int(product)


def sqrt_base_quote_ratio(base_reserve: int, quote_reserve: int) -> Q64x64 | None:
    """sqrt(base / quote) in standard precision, or None if either side is zero.

    The quotient and its root are taken in wide precision and narrowed at
    the end, so lopsided pools (ratio near 2^-64) keep significant bits.
    """
    if base_reserve == 0 or quote_reserve == 0:
        return None
    ratio = Q64x128.from_int(base_reserve).checked_div_sqrt(Q64x128.from_int(quote_reserve))
    if ratio is None:
        return None
    narrowed = ratio.to_precision(Q64x64)
    if narrowed.is_zero():
        return None
    return narrowed


def opposite_reserve(sqrt_constant_product: Q64x64, new_reserve: int) -> int | None:
    """Reserve on the other side of the curve: floor(sqrt_cp^2 / new_reserve).

    Returns None if new_reserve is zero or the result is zero.
    """
    if new_reserve == 0:
        return None
    result = sqrt_constant_product.square_as_int() // new_reserve
    if result == 0:
        return None
    return result


def lp_tokens_to_mint(
    lp_supply: int,
    old_sqrt_constant_product: Q64x64,
    new_sqrt_constant_product: Q64x64,
) -> int | None:
    """LP tokens for growing the pool from the old to the new constant product.

    mint = lp_supply * (new - old) / old

    Returns:
        Mint amount (may be zero), or None if the product shrank or the
        calculation overflowed
    """
    old = old_sqrt_constant_product.to_precision(Q64x128)
    new = new_sqrt_constant_product.to_precision(Q64x128)

    growth = new.checked_sub(old)
    if growth is None:
        return None
    share = growth.checked_div(old)
    if share is None:
        return None
    minted = share.checked_mul(Q64x128.from_int(lp_supply))
    if minted is None:
        return None
    return minted.to_int_round()


def liquidity_from_share(
    lp_tokens: int,
    lp_supply: int,
    sqrt_constant_product: Q64x64,
    sqrt_base_quote_ratio: Q64x64,
) -> tuple[int, int] | None:
    """Base and quote amounts redeemed by lp_tokens out of lp_supply.

    With share = lp_tokens / lp_supply and the x*y=k identity:
        base  = sqrt_cp * share * sqrt_ratio
        quote = sqrt_cp * share / sqrt_ratio

    Saturating steps clamp instead of failing; a clamped amount exceeds the
    reserve and is rejected by the caller's checked subtraction.

    Returns:
        (base_amount, quote_amount), or None if either is zero or the
        share cannot be computed
    """
    share = Q64x128.from_int(lp_tokens).checked_div(Q64x128.from_int(lp_supply))
    if share is None:
        return None
    cp_share = sqrt_constant_product.to_precision(Q64x128).checked_mul(share)
    if cp_share is None:
        return None

    ratio = sqrt_base_quote_ratio.to_precision(Q64x128)
    base_amount = cp_share.saturating_mul(ratio).to_int_round()
    quote_fp = cp_share.saturating_checked_div(ratio)
    if quote_fp is None:
        return None
    quote_amount = quote_fp.to_int_round()

    if base_amount == 0 or quote_amount == 0:
        return None
    return base_amount, quote_amount
