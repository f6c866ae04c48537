"""Swap fee splitting between liquidity providers and the protocol.

Fees are taken from the gross swap input. The provider fee stays in the
pool reserve (growing the value of every LP share); the protocol fee is set
aside in a separate accumulator until it is collected.
"""

from __future__ import annotations

from dataclasses import dataclass

from cpamm.constants import FEE_MAX_BASIS_POINTS
from cpamm.errors import FeeRateExceeded
from cpamm.safe_int import S


@dataclass(frozen=True)
class FeeSplit:
    """Result of splitting a gross swap input.

    Attributes:
        provider_fee: Amount retained in the reserve for liquidity providers
        protocol_fee: Amount accrued for protocol redemption
        net_amount: Amount that moves the constant-product curve

    The three parts always sum to the gross input exactly.
    """

    provider_fee: int
    protocol_fee: int
    net_amount: int

    @property
    def gross_amount(self) -> int:
        return self.provider_fee + self.protocol_fee + self.net_amount


def calculate_fee(amount: int, rate_bp: int) -> int:
    """Fee in token units: floor(amount * rate_bp / 10000)."""
    return (S(amount) * S(rate_bp) // S(FEE_MAX_BASIS_POINTS)).value


def validate_rates(providers_rate_bp: int, protocol_rate_bp: int) -> None:
    """Validate a pair of fee rates.

    Raises:
        FeeRateExceeded: If either rate is outside [0, 10000] or their sum
            exceeds 10000 basis points
    """
    for rate in (providers_rate_bp, protocol_rate_bp):
        if rate < 0 or rate > FEE_MAX_BASIS_POINTS:
            raise FeeRateExceeded(f"Fee rate {rate} bp outside [0, {FEE_MAX_BASIS_POINTS}]")
    total = providers_rate_bp + protocol_rate_bp
    if total > FEE_MAX_BASIS_POINTS:
        raise FeeRateExceeded(
            f"Fee rates {providers_rate_bp} + {protocol_rate_bp} = {total} bp "
            f"exceed {FEE_MAX_BASIS_POINTS}"
        )


class FeeSplitter:
    """Computes provider and protocol fees for swaps."""

    def provider_fee(self, amount: int, providers_rate_bp: int) -> int:
        return calculate_fee(amount, providers_rate_bp)

    def protocol_fee(self, amount: int, protocol_rate_bp: int) -> int:
        return calculate_fee(amount, protocol_rate_bp)

    def validate_rates(self, providers_rate_bp: int, protocol_rate_bp: int) -> None:
        validate_rates(providers_rate_bp, protocol_rate_bp)

    def split(self, amount: int, providers_rate_bp: int, protocol_rate_bp: int) -> FeeSplit:
        """Split a gross amount into provider fee, protocol fee and net amount.

        Both fees are floored independently and the net amount takes the
        rounding remainder. With the rate sum at most 10000 bp the two fees
        never exceed amount.

        Args:
            amount: Gross swap input
            providers_rate_bp: Provider fee rate in basis points
            protocol_rate_bp: Protocol fee rate in basis points

        Returns:
            FeeSplit whose parts sum to amount

        Raises:
            FeeRateExceeded: If the rates are invalid
        """
        self.validate_rates(providers_rate_bp, protocol_rate_bp)
        provider_fee = self.provider_fee(amount, providers_rate_bp)
        protocol_fee = self.protocol_fee(amount, protocol_rate_bp)
        net_amount = (S(amount) - provider_fee - protocol_fee).value
        return FeeSplit(provider_fee=provider_fee, protocol_fee=protocol_fee, net_amount=net_amount)


# Default splitter instance
DEFAULT_FEE_SPLITTER = FeeSplitter()
