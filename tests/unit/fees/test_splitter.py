"""Tests for swap fee splitting and fee rate validation."""

import pytest

from cpamm.errors import FeeRateExceeded, InputValidationError
from cpamm.fees import DEFAULT_FEE_SPLITTER, FeeSplit, FeeSplitter, calculate_fee, validate_rates


class TestCalculateFee:
    """Tests for calculate_fee."""

    def test_floors_fee(self):
        """Fees round down to whole token units."""
        assert calculate_fee(3_061_224, 100) == 30_612
        assert calculate_fee(99, 100) == 0

    def test_zero_rate(self):
        """A zero rate charges nothing."""
        assert calculate_fee(1_000_000, 0) == 0

    def test_full_rate(self):
        """10000 bp is the whole amount."""
        assert calculate_fee(1_000_000, 10_000) == 1_000_000


class TestValidateRates:
    """Tests for fee rate validation."""

    def test_accepts_rates_summing_to_max(self):
        """Rates summing to exactly 10000 bp are valid."""
        validate_rates(6_000, 4_000)
        validate_rates(0, 0)

    def test_rejects_sum_above_max(self):
        """Rates summing above 10000 bp are rejected."""
        with pytest.raises(FeeRateExceeded):
            validate_rates(6_000, 4_001)

    def test_rejects_single_rate_above_max(self):
        """A single rate above 10000 bp is rejected."""
        with pytest.raises(FeeRateExceeded):
            validate_rates(10_001, 0)

    def test_rejects_negative_rate(self):
        """Negative rates are rejected."""
        with pytest.raises(FeeRateExceeded):
            validate_rates(-1, 0)

    def test_is_input_validation_error(self):
        """FeeRateExceeded is an input validation error."""
        assert issubclass(FeeRateExceeded, InputValidationError)


class TestFeeSplitter:
    """Tests for FeeSplitter.split."""

    def test_split(self):
        """1% + 1% of 3,061,224 leaves exactly 3,000,000 net."""
        split = FeeSplitter().split(3_061_224, 100, 100)
        assert split == FeeSplit(provider_fee=30_612, protocol_fee=30_612, net_amount=3_000_000)

    def test_parts_sum_to_gross(self):
        """Flooring never loses or creates tokens."""
        for amount in (1, 7, 999, 10_001, 123_456_789):
            split = DEFAULT_FEE_SPLITTER.split(amount, 30, 5)
            assert split.gross_amount == amount

    def test_zero_rates(self):
        """Zero rates pass the whole amount through."""
        split = DEFAULT_FEE_SPLITTER.split(5_000, 0, 0)
        assert split.net_amount == 5_000
        assert split.provider_fee == split.protocol_fee == 0

    def test_full_rates(self):
        """A 100% combined rate leaves nothing for the curve."""
        split = DEFAULT_FEE_SPLITTER.split(10_000, 7_500, 2_500)
        assert split.net_amount == 0
        assert split.provider_fee == 7_500
        assert split.protocol_fee == 2_500

    def test_invalid_rates_rejected(self):
        """split validates the rates first."""
        with pytest.raises(FeeRateExceeded):
            DEFAULT_FEE_SPLITTER.split(1_000, 9_000, 2_000)
