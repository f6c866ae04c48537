"""Tests for API model types and request validation."""

import pytest
from pydantic import ValidationError

from cpamm.constants import U64_MAX
from cpamm.models import (
    CreateConfigRequest,
    PoolResponse,
    SwapRequest,
    identity_from_hex,
    identity_to_hex,
    validate_u64,
)
from cpamm.pool.payloads import SwapDirection
from tests.helpers import ALICE, make_launched_record

ALICE_HEX = "0x" + "a1" * 32


class TestValidateU64:
    """Tests for u64 parsing."""

    def test_accepts_int_and_string(self):
        """Ints and decimal strings are accepted."""
        assert validate_u64(42) == 42
        assert validate_u64("18446744073709551615") == U64_MAX

    def test_rejects_out_of_range(self):
        """Negative and oversized values are rejected."""
        with pytest.raises(ValueError):
            validate_u64(-1)
        with pytest.raises(ValueError):
            validate_u64(U64_MAX + 1)

    def test_rejects_other_types(self):
        """Bools, floats and non-numeric strings are rejected."""
        for value in (True, 1.5, "abc"):
            with pytest.raises(ValueError):
                validate_u64(value)


class TestIdentityHex:
    """Tests for identity hex conversion."""

    def test_to_and_from_hex(self):
        """Identities convert to 0x-prefixed lowercase hex and back."""
        assert identity_to_hex(ALICE) == ALICE_HEX
        assert identity_from_hex(ALICE_HEX) == ALICE

    def test_rejects_bad_identities(self):
        """Missing prefix, bad hex and wrong length are rejected."""
        for value in ("a1" * 32, "0x" + "zz" * 32, "0x" + "a1" * 31):
            with pytest.raises(ValueError):
                identity_from_hex(value)


class TestRequests:
    """Tests for request model validation."""

    def test_swap_request_aliases(self):
        """Camel-case aliases and string amounts are accepted."""
        request = SwapRequest.model_validate(
            {
                "owner": ALICE_HEX,
                "amountIn": "3061224",
                "estimatedResult": 500000,
                "allowedSlippage": "0",
                "direction": "base_to_quote",
            }
        )
        assert request.amount_in == 3_061_224
        assert request.direction is SwapDirection.BASE_TO_QUOTE

    def test_swap_request_rejects_bad_direction(self):
        """Unknown directions are rejected."""
        with pytest.raises(ValidationError):
            SwapRequest.model_validate(
                {
                    "owner": ALICE_HEX,
                    "amountIn": 1,
                    "estimatedResult": 1,
                    "allowedSlippage": 0,
                    "direction": "sideways",
                }
            )

    def test_config_request_rejects_rate_above_max(self):
        """Fee rates are bounded by 10000 bp."""
        with pytest.raises(ValidationError):
            CreateConfigRequest.model_validate(
                {
                    "feeAuthority": ALICE_HEX,
                    "providersFeeRateBasisPoints": 10_001,
                    "protocolFeeRateBasisPoints": 0,
                }
            )


class TestPoolResponse:
    """Tests for PoolResponse serialization."""

    def test_from_record(self):
        """Caches are exposed as raw integers in decimal strings."""
        record = make_launched_record(4_000_000, 1_000_000, lp_supply=2_000_000)
        body = PoolResponse.from_record(record).model_dump(by_alias=True)
        assert body["baseReserve"] == 4_000_000
        assert body["sqrtConstantProductRaw"] == str(2_000_000 << 64)
        assert body["sqrtBaseQuoteRatioRaw"] == str(2 << 64)
        assert body["id"] == identity_to_hex(record.pool_id)
