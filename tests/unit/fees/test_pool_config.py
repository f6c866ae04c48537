"""Tests for fee configs and the config registry."""

import pytest

from cpamm.errors import FeeRateExceeded, LookupFailure, UnknownConfig
from cpamm.fees import ConfigRegistry, PoolConfig, derive_config_id
from tests.helpers import BOB, FEE_AUTHORITY


class TestPoolConfig:
    """Tests for PoolConfig validation and updates."""

    def test_invalid_rates_rejected(self):
        """A config cannot be built with rates above 100%."""
        with pytest.raises(FeeRateExceeded):
            PoolConfig(
                id=derive_config_id(0),
                index=0,
                fee_authority=FEE_AUTHORITY,
                providers_fee_rate_bp=5_000,
                protocol_fee_rate_bp=5_001,
            )

    def test_update_rates(self):
        """Rates can be updated within bounds."""
        config = ConfigRegistry().create(FEE_AUTHORITY, 30, 5)
        config.update_providers_fee_rate(50)
        config.update_protocol_fee_rate(10)
        assert config.providers_fee_rate_bp == 50
        assert config.protocol_fee_rate_bp == 10

    def test_update_rejects_sum_above_max(self):
        """An update that pushes the sum above 100% is rejected and not applied."""
        config = ConfigRegistry().create(FEE_AUTHORITY, 9_000, 500)
        with pytest.raises(FeeRateExceeded):
            config.update_protocol_fee_rate(1_001)
        assert config.protocol_fee_rate_bp == 500

    def test_update_fee_authority(self):
        """The fee authority can be replaced."""
        config = ConfigRegistry().create(FEE_AUTHORITY, 30, 5)
        config.update_fee_authority(BOB)
        assert config.fee_authority == BOB


class TestConfigRegistry:
    """Tests for ConfigRegistry."""

    def test_create_assigns_sequential_indices(self):
        """Each created config gets the next index and a derived id."""
        registry = ConfigRegistry()
        first = registry.create(FEE_AUTHORITY, 30, 5)
        second = registry.create(FEE_AUTHORITY, 100, 100)
        assert (first.index, second.index) == (0, 1)
        assert first.id == derive_config_id(0)
        assert second.id == derive_config_id(1)
        assert registry.configs_count == 2
        assert len(registry) == 2

    def test_config_ids_are_32_bytes_and_distinct(self):
        """Derived ids are 32-byte values unique per index."""
        assert len(derive_config_id(0)) == 32
        assert derive_config_id(0) != derive_config_id(1)

    def test_get(self):
        """Configs are found by id."""
        registry = ConfigRegistry()
        config = registry.create(FEE_AUTHORITY, 30, 5)
        assert registry.get(config.id) is config
        assert config.id in registry

    def test_get_unknown_raises(self):
        """Unknown ids raise UnknownConfig, a lookup failure."""
        with pytest.raises(UnknownConfig):
            ConfigRegistry().get(derive_config_id(7))
        assert issubclass(UnknownConfig, LookupFailure)

    def test_create_with_invalid_rates_does_not_register(self):
        """A rejected config does not consume an index."""
        registry = ConfigRegistry()
        with pytest.raises(FeeRateExceeded):
            registry.create(FEE_AUTHORITY, 10_000, 1)
        assert registry.configs_count == 0
        assert len(registry) == 0
