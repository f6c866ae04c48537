"""Fee configuration shared by pools."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

import structlog

from cpamm.errors import UnknownConfig
from cpamm.fees.splitter import validate_rates

logger = structlog.get_logger()


@dataclass
class PoolConfig:
    """Fee configuration referenced by pools.

    Pools snapshot the rates at initialization, so later updates only
    affect pools initialized afterwards.

    Attributes:
        id: 32-byte config identity
        index: Sequential creation index within the registry
        fee_authority: Identity that receives collected protocol fees
        providers_fee_rate_bp: Provider fee rate in basis points
        protocol_fee_rate_bp: Protocol fee rate in basis points
    """

    id: bytes
    index: int
    fee_authority: bytes
    providers_fee_rate_bp: int
    protocol_fee_rate_bp: int

    def __post_init__(self) -> None:
        validate_rates(self.providers_fee_rate_bp, self.protocol_fee_rate_bp)

    def update_providers_fee_rate(self, rate_bp: int) -> None:
        """Set the provider fee rate.

        Raises:
            FeeRateExceeded: If the new rate plus the protocol rate exceeds 10000
        """
        validate_rates(rate_bp, self.protocol_fee_rate_bp)
        self.providers_fee_rate_bp = rate_bp

    def update_protocol_fee_rate(self, rate_bp: int) -> None:
        """Set the protocol fee rate.

        Raises:
            FeeRateExceeded: If the provider rate plus the new rate exceeds 10000
        """
        validate_rates(self.providers_fee_rate_bp, rate_bp)
        self.protocol_fee_rate_bp = rate_bp

    def update_fee_authority(self, fee_authority: bytes) -> None:
        self.fee_authority = fee_authority


def derive_config_id(index: int) -> bytes:
    """Deterministic 32-byte identity for the config at a creation index."""
    return hashlib.sha256(b"config" + index.to_bytes(8, "little")).digest()


class ConfigRegistry:
    """Creates fee configs and looks them up by id."""

    def __init__(self) -> None:
        self._configs: dict[bytes, PoolConfig] = {}
        self.configs_count = 0

    def create(
        self,
        fee_authority: bytes,
        providers_fee_rate_bp: int,
        protocol_fee_rate_bp: int,
    ) -> PoolConfig:
        """Create and register a new config.

        Raises:
            FeeRateExceeded: If the rates are invalid
        """
        index = self.configs_count
        config = PoolConfig(
            id=derive_config_id(index),
            index=index,
            fee_authority=fee_authority,
            providers_fee_rate_bp=providers_fee_rate_bp,
            protocol_fee_rate_bp=protocol_fee_rate_bp,
        )
        self._configs[config.id] = config
        self.configs_count += 1
        logger.debug(
            "config_created",
            index=index,
            providers_fee_rate_bp=providers_fee_rate_bp,
            protocol_fee_rate_bp=protocol_fee_rate_bp,
        )
        return config

    def get(self, config_id: bytes) -> PoolConfig:
        """Look up a config.

        Raises:
            UnknownConfig: If no config has this id
        """
        config = self._configs.get(config_id)
        if config is None:
            raise UnknownConfig(f"Unknown config: 0x{config_id.hex()}")
        return config

    def __len__(self) -> int:
        return len(self._configs)

    def __contains__(self, config_id: object) -> bool:
        return config_id in self._configs
