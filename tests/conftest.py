"""Pytest configuration and fixtures."""

import pytest

from cpamm.fees.config import PoolConfig
from cpamm.ledger.memory import InMemoryTokenLedger
from cpamm.math.fixed_point import Q64x64
from cpamm.pool.engine import PoolCalculationEngine
from cpamm.pool.record import PoolRecord
from cpamm.service import PoolService
from tests.helpers import (
    ALICE,
    BASE_MINT,
    FEE_AUTHORITY,
    LP_MINT,
    QUOTE_MINT,
    make_funded_ledger,
    make_initialized_record,
    make_launched_record,
)

# Fee rates of the config every service fixture creates
PROVIDERS_FEE_RATE_BP = 100
PROTOCOL_FEE_RATE_BP = 100


@pytest.fixture
def engine() -> PoolCalculationEngine:
    """A calculation engine with the default configuration."""
    return PoolCalculationEngine()


@pytest.fixture
def initialized_record() -> PoolRecord:
    """An initialized pool that has not been launched."""
    return make_initialized_record()


@pytest.fixture
def launched_record() -> PoolRecord:
    """A launched 4M/1M pool with exact caches (sqrt_cp = 2M, sqrt_ratio = 2)."""
    return make_launched_record(
        4_000_000,
        1_000_000,
        lp_supply=2_000_000,
        sqrt_constant_product=Q64x64.from_int(2_000_000),
        sqrt_base_quote_ratio_value=Q64x64.from_int(2),
    )


@pytest.fixture
def ledger() -> InMemoryTokenLedger:
    """A ledger where ALICE and BOB hold both test mints."""
    return make_funded_ledger()


@pytest.fixture
def service(ledger: InMemoryTokenLedger) -> PoolService:
    """A pool service over the funded ledger."""
    return PoolService(ledger=ledger)


@pytest.fixture
def pool_config(service: PoolService) -> PoolConfig:
    """A 1% + 1% fee config registered with the service."""
    return service.create_config(FEE_AUTHORITY, PROVIDERS_FEE_RATE_BP, PROTOCOL_FEE_RATE_BP)


@pytest.fixture
def pool_id(service: PoolService, pool_config: PoolConfig) -> bytes:
    """Id of an initialized, not launched pool over the test mints."""
    record = service.initialize(BASE_MINT, QUOTE_MINT, LP_MINT, pool_config.id)
    return record.pool_id


@pytest.fixture
def launched_pool_id(service: PoolService, pool_id: bytes) -> bytes:
    """Id of a pool launched by ALICE with 4M base and 1M quote."""
    service.launch(pool_id, ALICE, 4_000_000, 1_000_000)
    return pool_id
