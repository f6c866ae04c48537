"""Pool state machine: the only place a pool's state changes."""

from __future__ import annotations

from dataclasses import replace

import structlog

from cpamm.pool.payloads import (
    CollectFeesPayload,
    InitializePayload,
    LaunchPayload,
    ProvidePayload,
    SwapPayload,
    WithdrawPayload,
)
from cpamm.pool.record import PoolRecord

logger = structlog.get_logger()


class PoolStateMachine:
    """Owns the current PoolRecord and applies computed payloads to it.

    apply_* methods copy the payload's fields into a new record and do not
    re-validate anything. A payload must come from the matching
    PoolCalculationEngine method run against the current record, and must
    be applied only after the token movement it describes has succeeded.
    """

    def __init__(self, record: PoolRecord | None = None) -> None:
        self._record = record if record is not None else PoolRecord()

    @property
    def record(self) -> PoolRecord:
        """Current immutable snapshot of the pool."""
        return self._record

    def apply_initialize(self, payload: InitializePayload) -> PoolRecord:
        self._record = replace(
            self._record,
            initialized=True,
            identities=payload.identities,
            providers_fee_rate_bp=payload.providers_fee_rate_bp,
            protocol_fee_rate_bp=payload.protocol_fee_rate_bp,
        )
        logger.debug("pool_initialized", pool_id=payload.identities.pool.hex())
        return self._record

    def apply_launch(self, payload: LaunchPayload) -> PoolRecord:
        self._record = replace(
            self._record,
            launched=True,
            base_reserve=payload.base_reserve,
            quote_reserve=payload.quote_reserve,
            lp_supply=payload.lp_supply,
            initial_locked_liquidity=payload.initial_locked_liquidity,
            sqrt_constant_product=payload.sqrt_constant_product,
            sqrt_base_quote_ratio=payload.sqrt_base_quote_ratio,
        )
        return self._record

    def apply_provide(self, payload: ProvidePayload) -> PoolRecord:
        self._record = replace(
            self._record,
            base_reserve=payload.base_reserve,
            quote_reserve=payload.quote_reserve,
            lp_supply=payload.lp_supply,
            sqrt_constant_product=payload.sqrt_constant_product,
            sqrt_base_quote_ratio=payload.sqrt_base_quote_ratio,
        )
        return self._record

    def apply_withdraw(self, payload: WithdrawPayload) -> PoolRecord:
        self._record = replace(
            self._record,
            base_reserve=payload.base_reserve,
            quote_reserve=payload.quote_reserve,
            lp_supply=payload.lp_supply,
            sqrt_constant_product=payload.sqrt_constant_product,
            sqrt_base_quote_ratio=payload.sqrt_base_quote_ratio,
        )
        return self._record

    def apply_swap(self, payload: SwapPayload) -> PoolRecord:
        self._record = replace(
            self._record,
            base_reserve=payload.base_reserve,
            quote_reserve=payload.quote_reserve,
            protocol_base_fees_to_redeem=payload.protocol_base_fees_to_redeem,
            protocol_quote_fees_to_redeem=payload.protocol_quote_fees_to_redeem,
            sqrt_constant_product=payload.sqrt_constant_product,
            sqrt_base_quote_ratio=payload.sqrt_base_quote_ratio,
        )
        return self._record

    def apply_collect_fees(self, payload: CollectFeesPayload) -> PoolRecord:
        """Reset both protocol fee accumulators.

        The payload amounts are what was transferred out; the accumulators
        go to zero regardless.
        """
        self._record = replace(
            self._record,
            protocol_base_fees_to_redeem=0,
            protocol_quote_fees_to_redeem=0,
        )
        return self._record
