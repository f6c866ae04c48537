"""Constant-product pool core.

Two-phase protocol for every operation:
    payload = engine.<operation>(state_machine.record, ...)   # pure, may raise
    ... move tokens as the payload describes ...
    state_machine.apply_<operation>(payload)                  # mutate
"""

from cpamm.pool.config import DEFAULT_ENGINE_CONFIG, EngineConfig
from cpamm.pool.engine import PoolCalculationEngine
from cpamm.pool.invariants import InvariantGuard, check_swap_result
from cpamm.pool.layout import (
    POOL_RECORD_SIZE,
    LayoutError,
    decode_pool_record,
    encode_pool_record,
)
from cpamm.pool.payloads import (
    CollectFeesPayload,
    InitializePayload,
    LaunchPayload,
    ProvidePayload,
    SwapDirection,
    SwapPayload,
    WithdrawPayload,
)
from cpamm.pool.record import PoolIdentities, PoolRecord
from cpamm.pool.state_machine import PoolStateMachine

__all__ = [
    # Engine
    "PoolCalculationEngine",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "InvariantGuard",
    "check_swap_result",
    # State
    "PoolRecord",
    "PoolIdentities",
    "PoolStateMachine",
    # Payloads
    "InitializePayload",
    "LaunchPayload",
    "ProvidePayload",
    "WithdrawPayload",
    "SwapPayload",
    "CollectFeesPayload",
    "SwapDirection",
    # Layout
    "encode_pool_record",
    "decode_pool_record",
    "POOL_RECORD_SIZE",
    "LayoutError",
]
