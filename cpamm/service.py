"""Pool service: the external operations of the pool core.

Each operation follows the same sequence:
1. Quote transfer fees and reduce inbound amounts to what the vault receives
2. Compute a payload with PoolCalculationEngine (may raise; nothing changed)
3. Move tokens through the TokenLedger inside ledger.atomic()
4. Apply the payload with the pool's PoolStateMachine

If any ledger call fails, the ledger rolls back and step 4 never runs, so a
failed operation leaves both balances and pool state untouched. Steps 1-4
run under the pool's lock, so operations on one pool never interleave.
"""

from __future__ import annotations

import hashlib
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from cpamm.errors import (
    MintTransferFeeCalculationFailed,
    PoolAlreadyInitialized,
    UnknownPool,
)
from cpamm.fees.config import ConfigRegistry, PoolConfig
from cpamm.ledger.base import TokenLedger
from cpamm.pool.engine import PoolCalculationEngine
from cpamm.pool.payloads import SwapDirection
from cpamm.pool.record import PoolIdentities, PoolRecord
from cpamm.pool.state_machine import PoolStateMachine
from cpamm.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class LaunchResult:
    mint_to_launcher: int
    mint_to_locked_vault: int


@dataclass(frozen=True)
class ProvideResult:
    mint_to_provider: int


@dataclass(frozen=True)
class WithdrawResult:
    base_out: int
    quote_out: int


@dataclass(frozen=True)
class SwapResult:
    amount_out: int


@dataclass(frozen=True)
class CollectFeesResult:
    base_fees: int
    quote_fees: int


def derive_identity(*parts: bytes) -> bytes:
    """Deterministic 32-byte identity from its seed parts."""
    return hashlib.sha256(b"".join(parts)).digest()


def derive_pool_identities(
    config_id: bytes,
    base_mint: bytes,
    quote_mint: bytes,
    lp_mint: bytes,
) -> PoolIdentities:
    """Identities of the pool for (config, base mint, quote mint) and its vaults."""
    pool = derive_identity(b"pool", config_id, base_mint, quote_mint)
    return PoolIdentities(
        pool=pool,
        config=config_id,
        base_mint=base_mint,
        quote_mint=quote_mint,
        lp_mint=lp_mint,
        base_vault=derive_identity(b"vault", pool, base_mint),
        quote_vault=derive_identity(b"vault", pool, quote_mint),
        locked_lp_vault=derive_identity(b"locked_lp_vault", pool, lp_mint),
    )


class PoolService:
    """Runs pool operations against a token ledger.

    Pools are keyed by their derived 32-byte pool id. There is at most one
    pool per (config, base mint, quote mint). Each pool has a lock held from
    the first read of its record until its payload is applied, so the
    service can be shared between threads.
    """

    def __init__(
        self,
        ledger: TokenLedger,
        engine: PoolCalculationEngine | None = None,
        configs: ConfigRegistry | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            ledger: Collaborator that moves token balances
            engine: Calculation engine (default: PoolCalculationEngine())
            configs: Config registry (default: empty registry)
        """
        self.ledger = ledger
        self.engine = engine if engine is not None else PoolCalculationEngine()
        self.configs = configs if configs is not None else ConfigRegistry()
        self._pools: dict[bytes, PoolStateMachine] = {}
        self._pool_locks: dict[bytes, threading.Lock] = {}
        self._registry_lock = threading.Lock()

    def create_config(
        self,
        fee_authority: bytes,
        providers_fee_rate_bp: int,
        protocol_fee_rate_bp: int,
    ) -> PoolConfig:
        with self._registry_lock:
            return self.configs.create(fee_authority, providers_fee_rate_bp, protocol_fee_rate_bp)

    def get_pool(self, pool_id: bytes) -> PoolRecord:
        """Current record of a pool.

        Raises:
            UnknownPool: If no pool has this id
        """
        return self._state(pool_id).record

    def initialize(
        self,
        base_mint: bytes,
        quote_mint: bytes,
        lp_mint: bytes,
        config_id: bytes,
    ) -> PoolRecord:
        """Create a pool record bound to a config and its mints.

        Raises:
            UnknownConfig: If config_id is not registered
            PoolAlreadyInitialized: If the pool for this config and pair exists
        """
        with self._registry_lock:
            config = self.configs.get(config_id)
            identities = derive_pool_identities(config.id, base_mint, quote_mint, lp_mint)
            if identities.pool in self._pools:
                raise PoolAlreadyInitialized(f"Pool 0x{identities.pool.hex()} is already initialized")

            state = PoolStateMachine()
            payload = self.engine.initialize(state.record, identities, config)
            record = state.apply_initialize(payload)
            self._pool_locks[identities.pool] = threading.Lock()
            self._pools[identities.pool] = state

        logger.info(
            "pool_initialized",
            pool_id=identities.pool.hex(),
            config_index=config.index,
            providers_fee_rate_bp=config.providers_fee_rate_bp,
            protocol_fee_rate_bp=config.protocol_fee_rate_bp,
        )
        return record

    def launch(
        self,
        pool_id: bytes,
        launcher: bytes,
        base_liquidity: int,
        quote_liquidity: int,
    ) -> LaunchResult:
        """Deposit the first liquidity and mint the launch and locked LP tokens."""
        with self._locked(pool_id) as state:
            ids = state.record.identities

            base_fee = self.ledger.transfer_fee(ids.base_mint, base_liquidity)
            quote_fee = self.ledger.transfer_fee(ids.quote_mint, quote_liquidity)
            payload = self.engine.launch(
                state.record,
                _after_fee(base_liquidity, base_fee),
                _after_fee(quote_liquidity, quote_fee),
            )

            with self.ledger.atomic():
                self._transfer_in(ids.base_mint, launcher, ids.base_vault, base_liquidity, base_fee)
                self._transfer_in(ids.quote_mint, launcher, ids.quote_vault, quote_liquidity, quote_fee)
                self.ledger.mint_to(ids.lp_mint, launcher, payload.launch_liquidity)
                self.ledger.mint_to(ids.lp_mint, ids.locked_lp_vault, payload.initial_locked_liquidity)
            state.apply_launch(payload)

        logger.info(
            "pool_launched",
            pool_id=pool_id.hex(),
            base_reserve=payload.base_reserve,
            quote_reserve=payload.quote_reserve,
            lp_supply=payload.lp_supply,
        )
        return LaunchResult(
            mint_to_launcher=payload.launch_liquidity,
            mint_to_locked_vault=payload.initial_locked_liquidity,
        )

    def provide(
        self,
        pool_id: bytes,
        provider: bytes,
        base_liquidity: int,
        quote_liquidity: int,
    ) -> ProvideResult:
        """Deposit proportional liquidity and mint LP tokens to the provider."""
        with self._locked(pool_id) as state:
            ids = state.record.identities

            base_fee = self.ledger.transfer_fee(ids.base_mint, base_liquidity)
            quote_fee = self.ledger.transfer_fee(ids.quote_mint, quote_liquidity)
            payload = self.engine.provide(
                state.record,
                _after_fee(base_liquidity, base_fee),
                _after_fee(quote_liquidity, quote_fee),
            )

            with self.ledger.atomic():
                self._transfer_in(ids.base_mint, provider, ids.base_vault, base_liquidity, base_fee)
                self._transfer_in(ids.quote_mint, provider, ids.quote_vault, quote_liquidity, quote_fee)
                self.ledger.mint_to(ids.lp_mint, provider, payload.lp_tokens_to_mint)
            state.apply_provide(payload)

        logger.info(
            "liquidity_provided",
            pool_id=pool_id.hex(),
            lp_tokens_minted=payload.lp_tokens_to_mint,
            lp_supply=payload.lp_supply,
        )
        return ProvideResult(mint_to_provider=payload.lp_tokens_to_mint)

    def withdraw(self, pool_id: bytes, owner: bytes, lp_tokens: int) -> WithdrawResult:
        """Burn LP tokens and pay out the proportional reserves."""
        with self._locked(pool_id) as state:
            ids = state.record.identities

            payload = self.engine.withdraw(state.record, lp_tokens)

            with self.ledger.atomic():
                self.ledger.burn(ids.lp_mint, owner, payload.lp_tokens_to_burn)
                self.ledger.transfer(ids.base_mint, ids.base_vault, owner, payload.base_withdraw_amount)
                self.ledger.transfer(ids.quote_mint, ids.quote_vault, owner, payload.quote_withdraw_amount)
            state.apply_withdraw(payload)

        logger.info(
            "liquidity_withdrawn",
            pool_id=pool_id.hex(),
            lp_tokens_burned=lp_tokens,
            base_out=payload.base_withdraw_amount,
            quote_out=payload.quote_withdraw_amount,
        )
        return WithdrawResult(
            base_out=payload.base_withdraw_amount,
            quote_out=payload.quote_withdraw_amount,
        )

    def swap(
        self,
        pool_id: bytes,
        trader: bytes,
        amount_in: int,
        estimated_result: int,
        allowed_slippage: int,
        direction: SwapDirection,
    ) -> SwapResult:
        """Swap one side of the pool for the other at the snapshotted fee rates."""
        with self._locked(pool_id) as state:
            record = state.record
            ids = record.identities

            if direction.is_base_in:
                mint_in, vault_in = ids.base_mint, ids.base_vault
                mint_out, vault_out = ids.quote_mint, ids.quote_vault
            else:
                mint_in, vault_in = ids.quote_mint, ids.quote_vault
                mint_out, vault_out = ids.base_mint, ids.base_vault

            fee_in = self.ledger.transfer_fee(mint_in, amount_in)
            payload = self.engine.swap(
                record,
                _after_fee(amount_in, fee_in),
                estimated_result,
                allowed_slippage,
                record.providers_fee_rate_bp,
                record.protocol_fee_rate_bp,
                direction,
            )

            with self.ledger.atomic():
                self._transfer_in(mint_in, trader, vault_in, amount_in, fee_in)
                self.ledger.transfer(mint_out, vault_out, trader, payload.amount_to_withdraw)
            state.apply_swap(payload)

        logger.info(
            "swap_executed",
            pool_id=pool_id.hex(),
            direction=direction.value,
            amount_in=amount_in,
            amount_out=payload.amount_to_withdraw,
        )
        return SwapResult(amount_out=payload.amount_to_withdraw)

    def collect_fees(self, pool_id: bytes) -> CollectFeesResult:
        """Transfer accrued protocol fees to the config's fee authority."""
        with self._locked(pool_id) as state:
            ids = state.record.identities
            fee_authority = self.configs.get(ids.config).fee_authority

            payload = self.engine.collect_fees(state.record)

            with self.ledger.atomic():
                if payload.base_fees > 0:
                    self.ledger.transfer(ids.base_mint, ids.base_vault, fee_authority, payload.base_fees)
                if payload.quote_fees > 0:
                    self.ledger.transfer(ids.quote_mint, ids.quote_vault, fee_authority, payload.quote_fees)
            state.apply_collect_fees(payload)

        logger.info(
            "protocol_fees_collected",
            pool_id=pool_id.hex(),
            base_fees=payload.base_fees,
            quote_fees=payload.quote_fees,
        )
        return CollectFeesResult(base_fees=payload.base_fees, quote_fees=payload.quote_fees)

    def _state(self, pool_id: bytes) -> PoolStateMachine:
        state = self._pools.get(pool_id)
        if state is None:
            raise UnknownPool(f"Unknown pool: 0x{pool_id.hex()}")
        return state

    @contextmanager
    def _locked(self, pool_id: bytes) -> Iterator[PoolStateMachine]:
        """Hold the pool's lock for one compute, transfer and apply sequence."""
        state = self._state(pool_id)
        with self._pool_locks[pool_id]:
            yield state

    def _transfer_in(
        self,
        mint: bytes,
        source: bytes,
        vault: bytes,
        amount: int,
        quoted_fee: int,
    ) -> None:
        withheld = self.ledger.transfer(mint, source, vault, amount)
        if withheld != quoted_fee:
            raise MintTransferFeeCalculationFailed(
                f"Transfer of {amount} withheld {withheld}, quoted {quoted_fee}"
            )


def _after_fee(amount: int, fee: int) -> int:
    remaining = S(amount).checked_sub(fee)
    if remaining is None:
        raise MintTransferFeeCalculationFailed(f"Transfer fee {fee} exceeds amount {amount}")
    return remaining.value
