"""In-memory token ledger.

Keeps balances and supplies in dictionaries. Mints may carry a transfer
fee (basis points of the transferred amount, rounded up and capped at a
maximum) that is withheld from the recipient, like fee-on-transfer tokens.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog

from cpamm.constants import FEE_MAX_BASIS_POINTS, U64_MAX
from cpamm.errors import (
    AmountOutOfRange,
    InsufficientBalanceForTransfer,
    LiquidityBurnOverflow,
    LiquidityMintOverflow,
)
from cpamm.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class MintInfo:
    """Transfer fee settings of a mint.

    Attributes:
        transfer_fee_bp: Fee withheld on every transfer, in basis points
        maximum_fee: Upper bound on the fee of a single transfer
    """

    transfer_fee_bp: int = 0
    maximum_fee: int = U64_MAX


class InMemoryTokenLedger:
    """TokenLedger backed by dictionaries.

    Unknown mints behave as plain tokens without a transfer fee.
    """

    def __init__(self) -> None:
        self._mints: dict[bytes, MintInfo] = {}
        self._balances: dict[tuple[bytes, bytes], int] = {}
        self._supplies: dict[bytes, int] = {}
        self._withheld: dict[bytes, int] = {}
        self._lock = threading.RLock()

    def register_mint(self, mint: bytes, transfer_fee_bp: int = 0, maximum_fee: int = U64_MAX) -> None:
        """Configure the transfer fee of a mint.

        Raises:
            ValueError: If transfer_fee_bp is outside [0, 10000]
        """
        if not 0 <= transfer_fee_bp <= FEE_MAX_BASIS_POINTS:
            raise ValueError(f"Transfer fee {transfer_fee_bp} bp outside [0, {FEE_MAX_BASIS_POINTS}]")
        self._mints[mint] = MintInfo(transfer_fee_bp=transfer_fee_bp, maximum_fee=maximum_fee)

    def balance_of(self, mint: bytes, account: bytes) -> int:
        return self._balances.get((mint, account), 0)

    def supply_of(self, mint: bytes) -> int:
        return self._supplies.get(mint, 0)

    def withheld_fees(self, mint: bytes) -> int:
        """Total transfer fees withheld by a mint so far."""
        return self._withheld.get(mint, 0)

    # --- TokenLedger ---

    def transfer_fee(self, mint: bytes, amount: int) -> int:
        info = self._mints.get(mint)
        if info is None or info.transfer_fee_bp == 0 or amount == 0:
            return 0
        fee = S(amount * info.transfer_fee_bp).ceiling_div(FEE_MAX_BASIS_POINTS).value
        return min(fee, info.maximum_fee)

    def transfer(self, mint: bytes, source: bytes, destination: bytes, amount: int) -> int:
        with self._lock:
            self._check_amount(amount)
            remaining = S(self.balance_of(mint, source)).checked_sub(amount)
            if remaining is None:
                raise InsufficientBalanceForTransfer(
                    f"Balance {self.balance_of(mint, source)} of 0x{source.hex()} is below {amount}"
                )
            fee = self.transfer_fee(mint, amount)
            self._balances[(mint, source)] = remaining.value
            self._balances[(mint, destination)] = self.balance_of(mint, destination) + amount - fee
            self._withheld[mint] = self.withheld_fees(mint) + fee
            return fee

    def mint_to(self, mint: bytes, destination: bytes, amount: int) -> None:
        with self._lock:
            self._check_amount(amount)
            new_supply = S(self.supply_of(mint)).checked_add(amount)
            if new_supply is None:
                raise LiquidityMintOverflow(f"Minting {amount} overflows supply of 0x{mint.hex()}")
            self._supplies[mint] = new_supply.value
            self._balances[(mint, destination)] = self.balance_of(mint, destination) + amount

    def burn(self, mint: bytes, source: bytes, amount: int) -> None:
        with self._lock:
            self._check_amount(amount)
            new_supply = S(self.supply_of(mint)).checked_sub(amount)
            if new_supply is None:
                raise LiquidityBurnOverflow(f"Burning {amount} underflows supply of 0x{mint.hex()}")
            remaining = S(self.balance_of(mint, source)).checked_sub(amount)
            if remaining is None:
                raise InsufficientBalanceForTransfer(
                    f"Balance {self.balance_of(mint, source)} of 0x{source.hex()} is below {amount}"
                )
            self._supplies[mint] = new_supply.value
            self._balances[(mint, source)] = remaining.value

    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Snapshot balances and supplies, restoring them if the block raises.

        The ledger lock is held for the whole block, so other threads cannot
        write between the snapshot and a restore.
        """
        with self._lock:
            balances = dict(self._balances)
            supplies = dict(self._supplies)
            withheld = dict(self._withheld)
            try:
                yield
            except Exception:
                self._balances = balances
                self._supplies = supplies
                self._withheld = withheld
                logger.debug("ledger_rolled_back")
                raise

    @staticmethod
    def _check_amount(amount: int) -> None:
        if not S(amount).is_u64():
            raise AmountOutOfRange(f"Token amount must be u64, got {amount}")
