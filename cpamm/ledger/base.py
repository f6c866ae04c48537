"""Token ledger protocol consumed by the pool service."""

from __future__ import annotations

from contextlib import AbstractContextManager
from typing import Protocol, runtime_checkable


@runtime_checkable
class TokenLedger(Protocol):
    """Moves token balances on behalf of the pool core.

    The core never changes balances itself: it computes the amounts and
    calls into a ledger, then applies its own state change once every
    ledger call for the operation has succeeded.
    """

    def transfer_fee(self, mint: bytes, amount: int) -> int:
        """Quote the fee the mint withholds when transferring amount.

        Returns:
            Fee in token units (zero for mints without a transfer fee)
        """
        ...

    def transfer(self, mint: bytes, source: bytes, destination: bytes, amount: int) -> int:
        """Transfer amount from source to destination.

        The destination receives amount minus the withheld fee.

        Returns:
            Fee actually withheld by the mint

        Raises:
            InsufficientBalanceForTransfer: If source holds less than amount
        """
        ...

    def mint_to(self, mint: bytes, destination: bytes, amount: int) -> None:
        """Mint new tokens to destination.

        Raises:
            LiquidityMintOverflow: If the supply would overflow u64
        """
        ...

    def burn(self, mint: bytes, source: bytes, amount: int) -> None:
        """Burn tokens held by source.

        Raises:
            InsufficientBalanceForTransfer: If source holds less than amount
            LiquidityBurnOverflow: If the supply would underflow
        """
        ...

    def atomic(self) -> AbstractContextManager[None]:
        """Context manager that undoes every ledger effect if its block raises."""
        ...
