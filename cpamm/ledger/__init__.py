"""Token ledger collaborators.

- TokenLedger: protocol the pool service moves tokens through
- InMemoryTokenLedger: dictionary-backed implementation with transfer fees
"""

from cpamm.ledger.base import TokenLedger
from cpamm.ledger.memory import InMemoryTokenLedger, MintInfo

__all__ = ["TokenLedger", "InMemoryTokenLedger", "MintInfo"]
