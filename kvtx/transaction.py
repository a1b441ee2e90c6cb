"""
Transaction records for the kvtx store.

A Tx is one level of the transaction stack: a private overlay of
uncommitted writes plus the arena index of the transaction beneath it.
"""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Any


class TransactionState(Enum):
    """State machine for transactions."""
    ACTIVE = "active"           # On the stack, accepting writes
    COMMITTED = "committed"     # Overlay merged outward
    ROLLED_BACK = "rolled_back" # Popped without committing


_tx_sequence = itertools.count(1)


def generate_transaction_id() -> str:
    """Next id from a process-wide sequence: TX-1, TX-2, ..."""
    return f"TX-{next(_tx_sequence)}"


@dataclass
class Tx:
    """
    One transaction's overlay.

    Attributes:
        id: Process-unique identifier (TX-<n>)
        parent: Arena index of the enclosing transaction, None at the bottom
        overlay: Uncommitted writes (key -> value)
        state: Current transaction state
    """
    id: str = field(default_factory=generate_transaction_id)
    parent: Optional[int] = None
    overlay: Dict[str, str] = field(default_factory=dict)
    state: TransactionState = TransactionState.ACTIVE

    def is_active(self) -> bool:
        """Check if transaction is still on the stack and not committed."""
        return self.state == TransactionState.ACTIVE

    def read(self, key: str) -> Optional[str]:
        """
        Look up a key in this overlay only.

        Args:
            key: Key to look up

        Returns:
            Value if present in the overlay, None otherwise
        """
        return self.overlay.get(key)

    def write(self, key: str, value: str) -> None:
        """Buffer a write in this overlay."""
        self.overlay[key] = value

    def discard(self, key: str) -> bool:
        """
        Remove a key from this overlay.

        Returns:
            True if the key was present
        """
        return self.overlay.pop(key, None) is not None

    def mark_committed(self) -> None:
        self.state = TransactionState.COMMITTED

    def mark_rolled_back(self) -> None:
        self.overlay.clear()
        self.state = TransactionState.ROLLED_BACK

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize transaction to dictionary.

        Returns:
            Dictionary representation
        """
        return {
            "id": self.id,
            "parent": self.parent,
            "state": self.state.value,
            "overlay": dict(self.overlay),
        }
