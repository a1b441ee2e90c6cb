"""
TxStack: nested transactions over a GlobalStore.

The stack is an arena (a list) of Tx records. Index 0 is the outermost
transaction and each record's parent is the index below it. Reads, writes
and deletes resolve against the top record, or against the GlobalStore
when the stack is empty.

Resolution rules:
- get() looks only at the active overlay. It does not fall through to
  enclosing transactions or to the GlobalStore.
- commit() writes the active overlay into the GlobalStore and into the
  immediate parent overlay, even while ancestors are still open. It does
  not pop.
- delete() removes the key from the active overlay and from every
  ancestor overlay, but never from the GlobalStore while a transaction
  is active.

Concurrency:
    Every public operation holds one reentrant lock for its full
    duration. There is no finer-grained locking; commit and delete touch
    several stack levels at once. Callers that need several operations to
    run as one step (COMMIT is commit then pop) hold ``stack.lock``
    around them.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple

from .errors import TransactionError
from .store import GlobalStore
from .transaction import Tx, TransactionState

logger = logging.getLogger(__name__)


class ReadScope(Enum):
    """Where a read was resolved."""
    GLOBAL = "global"
    TRANSACTION = "transaction"


@dataclass
class ReadResult:
    """Result of a key lookup."""

    key: str
    value: Optional[str] = None
    found: bool = False
    scope: ReadScope = ReadScope.GLOBAL


@dataclass
class CommitResult:
    """Result of a commit operation."""

    success: bool
    tx_id: Optional[str] = None
    keys: List[str] = field(default_factory=list)  # Keys merged outward
    reason: Optional[str] = None  # Failure reason


class TxStack:
    """
    LIFO stack of transactions rooted in a GlobalStore.

    Usage:
        stack = TxStack()
        stack.set("a", "1")          # straight into the store
        stack.push()
        stack.set("a", "2")          # overlay only
        stack.commit()               # store and parent see "2"
        stack.pop()
    """

    def __init__(self, store: Optional[GlobalStore] = None):
        """
        Initialize an empty stack.

        Args:
            store: Committed store to resolve against (a new one if None)
        """
        self.store = store if store is not None else GlobalStore()
        self._arena: List[Tx] = []
        self.lock = threading.RLock()

    # -------------------------------------------------------------------------
    # Stack structure
    # -------------------------------------------------------------------------

    @property
    def size(self) -> int:
        """Number of open transactions."""
        with self.lock:
            return len(self._arena)

    depth = size

    def __len__(self) -> int:
        return self.size

    @property
    def top(self) -> Optional[Tx]:
        return self.peek()

    def is_active(self) -> bool:
        """True if at least one transaction is open."""
        return self.peek() is not None

    def transactions(self) -> Tuple[Tx, ...]:
        """Open transactions, outermost first."""
        with self.lock:
            return tuple(self._arena)

    def push(self) -> Tx:
        """
        Start a new transaction on top of the stack.

        Returns:
            The new, empty, active Tx
        """
        with self.lock:
            parent = len(self._arena) - 1 if self._arena else None
            tx = Tx(parent=parent)
            self._arena.append(tx)
            logger.debug("Pushed %s (depth %d)", tx.id, len(self._arena))
            return tx

    def pop(self) -> Optional[Tx]:
        """
        Remove the top transaction without merging it.

        This is the abort path: whatever the overlay holds is dropped.
        A committed record keeps its COMMITTED state.

        Returns:
            The removed Tx, or None if no transaction was active
        """
        with self.lock:
            if not self._arena:
                logger.debug("Pop with no active transaction")
                return None

            tx = self._arena.pop()
            if tx.state == TransactionState.ACTIVE:
                tx.mark_rolled_back()
            logger.debug("Popped %s (%s, depth %d)", tx.id, tx.state.value, len(self._arena))
            return tx

    def peek(self) -> Optional[Tx]:
        """Return the active transaction, or None."""
        with self.lock:
            return self._arena[-1] if self._arena else None

    def parent_of(self, tx: Tx) -> Optional[Tx]:
        """
        Return the transaction directly beneath tx.

        Args:
            tx: A transaction currently on this stack

        Returns:
            Parent Tx, or None if tx is the outermost transaction

        Raises:
            TransactionError: If tx is not on this stack
        """
        with self.lock:
            if not any(candidate is tx for candidate in self._arena):
                raise TransactionError(
                    f"Transaction {tx.id} is not on this stack",
                    tx_id=tx.id,
                    state=tx.state.value,
                )
            if tx.parent is None:
                return None
            return self._arena[tx.parent]

    def ancestors(self, tx: Tx) -> List[Tx]:
        """Transactions beneath tx, nearest first."""
        with self.lock:
            chain = []
            parent = self.parent_of(tx)
            while parent is not None:
                chain.append(parent)
                parent = self.parent_of(parent)
            return chain

    # -------------------------------------------------------------------------
    # Commit
    # -------------------------------------------------------------------------

    def commit(self) -> CommitResult:
        """
        Merge the active overlay outward.

        Writes every pair into the GlobalStore and into the parent overlay
        if there is one. The transaction stays on the stack; the caller
        pops it.

        Returns:
            CommitResult; success is False with reason "nothing_to_commit"
            when the stack is empty
        """
        with self.lock:
            tx = self.peek()
            if tx is None:
                logger.debug("Commit with no active transaction")
                return CommitResult(success=False, reason="nothing_to_commit")

            keys = self.propagate_commit(tx)
            tx.mark_committed()
            logger.debug("Committed %s (%d keys)", tx.id, len(keys))
            return CommitResult(success=True, tx_id=tx.id, keys=keys)

    def propagate_commit(self, tx: Tx) -> List[str]:
        """
        Cross-scope write: copy tx's overlay into the store and its parent.

        Args:
            tx: Transaction whose overlay is merged

        Returns:
            Keys written, in overlay order
        """
        with self.lock:
            pairs = dict(tx.overlay)
            parent = self.parent_of(tx)

            self.store.update(pairs)
            if parent is not None:
                for key, value in pairs.items():
                    parent.write(key, value)

            return list(pairs)

    # -------------------------------------------------------------------------
    # Key resolution
    # -------------------------------------------------------------------------

    def get(self, key: str) -> ReadResult:
        """
        Resolve a key against the active scope only.

        Args:
            key: Key to look up

        Returns:
            ReadResult naming the scope the lookup ran in
        """
        with self.lock:
            tx = self.peek()
            if tx is None:
                value = self.store.get(key)
                return ReadResult(key=key, value=value, found=value is not None,
                                  scope=ReadScope.GLOBAL)

            value = tx.read(key)
            return ReadResult(key=key, value=value, found=value is not None,
                              scope=ReadScope.TRANSACTION)

    def set(self, key: str, value: str) -> None:
        """Write to the active overlay, or to the store if none is active."""
        with self.lock:
            tx = self.peek()
            if tx is None:
                self.store.set(key, value)
            else:
                tx.write(key, value)

    def delete(self, key: str) -> int:
        """
        Remove a key from the active scope.

        With no active transaction the key leaves the GlobalStore. Inside a
        transaction the removal cascades into every ancestor overlay.

        Args:
            key: Key to remove

        Returns:
            Number of scopes that held the key
        """
        with self.lock:
            tx = self.peek()
            if tx is None:
                return 1 if self.store.delete(key) else 0
            return self.cascade_delete(tx, key)

    def cascade_delete(self, tx: Tx, key: str) -> int:
        """
        Cross-scope delete: drop key from tx and every overlay beneath it.

        The GlobalStore is not touched.

        Returns:
            Number of overlays that held the key
        """
        with self.lock:
            removed = 0
            for scope in [tx] + self.ancestors(tx):
                if scope.discard(key):
                    removed += 1
            if removed:
                logger.debug("Deleted %r from %d overlays", key, removed)
            return removed

    def __repr__(self) -> str:
        return f"TxStack(size={self.size}, store={self.store!r})"
