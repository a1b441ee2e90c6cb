"""
kvtx - In-process key/value store with nested transactions.

Transactions form a stack. Writes land in the active transaction's
overlay; COMMIT merges it outward, ABORT throws it away.

Key components:
- GlobalStore: Committed key/value mapping owned by a session
- Tx: One transaction's overlay and its parent link
- TxStack: Push/pop/commit plus get/set/delete resolution
- Session: Verb-and-arguments command boundary used by the shell
"""

from .errors import (
    KVError,
    TransactionError,
    CommandError,
    MissingArgumentError,
    UnexpectedArgumentError,
    UnknownCommandError,
)

from .config import (
    KVConfig,
    get_default_config,
)

from .store import GlobalStore

from .transaction import (
    Tx,
    TransactionState,
    generate_transaction_id,
)

from .tx_stack import (
    TxStack,
    CommitResult,
    ReadResult,
    ReadScope,
)

from .session import (
    Session,
    CommandResult,
    VALID_COMMANDS,
)

__version__ = "1.0.0"

__all__ = [
    # Errors
    "KVError",
    "TransactionError",
    "CommandError",
    "MissingArgumentError",
    "UnexpectedArgumentError",
    "UnknownCommandError",
    # Config
    "KVConfig",
    "get_default_config",
    # Core
    "GlobalStore",
    "Tx",
    "TransactionState",
    "generate_transaction_id",
    "TxStack",
    "CommitResult",
    "ReadResult",
    "ReadScope",
    # Command boundary
    "Session",
    "CommandResult",
    "VALID_COMMANDS",
]
