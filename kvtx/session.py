"""
Session: the command boundary between a line-oriented shell and the store.

A Session owns one GlobalStore and one TxStack. ``command(verb, args)``
checks the argument count, runs exactly one core operation and returns a
CommandResult holding the lines to print. It never reads or writes a
stream; the shell in kvtx.cli does that.

Commands:
    READ key          print value, "<key> not set" or "Key not found <key>"
    WRITE key value   set
    DELETE key        delete (cascades into enclosing transactions)
    START             begin a nested transaction
    COMMIT            merge the active transaction outward, then close it
    ABORT             discard the active transaction
    QUIT              ask the shell to exit with status 0
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from .config import KVConfig
from .errors import (
    CommandError,
    MissingArgumentError,
    UnexpectedArgumentError,
    UnknownCommandError,
)
from .store import GlobalStore
from .tx_stack import ReadScope, TxStack

logger = logging.getLogger(__name__)


# =============================================================================
# COMMAND TABLE
# =============================================================================

CMD_READ = "READ"
CMD_WRITE = "WRITE"
CMD_DELETE = "DELETE"
CMD_START = "START"
CMD_COMMIT = "COMMIT"
CMD_ABORT = "ABORT"
CMD_QUIT = "QUIT"

VALID_COMMANDS = [
    CMD_READ,
    CMD_WRITE,
    CMD_DELETE,
    CMD_START,
    CMD_COMMIT,
    CMD_ABORT,
    CMD_QUIT,
]

# Minimum argument count per verb. Zero means the verb takes no arguments
# at all; for the others extra trailing arguments are ignored.
REQUIRED_ARGS = {
    CMD_READ: 1,
    CMD_WRITE: 2,
    CMD_DELETE: 1,
    CMD_START: 0,
    CMD_COMMIT: 0,
    CMD_ABORT: 0,
    CMD_QUIT: 0,
}

MSG_NOTHING_TO_COMMIT = "Nothing to commit"
MSG_NO_ACTIVE_TX = "No Active Transactions"
MSG_EXITING = "Exiting..."
MSG_VALID_COMMANDS = "Valid commands are: " + ", ".join(VALID_COMMANDS)


@dataclass
class CommandResult:
    """Outcome of one command: lines to print and whether to exit."""

    lines: List[str] = field(default_factory=list)
    exit: bool = False
    exit_code: int = 0
    error: Optional[CommandError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Session:
    """
    One interactive session over its own store and transaction stack.

    Sessions never share state unless handed the same GlobalStore.

    Example:
        session = Session()
        session.execute_line("WRITE a 1")
        session.execute_line("READ a").lines   # ["1"]
    """

    def __init__(self, store: Optional[GlobalStore] = None,
                 config: Optional[KVConfig] = None):
        self.config = config or KVConfig()
        self.store = store if store is not None else GlobalStore()
        self.stack = TxStack(self.store)
        self._handlers: Dict[str, Callable[[str, List[str]], CommandResult]] = {
            CMD_READ: self._cmd_read,
            CMD_WRITE: self._cmd_write,
            CMD_DELETE: self._cmd_delete,
            CMD_START: self._cmd_start,
            CMD_COMMIT: self._cmd_commit,
            CMD_ABORT: self._cmd_abort,
            CMD_QUIT: self._cmd_quit,
        }

    @property
    def depth(self) -> int:
        return self.stack.size

    def execute_line(self, line: str) -> CommandResult:
        """
        Tokenize a raw input line on whitespace and run it.

        A blank line produces an empty result and touches nothing.
        """
        tokens = line.split()
        if not tokens:
            return CommandResult()
        return self.command(tokens[0], tokens[1:])

    def command(self, verb: str, args: Sequence[str] = ()) -> CommandResult:
        """
        Run one command against the store.

        Argument-count problems and unknown verbs are reported in the
        result and leave the store and stack untouched.

        Args:
            verb: Command name as typed
            args: Arguments following the verb

        Returns:
            CommandResult with the lines to print
        """
        # A bare string is one argument, not a sequence of characters
        args = [args] if isinstance(args, str) else list(args)
        try:
            name = self._canonical(verb)
            self._check_arity(name, verb, args)
        except UnknownCommandError as e:
            logger.debug("Rejected: %s", e.describe())
            return CommandResult(lines=[e.message, MSG_VALID_COMMANDS], error=e)
        except CommandError as e:
            logger.debug("Rejected: %s", e.describe())
            return CommandResult(lines=[e.message], error=e)

        logger.debug("Dispatching %s %s (depth %d)", name, args, self.stack.size)
        return self._handlers[name](verb, args)

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def _canonical(self, verb: str) -> str:
        name = verb if self.config.case_sensitive_verbs else verb.upper()
        if name not in self._handlers:
            raise UnknownCommandError(verb, VALID_COMMANDS)
        return name

    @staticmethod
    def _check_arity(name: str, verb: str, args: List[str]) -> None:
        required = REQUIRED_ARGS[name]
        if required == 0 and args:
            raise UnexpectedArgumentError(verb, received=len(args))
        if len(args) < required:
            raise MissingArgumentError(verb, expected=required, received=len(args))

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    def _cmd_read(self, verb: str, args: List[str]) -> CommandResult:
        result = self.stack.get(args[0])
        if result.found:
            return CommandResult(lines=[result.value])
        if result.scope == ReadScope.GLOBAL:
            return CommandResult(lines=[f"{result.key} not set"])
        return CommandResult(lines=[f"Key not found {result.key}"])

    def _cmd_write(self, verb: str, args: List[str]) -> CommandResult:
        self.stack.set(args[0], args[1])
        return CommandResult()

    def _cmd_delete(self, verb: str, args: List[str]) -> CommandResult:
        self.stack.delete(args[0])
        return CommandResult()

    def _cmd_start(self, verb: str, args: List[str]) -> CommandResult:
        self.stack.push()
        return CommandResult()

    def _cmd_commit(self, verb: str, args: List[str]) -> CommandResult:
        lines = []
        with self.stack.lock:
            if not self.stack.commit().success:
                lines.append(MSG_NOTHING_TO_COMMIT)
            if self.stack.pop() is None:
                lines.append(MSG_NO_ACTIVE_TX)
        return CommandResult(lines=lines)

    def _cmd_abort(self, verb: str, args: List[str]) -> CommandResult:
        if self.stack.pop() is None:
            return CommandResult(lines=[MSG_NO_ACTIVE_TX])
        return CommandResult()

    def _cmd_quit(self, verb: str, args: List[str]) -> CommandResult:
        return CommandResult(lines=[MSG_EXITING], exit=True, exit_code=0)
