"""
Exception classes for the kvtx store.

The transaction core never raises on user input. CommandError and its
subclasses come from the command layer, whose message is the exact line
the shell prints; TransactionError flags internal misuse of the stack.
"""

from typing import Any


class KVError(Exception):
    """Base exception for all kvtx errors."""

    def __init__(self, message: str, **context: Any):
        super().__init__(message)
        self.message = message
        self.context = context

    def describe(self) -> str:
        """One-line diagnostic: class, message and sorted context pairs."""
        text = f"{type(self).__name__}: {self.message}"
        if self.context:
            pairs = ", ".join(f"{k}={v!r}" for k, v in sorted(self.context.items()))
            text += f" ({pairs})"
        return text


class TransactionError(KVError):
    """Transaction-related errors (a record that is not on the stack, etc.)."""
    pass


class CommandError(KVError):
    """A user command could not be dispatched to the store."""

    def __init__(self, message: str, verb: str = "", **context):
        super().__init__(message, verb=verb, **context)
        self.verb = verb


class MissingArgumentError(CommandError):
    """A command received fewer arguments than it needs."""

    def __init__(self, verb: str, expected: int = 1, received: int = 0):
        super().__init__(
            f"Maybe `{verb}` missing an argument?",
            verb=verb,
            expected=expected,
            received=received,
        )


class UnexpectedArgumentError(CommandError):
    """A no-argument command received arguments."""

    def __init__(self, verb: str, received: int = 1):
        super().__init__(
            f"`{verb}` doesn't require an argument!",
            verb=verb,
            received=received,
        )


class UnknownCommandError(CommandError):
    """The verb is not one of the supported commands."""

    def __init__(self, verb: str, valid_commands=()):
        super().__init__(
            f"Invalid Command: {verb}",
            verb=verb,
        )
        self.valid_commands = list(valid_commands)
