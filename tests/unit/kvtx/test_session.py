"""
Tests for the Session command boundary.

Each test drives the session the way the shell does, one line at a time,
and checks both the printed lines and the resulting store/stack state.
"""

import logging

import pytest

from kvtx.config import KVConfig
from kvtx.errors import (
    MissingArgumentError,
    UnexpectedArgumentError,
    UnknownCommandError,
)
from kvtx.session import (
    CommandResult,
    Session,
    VALID_COMMANDS,
    MSG_VALID_COMMANDS,
)
from kvtx.store import GlobalStore


@pytest.fixture
def session():
    return Session()


def run(session, *lines):
    """Execute lines in order and return the last result."""
    result = None
    for line in lines:
        result = session.execute_line(line)
    return result


class TestReadWriteDelete:

    def test_write_then_read_without_tx(self, session):
        assert run(session, "WRITE a 1").lines == []
        assert run(session, "READ a").lines == ["1"]

    def test_read_unset_without_tx(self, session):
        assert run(session, "READ a").lines == ["a not set"]

    def test_read_missing_in_tx(self, session):
        assert run(session, "START", "READ a").lines == ["Key not found a"]

    def test_delete_without_tx(self, session):
        run(session, "WRITE a 1", "DELETE a")
        assert run(session, "READ a").lines == ["a not set"]

    def test_delete_absent_key_prints_nothing(self, session):
        assert run(session, "DELETE nope").lines == []

    def test_extra_arguments_are_ignored(self, session):
        """Trailing arguments after the required ones are dropped."""
        run(session, "WRITE a 1 extra")
        assert run(session, "READ a ignored").lines == ["1"]

    def test_verbs_are_case_insensitive(self, session):
        run(session, "write a 1")
        assert run(session, "Read a").lines == ["1"]

    def test_case_sensitive_config(self):
        session = Session(config=KVConfig(case_sensitive_verbs=True))
        result = session.execute_line("read a")

        assert isinstance(result.error, UnknownCommandError)

    def test_values_are_opaque_strings(self, session):
        run(session, "WRITE n 007")
        assert run(session, "READ n").lines == ["007"]


class TestTransactions:

    def test_start_pushes(self, session):
        for n in range(1, 4):
            run(session, "START")
            assert session.depth == n

    def test_commit_writes_store_and_empties_stack(self, session):
        run(session, "START", "WRITE k v", "COMMIT")

        assert session.store.get("k") == "v"
        assert session.depth == 0
        assert run(session, "READ k").lines == ["v"]

    def test_abort_discards(self, session):
        run(session, "START", "WRITE k v", "ABORT")

        assert "k" not in session.store
        assert session.depth == 0

    def test_abort_empty_stack(self, session):
        result = run(session, "ABORT")

        assert result.lines == ["No Active Transactions"]
        assert session.depth == 0

    def test_commit_empty_stack(self, session):
        """COMMIT runs commit then pop, so both notices print."""
        run(session, "WRITE a 1")

        result = run(session, "COMMIT")

        assert result.lines == ["Nothing to commit", "No Active Transactions"]
        assert session.store.snapshot() == {"a": "1"}

    def test_commit_with_tx_prints_nothing(self, session):
        assert run(session, "START", "WRITE a 1", "COMMIT").lines == []

    def test_nested_read_sees_nothing_from_outer(self, session):
        result = run(session, "START", "WRITE a 1", "START", "READ a")
        assert result.lines == ["Key not found a"]

    def test_nested_read_does_not_see_global(self, session):
        result = run(session, "WRITE a 1", "START", "READ a")
        assert result.lines == ["Key not found a"]

    def test_inner_commit_propagates(self, session):
        run(session, "START", "WRITE a 1", "START", "WRITE a 2", "COMMIT")

        assert run(session, "READ a").lines == ["2"]
        assert session.store.get("a") == "2"
        assert session.depth == 1

    def test_outer_abort_after_inner_commit_keeps_global(self, session):
        """Inner commits already reached the store; aborting the outer cannot undo them."""
        run(session, "START", "START", "WRITE a 2", "COMMIT", "ABORT")

        assert session.depth == 0
        assert run(session, "READ a").lines == ["2"]

    def test_delete_cascades_into_outer(self, session):
        run(session, "START", "WRITE a 1", "START", "DELETE a", "ABORT")

        assert run(session, "READ a").lines == ["Key not found a"]

    def test_full_nested_commit(self, session):
        run(
            session,
            "START", "WRITE a 1",
            "START", "WRITE b 2", "COMMIT",
            "COMMIT",
        )

        assert session.depth == 0
        assert session.store.snapshot() == {"a": "1", "b": "2"}


class TestCommandErrors:

    @pytest.mark.parametrize("line", ["READ", "DELETE", "WRITE", "WRITE a"])
    def test_missing_argument(self, session, line):
        result = run(session, line)
        verb = line.split()[0]

        assert result.lines == [f"Maybe `{verb}` missing an argument?"]
        assert isinstance(result.error, MissingArgumentError)
        assert not result.ok

    def test_missing_argument_echoes_verb_as_typed(self, session):
        assert run(session, "read").lines == ["Maybe `read` missing an argument?"]

    @pytest.mark.parametrize("verb", ["START", "COMMIT", "ABORT", "QUIT"])
    def test_no_arg_verbs_reject_arguments(self, session, verb):
        run(session, "START", "WRITE a 1")

        result = run(session, f"{verb} now")

        assert result.lines == [f"`{verb}` doesn't require an argument!"]
        assert isinstance(result.error, UnexpectedArgumentError)
        assert result.exit is False
        assert session.depth == 1
        assert session.stack.peek().read("a") == "1"
        assert len(session.store) == 0

    def test_unknown_command(self, session):
        result = run(session, "FROB a")

        assert result.lines == ["Invalid Command: FROB", MSG_VALID_COMMANDS]
        assert isinstance(result.error, UnknownCommandError)
        assert result.error.valid_commands == VALID_COMMANDS

    def test_valid_commands_message(self):
        assert MSG_VALID_COMMANDS == (
            "Valid commands are: READ, WRITE, DELETE, START, COMMIT, ABORT, QUIT"
        )

    def test_errors_do_not_change_state(self, session):
        run(session, "WRITE a 1", "START")

        for line in ("READ", "WRITE a", "START x", "COMMIT x", "ABORT x", "BOGUS"):
            run(session, line)

        assert session.depth == 1
        assert session.store.snapshot() == {"a": "1"}

    def test_rejections_are_logged_at_debug_only(self, session, caplog):
        with caplog.at_level(logging.DEBUG, logger="kvtx.session"):
            run(session, "FROB", "READ")

        rejected = [r for r in caplog.records if r.getMessage().startswith("Rejected")]
        assert [r.levelno for r in rejected] == [logging.DEBUG, logging.DEBUG]
        assert "UnknownCommandError: Invalid Command: FROB" in rejected[0].getMessage()
        assert "MissingArgumentError" in rejected[1].getMessage()


class TestBoundary:

    def test_quit(self, session):
        result = run(session, "QUIT")

        assert result.lines == ["Exiting..."]
        assert result.exit is True
        assert result.exit_code == 0

    def test_blank_line(self, session):
        result = session.execute_line("   \n")

        assert isinstance(result, CommandResult)
        assert result.lines == []
        assert result.ok

    def test_command_takes_verb_and_args(self, session):
        session.command("WRITE", ["a", "1"])
        assert session.command("READ", ("a",)).lines == ["1"]

    def test_bare_string_arg_is_one_argument(self, session):
        session.command("WRITE", ["key", "v"])

        assert session.command("READ", "key").lines == ["v"]
        assert session.command("DELETE", "key").ok
        assert session.command("READ", "key").lines == ["key not set"]

    def test_bare_string_arg_to_no_arg_verb_is_rejected(self, session):
        result = session.command("START", "x")

        assert isinstance(result.error, UnexpectedArgumentError)
        assert session.depth == 0

    def test_sessions_are_independent(self):
        first, second = Session(), Session()
        first.execute_line("WRITE a 1")

        assert second.execute_line("READ a").lines == ["a not set"]

    def test_sessions_can_share_a_store(self):
        store = GlobalStore()
        first, second = Session(store=store), Session(store=store)
        run(first, "START", "WRITE a 1", "COMMIT")

        assert second.execute_line("READ a").lines == ["1"]
