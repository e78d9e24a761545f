"""Tests for the interactive CLI surface."""

import importlib
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from tether.cli import chat_loop, cli
from tether.conversation import Conversation
from tether.errors import ModelRequestError, ToolConnectionError
from tether.orchestrator import QueryResult

# The package re-exports the `cli` command, shadowing the submodule attribute.
cli_module = importlib.import_module("tether.cli")


def _result(answer, input_tokens=0, output_tokens=0):
    return QueryResult(
        answer=answer,
        conversation=Conversation.start("q"),
        input_tokens=input_tokens,
        output_tokens=output_tokens,
    )


def _fake_session(answers=None):
    session = MagicMock()
    session.tool_names = ["controlLight"]
    session.endpoint.config.model = "gemini-test"
    session.run.side_effect = answers or (lambda q: _result(f"answer to {q}"))
    return session


@pytest.fixture
def patched(monkeypatch):
    """Stub out config loading and session opening."""
    state = {"session": _fake_session(), "error": None, "opened": []}

    @contextmanager
    def fake_open(target, config, model=None, on_call=None, on_outcome=None):
        state["opened"].append((target, model))
        if state["error"]:
            raise state["error"]
        yield state["session"]

    monkeypatch.setattr(cli_module, "ConfigManager", lambda path=None: MagicMock())
    monkeypatch.setattr(cli_module.Session, "open", fake_open)
    return state


class TestCommand:

    def test_missing_argument(self):
        result = CliRunner().invoke(cli, [])
        assert result.exit_code == 2
        assert "SERVER_SCRIPT" in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_quit_ends_session(self, patched):
        result = CliRunner().invoke(cli, ["server.py"], input="quit\n")
        assert result.exit_code == 0
        assert patched["opened"] == [("server.py", None)]
        patched["session"].run.assert_not_called()

    def test_answers_queries(self, patched):
        result = CliRunner().invoke(
            cli, ["server.py", "--model", "gemini-x"], input="dim the lights\nQUIT\n",
        )
        assert result.exit_code == 0
        assert "answer to dim the lights" in result.output
        assert patched["opened"] == [("server.py", "gemini-x")]

    def test_verbose_shows_usage(self, patched):
        patched["session"].run.side_effect = lambda q: _result("ok", input_tokens=900, output_tokens=7)
        result = CliRunner().invoke(cli, ["server.py", "-v"], input="dim\nquit\n")
        assert result.exit_code == 0
        assert "900 in / 7 out" in result.output

    def test_connection_failure_exits_nonzero(self, patched):
        patched["error"] = ToolConnectionError("Server script must be a .js or .py or .ts file")
        result = CliRunner().invoke(cli, ["server.rb"])
        assert result.exit_code == 1

    def test_unexpected_failure_exits_nonzero(self, patched):
        patched["error"] = RuntimeError("kaboom")
        result = CliRunner().invoke(cli, ["server.py"])
        assert result.exit_code == 1


class TestChatLoop:

    def _reader(self, *lines):
        it = iter(lines)

        def read():
            try:
                return next(it)
            except StopIteration:
                raise EOFError
        return read

    def test_failed_query_does_not_end_loop(self):
        def answer(query):
            if query == "bad":
                raise ModelRequestError("quota exceeded", status_code=429)
            return _result("fine")

        session = _fake_session(answer)
        answered = chat_loop(session, self._reader("bad", "good", "quit"))

        assert answered == 1
        assert [c.args[0] for c in session.run.call_args_list] == ["bad", "good"]

    def test_blank_lines_ignored(self):
        session = _fake_session()
        chat_loop(session, self._reader("", "   ", "quit"))
        session.run.assert_not_called()

    def test_eof_ends_loop(self):
        session = _fake_session()
        assert chat_loop(session, self._reader("one", "two")) == 2

    def test_quit_is_case_insensitive(self):
        session = _fake_session()
        assert chat_loop(session, self._reader("Quit", "never")) == 0

    def test_interrupt_during_query_ends_loop(self):
        def answer(query):
            if query == "slow":
                raise KeyboardInterrupt
            return _result("fine")

        session = _fake_session(answer)
        answered = chat_loop(session, self._reader("one", "slow", "never"))

        assert answered == 1
        assert [c.args[0] for c in session.run.call_args_list] == ["one", "slow"]

    def test_usage_shown_when_requested(self, capsys):
        session = _fake_session(lambda q: _result("fine", input_tokens=1500, output_tokens=42))
        chat_loop(session, self._reader("one"), show_usage=True)
        assert "1.5k in / 42 out" in capsys.readouterr().out

    def test_usage_hidden_by_default(self, capsys):
        session = _fake_session(lambda q: _result("fine", input_tokens=1500, output_tokens=42))
        chat_loop(session, self._reader("one"))
        assert "in / 42 out" not in capsys.readouterr().out
