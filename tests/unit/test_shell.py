"""
Unit tests for the interactive shell.

Commands are driven through execute_command with a console that
writes to a string buffer.
"""

import io
import tempfile
from pathlib import Path

import pytest
from loguru import logger
from rich.console import Console

from folio import shell as shell_module
from folio.logging import get_logger_instance
from folio.shell import DocumentShell, parse_int, parse_text
from folio.version_control import DocumentStore, HistoryStorage


class ShellHarness:
    """Shell plus captured console output."""

    def __init__(self, history_path: Path, compression_threshold: int = 5, width: int = 200):
        self.buffer = io.StringIO()
        self.store = DocumentStore(compression_threshold=compression_threshold)
        self.shell = DocumentShell(
            store=self.store,
            storage=HistoryStorage(history_path),
            console=Console(file=self.buffer, width=width),
        )

    def run(self, *commands: str) -> str:
        """Execute commands and return the output they produced."""
        start = self.buffer.tell()
        for command in commands:
            self.shell.execute_command(command)
        return self.buffer.getvalue()[start:]


@pytest.fixture
def harness():
    with tempfile.TemporaryDirectory() as tmpdir:
        yield ShellHarness(Path(tmpdir) / "history.json")


class TestParsing:
    """Tests for argument parsing helpers."""

    def test_parse_text_strips_quotes(self) -> None:
        """Surrounding double quotes are removed and inner spaces kept."""
        assert parse_text('"  hello world "') == "  hello world "
        assert parse_text("plain text") == "plain text"
        assert parse_text('"') == '"'

    def test_parse_int(self) -> None:
        """Integer arguments are parsed or reported with usage."""
        assert parse_int(" 12 ", "show [id]") == 12
        with pytest.raises(ValueError, match="Usage: show"):
            parse_int("twelve", "show [id]")


class TestEditingCommands:
    """Tests for create, append, remove, undo and commit."""

    def test_edit_and_commit(self, harness) -> None:
        """A create/append/commit sequence saves version 1."""
        output = harness.run('create "Hello"', 'append " World"', 'commit "Initial commit"')

        assert "Commit: version 1 saved." in output
        assert harness.store.show(1) == "Hello World"
        assert harness.store.get_version(1).message == "Initial commit"

    def test_undo_messages(self, harness) -> None:
        """Undo reverts once, then reports nothing to undo."""
        harness.run("create ab", "append c")

        assert "reverted" in harness.run("undo")
        assert harness.store.working_content == "ab"
        assert "nothing to undo" in harness.run("undo")

    def test_remove(self, harness) -> None:
        """Remove drops characters from the end of the buffer."""
        harness.run("create hello", "remove 2")
        assert harness.store.working_content == "hel"

    def test_remove_requires_number(self, harness) -> None:
        """A malformed count is reported without touching the buffer."""
        harness.run("create hello")
        output = harness.run("remove lots")
        assert "Usage: remove <n>" in output
        assert harness.store.working_content == "hello"

    def test_commit_case_insensitive_command(self, harness) -> None:
        """Command names are matched case-insensitively."""
        harness.run("CREATE text", "Commit first")
        assert harness.store.head_id == 1


class TestNavigationCommands:
    """Tests for log, show, rollback, branches, rebase and diff."""

    def test_log_lines(self, harness) -> None:
        """Log prints one line per version, newest first."""
        harness.run("create one", "commit first", "create two", "commit second")
        lines = [line for line in harness.run("log").splitlines() if line]

        assert lines[0].startswith("#2 | ")
        assert lines[0].endswith(" | second")
        assert lines[1].startswith("#1 | ")

    def test_show(self, harness) -> None:
        """Show prints the version header and its content."""
        harness.run("create [bold]raw[/bold]", "commit c1")
        output = harness.run("show 1")

        assert "Version 1:" in output
        assert "[bold]raw[/bold]" in output

    def test_show_keeps_emoji_codes(self, harness) -> None:
        """Emoji shortcodes in the document are printed as typed."""
        harness.run("create I :heart: this", "commit c1")
        assert harness.run("show") == "Version 1:\nI :heart: this\n"

    def test_show_does_not_wrap_long_lines(self) -> None:
        """Lines wider than the console come back as a single line."""
        with tempfile.TemporaryDirectory() as tmpdir:
            narrow = ShellHarness(Path(tmpdir) / "history.json", width=40)
            content = "word " * 19 + "end"
            narrow.run(f"create {content}", "commit c1")

            assert narrow.run("show 1").splitlines() == ["Version 1:", content]

    def test_log_keeps_emoji_codes_in_messages(self, harness) -> None:
        """Commit messages are printed as typed in log and filter."""
        harness.run("create a", "commit love :heart: it")

        assert harness.run("log").rstrip("\n").endswith(" | love :heart: it")
        assert harness.run("filter love").rstrip("\n").endswith(" | love :heart: it")

    def test_show_missing_version(self, harness) -> None:
        """An unknown version is reported as an error."""
        output = harness.run("show 9")
        assert "Error:" in output
        assert "9" in output

    def test_rollback(self, harness) -> None:
        """Rollback switches the head and the buffer."""
        harness.run("create one", "commit c1", "create two", "commit c2")
        output = harness.run("rollback 1")

        assert "switched to version 1" in output
        assert harness.store.working_content == "one"

    def test_branch_checkout_and_list(self, harness) -> None:
        """Branches are created, switched to and listed."""
        harness.run("create one", "commit c1", "branch feature", "checkout feature")
        output = harness.run("branches")

        assert harness.store.current_branch == "feature"
        assert "feature" in output
        assert "main" in output
        assert "*" in output

    def test_checkout_unknown_branch(self, harness) -> None:
        """An unknown branch is reported and the current branch kept."""
        output = harness.run("checkout ghost")
        assert "Branch not found: ghost" in output
        assert harness.store.current_branch == "main"

    def test_rebase(self, harness) -> None:
        """Rebase reports how many versions were replayed."""
        harness.run(
            "create base",
            "commit c1",
            "branch feature",
            "create base main",
            "commit c2",
            "checkout feature",
            "create base feature",
            "commit c3",
        )
        output = harness.run("rebase main")

        assert "replayed 1 versions onto 'main'" in output
        assert harness.store.head_id == 4

    def test_diff(self, harness) -> None:
        """Diff prints both sides of the positional change."""
        harness.run("create cat", "commit c1", "create cut", "commit c2")
        output = harness.run("diff 1 2")
        assert output.strip() == "caut"

    def test_diff_usage(self, harness) -> None:
        """Diff needs exactly two ids."""
        assert "Usage: diff <v1> <v2>" in harness.run("diff 1")


class TestQueryCommands:
    """Tests for filter, avg, status and help."""

    def test_filter(self, harness) -> None:
        """Filter prints matching versions."""
        harness.run("create a", "commit Fix typo", "create b", "commit Add intro")
        output = harness.run("filter fix")

        assert "Fix typo" in output
        assert "Add intro" not in output

    def test_avg(self, harness) -> None:
        """Average length is printed with two decimals."""
        harness.run("create ab", "commit c1", "create abcd", "commit c2")
        assert "Average characters per version: 3.00" in harness.run("avg")

    def test_avg_empty(self, harness) -> None:
        """An empty store reports that no versions exist."""
        assert "No versions available." in harness.run("avg")

    def test_status(self, harness) -> None:
        """Status shows the branch and the working buffer."""
        harness.run("create draft text")
        output = harness.run("status")
        assert "main" in output
        assert "draft text" in output

    def test_status_keeps_emoji_codes(self, harness) -> None:
        """The working buffer is shown as typed in the status panel."""
        harness.run("create note :smile:")
        assert ":smile:" in harness.run("status")

    def test_help_lists_commands(self, harness) -> None:
        """Help lists every command."""
        output = harness.run("help")
        for command in ["create", "rebase", "filter", "avg", "save", "load"]:
            assert command in output

    def test_unknown_command(self, harness) -> None:
        """Unknown commands are reported."""
        assert "Unknown command: frobnicate" in harness.run("frobnicate")


class TestSessionCommands:
    """Tests for save, load and exit."""

    def test_save_and_load(self, harness) -> None:
        """A saved history is restored by load in a new shell."""
        harness.run("create one", "commit c1", "branch feature", "create two", "commit c2")
        assert "Save:" in harness.run("save")

        other = ShellHarness(harness.shell.storage.path)
        assert "Load:" in other.run("load")
        assert other.store.list_branches() == {"main": 2, "feature": 1}
        assert other.store.working_content == "two"
        assert other.store.next_id == 3

    def test_load_missing_file(self, harness) -> None:
        """Loading without a history file is reported as an error."""
        output = harness.run("load")
        assert "Error:" in output
        assert harness.store.versions == {}

    def test_exit(self, harness) -> None:
        """Exit stops the loop."""
        harness.run("exit")
        assert harness.shell.running is False

    def test_run_stops_at_end_of_input(self, harness, monkeypatch) -> None:
        """The loop ends when input is exhausted."""
        lines = iter(["create hi", "commit c1"])

        def fake_input(prompt=""):
            try:
                return next(lines)
            except StopIteration:
                raise EOFError from None

        monkeypatch.setattr(harness.shell.console, "input", fake_input)
        harness.shell.run()

        assert harness.store.head_id == 1


class TestMain:
    """Tests for the shell entry point."""

    def test_main_initializes_logging(self, monkeypatch) -> None:
        """Starting the shell configures logging from the settings."""
        monkeypatch.setattr(shell_module.config.logging, "level", "ERROR")
        monkeypatch.setattr(shell_module.config.logging, "enable_console_logging", False)
        monkeypatch.setattr(shell_module.config.logging, "enable_file_logging", False)
        monkeypatch.setattr(DocumentShell, "run", lambda self: None)

        try:
            with tempfile.TemporaryDirectory() as tmpdir:
                shell_module.main(history_file=Path(tmpdir) / "history.json")

            folio_logger = get_logger_instance()
            assert folio_logger is not None
            assert folio_logger.level == "ERROR"
        finally:
            logger.remove()
