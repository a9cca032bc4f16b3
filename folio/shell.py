"""
Interactive shell for folio.

A line-oriented command loop over a single document store.
"""

from pathlib import Path
from typing import Callable, Dict, Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from folio.config import config
from folio.logging import initialize_logging_from_config
from folio.version_control import (
    DocumentStore,
    EmptyStoreError,
    HistoryStorage,
    PersistenceError,
    VersionControlError,
    format_log_line,
    render_branches,
    render_patch,
)

console = Console()

COMMANDS = [
    ("create <text>", "Create a new document with initial content"),
    ("append <text>", "Append text to the current document"),
    ("remove <n>", "Remove last n characters"),
    ("commit <message>", "Commit the current document with a message"),
    ("undo", "Undo last uncommitted change"),
    ("log", "Show commit history for current branch"),
    ("show [id]", "Show content of version (or head if no id)"),
    ("rollback <id>", "Set head to previous version by id"),
    ("branch <name>", "Create a new branch at current head"),
    ("checkout <name>", "Switch to another branch"),
    ("branches", "List branches"),
    ("rebase <branch>", "Rebase current branch onto another"),
    ("diff <v1> <v2>", "Show diff between two versions"),
    ("filter <keyword>", "Show versions with message containing keyword"),
    ("avg", "Show average number of characters per version"),
    ("status", "Show branch, head and working buffer"),
    ("save", "Save history to the history file"),
    ("load", "Load history from the history file"),
    ("help", "Show this help message"),
    ("exit", "Exit the shell"),
]


def parse_text(args: str) -> str:
    """Strip one pair of surrounding double quotes, keeping inner whitespace."""
    if len(args) >= 2 and args.startswith('"') and args.endswith('"'):
        return args[1:-1]
    return args


def parse_int(args: str, usage: str) -> int:
    """Parse a single integer argument."""
    try:
        return int(args.strip())
    except ValueError:
        raise ValueError(f"Usage: {usage}") from None


class DocumentShell:
    """Interactive command loop over a DocumentStore."""

    def __init__(
        self,
        store: Optional[DocumentStore] = None,
        storage: Optional[HistoryStorage] = None,
        console: Console = console,
    ):
        """
        Initialize the shell.

        Args:
            store: Store to operate on (default: a new store from config)
            storage: History file backend for save/load
            console: Console to print to
        """
        self.store = store or DocumentStore(
            compression_threshold=config.store.compression_threshold,
            default_branch=config.store.default_branch,
        )
        self.storage = storage or HistoryStorage(
            config.store.history_path, default_branch=config.store.default_branch
        )
        self.console = console
        self.running = True

        self._handlers: Dict[str, Callable[[str], None]] = {
            "create": self.cmd_create,
            "append": self.cmd_append,
            "remove": self.cmd_remove,
            "commit": self.cmd_commit,
            "undo": self.cmd_undo,
            "log": self.cmd_log,
            "show": self.cmd_show,
            "rollback": self.cmd_rollback,
            "branch": self.cmd_branch,
            "checkout": self.cmd_checkout,
            "branches": self.cmd_branches,
            "rebase": self.cmd_rebase,
            "diff": self.cmd_diff,
            "filter": self.cmd_filter,
            "avg": self.cmd_avg,
            "status": self.cmd_status,
            "save": self.cmd_save,
            "load": self.cmd_load,
            "help": self.cmd_help,
            "exit": self.cmd_exit,
            "quit": self.cmd_exit,
        }

    def run(self) -> None:
        """Run the interactive loop until exit or end of input."""
        self.console.print(
            Panel.fit(
                "[bold cyan]folio[/bold cyan] versioned document shell\n"
                "Type 'help' for commands, 'exit' to quit",
                border_style="cyan",
            )
        )
        while self.running:
            try:
                command = self.console.input("[bold green]>[/bold green] ")
            except KeyboardInterrupt:
                self.console.print("\n[yellow]Use 'exit' to quit[/yellow]")
                continue
            except EOFError:
                break

            if command.strip():
                self.execute_command(command)

    def execute_command(self, command: str) -> None:
        """
        Execute one command line.

        Core errors are reported on the console; the store is left as it was.
        """
        parts = command.lstrip().split(" ", 1)
        cmd = parts[0].lower()
        args = parts[1] if len(parts) > 1 else ""

        handler = self._handlers.get(cmd)
        if handler is None:
            self.console.print(f"[red]Unknown command:[/red] {escape(cmd)}")
            self.console.print("Type 'help' for available commands")
            return

        try:
            handler(args)
        except EmptyStoreError:
            self.console.print("[yellow]No versions available.[/yellow]")
        except (VersionControlError, PersistenceError, ValueError) as e:
            self.console.print(f"[bold red]Error:[/bold red] {escape(str(e))}", emoji=False)

    def print_plain(self, text: str) -> None:
        """Print stored text exactly, without markup, emoji codes or wrapping."""
        self.console.print(
            text, markup=False, highlight=False, emoji=False, soft_wrap=True
        )

    # Editing

    def cmd_create(self, args: str) -> None:
        self.store.create(parse_text(args))
        self.console.print("[green]Created[/green] new document.")

    def cmd_append(self, args: str) -> None:
        self.store.append(parse_text(args))

    def cmd_remove(self, args: str) -> None:
        self.store.remove_last(parse_int(args, "remove <n>"))

    def cmd_undo(self, args: str) -> None:
        if self.store.undo():
            self.console.print("[green]Undo:[/green] reverted to last uncommitted state.")
        else:
            self.console.print("[yellow]Undo:[/yellow] nothing to undo.")

    def cmd_commit(self, args: str) -> None:
        version = self.store.commit(parse_text(args).strip())
        self.console.print(f"[green]Commit:[/green] version {version.id} saved.")

    # Navigation

    def cmd_log(self, args: str) -> None:
        for version in self.store.log():
            self.print_plain(format_log_line(version))

    def cmd_show(self, args: str) -> None:
        version_id = parse_int(args, "show [id]") if args.strip() else None
        content = self.store.show(version_id)
        shown = self.store.head_id if version_id is None else version_id
        self.console.print(f"[cyan]Version {shown}:[/cyan]")
        self.print_plain(content)

    def cmd_rollback(self, args: str) -> None:
        version_id = parse_int(args, "rollback <id>")
        self.store.rollback(version_id)
        self.console.print(f"[green]Rollback:[/green] switched to version {version_id}.")

    def cmd_branch(self, args: str) -> None:
        name = args.strip()
        if not name:
            raise ValueError("Usage: branch <name>")
        self.store.branch(name)
        self.console.print(
            f"[green]Branch:[/green] created '{escape(name)}' at version {self.store.head_id}.",
            emoji=False,
        )

    def cmd_checkout(self, args: str) -> None:
        name = args.strip()
        if not name:
            raise ValueError("Usage: checkout <name>")
        self.store.checkout(name)
        self.console.print(
            f"[green]Checkout:[/green] switched to branch '{escape(name)}'.",
            emoji=False,
        )

    def cmd_branches(self, args: str) -> None:
        self.console.print(
            render_branches(self.store.list_branches(), self.store.current_branch)
        )

    def cmd_rebase(self, args: str) -> None:
        name = args.strip()
        if not name:
            raise ValueError("Usage: rebase <branch>")
        rebased = self.store.rebase(name)
        self.console.print(
            f"[green]Rebase:[/green] replayed {len(rebased)} versions onto '{escape(name)}'.",
            emoji=False,
        )

    def cmd_diff(self, args: str) -> None:
        parts = args.split()
        if len(parts) != 2:
            raise ValueError("Usage: diff <v1> <v2>")
        from_version = parse_int(parts[0], "diff <v1> <v2>")
        to_version = parse_int(parts[1], "diff <v1> <v2>")
        patch = self.store.diff(from_version, to_version)
        self.console.print(render_patch(patch), soft_wrap=True)

    # Queries

    def cmd_filter(self, args: str) -> None:
        keyword = args.strip()
        for version in self.store.filter(keyword):
            self.print_plain(format_log_line(version))

    def cmd_avg(self, args: str) -> None:
        average = self.store.average_length()
        self.console.print(f"[cyan]Average characters per version:[/cyan] {average:.2f}")

    def cmd_status(self, args: str) -> None:
        store = self.store
        self.console.print(
            Panel(
                Text.assemble(
                    ("Branch: ", "bold"),
                    store.current_branch,
                    ("\nHead: ", "bold"),
                    str(store.head_id),
                    ("\nVersions: ", "bold"),
                    str(len(store.versions)),
                    ("\nUndo available: ", "bold"),
                    "yes" if store.has_undo else "no",
                    ("\nWorking content: ", "bold"),
                    store.working_content,
                ),
                title="Status",
                border_style="cyan",
            )
        )

    # Persistence

    def cmd_save(self, args: str) -> None:
        self.storage.save(self.store.snapshot())
        self.console.print(f"[green]Save:[/green] history saved to {escape(str(self.storage.path))}.")

    def cmd_load(self, args: str) -> None:
        snapshot = self.storage.load()
        self.store.restore(snapshot)
        self.console.print(f"[green]Load:[/green] loaded history from {escape(str(self.storage.path))}.")

    # Session

    def cmd_help(self, args: str) -> None:
        table = Table(
            title="Available Commands", show_header=True, header_style="bold magenta"
        )
        table.add_column("Command", style="cyan")
        table.add_column("Description", style="white")

        for cmd, desc in COMMANDS:
            table.add_row(escape(cmd), desc)

        self.console.print(table)

    def cmd_exit(self, args: str) -> None:
        self.console.print("[yellow]Exiting...[/yellow]")
        self.running = False


def main(history_file: Optional[Path] = None) -> None:
    """Start an interactive shell."""
    initialize_logging_from_config(config.logging)
    storage = None
    if history_file is not None:
        storage = HistoryStorage(history_file, default_branch=config.store.default_branch)
    DocumentShell(storage=storage).run()


if __name__ == "__main__":
    main()
