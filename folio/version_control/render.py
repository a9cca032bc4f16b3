"""
Terminal rendering of patches and history.

Rendering is pure presentation and never touches store state.
"""

from typing import Iterable, Mapping, Optional

from rich.table import Table
from rich.text import Text

from .diff import ChangeType, Patch
from .version import Version

REMOVED_STYLE = "red"
ADDED_STYLE = "green"


def render_patch(patch: Patch) -> Text:
    """
    Render a patch with removed characters in red and inserted ones in green.

    Args:
        patch: Patch to render

    Returns:
        Styled rich text
    """
    text = Text()
    for token in patch:
        if token.change_type == ChangeType.REMOVED:
            text.append(token.char, style=REMOVED_STYLE)
        elif token.change_type == ChangeType.ADDED:
            text.append(token.char, style=ADDED_STYLE)
        else:
            text.append(token.char)
    return text


def format_log_line(version: Version) -> str:
    """Format one history entry as ``#id | timestamp | message``."""
    return f"#{version.id} | {version.timestamp} | {version.message}"


def render_log(versions: Iterable[Version], title: Optional[str] = None) -> Table:
    """Build a table of versions, one row per version."""
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Id", style="cyan", justify="right")
    table.add_column("Parent", justify="right")
    table.add_column("Timestamp")
    table.add_column("Message", style="white")
    table.add_column("Stored")

    for version in versions:
        table.add_row(
            str(version.id),
            str(version.parent_id),
            version.timestamp,
            Text(version.message),
            "patch" if version.is_compressed else "full",
        )
    return table


def render_branches(branches: Mapping[str, int], current_branch: str) -> Table:
    """Build a table of branches, marking the current one."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("", width=1)
    table.add_column("Branch", style="cyan")
    table.add_column("Head", justify="right")

    for name in sorted(branches):
        marker = "*" if name == current_branch else ""
        table.add_row(marker, Text(name), str(branches[name]))
    return table
