"""
Positional diff codec for document versions.

Compares two texts character by character at matching positions and
produces a replayable token sequence. Shifts are not aligned: inserting
one character early in a document makes every later position differ.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Optional, Sequence, Tuple


class ChangeType(str, Enum):
    """Type of a single diff token."""

    UNCHANGED = "="
    REMOVED = "-"
    ADDED = "+"


@dataclass(frozen=True)
class DiffToken:
    """One character of a patch together with what happened to it."""

    change_type: ChangeType
    char: str

    def __post_init__(self) -> None:
        if len(self.char) != 1:
            raise ValueError(f"Diff token must carry one character, got {self.char!r}")

    def format(self) -> str:
        """Render the token in bracket notation (``[-x]`` / ``[+x]``)."""
        if self.change_type == ChangeType.UNCHANGED:
            return self.char
        return f"[{self.change_type.value}{self.char}]"


@dataclass(frozen=True)
class Patch:
    """
    Ordered token sequence describing how to turn one text into another.

    Unchanged and removed tokens consume one character of the base text;
    added tokens produce one character of the result.
    """

    tokens: Tuple[DiffToken, ...] = ()

    def __iter__(self) -> Iterator[DiffToken]:
        return iter(self.tokens)

    def __len__(self) -> int:
        return len(self.tokens)

    def has_changes(self) -> bool:
        """Check whether any token is an insertion or a removal."""
        return any(t.change_type != ChangeType.UNCHANGED for t in self.tokens)

    def count_by_type(self) -> dict:
        """Count tokens by change type."""
        counts = {"unchanged": 0, "removed": 0, "added": 0}
        for token in self.tokens:
            counts[token.change_type.name.lower()] += 1
        return counts

    def summary(self) -> str:
        """Generate a one-line summary of the patch."""
        if not self.has_changes():
            return "No changes"

        counts = self.count_by_type()
        parts = []
        if counts["added"] > 0:
            parts.append(f"{counts['added']} characters added")
        if counts["removed"] > 0:
            parts.append(f"{counts['removed']} characters removed")
        return ", ".join(parts)

    def format(self) -> str:
        """Render the whole patch in bracket notation."""
        return "".join(token.format() for token in self.tokens)

    def to_list(self) -> List[List[str]]:
        """Convert patch to a JSON-friendly list of ``[op, char]`` pairs."""
        return [[t.change_type.value, t.char] for t in self.tokens]

    @classmethod
    def from_list(cls, data: Sequence[Sequence[str]]) -> "Patch":
        """Create patch from a list of ``[op, char]`` pairs."""
        return cls(tuple(DiffToken(ChangeType(op), char) for op, char in data))


def encode(old_text: str, new_text: str) -> Patch:
    """
    Compute the positional patch from ``old_text`` to ``new_text``.

    Args:
        old_text: Base text
        new_text: Target text

    Returns:
        Patch such that ``decode(old_text, patch) == new_text``

    Example:
        >>> encode("cat", "cut").format()
        'c[-a][+u]t'
    """
    tokens: List[DiffToken] = []
    for i in range(max(len(old_text), len(new_text))):
        old_char: Optional[str] = old_text[i] if i < len(old_text) else None
        new_char: Optional[str] = new_text[i] if i < len(new_text) else None

        if old_char is not None and old_char == new_char:
            tokens.append(DiffToken(ChangeType.UNCHANGED, old_char))
            continue

        if old_char is not None:
            tokens.append(DiffToken(ChangeType.REMOVED, old_char))
        if new_char is not None:
            tokens.append(DiffToken(ChangeType.ADDED, new_char))

    return Patch(tuple(tokens))


def decode(base_text: str, patch: Patch) -> str:
    """
    Replay a patch on top of its base text.

    Unchanged characters are copied, removals are skipped and insertions
    are appended.

    Args:
        base_text: Text the patch was computed from
        patch: Patch produced by :func:`encode`

    Returns:
        The reconstructed text

    Raises:
        ValueError: If the patch does not describe ``base_text``
    """
    result: List[str] = []
    position = 0

    for token in patch:
        if token.change_type == ChangeType.ADDED:
            result.append(token.char)
            continue

        if position >= len(base_text) or base_text[position] != token.char:
            raise ValueError(f"Patch does not apply to base text at offset {position}")
        position += 1

        if token.change_type == ChangeType.UNCHANGED:
            result.append(token.char)

    if position != len(base_text):
        raise ValueError(
            f"Patch covers {position} characters of a {len(base_text)}-character base"
        )

    return "".join(result)
