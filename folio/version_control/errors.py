"""Exceptions raised by the document version store."""


class VersionControlError(Exception):
    """Base exception for version control errors."""

    pass


class NotFoundError(VersionControlError):
    """Raised when a version id or branch name does not exist."""

    pass


class NoCommonAncestorError(VersionControlError):
    """Raised when a rebase target shares no history with the current branch."""

    pass


class EmptyStoreError(VersionControlError):
    """Raised when an aggregate query runs on a store without versions."""

    pass


class CorruptHistoryError(VersionControlError):
    """Raised when a version graph has cycles or patches that do not apply."""

    pass
