"""
Version control for a single text document.

Provides git-like operations over an append-only graph of document versions.
"""

from .diff import (
    ChangeType,
    DiffToken,
    Patch,
    encode,
    decode,
)

from .version import (
    ROOT_ID,
    FullContent,
    PatchContent,
    Version,
    create_fingerprint,
    current_timestamp,
)

from .errors import (
    VersionControlError,
    NotFoundError,
    NoCommonAncestorError,
    EmptyStoreError,
    CorruptHistoryError,
)

from .history import (
    walk_chain,
    reconstruct,
    collect_ancestors,
    find_merge_base,
    validate_graph,
)

from .store import DocumentStore, StoreSnapshot, REBASED_PREFIX

from .storage import (
    HistoryStorage,
    PersistenceError,
    CorruptedFileError,
    dumps,
    loads,
)

from .render import render_patch, render_log, render_branches, format_log_line

__all__ = [
    # Diff
    "ChangeType",
    "DiffToken",
    "Patch",
    "encode",
    "decode",
    # Versions
    "ROOT_ID",
    "FullContent",
    "PatchContent",
    "Version",
    "create_fingerprint",
    "current_timestamp",
    # Errors
    "VersionControlError",
    "NotFoundError",
    "NoCommonAncestorError",
    "EmptyStoreError",
    "CorruptHistoryError",
    # History walks
    "walk_chain",
    "reconstruct",
    "collect_ancestors",
    "find_merge_base",
    "validate_graph",
    # Store
    "DocumentStore",
    "StoreSnapshot",
    "REBASED_PREFIX",
    # Storage
    "HistoryStorage",
    "PersistenceError",
    "CorruptedFileError",
    "dumps",
    "loads",
    # Rendering
    "render_patch",
    "render_log",
    "render_branches",
    "format_log_line",
]
