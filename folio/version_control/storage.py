"""
Storage backend for the document history.

Serializes a store snapshot to a single JSON document and back:

    {
        "versions": {"<id>": {"id": ..., "timestamp": ..., "message": ...,
                              "parent_id": ..., "fingerprint": ...,
                              "content": "..." | null, "patch": [[op, char], ...] | null}},
        "branches": {"<name>": <id>},
        "current_branch": "<name>"
    }
"""

import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field, ValidationError, model_validator

from folio.logging import get_folio_logger

from .store import StoreSnapshot
from .version import Version

logger = get_folio_logger("storage")


class PersistenceError(Exception):
    """Base exception for persistence operations."""

    pass


class CorruptedFileError(PersistenceError):
    """Raised when a history file is corrupted or invalid."""

    pass


class VersionRecord(BaseModel):
    """Schema of one stored version."""

    id: int = Field(gt=0, description="Version id")
    timestamp: str = Field(description="Creation time label")
    message: str = Field(description="Commit message")
    parent_id: int = Field(ge=0, description="Parent version id, 0 for a root")
    fingerprint: str = Field(description="Hash of the full content")
    content: Optional[str] = Field(default=None, description="Full content")
    patch: Optional[List[Tuple[Literal["=", "-", "+"], str]]] = Field(
        default=None, description="Patch against the parent version"
    )

    @model_validator(mode="after")
    def check_representation(self) -> "VersionRecord":
        """Exactly one of content and patch must be present."""
        if (self.content is None) == (self.patch is None):
            raise ValueError(f"version {self.id} must have exactly one of content or patch")
        return self


class HistoryDocument(BaseModel):
    """Schema of a whole history file."""

    versions: Dict[int, VersionRecord] = Field(default_factory=dict)
    branches: Dict[str, int] = Field(default_factory=dict)
    current_branch: Optional[str] = None

    @model_validator(mode="after")
    def check_keys(self) -> "HistoryDocument":
        """Every version must be stored under its own id."""
        for key, record in self.versions.items():
            if key != record.id:
                raise ValueError(f"version {record.id} stored under key {key}")
        return self


def dumps(snapshot: StoreSnapshot) -> bytes:
    """
    Serialize a snapshot to JSON bytes.

    Args:
        snapshot: Store state to serialize

    Returns:
        UTF-8 encoded JSON document
    """
    data = {
        "versions": {
            str(version_id): snapshot.versions[version_id].to_dict()
            for version_id in sorted(snapshot.versions)
        },
        "branches": dict(snapshot.branches),
        "current_branch": snapshot.current_branch,
    }
    return json.dumps(data, indent=4, ensure_ascii=False).encode("utf-8")


def loads(data: bytes, default_branch: str = "main") -> StoreSnapshot:
    """
    Parse JSON bytes into a snapshot.

    A missing ``current_branch`` falls back to ``default_branch``; a branch
    map without that branch gets it pointing at the root.

    Args:
        data: JSON document produced by :func:`dumps`
        default_branch: Branch to use when the document names none

    Returns:
        The parsed snapshot

    Raises:
        CorruptedFileError: If the document is malformed or names an unknown branch
    """
    try:
        document = HistoryDocument.model_validate_json(data)
        versions = {
            version_id: Version.from_dict(record.model_dump())
            for version_id, record in document.versions.items()
        }
    except ValidationError as e:
        raise CorruptedFileError(f"Invalid history document: {e}") from e
    except ValueError as e:
        raise CorruptedFileError(f"Invalid version data: {e}") from e

    branches = dict(document.branches)
    current_branch = document.current_branch
    if current_branch is None:
        current_branch = default_branch
        branches.setdefault(current_branch, 0)
    elif current_branch not in branches:
        raise CorruptedFileError(f"Current branch {current_branch!r} is not in the branch map")

    return StoreSnapshot(
        versions=versions, branches=branches, current_branch=current_branch
    )


class HistoryStorage:
    """
    File-based storage for a document history.

    Saving writes to a temporary file in the target directory and then
    atomically replaces the target.
    """

    def __init__(self, path: Path = Path("history.json"), default_branch: str = "main"):
        """
        Initialize storage.

        Args:
            path: History file
            default_branch: Branch used when the file names none
        """
        self.path = Path(path)
        self.default_branch = default_branch

    def exists(self) -> bool:
        """Check whether the history file exists."""
        return self.path.exists()

    def save(self, snapshot: StoreSnapshot) -> None:
        """
        Save a snapshot, replacing the history file.

        Raises:
            PersistenceError: If the file cannot be written
        """
        data = dumps(snapshot)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self._atomic_write(self.path) as f:
                f.write(data)
        except OSError as e:
            logger.error("Failed to save history to {}: {}", self.path, e)
            raise PersistenceError(f"Could not write {self.path}: {e}") from e

        logger.info(
            "Saved {} versions to {}", len(snapshot.versions), self.path
        )

    def load(self) -> StoreSnapshot:
        """
        Load the snapshot stored in the history file.

        Raises:
            PersistenceError: If the file cannot be read
            CorruptedFileError: If the file content is invalid
        """
        try:
            data = self.path.read_bytes()
        except OSError as e:
            logger.error("Failed to read history from {}: {}", self.path, e)
            raise PersistenceError(f"Could not read {self.path}: {e}") from e

        snapshot = loads(data, default_branch=self.default_branch)
        logger.info("Loaded {} versions from {}", len(snapshot.versions), self.path)
        return snapshot

    @contextmanager
    def _atomic_write(self, filepath: Path):
        """
        Context manager for atomic file write operations (overwrite mode).

        Args:
            filepath: Target file path

        Yields:
            Binary file object for writing
        """
        temp_fd, temp_path = tempfile.mkstemp(
            dir=filepath.parent, prefix=f".{filepath.name}.", suffix=".tmp"
        )

        try:
            with os.fdopen(temp_fd, "wb") as f:
                yield f

            # Atomic rename
            os.replace(temp_path, filepath)

        except Exception:
            try:
                os.unlink(temp_path)
            except FileNotFoundError:
                pass
            raise
