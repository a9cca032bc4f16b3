"""
Version representation for the document history.

A version is an immutable snapshot of the document plus metadata. Its
content is stored either in full or as a patch against its parent.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Union
import hashlib

from .diff import Patch

# Parent id of a root version; never assigned to a real version.
ROOT_ID = 0


@dataclass(frozen=True)
class FullContent:
    """Content stored verbatim."""

    content: str


@dataclass(frozen=True)
class PatchContent:
    """Content stored as a patch against the parent version."""

    patch: Patch


Representation = Union[FullContent, PatchContent]


@dataclass(frozen=True)
class Version:
    """
    Represents one committed snapshot of the document.

    Attributes:
        id: Unique, monotonically assigned identifier
        timestamp: Human-readable creation time
        message: Commit message
        parent_id: Id of the parent version, ``ROOT_ID`` for a root
        fingerprint: Hash of the full logical content at creation time
        representation: Either ``FullContent`` or ``PatchContent``
    """

    id: int
    timestamp: str
    message: str
    parent_id: int
    fingerprint: str
    representation: Representation

    @property
    def is_compressed(self) -> bool:
        """Whether the content is stored as a patch against the parent."""
        return isinstance(self.representation, PatchContent)

    def to_dict(self) -> Dict[str, Any]:
        """Convert version to dictionary for serialization."""
        content = None
        patch = None
        if isinstance(self.representation, PatchContent):
            patch = self.representation.patch.to_list()
        else:
            content = self.representation.content

        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "message": self.message,
            "parent_id": self.parent_id,
            "fingerprint": self.fingerprint,
            "content": content,
            "patch": patch,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Version":
        """Create version from dictionary."""
        content = data.get("content")
        patch = data.get("patch")
        if (content is None) == (patch is None):
            raise ValueError(
                f"Version {data.get('id')} must have exactly one of content or patch"
            )

        representation: Representation
        if patch is not None:
            representation = PatchContent(Patch.from_list(patch))
        else:
            representation = FullContent(content)

        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            message=data["message"],
            parent_id=data["parent_id"],
            fingerprint=data["fingerprint"],
            representation=representation,
        )


def create_fingerprint(content: str) -> str:
    """Compute the content fingerprint of a document."""
    return hashlib.sha256(content.encode()).hexdigest()[:16]


def current_timestamp() -> str:
    """Generate a local-time label for a new version."""
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")
