"""
Versioned document store.

Holds one mutable working buffer plus an append-only graph of immutable
versions organized into named branches, with git-like operations on top.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterator, List, Mapping, Optional

from folio.logging import get_folio_logger, log_store_operation

from .diff import Patch, encode
from .errors import CorruptHistoryError, EmptyStoreError, NotFoundError
from .history import (
    collect_ancestors,
    content_at,
    find_merge_base,
    get_version,
    reconstruct,
    validate_graph,
    walk_chain,
)
from .version import (
    ROOT_ID,
    FullContent,
    PatchContent,
    Representation,
    Version,
    create_fingerprint,
    current_timestamp,
)

logger = get_folio_logger("version_control")

REBASED_PREFIX = "[rebased] "


@dataclass
class StoreSnapshot:
    """
    Plain persistent state of a store.

    Head id, working content and the next id are derived from it on restore.
    """

    versions: Dict[int, Version]
    branches: Dict[str, int]
    current_branch: str


class DocumentStore:
    """
    Git-like version control for a single text document.

    Provides operations for:
    - Editing the working buffer with one level of undo
    - Committing snapshots, with patch compression past a threshold
    - Rollback, branching and checkout
    - Rebasing the current branch onto another
    - Log, show and diff queries
    """

    def __init__(
        self,
        compression_threshold: int = 5,
        default_branch: str = "main",
        fingerprint: Callable[[str], str] = create_fingerprint,
        clock: Callable[[], str] = current_timestamp,
    ):
        """
        Initialize an empty store.

        Args:
            compression_threshold: Versions with a larger id are stored as patches
            default_branch: Branch the store starts on
            fingerprint: Content hash provider
            clock: Timestamp provider
        """
        if compression_threshold < 0:
            raise ValueError("compression_threshold must not be negative")

        self.compression_threshold = compression_threshold
        self.default_branch = default_branch
        self._fingerprint = fingerprint
        self._clock = clock

        self._versions: Dict[int, Version] = {}
        self._branches: Dict[str, int] = {default_branch: ROOT_ID}
        self._current_branch = default_branch
        self._head_id = ROOT_ID
        self._next_id = 1
        self._working_content = ""
        self._last_uncommitted: Optional[str] = None

    @property
    def versions(self) -> Mapping[int, Version]:
        """Read-only view of all stored versions."""
        return MappingProxyType(self._versions)

    @property
    def current_branch(self) -> str:
        return self._current_branch

    @property
    def head_id(self) -> int:
        return self._head_id

    @property
    def next_id(self) -> int:
        return self._next_id

    @property
    def working_content(self) -> str:
        return self._working_content

    @property
    def has_undo(self) -> bool:
        """Whether an uncommitted edit can be undone."""
        return self._last_uncommitted is not None

    def list_branches(self) -> Dict[str, int]:
        """List all branches with the version each points to."""
        return dict(self._branches)

    def get_version(self, version_id: int) -> Version:
        """Get a stored version by id."""
        return get_version(self._versions, version_id)

    def reconstruct(self, version_id: int) -> str:
        """
        Rebuild the full content of a version.

        Raises:
            NotFoundError: If the version does not exist
        """
        return reconstruct(self._versions, version_id)

    # Editing

    def create(self, content: str) -> None:
        """Replace the working buffer with new content and drop the undo snapshot."""
        self._working_content = content
        self._last_uncommitted = None
        logger.debug("Created new document ({} characters)", len(content))

    def append(self, text: str) -> None:
        """Append text to the working buffer."""
        self._last_uncommitted = self._working_content
        self._working_content += text

    def remove_last(self, count: int) -> None:
        """
        Remove the last ``count`` characters from the working buffer.

        The undo snapshot is taken even when ``count`` exceeds the buffer
        length, in which case the content is left unchanged.

        Raises:
            ValueError: If ``count`` is negative
        """
        if count < 0:
            raise ValueError(f"Cannot remove a negative number of characters: {count}")

        self._last_uncommitted = self._working_content
        if count > len(self._working_content):
            logger.warning(
                "Removal of {} characters exceeds buffer length {}",
                count,
                len(self._working_content),
            )
            return
        if count:
            self._working_content = self._working_content[:-count]

    def undo(self) -> bool:
        """
        Restore the working buffer from before the last edit.

        Returns:
            True if a snapshot was restored, False if there was nothing to undo
        """
        if self._last_uncommitted is None:
            logger.debug("Nothing to undo")
            return False

        self._working_content = self._last_uncommitted
        self._last_uncommitted = None
        return True

    def commit(self, message: str = "") -> Version:
        """
        Commit the working buffer as a new version on the current branch.

        Args:
            message: Commit message

        Returns:
            The new version

        Example:
            >>> store = DocumentStore()
            >>> store.create("hello")
            >>> store.commit("Initial commit").id
            1
        """
        version_id = self._next_id
        content = self._working_content

        representation: Representation
        if version_id > self.compression_threshold:
            parent_content = content_at(self._versions, self._head_id)
            representation = PatchContent(encode(parent_content, content))
        else:
            representation = FullContent(content)

        version = Version(
            id=version_id,
            timestamp=self._clock(),
            message=message,
            parent_id=self._head_id,
            fingerprint=self._fingerprint(content),
            representation=representation,
        )

        self._versions[version_id] = version
        self._move_head(version_id)
        self._next_id += 1
        self._last_uncommitted = None

        log_store_operation(
            logger,
            "commit",
            version_id=version_id,
            parent_id=version.parent_id,
            branch=self._current_branch,
            compressed=version.is_compressed,
        )
        return version

    # Navigation

    def rollback(self, version_id: int) -> str:
        """
        Move the current branch to an existing version.

        No new version is created; the branch pointer is simply moved.

        Args:
            version_id: Version to roll back to

        Returns:
            The content of that version, now in the working buffer

        Raises:
            NotFoundError: If the version does not exist
        """
        content = self.reconstruct(version_id)

        self._working_content = content
        self._move_head(version_id)

        log_store_operation(
            logger, "rollback", version_id=version_id, branch=self._current_branch
        )
        return content

    def branch(self, name: str) -> None:
        """
        Create a branch at the current head, or move an existing one there.

        Raises:
            ValueError: If the name is empty
        """
        if not name:
            raise ValueError("Branch name must not be empty")

        self._branches[name] = self._head_id
        log_store_operation(logger, "branch", branch=name, version_id=self._head_id)

    def checkout(self, name: str) -> str:
        """
        Switch to another branch and load its head into the working buffer.

        Args:
            name: Branch to switch to

        Returns:
            The content of the branch head

        Raises:
            NotFoundError: If the branch does not exist
        """
        if name not in self._branches:
            raise NotFoundError(f"Branch not found: {name}")

        head_id = self._branches[name]
        content = content_at(self._versions, head_id)

        self._current_branch = name
        self._head_id = head_id
        self._working_content = content

        log_store_operation(logger, "checkout", branch=name, version_id=head_id)
        return content

    def log(self, limit: Optional[int] = None) -> Iterator[Version]:
        """
        Walk the history of the current head, newest first.

        Args:
            limit: Maximum number of versions to yield

        Example:
            >>> for version in store.log():
            ...     print(f"#{version.id} | {version.message}")
        """
        for count, version in enumerate(walk_chain(self._versions, self._head_id)):
            if limit is not None and count >= limit:
                return
            yield version

    def show(self, version_id: Optional[int] = None) -> str:
        """
        Get the content of a version, the current head by default.

        Raises:
            NotFoundError: If the version does not exist
        """
        if version_id is None:
            version_id = self._head_id
        return self.reconstruct(version_id)

    def diff(self, from_version: int, to_version: int) -> Patch:
        """
        Compute the patch between two versions.

        Raises:
            NotFoundError: If either version does not exist
        """
        old_content = self.reconstruct(from_version)
        new_content = self.reconstruct(to_version)
        return encode(old_content, new_content)

    # Queries

    def filter(self, keyword: str) -> List[Version]:
        """Find versions whose message contains ``keyword``, ignoring case."""
        needle = keyword.lower()
        return [
            self._versions[version_id]
            for version_id in sorted(self._versions)
            if needle in self._versions[version_id].message.lower()
        ]

    def average_length(self) -> float:
        """
        Average reconstructed content length over all versions.

        Raises:
            EmptyStoreError: If the store holds no versions
        """
        if not self._versions:
            raise EmptyStoreError("No versions available")

        total = sum(len(self.reconstruct(version_id)) for version_id in self._versions)
        return total / len(self._versions)

    # Rebase

    def rebase(self, onto_branch: str) -> List[Version]:
        """
        Replay the versions unique to the current branch onto another branch.

        Replayed versions get fresh ids and are always stored as patches. The
        originals stay in the store untouched.

        Args:
            onto_branch: Branch whose head becomes the new base

        Returns:
            The newly created versions, oldest first

        Raises:
            NotFoundError: If the branch does not exist
            NoCommonAncestorError: If the branches share no history
        """
        if onto_branch not in self._branches:
            raise NotFoundError(f"Branch not found: {onto_branch}")

        onto_id = self._branches[onto_branch]
        ancestors = collect_ancestors(self._versions, self._head_id)
        merge_base = find_merge_base(self._versions, ancestors, onto_id)

        to_replay: List[Version] = []
        for version in walk_chain(self._versions, self._head_id):
            if version.id == merge_base:
                break
            to_replay.append(version)
        to_replay.reverse()

        # Build every new version before publishing any of them.
        rebased: List[Version] = []
        cursor = onto_id
        previous_content = content_at(self._versions, onto_id)
        next_id = self._next_id
        for original in to_replay:
            content = self.reconstruct(original.id)
            rebased.append(
                Version(
                    id=next_id,
                    timestamp=self._clock(),
                    message=REBASED_PREFIX + original.message,
                    parent_id=cursor,
                    fingerprint=original.fingerprint,
                    representation=PatchContent(encode(previous_content, content)),
                )
            )
            cursor = next_id
            previous_content = content
            next_id += 1

        for version in rebased:
            self._versions[version.id] = version
        self._next_id = next_id
        self._move_head(cursor)
        self._working_content = previous_content

        log_store_operation(
            logger,
            "rebase",
            branch=self._current_branch,
            onto=onto_branch,
            merge_base=merge_base,
            replayed=len(rebased),
            version_id=cursor,
        )
        return rebased

    # Persistence hand-off

    def snapshot(self) -> StoreSnapshot:
        """Export the persistent state for a storage backend."""
        return StoreSnapshot(
            versions=dict(self._versions),
            branches=dict(self._branches),
            current_branch=self._current_branch,
        )

    def restore(self, snapshot: StoreSnapshot) -> None:
        """
        Replace the whole store state with a snapshot.

        The snapshot is validated and the working buffer rebuilt before any
        state is replaced, so a failed restore leaves the store unchanged.

        Raises:
            NotFoundError: If the current branch or a branch target is missing
            CorruptHistoryError: If the version graph is malformed
        """
        versions = dict(snapshot.versions)
        branches = dict(snapshot.branches)

        if any(version_id <= ROOT_ID for version_id in versions):
            raise CorruptHistoryError("Version ids must be positive")
        validate_graph(versions)
        if snapshot.current_branch not in branches:
            raise NotFoundError(f"Branch not found: {snapshot.current_branch}")
        for name, version_id in branches.items():
            if version_id != ROOT_ID and version_id not in versions:
                raise NotFoundError(f"Branch {name} points to missing version {version_id}")

        head_id = branches[snapshot.current_branch]
        content = content_at(versions, head_id)
        next_id = max(versions, default=ROOT_ID) + 1

        self._versions = versions
        self._branches = branches
        self._current_branch = snapshot.current_branch
        self._head_id = head_id
        self._next_id = next_id
        self._working_content = content
        self._last_uncommitted = None

        log_store_operation(
            logger,
            "restore",
            branch=self._current_branch,
            version_id=head_id,
            versions=len(versions),
        )

    def _move_head(self, version_id: int) -> None:
        self._head_id = version_id
        self._branches[self._current_branch] = version_id
