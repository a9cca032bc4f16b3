"""
Walks over the version graph.

All functions take the version map explicitly and never mutate it.
Parent chains are followed iteratively so that long histories do not hit
the interpreter's recursion limit.
"""

from typing import Iterator, List, Mapping, Set

from .diff import decode
from .errors import CorruptHistoryError, NoCommonAncestorError, NotFoundError
from .version import ROOT_ID, FullContent, PatchContent, Version


def get_version(versions: Mapping[int, Version], version_id: int) -> Version:
    """
    Look up a version by id.

    Raises:
        NotFoundError: If the id is not in the map
    """
    try:
        return versions[version_id]
    except KeyError:
        raise NotFoundError(f"Version not found: {version_id}") from None


def walk_chain(versions: Mapping[int, Version], start_id: int) -> Iterator[Version]:
    """
    Yield versions from ``start_id`` back to the root, child first.

    Args:
        versions: Version map
        start_id: Version to start from; ``ROOT_ID`` yields nothing

    Raises:
        NotFoundError: If a version on the chain is missing
        CorruptHistoryError: If the chain is longer than the map (a cycle)
    """
    version_id = start_id
    steps = 0
    while version_id != ROOT_ID:
        version = get_version(versions, version_id)
        if steps >= len(versions):
            raise CorruptHistoryError(f"Parent chain of version {start_id} has a cycle")
        yield version
        version_id = version.parent_id
        steps += 1


def reconstruct(versions: Mapping[int, Version], version_id: int) -> str:
    """
    Rebuild the full content of a version.

    Collects patches back to the nearest version stored in full (or to the
    root, whose content is the empty document) and replays them forward.

    Args:
        versions: Version map
        version_id: Version to rebuild

    Returns:
        The logical content of the version

    Raises:
        NotFoundError: If the version or one of its ancestors is missing
        CorruptHistoryError: If a stored patch does not apply to its parent
    """
    get_version(versions, version_id)

    pending: List[PatchContent] = []
    content = ""
    for version in walk_chain(versions, version_id):
        if isinstance(version.representation, FullContent):
            content = version.representation.content
            break
        pending.append(version.representation)

    for representation in reversed(pending):
        try:
            content = decode(content, representation.patch)
        except ValueError as e:
            raise CorruptHistoryError(f"Version {version_id} cannot be rebuilt: {e}") from e
    return content


def content_at(versions: Mapping[int, Version], version_id: int) -> str:
    """Like :func:`reconstruct`, but the root sentinel yields an empty document."""
    if version_id == ROOT_ID:
        return ""
    return reconstruct(versions, version_id)


def collect_ancestors(versions: Mapping[int, Version], head_id: int) -> Set[int]:
    """Return the ids on the chain from ``head_id`` to the root, inclusive."""
    return {version.id for version in walk_chain(versions, head_id)}


def find_merge_base(
    versions: Mapping[int, Version], ancestors: Set[int], tip_id: int
) -> int:
    """
    Find the nearest version on the chain of ``tip_id`` that is in ``ancestors``.

    Raises:
        NoCommonAncestorError: If the chain reaches the root without a match
    """
    for version in walk_chain(versions, tip_id):
        if version.id in ancestors:
            return version.id
    raise NoCommonAncestorError(f"Version {tip_id} shares no history with the current head")


def validate_graph(versions: Mapping[int, Version]) -> None:
    """
    Check that every parent chain in the map reaches the root.

    Raises:
        NotFoundError: If a version names a parent that is not stored
        CorruptHistoryError: On a mismatched key or a cycle
    """
    terminates: Set[int] = {ROOT_ID}

    for key, version in versions.items():
        if key != version.id:
            raise CorruptHistoryError(f"Version {version.id} stored under key {key}")

        path: List[int] = []
        on_path: Set[int] = set()
        current = key
        while current not in terminates:
            if current in on_path:
                raise CorruptHistoryError(f"Parent chain of version {key} has a cycle")
            if current not in versions:
                raise NotFoundError(f"Version {path[-1]} has missing parent {current}")
            path.append(current)
            on_path.add(current)
            current = versions[current].parent_id

        terminates.update(path)
