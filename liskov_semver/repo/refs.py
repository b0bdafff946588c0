"""Resolution of the previous and current references to compare."""

from __future__ import annotations

from ..config import TagPolicy
from ..errors import DetachedHeadError, InvalidReferenceError
from ..models import Reference
from ..versioning import parse_version
from .git import GitRepository


def highest_version_reference(
    repo: GitRepository,
    policy: TagPolicy = TagPolicy.REACHABLE,
    reachable_from: str | None = None,
) -> Reference | None:
    """Return the tag with the greatest SemVer name, or None if there is none.

    With the REACHABLE policy only tags merged into `reachable_from`
    (default HEAD) are considered.
    """
    if policy == TagPolicy.ALL:
        names = repo.tags()
    else:
        names = repo.tags(merged_into=reachable_from or "HEAD")

    versioned = [(v, name) for name in names if (v := parse_version(name)) is not None]
    if not versioned:
        return None

    # Distinct tags never share a normalized version.
    _, best = max(versioned, key=lambda pair: pair[0])
    commit = repo.resolve_commit(best)
    if commit is None:
        raise InvalidReferenceError(best, "from")
    return Reference(best, "tag", commit)


def current_reference(repo: GitRepository) -> Reference:
    """The checked-out branch."""
    name = repo.current_branch()
    if name is None:
        raise DetachedHeadError()
    commit = repo.resolve_commit(name)
    if commit is None:
        # Unborn branch: nothing committed yet.
        raise InvalidReferenceError(name, "to")
    return Reference(name, "branch", commit)


def resolve_reference(repo: GitRepository, name: str, role: str) -> Reference:
    """Resolve a user-supplied override; it must name a tag or a branch."""
    if name in repo.tags():
        kind = "tag"
    elif name in repo.branches():
        kind = "branch"
    else:
        raise InvalidReferenceError(name, role)

    commit = repo.resolve_commit(name)
    if commit is None:
        raise InvalidReferenceError(name, role)
    return Reference(name, kind, commit)


def is_descendant(repo: GitRepository, older: Reference, newer: Reference) -> bool:
    """True iff `older` is an ancestor of (or the same commit as) `newer`."""
    return repo.is_ancestor(older.commit, newer.commit)
