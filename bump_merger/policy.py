"""Auto-merge decision table keyed by threshold and version bump."""

from __future__ import annotations

from .types import VersionBump

# Bumps held back under each threshold; anything else merges.
_HELD_BACK = {
    VersionBump.MAJOR: frozenset(),
    VersionBump.MINOR: frozenset({VersionBump.MAJOR}),
    VersionBump.PATCH: frozenset({VersionBump.MAJOR, VersionBump.MINOR}),
}


def should_merge(bump: VersionBump, threshold: VersionBump) -> bool:
    """Decide whether a PR with ``bump`` may merge under ``threshold``.

    Unclassified bumps (``NONE``) always merge: a title the parser cannot read
    is not treated as a risky major or minor upgrade.
    """
    try:
        held_back = _HELD_BACK[VersionBump(threshold)]
    except (KeyError, ValueError):
        raise ValueError(f"Invalid auto-merge threshold: {threshold}") from None
    return VersionBump(bump) not in held_back
