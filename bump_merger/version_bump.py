"""Version bump detection from dependency-update PR titles.

Titles follow the dependency bot convention::

    Bump lodash from 4.17.10 to 4.17.21
    Bump react from 17.0.0 to 18.0.0 in /frontend

The "from" and "to" tokens are cut out of the title and compared as semantic
versions. Anything that does not fit resolves to ``VersionBump.NONE``.
"""

from __future__ import annotations

import logging

import semver

from .types import VersionBump

logger = logging.getLogger(__name__)

FROM_MARKER = "from "
TO_MARKER = " to "
VERSION_TOKEN_LIMIT = 8


def _token_after(title: str, marker: str) -> str:
    index = title.find(marker)
    if index < 0:
        return ""
    rest = title[index + len(marker):]
    token = rest.split(" ", 1)[0].split("\n", 1)[0]
    return token[:VERSION_TOKEN_LIMIT].strip()


def extract_versions(title: str) -> tuple[str, str] | None:
    """Return the (from, to) version strings, or None when either is missing."""
    from_version = _token_after(title, FROM_MARKER)
    to_version = _token_after(title, TO_MARKER)
    logger.debug(
        "Get versions from %s => from version %s to version %s",
        title, from_version, to_version,
    )
    if not from_version or not to_version:
        return None
    return from_version, to_version


def _parse_semver(raw: str) -> semver.Version:
    if raw[:1] in ("v", "V"):
        raw = raw[1:]
    # Build metadata has no precedence.
    return semver.Version.parse(raw).replace(build=None)


def classify_bump(from_version: str, to_version: str) -> VersionBump:
    """Classify the change between two semantic versions.

    The highest release component that differs wins. A change confined to the
    pre-release part counts as a patch. Invalid versions give ``NONE``.
    """
    try:
        old = _parse_semver(from_version)
        new = _parse_semver(to_version)
    except ValueError:
        return VersionBump.NONE

    if old == new:
        return VersionBump.NONE
    if old.major != new.major:
        return VersionBump.MAJOR
    if old.minor != new.minor:
        return VersionBump.MINOR
    return VersionBump.PATCH


def parse_bump(title: str) -> VersionBump:
    versions = extract_versions(title or "")
    if versions is None:
        return VersionBump.NONE
    return classify_bump(*versions)
