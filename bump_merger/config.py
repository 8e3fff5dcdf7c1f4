"""Run configuration for the auto merger."""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from .types import RepoRef, VersionBump

DEFAULT_AUTO_MERGE = "minor"
DEFAULT_MERGE_METHOD = "merge"
DEFAULT_PR_AUTHOR = "dependabot[bot]"

AUTO_MERGE_CHOICES = ("major", "minor", "patch")
MERGE_METHODS = ("merge", "squash", "rebase")

TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN", "INPUT_TOKEN")
REPOSITORY_ENV_VAR = "GITHUB_REPOSITORY"

DEBUG_ENV_VAR = "INPUT_DEBUG"


class ConfigurationError(Exception):
    pass


class MissingCredential(ConfigurationError):
    pass


@dataclass(frozen=True)
class MergeConfig:
    token: str
    repository: RepoRef
    auto_merge: VersionBump = VersionBump.MINOR
    merge_method: str = DEFAULT_MERGE_METHOD
    pr_author: str = DEFAULT_PR_AUTHOR
    debug: bool = False
    dry_run: bool = False

    def __repr__(self) -> str:
        return (
            f"MergeConfig(repository={self.repository.full_name!r}, "
            f"auto_merge={self.auto_merge.value!r}, merge_method={self.merge_method!r}, "
            f"pr_author={self.pr_author!r}, debug={self.debug}, dry_run={self.dry_run})"
        )


def parse_auto_merge(value: str | None) -> VersionBump:
    auto_merge = (value or "").strip() or DEFAULT_AUTO_MERGE
    if auto_merge not in AUTO_MERGE_CHOICES:
        raise ConfigurationError(f"Invalid auto-merge option: {auto_merge}")
    return VersionBump(auto_merge)


def parse_merge_method(value: str | None) -> str:
    merge_method = (value or "").strip() or DEFAULT_MERGE_METHOD
    if merge_method not in MERGE_METHODS:
        raise ConfigurationError(f"Invalid merge method: {merge_method}")
    return merge_method


def parse_flag(value: str | bool | None) -> bool:
    """Any non-empty value switches the flag on, as action inputs do."""
    if isinstance(value, bool):
        return value
    return bool((value or "").strip())


def resolve_token(token: str | None, environ: Mapping[str, str]) -> str:
    tok = (token or "").strip()
    for name in TOKEN_ENV_VARS:
        if tok:
            break
        tok = (environ.get(name) or "").strip()
    if not tok:
        raise MissingCredential(
            "GitHub token not found. Provide --token or set GITHUB_TOKEN."
        )
    return tok


def resolve_repository(repository: str | None, environ: Mapping[str, str]) -> RepoRef:
    slug = (repository or "").strip() or (environ.get(REPOSITORY_ENV_VAR) or "").strip()
    if not slug:
        raise ConfigurationError(
            "Repository not set. Provide --repo owner/name or set GITHUB_REPOSITORY."
        )
    try:
        return RepoRef.parse(slug)
    except ValueError as error:
        raise ConfigurationError(f"Invalid repository: {error}") from None


def load_config(
    *,
    token: str | None = None,
    repository: str | None = None,
    auto_merge: str | None = None,
    merge_method: str | None = None,
    pr_author: str | None = None,
    debug: str | bool | None = None,
    dry_run: bool = False,
    environ: Mapping[str, str] | None = None,
) -> MergeConfig:
    """Validate all settings once, before any remote call is made.

    Explicit values win; the environment fills in token, repository and debug.
    Empty strings count as unset.
    """
    env = os.environ if environ is None else environ
    return MergeConfig(
        auto_merge=parse_auto_merge(auto_merge),
        merge_method=parse_merge_method(merge_method),
        pr_author=(pr_author or "").strip() or DEFAULT_PR_AUTHOR,
        debug=parse_flag(debug) or parse_flag(env.get(DEBUG_ENV_VAR)),
        dry_run=dry_run,
        token=resolve_token(token, env),
        repository=resolve_repository(repository, env),
    )
