"""Immutable snapshots of pull requests and CI signals."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class VersionBump(str, Enum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    NONE = "none"


@dataclass(frozen=True)
class RepoRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    @classmethod
    def parse(cls, slug: str) -> "RepoRef":
        owner, _, name = slug.strip().partition("/")
        if not owner or not name or "/" in name:
            raise ValueError(f"Expected owner/name, got {slug!r}")
        return cls(owner=owner, name=name)


@dataclass(frozen=True)
class PullRequestCandidate:
    number: int
    title: str
    author: str
    ref: str


@dataclass(frozen=True)
class CheckResult:
    name: str
    conclusion: str | None


@dataclass(frozen=True)
class StatusResult:
    context: str
    state: str
