"""One pass over the open dependency-update pull requests.

Collaborators are duck-typed:

- ``signals.fetch_signals(ref)`` -> ``(list[CheckResult], list[StatusResult])``
- ``actions.approve(number)`` and ``actions.merge(number, merge_method)``

All three raise ``GitHubAPIError`` on failure. Any exception they raise is
recorded on the pull request's outcome and never stops the pass.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any

from .config import MergeConfig
from .github_api import GitHubAPIError
from .policy import should_merge
from .version_bump import parse_bump
from .signals import checks_passed, evaluate_signals
from .types import PullRequestCandidate, VersionBump

logger = logging.getLogger(__name__)


class Outcome(str, Enum):
    MERGED = "merged"
    MERGE_FAILED = "merge_failed"
    SKIPPED_SIGNALS = "skipped_signals"
    SKIPPED_POLICY = "skipped_policy"
    DRY_RUN = "dry_run"


@dataclass
class PullRequestOutcome:
    number: int
    title: str
    outcome: Outcome
    bump: VersionBump | None = None
    approved: bool = False
    detail: str = ""

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["outcome"] = self.outcome.value
        payload["bump"] = self.bump.value if self.bump else None
        return payload


@dataclass
class RunSummary:
    outcomes: list[PullRequestOutcome] = field(default_factory=list)

    def count(self, outcome: Outcome) -> int:
        return sum(1 for o in self.outcomes if o.outcome is outcome)

    def for_pull_request(self, number: int) -> PullRequestOutcome | None:
        for o in self.outcomes:
            if o.number == number:
                return o
        return None

    @property
    def merged(self) -> list[int]:
        return [o.number for o in self.outcomes if o.outcome is Outcome.MERGED]

    def to_dict(self) -> dict[str, Any]:
        return {
            "processed": len(self.outcomes),
            "counts": {outcome.value: self.count(outcome) for outcome in Outcome},
            "pull_requests": [o.to_dict() for o in self.outcomes],
        }


def select_candidates(
    pull_requests: Iterable[PullRequestCandidate], author: str
) -> list[PullRequestCandidate]:
    return [pr for pr in pull_requests if pr.author == author]


class AutoMerger:
    """Evaluates pull requests one at a time and merges the ones the policy allows."""

    def __init__(self, config: MergeConfig, signals, actions):
        self.config = config
        self.signals = signals
        self.actions = actions

    def run(self, pull_requests: Iterable[PullRequestCandidate]) -> RunSummary:
        candidates = select_candidates(pull_requests, self.config.pr_author)
        logger.info("Found %d matching pull requests", len(candidates))

        summary = RunSummary()
        for pr in candidates:
            logger.info("Processing PR #%d: %s", pr.number, pr.title)
            summary.outcomes.append(self.process(pr))
        return summary

    def process(self, pr: PullRequestCandidate) -> PullRequestOutcome:
        try:
            checks, statuses = self.signals.fetch_signals(pr.ref)
        except GitHubAPIError as e:
            logger.warning("Could not fetch CI signals for PR #%d: %s", pr.number, e)
            return PullRequestOutcome(pr.number, pr.title, Outcome.SKIPPED_SIGNALS, detail=str(e))
        except Exception as e:
            logger.exception("Unexpected error fetching CI signals for PR #%d", pr.number)
            return PullRequestOutcome(pr.number, pr.title, Outcome.SKIPPED_SIGNALS, detail=repr(e))

        if not evaluate_signals(checks, statuses):
            if not checks_passed(checks):
                logger.info("All checks did not succeed")
                detail = "checks not green"
            else:
                logger.info("All statuses did not succeed")
                detail = "statuses not green"
            return PullRequestOutcome(pr.number, pr.title, Outcome.SKIPPED_SIGNALS, detail=detail)

        bump = parse_bump(pr.title)
        logger.info("Version bump: %s", bump.value)

        if not should_merge(bump, self.config.auto_merge):
            logger.info("Not merging %s", bump.value)
            return PullRequestOutcome(
                pr.number, pr.title, Outcome.SKIPPED_POLICY, bump=bump,
                detail=f"{bump.value} bump above {self.config.auto_merge.value} threshold",
            )

        if self.config.dry_run:
            logger.info("Dry run: would approve and merge PR #%d", pr.number)
            return PullRequestOutcome(pr.number, pr.title, Outcome.DRY_RUN, bump=bump)

        logger.info("Approve and merge")
        return self._approve_and_merge(pr, bump)

    def _approve_and_merge(self, pr: PullRequestCandidate, bump: VersionBump) -> PullRequestOutcome:
        approved = True
        try:
            self.actions.approve(pr.number)
        except GitHubAPIError as e:
            # merge is attempted regardless
            approved = False
            logger.info("Approve failed: %s", e)
        except Exception:
            approved = False
            logger.exception("Approve failed for PR #%d", pr.number)

        try:
            self.actions.merge(pr.number, self.config.merge_method)
        except GitHubAPIError as e:
            logger.info("Merge failed: %s", e)
            return PullRequestOutcome(
                pr.number, pr.title, Outcome.MERGE_FAILED, bump=bump,
                approved=approved, detail=str(e),
            )
        except Exception as e:
            logger.exception("Merge failed for PR #%d", pr.number)
            return PullRequestOutcome(
                pr.number, pr.title, Outcome.MERGE_FAILED, bump=bump,
                approved=approved, detail=repr(e),
            )
        return PullRequestOutcome(pr.number, pr.title, Outcome.MERGED, bump=bump, approved=approved)


def run_pass(config: MergeConfig, pull_requests, signals, actions) -> RunSummary:
    return AutoMerger(config, signals, actions).run(pull_requests)
