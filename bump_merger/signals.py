"""Reduce check runs and commit statuses to a single green/red verdict."""

from __future__ import annotations

from collections.abc import Iterable

from .types import CheckResult, StatusResult

PASSING_CONCLUSIONS = ("success", "neutral")
PASSING_STATE = "success"


def dedupe_statuses(statuses: Iterable[StatusResult]) -> list[StatusResult]:
    """Keep the first status seen for each context, in order.

    The statuses endpoint lists newest first, so the first entry per context
    is the current one.
    """
    seen: dict[str, StatusResult] = {}
    for status in statuses:
        if status.context not in seen:
            seen[status.context] = status
    return list(seen.values())


def checks_passed(checks: Iterable[CheckResult]) -> bool:
    return all(check.conclusion in PASSING_CONCLUSIONS for check in checks)


def statuses_passed(statuses: Iterable[StatusResult]) -> bool:
    return all(status.state == PASSING_STATE for status in dedupe_statuses(statuses))


def evaluate_signals(checks: list[CheckResult], statuses: list[StatusResult]) -> bool:
    """True when every check and every current status is green.

    Empty lists pass: a repo without checks or statuses is not failing.
    """
    return checks_passed(checks) and statuses_passed(statuses)
