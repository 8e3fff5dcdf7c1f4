"""GitHub REST API client: pull request source, CI signal source and action sink."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .types import CheckResult, PullRequestCandidate, RepoRef, StatusResult

logger = logging.getLogger(__name__)

DEFAULT_PER_PAGE = 100
REQUEST_TIMEOUT_S = 30


class GitHubAPIError(Exception):
    pass


class GitHubClient:
    """Handles all communication with the GitHub REST API for one repository."""

    BASE_URL = "https://api.github.com"

    def __init__(self, token: str, repo: RepoRef, session: Optional[requests.Session] = None):
        self.repo = repo
        self.session = session or requests.Session()
        self.session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "bump-merger",
        })

    def _repo_path(self, suffix: str) -> str:
        return f"/repos/{self.repo.owner}/{self.repo.name}{suffix}"

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        url = f"{self.BASE_URL}{endpoint}"
        try:
            response = self.session.request(method, url, timeout=REQUEST_TIMEOUT_S, **kwargs)
        except requests.exceptions.RequestException as e:
            raise GitHubAPIError(f"{method} {endpoint} failed: {e}") from e
        if response.status_code >= 400:
            message = _error_message(response)
            raise GitHubAPIError(f"GitHub API error {response.status_code} on {method} {endpoint}: {message}")
        return response

    def get(self, endpoint: str, params: Optional[dict] = None, expect: type = object) -> Any:
        response = self._request("GET", endpoint, params=params)
        try:
            data = response.json()
        except ValueError as e:
            raise GitHubAPIError(f"Invalid JSON from GET {endpoint}: {e}") from e
        if not isinstance(data, expect):
            raise GitHubAPIError(f"Expected {expect.__name__} from GET {endpoint}, got {type(data).__name__}")
        return data

    # ── Pull request source ─────────────────────────────────

    def list_open_pull_requests(self) -> list[PullRequestCandidate]:
        items = self.get(
            self._repo_path("/pulls"),
            params={"state": "open", "per_page": DEFAULT_PER_PAGE},
            expect=list,
        )
        return [
            PullRequestCandidate(
                number=int(item["number"]),
                title=item.get("title") or "",
                author=(item.get("user") or {}).get("login") or "",
                ref=(item.get("head") or {}).get("sha") or "",
            )
            for item in items
        ]

    # ── Signal source ───────────────────────────────────────

    def list_check_runs(self, ref: str) -> list[CheckResult]:
        payload = self.get(
            self._repo_path(f"/commits/{ref}/check-runs"),
            params={"per_page": DEFAULT_PER_PAGE},
            expect=dict,
        )
        logger.debug("Check runs for %s: %s", ref, payload)
        return [
            CheckResult(name=run.get("name") or "", conclusion=run.get("conclusion"))
            for run in payload.get("check_runs") or []
        ]

    def list_commit_statuses(self, ref: str) -> list[StatusResult]:
        items = self.get(
            self._repo_path(f"/commits/{ref}/statuses"),
            params={"per_page": DEFAULT_PER_PAGE},
            expect=list,
        )
        logger.debug("Commit statuses for %s: %s", ref, items)
        return [
            StatusResult(context=item.get("context") or "", state=item.get("state") or "")
            for item in items
        ]

    def fetch_signals(self, ref: str) -> tuple[list[CheckResult], list[StatusResult]]:
        return self.list_check_runs(ref), self.list_commit_statuses(ref)

    # ── Action sink ─────────────────────────────────────────

    def approve(self, number: int) -> None:
        self._request(
            "POST",
            self._repo_path(f"/pulls/{number}/reviews"),
            json={"event": "APPROVE"},
        )

    def merge(self, number: int, merge_method: str) -> None:
        self._request(
            "PUT",
            self._repo_path(f"/pulls/{number}/merge"),
            json={"merge_method": merge_method},
        )


def _error_message(response: requests.Response) -> str:
    try:
        payload = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(payload, dict) and payload.get("message"):
        return str(payload["message"])
    return response.text[:500]
