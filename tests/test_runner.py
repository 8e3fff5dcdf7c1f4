"""Tests for the merge pass over candidate pull requests."""

from __future__ import annotations

import pytest

from bump_merger.config import MergeConfig
from bump_merger.github_api import GitHubAPIError
from bump_merger.runner import AutoMerger, Outcome, run_pass, select_candidates
from bump_merger.types import CheckResult, PullRequestCandidate, RepoRef, StatusResult, VersionBump

BOT = "dependabot[bot]"
GREEN = ([CheckResult("build", "success")], [StatusResult("ci", "success")])


class FakeGitHub:
    """Records every remote call; fails on request."""

    def __init__(self, signals=None, fail_signals=(), fail_approve=(), fail_merge=(), errors=None):
        self.signals = signals or {}
        self.errors = errors or {}
        self.fail_signals = set(fail_signals)
        self.fail_approve = set(fail_approve)
        self.fail_merge = set(fail_merge)
        self.calls: list[tuple] = []

    def fetch_signals(self, ref):
        self.calls.append(("fetch_signals", ref))
        if ("fetch_signals", ref) in self.errors:
            raise self.errors[("fetch_signals", ref)]
        if ref in self.fail_signals:
            raise GitHubAPIError("GitHub API error 500")
        return self.signals.get(ref, GREEN)

    def approve(self, number):
        self.calls.append(("approve", number))
        if ("approve", number) in self.errors:
            raise self.errors[("approve", number)]
        if number in self.fail_approve:
            raise GitHubAPIError("Can not approve your own pull request")

    def merge(self, number, merge_method):
        self.calls.append(("merge", number, merge_method))
        if ("merge", number) in self.errors:
            raise self.errors[("merge", number)]
        if number in self.fail_merge:
            raise GitHubAPIError("Pull Request is not mergeable")

    @property
    def actions(self):
        return [c for c in self.calls if c[0] in ("approve", "merge")]


def make_config(**overrides) -> MergeConfig:
    values = dict(token="t0ken", repository=RepoRef("octo", "app"))
    values.update(overrides)
    return MergeConfig(**values)


def pr(number, title, ref=None, author=BOT):
    return PullRequestCandidate(number=number, title=title, author=author, ref=ref or f"sha{number}")


class TestSelectCandidates:
    def test_filters_by_author_keeping_order(self):
        prs = [pr(3, "a"), pr(1, "b", author="alice"), pr(2, "c")]
        assert [p.number for p in select_candidates(prs, BOT)] == [3, 2]


class TestAutoMerger:
    def test_patch_bump_merged(self):
        github = FakeGitHub()
        summary = run_pass(make_config(), [pr(7, "Bump lodash from 4.17.10 to 4.17.21")], github, github)

        outcome = summary.for_pull_request(7)
        assert outcome.outcome is Outcome.MERGED
        assert outcome.bump is VersionBump.PATCH
        assert outcome.approved is True
        assert github.actions == [("approve", 7), ("merge", 7, "merge")]

    def test_major_bump_held_back(self):
        github = FakeGitHub()
        summary = run_pass(make_config(), [pr(8, "Bump react from 17.0.0 to 18.0.0")], github, github)

        assert summary.for_pull_request(8).outcome is Outcome.SKIPPED_POLICY
        assert github.actions == []

    def test_major_bump_merged_with_major_threshold(self):
        github = FakeGitHub()
        config = make_config(auto_merge=VersionBump.MAJOR, merge_method="squash")
        summary = run_pass(config, [pr(8, "Bump react from 17.0.0 to 18.0.0")], github, github)

        assert summary.merged == [8]
        assert ("merge", 8, "squash") in github.calls

    def test_failing_check_skips_pr(self):
        checks = [
            CheckResult("build", "success"),
            CheckResult("test", "failure"),
            CheckResult("lint", "success"),
        ]
        github = FakeGitHub(signals={"sha9": (checks, [])})
        summary = run_pass(
            make_config(auto_merge=VersionBump.MAJOR),
            [pr(9, "Bump foo from 1.0.0 to 1.0.1")],
            github,
            github,
        )

        outcome = summary.for_pull_request(9)
        assert outcome.outcome is Outcome.SKIPPED_SIGNALS
        assert outcome.detail == "checks not green"
        assert github.actions == []

    def test_failing_status_skips_pr(self):
        github = FakeGitHub(signals={"sha9": ([], [StatusResult("ci", "failure"), StatusResult("ci", "success")])})
        summary = run_pass(make_config(), [pr(9, "Bump foo from 1.0.0 to 1.0.1")], github, github)

        assert summary.for_pull_request(9).detail == "statuses not green"
        assert github.actions == []

    def test_unparseable_title_merges(self):
        github = FakeGitHub()
        config = make_config(auto_merge=VersionBump.PATCH)
        summary = run_pass(config, [pr(4, "Bump the pip group with 2 updates")], github, github)

        assert summary.for_pull_request(4).bump is VersionBump.NONE
        assert summary.merged == [4]

    def test_unexpected_fetch_error_does_not_stop_run(self):
        github = FakeGitHub(errors={("fetch_signals", "sha1"): ValueError("unexpected payload")})
        prs = [pr(1, "Bump a from 1.0.0 to 1.0.1"), pr(2, "Bump b from 1.0.0 to 1.0.1")]
        summary = run_pass(make_config(), prs, github, github)

        skipped = summary.for_pull_request(1)
        assert skipped.outcome is Outcome.SKIPPED_SIGNALS
        assert "unexpected payload" in skipped.detail
        assert github.actions == [("approve", 2), ("merge", 2, "merge")]
        assert summary.merged == [2]

    def test_unexpected_approve_error_still_merges(self):
        github = FakeGitHub(errors={("approve", 1): RuntimeError("boom")})
        summary = run_pass(make_config(), [pr(1, "Bump a from 1.0.0 to 1.0.1")], github, github)

        outcome = summary.for_pull_request(1)
        assert outcome.outcome is Outcome.MERGED
        assert outcome.approved is False

    def test_unexpected_merge_error_recorded_and_run_continues(self):
        github = FakeGitHub(errors={("merge", 1): KeyError("merged")})
        prs = [pr(1, "Bump a from 1.0.0 to 1.0.1"), pr(2, "Bump b from 1.0.0 to 1.0.1")]
        summary = run_pass(make_config(), prs, github, github)

        failed = summary.for_pull_request(1)
        assert failed.outcome is Outcome.MERGE_FAILED
        assert "merged" in failed.detail
        assert summary.merged == [2]

    @pytest.mark.parametrize(
        "title",
        [
            "Bump foo from 1.0.0-x to 2.0.0",
            "Bump foo from 2.0.0-next to 3.0.0",
            "Bump foo from 1.0.0-alpha.1 to 2.0.0",
        ],
    )
    def test_major_bump_from_prerelease_held_back(self, title):
        github = FakeGitHub()
        summary = run_pass(make_config(auto_merge=VersionBump.MINOR), [pr(3, title)], github, github)

        outcome = summary.for_pull_request(3)
        assert outcome.outcome is Outcome.SKIPPED_POLICY
        assert outcome.bump is VersionBump.MAJOR
        assert github.actions == []

    def test_signal_fetch_failure_does_not_stop_run(self):
        github = FakeGitHub(fail_signals={"sha1"})
        prs = [pr(1, "Bump a from 1.0.0 to 1.0.1"), pr(2, "Bump b from 1.0.0 to 1.0.1")]
        summary = run_pass(make_config(), prs, github, github)

        assert summary.for_pull_request(1).outcome is Outcome.SKIPPED_SIGNALS
        assert "500" in summary.for_pull_request(1).detail
        assert summary.merged == [2]

    def test_approve_failure_still_merges(self):
        github = FakeGitHub(fail_approve={5})
        summary = run_pass(make_config(), [pr(5, "Bump a from 1.0.0 to 1.0.1")], github, github)

        outcome = summary.for_pull_request(5)
        assert outcome.outcome is Outcome.MERGED
        assert outcome.approved is False
        assert ("merge", 5, "merge") in github.calls

    def test_merge_failure_recorded_and_run_continues(self):
        github = FakeGitHub(fail_merge={5})
        prs = [pr(5, "Bump a from 1.0.0 to 1.0.1"), pr(6, "Bump b from 2.0.0 to 2.1.0")]
        summary = run_pass(make_config(), prs, github, github)

        failed = summary.for_pull_request(5)
        assert failed.outcome is Outcome.MERGE_FAILED
        assert failed.approved is True
        assert failed.detail == "Pull Request is not mergeable"
        assert summary.merged == [6]

    def test_approve_precedes_merge_for_each_pr(self):
        github = FakeGitHub()
        prs = [pr(1, "Bump a from 1.0.0 to 1.0.1"), pr(2, "Bump b from 1.0.0 to 1.0.1")]
        run_pass(make_config(), prs, github, github)

        assert github.actions == [
            ("approve", 1), ("merge", 1, "merge"),
            ("approve", 2), ("merge", 2, "merge"),
        ]

    def test_other_authors_ignored(self):
        github = FakeGitHub()
        summary = run_pass(make_config(), [pr(1, "Bump a from 1.0.0 to 1.0.1", author="alice")], github, github)

        assert summary.outcomes == []
        assert github.calls == []

    def test_dry_run_makes_no_changes(self):
        github = FakeGitHub()
        summary = run_pass(make_config(dry_run=True), [pr(1, "Bump a from 1.0.0 to 1.0.1")], github, github)

        assert summary.for_pull_request(1).outcome is Outcome.DRY_RUN
        assert github.actions == []

    def test_second_pass_over_open_prs_is_a_no_op(self):
        github = FakeGitHub()
        open_prs = [pr(1, "Bump a from 1.0.0 to 1.0.1"), pr(2, "Bump b from 1.0.0 to 2.0.0")]
        merger = AutoMerger(make_config(), github, github)

        first = merger.run(open_prs)
        still_open = [p for p in open_prs if p.number not in first.merged]
        github.calls.clear()
        second = merger.run(still_open)

        assert first.merged == [1]
        assert second.merged == []
        assert github.actions == []


class TestRunSummary:
    def test_to_dict(self):
        github = FakeGitHub(fail_merge={2})
        prs = [pr(1, "Bump a from 1.0.0 to 1.0.1"), pr(2, "Bump b from 1.0.0 to 1.1.0"), pr(3, "Bump c from 1.0.0 to 2.0.0")]
        payload = run_pass(make_config(), prs, github, github).to_dict()

        assert payload["processed"] == 3
        assert payload["counts"]["merged"] == 1
        assert payload["counts"]["merge_failed"] == 1
        assert payload["counts"]["skipped_policy"] == 1
        assert payload["pull_requests"][0] == {
            "number": 1,
            "title": "Bump a from 1.0.0 to 1.0.1",
            "outcome": "merged",
            "bump": "patch",
            "approved": True,
            "detail": "",
        }


@pytest.mark.parametrize("title", ["", "no versions here", "from to", "from 1.0.0 to"])
def test_odd_titles_never_raise(title):
    github = FakeGitHub()
    summary = run_pass(make_config(), [pr(1, title)], github, github)
    assert summary.for_pull_request(1).bump is VersionBump.NONE
