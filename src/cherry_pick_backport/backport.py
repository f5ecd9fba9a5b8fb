"""Backport orchestration.

One run resolves the triggering commit, finds its closed pull request, derives
the target branch from a `tests/<branch>` label, replays the commit onto a new
branch and opens a pull request against the target branch.

Selection policy: pull requests and labels are taken in the order GitHub returns
them and the first match wins. GitHub does not guarantee that order, so a commit
with several closed pull requests (or several prefixed labels) may resolve
differently between runs.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum

from cherry_pick_backport.config import BackportSettings, render_template
from cherry_pick_backport.git import FailurePredicate, GitRunner, tolerate_empty_cherry_pick
from cherry_pick_backport.github.client import (
    AssociatedPullRequest,
    GitHubClient,
    PullRequestCreated,
)
from cherry_pick_backport.identity import parse_display_name_email
from cherry_pick_backport.logging import log_group

logger = logging.getLogger(__name__)

CLOSED_STATE = "closed"
DEFAULT_LABEL_PREFIX = "tests/"


class BackportOutcome(str, Enum):
    NO_COMMIT = "no_commit"
    NO_PULL_REQUESTS = "no_pull_requests"
    NO_CLOSED_PULL_REQUEST = "no_closed_pull_request"
    NO_TARGET_LABEL = "no_target_label"
    CREATED = "created"


@dataclass(frozen=True, slots=True)
class BackportResult:
    outcome: BackportOutcome
    sha: str | None = None
    source_pull_number: int | None = None
    target_branch: str | None = None
    working_branch: str | None = None
    pull_request: PullRequestCreated | None = None


def select_closed_pull_request(
    pulls: Iterable[AssociatedPullRequest],
) -> AssociatedPullRequest | None:
    for pr in pulls:
        if pr.state == CLOSED_STATE:
            return pr
    return None


def target_branch_from_labels(
    labels: Iterable[str], *, prefix: str = DEFAULT_LABEL_PREFIX
) -> str | None:
    """Return the suffix of the first label starting with `prefix`, or None."""

    for name in labels:
        if name.startswith(prefix):
            return name[len(prefix) :]
    return None


def working_branch_name(target_branch: str, sha: str) -> str:
    return f"cherry-pick-{target_branch}-{sha}"


class Backporter:
    """Runs the backport protocol once for the configured commit."""

    def __init__(
        self,
        *,
        settings: BackportSettings,
        github: GitHubClient,
        git: GitRunner,
        tolerate: FailurePredicate = tolerate_empty_cherry_pick,
    ) -> None:
        self._settings = settings
        self._github = github
        self._git = git
        self._tolerate = tolerate

    def run(self) -> BackportResult:
        settings = self._settings
        sha = settings.github_sha
        logger.info(
            "Cherry pick requested",
            extra={
                "repo": self._github.repository,
                "branch": settings.branch,
                "sha": sha or None,
            },
        )
        if not sha:
            logger.info("No triggering commit; nothing to do")
            return BackportResult(outcome=BackportOutcome.NO_COMMIT)

        pulls = self._github.list_pull_requests_for_commit(sha=sha)
        logger.info("Associated pull requests", extra={"count": len(pulls)})
        if not pulls:
            return BackportResult(outcome=BackportOutcome.NO_PULL_REQUESTS, sha=sha)

        source = select_closed_pull_request(pulls)
        if source is None:
            logger.info("No closed pull request associated with commit", extra={"sha": sha})
            return BackportResult(outcome=BackportOutcome.NO_CLOSED_PULL_REQUEST, sha=sha)

        logger.info(
            "Source pull request labels",
            extra={"pull_number": source.number, "labels": source.labels},
        )
        target = target_branch_from_labels(source.labels, prefix=settings.label_prefix)
        if target is None:
            logger.info(
                "No target branch label", extra={"prefix": settings.label_prefix}
            )
            return BackportResult(
                outcome=BackportOutcome.NO_TARGET_LABEL,
                sha=sha,
                source_pull_number=source.number,
            )

        branch = working_branch_name(target, sha)

        with log_group("Configuring the committer and author"):
            author = parse_display_name_email(settings.author)
            committer = parse_display_name_email(settings.committer)
            logger.info(f"Configured git committer as '{committer}'")
            # user.name comes from the author and user.email from the committer.
            self._git.configure_identity(name=author.name, email=committer.email)

        with log_group("Fetch all branches"):
            self._git.fetch_all()

        with log_group(f"Create new branch from {target}"):
            self._git.checkout_new_branch(branch=branch, start_point=f"origin/{target}")

        self._git.log_oneline()

        with log_group("Cherry picking"):
            self._git.cherry_pick(sha, tolerate=self._tolerate)

        with log_group("Push new branch to remote"):
            self._git.push_upstream(branch)

        with log_group("Opening pull request"):
            values = {
                "branch": target,
                "title": source.title,
                "number": source.number,
                "sha": sha,
            }
            created = self._github.create_pull_request(
                title=render_template(settings.title, **values),
                body=render_template(settings.body, **values),
                head=branch,
                base=target,
                labels=_non_empty(settings.labels),
                assignees=_non_empty(settings.assignees),
                reviewers=_non_empty(settings.reviewers),
                team_reviewers=_non_empty(settings.team_reviewers),
            )

        logger.info(
            "Backport pull request opened",
            extra={
                "source_pull_number": source.number,
                "pull_number": created.number,
                "url": created.url,
                "base": target,
                "head": branch,
            },
        )
        return BackportResult(
            outcome=BackportOutcome.CREATED,
            sha=sha,
            source_pull_number=source.number,
            target_branch=target,
            working_branch=branch,
            pull_request=created,
        )


def _non_empty(values: Sequence[str]) -> list[str] | None:
    return list(values) or None
