"""GitHub API client wrapper.

This wraps PyGithub (and a plain REST session for the commit/pulls lookup) to keep
GitHub calls out of the orchestration code and make tests easy.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import requests
from github import Auth, Github
from github.Repository import Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssociatedPullRequest:
    """Minimal metadata of a pull request associated with a commit."""

    number: int
    state: str
    title: str
    labels: list[str] = field(default_factory=list)
    html_url: str | None = None


@dataclass(frozen=True, slots=True)
class PullRequestCreated:
    number: int
    url: str | None


class GitHubClient:
    """Small wrapper around PyGithub for the operations a backport needs."""

    def __init__(
        self,
        *,
        token: str,
        repository: str,
        base_url: str = "https://api.github.com",
        repo: Repository | None = None,
        github_api: Github | None = None,
    ) -> None:
        if not token:
            raise ValueError("GitHub token is required")
        if not repository:
            raise ValueError("GitHub repository is required")

        self._repository_name = repository.strip().strip("/")
        self._rest_base_url = base_url.rstrip("/")
        self._session = requests.Session()
        self._session.headers.update(
            {
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "cherry-pick-backport",
            }
        )

        if repo is not None:
            self._repo = repo
            self._github = None
            logger.debug("Using injected Repository instance")
            return

        auth = Auth.Token(token)
        self._github = github_api or Github(auth=auth, base_url=self._rest_base_url)

        # Lazy: no request is made until the repository is actually used.
        self._repo = self._github.get_repo(self._repository_name, lazy=True)

    @property
    def repository(self) -> str:
        """Return the configured repository name ("owner/repo")."""

        return self._repository_name

    def _repo_url(self, *, path: str) -> str:
        path = path.lstrip("/")
        base = f"{self._rest_base_url}/repos/{self._repository_name}"
        return f"{base}/{path}" if path else base

    def _get_paginated_json_list(self, url: str) -> list[dict[str, Any]]:
        """Fetch a REST endpoint that returns a JSON list, following basic pagination.

        Notes:
            Fetches up to 10 pages of 100 items each.

        Raises:
            ValueError: If a page is not a JSON list.
        """

        items: list[dict[str, Any]] = []
        per_page = 100
        for page in range(1, 11):
            resp = self._session.get(
                url,
                params={"per_page": per_page, "page": page},
                timeout=30,
            )
            resp.raise_for_status()
            payload = resp.json()
            if not isinstance(payload, list):
                raise ValueError(f"Unexpected response from {url}: expected a JSON list")

            page_items: list[dict[str, Any]] = [p for p in payload if isinstance(p, dict)]
            items.extend(page_items)

            if len(payload) < per_page:
                break
        return items

    @staticmethod
    def _parse_associated_pull_request(data: dict[str, Any]) -> AssociatedPullRequest | None:
        number = data.get("number")
        if not isinstance(number, int) or number <= 0:
            return None

        state = data.get("state")
        title = data.get("title")
        html_url = data.get("html_url")

        labels: list[str] = []
        raw_labels = data.get("labels")
        if isinstance(raw_labels, list):
            for label in raw_labels:
                name = label.get("name") if isinstance(label, dict) else None
                if isinstance(name, str) and name:
                    labels.append(name)

        return AssociatedPullRequest(
            number=number,
            state=state if isinstance(state, str) else "",
            title=title if isinstance(title, str) else "",
            labels=labels,
            html_url=html_url if isinstance(html_url, str) and html_url.strip() else None,
        )

    def list_pull_requests_for_commit(self, *, sha: str) -> list[AssociatedPullRequest]:
        """List pull requests associated with a commit, in the order GitHub returns them."""

        if not sha.strip():
            raise ValueError("sha is required")

        url = self._repo_url(path=f"commits/{sha}/pulls")
        raw = self._get_paginated_json_list(url)
        pulls = [p for p in (self._parse_associated_pull_request(d) for d in raw) if p]
        logger.info(
            "Associated pull requests fetched",
            extra={
                "repo": self._repository_name,
                "sha": sha,
                "pull_request_numbers": [p.number for p in pulls],
            },
        )
        return pulls

    def create_pull_request(
        self,
        *,
        title: str,
        body: str,
        head: str,
        base: str,
        labels: list[str] | None = None,
        assignees: list[str] | None = None,
        reviewers: list[str] | None = None,
        team_reviewers: list[str] | None = None,
    ) -> PullRequestCreated:
        """Open a pull request and decorate it with labels, assignees and reviewers.

        Each decoration is only requested when its list is non-empty.
        """

        if not head.strip():
            raise ValueError("head is required")
        if not base.strip():
            raise ValueError("base is required")

        logger.info(
            "Creating pull request",
            extra={"repo": self._repository_name, "head": head, "base": base, "title": title},
        )
        pr = self._repo.create_pull(title=title, body=body, head=head, base=base)

        if labels:
            pr.add_to_labels(*labels)
        if assignees:
            pr.add_to_assignees(*assignees)
        if reviewers or team_reviewers:
            pr.create_review_request(
                reviewers=reviewers or [],
                team_reviewers=team_reviewers or [],
            )

        html_url = getattr(pr, "html_url", None)
        if not isinstance(html_url, str) or not html_url.strip():
            html_url = None

        logger.info(
            "Pull request created",
            extra={
                "repo": self._repository_name,
                "pull_number": pr.number,
                "labels": labels or [],
                "assignees": assignees or [],
                "reviewers": reviewers or [],
                "team_reviewers": team_reviewers or [],
            },
        )
        return PullRequestCreated(number=pr.number, url=html_url)

    def close(self) -> None:
        self._session.close()
        if self._github is not None:
            self._github.close()
