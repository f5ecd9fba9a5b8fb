"""Configuration for the backport action.

Configuration is loaded from:
- the GitHub Actions environment (`GITHUB_SHA`, `GITHUB_REPOSITORY`, ...)
- action inputs, which the runner exposes as `INPUT_<NAME>` variables
- and a local `.env` file (if present)
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Annotated, Any

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

_LIST_SEPARATORS = re.compile(r"[\n,]+")

DEFAULT_COMMITTER = "GitHub <noreply@github.com>"
DEFAULT_AUTHOR = (
    "github-actions[bot] <41898282+github-actions[bot]@users.noreply.github.com>"
)
DEFAULT_TITLE = "cherry-pick({branch}): {title}"
DEFAULT_BODY = "Cherry picked from #{number} (commit {sha})."


def split_input_list(value: Any) -> list[str]:
    """Split a comma/newline delimited action input into a list.

    Blank entries are dropped; order is kept as supplied.
    """

    if value is None:
        return []
    if isinstance(value, str):
        parts = _LIST_SEPARATORS.split(value)
    else:
        parts = [str(v) for v in value]
    return [p.strip() for p in parts if p.strip()]


class _KeepMissing(dict[str, Any]):
    def __missing__(self, key: str) -> str:
        return "{" + key + "}"


def render_template(template: str, **values: Any) -> str:
    """Fill `{placeholder}` fields; unknown placeholders are left as written."""

    return template.format_map(_KeepMissing(values))


class BackportSettings(BaseSettings):
    """Settings for a single backport run.

    Environment variables:
    - INPUT_TOKEN, INPUT_COMMITTER, INPUT_AUTHOR, INPUT_BRANCH
    - INPUT_LABELS, INPUT_ASSIGNEES, INPUT_REVIEWERS, INPUT_TEAMREVIEWERS
    - INPUT_TITLE, INPUT_BODY, INPUT_LABEL_PREFIX   (optional)
    - GITHUB_SHA, GITHUB_REPOSITORY, GITHUB_API_URL
    - LOG_LEVEL, BACKPORT_WORKDIR                     (optional)

    Notes:
        `BackportSettings(_env_file=path)` overrides the env file in tests.
    """

    token: str = Field(
        default="",
        validation_alias="INPUT_TOKEN",
        description="GitHub token used for API authentication",
    )
    committer: str = Field(
        default=DEFAULT_COMMITTER,
        validation_alias="INPUT_COMMITTER",
        description="Committer identity in the form 'Name <email>'",
    )
    author: str = Field(
        default=DEFAULT_AUTHOR,
        validation_alias="INPUT_AUTHOR",
        description="Author identity in the form 'Name <email>'",
    )
    branch: str = Field(
        default="",
        validation_alias="INPUT_BRANCH",
        description="Placeholder target branch; replaced by the label-derived branch",
    )

    labels: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias="INPUT_LABELS",
        description="Labels applied to the created pull request",
    )
    assignees: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias="INPUT_ASSIGNEES",
        description="Assignees of the created pull request",
    )
    reviewers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias="INPUT_REVIEWERS",
        description="Reviewers requested on the created pull request",
    )
    team_reviewers: Annotated[list[str], NoDecode] = Field(
        default_factory=list,
        validation_alias="INPUT_TEAMREVIEWERS",
        description="Team reviewers requested on the created pull request",
    )

    title: str = Field(
        default=DEFAULT_TITLE,
        validation_alias="INPUT_TITLE",
        description="Title template; placeholders: branch, title, number, sha",
    )
    body: str = Field(
        default=DEFAULT_BODY,
        validation_alias="INPUT_BODY",
        description="Body template; placeholders: branch, title, number, sha",
    )
    label_prefix: str = Field(
        default="tests/",
        validation_alias="INPUT_LABEL_PREFIX",
        description="Label prefix that selects the target branch",
    )

    github_sha: str = Field(
        default="",
        validation_alias="GITHUB_SHA",
        description="Commit that triggered the run",
    )
    github_repository: str = Field(
        default="",
        validation_alias="GITHUB_REPOSITORY",
        description="Repository in the form 'owner/repo'",
    )
    github_api_url: str = Field(
        default="https://api.github.com",
        validation_alias="GITHUB_API_URL",
        description="GitHub API base URL (useful for GitHub Enterprise)",
    )

    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Root logging level",
    )
    workdir: Path | None = Field(
        default=None,
        validation_alias="BACKPORT_WORKDIR",
        description="Working copy the git commands run in (defaults to cwd)",
    )

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("labels", "assignees", "reviewers", "team_reviewers", mode="before")
    @classmethod
    def _split_lists(cls, value: Any) -> list[str]:
        return split_input_list(value)

    @field_validator("title", "body")
    @classmethod
    def _check_template(cls, value: str) -> str:
        try:
            render_template(value, branch="branch", title="title", number=1, sha="sha")
        except (ValueError, KeyError, IndexError, AttributeError, TypeError) as e:
            raise ValueError(f"invalid template {value!r}: {e}") from e
        return value

    @field_validator("github_sha", mode="before")
    @classmethod
    def _strip_sha(cls, value: Any) -> str:
        return (value or "").strip()

    @model_validator(mode="after")
    def _require_github_context(self) -> BackportSettings:
        if not self.token.strip():
            raise ValueError("INPUT_TOKEN is required")
        owner, _, name = self.github_repository.strip().strip("/").partition("/")
        if not owner or not name:
            raise ValueError("GITHUB_REPOSITORY must be in the form 'owner/repo'")
        if not self.label_prefix:
            raise ValueError("INPUT_LABEL_PREFIX must be non-empty")
        return self
