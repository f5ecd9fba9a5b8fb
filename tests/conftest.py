"""Test configuration and fixtures."""

from __future__ import annotations

import subprocess
from collections.abc import Sequence

import pytest

from cherry_pick_backport import git as git_module
from cherry_pick_backport.config import BackportSettings

_ENV_VARS = (
    "INPUT_TOKEN",
    "INPUT_COMMITTER",
    "INPUT_AUTHOR",
    "INPUT_BRANCH",
    "INPUT_LABELS",
    "INPUT_ASSIGNEES",
    "INPUT_REVIEWERS",
    "INPUT_TEAMREVIEWERS",
    "INPUT_TITLE",
    "INPUT_BODY",
    "INPUT_LABEL_PREFIX",
    "GITHUB_SHA",
    "GITHUB_REPOSITORY",
    "GITHUB_API_URL",
    "LOG_LEVEL",
    "BACKPORT_WORKDIR",
    # Field names are accepted too, so keep them out of the environment.
    "TOKEN",
    "COMMITTER",
    "AUTHOR",
    "BRANCH",
    "LABELS",
    "ASSIGNEES",
    "REVIEWERS",
    "TEAM_REVIEWERS",
    "TITLE",
    "BODY",
    "LABEL_PREFIX",
    "WORKDIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep the runner's own GitHub Actions variables out of the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def settings() -> BackportSettings:
    """Provide settings for a commit that should be backported."""
    return BackportSettings(
        _env_file=None,
        token="test-token",
        github_repository="octo-org/octo-repo",
        github_sha="abc123",
        committer="Committer Bot <committer@example.com>",
        author="Jane Author <jane@example.com>",
        labels="backport",
        assignees=["alice"],
        reviewers="bob\ncarol",
        team_reviewers="",
    )


class FakeGit:
    """Records git invocations in place of `subprocess.run`.

    `results` maps a git subcommand (e.g. "cherry-pick") to (exit_code, stdout, stderr).
    """

    def __init__(self) -> None:
        self.calls: list[list[str]] = []
        self.results: dict[str, tuple[int, str, str]] = {}

    def __call__(self, cmd: Sequence[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        args = list(cmd[1:])
        self.calls.append(args)
        code, out, err = self.results.get(args[0], (0, "", ""))
        return subprocess.CompletedProcess(list(cmd), code, stdout=out, stderr=err)

    @property
    def subcommands(self) -> list[str]:
        return [c[0] for c in self.calls]


@pytest.fixture
def fake_git(monkeypatch: pytest.MonkeyPatch) -> FakeGit:
    """Replace subprocess execution for git with a recorder."""
    fake = FakeGit()
    monkeypatch.setattr(git_module.subprocess, "run", fake)
    monkeypatch.setattr(git_module.shutil, "which", lambda name: "/usr/bin/git")
    return fake
