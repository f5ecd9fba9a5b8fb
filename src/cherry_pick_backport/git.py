"""Thin wrapper around the `git` executable.

Every command runs in an explicit working copy (`cwd`) and yields a `GitOutput`.
Non-zero exits raise `GitCommandError` unless a failure predicate accepts them.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

CHERRY_PICK_EMPTY_MESSAGE = (
    "The previous cherry-pick is now empty, possibly due to conflict resolution."
)


@dataclass(frozen=True, slots=True)
class GitOutput:
    exit_code: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_code == 0


FailurePredicate = Callable[[GitOutput], bool]


def stderr_contains(text: str) -> FailurePredicate:
    """Return a predicate accepting failures whose stderr contains `text`."""

    def _predicate(output: GitOutput) -> bool:
        return text in output.stderr

    return _predicate


tolerate_empty_cherry_pick: FailurePredicate = stderr_contains(CHERRY_PICK_EMPTY_MESSAGE)


class GitError(RuntimeError):
    """Base class for git failures."""


class GitNotFoundError(GitError):
    """Raised when the git executable cannot be located."""


class GitWorkdirError(GitError):
    """Raised when the working copy directory does not exist."""


class GitCommandError(GitError):
    """Raised when a git command exits non-zero and the failure is not tolerated."""

    def __init__(self, args: Sequence[str], output: GitOutput) -> None:
        self.command = list(args)
        self.output = output
        super().__init__(
            f"git {' '.join(self.command)} failed with exit code {output.exit_code}: "
            f"{output.stderr.strip()}"
        )


class GitRunner:
    """Runs git commands in a single working copy."""

    def __init__(self, *, cwd: Path | None = None, git_path: str | None = None) -> None:
        self.cwd = cwd
        self._git_path = git_path

    def _resolve_git(self) -> str:
        if self._git_path:
            return self._git_path
        path = shutil.which("git")
        if path is None:
            raise GitNotFoundError("Unable to locate executable file: git")
        return path

    def run(self, args: Sequence[str], *, tolerate: FailurePredicate | None = None) -> GitOutput:
        """Run `git <args>` and capture its output.

        Args:
            args: Arguments passed to git.
            tolerate: Optional predicate; a non-zero exit it accepts is returned
                instead of raised.

        Raises:
            GitNotFoundError: If git is not installed.
            GitWorkdirError: If `cwd` is not an existing directory.
            GitCommandError: On a non-zero exit that is not tolerated.
        """

        git = self._resolve_git()
        if self.cwd is not None and not Path(self.cwd).is_dir():
            raise GitWorkdirError(f"Working directory does not exist: {self.cwd}")
        try:
            completed = subprocess.run(
                [git, *args],
                cwd=self.cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitNotFoundError(f"Unable to run git at {git}: {e}") from e

        output = GitOutput(
            exit_code=completed.returncode,
            stdout=completed.stdout or "",
            stderr=completed.stderr or "",
        )

        if output.ok:
            logger.info(output.stdout.strip(), extra={"git_args": list(args)})
            return output

        logger.info(
            output.stderr.strip(),
            extra={"git_args": list(args), "exit_code": output.exit_code},
        )
        if tolerate is not None and tolerate(output):
            logger.warning(
                "Tolerated git failure",
                extra={"git_args": list(args), "exit_code": output.exit_code},
            )
            return output
        raise GitCommandError(args, output)

    def configure_identity(self, *, name: str, email: str) -> None:
        """Set the global git user name and email.

        This writes to the user's global git configuration and persists after the run.
        """

        self.run(["config", "--global", "user.name", name])
        self.run(["config", "--global", "user.email", email])

    def fetch_all(self) -> None:
        self.run(["remote", "update"])
        self.run(["fetch", "--all"])

    def checkout_new_branch(self, *, branch: str, start_point: str) -> None:
        self.run(["checkout", "-b", branch, start_point])

    def log_oneline(self) -> GitOutput:
        return self.run(["log", "--oneline"])

    def cherry_pick(self, sha: str, *, tolerate: FailurePredicate | None = None) -> GitOutput:
        return self.run(["cherry-pick", "-x", sha], tolerate=tolerate)

    def push_upstream(self, branch: str, *, remote: str = "origin") -> None:
        self.run(["push", "-u", remote, branch])
