"""CLI entrypoint for the backport action."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from cherry_pick_backport import __version__
from cherry_pick_backport.backport import Backporter
from cherry_pick_backport.config import BackportSettings
from cherry_pick_backport.git import GitRunner
from cherry_pick_backport.github.client import GitHubClient
from cherry_pick_backport.logging import configure_logging, set_failed

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cherry-pick-backport",
        description=(
            "Cherry-pick the triggering commit onto the branch named by a "
            "'tests/<branch>' label of its closed pull request and open a backport PR"
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"cherry-pick-backport {__version__}"
    )
    parser.add_argument(
        "--workdir",
        default=None,
        help="Git working copy to operate on (defaults to BACKPORT_WORKDIR or the cwd)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (overrides LOG_LEVEL)",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        settings = BackportSettings()
    except ValidationError as e:
        # Logging isn't configured yet; keep it simple and actionable.
        print("Configuration error (check the action inputs):", file=sys.stderr)
        print(e, file=sys.stderr)
        return 2

    configure_logging(args.log_level or settings.log_level)

    workdir = Path(args.workdir) if args.workdir else settings.workdir

    try:
        github = GitHubClient(
            token=settings.token,
            repository=settings.github_repository,
            base_url=settings.github_api_url,
        )
        try:
            backporter = Backporter(
                settings=settings,
                github=github,
                git=GitRunner(cwd=workdir),
            )
            result = backporter.run()
        finally:
            github.close()

        logger.info(
            "Backport finished",
            extra={"outcome": result.outcome.value, "sha": result.sha},
        )
        if result.pull_request is not None:
            print(
                f"Opened pull request #{result.pull_request.number} "
                f"({result.working_branch} -> {result.target_branch})"
            )
        return 0

    except Exception as e:
        logger.exception("Backport failed")
        set_failed(str(e))
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
