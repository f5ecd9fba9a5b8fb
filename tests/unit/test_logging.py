"""Unit tests for structured logging and workflow commands."""

from __future__ import annotations

import io
import json
import logging

from cherry_pick_backport.logging import JsonFormatter, log_group, set_failed


def test_json_formatter_includes_extras() -> None:
    record = logging.LogRecord(
        name="cherry_pick_backport.git",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Tolerated git failure",
        args=(),
        exc_info=None,
    )
    record.git_args = ["cherry-pick", "-x", "abc123"]

    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "cherry_pick_backport.git"
    assert payload["message"] == "Tolerated git failure"
    assert payload["extra"] == {"git_args": ["cherry-pick", "-x", "abc123"]}


def test_log_group_wraps_block() -> None:
    stream = io.StringIO()

    with log_group("Cherry picking", stream=stream):
        stream.write("inside\n")

    assert stream.getvalue() == "::group::Cherry picking\ninside\n::endgroup::\n"


def test_set_failed_escapes_newlines() -> None:
    stream = io.StringIO()

    set_failed("Unexpected error:\nconflict in file.txt", stream=stream)

    assert stream.getvalue() == "::error::Unexpected error:%0Aconflict in file.txt\n"
