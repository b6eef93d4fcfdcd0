from __future__ import annotations

import json
import logging
import sys

import pytest

from regimen_compliance.logging import (
    ContextTextFormatter,
    JSONFormatter,
    record_context,
    setup_logging,
)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="regimen_compliance.activation",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="Overlapping activation windows on %s",
        args=("2026-02-02",),
        exc_info=None,
    )
    record.__dict__.update(extra)
    return record


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_record_context_strips_prefix_and_ignores_other_attributes() -> None:
    record = _record(compliance_client_id="c1", compliance_overlap_count=2, other="x")
    assert record_context(record) == {"client_id": "c1", "overlap_count": 2}


def test_json_formatter_nests_context() -> None:
    line = JSONFormatter().format(_record(compliance_client_id="c1", compliance_regimen_kind="meal"))
    entry = json.loads(line)

    assert entry["level"] == "WARNING"
    assert entry["logger"] == "regimen_compliance.activation"
    assert entry["message"] == "Overlapping activation windows on 2026-02-02"
    assert entry["context"] == {"client_id": "c1", "regimen_kind": "meal"}


def test_json_formatter_omits_empty_context() -> None:
    entry = json.loads(JSONFormatter().format(_record()))
    assert "context" not in entry


def test_json_formatter_includes_exception() -> None:
    try:
        raise ValueError("boom")
    except ValueError:
        record = _record()
        record.exc_info = sys.exc_info()

    entry = json.loads(JSONFormatter().format(record))
    assert "ValueError: boom" in entry["exception"]


def test_text_formatter_appends_context_pairs() -> None:
    line = ContextTextFormatter().format(_record(compliance_client_id="c1", compliance_unmatched_events=3))
    assert "Overlapping activation windows on 2026-02-02" in line
    assert line.endswith("[client_id=c1 unmatched_events=3]")


def test_setup_logging_replaces_root_handlers(restore_root_logger) -> None:
    root = restore_root_logger
    setup_logging("json", logging.DEBUG)
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)
    assert root.level == logging.DEBUG

    setup_logging("text")
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, ContextTextFormatter)


def test_setup_logging_rejects_unknown_format(restore_root_logger) -> None:
    with pytest.raises(ValueError, match="log_format"):
        setup_logging("xml")
