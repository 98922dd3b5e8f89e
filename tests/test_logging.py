# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Tests for structured logging helpers."""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from io import StringIO

import pytest

from delimitedio.logging import (
    StructuredLogger,
    _coerce_level,
    configure_logging,
    get_logger,
)


class _CaptureHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__()
        self.records: list[logging.LogRecord] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.records.append(record)


@contextmanager
def _capture(logger: logging.Logger) -> Iterator[list[logging.LogRecord]]:
    handler = _CaptureHandler()
    logger.addHandler(handler)
    try:
        yield handler.records
    finally:
        logger.removeHandler(handler)
        handler.close()


@pytest.fixture(autouse=True)
def reset_logging_state(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    monkeypatch.delenv("DELIMITEDIO_LOG_LEVEL", raising=False)
    monkeypatch.delenv("DELIMITEDIO_LOG_FORMAT", raising=False)
    root = logging.getLogger()
    original_handlers = list(root.handlers)
    original_level = root.level
    try:
        yield
    finally:
        for handler in root.handlers:
            if handler not in original_handlers:
                handler.close()
        root.handlers = original_handlers
        root.setLevel(original_level)


def test_bound_context_is_merged_into_records() -> None:
    logger = get_logger("tests.logging.bind").bind(source="events.log")
    logger.logger.setLevel(logging.DEBUG)

    with _capture(logger.logger) as records:
        logger.debug(
            "fixed", event="reader.delimiter.detected", context={"delimiter": b"\n"}
        )

    assert len(records) == 1
    record = records[0]
    assert record.event == "reader.delimiter.detected"  # type: ignore[attr-defined]
    assert record.context == {  # type: ignore[attr-defined]
        "source": "events.log",
        "delimiter": b"\n",
    }


def test_bind_does_not_mutate_parent() -> None:
    parent = get_logger("tests.logging.parent", context={"command": "records"})

    child = parent.bind(input="-")

    assert parent.extra == {"command": "records"}
    assert child.extra == {"command": "records", "input": "-"}
    assert isinstance(child, StructuredLogger)
    assert child.logger is parent.logger


def test_extra_keys_fold_into_context() -> None:
    logger = get_logger("tests.logging.extra")
    logger.logger.setLevel(logging.INFO)

    with _capture(logger.logger) as records:
        logger.info("no-extra", event="tests.none", extra=None)
        logger.info("with-extra", extra={"event": "tests.extra", "records": 2})

    assert [r.event for r in records] == ["tests.none", "tests.extra"]  # type: ignore[attr-defined]
    assert records[0].context == {}  # type: ignore[attr-defined]
    assert records[1].context == {"records": 2}  # type: ignore[attr-defined]


def test_event_is_required() -> None:
    logger = get_logger("tests.logging.missing")
    logger.logger.setLevel(logging.INFO)

    with pytest.raises(TypeError, match="event"):
        logger.info("missing-event", extra={"detail": True})


def test_context_must_be_a_mapping() -> None:
    logger = get_logger("tests.logging.context")
    logger.logger.setLevel(logging.INFO)

    with pytest.raises(TypeError, match="context"):
        logger.info("bad", event="tests.bad", context=["not", "a", "mapping"])


def test_configure_logging_respects_existing_handlers() -> None:
    root = logging.getLogger()
    root_handler = logging.NullHandler()
    root.handlers = [root_handler]

    configure_logging(level="DEBUG", json_mode=True)

    assert root.handlers == [root_handler]
    assert root.level == logging.DEBUG


def test_configure_logging_reads_environment() -> None:
    configure_logging(
        force=True,
        env={"DELIMITEDIO_LOG_FORMAT": "JSON", "DELIMITEDIO_LOG_LEVEL": "warning"},
    )

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert root.handlers[0].formatter.__class__.__name__ == "_JsonFormatter"
    assert root.level == logging.WARNING


def test_json_mode_emits_one_object_per_record(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    stream = StringIO()
    monkeypatch.setattr(sys, "stderr", stream)

    configure_logging(json_mode=True, force=True)
    logger = get_logger("tests.logging.json").bind(source="<stdin>")
    logger.info(
        "done", event="cli.records.done", context={"records": 3, "raw": b"\r\n"}
    )
    logging.getLogger().handlers[0].flush()

    payload = json.loads(stream.getvalue().strip())
    assert payload["event"] == "cli.records.done"
    assert payload["level"] == "INFO"
    assert payload["logger"] == "tests.logging.json"
    assert payload["message"] == "done"
    assert payload["context"] == {
        "source": "<stdin>",
        "records": 3,
        "raw": repr(b"\r\n"),
    }


def test_json_formatter_renders_exceptions() -> None:
    configure_logging(json_mode=True, force=True)
    handler = logging.getLogger().handlers[0]

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        exc_info = sys.exc_info()

    record = logging.getLogger().makeRecord(
        "tests.logging.exc",
        logging.ERROR,
        __file__,
        0,
        "failed",
        (),
        exc_info,
        extra={"event": "tests.error", "context": {}},
    )
    payload = json.loads(handler.format(record))

    assert "RuntimeError: boom" in payload["exc_info"]
    assert "context" not in payload


def test_text_formatter_tolerates_plain_records(
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    stream = StringIO()
    monkeypatch.setattr(sys, "stderr", stream)

    configure_logging(force=True)
    logging.getLogger("tests.logging.plain").warning("third-party message")
    logging.getLogger().handlers[0].flush()

    line = stream.getvalue().strip()
    assert "WARNING tests.logging.plain - third-party message {}" in line


def test_configure_logging_accepts_integer_level() -> None:
    configure_logging(level=logging.ERROR, force=True)

    assert logging.getLogger().level == logging.ERROR


def test_coerce_level() -> None:
    assert _coerce_level(None) == logging.INFO
    assert _coerce_level("debug") == logging.DEBUG
    assert _coerce_level(5) == 5
    with pytest.raises(TypeError, match="verbose"):
        _coerce_level("verbose")
