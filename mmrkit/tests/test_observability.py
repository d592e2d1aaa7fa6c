"""Tests for mmrkit logging setup."""

import json
import logging

from mmrkit.config import LoggingConfig
from mmrkit.observability import (
    ROOT_LOGGER,
    ContextAdapter,
    JSONFormatter,
    get_logger,
    setup_logging,
)


def _record(level=logging.INFO, **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="mmrkit.store",
        level=level,
        pathname=__file__,
        lineno=10,
        msg="Opened %s store",
        args=("file",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for structured log output."""

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "INFO"
        assert entry["logger"] == "mmrkit.store"
        assert entry["message"] == "Opened file store"
        assert entry["timestamp"].endswith("Z")
        assert "source" not in entry

    def test_timestamp_comes_from_record(self):
        record = _record()
        record.created = 0.0
        entry = json.loads(JSONFormatter().format(record))
        assert entry["timestamp"] == "1970-01-01T00:00:00.000000Z"

    def test_without_timestamps(self):
        entry = json.loads(JSONFormatter(include_timestamps=False).format(_record()))
        assert "timestamp" not in entry

    def test_context_included(self):
        entry = json.loads(JSONFormatter().format(_record(context={"size": 7})))
        assert entry["context"] == {"size": 7}

    def test_debug_includes_source(self):
        entry = json.loads(JSONFormatter().format(_record(level=logging.DEBUG)))
        assert entry["source"]["line"] == 10


class TestSetupLogging:
    """Tests for setup_logging() and get_logger()."""

    def test_json_console(self):
        logger = setup_logging(format="json", level="DEBUG")
        assert logger.name == ROOT_LOGGER
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_config_with_file(self, tmp_path):
        log_file = tmp_path / "mmrkit.log"
        config = LoggingConfig(level="WARNING", format="text", file=str(log_file))

        logger = setup_logging(config)
        assert logger.level == logging.WARNING
        assert len(logger.handlers) == 2

        logger.warning("disk nearly full")
        for handler in logger.handlers:
            handler.flush()
        assert "disk nearly full" in log_file.read_text()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging(level="INFO")
        logger = setup_logging(level="INFO")
        assert len(logger.handlers) == 1

    def test_get_logger_carries_context(self, caplog):
        log = get_logger("mmr", backend="memory")
        assert isinstance(log, ContextAdapter)
        assert log.logger.name == "mmrkit.mmr"

        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER):
            log.info("appended", extra={"context": {"pos": 4}})

        record = caplog.records[-1]
        assert record.context == {"backend": "memory", "pos": 4}

    def test_level_name_is_case_insensitive(self):
        logger = setup_logging(level="debug", format="text")
        assert logger.level == logging.DEBUG
        assert not isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_bound_context_does_not_leak_between_calls(self, caplog):
        log = get_logger("store", backend="file")
        extra = {"context": {"size": 1}}

        with caplog.at_level(logging.INFO, logger=ROOT_LOGGER):
            log.info("first", extra=extra)
            log.info("second")

        assert extra == {"context": {"size": 1}}
        assert caplog.records[-1].context == {"backend": "file"}
