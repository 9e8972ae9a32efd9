import json
import logging
from pathlib import Path

from contact_intel.config import LoggingConfig
from contact_intel.errors import ScoringError
from contact_intel.logging_utils import JsonlFormatter, log_event, log_item_failure, setup_logging


def test_jsonl_formatter_includes_extra_fields():
    record = logging.LogRecord("contact_intel", logging.INFO, __file__, 1, "Batch loaded", None, None)
    record.event = "batch_loaded"
    record.contacts = 3

    payload = json.loads(JsonlFormatter().format(record))

    assert payload["message"] == "Batch loaded"
    assert payload["event"] == "batch_loaded"
    assert payload["contacts"] == 3
    assert payload["level"] == "INFO"


def test_setup_logging_writes_run_log(tmp_path: Path):
    logger = setup_logging(LoggingConfig(console=False), tmp_path)

    log_event(logger, "Pipeline start", event="pipeline_start", sources=2)
    log_item_failure(logger, "Skipped contact", ScoringError("bad title", contact_id="c4"), event="item_skipped", item="c4")
    for handler in logger.handlers:
        handler.flush()

    lines = (tmp_path / "run.jsonl").read_text(encoding="utf-8").splitlines()
    first, second = (json.loads(line) for line in lines)
    assert first["event"] == "pipeline_start"
    assert first["sources"] == 2
    assert second["level"] == "WARNING"
    assert second["item"] == "c4"
    assert second["error"] == "bad title"


def test_log_event_without_logger_is_noop():
    log_event(None, "ignored", event="nothing")
