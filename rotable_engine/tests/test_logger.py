"""Tests for logging and reporting helpers."""

import json
import logging

from rotable_engine.config import EngineSettings
from rotable_engine.logger import generate_run_report, setup_run_logging
from rotable_engine.utils import clamp, format_cost


def test_format_cost_uses_european_separators():
    assert format_cost(12345.67) == "12.345,67"
    assert format_cost(123.45) == "123,45"


def test_clamp():
    assert clamp(5, 0, 1) == 1
    assert clamp(-5, 0, 1) == 0
    assert clamp(0.5, 0, 1) == 0.5


def test_generate_run_report_writes_json_and_text(tmp_path):
    summary = {
        "calibration": {"confidence": 0.5, "warnings": ["No aircraft data - using default demand estimates"]},
        "economy_load_factor": 0.73,
        "adaptive": {"mode": "balanced", "economy_unfulfilled_cost": 1234.5, "hot_airports": ["ZRH"]},
    }

    generate_run_report(summary, str(tmp_path / "report"))

    assert json.loads((tmp_path / "report.json").read_text()) == summary
    text = (tmp_path / "report.txt").read_text()
    assert "Economy unfulfilled cost: 1.234,50" in text
    assert "Hot airports: ZRH" in text
    assert "No aircraft data" in text


def test_setup_run_logging_uses_settings(tmp_path):
    settings = EngineSettings(
        _env_file=None,
        LOG_LEVEL="DEBUG",
        LOG_FILE=str(tmp_path / "engine.log"),
        JOURNAL_FILE=str(tmp_path / "journal" / "adaptation.jsonl"),
    )
    root_logger = logging.getLogger()
    handlers_before = list(root_logger.handlers)
    level_before = root_logger.level

    try:
        with setup_run_logging(settings) as journal:
            journal.log_event("daily_snapshot", 1, {"total_overflow": 0.0})
            logging.getLogger("rotable_engine.test").debug("journal opened")
    finally:
        for handler in root_logger.handlers:
            if handler not in handlers_before:
                handler.close()
        root_logger.handlers = handlers_before
        root_logger.setLevel(level_before)

    assert "journal opened" in (tmp_path / "engine.log").read_text()
    entry = json.loads((tmp_path / "journal" / "adaptation.jsonl").read_text())
    assert entry["kind"] == "daily_snapshot"
    assert entry["day"] == 1
