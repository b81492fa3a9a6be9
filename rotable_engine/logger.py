"""Logging setup, the adaptation journal and the end-of-run report."""

import json
import logging
import logging.handlers
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from .config import EngineSettings
from .utils import format_cost

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5
REPORT_RULE = "=" * 80


def configure_logging(level: str = "INFO", log_file: str = "engine.log") -> None:
    """
    Attach a console handler and a rotating file handler to the root logger.

    Args:
        level: Level name (DEBUG, INFO, WARNING, ERROR); unknown names mean INFO
        log_file: File the rotating handler writes to
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(LOG_FORMAT)

    handlers = [
        logging.StreamHandler(),
        logging.handlers.RotatingFileHandler(
            log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
        ),
    ]

    root = logging.getLogger()
    root.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root.addHandler(handler)


class JSONLogger:
    """JSON-lines journal of adaptation events for machine parsing."""

    def __init__(self, log_file: str = "adaptation.jsonl"):
        """
        Open (append mode) the journal file, creating parent directories.

        Args:
            log_file: Path of the .jsonl journal
        """
        self.path = Path(log_file)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._stream = self.path.open("a", encoding="utf-8")

    def log_event(self, kind: str, day: int, payload: Dict[str, Any]) -> None:
        """
        Append one journal entry and flush it.

        Args:
            kind: Entry type, e.g. "daily_snapshot" or "load_factor_adjustment"
            day: Simulated day the entry refers to
            payload: JSON-serializable details
        """
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "kind": kind,
            "day": day,
            "payload": payload,
        }
        self._stream.write(json.dumps(entry) + "\n")
        self._stream.flush()

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "JSONLogger":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def generate_run_report(summary: Dict, output_path: str) -> None:
    """
    Write an end-of-run report of the engine's state.

    Args:
        summary: Output of EngineSession.summary()
        output_path: Report path; written twice, with .json and .txt suffixes
    """
    base = Path(output_path)
    base.parent.mkdir(parents=True, exist_ok=True)

    json_path = base.with_suffix(".json")
    json_path.write_text(json.dumps(summary, indent=2, default=str))

    adaptive = summary.get("adaptive", {})
    calibration = summary.get("calibration", {})
    hot_airports = ", ".join(adaptive.get("hot_airports", [])) or "-"

    lines = [
        REPORT_RULE,
        "ROTABLE ENGINE RUN REPORT",
        REPORT_RULE,
        "",
        f"Calibration confidence: {calibration.get('confidence', 0.0):.2f}",
        f"Economy load factor: {summary.get('economy_load_factor', 0.0):.2f}",
        f"Strategy mode: {adaptive.get('mode', 'balanced')}",
        f"Economy unfulfilled cost: {format_cost(adaptive.get('economy_unfulfilled_cost', 0.0))}",
        f"Total overflow cost: {format_cost(adaptive.get('total_overflow_cost', 0.0))}",
        f"Hot airports: {hot_airports}",
        "",
        "Calibration warnings:",
    ]
    lines += [f"  {warning}" for warning in calibration.get("warnings", [])]
    lines += ["", REPORT_RULE]

    text_path = base.with_suffix(".txt")
    text_path.write_text("\n".join(lines) + "\n")

    logging.getLogger(__name__).info(f"Run report written to {json_path} and {text_path}")


def setup_run_logging(settings: EngineSettings) -> JSONLogger:
    """
    Configure logging from settings and open the adaptation journal.

    Args:
        settings: Engine settings (LOG_LEVEL, LOG_FILE, JOURNAL_FILE)

    Returns:
        JSONLogger to pass to EngineSession; the caller closes it
    """
    configure_logging(settings.LOG_LEVEL, settings.LOG_FILE)
    return JSONLogger(settings.JOURNAL_FILE)
