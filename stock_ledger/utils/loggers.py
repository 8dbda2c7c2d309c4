# stock_ledger/utils/loggers.py
"""
Logging helpers.

- get_logger(): stderr logger with the app's line format, optionally mirrored
  as JSON lines to a file (config.LOG_FILE).
- log_event(): structured event line (op/phase + extra payload) for sale
  commits and rejections.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

__all__ = ["get_logger", "log_event"]


def get_logger(name: str = "stock_ledger", file_path: Optional[str] = None) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        logger.setLevel(logging.INFO)
        ch = logging.StreamHandler()
        ch.setFormatter(logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s"))
        logger.addHandler(ch)

        if file_path is None:
            from ..config import LOG_FILE
            file_path = LOG_FILE
        if file_path:
            log_file = Path(file_path)
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(str(log_file), mode="a", encoding="utf-8", delay=True)
            fh.setFormatter(_JsonLineFormatter())
            logger.addHandler(fh)
    return logger


class _JsonLineFormatter(logging.Formatter):
    """
    Minimal JSON-lines formatter:
      {"ts":"2026-01-16T12:00:01.123Z","level":"INFO","name":"stock_ledger.sales","msg":"...","extra":{...}}
    """
    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "ts": datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%f")[:-3] + "Z",
            "level": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        if hasattr(record, "extra_payload") and isinstance(record.extra_payload, dict):
            payload["extra"] = record.extra_payload
        return json.dumps(payload, ensure_ascii=False, default=str)


def log_event(
    logger: logging.Logger,
    op: str,
    phase: str,
    message: str,
    extra: Dict[str, object] | None = None,
    level: int = logging.INFO,
) -> None:
    """
    Log a structured event line.

    Args:
        logger: Obtained from get_logger().
        op: Operation name, e.g. "sale".
        phase: Phase within the operation, e.g. "rejected", "committed".
        message: Human-readable short message.
        extra: Optional additional key/values (ids, amounts, error type).
        level: Logging level (default INFO).
    """
    extra_payload = {"op": op, "phase": phase}
    if extra:
        # required keys win
        for k, v in extra.items():
            if k not in extra_payload:
                extra_payload[k] = v
    logger.log(level, message, extra={"extra_payload": extra_payload})
