"""
Logging setup shared by the entry points (run_all, webapp, validation).

Engine modules only call logging.getLogger(__name__); handlers are attached
once here. Defaults: a single stderr StreamHandler at the level from
mission_settings.LOG_LEVEL.

Env options:
- MISSION_ENGINE_LOG_LEVEL=DEBUG|INFO|WARNING|ERROR (overrides LOG_LEVEL)
- MISSION_ENGINE_LOG_JSON=1 (one JSON object per line)
"""

from __future__ import annotations

import json
import logging
import os
import sys
from typing import Optional

_INITIALIZED = False

LOG_FORMAT = "%(asctime)s %(levelname)s [%(service)s] %(name)s: %(message)s"


class _ServiceFilter(logging.Filter):
    def __init__(self, service: str):
        super().__init__()
        self.service = service

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "service"):
            record.service = self.service
        return True


class _JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "name": record.name,
            "service": getattr(record, "service", ""),
            "message": record.getMessage(),
        }
        return json.dumps(payload, ensure_ascii=False)


def _get_level(default: str) -> int:
    level = os.getenv("MISSION_ENGINE_LOG_LEVEL", default).upper()
    return getattr(logging, level, logging.INFO)


def setup_logging(service: str, level: Optional[str] = None, json_format: Optional[bool] = None) -> None:
    """Attach the stderr handler to the root logger. Safe to call more than once."""
    global _INITIALIZED
    if _INITIALIZED:
        return

    from src.mission_settings import LOG_LEVEL

    root = logging.getLogger()
    root.setLevel(_get_level(level or LOG_LEVEL))

    if json_format is None:
        json_format = os.getenv("MISSION_ENGINE_LOG_JSON", "0") == "1"

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(_ServiceFilter(service))
    handler.setFormatter(_JSONFormatter() if json_format else logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _INITIALIZED = True
