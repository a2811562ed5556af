"""Minimal structured logging helper.

Emits one key=value line (or one JSON object) per event with a timestamp
and level, so CLI runs and server logs stay grep-able without pulling in
handler configuration for the library code.

Usage:
    from .logging_utils import get_logger
    log = get_logger("levelpreview.pipeline")
    log.debug(event="build_veto", attempt=3, stage="placement")

Environment:
    LEVELPREVIEW_LOG_LEVEL  debug | info | warn | error (default info)
    LEVELPREVIEW_LOG_JSON   1/true/yes/on for JSON lines

Non-numeric values are str()'d with spaces replaced by underscores in
key=value mode. Reserved keys: level, ts, logger.
"""

from __future__ import annotations

import json
import os
import sys
import time

LEVELS = {"debug": 10, "info": 20, "warn": 30, "error": 40}
_TRUTHY = ("1", "true", "TRUE", "yes", "on")

CURRENT_LEVEL = LEVELS.get(os.getenv("LEVELPREVIEW_LOG_LEVEL", "info").lower(), 20)
JSON_MODE = os.getenv("LEVELPREVIEW_LOG_JSON", "0") in _TRUTHY


def configure(level: str | None = None, json_mode: bool | None = None) -> None:
    """Override the level / output mode picked up from the environment."""
    global CURRENT_LEVEL, JSON_MODE
    if level is not None:
        CURRENT_LEVEL = LEVELS.get(level.lower(), CURRENT_LEVEL)
    if json_mode is not None:
        JSON_MODE = bool(json_mode)


def _format(level: str, **fields):
    if JSON_MODE:
        rec = {k: v for k, v in fields.items() if v is not None}
        rec["level"] = level
        rec["ts"] = int(time.time())
        try:
            return json.dumps(rec, separators=(",", ":"), default=str)
        except (TypeError, ValueError):
            return json.dumps({"level": level, "ts": int(time.time()), "error": "json_encode_failed"})
    parts = [f"level={level}", f"ts={int(time.time())}"]
    for k, v in fields.items():
        if v is None:
            continue
        if isinstance(v, (int, float)):
            parts.append(f"{k}={v}")
        else:
            s = str(v).replace(" ", "_")
            parts.append(f"{k}={s}")
    return " ".join(parts)


class _Logger:
    def __init__(self, name: str | None = None):
        self.name = name or "levelpreview"

    def _log(self, lvl: str, **fields):
        if LEVELS[lvl] < CURRENT_LEVEL:
            return
        if "logger" not in fields:
            fields["logger"] = self.name
        print(_format(lvl, **fields), file=sys.stderr if LEVELS[lvl] >= LEVELS["warn"] else sys.stdout)

    def debug(self, **fields):
        self._log("debug", **fields)

    def info(self, **fields):
        self._log("info", **fields)

    def warn(self, **fields):
        self._log("warn", **fields)

    def error(self, **fields):
        self._log("error", **fields)


_LOGGER_CACHE = {}


def get_logger(name: str):
    if name not in _LOGGER_CACHE:
        _LOGGER_CACHE[name] = _Logger(name)
    return _LOGGER_CACHE[name]


log = get_logger("levelpreview")
