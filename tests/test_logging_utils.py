import json
from pathlib import Path

import pytest

from levelpreview import logging_utils
from levelpreview.logging_utils import configure, get_logger


@pytest.fixture(autouse=True)
def _restore_logging():
    level, json_mode = logging_utils.CURRENT_LEVEL, logging_utils.JSON_MODE
    yield
    logging_utils.CURRENT_LEVEL, logging_utils.JSON_MODE = level, json_mode


def test_key_value_line(capsys):
    configure("info", json_mode=False)
    get_logger("levelpreview.test").info(event="build ok", attempt=3, skipped=None)
    line = capsys.readouterr().out.strip()
    assert line.startswith("level=info ts=")
    assert "event=build_ok" in line
    assert "attempt=3" in line
    assert "logger=levelpreview.test" in line
    assert "skipped" not in line


def test_level_threshold(capsys):
    configure("info", json_mode=False)
    log = get_logger("levelpreview.test")
    log.debug(event="hidden")
    assert capsys.readouterr().out == ""
    configure("debug")
    log.debug(event="shown")
    assert "event=shown" in capsys.readouterr().out


def test_warnings_go_to_stderr(capsys):
    configure("info", json_mode=False)
    get_logger("levelpreview.test").warn(event="vault_file_skipped")
    captured = capsys.readouterr()
    assert captured.out == ""
    assert "level=warn" in captured.err


def test_json_mode(capsys):
    configure("debug", json_mode=True)
    get_logger("levelpreview.test").debug(event="loaded", path=Path("dat/des"), count=2, missing=None)
    rec = json.loads(capsys.readouterr().out)
    assert rec["level"] == "debug"
    assert rec["logger"] == "levelpreview.test"
    assert rec["path"] == str(Path("dat/des"))
    assert rec["count"] == 2
    assert "missing" not in rec


def test_unknown_level_keeps_current():
    configure("warn")
    configure("loud")
    assert logging_utils.CURRENT_LEVEL == logging_utils.LEVELS["warn"]


def test_loggers_are_cached():
    assert get_logger("levelpreview.a") is get_logger("levelpreview.a")
    assert get_logger("levelpreview.a") is not get_logger("levelpreview.b")
