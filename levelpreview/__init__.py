"""
project: levelpreview
module: __init__.py
License: MIT

Flask application and environment-sourced configuration.

Configuration comes from environment variables (optionally supplied via a
`.env` file) with development defaults. The `instance/` directory holds
runtime files such as the rotating server log.
"""

import logging
import os
import uuid

from dotenv import load_dotenv
from flask import Flask, jsonify

from .dungeon.config import DEFAULT_SOURCE_ROOT

# Load .env if present so LEVELPREVIEW_SOURCE_ROOT etc. can be supplied
# without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # read-only installs still serve previews; only the file log is lost
    pass


def _env_int(key: str, default: int) -> int:
    try:
        return int(os.getenv(key, default))
    except ValueError:
        return default


app.config.update(
    SECRET_KEY=os.getenv("SECRET_KEY", "dev-secret-change-me"),
    LEVELPREVIEW_SOURCE_ROOT=os.getenv("LEVELPREVIEW_SOURCE_ROOT", DEFAULT_SOURCE_ROOT),
    LEVELPREVIEW_MAX_DIMENSION=_env_int("LEVELPREVIEW_MAX_DIMENSION", 200),
)

from .routes.preview_api import bp_preview  # noqa: E402

app.register_blueprint(bp_preview)


def create_app(**overrides):
    """Return the Flask app, applying any config overrides (tests pass these)."""
    if overrides:
        app.config.update(overrides)
    return app


@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal error", "error_id": error_id}), 500
