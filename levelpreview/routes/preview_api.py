"""
project: levelpreview
module: preview_api.py
License: MIT

Level preview and vault listing endpoints.

GET /api/preview  seed, depth, width, height, branch, map, border
GET /api/vaults   branch
"""

import hashlib
import os
import threading

from flask import Blueprint, current_app, jsonify, request

from ..dungeon import ConfigError, SimulationConfig, get_simulator
from ..dungeon.config import DEFAULT_DEPTH, DEFAULT_HEIGHT, DEFAULT_SEED, DEFAULT_WIDTH
from ..logging_utils import get_logger

log = get_logger("levelpreview.api")

bp_preview = Blueprint("preview_api", __name__)

SEED_MAX_INT = 9223372036854775807

# Simple in-process cache config -> payload. Requests are served on worker threads.
_preview_cache = {}
_preview_cache_lock = threading.Lock()
_PREVIEW_CACHE_MAX = 8  # small LRU-ish manual cap


def _coerce_seed(raw):
    """Convert a query seed (int or str) into a bounded 63-bit int."""
    if raw is None:
        return DEFAULT_SEED
    if isinstance(raw, int):
        return raw % SEED_MAX_INT
    s = str(raw).strip()
    if not s:
        return DEFAULT_SEED
    if s.lstrip("-").isdigit():
        return int(s) % SEED_MAX_INT
    h = hashlib.sha256(s.encode("utf-8")).digest()
    return int.from_bytes(h[:8], "big") % SEED_MAX_INT


def _int_arg(name, default):
    raw = request.args.get(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def _flag_arg(name, default=True):
    raw = request.args.get(name)
    if raw is None:
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def _cache_key(config, border):
    return (str(config.source_root), config.depth, config.seed, config.width, config.height,
            config.branch, config.map_name, border)


def get_cached_preview(config, border=True):
    if os.environ.get("LEVELPREVIEW_DISABLE_CACHE") == "1":
        return get_simulator(config.source_root).simulate(config).to_dict(border)
    key = _cache_key(config, border)
    with _preview_cache_lock:
        payload = _preview_cache.get(key)
        if payload is not None:
            return payload
    payload = get_simulator(config.source_root).simulate(config).to_dict(border)
    with _preview_cache_lock:
        _preview_cache[key] = payload
        if len(_preview_cache) > _PREVIEW_CACHE_MAX:
            first_key = next(iter(_preview_cache.keys()))
            if first_key != key:
                _preview_cache.pop(first_key, None)
    return payload


def clear_preview_cache():
    with _preview_cache_lock:
        _preview_cache.clear()


@bp_preview.route("/api/preview")
def preview():
    """Simulate one level and return it as rows plus rendered text.

    Response: { seed, depth, width, height, provenance, attempts, exhausted, rows, text }
    """
    limit = current_app.config.get("LEVELPREVIEW_MAX_DIMENSION", 200)
    width = _int_arg("width", DEFAULT_WIDTH)
    height = _int_arg("height", DEFAULT_HEIGHT)
    if width > limit or height > limit:
        return jsonify({"error": f"width and height must be at most {limit}"}), 400
    try:
        config = SimulationConfig.build(
            current_app.config.get("LEVELPREVIEW_SOURCE_ROOT"),
            depth=_int_arg("depth", DEFAULT_DEPTH),
            seed=_coerce_seed(request.args.get("seed")),
            width=width,
            height=height,
            branch=request.args.get("branch"),
            map_name=request.args.get("map"),
        )
    except ConfigError as e:
        log.error(event="preview_config_error", error=str(e))
        return jsonify({"error": str(e)}), 500
    payload = get_cached_preview(config, _flag_arg("border"))
    return jsonify(payload)


@bp_preview.route("/api/vaults")
def vaults():
    """List the loaded vault library, optionally filtered by branch code."""
    source_root = current_app.config.get("LEVELPREVIEW_SOURCE_ROOT")
    if not source_root:
        return jsonify({"error": "source_root must be set"}), 500
    branch = (request.args.get("branch") or "").strip()
    code = branch.split(":")[0].upper() or None
    entries = [v.to_dict() for v in get_simulator(source_root).library if v.matches_branch(code)]
    return jsonify({"count": len(entries), "vaults": entries})
