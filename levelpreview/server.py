"""
project: levelpreview
module: server.py
License: MIT

Server bootstrap for the preview API.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from . import app
from .dungeon import get_simulator

LOG_FILENAME = "levelpreview.log"


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (integration / runtime only)
    """Warm the simulator for the configured source root and run Flask.

    When debug=True, Flask's debugger and reloader provide verbose tracebacks.
    Also configures application logging to a rotating file and console.
    """
    with app.app_context():
        _configure_logging()
        source_root = app.config.get("LEVELPREVIEW_SOURCE_ROOT")
        if source_root:
            sim = get_simulator(source_root)
            logging.getLogger(__name__).info(
                "Loaded %d vaults and %d overlay scripts from %s (overlay=%s)",
                len(sim.library), len(sim.scripts), source_root, sim.overlay.name,
            )
    try:
        print(f"[INFO] Starting preview server on {host}:{port}")
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging():
    """Configure logging to both console and a rotating file in instance/.

    The file path will be instance/levelpreview.log. Retains a few backups to avoid growth.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, LOG_FILENAME)

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(fmt)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(fmt)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)
    return log_path
