"""
Runtime configuration.

Values come from the environment (a .env file in the project root is loaded
first via python-dotenv). Everything has a default, so a bare checkout runs
against ./resources.

    RESOURCES_ROOT   base URL or directory holding metadata.json + {reg}/...
    REQUEST_TIMEOUT  seconds per document GET
    REQUEST_RETRIES  attempts per document before giving up
    FILTER_STORE     JSON file remembering the last filter selection
    LOG_DIR          directory for the rotating log file
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

ROOT_DIR = Path(__file__).parent.parent

RESOURCES_ROOT  = os.environ.get("RESOURCES_ROOT", str(ROOT_DIR / "resources"))
REQUEST_TIMEOUT = float(os.environ.get("REQUEST_TIMEOUT", "15"))
REQUEST_RETRIES = int(os.environ.get("REQUEST_RETRIES", "3"))
FILTER_STORE    = Path(os.environ.get("FILTER_STORE", str(ROOT_DIR / "data" / "filters.json")))
LOG_DIR         = Path(os.environ.get("LOG_DIR", str(ROOT_DIR / "logs")))
LOG_FILE        = LOG_DIR / "app.log"

USER_AGENT = "Course-Resource-Browser/1.0"

_configured = False


def setup_logging(level: int = logging.INFO) -> None:
    """Log to stdout and logs/app.log (rotating, 5 MB max, 3 backups)."""
    global _configured
    if _configured:
        return

    LOG_DIR.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter("%(asctime)s  %(levelname)s  %(message)s")

    stream = logging.StreamHandler(sys.stdout)
    stream.setFormatter(fmt)

    rotating = logging.handlers.RotatingFileHandler(
        LOG_FILE, maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
    )
    rotating.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(stream)
    root.addHandler(rotating)
    _configured = True
