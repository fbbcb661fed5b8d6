"""
Configuration for the task dependency analyzer, read from the environment
(and a local .env file when present)
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.environ.get(name)
    if value in (None, ''):
        return default
    try:
        return int(value)
    except ValueError:
        logger.warning(f"Ignoring {name}={value!r}: not an integer, using {default}")
        return default


class Config:
    """Defaults for loading, analysis and layout"""
    TASKS_FILE = os.environ.get("TASKGRAPH_TASKS_FILE")
    TAG = os.environ.get("TASKGRAPH_TAG", "master")

    # Layout
    LAYOUT = os.environ.get("TASKGRAPH_LAYOUT", "hierarchical")
    CANVAS_WIDTH = _env_int("TASKGRAPH_WIDTH", 1200)
    CANVAS_HEIGHT = _env_int("TASKGRAPH_HEIGHT", 800)
    SEED = _env_int("TASKGRAPH_SEED", None)

    LOG_LEVEL = os.environ.get("TASKGRAPH_LOG_LEVEL", "INFO")
