"""
Task Store Loader
Reads tasks.json files and normalizes the accepted container shapes
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_TAG = 'master'
TASKS_FILE_PARTS = ('.taskmaster', 'tasks', 'tasks.json')


class UnrecognizedTaskStoreFormat(ValueError):
    """Raised when a task store is neither a task list nor a tasks container"""

    def __init__(self, detail: str = ''):
        message = 'unrecognized task-store format'
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


def normalize_task_store(data: Any, tag: str = DEFAULT_TAG) -> Dict[str, list]:
    """Resolve any accepted container shape to ``{'tasks': [...]}``.

    Accepted shapes are a bare list, ``{'tasks': [...]}`` and the tagged
    form ``{'<tag>': {'tasks': [...]}}``. The tagged section named ``tag`` wins
    over a top-level task list, which wins over any other tag.
    """
    if isinstance(data, list):
        return {'tasks': list(data)}

    if not isinstance(data, dict):
        raise UnrecognizedTaskStoreFormat(f"top-level value is {type(data).__name__}")

    tagged = {
        name: section for name, section in data.items()
        if isinstance(section, dict) and isinstance(section.get('tasks'), list)
    }
    if tag in tagged:
        return {'tasks': list(tagged[tag]['tasks'])}

    if isinstance(data.get('tasks'), list):
        return {'tasks': list(data['tasks'])}

    if tagged:
        name = next(iter(tagged))
        logger.info(f"Tag '{tag}' not found in task store, using '{name}'")
        return {'tasks': list(tagged[name]['tasks'])}

    raise UnrecognizedTaskStoreFormat(f"no task list under keys {sorted(data)[:5]}")


def parse_task_store(content: str, tag: str = DEFAULT_TAG) -> Dict[str, list]:
    """Parse tasks.json content"""
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse task store: {e}")
        raise UnrecognizedTaskStoreFormat(str(e)) from e
    return normalize_task_store(data, tag=tag)


def find_task_store(project_root: Union[str, Path]) -> Path:
    return Path(project_root).joinpath(*TASKS_FILE_PARTS)


def load_task_store(path: Union[str, Path], tag: str = DEFAULT_TAG) -> Dict[str, list]:
    """Load and normalize a task store; a missing file is an empty store"""
    path = Path(path)
    if not path.exists():
        logger.warning(f"Task store not found at {path}, using an empty task list")
        return {'tasks': []}

    try:
        content = path.read_text(encoding='utf-8')
    except UnicodeDecodeError as e:
        logger.error(f"Task store {path} is not valid UTF-8: {e}")
        raise UnrecognizedTaskStoreFormat(str(e)) from e

    store = parse_task_store(content, tag=tag)
    logger.info(f"Loaded {len(store['tasks'])} tasks from {path}")
    return store


def load_project_tasks(project_root: Union[str, Path], tag: Optional[str] = None) -> Dict[str, list]:
    return load_task_store(find_task_store(project_root), tag=tag or DEFAULT_TAG)
