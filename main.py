"""
Task Dependency Analyzer - command-line launcher
Run `python main.py path/to/tasks.json` or `python main.py --help`
"""

import sys

from task_dependency_analyzer.cli import main

if __name__ == "__main__":
    sys.exit(main())
