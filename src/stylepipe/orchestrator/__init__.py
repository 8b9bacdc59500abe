"""Lightweight task runner for the stylesheet build.

Provides TaskSpec/TaskRegistry primitives, dependency resolution and a Typer CLI.
"""

from .core import TaskContext, TaskRegistry, TaskSpec, alias, task  # re-export for convenience
from .errors import ConfigurationError, StylepipeError

__all__ = [
    "TaskContext",
    "TaskRegistry",
    "TaskSpec",
    "alias",
    "task",
    "ConfigurationError",
    "StylepipeError",
]
