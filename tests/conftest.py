"""Shared fixtures for stylepipe tests."""

from pathlib import Path

import pytest

from stylepipe.orchestrator.cli import discover_tasks
from stylepipe.orchestrator.core import TaskContext, TaskRegistry
from stylepipe.orchestrator.utils import DEFAULTS, merge_config


VALID_SCSS = """$pad: 2px;

.box {
  padding: $pad;
  .title {
    color: red;
  }
}
"""

BROKEN_SCSS = ".broken {\n  color: red\n"


class RecordingNotifier:
    def __init__(self):
        self.sent = []

    def notify(self, note) -> None:
        self.sent.append(note)

    @property
    def errors(self):
        return [n for n in self.sent if n.error]


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def make_ctx(tmp_path: Path, notifier: RecordingNotifier):
    """Build a TaskContext rooted at tmp_path with optional config overrides."""

    def _make(overrides: dict | None = None) -> TaskContext:
        return TaskContext(
            root=tmp_path,
            config=merge_config(DEFAULTS, overrides or {}),
            notifier=notifier,
        )

    return _make


@pytest.fixture
def registry() -> TaskRegistry:
    return discover_tasks()
