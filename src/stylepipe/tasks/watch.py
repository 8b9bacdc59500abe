"""Watch task: rerun the build when Sass sources change.

The watchdog observer only records that something changed; rebuilds run on
a single rebuild thread. Changes that arrive while a rebuild is running, or
inside the debounce window, collapse into one follow-up rebuild. Modified
events that leave a file's content unchanged are dropped.
"""

from __future__ import annotations

import fnmatch
import os
import threading
from pathlib import Path
from typing import Callable, Iterable

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..orchestrator import task
from ..orchestrator.cache import DigestCache
from ..orchestrator.errors import ConfigurationError
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import watch_debounce, watch_patterns, watch_tasks


log = get_logger("stylepipe.watch")

_CHANGE_EVENTS = {
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
}


def matches(rel: str, patterns: Iterable[str]) -> bool:
    for pat in patterns:
        if fnmatch.fnmatchcase(rel, pat):
            return True
        if pat.startswith("**/") and fnmatch.fnmatchcase(rel, pat[3:]):
            return True
    return False


class Rebuilder:
    """Runs `action` on its own thread whenever a rebuild was requested."""

    def __init__(self, action: Callable[[], None], debounce: float = 0.2):
        self._action = action
        self._debounce = debounce
        self._pending = threading.Event()
        self._stopping = threading.Event()
        self._thread = threading.Thread(
            target=self._loop, name="stylepipe-rebuild", daemon=True
        )
        self.runs = 0

    def start(self) -> None:
        self._thread.start()

    def request(self) -> None:
        self._pending.set()

    def stop(self, timeout: float | None = None) -> None:
        self._stopping.set()
        self._pending.set()
        if self._thread.is_alive() and threading.current_thread() is not self._thread:
            self._thread.join(timeout)

    def _loop(self) -> None:
        while True:
            self._pending.wait()
            if self._stopping.is_set():
                return
            if self._debounce and self._stopping.wait(self._debounce):
                return
            self._pending.clear()
            try:
                self._action()
            except Exception:  # noqa: BLE001
                log.exception("Rebuild failed; still watching")
            self.runs += 1


class _SourceEventHandler(FileSystemEventHandler):
    def __init__(self, watcher: "Watcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event):
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        paths = [event.src_path]
        dest = getattr(event, "dest_path", "")
        if dest:
            paths.append(dest)
        for p in paths:
            self.watcher.notify_change(Path(os.fsdecode(p)), event.event_type)


class Watcher:
    def __init__(
        self,
        root: Path,
        patterns: Iterable[str],
        action: Callable[[], None],
        debounce: float = 0.2,
        known: Iterable[Path] = (),
    ):
        self.root = Path(root).resolve()
        self.patterns = list(patterns)
        self.rebuilder = Rebuilder(action, debounce=debounce)
        self.digests = DigestCache(Path(p).resolve() for p in known)
        self._observer = Observer()

    def notify_change(self, path: Path, event_type: str) -> bool:
        """Queue a rebuild for a change to `path`; False if the event is ignored."""
        try:
            rel = path.relative_to(self.root).as_posix()
        except ValueError:
            return False
        if not matches(rel, self.patterns):
            return False
        if not self.digests.changed(path):
            log.debug("Ignoring %s event for %s: content unchanged", event_type, rel)
            return False
        log.info("File %s was %s, rebuilding", rel, event_type)
        self.rebuilder.request()
        return True

    def start(self) -> None:
        self._observer.schedule(_SourceEventHandler(self), str(self.root), recursive=True)
        self._observer.start()
        self.rebuilder.start()
        log.info("Watching %s in %s", ", ".join(self.patterns), self.root)

    def is_alive(self) -> bool:
        return self._observer.is_alive()

    def join(self) -> None:
        # Short timeouts keep the main thread responsive to Ctrl-C
        while self._observer.is_alive():
            self._observer.join(0.5)

    def stop(self) -> None:
        self._observer.stop()
        self.rebuilder.stop()
        if self._observer.is_alive():
            self._observer.join()


@task(name="watch", inputs=watch_patterns, description="Rerun css when a Sass file changes")
def watch(ctx, files):
    registry = ctx.registry
    targets = watch_tasks(ctx.config)
    unknown = [t for t in targets if registry is None or t not in registry]
    if unknown:
        raise ConfigurationError(f"watch.tasks references unknown task(s): {', '.join(unknown)}")

    def rebuild() -> None:
        for name in targets:
            registry.run(name, ctx)

    watcher = Watcher(
        ctx.root,
        watch_patterns(ctx.config),
        rebuild,
        debounce=watch_debounce(ctx.config),
        known=files,
    )
    watcher.start()
    ctx.watchers.append(watcher)
    return watcher
