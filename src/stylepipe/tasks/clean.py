"""Source map cleanup task."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterable

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import clean_force, clean_patterns


log = get_logger("stylepipe.clean")


def _force_unlink(path: Path) -> None:
    """Unlink `path` after making it and its directory writable."""
    parent = path.parent
    parent_mode = parent.stat().st_mode
    os.chmod(path, path.stat().st_mode | stat.S_IWRITE)
    os.chmod(parent, parent_mode | stat.S_IWRITE | stat.S_IEXEC)
    try:
        path.unlink()
    finally:
        os.chmod(parent, stat.S_IMODE(parent_mode))


def delete_files(paths: Iterable[Path], force: bool = True) -> list[Path]:
    deleted: list[Path] = []
    for p in paths:
        try:
            p.unlink()
        except FileNotFoundError:
            continue
        except PermissionError:
            if not force:
                raise
            _force_unlink(p)
        log.debug("Deleted %s", p)
        deleted.append(p)
    log.info("Deleted %d file(s)", len(deleted))
    return deleted


@task(name="css:clean", inputs=clean_patterns, description="Delete generated source maps")
def css_clean(ctx, files):
    return delete_files(files, force=clean_force(ctx.config))
