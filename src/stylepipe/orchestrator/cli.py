from __future__ import annotations

import importlib
import pkgutil
from pathlib import Path
from typing import Optional

import typer
import yaml

from .core import TaskContext, TaskRegistry, TaskSpec
from .errors import ConfigurationError
from .logging import PACKAGE, get_logger
from .utils import DEFAULTS, _get, merge_config


app = typer.Typer(add_completion=False, help="Stylesheet build task runner")
log = get_logger("stylepipe.cli")

CONFIG_FILE = "stylepipe.yaml"
TASKS_PACKAGE = "stylepipe.tasks"


def load_config(root: Path, path: str | Path | None = None) -> dict:
    """Read the YAML config (explicit path, or `stylepipe.yaml` in root) over DEFAULTS."""
    if path is not None:
        p = Path(path)
        if not p.is_file():
            raise ConfigurationError(f"Config file not found: {p}")
    else:
        p = root / CONFIG_FILE
        if not p.is_file():
            return merge_config(DEFAULTS, {})
    try:
        with open(p, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in {p}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config {p} must contain a mapping at the top level")
    return merge_config(DEFAULTS, data)


def discover_tasks(tasks_pkg: str = TASKS_PACKAGE) -> TaskRegistry:
    """Import all modules in the tasks package and collect declared tasks."""
    registry = TaskRegistry(name="tasks")
    pkg = importlib.import_module(tasks_pkg)
    for m in pkgutil.iter_modules(pkg.__path__, prefix=f"{tasks_pkg}."):
        mod = importlib.import_module(m.name)
        for attr_name in dir(mod):
            obj = getattr(mod, attr_name)
            spec = obj if isinstance(obj, TaskSpec) else getattr(obj, "_task_spec", None)
            if not isinstance(spec, TaskSpec):
                continue
            # Specs re-exported from another task module are the same object
            if registry.tasks.get(spec.name) is spec:
                continue
            registry.add(spec)
    return registry


def _configure_logging(params: dict, root: Path) -> None:
    log_file = _get(params, "logging", "file")
    get_logger(
        PACKAGE,
        log_file=(root / log_file) if log_file else None,
        level=_get(params, "logging", "level"),
    )


def _wait_for_watchers(watchers: list) -> None:
    log.info("Watching for changes. Press Ctrl-C to stop.")
    try:
        for w in watchers:
            w.join()
    except KeyboardInterrupt:
        log.info("Stopping watchers")
    finally:
        for w in watchers:
            w.stop()


@app.command()
def run(
    task_name: str = typer.Argument("default", metavar="TASK", help="Task to run"),
    cwd: str = typer.Option(".", "--cwd", help="Directory to build in"),
    config: Optional[str] = typer.Option(None, "--config", help="Path to YAML config"),
    list_only: bool = typer.Option(False, "--tasks", help="List tasks and exit"),
):
    """Run TASK (and its dependencies); `default` when omitted."""
    from ..tasks.notify import build_notifier

    root = Path(cwd).resolve()
    try:
        registry = discover_tasks()
        order = registry.validate()
        if list_only:
            for name in sorted(order):
                spec = registry.tasks[name]
                deps = f" [{', '.join(spec.deps)}]" if spec.deps else ""
                typer.echo(f"- {name}{deps}  {spec.description}".rstrip())
            raise typer.Exit(code=0)
        if task_name not in registry:
            raise ConfigurationError(f"Task not found: {task_name}")
        params = load_config(root, config)
        _configure_logging(params, root)
        ctx = TaskContext(root=root, config=params, notifier=build_notifier(params))
        registry.run(task_name, ctx)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)
    if ctx.watchers:
        _wait_for_watchers(ctx.watchers)


def main():  # pragma: no cover
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
