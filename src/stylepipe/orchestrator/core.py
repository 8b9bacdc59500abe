from __future__ import annotations

import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Union

from .errors import ConfigurationError
from .logging import get_logger


# Allow static lists or callables that build glob patterns from config
PathSpec = Union[List[str], Callable[[dict], List[str]]]
Listener = Callable[[str, str], None]


@dataclass
class TaskSpec:
    name: str
    fn: Optional[Callable[..., Any]] = None
    deps: tuple[str, ...] = ()
    sequence: bool = False
    inputs: PathSpec = field(default_factory=list)
    description: str = ""


@dataclass
class TaskContext:
    """State shared by every task of one invocation."""

    root: Path
    config: dict
    notifier: Any = None
    registry: Optional["TaskRegistry"] = None
    watchers: list = field(default_factory=list)


def task(
    name: str,
    deps: Iterable[str] = (),
    sequence: bool = False,
    inputs: PathSpec = (),
    description: str = "",
):
    """Decorator to declare a task on a function.

    The wrapped function is called with keyword arguments `ctx` (the
    TaskContext of the current run) and `files` (the task's input globs,
    expanded against `ctx.root` right before the call).
    """

    def deco(fn: Callable[..., Any]):
        doc = (fn.__doc__ or "").strip()
        spec = TaskSpec(
            name=name,
            fn=fn,
            deps=tuple(deps),
            sequence=sequence,
            inputs=inputs if callable(inputs) else list(inputs),
            description=description or (doc.splitlines()[0] if doc else ""),
        )
        setattr(fn, "_task_spec", spec)
        return fn

    return deco


def alias(
    name: str, deps: Iterable[str], sequence: bool = False, description: str = ""
) -> TaskSpec:
    """Declare a task that only runs its dependencies."""
    return TaskSpec(
        name=name, deps=tuple(deps), sequence=sequence, description=description
    )


def topo_sort(nodes: Iterable[str], edges: Iterable[tuple[str, str]]) -> list[str]:
    nodes = list(nodes)
    incoming = {n: set() for n in nodes}
    outgoing = {n: set() for n in nodes}
    for u, v in edges:
        if u not in incoming or v not in incoming:
            raise ConfigurationError(f"Edge references unknown task: {(u, v)}")
        outgoing[u].add(v)
        incoming[v].add(u)
    ordered: list[str] = []
    roots = [n for n in nodes if not incoming[n]]
    while roots:
        n = roots.pop()
        ordered.append(n)
        for m in list(outgoing[n]):
            incoming[m].discard(n)
            outgoing[n].discard(m)
            if not incoming[m]:
                roots.append(m)
    cyclic = sorted(n for n in nodes if incoming[n])
    if cyclic:
        raise ConfigurationError(f"Cycle detected between tasks: {', '.join(cyclic)}")
    return ordered


class TaskRegistry:
    def __init__(self, specs: Iterable[TaskSpec] = (), name: str = "registry"):
        self.name = name
        self.tasks: dict[str, TaskSpec] = {}
        self.logger = get_logger(f"stylepipe.{self.name}")
        for spec in specs:
            self.add(spec)

    def __contains__(self, name: object) -> bool:
        return name in self.tasks

    def add(self, spec: TaskSpec) -> None:
        if spec.name in self.tasks:
            raise ConfigurationError(f"Task {spec.name} already exists")
        self.tasks[spec.name] = spec

    def validate(self) -> list[str]:
        """Check that every dependency exists and the graph is acyclic.

        Returns the tasks in a dependency-respecting order.
        """
        edges = []
        for spec in self.tasks.values():
            for dep in spec.deps:
                if dep not in self.tasks:
                    raise ConfigurationError(
                        f"Task {spec.name!r} depends on unknown task {dep!r}"
                    )
                edges.append((dep, spec.name))
        return topo_sort(self.tasks.keys(), edges)

    def run(
        self, name: str, ctx: TaskContext, listener: Listener | None = None
    ) -> dict[str, Any]:
        """Run `name` after its dependencies; return results keyed by task name."""
        if name not in self.tasks:
            raise ConfigurationError(f"Task not found: {name}")
        self.validate()
        ctx.registry = self
        invocation = _Invocation(self, ctx, listener)
        self.logger.info("Using task %s", name)
        invocation.ensure(name)
        return invocation.results


class _Invocation:
    """One call of TaskRegistry.run; every task executes at most once."""

    def __init__(self, registry: TaskRegistry, ctx: TaskContext, listener):
        self.registry = registry
        self.ctx = ctx
        self.listener = listener
        self.results: dict[str, Any] = {}
        self._futures: dict[str, Future] = {}
        self._lock = threading.Lock()

    def ensure(self, name: str) -> Any:
        with self._lock:
            fut = self._futures.get(name)
            owner = fut is None
            if owner:
                fut = Future()
                self._futures[name] = fut
        if not owner:
            return fut.result()
        try:
            result = self._execute(self.registry.tasks[name])
        except Exception as e:
            fut.set_exception(e)
            raise
        fut.set_result(result)
        return result

    def _emit(self, event: str, name: str) -> None:
        if self.listener is not None:
            self.listener(event, name)

    def _run_deps(self, spec: TaskSpec) -> None:
        if not spec.deps:
            return
        if spec.sequence or len(spec.deps) == 1:
            for dep in spec.deps:
                self.ensure(dep)
            return
        with ThreadPoolExecutor(
            max_workers=len(spec.deps), thread_name_prefix=f"stylepipe-{spec.name}"
        ) as pool:
            futures = [pool.submit(self.ensure, dep) for dep in spec.deps]
        for f in futures:
            f.result()

    def _execute(self, spec: TaskSpec) -> Any:
        self._run_deps(spec)
        logger = get_logger(f"stylepipe.task.{spec.name}")
        self._emit("start", spec.name)
        logger.info("Starting '%s'...", spec.name)
        started = time.perf_counter()
        result = None
        if spec.fn is not None:
            files = expand_globs(
                resolve_paths(spec.inputs, self.ctx.config), self.ctx.root
            )
            try:
                result = spec.fn(ctx=self.ctx, files=files)
            except Exception:
                logger.error(
                    "'%s' errored after %.2f s",
                    spec.name,
                    time.perf_counter() - started,
                )
                self._emit("error", spec.name)
                raise
        with self._lock:
            self.results[spec.name] = result
        logger.info(
            "Finished '%s' after %.2f s", spec.name, time.perf_counter() - started
        )
        self._emit("finish", spec.name)
        return result


def resolve_paths(paths_spec: PathSpec, params: dict) -> list[str]:
    """Resolve a static list of patterns or a callable(params) into a list[str]."""
    if callable(paths_spec):
        paths = paths_spec(params)
    else:
        paths = paths_spec
    if paths is None:
        return []
    return [str(p) for p in paths]


def expand_globs(patterns: list[str], root: Path) -> list[Path]:
    """List files under `root` matching the patterns.

    Files keep the order of the patterns that first matched them; matches of
    a single pattern are sorted.
    """
    found: list[Path] = []
    seen: set[Path] = set()
    for pat in patterns:
        if any(ch in pat for ch in "*?["):
            try:
                matches = sorted(p for p in root.glob(pat) if p.is_file())
            except (ValueError, NotImplementedError) as e:
                raise ConfigurationError(f"Invalid glob pattern {pat!r}: {e}") from e
        else:
            p = root / pat
            matches = [p] if p.is_file() else []
        for p in matches:
            if p not in seen:
                seen.add(p)
                found.append(p)
    return found
