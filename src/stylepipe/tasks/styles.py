"""Stylesheet compilation task.

Compiles Sass sources with libsass, re-indents the expanded output, adds
vendor prefixes and writes `<stem>.css` plus `<stem>.css.map` next to each
source. Compile errors never escape `compile_styles`: a broken file is
skipped, handed to the caller's `on_error` callback and recorded on the
CompileReport, and the remaining files are still compiled.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, List, Optional

import sass

from ..orchestrator import task
from ..orchestrator.logging import get_logger
from ..orchestrator.utils import (
    browsers,
    indent_width,
    notify_setting,
    output_style,
    source_maps,
    style_sources,
)
from .notify import LogNotifier, Notification
from .prefixer import Prefixer
from .sourcemap import SourceMap


log = get_logger("stylepipe.styles")

# libsass indents nested output by two spaces per level
SASS_INDENT = 2


@dataclass
class CompileOptions:
    output_style: str = "expanded"
    indent_width: int = 4
    browsers: List[str] = field(default_factory=lambda: ["last 2 versions"])
    source_maps: bool = True

    @classmethod
    def from_params(cls, p: dict) -> "CompileOptions":
        return cls(
            output_style=output_style(p),
            indent_width=indent_width(p),
            browsers=browsers(p),
            source_maps=source_maps(p),
        )


@dataclass
class CompiledFile:
    source: Path
    css: Path
    map: Optional[Path] = None


@dataclass
class CompileFailure:
    source: Path
    message: str


@dataclass
class CompileReport:
    outputs: List[CompiledFile] = field(default_factory=list)
    failures: List[CompileFailure] = field(default_factory=list)

    @property
    def failure(self) -> Optional[CompileFailure]:
        return self.failures[0] if self.failures else None

    @property
    def ok(self) -> bool:
        return not self.failures


def list_sources(files: Iterable[Path]) -> list[Path]:
    """Drop Sass partials (`_name.scss`); they are only compiled through imports."""
    return [f for f in files if not f.name.startswith("_")]


def reindent(text: str, width: int, smap: Optional[SourceMap] = None) -> str:
    if width == SASS_INDENT:
        return text
    lines = text.split("\n")
    for i, line in enumerate(lines):
        body = line.lstrip(" ")
        old = len(line) - len(body)
        if not old or not body:
            continue
        new = (old // SASS_INDENT) * width + old % SASS_INDENT
        lines[i] = " " * new + body
        if smap is not None:
            smap.shift_columns(i, old, new - old)
    return "\n".join(lines)


def compile_file(source: Path, options: CompileOptions, prefixer: Prefixer) -> CompiledFile:
    css_path = source.with_suffix(".css")
    map_path = css_path.with_name(css_path.name + ".map") if options.source_maps else None
    smap = None
    if map_path is not None:
        output, map_json = sass.compile(
            filename=str(source),
            output_style=options.output_style,
            source_map_filename=str(map_path),
            output_filename_hint=str(css_path),
            source_map_contents=True,
        )
        smap = SourceMap.from_json(map_json)
    else:
        output = sass.compile(filename=str(source), output_style=options.output_style)
    output = reindent(output, options.indent_width, smap)
    output = prefixer.process(output, smap)
    css_path.write_text(output, encoding="utf-8")
    if smap is not None:
        map_path.write_text(smap.to_json(), encoding="utf-8")
    return CompiledFile(source=source, css=css_path, map=map_path)


def compile_styles(
    files: Iterable[Path],
    options: CompileOptions,
    on_error: Callable[[CompileFailure], None] | None = None,
) -> CompileReport:
    prefixer = Prefixer(options.browsers)
    report = CompileReport()
    for source in list_sources(files):
        try:
            compiled = compile_file(source, options, prefixer)
        except sass.CompileError as e:
            failure = CompileFailure(source=source, message=str(e))
            report.failures.append(failure)
            log.error("Failed to compile %s: %s", source, e)
            if on_error is not None:
                on_error(failure)
            continue
        log.info("Compiled %s -> %s", source.name, compiled.css.name)
        report.outputs.append(compiled)
    return report


@task(name="css", inputs=style_sources, description="Compile Sass sources to CSS")
def css(ctx, files):
    notifier = ctx.notifier or LogNotifier()
    title = notify_setting(ctx.config, "title")

    def _on_error(failure: CompileFailure) -> None:
        notifier.notify(
            Notification(
                title=title,
                subtitle=notify_setting(ctx.config, "error_subtitle"),
                message=failure.message,
                error=True,
            )
        )

    report = compile_styles(files, CompileOptions.from_params(ctx.config), on_error=_on_error)
    if report.ok and report.outputs:
        notifier.notify(
            Notification(title=title, message=notify_setting(ctx.config, "success_message"))
        )
    return report
