"""Vendor prefixing for compiled CSS.

Works line by line on expanded output, where every declaration sits on its
own line. Prefixed copies are inserted right before the standard
declaration and the source map gets a matching line for each insert.
"""

from __future__ import annotations

import re
from typing import Dict, Iterable, Optional, Set, Tuple

from ..orchestrator.errors import ConfigurationError
from ..orchestrator.logging import get_logger
from .sourcemap import SourceMap


# Declarations that still need prefixes for a browser-support query.
RULES: Dict[str, dict] = {
    "last 2 versions": {
        "properties": {
            "appearance": ("-webkit-", "-moz-"),
            "backdrop-filter": ("-webkit-",),
            "box-decoration-break": ("-webkit-",),
            "hyphens": ("-webkit-",),
            "mask": ("-webkit-",),
            "mask-clip": ("-webkit-",),
            "mask-image": ("-webkit-",),
            "mask-origin": ("-webkit-",),
            "mask-position": ("-webkit-",),
            "mask-repeat": ("-webkit-",),
            "mask-size": ("-webkit-",),
            "print-color-adjust": ("-webkit-",),
            "text-emphasis": ("-webkit-",),
            "text-emphasis-color": ("-webkit-",),
            "text-emphasis-position": ("-webkit-",),
            "text-emphasis-style": ("-webkit-",),
            "text-size-adjust": ("-webkit-", "-moz-"),
            "user-select": ("-webkit-",),
        },
        "values": {
            ("background-clip", "text"): ("-webkit-",),
        },
    },
}

_DECL = re.compile(r"^(\s*)(-?[A-Za-z][A-Za-z0-9-]*)\s*:\s*(.*?)\s*;\s*$")

log = get_logger("stylepipe.prefixer")


def normalize_query(query: str) -> str:
    q = " ".join(query.lower().split())
    if q.endswith(" version"):
        q += "s"
    return q


class Prefixer:
    def __init__(self, browsers: Iterable[str]):
        self.properties: Dict[str, Tuple[str, ...]] = {}
        self.values: Dict[Tuple[str, str], Tuple[str, ...]] = {}
        for query in browsers:
            key = normalize_query(query)
            if key not in RULES:
                raise ConfigurationError(
                    f"Unsupported browser query {query!r}; "
                    f"supported: {', '.join(sorted(RULES))}"
                )
            for prop, prefixes in RULES[key]["properties"].items():
                self.properties[prop] = _union(self.properties.get(prop, ()), prefixes)
            for pair, prefixes in RULES[key]["values"].items():
                self.values[pair] = _union(self.values.get(pair, ()), prefixes)

    def prefixes_for(self, prop: str, value: str) -> Tuple[str, ...]:
        prop = prop.lower()
        found = self.properties.get(prop, ())
        return _union(found, self.values.get((prop, value.strip().lower()), ()))

    def process(self, css: str, smap: Optional[SourceMap] = None) -> str:
        lines = css.split("\n")
        comments = _comment_lines(lines)
        block_of, block_props = _index_blocks(lines, comments)
        out: list[str] = []
        added = 0
        for i, line in enumerate(lines):
            m = None if i in comments else _DECL.match(line)
            if m:
                indent, prop, value = m.groups()
                existing = block_props[block_of[i]]
                for prefix in self.prefixes_for(prop, value):
                    name = prefix + prop
                    if name.lower() in existing:
                        continue
                    pos = len(out)
                    out.append(f"{indent}{name}: {value};")
                    if smap is not None:
                        smap.insert_line(
                            pos, copy_from=pos, from_col=len(indent) + 1, delta=len(prefix)
                        )
                    added += 1
            out.append(line)
        if added:
            log.debug("Added %d prefixed declaration(s)", added)
        return "\n".join(out)


def _union(a: Tuple[str, ...], b: Tuple[str, ...]) -> Tuple[str, ...]:
    return a + tuple(p for p in b if p not in a)


def _comment_lines(lines: list[str]) -> Set[int]:
    """Indexes of lines that open with, or sit inside, a `/* */` comment."""
    found: Set[int] = set()
    inside = False
    for i, line in enumerate(lines):
        if inside or line.lstrip().startswith("/*"):
            found.add(i)
        pos = 0
        while True:
            mark = line.find("*/" if inside else "/*", pos)
            if mark < 0:
                break
            inside = not inside
            pos = mark + 2
    return found


def _index_blocks(
    lines: list[str], comments: Set[int] = frozenset()
) -> tuple[list[int], Dict[int, set]]:
    """Map each line to its innermost rule block and collect each block's properties."""
    block_of: list[int] = []
    props: Dict[int, set] = {-1: set()}
    stack = [-1]
    next_id = 0
    for i, line in enumerate(lines):
        if i in comments:
            block_of.append(stack[-1])
            continue
        stripped = line.strip()
        if stripped.endswith("{"):
            stack.append(next_id)
            props[next_id] = set()
            next_id += 1
        block_of.append(stack[-1])
        m = _DECL.match(line)
        if m:
            props[stack[-1]].add(m.group(2).lower())
        if stripped.startswith("}") and len(stack) > 1:
            stack.pop()
    return block_of, props
