from __future__ import annotations

"""Small helpers for reading task settings from config params."""

import copy
from typing import Dict, List


DEFAULTS: Dict = {
    "styles": {
        "src": ["*.scss", "badexample/*.scss"],
        "output_style": "expanded",
        "indent_width": 4,
        "browsers": ["last 2 versions"],
        "source_maps": True,
    },
    "clean": {
        "patterns": ["**/*.map"],
        "force": True,
    },
    "watch": {
        "patterns": ["**/*.scss"],
        "tasks": ["css"],
        "debounce": 0.2,
    },
    "notify": {
        "enabled": True,
        "title": "stylepipe",
        "success_message": "Styles compiled",
        "error_subtitle": "Error in CSS File",
    },
    "logging": {
        "level": None,
        "file": None,
    },
}


def _get(d: Dict, *keys, default=None):
    cur = d
    for k in keys:
        if not isinstance(cur, dict):
            return default
        cur = cur.get(k)
        if cur is None:
            return default
    return cur


def merge_config(base: Dict, override: Dict) -> Dict:
    """Deep-merge `override` into a copy of `base`; lists are replaced."""
    out = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(out.get(key), dict):
            out[key] = merge_config(out[key], value)
        else:
            out[key] = copy.deepcopy(value)
    return out


def _as_list(value) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    return [str(v) for v in value]


def style_sources(p: Dict) -> List[str]:
    return _as_list(_get(p, "styles", "src", default=DEFAULTS["styles"]["src"]))


def output_style(p: Dict) -> str:
    return _get(p, "styles", "output_style", default="expanded")


def indent_width(p: Dict) -> int:
    return int(_get(p, "styles", "indent_width", default=4))


def browsers(p: Dict) -> List[str]:
    return _as_list(
        _get(p, "styles", "browsers", default=DEFAULTS["styles"]["browsers"])
    )


def source_maps(p: Dict) -> bool:
    return bool(_get(p, "styles", "source_maps", default=True))


def clean_patterns(p: Dict) -> List[str]:
    return _as_list(_get(p, "clean", "patterns", default=DEFAULTS["clean"]["patterns"]))


def clean_force(p: Dict) -> bool:
    return bool(_get(p, "clean", "force", default=True))


def watch_patterns(p: Dict) -> List[str]:
    return _as_list(
        _get(p, "watch", "patterns", default=DEFAULTS["watch"]["patterns"])
    )


def watch_tasks(p: Dict) -> List[str]:
    return _as_list(_get(p, "watch", "tasks", default=DEFAULTS["watch"]["tasks"]))


def watch_debounce(p: Dict) -> float:
    return float(_get(p, "watch", "debounce", default=0.2))


def notify_setting(p: Dict, key: str):
    return _get(p, "notify", key, default=DEFAULTS["notify"][key])
