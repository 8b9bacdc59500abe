"""Tests for vendor prefixing."""

import pytest

from stylepipe.orchestrator.errors import ConfigurationError
from stylepipe.tasks.prefixer import Prefixer, normalize_query
from stylepipe.tasks.sourcemap import SourceMap


def prefixer() -> Prefixer:
    return Prefixer(["last 2 versions"])


def test_query_spelling_variants() -> None:
    assert normalize_query("last 2 version") == "last 2 versions"
    assert normalize_query("  Last  2   Versions ") == "last 2 versions"


def test_unknown_query_rejected() -> None:
    with pytest.raises(ConfigurationError, match="Unsupported browser query"):
        Prefixer(["defaults, not dead"])


def test_prefixed_copies_inserted_before_declaration() -> None:
    css = "a {\n    appearance: none;\n    color: red;\n}\n"
    out = prefixer().process(css)
    assert out == (
        "a {\n"
        "    -webkit-appearance: none;\n"
        "    -moz-appearance: none;\n"
        "    appearance: none;\n"
        "    color: red;\n"
        "}\n"
    )


def test_value_specific_rule() -> None:
    out = prefixer().process("h1 {\n    background-clip: text;\n}\n")
    assert "    -webkit-background-clip: text;\n    background-clip: text;" in out
    out = prefixer().process("h1 {\n    background-clip: padding-box;\n}\n")
    assert "-webkit-" not in out


def test_existing_prefix_in_block_not_duplicated() -> None:
    css = "a {\n    user-select: none;\n    -webkit-user-select: none;\n}\n"
    assert prefixer().process(css) == css


def test_existing_prefix_in_other_block_does_not_count() -> None:
    css = "a {\n    -webkit-user-select: none;\n}\nb {\n    user-select: none;\n}\n"
    out = prefixer().process(css)
    assert out.count("-webkit-user-select") == 2


def test_selectors_and_comments_untouched() -> None:
    css = "a:hover {\n    color: red;\n}\n\n/*# sourceMappingURL=a.css.map */"
    assert prefixer().process(css) == css


def test_declarations_inside_block_comment_untouched() -> None:
    css = "/*\n    user-select: none;\n*/\na {\n    color: red;\n}\n"
    assert prefixer().process(css) == css


def test_commented_prefix_does_not_count_as_present() -> None:
    css = (
        "a {\n"
        "    /* was:\n"
        "    -webkit-user-select: none;\n"
        "    */\n"
        "    user-select: none;\n"
        "}\n"
    )
    out = prefixer().process(css)
    assert "    -webkit-user-select: none;\n    user-select: none;" in out
    assert out.count("-webkit-user-select") == 2


def test_empty_query_list_adds_nothing() -> None:
    css = "a {\n    user-select: none;\n}\n"
    assert Prefixer([]).process(css) == css


def test_source_map_gains_matching_line() -> None:
    # line 1 maps column 4 -> source (0, 1, 2); column 17 -> value
    smap = SourceMap({"version": 3, "sources": ["a.scss"], "names": [], "mappings": ""})
    smap.lines = [[], [[4, 0, 1, 2], [17, 0, 1, 15]], []]
    prefixer().process("a {\n    user-select: none;\n}", smap)

    assert len(smap.lines) == 4
    assert smap.lines[1] == [[4, 0, 1, 2], [25, 0, 1, 15]]
    assert smap.lines[2] == [[4, 0, 1, 2], [17, 0, 1, 15]]
