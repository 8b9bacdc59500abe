"""Tests for the Typer CLI and config loading."""

from pathlib import Path

import pytest
from typer.testing import CliRunner

from stylepipe.orchestrator.cli import app, load_config
from stylepipe.orchestrator.errors import ConfigurationError
from stylepipe.orchestrator.utils import DEFAULTS, merge_config

from conftest import VALID_SCSS, write


runner = CliRunner()

QUIET = "notify:\n  enabled: false\n"


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path) -> None:
        assert load_config(tmp_path) == DEFAULTS

    def test_project_file_merged_over_defaults(self, tmp_path: Path) -> None:
        write(tmp_path / "stylepipe.yaml", "styles:\n  indent_width: 2\n")
        cfg = load_config(tmp_path)
        assert cfg["styles"]["indent_width"] == 2
        assert cfg["styles"]["src"] == DEFAULTS["styles"]["src"]

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path, tmp_path / "nope.yaml")

    def test_top_level_must_be_mapping(self, tmp_path: Path) -> None:
        p = write(tmp_path / "list.yaml", "- a\n- b\n")
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(tmp_path, p)

    def test_invalid_yaml(self, tmp_path: Path) -> None:
        p = write(tmp_path / "bad.yaml", "styles: [unclosed\n")
        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_config(tmp_path, p)

    def test_merge_replaces_lists(self) -> None:
        merged = merge_config(DEFAULTS, {"styles": {"src": ["main.scss"]}})
        assert merged["styles"]["src"] == ["main.scss"]
        assert DEFAULTS["styles"]["src"] == ["*.scss", "badexample/*.scss"]


class TestCli:
    def test_lists_tasks(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["--tasks", "--cwd", str(tmp_path)])
        assert result.exit_code == 0
        for name in ["css", "css:clean", "css:dist", "dist", "watch", "default"]:
            assert f"- {name}" in result.output

    def test_unknown_task_exits_with_error(self, tmp_path: Path) -> None:
        result = runner.invoke(app, ["nope", "--cwd", str(tmp_path)])
        assert result.exit_code == 1
        assert "Task not found: nope" in result.output
        assert list(tmp_path.iterdir()) == []

    def test_unknown_task_leaves_no_log_file(self, tmp_path: Path) -> None:
        write(tmp_path / "stylepipe.yaml", "logging:\n  file: logs/build.log\n")

        result = runner.invoke(app, ["nope", "--cwd", str(tmp_path)])

        assert result.exit_code == 1
        assert "Task not found: nope" in result.output
        assert not (tmp_path / "logs").exists()
        assert [p.name for p in tmp_path.iterdir()] == ["stylepipe.yaml"]

    def test_runs_named_task(self, tmp_path: Path) -> None:
        write(tmp_path / "stylepipe.yaml", QUIET)
        write(tmp_path / "a.scss", VALID_SCSS)

        result = runner.invoke(app, ["css", "--cwd", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "a.css").exists()
        assert (tmp_path / "a.css.map").exists()

    def test_dist_leaves_no_maps(self, tmp_path: Path) -> None:
        write(tmp_path / "stylepipe.yaml", QUIET)
        write(tmp_path / "a.scss", VALID_SCSS)

        result = runner.invoke(app, ["dist", "--cwd", str(tmp_path)])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "a.css").exists()
        assert not list(tmp_path.rglob("*.map"))

    def test_explicit_config_missing(self, tmp_path: Path) -> None:
        result = runner.invoke(
            app, ["css", "--cwd", str(tmp_path), "--config", str(tmp_path / "x.yaml")]
        )
        assert result.exit_code == 1
        assert "Config file not found" in result.output
