"""
Unit tests for the depgraph configuration module.

Tests cover:
- Default values
- Constraint validation
- Environment variable overrides
- Configuration file parsing and discovery
- Logging setup
"""

from __future__ import annotations

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog
from pydantic import ValidationError
from structlog.testing import capture_logs

from depgraph.config import (
    AnalysisConfig,
    GraphConfig,
    SerializationConfig,
    configure_logging,
    get_default_config,
    load_config,
)
from depgraph.graph import CodeGraph, from_json, to_json


class TestAnalysisConfig:
    """Tests for AnalysisConfig."""

    def test_default_values(self):
        """Test that analysis is unbounded by default."""
        config = AnalysisConfig()
        assert config.path_max_depth is None
        assert config.cycle_max_length is None
        assert config.unique_cycles is True

    def test_bounds(self):
        """Test depth and length validation bounds."""
        assert AnalysisConfig(path_max_depth=1).path_max_depth == 1

        with pytest.raises(ValidationError):
            AnalysisConfig(path_max_depth=0)

        with pytest.raises(ValidationError):
            AnalysisConfig(cycle_max_length=0)


class TestSerializationConfig:
    """Tests for SerializationConfig."""

    def test_default_values(self):
        """Test DOT and JSON defaults."""
        config = SerializationConfig()
        assert config.dot_graph_name == "CodeGraph"
        assert config.dot_indent == 2
        assert config.dot_rankdir is None
        assert config.on_dangling_edge == "drop"
        assert config.json_indent == 2

    def test_invalid_values(self):
        """Test literal and range validation."""
        with pytest.raises(ValidationError):
            SerializationConfig(on_dangling_edge="ignore")

        with pytest.raises(ValidationError):
            SerializationConfig(dot_rankdir="UP")

        with pytest.raises(ValidationError):
            SerializationConfig(dot_indent=9)

        with pytest.raises(ValidationError):
            SerializationConfig(dot_graph_name="")


class TestGraphConfig:
    """Tests for the main GraphConfig."""

    def test_defaults(self):
        """Test top-level defaults."""
        config = get_default_config()
        assert config.log_level == "INFO"
        assert isinstance(config.analysis, AnalysisConfig)
        assert isinstance(config.serialization, SerializationConfig)

    def test_graph_uses_default_config(self):
        """Test that a graph without config gets the defaults."""
        assert CodeGraph().config == GraphConfig()

    def test_to_dict(self):
        """Test dictionary conversion."""
        data = GraphConfig().to_dict()
        assert data["serialization"]["dot_graph_name"] == "CodeGraph"
        assert data["analysis"]["unique_cycles"] is True

    def test_env_override(self):
        """Test DEPGRAPH_ environment variables."""
        with patch.dict(os.environ, {"DEPGRAPH_LOG_LEVEL": "DEBUG"}):
            assert GraphConfig().log_level == "DEBUG"

    def test_nested_env_override(self):
        """Test nested settings through the __ delimiter."""
        env = {
            "DEPGRAPH_ANALYSIS__PATH_MAX_DEPTH": "5",
            "DEPGRAPH_SERIALIZATION__ON_DANGLING_EDGE": "error",
        }
        with patch.dict(os.environ, env):
            config = GraphConfig()
            assert config.analysis.path_max_depth == 5
            assert config.serialization.on_dangling_edge == "error"


class TestConfigFiles:
    """Tests for file loading and discovery."""

    def test_from_toml(self, tmp_path: Path):
        """Test loading a TOML file."""
        config_file = tmp_path / "depgraph.toml"
        config_file.write_text(
            'log_level = "WARNING"\n\n[analysis]\npath_max_depth = 4\n\n[serialization]\ndot_rankdir = "LR"\n'
        )

        config = GraphConfig.from_file(config_file)
        assert config.log_level == "WARNING"
        assert config.analysis.path_max_depth == 4
        assert config.serialization.dot_rankdir == "LR"

    def test_from_yaml(self, tmp_path: Path):
        """Test loading a YAML file."""
        config_file = tmp_path / "depgraph.yaml"
        config_file.write_text("analysis:\n  unique_cycles: false\n")

        config = GraphConfig.from_file(config_file)
        assert config.analysis.unique_cycles is False

    def test_from_json(self, tmp_path: Path):
        """Test loading a JSON file."""
        config_file = tmp_path / "depgraph.json"
        config_file.write_text('{"serialization": {"json_indent": 4}}')

        config = GraphConfig.from_file(config_file)
        assert config.serialization.json_indent == 4

    def test_missing_file(self, tmp_path: Path):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            GraphConfig.from_file(tmp_path / "nonexistent.toml")

    def test_unsupported_format(self, tmp_path: Path):
        """Test that unknown suffixes are rejected."""
        config_file = tmp_path / "depgraph.ini"
        config_file.write_text("[analysis]\n")
        with pytest.raises(ValueError, match="Unsupported"):
            GraphConfig.from_file(config_file)

    def test_invalid_values_in_file(self, tmp_path: Path):
        """Test that file values are validated."""
        config_file = tmp_path / "depgraph.json"
        config_file.write_text('{"analysis": {"path_max_depth": -3}}')
        with pytest.raises(ValidationError):
            GraphConfig.from_file(config_file)

    def test_load_config_discovery(self, tmp_path: Path):
        """Test that depgraph.toml is discovered in the search dir."""
        (tmp_path / "depgraph.toml").write_text("[analysis]\ncycle_max_length = 3\n")
        config = load_config(search_dir=tmp_path)
        assert config.analysis.cycle_max_length == 3

    def test_load_config_explicit_path(self, tmp_path: Path):
        """Test that an explicit path wins over discovery."""
        (tmp_path / "depgraph.toml").write_text("[analysis]\ncycle_max_length = 3\n")
        custom = tmp_path / "custom.json"
        custom.write_text('{"analysis": {"cycle_max_length": 7}}')

        config = load_config(config_path=custom, search_dir=tmp_path)
        assert config.analysis.cycle_max_length == 7

    def test_load_config_default(self, tmp_path: Path):
        """Test the fallback when nothing is found."""
        config = load_config(search_dir=tmp_path)
        assert config == GraphConfig()


class TestLogging:
    """Tests for structlog setup."""

    def test_configure_logging_filters_levels(self):
        """Test that the configured level filters lower events."""
        try:
            configure_logging("WARNING")
            logger = structlog.get_logger("depgraph.test")
            with capture_logs() as logs:
                logger.info("hidden")
                logger.warning("shown")
            assert [entry["event"] for entry in logs] == ["shown"]
        finally:
            structlog.reset_defaults()

    def test_configure_logging_uses_configured_level(self, tmp_path: Path, monkeypatch):
        """Test that log_level from the environment applies without an explicit level."""
        monkeypatch.chdir(tmp_path)
        try:
            with patch.dict(os.environ, {"DEPGRAPH_LOG_LEVEL": "ERROR"}):
                configure_logging()
            logger = structlog.get_logger("depgraph.test")
            with capture_logs() as logs:
                logger.warning("hidden")
                logger.error("shown")
            assert [entry["event"] for entry in logs] == ["shown"]
        finally:
            structlog.reset_defaults()

    def test_dropped_edges_are_logged(self, code_graph):
        """Test that from_json reports each dangling edge."""
        document = to_json(code_graph)
        document["nodes"] = [n for n in document["nodes"] if n["id"] != "repo.DB_URL"]

        with capture_logs() as logs:
            from_json(document)

        dropped = [entry for entry in logs if entry["event"] == "Dropping dangling edge"]
        assert len(dropped) == 1
        assert dropped[0]["missing"] == ["repo.DB_URL"]
