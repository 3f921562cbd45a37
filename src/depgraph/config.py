"""
Configuration module for depgraph.

Provides strongly-typed configuration with pydantic, supporting both
file-based and environment variable configuration.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Literal

import structlog
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisConfig(BaseModel):
    """Defaults for the traversal and analysis algorithms."""

    path_max_depth: int | None = Field(
        default=None,
        ge=1,
        le=10000,
        description="Default edge bound for path enumeration (None = unbounded)",
    )
    cycle_max_length: int | None = Field(
        default=None,
        ge=1,
        le=10000,
        description="Default node bound for cycle detection (None = unbounded)",
    )
    unique_cycles: bool = Field(
        default=True,
        description="Drop rotations of cycles that were already reported",
    )


class SerializationConfig(BaseModel):
    """DOT and JSON serialization configuration."""

    dot_graph_name: str = Field(
        default="CodeGraph",
        min_length=1,
        description="Name emitted in the digraph header",
    )
    dot_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Spaces used to indent DOT statements",
    )
    dot_rankdir: Literal["TB", "LR", "BT", "RL"] | None = Field(
        default=None,
        description="Optional Graphviz rankdir attribute",
    )
    on_dangling_edge: Literal["drop", "error"] = Field(
        default="drop",
        description="What from_json does with edges whose endpoints are missing",
    )
    json_indent: int | None = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation used by dumps (None = compact)",
    )


class GraphConfig(BaseSettings):
    """
    Main depgraph configuration.

    Can be configured via:
    1. Configuration file (depgraph.toml, depgraph.yaml or depgraph.json)
    2. Environment variables with DEPGRAPH_ prefix
    3. Programmatic overrides
    """

    model_config = SettingsConfigDict(
        env_prefix="DEPGRAPH_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Level applied by configure_logging() when none is given",
    )

    # Sub-configurations
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    serialization: SerializationConfig = Field(default_factory=SerializationConfig)

    @classmethod
    def from_file(cls, path: Path) -> "GraphConfig":
        """Load configuration from a TOML, YAML or JSON file."""
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        suffix = path.suffix.lower()
        content = path.read_text()

        if suffix == ".toml":
            import tomllib

            data = tomllib.loads(content)
        elif suffix in (".yaml", ".yml"):
            import yaml

            data = yaml.safe_load(content) or {}
        elif suffix == ".json":
            data = json.loads(content)
        else:
            raise ValueError(f"Unsupported config format: {suffix}")

        return cls(**data)

    def to_dict(self) -> dict:
        """Convert configuration to dictionary."""
        return self.model_dump()


def get_default_config() -> GraphConfig:
    """Get default configuration instance."""
    return GraphConfig()


def load_config(
    config_path: Path | None = None,
    search_dir: Path | None = None,
) -> GraphConfig:
    """
    Load configuration with automatic discovery.

    Priority:
    1. Explicit config_path if provided
    2. depgraph.toml in search_dir
    3. depgraph.yaml / depgraph.json in search_dir
    4. Default configuration
    """
    if config_path and config_path.exists():
        return GraphConfig.from_file(config_path)

    root = search_dir or Path.cwd()
    candidates = [
        root / "depgraph.toml",
        root / "depgraph.yaml",
        root / "depgraph.yml",
        root / "depgraph.json",
    ]

    for candidate in candidates:
        if candidate.exists():
            return GraphConfig.from_file(candidate)

    return GraphConfig()


def configure_logging(level: str | None = None) -> None:
    """
    Route structlog output through a level filter.

    The library never configures logging on import. Applications call this
    once at startup; without an explicit level the configured ``log_level``
    is used (``DEPGRAPH_LOG_LEVEL`` or a discovered config file).
    """
    if level is None:
        level = load_config().log_level
    log_level = getattr(logging, level.upper(), logging.INFO)
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
    )
