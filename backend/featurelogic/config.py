"""
Engine configuration.

Settings shared by the parser and evaluator, loadable from a YAML mapping.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

import yaml
from pydantic import BaseModel, ConfigDict, Field


class EngineConfig(BaseModel):
    """Tunables for building and evaluating expressions."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    max_depth: int = Field(
        default=64,
        ge=1,
        description="Maximum nesting of sub-expressions",
    )
    validate_regex: bool = Field(
        default=True,
        description="Compile ~ feature tokens while parsing",
    )
    regex_cache_size: int = Field(
        default=256,
        ge=0,
        description="Compiled patterns memoized per evaluator (0 disables)",
    )

    @classmethod
    def from_yaml(cls, yaml_content: str) -> "EngineConfig":
        """Load configuration from YAML content."""
        data = yaml.safe_load(yaml_content) or {}
        return cls.model_validate(data)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "EngineConfig":
        """Load configuration from a file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.from_yaml(f.read())


DEFAULT_CONFIG = EngineConfig()
