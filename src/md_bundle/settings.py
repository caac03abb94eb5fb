from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

from md_bundle.config import DEFAULT_EXPORT_NAME, DEFAULT_STRUCTURE_NAME

ENV_FILE = find_dotenv(usecwd=True)
ENV_PREFIX = "MD_BUNDLE_"


def env_default(name: str, fallback: str = "") -> str:
    """Read `MD_BUNDLE_{name}` from the process environment, then from the nearest `.env`."""
    key = f"{ENV_PREFIX}{name}"
    if key in os.environ:
        return os.environ[key]
    values = dotenv_values(ENV_FILE) if ENV_FILE else {}
    return values.get(key) or fallback


def load_selection_file(path: Path) -> list[str]:
    """Read selected paths from a YAML file.

    The file holds either a list of paths or a mapping with a `paths` list.

    Args:
        path (Path): the YAML file

    Raises:
        ValueError: if the file does not contain a list of strings

    Returns:
        list[str]: the selected paths, in file order
    """
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or []
    if isinstance(data, dict):
        data = data.get("paths", [])
    if not isinstance(data, list) or not all(isinstance(item, str) for item in data):
        msg = f"{path} must contain a list of paths"
        raise ValueError(msg)
    return data


class Settings(BaseModel):
    """Configuration settings for the md_bundle command line."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    command: Literal["export", "structure", "restore", "list"] = Field(..., description="Subcommand.")
    root: Path = Field(default_factory=Path.cwd, description="Root directory.")
    paths: list[str] = Field(default_factory=list, description="Selected paths, relative to root.")
    selection_file: Path | None = Field(default=None, description="YAML file listing selected paths.")
    output: Path | None = Field(default=None, description="Output document.")
    title: str = Field(default="", description="Document title.")
    force: bool = Field(default=False, description="Overwrite the output without asking.")
    display_paths: bool = Field(default=False, description="Selected paths are prefixed with the root name.")

    document: Path | None = Field(default=None, description="Markdown document to restore.")
    target: Path = Field(default_factory=Path.cwd, description="Directory to restore into.")

    log_file: str = Field(default_factory=lambda: env_default("LOG_FILE"), description="Log file path.")
    log_level: str = Field(
        default_factory=lambda: env_default("LOG_LEVEL", "INFO"),
        description="Minimum log level.",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.strip().upper() or "INFO"

    def selection(self) -> list[str]:
        """Selected paths from the command line followed by those of the selection file."""
        selected = list(self.paths)
        if self.selection_file is not None:
            selected.extend(load_selection_file(self.selection_file))
        return selected

    def output_path(self) -> Path:
        """The output document, defaulting to a per-command name in the working directory."""
        if self.output is not None:
            return self.output
        name = DEFAULT_STRUCTURE_NAME if self.command == "structure" else DEFAULT_EXPORT_NAME
        return Path.cwd() / name
