"""
Converter settings.

Settings can be given directly or loaded from TOML: a dedicated
``hcljson.toml`` (top-level keys or an ``[hcljson]`` table) or the
``[tool.hcljson]`` table of a ``pyproject.toml``.

Example ``hcljson.toml``:

    indent = 2
    escape_html = false
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import HclJsonError

logger = logging.getLogger(__name__)


class ConverterSettings(BaseModel):
    """Options for conversion and JSON encoding."""

    indent: int | None = Field(default=None, ge=0, description="Pretty-print indent; None for compact output")
    sort_keys: bool = Field(default=True, description="Emit object keys in sorted order")
    escape_html: bool = Field(default=False, description="Escape <, > and & as \\u sequences")
    repair_closing_paren: bool = Field(
        default=True,
        description="Include a ')' immediately following an expression's source range",
    )

    model_config = ConfigDict(frozen=True, extra="forbid")


def _settings_table(data: dict[str, Any], path: Path) -> dict[str, Any]:
    if path.name == "pyproject.toml":
        table = data.get("tool", {}).get("hcljson", {})
    else:
        table = data.get("hcljson", data)
    if not isinstance(table, dict):
        raise HclJsonError(f"Invalid settings in {path}: expected a table")
    return table


def load_settings(path: Path) -> ConverterSettings:
    """
    Load converter settings from a TOML file.

    Args:
        path: Path to ``hcljson.toml`` or ``pyproject.toml``

    Returns:
        Validated settings; defaults for anything the file leaves out

    Raises:
        HclJsonError: If the file cannot be read or holds invalid settings
    """
    try:
        data = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise HclJsonError(f"Unable to read settings from {path}: {e}") from e

    table = _settings_table(data, path)
    try:
        settings = ConverterSettings(**table)
    except ValidationError as e:
        raise HclJsonError(f"Invalid settings in {path}: {e}") from e

    logger.debug("Loaded settings from %s: %s", path, settings)
    return settings
