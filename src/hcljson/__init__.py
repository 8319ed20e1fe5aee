"""
hcljson - convert HCL configuration to JSON.

Literal values become JSON values; everything that would need evaluation
is kept as source text inside ``${...}`` placeholders so the JSON can be
turned back into HCL later.
"""

from __future__ import annotations

from ._version import get_version
from .core import ir
from .core.convert import convert_file, encode_json, file_to_json, hcl_to_json
from .core.errors import (
    ConversionError,
    EncodingError,
    EvaluationError,
    HclJsonError,
    ParseError,
    StructuralConflict,
    StructuralTypeMismatch,
)
from .core.hclsyntax import parse_config
from .core.settings import ConverterSettings, load_settings

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "ConversionError",
    "ConverterSettings",
    "EncodingError",
    "EvaluationError",
    "HclJsonError",
    "ParseError",
    "StructuralConflict",
    "StructuralTypeMismatch",
    "convert_file",
    "encode_json",
    "file_to_json",
    "hcl_to_json",
    "load_settings",
    "parse_config",
]
