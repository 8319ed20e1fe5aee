"""
Entry points: HCL source or parsed file in, JSON out.
"""

from __future__ import annotations

import logging
from typing import Any

import simplejson

from hcljson.core.convert.converter import Converter, JsonObject
from hcljson.core.convert.source import SourceBuffer
from hcljson.core.errors import EncodingError, StructuralTypeMismatch
from hcljson.core.hclsyntax import parse_config
from hcljson.core.ir.syntax import Body, File
from hcljson.core.settings import ConverterSettings

logger = logging.getLogger(__name__)

_HTML_ESCAPES = {"<": "\\u003c", ">": "\\u003e", "&": "\\u0026"}


def convert_file(file: File, settings: ConverterSettings | None = None) -> JsonObject:
    """Convert a parsed file to its JSON object form.

    Raises:
        StructuralTypeMismatch: If the file's body is not a native-syntax body.
        ConversionError: If any block or attribute fails to convert.
    """
    settings = settings or ConverterSettings()
    if not isinstance(file.body, Body):
        raise StructuralTypeMismatch(
            f"convert file body to body type: got {type(file.body).__name__}"
        )

    converter = Converter(SourceBuffer(file.source, settings.repair_closing_paren))
    return converter.convert_body(file.body)


def encode_json(value: Any, settings: ConverterSettings | None = None) -> bytes:
    """Serialize a converted value as UTF-8 JSON followed by a newline.

    ``<``, ``>`` and ``&`` are written literally unless ``escape_html`` is set.
    ``Decimal`` values are written as JSON numbers with every digit kept.

    Raises:
        EncodingError: If the value cannot be represented as JSON.
    """
    settings = settings or ConverterSettings()
    separators = (",", ":") if settings.indent is None else (",", ": ")
    try:
        text = simplejson.dumps(
            value,
            use_decimal=True,
            ensure_ascii=False,
            allow_nan=False,
            sort_keys=settings.sort_keys,
            indent=settings.indent,
            separators=separators,
        )
    except (TypeError, ValueError) as e:
        raise EncodingError(f"marshal json: {e}") from e

    if settings.escape_html:
        for char, escaped in _HTML_ESCAPES.items():
            text = text.replace(char, escaped)
    return (text + "\n").encode("utf-8")


def file_to_json(file: File, settings: ConverterSettings | None = None) -> bytes:
    """Convert a parsed file and serialize the result."""
    converted = convert_file(file, settings)
    return encode_json(converted, settings)


def hcl_to_json(
    data: bytes | str,
    filename: str = "<input>",
    settings: ConverterSettings | None = None,
) -> bytes:
    """Convert HCL source to JSON bytes.

    Args:
        data: HCL source, as bytes or text.
        filename: Name used in diagnostics and source ranges.
        settings: Encoding and conversion options.

    Returns:
        The JSON document, UTF-8 encoded, newline terminated.

    Raises:
        ParseError: If the source is not valid HCL.
        ConversionError: If any block or attribute fails to convert.
        EncodingError: If the result cannot be serialized.
    """
    file = parse_config(data, filename)
    logger.debug("Converting %s", filename)
    return file_to_json(file, settings)
