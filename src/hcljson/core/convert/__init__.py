"""
HCL to JSON conversion.

Usage:
    from hcljson.core.convert import hcl_to_json

    hcl_to_json(b'name = "web"\\n', "main.tf")
    # b'{"name":"web"}\\n'
"""

from hcljson.core.convert.api import convert_file, encode_json, file_to_json, hcl_to_json
from hcljson.core.convert.converter import Converter
from hcljson.core.convert.source import SourceBuffer

__all__ = [
    "Converter",
    "SourceBuffer",
    "convert_file",
    "encode_json",
    "file_to_json",
    "hcl_to_json",
]
