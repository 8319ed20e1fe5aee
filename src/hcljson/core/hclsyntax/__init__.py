"""
HCL native-syntax reader.

Tokenizer and parser producing the syntax tree in ``hcljson.core.ir``.

Usage:
    from hcljson.core.hclsyntax import parse_config

    file = parse_config(b'region = "eu-west-1"\\n', "main.tf")
    file.body.attributes["region"].expr
"""

from hcljson.core.hclsyntax.parser import HclSyntaxError, parse_config, parse_number
from hcljson.core.hclsyntax.tokenizer import Token, TokenizeError, TokenKind, tokenize

__all__ = [
    "HclSyntaxError",
    "Token",
    "TokenKind",
    "TokenizeError",
    "parse_config",
    "parse_number",
    "tokenize",
]
