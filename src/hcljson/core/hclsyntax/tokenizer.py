"""
Tokenizer for HCL native syntax.

Converts source text into a flat token sequence. Quoted strings and
heredocs are split into literal chunks and ``${``/``%{`` sequence markers;
the tokens between a sequence marker and its closing ``}`` are ordinary
expression tokens. Newlines are emitted as tokens because the parser
treats them as terminators in bodies and object constructors.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum, auto


class TokenKind(StrEnum):
    """Token types for HCL native syntax."""

    # Literals and names
    NUMBER = auto()
    IDENT = auto()

    # Templates
    OQUOTE = auto()  # "
    CQUOTE = auto()  # "
    OHEREDOC = auto()  # <<EOT / <<-EOT (value holds the opener)
    CHEREDOC = auto()  # closing marker line
    QUOTED_LIT = auto()  # raw literal text inside a quoted template
    STRING_LIT = auto()  # raw literal text inside a heredoc
    TEMPLATE_INTERP = auto()  # ${ or ${~
    TEMPLATE_CONTROL = auto()  # %{ or %{~
    TEMPLATE_SEQ_END = auto()  # } or ~}

    # Operators
    PLUS = auto()
    MINUS = auto()
    STAR = auto()
    SLASH = auto()
    PERCENT = auto()
    EQ = auto()  # ==
    NE = auto()  # !=
    LT = auto()
    GT = auto()
    LE = auto()
    GE = auto()
    AND = auto()  # &&
    OR = auto()  # ||
    BANG = auto()  # !

    # Punctuation
    EQUAL = auto()  # =
    FAT_ARROW = auto()  # =>
    QUESTION = auto()
    COLON = auto()
    COMMA = auto()
    DOT = auto()
    ELLIPSIS = auto()  # ...
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()

    NEWLINE = auto()
    EOF = auto()


class Token:
    """A single token; ``start``/``end`` are character offsets into the source."""

    __slots__ = ("kind", "value", "start", "end")

    def __init__(self, kind: TokenKind, value: str, start: int, end: int) -> None:
        self.kind = kind
        self.value = value
        self.start = start
        self.end = end

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.start}:{self.end})"


class TokenizeError(Exception):
    """Error during tokenization."""

    def __init__(self, message: str, pos: int) -> None:
        super().__init__(message)
        self.pos = pos


_NUMBER_RE = re.compile(r"\d+(\.\d+)?([eE][+-]?\d+)?")
_IDENT_RE = re.compile(r"[^\W\d][\w-]*")
_HEREDOC_RE = re.compile(r"<<(-?)([^\W\d][\w-]*)[ \t]*\r?\n")

_THREE_CHAR: dict[str, TokenKind] = {
    "...": TokenKind.ELLIPSIS,
}

_TWO_CHAR: dict[str, TokenKind] = {
    "==": TokenKind.EQ,
    "!=": TokenKind.NE,
    "<=": TokenKind.LE,
    ">=": TokenKind.GE,
    "&&": TokenKind.AND,
    "||": TokenKind.OR,
    "=>": TokenKind.FAT_ARROW,
}

_ONE_CHAR: dict[str, TokenKind] = {
    "+": TokenKind.PLUS,
    "-": TokenKind.MINUS,
    "*": TokenKind.STAR,
    "/": TokenKind.SLASH,
    "%": TokenKind.PERCENT,
    "<": TokenKind.LT,
    ">": TokenKind.GT,
    "!": TokenKind.BANG,
    "=": TokenKind.EQUAL,
    "?": TokenKind.QUESTION,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    ".": TokenKind.DOT,
    "(": TokenKind.LPAREN,
    ")": TokenKind.RPAREN,
    "[": TokenKind.LBRACKET,
    "]": TokenKind.RBRACKET,
}


@dataclass
class _Mode:
    """One level of the tokenizer's mode stack."""

    kind: str  # "normal" | "quoted" | "heredoc"
    depth: int = 0  # open braces inside a normal frame
    marker: str = ""  # heredoc closing marker
    at_line_start: bool = True  # heredoc only


class _Tokenizer:
    def __init__(self, source: str) -> None:
        self.source = source
        self.n = len(source)
        self.pos = 0
        self.tokens: list[Token] = []
        self.modes: list[_Mode] = [_Mode("normal")]

    def emit(self, kind: TokenKind, value: str, start: int, end: int) -> None:
        self.tokens.append(Token(kind, value, start, end))

    def run(self) -> list[Token]:
        while self.pos < self.n:
            mode = self.modes[-1]
            if mode.kind == "normal":
                self._lex_normal(mode)
            elif mode.kind == "quoted":
                self._lex_quoted()
            else:
                self._lex_heredoc(mode)

        if len(self.modes) > 1:
            kind = self.modes[-1].kind
            if kind == "heredoc":
                raise TokenizeError("Unterminated heredoc", self.pos)
            if kind == "quoted":
                raise TokenizeError("Unterminated template string", self.pos)
            raise TokenizeError("Unterminated template sequence; missing '}'", self.pos)

        self.emit(TokenKind.EOF, "", self.n, self.n)
        return self.tokens

    # -- Normal mode --

    def _lex_normal(self, mode: _Mode) -> None:
        src = self.source
        i = self.pos
        c = src[i]

        if c in " \t\r":
            self.pos += 1
            return

        if c == "\n":
            self.emit(TokenKind.NEWLINE, "\n", i, i + 1)
            self.pos += 1
            return

        if c == "#" or src.startswith("//", i):
            end = src.find("\n", i)
            self.pos = self.n if end == -1 else end
            return

        if src.startswith("/*", i):
            end = src.find("*/", i + 2)
            if end == -1:
                raise TokenizeError("Unterminated comment", i)
            self.pos = end + 2
            return

        if c == '"':
            self.emit(TokenKind.OQUOTE, '"', i, i + 1)
            self.pos += 1
            self.modes.append(_Mode("quoted"))
            return

        if c == "<":
            m = _HEREDOC_RE.match(src, i)
            if m:
                opener = f"<<{m.group(1)}{m.group(2)}"
                self.emit(TokenKind.OHEREDOC, opener, i, m.end())
                self.pos = m.end()
                self.modes.append(_Mode("heredoc", marker=m.group(2)))
                return

        if c.isdigit():
            m = _NUMBER_RE.match(src, i)
            assert m is not None
            self.emit(TokenKind.NUMBER, m.group(0), i, m.end())
            self.pos = m.end()
            return

        m = _IDENT_RE.match(src, i)
        if m:
            self.emit(TokenKind.IDENT, m.group(0), i, m.end())
            self.pos = m.end()
            return

        if c == "{":
            mode.depth += 1
            self.emit(TokenKind.LBRACE, "{", i, i + 1)
            self.pos += 1
            return

        in_sequence = len(self.modes) > 1
        if c == "}":
            if mode.depth > 0 or not in_sequence:
                mode.depth = max(mode.depth - 1, 0)
                self.emit(TokenKind.RBRACE, "}", i, i + 1)
            else:
                self.emit(TokenKind.TEMPLATE_SEQ_END, "}", i, i + 1)
                self.modes.pop()
            self.pos += 1
            return

        if c == "~" and src.startswith("~}", i) and mode.depth == 0 and in_sequence:
            self.emit(TokenKind.TEMPLATE_SEQ_END, "~}", i, i + 2)
            self.modes.pop()
            self.pos += 2
            return

        for table, width in ((_THREE_CHAR, 3), (_TWO_CHAR, 2), (_ONE_CHAR, 1)):
            chunk = src[i : i + width]
            if chunk in table:
                self.emit(table[chunk], chunk, i, i + width)
                self.pos += width
                return

        raise TokenizeError(f"Unexpected character: {c!r}", i)

    # -- Template modes --

    def _open_sequence(self, start: int) -> None:
        """Emit ``${``/``%{`` (with optional strip marker) and enter normal mode."""
        src = self.source
        kind = TokenKind.TEMPLATE_INTERP if src[start] == "$" else TokenKind.TEMPLATE_CONTROL
        end = start + 2
        if src.startswith("~", end):
            end += 1
        self.emit(kind, src[start:end], start, end)
        self.pos = end
        self.modes.append(_Mode("normal"))

    def _lex_quoted(self) -> None:
        src = self.source
        start = i = self.pos

        while i < self.n:
            c = src[i]
            if c == '"' or c == "\n":
                break
            if c == "\\":
                i += 2
                continue
            if src.startswith("$${", i) or src.startswith("%%{", i):
                i += 3
                continue
            if src.startswith("${", i) or src.startswith("%{", i):
                break
            i += 1

        if i > start:
            self.emit(TokenKind.QUOTED_LIT, src[start:i], start, i)
        self.pos = min(i, self.n)

        if i >= self.n:
            return
        if src[i] == '"':
            self.emit(TokenKind.CQUOTE, '"', i, i + 1)
            self.pos = i + 1
            self.modes.pop()
        elif src[i] == "\n":
            raise TokenizeError("Unterminated template string", start)
        else:
            self._open_sequence(i)

    def _lex_heredoc(self, mode: _Mode) -> None:
        src = self.source
        start = i = self.pos

        if mode.at_line_start:
            m = re.compile(r"[ \t]*" + re.escape(mode.marker) + r"[ \t]*(?=\r?\n|$)").match(src, i)
            if m:
                self.emit(TokenKind.CHEREDOC, m.group(0), i, m.end())
                self.pos = m.end()
                self.modes.pop()
                return

        mode.at_line_start = False
        while i < self.n:
            if src[i] == "\n":
                i += 1
                mode.at_line_start = True
                break
            if src.startswith("$${", i) or src.startswith("%%{", i):
                i += 3
                continue
            if src.startswith("${", i) or src.startswith("%{", i):
                break
            i += 1

        if i > start:
            self.emit(TokenKind.STRING_LIT, src[start:i], start, i)
        self.pos = i

        if i < self.n and not mode.at_line_start:
            self._open_sequence(i)


def tokenize(source: str) -> list[Token]:
    """Tokenize HCL source text into a list of tokens ending with EOF."""
    return _Tokenizer(source).run()
