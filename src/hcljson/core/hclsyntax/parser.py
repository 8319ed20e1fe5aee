"""
Recursive descent parser for HCL native syntax.

Grammar (expressions, precedence low to high):
    expr        → binary ("?" expr ":" expr)?
    binary      → operands joined by || , && , == != , < > <= >= , + - , * / %
    unary       → ("-" | "!") unary | postfix
    postfix     → term ("." IDENT | "." NUMBER | ".*" | "[" expr "]" | "[*]")*
    term        → NUMBER | "true" | "false" | "null" | template | heredoc
                | IDENT "(" args ")" | IDENT | "(" expr ")" | tuple | object
    tuple       → "[" (expr ("," expr)* ","?)? "]" | "[" for_intro expr ("if" expr)? "]"
    object      → "{" (expr ("=" | ":") expr ("," | NEWLINE))* "}"
                | "{" for_intro expr "=>" expr "..."? ("if" expr)? "}"
    for_intro   → "for" IDENT ("," IDENT)? "in" expr ":"

Bodies hold attributes (``name = expr``) and blocks
(``type label* { body }``), one per line.
"""

from __future__ import annotations

import bisect
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation

from hcljson.core.errors import make_parse_error
from hcljson.core.hclsyntax.tokenizer import Token, TokenizeError, TokenKind, tokenize
from hcljson.core.ir.syntax import (
    Attribute,
    BinaryOp,
    BinaryOperator,
    Block,
    Body,
    Conditional,
    Diagnostic,
    Expression,
    File,
    ForLoop,
    FunctionCall,
    Index,
    LiteralValue,
    Object,
    ObjectItem,
    Parentheses,
    RelativeTraversal,
    ScopeTraversal,
    SourcePos,
    SourceRange,
    Splat,
    Template,
    TemplateJoin,
    TemplateWrap,
    Tuple,
    UnaryOp,
    UnaryOperator,
)

logger = logging.getLogger(__name__)

_BINARY_LEVELS: list[dict[TokenKind, BinaryOperator]] = [
    {TokenKind.OR: BinaryOperator.OR},
    {TokenKind.AND: BinaryOperator.AND},
    {TokenKind.EQ: BinaryOperator.EQ, TokenKind.NE: BinaryOperator.NE},
    {
        TokenKind.LT: BinaryOperator.LT,
        TokenKind.GT: BinaryOperator.GT,
        TokenKind.LE: BinaryOperator.LE,
        TokenKind.GE: BinaryOperator.GE,
    },
    {TokenKind.PLUS: BinaryOperator.ADD, TokenKind.MINUS: BinaryOperator.SUB},
    {
        TokenKind.STAR: BinaryOperator.MUL,
        TokenKind.SLASH: BinaryOperator.DIV,
        TokenKind.PERCENT: BinaryOperator.MOD,
    },
]

_LITERAL_KEYWORDS: dict[str, bool | None] = {"true": True, "false": False, "null": None}

_SIMPLE_ESCAPES = {"n": "\n", "r": "\r", "t": "\t", '"': '"', "\\": "\\"}


class HclSyntaxError(Exception):
    """Error during parsing; positions are character offsets."""

    def __init__(self, summary: str, detail: str, start: int, end: int) -> None:
        super().__init__(f"{summary}: {detail}" if detail else summary)
        self.summary = summary
        self.detail = detail
        self.start = start
        self.end = end


def parse_number(text: str) -> int | Decimal:
    """Parse a numeric literal exactly; integral values become ``int``."""
    value = Decimal(text)
    if value == value.to_integral_value():
        return int(value)
    return value


class _Positions:
    """Maps character offsets to line/column/byte positions."""

    def __init__(self, text: str, filename: str) -> None:
        self.filename = filename
        self.line_starts = [0]
        self.byte_offsets = [0]
        for i, ch in enumerate(text):
            self.byte_offsets.append(self.byte_offsets[-1] + len(ch.encode("utf-8")))
            if ch == "\n":
                self.line_starts.append(i + 1)

    def pos(self, offset: int) -> SourcePos:
        line = bisect.bisect_right(self.line_starts, offset)
        column = offset - self.line_starts[line - 1] + 1
        return SourcePos(line=line, column=column, byte=self.byte_offsets[offset])

    def range(self, start: int, end: int) -> SourceRange:
        return SourceRange(filename=self.filename, start=self.pos(start), end=self.pos(end))


@dataclass
class _TemplateItem:
    """A flat template element before directive nesting is resolved."""

    kind: str  # "literal" | "interp" | "if" | "else" | "endif" | "for" | "endfor"
    start: int
    end: int
    text: str = ""
    expr: Expression | None = None
    key_var: str = ""
    value_var: str = ""
    strip_before: bool = False
    strip_after: bool = False
    line_start: bool = False
    extra: dict[str, int] = field(default_factory=dict)


class _Parser:
    """Recursive descent parser over a token list."""

    def __init__(self, text: str, tokens: list[Token], positions: _Positions) -> None:
        self.text = text
        self.tokens = tokens
        self.pos = 0
        self.positions = positions
        self.diagnostics: list[Diagnostic] = []
        self._newline_stack = [True]

    # -- Token access --

    @contextmanager
    def newlines(self, significant: bool) -> Iterator[None]:
        self._newline_stack.append(significant)
        try:
            yield
        finally:
            self._newline_stack.pop()

    def _skip_ignored(self, idx: int) -> int:
        if not self._newline_stack[-1]:
            while self.tokens[idx].kind == TokenKind.NEWLINE:
                idx += 1
        return idx

    @property
    def current(self) -> Token:
        self.pos = self._skip_ignored(self.pos)
        return self.tokens[self.pos]

    def peek(self, offset: int = 1) -> Token:
        idx = self._skip_ignored(self.pos)
        for _ in range(offset):
            if idx < len(self.tokens) - 1:
                idx = self._skip_ignored(idx + 1)
        return self.tokens[idx]

    def advance(self) -> Token:
        tok = self.current
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return tok

    def expect(self, kind: TokenKind, summary: str = "") -> Token:
        tok = self.current
        if tok.kind != kind:
            raise self.error(
                summary or f"Expected {kind}",
                f"got {_describe(tok)}",
                tok,
            )
        return self.advance()

    def match(self, *kinds: TokenKind) -> Token | None:
        if self.current.kind in kinds:
            return self.advance()
        return None

    def is_keyword(self, word: str, tok: Token | None = None) -> bool:
        tok = tok or self.current
        return tok.kind == TokenKind.IDENT and tok.value == word

    def error(self, summary: str, detail: str, tok: Token) -> HclSyntaxError:
        return HclSyntaxError(summary, detail, tok.start, max(tok.end, tok.start))

    def rng(self, start: int, end: int) -> SourceRange:
        return self.positions.range(start, end)

    # -- Bodies --

    def parse_file(self) -> Body:
        body = self.parse_body(TokenKind.EOF, 0)
        self.expect(TokenKind.EOF)
        return body

    def parse_body(self, end_kind: TokenKind, start: int) -> Body:
        blocks: list[Block] = []
        attributes: dict[str, Attribute] = {}

        while True:
            tok = self.current
            if tok.kind == TokenKind.NEWLINE:
                self.advance()
                continue
            if tok.kind == end_kind:
                break
            if tok.kind == TokenKind.EOF:
                raise self.error(
                    "Unclosed configuration block",
                    "there is no closing brace for this block before the end of the file",
                    tok,
                )
            if tok.kind != TokenKind.IDENT:
                raise self.error(
                    "Argument or block definition required",
                    "an argument or block definition is required here",
                    tok,
                )

            if self.peek().kind == TokenKind.EQUAL:
                attr = self.parse_attribute()
                if attr.name in attributes:
                    previous = attributes[attr.name].name_range
                    self.diagnostics.append(
                        Diagnostic(
                            summary="Attribute redefined",
                            detail=(
                                f"The argument {attr.name!r} was already set at "
                                f"{previous.start.line}:{previous.start.column}. "
                                "Each argument may be set only once."
                            ),
                            subject=attr.name_range,
                        )
                    )
                    continue
                attributes[attr.name] = attr
            else:
                blocks.append(self.parse_block())

        end = self.current.start
        return Body(blocks=blocks, attributes=attributes, src_range=self.rng(start, end))

    def parse_attribute(self) -> Attribute:
        name_tok = self.expect(TokenKind.IDENT)
        self.expect(TokenKind.EQUAL)
        expr = self.parse_expression()
        tok = self.current
        if tok.kind not in (TokenKind.NEWLINE, TokenKind.EOF, TokenKind.RBRACE):
            raise self.error(
                "Missing newline after argument",
                "an argument definition must end with a newline",
                tok,
            )
        return Attribute(
            name=name_tok.value,
            expr=expr,
            src_range=self.rng(name_tok.start, _end_offset(expr, self.positions)),
            name_range=self.rng(name_tok.start, name_tok.end),
        )

    def parse_block(self) -> Block:
        type_tok = self.expect(TokenKind.IDENT)
        labels: list[str] = []
        label_ranges: list[SourceRange] = []

        while self.current.kind != TokenKind.LBRACE:
            tok = self.current
            if tok.kind == TokenKind.IDENT:
                self.advance()
                labels.append(tok.value)
                label_ranges.append(self.rng(tok.start, tok.end))
            elif tok.kind == TokenKind.OQUOTE:
                label, start, end = self.parse_label_string()
                labels.append(label)
                label_ranges.append(self.rng(start, end))
            else:
                raise self.error(
                    "Invalid block definition",
                    "either a quoted string block label or an opening brace is expected here",
                    tok,
                )

        open_tok = self.expect(TokenKind.LBRACE)
        logger.debug("Parsing block %s %s", type_tok.value, labels)
        body = self.parse_body(TokenKind.RBRACE, open_tok.start)
        self.expect(TokenKind.RBRACE, "Unclosed configuration block")

        tok = self.current
        if tok.kind not in (TokenKind.NEWLINE, TokenKind.EOF):
            raise self.error(
                "Missing newline after block definition",
                "a block definition must end with a newline",
                tok,
            )

        return Block(
            type_name=type_tok.value,
            labels=labels,
            body=body,
            type_range=self.rng(type_tok.start, type_tok.end),
            label_ranges=label_ranges,
        )

    def parse_label_string(self) -> tuple[str, int, int]:
        open_tok = self.expect(TokenKind.OQUOTE)
        chunks: list[str] = []
        while self.current.kind == TokenKind.QUOTED_LIT:
            tok = self.advance()
            chunks.append(self.decode_quoted(tok))
        tok = self.current
        if tok.kind != TokenKind.CQUOTE:
            raise self.error(
                "Invalid block label",
                "template sequences are not allowed in block labels",
                tok,
            )
        self.advance()
        return "".join(chunks), open_tok.start, tok.end

    # -- Expressions --

    def parse_expression(self) -> Expression:
        condition = self.parse_binary(0)
        if not self.match(TokenKind.QUESTION):
            return condition
        true_result = self.parse_expression()
        self.expect(TokenKind.COLON, "Missing false expression in conditional")
        false_result = self.parse_expression()
        return Conditional(
            condition=condition,
            true_result=true_result,
            false_result=false_result,
            src_range=condition.src_range.through(false_result.src_range),
        )

    def parse_binary(self, level: int) -> Expression:
        if level == len(_BINARY_LEVELS):
            return self.parse_unary()
        operators = _BINARY_LEVELS[level]
        left = self.parse_binary(level + 1)
        while self.current.kind in operators:
            op = operators[self.advance().kind]
            right = self.parse_binary(level + 1)
            left = BinaryOp(
                op=op,
                left=left,
                right=right,
                src_range=left.src_range.through(right.src_range),
            )
        return left

    def parse_unary(self) -> Expression:
        tok = self.current
        if tok.kind in (TokenKind.MINUS, TokenKind.BANG):
            self.advance()
            operand = self.parse_unary()
            op = UnaryOperator.NEGATE if tok.kind == TokenKind.MINUS else UnaryOperator.NOT
            return UnaryOp(
                op=op,
                operand=operand,
                src_range=self.rng(tok.start, _end_offset(operand, self.positions)),
            )
        return self.parse_postfix(self.parse_term())

    def parse_postfix(self, expr: Expression) -> Expression:
        start = _start_offset(expr, self.positions)
        while True:
            tok = self.current
            if tok.kind == TokenKind.DOT:
                self.advance()
                step = self.current
                if step.kind == TokenKind.STAR:
                    self.advance()
                    expr = Splat(source=expr, src_range=self.rng(start, step.end))
                    continue
                if step.kind not in (TokenKind.IDENT, TokenKind.NUMBER):
                    raise self.error(
                        "Invalid attribute name",
                        "an attribute name is required after a dot",
                        step,
                    )
                self.advance()
                expr = self._extend_traversal(expr, step.value, start, step.end)
            elif tok.kind == TokenKind.LBRACKET:
                self.advance()
                with self.newlines(False):
                    if self.current.kind == TokenKind.STAR:
                        self.advance()
                        close = self.expect(TokenKind.RBRACKET)
                        expr = Splat(source=expr, full=True, src_range=self.rng(start, close.end))
                        continue
                    key = self.parse_expression()
                    close = self.expect(TokenKind.RBRACKET, "Missing close bracket on index")
                if isinstance(key, LiteralValue) and isinstance(expr, ScopeTraversal):
                    step = self.text[_start_offset(key, self.positions) : close.start]
                    expr = ScopeTraversal(
                        path=[*expr.path, f"[{step}]"],
                        src_range=self.rng(start, close.end),
                    )
                else:
                    expr = Index(collection=expr, key=key, src_range=self.rng(start, close.end))
            else:
                return expr

    def _extend_traversal(self, expr: Expression, name: str, start: int, end: int) -> Expression:
        src_range = self.rng(start, end)
        if isinstance(expr, ScopeTraversal):
            return ScopeTraversal(path=[*expr.path, name], src_range=src_range)
        if isinstance(expr, RelativeTraversal):
            return RelativeTraversal(source=expr.source, path=[*expr.path, name], src_range=src_range)
        return RelativeTraversal(source=expr, path=[name], src_range=src_range)

    def parse_term(self) -> Expression:
        tok = self.current

        if tok.kind == TokenKind.NUMBER:
            self.advance()
            try:
                value = parse_number(tok.value)
            except InvalidOperation as e:
                raise self.error("Invalid number literal", str(e), tok) from e
            return LiteralValue(value=value, src_range=self.rng(tok.start, tok.end))

        if tok.kind == TokenKind.IDENT:
            if tok.value in _LITERAL_KEYWORDS:
                self.advance()
                return LiteralValue(
                    value=_LITERAL_KEYWORDS[tok.value],
                    src_range=self.rng(tok.start, tok.end),
                )
            if self.peek().kind == TokenKind.LPAREN:
                return self.parse_function_call()
            self.advance()
            return ScopeTraversal(path=[tok.value], src_range=self.rng(tok.start, tok.end))

        if tok.kind == TokenKind.OQUOTE:
            return self.parse_quoted_template()

        if tok.kind == TokenKind.OHEREDOC:
            return self.parse_heredoc_template()

        if tok.kind == TokenKind.LPAREN:
            self.advance()
            with self.newlines(False):
                inner = self.parse_expression()
                close = self.expect(TokenKind.RPAREN, "Unbalanced parentheses")
            return Parentheses(expr=inner, src_range=self.rng(tok.start, close.end))

        if tok.kind == TokenKind.LBRACKET:
            return self.parse_tuple()

        if tok.kind == TokenKind.LBRACE:
            return self.parse_object()

        raise self.error(
            "Invalid expression",
            f"expected the start of an expression, but found {_describe(tok)}",
            tok,
        )

    def parse_function_call(self) -> FunctionCall:
        name_tok = self.expect(TokenKind.IDENT)
        self.expect(TokenKind.LPAREN)
        args: list[Expression] = []
        expand_final = False

        with self.newlines(False):
            while self.current.kind != TokenKind.RPAREN:
                args.append(self.parse_expression())
                if self.match(TokenKind.ELLIPSIS):
                    expand_final = True
                    break
                if not self.match(TokenKind.COMMA):
                    break
            close = self.expect(TokenKind.RPAREN, "Missing close parenthesis on function call")

        return FunctionCall(
            name=name_tok.value,
            args=args,
            expand_final=expand_final,
            src_range=self.rng(name_tok.start, close.end),
        )

    def _at_for_intro(self) -> bool:
        return self.is_keyword("for") and self.peek().kind == TokenKind.IDENT

    def parse_tuple(self) -> Expression:
        open_tok = self.expect(TokenKind.LBRACKET)
        with self.newlines(False):
            if self._at_for_intro():
                return self.parse_for(open_tok, TokenKind.RBRACKET)

            exprs: list[Expression] = []
            while self.current.kind != TokenKind.RBRACKET:
                exprs.append(self.parse_expression())
                if not self.match(TokenKind.COMMA):
                    break
            close = self.expect(TokenKind.RBRACKET, "Missing item separator")
        return Tuple(exprs=exprs, src_range=self.rng(open_tok.start, close.end))

    def parse_object(self) -> Expression:
        open_tok = self.expect(TokenKind.LBRACE)
        with self.newlines(False):
            if self._at_for_intro():
                return self.parse_for(open_tok, TokenKind.RBRACE)

        items: list[ObjectItem] = []
        with self.newlines(True):
            while True:
                while self.match(TokenKind.NEWLINE):
                    pass
                if self.current.kind == TokenKind.RBRACE:
                    break
                key = self.parse_expression()
                if not self.match(TokenKind.EQUAL, TokenKind.COLON):
                    raise self.error(
                        "Missing key/value separator",
                        "expected an equals sign (\"=\") to mark the beginning of the attribute value",
                        self.current,
                    )
                value = self.parse_expression()
                items.append(ObjectItem(key_expr=key, value_expr=value))
                if self.match(TokenKind.COMMA, TokenKind.NEWLINE):
                    continue
                if self.current.kind != TokenKind.RBRACE:
                    raise self.error(
                        "Missing attribute separator",
                        "expected a newline or comma to mark the beginning of the next attribute",
                        self.current,
                    )
            close = self.expect(TokenKind.RBRACE)
        return Object(items=items, src_range=self.rng(open_tok.start, close.end))

    def parse_for(self, open_tok: Token, close_kind: TokenKind) -> ForLoop:
        self.advance()  # for
        key_var = ""
        value_var = self.expect(TokenKind.IDENT, "Invalid 'for' expression").value
        if self.match(TokenKind.COMMA):
            key_var = value_var
            value_var = self.expect(TokenKind.IDENT, "Invalid 'for' expression").value
        if not self.is_keyword("in"):
            raise self.error("Invalid 'for' expression", "the 'in' keyword is required", self.current)
        self.advance()
        collection = self.parse_expression()
        self.expect(TokenKind.COLON, "Invalid 'for' expression")

        key_expr: Expression | None = None
        value_expr = self.parse_expression()
        if close_kind == TokenKind.RBRACE:
            self.expect(TokenKind.FAT_ARROW, "Invalid 'for' expression")
            key_expr = value_expr
            value_expr = self.parse_expression()
        grouped = bool(close_kind == TokenKind.RBRACE and self.match(TokenKind.ELLIPSIS))

        condition: Expression | None = None
        if self.is_keyword("if"):
            self.advance()
            condition = self.parse_expression()

        close = self.expect(close_kind, "Invalid 'for' expression")
        return ForLoop(
            key_var=key_var,
            value_var=value_var,
            collection=collection,
            key_expr=key_expr,
            value_expr=value_expr,
            condition=condition,
            grouped=grouped,
            src_range=self.rng(open_tok.start, close.end),
        )

    # -- Templates --

    def parse_quoted_template(self) -> Expression:
        open_tok = self.expect(TokenKind.OQUOTE)
        items = self.parse_template_items(TokenKind.CQUOTE)
        close = self.expect(TokenKind.CQUOTE, "Unterminated template string")
        return self.build_template(items, open_tok.start, close.end)

    def parse_heredoc_template(self) -> Expression:
        open_tok = self.expect(TokenKind.OHEREDOC)
        items = self.parse_template_items(TokenKind.CHEREDOC)
        close = self.expect(TokenKind.CHEREDOC, "Unterminated template string")
        if open_tok.value.startswith("<<-"):
            _trim_flush_indent(items)
        return self.build_template(items, open_tok.start, close.end)

    def parse_template_items(self, close_kind: TokenKind) -> list[_TemplateItem]:
        items: list[_TemplateItem] = []
        with self.newlines(True):
            while True:
                tok = self.current
                if tok.kind == close_kind:
                    break
                if tok.kind == TokenKind.QUOTED_LIT:
                    self.advance()
                    items.append(
                        _TemplateItem("literal", tok.start, tok.end, text=self.decode_quoted(tok))
                    )
                elif tok.kind == TokenKind.STRING_LIT:
                    self.advance()
                    line_start = tok.start == 0 or self.text[tok.start - 1] == "\n"
                    items.append(
                        _TemplateItem(
                            "literal",
                            tok.start,
                            tok.end,
                            text=_unescape_sequences(tok.value),
                            line_start=line_start,
                        )
                    )
                elif tok.kind == TokenKind.TEMPLATE_INTERP:
                    items.append(self.parse_interpolation())
                elif tok.kind == TokenKind.TEMPLATE_CONTROL:
                    items.append(self.parse_directive())
                else:
                    raise self.error(
                        "Unterminated template string",
                        f"unexpected {_describe(tok)} in template",
                        tok,
                    )
        return items

    def parse_interpolation(self) -> _TemplateItem:
        open_tok = self.advance()
        with self.newlines(False):
            expr = self.parse_expression()
            close = self.expect(TokenKind.TEMPLATE_SEQ_END, "Extra characters after interpolation expression")
        return _TemplateItem(
            "interp",
            open_tok.start,
            close.end,
            expr=expr,
            strip_before=open_tok.value.endswith("~"),
            strip_after=close.value.startswith("~"),
        )

    def parse_directive(self) -> _TemplateItem:
        open_tok = self.advance()
        with self.newlines(False):
            word = self.expect(TokenKind.IDENT, "Invalid template directive")
            item = _TemplateItem(word.value, open_tok.start, open_tok.end)
            if word.value == "if":
                item.expr = self.parse_expression()
            elif word.value == "for":
                item.value_var = self.expect(TokenKind.IDENT, "Invalid template directive").value
                if self.match(TokenKind.COMMA):
                    item.key_var = item.value_var
                    item.value_var = self.expect(TokenKind.IDENT, "Invalid template directive").value
                if not self.is_keyword("in"):
                    raise self.error(
                        "Invalid template directive",
                        "the 'in' keyword is required in a 'for' directive",
                        self.current,
                    )
                self.advance()
                item.expr = self.parse_expression()
            elif word.value not in ("else", "endif", "endfor"):
                raise self.error(
                    "Invalid template directive",
                    f"{word.value!r} is not a valid template directive",
                    word,
                )
            close = self.expect(TokenKind.TEMPLATE_SEQ_END, "Extra characters in template directive")
        item.end = close.end
        item.strip_before = open_tok.value.endswith("~")
        item.strip_after = close.value.startswith("~")
        return item

    def build_template(self, items: list[_TemplateItem], start: int, end: int) -> Expression:
        _apply_strip_markers(items)
        src_range = self.rng(start, end)

        if len(items) == 1 and items[0].kind == "interp":
            assert items[0].expr is not None
            return TemplateWrap(wrapped=items[0].expr, src_range=src_range)

        parts, _, terminator = self._nest_parts(items, 0)
        if terminator is not None:
            raise HclSyntaxError(
                "Unexpected template directive",
                f"'{terminator.kind}' without a matching opening directive",
                terminator.start,
                terminator.end,
            )
        if not parts:
            parts = [LiteralValue(value="", src_range=src_range)]
        return Template(parts=parts, src_range=src_range)

    def _nest_parts(
        self,
        items: list[_TemplateItem],
        idx: int,
    ) -> tuple[list[Expression], int, _TemplateItem | None]:
        """Fold flat items into parts until a closing directive is reached."""
        parts: list[Expression] = []
        while idx < len(items):
            item = items[idx]
            idx += 1

            if item.kind == "literal":
                if not item.text:
                    continue
                literal = LiteralValue(value=item.text, src_range=self.rng(item.start, item.end))
                if parts and isinstance(parts[-1], LiteralValue) and isinstance(parts[-1].value, str):
                    previous = parts.pop()
                    literal = LiteralValue(
                        value=f"{previous.value}{item.text}",
                        src_range=previous.src_range.through(literal.src_range),
                    )
                parts.append(literal)
            elif item.kind == "interp":
                assert item.expr is not None
                parts.append(item.expr)
            elif item.kind == "if":
                parts.append(self._nest_if(item, items, idx))
                idx = item.extra["next"]
            elif item.kind == "for":
                parts.append(self._nest_for(item, items, idx))
                idx = item.extra["next"]
            else:
                return parts, idx, item
        return parts, idx, None

    def _nest_if(self, item: _TemplateItem, items: list[_TemplateItem], idx: int) -> Conditional:
        assert item.expr is not None
        true_parts, idx, term = self._nest_parts(items, idx)
        true_end = term.start if term else item.end
        false_parts: list[Expression] = []
        false_start = false_end = true_end
        if term is not None and term.kind == "else":
            false_start = term.end
            false_parts, idx, term = self._nest_parts(items, idx)
            false_end = term.start if term else false_start
        if term is None or term.kind != "endif":
            raise HclSyntaxError(
                "Unterminated template directive",
                "an 'if' directive must be closed with %{endif}",
                item.start,
                item.end,
            )
        item.extra["next"] = idx

        true_result = Template(parts=true_parts, src_range=self.rng(item.end, true_end))
        false_result: Expression
        if false_parts:
            false_result = Template(parts=false_parts, src_range=self.rng(false_start, false_end))
        else:
            false_result = LiteralValue(value="", src_range=self.rng(false_start, false_end))
        return Conditional(
            condition=item.expr,
            true_result=true_result,
            false_result=false_result,
            src_range=self.rng(item.start, term.end),
        )

    def _nest_for(self, item: _TemplateItem, items: list[_TemplateItem], idx: int) -> TemplateJoin:
        assert item.expr is not None
        body_parts, idx, term = self._nest_parts(items, idx)
        if term is None or term.kind != "endfor":
            raise HclSyntaxError(
                "Unterminated template directive",
                "a 'for' directive must be closed with %{endfor}",
                item.start,
                item.end,
            )
        item.extra["next"] = idx
        src_range = self.rng(item.start, term.end)
        loop = ForLoop(
            key_var=item.key_var,
            value_var=item.value_var,
            collection=item.expr,
            value_expr=Template(parts=body_parts, src_range=self.rng(item.end, term.start)),
            src_range=src_range,
        )
        return TemplateJoin(loop=loop, src_range=src_range)

    def decode_quoted(self, tok: Token) -> str:
        """Decode backslash escapes and ``$${``/``%%{`` in a quoted literal."""
        raw = tok.value
        out: list[str] = []
        i = 0
        while i < len(raw):
            c = raw[i]
            if c == "\\":
                esc = raw[i + 1 : i + 2]
                if esc in _SIMPLE_ESCAPES:
                    out.append(_SIMPLE_ESCAPES[esc])
                    i += 2
                    continue
                if esc in ("u", "U"):
                    width = 4 if esc == "u" else 8
                    digits = raw[i + 2 : i + 2 + width]
                    if len(digits) == width and all(d in "0123456789abcdefABCDEF" for d in digits):
                        out.append(chr(int(digits, 16)))
                        i += 2 + width
                        continue
                raise HclSyntaxError(
                    "Invalid escape sequence",
                    f"the symbol {esc!r} is not a valid escape sequence selector",
                    tok.start + i,
                    tok.start + i + 2,
                )
            if raw.startswith("$${", i) or raw.startswith("%%{", i):
                out.append(raw[i + 1 : i + 3])
                i += 3
                continue
            out.append(c)
            i += 1
        return "".join(out)


def _unescape_sequences(raw: str) -> str:
    return raw.replace("$${", "${").replace("%%{", "%{")


def _apply_strip_markers(items: list[_TemplateItem]) -> None:
    """Apply ``~`` markers by trimming whitespace from neighbouring literals."""
    for i, item in enumerate(items):
        if item.kind == "literal":
            continue
        if item.strip_before and i > 0 and items[i - 1].kind == "literal":
            items[i - 1].text = items[i - 1].text.rstrip()
        if item.strip_after and i + 1 < len(items) and items[i + 1].kind == "literal":
            items[i + 1].text = items[i + 1].text.lstrip()


def _trim_flush_indent(items: list[_TemplateItem]) -> None:
    """Remove the common leading indentation from a ``<<-`` heredoc."""
    indents: list[int] = []
    for item in items:
        if item.kind != "literal" or not item.line_start:
            continue
        if not item.text.strip(" \t\r\n"):
            continue
        indents.append(len(item.text) - len(item.text.lstrip(" \t")))
    if not indents:
        return
    trim = min(indents)
    for item in items:
        if item.kind == "literal" and item.line_start:
            leading = len(item.text) - len(item.text.lstrip(" \t"))
            item.text = item.text[min(trim, leading) :]


def _start_offset(expr: Expression, positions: _Positions) -> int:
    return _char_offset(expr.src_range.start, positions)


def _end_offset(expr: Expression, positions: _Positions) -> int:
    return _char_offset(expr.src_range.end, positions)


def _char_offset(pos: SourcePos, positions: _Positions) -> int:
    return positions.line_starts[pos.line - 1] + pos.column - 1


def _describe(tok: Token) -> str:
    if tok.kind == TokenKind.EOF:
        return "end of file"
    if tok.kind == TokenKind.NEWLINE:
        return "newline"
    return f"{tok.kind} ({tok.value!r})"


def _diagnostic(positions: _Positions, summary: str, detail: str, start: int, end: int) -> Diagnostic:
    start = min(start, len(positions.byte_offsets) - 1)
    end = min(max(end, start), len(positions.byte_offsets) - 1)
    return Diagnostic(summary=summary, detail=detail, subject=positions.range(start, end))


def parse_config(source: bytes | str, filename: str = "<input>") -> File:
    """Parse HCL native-syntax source into a File.

    Args:
        source: Raw document bytes (UTF-8) or already-decoded text.
        filename: Name used in ranges and diagnostics.

    Returns:
        Parsed file holding the source bytes and root body.

    Raises:
        ParseError: If the source is not valid HCL.
    """
    if isinstance(source, bytes):
        raw = source
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            diag = Diagnostic(summary="Invalid character encoding", detail=str(e))
            raise make_parse_error([diag], raw) from e
    else:
        text = source
        raw = source.encode("utf-8")

    positions = _Positions(text, filename)
    try:
        tokens = tokenize(text)
    except TokenizeError as e:
        diag = _diagnostic(positions, "Invalid syntax", str(e), e.pos, e.pos + 1)
        raise make_parse_error([diag], raw) from e

    parser = _Parser(text, tokens, positions)
    try:
        body = parser.parse_file()
    except HclSyntaxError as e:
        diag = _diagnostic(positions, e.summary, e.detail, e.start, e.end)
        raise make_parse_error([*parser.diagnostics, diag], raw) from e

    if parser.diagnostics:
        raise make_parse_error(parser.diagnostics, raw)

    logger.debug("Parsed %s: %d blocks, %d attributes", filename, len(body.blocks), len(body.attributes))
    return File(filename=filename, source=raw, body=body)
