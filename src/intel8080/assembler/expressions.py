"""
Assembly Expression Parser and Evaluator
========================================

This module parses operand expressions into immutable trees and evaluates
them against a symbol table. Parsing and evaluation are separate steps:
an expression may name a label declared further down the file, so the
tree is built when the statement is parsed and evaluated later, once the
first pass has fixed every label address.

Supported Operations
--------------------
**Arithmetic:** + - * / MOD
**Shifts:** SHL SHR
**Bitwise:** AND OR XOR, and unary NOT

**Atoms:**
- Numeric literal (any base the lexer accepts)
- Character literal ('A')
- Label reference
- $ - address of the statement being assembled
- ( expression )

Expression Grammar
------------------
Precedence climbing, from lowest to highest binding:

1. OR XOR
2. AND
3. NOT (unary)
4. + -
5. * / MOD SHL SHR
6. Atom

Every binary level is left-associative. All results are reduced modulo
65536, so ``0 - 1`` evaluates to $FFFF.

Division and MOD by zero are detected when the tree is evaluated, never
when it is parsed, since the divisor may be a label.

Example Usage
-------------
>>> from intel8080.assembler.lexer import tokenize
>>> from intel8080.assembler.expressions import ExpressionParser, ExpressionEvaluator
>>> from intel8080.assembler.symbols import SymbolTable
>>> tree = ExpressionParser(tokenize("BUFFER + 2*4")).parse()
>>> table = SymbolTable()
>>> table.define("BUFFER", 0x1000)
>>> hex(ExpressionEvaluator(table).evaluate(tree))
'0x1008'
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional

from intel8080.assembler.lexer import Token, TokenType
from intel8080.assembler.symbols import SymbolTable
from intel8080.errors import (
    DivisionByZeroError,
    ParseError,
    SourceLocation,
    UndefinedLabelError,
)


# =============================================================================
# Expression Tree Nodes
# =============================================================================

class ExprNodeType(Enum):
    """Types of expression tree nodes."""
    LITERAL = auto()          # Numeric literal
    CHAR = auto()             # Character literal
    LABEL = auto()            # Label reference
    CURRENT_ADDRESS = auto()  # $
    UNARY_OP = auto()         # NOT a
    BINARY_OP = auto()        # a + b


@dataclass(frozen=True)
class ExprNode:
    """
    Immutable expression tree node.

    Each node owns its children; trees are never shared between
    statements and never modified after parsing.
    """
    node_type: ExprNodeType
    location: SourceLocation
    value: int | str | None = None   # LITERAL/CHAR value, LABEL name
    operator: str | None = None      # UNARY_OP/BINARY_OP operator
    left: Optional["ExprNode"] = None   # BINARY_OP left, UNARY_OP operand
    right: Optional["ExprNode"] = None  # BINARY_OP right

    def __str__(self) -> str:
        if self.node_type == ExprNodeType.LITERAL:
            return str(self.value)
        if self.node_type == ExprNodeType.CHAR:
            return repr(chr(self.value))
        if self.node_type == ExprNodeType.LABEL:
            return str(self.value)
        if self.node_type == ExprNodeType.CURRENT_ADDRESS:
            return "$"
        if self.node_type == ExprNodeType.UNARY_OP:
            return f"({self.operator} {self.left})"
        return f"({self.left} {self.operator} {self.right})"

    def labels(self) -> set[str]:
        """Names of every label referenced in this tree."""
        if self.node_type == ExprNodeType.LABEL:
            return {self.value}
        found: set[str] = set()
        if self.left is not None:
            found |= self.left.labels()
        if self.right is not None:
            found |= self.right.labels()
        return found


# Operator tokens per binary precedence level, lowest first
_OR_LEVEL = {TokenType.OR: "OR", TokenType.XOR: "XOR"}
_AND_LEVEL = {TokenType.AND: "AND"}
_ADDITIVE_LEVEL = {TokenType.PLUS: "+", TokenType.MINUS: "-"}
_MULTIPLICATIVE_LEVEL = {
    TokenType.STAR: "*",
    TokenType.SLASH: "/",
    TokenType.MOD: "MOD",
    TokenType.SHL: "SHL",
    TokenType.SHR: "SHR",
}

# Tokens that can begin an expression
EXPRESSION_START = frozenset({
    TokenType.NUMBER,
    TokenType.CHAR,
    TokenType.IDENTIFIER,
    TokenType.DOLLAR,
    TokenType.LPAREN,
    TokenType.NOT,
})


# =============================================================================
# Expression Parser
# =============================================================================

class ExpressionParser:
    """
    Builds an expression tree from a token list.

    The parser starts at ``pos`` and consumes exactly the tokens that belong
    to one expression. Afterwards ``pos`` indexes the first unconsumed
    token, which the statement parser continues from.

    Attributes:
        pos: Current index into the token list
    """

    def __init__(
        self,
        tokens: list[Token],
        pos: int = 0,
        case_sensitive: bool = False,
        source_line: Optional[str] = None,
    ):
        """
        Args:
            tokens: Token list (normally the whole file, ending with EOF)
            pos: Index of the first token of the expression
            case_sensitive: Keep label spelling instead of upper-casing
            source_line: Source text for error context
        """
        self._tokens = tokens
        self.pos = pos
        self._case_sensitive = case_sensitive
        self._source_line = source_line

    def parse(self) -> ExprNode:
        """
        Parse one expression.

        Raises:
            ParseError: On unbalanced parentheses, a missing operand, or a
                        token that cannot start an atom
        """
        return self._parse_or()

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _current(self) -> Token:
        if self.pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else None
            return Token(
                TokenType.EOF, None,
                last.line if last else 1,
                last.column if last else 1,
                last.filename if last else "<input>",
            )
        return self._tokens[self.pos]

    def _advance(self) -> Token:
        token = self._current()
        self.pos += 1
        return token

    def _error(self, message: str, token: Token) -> ParseError:
        return ParseError(message, token.location, source_line=self._source_line)

    # =========================================================================
    # Precedence Levels
    # =========================================================================

    def _parse_binary_level(self, operators: dict[TokenType, str], operand) -> ExprNode:
        """Parse one left-associative binary level."""
        left = operand()

        while self._current().type in operators:
            op_token = self._advance()
            right = operand()
            left = ExprNode(
                ExprNodeType.BINARY_OP,
                op_token.location,
                operator=operators[op_token.type],
                left=left,
                right=right,
            )

        return left

    def _parse_or(self) -> ExprNode:
        """Parse OR and XOR (lowest precedence)."""
        return self._parse_binary_level(_OR_LEVEL, self._parse_and)

    def _parse_and(self) -> ExprNode:
        return self._parse_binary_level(_AND_LEVEL, self._parse_not)

    def _parse_not(self) -> ExprNode:
        """Parse unary NOT, which binds looser than arithmetic."""
        if self._current().type == TokenType.NOT:
            op_token = self._advance()
            operand = self._parse_not()
            return ExprNode(
                ExprNodeType.UNARY_OP,
                op_token.location,
                operator="NOT",
                left=operand,
            )
        return self._parse_additive()

    def _parse_additive(self) -> ExprNode:
        return self._parse_binary_level(_ADDITIVE_LEVEL, self._parse_multiplicative)

    def _parse_multiplicative(self) -> ExprNode:
        return self._parse_binary_level(_MULTIPLICATIVE_LEVEL, self._parse_atom)

    def _parse_atom(self) -> ExprNode:
        """Parse literals, labels, $, and parenthesized sub-expressions."""
        tok = self._current()

        if tok.type == TokenType.NUMBER:
            self._advance()
            return ExprNode(ExprNodeType.LITERAL, tok.location, value=tok.value & 0xFFFF)

        if tok.type == TokenType.CHAR:
            self._advance()
            return ExprNode(ExprNodeType.CHAR, tok.location, value=tok.value)

        if tok.type == TokenType.DOLLAR:
            self._advance()
            return ExprNode(ExprNodeType.CURRENT_ADDRESS, tok.location)

        if tok.type == TokenType.IDENTIFIER:
            self._advance()
            name = tok.value if self._case_sensitive else tok.value.upper()
            return ExprNode(ExprNodeType.LABEL, tok.location, value=name)

        if tok.type == TokenType.LPAREN:
            self._advance()
            inner = self._parse_or()
            if self._current().type != TokenType.RPAREN:
                raise self._error("expected ')' to close expression", self._current())
            self._advance()
            return inner

        if tok.type == TokenType.RPAREN:
            raise self._error("unbalanced ')'", tok)

        if tok.type in (TokenType.NEWLINE, TokenType.EOF):
            raise self._error("missing operand at end of expression", tok)

        raise self._error(f"expected value, got '{tok.value or tok.type.name}'", tok)


# =============================================================================
# Expression Evaluator
# =============================================================================

class ExpressionEvaluator:
    """
    Evaluates expression trees.

    Attributes:
        symbols: Label values to resolve references against
        current_address: Value of $ (the address of the statement)
    """

    def __init__(self, symbols: SymbolTable, current_address: int = 0):
        self.symbols = symbols
        self.current_address = current_address & 0xFFFF

    def evaluate(self, node: ExprNode, source_line: Optional[str] = None) -> int:
        """
        Evaluate a tree to a 16-bit unsigned value.

        Raises:
            UndefinedLabelError: If a referenced label has no value
            DivisionByZeroError: If '/' or MOD has a zero right-hand value
        """
        self._source_line = source_line
        return self._eval(node)

    def _eval(self, node: ExprNode) -> int:
        kind = node.node_type

        if kind in (ExprNodeType.LITERAL, ExprNodeType.CHAR):
            return node.value & 0xFFFF

        if kind == ExprNodeType.CURRENT_ADDRESS:
            return self.current_address

        if kind == ExprNodeType.LABEL:
            return self._resolve_label(node)

        if kind == ExprNodeType.UNARY_OP:
            return ~self._eval(node.left) & 0xFFFF

        left = self._eval(node.left)
        right = self._eval(node.right)
        op = node.operator

        if op == "+":
            return (left + right) & 0xFFFF
        if op == "-":
            return (left - right) & 0xFFFF
        if op == "*":
            return (left * right) & 0xFFFF
        if op in ("/", "MOD"):
            if right == 0:
                raise DivisionByZeroError(op, node.location, self._source_line)
            return left // right if op == "/" else left % right
        if op == "SHL":
            return (left << right) & 0xFFFF if right < 16 else 0
        if op == "SHR":
            return left >> right if right < 16 else 0
        if op == "AND":
            return left & right
        if op == "OR":
            return left | right
        if op == "XOR":
            return left ^ right

        raise ValueError(f"unknown operator {op!r}")

    def _resolve_label(self, node: ExprNode) -> int:
        value = self.symbols.lookup(node.value)
        if value is None:
            raise UndefinedLabelError(
                node.value,
                location=node.location,
                source_line=self._source_line,
                similar_labels=self.symbols.find_similar(node.value),
            )
        return value


# =============================================================================
# Convenience Functions
# =============================================================================

def evaluate_expression(
    tokens: list[Token],
    symbols: Optional[SymbolTable] = None,
    current_address: int = 0,
) -> int:
    """
    Parse and evaluate an expression in one step.

    Args:
        tokens: Token list holding exactly one expression (EOF/NEWLINE may follow)
        symbols: Symbol table (default: empty)
        current_address: Value of $

    Raises:
        ParseError: If tokens remain after the expression
    """
    parser = ExpressionParser(tokens)
    tree = parser.parse()
    trailing = parser._current()
    if trailing.type not in (TokenType.EOF, TokenType.NEWLINE):
        raise ParseError(
            f"unexpected '{trailing.value or trailing.type.name}' after expression",
            trailing.location,
        )
    return ExpressionEvaluator(symbols or SymbolTable(), current_address).evaluate(tree)
