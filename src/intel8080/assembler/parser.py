"""
Intel 8080 Assembly Language Parser
===================================

This module implements a recursive-descent parser for Intel 8080 assembly
language. It converts the lexer's token stream into an ordered list of
statements. That order is the only schedule the code generator follows
in both of its passes.

Statement Types
---------------
1. **LabelDecl**: Label declaration
   ```asm
   start:            ; binds START to the current address
   loop: DCR B       ; a statement may follow on the same line
   ```

2. **Instruction**: Machine instruction with 0, 1 or 2 operands
   ```asm
   NOP
   MVI A, 'Z'
   MOV M, A
   LXI H, table + 2
   ```

3. **Origin**: Move the write cursor
   ```asm
   ORG 100H
   ```

4. **Data**: Define a byte or a word, optionally named
   ```asm
   count DB 10
   vector DW start
   DB 0FFH
   ```

5. **Equate**: Bind a name to a value
   ```asm
   port EQU 10H
   ```

Operands
--------
How many operands an instruction takes, and whether each slot takes a
register or an expression, comes from the instruction table. Register
operands are resolved here, so each Instruction already carries the
InstructionInfo of its encoding; only expression operands are left for
the code generator to evaluate.
"""

from dataclasses import dataclass, field
from typing import Optional, Union

from intel8080.errors import (
    InvalidOperandError,
    ParseError,
    SourceLocation,
)
from intel8080.assembler.expressions import (
    EXPRESSION_START,
    ExpressionParser,
    ExprNode,
)
from intel8080.assembler.lexer import KEYWORDS, Lexer, Token, TokenType
from intel8080.cpu import (
    OPERAND_COUNT,
    InstructionInfo,
    OperandKind,
    Register,
    get_instruction_info,
    get_operand_forms,
    slot_accepts_expression,
    slot_accepts_register,
    summarize_forms,
)


# =============================================================================
# Statement Data Classes
# =============================================================================

@dataclass
class Statement:
    """
    Base class for all parsed statements.

    Every statement has a source location for error reporting, and the
    text of its source line for diagnostics and listings.
    """
    location: SourceLocation
    text: str = field(default="", kw_only=True)


@dataclass
class LabelDecl(Statement):
    """
    Label declaration statement.

    Attributes:
        name: Label name (upper-cased unless labels are case-sensitive)
    """
    name: str


@dataclass
class Origin(Statement):
    """ORG directive: reset the write cursor to an absolute address."""
    expr: ExprNode


@dataclass
class Data(Statement):
    """
    DB/DW directive.

    Attributes:
        label: Name bound to the data's address, if any
        width: 1 for DB, 2 for DW
        expr: Value expression, evaluated in pass 2
    """
    label: Optional[str]
    width: int
    expr: ExprNode


@dataclass
class Equate(Statement):
    """EQU directive: bind a name to the value of an expression."""
    name: str
    expr: ExprNode


Operand = Union[Register, ExprNode]


@dataclass
class Instruction(Statement):
    """
    Machine instruction statement.

    Attributes:
        mnemonic: The instruction mnemonic (uppercase)
        operands: Registers and expressions, in source order
        info: The table entry selected by the operand shape
    """
    mnemonic: str
    operands: tuple[Operand, ...]
    info: InstructionInfo

    @property
    def size(self) -> int:
        return self.info.size

    @property
    def expression(self) -> Optional[ExprNode]:
        """The expression operand, if the instruction has one."""
        for operand in self.operands:
            if isinstance(operand, ExprNode):
                return operand
        return None


# Keyword tokens, any of which is reserved and unusable as a label
_RESERVED_TYPES = frozenset(KEYWORDS.values()) | {
    TokenType.MNEMONIC,
    TokenType.REGISTER,
}

_DATA_WIDTHS = {TokenType.DB: 1, TokenType.DW: 2}


# =============================================================================
# Parser Implementation
# =============================================================================

class Parser:
    """
    Parses Intel 8080 assembly tokens into statements.

    The parser processes tokens line by line and stops at the first error.

    Usage:
        lexer = Lexer(source, filename)
        tokens = list(lexer.tokenize())
        parser = Parser(tokens, filename, source)
        statements = parser.parse()
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source: Optional[str] = None,
        case_sensitive: bool = False,
    ):
        """
        Initialize the parser.

        Args:
            tokens: List of tokens from lexer
            filename: Source filename for error reporting
            source: Original source text, for error context and listings
            case_sensitive: Keep label spelling instead of upper-casing
        """
        self._tokens = tokens
        self._filename = filename
        self._source_lines = source.splitlines() if source is not None else []
        self._case_sensitive = case_sensitive
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Parse all tokens into statements.

        Returns:
            List of Statement objects in source order

        Raises:
            ParseError: If the grammar is violated
            InvalidOperandError: If an instruction's operands match no
                                 accepted shape
        """
        statements: list[Statement] = []

        while not self._at_end():
            if self._check(TokenType.NEWLINE):
                self._advance()
                continue

            statements.extend(self._parse_line())

        return statements

    # =========================================================================
    # Token Navigation
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if at end of token stream."""
        return self._pos >= len(self._tokens) or self._current().type == TokenType.EOF

    def _current(self) -> Token:
        """Get current token."""
        if self._pos >= len(self._tokens):
            last = self._tokens[-1] if self._tokens else None
            return Token(
                TokenType.EOF, None,
                last.line if last else 1,
                last.column if last else 1,
                last.filename if last else self._filename,
            )
        return self._tokens[self._pos]

    def _peek(self, offset: int = 0) -> Token:
        """Look ahead at token."""
        pos = self._pos + offset
        if pos >= len(self._tokens):
            return self._current()
        return self._tokens[pos]

    def _advance(self) -> Token:
        """Consume and return current token."""
        token = self._current()
        self._pos += 1
        return token

    def _check(self, *types: TokenType) -> bool:
        """Check if current token is one of the given types."""
        return self._current().type in types

    def _at_line_end(self) -> bool:
        return self._check(TokenType.NEWLINE, TokenType.EOF)

    def _line_text(self, line: int) -> Optional[str]:
        if 1 <= line <= len(self._source_lines):
            return self._source_lines[line - 1]
        return None

    def _error(self, message: str, token: Token) -> ParseError:
        return ParseError(message, token.location, source_line=self._line_text(token.line))

    def _label_name(self, token: Token) -> str:
        return token.value if self._case_sensitive else token.value.upper()

    @staticmethod
    def _describe(token: Token) -> str:
        if token.type == TokenType.NEWLINE:
            return "end of line"
        if token.type == TokenType.EOF:
            return "end of file"
        if isinstance(token.value, int):
            return str(token.value)
        return f"'{token.value}'"

    # =========================================================================
    # Line Parsing
    # =========================================================================

    def _parse_line(self) -> list[Statement]:
        """
        Parse a single line of assembly.

        A line is an optional ``name:`` label followed by an optional
        statement, terminated by NEWLINE or EOF.
        """
        statements: list[Statement] = []
        tok = self._current()

        if tok.type in _RESERVED_TYPES and self._peek(1).type == TokenType.COLON:
            raise self._error(
                f"'{tok.value}' is a reserved word and cannot be used as a label", tok
            )

        if tok.type == TokenType.IDENTIFIER and self._peek(1).type == TokenType.COLON:
            self._advance()
            self._advance()  # consume ':'
            statements.append(self._stamp(LabelDecl(tok.location, self._label_name(tok))))

        if not self._at_line_end():
            statements.append(self._parse_statement())

        self._expect_line_end()
        return statements

    def _parse_statement(self) -> Statement:
        """Dispatch on the first token of a statement."""
        tok = self._current()

        if tok.type == TokenType.MNEMONIC:
            return self._parse_instruction()

        if tok.type == TokenType.ORG:
            self._advance()
            return self._stamp(Origin(tok.location, self._parse_expression()))

        if tok.type in _DATA_WIDTHS:
            self._advance()
            return self._stamp(
                Data(tok.location, None, _DATA_WIDTHS[tok.type], self._parse_expression())
            )

        if tok.type == TokenType.IDENTIFIER:
            return self._parse_named_directive()

        if tok.type == TokenType.EQU:
            raise self._error("EQU requires a name", tok)

        raise self._error(f"unexpected {self._describe(tok)}", tok)

    def _parse_named_directive(self) -> Statement:
        """Parse ``name DB expr``, ``name DW expr`` or ``name EQU expr``."""
        name_tok = self._advance()
        directive = self._current()

        if directive.type in _DATA_WIDTHS:
            self._advance()
            return self._stamp(Data(
                name_tok.location,
                self._label_name(name_tok),
                _DATA_WIDTHS[directive.type],
                self._parse_expression(),
            ))

        if directive.type == TokenType.EQU:
            self._advance()
            return self._stamp(Equate(
                name_tok.location,
                self._label_name(name_tok),
                self._parse_expression(),
            ))

        if self._at_line_end():
            raise self._error(f"expected ':' after label '{name_tok.value}'", directive)

        raise self._error(f"unknown instruction or directive '{name_tok.value}'", name_tok)

    def _expect_line_end(self) -> None:
        tok = self._current()
        if tok.type == TokenType.NEWLINE:
            self._advance()
            return
        if tok.type == TokenType.EOF:
            return
        if tok.type == TokenType.RPAREN:
            raise self._error("unbalanced ')'", tok)
        raise self._error(f"unexpected {self._describe(tok)} at end of statement", tok)

    def _stamp(self, stmt: Statement) -> Statement:
        """Attach the source line text to a statement."""
        stmt.text = self._line_text(stmt.location.line) or ""
        return stmt

    def _parse_expression(self) -> ExprNode:
        tok = self._current()
        if tok.type not in EXPRESSION_START:
            if tok.type in (TokenType.NEWLINE, TokenType.EOF):
                raise self._error("missing expression", tok)
            raise self._error(f"expected expression, got {self._describe(tok)}", tok)

        parser = ExpressionParser(
            self._tokens,
            self._pos,
            case_sensitive=self._case_sensitive,
            source_line=self._line_text(tok.line),
        )
        expr = parser.parse()
        self._pos = parser.pos
        return expr

    # =========================================================================
    # Instruction Parsing
    # =========================================================================

    def _parse_instruction(self) -> Instruction:
        """
        Parse a mnemonic and its operands.

        Each operand slot is checked against the table as it is read, then
        the complete shape is looked up to select the encoding.
        """
        mnemonic_tok = self._advance()
        mnemonic = mnemonic_tok.value
        count = OPERAND_COUNT[mnemonic]
        source_line = self._line_text(mnemonic_tok.line)
        operands: list[Operand] = []

        for index in range(count):
            if index > 0:
                if self._at_line_end():
                    raise self._operand_error(
                        mnemonic, f"{mnemonic} expects {count} operands", self._current()
                    )
                if not self._check(TokenType.COMMA):
                    raise self._error(
                        f"expected ',' between operands, got {self._describe(self._current())}",
                        self._current(),
                    )
                self._advance()

            operands.append(self._parse_operand(mnemonic, index, count))

        signature = self._match_signature(mnemonic, operands)
        info = get_instruction_info(mnemonic, signature) if signature is not None else None
        if info is None:
            shape = ",".join(
                str(op) if isinstance(op, Register) else "expression" for op in operands
            )
            raise InvalidOperandError(
                mnemonic,
                f"invalid operands for {mnemonic}: {shape}",
                location=mnemonic_tok.location,
                source_line=source_line,
                valid_forms=summarize_forms(mnemonic),
            )

        return self._stamp(Instruction(
            mnemonic_tok.location, mnemonic, tuple(operands), info
        ))

    def _parse_operand(self, mnemonic: str, index: int, count: int) -> Operand:
        """Parse operand slot ``index`` as a register or an expression."""
        tok = self._current()

        if tok.type == TokenType.REGISTER:
            if not slot_accepts_register(mnemonic, index):
                raise self._operand_error(
                    mnemonic,
                    f"{mnemonic} operand {index + 1} must be an expression, got register {tok.value}",
                    tok,
                )
            self._advance()
            return Register(tok.value)

        if tok.type in EXPRESSION_START:
            if not slot_accepts_expression(mnemonic, index):
                raise self._operand_error(
                    mnemonic,
                    f"{mnemonic} operand {index + 1} must be a register",
                    tok,
                )
            return self._parse_expression()

        if tok.type in (TokenType.NEWLINE, TokenType.EOF):
            expected = "1 operand" if count == 1 else f"{count} operands"
            raise self._operand_error(mnemonic, f"{mnemonic} expects {expected}", tok)

        raise self._error(f"unexpected {self._describe(tok)} in operand", tok)

    def _operand_error(self, mnemonic: str, message: str, token: Token) -> InvalidOperandError:
        return InvalidOperandError(
            mnemonic,
            message,
            location=token.location,
            source_line=self._line_text(token.line),
            valid_forms=summarize_forms(mnemonic),
        )

    @staticmethod
    def _match_signature(mnemonic: str, operands: list[Operand]):
        """Find the table signature matching the parsed operands, if any."""
        for form in get_operand_forms(mnemonic):
            if len(form) != len(operands):
                continue
            if all(
                slot is operand if isinstance(operand, Register)
                else isinstance(slot, OperandKind)
                for slot, operand in zip(form, operands)
            ):
                return form
        return None


def parse_source(
    source: str,
    filename: str = "<input>",
    case_sensitive: bool = False,
) -> list[Statement]:
    """
    Convenience function to tokenize and parse assembly source.

    Args:
        source: Assembly source text
        filename: Source filename for error messages
        case_sensitive: Keep label spelling instead of upper-casing

    Returns:
        List of parsed statements
    """
    tokens = list(Lexer(source, filename).tokenize())
    parser = Parser(tokens, filename, source, case_sensitive=case_sensitive)
    return parser.parse()
