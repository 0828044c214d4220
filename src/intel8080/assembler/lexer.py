"""
Intel 8080 Assembly Language Lexer
==================================

This module implements a lexer (tokenizer) for Intel 8080 assembly language.
It converts source text into a stream of tokens that the parser can process.

Token Types
-----------
- IDENTIFIER: Label names
- MNEMONIC: Instruction names (MOV, JMP, ...), upper-cased
- REGISTER: A B C D E H L M SP PSW, upper-cased
- ORG, DB, DW, EQU: Directives
- NUMBER: Numeric literals in four bases
- CHAR: Single-quoted character ('A')
- Operators: + - * / and the words MOD SHL SHR AND OR XOR NOT
- Delimiters: , : ( ) and $ (current address)
- NEWLINE: End of line
- EOF: End of file

Keywords are recognized case-insensitively. Identifiers keep their
spelling; the parser decides how to fold their case.

Number Formats
--------------
A numeric literal starts with a digit. Its base comes from a suffix:

| Format      | Suffix | Example | Value |
|-------------|--------|---------|-------|
| Decimal     | (none) | 123     | 123   |
| Decimal     | D      | 123D    | 123   |
| Hexadecimal | H      | 0FFH    | 255   |
| Octal       | O or Q | 17O     | 15    |
| Binary      | N      | 101N    | 5     |
| Character   | '      | 'A'     | 65    |

A hexadecimal literal that begins with a letter needs a leading zero
(``0FFH``), since anything starting with a letter is an identifier.
Values are reduced modulo 65536.

Comments
--------
A semicolon starts a comment that runs to the end of the line.

Example
-------
>>> from intel8080.assembler.lexer import Lexer
>>> for token in Lexer("loop: MVI A,0FFH ; fill").tokenize():
...     print(token)
Token(IDENTIFIER, 'loop', 1:1)
Token(COLON, ':', 1:5)
Token(MNEMONIC, 'MVI', 1:7)
Token(REGISTER, 'A', 1:11)
Token(COMMA, ',', 1:12)
Token(NUMBER, $FF, 1:13)
Token(EOF, 1:24)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator, Optional
import string

from intel8080.cpu import MNEMONICS, REGISTER_NAMES
from intel8080.errors import LexError, SourceLocation


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """
    Token types for the Intel 8080 assembly language.
    """

    # Structural tokens
    NEWLINE = auto()     # End of line (statement boundary)
    EOF = auto()         # End of file

    # Names
    IDENTIFIER = auto()  # Labels
    MNEMONIC = auto()    # Instruction names
    REGISTER = auto()    # Register and register-pair names

    # Directives
    ORG = auto()         # Origin
    DB = auto()          # Define byte
    DW = auto()          # Define word
    EQU = auto()         # Equate

    # Values
    NUMBER = auto()      # Numeric literal (value already resolved)
    CHAR = auto()        # Single-quoted character 'X'

    # Arithmetic operators
    PLUS = auto()        # +
    MINUS = auto()       # -
    STAR = auto()        # *
    SLASH = auto()       # /
    MOD = auto()         # MOD
    SHL = auto()         # SHL
    SHR = auto()         # SHR

    # Bitwise operators
    AND = auto()         # AND
    OR = auto()          # OR
    XOR = auto()         # XOR
    NOT = auto()         # NOT (unary)

    # Delimiters
    COMMA = auto()       # ,
    COLON = auto()       # :
    LPAREN = auto()      # (
    RPAREN = auto()      # )
    DOLLAR = auto()      # $ (current address)


# Reserved words that are neither mnemonics nor registers
KEYWORDS: dict[str, TokenType] = {
    "ORG": TokenType.ORG,
    "DB": TokenType.DB,
    "DW": TokenType.DW,
    "EQU": TokenType.EQU,
    "MOD": TokenType.MOD,
    "SHL": TokenType.SHL,
    "SHR": TokenType.SHR,
    "AND": TokenType.AND,
    "OR": TokenType.OR,
    "XOR": TokenType.XOR,
    "NOT": TokenType.NOT,
}

RESERVED_WORDS: frozenset[str] = frozenset(KEYWORDS) | MNEMONICS | REGISTER_NAMES


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    Represents a single token from the source code.

    Attributes:
        type: The TokenType classification
        value: The token value (string for names and punctuation, int for
               numbers and characters, None for NEWLINE/EOF)
        line: Line number in source (1-indexed)
        column: Column number in source (1-indexed)
        filename: Name of the source file
        base: Radix of a NUMBER literal (2, 8, 10 or 16), otherwise None
    """
    type: TokenType
    value: str | int | None
    line: int
    column: int
    filename: str
    base: Optional[int] = None

    def __repr__(self) -> str:
        if self.value is not None:
            if isinstance(self.value, int):
                return f"Token({self.type.name}, ${self.value:X}, {self.line}:{self.column})"
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Intel 8080 assembly source code.

    The lexer makes a single forward pass with no backtracking. Calling
    ``tokenize()`` again restarts from the beginning and yields the same
    tokens. The first malformed token raises LexError and abandons the
    rest of the source.

    Usage:
        lexer = Lexer(source_text, filename)
        tokens = list(lexer.tokenize())
    """

    # Characters that can start an identifier
    IDENT_START = string.ascii_letters + "_"

    # Characters that can continue an identifier
    IDENT_CHARS = string.ascii_letters + string.digits + "_"

    # Single-character operators and delimiters
    SINGLE_CHAR_TOKENS = {
        "+": TokenType.PLUS,
        "-": TokenType.MINUS,
        "*": TokenType.STAR,
        "/": TokenType.SLASH,
        ",": TokenType.COMMA,
        ":": TokenType.COLON,
        "(": TokenType.LPAREN,
        ")": TokenType.RPAREN,
        "$": TokenType.DOLLAR,
    }

    # Suffix letter -> (radix, valid digits)
    NUMBER_SUFFIXES = {
        "H": (16, string.hexdigits),
        "O": (8, string.octdigits),
        "Q": (8, string.octdigits),
        "N": (2, "01"),
        "D": (10, string.digits),
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """
        Initialize the lexer with source code.

        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
        """
        self.source = source
        self.filename = filename
        self._reset()

    def _reset(self) -> None:
        self._pos = 0
        self._line = 1
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens from the source code.

        Yields:
            Token objects representing each lexical element, ending with EOF

        Raises:
            LexError: If a malformed token is encountered
        """
        self._reset()

        while not self._at_end():
            if self._skip_whitespace():
                continue

            if self._skip_comment():
                continue

            yield self._scan_token()

        yield self._make_token(TokenType.EOF, None)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        """Check if we've reached the end of source."""
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        """
        Look at character at current position + offset without advancing.

        Returns empty string if past end of source.
        """
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        """
        Consume and return the current character, advancing position.

        Updates line and column tracking.
        """
        if self._at_end():
            return ""

        char = self.source[self._pos]
        self._pos += 1

        if char == "\n":
            self._line += 1
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1

        return char

    # =========================================================================
    # Token Creation
    # =========================================================================

    def _make_token(
        self,
        token_type: TokenType,
        value: str | int | None,
        start_line: Optional[int] = None,
        start_column: Optional[int] = None,
        base: Optional[int] = None,
    ) -> Token:
        """
        Create a token with current or specified position.

        Args:
            token_type: The type of token
            value: The token value
            start_line: Override line number (for multi-char tokens)
            start_column: Override column number
            base: Radix for NUMBER tokens
        """
        return Token(
            type=token_type,
            value=value,
            line=self._line if start_line is None else start_line,
            column=self._column if start_column is None else start_column,
            filename=self.filename,
            base=base,
        )

    def _error(self, message: str, column: Optional[int] = None) -> LexError:
        """
        Create a lex error at the current line.

        Args:
            message: Error description
            column: Column to point at (default: current column)
        """
        location = SourceLocation(
            self.filename,
            self._line,
            self._column if column is None else column,
        )
        return LexError(message, location, source_line=self.get_current_line())

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_whitespace(self) -> bool:
        """
        Skip whitespace characters (space, tab, carriage return) but not
        newlines.

        Returns:
            True if any whitespace was skipped
        """
        skipped = False
        # Note: Must check for non-empty string first because '' in ' \t' is True in Python
        while self._peek() and self._peek() in " \t\r":
            self._advance()
            skipped = True
        return skipped

    def _skip_comment(self) -> bool:
        """
        Skip a semicolon comment to end of line.

        Returns:
            True if a comment was skipped
        """
        if self._peek() != ";":
            return False
        while not self._at_end() and self._peek() != "\n":
            self._advance()
        return True

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_token(self) -> Token:
        """Scan the next token from source."""
        start_line = self._line
        start_column = self._column

        char = self._peek()

        if char == "\n":
            self._advance()
            return self._make_token(TokenType.NEWLINE, None, start_line, start_column)

        if char in self.IDENT_START:
            return self._scan_identifier(start_line, start_column)

        if char in string.digits:
            return self._scan_number(start_line, start_column)

        if char == "'":
            return self._scan_char(start_line, start_column)

        if char in self.SINGLE_CHAR_TOKENS:
            self._advance()
            return self._make_token(
                self.SINGLE_CHAR_TOKENS[char], char, start_line, start_column
            )

        raise self._error(f"unexpected character {char!r}")

    def _scan_identifier(self, start_line: int, start_column: int) -> Token:
        """
        Scan a name and classify it as a mnemonic, register, keyword or
        plain identifier.
        """
        chars = []
        # Note: Must check for non-empty string first because '' in 'string' is True in Python
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        name = "".join(chars)
        upper = name.upper()

        if upper in KEYWORDS:
            return self._make_token(KEYWORDS[upper], upper, start_line, start_column)
        if upper in MNEMONICS:
            return self._make_token(TokenType.MNEMONIC, upper, start_line, start_column)
        if upper in REGISTER_NAMES:
            return self._make_token(TokenType.REGISTER, upper, start_line, start_column)
        return self._make_token(TokenType.IDENTIFIER, name, start_line, start_column)

    def _scan_number(self, start_line: int, start_column: int) -> Token:
        """
        Scan a numeric literal and resolve its base from the suffix.

        The whole alphanumeric run is consumed first, so a malformed literal
        such as ``19O`` is reported as one bad literal rather than split
        into a number and a name.
        """
        chars = []
        while self._peek() and self._peek() in self.IDENT_CHARS:
            chars.append(self._advance())

        text = "".join(chars)
        suffix = text[-1].upper()

        if suffix in self.NUMBER_SUFFIXES:
            base, valid = self.NUMBER_SUFFIXES[suffix]
            digits = text[:-1]
        else:
            base, valid = 10, string.digits
            digits = text

        for offset, digit in enumerate(digits):
            if digit not in valid:
                raise self._error(
                    f"invalid digit {digit!r} in base-{base} literal '{text}'",
                    column=start_column + offset,
                )

        value = int(digits, base) & 0xFFFF
        return self._make_token(
            TokenType.NUMBER, value, start_line, start_column, base=base
        )

    def _scan_char(self, start_line: int, start_column: int) -> Token:
        """
        Scan a single-quoted character literal.

        The value is the character's code, which must fit in one byte.
        """
        self._advance()  # consume opening '

        if self._at_end() or self._peek() == "\n":
            raise self._error("unterminated character literal", column=start_column)

        char = self._advance()

        if self._peek() != "'":
            if self._at_end() or self._peek() == "\n":
                raise self._error("unterminated character literal", column=start_column)
            raise self._error("expected closing quote for character literal")
        self._advance()  # consume closing '

        value = ord(char)
        if value > 0xFF:
            raise self._error(
                f"character {char!r} does not fit in a byte",
                column=start_column + 1,
            )
        return self._make_token(TokenType.CHAR, value, start_line, start_column)

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def get_current_line(self) -> str:
        """
        Get the current line of source text.

        Useful for error reporting.
        """
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]


def tokenize(source: str, filename: str = "<input>") -> list[Token]:
    """Tokenize a complete source string into a list ending with EOF."""
    return list(Lexer(source, filename).tokenize())
