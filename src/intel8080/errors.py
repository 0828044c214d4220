"""
Intel 8080 Toolchain Error Hierarchy
====================================

This module defines the exception hierarchy for the assembler and the
disassembler. All exceptions inherit from Intel8080Error, allowing callers
to catch every toolchain error with a single except clause.

Exception Hierarchy
-------------------
Intel8080Error (base)
├── AssemblerError (assembler-related, carries a source location)
│   ├── LexError - malformed token
│   ├── ParseError - grammar violation
│   ├── InvalidOperandError - operand shape not accepted by a mnemonic
│   ├── DuplicateLabelError - label declared more than once
│   ├── UndefinedLabelError - reference to a label never declared
│   ├── DivisionByZeroError - '/' or MOD with a zero right-hand value
│   └── AddressOverflowError - write cursor left the 16-bit address space
└── DecodeError (disassembler, carries an address and the offending byte)

Assembly stops at the first error. The disassembler reports decode errors
per record and keeps scanning unless asked to be strict.

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class Intel8080Error(Exception):
    """
    Base exception for all Intel 8080 toolchain errors.

        try:
            assemble_file("rom.asm")
        except Intel8080Error as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in assembly source, used by tokens, statements and errors.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(Intel8080Error):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            rom.asm:12:9: error: undefined label 'LOPP'
                JMP     LOPP
                        ^
            hint: did you mean 'LOOP'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class LexError(AssemblerError):
    """
    Malformed token in assembly source.

    Examples:
        - Unrecognized character
        - Unterminated character literal
        - Digit not valid for the literal's base ('19O', '12N')
    """
    pass


class ParseError(AssemblerError):
    """
    Grammar violation: unbalanced parentheses, a missing operand after an
    operator, a missing comma, or trailing tokens after a statement.
    """
    pass


class InvalidOperandError(AssemblerError):
    """
    Operand shape not accepted by a mnemonic, or an operand value that does
    not fit the instruction (8-bit immediate out of range, RST vector > 7).
    """

    def __init__(
        self,
        mnemonic: str,
        message: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        valid_forms: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.valid_forms = valid_forms or []

        hint = None
        if self.valid_forms:
            hint = f"{mnemonic} accepts: {', '.join(self.valid_forms)}"

        super().__init__(message, location, hint, source_line)


class DuplicateLabelError(AssemblerError):
    """
    Label declared more than once.

    Both the new and the original declaration positions are reported.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.label = label
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{label}' was first declared at {original_location}"

        super().__init__(
            f"duplicate label '{label}'",
            location,
            hint,
            source_line,
        )


class UndefinedLabelError(AssemblerError):
    """
    Reference to a label that has no declaration.

    Raised in pass 2 for ordinary operands, and in pass 1 for ORG/EQU
    operands that refer forward. Similarly-named labels are suggested.
    """

    def __init__(
        self,
        label: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
        similar_labels: Optional[list[str]] = None,
    ):
        self.label = label
        self.similar_labels = similar_labels or []

        if not hint and self.similar_labels:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_labels[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"undefined label '{label}'",
            location,
            hint,
            source_line,
        )


class DivisionByZeroError(AssemblerError):
    """Evaluating '/' or MOD with a zero right-hand value."""

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"division by zero in '{operator}'",
            location,
            source_line=source_line,
        )


class AddressOverflowError(AssemblerError):
    """The write cursor advanced past the end of the 64K address space."""

    def __init__(
        self,
        address: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.address = address
        super().__init__(
            f"address ${address:X} is outside the 16-bit address space",
            location,
            hint="the highest usable address is $FFFF",
            source_line=source_line,
        )


# =============================================================================
# Disassembler Exceptions
# =============================================================================

class DecodeError(Intel8080Error):
    """
    A byte sequence that does not decode to a documented instruction.

    Attributes:
        address: Address of the first byte of the failed decode
        byte: The offending opcode byte
        message: Description of the failure
    """

    def __init__(self, address: int, byte: int, message: str):
        self.address = address
        self.byte = byte
        self.message = message
        super().__init__(f"${address:04X}: {message}")
