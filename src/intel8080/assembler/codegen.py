"""
Intel 8080 Code Generator
=========================

This module generates Intel 8080 machine code from parsed assembly
statements. It implements a two-pass assembly process:

Pass 1 (Address Fixation)
-------------------------
- Walk the statements in order with a write cursor starting at 0
- ORG moves the cursor; its expression is evaluated immediately, so it
  may only refer to labels declared above it
- EQU is evaluated immediately for the same reason
- Labels (and named DB/DW) bind the cursor value
- Instructions and data advance the cursor by their size, which depends
  only on the mnemonic and operand shape, never on operand values

Pass 2 (Evaluation and Emission)
--------------------------------
- Replay the addresses recorded in pass 1
- Evaluate every remaining expression with $ set to the statement's own
  address, now that every label is known
- Write opcode and immediate bytes (little-endian words) into the image

ROM Image
---------
The image is a 64K buffer. Bytes never written hold the fill byte (0x00,
the NOP opcode, unless configured otherwise). ORG may jump forward,
leaving a filled gap, or backward, overwriting earlier bytes. The output
runs from address 0 through the highest address written.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging

from intel8080.config import AssemblerConfig
from intel8080.errors import (
    AddressOverflowError,
    InvalidOperandError,
    UndefinedLabelError,
)
from intel8080.assembler.expressions import ExpressionEvaluator, ExprNode
from intel8080.assembler.parser import (
    Data,
    Equate,
    Instruction,
    LabelDecl,
    Origin,
    Statement,
)
from intel8080.assembler.symbols import SymbolTable
from intel8080.cpu import OperandKind

logger = logging.getLogger(__name__)


ADDRESS_SPACE = 0x10000


# =============================================================================
# ROM Image
# =============================================================================

class RomImage:
    """
    Byte buffer indexed by absolute 16-bit address.

    Attributes:
        fill_byte: Value of every byte never written
        high_water: One past the highest address written (0 when empty)
    """

    def __init__(self, fill_byte: int = 0x00):
        self.fill_byte = fill_byte
        self._data = bytearray([fill_byte]) * ADDRESS_SPACE
        self._written = bytearray(ADDRESS_SPACE)
        self.high_water = 0

    def write(self, address: int, value: int) -> None:
        """Store one byte. Writing an address twice keeps the later byte."""
        if self._written[address]:
            logger.debug(
                f"patching ${address:04X}: ${self._data[address]:02X} -> ${value & 0xFF:02X}"
            )
        self._data[address] = value & 0xFF
        self._written[address] = 1
        self.high_water = max(self.high_water, address + 1)

    def is_written(self, address: int) -> bool:
        return bool(self._written[address])

    def __getitem__(self, address: int) -> int:
        return self._data[address]

    def to_bytes(self, min_size: Optional[int] = None) -> bytes:
        """
        Return addresses 0 through the highest written address.

        Args:
            min_size: Pad with the fill byte to at least this many bytes
        """
        size = self.high_water
        if min_size is not None:
            size = max(size, min_size)
        return bytes(self._data[:size])


@dataclass
class ListingLine:
    """One emitting statement in the listing."""
    address: Optional[int]
    code: bytes
    line: int
    text: str


# =============================================================================
# Code Generator
# =============================================================================

class CodeGenerator:
    """
    Generates Intel 8080 object code from parsed statements.

    Each call to ``generate`` starts from a fresh symbol table and image,
    so a generator can be reused but carries nothing between runs.

    Usage:
        codegen = CodeGenerator()
        code = codegen.generate(statements)
        codegen.write_listing("rom.lst")
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()
        self._symbols = SymbolTable()
        self._image = RomImage(self.config.fill_byte)
        self._addresses: list[int] = []
        self._listing_lines: list[ListingLine] = []

    def generate(self, statements: list[Statement]) -> bytes:
        """
        Generate object code from parsed statements.

        Args:
            statements: List of parsed statements

        Returns:
            The ROM image from address 0 through the highest written address

        Raises:
            AssemblerError: On the first error in either pass
        """
        self._symbols = SymbolTable()
        self._image = RomImage(self.config.fill_byte)
        self._addresses = []
        self._listing_lines = []

        self._pass1(statements)
        logger.debug(f"pass 1 complete: {len(self._symbols)} symbols")

        self._pass2(statements)
        logger.debug(f"pass 2 complete: {self._image.high_water} bytes")

        return self.get_code()

    # =========================================================================
    # Results
    # =========================================================================

    def get_code(self) -> bytes:
        """Return the generated ROM image."""
        return self._image.to_bytes(self.config.image_size)

    def get_image(self) -> RomImage:
        return self._image

    def get_symbols(self) -> dict[str, int]:
        """Return a dictionary of symbol names to values."""
        return self._symbols.to_dict()

    def get_symbol_table(self) -> SymbolTable:
        return self._symbols

    def get_addresses(self) -> list[int]:
        """Return the cursor value recorded for each statement in pass 1."""
        return list(self._addresses)

    # =========================================================================
    # Pass 1
    # =========================================================================

    def _pass1(self, statements: list[Statement]) -> None:
        """First pass: fix every label's address."""
        cursor = 0

        for stmt in statements:
            self._addresses.append(cursor)

            if isinstance(stmt, LabelDecl):
                self._define_address(stmt.name, cursor, stmt)

            elif isinstance(stmt, Origin):
                self._require_declared(stmt.expr, "ORG", stmt)
                cursor = self._evaluate(stmt.expr, cursor, stmt)
                logger.debug(f"ORG ${cursor:04X} (line {stmt.location.line})")

            elif isinstance(stmt, Equate):
                self._require_declared(stmt.expr, "EQU", stmt)
                value = self._evaluate(stmt.expr, cursor, stmt)
                self._symbols.define(
                    stmt.name, value, stmt.location,
                    is_constant=True, source_line=stmt.text,
                )

            elif isinstance(stmt, Data):
                if stmt.label is not None:
                    self._define_address(stmt.label, cursor, stmt)
                cursor = self._advance(cursor, stmt.width, stmt)

            elif isinstance(stmt, Instruction):
                cursor = self._advance(cursor, stmt.size, stmt)

    def _define_address(self, name: str, cursor: int, stmt: Statement) -> None:
        if cursor >= ADDRESS_SPACE:
            raise AddressOverflowError(cursor, stmt.location, stmt.text)
        self._symbols.define(name, cursor, stmt.location, source_line=stmt.text)

    def _require_declared(self, expr: ExprNode, directive: str, stmt: Statement) -> None:
        """ORG and EQU are resolved in pass 1, so their labels must already exist."""
        missing = sorted(name for name in expr.labels() if name not in self._symbols)
        if missing:
            raise UndefinedLabelError(
                missing[0],
                location=stmt.location,
                hint=f"{directive} is evaluated in pass 1; "
                     f"'{missing[0]}' must be declared above it",
                source_line=stmt.text,
            )

    @staticmethod
    def _advance(cursor: int, size: int, stmt: Statement) -> int:
        """Move the cursor past a statement's bytes."""
        end = cursor + size
        if end > ADDRESS_SPACE:
            raise AddressOverflowError(
                max(cursor, ADDRESS_SPACE), stmt.location, stmt.text
            )
        return end

    # =========================================================================
    # Pass 2
    # =========================================================================

    def _pass2(self, statements: list[Statement]) -> None:
        """Second pass: evaluate expressions and emit bytes."""
        for stmt, address in zip(statements, self._addresses):
            if isinstance(stmt, Data):
                value = self._evaluate(stmt.expr, address, stmt)
                if stmt.width == 1:
                    code = bytes([self._check_byte("DB", value, stmt)])
                else:
                    code = bytes([value & 0xFF, value >> 8])
                self._emit(address, code, stmt)

            elif isinstance(stmt, Instruction):
                self._emit(address, self._encode(stmt, address), stmt)

            elif isinstance(stmt, Origin):
                self._listing_lines.append(
                    ListingLine(None, b"", stmt.location.line, stmt.text)
                )

    def _encode(self, inst: Instruction, address: int) -> bytes:
        """Build the bytes of one instruction."""
        info = inst.info
        kind = info.immediate

        if kind is None:
            return bytes([info.opcode])

        value = self._evaluate(inst.expression, address, inst)

        if kind == OperandKind.VECTOR:
            if value > 7:
                raise InvalidOperandError(
                    inst.mnemonic,
                    f"restart vector must be 0-7, got {value}",
                    location=inst.expression.location,
                    source_line=inst.text,
                )
            return bytes([info.opcode | value << 3])

        if kind == OperandKind.BYTE:
            return bytes([info.opcode, self._check_byte(inst.mnemonic, value, inst)])

        return bytes([info.opcode, value & 0xFF, value >> 8])

    def _check_byte(self, mnemonic: str, value: int, stmt: Statement) -> int:
        """
        Reduce a 16-bit value to a byte.

        Values 0-$FF pass through. $FF80-$FFFF are negative bytes after
        wraparound (``0 - 1``) and keep their low byte.
        """
        if value <= 0xFF:
            return value
        if value >= 0xFF80:
            return value & 0xFF

        expr = stmt.expr if isinstance(stmt, Data) else stmt.expression
        raise InvalidOperandError(
            mnemonic,
            f"value ${value:04X} does not fit in a byte",
            location=expr.location,
            source_line=stmt.text,
        )

    def _emit(self, address: int, code: bytes, stmt: Statement) -> None:
        for offset, byte in enumerate(code):
            self._image.write(address + offset, byte)
        self._listing_lines.append(
            ListingLine(address, code, stmt.location.line, stmt.text)
        )

    def _evaluate(self, expr: ExprNode, address: int, stmt: Statement) -> int:
        evaluator = ExpressionEvaluator(self._symbols, address)
        return evaluator.evaluate(expr, source_line=stmt.text)

    # =========================================================================
    # Listing and Symbol Output
    # =========================================================================

    def get_listing(self) -> str:
        """
        Get the assembly listing as a string.

        Returns:
            The listing showing addresses, generated bytes, and source lines,
            followed by the symbol table.
        """
        lines = []
        lines.append("Intel 8080 Assembler Listing")
        lines.append("=" * 60)
        lines.append("")
        lines.append("Addr  Code      Line  Source")
        lines.append("-" * 60)
        for entry in self._listing_lines:
            addr = f"{entry.address:04X}" if entry.address is not None else "    "
            code = " ".join(f"{b:02X}" for b in entry.code)
            lines.append(f"{addr}  {code:8s}  {entry.line:4d}  {entry.text.strip()}")
        lines.append("")
        lines.append("Symbol Table")
        lines.append("-" * 30)
        for name, value in sorted(self.get_symbols().items()):
            lines.append(f"{name:20s} = {value:04X}H")
        return "\n".join(lines) + "\n"

    def write_listing(self, filepath: str | Path) -> None:
        """Write assembly listing file."""
        Path(filepath).write_text(self.get_listing())

    def get_symbol_file(self) -> str:
        """
        Get the symbol table in file form.

        Format: name value (one per line, sorted by name)
        """
        lines = ["# Symbol table"]
        for name, value in sorted(self.get_symbols().items()):
            lines.append(f"{name} {value:04X}H")
        return "\n".join(lines) + "\n"

    def write_symbols(self, filepath: str | Path) -> None:
        """Write symbol table file."""
        Path(filepath).write_text(self.get_symbol_file())
