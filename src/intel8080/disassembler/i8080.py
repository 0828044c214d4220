"""
Intel 8080 Disassembler
=======================

Disassembles Intel 8080 machine code into assembly language that the
assembler accepts. This is the inverse operation of the assembler's code
generation: re-assembling the output at the same origin reproduces the
input bytes.

Decoding is strictly sequential. Instruction lengths vary (1-3 bytes), so
alignment follows only from decoding forward from the start address.

Operand Notation:
    - Registers by name: MOV B, C / PUSH PSW / LXI SP, ...
    - 8-bit values as two hex digits: MVI A, 3EH / CPI 0FFH
    - 16-bit values as four hex digits: JMP 0100H / LXI H, 0C3A0H
    - RST vector in decimal: RST 7

A leading 0 is added when a hex value starts with a letter, since the
assembler reads anything starting with a letter as a label.

Undecodable Bytes:
    The twelve undocumented opcodes, and an instruction cut short by the
    end of the input, are emitted as ``DB`` records carrying a DecodeError,
    and decoding continues with the next byte. In strict mode the
    DecodeError is raised instead.

Usage:
    disasm = I8080Disassembler()

    for instr in disasm.disassemble(rom_bytes, start_address=0x0100):
        print(instr)

    instr = disasm.disassemble_one(rom_bytes, address=0x0100)
    print(f"{instr.address:04X}: {instr.text}")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterator, Optional, Tuple
import logging

from intel8080.cpu import (
    OPCODE_TABLE,
    UNDOCUMENTED_OPCODES,
    InstructionInfo,
    OperandKind,
    Register,
)
from intel8080.errors import DecodeError

logger = logging.getLogger(__name__)


# =============================================================================
# Operand Formatting
# =============================================================================

def format_hex(value: int, digits: int) -> str:
    """
    Format a value in assembler hex notation, e.g. ``3EH`` or ``0C3A0H``.
    """
    text = f"{value:0{digits}X}H"
    if text[0].isalpha():
        return "0" + text
    return text


# =============================================================================
# Data Structures
# =============================================================================

@dataclass
class DisassembledInstruction:
    """
    Represents a single decoded instruction (or an undecodable byte).

    Attributes:
        address: Memory address of the instruction
        opcode: The opcode byte
        mnemonic: The instruction mnemonic, or "DB" for an undecodable byte
        operands: Formatted operands, in source order
        size: Number of bytes consumed
        raw_bytes: All bytes comprising this instruction
        comment: Optional comment (symbol name, decode problem)
        error: The DecodeError for an undecodable byte, otherwise None
    """
    address: int
    opcode: int
    mnemonic: str
    operands: Tuple[str, ...]
    size: int
    raw_bytes: bytes
    comment: str = ""
    error: Optional[DecodeError] = None

    @property
    def operand_str(self) -> str:
        return ", ".join(self.operands)

    @property
    def text(self) -> str:
        """The instruction in assembler syntax."""
        if self.operands:
            return f"{self.mnemonic} {self.operand_str}"
        return self.mnemonic

    def __str__(self) -> str:
        """Format as a source line with an address/bytes comment."""
        hex_bytes = " ".join(f"{b:02X}" for b in self.raw_bytes)
        line = f"{self.text:<20}; {self.address:04X}: {hex_bytes}"
        if self.comment:
            line = f"{line.ljust(40)} {self.comment}"
        return line

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "address": f"{self.address:04X}H",
            "address_int": self.address,
            "opcode": f"{self.opcode:02X}H",
            "mnemonic": self.mnemonic,
            "operands": list(self.operands),
            "size": self.size,
            "bytes": [f"{b:02X}H" for b in self.raw_bytes],
            "comment": self.comment,
            "error": self.error.message if self.error else None,
        }


# =============================================================================
# Intel 8080 Disassembler
# =============================================================================

class I8080Disassembler:
    """
    Disassembler for Intel 8080 machine code.

    Builds a reverse lookup table from the shared OPCODE_TABLE, so the
    decoder accepts exactly the encodings the assembler produces.

    Attributes:
        strict: Raise DecodeError instead of emitting DB records
        _reverse_table: Maps opcode byte to (InstructionInfo, RST vector)
        _symbol_table: Optional address -> name map for annotating operands
    """

    def __init__(
        self,
        symbol_table: Optional[Dict[int, str]] = None,
        strict: bool = False,
    ):
        """
        Initialize the disassembler.

        Args:
            symbol_table: Optional dict mapping addresses to symbol names.
                         Word operands matching an entry get a comment.
            strict: Raise on the first undecodable byte
        """
        self.strict = strict
        self._symbol_table = dict(symbol_table or {})
        self._reverse_table = self._build_reverse_table()

    def _build_reverse_table(self) -> Dict[int, Tuple[InstructionInfo, Optional[int]]]:
        """
        Build reverse lookup table: opcode -> (info, vector).

        RST expands to its eight opcodes, each carrying its vector.

        Note: MOV M,M shares $76 with HLT. Table order puts HLT first and
        the first entry wins, so $76 always decodes as HLT.
        """
        reverse: Dict[int, Tuple[InstructionInfo, Optional[int]]] = {}

        for info in OPCODE_TABLE.values():
            if info.immediate == OperandKind.VECTOR:
                for vector in range(8):
                    reverse.setdefault(info.opcode | vector << 3, (info, vector))
                continue

            # Skip aliases - keep first mnemonic encountered
            if info.opcode in reverse:
                continue

            reverse[info.opcode] = (info, None)

        return reverse

    def disassemble_one(
        self,
        data: bytes,
        address: int = 0,
        offset: int = 0,
    ) -> DisassembledInstruction:
        """
        Disassemble a single instruction.

        Args:
            data: Byte buffer containing the instruction
            address: Memory address of the instruction
            offset: Offset into data buffer where instruction starts

        Returns:
            DisassembledInstruction; a DB record with ``error`` set if the
            bytes do not decode

        Raises:
            ValueError: If offset is beyond the data
            DecodeError: If the bytes do not decode and strict is set
        """
        if offset >= len(data):
            raise ValueError(f"Offset {offset} beyond data length {len(data)}")

        opcode = data[offset]

        if opcode in UNDOCUMENTED_OPCODES:
            return self._undecodable(
                address, opcode, f"undocumented opcode {format_hex(opcode, 2)}"
            )

        info, vector = self._reverse_table[opcode]

        if offset + info.size > len(data):
            return self._undecodable(
                address, opcode,
                f"truncated {info.mnemonic}: needs {info.size} bytes, "
                f"{len(data) - offset} available",
            )

        raw_bytes = bytes(data[offset:offset + info.size])
        operands, comment = self._format_operands(info, vector, raw_bytes[1:])

        return DisassembledInstruction(
            address=address,
            opcode=opcode,
            mnemonic=info.mnemonic,
            operands=operands,
            size=info.size,
            raw_bytes=raw_bytes,
            comment=comment,
        )

    def _undecodable(self, address: int, opcode: int, message: str) -> DisassembledInstruction:
        error = DecodeError(address, opcode, message)
        if self.strict:
            raise error

        logger.debug(f"{error}; emitting DB")
        return DisassembledInstruction(
            address=address,
            opcode=opcode,
            mnemonic="DB",
            operands=(format_hex(opcode, 2),),
            size=1,
            raw_bytes=bytes([opcode]),
            comment=message,
            error=error,
        )

    def _format_operands(
        self,
        info: InstructionInfo,
        vector: Optional[int],
        operand_bytes: bytes,
    ) -> Tuple[Tuple[str, ...], str]:
        """
        Format the operands in assembler notation.

        Returns:
            Tuple of (operand strings, comment string)
        """
        operands = []
        comment = ""

        for slot in info.operands:
            if isinstance(slot, Register):
                operands.append(str(slot))
            elif slot == OperandKind.VECTOR:
                operands.append(str(vector))
            elif slot == OperandKind.BYTE:
                operands.append(format_hex(operand_bytes[0], 2))
            else:
                value = operand_bytes[0] | operand_bytes[1] << 8
                operands.append(format_hex(value, 4))
                if value in self._symbol_table:
                    comment = self._symbol_table[value]

        return tuple(operands), comment

    def disassemble(
        self,
        data: bytes,
        start_address: int = 0,
        count: Optional[int] = None,
    ) -> Iterator[DisassembledInstruction]:
        """
        Lazily disassemble a buffer from its first byte.

        Args:
            data: Byte buffer containing machine code
            start_address: Memory address of first byte
            count: Maximum number of instructions to disassemble (None = all)

        Yields:
            DisassembledInstruction objects in ascending address order

        Decoding stops at $FFFF. Bytes beyond the end of the address space
        are not decoded; an instruction cut short there is treated like one
        cut short by the end of the input.

        Raises:
            ValueError: If start_address is outside 0-$FFFF
        """
        if not 0 <= start_address <= 0xFFFF:
            raise ValueError(f"start address ${start_address:X} is outside 0-$FFFF")

        limit = 0x10000 - start_address
        if len(data) > limit:
            logger.warning(
                f"input runs past $FFFF; ignoring the last {len(data) - limit} bytes"
            )
            data = data[:limit]

        offset = 0
        address = start_address
        instructions = 0
        truncated = False

        while offset < len(data):
            if count is not None and instructions >= count:
                break

            if truncated:
                # Operand bytes of a cut-short instruction are never opcodes
                instr = self._undecodable(
                    address, data[offset], "operand of truncated instruction"
                )
            else:
                instr = self.disassemble_one(data, address, offset)
                # A documented opcode only fails to decode when it is cut short
                truncated = (
                    instr.error is not None and instr.opcode not in UNDOCUMENTED_OPCODES
                )
            yield instr

            offset += instr.size
            address += instr.size
            instructions += 1

    def disassemble_to_text(
        self,
        data: bytes,
        start_address: int = 0,
        count: Optional[int] = None,
        show_bytes: bool = True,
    ) -> str:
        """
        Disassemble and return source text that re-assembles to ``data``.

        An ORG line is emitted first when the start address is not 0.

        Args:
            data: Byte buffer containing machine code
            start_address: Memory address of first byte
            count: Maximum number of instructions
            show_bytes: Append an address/bytes comment to each line
        """
        lines = []
        if start_address != 0:
            lines.append(f"ORG {format_hex(start_address, 4)}")
        for instr in self.disassemble(data, start_address, count):
            lines.append(str(instr) if show_bytes else instr.text)
        return "\n".join(lines) + "\n" if lines else ""

    def add_symbol(self, address: int, name: str) -> None:
        """
        Add a symbol to the symbol table.

        Args:
            address: The address value
            name: The symbol name
        """
        self._symbol_table[address] = name

    def add_symbols(self, symbols: Dict[int, str]) -> None:
        """
        Add multiple symbols to the symbol table.

        Args:
            symbols: Dictionary mapping addresses to names
        """
        self._symbol_table.update(symbols)


# =============================================================================
# Symbol Files
# =============================================================================

def load_symbol_file(filepath: str | Path) -> Dict[int, str]:
    """
    Read a symbol file written by the assembler into an address -> name map.

    Lines are ``NAME VALUEH``; blank lines and ``#`` comments are skipped.
    When several names share a value the first one is kept.

    Raises:
        ValueError: If a line is not in that form
    """
    symbols: Dict[int, str] = {}
    for number, line in enumerate(Path(filepath).read_text().splitlines(), 1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split()
        if len(parts) != 2 or not parts[1].upper().endswith("H"):
            raise ValueError(f"{filepath}:{number}: expected 'NAME VALUEH', got {line!r}")
        value = int(parts[1][:-1], 16)
        symbols.setdefault(value, parts[0])
    return symbols
