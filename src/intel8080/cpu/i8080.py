"""
Intel 8080 Instruction Set Definition
=====================================

This module defines the complete documented Intel 8080 instruction set:
every mnemonic, every legal operand combination, its opcode and its size.
The table is shared by the assembler (which encodes instructions) and the
disassembler (which inverts it to decode them).

The 8080 is little-endian: 16-bit immediates and addresses are stored
low byte first.

Operand Shapes
--------------
Instruction operands are either registers, resolved syntactically, or
expressions, evaluated during code generation:

1. **8-bit register**: A B C D E H L M (M is the byte at address HL).
   The register select code (B=0 C=1 D=2 E=3 H=4 L=5 M=6 A=7) is merged
   into the opcode.
   - Example: MOV B,C -> $41

2. **Register pair**: B (BC), D (DE), H (HL), SP, and PSW for PUSH/POP.
   The pair code (B=0 D=1 H=2 SP/PSW=3) is merged into bits 4-5.
   - Example: LXI H,1234H -> $21 $34 $12

3. **BYTE**: 8-bit immediate appended after the opcode.
   - Example: MVI A,41H -> $3E $41

4. **WORD**: 16-bit immediate or address appended low byte first.
   - Example: JMP 0100H -> $C3 $00 $01

5. **VECTOR**: RST restart number 0-7, merged into the opcode.
   - Example: RST 7 -> $FF

Aliases
-------
``MOV M,M`` is not a move: its encoding $76 is the HLT instruction. The
table lists it explicitly so the assembler accepts it, and the decoder
always reports $76 as HLT.

The twelve undocumented opcodes ($08 $10 $18 $20 $28 $30 $38 $CB $D9 $DD
$ED $FD) duplicate documented ones on real silicon. They are not in the
table and do not decode.

Reference
---------
- Intel 8080 Microcomputer Systems User's Manual, September 1975
- Intel 8080 Assembly Language Programming Manual
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional, Union


# =============================================================================
# Operand Enumerations
# =============================================================================

class Register(Enum):
    """
    Register and register-pair operand names.

    Pair operands reuse the name of the pair's high register (B means BC,
    D means DE, H means HL), as 8080 assembly does.
    """
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    E = "E"
    H = "H"
    L = "L"
    M = "M"
    SP = "SP"
    PSW = "PSW"

    def __str__(self) -> str:
        return self.value


class OperandKind(Enum):
    """Expression operand slots, by how the value is encoded."""
    BYTE = auto()    # 8-bit immediate appended after the opcode
    WORD = auto()    # 16-bit immediate/address appended little-endian
    VECTOR = auto()  # RST number 0-7 merged into the opcode

    def __str__(self) -> str:
        return {
            OperandKind.BYTE: "byte",
            OperandKind.WORD: "word",
            OperandKind.VECTOR: "vector",
        }[self]


OperandSlot = Union[Register, OperandKind]
Signature = tuple[OperandSlot, ...]


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionInfo:
    """
    Information about one (mnemonic, operand signature) encoding.

    Attributes:
        mnemonic: Upper-case instruction mnemonic
        operands: Operand signature; registers are fixed, OperandKind slots
                  are filled by evaluated expressions
        opcode: The opcode byte, with any register select bits merged in
                (for RST, the base $C7 before the vector is merged)
        size: Total instruction size in bytes (including immediates)
    """
    mnemonic: str
    operands: Signature
    opcode: int
    size: int

    @property
    def immediate(self) -> Optional[OperandKind]:
        """The expression slot kind, if the instruction takes one."""
        for slot in self.operands:
            if isinstance(slot, OperandKind):
                return slot
        return None

    def __repr__(self) -> str:
        return (
            f"InstructionInfo({self.mnemonic} {format_signature(self.operands)}, "
            f"opcode=${self.opcode:02X}, size={self.size})"
        )


# =============================================================================
# Register Select Codes
# =============================================================================

# 8-bit register field (bits 0-2 for sources, bits 3-5 for destinations)
REG8_CODES: dict[Register, int] = {
    Register.B: 0,
    Register.C: 1,
    Register.D: 2,
    Register.E: 3,
    Register.H: 4,
    Register.L: 5,
    Register.M: 6,
    Register.A: 7,
}

# Register pair field (bits 4-5)
PAIR_CODES: dict[Register, int] = {
    Register.B: 0,
    Register.D: 1,
    Register.H: 2,
    Register.SP: 3,
}

# PUSH/POP address PSW (A + flags) where other pair instructions use SP
STACK_PAIR_CODES: dict[Register, int] = {
    Register.B: 0,
    Register.D: 1,
    Register.H: 2,
    Register.PSW: 3,
}

# STAX/LDAX only exist for BC and DE
INDIRECT_PAIR_CODES: dict[Register, int] = {
    Register.B: 0,
    Register.D: 1,
}

_IMMEDIATE_BYTES = {
    OperandKind.BYTE: 1,
    OperandKind.WORD: 2,
    OperandKind.VECTOR: 0,
}


# =============================================================================
# Instruction Groups
# =============================================================================

# Single-byte instructions with no operand
NO_OPERAND_OPCODES: dict[str, int] = {
    "NOP": 0x00, "RLC": 0x07, "RRC": 0x0F, "RAL": 0x17, "RAR": 0x1F,
    "DAA": 0x27, "CMA": 0x2F, "STC": 0x37, "CMC": 0x3F, "HLT": 0x76,
    "RNZ": 0xC0, "RZ": 0xC8, "RET": 0xC9, "RNC": 0xD0, "RC": 0xD8,
    "RPO": 0xE0, "RPE": 0xE8, "RP": 0xF0, "RM": 0xF8,
    "XTHL": 0xE3, "PCHL": 0xE9, "XCHG": 0xEB, "SPHL": 0xF9,
    "DI": 0xF3, "EI": 0xFB,
}

# Opcode followed by a 16-bit address or immediate
WORD_OPCODES: dict[str, int] = {
    "SHLD": 0x22, "LHLD": 0x2A, "STA": 0x32, "LDA": 0x3A,
    "JNZ": 0xC2, "JMP": 0xC3, "JZ": 0xCA, "JNC": 0xD2, "JC": 0xDA,
    "JPO": 0xE2, "JPE": 0xEA, "JP": 0xF2, "JM": 0xFA,
    "CNZ": 0xC4, "CZ": 0xCC, "CALL": 0xCD, "CNC": 0xD4, "CC": 0xDC,
    "CPO": 0xE4, "CPE": 0xEC, "CP": 0xF4, "CM": 0xFC,
}

# Opcode followed by an 8-bit immediate (or port number)
BYTE_OPCODES: dict[str, int] = {
    "ADI": 0xC6, "ACI": 0xCE, "SUI": 0xD6, "SBI": 0xDE,
    "ANI": 0xE6, "XRI": 0xEE, "ORI": 0xF6, "CPI": 0xFE,
    "OUT": 0xD3, "IN": 0xDB,
}

# Accumulator ALU operations, source register in bits 0-2
ALU_OPCODES: dict[str, int] = {
    "ADD": 0x80, "ADC": 0x88, "SUB": 0x90, "SBB": 0x98,
    "ANA": 0xA0, "XRA": 0xA8, "ORA": 0xB0, "CMP": 0xB8,
}

# Single register operations, register in bits 3-5
INR_DCR_OPCODES: dict[str, int] = {
    "INR": 0x04,
    "DCR": 0x05,
}

# Register pair operations, pair in bits 4-5
PAIR_OPCODES: dict[str, int] = {
    "INX": 0x03,
    "DAD": 0x09,
    "DCX": 0x0B,
}


# =============================================================================
# Opcode Table
# =============================================================================
# Master table of all 8080 instructions.
# Key: (mnemonic, operand signature)
# Value: InstructionInfo(mnemonic, signature, opcode, size)
#
# Register-parameterized families are expanded here, one entry per legal
# register combination, so lookup is a single dictionary access and an
# illegal combination is simply a missing key.
# =============================================================================

def _entry(
    table: dict[tuple[str, Signature], InstructionInfo],
    mnemonic: str,
    operands: Signature,
    opcode: int,
) -> None:
    size = 1 + sum(
        _IMMEDIATE_BYTES[slot] for slot in operands if isinstance(slot, OperandKind)
    )
    table[(mnemonic, operands)] = InstructionInfo(mnemonic, operands, opcode, size)


def _build_opcode_table() -> dict[tuple[str, Signature], InstructionInfo]:
    table: dict[tuple[str, Signature], InstructionInfo] = {}

    for mnemonic, opcode in NO_OPERAND_OPCODES.items():
        _entry(table, mnemonic, (), opcode)

    for mnemonic, opcode in WORD_OPCODES.items():
        _entry(table, mnemonic, (OperandKind.WORD,), opcode)

    for mnemonic, opcode in BYTE_OPCODES.items():
        _entry(table, mnemonic, (OperandKind.BYTE,), opcode)

    # MOV dst,src: 01 ddd sss
    for dst, dst_code in REG8_CODES.items():
        for src, src_code in REG8_CODES.items():
            if dst is Register.M and src is Register.M:
                # 01 110 110 is HLT, not a memory-to-memory move
                _entry(table, "MOV", (dst, src), 0x76)
            else:
                _entry(table, "MOV", (dst, src), 0x40 | dst_code << 3 | src_code)

    for reg, code in REG8_CODES.items():
        _entry(table, "MVI", (reg, OperandKind.BYTE), 0x06 | code << 3)
        for mnemonic, base in INR_DCR_OPCODES.items():
            _entry(table, mnemonic, (reg,), base | code << 3)
        for mnemonic, base in ALU_OPCODES.items():
            _entry(table, mnemonic, (reg,), base | code)

    for pair, code in PAIR_CODES.items():
        _entry(table, "LXI", (pair, OperandKind.WORD), 0x01 | code << 4)
        for mnemonic, base in PAIR_OPCODES.items():
            _entry(table, mnemonic, (pair,), base | code << 4)

    for pair, code in STACK_PAIR_CODES.items():
        _entry(table, "POP", (pair,), 0xC1 | code << 4)
        _entry(table, "PUSH", (pair,), 0xC5 | code << 4)

    for pair, code in INDIRECT_PAIR_CODES.items():
        _entry(table, "STAX", (pair,), 0x02 | code << 4)
        _entry(table, "LDAX", (pair,), 0x0A | code << 4)

    # RST n: 11 nnn 111
    _entry(table, "RST", (OperandKind.VECTOR,), 0xC7)

    return table


OPCODE_TABLE: dict[tuple[str, Signature], InstructionInfo] = _build_opcode_table()


# =============================================================================
# Instruction Set Reference Lists
# =============================================================================

# Set of all valid mnemonics (for lexer/parser validation)
MNEMONICS: frozenset[str] = frozenset({
    mnemonic for mnemonic, _ in OPCODE_TABLE.keys()
})

# Number of operands each mnemonic takes
OPERAND_COUNT: dict[str, int] = {
    mnemonic: len(operands) for mnemonic, operands in OPCODE_TABLE.keys()
}

# Opcodes that duplicate documented instructions on real hardware
UNDOCUMENTED_OPCODES: frozenset[int] = frozenset({
    0x08, 0x10, 0x18, 0x20, 0x28, 0x30, 0x38, 0xCB, 0xD9, 0xDD, 0xED, 0xFD,
})

REGISTER_NAMES: frozenset[str] = frozenset(reg.value for reg in Register)


# =============================================================================
# Lookup Functions
# =============================================================================

def get_instruction_info(
    mnemonic: str,
    operands: Signature,
) -> Optional[InstructionInfo]:
    """
    Look up instruction information by mnemonic and operand signature.

    Args:
        mnemonic: The instruction mnemonic (e.g., "MOV")
        operands: The operand signature, e.g. (Register.B, Register.C)

    Returns:
        InstructionInfo if found, None if the combination is invalid
    """
    return OPCODE_TABLE.get((mnemonic.upper(), tuple(operands)))


def get_operand_forms(mnemonic: str) -> list[Signature]:
    """
    Get every accepted operand signature for a mnemonic.

    Args:
        mnemonic: The instruction mnemonic

    Returns:
        List of signatures, in table order
    """
    mnemonic = mnemonic.upper()
    return [
        operands for (m, operands) in OPCODE_TABLE.keys()
        if m == mnemonic
    ]


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a documented 8080 instruction."""
    return mnemonic.upper() in MNEMONICS


def is_register(name: str) -> bool:
    """Check if a name is a register or register pair operand."""
    return name.upper() in REGISTER_NAMES


def slot_accepts_register(mnemonic: str, index: int) -> bool:
    """Check whether operand slot ``index`` of a mnemonic takes a register."""
    return any(
        isinstance(form[index], Register)
        for form in get_operand_forms(mnemonic)
        if index < len(form)
    )


def slot_accepts_expression(mnemonic: str, index: int) -> bool:
    """Check whether operand slot ``index`` of a mnemonic takes an expression."""
    return any(
        isinstance(form[index], OperandKind)
        for form in get_operand_forms(mnemonic)
        if index < len(form)
    )


def format_signature(operands: Signature) -> str:
    """
    Render a signature for messages, e.g. ``B,byte`` or ``(none)``.
    """
    if not operands:
        return "(none)"
    return ",".join(str(slot) for slot in operands)


def summarize_forms(mnemonic: str) -> list[str]:
    """
    Summarize a mnemonic's accepted forms for an error hint.

    Register slots are collapsed per position so the 64 MOV forms read as
    ``A|B|C|D|E|H|L|M,A|B|C|D|E|H|L|M`` rather than a 64-item list.
    """
    forms = get_operand_forms(mnemonic)
    if not forms:
        return []

    summaries: list[str] = []
    # Group by the expression-kind pattern so MVI reads as reg,byte
    groups: dict[tuple, list[Signature]] = {}
    for form in forms:
        key = tuple(
            slot if isinstance(slot, OperandKind) else None for slot in form
        )
        groups.setdefault(key, []).append(form)

    for key, group in groups.items():
        if not key:
            summaries.append("(none)")
            continue
        parts = []
        for index, kind in enumerate(key):
            if kind is not None:
                parts.append(str(kind))
                continue
            names: list[str] = []
            for form in group:
                name = str(form[index])
                if name not in names:
                    names.append(name)
            parts.append("|".join(names))
        summaries.append(",".join(parts))

    return summaries
