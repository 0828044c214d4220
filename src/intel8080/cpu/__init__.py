"""
Intel 8080 CPU Package
======================

CPU architecture definitions shared by the assembler (which encodes
instructions) and the disassembler (which decodes them), so both tools
work from a single copy of the instruction set.

Modules:
    i8080: Complete 8080 instruction table, operand shapes, register
           select codes and lookup helpers.

Usage:
    from intel8080.cpu import (
        Register,
        OperandKind,
        OPCODE_TABLE,
        get_instruction_info,
    )
"""

# =============================================================================
# Public API Exports
# =============================================================================

from intel8080.cpu.i8080 import (
    # Core types
    Register,
    OperandKind,
    OperandSlot,
    Signature,
    InstructionInfo,
    # Master instruction database
    OPCODE_TABLE,
    # Register select codes
    REG8_CODES,
    PAIR_CODES,
    STACK_PAIR_CODES,
    INDIRECT_PAIR_CODES,
    # Instruction set reference lists
    MNEMONICS,
    OPERAND_COUNT,
    UNDOCUMENTED_OPCODES,
    REGISTER_NAMES,
    # Lookup functions
    get_instruction_info,
    get_operand_forms,
    is_valid_instruction,
    is_register,
    slot_accepts_register,
    slot_accepts_expression,
    format_signature,
    summarize_forms,
)

__all__ = [
    # Core types
    "Register",
    "OperandKind",
    "OperandSlot",
    "Signature",
    "InstructionInfo",
    # Master instruction database
    "OPCODE_TABLE",
    # Register select codes
    "REG8_CODES",
    "PAIR_CODES",
    "STACK_PAIR_CODES",
    "INDIRECT_PAIR_CODES",
    # Instruction set reference lists
    "MNEMONICS",
    "OPERAND_COUNT",
    "UNDOCUMENTED_OPCODES",
    "REGISTER_NAMES",
    # Lookup functions
    "get_instruction_info",
    "get_operand_forms",
    "is_valid_instruction",
    "is_register",
    "slot_accepts_register",
    "slot_accepts_expression",
    "format_signature",
    "summarize_forms",
]
