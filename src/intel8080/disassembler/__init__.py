"""
Intel 8080 Disassembler Module
==============================

Decodes Intel 8080 machine code back into assembler source, using the same
instruction table as the assembler.

Usage:
    from intel8080.disassembler import I8080Disassembler

    disasm = I8080Disassembler()
    for instr in disasm.disassemble(rom_bytes, start_address=0x0100):
        print(instr.text)
"""

from .i8080 import (
    DisassembledInstruction,
    I8080Disassembler,
    format_hex,
    load_symbol_file,
)

__all__ = [
    "I8080Disassembler",
    "DisassembledInstruction",
    "format_hex",
    "load_symbol_file",
]
