"""
Intel 8080 Toolchain - Assembler and Disassembler
=================================================

This package provides a two-pass assembler that turns Intel 8080 assembly
source into a raw binary ROM image, and a disassembler that turns an image
back into source the assembler accepts.

Main Components
---------------
- **assembler**: Lexer, expression parser, statement parser, symbol table
  and two-pass code generator (i8080asm)
- **disassembler**: Sequential decoder producing re-assemblable source
  (i8080dis)
- **cpu**: The instruction table shared by both directions
- **config**: Settings dataclasses, overridable from the environment
- **errors**: Exception hierarchy with source-located diagnostics

Quick Start
-----------
Assemble a program:
    >>> from intel8080 import Assembler
    >>> asm = Assembler()
    >>> code = asm.assemble_file("rom.asm")
    >>> asm.write_binary("rom.bin")

Disassemble it again:
    >>> from intel8080 import I8080Disassembler
    >>> for instr in I8080Disassembler().disassemble(code):
    ...     print(instr.text)

Or use the command-line tools:
    $ i8080asm rom.asm -o rom.bin
    $ i8080dis rom.bin --no-bytes
"""

__version__ = "1.0.0"

from intel8080.errors import (
    Intel8080Error,
    SourceLocation,
    AssemblerError,
    LexError,
    ParseError,
    InvalidOperandError,
    DuplicateLabelError,
    UndefinedLabelError,
    DivisionByZeroError,
    AddressOverflowError,
    DecodeError,
)
from intel8080.config import AssemblerConfig, DisassemblerConfig
from intel8080.assembler import Assembler, assemble, assemble_file
from intel8080.disassembler import I8080Disassembler, DisassembledInstruction

__all__ = [
    "__version__",
    # Errors
    "Intel8080Error",
    "SourceLocation",
    "AssemblerError",
    "LexError",
    "ParseError",
    "InvalidOperandError",
    "DuplicateLabelError",
    "UndefinedLabelError",
    "DivisionByZeroError",
    "AddressOverflowError",
    "DecodeError",
    # Configuration
    "AssemblerConfig",
    "DisassemblerConfig",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Disassembler
    "I8080Disassembler",
    "DisassembledInstruction",
]
