"""
Intel 8080 Assembler
====================

This package provides a two-pass assembler for the Intel 8080. It turns
assembly source into a raw binary ROM image with no header.

Main Components
---------------
- **Assembler**: Orchestrates the assembly process and writes output files
- **Lexer**: Tokenizes assembly source into tokens
- **Parser**: Parses tokens into statements (instructions, directives, labels)
- **ExpressionParser / ExpressionEvaluator**: Build and evaluate operand
  expression trees
- **SymbolTable**: Label name to value bindings for one run
- **CodeGenerator**: Fixes addresses, evaluates expressions, emits bytes

Assembly Process
----------------
1. **Parsing (Lexer + Parser)**:
   - Tokenize source into lexical tokens
   - Parse tokens into statements; operand shapes are checked against the
     instruction table here, so every instruction's size is known

2. **Code Generation (CodeGenerator)** (two-pass):
   - Pass 1: Fix every label address; evaluate ORG and EQU
   - Pass 2: Evaluate the remaining expressions and emit bytes

Example Usage
-------------
>>> from intel8080.assembler import assemble
>>> assemble("ORG 100H\\nHLT\\n")[0x100]
118

Supported Features
------------------
- The full documented 8080 instruction set
- Labels, with forward references
- Constants (EQU)
- Data directives (DB, DW)
- Origin (ORG), forward and backward
- Expressions: + - * / MOD SHL SHR AND OR XOR NOT, $, parentheses
- Numeric literals in decimal, hex (H), octal (O/Q) and binary (N)
- Listing file generation
- Symbol table output
"""

from intel8080.assembler.assembler import Assembler, assemble, assemble_file
from intel8080.assembler.lexer import Lexer, Token, TokenType, tokenize
from intel8080.assembler.parser import (
    Parser,
    Statement,
    Instruction,
    LabelDecl,
    Origin,
    Data,
    Equate,
    parse_source,
)
from intel8080.assembler.codegen import CodeGenerator, RomImage
from intel8080.assembler.expressions import (
    ExprNode,
    ExprNodeType,
    ExpressionEvaluator,
    ExpressionParser,
    evaluate_expression,
)
from intel8080.assembler.symbols import Symbol, SymbolTable

__all__ = [
    # Main class and functions
    "Assembler",
    "assemble",
    "assemble_file",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    "tokenize",
    # Parser
    "Parser",
    "Statement",
    "Instruction",
    "LabelDecl",
    "Origin",
    "Data",
    "Equate",
    "parse_source",
    # Code generator
    "CodeGenerator",
    "RomImage",
    # Expressions
    "ExprNode",
    "ExprNodeType",
    "ExpressionEvaluator",
    "ExpressionParser",
    "evaluate_expression",
    # Symbols
    "Symbol",
    "SymbolTable",
]
