"""
Intel 8080 Assembler - Main Interface
=====================================

This module provides the Assembler class, the primary interface for
assembling Intel 8080 source code. It runs the lexer, the parser and the
two-pass code generator, and writes the resulting ROM image.

Example Usage
-------------
>>> from intel8080.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
...         ORG 100H
... start:  MVI A, 'H'
...         OUT 1
...         JMP start
... ''')
>>> code = asm.get_code()
>>> asm.write_binary("hello.bin")

Command-Line Usage
------------------
    $ i8080asm hello.asm -o hello.bin -l hello.lst -s hello.sym
"""

from pathlib import Path
from typing import Optional
import logging

from intel8080.assembler.codegen import CodeGenerator
from intel8080.assembler.parser import Statement, parse_source
from intel8080.config import AssemblerConfig

logger = logging.getLogger(__name__)


class Assembler:
    """
    Main Intel 8080 assembler class.

    Each assembly starts from scratch: the symbol table and the image are
    rebuilt, and the first error aborts the run with an AssemblerError.
    Nothing is written to disk unless a ``write_*`` method is called after
    a successful assembly.

    Attributes:
        config: Fill byte, image size and label case settings
    """

    def __init__(self, config: Optional[AssemblerConfig] = None):
        self.config = config or AssemblerConfig()
        self._codegen = CodeGenerator(self.config)
        self._statements: list[Statement] = []

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            The ROM image as bytes

        Raises:
            AssemblerError: If assembly fails
        """
        self._statements = parse_source(
            source, filename, case_sensitive=self.config.case_sensitive_labels
        )
        logger.debug(f"{filename}: parsed {len(self._statements)} statements")

        code = self._codegen.generate(self._statements)
        logger.debug(f"{filename}: generated {len(code)} bytes")

        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        logger.debug(f"assembling {filepath}")
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the generated ROM image."""
        return self._codegen.get_code()

    def get_statements(self) -> list[Statement]:
        return list(self._statements)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table.

        Returns:
            Dictionary mapping label names to values
        """
        return self._codegen.get_symbols()

    def get_listing(self) -> str:
        """Get the assembly listing as a string."""
        return self._codegen.get_listing()

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write the raw ROM image (no header).

        Args:
            filepath: Output file path
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.info(f"Wrote {len(code)} bytes to {filepath}")

    def write_listing(self, filepath: str | Path) -> None:
        """
        Write assembly listing file.

        The listing file shows:
        - Addresses
        - Generated bytes
        - Source lines
        - Symbol table
        """
        self._codegen.write_listing(filepath)
        logger.info(f"Wrote listing to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """Write symbol table file."""
        self._codegen.write_symbols(filepath)
        logger.info(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(
    source: str,
    filename: str = "<input>",
    config: Optional[AssemblerConfig] = None,
) -> bytes:
    """
    Convenience function to assemble source code.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(config).assemble_string(source, filename)


def assemble_file(filepath: str | Path, config: Optional[AssemblerConfig] = None) -> bytes:
    """
    Convenience function to assemble a file.

    Raises:
        AssemblerError: If assembly fails
    """
    return Assembler(config).assemble_file(filepath)
