"""
Intel 8080 Command-Line Interface
=================================

This package provides the command-line tools:

- **i8080asm**: assemble a source file into a raw ROM image
- **i8080dis**: disassemble a ROM image back into assembler source

Each tool is implemented as a Click-based CLI application.
"""

import logging

__all__ = ["i8080asm", "i8080dis", "setup_logging"]


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
        force=True,
    )
