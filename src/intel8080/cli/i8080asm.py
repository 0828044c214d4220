"""
i8080asm - Intel 8080 Assembler Command-Line Interface
======================================================

This module implements the command-line interface for the Intel 8080
assembler.

Usage Examples
--------------
Basic assembly (writes rom.bin):
    $ i8080asm rom.asm

With output file:
    $ i8080asm rom.asm -o rom.bin

Generate all output files:
    $ i8080asm rom.asm -o rom.bin -l rom.lst -s rom.sym

Pad the image to 8K with HLT:
    $ i8080asm rom.asm --size 2000H --fill 76H

Verbose mode:
    $ i8080asm -v rom.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from intel8080 import __version__
from intel8080.assembler import Assembler
from intel8080.cli import setup_logging
from intel8080.cli.errors import handle_cli_exception
from intel8080.config import AssemblerConfig, parse_int

logger = logging.getLogger(__name__)


def _parse_option(name: str, text: str, limit: int) -> int:
    try:
        value = parse_int(text)
    except ValueError:
        raise click.BadParameter(f"invalid number '{text}'", param_hint=name) from None
    if not 0 <= value <= limit:
        raise click.BadParameter(f"must be 0-{limit}, got {value}", param_hint=name)
    return value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output ROM image (default: input.bin)",
)
@click.option(
    "-l", "--listing",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate listing file",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "--fill",
    type=str,
    default=None,
    help="Byte for unwritten addresses (decimal, 0x.. or ..H). Default: 0",
)
@click.option(
    "--size",
    type=str,
    default=None,
    help="Pad the image to at least this many bytes",
)
@click.option(
    "--case-sensitive",
    is_flag=True,
    help="Treat label names as case-sensitive",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="i8080asm")
def main(
    input_file: Path,
    output: Optional[Path],
    listing: Optional[Path],
    symbols: Optional[Path],
    fill: Optional[str],
    size: Optional[str],
    case_sensitive: bool,
    verbose: bool,
) -> None:
    """
    Assemble Intel 8080 source code into a raw ROM image.

    INPUT_FILE is the assembly source file (.asm) to assemble.

    The image holds every byte from address 0 through the highest address
    written. No file is written if assembly fails.

    \b
    Examples:
        i8080asm rom.asm              # Outputs rom.bin
        i8080asm rom.asm -o out.bin   # Specify output file
        i8080asm rom.asm -l rom.lst   # Also write a listing
    """
    setup_logging(verbose)

    try:
        config = AssemblerConfig.from_env()
        if fill is not None:
            config.fill_byte = _parse_option("--fill", fill, 0xFF)
        if size is not None:
            config.image_size = _parse_option("--size", size, 0x10000)
        if case_sensitive:
            config.case_sensitive_labels = True

        output_file = output if output is not None else input_file.with_suffix(".bin")

        asm = Assembler(config)
        code = asm.assemble_file(input_file)

        # The ROM image goes last so a failed auxiliary write leaves no image
        if listing:
            asm.write_listing(listing)
        if symbols:
            asm.write_symbols(symbols)
        asm.write_binary(output_file)

        logger.debug(
            f"Assembly complete: {len(code)} bytes, {len(asm.get_symbols())} symbols"
        )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
