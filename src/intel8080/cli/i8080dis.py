"""
i8080dis - Intel 8080 Disassembler Command-Line Interface
=========================================================

This module implements the command-line interface for the Intel 8080
disassembler. Its output is assembler source: feeding it back to
i8080asm reproduces the input image.

Usage Examples
--------------
Disassemble a ROM image:
    $ i8080dis rom.bin

With base address:
    $ i8080dis code.bin --address 0x100

Limit number of instructions:
    $ i8080dis rom.bin --count 20

Annotate with a symbol file from i8080asm:
    $ i8080dis rom.bin --symbols rom.sym

Output to file:
    $ i8080dis rom.bin -o rom.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from intel8080 import __version__
from intel8080.cli import setup_logging
from intel8080.cli.errors import handle_cli_exception
from intel8080.config import DisassemblerConfig, parse_int
from intel8080.disassembler import I8080Disassembler, format_hex, load_symbol_file

logger = logging.getLogger(__name__)


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
    help="Output file (default: stdout)",
)
@click.option(
    "-a", "--address",
    type=str,
    default=None,
    help="Address of the first byte (decimal, 0x.. or ..H). Default: 0",
)
@click.option(
    "-c", "--count",
    type=int,
    default=None,
    help="Maximum number of instructions to disassemble (default: all)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Symbol file (from i8080asm -s) used to annotate addresses",
)
@click.option(
    "--no-bytes",
    is_flag=True,
    help="Omit the address/bytes comment (pure source output)",
)
@click.option(
    "--strict",
    is_flag=True,
    help="Fail on the first undecodable byte instead of emitting DB",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="i8080dis")
def main(
    input_file: Path,
    output: Optional[Path],
    address: Optional[str],
    count: Optional[int],
    symbols: Optional[Path],
    no_bytes: bool,
    strict: bool,
    verbose: bool,
) -> None:
    """
    Disassemble an Intel 8080 ROM image into assembler source.

    INPUT_FILE is the binary file to disassemble.

    \b
    Examples:
        i8080dis rom.bin --address 0x100
        i8080dis rom.bin --count 20 -o listing.asm
    """
    setup_logging(verbose)

    try:
        config = DisassemblerConfig.from_env()
        if address is not None:
            try:
                config.start_address = parse_int(address)
            except ValueError:
                raise click.BadParameter(
                    f"invalid address '{address}'", param_hint="--address"
                ) from None
        if not 0 <= config.start_address <= 0xFFFF:
            raise click.BadParameter(
                "must be 0-65535 (0x0000-0xFFFF)", param_hint="--address"
            )
        if no_bytes:
            config.show_bytes = False
        if strict:
            config.strict = True

        data = input_file.read_bytes()
        logger.debug(f"Input file: {input_file} ({len(data)} bytes)")
        if config.start_address + len(data) > 0x10000:
            raise click.BadParameter(
                f"{len(data)} bytes at {format_hex(config.start_address, 4)} "
                f"run past 0FFFFH",
                param_hint="--address",
            )

        disasm = I8080Disassembler(strict=config.strict)
        if symbols:
            disasm.add_symbols(load_symbol_file(symbols))

        output_lines = [
            f"; Disassembly of {input_file.name}",
            f"; Size: {len(data)} bytes",
            f"; Base address: {format_hex(config.start_address, 4)}",
            "",
        ]
        body = disasm.disassemble_to_text(
            data,
            start_address=config.start_address,
            count=count,
            show_bytes=config.show_bytes,
        )
        result = "\n".join(output_lines) + "\n" + body

        if output:
            output.write_text(result, encoding="utf-8")
            logger.info(f"Output written to: {output}")
        else:
            click.echo(result, nl=False)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Disassembly")


if __name__ == "__main__":
    main()
