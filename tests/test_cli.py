# =============================================================================
# test_cli.py - Command-Line Tool Tests
# =============================================================================
# Tests for i8080asm and i8080dis, driven through Click's CliRunner.
#
# Test coverage includes:
#   - Output files and default names
#   - Exit codes for build errors and bad arguments
#   - No output written when assembly fails
#   - Disassembly text options, and a full asm -> dis -> asm round trip
# =============================================================================

import logging
from pathlib import Path

import pytest
from click.testing import CliRunner

from intel8080 import __version__
from intel8080.cli.errors import ExitCode
from intel8080.cli.i8080asm import main as asm_main
from intel8080.cli.i8080dis import main as dis_main


PROGRAM = """\
        ORG 100H
start:  MVI A, 'A'
        OUT 1
        JMP start
"""


@pytest.fixture
def runner():
    yield CliRunner()
    # setup_logging leaves a handler on the runner's (now closed) stderr
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler) is logging.StreamHandler:
            root.removeHandler(handler)


# =============================================================================
# i8080asm
# =============================================================================

class TestAssemblerCli:
    """Test the assembler command."""

    def test_default_output_name(self, runner):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text(PROGRAM)
            result = runner.invoke(asm_main, ["rom.asm"])

            assert result.exit_code == ExitCode.SUCCESS, result.output
            code = Path("rom.bin").read_bytes()
            assert len(code) == 0x107
            assert code[0x100:] == bytes([0x3E, 0x41, 0xD3, 0x01, 0xC3, 0x00, 0x01])

    def test_quiet_on_success(self, runner):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text(PROGRAM)
            result = runner.invoke(asm_main, ["rom.asm"])
            assert result.output == ""

    def test_all_outputs(self, runner):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text(PROGRAM)
            result = runner.invoke(
                asm_main, ["rom.asm", "-o", "out.bin", "-l", "out.lst", "-s", "out.sym"]
            )

            assert result.exit_code == 0, result.output
            assert Path("out.bin").exists()
            assert "Symbol Table" in Path("out.lst").read_text()
            assert "START 0100H" in Path("out.sym").read_text()

    def test_error_writes_nothing(self, runner):
        with runner.isolated_filesystem():
            Path("bad.asm").write_text("NOP\nJMP nowhere\n")
            result = runner.invoke(asm_main, ["bad.asm", "-l", "bad.lst", "-s", "bad.sym"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "Assembly error: bad.asm:2:5: error: undefined label 'NOWHERE'" in result.output
            assert not Path("bad.bin").exists()
            assert not Path("bad.lst").exists()
            assert not Path("bad.sym").exists()

    @pytest.mark.parametrize("args", [
        ["-l", "nodir/rom.lst"],
        ["-s", "nodir/rom.sym"],
    ])
    def test_failed_auxiliary_write_leaves_no_image(self, runner, args):
        """A listing or symbol file that cannot be written means no ROM image."""
        with runner.isolated_filesystem():
            Path("rom.asm").write_text(PROGRAM)
            result = runner.invoke(asm_main, ["rom.asm", *args])

            assert result.exit_code != ExitCode.SUCCESS
            assert not Path("rom.bin").exists()

    def test_fill_and_size(self, runner):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text("HLT\n")
            result = runner.invoke(asm_main, ["rom.asm", "--fill", "0FFH", "--size", "4"])

            assert result.exit_code == 0, result.output
            assert Path("rom.bin").read_bytes() == bytes([0x76, 0xFF, 0xFF, 0xFF])

    @pytest.mark.parametrize("args", [
        ["--fill", "100H"],
        ["--fill", "zz"],
        ["--size", "10001H"],
    ])
    def test_bad_option_values(self, runner, args):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text("HLT\n")
            result = runner.invoke(asm_main, ["rom.asm", *args])

            assert result.exit_code == ExitCode.INVALID_ARGS
            assert not Path("rom.bin").exists()

    def test_case_sensitive_flag(self, runner):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text("Loop: NOP\nLOOP: NOP\n")
            assert runner.invoke(asm_main, ["rom.asm"]).exit_code == ExitCode.BUILD_ERROR
            result = runner.invoke(asm_main, ["rom.asm", "--case-sensitive"])
            assert result.exit_code == 0, result.output

    def test_fill_from_environment(self, runner):
        with runner.isolated_filesystem():
            Path("rom.asm").write_text("ORG 1\nHLT\n")
            result = runner.invoke(asm_main, ["rom.asm"], env={"I8080_FILL_BYTE": "0AAH"})

            assert result.exit_code == 0, result.output
            assert Path("rom.bin").read_bytes() == bytes([0xAA, 0x76])

    def test_missing_input(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(asm_main, ["missing.asm"])
            assert result.exit_code == 2

    def test_version(self, runner):
        result = runner.invoke(asm_main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


# =============================================================================
# i8080dis
# =============================================================================

class TestDisassemblerCli:
    """Test the disassembler command."""

    def test_stdout(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0x3E, 0x41, 0x76]))
            result = runner.invoke(dis_main, ["rom.bin"])

            assert result.exit_code == 0, result.output
            lines = result.output.splitlines()
            assert lines[0] == "; Disassembly of rom.bin"
            assert lines[1] == "; Size: 3 bytes"
            assert lines[2] == "; Base address: 0000H"
            assert lines[4].startswith("MVI A, 41H")
            assert "; 0000: 3E 41" in lines[4]
            assert lines[5].startswith("HLT")

    def test_address_and_no_bytes(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0xC3, 0x00, 0x01]))
            result = runner.invoke(dis_main, ["rom.bin", "-a", "0x100", "--no-bytes"])

            assert result.exit_code == 0, result.output
            assert result.output.splitlines()[4:] == ["ORG 0100H", "JMP 0100H"]

    def test_count(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes(10))
            result = runner.invoke(dis_main, ["rom.bin", "-c", "2", "--no-bytes"])
            assert result.output.splitlines()[4:] == ["NOP", "NOP"]

    def test_undocumented_lenient(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0xCB]))
            result = runner.invoke(dis_main, ["rom.bin"])

            assert result.exit_code == 0
            assert "DB 0CBH" in result.output
            assert "undocumented opcode" in result.output

    def test_undocumented_strict(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0x00, 0xCB]))
            result = runner.invoke(dis_main, ["rom.bin", "--strict"])

            assert result.exit_code == ExitCode.BUILD_ERROR
            assert "Disassembly error: $0001:" in result.output

    @pytest.mark.parametrize("address", ["10000H", "65536", "start"])
    def test_bad_address(self, runner, address):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0x00]))
            result = runner.invoke(dis_main, ["rom.bin", "-a", address])
            assert result.exit_code == ExitCode.INVALID_ARGS

    def test_input_past_end_of_memory(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes(0x20))
            result = runner.invoke(dis_main, ["rom.bin", "-a", "0FFF0H"])

            assert result.exit_code == ExitCode.INVALID_ARGS
            assert "run past 0FFFFH" in result.output

    def test_input_ending_at_top_of_memory(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes(0x10))
            result = runner.invoke(dis_main, ["rom.bin", "-a", "0FFF0H", "--no-bytes"])

            assert result.exit_code == 0, result.output
            assert result.output.splitlines()[4:] == ["ORG 0FFF0H"] + ["NOP"] * 16

    def test_symbols(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0xC3, 0x00, 0x00]))
            Path("rom.sym").write_text("# Symbol table\nSTART 0000H\n")
            result = runner.invoke(dis_main, ["rom.bin", "-s", "rom.sym"])

            assert result.exit_code == 0, result.output
            assert result.output.rstrip().endswith("START")

    def test_output_file(self, runner):
        with runner.isolated_filesystem():
            Path("rom.bin").write_bytes(bytes([0x76]))
            result = runner.invoke(dis_main, ["rom.bin", "-o", "rom.asm"])

            assert result.exit_code == 0, result.output
            assert result.output == ""
            assert "HLT" in Path("rom.asm").read_text()

    def test_round_trip(self, runner):
        """Disassembler output re-assembles to the original image."""
        with runner.isolated_filesystem():
            Path("rom.asm").write_text(PROGRAM)
            assert runner.invoke(asm_main, ["rom.asm", "-o", "first.bin"]).exit_code == 0
            assert runner.invoke(dis_main, ["first.bin", "-o", "again.asm"]).exit_code == 0
            assert runner.invoke(asm_main, ["again.asm", "-o", "second.bin"]).exit_code == 0

            assert Path("second.bin").read_bytes() == Path("first.bin").read_bytes()

    def test_version(self, runner):
        result = runner.invoke(dis_main, ["--version"])
        assert result.exit_code == 0
        assert "i8080dis" in result.output
