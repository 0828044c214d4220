# =============================================================================
# test_disassembler.py - Disassembler Unit Tests
# =============================================================================
# Tests for the Intel 8080 disassembler.
#
# Test coverage includes:
#   - Decoding each operand shape
#   - Undocumented opcodes and truncated instructions (lenient and strict)
#   - Text output, and re-assembly of that output to the same bytes
#   - Symbol annotation and symbol files
# =============================================================================

import types

import pytest
from intel8080.assembler import assemble
from intel8080.cpu import UNDOCUMENTED_OPCODES
from intel8080.disassembler import (
    DisassembledInstruction,
    I8080Disassembler,
    format_hex,
    load_symbol_file,
)
from intel8080.errors import DecodeError


# =============================================================================
# Helper Functions
# =============================================================================

def disasm(data: bytes, start: int = 0, **kwargs) -> list:
    return list(I8080Disassembler(**kwargs).disassemble(data, start))


def texts(data: bytes, start: int = 0) -> list:
    return [instr.text for instr in disasm(data, start)]


def reassemble(data: bytes, start: int = 0) -> bytes:
    """Disassemble to text and assemble the text again."""
    text = I8080Disassembler().disassemble_to_text(data, start)
    return assemble(text)[start:]


# =============================================================================
# Decoding
# =============================================================================

class TestDecoding:
    """Test decoding of each operand shape."""

    def test_no_operand(self):
        assert texts(bytes([0x00, 0xC9, 0xFB])) == ["NOP", "RET", "EI"]

    def test_register_move(self):
        assert texts(bytes([0x41, 0x7E])) == ["MOV B, C", "MOV A, M"]

    def test_hlt_not_mov_m_m(self):
        assert texts(bytes([0x76])) == ["HLT"]

    def test_byte_immediate(self):
        instr = disasm(bytes([0x3E, 0x41]))[0]
        assert instr.text == "MVI A, 41H"
        assert instr.size == 2
        assert instr.raw_bytes == bytes([0x3E, 0x41])

    def test_hex_starting_with_letter(self):
        assert texts(bytes([0xFE, 0xFF])) == ["CPI 0FFH"]

    def test_word_operand(self):
        assert texts(bytes([0x21, 0xA0, 0xC3])) == ["LXI H, 0C3A0H"]
        assert texts(bytes([0xC3, 0x00, 0x01])) == ["JMP 0100H"]

    def test_pairs(self):
        assert texts(bytes([0xF5, 0xC1, 0x12, 0x39])) == [
            "PUSH PSW", "POP B", "STAX D", "DAD SP",
        ]

    def test_rst(self):
        assert texts(bytes([0xC7, 0xEF, 0xFF])) == ["RST 0", "RST 5", "RST 7"]

    def test_addresses(self):
        result = disasm(bytes([0x00, 0x3E, 0x01, 0xC3, 0x00, 0x00]), 0x100)
        assert [instr.address for instr in result] == [0x100, 0x101, 0x103]

    def test_count_limit(self):
        result = list(I8080Disassembler().disassemble(bytes(10), count=3))
        assert len(result) == 3

    def test_lazy(self):
        result = I8080Disassembler().disassemble(bytes(4))
        assert isinstance(result, types.GeneratorType)
        assert next(result).text == "NOP"

    def test_offset_beyond_data(self):
        with pytest.raises(ValueError):
            I8080Disassembler().disassemble_one(bytes([0x00]), offset=1)

    def test_empty_input(self):
        assert disasm(b"") == []

    def test_every_documented_opcode_decodes(self):
        documented = [op for op in range(256) if op not in UNDOCUMENTED_OPCODES]
        assert len(documented) == 244
        for opcode in documented:
            instr = disasm(bytes([opcode, 0x00, 0x00]))[0]
            assert instr.error is None, f"{opcode:02X}"
            assert instr.mnemonic != "DB"

    @pytest.mark.parametrize("start", [-1, 0x10000])
    def test_start_outside_memory(self, start):
        with pytest.raises(ValueError, match="outside"):
            disasm(bytes([0x00]), start)

    def test_stops_at_top_of_memory(self, caplog):
        result = disasm(bytes(0x20), 0xFFF0)
        assert len(result) == 16
        assert result[-1].address == 0xFFFF
        assert "ignoring the last 16 bytes" in caplog.text

    def test_instruction_crossing_top_of_memory(self):
        result = disasm(bytes([0xC3, 0x00, 0x00]), 0xFFFE)
        assert [instr.text for instr in result] == ["DB 0C3H", "DB 00H"]
        assert [instr.address for instr in result] == [0xFFFE, 0xFFFF]
        assert "truncated JMP" in result[0].comment


# =============================================================================
# Undecodable Bytes
# =============================================================================

class TestUndecodable:
    """Test undocumented opcodes and instructions cut short."""

    @pytest.mark.parametrize("opcode", [
        0x08, 0x10, 0x18, 0x20, 0x28, 0x30, 0x38, 0xCB, 0xD9, 0xDD, 0xED, 0xFD,
    ])
    def test_undocumented_becomes_db(self, opcode):
        instr = disasm(bytes([opcode]))[0]
        assert instr.mnemonic == "DB"
        assert instr.size == 1
        assert isinstance(instr.error, DecodeError)
        assert instr.error.byte == opcode

    def test_decoding_continues_after_db(self):
        assert texts(bytes([0xCB, 0x76])) == ["DB 0CBH", "HLT"]

    def test_truncated_instruction(self):
        result = disasm(bytes([0x00, 0xC3, 0x34]))
        assert [instr.text for instr in result] == ["NOP", "DB 0C3H", "DB 34H"]
        assert "truncated JMP" in result[1].comment
        assert result[2].comment == "operand of truncated instruction"

    def test_truncated_operand_not_decoded(self):
        """Bytes after a truncated opcode are data even if they decode."""
        result = disasm(bytes([0x21, 0x3E]))
        assert [instr.text for instr in result] == ["DB 21H", "DB 3EH"]

    def test_strict_undocumented(self):
        with pytest.raises(DecodeError) as exc_info:
            disasm(bytes([0x00, 0xDD]), 0x100, strict=True)
        assert exc_info.value.address == 0x101
        assert str(exc_info.value).startswith("$0101:")

    def test_strict_truncated(self):
        with pytest.raises(DecodeError, match="truncated"):
            disasm(bytes([0xCD, 0x00]), strict=True)


# =============================================================================
# Text Output and Re-assembly
# =============================================================================

class TestTextOutput:
    """Test source text output."""

    def test_line_format(self):
        instr = disasm(bytes([0x3E, 0x41]), 0x100)[0]
        assert str(instr) == "MVI A, 41H          ; 0100: 3E 41"

    def test_org_line_for_nonzero_start(self):
        text = I8080Disassembler().disassemble_to_text(bytes([0x76]), 0x100)
        assert text.splitlines()[0] == "ORG 0100H"

    def test_no_org_line_at_zero(self):
        text = I8080Disassembler().disassemble_to_text(bytes([0x76]), show_bytes=False)
        assert text == "HLT\n"

    def test_empty_text(self):
        assert I8080Disassembler().disassemble_to_text(b"") == ""

    def test_round_trip_program(self):
        code = assemble("ORG 100H\nstart: LXI SP, 0\nMVI A, 'A'\nCALL start\nRST 7\nHLT")
        assert reassemble(code) == code

    def test_round_trip_every_opcode(self):
        data = bytes(range(256))
        assert reassemble(data, 0x8000) == data

    def test_round_trip_truncated_tail(self):
        data = bytes([0x00, 0xCB, 0x01, 0x34])
        assert reassemble(data) == data

    def test_round_trip_at_top_of_memory(self):
        assert reassemble(bytes(0x20), 0xFFF0) == bytes(16)
        assert reassemble(bytes([0xC3, 0x00, 0x00]), 0xFFFE) == bytes([0xC3, 0x00])

    def test_to_dict(self):
        info = disasm(bytes([0xC3, 0x00, 0x01]))[0].to_dict()
        assert info["mnemonic"] == "JMP"
        assert info["operands"] == ["0100H"]
        assert info["bytes"] == ["C3H", "00H", "01H"]
        assert info["error"] is None


# =============================================================================
# Symbols
# =============================================================================

class TestSymbols:
    """Test symbol annotation."""

    def test_word_operand_annotated(self):
        dis = I8080Disassembler({0x100: "START"})
        instr = dis.disassemble_one(bytes([0xC3, 0x00, 0x01]))
        assert instr.comment == "START"
        assert str(instr).endswith("START")

    def test_add_symbols(self):
        dis = I8080Disassembler()
        dis.add_symbol(0x10, "PORT")
        dis.add_symbols({0x20: "BUF"})
        assert dis.disassemble_one(bytes([0x21, 0x20, 0x00])).comment == "BUF"

    def test_byte_operand_not_annotated(self):
        dis = I8080Disassembler({0x10: "PORT"})
        assert dis.disassemble_one(bytes([0xD3, 0x10])).comment == ""

    def test_load_symbol_file(self, tmp_path):
        path = tmp_path / "rom.sym"
        path.write_text("# Symbol table\nLOOP 0103H\n\nSTART 0100H\nALIAS 0100H\n")
        assert load_symbol_file(path) == {0x103: "LOOP", 0x100: "START"}

    def test_load_symbol_file_malformed(self, tmp_path):
        path = tmp_path / "rom.sym"
        path.write_text("LOOP = 0103H\n")
        with pytest.raises(ValueError):
            load_symbol_file(path)


def test_format_hex():
    assert format_hex(0x12, 2) == "12H"
    assert format_hex(0xAB, 2) == "0ABH"
    assert format_hex(0x1234, 4) == "1234H"
    assert format_hex(0xC3A0, 4) == "0C3A0H"


def test_instruction_record_defaults():
    instr = DisassembledInstruction(0, 0x00, "NOP", (), 1, b"\x00")
    assert instr.comment == ""
    assert instr.error is None
    assert instr.text == "NOP"
