# =============================================================================
# test_instruction_table.py - Instruction Table Tests
# =============================================================================
# Tests for the shared Intel 8080 instruction table.
#
# Test coverage includes:
#   - Opcode coverage (every documented opcode exactly once)
#   - Register select code encoding for each instruction family
#   - Instruction sizes
#   - Lookup and hint helpers
# =============================================================================

import pytest
from intel8080.cpu import (
    OPCODE_TABLE,
    OPERAND_COUNT,
    UNDOCUMENTED_OPCODES,
    OperandKind,
    Register,
    get_instruction_info,
    get_operand_forms,
    is_register,
    is_valid_instruction,
    summarize_forms,
)

R = Register


# =============================================================================
# Helper Functions
# =============================================================================

def opcode(mnemonic: str, *operands) -> int:
    info = get_instruction_info(mnemonic, operands)
    assert info is not None, f"{mnemonic} {operands} not in table"
    return info.opcode


def documented_opcodes() -> set:
    """Every opcode byte the table can produce, RST expanded."""
    codes = set()
    for info in OPCODE_TABLE.values():
        if info.immediate == OperandKind.VECTOR:
            codes.update(info.opcode | n << 3 for n in range(8))
        else:
            codes.add(info.opcode)
    return codes


# =============================================================================
# Coverage
# =============================================================================

class TestCoverage:
    """The table covers the documented set and nothing else."""

    def test_244_documented_opcodes(self):
        assert len(documented_opcodes()) == 244

    def test_undocumented_are_the_rest(self):
        codes = documented_opcodes()
        assert codes.isdisjoint(UNDOCUMENTED_OPCODES)
        assert codes | UNDOCUMENTED_OPCODES == set(range(256))

    def test_mov_m_m_is_hlt(self):
        """MOV M,M shares HLT's encoding."""
        assert opcode("MOV", R.M, R.M) == 0x76
        assert opcode("HLT") == 0x76

    def test_mnemonic_count(self):
        assert len(OPERAND_COUNT) == 78


# =============================================================================
# Encodings
# =============================================================================

class TestEncodings:
    """Spot-check each register-parameterized family."""

    @pytest.mark.parametrize("mnemonic,operands,expected", [
        ("MOV", (R.B, R.C), 0x41),
        ("MOV", (R.A, R.M), 0x7E),
        ("MOV", (R.M, R.A), 0x77),
        ("MVI", (R.A, OperandKind.BYTE), 0x3E),
        ("MVI", (R.M, OperandKind.BYTE), 0x36),
        ("INR", (R.M,), 0x34),
        ("DCR", (R.B,), 0x05),
        ("ADD", (R.B,), 0x80),
        ("CMP", (R.A,), 0xBF),
        ("LXI", (R.H, OperandKind.WORD), 0x21),
        ("LXI", (R.SP, OperandKind.WORD), 0x31),
        ("DAD", (R.SP,), 0x39),
        ("INX", (R.D,), 0x13),
        ("DCX", (R.H,), 0x2B),
        ("PUSH", (R.PSW,), 0xF5),
        ("POP", (R.B,), 0xC1),
        ("STAX", (R.D,), 0x12),
        ("LDAX", (R.B,), 0x0A),
        ("JMP", (OperandKind.WORD,), 0xC3),
        ("CALL", (OperandKind.WORD,), 0xCD),
        ("OUT", (OperandKind.BYTE,), 0xD3),
        ("RST", (OperandKind.VECTOR,), 0xC7),
    ])
    def test_opcode(self, mnemonic, operands, expected):
        assert opcode(mnemonic, *operands) == expected

    @pytest.mark.parametrize("mnemonic,operands,size", [
        ("NOP", (), 1),
        ("MOV", (R.A, R.B), 1),
        ("MVI", (R.A, OperandKind.BYTE), 2),
        ("IN", (OperandKind.BYTE,), 2),
        ("LXI", (R.B, OperandKind.WORD), 3),
        ("SHLD", (OperandKind.WORD,), 3),
        ("RST", (OperandKind.VECTOR,), 1),
    ])
    def test_size(self, mnemonic, operands, size):
        assert get_instruction_info(mnemonic, operands).size == size

    def test_illegal_pair_missing(self):
        assert get_instruction_info("PUSH", (R.SP,)) is None
        assert get_instruction_info("LXI", (R.PSW, OperandKind.WORD)) is None
        assert get_instruction_info("STAX", (R.H,)) is None


# =============================================================================
# Helpers
# =============================================================================

class TestLookupHelpers:
    """Test lookup and hint helpers."""

    def test_case_insensitive_lookup(self):
        assert is_valid_instruction("mov")
        assert not is_valid_instruction("LDAA")
        assert get_instruction_info("nop", ()).opcode == 0x00

    def test_is_register(self):
        assert is_register("psw")
        assert not is_register("X")

    def test_operand_forms(self):
        assert get_operand_forms("STAX") == [(R.B,), (R.D,)]

    def test_operand_count(self):
        assert OPERAND_COUNT["MOV"] == 2
        assert OPERAND_COUNT["JMP"] == 1
        assert OPERAND_COUNT["RET"] == 0

    def test_summarize_collapses_registers(self):
        assert summarize_forms("MVI") == ["B|C|D|E|H|L|M|A,byte"]

    def test_summarize_no_operands(self):
        assert summarize_forms("NOP") == ["(none)"]

    def test_summarize_unknown(self):
        assert summarize_forms("FOO") == []
