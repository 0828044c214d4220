# =============================================================================
# test_symbols.py - Symbol Table Tests
# =============================================================================

import pytest
from intel8080.assembler.symbols import SymbolTable
from intel8080.errors import DuplicateLabelError, SourceLocation


class TestSymbolTable:
    """Test binding, lookup and suggestions."""

    def test_define_and_lookup(self):
        table = SymbolTable()
        table.define("START", 0x100)
        assert table.lookup("START") == 0x100
        assert "START" in table
        assert len(table) == 1

    def test_lookup_missing(self):
        assert SymbolTable().lookup("NOPE") is None

    def test_value_masked_to_16_bits(self):
        table = SymbolTable()
        table.define("BIG", 0x12345)
        assert table.lookup("BIG") == 0x2345

    def test_constant_flag(self):
        table = SymbolTable()
        table.define("PORT", 0x10, is_constant=True)
        assert table.get("PORT").is_constant
        assert table.get("PORT").defined

    def test_duplicate_reports_both_positions(self):
        table = SymbolTable()
        first = SourceLocation("rom.asm", 3, 1)
        second = SourceLocation("rom.asm", 9, 1)
        table.define("LOOP", 0x10, first)

        with pytest.raises(DuplicateLabelError) as exc_info:
            table.define("LOOP", 0x20, second)

        error = exc_info.value
        assert error.location == second
        assert error.original_location == first
        assert "rom.asm:3:1" in error.hint

    def test_duplicate_keeps_first_value(self):
        table = SymbolTable()
        table.define("X", 1)
        with pytest.raises(DuplicateLabelError):
            table.define("X", 2)
        assert table.lookup("X") == 1

    def test_to_dict(self):
        table = SymbolTable()
        table.define("A1", 1)
        table.define("B1", 2)
        assert table.to_dict() == {"A1": 1, "B1": 2}

    def test_iteration_in_definition_order(self):
        table = SymbolTable()
        for name in ("Z", "Y", "X"):
            table.define(name, 0)
        assert [sym.name for sym in table] == ["Z", "Y", "X"]

    def test_find_similar(self):
        table = SymbolTable()
        table.define("LOOP", 0)
        table.define("START", 0)
        assert table.find_similar("LOPP") == ["LOOP"]
        assert table.find_similar("STRAT") == ["START"]
        assert table.find_similar("XYZZY") == []

    def test_find_similar_ignores_case(self):
        table = SymbolTable()
        table.define("Loop", 0)
        assert table.find_similar("LOOP") == ["Loop"]
