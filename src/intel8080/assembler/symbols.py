"""
Assembler Symbol Table
======================

Maps label names to their resolved 16-bit values for one assembly run.
A name is bound once: the first pass inserts each label when it is
declared, and a second declaration of the same name is rejected with
DuplicateLabelError naming both positions. Values never change after
they are set.

A table belongs to a single assembly invocation; the code generator
creates a fresh one each time it runs.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from intel8080.errors import DuplicateLabelError, SourceLocation


@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name (already case-folded by the parser)
        value: Resolved address, or the EQU value
        location: Where the symbol was declared
        is_constant: True for EQU bindings, False for addresses
    """
    name: str
    value: Optional[int]
    location: Optional[SourceLocation] = None
    is_constant: bool = False

    @property
    def defined(self) -> bool:
        return self.value is not None


class SymbolTable:
    """
    Name to value mapping with duplicate detection and typo suggestions.

    Usage:
        table = SymbolTable()
        table.define("START", 0x0100, location)
        table.lookup("START")     # 0x0100
        table.lookup("STRAT")     # None
        table.find_similar("STRAT")  # ['START']
    """

    def __init__(self):
        self._symbols: dict[str, Symbol] = {}

    def define(
        self,
        name: str,
        value: int,
        location: Optional[SourceLocation] = None,
        is_constant: bool = False,
        source_line: Optional[str] = None,
    ) -> Symbol:
        """
        Bind a name to a value.

        Raises:
            DuplicateLabelError: If the name is already bound
        """
        existing = self._symbols.get(name)
        if existing is not None:
            raise DuplicateLabelError(
                name,
                location=location,
                original_location=existing.location,
                source_line=source_line,
            )

        symbol = Symbol(name, value & 0xFFFF, location, is_constant)
        self._symbols[name] = symbol
        return symbol

    def lookup(self, name: str) -> Optional[int]:
        """Return the value bound to a name, or None if it has none."""
        symbol = self._symbols.get(name)
        if symbol is None:
            return None
        return symbol.value

    def get(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def to_dict(self) -> dict[str, int]:
        """Return a dictionary of symbol names to values."""
        return {
            name: sym.value for name, sym in self._symbols.items() if sym.defined
        }

    def __contains__(self, name: str) -> bool:
        return name in self._symbols

    def __len__(self) -> int:
        return len(self._symbols)

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    # =========================================================================
    # Suggestions
    # =========================================================================

    def find_similar(self, name: str) -> list[str]:
        """
        Find symbols with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for sym in self._symbols:
            sym_lower = sym.lower()
            if (
                sym_lower == name_lower or
                abs(len(sym) - len(name)) <= 1 and
                _edit_distance(name_lower, sym_lower) <= 2
            ):
                similar.append(sym)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(1 + min((
                    distances[j],
                    distances[j + 1],
                    new_distances[-1],
                )))
        distances = new_distances

    return distances[-1]
