# mipsasm/mips_tables.py
import logging
from collections import namedtuple

from mipsasm.mips_consts import UINT32_MAX
from mipsasm.mips_errors import (
    AllocationFailureError, DuplicateNameError, InvalidOperandError, MisalignedAddressError, NotFoundError
)

logger = logging.getLogger(__name__)

Symbol = namedtuple("Symbol", ["name", "address"])


def write_symbol(output, address, name):
    """Writes one 'address<TAB>name' line."""
    output.write(f"{address}\t{name}\n")


class SymbolTable:
    """
    Append-only, insertion-ordered store of (name, address) pairs.
    Serves both as the label table (UNIQUE_NAME) and the relocation table (NON_UNIQUE).
    """
    NON_UNIQUE = "NonUnique"
    UNIQUE_NAME = "UniqueName"

    def __init__(self, mode):
        if mode not in (self.NON_UNIQUE, self.UNIQUE_NAME):
            raise ValueError(f"Unknown symbol table mode: {mode!r}")
        self.mode = mode
        self._symbols = []

    def __len__(self):
        return len(self._symbols)

    def __iter__(self):
        return iter(self._symbols)

    def __contains__(self, name):
        return any(sym.name == name for sym in self._symbols)

    def __repr__(self):
        return f"SymbolTable(mode={self.mode!r}, len={len(self._symbols)})"

    def insert(self, name, address):
        """Appends a symbol. Raises without touching the table if the address or name is rejected."""
        if not 0 <= address <= UINT32_MAX:
            raise InvalidOperandError(f"Address {address} for '{name}' is outside the 32-bit address space.")
        if address % 4 != 0:
            raise MisalignedAddressError(f"Address {address} for '{name}' is not a multiple of 4.")
        if self.mode == self.UNIQUE_NAME and name in self:
            raise DuplicateNameError(f"Name '{name}' already exists in table.")
        try:
            self._symbols.append(Symbol(name, address))
        except MemoryError as e:
            raise AllocationFailureError("Allocation failed while growing symbol table.") from e
        logger.debug(f"Added '{name}' at 0x{address:08x} ({self.mode}, len={len(self._symbols)})")

    def lookup(self, name):
        """Returns the address of the first entry named `name`."""
        for sym in self._symbols:
            if sym.name == name:
                return sym.address
        raise NotFoundError(f"Symbol '{name}' not found.")

    def write(self, output):
        """Dumps the table to a text stream, one entry per line, in insertion order."""
        for sym in self._symbols:
            write_symbol(output, sym.address, sym.name)

    def to_list(self):
        return [{"name": sym.name, "address": sym.address} for sym in self._symbols]
