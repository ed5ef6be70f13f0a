"""
WorkspaceIndex — the state shared by matchers, indexer and queries

Owns the symbol cache, the three line caches and the active file cache.
One instance per workspace; it is passed explicitly to everything that
reads or writes the index.
"""

import threading

from .line_cache import LineReferenceCache
from .script_cache import ActiveFileCache
from .symbol_cache import SymbolCache


class WorkspaceIndex:
    """
    Attributes:
        symbols: Identifiers by (name, match type)
        switch_lines: Operand match type id of the enclosing switch statement
        return_lines: Identifier key of the enclosing script with return types
        map_lines: Section type of map files (LOC, NPC, OBJ)
        scripts: Script blocks of the active file
        write_lock: Held while one file is parsed and written
    """

    def __init__(self):
        self.symbols = SymbolCache()
        self.switch_lines = LineReferenceCache()
        self.return_lines = LineReferenceCache()
        self.map_lines = LineReferenceCache()
        self.scripts = ActiveFileCache()
        self.write_lock = threading.RLock()

    def clear(self) -> None:
        with self.write_lock:
            self.symbols.clear()
            self.switch_lines.clear()
            self.return_lines.clear()
            self.map_lines.clear()

    def clear_file(self, file) -> None:
        with self.write_lock:
            self.symbols.clear_file(file)
            self.switch_lines.clear_file(file)
            self.return_lines.clear_file(file)
            self.map_lines.clear_file(file)

    def close(self) -> None:
        """Drop everything, including the active file."""
        self.clear()
        self.scripts.clear()
