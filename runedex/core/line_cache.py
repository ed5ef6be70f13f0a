"""
LineReferenceCache — per-file "value active from this line on" breakpoints

Used for the operand type of switch statements, the return signature of
the enclosing script, and the section type of map files. A lookup returns
the value of the breakpoint with the greatest start line not past the
queried line. Each start line holds one value; a later put replaces it.
"""

import threading
from typing import Dict, Optional

from .identifiers import resolve_file_key
from .types import FileKey


class LineReferenceCache:

    def __init__(self):
        self._cache: Dict[FileKey, Dict[int, str]] = {}
        self._lock = threading.Lock()

    def put(self, start_line: int, value: str, file) -> None:
        file_key = resolve_file_key(file)
        if not value or file_key is None:
            return
        with self._lock:
            self._cache.setdefault(file_key, {})[start_line] = value

    def get(self, line: int, file) -> Optional[str]:
        """Floor lookup: value of the closest breakpoint at or before `line`."""
        file_key = resolve_file_key(file)
        if file_key is None:
            return None
        with self._lock:
            breakpoints = dict(self._cache.get(file_key, {}))
        candidates = [start for start in breakpoints if start <= line]
        return breakpoints[max(candidates)] if candidates else None

    def get_all(self) -> Dict[FileKey, Dict[int, str]]:
        return self._cache

    def clear_file(self, file) -> None:
        file_key = resolve_file_key(file)
        if file_key is not None:
            with self._lock:
                self._cache.pop(file_key, None)

    def clear(self) -> None:
        with self._lock:
            self._cache = {}
