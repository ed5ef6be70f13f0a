"""
SymbolCache — Workspace-wide identifier index

Maps (name, match type) to one Identifier, plus a per-file reverse index of
declared and referenced keys used for invalidation.

Key invariants:
- An identifier with no declaration and no references is never kept
- A declaration already in the cache is never overwritten, which keeps a
  second indexing pass idempotent
- Clearing a file keeps identifiers still referenced from other files

Usage:
    from runedex.core.symbol_cache import SymbolCache

    cache = SymbolCache()
    cache.put("foo", declaration(PROC), location, text)
    cache.put_reference("foo", reference(PROC), "a.rs2", 4, 9)
    cache.get("foo", PROC).references   # {"a.rs2": {"0|6", "4|9"}, ...}
"""

import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Any

from .identifiers import (
    build, build_ref, encode_reference, resolve_file_key, resolve_identifier_key,
)
from .matchtypes import MatchType, UNKNOWN
from .types import FileKey, Identifier, IdentifierKey, IdentifierText, Location


@dataclass
class FileIdentifiers:
    """Keys declared and referenced in one file."""
    declarations: Set[IdentifierKey] = field(default_factory=set)
    references: Set[IdentifierKey] = field(default_factory=set)


class SymbolCache:
    """
    In-memory identifier index.

    Mutators are guarded by a reentrant lock: a reference set update is a
    read-modify-write on a shared mapping.
    """

    def __init__(self):
        self._identifiers: Dict[IdentifierKey, Identifier] = {}
        self._files: Dict[FileKey, FileIdentifiers] = {}
        self._lock = threading.RLock()

    # =========================================================================
    # Queries
    # =========================================================================

    def contains(self, name: str, match: MatchType) -> bool:
        key = resolve_identifier_key(name, match)
        return key is not None and key in self._identifiers

    def get(self, name: str, match: MatchType) -> Optional[Identifier]:
        key = resolve_identifier_key(name, match)
        return self._identifiers.get(key) if key is not None else None

    def get_by_key(self, key: IdentifierKey) -> Optional[Identifier]:
        return self._identifiers.get(key)

    def get_parent_declaration(self, file, line: int, required_id: Optional[str] = None) -> Optional[Identifier]:
        """
        Nearest declaration above `line` in `file`.

        Args:
            file: File to search
            line: Declarations must start strictly before this line
            required_id: Only consider declarations of this match type id

        Returns:
            The identifier whose declaration is closest above the line, or None
        """
        file_key = resolve_file_key(file)
        entry = self._files.get(file_key) if file_key else None
        if not entry or not entry.declarations:
            return None

        found: Optional[Identifier] = None
        found_line = -1
        for key in entry.declarations:
            identifier = self._identifiers.get(key)
            if not identifier or not identifier.declaration:
                continue
            start = identifier.declaration.range.start.line
            if found_line < start < line and (not required_id or identifier.match_id == required_id):
                found, found_line = identifier, start
        return found

    def file_keys(self, file) -> Optional[FileIdentifiers]:
        """Declared and referenced keys of a file, if it has any."""
        file_key = resolve_file_key(file)
        return self._files.get(file_key) if file_key else None

    # =========================================================================
    # Writes
    # =========================================================================

    def put(self, name: str, match: MatchType, location: Location, text: IdentifierText) -> Optional[Identifier]:
        """
        Put a declaration.

        Returns:
            The cached identifier (the existing one when it already has a
            declaration), or None when the key does not resolve
        """
        key = resolve_identifier_key(name, match)
        file_key = resolve_file_key(location.file)
        if key is None or file_key is None:
            return None

        with self._lock:
            current = self._identifiers.get(key)
            if current is not None and current.declaration is not None:
                return current

            identifier = build(name, match, location, text)
            if current is not None:
                identifier.references = current.references
                if current.pack_id:
                    identifier.pack_id = current.pack_id

            self._add_to_file(file_key, key, declaration=True)
            self._identifiers[key] = identifier

            start = location.range.start
            self.put_reference(name, match, file_key, start.line, start.character)
            return identifier

    def put_reference(self, name: str, match: MatchType, file, line: int, column: int,
                      pack_id: Optional[str] = None) -> None:
        """Record a reference, creating a placeholder identifier when needed."""
        key = resolve_identifier_key(name, match)
        file_key = resolve_file_key(file)
        if key is None or file_key is None:
            return

        with self._lock:
            identifier = self._identifiers.get(key)
            if identifier is None:
                if match.id == UNKNOWN.id:
                    return
                identifier = build_ref(name, match)
                self._identifiers[key] = identifier

            identifier.references.setdefault(file_key, set()).add(encode_reference(line, column))
            self._add_to_file(file_key, key, declaration=False)
            if pack_id:
                identifier.pack_id = pack_id

    def clear(self) -> None:
        with self._lock:
            self._identifiers = {}
            self._files = {}

    def clear_file(self, file) -> None:
        """
        Drop everything a file contributed.

        Referenced identifiers lose that file's references and are deleted
        once they have neither a declaration nor references. Identifiers
        declared in the file lose their declaration, and are deleted only
        when no references remain elsewhere.
        """
        file_key = resolve_file_key(file)
        if file_key is None:
            return

        with self._lock:
            entry = self._files.pop(file_key, None)
            if entry is None:
                return

            for key in entry.references:
                identifier = self._identifiers.get(key)
                if identifier is None:
                    continue
                identifier.references.pop(file_key, None)
                if not identifier.references and identifier.declaration is None:
                    del self._identifiers[key]

            for key in entry.declarations:
                identifier = self._identifiers.get(key)
                if identifier is None:
                    continue
                if identifier.references:
                    identifier.declaration = None
                else:
                    del self._identifiers[key]

    def _add_to_file(self, file_key: FileKey, key: IdentifierKey, declaration: bool) -> None:
        entry = self._files.setdefault(file_key, FileIdentifiers())
        if declaration:
            entry.declarations.add(key)
        else:
            entry.references.add(key)

    # =========================================================================
    # Debug exports
    # =========================================================================

    def serialize(self) -> Dict[str, Any]:
        """Every identifier as a plain dict, keyed and sorted by cache key."""
        return {key: self._identifiers[key].to_dict() for key in sorted(self._identifiers)}

    def keys(self) -> List[IdentifierKey]:
        return sorted(self._identifiers)

    def __len__(self) -> int:
        return len(self._identifiers)
