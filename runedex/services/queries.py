"""
QueryService — editor-facing lookups over a WorkspaceIndex

Queries only read the caches. The matcher chain runs once per query, to
classify the word under the cursor.

Rename never applies anything: it returns the text edits and the file
renames to perform, or raises RenameError before computing any edit.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from ..core.identifiers import decode_reference, decode_reference_to_location
from ..core.index import WorkspaceIndex
from ..core.matching import MatcherChain
from ..core.matchtypes import LOCAL_VAR, MODEL, MatchType, registry
from ..core.regex import split_lines
from ..core.script_cache import ScriptBlock
from ..core.types import Annotations, Identifier, Location, MatchResult

logger = logging.getLogger(__name__)


class RenameError(Exception):
    """The symbol under the cursor cannot be renamed."""


@dataclass
class TextEdit:
    location: Location
    new_text: str


@dataclass
class RenamePlan:
    edits: List[TextEdit] = field(default_factory=list)
    file_renames: List[Tuple[str, str]] = field(default_factory=list)


def adjust_new_name(annotations: Annotations, new_name: str) -> str:
    """
    Name to write at every reference.

    The on-disk text keeps what the match stripped, so a typed `cert_`
    prefix, a loc model suffix or an `interface:` qualifier is removed.
    """
    prefix = annotations.original_prefix
    suffix = annotations.original_suffix
    if prefix and new_name.startswith(prefix):
        new_name = new_name[len(prefix):]
    if suffix and new_name.endswith(suffix):
        new_name = new_name[:-len(suffix)]
    if ':' in new_name:
        new_name = new_name[new_name.find(':') + 1:]
    return new_name


def visible_length(name: str) -> int:
    """Length of the part of a name written at a reference: after the colon, if any."""
    return len(name) - name.find(':') - 1


class QueryService:

    def __init__(self, index: WorkspaceIndex, root: Optional[Path] = None):
        self.index = index
        self.root = Path(root) if root else None
        self.chain = MatcherChain(index)

    # =========================================================================
    # Lookups
    # =========================================================================

    def match_word_at_position(self, document_text: str, line: int, file, column: int) -> Optional[MatchResult]:
        lines = split_lines(document_text or "")
        if not 0 <= line < len(lines):
            return None
        return self.chain.match_word(lines[line], line, str(file), column)

    def lookup_identifier(self, name: str, category: Union[str, MatchType]) -> Optional[Identifier]:
        match = registry.get(category) if isinstance(category, str) else category
        return self.index.symbols.get(name, match) if match else None

    def parent_declaration(self, file, line: int, required: Optional[str] = None) -> Optional[Identifier]:
        return self.index.symbols.get_parent_declaration(str(file), line, required)

    def script_data_at_line(self, line: int) -> Optional[ScriptBlock]:
        return self.index.scripts.get(line)

    def _local_variable(self, line: int, word: str):
        block = self.index.scripts.get(line)
        return block.variables.get(f"${word}") if block else None

    # =========================================================================
    # Navigation
    # =========================================================================

    def find_definition(self, document_text: str, line: int, file, column: int) -> Optional[Location]:
        """
        Declaration of the word under the cursor.

        On a declaration (or a name that only refers to a file) the cursor
        location itself is returned.
        """
        result = self.match_word_at_position(document_text, line, file, column)
        if result is None or result.match.noop or result.match.hover_only:
            return None
        if result.match.declaration or result.match.reference_only:
            return Location.at(str(file), line, column)
        if result.match.id == LOCAL_VAR.id:
            variable = self._local_variable(line, result.word)
            return variable.declaration if variable else None
        identifier = self.index.symbols.get(result.word, result.match)
        return identifier.declaration if identifier else None

    def find_references(self, document_text: str, line: int, file, column: int) -> List[Location]:
        result = self.match_word_at_position(document_text, line, file, column)
        if result is None or result.match.noop or result.match.hover_only:
            return []
        if result.match.id == LOCAL_VAR.id:
            variable = self._local_variable(line, result.word)
            return list(variable.references) if variable else []

        identifier = self.index.symbols.get(result.word, result.match)
        if identifier is None:
            return []
        length = visible_length(result.word)
        locations = [
            location
            for file_key, refs in sorted(identifier.references.items())
            for location in (decode_reference_to_location(file_key, ref, length) for ref in refs)
            if location is not None
        ]
        locations.sort(key=lambda loc: (loc.file, loc.range.start.line, loc.range.start.character))
        # A declaration referenced nowhere else has nothing to show
        if result.match.declaration and len(locations) == 1:
            return []
        return locations

    # =========================================================================
    # Rename
    # =========================================================================

    def _renameable(self, document_text: str, line: int, file, column: int) -> MatchResult:
        result = self.match_word_at_position(document_text, line, file, column)
        if result is None:
            raise RenameError("Cannot rename")
        if not result.match.allow_rename or result.match.noop:
            raise RenameError(f"{result.match.id} renaming not supported")
        if result.match.id != LOCAL_VAR.id and not self.index.symbols.contains(result.word, result.match):
            raise RenameError("Cannot find any references to rename")
        return result

    def prepare_rename(self, document_text: str, line: int, file, column: int) -> Tuple[Location, str]:
        """
        Range of the word to rename and the placeholder to show.

        Raises:
            RenameError: If the word is not a renameable, cached symbol
        """
        result = self._renameable(document_text, line, file, column)
        word = result.context.word
        return Location.at(str(file), line, word.start, len(word.value)), result.word

    def rename_edits(self, document_text: str, line: int, file, column: int, new_name: str) -> RenamePlan:
        """
        Edits renaming the symbol under the cursor everywhere.

        Raises:
            RenameError: If the word is not a renameable, cached symbol
        """
        result = self._renameable(document_text, line, file, column)

        if result.match.id == LOCAL_VAR.id:
            variable = self._local_variable(line, result.word)
            edits = [TextEdit(location, f"${new_name}") for location in (variable.references if variable else [])]
            return RenamePlan(edits)

        new_name = adjust_new_name(result.annotations, new_name)
        identifier = self.index.symbols.get(result.word, result.match)
        length = visible_length(result.word)
        edits = []
        for file_key, refs in sorted(identifier.references.items()):
            for ref in sorted(refs):
                decoded = decode_reference(ref, length)
                if decoded is not None:
                    edits.append(TextEdit(Location(file_key, decoded), new_name))
        logger.debug("Rename %s -> %s: %d edits", result.word, new_name, len(edits))
        return RenamePlan(edits, self.file_renames(result.match, result.word, new_name))

    def file_renames(self, match: MatchType, old_name: str, new_name: str) -> List[Tuple[str, str]]:
        """
        Files to rename along with a symbol that names a file.

        Models keep their loc shape suffix: `wall_0.ob2` -> `fence_0.ob2`.
        """
        if not match.rename_file or not match.file_types or self.root is None:
            return []
        ext = match.file_types[0]
        if match.id == MODEL.id:
            pattern = re.compile(rf"^(?:{re.escape(old_name)}\.{ext}|{re.escape(old_name)}_[^/]\.{ext})$")
        else:
            pattern = re.compile(rf"^{re.escape(old_name)}\.{ext}$")

        renames = []
        for path in sorted(self.root.rglob(f"{old_name}*.{ext}")):
            if not pattern.match(path.name):
                continue
            if path.name.startswith(f"{old_name}_"):
                suffix = path.name[len(old_name) + 1:path.name.rfind('.')]
                new_file = f"{new_name}_{suffix}.{ext}"
            else:
                new_file = f"{new_name}.{ext}"
            renames.append((str(path), str(path.with_name(new_file))))
        return renames

    # =========================================================================
    # Debug exports
    # =========================================================================

    def dump_cache(self) -> Dict[str, Any]:
        return self.index.symbols.serialize()

    def cache_keys(self) -> List[str]:
        return self.index.symbols.keys()

    def write_snapshot(self, path) -> Path:
        """Write the cache dump as JSON. Only ever on explicit request."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.dump_cache(), indent=2))
        logger.info("Wrote cache snapshot to %s", path)
        return path
