"""
WorkspaceIndexer — builds and maintains the index from workspace files

The only component doing I/O. Reads files, runs every line through the
matcher chain and writes declarations, references and line breakpoints
into the WorkspaceIndex.

Full rebuild:
- files are read concurrently on a thread pool, once
- every file is parsed, then every file is parsed again: the first pass
  declares everything (commands, queues, db columns) that references in
  files earlier in the iteration order depend on
- the active file is rebuilt after both passes

Writes for one file hold the index write lock, so two files never
interleave writes. Rebuilds are serialized by a rebuild lock.

Usage:
    from runedex.services.indexer import WorkspaceIndexer

    indexer = WorkspaceIndexer(project_dir)
    indexer.rebuild_all()
    indexer.handle_event(FileEvent(FileEventKind.SAVED, "scripts/a.rs2"))
"""

import fnmatch
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple

from ..config import Config
from ..core.identifiers import resolve_identifier_key
from ..core.index import WorkspaceIndex
from ..core.matching import MatcherChain
from ..core.matchtypes import UNKNOWN, data_type_to_match_id, registry
from ..core.regex import MAP_SECTION_REGEX, TRIGGER_LINE_REGEX, split_lines
from ..core.types import IdentifierText, Location, MatchResult

logger = logging.getLogger(__name__)

# File types indexed besides the declaring file types of the match types
EXTRA_FILE_TYPES = {'pack', 'jm2'}


class FileEventKind(str, Enum):
    CREATED = "created"
    SAVED = "saved"
    RENAMED = "renamed"
    DELETED = "deleted"
    ACTIVE_CHANGED = "active_changed"
    DOCUMENT_CHANGED = "document_changed"


@dataclass
class FileEvent:
    """
    A notification from the editor or file watcher.

    Attributes:
        kind: What happened
        path: The file concerned (the old path for renames)
        new_path: New path, for renames
        text: Current editor text, for active editor and document changes
    """
    kind: FileEventKind
    path: str
    new_path: Optional[str] = None
    text: Optional[str] = None


class WorkspaceIndexer:
    """
    Indexes the monitored files under a workspace root.

    The indexer owns the active file state: which file the editor shows and
    its unsaved text. Script blocks of that file are rebuilt after a quiet
    period, see schedule_active_rebuild().
    """

    def __init__(self, root: Path, index: Optional[WorkspaceIndex] = None, config: Optional[Config] = None):
        self.root = Path(root)
        self.index = index if index is not None else WorkspaceIndex()
        self.config = config if config is not None else Config()
        self.chain = MatcherChain(self.index)
        self.monitored_file_types: Set[str] = registry.declaring_file_types() | EXTRA_FILE_TYPES

        self._rebuild_lock = threading.Lock()

        # Active editor
        self._active_file: Optional[str] = None
        self._active_text: Optional[str] = None
        self._debounce_lock = threading.Lock()
        self._debounce_timer: Optional[threading.Timer] = None

    # =========================================================================
    # Files
    # =========================================================================

    def file_key(self, path) -> str:
        """Cache key of a path; relative paths are taken from the root."""
        path = Path(path)
        if not path.is_absolute():
            path = self.root / path
        return str(path)

    def is_valid_file(self, path) -> bool:
        """Whether the file extension is one that is indexed."""
        return Path(str(path).split('#')[0].split('?')[0]).suffix.lstrip('.').strip() in self.monitored_file_types

    def _is_excluded(self, path: Path) -> bool:
        relative = path.relative_to(self.root).as_posix()
        return any(fnmatch.fnmatch(relative, pattern) for pattern in self.config.index.exclude_patterns)

    def find_files(self) -> List[Path]:
        """Every monitored file under the root, sorted, minus excluded paths."""
        files = [
            path for path in self.root.rglob('*')
            if path.is_file() and self.is_valid_file(path) and not self._is_excluded(path)
        ]
        return sorted(files)

    def _read(self, path) -> Optional[str]:
        try:
            return Path(path).read_text(encoding=self.config.index.encoding)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Skipping %s: %s", path, e)
            return None

    def _read_all(self, files: List[Path]) -> List[Tuple[str, str]]:
        """Read files concurrently. Unreadable files are dropped."""
        with ThreadPoolExecutor(max_workers=self.config.index.io_workers,
                                thread_name_prefix="runedex-io-") as pool:
            texts = list(pool.map(self._read, files))
        return [(self.file_key(f), text) for f, text in zip(files, texts) if text is not None]

    # =========================================================================
    # Rebuilds
    # =========================================================================

    def rebuild_all(self) -> int:
        """
        Clear the index and index every monitored file in two passes.

        Returns:
            Number of files indexed
        """
        with self._rebuild_lock:
            self.index.clear()
            files = self.find_files()
            logger.info("Rebuilding index of %s: %d files", self.root, len(files))
            texts = self._read_all(files)
            for file, text in texts:
                self.parse_file(file, text)
            for file, text in texts:
                self.parse_file(file, text)
            logger.info("Index rebuilt: %d files, %d identifiers", len(texts), len(self.index.symbols))
        self.schedule_active_rebuild()
        return len(texts)

    def rebuild_file(self, path, text: Optional[str] = None) -> bool:
        """
        Reindex one file (single pass).

        Args:
            path: File to reindex
            text: File contents, read from disk when None

        Returns:
            True if the file was indexed
        """
        if not self.is_valid_file(path):
            return False
        file = self.file_key(path)
        if text is None:
            text = self._read(file)
        with self._rebuild_lock:
            self.index.clear_file(file)
            if text is not None:
                self.parse_file(file, text)
        self.schedule_active_rebuild()
        return text is not None

    def create_files(self, paths: Iterable) -> None:
        for path in paths:
            if self.is_valid_file(path):
                file = self.file_key(path)
                text = self._read(file)
                if text is not None:
                    with self._rebuild_lock:
                        self.parse_file(file, text)

    def clear_files(self, paths: Iterable) -> None:
        for path in paths:
            if self.is_valid_file(path):
                self.index.clear_file(self.file_key(path))

    def rename_files(self, pairs: Iterable[Tuple]) -> None:
        """Move what old paths contributed to their new paths."""
        for old_path, new_path in pairs:
            if self.is_valid_file(old_path) and self.is_valid_file(new_path):
                self.index.clear_file(self.file_key(old_path))
                self.create_files([new_path])
                if self._active_file == self.file_key(old_path):
                    self._active_file = self.file_key(new_path)

    # =========================================================================
    # Parsing
    # =========================================================================

    def parse_file(self, file: str, text: str) -> None:
        """Run every line of a file through the matcher chain and cache the results."""
        lines = split_lines(text)
        is_rs2 = file.endswith('.rs2')
        is_map = file.endswith('.jm2')

        with self.index.write_lock:
            for number, line in enumerate(lines):
                if is_rs2:
                    self._cache_switch(line, number, file)
                if is_map:
                    self._cache_map_section(line, number, file)

                results = [r for r in self.chain.match_words(line, number, file) if r and r.match.cache]
                text_window: Optional[IdentifierText] = None
                for result in results:
                    if result.match.declaration:
                        if text_window is None:
                            # The line before may hold an info comment
                            start = max(number - 1, 0)
                            text_window = IdentifierText(lines[start:], number - start)
                        self._put_declaration(result, file, number, line, text_window, is_rs2)
                    else:
                        self._put_reference(result, file, number)

    def _put_declaration(self, result: MatchResult, file: str, number: int, line: str,
                         text: IdentifierText, is_rs2: bool) -> None:
        location = Location.at(file, number, result.annotations.start)
        identifier = self.index.symbols.put(result.word, result.match, location, text)
        if (is_rs2 and identifier is not None and identifier.signature
                and identifier.signature.returns and TRIGGER_LINE_REGEX.match(line)):
            key = resolve_identifier_key(result.word, result.match)
            self.index.return_lines.put(number + 1, key, file)

    def _put_reference(self, result: MatchResult, file: str, number: int) -> None:
        column = result.annotations.start
        word = result.word
        # a:b references point at b
        if not result.annotations.modified_word and word.find(':') > 0:
            column += word.find(':') + 1
        self.index.symbols.put_reference(word, result.match, file, number, column, result.annotations.pack_id)

    def _cache_switch(self, line: str, number: int, file: str) -> None:
        _, found, rest = line.partition("switch_")
        if not found:
            return
        keyword = rest.replace('(', ' ').split(' ')[0]
        match_id = data_type_to_match_id(keyword)
        if match_id != UNKNOWN.id:
            self.index.switch_lines.put(number + 1, match_id, file)

    def _cache_map_section(self, line: str, number: int, file: str) -> None:
        section = MAP_SECTION_REGEX.match(line)
        if section:
            self.index.map_lines.put(number + 1, section.group(1), file)

    # =========================================================================
    # Active file
    # =========================================================================

    @property
    def active_file(self) -> Optional[str]:
        return self._active_file

    def set_active_file(self, path, text: Optional[str] = None) -> None:
        self._active_file = self.file_key(path) if path else None
        self._active_text = text
        self.schedule_active_rebuild()

    def schedule_active_rebuild(self) -> None:
        """Rebuild the script blocks once no new request came for the debounce period."""
        with self._debounce_lock:
            if self._debounce_timer:
                self._debounce_timer.cancel()
            self._debounce_timer = threading.Timer(self.config.editor.debounce_seconds,
                                                   self._debounced_rebuild)
            self._debounce_timer.daemon = True
            self._debounce_timer.start()

    def _debounced_rebuild(self) -> None:
        with self._debounce_lock:
            self._debounce_timer = None
        self.rebuild_active_file()

    def rebuild_active_file(self) -> None:
        """Rebuild the script blocks of the active file now."""
        file = self._active_file
        text = self._active_text
        if file and text is None and file.endswith('.rs2'):
            text = self._read(file)
        self.index.scripts.rebuild(file, text)
        logger.debug("Active file rebuilt: %s", file)

    def flush(self) -> None:
        """Run a pending active file rebuild immediately."""
        with self._debounce_lock:
            timer = self._debounce_timer
            self._debounce_timer = None
        if timer is not None:
            timer.cancel()
            self.rebuild_active_file()

    # =========================================================================
    # Events
    # =========================================================================

    def handle_event(self, event: FileEvent) -> None:
        kind = FileEventKind(event.kind)
        logger.debug("File event %s: %s", kind.value, event.path)
        if kind == FileEventKind.CREATED:
            self.create_files([event.path])
        elif kind == FileEventKind.SAVED:
            if self._active_file == self.file_key(event.path):
                self._active_text = None
            self.rebuild_file(event.path)
        elif kind == FileEventKind.RENAMED:
            if event.new_path:
                self.rename_files([(event.path, event.new_path)])
        elif kind == FileEventKind.DELETED:
            self.clear_files([event.path])
        elif kind == FileEventKind.ACTIVE_CHANGED:
            self.set_active_file(event.path, event.text)
        elif kind == FileEventKind.DOCUMENT_CHANGED:
            if self._active_file == self.file_key(event.path):
                self._active_text = event.text
                self.schedule_active_rebuild()

    def close(self) -> None:
        """Cancel pending work and drop the index."""
        with self._debounce_lock:
            if self._debounce_timer:
                self._debounce_timer.cancel()
            self._debounce_timer = None
        self.index.close()
