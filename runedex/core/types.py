"""
Core data structures shared by the tokenizer, the matcher chain and the caches.

Positions are zero-based (line, character). A file key is the string form
of the file path and is what every cache uses to group data per file.
"""

from dataclasses import dataclass, field, asdict
from typing import List, Dict, Set, Optional, Any, Callable, TYPE_CHECKING

if TYPE_CHECKING:
    from .matchtypes import MatchType


FileKey = str
IdentifierKey = str


@dataclass(frozen=True)
class Position:
    line: int
    character: int

    def translate(self, characters: int) -> 'Position':
        return Position(self.line, self.character + characters)


@dataclass(frozen=True)
class Range:
    start: Position
    end: Position


@dataclass(frozen=True)
class Location:
    """A range inside one file."""
    file: FileKey
    range: Range

    @classmethod
    def at(cls, file: FileKey, line: int, character: int, length: int = 0) -> 'Location':
        start = Position(line, character)
        return cls(file, Range(start, start.translate(length)))

    def to_dict(self) -> dict:
        return {
            'file': self.file,
            'range': {
                'start': {'line': self.range.start.line, 'character': self.range.start.character},
                'end': {'line': self.range.end.line, 'character': self.range.end.character},
            },
        }


@dataclass(frozen=True)
class Word:
    """A word found on a line. `end` is inclusive."""
    value: str
    start: int
    end: int
    index: int


@dataclass(frozen=True)
class FileInfo:
    name: str   # "engine" for engine.rs2
    type: str   # "rs2" for engine.rs2


@dataclass(frozen=True)
class BaseContext:
    """Per-line context, built once before any word on the line is examined."""
    words: List[Word]
    file: FileKey
    line_text: str
    line_number: int
    file_info: FileInfo


@dataclass(frozen=True)
class MatchContext:
    """
    Per-word context handed to every rule.

    Immutable: rules never write to it. Anything a classification rewrites
    is reported through Annotations instead.
    """
    base: BaseContext
    word: Word
    cursor: int
    prev_word: Optional[Word]
    prev_char: str
    next_char: str

    # Convenience accessors keep rule code short
    @property
    def words(self) -> List[Word]:
        return self.base.words

    @property
    def file(self) -> FileKey:
        return self.base.file

    @property
    def file_name(self) -> str:
        return self.base.file_info.name

    @property
    def file_type(self) -> str:
        return self.base.file_info.type

    @property
    def line_text(self) -> str:
        return self.base.line_text

    @property
    def line_number(self) -> int:
        return self.base.line_number


@dataclass(frozen=True)
class Annotations:
    """
    What a classification did to the matched word.

    `word` and `start` are the final (possibly rewritten) value and column.
    The prefix and suffix record stripped on-disk text so a rename can put
    it back.
    """
    word: str
    start: int
    modified_word: bool = False
    original_prefix: str = ""
    original_suffix: str = ""
    cert: bool = False
    pack_id: Optional[str] = None


@dataclass(frozen=True)
class MatchResult:
    match: 'MatchType'
    word: str
    context: MatchContext
    annotations: Annotations


@dataclass
class SignatureParam:
    type: str
    name: str
    match_type_id: str


@dataclass
class Signature:
    """Parameter and return shape parsed from a `(int $a)(obj)` header."""
    params: List[SignatureParam] = field(default_factory=list)
    returns: List[str] = field(default_factory=list)
    params_text: str = ""
    returns_text: str = ""

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class IdentifierText:
    """Lines used to build an identifier: `lines[start]` is the declaration line."""
    lines: List[str]
    start: int


@dataclass
class Identifier:
    """
    One workspace symbol.

    Identity is (name, match_id). `references` maps a file key to encoded
    "line|column" positions.
    """
    name: str
    match_id: str
    references: Dict[FileKey, Set[str]] = field(default_factory=dict)
    file_type: str = "rs2"
    language: str = "runescript"
    pack_id: Optional[str] = None
    declaration: Optional[Location] = None
    info: Optional[str] = None
    signature: Optional[Signature] = None
    block: Optional[str] = None
    value: Optional[str] = None
    extra_data: Optional[Dict[str, Any]] = None
    hide_display: bool = False

    def reference_count(self) -> int:
        return sum(len(refs) for refs in self.references.values())

    def to_dict(self) -> dict:
        return {
            'name': self.name,
            'match_id': self.match_id,
            'pack_id': self.pack_id,
            'declaration': self.declaration.to_dict() if self.declaration else None,
            'references': {key: sorted(refs) for key, refs in sorted(self.references.items())},
            'file_type': self.file_type,
            'language': self.language,
            'info': self.info,
            'signature': self.signature.to_dict() if self.signature else None,
            'block': self.block,
            'value': self.value,
            'extra_data': self.extra_data,
            'hide_display': self.hide_display,
        }


PostProcessor = Callable[[Identifier], None]
