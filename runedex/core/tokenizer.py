"""
Tokenizer — Line splitting and per-word context building

A line is split into maximal regex words, left to right:
- `.name` dotted words (pack ids, dot commands)
- `a:b` qualified words (components, db columns)
- runs of non-separator characters

Sigils (`$ ^ % @ ~`) are separators, so they end up as the previous
character of the word they prefix, which is what the matchers key on.

Everything here is pure: building a context never touches a cache.
"""

from pathlib import PurePath
from typing import List, Optional, Pattern

from .regex import WORD_REGEX
from .types import BaseContext, FileInfo, MatchContext, Word


def get_words(text: str, pattern: Pattern = WORD_REGEX) -> List[Word]:
    """
    Split text into words.

    Args:
        text: One line of text
        pattern: Word regex (the local variable scanner passes its own)

    Returns:
        Words in order, each with its index among the words of the line

    Examples:
        >>> [w.value for w in get_words("def_int $x = ~foo(1)")]
        ['def_int', 'x', 'foo', '1']
    """
    return [
        Word(value=m.group(0), start=m.start(), end=m.end() - 1, index=i)
        for i, m in enumerate(pattern.finditer(text))
    ]


def word_at_index(words: List[Word], column: int) -> Optional[Word]:
    """The word covering `column` (start and end inclusive), if any."""
    for word in words:
        if word.start <= column <= word.end:
            return word
        if word.start > column:
            break
    return None


def file_info(file: str) -> FileInfo:
    """Name and dialect of a file: `engine.rs2` -> ("engine", "rs2")."""
    parts = PurePath(file).name.split('.')
    return FileInfo(name=parts[0], type=parts[1] if len(parts) > 1 else "")


def base_context(line_text: str, line_number: int, file: str) -> BaseContext:
    """Context shared by every word of a line. Comments are dropped first."""
    line_text = line_text.split('//')[0]
    return BaseContext(
        words=get_words(line_text),
        file=file,
        line_text=line_text,
        line_number=line_number,
        file_info=file_info(file),
    )


def _char_at(text: str, index: int) -> str:
    return text[index] if 0 <= index < len(text) else ""


def word_context(base: BaseContext, word: Word, cursor: int) -> MatchContext:
    """Context for one word of the line, with its neighbours."""
    return MatchContext(
        base=base,
        word=word,
        cursor=cursor,
        prev_word=base.words[word.index - 1] if word.index > 0 else None,
        prev_char=_char_at(base.line_text, word.start - 1),
        next_char=_char_at(base.line_text, word.end + 1),
    )
