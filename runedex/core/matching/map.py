"""Map files: words take the type of the enclosing `==== LOC ====` section."""

from typing import Optional

from ..matchtypes import UNKNOWN, MatchType, reference, registry
from ..regex import MAP_CELL_WORD_REGEX
from ..types import MatchContext

SECTION_NAMES = ('OBJ', 'LOC', 'NPC')


def map_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if ctx.file_type != 'jm2':
        return None
    word = ctx.word.value
    if MAP_CELL_WORD_REGEX.match(word) or word in SECTION_NAMES:
        return UNKNOWN
    section = index.map_lines.get(ctx.line_number, ctx.file)
    if not section:
        return UNKNOWN
    return reference(registry.resolve(section.lower()))
