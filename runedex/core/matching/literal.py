"""Words recognised by shape alone: coordinates, colours and numbers."""

from typing import Optional

from ..matchtypes import COLOR, COORDINATES, NUMBER, MatchType, reference
from ..regex import COLOR_REGEX, COORD_REGEX, NUMBER_REGEX
from ..types import MatchContext


def literal_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    word = ctx.word.value
    if COORD_REGEX.match(word):
        return reference(COORDINATES)
    if COLOR_REGEX.match(word):
        return reference(COLOR)
    if NUMBER_REGEX.match(word):
        return reference(NUMBER)
    return None
