"""Pack files: `1234=name` lines assign an id to a name of the file's type."""

from typing import Optional

from ..matchtypes import COMPONENT, GLOBAL_VAR, UNKNOWN, MatchType, reference, registry
from ..types import MatchContext


def pack_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if ctx.file_type != 'pack' or ctx.word.index != 1:
        return None
    if ctx.file_name in GLOBAL_VAR.file_types:
        match = GLOBAL_VAR
    elif ctx.file_name == 'interface' and ':' in ctx.word.value:
        match = COMPONENT
    else:
        match = registry.resolve(ctx.file_name)
    return reference(match)


def pack_id(ctx: MatchContext, match: MatchType) -> Optional[str]:
    """The id a pack line gives to its name, None on other lines."""
    if ctx.file_type == 'pack' and ctx.word.index == 1 and match.id != UNKNOWN.id:
        return ctx.words[0].value
    return None
