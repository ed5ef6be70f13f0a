"""Sigil prefixed references: ^constant, %var, @label, ~proc, and `p,mesanim`."""

from typing import Optional

from ..matchtypes import CONSTANT, GLOBAL_VAR, LABEL, MESANIM, PROC, MatchType, declaration, reference
from ..types import MatchContext


def prev_char_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    prev = ctx.prev_char
    if prev == '^':
        return declaration(CONSTANT) if ctx.file_type == 'constant' else reference(CONSTANT)
    if prev == '%':
        return reference(GLOBAL_VAR)
    if prev == '@':
        # @@ is not a label
        return None if ctx.next_char == '@' else reference(LABEL)
    if prev == '~':
        return reference(PROC)
    if prev == ',' and ctx.prev_word is not None and ctx.prev_word.value == 'p':
        return reference(MESANIM)
    return None
