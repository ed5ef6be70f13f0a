"""Local variables: `$name`, declared when preceded by a type keyword."""

from typing import Optional

from ..matchtypes import LOCAL_VAR, MatchType, declaration, reference
from ..regex import DEF_KEYWORD_REGEX
from ..types import MatchContext


def local_var_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if ctx.prev_char != '$':
        return None
    if ctx.prev_word is None:
        return reference(LOCAL_VAR)
    keyword = ctx.prev_word.value
    if keyword.startswith('def_'):
        keyword = keyword[4:]
    return declaration(LOCAL_VAR) if DEF_KEYWORD_REGEX.search(keyword) else reference(LOCAL_VAR)
