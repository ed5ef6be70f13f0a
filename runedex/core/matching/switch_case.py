"""Case values take the operand type of the enclosing `switch_<type>`."""

from typing import Optional

from ..matchtypes import UNKNOWN, MatchType, reference, registry
from ..regex import SWITCH_CASE_REGEX
from ..types import MatchContext


def switch_case_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if ctx.file_type != 'rs2' or ctx.word.index == 0 or ctx.word.value == 'default':
        return None
    if not SWITCH_CASE_REGEX.match(ctx.line_text) or ctx.cursor >= ctx.line_text.find(' :'):
        return None
    resolved = registry.get(index.switch_lines.get(ctx.line_number, ctx.file))
    return reference(resolved) if resolved else UNKNOWN
