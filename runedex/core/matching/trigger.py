"""Script headers: `[trigger,name]` in rs2 files."""

from typing import Optional

from ..matchtypes import CATEGORY, TRIGGER, MatchType, declaration, reference
from ..regex import TRIGGER_LINE_REGEX
from ..types import MatchContext
from ...resources.triggers import get_trigger


def trigger_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if ctx.file_type != 'rs2' or ctx.word.index > 1 or len(ctx.words) < 2:
        return None
    if not TRIGGER_LINE_REGEX.match(ctx.line_text):
        return None
    trigger = get_trigger(ctx.words[0].value)
    if trigger is None:
        return None

    if ctx.word.index == 0:
        return reference(TRIGGER, triggerName=ctx.words[1].value)
    # [oploc1,_category] applies to every loc of the category
    if ctx.word.value.startswith('_'):
        return reference(CATEGORY, matchId=trigger.match.id, categoryName=ctx.word.value[1:])
    return declaration(trigger.match) if trigger.declaration else reference(trigger.match)
