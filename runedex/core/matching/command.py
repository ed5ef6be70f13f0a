"""Known engine commands, declared in the trigger headers of engine.rs2."""

from pathlib import PurePath
from typing import Optional

from ..matchtypes import COMMAND, MatchType, declaration, reference
from ..regex import TRIGGER_LINE_REGEX
from ..types import MatchContext

ENGINE_FILE = "engine.rs2"


def command_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    command = index.symbols.get(ctx.word.value, COMMAND)
    if command is None:
        return None
    if (PurePath(ctx.file).name == ENGINE_FILE and ctx.word.index == 1
            and TRIGGER_LINE_REGEX.match(ctx.line_text)):
        return declaration(COMMAND)
    # A command taking parameters is only invoked when followed by '('
    if command.signature and command.signature.params and ctx.next_char != '(':
        return None
    return reference(COMMAND)
