"""
Script triggers.

Maps the first word of a `[trigger,name]` header to the category of the
name and whether the header declares it. Triggers that do not declare
anything reference an existing symbol (an npc, a loc, a component...).
"""

from dataclasses import dataclass
from typing import Dict

from ..core import matchtypes as mt
from ..core.matchtypes import MatchType


@dataclass(frozen=True)
class Trigger:
    match: MatchType
    declaration: bool = False


def _numbered(prefix: str, match: MatchType, count: int = 5) -> Dict[str, Trigger]:
    return {f"{prefix}{i}": Trigger(match) for i in range(1, count + 1)}


TRIGGERS: Dict[str, Trigger] = {
    # Declaring triggers
    'proc': Trigger(mt.PROC, True),
    'label': Trigger(mt.LABEL, True),
    'queue': Trigger(mt.QUEUE, True),
    'weakqueue': Trigger(mt.QUEUE, True),
    'longqueue': Trigger(mt.QUEUE, True),
    'timer': Trigger(mt.TIMER, True),
    'softtimer': Trigger(mt.SOFTTIMER, True),
    'walktrigger': Trigger(mt.WALKTRIGGER, True),
    'command': Trigger(mt.COMMAND, True),
    'debugproc': Trigger(mt.PROC, True),

    # Npc interactions
    **_numbered('opnpc', mt.NPC),
    **_numbered('apnpc', mt.NPC),
    'opnpcu': Trigger(mt.NPC),
    'apnpcu': Trigger(mt.NPC),
    'opnpct': Trigger(mt.COMPONENT),
    'apnpct': Trigger(mt.COMPONENT),
    'ai_queue1': Trigger(mt.NPC),
    'ai_queue2': Trigger(mt.NPC),
    'ai_queue3': Trigger(mt.NPC),
    'ai_timer': Trigger(mt.NPC),
    'ai_spawn': Trigger(mt.NPC),
    'ai_despawn': Trigger(mt.NPC),
    **_numbered('ai_opplayer', mt.NPC),
    **_numbered('ai_applayer', mt.NPC),

    # Loc interactions
    **_numbered('oploc', mt.LOC),
    **_numbered('aploc', mt.LOC),
    'oplocu': Trigger(mt.LOC),
    'aplocu': Trigger(mt.LOC),
    'oploct': Trigger(mt.COMPONENT),
    'aploct': Trigger(mt.COMPONENT),

    # Obj interactions
    **_numbered('opobj', mt.OBJ),
    **_numbered('apobj', mt.OBJ),
    **_numbered('opheld', mt.OBJ),
    'opobju': Trigger(mt.OBJ),
    'apobju': Trigger(mt.OBJ),
    'opobjt': Trigger(mt.COMPONENT),
    'apobjt': Trigger(mt.COMPONENT),
    'opheldu': Trigger(mt.OBJ),
    'opheldt': Trigger(mt.COMPONENT),

    # Player interactions
    **_numbered('opplayer', mt.UNKNOWN),
    **_numbered('applayer', mt.UNKNOWN),
    'opplayeru': Trigger(mt.OBJ),
    'opplayert': Trigger(mt.COMPONENT),

    # Interfaces
    **_numbered('inv_button', mt.COMPONENT),
    'inv_buttond': Trigger(mt.COMPONENT),
    'if_button': Trigger(mt.COMPONENT),
    'if_close': Trigger(mt.INTERFACE),

    # Engine events
    'login': Trigger(mt.UNKNOWN),
    'logout': Trigger(mt.UNKNOWN),
    'tutorial': Trigger(mt.UNKNOWN),
    'advancestat': Trigger(mt.STAT),
    'changestat': Trigger(mt.STAT),
    'mapzone': Trigger(mt.UNKNOWN),
    'mapzoneexit': Trigger(mt.UNKNOWN),
    'zone': Trigger(mt.UNKNOWN),
    'zoneexit': Trigger(mt.UNKNOWN),
}


def get_trigger(name: str):
    """Trigger for a header word, case insensitive. None if unknown."""
    return TRIGGERS.get(name.lower())
