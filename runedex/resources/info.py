"""
Info texts shown for config keys and triggers.

Keys are plain names or regexes. `$TYPE` is replaced by the file type of the
config file, `$NAME` by the name in the trigger header.
"""

import re
from typing import Optional

# (pattern, file types or None for any, info)
_CONFIG_KEY_INFO = [
    (r"name", None, "The display name of this $TYPE"),
    (r"desc", None, "The examine text of this $TYPE"),
    (r"category", None, "The category this $TYPE belongs to, scripts can target a whole category"),
    (r"model\d*", None, "The model used to render this $TYPE"),
    (r"recol\d+[sd]", None, "Recolours the model of this $TYPE, s is the source colour and d the destination"),
    (r"op\d", ('obj', 'loc', 'npc'), "An interaction option of this $TYPE"),
    (r"iop\d", ('obj',), "An inventory option of this obj"),
    (r"cost", ('obj',), "The base value of this obj, used by shops and alchemy"),
    (r"stackable", ('obj',), "Whether this obj stacks in a single inventory slot"),
    (r"members", ('obj', 'loc', 'npc'), "Whether this $TYPE is only available on members worlds"),
    (r"count\d+", ('obj',), "Stack size from which the countobj model is shown"),
    (r"width|length", ('loc',), "The size of this loc in tiles"),
    (r"blockwalk|blockrange", ('loc',), "Whether this loc blocks movement or projectiles"),
    (r"size", ('npc', 'inv'), "The size of this $TYPE"),
    (r"vislevel", ('npc',), "The combat level shown for this npc"),
    (r"huntmode", ('npc',), "The hunt config this npc uses to find targets"),
    (r"\w*anim\w*", ('loc', 'npc', 'if', 'spotanim'), "An animation used by this $TYPE"),
    (r"walkanim", ('npc',), "The walk, turn around, turn left and turn right animations"),
    (r"stock\d+", ('inv',), "A stock slot of this inv: obj, amount, restock rate"),
    (r"scope", ('inv',), "Whether this inv is temporary, permanent or shared"),
    (r"frame\d+", ('seq',), "A frame of this animation"),
    (r"inputtype", ('enum',), "The type of the keys of this enum"),
    (r"outputtype", ('enum',), "The type of the values of this enum"),
    (r"val", ('enum',), "An entry of this enum: key, value"),
    (r"default", ('enum', 'param'), "The value returned when no other value is set"),
    (r"type", ('param', 'varp'), "The data type of this $TYPE"),
    (r"param", None, "Sets a param on this $TYPE: param, value"),
    (r"table", ('dbrow',), "The dbtable this row belongs to"),
    (r"column", ('dbtable',), "A column of this table: name, field types..."),
    (r"data", ('dbrow',), "The value of a column of this row: column, fields..."),
    (r"basevar", ('varbit',), "The varp that stores the bits of this varbit"),
    (r"startbit|endbit", ('varbit',), "The bit range of the base varp used by this varbit"),
]
_CONFIG_KEY_INFO = [(re.compile(f"^(?:{pattern})$"), file_types, info)
                    for pattern, file_types, info in _CONFIG_KEY_INFO]

_TRIGGER_INFO = [
    (r"proc", "A procedure, called with ~$NAME"),
    (r"label", "A label, jumped to with @$NAME"),
    (r"queue|weakqueue|longqueue", "A queued script, queued with queue($NAME, delay)"),
    (r"timer", "A timer script, started with settimer($NAME, interval)"),
    (r"softtimer", "A soft timer script, started with softtimer($NAME, interval)"),
    (r"walktrigger", "A walk trigger, set with walktrigger($NAME)"),
    (r"command", "An engine command"),
    (r"op(npc|loc|obj|held|player)\d", "Runs when the player selects an option on the $NAME target"),
    (r"ap(npc|loc|obj|player)\d", "Runs when the player selects an option on the $NAME target while approaching"),
    (r"op(npc|loc|obj|held|player)u", "Runs when the player uses an item on $NAME"),
    (r"op(npc|loc|obj|held|player)t", "Runs when the player casts the $NAME component on a target"),
    (r"ai_\w+", "An npc script that runs for $NAME"),
    (r"inv_button\d|inv_buttond|if_button", "Runs when the player clicks the $NAME component"),
    (r"if_close", "Runs when the $NAME interface is closed"),
    (r"login", "Runs when the player logs in"),
    (r"logout", "Runs when the player logs out"),
]
_TRIGGER_INFO = [(re.compile(f"^(?:{pattern})$"), info) for pattern, info in _TRIGGER_INFO]


def config_key_info(key: str, file_type: str) -> Optional[str]:
    """Info text for a config key in a file type, None when the key is undocumented."""
    for regex, file_types, info in _CONFIG_KEY_INFO:
        if file_types is not None and file_type not in file_types:
            continue
        if regex.match(key):
            return info
    return None


def trigger_info(trigger: str, name: str) -> Optional[str]:
    """Info text for a trigger header, with the script name filled in."""
    for regex, info in _TRIGGER_INFO:
        if regex.match(trigger.lower()):
            return info.replace("$NAME", name)
    return None
