"""
Regex gates used across tokenizing, matching and indexing.

These are the only "grammar" the indexer has. A line that does not pass a
gate is simply not classified by the rule that owns it.
"""

import re

# Characters that split words. `$ ^ % @ ~` are separators so that the
# sigil ends up as the previous character of the word it prefixes.
_SEPARATORS = r"`~!@#%^&*()\-$=+\[{\]}\\|;:'\",.<>/?\s"

WORD_REGEX = re.compile(rf"(\.\w+)|(\w+:\w+)|([^{_SEPARATORS}]+)")
LOCAL_VAR_WORD_REGEX = re.compile(r"(\$\w+)|([^`~!@#%^&*()\-=+\[{\]}\\|;:'\",.<>/?\s]+)")

COORD_REGEX = re.compile(r"^(\d+_){4}\d+$")
COLOR_REGEX = re.compile(r"^0x[0-9a-fA-F]{6}$")
NUMBER_REGEX = re.compile(r"^\d+(\.\d+)?$")

SWITCH_CASE_REGEX = re.compile(r"^\s*case .+ :")
TRIGGER_LINE_REGEX = re.compile(r"^\[\w+,(\.)?[\w:]+\]")
TRIGGER_DEFINITION_REGEX = re.compile(r"^\[[^\]]+,[^\]]+\](\([\w, $]*\))?(\([\w, $]*\))?")

CONFIG_DECLARATION_REGEX = re.compile(r"^\[[^\]]+\]")
CONFIG_LINE_REGEX = re.compile(r"^\w+=.+$")
MAP_SECTION_REGEX = re.compile(r"^=+\s*(\w+)\s*=+")
MAP_CELL_WORD_REGEX = re.compile(r"^\w?\d+$")

INFO_MATCHER_REGEX = re.compile(r"//\s?(desc|info):(.+)")
END_OF_BLOCK_LINE_REGEX = re.compile(r"^(\[|\^|\s*$)")
END_OF_LINE_REGEX = re.compile(r"\r\n|\r|\n")

# Loc models carry a one character shape suffix: wall_0, roof_q
LOC_MODEL_REGEX = re.compile(r"^\w+_[0-9a-z]$")

# Type keywords that turn `$name` into a local variable declaration
DEF_KEYWORD_REGEX = re.compile(
    r"\b(int|string|boolean|seq|locshape|component|idk|midi|npc_mode|namedobj|synth|stat|"
    r"npc_stat|fontmetrics|enum|loc|model|npc|obj|player_uid|spotanim|npc_uid|inv|category|"
    r"struct|dbrow|interface|dbtable|coord|mesanim|param|queue|weakqueue|timer|softtimer|"
    r"char|dbcolumn|proc|label)\b"
)


def split_lines(text: str) -> list:
    """Split file text into lines on any line ending."""
    return END_OF_LINE_REGEX.split(text)
