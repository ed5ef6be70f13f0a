"""
Config files: `[name]` declarations and `key=a,b,c` body lines.

The parameter under the cursor is found by counting unescaped commas, and
its declared data type gives the match type. Three keys take their shape
from another identifier instead of the static tables:
- param=<param>,<value of the param's type>
- val=<enum input type>,<enum output type> (from the enclosing enum)
- data=<column>,<the column's field types...> (from the dbtable column)
"""

import re
from typing import List, Optional

from .. import matchtypes as mt
from ..matchtypes import MatchType, declaration, reference, registry
from ..regex import CONFIG_DECLARATION_REGEX, CONFIG_LINE_REGEX
from ..types import MatchContext
from ...resources.config_keys import SPECIAL_CASE_KEYS, find_config_key

_UNESCAPED_COMMA = re.compile(r"(?<!\\),")

# Match type declared by a [name] header, per file type
DECLARATIONS = {
    'varp': mt.GLOBAL_VAR,
    'varbit': mt.GLOBAL_VAR,
    'varn': mt.GLOBAL_VAR,
    'vars': mt.GLOBAL_VAR,
    'obj': mt.OBJ,
    'loc': mt.LOC,
    'npc': mt.NPC,
    'param': mt.PARAM,
    'seq': mt.SEQ,
    'struct': mt.STRUCT,
    'dbrow': mt.DBROW,
    'dbtable': mt.DBTABLE,
    'enum': mt.ENUM,
    'hunt': mt.HUNT,
    'inv': mt.INV,
    'spotanim': mt.SPOTANIM,
    'idk': mt.IDK,
    'mesanim': mt.MESANIM,
    'if': mt.COMPONENT,
}


def config_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if CONFIG_DECLARATION_REGEX.match(ctx.line_text):
        found = DECLARATIONS.get(ctx.file_type)
        return declaration(found) if found else None
    return config_line_match(ctx, index)


def config_line_match(ctx: MatchContext, index) -> Optional[MatchType]:
    """Match type of the word under the cursor in a `key=a,b,c` line."""
    if not CONFIG_LINE_REGEX.match(ctx.line_text) or not ctx.words:
        return None
    key = ctx.words[0].value
    if ctx.word.index == 0:
        return reference(mt.CONFIG_KEY)
    if key in SPECIAL_CASE_KEYS:
        return _special_case(key, ctx, index)

    config_key = find_config_key(key, ctx.file_type)
    if config_key is None:
        return None
    param_index = get_param_index(ctx.line_text, ctx.cursor)
    if param_index is None or param_index >= len(config_key.params):
        return None
    param = config_key.params[param_index]
    resolved = registry.resolve(param.type_id)
    return declaration(resolved) if param.declaration else reference(resolved)


def get_param_index(line_text: str, cursor: int) -> Optional[int]:
    """
    Index of the comma separated parameter containing `cursor`.

    The key itself is part of parameter 0: in `walkanim=a,b` the cursor on
    `a` gives 0 and on `b` gives 1. Escaped commas do not separate.
    """
    end = 0
    for i, part in enumerate(_UNESCAPED_COMMA.split(line_text)):
        end += len(part) + 1
        if cursor < end:
            return i
    return None


def _resolve(params: List[str], param_index: Optional[int]) -> MatchType:
    if param_index is None or param_index >= len(params) or not params[param_index]:
        return mt.UNKNOWN
    return reference(registry.resolve(params[param_index]))


def _special_case(key: str, ctx: MatchContext, index) -> MatchType:
    if key == 'param':
        return _param_case(ctx, index)
    if key == 'val':
        return _val_case(ctx, index)
    return _data_case(ctx, index)


def _param_case(ctx: MatchContext, index) -> MatchType:
    if ctx.word.index == 1:
        return reference(mt.PARAM)
    if ctx.word.index == 2:
        param = index.symbols.get(ctx.words[1].value, mt.PARAM)
        if param is not None and param.extra_data:
            return _resolve([param.name, param.extra_data.get('dataType')], 1)
    return mt.UNKNOWN


def _val_case(ctx: MatchContext, index) -> MatchType:
    enum = index.symbols.get_parent_declaration(ctx.file, ctx.line_number)
    if enum is not None and enum.extra_data:
        params = [enum.extra_data.get('inputType'), enum.extra_data.get('outputType')]
        return _resolve(params, get_param_index(ctx.line_text, ctx.cursor))
    return mt.UNKNOWN


def _data_case(ctx: MatchContext, index) -> MatchType:
    if ctx.word.index == 1:
        return reference(mt.DBCOLUMN)
    if len(ctx.words) > 1:
        column_name = ctx.words[1].value
        if ':' not in column_name:
            row = index.symbols.get_parent_declaration(ctx.file, ctx.line_number)
            if row is not None and row.extra_data and row.extra_data.get('table'):
                column_name = f"{row.extra_data['table']}:{column_name}"
        column = index.symbols.get(column_name, mt.DBCOLUMN)
        if column is not None and column.extra_data:
            params = [column.name] + list(column.extra_data.get('dataTypes', []))
            return _resolve(params, get_param_index(ctx.line_text, ctx.cursor))
    return mt.UNKNOWN
