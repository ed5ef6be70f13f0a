"""
Config key shapes.

A config body line is `key=a,b,c`. Each key declares the data type of every
parameter position, and whether that position declares the value instead
of referencing it.
"""

import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Pattern, Tuple


@dataclass(frozen=True)
class Param:
    type_id: str
    declaration: bool = False


@dataclass(frozen=True)
class ConfigKey:
    params: Tuple[Param, ...]


@dataclass(frozen=True)
class RegexConfigKey:
    regex: Pattern
    params: Tuple[Param, ...]


def _param(type_id: str, declaration: bool = False) -> Param:
    return Param(type_id, declaration)


def _key(*params: Param) -> ConfigKey:
    return ConfigKey(tuple(params))


CONFIG_KEYS: Dict[str, ConfigKey] = {
    'walkanim': _key(_param('seq'), _param('seq'), _param('seq'), _param('seq')),
    'multivar': _key(_param('var')),
    'multiloc': _key(_param('int'), _param('loc')),
    'multinpc': _key(_param('int'), _param('npc')),
    'basevar': _key(_param('var')),

    'category': _key(_param('category')),
    'huntmode': _key(_param('hunt')),
    'table': _key(_param('dbtable')),
    'column': _key(_param('dbcolumn', True)),
}

# (regex, params, file types)
_REGEX_KEYS = [
    (r"stock\d+", (_param('obj'), _param('int'), _param('int')), ('inv',)),
    (r"count\d+", (_param('obj'), _param('int')), ('obj',)),
    (r"frame\d+", (_param('frame'),), ('seq',)),
    (r"(model|head|womanwear|manwear|womanhead|manhead|activemodel)\d*", (_param('ob2'),),
     ('npc', 'loc', 'obj', 'spotanim', 'if', 'idk')),
    (r"\w*anim\w*", (_param('seq'),), ('loc', 'npc', 'if', 'spotanim')),
    (r"replaceheldleft|replaceheldright", (_param('obj'),), ('seq',)),
]


def _group_by_file_type(entries) -> Dict[str, List[RegexConfigKey]]:
    grouped: Dict[str, List[RegexConfigKey]] = {}
    for pattern, params, file_types in entries:
        key = RegexConfigKey(re.compile(pattern), params)
        for file_type in file_types:
            grouped.setdefault(file_type, []).append(key)
    return grouped


REGEX_CONFIG_KEYS: Dict[str, List[RegexConfigKey]] = _group_by_file_type(_REGEX_KEYS)

# Keys whose parameter shape depends on another cached identifier
SPECIAL_CASE_KEYS = ('val', 'param', 'data')


def find_config_key(key: str, file_type: str) -> Optional[ConfigKey]:
    """Static key first, then the file type's regex keys."""
    static = CONFIG_KEYS.get(key)
    if static:
        return static
    for regex_key in REGEX_CONFIG_KEYS.get(file_type, []):
        if regex_key.regex.search(key):
            return ConfigKey(regex_key.params)
    return None
