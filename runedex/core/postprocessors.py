"""
Post processors run once after an identifier is built from a declaration
or a reference. Each one modifies the identifier in place.
"""

from typing import Optional

from .regex import END_OF_LINE_REGEX
from .types import Identifier
from ..resources.info import config_key_info, trigger_info


def _line_from(block: str, marker: str) -> Optional[str]:
    """Text of the line in `block` that starts with `marker`, without the marker."""
    index = block.find(marker)
    if index < 0:
        return None
    rest = block[index + len(marker):]
    return END_OF_LINE_REGEX.split(rest, maxsplit=1)[0]


def coord_post_processor(identifier: Identifier) -> None:
    # level_mx_mz_lx_lz
    parts = identifier.name.split('_')
    x = (int(parts[1]) << 6) + int(parts[3])
    z = (int(parts[2]) << 6) + int(parts[4])
    identifier.value = f"Absolute coordinates: ({x}, {z})"


def enum_post_processor(identifier: Identifier) -> None:
    block = identifier.block or ""
    identifier.extra_data = {
        'inputType': _line_from(block, "inputtype="),
        'outputType': _line_from(block, "outputtype="),
    }


def data_type_post_processor(identifier: Identifier) -> None:
    data_type = _line_from(identifier.block or "", "type=")
    identifier.extra_data = {'dataType': data_type or 'int'}


def config_key_post_processor(identifier: Identifier) -> None:
    info = config_key_info(identifier.name, identifier.file_type)
    if info:
        identifier.info = info.replace("$TYPE", identifier.file_type)
    else:
        identifier.hide_display = True


def trigger_post_processor(identifier: Identifier) -> None:
    if identifier.extra_data:
        info = trigger_info(identifier.name, identifier.extra_data.get('triggerName', ''))
        if info:
            identifier.info = info


def category_post_processor(identifier: Identifier) -> None:
    extra = identifier.extra_data or {}
    if extra.get('matchId') and extra.get('categoryName'):
        identifier.value = (
            f"This script applies to all <b>{extra['matchId']}</b> "
            f"with `category={extra['categoryName']}`"
        )


def component_post_processor(identifier: Identifier) -> None:
    interface, _, component = identifier.name.partition(':')
    identifier.info = f"A component of the <b>{interface}</b> interface"
    identifier.name = component


def row_post_processor(identifier: Identifier) -> None:
    if identifier.block:
        table = identifier.block.split('=')[1] if '=' in identifier.block else ''
        identifier.info = f"A row in the <b>{table}</b> table"
        identifier.block = None
        identifier.extra_data = {'table': table}


def column_post_processor(identifier: Identifier) -> None:
    table, _, column = identifier.name.partition(':')
    identifier.info = f"A column of the <b>{table}</b> table"
    identifier.name = column

    if not identifier.block:
        return
    first_line = END_OF_LINE_REGEX.split(identifier.block, maxsplit=1)[0]
    # column=<name>,<type>,<type>...
    types = first_line[len("column=") + len(column) + 1:].split(',')
    types = [t for t in types if t]
    identifier.extra_data = {'dataTypes': types}
    identifier.block = f"Field types: {', '.join(types)}"


def file_name_post_processor(identifier: Identifier) -> None:
    identifier.info = f"Refers to the file <b>{identifier.name}.{identifier.file_type}</b>"
