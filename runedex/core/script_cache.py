"""
ActiveFileCache — local variables of the script file open in the editor

The file is split into script blocks at each `[trigger,name]` header. Each
block has its own variable table: header parameters, `def_<type> $name`
declarations, and the references to those variables in the block.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .matchtypes import data_type_to_match_id
from .regex import LOCAL_VAR_WORD_REGEX, TRIGGER_DEFINITION_REGEX, TRIGGER_LINE_REGEX, split_lines
from .tokenizer import get_words
from .types import FileKey, Location


@dataclass
class Variable:
    type: str
    match_type_id: str
    parameter: bool
    declaration: Location
    references: List[Location] = field(default_factory=list)


@dataclass
class ScriptBlock:
    start: int
    trigger: str = ""
    name: str = ""
    returns: List[str] = field(default_factory=list)            # type keywords
    return_match_ids: List[str] = field(default_factory=list)
    variables: Dict[str, Variable] = field(default_factory=dict)  # "$name" -> variable


class ActiveFileCache:

    def __init__(self):
        self._blocks: List[ScriptBlock] = []
        self.file: Optional[FileKey] = None

    def get(self, line: int) -> Optional[ScriptBlock]:
        """The block with the greatest start line not past `line`."""
        found = None
        for block in self._blocks:
            if block.start <= line:
                found = block
        return found

    @property
    def blocks(self) -> List[ScriptBlock]:
        return list(self._blocks)

    def clear(self) -> None:
        self._blocks = []
        self.file = None

    def rebuild(self, file: Optional[FileKey], text: Optional[str]) -> None:
        """Discard every block and parse `text` again. Only script files have blocks."""
        self.file = file
        if not file or text is None or not str(file).endswith('.rs2'):
            self._blocks = []
            return
        self._blocks = _ScriptParser(str(file)).parse(split_lines(text))


class _ScriptParser:
    """Single use parser building the block list of one file."""

    def __init__(self, file: FileKey):
        self.file = file
        self.blocks: List[ScriptBlock] = []
        self.current: Optional[ScriptBlock] = None

    def parse(self, lines: List[str]) -> List[ScriptBlock]:
        for number, line in enumerate(lines):
            offset = 0
            if TRIGGER_LINE_REGEX.match(line):
                header = TRIGGER_DEFINITION_REGEX.match(line)
                if header:
                    # Code may follow the header on the same line
                    offset = header.end()
                    self._parse_header(line[:offset], number)
                    line = line[offset:]
            self._parse_line(line, number, offset)
        return self.blocks

    def _parse_header(self, header: str, number: int) -> None:
        self.current = ScriptBlock(start=number)
        self.blocks.append(self.current)

        trigger, _, name = header[1:header.find(']')].partition(',')
        self.current.trigger = trigger
        self.current.name = name

        opening = header.find('(')
        closing = header.find(')')
        if 0 <= opening < closing - 1:
            cursor = opening + 1
            for param in header[opening + 1:closing].split(','):
                split = param.strip().split(' ')
                if len(split) == 2:
                    var_type, var_name = split
                    column = header.find(var_name, cursor)
                    self._add_variable(var_type, var_name, self._location(number, column, var_name), True)
                cursor += len(param) + 1

        rest = header[closing + 1:] if closing >= 0 else ""
        opening = rest.find('(')
        closing = rest.find(')')
        if 0 <= opening < closing - 1:
            self.current.returns = [item.strip() for item in rest[opening + 1:closing].split(',')]
            self.current.return_match_ids = [data_type_to_match_id(item) for item in self.current.returns]

    def _parse_line(self, line: str, number: int, offset: int) -> None:
        words = get_words(line.split('//')[0], LOCAL_VAR_WORD_REGEX)
        for i, word in enumerate(words):
            if not word.value.startswith('$'):
                continue
            location = self._location(number, word.start + offset, word.value)
            if i > 0 and words[i - 1].value.startswith('def_'):
                self._add_variable(words[i - 1].value[4:], word.value, location)
            else:
                self._add_reference(word.value, location)

    def _location(self, number: int, column: int, name: str) -> Location:
        return Location.at(self.file, number, column, len(name))

    def _add_variable(self, var_type: str, name: str, location: Location, parameter: bool = False) -> None:
        if self.current is None:
            return
        self.current.variables[name] = Variable(
            type=var_type,
            match_type_id=data_type_to_match_id(var_type),
            parameter=parameter,
            declaration=location,
        )
        self._add_reference(name, location)

    def _add_reference(self, name: str, location: Location) -> None:
        if self.current is not None and name in self.current.variables:
            self.current.variables[name].references.append(location)
