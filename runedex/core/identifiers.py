"""
Identifier factory and cache key helpers.

An identifier is built once, either from its declaration (with the file
text around it, to pick up info comments, signatures and code blocks) or
as a bare placeholder from its first reference.
"""

from pathlib import Path
from typing import List, Optional

from .matchtypes import CODEBLOCK, SIGNATURE, MatchType, data_type_to_match_id
from .regex import END_OF_BLOCK_LINE_REGEX, INFO_MATCHER_REGEX
from .types import (
    FileKey, Identifier, IdentifierKey, IdentifierText, Location, Position, Range,
    Signature, SignatureParam,
)


# =============================================================================
# Keys
# =============================================================================

def resolve_identifier_key(name: str, match: Optional[MatchType]) -> Optional[IdentifierKey]:
    if not name or match is None:
        return None
    return name + match.id


def resolve_file_key(file) -> Optional[FileKey]:
    if not file:
        return None
    return str(Path(file))


def encode_reference(line: int, column: int) -> str:
    return f"{line}|{column}"


def decode_reference(encoded: str, length: int = 0) -> Optional[Range]:
    """Range of an encoded "line|column" reference, `length` characters wide."""
    parts = encoded.split('|')
    if len(parts) != 2:
        return None
    try:
        start = Position(int(parts[0]), int(parts[1]))
    except ValueError:
        return None
    return Range(start, start.translate(length))


def decode_reference_to_location(file: FileKey, encoded: str, length: int = 0) -> Optional[Location]:
    decoded = decode_reference(encoded, length)
    return Location(file, decoded) if decoded else None


# =============================================================================
# Building
# =============================================================================

def build(name: str, match: MatchType, location: Location, text: Optional[IdentifierText] = None) -> Identifier:
    """Build an identifier from its declaration."""
    identifier = Identifier(
        name=name,
        match_id=match.id,
        declaration=location,
        file_type=Path(location.file).suffix.lstrip('.').strip(),
        language=match.language,
    )
    _process(identifier, match, text)
    return identifier


def build_ref(name: str, match: MatchType) -> Identifier:
    """Build a placeholder identifier from its first reference."""
    identifier = Identifier(
        name=name,
        match_id=match.id,
        file_type=match.file_types[0] if match.file_types else "rs2",
        language=match.language,
    )
    if match.reference_only:
        _process(identifier, match)
    return identifier


def _process(identifier: Identifier, match: MatchType, text: Optional[IdentifierText] = None) -> None:
    if match.extra_data:
        identifier.extra_data = dict(identifier.extra_data or {}, **match.extra_data)

    if text is not None:
        _process_info(identifier, text)
        items = match.hover_config.all_items() if match.hover_config else set()
        if SIGNATURE in items:
            identifier.signature = parse_signature(text.lines[text.start] if text.start < len(text.lines) else "")
        if CODEBLOCK in items:
            identifier.block = _code_block(match, text)

    if match.post_processor:
        match.post_processor(identifier)


def _process_info(identifier: Identifier, text: IdentifierText) -> None:
    # The info comment sits on the line above the declaration
    if text.start < 1:
        return
    found = INFO_MATCHER_REGEX.search(text.lines[text.start - 1])
    if found and found.group(2).strip():
        identifier.info = found.group(2).strip()


def _parenthesized(line: str):
    """Text between the first '(' and the following ')', and the rest of the line."""
    opening = line.find('(')
    closing = line.find(')')
    if opening < 0 or closing < 0 or opening + 1 >= closing:
        return None, line[closing + 1:] if closing >= 0 else ""
    return line[opening + 1:closing], line[closing + 1:]


def parse_signature(line: str) -> Optional[Signature]:
    """
    Parse `[proc,name](int $a, obj $b)(int)` into a signature.

    Returns:
        Signature, or None when the line is empty
    """
    if not line:
        return None

    params: List[SignatureParam] = []
    params_part, rest = _parenthesized(line)
    if params_part is not None:
        for param in params_part.split(','):
            split = param.strip().split(' ')
            if len(split) == 2:
                params.append(SignatureParam(split[0], split[1], data_type_to_match_id(split[0])))

    returns: List[str] = []
    returns_text = ""
    returns_part, _ = _parenthesized(rest)
    if returns_part is not None:
        returns_text = returns_part
        returns = [data_type_to_match_id(item.strip()) for item in returns_part.split(',')]

    return Signature(
        params=params,
        returns=returns,
        params_text=', '.join(f"{p.type} {p.name}" for p in params),
        returns_text=returns_text,
    )


def _code_block(match: MatchType, text: IdentifierText) -> str:
    hover = match.hover_config
    lines = text.lines
    start = text.start + hover.block_skip_lines
    inclusions = hover.config_inclusions

    block: List[str] = []
    # A constant is a single line that also reads as the end of a block
    if match.id == 'CONSTANT' and start < len(lines) and lines[start]:
        block.append(lines[start])
    for line in lines[start:]:
        if END_OF_BLOCK_LINE_REGEX.match(line):
            break
        if line.startswith('//'):
            continue
        if inclusions and not any(line.startswith(tag) for tag in inclusions):
            continue
        block.append(line)
    return '\n'.join(block)
