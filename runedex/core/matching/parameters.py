"""
Arguments inside parentheses in rs2 files.

The line is scanned backward from the cursor to the innermost unmatched
'(' while counting commas. String literals, `<...>` interpolations and
nested groups are skipped. The word before the '(' names the call:

    return(...)           signature of the enclosing script (return cache)
    queue(name, delay, ...)       tail shaped by the named queue
    longqueue(name, delay, type, ...)
    @label(...) / ~proc(...)      label or proc signature
    anything else                 engine command signature
"""

from typing import List, Optional, Tuple

from ..matchtypes import COMMAND, LABEL, PROC, QUEUE, MatchType, reference, registry
from ..tokenizer import word_at_index
from ..types import MatchContext, Word

# Fixed leading arguments before the queued script's own parameters
QUEUE_OFFSETS = {'queue': 2, 'longqueue': 3}


def parameters_rule(ctx: MatchContext, index) -> Optional[MatchType]:
    if ctx.file_type != 'rs2':
        return None
    return params_match(ctx, index)


def params_match(ctx: MatchContext, index) -> Optional[MatchType]:
    """Match type of the argument under the cursor, from the callee's signature."""
    name_word, param_index = scan_call_site(ctx.line_text, ctx.cursor, ctx.words)
    if name_word is None or param_index is None:
        return None
    name = name_word.value
    prev = ctx.line_text[name_word.start - 1] if name_word.start > 0 else ""

    if name == 'return':
        key = index.return_lines.get(ctx.line_number, ctx.file)
        script = index.symbols.get_by_key(key) if key else None
        if script and script.signature and len(script.signature.returns) > param_index:
            resolved = registry.get(script.signature.returns[param_index])
            return reference(resolved) if resolved else None
        return None

    offset = 0
    if name in QUEUE_OFFSETS:
        offset = QUEUE_OFFSETS[name]
        if param_index < offset:
            identifier = index.symbols.get(name, COMMAND)
            offset = 0
        else:
            queue_name = word_at_index(ctx.words, name_word.end + 2)
            identifier = index.symbols.get(queue_name.value, QUEUE) if queue_name else None
    elif prev == '@':
        identifier = index.symbols.get(name, LABEL)
    elif prev == '~':
        identifier = index.symbols.get(name, PROC)
    else:
        identifier = index.symbols.get(name, COMMAND)
    if identifier is None:
        return None

    position = param_index - offset
    if identifier.signature and len(identifier.signature.params) > position:
        resolved = registry.get(identifier.signature.params[position].match_type_id)
        return reference(resolved) if resolved else None
    return None


def scan_call_site(line_text: str, cursor: int, words: List[Word]) -> Tuple[Optional[Word], Optional[int]]:
    """
    Find the call enclosing `cursor`.

    Returns:
        (word naming the call, argument index), or (None, None) outside any call

    Examples:
        `foo("a,b", 1)` with the cursor after `1` gives (foo, 1)
    """
    text, in_string = _initial_state(line_text, cursor)
    in_interpolation = 0
    nested = 0
    param_index = 0

    for i in range(min(cursor, len(text)) - 1, -1, -1):
        char = text[i]
        escaped = i > 0 and text[i - 1] == '\\'

        # <...> interpolation, possibly nested
        if char == '>':
            in_interpolation += 1
        if in_interpolation > 0:
            if char == '<':
                in_interpolation -= 1
            continue

        if in_string:
            if char == '"' and not escaped:
                in_string = False
            continue
        if char == '"' and not escaped:
            in_string = True
            continue

        if char == ')':
            nested += 1
        if nested > 0:
            if char == '(':
                nested -= 1
            continue

        if char == ',':
            param_index += 1
        elif char == '<':
            # Left an interpolation without finding its call
            return None, None
        elif char == '(':
            return word_at_index(words, i - 1), param_index
    return None, None


def _initial_state(line_text: str, cursor: int) -> Tuple[str, bool]:
    """
    Scan forward from the cursor: an odd number of quotes means the cursor is
    inside a string, and an unmatched '>' means it is inside an
    interpolation, in which case the text is cut at that '>'.
    """
    quotes = 0
    depth = 0
    for i in range(cursor, len(line_text)):
        char = line_text[i]
        if char == '"' and i > 0 and line_text[i - 1] != '\\':
            quotes += 1
        if char == '>':
            if depth == 0:
                return line_text[:i], quotes % 2 == 1
            depth -= 1
        if char == '<':
            depth += 1
    return line_text, quotes % 2 == 1
