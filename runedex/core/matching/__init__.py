"""
Matching — classify words with a fixed, priority ordered rule chain

Each rule is a plain function `(context, index) -> MatchType | None`. Rules
run in ascending priority and the first one returning a match type wins.
A returned UNKNOWN still stops the chain: the word is known to be nothing.

After a hit, annotate() rewrites the word where its category needs it
(qualifying components and db columns, stripping `cert_`, `_` and loc
model suffixes) and records what was stripped so a rename can restore it.

Usage:
    from runedex.core.matching import MatcherChain

    chain = MatcherChain(index)
    result = chain.match_word("~my_proc(1)", 0, "a.rs2", 2)
    result.match.id      # "PROC"
"""

from typing import Callable, List, NamedTuple, Optional

from ..matchtypes import CATEGORY, COMPONENT, DBCOLUMN, DBROW, DBTABLE, MODEL, OBJ, MatchType
from ..regex import LOC_MODEL_REGEX
from ..tokenizer import base_context, word_at_index, word_context
from ..types import Annotations, MatchContext, MatchResult
from .command import command_rule
from .config import config_rule
from .literal import literal_rule
from .local_var import local_var_rule
from .map import map_rule
from .pack import pack_id, pack_rule
from .parameters import parameters_rule
from .prev_char import prev_char_rule
from .switch_case import switch_case_rule
from .trigger import trigger_rule


class Rule(NamedTuple):
    priority: int
    name: str
    fn: Callable[[MatchContext, object], Optional[MatchType]]


RULES = tuple(sorted((
    Rule(1000, "pack", pack_rule),
    Rule(2000, "literal", literal_rule),
    Rule(3000, "command", command_rule),
    Rule(4000, "local_var", local_var_rule),
    Rule(5000, "prev_char", prev_char_rule),
    Rule(6000, "trigger", trigger_rule),
    Rule(7000, "config", config_rule),
    Rule(7500, "map", map_rule),
    Rule(8000, "switch_case", switch_case_rule),
    Rule(9000, "parameters", parameters_rule),
), key=lambda rule: rule.priority))


class MatcherChain:
    """Runs the rules against the words of a line, reading state from `index`."""

    def __init__(self, index, rules=RULES):
        self.index = index
        self.rules = rules

    def match_word(self, line_text: str, line_number: int, file, column: int) -> Optional[MatchResult]:
        """Classify the word under `column`. None when nothing matched."""
        if not line_text or not file or column is None:
            return None
        base = base_context(line_text, line_number, str(file))
        word = word_at_index(base.words, column)
        if word is None:
            return None
        return self.match(word_context(base, word, column))

    def match_words(self, line_text: str, line_number: int, file) -> List[Optional[MatchResult]]:
        """Classify every word of a line, one entry per word."""
        if not line_text or not file:
            return []
        base = base_context(line_text, line_number, str(file))
        return [self.match(word_context(base, word, word.start)) for word in base.words]

    def match(self, ctx: MatchContext) -> Optional[MatchResult]:
        if ctx.word.value == 'null':
            return None
        for rule in self.rules:
            found = rule.fn(ctx, self.index)
            if found is not None:
                annotations = annotate(found, ctx, self.index)
                if annotations is None:
                    return None
                return MatchResult(found, annotations.word, ctx, annotations)
        return None


def annotate(match: MatchType, ctx: MatchContext, index) -> Optional[Annotations]:
    """
    Final word value for a match.

    Returns:
        Annotations, or None when a db column has no enclosing table or row
    """
    word = ctx.word.value
    start = ctx.word.start
    modified = False
    prefix = ""
    suffix = ""
    cert = False

    if match.id == COMPONENT.id and ':' not in word:
        word = f"{ctx.file_name}:{word}"
        modified = True

    if match.id == DBCOLUMN.id and ':' not in word:
        required = DBTABLE.id if ctx.file_type == 'dbtable' else DBROW.id
        parent = index.symbols.get_parent_declaration(ctx.file, ctx.line_number, required)
        if parent is None:
            return None
        if ctx.file_type == 'dbrow':
            table = (parent.extra_data or {}).get('table')
        else:
            table = parent.name
        if not table:
            return None
        word = f"{table}:{word}"
        modified = True

    if match.id == OBJ.id and word.startswith('cert_'):
        word = word[5:]
        start += 5
        prefix = 'cert_'
        cert = True
        modified = True

    if match.id == CATEGORY.id and word.startswith('_'):
        word = word[1:]
        start += 1
        prefix = '_'
        modified = True

    if match.id == MODEL.id and LOC_MODEL_REGEX.match(word):
        cut = word.rfind('_')
        suffix = word[cut:]
        word = word[:cut]
        modified = True

    return Annotations(
        word=word,
        start=start,
        modified_word=modified,
        original_prefix=prefix,
        original_suffix=suffix,
        cert=cert,
        pack_id=pack_id(ctx, match),
    )


__all__ = ['MatcherChain', 'Rule', 'RULES', 'annotate']
