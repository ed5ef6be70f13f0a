"""
Match types — static descriptors for every category of identifier.

A MatchType controls how identifiers of a category are declared, cached,
renamed and displayed. New categories are added here as config, the
matchers and caches never special-case a category they do not own.

Usage:
    from runedex.core.matchtypes import PROC, declaration, registry

    match = declaration(PROC)
    registry.get('PROC') is PROC
    registry.data_type_to_match_id('namedobj')   # 'OBJ'
"""

from dataclasses import dataclass, field, replace
from typing import Dict, Optional, Set, Any

from .types import PostProcessor
from . import postprocessors as pp


# Hover display items
TITLE = "title"
INFO = "info"
VALUE = "value"
SIGNATURE = "signature"
CODEBLOCK = "codeblock"


@dataclass(frozen=True)
class HoverConfig:
    """
    How the hover display for a match type is built.

    Attributes:
        declaration_items: Items shown when hovering a declaration
        reference_items: Items shown when hovering a reference
        language: Language of code blocks (syntax highlighting)
        block_skip_lines: Lines skipped before the code block starts
        config_inclusions: Only config lines with these prefixes go in the block
    """
    declaration_items: tuple = ()
    reference_items: tuple = ()
    language: str = "runescript"
    block_skip_lines: int = 1
    config_inclusions: Optional[tuple] = None

    def all_items(self) -> Set[str]:
        return set(self.declaration_items) | set(self.reference_items)


@dataclass(frozen=True)
class MatchType:
    """
    Descriptor for one category of identifier.

    Attributes:
        id: Unique upper-case id (e.g. "LOC", "LOCAL_VAR")
        types: Data type keywords that resolve to this match type
        file_types: File extensions where this match type is declared
        cache: Whether identifiers of this type are cached
        reference_only: Never has a real declaration (names a file on disk)
        allow_rename: Whether renaming is permitted
        rename_file: Whether renaming also renames the declaring file
        hover_only: Only exists for hover text, never cached
        noop: Terminates matching without producing anything usable
        hover_config: Hover display configuration
        post_processor: Hook run once after an identifier is built
        extra_data: Static data copied onto every identifier
        declaration: Set per match by declaration() / reference()
    """
    id: str
    types: tuple = ()
    file_types: tuple = ()
    cache: bool = False
    reference_only: bool = False
    allow_rename: bool = False
    rename_file: bool = False
    hover_only: bool = False
    noop: bool = False
    hover_config: Optional[HoverConfig] = None
    post_processor: Optional[PostProcessor] = field(default=None, compare=False)
    extra_data: Optional[Dict[str, Any]] = field(default=None, compare=False)
    declaration: bool = False

    @property
    def language(self) -> str:
        return self.hover_config.language if self.hover_config else "runescript"


def declaration(match: MatchType, **extra_data) -> MatchType:
    """Copy of `match` flagged as a declaration."""
    if extra_data:
        return replace(match, declaration=True, extra_data=extra_data)
    return replace(match, declaration=True)


def reference(match: MatchType, **extra_data) -> MatchType:
    """Copy of `match` flagged as a reference."""
    if extra_data:
        return replace(match, declaration=False, extra_data=extra_data)
    return replace(match, declaration=False)


# =============================================================================
# Hover configs
# =============================================================================

_SCRIPT_HOVER = HoverConfig(
    declaration_items=(TITLE, INFO, SIGNATURE),
    reference_items=(TITLE, INFO, SIGNATURE),
)


def _config_hover(language: str, inclusions: Optional[tuple] = None, skip: int = 1) -> HoverConfig:
    return HoverConfig(
        declaration_items=(TITLE, INFO),
        reference_items=(TITLE, INFO, CODEBLOCK),
        language=language,
        block_skip_lines=skip,
        config_inclusions=inclusions,
    )


# =============================================================================
# Match types
# =============================================================================

UNKNOWN = MatchType(id="UNKNOWN", noop=True)
LOCAL_VAR = MatchType(id="LOCAL_VAR", allow_rename=True)
GLOBAL_VAR = MatchType(
    id="GLOBAL_VAR", types=("var", "varp", "varbit", "varn", "vars"),
    file_types=("varp", "varbit", "varn", "vars"), cache=True, allow_rename=True,
    hover_config=_config_hover("varpconfig", ("type=",)),
)
CONSTANT = MatchType(
    id="CONSTANT", types=("constant",), file_types=("constant",), cache=True, allow_rename=True,
    hover_config=HoverConfig(
        declaration_items=(TITLE, INFO), reference_items=(TITLE, INFO, CODEBLOCK),
        language="constants", block_skip_lines=0,
    ),
)
LABEL = MatchType(id="LABEL", types=("label",), file_types=("rs2",), cache=True,
                  allow_rename=True, hover_config=_SCRIPT_HOVER)
PROC = MatchType(id="PROC", types=("proc",), file_types=("rs2",), cache=True,
                 allow_rename=True, hover_config=_SCRIPT_HOVER)
TIMER = MatchType(id="TIMER", types=("timer",), file_types=("rs2",), cache=True,
                  allow_rename=True, hover_config=_SCRIPT_HOVER)
SOFTTIMER = MatchType(id="SOFTTIMER", types=("softtimer",), file_types=("rs2",), cache=True,
                      allow_rename=True, hover_config=_SCRIPT_HOVER)
QUEUE = MatchType(id="QUEUE", types=("queue", "weakqueue"), file_types=("rs2",), cache=True,
                  allow_rename=True, hover_config=_SCRIPT_HOVER)
WALKTRIGGER = MatchType(id="WALKTRIGGER", types=("walktrigger",), file_types=("rs2",), cache=True,
                        allow_rename=True, hover_config=_SCRIPT_HOVER)
COMMAND = MatchType(id="COMMAND", types=("command",), file_types=("rs2",), cache=True,
                    hover_config=_SCRIPT_HOVER)
TRIGGER = MatchType(
    id="TRIGGER", hover_only=True,
    hover_config=HoverConfig(reference_items=(TITLE, INFO)),
    post_processor=pp.trigger_post_processor,
)
CATEGORY = MatchType(
    id="CATEGORY", types=("category",), cache=True, reference_only=True, allow_rename=True,
    hover_config=HoverConfig(reference_items=(TITLE, VALUE)),
    post_processor=pp.category_post_processor,
)
SEQ = MatchType(id="SEQ", types=("seq",), file_types=("seq",), cache=True, allow_rename=True,
                hover_config=_config_hover("seqconfig"))
SPOTANIM = MatchType(id="SPOTANIM", types=("spotanim",), file_types=("spotanim",), cache=True,
                     allow_rename=True, hover_config=_config_hover("spotanimconfig"))
HUNT = MatchType(id="HUNT", types=("hunt",), file_types=("hunt",), cache=True, allow_rename=True,
                 hover_config=_config_hover("huntconfig"))
LOC = MatchType(id="LOC", types=("loc",), file_types=("loc",), cache=True, allow_rename=True,
                hover_config=_config_hover("locconfig", ("name=", "desc=", "category=")))
NPC = MatchType(id="NPC", types=("npc",), file_types=("npc",), cache=True, allow_rename=True,
                hover_config=_config_hover("npcconfig", ("name=", "desc=", "category=")))
OBJ = MatchType(id="OBJ", types=("obj", "namedobj"), file_types=("obj",), cache=True,
                allow_rename=True,
                hover_config=_config_hover("objconfig", ("name=", "desc=", "category=")))
INV = MatchType(id="INV", types=("inv",), file_types=("inv",), cache=True, allow_rename=True,
                hover_config=_config_hover("invconfig", ("scope=", "size=")))
ENUM = MatchType(
    id="ENUM", types=("enum",), file_types=("enum",), cache=True, allow_rename=True,
    hover_config=HoverConfig(
        declaration_items=(TITLE, INFO), reference_items=(TITLE, INFO, CODEBLOCK),
        language="enumconfig", config_inclusions=("inputtype=", "outputtype="),
    ),
    post_processor=pp.enum_post_processor,
)
PARAM = MatchType(
    id="PARAM", types=("param",), file_types=("param",), cache=True, allow_rename=True,
    hover_config=_config_hover("paramconfig", ("type=",)),
    post_processor=pp.data_type_post_processor,
)
STRUCT = MatchType(id="STRUCT", types=("struct",), file_types=("struct",), cache=True,
                   allow_rename=True, hover_config=_config_hover("structconfig"))
DBROW = MatchType(
    id="DBROW", types=("dbrow",), file_types=("dbrow",), cache=True, allow_rename=True,
    hover_config=HoverConfig(
        declaration_items=(TITLE, INFO, CODEBLOCK), reference_items=(TITLE, INFO, CODEBLOCK),
        language="dbrowconfig", config_inclusions=("table=",),
    ),
    post_processor=pp.row_post_processor,
)
DBTABLE = MatchType(id="DBTABLE", types=("dbtable",), file_types=("dbtable",), cache=True,
                    allow_rename=True, hover_config=_config_hover("dbtableconfig"))
DBCOLUMN = MatchType(
    id="DBCOLUMN", types=("dbcolumn",), file_types=("dbtable",), cache=True, allow_rename=True,
    hover_config=HoverConfig(
        declaration_items=(TITLE, INFO, CODEBLOCK), reference_items=(TITLE, INFO, CODEBLOCK),
        language="dbtableconfig", block_skip_lines=0, config_inclusions=("column=",),
    ),
    post_processor=pp.column_post_processor,
)
IDK = MatchType(id="IDK", types=("idk", "idkit"), file_types=("idk",), cache=True,
                allow_rename=True, hover_config=_config_hover("idkconfig"))
MESANIM = MatchType(id="MESANIM", types=("mesanim",), file_types=("mesanim",), cache=True,
                    allow_rename=True, hover_config=_config_hover("mesanimconfig"))
INTERFACE = MatchType(
    id="INTERFACE", types=("interface",), file_types=("if",), cache=True, reference_only=True,
    allow_rename=True, rename_file=True,
    hover_config=HoverConfig(reference_items=(TITLE, INFO)),
    post_processor=pp.file_name_post_processor,
)
COMPONENT = MatchType(
    id="COMPONENT", types=("component",), file_types=("if",), cache=True, allow_rename=True,
    hover_config=HoverConfig(declaration_items=(TITLE, INFO), reference_items=(TITLE, INFO),
                             language="interface"),
    post_processor=pp.component_post_processor,
)
SYNTH = MatchType(
    id="SYNTH", types=("synth",), file_types=("synth",), cache=True, reference_only=True,
    allow_rename=True, rename_file=True,
    hover_config=HoverConfig(reference_items=(TITLE, INFO)),
    post_processor=pp.file_name_post_processor,
)
MODEL = MatchType(
    id="MODEL", types=("ob2", "model"), file_types=("ob2",), cache=True, reference_only=True,
    allow_rename=True, rename_file=True,
    hover_config=HoverConfig(reference_items=(TITLE, INFO)),
    post_processor=pp.file_name_post_processor,
)
MIDI = MatchType(
    id="MIDI", types=("midi",), file_types=("mid",), cache=True, reference_only=True,
    hover_config=HoverConfig(reference_items=(TITLE, INFO)),
    post_processor=pp.file_name_post_processor,
)
STAT = MatchType(id="STAT", types=("stat", "npc_stat"), hover_only=True)
CONFIG_KEY = MatchType(
    id="CONFIG_KEY", hover_only=True,
    hover_config=HoverConfig(reference_items=(TITLE, INFO)),
    post_processor=pp.config_key_post_processor,
)
COORDINATES = MatchType(
    id="COORDINATES", types=("coord",), hover_only=True,
    hover_config=HoverConfig(reference_items=(TITLE, VALUE)),
    post_processor=pp.coord_post_processor,
)
COLOR = MatchType(id="COLOR", noop=True)
NUMBER = MatchType(id="NUMBER", noop=True)


# =============================================================================
# Registry
# =============================================================================

class MatchTypeRegistry:
    """
    Registry of match types.

    Maps ids to match types and data type keywords to match type ids.
    """

    def __init__(self):
        self._types: Dict[str, MatchType] = {}   # id -> match type
        self._keywords: Dict[str, str] = {}      # data type keyword -> id

    def register(self, match: MatchType) -> None:
        """
        Register a match type.

        Raises:
            ValueError: If a keyword is already mapped to a different match type
        """
        for keyword in match.types:
            existing = self._keywords.get(keyword)
            if existing and existing != match.id:
                raise ValueError(
                    f"Type keyword {keyword} already registered to {existing}, "
                    f"cannot register to {match.id}"
                )
        self._types[match.id] = match
        for keyword in match.types:
            self._keywords[keyword] = match.id

    def get(self, match_id: Optional[str]) -> Optional[MatchType]:
        return self._types.get(match_id) if match_id else None

    def data_type_to_match_id(self, keyword: str) -> str:
        """Match type id for a data type keyword, UNKNOWN if unmapped."""
        return self._keywords.get(keyword, UNKNOWN.id)

    def resolve(self, keyword: str) -> MatchType:
        """Match type for a data type keyword, UNKNOWN if unmapped."""
        return self._types.get(self.data_type_to_match_id(keyword), UNKNOWN)

    def declaring_file_types(self) -> Set[str]:
        """File types in which some match type can be declared."""
        file_types = set()
        for match in self._types.values():
            if not match.reference_only:
                file_types.update(match.file_types)
        return file_types

    def __contains__(self, match_id: str) -> bool:
        return match_id in self._types

    def __len__(self) -> int:
        return len(self._types)


ALL_MATCH_TYPES = (
    UNKNOWN, LOCAL_VAR, GLOBAL_VAR, CONSTANT, LABEL, PROC, TIMER, SOFTTIMER, QUEUE, WALKTRIGGER,
    COMMAND, TRIGGER, CATEGORY, SEQ, SPOTANIM, HUNT, LOC, NPC, OBJ, INV, ENUM, PARAM, STRUCT,
    DBROW, DBTABLE, DBCOLUMN, IDK, MESANIM, INTERFACE, COMPONENT, SYNTH, MODEL, MIDI, STAT,
    CONFIG_KEY, COORDINATES, COLOR, NUMBER,
)

registry = MatchTypeRegistry()
for _match in ALL_MATCH_TYPES:
    registry.register(_match)


def data_type_to_match_id(keyword: str) -> str:
    return registry.data_type_to_match_id(keyword)
