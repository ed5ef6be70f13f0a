"""
Core — data layer of the index

- types: positions, words, contexts, identifiers
- matchtypes: the category registry
- tokenizer: words and per-word contexts
- symbol_cache / line_cache / script_cache: the caches
- index: WorkspaceIndex, the owner of all caches
- matching: the rule chain
"""

from .index import WorkspaceIndex
from .matchtypes import MatchType, registry
from .types import Identifier, Location, MatchResult

__all__ = ['WorkspaceIndex', 'MatchType', 'registry', 'Identifier', 'Location', 'MatchResult']
