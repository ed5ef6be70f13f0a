"""
Services — the indexer (file I/O and events) and the editor-facing queries.
"""

from .indexer import FileEvent, FileEventKind, WorkspaceIndexer
from .queries import QueryService, RenameError, RenamePlan, TextEdit

__all__ = [
    'FileEvent', 'FileEventKind', 'WorkspaceIndexer',
    'QueryService', 'RenameError', 'RenamePlan', 'TextEdit',
]
