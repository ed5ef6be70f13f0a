"""
CLI -- Command interface

Indexes a workspace and answers one query per invocation. The index is
rebuilt on every run; nothing is persisted unless --dump or --keys asks
for it.

    runedex index --dump cache.json
    runedex lookup my_proc PROC
    runedex match scripts/a.rs2 12 8
    runedex references scripts/a.rs2 12 8
    runedex config editor.debounce_seconds 0.2
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import ConfigManager
from .services.indexer import WorkspaceIndexer
from .services.queries import QueryService

logger = logging.getLogger(__name__)


class RunedexCLI:
    """Command handlers, one method per sub command."""

    def __init__(self, project_dir: Path, log_level: Optional[str] = None):
        self.project_dir = Path(project_dir).resolve()
        self.config_manager = ConfigManager(self.project_dir)
        self.config = self.config_manager.load()
        logging.basicConfig(
            level=(log_level or self.config.logging.level).upper(),
            format="%(levelname)s %(name)s: %(message)s",
        )
        self._indexer: Optional[WorkspaceIndexer] = None

    @property
    def indexer(self) -> WorkspaceIndexer:
        if self._indexer is None:
            self._indexer = WorkspaceIndexer(self.project_dir, config=self.config)
        return self._indexer

    @property
    def queries(self) -> QueryService:
        return QueryService(self.indexer.index, self.project_dir)

    def _build(self) -> int:
        count = self.indexer.rebuild_all()
        self.indexer.flush()
        return count

    def _document(self, file: str):
        path = Path(self.indexer.file_key(file))
        try:
            text = path.read_text(encoding=self.config.index.encoding)
        except (OSError, UnicodeDecodeError) as e:
            print(f"Error: cannot read {file}: {e}")
            return None, None
        self.indexer.set_active_file(path, text)
        self.indexer.flush()
        return path, text

    # =========================================================================
    # Commands
    # =========================================================================

    def index(self, dump: Optional[str] = None, keys: Optional[str] = None) -> int:
        count = self._build()
        print(f"Indexed {count} files, {len(self.indexer.index.symbols)} identifiers")
        if dump:
            path = self.queries.write_snapshot(dump)
            print(f"Cache written to {path}")
        if keys:
            path = Path(keys)
            path.write_text(json.dumps(self.queries.cache_keys(), indent=2))
            print(f"Cache keys written to {path}")
        return 0

    def lookup(self, name: str, category: str) -> int:
        self._build()
        identifier = self.queries.lookup_identifier(name, category.upper())
        if identifier is None:
            print(f"No {category.upper()} named {name}")
            return 1
        print(json.dumps(identifier.to_dict(), indent=2))
        return 0

    def match(self, file: str, line: int, column: int) -> int:
        self._build()
        path, text = self._document(file)
        if path is None:
            return 1
        result = self.queries.match_word_at_position(text, line, path, column)
        if result is None:
            print("No match")
            return 1
        kind = "declaration" if result.match.declaration else "reference"
        print(f"{result.word}: {result.match.id} ({kind})")
        identifier = self.queries.lookup_identifier(result.word, result.match)
        if identifier is not None and identifier.declaration is not None:
            start = identifier.declaration.range.start
            print(f"  declared at {identifier.declaration.file}:{start.line}:{start.character}")
        return 0

    def references(self, file: str, line: int, column: int) -> int:
        self._build()
        path, text = self._document(file)
        if path is None:
            return 1
        locations = self.queries.find_references(text, line, path, column)
        if not locations:
            print("No references")
            return 1
        for location in locations:
            start = location.range.start
            print(f"{location.file}:{start.line}:{start.character}")
        return 0

    def config_command(self, key: Optional[str] = None, value: Optional[str] = None, user: bool = False) -> int:
        if key is None:
            print(self.config_manager.display())
            return 0
        if value is None:
            current = self.config_manager.get(key)
            if current is None:
                print(f"Unknown setting: {key}")
                return 1
            print(current)
            return 0
        error = self.config_manager.set(key, value, scope="user" if user else "project")
        if error:
            print(f"Error: {error}")
            return 1
        print(f"Set {key} = {value}")
        return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="runedex",
        description="runedex -- RuneScript workspace symbol index",
    )
    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("RUNEDEX_PROJECT_PATH", "."),
        help='Workspace root (default: RUNEDEX_PROJECT_PATH or current)'
    )
    parser.add_argument('--log-level', help='Logging level (default: from config)')
    parser.add_argument('--version', '-V', action='version', version=f'runedex {__version__}')

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    p = subparsers.add_parser('index', help='Index the workspace')
    p.add_argument('--dump', metavar='FILE', help='Write the identifier cache as JSON')
    p.add_argument('--keys', metavar='FILE', help='Write the sorted cache keys as JSON')

    p = subparsers.add_parser('lookup', help='Show one identifier')
    p.add_argument('name')
    p.add_argument('category', help='Match type id, e.g. PROC or OBJ')

    for name, help_text in (('match', 'Classify the word at a position'),
                            ('references', 'List references of the word at a position')):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument('file')
        p.add_argument('line', type=int, help='Zero-based line')
        p.add_argument('column', type=int, help='Zero-based column')

    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('key', nargs='?', help='Dotted key, e.g. editor.debounce_seconds')
    p.add_argument('value', nargs='?')
    p.add_argument('--user', action='store_true', help='Apply to user config instead of project')

    return parser


def main(argv=None) -> int:
    """Main entry point for the runedex CLI."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    cli = RunedexCLI(Path(args.project), args.log_level)
    try:
        if args.command == 'index':
            return cli.index(args.dump, args.keys)
        if args.command == 'lookup':
            return cli.lookup(args.name, args.category)
        if args.command == 'match':
            return cli.match(args.file, args.line, args.column)
        if args.command == 'references':
            return cli.references(args.file, args.line, args.column)
        if args.command == 'config':
            return cli.config_command(args.key, args.value, args.user)
    finally:
        if cli._indexer is not None:
            cli._indexer.close()
    return 0


if __name__ == '__main__':
    sys.exit(main())
