"""
Command-line interface for xtag.

Provides commands for:
- Showing, adding, removing and clearing the tags of files
- Renaming tags with regular expressions
- Searching directory trees with filter expressions
- Checking filter expressions and managing bookmarks
"""

import argparse
import logging
import sys
from typing import List, Optional

from .config import load_config
from .errors import XTagError
from .models.config import XTagConfig
from .models.predicate import print_filter
from .search import BookmarkResolver, decode_tags, encode_tags, rename_tags
from .tools import TagWalker, delete_tags, get_tags, set_tags


logger = logging.getLogger(__name__)


class XTagCLI:
    """Command-line interface for tagging and searching files."""

    def __init__(self, config: Optional[XTagConfig] = None):
        """
        Initialize the CLI.

        Args:
            config: Configuration to use instead of loading one from disk
        """
        self.config = config

    def run(self, args: Optional[List[str]] = None) -> int:
        """
        Run the CLI with the given arguments.

        Args:
            args: Command line arguments. If None, uses sys.argv.

        Returns:
            Exit code (0 for success, non-zero for failure)
        """
        parser = self._create_parser()
        parsed_args = parser.parse_args(args)

        logging.basicConfig(
            level=logging.DEBUG if parsed_args.verbose else logging.INFO,
            format="%(levelname)s: %(message)s"
        )

        if not hasattr(parsed_args, "func"):
            parser.print_help()
            return 1

        try:
            if self.config is None:
                result = load_config(parsed_args.config)
                for warning in result.warnings:
                    logger.debug(warning)
                self.config = result.config
            return parsed_args.func(parsed_args)
        except XTagError as e:
            logger.error(str(e))
            return 1
        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 1

    def _create_parser(self) -> argparse.ArgumentParser:
        """Create the argument parser with all subcommands."""
        parser = argparse.ArgumentParser(
            prog="xtag",
            description="Tag files with key/value pairs and search them with filter expressions",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  %(prog)s add "project=xtag,draft" notes.txt     # Add tags to a file
  %(prog)s show notes.txt                        # Show the tags of a file
  %(prog)s search "project == xtag AND NOT draft" ~/docs
  %(prog)s rename "proj(.*)" "project$1" notes.txt
  %(prog)s bookmark drafts "draft OR status == wip"
  %(prog)s search "{drafts}" ~/docs               # Search with a bookmark
            """
        )
        parser.add_argument("--config", help="Path to configuration file")
        parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

        subparsers = parser.add_subparsers(title="commands")

        show = subparsers.add_parser("show", help="Show the tags of files")
        show.add_argument("paths", nargs="+", help="Files to show")
        show.set_defaults(func=self._cmd_show)

        add = subparsers.add_parser("add", help="Add or update tags on files")
        add.add_argument("tags", help="Comma separated tag list, e.g. 'a=1,b'")
        add.add_argument("paths", nargs="+", help="Files to tag")
        add.set_defaults(func=self._cmd_add)

        remove = subparsers.add_parser("remove", help="Remove tags from files")
        remove.add_argument("names", help="Comma separated tag names")
        remove.add_argument("paths", nargs="+", help="Files to untag")
        remove.set_defaults(func=self._cmd_remove)

        clear = subparsers.add_parser("clear", help="Remove all tags from files")
        clear.add_argument("paths", nargs="+", help="Files to clear")
        clear.set_defaults(func=self._cmd_clear)

        rename = subparsers.add_parser("rename", help="Rename tags matching a pattern")
        rename.add_argument("find", help="Pattern matching whole tag names")
        rename.add_argument("replace", help="Replacement, $1 or $name refer to groups")
        rename.add_argument("paths", nargs="+", help="Files to update")
        rename.set_defaults(func=self._cmd_rename)

        search = subparsers.add_parser("search", help="Find files whose tags match a filter")
        search.add_argument("term", help="Filter expression")
        search.add_argument("roots", nargs="*", default=["."], help="Files or directories to search")
        search.add_argument("--show-tags", action="store_true", help="Print tags next to each path")
        search.set_defaults(func=self._cmd_search)

        check = subparsers.add_parser("check", help="Print the canonical form of a filter")
        check.add_argument("term", help="Filter expression")
        check.set_defaults(func=self._cmd_check)

        bookmark = subparsers.add_parser("bookmark", help="Show or save a bookmarked filter")
        bookmark.add_argument("name", help="Bookmark name")
        bookmark.add_argument("term", nargs="?", help="Filter expression to save")
        bookmark.set_defaults(func=self._cmd_bookmark)

        return parser

    @property
    def bookmarks(self) -> BookmarkResolver:
        return BookmarkResolver(self.config.bookmark_dir)

    def _cmd_show(self, args: argparse.Namespace) -> int:
        for path in args.paths:
            tags = get_tags(path, self.config.xattr_name)
            print(f"{path}: {encode_tags(dict(sorted(tags.items())))}")
        return 0

    def _cmd_add(self, args: argparse.Namespace) -> int:
        new_tags = decode_tags(args.tags)
        for path in args.paths:
            tags = get_tags(path, self.config.xattr_name)
            tags.update(new_tags)
            set_tags(path, tags, self.config.xattr_name)
            logger.info(f"Tagged {path}")
        return 0

    def _cmd_remove(self, args: argparse.Namespace) -> int:
        names = set(decode_tags(args.names))
        for path in args.paths:
            tags = get_tags(path, self.config.xattr_name)
            set_tags(path, {k: v for k, v in tags.items() if k not in names}, self.config.xattr_name)
        return 0

    def _cmd_clear(self, args: argparse.Namespace) -> int:
        for path in args.paths:
            delete_tags(path, self.config.xattr_name)
        return 0

    def _cmd_rename(self, args: argparse.Namespace) -> int:
        for path in args.paths:
            tags = get_tags(path, self.config.xattr_name)
            set_tags(path, rename_tags(args.find, args.replace, tags), self.config.xattr_name)
        return 0

    def _cmd_search(self, args: argparse.Namespace) -> int:
        predicate = self.bookmarks.compile(args.term)
        walker = TagWalker(self.config)
        for tagged_file in walker.walk(args.roots, predicate):
            if args.show_tags:
                print(f"{tagged_file.path}: {encode_tags(tagged_file.tags)}")
            else:
                print(tagged_file.path)

        stats = walker.get_stats()
        logger.debug(f"Scanned {stats['files_scanned']} files, {stats['files_matched']} matched")
        return 0

    def _cmd_check(self, args: argparse.Namespace) -> int:
        print(print_filter(self.bookmarks.compile(args.term)))
        return 0

    def _cmd_bookmark(self, args: argparse.Namespace) -> int:
        if args.term is None:
            print(self.bookmarks.resolve(args.name))
        else:
            self.bookmarks.save(args.name, args.term)
        return 0


def main(args: Optional[List[str]] = None) -> int:
    """Entry point of the xtag command."""
    return XTagCLI().run(args)


if __name__ == "__main__":
    sys.exit(main())
