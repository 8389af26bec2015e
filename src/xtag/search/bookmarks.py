"""
Bookmarks: named search terms stored as symbolic links.

A bookmark is a symlink whose target string is the search term itself,
e.g. ``favourites -> rating >= 4 AND NOT archived``. Nothing has to exist
at the target path.
"""

import logging
import os
from pathlib import Path
from typing import Union

from ..errors import BookmarkError
from ..models.predicate import Predicate
from .compiler import compile_filter


logger = logging.getLogger(__name__)


def read_bookmark_term(path: Union[str, Path]) -> str:
    """
    Read the search term stored in a bookmark link.

    Raises:
        BookmarkError: If path is not a readable symlink or its target is
            not valid text
    """
    try:
        term = os.readlink(path)
    except OSError as e:
        raise BookmarkError(f"Cannot read bookmark {path}: {e}") from e
    try:
        # readlink smuggles undecodable bytes through as surrogates
        term.encode('utf-8')
    except UnicodeEncodeError as e:
        raise BookmarkError(f"Bookmark {path} does not contain valid text") from e
    return term


class BookmarkResolver:
    """
    Resolves bookmark names relative to a bookmark directory.

    Instances are callables, so they can be passed directly as the
    resolve_bookmark argument of compile_filter.
    """

    def __init__(self, directory: Union[str, Path]):
        """
        Initialize the resolver.

        Args:
            directory: Directory holding the bookmark links
        """
        self.directory = Path(directory).expanduser()

    def path_for(self, name: str) -> Path:
        """Get the link path of a bookmark."""
        return self.directory / name

    def resolve(self, name: str) -> str:
        """Get the search term text of a bookmark."""
        return read_bookmark_term(self.path_for(name))

    def __call__(self, name: str) -> str:
        return self.resolve(name)

    def compile(self, term: str) -> Predicate:
        """Compile a search term, expanding bookmarks from this directory."""
        return compile_filter(term, resolve_bookmark=self)

    def save(self, name: str, term: str) -> Path:
        """
        Create or replace a bookmark.

        The term is compiled first so that broken terms are never stored.

        Returns:
            Path of the bookmark link

        Raises:
            BookmarkError: If the link cannot be written
        """
        self.compile(term)
        link = self.path_for(name)
        try:
            link.parent.mkdir(parents=True, exist_ok=True)
            if link.is_symlink():
                link.unlink()
            os.symlink(term, link)
        except OSError as e:
            raise BookmarkError(f"Cannot write bookmark {link}: {e}") from e
        logger.info(f"Saved bookmark {name!r} -> {term!r}")
        return link


def get_bookmark(path: Union[str, Path]) -> Predicate:
    """
    Compile the search term stored in a bookmark link.

    Bookmarks referenced by that term are resolved relative to the
    directory containing the link.
    """
    path = Path(path)
    term = read_bookmark_term(path)
    return compile_filter(term, resolve_bookmark=BookmarkResolver(path.parent))
