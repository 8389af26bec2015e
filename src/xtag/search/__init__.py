"""
Search term handling for xtag.

This package contains the grammar, the tag list codec, the expression
compiler, bookmark resolution and tag renaming.
"""

from .bookmarks import BookmarkResolver, get_bookmark, read_bookmark_term
from .codec import decode_tags, encode_tags
from .compiler import SearchCompiler, compile_filter
from .rename import rename_tags

__all__ = [
    'BookmarkResolver',
    'SearchCompiler',
    'compile_filter',
    'decode_tags',
    'encode_tags',
    'get_bookmark',
    'read_bookmark_term',
    'rename_tags'
]
