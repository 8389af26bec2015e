"""
xtag - tag files with key/value pairs and find them again.

Tags are kept in one extended attribute per file. Files are selected with
boolean search terms such as ``project == xtag AND priority > 2``.
"""

from .errors import (
    BookmarkError,
    CharsetError,
    ImplementationMismatchError,
    IntegerFormatError,
    PatternError,
    SearchSyntaxError,
    TagIOError,
    XTagError
)
from .models.predicate import Predicate, evaluate, print_filter
from .models.tags import TagMap, TaggedFile
from .search import (
    BookmarkResolver,
    compile_filter,
    decode_tags,
    encode_tags,
    get_bookmark,
    rename_tags
)
from .tools.xattr_store import delete_tags, get_tags, set_tags

__version__ = "0.1.0"

__all__ = [
    'BookmarkError',
    'BookmarkResolver',
    'CharsetError',
    'ImplementationMismatchError',
    'IntegerFormatError',
    'PatternError',
    'Predicate',
    'SearchSyntaxError',
    'TagIOError',
    'TagMap',
    'TaggedFile',
    'XTagError',
    'compile_filter',
    'decode_tags',
    'delete_tags',
    'encode_tags',
    'evaluate',
    'get_bookmark',
    'get_tags',
    'print_filter',
    'rename_tags',
    'set_tags'
]
