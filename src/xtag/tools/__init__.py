"""
Filesystem tools for xtag.

This module contains the extended attribute tag store and the directory
walker used to search for tagged files.
"""

from .tag_walker import TagWalker
from .xattr_store import (
    delete_tag_blob,
    delete_tags,
    get_tags,
    read_tag_blob,
    set_tags,
    write_tag_blob
)

__all__ = [
    'TagWalker',
    'delete_tag_blob',
    'delete_tags',
    'get_tags',
    'read_tag_blob',
    'set_tags',
    'write_tag_blob'
]
