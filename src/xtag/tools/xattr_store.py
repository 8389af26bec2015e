"""
Extended attribute storage for file tags.

Each file keeps all of its tags in one extended attribute (``user.xtag``
unless configured otherwise) holding the UTF-8 tag list text produced by
the tag list codec.
"""

import errno
import logging
import os
from pathlib import Path
from typing import Optional, Union

from ..errors import CharsetError, TagIOError
from ..models.config import DEFAULT_XATTR_NAME
from ..models.tags import TagMap
from ..search.codec import decode_tags, encode_tags


logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# ENOATTR is the BSD/macOS spelling of ENODATA
_MISSING_ATTRIBUTE = {errno.ENODATA, getattr(errno, 'ENOATTR', errno.ENODATA)}


def _require_xattr_support(path: PathLike) -> None:
    if not (hasattr(os, 'getxattr') and hasattr(os, 'setxattr') and hasattr(os, 'removexattr')):
        raise TagIOError("Extended attributes are not supported on this platform", path=str(path))


def read_tag_blob(path: PathLike, xattr_name: str = DEFAULT_XATTR_NAME) -> Optional[bytes]:
    """
    Read the raw tag attribute of a file.

    Returns:
        Attribute bytes, or None if the file has no tag attribute

    Raises:
        TagIOError: If the attribute cannot be read
    """
    _require_xattr_support(path)
    try:
        return os.getxattr(path, xattr_name)
    except OSError as e:
        if e.errno in _MISSING_ATTRIBUTE:
            return None
        raise TagIOError(f"Cannot read tags of {path}: {e}", path=str(path)) from e


def write_tag_blob(path: PathLike, blob: bytes, xattr_name: str = DEFAULT_XATTR_NAME) -> None:
    """
    Write the raw tag attribute of a file.

    Raises:
        TagIOError: If the attribute cannot be written
    """
    _require_xattr_support(path)
    try:
        os.setxattr(path, xattr_name, blob)
    except OSError as e:
        raise TagIOError(f"Cannot write tags of {path}: {e}", path=str(path)) from e


def delete_tag_blob(path: PathLike, xattr_name: str = DEFAULT_XATTR_NAME) -> None:
    """
    Remove the tag attribute of a file. A missing attribute is not an error.

    Raises:
        TagIOError: If the attribute cannot be removed
    """
    _require_xattr_support(path)
    try:
        os.removexattr(path, xattr_name)
    except OSError as e:
        if e.errno in _MISSING_ATTRIBUTE:
            return
        raise TagIOError(f"Cannot delete tags of {path}: {e}", path=str(path)) from e


def get_tags(path: PathLike, xattr_name: str = DEFAULT_XATTR_NAME) -> TagMap:
    """
    Get the tags of a file as a tag map.

    A file without the attribute has no tags.

    Raises:
        TagIOError: If the attribute cannot be read
        CharsetError: If the attribute is not valid UTF-8
        SearchSyntaxError: If the attribute is not a valid tag list
    """
    blob = read_tag_blob(path, xattr_name)
    if blob is None:
        return decode_tags("")
    try:
        text = blob.decode('utf-8')
    except UnicodeDecodeError as e:
        raise CharsetError(f"Tags of {path} are not valid UTF-8: {e}") from e
    return decode_tags(text)


def set_tags(path: PathLike, tags: TagMap, xattr_name: str = DEFAULT_XATTR_NAME) -> None:
    """Replace the tags of a file."""
    write_tag_blob(path, encode_tags(tags).encode('utf-8'), xattr_name)
    logger.debug(f"Stored {len(tags)} tags on {path}")


def delete_tags(path: PathLike, xattr_name: str = DEFAULT_XATTR_NAME) -> None:
    """Remove all tags of a file."""
    delete_tag_blob(path, xattr_name)
