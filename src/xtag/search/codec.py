"""
Conversion between the serialized tag attribute and tag maps.

The stored format is UTF-8 text ``tag1=value1,tag2,tag3=value3``. There is
no escaping, so names and values cannot contain ',' or '='.
"""

from ..errors import ImplementationMismatchError
from ..models.tags import TagMap
from .grammar import Rule, parse_tag_list


def decode_tags(text: str) -> TagMap:
    """
    Decode a serialized tag list into a new tag map.

    Later entries overwrite earlier ones with the same name. Empty text
    decodes to an empty map.

    Raises:
        SearchSyntaxError: If the text is not a valid tag list
    """
    tags: TagMap = {}
    for node in parse_tag_list(text):
        if node.rule is not Rule.TAG_WITH_VALUE:
            raise ImplementationMismatchError(f"Unexpected tag list node {node.rule.value}")
        name, value = node.children
        tags[name] = value
    return tags


def encode_tags(tags: TagMap) -> str:
    """Encode a tag map as a comma separated tag list (order unspecified)."""
    return ",".join(
        tag if value is None else f"{tag}={value}"
        for tag, value in tags.items()
    )
