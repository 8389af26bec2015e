"""
Regex based renaming of tag names.
"""

import re

from ..models.predicate import compile_pattern
from ..models.tags import TagMap


_GROUP_REFERENCE = re.compile(r'\$(?:\$|\{([A-Za-z0-9_]+)\}|([A-Za-z0-9_]+))')


def expand_template(match: re.Match, template: str) -> str:
    """
    Expand a replacement template against a match.

    ``$1`` and ``${1}`` insert a numbered group, ``$name`` and ``${name}``
    a named group, ``$$`` a literal '$'. References to groups that do not
    exist or did not participate expand to the empty string.
    """
    def substitute(ref: re.Match) -> str:
        name = ref.group(1) or ref.group(2)
        if name is None:
            return '$'
        key = int(name) if name.isdigit() else name
        try:
            return match.group(key) or ''
        except IndexError:
            return ''

    return _GROUP_REFERENCE.sub(substitute, template)


def rename_tags(find: str, replace: str, tags: TagMap) -> TagMap:
    """
    Rename every tag whose name fully matches a pattern.

    Args:
        find: Pattern source, anchored like search term patterns
        replace: Replacement template, see expand_template
        tags: Tag map to rename; it is not modified

    Returns:
        New tag map with rewritten names and unchanged values. When two
        names collide after renaming, the one processed last wins.

    Raises:
        PatternError: If find is not a valid regular expression
    """
    pattern = compile_pattern(find)
    result: TagMap = {}
    for tag, value in tags.items():
        match = pattern.fullmatch(tag)
        new_tag = expand_template(match, replace) if match else tag
        result[new_tag] = value
    return result
