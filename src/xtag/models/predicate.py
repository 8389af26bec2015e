"""
Predicate tree for tag filtering.

A Predicate is the compiled, immutable form of a search term. It is built
once by the expression compiler and can then be evaluated against any
number of tag maps, including from several threads at the same time.

Every pattern held by a predicate is a fully anchored regular expression,
and every test is existential: when a tag pattern matches several tags,
the predicate holds if ANY of them satisfies the condition.
"""

import operator
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, ClassVar, Iterator, List, Optional, Tuple, Union

from ..errors import PatternError
from .tags import TagMap


_INTEGER = re.compile(r'[+-]?[0-9]+')


def anchor_pattern(text: str) -> str:
    """
    Anchor pattern source so it matches whole strings only.

    Text that already starts with '^' and ends with '$' is returned
    unchanged, so canonical output can be compiled again without growing
    '^^...$$'.
    """
    if text.startswith('^') and text.endswith('$'):
        return text
    return f'^{text}$'


def compile_pattern(text: str) -> re.Pattern:
    """
    Compile tag or value pattern text into an anchored regular expression.

    Args:
        text: Raw regular expression source from a search term

    Returns:
        Compiled pattern

    Raises:
        PatternError: If the text is not a valid regular expression
    """
    try:
        return re.compile(anchor_pattern(text))
    except re.error as e:
        raise PatternError(f"Invalid pattern '{text}': {e}", fragment=text) from e


def parse_integer(text: str) -> Optional[int]:
    """Parse a base-10 signed integer, returning None for anything else."""
    if _INTEGER.fullmatch(text) is None:
        return None
    return int(text)


def _values_for(tags: TagMap, tag_pattern: re.Pattern) -> Iterator[Optional[str]]:
    for tag, value in tags.items():
        if tag_pattern.fullmatch(tag):
            yield value


class Predicate(ABC):
    """Base class of all predicate tree nodes."""

    @abstractmethod
    def is_match(self, tags: TagMap) -> bool:
        """Evaluate this predicate against a tag map."""

    @abstractmethod
    def to_text(self) -> str:
        """Render this predicate as canonical search term text."""

    def __str__(self) -> str:
        return self.to_text()


@dataclass(frozen=True)
class And(Predicate):
    lhs: Predicate
    rhs: Predicate

    def is_match(self, tags: TagMap) -> bool:
        return _match_tree(self, tags)

    def to_text(self) -> str:
        return _render_tree(self)


@dataclass(frozen=True)
class Or(Predicate):
    lhs: Predicate
    rhs: Predicate

    def is_match(self, tags: TagMap) -> bool:
        return _match_tree(self, tags)

    def to_text(self) -> str:
        return _render_tree(self)


@dataclass(frozen=True)
class Not(Predicate):
    operand: Predicate

    def is_match(self, tags: TagMap) -> bool:
        return _match_tree(self, tags)

    def to_text(self) -> str:
        return _render_tree(self)


def _match_tree(root: Predicate, tags: TagMap) -> bool:
    """
    Evaluate a tree of And/Or/Not nodes without recursion.

    Operands are evaluated left to right and the rhs of And/Or is skipped
    once the lhs decides the result. The depth of the tree is not limited
    by the interpreter stack.
    """
    # (node, rhs_started) for every And/Or/Not above the current node
    stack: List[Tuple[Predicate, bool]] = []
    node = root
    while True:
        while isinstance(node, (And, Or, Not)):
            stack.append((node, False))
            node = node.operand if isinstance(node, Not) else node.lhs
        result = node.is_match(tags)

        while stack:
            parent, rhs_started = stack.pop()
            if isinstance(parent, Not):
                result = not result
            elif not rhs_started and result != isinstance(parent, Or):
                stack.append((parent, True))
                node = parent.rhs
                break
        else:
            return result


def _render_tree(root: Predicate) -> str:
    """Render a tree of And/Or/Not nodes without recursion."""
    parts = []
    pending: List[Union[str, Predicate]] = [root]
    while pending:
        item = pending.pop()
        if isinstance(item, str):
            parts.append(item)
        elif isinstance(item, Not):
            pending.extend([')', item.operand, 'NOT ('])
        elif isinstance(item, (And, Or)):
            keyword = 'AND' if isinstance(item, And) else 'OR'
            pending.extend([')', item.rhs, f') {keyword} (', item.lhs, '('])
        else:
            parts.append(item.to_text())
    return ''.join(parts)


@dataclass(frozen=True)
class TagExists(Predicate):
    """True if at least one tag name matches the pattern."""

    tag_pattern: re.Pattern

    def is_match(self, tags: TagMap) -> bool:
        return any(True for _ in _values_for(tags, self.tag_pattern))

    def to_text(self) -> str:
        return self.tag_pattern.pattern


@dataclass(frozen=True)
class ValueEquals(Predicate):
    """
    True if a tag matching tag_pattern has a value matching value_pattern.

    Presence-only tags (no value) never satisfy an equality test but do not
    prevent another matching tag from satisfying it.
    """

    tag_pattern: re.Pattern
    value_pattern: re.Pattern

    def is_match(self, tags: TagMap) -> bool:
        for value in _values_for(tags, self.tag_pattern):
            if value is not None and self.value_pattern.fullmatch(value):
                return True
        return False

    def to_text(self) -> str:
        return f'{self.tag_pattern.pattern} == {self.value_pattern.pattern}'


def ValueNotEquals(tag_pattern: re.Pattern, value_pattern: re.Pattern) -> Not:
    """
    Build the negation of ValueEquals.

    This is "the equality does not hold", not "every matching tag differs":
    when no tag matches tag_pattern at all the result is True.
    """
    return Not(ValueEquals(tag_pattern, value_pattern))


@dataclass(frozen=True)
class _NumericComparison(Predicate):
    tag_pattern: re.Pattern
    bound: int

    symbol: ClassVar[str] = ''
    compare: ClassVar[Callable[[int, int], bool]]

    def is_match(self, tags: TagMap) -> bool:
        for value in _values_for(tags, self.tag_pattern):
            if value is None:
                continue
            number = parse_integer(value)
            # Non-numeric values are a non-match for this tag only
            if number is not None and self.compare(number, self.bound):
                return True
        return False

    def to_text(self) -> str:
        return f'{self.tag_pattern.pattern} {self.symbol} {self.bound}'


@dataclass(frozen=True)
class ValueLess(_NumericComparison):
    symbol: ClassVar[str] = '<'
    compare = staticmethod(operator.lt)


@dataclass(frozen=True)
class ValueLessEqual(_NumericComparison):
    symbol: ClassVar[str] = '<='
    compare = staticmethod(operator.le)


@dataclass(frozen=True)
class ValueGreater(_NumericComparison):
    symbol: ClassVar[str] = '>'
    compare = staticmethod(operator.gt)


@dataclass(frozen=True)
class ValueGreaterEqual(_NumericComparison):
    symbol: ClassVar[str] = '>='
    compare = staticmethod(operator.ge)


def evaluate(predicate: Predicate, tags: TagMap) -> bool:
    """Evaluate a compiled predicate against a tag map."""
    return predicate.is_match(tags)


def print_filter(predicate: Predicate) -> str:
    """Render a compiled predicate as canonical search term text."""
    return predicate.to_text()
