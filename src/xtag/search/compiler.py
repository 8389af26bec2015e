"""
Compiler from search terms to predicate trees.

The compiler parses a term with the search grammar and folds the syntax
tree bottom-up into an immutable Predicate. Compilation does not look at
any tag map, so the result can be evaluated against many files.
"""

import logging
from typing import Callable, FrozenSet, List, Optional, Tuple

from ..errors import BookmarkError, ImplementationMismatchError, IntegerFormatError, SearchSyntaxError
from ..models.predicate import (
    And,
    Not,
    Or,
    Predicate,
    TagExists,
    ValueEquals,
    ValueGreater,
    ValueGreaterEqual,
    ValueLess,
    ValueLessEqual,
    ValueNotEquals,
    compile_pattern,
    parse_integer,
)
from .grammar import Rule, SyntaxNode, parse_search


logger = logging.getLogger(__name__)

BookmarkResolverFunc = Callable[[str], str]

_NUMERIC_COMPARISONS = {
    '<': ValueLess,
    '<=': ValueLessEqual,
    '>': ValueGreater,
    '>=': ValueGreaterEqual,
}


class SearchCompiler:
    """
    Turns search term text into Predicate trees.

    Bookmark references ``{name}`` are expanded through resolve_bookmark,
    which returns the term text the bookmark stands for. That text is
    compiled on its own and spliced in as a single operand, which gives
    bookmarks implicit parentheses.
    """

    def __init__(self, resolve_bookmark: Optional[BookmarkResolverFunc] = None):
        """
        Initialize the compiler.

        Args:
            resolve_bookmark: Callable mapping a bookmark name to term text.
                If None, terms that reference bookmarks fail to compile.
        """
        self.resolve_bookmark = resolve_bookmark

    def compile(self, term: str) -> Predicate:
        """
        Compile a search term.

        Raises:
            SearchSyntaxError: If the term does not match the grammar or
                nests bookmarks too deeply
            PatternError: If a tag or value pattern is not a valid regex
            IntegerFormatError: If a numeric comparison bound is not an integer
            BookmarkError: If a bookmark cannot be resolved
        """
        try:
            return self._compile(term, frozenset())
        except RecursionError as e:
            raise SearchSyntaxError("Search term nests too deeply", text=term, position=0) from e

    def _compile(self, term: str, expanding: FrozenSet[str]) -> Predicate:
        logger.debug(f"Compiling search term: {term!r}")
        return self._eval(parse_search(term), expanding)

    def _eval(self, root: SyntaxNode, expanding: FrozenSet[str]) -> Predicate:
        # Post-order walk with an explicit stack; results holds finished operands
        results: List[Predicate] = []
        stack: List[Tuple[SyntaxNode, bool]] = [(root, False)]
        while stack:
            node, children_done = stack.pop()
            if not isinstance(node, SyntaxNode):
                raise ImplementationMismatchError(f"Unexpected token {node!r} in search syntax tree")

            if node.rule not in (Rule.OR, Rule.AND, Rule.NOT):
                results.append(self._eval_leaf(node, expanding))
            elif not children_done:
                self._check_operands(node)
                stack.append((node, True))
                stack.extend((child, False) for child in reversed(node.children))
            else:
                count = len(node.children)
                operands = results[-count:]
                del results[-count:]
                results.append(self._combine(node.rule, operands))
        return results[0]

    @staticmethod
    def _check_operands(node: SyntaxNode) -> None:
        if node.rule is Rule.NOT and len(node.children) != 1:
            raise ImplementationMismatchError(f"NOT node with {len(node.children)} operands")
        if node.rule is not Rule.NOT and len(node.children) < 2:
            raise ImplementationMismatchError(
                f"{node.rule.value.upper()} node with {len(node.children)} operands"
            )

    @staticmethod
    def _combine(rule: Rule, operands: List[Predicate]) -> Predicate:
        if rule is Rule.NOT:
            return Not(operands[0])
        combine = Or if rule is Rule.OR else And
        result = operands[0]
        for operand in operands[1:]:
            result = combine(result, operand)
        return result

    def _eval_leaf(self, node: SyntaxNode, expanding: FrozenSet[str]) -> Predicate:
        if node.rule is Rule.TAG:
            return TagExists(compile_pattern(node.children[0]))
        if node.rule is Rule.COMPARISON:
            return self._eval_comparison(node)
        if node.rule is Rule.BOOKMARK:
            return self._eval_bookmark(node.children[0], expanding)

        raise ImplementationMismatchError(f"Unexpected grammar rule {node.rule.value}")

    def _eval_comparison(self, node: SyntaxNode) -> Predicate:
        # Equality is a regex match on the value, ordering is integer based
        if len(node.children) != 3:
            raise ImplementationMismatchError(f"Comparison node with {len(node.children)} parts")
        tag_text, op, value_text = node.children
        tag_pattern = compile_pattern(tag_text)

        if op == '==':
            return ValueEquals(tag_pattern, compile_pattern(value_text))
        if op == '!=':
            return ValueNotEquals(tag_pattern, compile_pattern(value_text))
        if op in _NUMERIC_COMPARISONS:
            bound = parse_integer(value_text)
            if bound is None:
                raise IntegerFormatError(
                    f"Comparison '{tag_text} {op} {value_text}' needs an integer bound",
                    text=value_text
                )
            return _NUMERIC_COMPARISONS[op](tag_pattern, bound)

        raise ImplementationMismatchError(f"Unsupported comparison operator {op!r}")

    def _eval_bookmark(self, name: str, expanding: FrozenSet[str]) -> Predicate:
        if self.resolve_bookmark is None:
            raise BookmarkError(f"Cannot resolve bookmark '{name}': no bookmark resolver configured")
        if name in expanding:
            raise BookmarkError(f"Bookmark '{name}' refers to itself")
        term = self.resolve_bookmark(name)
        logger.debug(f"Expanded bookmark {name!r} to {term!r}")
        return self._compile(term, expanding | {name})


def compile_filter(term: str, resolve_bookmark: Optional[BookmarkResolverFunc] = None) -> Predicate:
    """
    Convenience function to compile a search term.

    Args:
        term: Search term text
        resolve_bookmark: Optional callable mapping bookmark names to term text

    Returns:
        Compiled, immutable Predicate
    """
    return SearchCompiler(resolve_bookmark).compile(term)
