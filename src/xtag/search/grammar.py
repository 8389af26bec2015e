"""
Grammar for tag lists and search terms.

Two entry points are provided, both built with pyparsing:

* ``parse_tag_list`` for the serialized attribute format
  ``tag1=value1,tag2,tag3=value3``
* ``parse_search`` for boolean filter expressions such as
  ``genre == rock AND year >= 1990 OR NOT {favourites}``

Tag and value patterns are raw regular expression source, so they share
characters with the operators of the search language. The search grammar
therefore reads a flat stream of tokens in which:

* '(' only opens a group when its matching ')' is followed by the end of
  input, another ')' or AND/OR; otherwise the same text is read as a
  pattern containing a regex group
* AND/OR/NOT keywords always win over a pattern spelled the same way
* ``&&`` and ``||`` are never part of a pattern

The token stream is assembled into a tree with an explicit stack, so the
nesting depth of a term is not limited by the interpreter's call stack.
Both entry points return immutable SyntaxNode trees, which are consumed by
the codec and by the expression compiler.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Tuple

from pyparsing import (
    Literal,
    Opt,
    ParseBaseException,
    ParseException,
    ParserElement,
    ParseResults,
    Regex,
    StringEnd,
    Suppress,
    Token,
    ZeroOrMore,
    one_of,
)

from ..errors import SearchSyntaxError


class Rule(Enum):
    """Node kinds produced by the grammar."""
    TAG_WITH_VALUE = "tag_with_value"
    OR = "or"
    AND = "and"
    NOT = "not"
    COMPARISON = "comparison"
    TAG = "tag"
    BOOKMARK = "bookmark"


@dataclass(frozen=True)
class SyntaxNode:
    """
    One node of a parsed tag list or search term.

    Attributes:
        rule: Kind of the node
        children: Child nodes, or token strings for leaf nodes
        loc: Offset of the node in the parsed text
    """
    rule: Rule
    children: Tuple[Any, ...]
    loc: int


@dataclass(frozen=True)
class Symbol:
    """An operator or parenthesis token of a search term."""
    kind: str
    loc: int


KEYWORDS = frozenset({'AND', 'and', 'OR', 'or', 'NOT', 'not'})

_OPERATOR_PREFIXES = ('==', '!=', '&&', '||', '<', '>')


def _skip_class(instring: str, loc: int) -> int:
    # loc points at '['; a ']' right after '[' or '[^' is a literal
    end = len(instring)
    loc += 1
    if loc < end and instring[loc] == '^':
        loc += 1
    if loc < end and instring[loc] == ']':
        loc += 1
    while loc < end:
        char = instring[loc]
        if char == '\\':
            loc += 2
            continue
        if char.isspace():
            return -1
        if char == ']':
            return loc + 1
        loc += 1
    return -1


def find_group_close(instring: str, loc: int) -> int:
    """
    Find the ')' matching the '(' at loc.

    Character classes, escapes and bookmark braces are skipped so that
    parentheses inside them are not counted.

    Returns:
        Offset of the matching ')', or -1 if there is none
    """
    end = len(instring)
    depth = 0
    while loc < end:
        char = instring[loc]
        if char == '\\':
            loc += 2
            continue
        if char == '[':
            skipped = _skip_class(instring, loc)
            if skipped > 0:
                loc = skipped
                continue
        elif char == '{':
            close = instring.find('}', loc)
            if close > 0:
                loc = close + 1
                continue
        elif char == '(':
            depth += 1
        elif char == ')':
            depth -= 1
            if depth == 0:
                return loc
        loc += 1
    return -1


class RegexSource(Token):
    """
    Matches the source text of a tag or value pattern.

    A pattern is a run of non-whitespace characters. Balanced parentheses,
    bracket classes and backslash escapes are taken verbatim; outside of
    parentheses the pattern stops in front of whitespace, an unmatched ')'
    and comparison or boolean operator symbols.
    """

    def __init__(self):
        super().__init__()
        self.mayReturnEmpty = False
        self.mayIndexError = False
        self.errmsg = "Expected tag or value pattern"

    def _generateDefaultName(self) -> str:
        return "pattern"

    def parseImpl(self, instring, loc, do_actions=True):
        start = loc
        end = len(instring)
        depth = 0
        while loc < end:
            char = instring[loc]
            if char == '\\':
                if loc + 1 >= end:
                    break
                loc += 2
                continue
            if char == '[':
                loc = _skip_class(instring, loc)
                if loc < 0:
                    raise ParseException(instring, start, "Unterminated character class", self)
                continue
            if char.isspace():
                break
            if instring.startswith(('&&', '||'), loc):
                break
            if depth == 0 and instring.startswith(_OPERATOR_PREFIXES, loc):
                break
            if char == '(':
                depth += 1
            elif char == ')':
                if depth == 0:
                    break
                depth -= 1
            loc += 1

        if depth:
            raise ParseException(instring, start, "Unbalanced parenthesis in pattern", self)
        text = instring[start:loc]
        if not text or text in KEYWORDS:
            raise ParseException(instring, start, self.errmsg, self)
        return loc, text


class GroupOpen(Token):
    """
    Matches a '(' that opens a group.

    The '(' is only accepted when its matching ')' is followed by text the
    follow element can parse; otherwise the parenthesis belongs to a
    pattern.
    """

    def __init__(self, follow: ParserElement):
        super().__init__()
        self.follow = follow
        self.mayReturnEmpty = False
        self.mayIndexError = False
        self.errmsg = "Expected '('"

    def _generateDefaultName(self) -> str:
        return "'('"

    def parseImpl(self, instring, loc, do_actions=True):
        if instring.startswith('(', loc):
            close = find_group_close(instring, loc)
            if close >= 0 and self.follow.can_parse_next(instring, close + 1):
                return loc + 1, '('
        raise ParseException(instring, loc, self.errmsg, self)


def _tag_with_value(s, loc, toks):
    name = toks[0]
    value = toks[1] if len(toks) > 1 else None
    return SyntaxNode(Rule.TAG_WITH_VALUE, (name, value), loc)


def _symbol(kind: str):
    def action(s, loc, toks):
        return Symbol(kind, loc)
    return action


def _build_tag_list_grammar() -> ParserElement:
    """Build the comma_separated_tags_with_values production."""
    tag_name = Regex(r"[^,=\s](?:[^,=]*[^,=\s])?").set_name("tag name")
    tag_value = Regex(r"[^,=\s](?:[^,=]*[^,=\s])?").set_name("tag value")

    tag_with_value = (
        tag_name + Opt(Suppress("=") + Opt(tag_value, default=""))
    ).set_parse_action(_tag_with_value)

    tag_list = Opt(tag_with_value + ZeroOrMore(Suppress(",") + tag_with_value))
    return tag_list + StringEnd()


def _build_search_grammar() -> ParserElement:
    """Build the token stream of the search production."""
    and_op = Regex(r"(?:AND|and)(?=[\s({!])") | Literal("&&")
    or_op = Regex(r"(?:OR|or)(?=[\s({!])") | Literal("||")
    not_op = Regex(r"(?:NOT|not)(?=[\s({!])") | Regex(r"!(?!=)")
    comparison_op = one_of("== != <= >= < >").set_name("comparison operator")

    group_open = GroupOpen(StringEnd() | Literal(")") | and_op | or_op)
    group_close = Literal(")")

    bookmark = Regex(r"\{([^{}]+)\}").set_name("bookmark")
    bookmark.set_parse_action(
        lambda s, loc, toks: SyntaxNode(Rule.BOOKMARK, (toks[0][1:-1].strip(),), loc)
    )

    pattern = RegexSource()
    comparison = (pattern + Opt(comparison_op + pattern)).set_parse_action(
        lambda s, loc, toks: SyntaxNode(
            Rule.COMPARISON if len(toks) == 3 else Rule.TAG, tuple(toks), loc
        )
    )

    token = (
        group_open.copy().set_parse_action(_symbol('('))
        | group_close.copy().set_parse_action(_symbol(')'))
        | not_op.copy().set_parse_action(_symbol('NOT')).set_name("NOT")
        | and_op.copy().set_parse_action(_symbol('AND')).set_name("AND")
        | or_op.copy().set_parse_action(_symbol('OR')).set_name("OR")
        | bookmark
        | comparison
    )
    return ZeroOrMore(token) + StringEnd()


TAG_LIST = _build_tag_list_grammar()
SEARCH = _build_search_grammar()


@dataclass
class _Level:
    """Operands collected inside one pair of parentheses."""
    loc: int
    or_operands: List[SyntaxNode] = field(default_factory=list)
    and_operands: List[SyntaxNode] = field(default_factory=list)
    negations: List[int] = field(default_factory=list)
    expect_operand: bool = True

    def add_operand(self, node: SyntaxNode) -> None:
        for loc in reversed(self.negations):
            node = SyntaxNode(Rule.NOT, (node,), loc)
        self.negations.clear()
        self.and_operands.append(node)
        self.expect_operand = False

    def end_and_chain(self) -> None:
        self.or_operands.append(_join(Rule.AND, self.and_operands))
        self.and_operands = []
        self.expect_operand = True

    def close(self) -> SyntaxNode:
        self.end_and_chain()
        return _join(Rule.OR, self.or_operands)


def _join(rule: Rule, operands: List[SyntaxNode]) -> SyntaxNode:
    if len(operands) == 1:
        return operands[0]
    return SyntaxNode(rule, tuple(operands), operands[0].loc)


def _build_search_tree(term: str, tokens: ParseResults) -> SyntaxNode:
    """
    Assemble search tokens into a tree.

    NOT binds tighter than AND, which binds tighter than OR. Chains of
    the same operator become one node holding all of their operands.

    Raises:
        ParseException: If the tokens are not a well formed expression
    """
    levels = [_Level(0)]
    for token in tokens:
        level = levels[-1]
        if isinstance(token, SyntaxNode):
            if not level.expect_operand:
                raise ParseException(term, token.loc, "Expected AND or OR between operands")
            level.add_operand(token)
        elif token.kind in ('NOT', '('):
            if not level.expect_operand:
                raise ParseException(term, token.loc, f"Unexpected '{token.kind}' after operand")
            if token.kind == 'NOT':
                level.negations.append(token.loc)
            else:
                levels.append(_Level(token.loc))
        else:
            if level.expect_operand:
                raise ParseException(term, token.loc, f"Expected operand before '{token.kind}'")
            if token.kind == 'OR':
                level.end_and_chain()
            elif token.kind == 'AND':
                level.expect_operand = True
            elif len(levels) == 1:
                raise ParseException(term, token.loc, "Unmatched ')'")
            else:
                node = levels.pop().close()
                levels[-1].add_operand(node)

    level = levels[-1]
    if len(levels) > 1:
        raise ParseException(term, level.loc, "Unclosed '('")
    if level.expect_operand:
        raise ParseException(term, len(term), "Expected operand")
    return level.close()


def _parse(grammar: ParserElement, text: str, what: str, build):
    try:
        return build(text, grammar.parse_string(text, parse_all=True))
    except ParseBaseException as e:
        raise SearchSyntaxError(
            f"Invalid {what}: {e.msg}", text=text, position=e.loc, line=e.lineno, column=e.col
        ) from e


def parse_tag_list(text: str) -> Tuple[SyntaxNode, ...]:
    """
    Parse a serialized tag list.

    Args:
        text: Comma separated ``tag`` / ``tag=value`` entries

    Returns:
        One TAG_WITH_VALUE node per entry, in input order

    Raises:
        SearchSyntaxError: If the text is not a valid tag list
    """
    return _parse(TAG_LIST, text, "tag list", lambda text, tokens: tuple(tokens))


def parse_search(term: str) -> SyntaxNode:
    """
    Parse a search term into its syntax tree.

    Args:
        term: Search term text

    Returns:
        Root node of the syntax tree

    Raises:
        SearchSyntaxError: If the term is not a valid search expression
    """
    return _parse(SEARCH, term, "search term", _build_search_tree)
