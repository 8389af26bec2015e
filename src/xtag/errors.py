"""
Exception hierarchy for xtag.

Every failure the library reports derives from XTagError so callers can
catch a single type at their boundary (the CLI does exactly that).
"""

from typing import Optional


class XTagError(Exception):
    """Base class for all xtag errors."""
    pass


class TagIOError(XTagError):
    """Raised when reading or writing the tag attribute of a file fails."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class CharsetError(XTagError):
    """Raised when a stored tag attribute is not valid UTF-8."""
    pass


class SearchSyntaxError(XTagError):
    """
    Raised when a search term or tag list does not match the grammar.

    Attributes:
        text: The input that failed to parse
        position: Zero-based offset of the offending character
        line: One-based line number of the offending character
        column: One-based column of the offending character
    """

    def __init__(self, message: str, text: str, position: int, line: int = 1, column: int = 1):
        super().__init__(f"{message} (at char {position}, line {line}, col {column})")
        self.text = text
        self.position = position
        self.line = line
        self.column = column


class ImplementationMismatchError(XTagError):
    """Raised when the compiler meets a syntax node the grammar should never produce."""
    pass


class PatternError(XTagError):
    """Raised when a tag or value pattern is not a valid regular expression."""

    def __init__(self, message: str, fragment: str):
        super().__init__(message)
        self.fragment = fragment


class IntegerFormatError(XTagError):
    """Raised when the bound of a numeric comparison is not a base-10 integer."""

    def __init__(self, message: str, text: str):
        super().__init__(message)
        self.text = text


class BookmarkError(XTagError):
    """Raised when a bookmark cannot be resolved to search term text."""
    pass
