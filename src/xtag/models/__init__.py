"""
Data models for xtag.

This module contains the tag map type, the predicate tree and the
configuration model.
"""

from .predicate import Predicate, evaluate, print_filter
from .tags import TagMap, TaggedFile

__all__ = ['Predicate', 'TagMap', 'TaggedFile', 'evaluate', 'print_filter']
