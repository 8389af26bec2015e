"""
Directory walker that selects files by their tags.

This module traverses directory trees, reads the tag attribute of every
file and yields the files whose tags satisfy a compiled predicate. The
predicate is compiled once and shared by all worker threads.
"""

import os
import logging
from pathlib import Path
from typing import Dict, List, Optional, Iterator, Tuple, Union
from concurrent.futures import ThreadPoolExecutor

from ..errors import XTagError
from ..models.config import XTagConfig
from ..models.predicate import Predicate
from ..models.tags import TaggedFile
from .xattr_store import get_tags


logger = logging.getLogger(__name__)


class TagWalker:
    """
    Filesystem walker that matches files against a tag predicate.

    Supports:
    - Recursive or flat traversal of several roots
    - Skipping file and directory names matching ignore globs
    - Parallel tag reading and matching on a thread pool
    """

    def __init__(self, config: Optional[XTagConfig] = None):
        """
        Initialize the walker.

        Args:
            config: Configuration with attribute name and walk options
        """
        self.config = config or XTagConfig()
        self.reset_stats()

    def walk(self, roots: List[Union[str, Path]], predicate: Optional[Predicate] = None) -> Iterator[TaggedFile]:
        """
        Walk root paths and yield files whose tags match.

        Args:
            roots: Files or directories to search
            predicate: Compiled filter; None matches every file

        Yields:
            TaggedFile objects in traversal order
        """
        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            results = executor.map(
                lambda file_path: self._evaluate_file(file_path, predicate),
                self.iter_files(roots)
            )
            for tagged_file, failed in results:
                self._stats['files_scanned'] += 1
                if failed:
                    self._stats['errors'] += 1
                elif tagged_file is not None:
                    self._stats['files_matched'] += 1
                    yield tagged_file

    def iter_files(self, roots: List[Union[str, Path]]) -> Iterator[Path]:
        """
        Yield every file below the roots that is not ignored.

        Args:
            roots: Files or directories to traverse

        Yields:
            File paths
        """
        for root in roots:
            root_path = Path(root)
            if not root_path.exists():
                logger.warning(f"Root path does not exist: {root_path}")
                self._stats['errors'] += 1
                continue

            if root_path.is_file():
                yield root_path
                continue

            logger.info(f"Walking directory tree: {root_path}")
            yield from self._walk_directory(root_path)

    def _walk_directory(self, root_path: Path) -> Iterator[Path]:
        for current_dir, subdirs, files in os.walk(root_path, followlinks=self.config.follow_symlinks):
            current_path = Path(current_dir)
            self._stats['directories_traversed'] += 1

            if self.config.recursive:
                subdirs[:] = [d for d in subdirs if not self._should_ignore(d)]
            else:
                subdirs[:] = []

            for filename in sorted(files):
                if self._should_ignore(filename):
                    self._stats['files_ignored'] += 1
                    continue
                yield current_path / filename

    def _should_ignore(self, name: str) -> bool:
        if self.config.should_ignore(name):
            logger.debug(f"Ignoring {name}")
            return True
        return False

    def _evaluate_file(self, file_path: Path, predicate: Optional[Predicate]) -> Tuple[Optional[TaggedFile], bool]:
        """
        Read the tags of one file and test them.

        Returns:
            Tuple of (TaggedFile if matched, whether reading failed)
        """
        try:
            tags = get_tags(file_path, self.config.xattr_name)
        except XTagError as e:
            logger.warning(f"Error reading tags of {file_path}: {e}")
            return None, True

        if predicate is None or predicate.is_match(tags):
            return TaggedFile(path=str(file_path), tags=tags), False
        return None, False

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the last walk.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'files_scanned': 0,
            'files_matched': 0,
            'directories_traversed': 0,
            'files_ignored': 0,
            'errors': 0
        }
