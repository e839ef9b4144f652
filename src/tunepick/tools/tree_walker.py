"""
Library tree walker for tunepick.

This module enumerates every song path beneath a library root. Entries are
classified as songs (leaves) or folders by a pluggable classifier; the default
one only looks at the entry name, so no metadata is read while walking.
"""

import os
from typing import Dict, Iterator, List, Optional, Tuple
import logging

from ..models.config import LeafStrategy


logger = logging.getLogger(__name__)


class TraversalError(Exception):
    """Raised when a directory in the library cannot be listed."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Cannot list directory {path}: {reason}")
        self.path = path
        self.reason = reason


class LeafClassifier:
    """Decides whether a directory entry is a song or a folder to descend into."""

    def is_leaf(self, name: str, path: str) -> bool:
        raise NotImplementedError


class DottedNameClassifier(LeafClassifier):
    """
    Treat any entry whose name contains a dot as a song.

    Folders such as ``Compilation.2021`` are never entered, and files without
    an extension are treated as folders, which makes the walk fail when it
    tries to list them.
    """

    def is_leaf(self, name: str, path: str) -> bool:
        return '.' in name


class StatClassifier(LeafClassifier):
    """Treat anything that is not a directory as a song."""

    def is_leaf(self, name: str, path: str) -> bool:
        return not os.path.isdir(path)


def get_classifier(strategy: LeafStrategy) -> LeafClassifier:
    """Build the classifier for a configured strategy."""
    if strategy == LeafStrategy.STAT:
        return StatClassifier()
    return DottedNameClassifier()


class TreeWalker:
    """
    Walks a library tree and yields root-relative song paths.

    Directories are visited with an explicit stack of open listings, in the
    same pre-order a recursive walk would produce. Listing order is whatever
    the filesystem returns; nothing is sorted.
    """

    def __init__(self, classifier: Optional[LeafClassifier] = None):
        """
        Initialize the tree walker.

        Args:
            classifier: Leaf classifier to use (defaults to DottedNameClassifier)
        """
        self.classifier = classifier or DottedNameClassifier()
        self._stats = {
            'directories_traversed': 0,
            'candidates_found': 0,
        }

    def walk(self, root: str) -> Iterator[str]:
        """
        Walk the library and yield song paths relative to ``root``.

        Args:
            root: Absolute path of the library root

        Yields:
            ``/``-separated paths relative to root, in original case

        Raises:
            TraversalError: If any directory cannot be listed
        """
        logger.info(f"Walking library tree: {root}")
        stack: List[Tuple[str, Iterator[str]]] = [('', self._list(root, ''))]

        while stack:
            rel_dir, entries = stack[-1]
            name = next(entries, None)
            if name is None:
                stack.pop()
                continue

            rel_path = f"{rel_dir}/{name}" if rel_dir else name
            full_path = os.path.join(root, rel_path)

            if self.classifier.is_leaf(name, full_path):
                self._stats['candidates_found'] += 1
                yield rel_path
            else:
                stack.append((rel_path, self._list(root, rel_path)))

    def collect(self, root: str) -> List[str]:
        """
        Walk the whole library and return every song path.

        Nothing is returned if the walk fails part way.
        """
        return list(self.walk(root))

    def _list(self, root: str, rel_dir: str) -> Iterator[str]:
        """List one directory, converting OS failures to TraversalError."""
        path = os.path.join(root, rel_dir) if rel_dir else root
        try:
            names = os.listdir(path)
        except OSError as e:
            logger.error(f"Error listing directory {path}: {e}")
            raise TraversalError(path, e.strerror or str(e)) from e

        self._stats['directories_traversed'] += 1
        return iter(names)

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walk.

        Returns:
            Dictionary containing operation statistics
        """
        return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        self._stats = {
            'directories_traversed': 0,
            'candidates_found': 0,
        }
