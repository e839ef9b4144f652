"""
Selection ordering for tunepick.

This module puts matched songs in playback order. Songs can be sorted newest
first by modification time and truncated to a requested count; the limit is
always applied after sorting.
"""

import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import List, Optional, Tuple
import logging

from ..models.selection import SelectionOptions


logger = logging.getLogger(__name__)


class StatRaceError(Exception):
    """Raised when a song disappears between the walk and its stat call."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Song vanished before ordering: {path} ({reason})")
        self.path = path


@dataclass
class OrderResult:
    """
    Result of ordering a list of matches.

    Attributes:
        paths: Songs in playback order
        omitted: Songs dropped because they could no longer be found
    """
    paths: List[str]
    omitted: List[str] = field(default_factory=list)


class SelectionOrderer:
    """
    Orders and truncates matched song paths.

    Modification times are looked up on a thread pool; all lookups finish
    before anything is sorted.
    """

    def __init__(self, library_root: str, max_workers: int = 4):
        """
        Initialize the orderer.

        Args:
            library_root: Absolute library root the paths are relative to
            max_workers: Threads used for stat calls
        """
        self.library_root = library_root
        self.max_workers = max_workers

    def order(self, candidates: List[str], options: Optional[SelectionOptions] = None) -> OrderResult:
        """
        Order and truncate matched songs.

        Args:
            candidates: Matched root-relative paths in traversal order
            options: Recency and limit options

        Returns:
            OrderResult with the final paths and any omitted songs
        """
        options = options or SelectionOptions()
        paths = list(candidates)
        omitted: List[str] = []

        if options.recency_order:
            paths, omitted = self._sort_by_recency(paths)

        if options.limit is not None and len(paths) > options.limit:
            logger.debug(f"Truncating {len(paths)} songs to {options.limit}")
            paths = paths[:options.limit]

        return OrderResult(paths=paths, omitted=omitted)

    def _sort_by_recency(self, paths: List[str]) -> Tuple[List[str], List[str]]:
        """Sort newest first, dropping songs that can no longer be stat'ed."""
        if not paths:
            return [], []

        workers = min(self.max_workers, len(paths))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            lookups = list(executor.map(self._lookup, paths))

        timed = []
        omitted = []
        for path, mtime in lookups:
            if mtime is None:
                omitted.append(path)
            else:
                timed.append((path, mtime))

        # sort is stable with reverse=True, so ties keep traversal order
        timed.sort(key=lambda item: item[1], reverse=True)
        return [path for path, _ in timed], omitted

    def _lookup(self, path: str) -> Tuple[str, Optional[float]]:
        try:
            return path, self._stat_mtime(path)
        except StatRaceError as e:
            logger.warning(str(e))
            return path, None

    def _stat_mtime(self, path: str) -> float:
        """
        Get the modification time of a song.

        Raises:
            StatRaceError: If the song no longer exists or cannot be stat'ed
        """
        try:
            return os.stat(os.path.join(self.library_root, path)).st_mtime
        except OSError as e:
            raise StatRaceError(path, e.strerror or str(e)) from e
