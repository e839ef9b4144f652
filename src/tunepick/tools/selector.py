"""
Song selection for tunepick.

Ties the tree walker, the query matcher and the selection orderer together:
walk the library, keep the songs the query accepts, then order and truncate
them for playback.
"""

from typing import Optional, Sequence, Union
import logging

from ..models.config import PickerConfig
from ..models.selection import Selection, SelectionOptions
from ..models.term_query import Term, TermQuery
from .matcher import QueryMatcher
from .orderer import SelectionOrderer
from .tree_walker import LeafClassifier, TreeWalker, get_classifier


logger = logging.getLogger(__name__)


class SongSelector:
    """
    Selects songs from a music library.

    Every call walks the library afresh; nothing is cached between calls.
    """

    def __init__(self, library_root: str, classifier: Optional[LeafClassifier] = None,
                 max_workers: int = 4):
        """
        Initialize the selector.

        Args:
            library_root: Absolute path of the music library
            classifier: Leaf classifier for the tree walker
            max_workers: Threads used for modification time lookups
        """
        self.library_root = library_root
        self.walker = TreeWalker(classifier)
        self.orderer = SelectionOrderer(library_root, max_workers=max_workers)

    @classmethod
    def from_config(cls, config: PickerConfig) -> 'SongSelector':
        """Create a selector from application configuration."""
        return cls(
            config.library_root,
            classifier=get_classifier(config.classifier),
            max_workers=config.limits.max_concurrent,
        )

    def select(self, terms: Union[TermQuery, Sequence[Union[str, Term]]],
               options: Optional[SelectionOptions] = None) -> Selection:
        """
        Select songs matching a term list.

        Args:
            terms: Query terms; an empty list selects everything
            options: Recency ordering and limit

        Returns:
            The final Selection, possibly empty

        Raises:
            TraversalError: If the library cannot be walked
        """
        options = options or SelectionOptions()
        matcher = QueryMatcher(terms)
        logger.debug(f"Selecting from {self.library_root} with {matcher.query}")

        self.walker.reset_stats()
        candidates = self.walker.collect(self.library_root)
        matched = matcher.filter(candidates)
        logger.info(f"Matched {len(matched)} of {len(candidates)} songs")

        result = self.orderer.order(matched, options)

        return Selection(
            library_root=self.library_root,
            paths=result.paths,
            total_matched=len(matched),
            candidates_scanned=len(candidates),
            omitted=result.omitted,
            options=options,
        )


def select_songs(library_root: str, terms: Sequence[Union[str, Term]],
                 recency_order: bool = False, limit: Optional[int] = None) -> Selection:
    """
    Convenience function to select songs with the default classifier.

    Args:
        library_root: Absolute path of the music library
        terms: Query terms
        recency_order: Sort newest first
        limit: Keep at most this many songs

    Returns:
        The final Selection
    """
    selector = SongSelector(library_root)
    return selector.select(terms, SelectionOptions(recency_order=recency_order, limit=limit))
