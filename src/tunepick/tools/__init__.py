"""
Selection engine for tunepick.

This package contains the tree walker, the query matcher, the selection
orderer and the selector that runs them in sequence.
"""

from .matcher import QueryMatcher, matches
from .orderer import SelectionOrderer, StatRaceError
from .selector import SongSelector, select_songs
from .tree_walker import (
    DottedNameClassifier,
    LeafClassifier,
    StatClassifier,
    TraversalError,
    TreeWalker,
)

__all__ = [
    'QueryMatcher',
    'matches',
    'SelectionOrderer',
    'StatRaceError',
    'SongSelector',
    'select_songs',
    'DottedNameClassifier',
    'LeafClassifier',
    'StatClassifier',
    'TraversalError',
    'TreeWalker',
]
