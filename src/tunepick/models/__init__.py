"""
Data models for tunepick.

This module contains all the core data structures used throughout the system.
"""

from .term_query import Term, TermQuery
from .selection import Selection, SelectionOptions

__all__ = ['Term', 'TermQuery', 'Selection', 'SelectionOptions']
