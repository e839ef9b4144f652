"""
Query matching for tunepick.

A candidate passes when at least one plain term is satisfied and no negated
term is. Terms are evaluated left to right in a single pass; the first
satisfied negated term rejects the candidate at once.
"""

from typing import Iterable, List, Sequence, Union

from ..models.term_query import Term, TermQuery


def normalize_candidate(path_candidate: str) -> str:
    """Lowercase a root-relative path once before it is matched."""
    return path_candidate.lower()


class QueryMatcher:
    """Matches root-relative song paths against a parsed term list."""

    def __init__(self, terms: Union[TermQuery, Sequence[Union[str, Term]]]):
        if isinstance(terms, TermQuery):
            self.query = terms
        else:
            self.query = TermQuery.from_strings(terms)

    def matches(self, path_candidate: str) -> bool:
        """
        Check whether a path satisfies the query.

        Args:
            path_candidate: Path relative to the library root

        Returns:
            True if the path is selected
        """
        if self.query.is_empty():
            return True

        candidate = normalize_candidate(path_candidate)
        passed = False

        for term in self.query.terms:
            if not term.is_satisfied_by(candidate):
                continue
            if term.negated:
                return False
            passed = True

        return passed

    def filter(self, candidates: Iterable[str]) -> List[str]:
        """Keep the candidates that match, preserving their order."""
        return [c for c in candidates if self.matches(c)]


def matches(term_list: Sequence[Union[str, Term]], path_candidate: str) -> bool:
    """
    Check a single path against a term list.

    Args:
        term_list: Raw term strings or parsed terms
        path_candidate: Path relative to the library root

    Returns:
        True if the path is selected
    """
    return QueryMatcher(term_list).matches(path_candidate)
