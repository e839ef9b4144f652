"""
Term query data models for tunepick.

This module defines the structures for the small boolean query language used
to pick songs: a term list is an OR of terms, a term is an AND of
``#``-separated sections, and a section is an OR of ``,``-separated words.
A term prefixed with ``!`` is a veto.
"""

import re
from typing import List, Sequence, Union
from pydantic import BaseModel, Field, field_validator


NEGATION_MARKER = '!'

_SECTION_SPLIT = re.compile(r'#\s*')
_WORD_SPLIT = re.compile(r',\s*')


class Term(BaseModel):
    """
    A single parsed query term.

    Attributes:
        raw: The term exactly as the user typed it
        negated: Whether the term was prefixed with the negation marker
        sections: Ordered sections, each a list of lowercase words
    """

    raw: str = Field(..., description="Term as supplied by the user")
    negated: bool = Field(False, description="Whether a satisfied term vetoes the candidate")
    sections: List[List[str]] = Field(default_factory=list, description="AND-ed sections of OR-ed words")

    @field_validator('sections')
    @classmethod
    def validate_sections(cls, v: List[List[str]]) -> List[List[str]]:
        """Lowercase every word so matching never has to care about case."""
        return [[word.lower() for word in section] for section in v]

    @classmethod
    def parse(cls, raw: str) -> 'Term':
        """
        Parse a raw term string.

        Args:
            raw: Term text, e.g. ``"rock,jazz#live"`` or ``"!demo"``

        Returns:
            Parsed Term
        """
        body = raw
        negated = body.startswith(NEGATION_MARKER)
        if negated:
            body = body[len(NEGATION_MARKER):]

        sections = [_WORD_SPLIT.split(section) for section in _SECTION_SPLIT.split(body)]
        return cls(raw=raw, negated=negated, sections=sections)

    def is_satisfied_by(self, normalized_candidate: str) -> bool:
        """
        Check whether every section has a word contained in the candidate.

        The candidate must already be lowercased.
        """
        return all(
            any(word in normalized_candidate for word in section)
            for section in self.sections
        )

    def __str__(self) -> str:
        return self.raw


class TermQuery(BaseModel):
    """
    An ordered list of parsed terms.

    Order only affects iteration, never the outcome of a match.
    """

    terms: List[Term] = Field(default_factory=list, description="Parsed terms in the order given")

    @classmethod
    def from_strings(cls, raw_terms: Sequence[Union[str, Term]]) -> 'TermQuery':
        """Build a query from raw strings, passing already parsed terms through."""
        terms = [t if isinstance(t, Term) else Term.parse(t) for t in raw_terms]
        return cls(terms=terms)

    def is_empty(self) -> bool:
        """An empty query selects every candidate."""
        return not self.terms

    def __len__(self) -> int:
        return len(self.terms)

    def __str__(self) -> str:
        if self.is_empty():
            return "Query: <all>"
        return "Query: " + " ".join(t.raw for t in self.terms)
