"""
Selection data models for tunepick.

This module defines the structures describing how a selection should be
ordered and the final ordered list of songs handed to the player.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
from pydantic import BaseModel, Field


class SelectionOptions(BaseModel):
    """
    Ordering and truncation options for a selection.

    Attributes:
        recency_order: Sort matches newest first by modification time
        limit: Keep at most this many matches (applied after ordering)
    """

    recency_order: bool = Field(False, description="Sort matches by modification time, newest first")
    limit: Optional[int] = Field(None, gt=0, description="Maximum number of songs to keep")

    def is_noop(self) -> bool:
        """Check whether these options leave the matches untouched."""
        return not self.recency_order and self.limit is None


class Selection(BaseModel):
    """
    The final ordered and possibly truncated list of matched songs.

    Attributes:
        library_root: Absolute library root the paths are relative to
        paths: Root-relative song paths in playback order (original case)
        total_matched: Number of candidates that passed the query
        candidates_scanned: Number of candidates produced by the walker
        omitted: Candidates dropped because they vanished before ordering
        options: Options the selection was built with
    """

    library_root: str = Field(..., min_length=1, description="Absolute library root")
    paths: List[str] = Field(default_factory=list, description="Root-relative song paths in order")
    total_matched: int = Field(0, ge=0, description="Matches before truncation")
    candidates_scanned: int = Field(0, ge=0, description="Candidates produced by the walker")
    omitted: List[str] = Field(default_factory=list, description="Candidates that vanished during ordering")
    options: SelectionOptions = Field(default_factory=SelectionOptions, description="Ordering options")

    def is_empty(self) -> bool:
        """Check whether nothing matched."""
        return not self.paths

    def is_truncated(self) -> bool:
        """Check whether the limit cut matches off."""
        return len(self.paths) < self.total_matched - len(self.omitted)

    def absolute_paths(self) -> List[str]:
        """Join every selected path onto the library root."""
        root = Path(self.library_root)
        return [str(root / p) for p in self.paths]

    def to_dict(self) -> Dict[str, Any]:
        """Convert the selection to a dictionary representation."""
        data = self.model_dump()
        data['count'] = len(self.paths)
        return data

    def __len__(self) -> int:
        return len(self.paths)

    def __str__(self) -> str:
        parts = [f"Selected: {len(self.paths)}"]
        parts.append(f"Matched: {self.total_matched}")
        parts.append(f"Scanned: {self.candidates_scanned}")
        if self.omitted:
            parts.append(f"Omitted: {len(self.omitted)}")
        return " | ".join(parts)
