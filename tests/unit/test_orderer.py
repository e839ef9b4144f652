"""
Unit tests for the selection orderer.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch
import pytest

from tunepick.models.selection import SelectionOptions
from tunepick.tools.orderer import OrderResult, SelectionOrderer, StatRaceError


class TestSelectionOrderer:
    """Test cases for the SelectionOrderer class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self.orderer = SelectionOrderer(self.temp_dir, max_workers=2)

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _create_song(self, rel_path, mtime):
        full_path = self.test_root / rel_path
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_text(rel_path)
        os.utime(full_path, (mtime, mtime))

    def test_no_options_is_noop(self):
        """Test that input passes through unchanged."""
        candidates = ["b.mp3", "a.mp3", "c.mp3"]

        result = self.orderer.order(candidates)

        assert isinstance(result, OrderResult)
        assert result.paths == candidates
        assert result.omitted == []

    def test_noop_does_not_stat(self):
        """Test that files are not touched without recency ordering."""
        result = self.orderer.order(["missing.mp3"], SelectionOptions())

        assert result.paths == ["missing.mp3"]

    def test_recency_order(self):
        """Test newest-first ordering."""
        self._create_song("A.mp3", 3000)
        self._create_song("B.mp3", 1000)
        self._create_song("C.mp3", 2000)

        result = self.orderer.order(["A.mp3", "B.mp3", "C.mp3"], SelectionOptions(recency_order=True))

        assert result.paths == ["A.mp3", "C.mp3", "B.mp3"]

    def test_recency_and_limit(self):
        """Test that the limit applies after sorting."""
        self._create_song("A.mp3", 3000)
        self._create_song("B.mp3", 1000)
        self._create_song("C.mp3", 2000)

        options = SelectionOptions(recency_order=True, limit=2)
        result = self.orderer.order(["A.mp3", "B.mp3", "C.mp3"], options)

        assert result.paths == ["A.mp3", "C.mp3"]

    def test_limit_alone_keeps_prefix(self):
        """Test that a limit without ordering keeps the first songs."""
        result = self.orderer.order(["x.mp3", "y.mp3", "z.mp3"], SelectionOptions(limit=2))

        assert result.paths == ["x.mp3", "y.mp3"]

    def test_limit_larger_than_input(self):
        """Test that a large limit leaves the list alone."""
        result = self.orderer.order(["x.mp3"], SelectionOptions(limit=5))

        assert result.paths == ["x.mp3"]

    def test_ties_keep_traversal_order(self):
        """Test that equal times keep their original order."""
        for name in ["one.mp3", "two.mp3", "three.mp3"]:
            self._create_song(name, 5000)

        result = self.orderer.order(
            ["two.mp3", "three.mp3", "one.mp3"], SelectionOptions(recency_order=True)
        )

        assert result.paths == ["two.mp3", "three.mp3", "one.mp3"]

    def test_vanished_song_is_omitted(self):
        """Test that a song deleted before stat is skipped, not fatal."""
        self._create_song("Rock/keep.mp3", 2000)
        self._create_song("Rock/gone.mp3", 3000)
        os.remove(self.test_root / "Rock" / "gone.mp3")

        result = self.orderer.order(
            ["Rock/gone.mp3", "Rock/keep.mp3"], SelectionOptions(recency_order=True)
        )

        assert result.paths == ["Rock/keep.mp3"]
        assert result.omitted == ["Rock/gone.mp3"]

    def test_stat_mtime_raises_stat_race_error(self):
        """Test the per-song error raised for a missing file."""
        with pytest.raises(StatRaceError) as exc_info:
            self.orderer._stat_mtime("nope.mp3")

        assert exc_info.value.path == "nope.mp3"

    def test_stats_resolved_against_library_root(self):
        """Test that stat calls join paths onto the library root."""
        self._create_song("Jazz/x.mp3", 1000)

        with patch("tunepick.tools.orderer.os.stat", wraps=os.stat) as stat:
            self.orderer.order(["Jazz/x.mp3"], SelectionOptions(recency_order=True))

        stat.assert_called_once_with(os.path.join(self.temp_dir, "Jazz/x.mp3"))

    def test_empty_input(self):
        """Test ordering an empty list."""
        result = self.orderer.order([], SelectionOptions(recency_order=True, limit=3))

        assert result.paths == []
        assert result.omitted == []
