"""
tunepick - Core Package

Picks songs from a music library by matching a small boolean query language
against their paths, then hands the selection to a media player.
"""

__version__ = "0.1.0"
