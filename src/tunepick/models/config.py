"""
Configuration data models for tunepick.

This module defines the data structures for managing application configuration,
including the music library root, the leaf classification strategy used by the
tree walker, and the external player and downloader settings.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
from enum import Enum
import logging
from pydantic import BaseModel, Field, field_validator


DEFAULT_LIBRARY_ROOT = "~/Music"


class LeafStrategy(Enum):
    """Supported strategies for telling songs apart from folders."""
    DOTTED_NAME = "dotted-name"
    STAT = "stat"


class PlayerConfig(BaseModel):
    """
    Configuration for the external media player.

    Attributes:
        command: Player executable
        extra_args: Arguments placed before the song list
        ordered_flag: Flag appended when the selection order must be kept
        grace_seconds: Time to wait before exiting so the player can start
    """

    command: str = Field("vlc", min_length=1, description="Player executable")
    extra_args: List[str] = Field(default_factory=list, description="Arguments placed before the song list")
    ordered_flag: Optional[str] = Field("--no-random", description="Flag appended for recency ordered playback")
    grace_seconds: float = Field(1.2, ge=0, description="Seconds to wait for the detached player to start")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class DownloaderConfig(BaseModel):
    """
    Configuration for the external audio downloader.

    Attributes:
        command: Downloader executable (youtube-dl compatible)
        format: Audio format to request
        url_prefix: Prefix turning a bare video id into a URL
        extra_args: Additional arguments, shell-quoted in a single string
    """

    command: str = Field("youtube-dl", min_length=1, description="Downloader executable")
    format: str = Field("m4a", min_length=1, description="Audio format to request")
    url_prefix: str = Field("https://www.youtube.com/watch?v=", description="Prefix for bare video ids")
    extra_args: str = Field("", description="Additional downloader arguments")

    @field_validator('format')
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Normalize the format name."""
        return v.strip().lstrip('.').lower()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class LimitsConfig(BaseModel):
    """
    Configuration for resource limits.

    Attributes:
        max_concurrent: Worker threads used for modification time lookups
    """

    max_concurrent: int = Field(4, gt=0, le=64, description="Worker threads for stat calls")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump()


class PickerConfig(BaseModel):
    """
    Main configuration class for tunepick.

    Attributes:
        library_root: Root directory of the music library
        classifier: How the tree walker tells songs from folders
        log_level: Default logging level name
        player: External player configuration
        downloader: External downloader configuration
        limits: Resource limits
    """

    library_root: str = Field(DEFAULT_LIBRARY_ROOT, min_length=1, validate_default=True,
                              description="Root directory of the music library")
    classifier: LeafStrategy = Field(LeafStrategy.DOTTED_NAME, description="Leaf classification strategy")
    log_level: str = Field("WARNING", description="Default logging level")
    player: PlayerConfig = Field(default_factory=PlayerConfig, description="Player configuration")
    downloader: DownloaderConfig = Field(default_factory=DownloaderConfig, description="Downloader configuration")
    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="Resource limits")

    @field_validator('library_root')
    @classmethod
    def validate_library_root(cls, v: str) -> str:
        """Expand the user directory and make the root absolute."""
        if not v.strip():
            raise ValueError("Library root cannot be empty")
        return str(Path(v.strip()).expanduser().absolute())

    @field_validator('classifier', mode='before')
    @classmethod
    def validate_classifier(cls, v) -> LeafStrategy:
        """Validate and convert classifier to enum."""
        if isinstance(v, str):
            try:
                return LeafStrategy(v)
            except ValueError:
                raise ValueError(f"Invalid classifier: {v}")
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept only names the logging module knows."""
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v}")
        return level

    def get_library_path(self) -> Path:
        """Get the library root as a Path."""
        return Path(self.library_root)

    def with_library_root(self, root: str) -> 'PickerConfig':
        """Return a copy pointing at another library root."""
        data = self.model_dump()
        data['library_root'] = root
        return PickerConfig.model_validate(data)

    def validate_configuration(self) -> List[str]:
        """
        Check the configuration against the filesystem.

        Returns:
            List of warning messages
        """
        warnings = []
        root = self.get_library_path()

        if not root.exists():
            warnings.append(f"Library root does not exist: {root}")
        elif not root.is_dir():
            warnings.append(f"Library root is not a directory: {root}")

        if self.classifier == LeafStrategy.DOTTED_NAME and root.is_dir():
            try:
                dotted = [p.name for p in root.iterdir() if p.is_dir() and '.' in p.name]
            except OSError as e:
                warnings.append(f"Cannot list library root {root}: {e}")
                dotted = []
            if dotted:
                warnings.append(
                    f"Folders with a dot in their name are treated as songs and skipped: {', '.join(sorted(dotted))}"
                )

        return warnings

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary representation."""
        data = self.model_dump()
        data['classifier'] = self.classifier.value
        data['player'] = self.player.to_dict()
        data['downloader'] = self.downloader.to_dict()
        data['limits'] = self.limits.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'PickerConfig':
        """Create configuration from dictionary representation."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Library: {self.library_root}"]
        parts.append(f"Classifier: {self.classifier.value}")
        parts.append(f"Player: {self.player.command}")
        parts.append(f"Downloader: {self.downloader.command}")
        return " | ".join(parts)


KNOWN_SECTIONS = {'library_root', 'classifier', 'log_level', 'player', 'downloader', 'limits'}


def validate_config_dict(config_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Validate a configuration dictionary.

    Args:
        config_data: Dictionary containing configuration data

    Returns:
        Validated and normalized configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    unknown = sorted(set(config_data) - KNOWN_SECTIONS)
    if unknown:
        raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

    for section in ('player', 'downloader', 'limits'):
        value = config_data.get(section)
        if value is not None and not isinstance(value, dict):
            raise ValueError(f"Section '{section}' must be a mapping, got {type(value).__name__}")

    try:
        return PickerConfig.from_dict(config_data).to_dict()
    except Exception as e:
        raise ValueError(f"Configuration validation failed: {e}") from e
