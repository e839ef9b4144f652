"""
Named song lists ("tags") for tunepick.

Tags live in a single JSON file at the library root, mapping a tag name to
its songs and creation/modification times (Unix seconds).
"""

import json
import os
import time
from pathlib import Path
from typing import Dict, Iterable, List
import logging

from pydantic import BaseModel, Field, ValidationError


logger = logging.getLogger(__name__)

TAGS_FILE_NAME = 'tags.json'


class TagError(Exception):
    """Raised when the tags file cannot be used or a tag does not exist."""
    pass


class Tag(BaseModel):
    """
    A named list of songs.

    Attributes:
        songs: Song paths in the order they were added
        creation_time: When the tag was created
        modified_time: When the song list last changed
    """

    songs: List[str] = Field(default_factory=list, description="Song paths")
    creation_time: int = Field(0, description="Creation time, Unix seconds")
    modified_time: int = Field(0, description="Modification time, Unix seconds")

    def __len__(self) -> int:
        return len(self.songs)

    def summary(self) -> str:
        return (f"Amount: {len(self.songs)}, Creation: {format_timestamp(self.creation_time)}, "
                f"Modified: {format_timestamp(self.modified_time)}")


def format_timestamp(timestamp: int) -> str:
    return time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(timestamp))


def _non_empty(songs: Iterable[str]) -> List[str]:
    return [song for song in songs if song]


class TagStore:
    """Reads and rewrites the tags file of one library."""

    def __init__(self, library_root: str):
        self.library_root = library_root
        self.path = Path(library_root) / TAGS_FILE_NAME

    def load(self) -> Dict[str, Tag]:
        """
        Read every stored tag.

        A missing tags file means no tags.

        Raises:
            TagError: If the file cannot be read or does not hold tags
        """
        try:
            content = self.path.read_text(encoding='utf-8')
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise TagError(f"Cannot read tags file {self.path}: {e}") from e

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise TagError(f"Invalid JSON in tags file {self.path}: {e}") from e

        if not isinstance(data, dict):
            raise TagError(f"Tags file must contain a JSON object, got {type(data).__name__}")

        try:
            return {name: Tag.model_validate(tag) for name, tag in data.items()}
        except ValidationError as e:
            raise TagError(f"Invalid tag in {self.path}: {e}") from e

    def save(self, tags: Dict[str, Tag]) -> None:
        """Replace the tags file with the given tags."""
        payload = {name: tag.model_dump() for name, tag in tags.items()}
        temp_path = self.path.with_name(self.path.name + '.tmp')
        try:
            temp_path.write_text(json.dumps(payload, indent=2), encoding='utf-8')
            os.replace(temp_path, self.path)
        except OSError as e:
            raise TagError(f"Cannot write tags file {self.path}: {e}") from e
        logger.debug(f"Saved {len(tags)} tags to {self.path}")

    def names(self) -> List[str]:
        return sorted(self.load())

    def get(self, name: str) -> Tag:
        """
        Look up one tag.

        Raises:
            TagError: If the tag does not exist
        """
        tags = self.load()
        if name not in tags:
            raise TagError(f'Tag "{name}" does not exist')
        return tags[name]

    def delete(self, name: str) -> None:
        tags = self.load()
        if name not in tags:
            raise TagError(f'Tag "{name}" does not exist')
        del tags[name]
        self.save(tags)
        logger.info(f"Deleted tag {name}")

    def change_songs(self, name: str, songs: Iterable[str], append: bool = False) -> Tag:
        """
        Set or extend the songs of a tag, creating the tag when needed.

        Empty entries are dropped. Appending skips songs the tag already has.

        Args:
            name: Tag name
            songs: Song paths
            append: Whether to add to the current songs instead of replacing them

        Returns:
            The stored tag
        """
        tags = self.load()
        now = int(time.time())
        songs = _non_empty(songs)

        tag = tags.get(name)
        if tag is None:
            tag = Tag(songs=songs, creation_time=now)
        elif append:
            for song in songs:
                if song not in tag.songs:
                    tag.songs.append(song)
        else:
            tag.songs = songs

        tag.modified_time = now
        tags[name] = tag
        self.save(tags)
        return tag
