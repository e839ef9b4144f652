"""
Song installation for tunepick.

Downloads a single song with a youtube-dl compatible program into one of the
library's top-level folders. Folders are matched loosely: case is ignored and
any run of whitespace counts as a dash, so ``"hip hop"`` finds ``Hip-Hop``.
"""

import os
import re
import shlex
import subprocess
from typing import List, Optional
import logging

from .models.config import DownloaderConfig


logger = logging.getLogger(__name__)

_WHITESPACE = re.compile(r'\s+')

DEFAULT_OUTPUT_NAME = '%(title)s'

# Formats offered by shell completion; any format the downloader accepts works.
AUDIO_FORMATS = ('3gp', 'aac', 'flv', 'm4a', 'mp3', 'mp4', 'ogg', 'wav', 'webm')


class InstallError(Exception):
    """Raised when a song cannot be installed."""
    pass


def format_folder_name(folder: str) -> str:
    """Normalize a folder name for loose comparison."""
    return _WHITESPACE.sub('-', folder.lower())


def build_url(video_id: str, url_prefix: str = "https://www.youtube.com/watch?v=") -> str:
    """Turn a bare video id into a URL; full https URLs are kept as they are."""
    if video_id.startswith('https://'):
        return video_id
    return url_prefix + video_id


def library_folders(library_root: str) -> List[str]:
    """
    Names of the top-level folders of a library, sorted.

    Raises:
        InstallError: If the library root cannot be listed
    """
    try:
        entries = os.listdir(library_root)
    except OSError as e:
        raise InstallError(f"Cannot list library {library_root}: {e}") from e
    return sorted(e for e in entries if os.path.isdir(os.path.join(library_root, e)))


def resolve_folder(library_root: str, folder: str) -> str:
    """
    Find the library folder a user meant.

    Args:
        library_root: Absolute library root
        folder: Folder name as typed by the user

    Returns:
        The real name of the matching top-level folder

    Raises:
        InstallError: If no folder or more than one folder matches
    """
    wanted = format_folder_name(folder)
    matching = [entry for entry in library_folders(library_root) if format_folder_name(entry) == wanted]

    if len(matching) > 1:
        raise InstallError("folder matches more than one folder")
    if not matching:
        raise InstallError(f"invalid folder: {folder}")

    return matching[0]


class Installer:
    """Builds and runs downloader commands."""

    def __init__(self, library_root: str, config: Optional[DownloaderConfig] = None,
                 dry_run: bool = False):
        self.library_root = library_root
        self.config = config or DownloaderConfig()
        self.dry_run = dry_run

    def build_command(self, video_id: str, folder: str, name: Optional[str] = None,
                      fmt: Optional[str] = None, extra_args: Optional[str] = None) -> List[str]:
        """
        Build the downloader command line.

        Args:
            video_id: Video id or full https URL
            folder: Real name of the destination folder
            name: Output file name without extension (defaults to the title)
            fmt: Audio format (defaults to the configured one)
            extra_args: Additional arguments as one shell-quoted string

        Raises:
            InstallError: If extra_args cannot be split
        """
        output_template = os.path.join(
            self.library_root, folder, f"{name or DEFAULT_OUTPUT_NAME}.%(ext)s"
        )
        cmd = [self.config.command, '-f', fmt or self.config.format, '-o', output_template]

        extra = self.config.extra_args if extra_args is None else extra_args
        if extra:
            try:
                cmd.extend(shlex.split(extra))
            except ValueError as e:
                raise InstallError(f"Invalid downloader arguments '{extra}': {e}") from e

        cmd.extend(['--', build_url(video_id, self.config.url_prefix)])
        return cmd

    def install(self, video_id: str, folder: str, name: Optional[str] = None,
                fmt: Optional[str] = None, extra_args: Optional[str] = None) -> List[str]:
        """
        Download one song into a library folder.

        Returns:
            The command that was run (or would run in dry-run mode)

        Raises:
            InstallError: If the folder cannot be resolved or the download fails
        """
        selected = resolve_folder(self.library_root, folder)
        cmd = self.build_command(video_id, selected, name=name, fmt=fmt, extra_args=extra_args)

        if self.dry_run:
            logger.info(f"Dry run, not downloading: {shlex.join(cmd)}")
            return cmd

        logger.info(f"Downloading into {selected}")
        try:
            completed = subprocess.run(cmd)
        except OSError as e:
            raise InstallError(f"Cannot start downloader '{cmd[0]}': {e}") from e

        if completed.returncode != 0:
            raise InstallError(f"Downloader exited with status {completed.returncode}")

        return cmd
