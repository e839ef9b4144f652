"""
Media player launching for tunepick.

The player is an external program started detached from tunepick, so it keeps
playing after tunepick exits.
"""

import subprocess
from typing import List, Optional, Sequence
import logging

from .models.config import PlayerConfig


logger = logging.getLogger(__name__)


class PlayerError(Exception):
    """Raised when the media player cannot be started."""
    pass


class MediaPlayer:
    """Builds player command lines and launches the player."""

    def __init__(self, config: Optional[PlayerConfig] = None, dry_run: bool = False):
        """
        Initialize the player launcher.

        Args:
            config: Player configuration
            dry_run: If True, log commands instead of running them
        """
        self.config = config or PlayerConfig()
        self.dry_run = dry_run
        self.last_command: Optional[List[str]] = None

    def build_command(self, paths: Sequence[str], ordered: bool = False) -> List[str]:
        """
        Build the command that plays a list of songs.

        Args:
            paths: Absolute song paths in playback order
            ordered: Whether the player must keep the given order
        """
        cmd = [self.config.command, *self.config.extra_args, *paths]
        if ordered and self.config.ordered_flag:
            cmd.append(self.config.ordered_flag)
        return cmd

    def build_library_command(self, library_root: str) -> List[str]:
        """Build the command that plays a whole library folder."""
        return [self.config.command, *self.config.extra_args, '--recursive=expand', library_root]

    def play(self, paths: Sequence[str], ordered: bool = False) -> Optional[subprocess.Popen]:
        """Start the player on a list of songs; see build_command."""
        return self.launch(self.build_command(paths, ordered))

    def play_library(self, library_root: str) -> Optional[subprocess.Popen]:
        """Start the player on every song below library_root, without walking it here."""
        return self.launch(self.build_library_command(library_root))

    def launch(self, cmd: List[str]) -> Optional[subprocess.Popen]:
        """
        Start the player detached from this process.

        The command is kept in last_command, also in dry-run mode.

        Args:
            cmd: Full command line

        Returns:
            The started process, or None in dry-run mode

        Raises:
            PlayerError: If the player executable cannot be started
        """
        self.last_command = cmd
        if self.dry_run:
            logger.info(f"Dry run, not starting player: {' '.join(cmd)}")
            return None

        logger.debug(f"Starting player: {cmd[0]} with {len(cmd) - 1} arguments")
        try:
            return subprocess.Popen(
                cmd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as e:
            raise PlayerError(f"Cannot start player '{cmd[0]}': {e}") from e
