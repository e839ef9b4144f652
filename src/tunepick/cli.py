"""Click command-line interface for tunepick.

Parses options, configures logging, runs the selection engine and hands the
result to the media player or the downloader.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import List, Optional, Tuple

import click

from tunepick.config.parser import (
    ConfigurationError,
    check_config_file,
    create_config_template,
    load_config,
)
from tunepick.installer import AUDIO_FORMATS, InstallError, Installer, format_folder_name, library_folders
from tunepick.models.config import PickerConfig
from tunepick.models.selection import Selection, SelectionOptions
from tunepick.player import MediaPlayer, PlayerError
from tunepick.tags import TagError, TagStore
from tunepick.tools.selector import SongSelector
from tunepick.tools.tree_walker import TraversalError

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_PATH = Path.home() / '.config' / 'tunepick' / 'tunepick.yaml'


class CliState:
    """Options shared by every command; configuration is loaded on first use."""

    def __init__(self, config_path: Optional[Path], music_path: Optional[str],
                 dry_run: bool, verbose: bool):
        self.config_path = config_path
        self.music_path = music_path
        self.dry_run = dry_run
        self.verbose = verbose
        self._config: Optional[PickerConfig] = None

    @property
    def config(self) -> PickerConfig:
        if self._config is None:
            try:
                result = load_config(self.config_path)
            except ConfigurationError as e:
                raise click.ClickException(str(e)) from e

            config = result.config
            if self.music_path:
                config = config.with_library_root(self.music_path)

            _configure_logging('DEBUG' if self.verbose else config.log_level)
            for warning in result.warnings:
                logger.warning(warning)
            self._config = config
        return self._config


def _configure_logging(level: str) -> None:
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')


def _select(state: CliState, terms: Tuple[str, ...], limit: Optional[int], new: bool) -> Selection:
    selector = SongSelector.from_config(state.config)
    options = SelectionOptions(recency_order=new, limit=limit)
    try:
        return selector.select(list(terms), options)
    except TraversalError as e:
        raise click.ClickException(str(e)) from e


def _print_selection(selection: Selection) -> None:
    for path in selection.paths:
        click.secho(f"- {path}", fg='bright_red')


def _completion_library_root(ctx: click.Context) -> str:
    # The group callback has not run during completion, so ctx.obj is unset.
    params = ctx.find_root().params
    if params.get('music_path'):
        return params['music_path']
    try:
        return load_config(params.get('config_path')).config.library_root
    except ConfigurationError:
        return PickerConfig().library_root


def _complete_folder(ctx: click.Context, param: click.Parameter, incomplete: str) -> List[str]:
    """Complete FOLDER with the library's top-level folders."""
    try:
        folders = library_folders(_completion_library_root(ctx))
    except InstallError:
        return []
    wanted = format_folder_name(incomplete)
    return [folder for folder in folders if format_folder_name(folder).startswith(wanted)]


def _complete_format(ctx: click.Context, param: click.Parameter, incomplete: str) -> List[str]:
    return [fmt for fmt in AUDIO_FORMATS if fmt.startswith(incomplete.lower())]


@click.group(help="tunepick: pick songs from your music library by path and play them.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Path to YAML config file (searched for when omitted).",
)
@click.option("--music-path", "-m", type=click.Path(file_okay=False), default=None,
              help="Music library root, overrides the config.")
@click.option("--dry-run", "-d", is_flag=True, help="Print what would run without starting anything.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[Path], music_path: Optional[str],
        dry_run: bool, verbose: bool) -> None:
    """CLI entry group.

    Args:
        ctx: Click context.
        config_path: Path to YAML config file.
        music_path: Library root override.
        dry_run: Whether external programs are started.
        verbose: Whether to log at debug level.
    """
    ctx.obj = CliState(config_path, music_path, dry_run, verbose)


@cli.command("play")
@click.argument("terms", nargs=-1)
@click.option("--limit", "-l", type=click.IntRange(min=1), default=None, help="Play at most N songs.")
@click.option("--new", "-n", "new", is_flag=True, help="Play the most recently modified songs first.")
@click.pass_obj
def play_cmd(state: CliState, terms: Tuple[str, ...], limit: Optional[int], new: bool) -> None:
    """Play songs whose paths match TERMS.

    A term is an OR of comma separated words; '#' joins sections that must
    all match; a leading '!' excludes every song the term matches.
    """
    config = state.config
    player = MediaPlayer(config.player, dry_run=state.dry_run)

    try:
        if not terms and limit is None:
            click.echo("Playing all songs")
            player.play_library(config.library_root)
        else:
            selection = _select(state, terms, limit, new)

            if selection.is_empty():
                click.echo("Didn't match anything", err=True)
                click.get_current_context().exit(1)

            click.echo(f"Playing: [{len(selection)}]")
            _print_selection(selection)
            player.play(selection.absolute_paths(), ordered=new)
    except PlayerError as e:
        raise click.ClickException(str(e)) from e

    if state.dry_run:
        click.echo(" ".join(player.last_command))
    else:
        time.sleep(config.player.grace_seconds)


@cli.command("list")
@click.argument("terms", nargs=-1)
@click.option("--limit", "-l", type=click.IntRange(min=1), default=None, help="List at most N songs.")
@click.option("--new", "-n", "new", is_flag=True, help="List the most recently modified songs first.")
@click.pass_obj
def list_cmd(state: CliState, terms: Tuple[str, ...], limit: Optional[int], new: bool) -> None:
    """List songs whose paths match TERMS without playing them."""
    selection = _select(state, terms, limit, new)

    if selection.is_empty():
        click.echo("Didn't match anything", err=True)
        click.get_current_context().exit(1)

    click.echo(f"Matched: [{len(selection)}]")
    _print_selection(selection)


@cli.command("install")
@click.argument("video_id", metavar="ID")
@click.argument("folder", shell_complete=_complete_folder)
@click.option("--format", "-f", "fmt", default=None, shell_complete=_complete_format,
              help="Audio format to download (default from config).")
@click.option("--name", "-n", default=None, help="File name to install to, without extension.")
@click.option("--ytdl-args", "-y", default=None, help="Additional arguments for the downloader.")
@click.pass_obj
def install_cmd(state: CliState, video_id: str, folder: str, fmt: Optional[str],
                name: Optional[str], ytdl_args: Optional[str]) -> None:
    """Install a song from a YouTube ID or URL into FOLDER of the library."""
    config = state.config
    installer = Installer(config.library_root, config.downloader, dry_run=state.dry_run)

    try:
        cmd = installer.install(video_id, folder, name=name, fmt=fmt, extra_args=ytdl_args)
    except InstallError as e:
        raise click.ClickException(str(e)) from e

    if state.dry_run:
        click.echo(" ".join(cmd))


@cli.command("tags")
@click.argument("tag", required=False)
@click.option("--delete", "-d", "delete", is_flag=True, help="Delete TAG.")
@click.option("--editor", "-e", is_flag=True,
              help="Edit the tags file, or the songs of TAG one per line, with $EDITOR.")
@click.option("--add", "-a", "added", multiple=True, help="Append a song to TAG, creating it if needed.")
@click.pass_obj
def tags_cmd(state: CliState, tag: Optional[str], delete: bool, editor: bool, added: Tuple[str, ...]) -> None:
    """List tags, or show the songs of TAG.

    Tags are named song lists stored in tags.json at the library root.
    """
    if delete and editor:
        raise click.UsageError("--delete and --editor cannot be used together")
    if tag is None and (delete or added):
        raise click.UsageError("--delete and --add need a TAG")

    store = TagStore(state.config.library_root)

    try:
        if tag is None:
            if editor:
                if not store.path.exists():
                    store.save({})
                click.edit(filename=str(store.path))
            else:
                for name in store.names():
                    click.echo(name)
            return

        if editor:
            current = store.load().get(tag)
            text = click.edit("\n".join(current.songs) if current else "", extension=".txt")
            if text is None:
                click.echo("Tag left unchanged")
                return
            stored = store.change_songs(tag, text.split("\n"))
            click.echo(stored.summary())
        elif added:
            stored = store.change_songs(tag, added, append=True)
            click.echo(stored.summary())
        elif delete:
            store.delete(tag)
            click.echo(f'Deleted tag "{tag}"')
        else:
            stored = store.get(tag)
            click.echo(stored.summary())
            for song in stored.songs:
                click.echo(song)
    except TagError as e:
        raise click.ClickException(str(e)) from e


@cli.command("init-config")
@click.argument("path", type=click.Path(path_type=Path, dir_okay=False), default=DEFAULT_TEMPLATE_PATH)
@click.option("--force", is_flag=True, help="Overwrite an existing file.")
def init_config_cmd(path: Path, force: bool) -> None:
    """Write a commented configuration template to PATH."""
    if path.exists() and not force:
        raise click.ClickException(f"{path} already exists, use --force to overwrite it")

    try:
        create_config_template(path)
    except ConfigurationError as e:
        raise click.ClickException(str(e)) from e

    click.echo(f"Configuration template written to {path}")


@cli.command("check-config")
@click.argument("path", type=click.Path(path_type=Path, dir_okay=False), required=False)
@click.option("--strict", is_flag=True, help="Fail on warnings too.")
@click.pass_obj
def check_config_cmd(state: CliState, path: Optional[Path], strict: bool) -> None:
    """Check a configuration file (default: the --config file) and report problems."""
    path = path or state.config_path
    if path is None:
        raise click.UsageError("No configuration file given")

    result = check_config_file(path, strict_mode=strict)

    for error in result.errors:
        click.secho(f"error: {error}", fg='red', err=True)
    for warning in result.warnings:
        click.secho(f"warning: {warning}", fg='yellow', err=True)

    if not result.ok:
        click.get_current_context().exit(1)
    click.echo(f"{path}: OK")


def main() -> None:
    """Run the tunepick CLI.

    Entry point referenced by the console script in pyproject.toml.
    """
    cli()
