"""Command line interface for findex."""

from __future__ import annotations

import logging
import shutil
from datetime import datetime
from difflib import get_close_matches
from enum import Enum
from pathlib import Path
from typing import Sequence

import click
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text
from typer.core import TyperGroup

from . import __version__
from .api import FindexClient, FindexError
from .config import (
    load_config,
    normalize_log_level,
    set_auto_index,
    set_log_level,
    set_search_limit,
)
from . import config as config_module
from .models import RecentRoot, RootStatus
from .search import SearchResult
from .text import Messages, Styles
from .utils import format_path

console = Console()
_LOG_HANDLER_NAME = "findex-cli"


class DefaultSearchGroup(TyperGroup):
    """Treat unknown subcommands as search queries."""

    def resolve_command(
        self,
        ctx: click.Context,
        args: list[str],
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and not args[0].startswith("-"):
            token = args[0]
            if ctx.token_normalize_func is not None:
                token = ctx.token_normalize_func(token)
            if self.get_command(ctx, token) is None and not self._looks_like_typo(token):
                command = self.get_command(ctx, "search")
                if command is not None:
                    return "search", command, list(args)
        return super().resolve_command(ctx, args)

    def _looks_like_typo(self, token: str) -> bool:
        if not (getattr(self, "suggest_commands", True) and self.commands):
            return False
        matches = get_close_matches(token, list(self.commands.keys()), cutoff=0.8)
        return bool(matches)


app = typer.Typer(
    help=Messages.APP_HELP,
    no_args_is_help=True,
    context_settings={"help_option_names": ["-h", "--help"]},
    cls=DefaultSearchGroup,
)


class SearchOutputFormat(str, Enum):
    rich = "rich"
    porcelain = "porcelain"


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"findex v{__version__}")
        raise typer.Exit()


def _parse_boolean(value: str) -> bool:
    token = value.strip().lower()
    if token in {"1", "true", "t", "yes", "y", "on"}:
        return True
    if token in {"0", "false", "f", "no", "n", "off"}:
        return False
    raise ValueError(Messages.ERROR_BOOLEAN_INVALID.format(value=value))


def _configure_logging(level: str) -> None:
    package_logger = logging.getLogger("findex")
    for handler in list(package_logger.handlers):
        if handler.get_name() == _LOG_HANDLER_NAME:
            package_logger.removeHandler(handler)
    handler = RichHandler(
        console=Console(stderr=True),
        show_path=False,
        show_time=False,
    )
    handler.set_name(_LOG_HANDLER_NAME)
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, level, logging.WARNING))


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help=Messages.HELP_VERBOSE,
    ),
) -> None:
    """Global Typer callback for shared options."""
    level = "DEBUG" if verbose else load_config().log_level
    _configure_logging(level)


def _resolve_root(path: Path | None, client: FindexClient) -> Path:
    if path is not None:
        return path
    recent = client.registry.most_recent()
    if recent is not None and Path(recent.path).is_dir():
        return Path(recent.path)
    return Path.cwd()


def _activate(client: FindexClient, path: Path) -> RootStatus:
    try:
        return client.change_active_root(path)
    except FindexError as exc:
        raise typer.BadParameter(str(exc)) from exc


@app.command()
def search(
    query: str = typer.Argument(..., help=Messages.HELP_QUERY),
    path: Path | None = typer.Option(
        None,
        "--path",
        "-p",
        help=Messages.HELP_SEARCH_PATH,
    ),
    top: int | None = typer.Option(
        None,
        "--top",
        "-k",
        help=Messages.HELP_SEARCH_TOP,
    ),
    output_format: SearchOutputFormat = typer.Option(
        SearchOutputFormat.rich,
        "--format",
        help=Messages.HELP_SEARCH_FORMAT,
    ),
) -> None:
    """Fuzzy-search the file paths of a root directory."""
    config = load_config()
    limit = config.search_limit if top is None else top
    if limit < 0:
        raise typer.BadParameter(Messages.ERROR_TOP_NEGATIVE)

    client = FindexClient()
    status = _activate(client, _resolve_root(path, client))
    if status.indexed_at is None:
        if not config.auto_index:
            console.print(
                _styled(Messages.INFO_INDEX_MISSING.format(path=status.root), Styles.WARNING)
            )
            raise typer.Exit(code=1)
        if output_format == SearchOutputFormat.rich:
            console.print(
                _styled(Messages.INFO_INDEX_RUNNING.format(path=status.root), Styles.INFO)
            )
        client.rebuild_index(status.root)

    results = client.search(query, top=limit)
    if output_format == SearchOutputFormat.porcelain:
        _render_results_porcelain(results)
        return
    if not results:
        console.print(_styled(Messages.INFO_NO_RESULTS, Styles.WARNING))
        return
    _render_results(results)


@app.command()
def index(
    path: Path = typer.Option(
        Path.cwd(),
        "--path",
        "-p",
        help=Messages.HELP_INDEX_PATH,
    ),
) -> None:
    """Walk the given directory and rebuild its index."""
    client = FindexClient()
    try:
        directory = client.change_active_root(path).root
    except FindexError as exc:
        raise typer.BadParameter(str(exc)) from exc
    console.print(_styled(Messages.INFO_INDEX_RUNNING.format(path=directory), Styles.INFO))
    status = client.rebuild_index(directory)
    if status.file_count == 0:
        console.print(_styled(Messages.INFO_NO_FILES, Styles.WARNING))
        return
    console.print(
        _styled(
            Messages.INFO_INDEX_DONE.format(
                count=status.file_count,
                plural=_plural(status.file_count),
                path=status.root,
                timestamp=_format_timestamp(status.indexed_at),
            ),
            Styles.SUCCESS,
        )
    )


@app.command()
def use(
    path: Path = typer.Argument(..., help=Messages.HELP_USE_PATH),
) -> None:
    """Switch the active root, restoring its stored index when present."""
    client = FindexClient()
    status = _activate(client, path)
    console.print(
        _styled(
            Messages.INFO_ACTIVE_ROOT.format(
                path=status.root,
                count=status.file_count,
                plural=_plural(status.file_count),
                timestamp=_format_timestamp(status.indexed_at),
            ),
            Styles.SUCCESS,
        )
    )


@app.command()
def roots() -> None:
    """List recently used roots, most recent first."""
    client = FindexClient()
    entries = client.list_recent_roots()
    if not entries:
        console.print(_styled(Messages.INFO_ROOTS_EMPTY, Styles.INFO))
        return
    _render_roots(entries)


@app.command()
def get(
    rel_path: str = typer.Argument(..., help=Messages.HELP_GET_PATH),
    path: Path | None = typer.Option(
        None,
        "--path",
        "-p",
        help=Messages.HELP_GET_ROOT,
    ),
    output: Path = typer.Option(
        Path.cwd(),
        "--output",
        "-o",
        help=Messages.HELP_GET_OUTPUT,
    ),
) -> None:
    """Copy one file of the active root into a local directory."""
    client = FindexClient()
    status = _activate(client, _resolve_root(path, client))
    resolution = client.resolve_download_path(rel_path)
    if not resolution.ok or resolution.path is None:
        reason = resolution.reason.message if resolution.reason else Messages.REASON_NOT_FOUND
        console.print(
            _styled(
                Messages.ERROR_DOWNLOAD_REJECTED.format(path=rel_path, reason=reason),
                Styles.ERROR,
            )
        )
        raise typer.Exit(code=1)
    target_dir = output.expanduser()
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / resolution.path.name
        shutil.copy2(resolution.path, target)
    except OSError as exc:
        console.print(
            _styled(
                Messages.ERROR_READ_FAILED.format(path=rel_path, reason=exc.strerror or exc),
                Styles.ERROR,
            )
        )
        raise typer.Exit(code=1) from exc
    console.print(
        _styled(
            Messages.INFO_DOWNLOADED.format(
                source=format_path(resolution.path, status.root),
                target=target,
            ),
            Styles.SUCCESS,
        )
    )


@app.command()
def purge(
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help=Messages.HELP_PURGE_YES,
    ),
) -> None:
    """Delete every stored index snapshot."""
    if not yes and not typer.confirm(Messages.INFO_PURGE_CONFIRM):
        console.print(_styled(Messages.INFO_PURGE_ABORTED, Styles.INFO))
        raise typer.Exit(code=0)
    client = FindexClient()
    console.print(_styled(client.purge_all_indices(), Styles.SUCCESS))


@app.command()
def config(
    show: bool = typer.Option(
        False,
        "--show",
        help=Messages.HELP_SHOW_CONFIG,
    ),
    set_search_limit_value: int | None = typer.Option(
        None,
        "--set-search-limit",
        help=Messages.HELP_SET_SEARCH_LIMIT,
    ),
    set_auto_index_value: str | None = typer.Option(
        None,
        "--set-auto-index",
        help=Messages.HELP_SET_AUTO_INDEX,
    ),
    set_log_level_value: str | None = typer.Option(
        None,
        "--set-log-level",
        help=Messages.HELP_SET_LOG_LEVEL,
    ),
) -> None:
    """Manage findex configuration."""
    changed = False
    if set_search_limit_value is not None:
        if set_search_limit_value < 0:
            raise typer.BadParameter(Messages.ERROR_SEARCH_LIMIT_NEGATIVE)
        set_search_limit(set_search_limit_value)
        console.print(
            _styled(
                Messages.INFO_SEARCH_LIMIT_SET.format(value=set_search_limit_value),
                Styles.SUCCESS,
            )
        )
        changed = True
    if set_auto_index_value is not None:
        try:
            auto_index = _parse_boolean(set_auto_index_value)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        set_auto_index(auto_index)
        console.print(
            _styled(
                Messages.INFO_AUTO_INDEX_SET.format(value="on" if auto_index else "off"),
                Styles.SUCCESS,
            )
        )
        changed = True
    if set_log_level_value is not None:
        try:
            level = normalize_log_level(set_log_level_value)
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        set_log_level(level)
        console.print(_styled(Messages.INFO_LOG_LEVEL_SET.format(value=level), Styles.SUCCESS))
        changed = True

    if show or not changed:
        cfg = load_config()
        console.print(
            _styled(
                Messages.INFO_CONFIG_SUMMARY.format(
                    limit=cfg.search_limit or "all",
                    auto_index="on" if cfg.auto_index else "off",
                    log_level=cfg.log_level,
                    path=config_module.CONFIG_FILE,
                ),
                Styles.INFO,
            )
        )


def _render_results(results: Sequence[SearchResult]) -> None:
    table = Table(
        title=Messages.TABLE_TITLE,
        show_header=True,
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_SCORE, justify="right")
    table.add_column(Messages.TABLE_HEADER_PATH, overflow="fold")
    for idx, result in enumerate(results, start=1):
        table.add_row(
            str(idx),
            str(result.score),
            _highlight(result.path, result.positions),
        )
    console.print(table)


def _render_results_porcelain(results: Sequence[SearchResult]) -> None:
    for result in results:
        typer.echo(f"{result.score}\t{_escape_porcelain_field(result.path)}")


def _render_roots(entries: Sequence[RecentRoot]) -> None:
    table = Table(
        title=Messages.TABLE_ROOTS_TITLE,
        show_header=True,
        header_style=Styles.TABLE_HEADER,
    )
    table.add_column(Messages.TABLE_HEADER_INDEX, justify="right")
    table.add_column(Messages.TABLE_HEADER_ROOT, overflow="fold")
    table.add_column(Messages.TABLE_HEADER_FILES, justify="right")
    table.add_column(Messages.TABLE_HEADER_LAST_INDEXED)
    for idx, entry in enumerate(entries, start=1):
        table.add_row(
            str(idx),
            entry.path,
            str(entry.file_count),
            _format_timestamp(entry.last_indexed),
        )
    console.print(table)


def _highlight(path: str, positions: Sequence[int]) -> Text:
    text = Text(path)
    for position in positions:
        text.stylize(Styles.HIGHLIGHT, position, position + 1)
    return text


def _escape_porcelain_field(value: str) -> str:
    return (
        value.replace("\\", "\\\\")
        .replace("\t", "\\t")
        .replace("\n", "\\n")
        .replace("\r", "\\r")
    )


def _format_timestamp(value: datetime | str | None) -> str:
    if value is None:
        return Messages.INFO_NEVER_INDEXED
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    return value.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def _styled(text: str, style: str) -> str:
    return f"[{style}]{text}[/{style}]"


def run(argv: list[str] | None = None) -> None:
    """Entry point wrapper allowing optional argument override."""
    if argv is None:
        app()
    else:
        app(args=list(argv))
