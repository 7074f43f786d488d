"""cdh command line: rank history, pick a directory, inspect config."""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, NoReturn

import typer
from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.table import Table

from cdh.config import (
    CdhConfig,
    PickerConfig,
    buildOpt,
    loadConfig,
    readConfigFile,
    writeConfigFile,
)
from cdh.models import Recommendation
from cdh.picker import pick
from cdh.search.fusion import nowSecs, recommendWithNow
from cdh.search.loaders import PathFilter, buildFrecencyFromRaw

logger = logging.getLogger("cdh")

EXIT_CANCELLED = 1
EXIT_NO_CANDIDATES = 2

_RANK_FORMATS = ("pick", "paths", "json", "table")
_DATA_FORMATS = ("human", "json")
_SUBCOMMANDS = {"rank", "top", "config", "--help", "--install-completion", "--show-completion"}
_NULL_WORDS = ("none", "null")


# ============================================================
# Output helpers
# ============================================================


def _checkFormat(format: str, allowed: tuple[str, ...]) -> None:
    if format not in allowed:
        raise typer.BadParameter(f"Invalid format {format!r}; choose {'|'.join(allowed)}")


def _setupLogging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(name)s | %(message)s",
    )


def _fail(format: str, message: str, exc: Exception | None = None) -> NoReturn:
    """Report an error as JSON on stdout or red text on stderr, then exit 1."""
    if format == "json":
        print(json.dumps({"ok": False, "error": message}))
    else:
        _err_console.print(f"[red]{message}[/red]")
    raise typer.Exit(1) from exc


def _loadConfigOrExit(format: str = "human") -> CdhConfig:
    try:
        return loadConfig()
    except ValidationError as e:
        _fail(format, f"Invalid configuration: {e}", e)


def _renderRanking(title: str, rows: list[tuple[str, float]]) -> None:
    t = Table(title=title, box=box.SIMPLE, padding=(0, 1))
    t.add_column("#", style="dim", justify="right")
    t.add_column("score", justify="right")
    t.add_column("path")
    for i, (path, score) in enumerate(rows):
        t.add_row(str(i), f"{score:.4f}", path)
    _console.print(t)


def _flatConfig(cfg: CdhConfig) -> dict[str, Any]:
    """Config as flat keys; picker settings appear as ``picker.<name>``."""
    data = cfg.model_dump()
    picker = data.pop("picker")
    data.update({f"picker.{k}": v for k, v in picker.items()})
    return data


def _defaultConfig() -> dict[str, Any]:
    # model_construct skips the env and file, leaving only field defaults
    return _flatConfig(CdhConfig.model_construct())


# ============================================================
# CLI (typer)
# ============================================================

_cli = typer.Typer(
    name="cdh",
    help="Rank and pick recently visited directories from your cd history.",
    no_args_is_help=False,
    rich_markup_mode="rich",
)
_config_cli = typer.Typer(help="Read/write [bold]~/.cdh/config.json[/bold].")
_cli.add_typer(_config_cli, name="config")

_console = Console()
_err_console = Console(stderr=True)


@_cli.command()
def rank(
    tokens: list[str] | None = typer.Argument(
        None, help="Keywords; a path must contain at least one (case-insensitive)."
    ),
    limit: int | None = typer.Option(None, "--limit", "-l", help="Max results (default 20)."),
    half_life: float | None = typer.Option(
        None, "--half-life", help="Frecency half-life in seconds (default 7 days)."
    ),
    threshold: float | None = typer.Option(
        None, "--threshold", help="Drop results whose fused score is below this."
    ),
    ignore_re: str | None = typer.Option(None, "--ignore-re", help="Regex of paths to ignore."),
    no_check_dir: bool = typer.Option(
        False, "--no-check-dir", help="Keep paths that no longer exist on this machine."
    ),
    now: int | None = typer.Option(None, "--now", help="Rank as of this epoch second."),
    format: str = typer.Option(
        "pick", "--format", "-f", help="Output format: pick|paths|json|table"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Rank directories and pick one (default when no subcommand given).

    Exit codes: 0 selected, 1 cancelled, 2 nothing matched.
    """
    _setupLogging(verbose)
    _checkFormat(format, _RANK_FORMATS)

    cfg = _loadConfigOrExit()
    try:
        opt = buildOpt(
            cfg,
            tokens=tuple(tokens or ()),
            limit=limit,
            half_life=half_life,
            threshold=threshold,
            ignore_re=ignore_re,
            check_dir=False if no_check_dir else None,
        )
        results = recommendWithNow(opt, now if now is not None else nowSecs())
    except (ValidationError, ValueError) as e:
        _err_console.print(f"[red]Invalid option:[/red] {e}")
        raise typer.Exit(EXIT_CANCELLED) from e

    if not results:
        if format == "json":
            print("[]")
        raise typer.Exit(EXIT_NO_CANDIDATES)

    if format == "pick":
        _pickAndPrint(results, cfg.picker)
    elif format == "paths":
        print("\n".join(r.path for r in results))
    elif format == "json":
        print(json.dumps([r.model_dump() for r in results]))
    else:
        _renderRanking("Recommendations", [(r.path, r.score) for r in results])


def _pickAndPrint(results: list[Recommendation], picker_cfg: PickerConfig) -> None:
    """Hand paths to the picker; print the choice without a trailing newline."""
    try:
        selected = pick([r.path for r in results], picker_cfg)
    except (OSError, RuntimeError) as e:
        logger.warning("Picker failed: %s", e)
        raise typer.Exit(EXIT_CANCELLED) from e
    if selected is None:
        raise typer.Exit(EXIT_CANCELLED)
    # no newline: shell command substitution friendly
    print(selected, end="", flush=True)


@_cli.command()
def top(
    n: int = typer.Option(20, "-n", help="How many entries to show."),
    prune: float | None = typer.Option(
        None, "--prune", help="Drop entries scoring below this first."
    ),
    cap: int | None = typer.Option(None, "--cap", help="Then keep only the best N entries."),
    now: int | None = typer.Option(None, "--now", help="Score as of this epoch second."),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging on stderr."),
) -> None:
    """Raw frecency ranking of the visit log, without the unique-list lane."""
    _setupLogging(verbose)
    _checkFormat(format, _DATA_FORMATS)
    cfg = _loadConfigOrExit(format)
    try:
        opt = buildOpt(cfg)
        index, _ = buildFrecencyFromRaw(
            opt.raw, PathFilter(ignore=opt.ignore, check_dir=opt.check_dir), opt.half_life
        )
    except (ValidationError, ValueError) as e:
        _err_console.print(f"[red]Invalid option:[/red] {e}")
        raise typer.Exit(1) from e

    at = now if now is not None else nowSecs()
    total = len(index)
    pruned = index.pruneBelow(at, prune) if prune is not None else 0
    capped = index.capLen(at, cap) if cap is not None else 0
    rows = index.topN(at, n)

    if format == "json":
        print(
            json.dumps(
                {
                    "total": total,
                    "pruned": pruned,
                    "capped": capped,
                    "entries": [{"path": p, "score": s} for p, s in rows],
                }
            )
        )
        return
    _renderRanking(f"Frecency (half-life {opt.half_life:g}s)", rows)
    if pruned or capped:
        _console.print(f"[dim]{total} entries, {pruned} pruned, {capped} capped[/dim]")


@_config_cli.command("list")
def config_list(
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Show every setting; values differing from the default are highlighted."""
    _checkFormat(format, _DATA_FORMATS)
    cfg = _loadConfigOrExit(format)

    if format == "json":
        print(json.dumps(cfg.model_dump()))
        return

    defaults = _defaultConfig()
    t = Table(title="cdh config", box=box.SIMPLE, padding=(0, 1))
    t.add_column("key", style="dim")
    t.add_column("value")
    for key, val in _flatConfig(cfg).items():
        shown = "[dim](not set)[/dim]" if val is None else str(val)
        if val != defaults[key]:
            shown = f"[yellow]{shown}[/yellow]"
        t.add_row(key, shown)
    _console.print(t)


@_config_cli.command("get")
def config_get(
    key: str = typer.Argument(help="Setting name, e.g. half_life or picker.shortcuts"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Get a single config value."""
    _checkFormat(format, _DATA_FORMATS)
    flat = _flatConfig(_loadConfigOrExit(format))
    if key not in flat:
        _fail(format, f"Unknown key: {key}")
    if format == "json":
        print(json.dumps({"key": key, "value": flat[key]}))
    else:
        _console.print(f"[bold]{key}[/bold] = {flat[key]!r}")


@_config_cli.command("set")
def config_set(
    key: str = typer.Argument(help="Setting name, e.g. half_life or picker.shortcuts"),
    value: str = typer.Argument(help="New value; 'none' clears an optional setting"),
    format: str = typer.Option("human", "--format", "-f", help="Output format: human|json"),
) -> None:
    """Validate a value against the schema and store it in ~/.cdh/config.json."""
    _checkFormat(format, _DATA_FORMATS)
    if key not in _defaultConfig():
        _fail(format, f"Unknown key: {key}")

    raw = readConfigFile()
    section, _, name = key.rpartition(".")
    target = raw
    if section:
        if not isinstance(raw.get(section), dict):
            raw[section] = {}
        target = raw[section]
    target[name] = None if value.lower() in _NULL_WORDS else value

    # pydantic does the coercion; the file keeps the typed result
    try:
        stored = _flatConfig(CdhConfig(**raw))[key]
    except ValidationError as e:
        _fail(format, f"Invalid value for {key}: {e}", e)
    target[name] = stored

    writeConfigFile(raw)
    if format == "json":
        print(json.dumps({"ok": True, "key": key, "value": stored}))
    else:
        _console.print(f"[green]Set[/green] {key} = {stored!r}")


def main(argv: list[str] | None = None) -> None:
    """Entry point; arguments not naming a subcommand go to ``rank``."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args or args[0] not in _SUBCOMMANDS:
        args.insert(0, "rank")
    _cli(args)


if __name__ == "__main__":
    main()
