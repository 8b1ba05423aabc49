from __future__ import annotations

import logging
from pathlib import Path
import sys

import typer

from . import __version__
from .codec import dump_replay_file, load_replay_base64, load_replay_file
from .errors import ReplayError
from .timing import InputParseMode, infer_input_parse_mode
from .types import GameInputEvent, GameReplayData

app = typer.Typer(add_completion=False)


def _format_event(idx: int, event: GameInputEvent) -> str:
    return f"{idx:04d}  frame={int(event.frame):7d}  {event.kind.name.lower():7s}  {event.key.name.lower()}"


def format_replay(replay: GameReplayData, *, mode: InputParseMode | None = None) -> list[str]:
    meta = replay.metadata
    timing = mode or infer_input_parse_mode(meta.version)
    lines = [
        f"player={meta.player!r} mode={meta.mode} version={meta.version!r} date={meta.date!r} seed={meta.seed}",
        f"timing={timing.value if timing is not None else 'unknown'} inputs={len(replay.inputs)}",
    ]
    if meta.tas_used:
        lines.append("tas=yes")
    if meta.mods:
        lines.append("mods=" + ", ".join(f"{mod_id}:{value!r}" for mod_id, value in meta.mods))
    if meta.nonstandard:
        lines.append("extra keys: " + ", ".join(sorted(meta.nonstandard)))
    lines.extend(_format_event(idx, event) for idx, event in enumerate(replay.inputs))
    return lines


@app.callback()
def cli_root(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="enable debug logging"),
) -> None:
    """Parse and serialize Techmino replays."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command("repl")
def cmd_repl(
    mode: InputParseMode | None = typer.Option(None, help="input timing (default: infer from version)"),
) -> None:
    """Read exported replay strings from stdin, one per line, and print them."""
    typer.echo(f"techmino-replay v{__version__}", err=True)
    while True:
        typer.echo("Paste the game replay string below:", err=True)
        line = sys.stdin.readline()
        if not line:
            return
        if not line.strip():
            continue
        try:
            replay = load_replay_base64(line, mode)
        except ReplayError as exc:
            typer.echo(f"{type(exc).__name__}: {exc}")
            continue
        for text in format_replay(replay, mode=mode):
            typer.echo(text)


@app.command("show")
def cmd_show(
    replay_file: Path = typer.Argument(..., help="replay file (.rep, binary or base64)"),
    mode: InputParseMode | None = typer.Option(None, help="input timing (default: infer from version)"),
) -> None:
    """Print a replay's metadata and input events."""
    if not replay_file.is_file():
        typer.echo(f"replay file not found: {replay_file}", err=True)
        raise typer.Exit(code=1)
    try:
        replay = load_replay_file(replay_file, mode)
    except ReplayError as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    for text in format_replay(replay, mode=mode):
        typer.echo(text)


@app.command("convert")
def cmd_convert(
    src: Path = typer.Argument(..., help="input replay file (.rep, binary or base64)"),
    dest: Path = typer.Argument(..., help="output path"),
    as_base64: bool = typer.Option(False, "--base64/--binary", help="write an exported string instead of .rep bytes"),
    mode: InputParseMode | None = typer.Option(None, help="input timing (default: infer from version)"),
    sort: bool = typer.Option(False, help="sort inputs by frame before writing"),
) -> None:
    """Re-encode a replay as compressed bytes or a base64 string."""
    if not src.is_file():
        typer.echo(f"replay file not found: {src}", err=True)
        raise typer.Exit(code=1)
    try:
        replay = load_replay_file(src, mode)
        if sort:
            replay = replay.sort_inputs()
        dump_replay_file(dest, replay, mode, as_base64=as_base64)
    except ReplayError as exc:
        typer.echo(f"{type(exc).__name__}: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"wrote {len(replay.inputs)} inputs to {dest}")


def main() -> None:
    app()
