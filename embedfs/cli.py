from __future__ import annotations

import fnmatch
import logging
import posixpath
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn, Optional

import typer

from . import __version__
from ._config import build_vfs, load_config
from ._vfs import VirtualFileSystem

app = typer.Typer(help="Inspect the mounts of an embedfs virtual filesystem (read-only).")

log = logging.getLogger(__name__)


@dataclass
class State:
    vfs: VirtualFileSystem


def _setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        handlers=[logging.StreamHandler()],
    )


def _fail(err: OSError) -> NoReturn:
    typer.echo(f"embedfs: {err.filename}: {err.strerror}", err=True)
    raise typer.Exit(code=1 if isinstance(err, FileNotFoundError) else 2)


@app.callback()
def _load(
    ctx: typer.Context,
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a mount configuration file (TOML or YAML). Overrides discovery.",
    ),
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging."),
) -> None:
    if ctx.invoked_subcommand == "version":
        return
    cfg = load_config(config)
    _setup_logging(debug or cfg.debug)
    try:
        vfs = build_vfs(cfg)
    except OSError as err:
        _fail(err)
    log.debug("loaded %d mount(s)", len(cfg.mounts))
    ctx.obj = State(vfs=vfs)


@app.command(name="version")
def version() -> None:
    """Print version information."""
    typer.echo(__version__)


@app.command(name="mounts")
def mounts(ctx: typer.Context) -> None:
    """List the registered mounts."""
    assert isinstance(ctx.obj, State)
    for m in ctx.obj.vfs.mounts:
        typer.echo(f"{m.virtual_root} -> {m.physical_root}")


@app.command(name="ls")
def ls(ctx: typer.Context, path: str = typer.Argument("/", help="Virtual directory.")) -> None:
    """List a directory in name order."""
    assert isinstance(ctx.obj, State)
    try:
        infos = ctx.obj.vfs.read_dir(path)
    except OSError as err:
        _fail(err)
    for info in infos:
        kind = "d" if info.is_dir else "-"
        gz = "z" if info.is_gzip() else " "
        typer.echo(f"{kind}{gz} {info.size:>10} {info.name}")


@app.command(name="cat")
def cat(ctx: typer.Context, path: str = typer.Argument(..., help="Virtual file.")) -> None:
    """Write a file's (decompressed) bytes to stdout."""
    assert isinstance(ctx.obj, State)
    try:
        data = ctx.obj.vfs.read_file(path)
    except OSError as err:
        _fail(err)
    sys.stdout.buffer.write(data)
    sys.stdout.buffer.flush()


@app.command(name="stat")
def stat(ctx: typer.Context, path: str = typer.Argument(..., help="Virtual path.")) -> None:
    """Print file metadata."""
    assert isinstance(ctx.obj, State)
    try:
        info = ctx.obj.vfs.stat(path)
    except OSError as err:
        _fail(err)
    typer.echo(str(info))


@app.command(name="find")
def find(
    ctx: typer.Context,
    root: str = typer.Argument(..., help="Virtual directory to walk."),
    pattern: str = typer.Argument("*", help="Base-name pattern (fnmatch syntax)."),
) -> None:
    """Walk ROOT and print every path whose base name matches PATTERN."""
    assert isinstance(ctx.obj, State)
    try:
        for dirpath, dirnames, filenames in ctx.obj.vfs.walk(root):
            for name in dirnames + filenames:
                if fnmatch.fnmatchcase(name, pattern):
                    typer.echo(posixpath.join(dirpath, name))
    except OSError as err:
        _fail(err)


def main() -> None:
    app()
