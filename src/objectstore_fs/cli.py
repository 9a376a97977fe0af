"""
objectstore-fs CLI

Filesystem-style commands against a bucket and root prefix:
- ls, stat, exists: inspect files and directories
- cat, get: read files
- put, mkdir: write files and directory markers
- rm, rmdir, mv, cp: delete, rename and copy
- visibility: read or change public/private visibility
"""
from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Dict, Optional

import typer

from .cli_context import CLIContext
from .models import Entry, Visibility
from .operations import run_and_exit
from .operations.printers import (
    print_contents, print_entry, print_listing, print_outcome, print_written
)
from .storage.errors import ObjectNotFound

app = typer.Typer(name="objectstore-fs", help="Filesystem commands for S3-compatible object stores")

logger = logging.getLogger(__name__)

_CONFIG_OPTION = typer.Option(None, "--config", help="YAML settings file (default: OBJECTSTORE_FS_* environment)")
_LOCATION_OPTION = typer.Option(None, "--location", help="s3://bucket[/prefix] overriding the configured location")
_VERBOSE_OPTION = typer.Option(False, "--verbose", help="Show detailed output and debug logging")


def _context(config: Optional[Path], location: Optional[str], verbose: bool) -> CLIContext:
    """
    Configure logging and resolve settings for one command.

    Args:
        config: YAML settings file
        location: s3:// location override
        verbose: Enable debug logging

    Returns:
        CLIContext for the command
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return CLIContext.load(config=config, location=location)


def _require(entry: Optional[Entry], path: str) -> Entry:
    if entry is None:
        raise ObjectNotFound(f"No such file: {path}", key=path)
    return entry


@app.command("ls")
def ls(
    directory: str = typer.Argument("", help="Directory to list (default: root)"),
    recursive: bool = typer.Option(False, "--recursive", "-r", help="List nested entries too"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """List directory contents."""

    def _ls() -> None:
        context = _context(config, location, verbose)
        entries = context.adapter.list_contents(directory, recursive=recursive)
        print_listing(entries, title=directory or None)

    run_and_exit(_ls)


@app.command("cat")
def cat(
    path: str = typer.Argument(..., help="File to print"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Print a file's contents to stdout."""

    def _cat() -> None:
        context = _context(config, location, verbose)
        entry = _require(context.adapter.read(path), path)
        print_contents(entry.contents or b"")

    run_and_exit(_cat)


@app.command("put")
def put(
    local_file: Path = typer.Argument(..., help="Local file to upload"),
    path: str = typer.Argument(..., help="Destination path"),
    content_type: Optional[str] = typer.Option(None, "--content-type", help="Override the detected mimetype"),
    public: bool = typer.Option(False, "--public", help="Make the file publicly readable"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Upload a local file."""

    def _put() -> None:
        context = _context(config, location, verbose)
        write_config: Dict[str, str] = {}
        if content_type:
            write_config["mimetype"] = content_type
        if public:
            write_config["visibility"] = Visibility.PUBLIC.value

        with open(local_file, "rb") as f:
            entry = context.adapter.write_stream(path, f, write_config)
        print_written(_require(entry, path))

    run_and_exit(_put)


@app.command("get")
def get(
    path: str = typer.Argument(..., help="File to download"),
    local_file: Path = typer.Argument(..., help="Local destination"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Download a file."""

    def _get() -> None:
        context = _context(config, location, verbose)
        entry = _require(context.adapter.read_stream(path), path)
        local_file.parent.mkdir(parents=True, exist_ok=True)
        with open(local_file, "wb") as f:
            shutil.copyfileobj(entry.stream, f)
        logger.debug(f"Downloaded {path} to {local_file}")
        typer.echo(f"Downloaded {path} to {local_file}")

    run_and_exit(_get)


@app.command("rm")
def rm(
    path: str = typer.Argument(..., help="File to delete"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Delete a file."""

    def _rm() -> None:
        context = _context(config, location, verbose)
        ok = context.adapter.delete(path)
        print_outcome("Deleted", path, ok)
        if not ok:
            raise typer.Exit(code=1)

    run_and_exit(_rm)


@app.command("rmdir")
def rmdir(
    directory: str = typer.Argument(..., help="Directory to delete with everything below it"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Delete a directory recursively."""

    def _rmdir() -> None:
        context = _context(config, location, verbose)
        ok = context.adapter.delete_dir(directory)
        print_outcome("Deleted directory", directory, ok)
        if not ok:
            raise typer.Exit(code=1)

    run_and_exit(_rmdir)


@app.command("mkdir")
def mkdir(
    directory: str = typer.Argument(..., help="Directory to create"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Create a directory marker."""

    def _mkdir() -> None:
        context = _context(config, location, verbose)
        entry = context.adapter.create_dir(directory)
        if entry is None:
            raise ObjectNotFound(f"Could not create directory: {directory}", key=directory)
        typer.echo(f"Created {entry.path}/")

    run_and_exit(_mkdir)


@app.command("mv")
def mv(
    source: str = typer.Argument(..., help="File to move"),
    destination: str = typer.Argument(..., help="New path"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Rename a file (copy, then delete the source)."""

    def _mv() -> None:
        context = _context(config, location, verbose)
        ok = context.adapter.rename(source, destination)
        print_outcome("Moved", f"{source} -> {destination}", ok)
        if not ok:
            raise typer.Exit(code=1)

    run_and_exit(_mv)


@app.command("cp")
def cp(
    source: str = typer.Argument(..., help="File to copy"),
    destination: str = typer.Argument(..., help="Copy destination"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Copy a file, keeping its visibility."""

    def _cp() -> None:
        context = _context(config, location, verbose)
        ok = context.adapter.copy(source, destination)
        print_outcome("Copied", f"{source} -> {destination}", ok)
        if not ok:
            raise typer.Exit(code=1)

    run_and_exit(_cp)


@app.command("stat")
def stat(
    path: str = typer.Argument(..., help="File to inspect"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Show a file's metadata."""

    def _stat() -> None:
        context = _context(config, location, verbose)
        entry = _require(context.adapter.get_metadata(path), path)
        print_entry(entry, verbose=verbose)

    run_and_exit(_stat)


@app.command("exists")
def exists(
    path: str = typer.Argument(..., help="File to check"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Check whether a file exists (exit code 0 if it does, 1 if not)."""

    def _exists() -> None:
        context = _context(config, location, verbose)
        found = context.adapter.has(path)
        typer.echo("yes" if found else "no")
        if not found:
            raise typer.Exit(code=1)

    run_and_exit(_exists)


@app.command("visibility")
def visibility(
    path: str = typer.Argument(..., help="File to inspect or change"),
    set_to: Optional[Visibility] = typer.Option(None, "--set", help="New visibility"),
    config: Optional[Path] = _CONFIG_OPTION,
    location: Optional[str] = _LOCATION_OPTION,
    verbose: bool = _VERBOSE_OPTION,
) -> None:
    """Show or change a file's visibility."""

    def _visibility() -> None:
        context = _context(config, location, verbose)
        if set_to is None:
            entry = context.adapter.get_visibility(path)
        else:
            entry = context.adapter.set_visibility(path, set_to)
        entry = _require(entry, path)
        typer.echo(f"{path}: {entry.visibility.value}")

    run_and_exit(_visibility)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
