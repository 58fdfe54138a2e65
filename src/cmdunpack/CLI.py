"""cmdunpack CLI entrypoint.

This module provides the `extract` click command which opens a release
asset (remote URL or local file), locates the executable for a command
inside it and writes that executable to disk while displaying progress.

Usage example (from shell):
    cmdunpack https://example.com/foo_1.2.0_linux_amd64.tar.gz foo -o bin/foo

Archive handling is delegated to `cmdunpack.ArchiveEngine.uncompress_command`;
this module only deals with opening the source, the user interface and
writing the result.
"""

import logging
import os
from pathlib import Path
from typing import BinaryIO

import click
import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn, DownloadColumn, TransferSpeedColumn

from .ArchiveEngine import uncompress_command
from .Errors import UncompressError
from .FileIO import CHUNK_SIZE, RemoteStream
from .Platform import TargetPlatform

# Single console shared by output and log records
console = Console()


def _setup_logging(verbose: bool) -> None:
    logger = logging.getLogger("cmdunpack")
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    if not logger.handlers:
        logger.addHandler(RichHandler(console=console, show_path=False))


def _open_source(source: str) -> BinaryIO:
    if source.startswith(("http://", "https://")):
        return RemoteStream(source)
    return open(source, "rb")


@click.command(context_settings=dict(help_option_names=["-h", "--help"]))
@click.argument("source", type=str)
@click.argument("command", type=str)
@click.option("--output", "-o",
              type=click.Path(file_okay=True, dir_okay=False, writable=True, path_type=Path),
              default=None,
              help="Where to write the executable (default: ./COMMAND)")
@click.option("--os", "target_os", type=str, default=None, help="Target OS, e.g. linux, darwin, windows")
@click.option("--arch", "target_arch", type=str, default=None, help="Target architecture, e.g. amd64, arm64")
@click.option("--verbose", "-v", is_flag=True, default=False, help="Enable debug logging")
def extract(source: str, command: str, output: Path | None, target_os: str | None,
            target_arch: str | None, verbose: bool):
    """Extract the executable for COMMAND from the release asset at SOURCE.

    SOURCE is an http(s) URL or a local path. Its suffix decides how it
    is unpacked (.zip, .tar.gz, .tgz, .gz, .gzip, .tar.xz, .xz); anything
    else is copied as is.

    Members named COMMAND, COMMAND_OS_ARCH or COMMAND-OS-ARCH (with .exe
    on windows) are accepted.
    """
    _setup_logging(verbose)

    current = TargetPlatform.current()
    target = TargetPlatform(target_os or current.os, target_arch or current.arch)
    if output is None:
        output = Path(command + (".exe" if target.is_windows else ""))

    try:
        with console.status(f"Opening {source}..."):
            src = _open_source(source)

        with src:
            executable = uncompress_command(src, source, command, target)
            output.parent.mkdir(parents=True, exist_ok=True)
            try:
                with (
                    Progress(
                        SpinnerColumn(),
                        TextColumn("[progress.description]{task.description}"),
                        DownloadColumn(),
                        TransferSpeedColumn(),
                        console=console,
                    ) as progress,
                    open(output, "wb") as target_file,
                ):
                    task = progress.add_task(f"Writing {output}", total=None)
                    while chunk := executable.read(CHUNK_SIZE):
                        target_file.write(chunk)
                        progress.update(task, advance=len(chunk))
            except (UncompressError, ConnectionError, httpx.HTTPError, OSError):
                # Don't leave a truncated executable behind.
                output.unlink(missing_ok=True)
                raise
    except (UncompressError, ConnectionError, httpx.HTTPError, OSError, ValueError) as e:
        console.print(f"[red]Error:[/red] {e}")
        raise click.exceptions.Exit(1) from e

    if os.name != "nt":
        output.chmod(0o755)
    console.print(f"Executable for {command} ({target}) written to {output}")
