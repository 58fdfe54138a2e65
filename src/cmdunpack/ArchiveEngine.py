"""Suffix-based format dispatch.

The archive or compression format is taken from the source identifier's
suffix only; the content is never sniffed. `PIPELINES` lists the known
formats in the order they are tried, most specific suffix first, so
``.tar.gz`` is claimed before the bare ``.gz`` rule can see it.
"""

import logging
from dataclasses import dataclass
from functools import partial
from typing import BinaryIO, Callable

from .GzipArchive import GzipFileEngine
from .Platform import TargetPlatform
from .Protocols import ArchiveEngineProtocol
from .TarArchive import TarArchiveEngine
from .XzArchive import XzFileEngine
from .ZipArchive import ZipArchiveEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Pipeline:
    """A decoding pipeline and the suffixes that select it.

    Attributes:
        name (str): Short format name used in log messages.
        suffixes (tuple[str, ...]): Case-sensitive suffixes that select this pipeline.
        engine (Callable): Factory ``(stream, source_id) -> ArchiveEngineProtocol``.
    """
    name: str
    suffixes: tuple[str, ...]
    engine: Callable[[BinaryIO, str], ArchiveEngineProtocol]

    def matches(self, source_id: str) -> bool:
        return source_id.endswith(self.suffixes)


PIPELINES: tuple[Pipeline, ...] = (
    Pipeline("zip", (".zip",), ZipArchiveEngine),
    Pipeline("tar.gz", (".tar.gz", ".tgz"), partial(TarArchiveEngine, compression="gz")),
    Pipeline("gzip", (".gzip", ".gz"), GzipFileEngine),
    Pipeline("tar.xz", (".tar.xz",), partial(TarArchiveEngine, compression="xz")),
    Pipeline("xz", (".xz",), XzFileEngine),
)


def select_pipeline(source_id: str) -> Pipeline | None:
    """Return the first pipeline claiming `source_id`, or None if it needs no uncompression."""
    for pipeline in PIPELINES:
        if pipeline.matches(source_id):
            return pipeline
    return None


def get_extractor(stream: BinaryIO, source_id: str) -> ArchiveEngineProtocol | None:
    """Build the engine for `source_id`, parsing the format's headers from `stream`.

    Returns:
        ArchiveEngineProtocol | None: The engine, or None when the source is
        not compressed and `stream` already is the executable.

    Raises:
        DecodeError: If the format's headers are malformed.
    """
    pipeline = select_pipeline(source_id)
    if pipeline is None:
        return None
    logger.info("Uncompressing %s file %s", pipeline.name, source_id)
    return pipeline.engine(stream, source_id)


def uncompress_command(
    src: BinaryIO, source_id: str, command: str, platform: TargetPlatform | None = None
) -> BinaryIO:
    """Return a stream over the executable for `command` contained in `src`.

    Args:
        src (BinaryIO): Open, unconsumed stream of the downloaded asset.
        source_id (str): Where `src` came from, usually the asset URL. Only
            its suffix is looked at, to choose among ``.zip``, ``.tar.gz``,
            ``.tgz``, ``.gz``, ``.gzip``, ``.tar.xz`` and ``.xz``. Any other
            suffix means `src` is returned untouched.
        command (str): Bare name of the executable to look for.
        platform (TargetPlatform | None): Platform whose qualified executable
            names (``cmd_os_arch``, ``cmd-os-arch``) are accepted too.
            Defaults to the running platform.

    Returns:
        BinaryIO: Stream positioned at the first matching member's
        uncompressed bytes. Members after it are never read; zip sources
        are read completely into memory first.

    Raises:
        ValueError: If `command` is empty.
        DecodeError: If a compression or container layer is corrupt.
        CommandNotFoundError: If no member denotes `command`.
        NameMismatchError: If a gzip file's stored name does not denote `command`.
    """
    if not command:
        raise ValueError("command name must not be empty")

    extractor = get_extractor(src, source_id)
    if extractor is None:
        logger.info("Uncompression is not needed for %s", source_id)
        return src
    return extractor.find_command(command, platform)
