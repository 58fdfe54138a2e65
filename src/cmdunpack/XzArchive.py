"""Xz single-file engine."""

import logging
import lzma
from typing import BinaryIO

from .FileIO import DecodingStream
from .Platform import TargetPlatform
from .Protocols import ArchiveEngineProtocol

logger = logging.getLogger(__name__)


def open_xz(src: BinaryIO, source_id: str) -> DecodingStream:
    """Wrap `src` in an xz decompressor, failing early on a bad stream header."""
    archive = DecodingStream(lzma.LZMAFile(src, mode="rb", format=lzma.FORMAT_XZ), "xz", source_id)
    archive.check()
    return archive


class XzFileEngine(ArchiveEngineProtocol):
    """
    Engine for a bare xz file.

    The xz container stores no file name, so its content is taken to be
    the requested executable without any check.
    """

    def __init__(self, stream: BinaryIO, source_id: str) -> None:
        self.stream = stream
        self.source_id = source_id
        self.archive = open_xz(stream, source_id)

    def find_command(self, command: str, platform: TargetPlatform | None = None) -> BinaryIO:
        logger.warning(
            "Uncompressed file from %s is assumed to be the executable for %s", self.source_id, command
        )
        return self.archive
