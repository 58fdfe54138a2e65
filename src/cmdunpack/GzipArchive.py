"""Gzip single-file engine.

The stdlib `gzip` module skips over the header's original file name
(FNAME) without exposing it, so the header is parsed here first and
then replayed into `gzip.GzipFile`, which does the actual inflating and
CRC checking.
"""

import gzip
import logging
import struct
from typing import BinaryIO

from .Errors import DecodeError, NameMismatchError
from .FileIO import PrefixedStream, DecodingStream
from .Platform import TargetPlatform, match_executable_name
from .Protocols import ArchiveEngineProtocol

logger = logging.getLogger(__name__)

GZIP_MAGIC = b"\x1f\x8b"
CM_DEFLATE = 8

# Header flag bits (RFC 1952)
FHCRC = 0x02
FEXTRA = 0x04
FNAME = 0x08
FCOMMENT = 0x10


class _HeaderReader:
    """Reads header fields while keeping a copy of every byte consumed."""

    def __init__(self, src: BinaryIO) -> None:
        self.src = src
        self.consumed = bytearray()

    def read_exact(self, size: int) -> bytes:
        data = b""
        while len(data) < size:
            chunk = self.src.read(size - len(data))
            if not chunk:
                raise EOFError("gzip header is truncated")
            data += chunk
        self.consumed += data
        return data

    def read_cstring(self) -> bytes:
        value = bytearray()
        while (byte := self.read_exact(1)) != b"\x00":
            value += byte
        return bytes(value)


def read_gzip_header(src: BinaryIO) -> tuple[str, bytes]:
    """Parse a gzip member header from `src`.

    Args:
        src (BinaryIO): Stream positioned at the start of a gzip member.

    Returns:
        tuple[str, bytes]: The stored original file name ('' when the
        header has none) and the raw header bytes that were consumed.

    Raises:
        gzip.BadGzipFile: On a wrong magic number or compression method.
        EOFError: If the stream ends inside the header.
    """
    reader = _HeaderReader(src)
    magic, method, flags = struct.unpack("<2sBB", reader.read_exact(4))
    if magic != GZIP_MAGIC:
        raise gzip.BadGzipFile(f"Not a gzipped file ({magic!r})")
    if method != CM_DEFLATE:
        raise gzip.BadGzipFile(f"Unknown compression method {method}")
    reader.read_exact(6)  # mtime, xfl, os

    if flags & FEXTRA:
        extra_len, = struct.unpack("<H", reader.read_exact(2))
        reader.read_exact(extra_len)
    name = ""
    if flags & FNAME:
        name = reader.read_cstring().decode("latin-1")
    if flags & FCOMMENT:
        reader.read_cstring()
    if flags & FHCRC:
        reader.read_exact(2)
    return name, bytes(reader.consumed)


def open_gzip(src: BinaryIO, source_id: str) -> tuple[str, DecodingStream]:
    """Validate the gzip header of `src` and return (name, inflating stream)."""
    try:
        name, header = read_gzip_header(src)
    except (OSError, EOFError) as e:
        raise DecodeError("gzip", source_id, e) from e
    archive = gzip.GzipFile(fileobj=PrefixedStream(header, src), mode="rb")
    return name, DecodingStream(archive, "gzip", source_id)


class GzipFileEngine(ArchiveEngineProtocol):
    """
    Engine for a bare gzip file holding exactly one executable.

    Attributes:
        stream (BinaryIO): The compressed source stream.
        source_id (str): Identifier of the source, used in errors.
        name (str): Original file name stored in the gzip header.
        archive (DecodingStream): Inflated content.
    """

    def __init__(self, stream: BinaryIO, source_id: str) -> None:
        self.stream = stream
        self.source_id = source_id
        self.name, self.archive = open_gzip(stream, source_id)

    def find_command(self, command: str, platform: TargetPlatform | None = None) -> BinaryIO:
        # A gzip file has one candidate only; there is nothing to scan on to.
        if not match_executable_name(command, self.name, platform):
            raise NameMismatchError(self.name, command, self.source_id)
        logger.info("Executable file %s was found in gzip file", self.name)
        return self.archive
