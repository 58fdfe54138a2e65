"""Tar archive engine.

The tar is read in stream mode (``r|``) so members are visited strictly
in order as the compressed bytes arrive; nothing is seeked and nothing
after the matching member is ever read.
"""

import logging
import posixpath
import tarfile
from typing import BinaryIO, Callable

from .Errors import CommandNotFoundError, DecodeError
from .FileIO import DecodingStream, PrefixedStream
from .GzipArchive import open_gzip
from .Platform import TargetPlatform, match_executable_name
from .Protocols import ArchiveEngineProtocol
from .XzArchive import open_xz

logger = logging.getLogger(__name__)

# compression name -> opener returning the decompressed stream
TAR_COMPRESSION_TYPES: dict[str, Callable[[BinaryIO, str], BinaryIO]] = {
    "gz": lambda src, source_id: open_gzip(src, source_id)[1],
    "xz": open_xz,
}


class TarArchiveEngine(ArchiveEngineProtocol):
    """
    Engine for compressed tar archives using the stdlib tarfile module.

    Attributes:
        stream (BinaryIO): The compressed source stream.
        source_id (str): Identifier of the source, used in errors.
        compression (str): ``gz`` or ``xz``.
        archive (tarfile.TarFile | None): Stream-mode TarFile over the decompressed
            data, None when that data is empty.
    """

    def __init__(self, stream: BinaryIO, source_id: str, compression: str) -> None:
        """
        Open the decompression layer and read the first tar header.

        An empty decompressed stream is an archive without members, not a
        malformed one: `archive` is left as None and `find_command` reports
        the command as not found.

        Raises:
            DecodeError: If the compression header or the first tar header is malformed.
        """
        self.stream = stream
        self.source_id = source_id
        self.compression = compression
        self.archive: tarfile.TarFile | None = None

        decompressed = TAR_COMPRESSION_TYPES[compression](stream, source_id)
        head = decompressed.read(1)
        if not head:
            logger.debug("Decompressed tar stream from %s is empty", source_id)
            return
        try:
            self.archive = tarfile.open(fileobj=PrefixedStream(head, decompressed), mode="r|")
        except tarfile.TarError as e:
            raise DecodeError("tar", source_id, e) from e

    def find_command(self, command: str, platform: TargetPlatform | None = None) -> BinaryIO:
        if self.archive is None:
            raise CommandNotFoundError(command, self.source_id)
        try:
            for member in self.archive:
                if not member.isfile():
                    continue
                if match_executable_name(command, posixpath.basename(member.name), platform):
                    logger.info("Executable file %s was found in tar archive", member.name)
                    # The stream stays on this member; the rest of the archive is left unread.
                    return DecodingStream(self.archive.extractfile(member), "tar", self.source_id)
        except tarfile.TarError as e:
            raise DecodeError("tar", self.source_id, e) from e

        raise CommandNotFoundError(command, self.source_id)
