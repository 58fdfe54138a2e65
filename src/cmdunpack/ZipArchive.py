"""ZIP archive engine.

The zip central directory sits at the end of the file, so the whole
source is read into memory before anything can be looked up. Memory use
is O(archive size); callers handling very large zips should keep that
in mind.
"""

import io
import logging
import posixpath
import zipfile
from typing import BinaryIO

from .Errors import CommandNotFoundError, DecodeError
from .FileIO import DecodingStream
from .Platform import TargetPlatform, match_executable_name
from .Protocols import ArchiveEngineProtocol

logger = logging.getLogger(__name__)


class ZipArchiveEngine(ArchiveEngineProtocol):
    """
    ZIP archive engine using the stdlib zipfile module.

    Attributes:
        stream (BinaryIO): The source stream; consumed to EOF on construction.
        source_id (str): Identifier of the source, used in errors.
        buffer (io.BytesIO): In-memory copy of the archive.
        archive (zipfile.ZipFile): The ZipFile instance used to look up members.
    """

    def __init__(self, stream: BinaryIO, source_id: str) -> None:
        """
        Buffer the source and parse its central directory.

        Raises:
            DecodeError: If the source cannot be read or is not a valid ZIP archive.
        """
        self.stream = stream
        self.source_id = source_id
        try:
            self.buffer = io.BytesIO(stream.read())
        except OSError as e:
            raise DecodeError("zip", source_id, f"failed to create buffer for zip file: {e}") from e

        try:
            self.archive = zipfile.ZipFile(self.buffer)
        except zipfile.BadZipFile as e:
            raise DecodeError("zip", source_id, e) from e

    def find_command(self, command: str, platform: TargetPlatform | None = None) -> BinaryIO:
        # infolist() is in central directory order
        for info in self.archive.infolist():
            if info.is_dir():
                continue
            if match_executable_name(command, posixpath.basename(info.filename), platform):
                logger.info("Executable file %s was found in zip archive", info.filename)
                try:
                    member = self.archive.open(info)
                # encrypted members raise RuntimeError
                except (zipfile.BadZipFile, NotImplementedError, RuntimeError) as e:
                    raise DecodeError("zip", self.source_id, e) from e
                return DecodingStream(member, "zip", self.source_id)

        raise CommandNotFoundError(command, self.source_id)
