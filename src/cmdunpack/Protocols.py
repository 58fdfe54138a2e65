"""Archive engine protocol definitions.

This module declares `ArchiveEngineProtocol`, the interface every format
adapter (zip, tar, gzip, xz, plain) implements so the dispatcher in
`cmdunpack.ArchiveEngine` can treat them alike.
"""

from typing import BinaryIO, Protocol

from .Platform import TargetPlatform


class ArchiveEngineProtocol(Protocol):
    """Protocol describing the minimal archive engine interface.

    Engines are constructed from an open, unconsumed stream; the
    constructor parses whatever headers the format needs up front and
    raises `DecodeError` if they are malformed.
    """
    stream: BinaryIO
    source_id: str

    def find_command(self, command: str, platform: TargetPlatform | None = None) -> BinaryIO:
        """Return a stream positioned at the executable for `command`.

        Args:
            command (str): Bare name of the command being looked for.
            platform (TargetPlatform | None): Platform whose qualified names
                are accepted as well. Defaults to the running platform.

        Returns:
            BinaryIO: Readable stream over the member's uncompressed bytes.
            The caller owns it.

        Raises:
            CommandNotFoundError: If no member denotes the command.
            DecodeError: If the container turns out to be corrupt while scanning.
        """
        ...
