"""Exception types raised while unwrapping a command from an archive.

Every failure of `cmdunpack.ArchiveEngine.uncompress_command` is one of
the classes below, so callers can catch `UncompressError` and decide for
themselves whether a re-fetch is worth it.
"""


class UncompressError(Exception):
    """Base class for all uncompression failures.

    Attributes:
        source_id (str): Identifier (usually a URL) the stream came from.
    """

    def __init__(self, message: str, source_id: str) -> None:
        super().__init__(message)
        self.source_id = source_id


class DecodeError(UncompressError):
    """A compression or container layer could not be parsed.

    The low-level exception is chained as ``__cause__``.

    Attributes:
        stage (str): Layer that failed: ``zip``, ``gzip``, ``xz`` or ``tar``.
    """

    def __init__(self, stage: str, source_id: str, reason: object = None) -> None:
        message = f"failed to uncompress {stage} data from {source_id}"
        if reason is not None:
            message += f": {reason}"
        super().__init__(message, source_id)
        self.stage = stage


class CommandNotFoundError(UncompressError):
    """The container was read completely but no member matched the command."""

    def __init__(self, command: str, source_id: str, message: str | None = None) -> None:
        super().__init__(
            message or f"file '{command}' for the command is not found in {source_id}",
            source_id,
        )
        self.command = command


class NameMismatchError(CommandNotFoundError):
    """The single name stored in a gzip header does not denote the command."""

    def __init__(self, name: str, command: str, source_id: str) -> None:
        super().__init__(
            command,
            source_id,
            f"file name '{name}' does not match to command '{command}' found in {source_id}",
        )
        self.name = name
