"""cmdunpack package initializer.

Locate a command's executable inside a downloaded release asset (zip,
tar.gz, tgz, gz, tar.xz, xz or plain file) and get a stream over it.

- __version__: Package version string.
- uncompress_command: Main entry point.
- select_pipeline / PIPELINES: The suffix dispatch table.
- match_executable_name / TargetPlatform: Executable name matching.
- UncompressError and subclasses: Failure types.
- cli: The CLI entrypoint function (click command).

Example:
    from cmdunpack import uncompress_command
    with open("foo_linux_amd64.tar.gz", "rb") as f:
        data = uncompress_command(f, "foo_linux_amd64.tar.gz", "foo").read()

"""

__version__ = "0.1.0"

from .ArchiveEngine import PIPELINES, Pipeline, get_extractor, select_pipeline, uncompress_command
from .Errors import CommandNotFoundError, DecodeError, NameMismatchError, UncompressError
from .FileIO import RemoteStream
from .Platform import TargetPlatform, match_executable_name
from .Protocols import ArchiveEngineProtocol

from .CLI import extract as cli

__all__ = [
    "__version__",
    "uncompress_command",
    "get_extractor",
    "select_pipeline",
    "Pipeline",
    "PIPELINES",
    "match_executable_name",
    "TargetPlatform",
    "UncompressError",
    "DecodeError",
    "CommandNotFoundError",
    "NameMismatchError",
    "RemoteStream",
    "ArchiveEngineProtocol",
    "cli",
]
