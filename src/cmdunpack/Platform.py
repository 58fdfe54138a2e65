"""Target platform description and executable name matching.

Release archives usually ship one binary per platform and name it after
the Go toolchain's GOOS/GOARCH pair (``foo_linux_amd64``,
``foo-windows-amd64.exe``), so platforms are described with those
identifiers rather than with Python's own.
"""

import sys
from dataclasses import dataclass
from platform import machine

# sys.platform prefix -> GOOS
_OS_ALIASES = {
    "linux": "linux",
    "darwin": "darwin",
    "win32": "windows",
    "cygwin": "windows",
    "msys": "windows",
    "freebsd": "freebsd",
    "openbsd": "openbsd",
    "netbsd": "netbsd",
}

# platform.machine() (lower-cased) -> GOARCH
_ARCH_ALIASES = {
    "x86_64": "amd64",
    "amd64": "amd64",
    "i386": "386",
    "i486": "386",
    "i586": "386",
    "i686": "386",
    "x86": "386",
    "aarch64": "arm64",
    "arm64": "arm64",
    "armv6l": "arm",
    "armv7l": "arm",
    "arm": "arm",
    "ppc64le": "ppc64le",
    "s390x": "s390x",
    "riscv64": "riscv64",
}

NAME_SEPARATORS = ("_", "-")


def _normalize_os(name: str) -> str:
    for prefix, goos in _OS_ALIASES.items():
        if name.startswith(prefix):
            return goos
    return name.lower()


def _normalize_arch(value: str) -> str:
    value = value.lower()
    return _ARCH_ALIASES.get(value, value)


@dataclass(frozen=True)
class TargetPlatform:
    """Operating system and architecture an executable is built for.

    Attributes:
        os (str): GOOS-style identifier, e.g. ``linux`` or ``windows``.
        arch (str): GOARCH-style identifier, e.g. ``amd64`` or ``arm64``.
    """

    os: str
    arch: str

    @classmethod
    def current(cls) -> "TargetPlatform":
        """Describe the interpreter's own platform."""
        return cls(_normalize_os(sys.platform), _normalize_arch(machine()))

    @property
    def is_windows(self) -> bool:
        return self.os == "windows"

    def qualified_names(self, command: str) -> list[str]:
        """Return the platform-qualified file names that also denote `command`."""
        names = []
        for sep in NAME_SEPARATORS:
            name = f"{command}{sep}{self.os}{sep}{self.arch}"
            if self.is_windows:
                name += ".exe"
            names.append(name)
        return names

    def __str__(self) -> str:
        return f"{self.os}/{self.arch}"


def match_executable_name(command: str, name: str, platform: TargetPlatform | None = None) -> bool:
    """Tell whether an archive member called `name` is the executable for `command`.

    Args:
        command (str): Bare command name, e.g. ``foo``.
        name (str): Base name of the archive member.
        platform (TargetPlatform | None): Platform the executable must be
            built for. Defaults to the running interpreter's platform.

    Returns:
        bool: True for an exact match or a ``command_OS_ARCH`` /
        ``command-OS-ARCH`` variant (``.exe``-suffixed on windows).
    """
    if command == name:
        return True
    if platform is None:
        platform = TargetPlatform.current()
    return name in platform.qualified_names(command)
