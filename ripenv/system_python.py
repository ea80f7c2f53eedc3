"""Locating the system Python interpreter and querying its version."""

from __future__ import annotations

import functools
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

_PRINT_EXECUTABLE = "import sys; print(sys.executable, end='')"
_VERSION_PART = re.compile(r"\+?[0-9]+")
_U32_MAX = 2**32 - 1


class FindPythonError(Exception):
    """Raised when no usable Python executable can be found."""

    def __init__(self, message: str = "could not find python executable") -> None:
        super().__init__(message)


class ParsePythonInterpreterVersionError(Exception):
    """Raised when the version of a Python interpreter cannot be determined."""

    def __init__(self, message: str, version: str | None = None) -> None:
        super().__init__(message)
        self.version = version

    @classmethod
    def _invalid(cls, version: str) -> ParsePythonInterpreterVersionError:
        return cls(
            f"failed to parse version string, found '{version}' "
            "expect something like 'Python x.x.x'",
            version,
        )


def _run_print_executable(command: str) -> subprocess.CompletedProcess:
    return subprocess.run([command, "-c", _PRINT_EXECUTABLE], capture_output=True, check=False)


@functools.lru_cache(maxsize=None)
def system_python_executable() -> Path:
    """Return the path of the system Python interpreter.

    ``python3`` is tried first and ``python`` second. The interpreter reports its own
    ``sys.executable`` so shims are resolved to the real binary. Successful lookups are cached.
    """
    try:
        try:
            output = _run_print_executable("python3")
        except OSError:
            output = _run_print_executable("python")
    except FileNotFoundError as exc:
        raise FindPythonError() from exc
    except OSError as exc:
        raise FindPythonError(str(exc)) from exc

    stdout = output.stdout.decode("utf-8", errors="replace")
    # sys.executable may be empty or None.
    if not stdout:
        raise FindPythonError()
    python_path = Path(stdout)
    if not python_path.exists():
        raise FindPythonError()
    return python_path


def _parse_part(part: str) -> int:
    part = part.strip()
    if not _VERSION_PART.fullmatch(part):
        raise ValueError(part)
    value = int(part)
    if value > _U32_MAX:
        raise ValueError(part)
    return value


@dataclass(frozen=True)
class PythonInterpreterVersion:
    """The major, minor and patch version of a Python interpreter."""

    major: int
    minor: int
    patch: int

    @classmethod
    def from_python_output(cls, version_str: str) -> PythonInterpreterVersion:
        """Parse the output of ``python --version``, e.g. ``Python 3.8.5``."""
        prefix, sep, version = version_str.partition(" ")
        if not sep or prefix != "Python":
            raise ParsePythonInterpreterVersionError._invalid(version_str)

        try:
            parts = [_parse_part(part) for part in version.split(".")]
        except ValueError:
            raise ParsePythonInterpreterVersionError._invalid(version) from None

        if len(parts) != 3:
            raise ParsePythonInterpreterVersionError._invalid(version)
        major, minor, patch = parts
        return cls(major, minor, patch)

    @classmethod
    def from_system(cls) -> PythonInterpreterVersion:
        """Return the version of the system interpreter."""
        try:
            python_path = system_python_executable()
        except FindPythonError as exc:
            raise ParsePythonInterpreterVersionError(str(exc)) from exc
        return cls.from_path(python_path)

    @classmethod
    def from_path(cls, path: str | Path) -> PythonInterpreterVersion:
        """Return the version of the interpreter at ``path``."""
        try:
            output = subprocess.run([str(path), "--version"], capture_output=True, check=False)
        except OSError as exc:
            not_found = FindPythonError()
            raise ParsePythonInterpreterVersionError(str(not_found)) from not_found
        return cls.from_python_output(output.stdout.decode("utf-8", errors="replace"))