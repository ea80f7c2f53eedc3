"""Locating installed Python distributions (``.dist-info`` directories) in an environment."""

from __future__ import annotations

import os
import re
from dataclasses import dataclass
from pathlib import Path

from packaging.utils import canonicalize_name
from packaging.version import InvalidVersion, Version

from ripenv.tags import WheelTag

_PACKAGE_NAME = re.compile(r"^([A-Z0-9]|[A-Z0-9][A-Z0-9._-]*[A-Z0-9])$", re.IGNORECASE)


class FindDistributionError(Exception):
    """Base class for errors raised while looking for distributions."""


class FailedToParseWheel(FindDistributionError):
    """A WHEEL file could not be parsed."""

    def __init__(self, path: Path, detail: str) -> None:
        super().__init__(f"failed to parse '{path}'")
        self.path = path
        self.detail = detail


class FailedToParseWheelTag(FindDistributionError):
    """A tag in a WHEEL file could not be parsed."""

    def __init__(self, tag: str) -> None:
        super().__init__(f"failed to parse wheel tag {tag}")
        self.tag = tag


@dataclass(frozen=True)
class Distribution:
    """An installed distribution."""

    name: str
    version: Version
    installer: str | None
    dist_info: Path
    tags: tuple[WheelTag, ...] | None


def _parse_headers(text: str) -> list[tuple[str, str]]:
    """Parse the header section of an RFC 822 style document."""
    headers: list[tuple[str, str]] = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            break
        if line[0] in " \t":
            if not headers:
                raise ValueError(f"line {line_no}: continuation without a header")
            key, value = headers[-1]
            headers[-1] = (key, f"{value}\n{line.strip()}")
            continue
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            raise ValueError(f"line {line_no}: expected 'Key: value'")
        headers.append((key.strip(), value.strip()))
    return headers


def _read_wheel_tags(wheel_path: Path) -> tuple[WheelTag, ...]:
    text = wheel_path.read_text(encoding="utf-8")
    try:
        headers = _parse_headers(text)
    except ValueError as exc:
        raise FailedToParseWheel(wheel_path, str(exc)) from exc

    tags: dict[WheelTag, None] = {}
    for key, value in headers:
        if key != "Tag":
            continue
        try:
            expanded = WheelTag.from_compound_string(value)
        except ValueError:
            raise FailedToParseWheelTag(value) from None
        tags.update(dict.fromkeys(expanded))
    return tuple(tags)


def _read_installer(dist_info_path: Path) -> str | None:
    try:
        return (dist_info_path / "INSTALLER").read_text(encoding="utf-8").strip()
    except (OSError, UnicodeDecodeError):
        return None


def analyze_distribution(dist_info_path: str | os.PathLike[str]) -> Distribution | None:
    """Inspect a ``.dist-info`` directory; return None if it does not hold a distribution."""
    path = Path(dist_info_path)
    if not path.name.endswith(".dist-info"):
        return None
    stem = path.name[: -len(".dist-info")]
    raw_name, sep, raw_version = stem.partition("-")
    if not sep:
        return None

    # METADATA is the only mandatory file of a distribution.
    if not (path / "METADATA").is_file():
        return None

    if not _PACKAGE_NAME.match(raw_name):
        return None
    try:
        version = Version(raw_version)
    except InvalidVersion:
        return None

    wheel_path = path / "WHEEL"
    tags = _read_wheel_tags(wheel_path) if wheel_path.is_file() else None

    return Distribution(
        name=canonicalize_name(raw_name),
        version=version,
        installer=_read_installer(path),
        dist_info=path,
        tags=tags,
    )


def find_distributions_in_venv(
    root: str | os.PathLike[str],
    purelib: str | os.PathLike[str],
    platlib: str | os.PathLike[str],
) -> list[Distribution]:
    """Find the distributions installed in the purelib and platlib directories below ``root``.

    The ``dist_info`` of each result is relative to ``root``.
    """
    root_path = Path(root)
    locations = [
        location
        for location in dict.fromkeys([root_path / purelib, root_path / platlib])
        if location.is_dir()
    ]

    result: list[Distribution] = []
    for location in locations:
        with os.scandir(location) as entries:
            directories = sorted(entry.path for entry in entries if entry.is_dir(follow_symlinks=False))
        for directory in directories:
            dist = analyze_distribution(directory)
            if dist is None:
                continue
            try:
                relative = Path(os.path.relpath(dist.dist_info, root_path))
            except ValueError:
                relative = dist.dist_info
            result.append(
                Distribution(
                    name=dist.name,
                    version=dist.version,
                    installer=dist.installer,
                    dist_info=relative,
                    tags=dist.tags,
                )
            )
    return result