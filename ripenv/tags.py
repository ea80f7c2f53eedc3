"""Wheel platform compatibility tags."""

from __future__ import annotations

import itertools
from collections.abc import Iterable, Iterator
from dataclasses import dataclass


def _split_triple(s: str) -> tuple[str, str, str]:
    parts = s.split("-")
    if len(parts) != 3:
        raise ValueError("not enough '-' separators")
    interpreter, abi, platform = parts
    return interpreter, abi, platform


@dataclass(frozen=True)
class WheelTag:
    """An interpreter/ABI/platform tag triple."""

    interpreter: str
    abi: str
    platform: str

    @classmethod
    def from_str(cls, s: str) -> WheelTag:
        """Parse a single tag such as ``py3-none-any``."""
        return cls(*_split_triple(s))

    @classmethod
    def from_compound_string(cls, s: str) -> list[WheelTag]:
        """Expand a compressed tag set such as ``cp310-cp310-manylinux_2_17_x86_64.manylinux2014_x86_64``."""
        interpreter, abi, platform = _split_triple(s)
        return [
            cls(i, a, p)
            for i, a, p in itertools.product(
                interpreter.split("."), abi.split("."), platform.split(".")
            )
        ]

    def __str__(self) -> str:
        return f"{self.interpreter}-{self.abi}-{self.platform}"


class WheelTags:
    """An ordered set of supported tags, most specific first."""

    def __init__(self, tags: Iterable[WheelTag] = ()) -> None:
        self._index: dict[WheelTag, int] = {}
        for tag in tags:
            self._index.setdefault(tag, len(self._index))

    def tags(self) -> Iterator[WheelTag]:
        """Iterate over the supported tags in order."""
        return iter(self._index)

    def compatibility(self, tag: WheelTag) -> int | None:
        """Return the compatibility score of ``tag``, higher is better, or None if unsupported."""
        index = self._index.get(tag)
        return None if index is None else -index

    def is_compatible(self, tag: WheelTag) -> bool:
        """Return whether ``tag`` is in this set."""
        return tag in self._index

    def __iter__(self) -> Iterator[WheelTag]:
        return self.tags()

    def __len__(self) -> int:
        return len(self._index)

    def __contains__(self, tag: object) -> bool:
        return tag in self._index

    def __repr__(self) -> str:
        return f"WheelTags({[str(tag) for tag in self._index]!r})"