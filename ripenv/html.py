"""Parsing of pages served by a PyPI simple repository index."""

from __future__ import annotations

import re
from dataclasses import dataclass
from html.parser import HTMLParser

_SHA256_HEX = re.compile(r"[0-9a-fA-F]{64}")


@dataclass(frozen=True)
class ArtifactHashes:
    """Known hashes of an artifact."""

    sha256: bytes | None = None

    def is_empty(self) -> bool:
        """Return whether no hash is known."""
        return self.sha256 is None


def _parse_sha256_hex(hex_digest: str) -> bytes | None:
    if not _SHA256_HEX.fullmatch(hex_digest):
        return None
    return bytes.fromhex(hex_digest)


def parse_hash(s: str) -> ArtifactHashes | None:
    """Parse a hash such as the URL fragment ``sha256=<hex>``.

    Returns None when the string does not name a sha256 hash. A sha256 hash whose hex digest
    is malformed yields hashes without a digest.
    """
    algorithm, sep, hex_digest = s.partition("=")
    if not sep or algorithm != "sha256":
        return None
    return ArtifactHashes(sha256=_parse_sha256_hex(hex_digest))


class _AnchorTextCollector(HTMLParser):
    """Collects the inner text of every ``<a>`` element in document order."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=False)
        self.texts: list[list[str]] = []
        self._open: list[list[str]] = []

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag == "a":
            buffer: list[str] = []
            self.texts.append(buffer)
            self._open.append(buffer)

    def handle_endtag(self, tag: str) -> None:
        if tag == "a" and self._open:
            self._open.pop()

    def _add_text(self, text: str) -> None:
        for buffer in self._open:
            buffer.append(text)

    def handle_data(self, data: str) -> None:
        self._add_text(data)

    def handle_entityref(self, name: str) -> None:
        self._add_text(f"&{name};")

    def handle_charref(self, name: str) -> None:
        self._add_text(f"&#{name};")


def parse_package_names_html(body: str) -> list[str]:
    """Return the package names listed as links on a repository index page."""
    collector = _AnchorTextCollector()
    collector.feed(body)
    collector.close()
    return ["".join(parts) for parts in collector.texts]