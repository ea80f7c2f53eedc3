import pytest

from ripenv.html import ArtifactHashes, parse_hash, parse_package_names_html

ZERO_HEX = "0" * 64

# (href segment, displayed name) pairs as they appear on a simple index page.
INDEX_ENTRIES = [
    ("0", "0"),
    ("0-0", "0-._.-._.-0"),
    ("0-0-1", "0.0.1"),
    ("00print-lol", "00print_lol"),
    ("00smalinux", "00SMALINUX"),
    ("0-618", "0.618"),
    ("0fela", "0FELA"),
    ("0x-contract-wrappers", "0x-contract-wrappers"),
]


def _index_page(entries):
    links = "\n".join(f'    <a href="/simple/{href}/">{name}</a>' for href, name in entries)
    return (
        "<html>\n  <head>\n"
        '    <meta name="pypi:repository-version" content="1.1">\n'
        "    <title>Simple index</title>\n  </head>\n  <body>\n"
        f"{links}\n  </body>\n</html>\n"
    )


def test_parse_hash_sha256():
    hashes = parse_hash(f"sha256={ZERO_HEX}")
    assert hashes == ArtifactHashes(sha256=bytes(32))
    assert not hashes.is_empty()


def test_parse_hash_other_algorithm():
    assert parse_hash(f"md5={ZERO_HEX}") is None


def test_parse_hash_without_separator():
    assert parse_hash("sha256") is None


@pytest.mark.parametrize("digest", ["zz", "00", ZERO_HEX + "00", "g" * 64])
def test_parse_hash_invalid_digest(digest):
    hashes = parse_hash(f"sha256={digest}")
    assert hashes == ArtifactHashes()
    assert hashes.is_empty()


def test_parse_hash_round_trip():
    digest = bytes(range(32))
    assert parse_hash("sha256=" + digest.hex()).sha256 == digest


def test_package_name_parsing():
    names = parse_package_names_html(_index_page(INDEX_ENTRIES))
    assert names == [
        "0",
        "0-._.-._.-0",
        "0.0.1",
        "00print_lol",
        "00SMALINUX",
        "0.618",
        "0FELA",
        "0x-contract-wrappers",
    ]


def test_package_names_empty_page():
    assert parse_package_names_html("<html><body><p>nothing</p></body></html>") == []


def test_package_names_nested_markup():
    html = '<a href="/simple/pkg/"><span>pkg</span>-name</a>'
    assert parse_package_names_html(html) == ["pkg-name"]