"""Cloning git repositories that hold Python source trees."""

from __future__ import annotations

import enum
import logging
import re
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path
from urllib.parse import urlsplit

logger = logging.getLogger(__name__)

_SUBDIRECTORY_FRAGMENT = re.compile(r"[#&]subdirectory=([^&]*)")
_GIT_VERSION = re.compile(r"^git version (\d+)\.(\d+)")
_U8_MAX = 255


class SourceError(Exception):
    """Raised when a source could not be fetched from a git repository."""


def _git_error(message: str) -> SourceError:
    return SourceError(f"Failed to run git command: {message}")


class GitRevKind(enum.Enum):
    """The kind of a git revision."""

    BRANCH = "branch"
    TAG = "tag"
    COMMIT = "commit"
    HEAD = "head"


@dataclass(frozen=True)
class GitRev:
    """A git revision: a branch, a tag, a commit or HEAD."""

    kind: GitRevKind = GitRevKind.HEAD
    value: str = ""

    def is_head(self) -> bool:
        """Return whether this revision is HEAD."""
        return self.kind is GitRevKind.HEAD

    def get_commit(self) -> str:
        """Return the name that can be handed to ``git checkout``."""
        if self.kind is GitRevKind.HEAD:
            return "HEAD"
        return self.value

    @classmethod
    def parse(cls, s: str) -> GitRev:
        """Parse a revision such as ``HEAD``, ``refs/tags/v1`` or a commit hash."""
        if s.upper() == "HEAD":
            return cls(GitRevKind.HEAD)
        if s.startswith("refs/tags/"):
            return cls(GitRevKind.TAG, s[len("refs/tags/"):])
        if s.startswith("refs/heads/"):
            return cls(GitRevKind.BRANCH, s[len("refs/heads/"):])
        return cls(GitRevKind.COMMIT, s)

    def __str__(self) -> str:
        if self.kind is GitRevKind.BRANCH:
            return f"refs/heads/{self.value}"
        if self.kind is GitRevKind.TAG:
            return f"refs/tags/{self.value}"
        if self.kind is GitRevKind.HEAD:
            return "HEAD"
        return self.value


def _clean_url(url: str) -> str:
    index = url.find(".git")
    return url if index < 0 else url[: index + 4]


@dataclass(frozen=True)
class ParsedUrl:
    """A git URL split into repository location, revision and subdirectory."""

    git_url: str | Path
    url: str
    revision: str | None
    subdirectory: str | None

    @classmethod
    def from_url(cls, url: str) -> ParsedUrl:
        """Parse a URL such as ``git+https://host/repo.git@1.0.0#subdirectory=pkg``."""
        revision = url.rsplit("@", 1)[1] if "@" in url else None
        match = _SUBDIRECTORY_FRAGMENT.search(url)
        subdirectory = match.group(1) if match else None
        clean_url = _clean_url(url)

        git_url: str | Path
        if "git+https" in clean_url:
            clean_url = clean_url.replace("git+https", "https")
            parts = urlsplit(clean_url)
            if not parts.scheme or not parts.netloc:
                raise ValueError(f"invalid git url: {clean_url!r}")
            git_url = clean_url
        else:
            clean_url = urlsplit(url).path.replace(".git", "")
            git_url = Path(clean_url)

        return cls(git_url=git_url, url=clean_url, revision=revision, subdirectory=subdirectory)


@dataclass(frozen=True)
class GitSource:
    """A git repository, remote URL or local path, and an optional revision."""

    url: str | Path
    rev: str | None = None


def _stdin_is_terminal() -> bool:
    try:
        return sys.stdin is not None and sys.stdin.isatty()
    except (ValueError, OSError):
        return False


def _run(args: list[str], cwd: Path | None = None, inherit: bool = False) -> subprocess.CompletedProcess:
    if inherit:
        return subprocess.run(args, cwd=cwd, check=False)
    return subprocess.run(args, cwd=cwd, capture_output=True, check=False)


def _run_git(sub_cmd: str, *args: str, cwd: Path | None = None) -> subprocess.CompletedProcess:
    """Run a git subcommand, showing progress when attached to a terminal."""
    inherit = _stdin_is_terminal()
    command = ["git", sub_cmd]
    if inherit:
        command.append("--progress")
    command.extend(args)
    return _run(command, cwd=cwd, inherit=inherit)


def _decode(data: bytes | None) -> str:
    return (data or b"").decode("utf-8", errors="replace")


def git_version() -> tuple[int, int]:
    """Return the major and minor version of the installed git."""
    try:
        output = _run(["git", "version"])
    except OSError as exc:
        raise SourceError(f"IO Error: {exc}") from exc
    output_str = _decode(output.stdout)
    match = _GIT_VERSION.match(output_str)
    if match is None:
        raise SourceError(f"Can't parse git version: {output_str}")
    major, minor = int(match.group(1)), int(match.group(2))
    if major > _U8_MAX or minor > _U8_MAX:
        raise SourceError(f"Can't parse git version: {output_str}")
    return major, minor


def support_partial_clone() -> bool:
    """Return whether the installed git supports ``--filter`` on clone."""
    return git_version() >= (2, 17)


def get_revision_sha(dest: str | Path, rev: str | None) -> GitRev:
    """Resolve ``rev`` in the repository at ``dest`` to a branch, tag or commit."""
    if rev is None:
        return GitRev(GitRevKind.HEAD)

    try:
        output = _run(["git", "show-ref", rev], cwd=Path(dest))
    except OSError as exc:
        raise SourceError(f"IO Error: {exc}") from exc

    refs: dict[str, str] = {}
    for line in _decode(output.stdout).splitlines():
        if not line.strip():
            continue
        sha, sep, name = line.partition(" ")
        if sep:
            refs[name] = sha

    branch_sha = refs.get(f"refs/remotes/origin/{rev}")
    if branch_sha is not None:
        return GitRev(GitRevKind.BRANCH, branch_sha)
    tag_sha = refs.get(f"refs/tags/{rev}")
    if tag_sha is not None:
        return GitRev(GitRevKind.TAG, tag_sha)
    return GitRev(GitRevKind.COMMIT, rev)


def _clone_remote(url: str, cache_path: Path) -> None:
    try:
        support_partial_clone()
    except SourceError:
        option = "--recursive"
    else:
        option = "--filter=blob:none"
    try:
        output = _run_git("clone", option, url, str(cache_path))
    except OSError:
        raise _git_error("Failed to execute clone command") from None
    if output.returncode != 0:
        raise _git_error("Git clone failed for source")


def _clone_local(path: Path, cache_path: Path) -> None:
    if cache_path.exists():
        try:
            shutil.rmtree(cache_path)
        except OSError as exc:
            logger.error("Failed to remove old cache directory: %s", exc)
            raise SourceError(f"FileSystem error: '{exc}'") from exc
    try:
        resolved = path.resolve(strict=True)
    except OSError as exc:
        logger.error("Path not found on system: %s", exc)
        raise _git_error(f"{exc}: Path not found on system") from exc

    try:
        output = _run_git("clone", "--recursive", str(resolved), str(cache_path))
    except OSError:
        raise SourceError("Download could not be validated with checksum!") from None
    if output.returncode != 0:
        logger.error("Command failed: git clone --recursive %s %s", resolved, cache_path)
        raise _git_error(
            f"failed to execute clone from file {output.returncode!r} {_decode(output.stdout)!r}"
        )


def git_clone(source: GitSource, tmp_dir: str | Path) -> Path:
    """Clone ``source`` below ``tmp_dir``, check out its revision and return the checkout."""
    try:
        probe = _run(["git", "--version"])
    except OSError as exc:
        raise SourceError(f"IO Error: {exc}") from exc
    if probe.returncode != 0:
        raise _git_error("`git` command not found in `PATH`")

    tmp = Path(tmp_dir)
    cache_dir = tmp / "rip-git-cache"
    recipe_dir = tmp / "rip-clone-dir"

    if isinstance(source.url, Path):
        try:
            filename = (recipe_dir / source.url).resolve(strict=True).name
        except OSError as exc:
            raise SourceError(f"IO Error: {exc}") from exc
    else:
        filename = urlsplit(str(source.url)).path.split("/")[-1]

    cache_path = cache_dir / filename

    if isinstance(source.url, Path):
        _clone_local(source.url, cache_path)
    elif not cache_path.exists():
        _clone_remote(str(source.url), cache_path)

    git_rev = get_revision_sha(cache_path, source.rev)

    if not git_rev.is_head():
        try:
            output = _run_git("checkout", "-q", git_rev.get_commit(), cwd=cache_path)
        except OSError:
            raise _git_error("git checkout failed") from None
        if output.returncode != 0:
            logger.error('Command failed: `git checkout "%s"`', git_rev)
            raise _git_error("failed to checkout for a valid rev")

    if (cache_path / ".gitmodules").exists():
        try:
            output = _run_git("submodule", "update", "--init", "--recursive", "-q", cwd=cache_path)
        except OSError:
            raise _git_error("git submodule update failed") from None
        if output.returncode != 0:
            raise _git_error("failed to update git module")

    return cache_path