"""Creating Python virtual environments and running commands inside them."""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import sys
from dataclasses import dataclass
from pathlib import Path

from ripenv.system_python import PythonInterpreterVersion, system_python_executable

logger = logging.getLogger(__name__)

_IS_WINDOWS = os.name == "nt"


class VEnvError(Exception):
    """Raised when a virtual environment cannot be created."""


def _copy_file(source: Path, target: Path) -> None:
    """Link ``target`` to ``source``: a symlink on POSIX, a copy on Windows."""
    if _IS_WINDOWS:
        shutil.copy2(source, target)
    else:
        os.symlink(source, target)


@dataclass(frozen=True)
class PythonLocation:
    """Where to find the Python interpreter.

    Without a path the system interpreter is used. A known version saves running the
    interpreter to ask for it.
    """

    path: Path | None = None
    python_version: PythonInterpreterVersion | None = None

    def executable(self) -> Path:
        """Return the path of the interpreter."""
        if self.path is None:
            return system_python_executable()
        return Path(self.path)

    def version(self) -> PythonInterpreterVersion:
        """Return the version of the interpreter."""
        if self.python_version is not None:
            return self.python_version
        if self.path is None:
            return PythonInterpreterVersion.from_system()
        return PythonInterpreterVersion.from_path(self.path)


@dataclass(frozen=True)
class VEnv:
    """A virtual environment rooted at ``location``; ``scripts`` is relative to it."""

    location: Path
    scripts: Path
    windows: bool = _IS_WINDOWS

    def python_executable(self) -> Path:
        """Return the path of the interpreter inside the environment."""
        name = "python.exe" if self.windows else "python"
        return Path(self.location) / self.scripts / name

    def execute_script(self, script: str | os.PathLike[str]) -> subprocess.CompletedProcess:
        """Run a Python script with the environment's interpreter and capture its output."""
        return subprocess.run(
            [str(self.python_executable()), str(script)], capture_output=True, check=False
        )

    def execute_command(self, command: str) -> subprocess.CompletedProcess:
        """Run ``python -c command`` with the environment's interpreter and capture its output."""
        return subprocess.run(
            [str(self.python_executable()), "-c", command], capture_output=True, check=False
        )

    @staticmethod
    def create_install_paths(
        venv_abs_path: str | os.PathLike[str],
        site_packages: str | os.PathLike[str],
        include: str | os.PathLike[str],
        scripts: str | os.PathLike[str],
    ) -> None:
        """Create the environment root and its site-packages, include and scripts directories."""
        root = Path(venv_abs_path)
        try:
            root.mkdir(parents=True, exist_ok=True)
            for relative in (site_packages, include, scripts):
                (root / relative).mkdir(parents=True, exist_ok=True)

            # lib64 links to lib on 64-bit POSIX systems other than macOS.
            if sys.maxsize > 2**32 and os.name == "posix" and sys.platform != "darwin":
                lib64 = root / "lib64"
                if not os.path.lexists(lib64):
                    os.symlink("lib", lib64)
        except OSError as exc:
            raise VEnvError(str(exc)) from exc

    @staticmethod
    def create_pyvenv(
        venv_path: str | os.PathLike[str],
        python_path: str | os.PathLike[str],
        python_version: PythonInterpreterVersion,
    ) -> None:
        """Write the ``pyvenv.cfg`` of the environment."""
        venv = Path(venv_path)
        venv_name = venv.name
        if not venv_name:
            raise VEnvError(f"cannot extract base name from venv path {venv}")

        content = (
            f"\nhome = {Path(python_path).parent}"
            "\ninclude-system-site-packages = false"
            f"\nversion = {python_version.major}.{python_version.minor}.{python_version.patch}"
            f"\nprompt = {venv_name}"
        )
        try:
            (venv / "pyvenv.cfg").write_text(content, encoding="utf-8")
        except OSError as exc:
            raise VEnvError(str(exc)) from exc

    @staticmethod
    def setup_python(
        venv_exe_path: str | os.PathLike[str],
        original_python_exe: str | os.PathLike[str],
        python_version: PythonInterpreterVersion,
    ) -> None:
        """Place the interpreter in the environment together with its usual aliases."""
        venv_exe = Path(venv_exe_path)
        original = Path(original_python_exe)
        try:
            if _IS_WINDOWS:
                _setup_python_windows(venv_exe, original, python_version)
            else:
                _setup_python_posix(venv_exe, original, python_version)
        except OSError as exc:
            raise VEnvError(str(exc)) from exc


def _setup_python_posix(
    venv_exe: Path, original: Path, python_version: PythonInterpreterVersion
) -> None:
    venv_bin = venv_exe.parent
    if not venv_exe.exists():
        _copy_file(original, venv_exe)

    for bin_name in ("python", "python3", f"python{python_version.major}.{python_version.minor}"):
        venv_python_bin = venv_bin / bin_name
        if not venv_python_bin.exists() and venv_exe != venv_python_bin:
            _copy_file(venv_exe, venv_python_bin)


def _setup_python_windows(
    venv_exe: Path, original: Path, python_version: PythonInterpreterVersion
) -> None:
    if python_version.major <= 3 and python_version.minor <= 7 and python_version.patch <= 4:
        logger.warning("Creation of venv for <=3.7.4 on windows may fail. Please use newer version")

    venv_bin = venv_exe.parent
    original_bin_dir = original.parent
    bin_names = ("python.exe", "python_d.exe", "pythonw.exe", "pythonw_d.exe", venv_exe.name)
    for bin_name in bin_names:
        original_bin = original_bin_dir / bin_name
        original_script = original_bin_dir / "Lib" / "venv" / "scripts" / "nt" / bin_name
        venv_python_bin = venv_bin / bin_name
        if not original_bin.exists() or venv_python_bin.exists():
            continue
        if original_script.is_file():
            _copy_file(original_script, venv_python_bin)
            continue
        # Interpreters built from source ship launchers instead of the venv scripts.
        if "python" in bin_name:
            launcher_name = bin_name.replace("python", "venvlauncher")
        elif "pythonw" in bin_name:
            launcher_name = bin_name.replace("pythonw", "venvwlauncher")
        else:
            launcher_name = bin_name
        original_launcher = original_bin_dir / launcher_name
        if original_launcher.exists():
            _copy_file(original_launcher, venv_python_bin)