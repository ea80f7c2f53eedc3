import sys
from pathlib import Path

import pytest

from ripenv.system_python import (
    ParsePythonInterpreterVersionError,
    PythonInterpreterVersion,
    system_python_executable,
)
from ripenv.venv import PythonLocation, VEnv, VEnvError

CURRENT_VERSION = PythonInterpreterVersion(*sys.version_info[:3])


def _make_venv(root: Path) -> VEnv:
    original = Path(sys.executable).resolve()
    VEnv.create_install_paths(root, Path("lib") / "site-packages", "include", "bin")
    VEnv.create_pyvenv(root, original, CURRENT_VERSION)
    VEnv.setup_python(root / "bin" / original.name, original, CURRENT_VERSION)
    return VEnv(location=root, scripts=Path("bin"), windows=False)


def test_custom_location_executable(tmp_path):
    exe = tmp_path / "python"
    assert PythonLocation(exe).executable() == exe


def test_custom_location_with_version_does_not_run_python(tmp_path):
    version = PythonInterpreterVersion(3, 8, 5)
    location = PythonLocation(tmp_path / "missing-python", version)
    assert location.version() == version


def test_custom_location_missing_interpreter_raises(tmp_path):
    with pytest.raises(ParsePythonInterpreterVersionError):
        PythonLocation(tmp_path / "missing-python").version()


def test_system_location_uses_system_python():
    assert PythonLocation().executable() == system_python_executable()


def test_python_executable_posix(tmp_path):
    venv = VEnv(location=tmp_path, scripts=Path("bin"), windows=False)
    assert venv.python_executable() == tmp_path / "bin" / "python"


def test_python_executable_windows(tmp_path):
    venv = VEnv(location=tmp_path, scripts=Path("Scripts"), windows=True)
    assert venv.python_executable() == tmp_path / "Scripts" / "python.exe"


def test_create_install_paths(tmp_path):
    root = tmp_path / "env"
    VEnv.create_install_paths(root, Path("lib") / "site-packages", "include", "bin")
    assert (root / "lib" / "site-packages").is_dir()
    assert (root / "include").is_dir()
    assert (root / "bin").is_dir()


def test_create_install_paths_twice(tmp_path):
    root = tmp_path / "env"
    VEnv.create_install_paths(root, "lib", "include", "bin")
    VEnv.create_install_paths(root, "lib", "include", "bin")
    assert (root / "bin").is_dir()


def test_create_pyvenv_content(tmp_path):
    venv_dir = tmp_path / "myenv"
    venv_dir.mkdir()
    python_path = tmp_path / "base" / "bin" / "python3"
    VEnv.create_pyvenv(venv_dir, python_path, PythonInterpreterVersion(3, 8, 5))
    content = (venv_dir / "pyvenv.cfg").read_text(encoding="utf-8")
    assert content == (
        f"\nhome = {python_path.parent}"
        "\ninclude-system-site-packages = false"
        "\nversion = 3.8.5"
        "\nprompt = myenv"
    )


def test_create_pyvenv_without_name_raises():
    with pytest.raises(VEnvError):
        VEnv.create_pyvenv(Path("/"), Path("/usr/bin/python3"), PythonInterpreterVersion(3, 8, 5))


def test_setup_python_creates_aliases(tmp_path):
    original = tmp_path / "base" / "interp"
    original.parent.mkdir()
    original.write_text("interpreter", encoding="utf-8")
    venv_bin = tmp_path / "env" / "bin"
    venv_bin.mkdir(parents=True)

    VEnv.setup_python(venv_bin / "interp", original, PythonInterpreterVersion(3, 8, 5))

    for name in ("interp", "python", "python3", "python3.8"):
        assert (venv_bin / name).read_text(encoding="utf-8") == "interpreter"


def test_setup_python_keeps_existing_files(tmp_path):
    original = tmp_path / "base" / "interp"
    original.parent.mkdir()
    original.write_text("interpreter", encoding="utf-8")
    venv_bin = tmp_path / "env" / "bin"
    venv_bin.mkdir(parents=True)
    (venv_bin / "python3").write_text("mine", encoding="utf-8")

    VEnv.setup_python(venv_bin / "interp", original, PythonInterpreterVersion(3, 8, 5))

    assert (venv_bin / "python3").read_text(encoding="utf-8") == "mine"
    assert (venv_bin / "python").read_text(encoding="utf-8") == "interpreter"


def test_execute_command_prefix_differs(tmp_path):
    venv = _make_venv(tmp_path / "env")
    assert venv.python_executable().is_file()
    base = venv.execute_command("import sys; print(sys.base_prefix, end='')")
    prefix = venv.execute_command("import sys; print(sys.prefix, end='')")
    assert base.returncode == 0
    assert prefix.returncode == 0
    assert base.stdout != prefix.stdout


def test_execute_script(tmp_path):
    venv = _make_venv(tmp_path / "env")
    script = tmp_path / "script.py"
    script.write_text("print('hello from script', end='')\n", encoding="utf-8")
    output = venv.execute_script(script)
    assert output.returncode == 0
    assert output.stdout.decode() == "hello from script"


def test_same_venv_can_be_created_twice(tmp_path):
    first = _make_venv(tmp_path / "env")
    second = _make_venv(tmp_path / "env")
    assert first == second
    assert second.execute_command("print('ok', end='')").stdout == b"ok"