# ripenv

Low-level building blocks for tools that install Python packages into
virtual environments. `ripenv` is a library, not a package manager: it
supplies pieces that one can be built from.

## What is in it

- `ripenv.system_python`: `system_python_executable()` finds the system
  interpreter (trying `python3`, then `python`) and returns the real
  `sys.executable` path, caching the result. `PythonInterpreterVersion`
  holds `major`, `minor` and `patch`. Build one with
  `from_python_output("Python 3.8.5")`, `from_path(path)` or `from_system()`.
  Failures raise `FindPythonError` or `ParsePythonInterpreterVersionError`.
- `ripenv.tags`: wheel compatibility tags. `WheelTag.from_str("py2-none-any")`
  parses one tag. `WheelTag.from_compound_string(...)` expands a compound tag
  such as `cp310-cp310-manylinux_2_17_x86_64.manylinux2014_x86_64` into every
  tag it stands for. `WheelTags` is an ordered set of supported tags. It has
  `tags()`, `compatibility(tag)` and `is_compatible(tag)`. A compatibility
  score is 0 for the first tag, -1 for the next, and so on, or `None` when the
  tag is not supported.
- `ripenv.git`: `ParsedUrl.from_url` splits a URL such as
  `git+https://host/repo.git@1.0.0#subdirectory=pkg` into the repository, the
  revision and the subdirectory. `GitRev.parse` reads `HEAD`,
  `refs/tags/...`, `refs/heads/...` or a commit. `git_clone(GitSource(...),
  tmp_dir)` clones a remote URL or a local path, checks out the requested
  revision, updates submodules and returns the checkout directory. Errors
  raise `SourceError`. `git_version()`, `support_partial_clone()` and
  `get_revision_sha()` are available too.
- `ripenv.html`: `parse_package_names_html(body)` returns the link texts of a
  simple-repository index page. `parse_hash("sha256=<hex>")` returns
  `ArtifactHashes`.
- `ripenv.distribution_finder`: `find_distributions_in_venv(root, purelib,
  platlib)` lists the `.dist-info` distributions installed under `root`. Each
  result is a `Distribution` with its normalized name, version, installer,
  `dist_info` path (relative to `root`) and the wheel tags from its `WHEEL`
  file. `analyze_distribution(path)` inspects a single directory.
- `ripenv.venv`: `PythonLocation` names an interpreter: the system one by
  default, or a path with an optional known version. `VEnv(location,
  scripts)` runs `python_executable()`, `execute_script()` and
  `execute_command()` inside an environment. The static methods
  `create_install_paths`, `create_pyvenv` and `setup_python` lay out a new
  environment: its directories, its `pyvenv.cfg`, and the interpreter with
  its aliases.

## Example

```python
from ripenv.tags import WheelTag, WheelTags

supported = WheelTags([WheelTag.from_str("cp311-cp311-linux_x86_64"),
                       WheelTag.from_str("py3-none-any")])
supported.is_compatible(WheelTag.from_str("py3-none-any"))   # True
supported.compatibility(WheelTag.from_str("py3-none-any"))   # -1
```

```python
from pathlib import Path
from ripenv.system_python import PythonInterpreterVersion
from ripenv.venv import PythonLocation, VEnv

python = PythonLocation()
exe, version = python.executable(), python.version()
root = Path("env").resolve()
VEnv.create_install_paths(root, f"lib/python{version.major}.{version.minor}/site-packages",
                          "include", "bin")
VEnv.create_pyvenv(root, exe, version)
VEnv.setup_python(root / "bin" / exe.name, exe, version)
env = VEnv(root, Path("bin"))
print(env.execute_command("import sys; print(sys.prefix)").stdout)
```

## What it does not do

- It keeps no download or metadata cache.
- It does not install wheels into an environment.
- It does not remove installed distributions.
- It does not compile installed files to byte code.
- It reads only package names from index pages. It does not parse the
  per-project list of artifacts.

## Installing and testing

```
pip install ripenv
pip install "ripenv[test]"
pytest
```

Some features start other programs: `git` for cloning, and a Python
interpreter for locating it, reading its version and running code in a
virtual environment.