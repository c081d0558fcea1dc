# SPDX-License-Identifier: MIT
"""Project file loading.

Reads a TOML project description into the in-memory model:

    [project]
    name = "demo"

    [[package]]
    name = "app"
    language = "c++"
    kind = "exe"
    files = ["src/main.cpp"]
    links = ["core", "m"]

    [[package.config]]
    name = "Debug"
    bindir = "bin"
    objdir = "obj/Debug"
    flags = ["extra-warnings"]

Unknown keys are rejected, so typos surface as errors instead of
silently missing settings.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from mkgen.core.errors import ModelError, ProjectFileError
from mkgen.core.project import Configuration, Package, Project

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_FILE = "mkgen.toml"

# TOML key -> Configuration field
_CONFIG_KEYS: dict[str, str] = {
    "name": "name",
    "bindir": "bindir",
    "libdir": "libdir",
    "objdir": "objdir",
    "outdir": "outdir",
    "target": "target",
    "defines": "defines",
    "includes": "include_paths",
    "flags": "flags",
    "buildoptions": "build_options",
    "linkoptions": "link_options",
    "libpaths": "lib_paths",
}

# TOML key -> Package field
_PACKAGE_KEYS: dict[str, str] = {
    "name": "name",
    "language": "language",
    "kind": "kind",
    "path": "path",
    "files": "files",
    "links": "links",
}

_CXXTEST_KEYS: dict[str, str] = {
    "path": "cxxtest_path",
    "options": "cxxtest_options",
    "root_options": "cxxtest_root_options",
    "root_file": "cxxtest_root_file",
}

# Keys holding arrays of strings; every other key holds a string
_LIST_KEYS = frozenset(
    {
        "defines",
        "includes",
        "flags",
        "buildoptions",
        "linkoptions",
        "libpaths",
        "files",
        "links",
    }
)


def _translate(
    table: dict[str, Any], keys: dict[str, str], what: str
) -> dict[str, Any]:
    unknown = sorted(set(table) - set(keys))
    if unknown:
        raise ModelError(f"{what}: unknown key(s): {', '.join(unknown)}")
    for key, value in table.items():
        if key in _LIST_KEYS:
            if not (
                isinstance(value, list) and all(isinstance(v, str) for v in value)
            ):
                raise ModelError(f"{what}: '{key}' must be an array of strings")
        elif not isinstance(value, str):
            raise ModelError(f"{what}: '{key}' must be a string")
    return {keys[key]: value for key, value in table.items()}


def _tables(value: Any, what: str) -> list[dict[str, Any]]:
    if not isinstance(value, list) or not all(isinstance(t, dict) for t in value):
        raise ModelError(f"{what} must be an array of tables")
    return value


def _table(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise ModelError(f"{what} must be a table")
    return value


def _load_config(table: dict[str, Any], package_name: str) -> Configuration:
    return Configuration(
        **_translate(table, _CONFIG_KEYS, f"package '{package_name}' config")
    )


def _load_package(table: dict[str, Any]) -> Package:
    table = dict(table)
    name = table.get("name", "<unnamed>")
    configs = [
        _load_config(t, name)
        for t in _tables(table.pop("config", []), f"package '{name}': 'config'")
    ]
    cxxtest = _table(table.pop("cxxtest", {}), f"package '{name}': 'cxxtest'")
    kwargs = _translate(table, _PACKAGE_KEYS, f"package '{name}'")
    kwargs.update(_translate(cxxtest, _CXXTEST_KEYS, f"package '{name}' cxxtest"))
    return Package(configurations=configs, **kwargs)


def project_from_dict(data: dict[str, Any]) -> Project:
    """Build a Project from parsed project file data.

    Raises:
        ModelError: If the data does not describe a valid project.
    """
    header = _table(data.get("project", {}), "'project'")
    project = Project(header.get("name", "project"))
    for table in _tables(data.get("package", []), "'package'"):
        project.add_package(_load_package(table))
    return project


def load_project(path: Path | str) -> Project:
    """Load a project file.

    Args:
        path: Path to the TOML project file.

    Raises:
        ProjectFileError: If the file cannot be read, is not valid TOML,
            or describes an invalid project.
    """
    path = Path(path)
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ProjectFileError(
            f"cannot read project file: {e.strerror}", str(path)
        ) from e
    except tomllib.TOMLDecodeError as e:
        raise ProjectFileError(f"invalid TOML: {e}", str(path)) from e

    try:
        project = project_from_dict(data)
    except (ModelError, TypeError) as e:
        message = e.message if isinstance(e, ModelError) else str(e)
        raise ProjectFileError(message, str(path)) from e

    logger.info("Loaded project %s with %d package(s)", project.name, len(project))
    return project
