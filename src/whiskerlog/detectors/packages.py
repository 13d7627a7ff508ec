"""Package manager operation detection."""

from typing import Optional

from ..history.models import PackageAction, PackageRef
from .pattern import PackageManager
from .patterns import DetectorTables, default_tables

# Options whose next token is their value, not a package
VALUE_OPTIONS = frozenset(
    {
        "-r",
        "--requirement",
        "-c",
        "--constraint",
        "-e",
        "--editable",
        "-i",
        "--index-url",
        "--extra-index-url",
        "--find-links",
        "-t",
        "--target",
        "--target-release",
        "--prefix",
        "--root",
        "--registry",
        "-o",
        "--path",
        "--git",
        "--branch",
        "--tag",
        "--rev",
        "--version",
        "--features",
    }
)


def _first_package(arguments: str) -> Optional[str]:
    """First positional argument of one package manager invocation."""
    tokens = iter(arguments.split())
    for token in tokens:
        if token in VALUE_OPTIONS:
            next(tokens, None)
        elif not token.startswith("-"):
            return token
    return None


def _detect_one(manager: PackageManager, command: str) -> Optional[PackageRef]:
    for match in manager.compiled.finditer(command):
        requirement = _first_package(match.group(2))
        if not requirement:
            continue
        name, version = manager.split_version(requirement)
        return PackageRef(
            manager=manager.name,
            name=name,
            version=version,
            action=PackageAction.parse(match.group(1)),
        )
    return None


def detect_packages(command: str, tables: Optional[DetectorTables] = None) -> list[PackageRef]:
    """One PackageRef per package manager invoked with an action and a name.

    "npm install react@18.2.0"   -> [npm react 18.2.0 install]
    "pip uninstall -y requests"  -> [pip requests uninstall]
    "apt update"                 -> [] (no package named)
    """
    tables = tables or default_tables()
    refs = []
    for manager in tables.package_managers:
        ref = _detect_one(manager, command)
        if ref is not None:
            refs.append(ref)
    return refs
