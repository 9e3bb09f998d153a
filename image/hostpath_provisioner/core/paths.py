# ---------------------------------------------------------------------------- #

from __future__ import annotations

import posixpath
from pathlib import Path
from typing import Optional

from hostpath_provisioner.shared.errors import InvalidPathError

# ---------------------------------------------------------------------------- #


def resolve_volume_path(
    root: Path, name: str, override: Optional[str] = None
) -> Path:
    """
    Return the absolute path of the directory backing volume `name`.

    This is `root / name`, or `root / override` if an override location is
    given. The override comes from user-controlled claim annotations and is
    normalized and checked so that the result is always a strict descendant of
    `root`. No symlinks are resolved and the filesystem is not accessed.

    Raises `InvalidPathError` if the override (or the name, when there is no
    override) contains a NUL byte, is absolute, climbs out of `root` through
    `..` components, or designates `root` itself.
    """

    assert root.is_absolute()

    relative = name if override is None else override
    what = "volume name" if override is None else "location override"

    if "\x00" in relative:
        raise InvalidPathError(f"The {what} {relative!r} contains a NUL byte")

    if posixpath.isabs(relative):
        raise InvalidPathError(f"The {what} '{relative}' is an absolute path")

    normalized = posixpath.normpath(relative)

    if normalized == ".." or normalized.startswith("../"):
        raise InvalidPathError(
            f"The {what} '{relative}' points outside of '{root}'"
        )

    if normalized == ".":
        raise InvalidPathError(
            f"The {what} '{relative}' points to '{root}' itself"
        )

    return root / normalized


# ---------------------------------------------------------------------------- #
