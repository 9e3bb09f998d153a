# ---------------------------------------------------------------------------- #

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from kubernetes_asyncio.client import V1PersistentVolume  # type: ignore

from hostpath_provisioner.core.assets import VolumeOwnership
from hostpath_provisioner.core.paths import resolve_volume_path
from hostpath_provisioner.shared.kubernetes import get_annotations

# ---------------------------------------------------------------------------- #


@dataclass(frozen=True)
class DeletionOutcome:
    pass


class DeletionOutcomes:
    @dataclass(frozen=True)
    class Removed(DeletionOutcome):
        """The backing directory no longer exists."""

        path: Path

    @dataclass(frozen=True)
    class Ignored(DeletionOutcome):
        """The volume belongs to another provisioner instance and was left
        untouched."""

        reason: str


# ---------------------------------------------------------------------------- #


def prepare_and_delete(
    volume: V1PersistentVolume, identity: str, root: Path
) -> DeletionOutcome:
    """
    Remove the directory backing the given volume if it was created by the
    provisioner instance with the given identity.

    Raises `MissingIdentityError` if the volume has no identity annotation.
    Filesystem errors other than the directory not existing propagate
    unchanged.
    """

    # check ownership

    ownership = VolumeOwnership.from_annotations(get_annotations(volume))

    if ownership.identity != identity:
        return DeletionOutcomes.Ignored(
            reason=(
                f"Identity annotation on PersistentVolume is"
                f" '{ownership.identity}', ours is '{identity}'"
            )
        )

    # find directory, using the default location for legacy volumes

    if ownership.path is not None:
        path = ownership.path
    else:
        path = resolve_volume_path(root, volume.metadata.name)

    # remove directory

    remove_tree(path)

    return DeletionOutcomes.Removed(path=path)


def remove_tree(path: Path) -> None:
    """Remove `path` and everything under it. Succeeds if it doesn't exist.
    Symlinks are removed, not followed."""

    try:
        if path.is_symlink() or not path.is_dir():
            path.unlink()
        else:
            shutil.rmtree(path)
    except FileNotFoundError:
        pass  # already removed, success


# ---------------------------------------------------------------------------- #
