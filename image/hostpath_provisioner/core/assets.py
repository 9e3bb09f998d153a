# ---------------------------------------------------------------------------- #

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from kubernetes_asyncio.client import (  # type: ignore
    V1HostPathVolumeSource,
    V1ObjectMeta,
    V1PersistentVolume,
    V1PersistentVolumeSpec,
)

from hostpath_provisioner.shared.config import (
    IDENTITY_ANNOTATION,
    PATH_ANNOTATION,
    VOLUME_DIRECTORY_MODE,
)
from hostpath_provisioner.shared.errors import MissingIdentityError
from hostpath_provisioner.shared.kubernetes import (
    ProvisioningState,
    ProvisionOptions,
)

# ---------------------------------------------------------------------------- #


@dataclass(frozen=True)
class VolumeOwnership:
    """Ownership and location metadata stored in PersistentVolume
    annotations."""

    identity: str

    path: Optional[Path]
    """None for legacy volumes, which were created before the path was
    recorded."""

    @staticmethod
    def from_annotations(annotations: Mapping[str, str]) -> VolumeOwnership:

        identity = annotations.get(IDENTITY_ANNOTATION)

        if identity is None:
            raise MissingIdentityError(
                f"Annotation '{IDENTITY_ANNOTATION}' not found on"
                f" PersistentVolume"
            )

        path = annotations.get(PATH_ANNOTATION)

        return VolumeOwnership(
            identity=identity, path=None if path is None else Path(path)
        )

    def to_annotations(self) -> dict[str, str]:

        annotations = {IDENTITY_ANNOTATION: self.identity}

        if self.path is not None:
            annotations[PATH_ANNOTATION] = str(self.path)

        return annotations


# ---------------------------------------------------------------------------- #


def build_volume_asset(
    options: ProvisionOptions, path: Path, identity: str
) -> tuple[V1PersistentVolume, ProvisioningState]:
    """
    Create the directory backing a volume and return the PersistentVolume that
    represents it.

    Creating a directory that already exists succeeds. Other filesystem errors
    propagate unchanged.
    """

    path.mkdir(mode=VOLUME_DIRECTORY_MODE, parents=True, exist_ok=True)

    ownership = VolumeOwnership(identity=identity, path=path)

    pvc_spec = options.pvc.spec

    pv = V1PersistentVolume(
        metadata=V1ObjectMeta(
            name=options.pv_name,
            annotations=ownership.to_annotations(),
        ),
        spec=V1PersistentVolumeSpec(
            persistent_volume_reclaim_policy=(
                options.storage_class.reclaim_policy
            ),
            access_modes=pvc_spec.access_modes,
            capacity={"storage": pvc_spec.resources.requests["storage"]},
            host_path=V1HostPathVolumeSource(path=str(path)),
        ),
    )

    return pv, ProvisioningState.FINISHED


# ---------------------------------------------------------------------------- #
