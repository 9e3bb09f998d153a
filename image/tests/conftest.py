# ---------------------------------------------------------------------------- #

from __future__ import annotations

import os
from collections.abc import Callable, Iterator, Mapping
from pathlib import Path
from typing import Optional

import pytest
from kubernetes_asyncio.client import (  # type: ignore
    V1ObjectMeta,
    V1PersistentVolumeClaim,
    V1PersistentVolumeClaimSpec,
    V1ResourceRequirements,
    V1StorageClass,
)

from hostpath_provisioner.shared.kubernetes import ProvisionOptions
from hostpath_provisioner.shared.settings import Settings

# ---------------------------------------------------------------------------- #


@pytest.fixture
def storage_root(tmp_path: Path) -> Path:
    return tmp_path / "data" / "vols"


@pytest.fixture
def settings(storage_root: Path) -> Settings:
    return Settings(
        HOSTPATH_PROVISIONER_NAME="hostpath",
        NODE_NAME="node-7",
        NODE_HOST_PATH=storage_root,
        NODE_HOST_PATH_ANNOTATION="hostPath",
    )


@pytest.fixture
def make_options() -> Callable[..., ProvisionOptions]:
    def factory(
        pv_name: str = "vol-001",
        annotations: Optional[Mapping[str, str]] = None,
        access_modes: tuple[str, ...] = ("ReadWriteOnce",),
        capacity: str = "1Gi",
        reclaim_policy: str = "Delete",
    ) -> ProvisionOptions:

        pvc = V1PersistentVolumeClaim(
            metadata=V1ObjectMeta(
                name="claim",
                namespace="default",
                uid="0f6d3e1c-4a1b-4c5e-9a57-2f0c9d7b8e11",
                annotations=None if annotations is None else dict(annotations),
            ),
            spec=V1PersistentVolumeClaimSpec(
                access_modes=list(access_modes),
                resources=V1ResourceRequirements(
                    requests={"storage": capacity}
                ),
                storage_class_name="hostpath",
                volume_mode="Filesystem",
            ),
        )

        sc = V1StorageClass(
            metadata=V1ObjectMeta(name="hostpath"),
            provisioner="hostpath",
            reclaim_policy=reclaim_policy,
        )

        return ProvisionOptions(pv_name=pv_name, pvc=pvc, storage_class=sc)

    return factory


@pytest.fixture
def cleared_umask() -> Iterator[None]:
    previous = os.umask(0)
    try:
        yield
    finally:
        os.umask(previous)


# ---------------------------------------------------------------------------- #
