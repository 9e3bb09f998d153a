# ---------------------------------------------------------------------------- #

from __future__ import annotations

import asyncio
from pathlib import Path

from kubernetes_asyncio.client import V1PersistentVolume  # type: ignore

from hostpath_provisioner.core.assets import build_volume_asset
from hostpath_provisioner.core.deletion import (
    DeletionOutcomes,
    prepare_and_delete,
)
from hostpath_provisioner.core.paths import resolve_volume_path
from hostpath_provisioner.shared.kubernetes import (
    IgnoredError,
    ProvisioningState,
    ProvisionOptions,
    get_annotations,
)
from hostpath_provisioner.shared.settings import Settings
from hostpath_provisioner.shared.util import log_call

# ---------------------------------------------------------------------------- #


class HostPathProvisioner:
    """
    Provisions PersistentVolumes as directories under a storage root on the
    local host.

    Claims may request a specific location relative to the storage root through
    an annotation. Volumes are annotated with the identity of the provisioner
    instance that created them, and other instances refuse to delete them.
    """

    __settings: Settings

    def __init__(self, settings: Settings) -> None:
        self.__settings = settings

    @property
    def name(self) -> str:
        return self.__settings.HOSTPATH_PROVISIONER_NAME

    @property
    def identity(self) -> str:
        return self.__settings.NODE_NAME

    @property
    def storage_root(self) -> Path:
        return self.__settings.NODE_HOST_PATH

    @log_call
    async def provision(
        self, options: ProvisionOptions
    ) -> tuple[V1PersistentVolume, ProvisioningState]:

        override = get_annotations(options.pvc).get(
            self.__settings.NODE_HOST_PATH_ANNOTATION
        )

        path = resolve_volume_path(
            root=self.storage_root, name=options.pv_name, override=override
        )

        return await asyncio.to_thread(
            build_volume_asset, options, path, self.identity
        )

    @log_call
    async def delete(self, volume: V1PersistentVolume) -> None:

        outcome = await asyncio.to_thread(
            prepare_and_delete, volume, self.identity, self.storage_root
        )

        if isinstance(outcome, DeletionOutcomes.Ignored):
            raise IgnoredError(outcome.reason)


# ---------------------------------------------------------------------------- #
