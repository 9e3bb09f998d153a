# ---------------------------------------------------------------------------- #

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum, unique
from http import HTTPStatus
from typing import Any, Protocol

from kubernetes_asyncio.client import (  # type: ignore
    ApiClient,
    ApiException,
    CoreV1Api,
    V1PersistentVolume,
    V1PersistentVolumeClaim,
    V1StorageClass,
)

# ---------------------------------------------------------------------------- #
# Contract between the provisioning controller and a provisioner


@unique
class ProvisioningState(Enum):
    FINISHED = "Finished"
    """Provisioning is over, whether it succeeded or not. Nothing is left
    running in the background."""


@dataclass(frozen=True)
class ProvisionOptions:

    pv_name: str
    """Name to give the PersistentVolume. Unique per claim."""

    pvc: V1PersistentVolumeClaim
    storage_class: V1StorageClass


class IgnoredError(Exception):
    """Raised by a provisioner to signal that the volume is not its
    responsibility. The controller must neither retry nor report it."""

    reason: str

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class Provisioner(Protocol):
    async def provision(
        self, options: ProvisionOptions
    ) -> tuple[V1PersistentVolume, ProvisioningState]:
        ...

    async def delete(self, volume: V1PersistentVolume) -> None:
        ...


# ---------------------------------------------------------------------------- #


def get_annotations(obj: Any) -> Mapping[str, str]:
    """Annotations of the given Kubernetes object, empty if it has none."""

    if obj.metadata is None or obj.metadata.annotations is None:
        return {}

    return obj.metadata.annotations


async def create_persistent_volume(
    api_client: ApiClient, pv: V1PersistentVolume
) -> None:

    try:
        await CoreV1Api(api_client).create_persistent_volume(body=pv)
    except ApiException as e:
        if e.status == HTTPStatus.CONFLICT:
            return  # object already exists, success
        else:
            raise  # some other error occurred, reraise exception


async def delete_persistent_volume(api_client: ApiClient, name: str) -> None:

    try:
        await CoreV1Api(api_client).delete_persistent_volume(name=name)
    except ApiException as e:
        if e.status == HTTPStatus.NOT_FOUND:
            return  # object doesn't exist, success
        else:
            raise  # some other error occurred, reraise exception


# ---------------------------------------------------------------------------- #
