# ---------------------------------------------------------------------------- #

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

import kopf
from kubernetes_asyncio.client import (  # type: ignore
    ApiClient,
    CoreV1Api,
    StorageV1Api,
    V1ObjectReference,
    V1PersistentVolume,
    V1PersistentVolumeClaim,
    V1StorageClass,
)

from hostpath_provisioner.core.provisioner import HostPathProvisioner
from hostpath_provisioner.shared.config import (
    DOMAIN,
    HANDLER_RETRY_DELAY,
    PROVISIONED_BY_ANNOTATION,
    STORAGE_PROVISIONER_ANNOTATIONS,
)
from hostpath_provisioner.shared.errors import InvalidPathError
from hostpath_provisioner.shared.kubernetes import (
    IgnoredError,
    ProvisionOptions,
    create_persistent_volume,
    delete_persistent_volume,
)

# ---------------------------------------------------------------------------- #


def run(
    provisioner: HostPathProvisioner, *, use_kubeconfig: bool = False
) -> None:

    # create Kubernetes API client object

    api_client = ApiClient()

    # define handlers

    registry = kopf.OperatorRegistry()

    _define_operator_handlers(
        registry, api_client, provisioner, use_kubeconfig=use_kubeconfig
    )
    _define_claim_handlers(registry, api_client, provisioner)
    _define_volume_handlers(registry, api_client, provisioner)

    # run kopf

    kopf.configure()
    kopf.run(registry=registry, standalone=True, clusterwide=True)


# ---------------------------------------------------------------------------- #
# Operator lifecycle


def _define_operator_handlers(
    registry: kopf.OperatorRegistry,
    api_client: ApiClient,
    provisioner: HostPathProvisioner,
    *,
    use_kubeconfig: bool,
) -> None:
    @kopf.on.login(registry=registry)
    async def on_login(**kwargs: Any) -> Optional[kopf.ConnectionInfo]:
        if use_kubeconfig:
            return kopf.login_with_kubeconfig(**kwargs)
        else:
            return kopf.login_via_client(**kwargs)

    @kopf.on.startup(registry=registry)
    async def on_startup(
        settings: kopf.OperatorSettings, logger: kopf.Logger, **_: object
    ) -> None:

        # keep kopf's own bookkeeping under our domain

        settings.persistence.finalizer = f"{DOMAIN}/kopf"

        settings.persistence.progress_storage = (
            kopf.AnnotationsProgressStorage(prefix=DOMAIN)
        )

        settings.persistence.diffbase_storage = (
            kopf.AnnotationsDiffBaseStorage(prefix=DOMAIN)
        )

        # don't create events

        settings.posting.enabled = False

        logger.info(
            f"Provisioner '{provisioner.name}' with identity"
            f" '{provisioner.identity}' serving {provisioner.storage_root}"
        )

    @kopf.on.cleanup(registry=registry)
    async def on_cleanup(**_: object) -> None:
        await api_client.close()


# ---------------------------------------------------------------------------- #
# Volume provisioning


def claim_requests_provisioner(
    provisioner_name: str,
    spec: Mapping[str, Any],
    annotations: Mapping[str, str],
) -> bool:
    """Whether a claim is unbound and waits on the named provisioner."""

    return not spec.get("volumeName") and any(
        annotations.get(key) == provisioner_name
        for key in STORAGE_PROVISIONER_ANNOTATIONS
    )


def complete_persistent_volume(
    pv: V1PersistentVolume,
    pvc: V1PersistentVolumeClaim,
    sc: V1StorageClass,
    provisioner_name: str,
) -> None:
    """Fill in the parts of a PersistentVolume that bind it to its claim and
    storage class."""

    pv.metadata.annotations[PROVISIONED_BY_ANNOTATION] = provisioner_name

    pv.spec.claim_ref = V1ObjectReference(
        api_version="v1",
        kind="PersistentVolumeClaim",
        name=pvc.metadata.name,
        namespace=pvc.metadata.namespace,
        uid=pvc.metadata.uid,
        resource_version=pvc.metadata.resource_version,
    )

    pv.spec.storage_class_name = sc.metadata.name
    pv.spec.volume_mode = pvc.spec.volume_mode
    pv.spec.mount_options = sc.mount_options


def _define_claim_handlers(
    registry: kopf.OperatorRegistry,
    api_client: ApiClient,
    provisioner: HostPathProvisioner,
) -> None:
    def when(
        spec: Mapping[str, Any], annotations: Mapping[str, str], **_: object
    ) -> bool:
        return claim_requests_provisioner(provisioner.name, spec, annotations)

    @kopf.on.resume("persistentvolumeclaims", registry=registry, when=when)
    @kopf.on.create("persistentvolumeclaims", registry=registry, when=when)
    @kopf.on.update("persistentvolumeclaims", registry=registry, when=when)
    async def provision_claim(
        name: str, namespace: str, logger: kopf.Logger, **_: object
    ) -> None:

        # get up-to-date PVC and its storage class

        pvc = await CoreV1Api(
            api_client
        ).read_namespaced_persistent_volume_claim(
            name=name, namespace=namespace
        )

        if pvc.spec.volume_name or not pvc.spec.storage_class_name:
            return  # already bound or not dynamically provisioned

        sc = await StorageV1Api(api_client).read_storage_class(
            name=pvc.spec.storage_class_name
        )

        if sc.provisioner != provisioner.name:
            return  # some other provisioner's claim

        # provision volume

        options = ProvisionOptions(
            pv_name=f"pvc-{pvc.metadata.uid}", pvc=pvc, storage_class=sc
        )

        try:
            pv, _state = await provisioner.provision(options)
        except InvalidPathError as e:
            raise kopf.PermanentError(str(e)) from e
        except OSError as e:
            raise kopf.TemporaryError(
                str(e), delay=HANDLER_RETRY_DELAY.total_seconds()
            ) from e

        # create PV object

        complete_persistent_volume(pv, pvc, sc, provisioner.name)

        await create_persistent_volume(api_client, pv)

        logger.info(
            f"Provisioned PersistentVolume {pv.metadata.name} at"
            f" {pv.spec.host_path.path}"
        )


# ---------------------------------------------------------------------------- #
# Volume deletion


def volume_awaits_deletion(
    provisioner_name: str,
    spec: Mapping[str, Any],
    status: Mapping[str, Any],
    annotations: Mapping[str, str],
) -> bool:
    """Whether a volume was released by its claim and must be deleted by the
    named provisioner."""

    return (
        status.get("phase") == "Released"
        and spec.get("persistentVolumeReclaimPolicy") == "Delete"
        and annotations.get(PROVISIONED_BY_ANNOTATION) == provisioner_name
    )


def _define_volume_handlers(
    registry: kopf.OperatorRegistry,
    api_client: ApiClient,
    provisioner: HostPathProvisioner,
) -> None:
    def when(
        spec: Mapping[str, Any],
        status: Mapping[str, Any],
        annotations: Mapping[str, str],
        **_: object,
    ) -> bool:
        return volume_awaits_deletion(
            provisioner.name, spec, status, annotations
        )

    # Status changes don't trigger update handlers, so a daemon is started
    # whenever a volume matches instead. It exits once done.

    @kopf.daemon("persistentvolumes", registry=registry, when=when)
    async def delete_volume(
        name: str, logger: kopf.Logger, **_: object
    ) -> None:

        pv = await CoreV1Api(api_client).read_persistent_volume(name=name)

        # delete backing directory

        try:
            await provisioner.delete(pv)
        except IgnoredError as e:
            logger.info(f"Leaving PersistentVolume {name} alone: {e.reason}")
            return
        except OSError as e:
            raise kopf.TemporaryError(
                str(e), delay=HANDLER_RETRY_DELAY.total_seconds()
            ) from e

        # delete PV object

        await delete_persistent_volume(api_client, name)

        logger.info(f"Deleted PersistentVolume {name}")


# ---------------------------------------------------------------------------- #
