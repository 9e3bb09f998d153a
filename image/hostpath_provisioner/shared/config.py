# ---------------------------------------------------------------------------- #

from __future__ import annotations

from datetime import timedelta
from pathlib import Path

# ---------------------------------------------------------------------------- #

DOMAIN = "hostpath-provisioner.k8s.io"
"""Used as a prefix for the annotations that kopf stores on the objects it
handles."""

IDENTITY_ANNOTATION = "hostPathProvisionerIdentity"
"""PersistentVolume annotation holding the identity of the provisioner instance
that created the volume."""

PATH_ANNOTATION = "hostPathProvisionerPath"
"""PersistentVolume annotation holding the absolute path of the directory
backing the volume. Missing from volumes created by older versions."""

PROVISIONED_BY_ANNOTATION = "pv.kubernetes.io/provisioned-by"
"""PersistentVolume annotation naming the provisioner that created it."""

STORAGE_PROVISIONER_ANNOTATIONS = (
    "volume.kubernetes.io/storage-provisioner",
    "volume.beta.kubernetes.io/storage-provisioner",
)
"""PersistentVolumeClaim annotations set by Kubernetes to name the provisioner
that is expected to provision the claim."""

VOLUME_DIRECTORY_MODE = 0o777
"""Mode of created volume directories. Only exact if the process umask is 0."""

DEFAULT_PROVISIONER_NAME = "hostpath"
DEFAULT_STORAGE_ROOT = Path("/mnt/hostpath")
DEFAULT_OVERRIDE_ANNOTATION = "hostPath"

HANDLER_RETRY_DELAY = timedelta(seconds=5)
"""Amount of time kopf waits before retrying a handler after a temporary
failure."""

# ---------------------------------------------------------------------------- #
