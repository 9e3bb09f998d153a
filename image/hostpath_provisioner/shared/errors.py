# ---------------------------------------------------------------------------- #

from __future__ import annotations

# ---------------------------------------------------------------------------- #


class HostPathProvisionerError(Exception):
    pass


class ConfigError(HostPathProvisionerError):
    """The startup configuration is missing a required setting or holds an
    invalid value. The process must not serve any requests."""


class InvalidPathError(HostPathProvisionerError, ValueError):
    """A requested volume location would not be a descendant of the storage
    root."""


class MissingIdentityError(HostPathProvisionerError):
    """A PersistentVolume has no identity annotation, so it can't be attributed
    to any provisioner instance."""


# ---------------------------------------------------------------------------- #
