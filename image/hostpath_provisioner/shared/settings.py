# ---------------------------------------------------------------------------- #

from __future__ import annotations

from pathlib import Path
from typing import Annotated

from pydantic import AfterValidator, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hostpath_provisioner.shared.config import (
    DEFAULT_OVERRIDE_ANNOTATION,
    DEFAULT_PROVISIONER_NAME,
    DEFAULT_STORAGE_ROOT,
)
from hostpath_provisioner.shared.errors import ConfigError

# ---------------------------------------------------------------------------- #


def ensure_absolute(path: Path) -> Path:
    if not path.is_absolute():
        raise ValueError(f"Must be an absolute path, got '{path}'")
    return path


class Settings(BaseSettings):
    """Startup configuration, read once from the environment. Empty variables
    are treated as unset."""

    HOSTPATH_PROVISIONER_NAME: Annotated[
        str,
        Field(
            default=DEFAULT_PROVISIONER_NAME,
            description="Name under which the provisioner registers itself.",
        ),
    ]
    NODE_NAME: Annotated[
        str,
        Field(
            description="Identity of this provisioner instance, normally the"
            " name of the node it runs on.",
        ),
    ]
    NODE_HOST_PATH: Annotated[
        Path,
        Field(
            default=DEFAULT_STORAGE_ROOT,
            description="Directory under which volume directories are created.",
        ),
        AfterValidator(ensure_absolute),
    ]
    NODE_HOST_PATH_ANNOTATION: Annotated[
        str,
        Field(
            default=DEFAULT_OVERRIDE_ANNOTATION,
            description="PersistentVolumeClaim annotation that selects a"
            " location for the volume relative to NODE_HOST_PATH.",
        ),
    ]

    model_config = SettingsConfigDict(frozen=True, env_ignore_empty=True)


def load_settings() -> Settings:

    try:
        return Settings()  # type: ignore[call-arg]
    except ValidationError as e:
        raise ConfigError(
            "Invalid configuration:"
            + "".join(
                f"\n  {'.'.join(map(str, err['loc']))}: {err['msg']}"
                for err in e.errors()
            )
        ) from e


# ---------------------------------------------------------------------------- #
