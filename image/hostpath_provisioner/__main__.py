# ---------------------------------------------------------------------------- #

from __future__ import annotations

import asyncio
import os
import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Sequence
from pathlib import Path
from typing import Optional

from kubernetes_asyncio.config import (  # type: ignore
    ConfigException,
    load_incluster_config,
    load_kube_config,
)

import hostpath_provisioner.agent.controller
from hostpath_provisioner.core.provisioner import HostPathProvisioner
from hostpath_provisioner.shared.errors import ConfigError
from hostpath_provisioner.shared.settings import load_settings
from hostpath_provisioner.shared.util import log

# ---------------------------------------------------------------------------- #


def main(argv: Optional[Sequence[str]] = None) -> None:
    """
    Usage:

        python -m hostpath_provisioner [--kubeconfig <path>]

    Configuration is read from the environment: NODE_NAME (required),
    NODE_HOST_PATH, NODE_HOST_PATH_ANNOTATION, HOSTPATH_PROVISIONER_NAME.
    """

    args = _parse_args(argv)

    # volume directories must get exactly the mode we ask for

    os.umask(0)

    try:
        settings = load_settings()
        _load_cluster_config(args.kubeconfig)
    except ConfigError as e:
        log(f"\033[31m{e}\033[0m")
        sys.exit(1)

    provisioner = HostPathProvisioner(settings)

    hostpath_provisioner.agent.controller.run(
        provisioner, use_kubeconfig=args.kubeconfig is not None
    )


def _parse_args(argv: Optional[Sequence[str]] = None) -> Namespace:

    parser = ArgumentParser(
        prog="python -m hostpath_provisioner",
        description=(
            "Dynamically provision PersistentVolumes as directories on the"
            " local host."
        ),
    )

    parser.add_argument(
        "--kubeconfig",
        type=Path,
        help="use this kubeconfig file instead of the in-cluster config",
    )

    return parser.parse_args(argv)


def _load_cluster_config(kubeconfig: Optional[Path]) -> None:

    try:
        if kubeconfig is None:
            load_incluster_config()
        else:
            asyncio.run(load_kube_config(config_file=str(kubeconfig)))
    except (ConfigException, OSError) as e:
        raise ConfigError(
            f"Failed to load Kubernetes configuration: {e}"
        ) from e

    # kopf logs in on its own and looks the file up in the environment

    if kubeconfig is not None:
        os.environ["KUBECONFIG"] = str(kubeconfig)


# ---------------------------------------------------------------------------- #

if __name__ == "__main__":
    main()

# ---------------------------------------------------------------------------- #
