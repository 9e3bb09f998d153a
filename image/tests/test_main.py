# ---------------------------------------------------------------------------- #

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest
from kubernetes_asyncio.config import ConfigException  # type: ignore

import hostpath_provisioner.__main__ as entry_point
import hostpath_provisioner.agent.controller
from hostpath_provisioner.shared.errors import ConfigError

# ---------------------------------------------------------------------------- #


def fail_to_load(*args: Any, **kwargs: Any) -> None:
    raise ConfigException("Service host/port is not set.")


async def fail_to_load_async(*args: Any, **kwargs: Any) -> None:
    raise ConfigException("Invalid kube-config file.")


class TestParseArgs:
    def test_defaults(self) -> None:
        assert entry_point._parse_args([]).kubeconfig is None

    def test_kubeconfig(self) -> None:

        args = entry_point._parse_args(["--kubeconfig", "/tmp/kubeconfig"])

        assert args.kubeconfig == Path("/tmp/kubeconfig")

    def test_unknown_argument(self) -> None:

        with pytest.raises(SystemExit):
            entry_point._parse_args(["--bogus"])


class TestLoadClusterConfig:
    def test_in_cluster(self, monkeypatch: pytest.MonkeyPatch) -> None:

        calls: list[str] = []

        monkeypatch.setattr(
            entry_point,
            "load_incluster_config",
            lambda: calls.append("in-cluster"),
        )

        entry_point._load_cluster_config(None)

        assert calls == ["in-cluster"]

    def test_in_cluster_failure(self, monkeypatch: pytest.MonkeyPatch) -> None:

        monkeypatch.setattr(entry_point, "load_incluster_config", fail_to_load)

        with pytest.raises(ConfigError, match="Service host/port"):
            entry_point._load_cluster_config(None)

    def test_kubeconfig(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:

        monkeypatch.delenv("KUBECONFIG", raising=False)

        loaded: list[str] = []

        async def load_kube_config(config_file: str) -> None:
            loaded.append(config_file)

        monkeypatch.setattr(entry_point, "load_kube_config", load_kube_config)
        monkeypatch.setattr(entry_point, "load_incluster_config", fail_to_load)

        path = tmp_path / "kubeconfig"

        entry_point._load_cluster_config(path)

        assert loaded == [str(path)]
        assert os.environ["KUBECONFIG"] == str(path)

    def test_kubeconfig_failure(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:

        monkeypatch.delenv("KUBECONFIG", raising=False)
        monkeypatch.setattr(entry_point, "load_kube_config", fail_to_load_async)

        with pytest.raises(ConfigError, match="Invalid kube-config"):
            entry_point._load_cluster_config(tmp_path / "kubeconfig")

        assert "KUBECONFIG" not in os.environ


class TestMain:
    @pytest.fixture(autouse=True)
    def no_operator(self, monkeypatch: pytest.MonkeyPatch) -> None:

        def run(*args: Any, **kwargs: Any) -> None:
            raise AssertionError("operator must not start")

        monkeypatch.setattr(hostpath_provisioner.agent.controller, "run", run)

    def test_missing_identity(
        self, monkeypatch: pytest.MonkeyPatch, cleared_umask: None
    ) -> None:

        monkeypatch.delenv("NODE_NAME", raising=False)

        with pytest.raises(SystemExit) as e:
            entry_point.main([])

        assert e.value.code == 1

    def test_cluster_config_failure(
        self, monkeypatch: pytest.MonkeyPatch, cleared_umask: None
    ) -> None:

        monkeypatch.setenv("NODE_NAME", "node-7")
        monkeypatch.setattr(entry_point, "load_incluster_config", fail_to_load)

        with pytest.raises(SystemExit) as e:
            entry_point.main([])

        assert e.value.code == 1


# ---------------------------------------------------------------------------- #
