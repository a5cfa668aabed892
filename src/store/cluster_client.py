"""kubectl-backed cluster access.

This module locates the etcd pod by label selector and runs commands
inside it. It also exposes the pod lookup used to signal API server
pods after a store write.
"""

from __future__ import annotations

from typing import Sequence

from core.config import EtcdfsConfig
from core.errors import EtcdfsClusterError
from core.logging_config import get_logger
from store.command_runner import CommandResult, CommandRunner

_LOGGER = get_logger(__name__)


class ClusterClient:
    """Thin kubectl wrapper scoped to the etcd namespace."""

    def __init__(self, config: EtcdfsConfig, runner: CommandRunner) -> None:
        self._config = config
        self._runner = runner
        self._etcd_pod: str | None = None

    def pods_matching(self, selector: str) -> list[str]:
        """List pod names matching a label selector.

        Args:
            selector: Kubernetes label selector, e.g. ``component=etcd``.

        Returns:
            Pod names in the order kubectl reports them.

        Raises:
            EtcdfsClusterError: If kubectl fails.
        """
        result = self._runner(
            [
                self._config.kubectl_binary,
                "get",
                "pods",
                "--namespace",
                self._config.etcd_namespace,
                "--selector",
                selector,
                "--output",
                "name",
            ],
            None,
        )
        if not result.ok:
            raise EtcdfsClusterError(
                f"Failed to list pods with selector '{selector}' in namespace "
                f"'{self._config.etcd_namespace}': {result.error_text}. "
                "Check kubectl context and credentials."
            )
        lines = result.stdout.decode("utf-8", errors="replace").splitlines()
        return [line.strip().removeprefix("pod/") for line in lines if line.strip()]

    def etcd_pod(self) -> str:
        """Resolve the etcd pod once per client.

        Returns:
            Name of the first pod matching the etcd selector.

        Raises:
            EtcdfsClusterError: If no etcd pod can be found.
        """
        if self._etcd_pod is None:
            pods = self.pods_matching(self._config.etcd_selector)
            if not pods:
                raise EtcdfsClusterError(
                    f"No etcd pod matches selector '{self._config.etcd_selector}' in namespace "
                    f"'{self._config.etcd_namespace}'. Set ETCDFS_ETCD_SELECTOR or "
                    "ETCDFS_NAMESPACE to reach the store."
                )
            self._etcd_pod = pods[0]
            _LOGGER.info("etcd_pod_resolved", pod=self._etcd_pod)
        return self._etcd_pod

    def exec_in_etcd_pod(
        self,
        command: Sequence[str],
        stdin: bytes | None = None,
        env: dict[str, str] | None = None,
    ) -> CommandResult:
        """Run a command inside the etcd pod.

        Args:
            command: Argument vector executed in the pod.
            stdin: Optional bytes fed to the remote process.
            env: Environment variables set for the remote process.

        Returns:
            Completed command output; failures are left to the caller.
        """
        env_args = [f"{name}={value}" for name, value in sorted((env or {}).items())]
        argv = [
            self._config.kubectl_binary,
            "exec",
            "--namespace",
            self._config.etcd_namespace,
        ]
        if stdin is not None:
            argv.append("--stdin")
        argv.extend([self.etcd_pod(), "--"])
        if env_args:
            argv.extend(["env", *env_args])
        argv.extend(command)
        return self._runner(argv, stdin)

    def signal_apiserver(self) -> list[str]:
        """Report API server pods that would be asked to reload.

        The reload itself is not performed; forcing API servers to drop
        their watch caches has no agreed recovery procedure yet.

        Returns:
            Names of matching API server pods, empty when disabled.
        """
        if not self._config.signal_apiserver:
            return []
        pods = self.pods_matching(self._config.apiserver_selector)
        _LOGGER.info("apiserver_signal_skipped", pods=pods)
        return pods
