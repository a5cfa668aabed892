"""Preflight checks for required external tools."""

from __future__ import annotations

import shutil
from typing import Callable

from core.config import EtcdfsConfig
from core.errors import EtcdfsDependencyError

ToolLocator = Callable[[str], str | None]

_INSTALL_HINTS = {
    "kubectl": "install kubectl and point it at the cluster (https://kubernetes.io/docs/tasks/tools/)",
    "auger": "install auger from https://github.com/etcd-io/auger",
}


def required_tools(config: EtcdfsConfig) -> tuple[str, ...]:
    """List executables every command needs on PATH."""
    return (config.kubectl_binary, config.codec_binary)


def check_dependencies(
    config: EtcdfsConfig,
    locate: ToolLocator | None = None,
) -> tuple[str, ...]:
    """Find required tools that are not available.

    Args:
        config: Runtime configuration naming the tool executables.
        locate: Executable lookup, ``shutil.which`` by default.

    Returns:
        Missing tool names in check order; empty when all are present.
    """
    finder = locate or shutil.which
    return tuple(tool for tool in required_tools(config) if finder(tool) is None)


def install_hint(tool: str) -> str:
    """Return an operator hint for installing a missing tool."""
    return _INSTALL_HINTS.get(tool.rsplit("/", 1)[-1], f"make '{tool}' available on PATH")


def require_dependencies(config: EtcdfsConfig, locate: ToolLocator | None = None) -> None:
    """Refuse to continue when a required tool is missing.

    Args:
        config: Runtime configuration naming the tool executables.
        locate: Executable lookup, ``shutil.which`` by default.

    Raises:
        EtcdfsDependencyError: With one ``missing dependency`` line per tool.
    """
    missing_tools = check_dependencies(config, locate)
    if missing_tools:
        raise EtcdfsDependencyError(
            "\n".join(f"missing dependency: {tool} ({install_hint(tool)})" for tool in missing_tools)
        )
