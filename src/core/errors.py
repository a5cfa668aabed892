"""etcdfs exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each subsystem raises a specific error type so the CLI can tell
fatal transport failures apart from per-item problems.
"""

from __future__ import annotations


class EtcdfsError(Exception):
    """Base exception for all etcdfs failures."""


class EtcdfsConfigError(EtcdfsError):
    """Raised for invalid runtime configuration."""


class EtcdfsDependencyError(EtcdfsError):
    """Raised when a required external tool is missing."""


class EtcdfsClusterError(EtcdfsError):
    """Raised when the cluster client cannot reach the etcd pod."""


class EtcdfsStoreError(EtcdfsError):
    """Raised for etcd read, write, and delete failures."""


class EtcdfsCodecError(EtcdfsError):
    """Raised when the object codec fails to encode or decode a value."""


class EtcdfsKeyError(EtcdfsError):
    """Raised when a store key and a file path cannot be mapped onto each other."""
