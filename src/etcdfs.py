"""Public SDK surface for etcdfs.

This module provides a stable import path for scripted use.
It re-exports the primary client, key mapping helpers, and typed models.
"""

from __future__ import annotations

from core.config import EtcdfsConfig
from core.key_paths import key_of, path_of
from core.preflight import check_dependencies, require_dependencies
from core.types import DumpOptions, DumpRecord, DumpSummary, ImportResult
from store.client import EtcdfsClient

__all__ = [
    "DumpOptions",
    "DumpRecord",
    "DumpSummary",
    "EtcdfsClient",
    "EtcdfsConfig",
    "ImportResult",
    "check_dependencies",
    "key_of",
    "path_of",
    "require_dependencies",
]
