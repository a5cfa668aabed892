"""etcd store gateway.

This module issues prefix reads, puts, and deletes through etcdctl
inside the etcd pod. Keys and values stay raw bytes end to end; the
base64 text encoding etcdctl applies to its JSON output is reversed
before any record leaves this module.
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import Any, Iterator, Mapping, Sequence

from core.config import EtcdfsConfig
from core.constants import ETCDCTL_API_VERSION
from core.errors import EtcdfsStoreError
from core.logging_config import get_logger
from core.types import DumpRecord
from store.cluster_client import ClusterClient
from store.command_runner import CommandResult

_LOGGER = get_logger(__name__)


class EtcdGateway:
    """Store gateway backed by etcdctl in the etcd pod."""

    def __init__(self, config: EtcdfsConfig, cluster: ClusterClient) -> None:
        self._config = config
        self._cluster = cluster

    def dump_all(self, prefix: str) -> Iterator[DumpRecord]:
        """Read every key under a prefix in one request.

        The snapshot is fetched eagerly so connectivity failures surface
        here; records are then decoded one at a time as they are consumed.

        Args:
            prefix: Key prefix, e.g. ``/registry/``.

        Returns:
            Iterator of raw key/value records.

        Raises:
            EtcdfsStoreError: If etcdctl fails or returns malformed JSON.
        """
        result = self._etcdctl(["get", _key_arg(prefix.encode("utf-8")), "--prefix", "-w", "json"])
        _raise_for_result(result, f"read keys under prefix '{prefix}'")
        try:
            payload = json.loads(result.stdout)
        except ValueError as error:
            raise EtcdfsStoreError(
                f"Failed to parse etcdctl snapshot for prefix '{prefix}': {error}. "
                "Check that etcdctl supports '-w json'."
            ) from error
        entries = _snapshot_entries(payload, prefix)
        _LOGGER.info("snapshot_read", prefix=prefix, count=len(entries))
        return _iter_records(entries)

    def put(self, key: bytes, value: bytes) -> None:
        """Create or overwrite one key with the value streamed on stdin.

        Raises:
            EtcdfsStoreError: If etcdctl rejects the write.
        """
        result = self._etcdctl(["put", _key_arg(key)], stdin=value)
        _raise_for_result(result, f"put key {_key_arg(key)!r}")
        _LOGGER.info("store_put", key=_key_arg(key), value_bytes=len(value))

    def delete(self, key: bytes) -> None:
        """Delete one key; deleting a missing key succeeds.

        Raises:
            EtcdfsStoreError: If etcdctl cannot reach the store.
        """
        result = self._etcdctl(["del", _key_arg(key)])
        _raise_for_result(result, f"delete key {_key_arg(key)!r}")
        _LOGGER.info("store_delete", key=_key_arg(key))

    def _etcdctl(self, args: Sequence[str], stdin: bytes | None = None) -> CommandResult:
        command = [
            self._config.etcdctl_binary,
            f"--cacert={self._config.etcd_cacert}",
            f"--cert={self._config.etcd_cert}",
            f"--key={self._config.etcd_key}",
            *args,
        ]
        return self._cluster.exec_in_etcd_pod(
            command,
            stdin=stdin,
            env={"ETCDCTL_API": ETCDCTL_API_VERSION},
        )


def decode_snapshot_entry(entry: Mapping[str, Any]) -> DumpRecord:
    """Reverse etcdctl's base64 transport encoding for one entry.

    Args:
        entry: One item of the snapshot ``kvs`` array.

    Returns:
        Record holding the exact stored key and value bytes.

    Raises:
        EtcdfsStoreError: If the entry is missing fields or is not base64.
    """
    try:
        key = base64.b64decode(entry["key"], validate=True)
        value = base64.b64decode(entry.get("value", ""), validate=True)
    except (KeyError, TypeError, binascii.Error) as error:
        raise EtcdfsStoreError(
            f"Malformed snapshot entry {entry!r}: {error}. "
            "Expected base64 'key' and 'value' fields."
        ) from error
    return DumpRecord(key=key, value=value)


def _snapshot_entries(payload: object, prefix: str) -> list[Mapping[str, Any]]:
    if not isinstance(payload, Mapping):
        raise EtcdfsStoreError(
            f"Unexpected etcdctl snapshot for prefix '{prefix}': "
            f"expected a JSON object, got {type(payload).__name__}."
        )
    entries = payload.get("kvs") or []
    if not isinstance(entries, list):
        raise EtcdfsStoreError(
            f"Unexpected etcdctl snapshot for prefix '{prefix}': 'kvs' is not a list."
        )
    return entries


def _iter_records(entries: list[Mapping[str, Any]]) -> Iterator[DumpRecord]:
    for entry in entries:
        yield decode_snapshot_entry(entry)


def _key_arg(key: bytes) -> str:
    # surrogateescape lets non-UTF-8 keys reach argv byte for byte.
    return key.decode("utf-8", errors="surrogateescape")


def _raise_for_result(result: CommandResult, action: str) -> None:
    if result.ok:
        return
    raise EtcdfsStoreError(f"Failed to {action}: {result.error_text}")
