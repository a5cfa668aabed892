"""Unit tests for the etcdctl store gateway."""

from __future__ import annotations

import base64
import json

import pytest

from core.config import EtcdfsConfig
from core.errors import EtcdfsStoreError
from core.types import DumpRecord
from store.cluster_client import ClusterClient
from store.etcd_gateway import EtcdGateway, decode_snapshot_entry
from tests.fakes import FakeRunner, failed_result, ok_result

_BINARY_VALUE = b"k8s\x00\n\x0f\n\x02v1\x12\x03Pod\x00\xff\xfe"


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def _snapshot(*pairs: tuple[bytes, bytes]) -> bytes:
    payload = {
        "header": {"cluster_id": 1, "revision": 42},
        "kvs": [
            {"key": _b64(key), "value": _b64(value), "mod_revision": 7, "version": 1}
            for key, value in pairs
        ],
        "count": len(pairs),
    }
    return json.dumps(payload).encode("utf-8")


def _gateway(etcdctl_handler) -> tuple[EtcdGateway, FakeRunner]:
    def _handler(args, stdin):
        if args[1] == "get" and args[2] == "pods":
            return ok_result(args, b"pod/etcd-0\n")
        return etcdctl_handler(args, stdin)

    runner = FakeRunner(_handler)
    config = EtcdfsConfig()
    return EtcdGateway(config, ClusterClient(config, runner)), runner


def test_dump_all_reverses_base64_transport_encoding() -> None:
    """Binary values should come back byte for byte."""
    gateway, _ = _gateway(
        lambda args, stdin: ok_result(args, _snapshot((b"/registry/pods/default/foo", _BINARY_VALUE)))
    )

    records = list(gateway.dump_all("/registry/"))

    assert records == [DumpRecord(key=b"/registry/pods/default/foo", value=_BINARY_VALUE)]


def test_dump_all_issues_single_prefix_read_with_certificates() -> None:
    """The snapshot should be one authenticated etcdctl get."""
    gateway, runner = _gateway(lambda args, stdin: ok_result(args, _snapshot()))

    list(gateway.dump_all("/registry/"))
    etcdctl_calls = [args for args, _ in runner.calls if "etcdctl" in args]

    assert len(etcdctl_calls) == 1 and etcdctl_calls[0][-10:] == (
        "ETCDCTL_API=3",
        "etcdctl",
        "--cacert=/etc/kubernetes/pki/etcd/ca.crt",
        "--cert=/etc/kubernetes/pki/etcd/server.crt",
        "--key=/etc/kubernetes/pki/etcd/server.key",
        "get",
        "/registry/",
        "--prefix",
        "-w",
        "json",
    )


def test_dump_all_handles_snapshot_without_kvs() -> None:
    """An empty store returns no kvs field and no records."""
    gateway, _ = _gateway(lambda args, stdin: ok_result(args, b'{"header": {"revision": 1}}'))

    assert list(gateway.dump_all("/registry/")) == []


def test_dump_all_fails_eagerly_on_etcdctl_error() -> None:
    """Transport failures should raise before any record is consumed."""
    gateway, _ = _gateway(
        lambda args, stdin: failed_result(args, b"context deadline exceeded")
    )

    with pytest.raises(EtcdfsStoreError, match="context deadline exceeded"):
        gateway.dump_all("/registry/")


def test_dump_all_rejects_malformed_json() -> None:
    """Non-JSON output should raise a store error."""
    gateway, _ = _gateway(lambda args, stdin: ok_result(args, b"/registry/pods/default/foo\n"))

    with pytest.raises(EtcdfsStoreError):
        gateway.dump_all("/registry/")


def test_put_streams_value_on_stdin() -> None:
    """Put should pass the raw value on stdin, never on the command line."""
    gateway, runner = _gateway(lambda args, stdin: ok_result(args, b"OK\n"))

    gateway.put(b"/registry/pods/default/foo", _BINARY_VALUE)
    args, stdin = runner.calls[-1]

    assert stdin == _BINARY_VALUE and args[-2:] == ("put", "/registry/pods/default/foo")


def test_delete_issues_del_for_key() -> None:
    """Delete should run etcdctl del for the exact key."""
    gateway, runner = _gateway(lambda args, stdin: ok_result(args, b"0\n"))

    gateway.delete(b"/registry/pods/default/foo")
    args, _ = runner.calls[-1]

    assert args[-2:] == ("del", "/registry/pods/default/foo")


def test_put_surfaces_remote_error_verbatim() -> None:
    """Remote stderr should appear unchanged in the raised error."""
    gateway, _ = _gateway(
        lambda args, stdin: failed_result(args, b"Error: etcdserver: permission denied")
    )

    with pytest.raises(EtcdfsStoreError, match="etcdserver: permission denied"):
        gateway.put(b"/registry/pods/default/foo", b"value")


def test_delete_surfaces_remote_error_verbatim() -> None:
    """A rejected delete should raise with the remote stderr unchanged."""
    gateway, _ = _gateway(
        lambda args, stdin: failed_result(args, b"Error: etcdserver: permission denied")
    )

    with pytest.raises(EtcdfsStoreError, match="etcdserver: permission denied"):
        gateway.delete(b"/registry/pods/default/foo")


def test_decode_snapshot_entry_defaults_missing_value_to_empty() -> None:
    """etcd omits empty values from JSON output."""
    record = decode_snapshot_entry({"key": _b64(b"/registry/empty")})

    assert record == DumpRecord(key=b"/registry/empty", value=b"")


def test_decode_snapshot_entry_rejects_invalid_base64() -> None:
    """Corrupt transport text should raise instead of yielding bad bytes."""
    with pytest.raises(EtcdfsStoreError):
        decode_snapshot_entry({"key": "not base64!", "value": ""})
