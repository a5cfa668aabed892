"""Unit tests for the snapshot dump pipeline."""

from __future__ import annotations

import io

import pytest

from core.errors import EtcdfsStoreError
from core.types import DumpOptions
from transfer.dump_processor import DumpProcessor
from tests.fakes import PROTOBUF_MAGIC, FakeCodec, FakeStore

_POD_KEY = b"/registry/pods/default/foo"
_POD_DOCUMENT = b"apiVersion: v1\nkind: Pod\nmetadata:\n  name: foo\n"


def _processor(store, tmp_path, errors=None) -> DumpProcessor:
    return DumpProcessor(store, FakeCodec(), tmp_path / "out", error_stream=errors)


def test_dump_writes_decoded_document_to_mapped_path(tmp_path) -> None:
    """A decodable value should land under its mapped path verbatim."""
    store = FakeStore({_POD_KEY: PROTOBUF_MAGIC + _POD_DOCUMENT})

    summary = _processor(store, tmp_path).run(DumpOptions())
    target = tmp_path / "out" / "registry" / "pods" / "default" / "foo.yaml"

    assert target.read_bytes() == _POD_DOCUMENT and summary.written == 1


def test_dump_filter_skips_non_matching_keys(tmp_path) -> None:
    """Keys outside the glob pattern should never be written."""
    store = FakeStore({_POD_KEY: PROTOBUF_MAGIC + _POD_DOCUMENT})

    summary = _processor(store, tmp_path).run(DumpOptions(filter_pattern="/registry/secrets/*"))

    assert summary.filtered == 1 and not (tmp_path / "out").exists()


def test_dump_filter_writes_exactly_matching_keys(tmp_path) -> None:
    """Written files should equal the set of keys matching the pattern."""
    keys = [
        b"/registry/pods/default/a",
        b"/registry/pods/kube-system/b",
        b"/registry/secrets/default/c",
        b"/registry/configmaps/default/d",
    ]
    store = FakeStore({key: PROTOBUF_MAGIC + b"apiVersion: v1\n" for key in keys})

    _processor(store, tmp_path).run(DumpOptions(filter_pattern="/registry/*/default/*"))
    written = sorted(
        path.relative_to(tmp_path / "out").as_posix()
        for path in (tmp_path / "out").rglob("*.yaml")
    )

    assert written == [
        "registry/configmaps/default/d.yaml",
        "registry/pods/default/a.yaml",
        "registry/secrets/default/c.yaml",
    ]


def test_dump_continues_after_decode_failure(tmp_path) -> None:
    """One undecodable value should not stop the remaining records."""
    items = {
        f"/registry/pods/default/pod-{index}".encode(): PROTOBUF_MAGIC + b"apiVersion: v1\n"
        for index in range(5)
    }
    items[b"/registry/pods/default/pod-2"] = b"\x0a\x0bcorrupt"
    errors = io.StringIO()

    summary = _processor(FakeStore(items), tmp_path, errors).run(DumpOptions())
    error_lines = errors.getvalue().splitlines()

    assert (
        summary.written == 4
        and summary.failed_keys == ("/registry/pods/default/pod-2",)
        and len(list((tmp_path / "out").rglob("*.yaml"))) == 4
        and len(error_lines) == 1
        and "/registry/pods/default/pod-2" in error_lines[0]
    )


def test_dump_reports_unmappable_key_and_continues(tmp_path) -> None:
    """Traversal keys should be reported without escaping the root."""
    store = FakeStore(
        {
            b"/registry/../escape": PROTOBUF_MAGIC + b"apiVersion: v1\n",
            _POD_KEY: PROTOBUF_MAGIC + _POD_DOCUMENT,
        }
    )
    errors = io.StringIO()

    summary = _processor(store, tmp_path, errors).run(DumpOptions())

    assert (
        summary.written == 1
        and not (tmp_path / "escape.yaml").exists()
        and "failed to map /registry/../escape" in errors.getvalue()
    )


def test_dump_overwrites_existing_files_idempotently(tmp_path) -> None:
    """Dumping identical contents twice should give identical files."""
    store = FakeStore({_POD_KEY: PROTOBUF_MAGIC + _POD_DOCUMENT})
    processor = _processor(store, tmp_path)
    target = tmp_path / "out" / "registry" / "pods" / "default" / "foo.yaml"

    processor.run(DumpOptions())
    first = target.read_bytes()
    target.write_bytes(b"local edit")
    processor.run(DumpOptions())

    assert target.read_bytes() == first == _POD_DOCUMENT


def test_dump_uses_output_dir_from_options(tmp_path) -> None:
    """An explicit output dir should override the default root."""
    store = FakeStore({_POD_KEY: PROTOBUF_MAGIC + _POD_DOCUMENT})

    summary = _processor(store, tmp_path).run(DumpOptions(output_dir=tmp_path / "elsewhere"))

    assert summary.output_dir == (tmp_path / "elsewhere").resolve() and (
        tmp_path / "elsewhere" / "registry" / "pods" / "default" / "foo.yaml"
    ).exists()


def test_dump_propagates_store_failure(tmp_path) -> None:
    """Store connectivity failures should abort the whole run."""

    class _BrokenStore(FakeStore):
        def dump_all(self, prefix):
            raise EtcdfsStoreError("Failed to read keys: connection refused")

    with pytest.raises(EtcdfsStoreError):
        _processor(_BrokenStore(), tmp_path).run(DumpOptions())


def test_dump_consumes_records_one_at_a_time(tmp_path) -> None:
    """Each record should be on disk before the next one is pulled."""
    target_dir = tmp_path / "out" / "registry" / "pods" / "default"
    observed: list[bool] = []

    class _ObservingStore(FakeStore):
        def dump_all(self, prefix):
            for index, record in enumerate(super().dump_all(prefix)):
                observed.append(len(list(target_dir.glob("*.yaml"))) == index)
                yield record

    store = _ObservingStore(
        {
            f"/registry/pods/default/p{index}".encode(): PROTOBUF_MAGIC + b"apiVersion: v1\n"
            for index in range(3)
        }
    )

    _processor(store, tmp_path).run(DumpOptions())

    assert observed == [True, True, True]


def test_dump_reads_default_prefix_when_options_omit_it(tmp_path) -> None:
    """Without an explicit prefix the processor should read its default prefix."""
    store = FakeStore({b"/openshift.io/routes/default/web": PROTOBUF_MAGIC + b"apiVersion: v1\n"})
    processor = DumpProcessor(store, FakeCodec(), tmp_path / "out", default_prefix="/openshift.io/")

    summary = processor.run(DumpOptions())

    assert store.dump_prefixes == ["/openshift.io/"] and summary.written == 1


def test_dump_explicit_prefix_overrides_default(tmp_path) -> None:
    """An explicit prefix should be read as given."""
    store = FakeStore()

    _processor(store, tmp_path).run(DumpOptions(prefix="/registry/pods/"))

    assert store.dump_prefixes == ["/registry/pods/"]
