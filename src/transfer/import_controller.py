"""Single-file import into the store.

This module resolves an edited file back to its store key, asks the
operator to confirm, and then encodes and puts the file or deletes the
key when the file is empty. Nothing reaches the store without an
explicit yes.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable

from core.errors import EtcdfsKeyError
from core.key_paths import key_of
from core.logging_config import get_logger
from core.types import ConfirmCallable, ImportResult, ObjectCodec, StoreGateway

_LOGGER = get_logger(__name__)

AfterWriteHook = Callable[[], object]


class ImportController:
    """Write one mapped file back to its store key."""

    def __init__(
        self,
        gateway: StoreGateway,
        codec: ObjectCodec,
        confirm: ConfirmCallable,
        root: Path,
        anchor: str,
        after_write: AfterWriteHook | None = None,
    ) -> None:
        self._gateway = gateway
        self._codec = codec
        self._confirm = confirm
        self._root = root
        self._anchor = anchor
        self._after_write = after_write

    def write_one(self, file_path: Path) -> ImportResult:
        """Import one file: encode and put it, or delete when it is empty.

        Args:
            file_path: Mapped file path, absolute or relative.

        Returns:
            Import result with the resolved key and outcome.

        Raises:
            EtcdfsKeyError: If the path has no namespace anchor segment.
            EtcdfsCodecError: If the file cannot be encoded; nothing is put.
            EtcdfsStoreError: If the store rejects the put or delete.
            OSError: If the file cannot be read.
        """
        # Symlinks are not followed; the key comes from the path as named.
        source_path = Path(os.path.abspath(file_path.expanduser()))
        key = self.resolve_key(source_path)
        key_text = key.decode("utf-8", errors="backslashreplace")
        if source_path.stat().st_size == 0:
            return self._delete(source_path, key, key_text)
        return self._write(source_path, key, key_text)

    def resolve_key(self, source_path: Path) -> bytes:
        """Resolve the store key for a file path.

        Raises:
            EtcdfsKeyError: If no namespace anchor segment is in the path.
        """
        key = key_of(source_path, self._root, self._anchor)
        if key is None:
            raise EtcdfsKeyError(
                f"Cannot resolve a store key for {source_path}: no '{self._anchor}' "
                "directory in its path. Only files under a dumped key tree can be imported."
            )
        return key

    def _write(self, source_path: Path, key: bytes, key_text: str) -> ImportResult:
        if not self._confirm(f"Write {source_path} to {key_text}?"):
            _LOGGER.info("import_declined", key=key_text, operation="write")
            return ImportResult(file_path=source_path, key=key, outcome="skipped write")
        value = self._codec.encode(source_path.read_bytes())
        self._gateway.put(key, value)
        self._notify_written()
        return ImportResult(file_path=source_path, key=key, outcome="written")

    def _delete(self, source_path: Path, key: bytes, key_text: str) -> ImportResult:
        if not self._confirm(f"Delete {key_text}?"):
            _LOGGER.info("import_declined", key=key_text, operation="delete")
            return ImportResult(file_path=source_path, key=key, outcome="skipped delete")
        self._gateway.delete(key)
        self._notify_written()
        return ImportResult(file_path=source_path, key=key, outcome="deleted")

    def _notify_written(self) -> None:
        if self._after_write is not None:
            self._after_write()
