"""Snapshot dump into a mapped YAML file tree.

This module pulls one store snapshot, decodes each matching value
through the object codec, and writes it under its mapped path. Records
are handled one at a time and a failing record never stops the batch.
"""

from __future__ import annotations

import fnmatch
import sys
from pathlib import Path
from typing import TextIO

from core.constants import DEFAULT_KEY_PREFIX
from core.errors import EtcdfsCodecError, EtcdfsKeyError
from core.key_paths import path_of
from core.logging_config import get_logger
from core.types import DumpOptions, DumpRecord, DumpSummary, ObjectCodec, StoreGateway

_LOGGER = get_logger(__name__)


class DumpProcessor:
    """Stream store records through the codec onto disk."""

    def __init__(
        self,
        gateway: StoreGateway,
        codec: ObjectCodec,
        default_output_dir: Path,
        error_stream: TextIO | None = None,
        default_prefix: str = DEFAULT_KEY_PREFIX,
    ) -> None:
        self._gateway = gateway
        self._codec = codec
        self._default_output_dir = default_output_dir
        self._default_prefix = default_prefix
        self._error_stream = error_stream

    def run(self, options: DumpOptions) -> DumpSummary:
        """Dump every record under the prefix that matches the filter.

        Args:
            options: Dump options.

        Returns:
            Counts of written and filtered records plus failed keys.

        Raises:
            EtcdfsStoreError: If the snapshot cannot be read.
            EtcdfsClusterError: If the store cannot be reached.
        """
        output_dir = (options.output_dir or self._default_output_dir).expanduser().resolve()
        prefix = options.prefix or self._default_prefix
        _LOGGER.info(
            "dump_started",
            prefix=prefix,
            filter_pattern=options.filter_pattern,
            output_dir=str(output_dir),
        )
        written = 0
        filtered = 0
        failed_keys: list[str] = []
        for record in self._gateway.dump_all(prefix):
            if not key_matches(record, options.filter_pattern):
                filtered += 1
                continue
            if self._write_record(record, output_dir):
                written += 1
            else:
                failed_keys.append(record.key_text)
        summary = DumpSummary(
            output_dir=output_dir,
            written=written,
            filtered=filtered,
            failed_keys=tuple(failed_keys),
        )
        _LOGGER.info(
            "dump_completed",
            written=summary.written,
            filtered=summary.filtered,
            failed=len(summary.failed_keys),
        )
        return summary

    def _write_record(self, record: DumpRecord, output_dir: Path) -> bool:
        try:
            target_path = path_of(record.key, output_dir)
            document = self._codec.decode(record.value)
            target_path.parent.mkdir(parents=True, exist_ok=True)
            target_path.write_bytes(document)
        except (EtcdfsKeyError, EtcdfsCodecError, OSError) as error:
            self._report_failure(record, error)
            return False
        _LOGGER.debug("dump_item_written", key=record.key_text, path=str(target_path))
        return True

    def _report_failure(self, record: DumpRecord, error: Exception) -> None:
        stream = self._error_stream or sys.stderr
        print(f"error: failed to {_failed_action(error)} {record.key_text}: {error}", file=stream)
        _LOGGER.warning("dump_item_failed", key=record.key_text, error=str(error))


def key_matches(record: DumpRecord, filter_pattern: str) -> bool:
    """Check a record key against a glob pattern.

    Args:
        record: Snapshot record.
        filter_pattern: Case-sensitive glob, ``*`` matches everything.

    Returns:
        True when the full key matches.
    """
    return fnmatch.fnmatchcase(record.key_text, filter_pattern)


def _failed_action(error: Exception) -> str:
    if isinstance(error, EtcdfsCodecError):
        return "decode"
    if isinstance(error, EtcdfsKeyError):
        return "map"
    return "write"
