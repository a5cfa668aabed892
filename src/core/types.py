"""Shared typed models.

This module defines immutable data models used by the store gateway,
the transfer pipelines, the SDK, and the CLI to keep interfaces explicit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, Literal, Protocol

from core.constants import DEFAULT_FILTER_PATTERN

ImportOutcome = Literal["written", "deleted", "skipped write", "skipped delete"]
ConfirmCallable = Callable[[str], bool]


@dataclass(frozen=True)
class DumpRecord:
    """One key/value pair read from a store snapshot.

    Attributes:
        key: Raw store key bytes.
        value: Raw store value bytes, exactly as persisted.
    """

    key: bytes
    value: bytes

    @property
    def key_text(self) -> str:
        """Key rendered for operator messages."""
        return self.key.decode("utf-8", errors="backslashreplace")


@dataclass(frozen=True)
class DumpOptions:
    """Dump command options.

    Attributes:
        filter_pattern: Glob pattern matched against each full key.
        prefix: Store key prefix read in the snapshot; the anchored
            namespace prefix when omitted.
        output_dir: Root directory for mapped files; config default when omitted.
    """

    filter_pattern: str = DEFAULT_FILTER_PATTERN
    prefix: str | None = None
    output_dir: Path | None = None


@dataclass(frozen=True)
class DumpSummary:
    """Result of one dump run.

    Attributes:
        output_dir: Absolute root directory files were written under.
        written: Number of files written.
        filtered: Number of records skipped by the filter pattern.
        failed_keys: Keys that could not be decoded or written.
    """

    output_dir: Path
    written: int = 0
    filtered: int = 0
    failed_keys: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ImportResult:
    """Result of importing one file.

    Attributes:
        file_path: Absolute source file path.
        key: Store key resolved from the file path.
        outcome: What happened to the key.
    """

    file_path: Path
    key: bytes
    outcome: ImportOutcome

    @property
    def key_text(self) -> str:
        """Key rendered for operator messages."""
        return self.key.decode("utf-8", errors="backslashreplace")


class StoreGateway(Protocol):
    """Prefix-read, put, and delete access to the key-value store."""

    def dump_all(self, prefix: str) -> Iterator[DumpRecord]:
        """Yield every record under a key prefix."""
        ...

    def put(self, key: bytes, value: bytes) -> None:
        """Create or overwrite one key."""
        ...

    def delete(self, key: bytes) -> None:
        """Remove one key."""
        ...


class ObjectCodec(Protocol):
    """Translation between stored binary objects and editable text."""

    def decode(self, value: bytes) -> bytes:
        """Decode a stored value into structured text."""
        ...

    def encode(self, document: bytes) -> bytes:
        """Encode structured text into a stored value."""
        ...
