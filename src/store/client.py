"""Python SDK for etcd dump and import operations.

This module exposes high-level APIs that wire the kubectl cluster
client, the etcd gateway, the object codec, and the transfer pipelines
together from one runtime configuration.
"""

from __future__ import annotations

from dataclasses import replace
from pathlib import Path

from core.config import EtcdfsConfig
from core.constants import DEFAULT_FILTER_PATTERN
from core.types import (
    ConfirmCallable,
    DumpOptions,
    DumpSummary,
    ImportResult,
    ObjectCodec,
    StoreGateway,
)
from store.cluster_client import ClusterClient
from store.command_runner import CommandRunner, SubprocessRunner
from store.etcd_gateway import EtcdGateway
from store.object_codec import AugerCodec
from transfer.confirmation import prompt_confirmation
from transfer.dump_processor import DumpProcessor, key_matches
from transfer.import_controller import ImportController


class EtcdfsClient:
    """Primary SDK entry point for dump and import workflows."""

    def __init__(
        self,
        config: EtcdfsConfig | None = None,
        gateway: StoreGateway | None = None,
        codec: ObjectCodec | None = None,
        confirm: ConfirmCallable | None = None,
        runner: CommandRunner | None = None,
    ) -> None:
        """Create SDK client.

        Args:
            config: Optional runtime configuration.
            gateway: Store gateway; etcdctl over kubectl when omitted.
            codec: Object codec; auger when omitted.
            confirm: Confirmation callable; interactive prompt when omitted.
            runner: Command runner used by the default gateway and codec.
        """
        self._config = config or EtcdfsConfig.from_env()
        self._runner = runner or SubprocessRunner(self._config.command_timeout_seconds)
        self._cluster = ClusterClient(self._config, self._runner)
        self._gateway = gateway or EtcdGateway(self._config, self._cluster)
        self._codec = codec or AugerCodec(self._config, self._runner)
        self._confirm = confirm or prompt_confirmation

    @property
    def config(self) -> EtcdfsConfig:
        """Return the runtime configuration."""
        return self._config

    def dump(self, options: DumpOptions | None = None) -> DumpSummary:
        """Dump matching store keys into the mapped file tree.

        Args:
            options: Dump options; dump everything when omitted.

        Returns:
            Dump summary with per-item failures.
        """
        processor = DumpProcessor(
            self._gateway,
            self._codec,
            self._config.output_dir,
            default_prefix=self._config.key_prefix,
        )
        return processor.run(options or DumpOptions())

    def put_file(self, file_path: str | Path) -> ImportResult:
        """Import one edited file into the store after confirmation.

        Args:
            file_path: Mapped file path.

        Returns:
            Import result with the resolved key and outcome.
        """
        controller = ImportController(
            gateway=self._gateway,
            codec=self._codec,
            confirm=self._confirm,
            root=self._config.output_dir,
            anchor=self._config.namespace_anchor,
            after_write=self._cluster.signal_apiserver,
        )
        return controller.write_one(Path(file_path))

    def list_keys(
        self,
        prefix: str | None = None,
        filter_pattern: str = DEFAULT_FILTER_PATTERN,
    ) -> list[str]:
        """List store keys under a prefix that match a glob pattern.

        Values are not decoded.

        Args:
            prefix: Store key prefix; the anchored namespace prefix when omitted.
            filter_pattern: Glob matched against each full key.

        Returns:
            Matching keys in store order.
        """
        return [
            record.key_text
            for record in self._gateway.dump_all(prefix or self._config.key_prefix)
            if key_matches(record, filter_pattern)
        ]

    def with_output_dir(self, output_dir: str | Path) -> "EtcdfsClient":
        """Clone the client with a different dump root.

        Args:
            output_dir: New dump root directory.

        Returns:
            New SDK client sharing gateway, codec, and confirmation.
        """
        updated_config = replace(self._config, output_dir=Path(output_dir).expanduser())
        return EtcdfsClient(
            updated_config,
            gateway=self._gateway,
            codec=self._codec,
            confirm=self._confirm,
            runner=self._runner,
        )
