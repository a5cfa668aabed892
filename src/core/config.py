"""Runtime configuration model for etcdfs.

This module owns all environment variable and config file parsing.
Other modules consume a typed config object instead of raw env reads.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
import os
from pathlib import Path
from typing import Any, Mapping, cast

import yaml

from core.constants import (
    CONFIG_FILE_ENV,
    DEFAULT_APISERVER_SELECTOR,
    DEFAULT_CODEC_BINARY,
    DEFAULT_COMMAND_TIMEOUT_SECONDS,
    DEFAULT_ETCD_CACERT,
    DEFAULT_ETCD_CERT,
    DEFAULT_ETCD_KEY,
    DEFAULT_ETCD_NAMESPACE,
    DEFAULT_ETCD_SELECTOR,
    DEFAULT_ETCDCTL_BINARY,
    DEFAULT_KUBECTL_BINARY,
    DEFAULT_NAMESPACE_ANCHOR,
    DEFAULT_OUTPUT_DIR_NAME,
    KEY_SEPARATOR,
)
from core.errors import EtcdfsConfigError

_ENV_FIELDS = {
    "ETCDFS_KUBECTL": "kubectl_binary",
    "ETCDFS_CODEC": "codec_binary",
    "ETCDFS_ETCDCTL": "etcdctl_binary",
    "ETCDFS_NAMESPACE": "etcd_namespace",
    "ETCDFS_ETCD_SELECTOR": "etcd_selector",
    "ETCDFS_APISERVER_SELECTOR": "apiserver_selector",
    "ETCDFS_CACERT": "etcd_cacert",
    "ETCDFS_CERT": "etcd_cert",
    "ETCDFS_KEY": "etcd_key",
    "ETCDFS_OUTPUT_DIR": "output_dir",
    "ETCDFS_ANCHOR": "namespace_anchor",
    "ETCDFS_TIMEOUT": "command_timeout_seconds",
    "ETCDFS_SIGNAL_APISERVER": "signal_apiserver",
}
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off", "")


@dataclass(frozen=True)
class EtcdfsConfig:
    """Validated runtime configuration.

    Attributes:
        kubectl_binary: Cluster client executable.
        codec_binary: Object codec executable.
        etcdctl_binary: Store CLI executable inside the etcd pod.
        etcd_namespace: Namespace holding the etcd pod.
        etcd_selector: Label selector matching the etcd pod.
        apiserver_selector: Label selector matching API server pods.
        etcd_cacert: CA bundle path on the etcd pod filesystem.
        etcd_cert: Client certificate path on the etcd pod filesystem.
        etcd_key: Client key path on the etcd pod filesystem.
        output_dir: Root directory for dumped files.
        namespace_anchor: Top-level key segment that bounds importable keys.
        command_timeout_seconds: Per-process timeout, ``None`` for no limit.
        signal_apiserver: Whether to signal API server pods after a write.
    """

    kubectl_binary: str = DEFAULT_KUBECTL_BINARY
    codec_binary: str = DEFAULT_CODEC_BINARY
    etcdctl_binary: str = DEFAULT_ETCDCTL_BINARY
    etcd_namespace: str = DEFAULT_ETCD_NAMESPACE
    etcd_selector: str = DEFAULT_ETCD_SELECTOR
    apiserver_selector: str = DEFAULT_APISERVER_SELECTOR
    etcd_cacert: str = DEFAULT_ETCD_CACERT
    etcd_cert: str = DEFAULT_ETCD_CERT
    etcd_key: str = DEFAULT_ETCD_KEY
    output_dir: Path = Path(DEFAULT_OUTPUT_DIR_NAME)
    namespace_anchor: str = DEFAULT_NAMESPACE_ANCHOR
    command_timeout_seconds: float | None = DEFAULT_COMMAND_TIMEOUT_SECONDS
    signal_apiserver: bool = False

    @property
    def key_prefix(self) -> str:
        """Store key prefix of the anchored namespace, e.g. ``/registry/``."""
        return f"{KEY_SEPARATOR}{self.namespace_anchor}{KEY_SEPARATOR}"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "EtcdfsConfig":
        """Build config from an optional YAML file and environment variables.

        Environment values take precedence over the config file, which
        takes precedence over built-in defaults.

        Args:
            environ: Environment mapping; defaults to ``os.environ``.

        Returns:
            A validated config object.

        Raises:
            EtcdfsConfigError: If file or environment values are invalid.
        """
        env = os.environ if environ is None else environ
        raw_values: dict[str, object] = {}
        config_file = env.get(CONFIG_FILE_ENV)
        if config_file:
            raw_values.update(load_config_file(Path(config_file)))
        for env_name, field_name in _ENV_FIELDS.items():
            if env_name in env:
                raw_values[field_name] = env[env_name]
        return cls._from_raw_values(raw_values)

    @classmethod
    def _from_raw_values(cls, raw_values: Mapping[str, object]) -> "EtcdfsConfig":
        values: dict[str, Any] = {}
        for field_name, raw_value in raw_values.items():
            if field_name == "output_dir":
                values[field_name] = Path(_parse_string(field_name, raw_value)).expanduser()
            elif field_name == "command_timeout_seconds":
                values[field_name] = _parse_timeout(raw_value)
            elif field_name == "signal_apiserver":
                values[field_name] = _parse_bool(field_name, raw_value)
            else:
                values[field_name] = _parse_string(field_name, raw_value)
        config = cls(**values)
        if not config.namespace_anchor or "/" in config.namespace_anchor:
            raise EtcdfsConfigError(
                f"Invalid namespace anchor '{config.namespace_anchor}': "
                "expected a single non-empty key segment such as 'registry'."
            )
        return config


def load_config_file(config_path: Path) -> dict[str, object]:
    """Load config overrides from a YAML mapping file.

    Args:
        config_path: Path to the YAML config file.

    Returns:
        Mapping of config field names to raw values.

    Raises:
        EtcdfsConfigError: If the file is missing, malformed, or has unknown keys.
    """
    config_file = config_path.expanduser().resolve()
    try:
        payload = cast(object, yaml.safe_load(config_file.read_text(encoding="utf-8")))
    except OSError as error:
        raise EtcdfsConfigError(
            f"Failed to read config file at {config_file}: {error}. "
            f"Fix {CONFIG_FILE_ENV} or the file permissions."
        ) from error
    except yaml.YAMLError as error:
        raise EtcdfsConfigError(
            f"Failed to parse YAML config at {config_file}: {error}. Fix YAML syntax and retry."
        ) from error
    if payload is None:
        return {}
    if not isinstance(payload, Mapping):
        raise EtcdfsConfigError(
            f"Invalid config file {config_file}: expected a mapping, "
            f"got {type(payload).__name__}."
        )
    known_fields = {item.name for item in fields(EtcdfsConfig)}
    unknown_keys = sorted(str(key) for key in payload if key not in known_fields)
    if unknown_keys:
        raise EtcdfsConfigError(
            f"Unknown config keys in {config_file}: {', '.join(unknown_keys)}. "
            f"Supported keys: {', '.join(sorted(known_fields))}."
        )
    return {str(key): value for key, value in payload.items()}


def _parse_string(field_name: str, raw_value: object) -> str:
    if not isinstance(raw_value, str):
        raise EtcdfsConfigError(
            f"Invalid {field_name} value: expected string, got {type(raw_value).__name__}."
        )
    return raw_value


def _parse_bool(field_name: str, raw_value: object) -> bool:
    if isinstance(raw_value, bool):
        return raw_value
    normalized = str(raw_value).strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise EtcdfsConfigError(
        f"Invalid {field_name} value '{raw_value}': expected one of "
        f"{', '.join(_TRUE_VALUES + _FALSE_VALUES[:-1])}."
    )


def _parse_timeout(raw_value: object) -> float | None:
    """Parse the command timeout value.

    Args:
        raw_value: Raw value from environment or config file.

    Returns:
        Timeout in seconds, or ``None`` when zero or negative.

    Raises:
        EtcdfsConfigError: If value cannot be parsed into a number.
    """
    if isinstance(raw_value, bool):
        raise EtcdfsConfigError(
            "Invalid command_timeout_seconds value: expected a number of seconds, got a boolean."
        )
    try:
        timeout = float(cast(Any, raw_value))
    except (TypeError, ValueError) as error:
        raise EtcdfsConfigError(
            "Invalid ETCDFS_TIMEOUT value: "
            f"expected a number of seconds, got '{raw_value}'. "
            "Set ETCDFS_TIMEOUT to a numeric value, or 0 to disable the timeout."
        ) from error
    return timeout if timeout > 0 else None
