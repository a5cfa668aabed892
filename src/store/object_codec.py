"""Object codec backed by the auger binary.

This module translates between the binary objects stored in etcd and
editable YAML text. Values are piped through the codec unchanged;
nothing here inspects object content.
"""

from __future__ import annotations

from core.config import EtcdfsConfig
from core.errors import EtcdfsCodecError
from store.command_runner import CommandRunner


class AugerCodec:
    """Run ``auger decode`` and ``auger encode`` over stdin/stdout."""

    def __init__(self, config: EtcdfsConfig, runner: CommandRunner) -> None:
        self._binary = config.codec_binary
        self._runner = runner

    def decode(self, value: bytes) -> bytes:
        """Decode a stored value into YAML text.

        Args:
            value: Raw stored bytes.

        Returns:
            Non-empty decoded document bytes.

        Raises:
            EtcdfsCodecError: If the codec fails or produces no output.
        """
        return self._run("decode", value)

    def encode(self, document: bytes) -> bytes:
        """Encode YAML text into the stored binary form.

        Args:
            document: Edited document bytes.

        Returns:
            Non-empty encoded value bytes.

        Raises:
            EtcdfsCodecError: If the codec fails or produces no output.
        """
        return self._run("encode", document)

    def _run(self, mode: str, payload: bytes) -> bytes:
        result = self._runner([self._binary, mode], payload)
        if not result.ok:
            raise EtcdfsCodecError(
                f"{self._binary} {mode} failed with exit code {result.returncode}: "
                f"{result.error_text or 'no error output'}"
            )
        if not result.stdout:
            raise EtcdfsCodecError(f"{self._binary} {mode} produced empty output")
        return result.stdout
