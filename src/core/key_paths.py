"""Store key and file path mapping.

This module converts store keys into relative file paths under a dump
root and resolves edited files back into their store keys. Both
directions are pure and never touch the filesystem.
"""

from __future__ import annotations

import os
from pathlib import Path, PurePosixPath

from core.constants import DEFAULT_NAMESPACE_ANCHOR, KEY_SEPARATOR, MAPPED_FILE_SUFFIX
from core.errors import EtcdfsKeyError

_FORBIDDEN_SEGMENTS = (".", "..")


def path_of(key: bytes, root: Path) -> Path:
    """Map a store key to its file path under a dump root.

    The leading separator collapses onto ``root`` and the text format
    suffix is appended to the last segment.

    Args:
        key: Raw store key, e.g. ``b"/registry/pods/default/foo"``.
        root: Dump root directory.

    Returns:
        Mapped path, e.g. ``root/registry/pods/default/foo.yaml``.

    Raises:
        EtcdfsKeyError: If the key is not UTF-8, is empty, or holds
            path-traversal segments.
    """
    segments = key_segments(key)
    *parents, leaf = segments
    return root.joinpath(*parents, leaf + MAPPED_FILE_SUFFIX)


def key_of(
    path: Path,
    root: Path,
    anchor: str = DEFAULT_NAMESPACE_ANCHOR,
) -> bytes | None:
    """Resolve a mapped file path back to its store key.

    The key starts at the first path segment equal to ``anchor``.
    Paths without that segment never resolve, which keeps imports
    inside the anchored key namespace.

    Args:
        path: File path, absolute or relative to the working directory.
        root: Dump root the path is expected to live under.
        anchor: Top-level key namespace segment.

    Returns:
        Store key bytes, or ``None`` when the anchor segment is absent.
    """
    segments = _relative_segments(Path(os.path.abspath(path)), Path(os.path.abspath(root)))
    if anchor not in segments:
        return None
    key_parts = list(segments[segments.index(anchor):])
    key_parts[-1] = _strip_suffix(key_parts[-1])
    if not key_parts[-1]:
        return None
    return (KEY_SEPARATOR + KEY_SEPARATOR.join(key_parts)).encode("utf-8")


def key_segments(key: bytes) -> list[str]:
    """Split a store key into validated path segments.

    Args:
        key: Raw store key.

    Returns:
        Non-empty segment list.

    Raises:
        EtcdfsKeyError: If the key cannot be used as a relative path.
    """
    try:
        key_text = key.decode("utf-8")
    except UnicodeDecodeError as error:
        raise EtcdfsKeyError(
            f"Cannot map key {key!r} to a file path: key is not valid UTF-8."
        ) from error
    segments = [segment for segment in key_text.split(KEY_SEPARATOR) if segment]
    if not segments:
        raise EtcdfsKeyError(f"Cannot map key {key_text!r} to a file path: key has no segments.")
    unsafe = [segment for segment in segments if segment in _FORBIDDEN_SEGMENTS or "\0" in segment]
    if unsafe:
        raise EtcdfsKeyError(
            f"Cannot map key {key_text!r} to a file path: "
            f"path traversal segment {unsafe[0]!r} is not allowed."
        )
    return segments


def _relative_segments(path: Path, root: Path) -> tuple[str, ...]:
    # Paths outside the root are still searched from the filesystem top.
    try:
        relative = path.relative_to(root)
    except ValueError:
        relative = path
    return tuple(part for part in PurePosixPath(relative.as_posix()).parts if part != "/")


def _strip_suffix(file_name: str) -> str:
    if file_name.endswith(MAPPED_FILE_SUFFIX):
        return file_name[: -len(MAPPED_FILE_SUFFIX)]
    return file_name
