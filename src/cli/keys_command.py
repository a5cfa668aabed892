"""Keys command wiring for the etcdfs CLI."""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from core.constants import DEFAULT_FILTER_PATTERN
from store.client import EtcdfsClient


def add_keys_command(subparsers: Any, parents: Sequence[argparse.ArgumentParser] = ()) -> None:
    """Register keys subcommand."""
    parser = subparsers.add_parser(
        "keys",
        help="List store keys without decoding values",
        parents=list(parents),
    )
    parser.add_argument(
        "filter",
        nargs="?",
        default=DEFAULT_FILTER_PATTERN,
        help="Glob pattern matched against full keys (default: '*')",
    )
    parser.add_argument(
        "--prefix",
        default=None,
        help="Store key prefix to read (default: /<ETCDFS_ANCHOR>/)",
    )


def run_keys_command(client: EtcdfsClient, args: argparse.Namespace) -> int:
    """Print matching keys, one per line."""
    for key in client.list_keys(args.prefix, args.filter):
        print(key)
    return 0
