"""Dump command wiring for the etcdfs CLI."""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from core.constants import DEFAULT_FILTER_PATTERN
from core.types import DumpOptions
from store.client import EtcdfsClient


def add_dump_command(subparsers: Any, parents: Sequence[argparse.ArgumentParser] = ()) -> None:
    """Register dump subcommand."""
    parser = subparsers.add_parser(
        "dump",
        help="Export store keys as YAML files under the output directory",
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


def run_dump_command(client: EtcdfsClient, args: argparse.Namespace) -> int:
    """Dump matching keys and print a one-line summary.

    Per-key decode failures are reported on stderr as they happen and do
    not change the exit code.
    """
    options = DumpOptions(filter_pattern=args.filter, prefix=args.prefix)
    summary = client.dump(options)
    print(
        f"written={summary.written} "
        f"filtered={summary.filtered} "
        f"failed={len(summary.failed_keys)} "
        f"output_dir={summary.output_dir}"
    )
    return 0
