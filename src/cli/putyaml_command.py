"""Putyaml command wiring for the etcdfs CLI."""

from __future__ import annotations

import argparse
from typing import Any, Sequence

from store.client import EtcdfsClient


def add_putyaml_command(subparsers: Any, parents: Sequence[argparse.ArgumentParser] = ()) -> None:
    """Register putyaml subcommand."""
    parser = subparsers.add_parser(
        "putyaml",
        help="Write one edited YAML file back to its key; an empty file deletes the key",
        parents=list(parents),
    )
    parser.add_argument("filename", help="Dumped file under a registry directory")


def run_putyaml_command(client: EtcdfsClient, args: argparse.Namespace) -> int:
    """Import one file and print what happened to its key."""
    result = client.put_file(args.filename)
    if result.outcome == "written":
        print(f"wrote {result.key_text}")
    elif result.outcome == "deleted":
        print(f"deleted {result.key_text}")
    else:
        print(result.outcome)
    return 0
