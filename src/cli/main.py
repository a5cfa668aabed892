"""etcdfs CLI entry points.

This module exposes the dump, putyaml, and keys commands.
It checks required tools first and maps argparse commands onto SDK calls.
"""

from __future__ import annotations

import argparse
import sys
from typing import Sequence

from cli.dump_command import add_dump_command, run_dump_command
from cli.keys_command import add_keys_command, run_keys_command
from cli.putyaml_command import add_putyaml_command, run_putyaml_command
from core.config import EtcdfsConfig
from core.errors import EtcdfsConfigError, EtcdfsDependencyError, EtcdfsError
from core.logging_config import get_logger
from core.preflight import require_dependencies
from store.client import EtcdfsClient

_LOGGER = get_logger(__name__)

_OUTPUT_DIR_HELP = "Override ETCDFS_OUTPUT_DIR for this command"


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="etcdfs",
        description="Export etcd keys to YAML files and import edited files back",
    )
    parser.add_argument("--output-dir", default=None, help=_OUTPUT_DIR_HELP)
    # Accepted after the subcommand too; SUPPRESS keeps a value given before it.
    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument("--output-dir", default=argparse.SUPPRESS, help=_OUTPUT_DIR_HELP)
    subparsers = parser.add_subparsers(dest="command")
    add_dump_command(subparsers, parents=[shared])
    add_putyaml_command(subparsers, parents=[shared])
    add_keys_command(subparsers, parents=[shared])
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the etcdfs CLI.

    Required tools are checked before arguments are interpreted, so a
    missing tool refuses every command, including usage output.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    try:
        config = EtcdfsConfig.from_env()
    except EtcdfsConfigError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1
    try:
        require_dependencies(config)
    except EtcdfsDependencyError as error:
        print(error, file=sys.stderr)
        return 1
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_usage(sys.stderr)
        return 1
    client = _build_client(config, args.output_dir)
    try:
        return _dispatch(parser, client, args)
    except EtcdfsError as error:
        _LOGGER.error("command_failed", command=args.command, error=str(error))
        print(f"error: {error}", file=sys.stderr)
        return 1
    except OSError as error:
        print(f"error: {error}", file=sys.stderr)
        return 1


def _build_client(config: EtcdfsConfig, output_dir: str | None) -> EtcdfsClient:
    """Build SDK client with optional output-dir override.

    Args:
        config: Runtime configuration.
        output_dir: Optional override path.

    Returns:
        Configured SDK client.
    """
    client = EtcdfsClient(config)
    if output_dir:
        return client.with_output_dir(output_dir)
    return client


def _dispatch(
    parser: argparse.ArgumentParser,
    client: EtcdfsClient,
    args: argparse.Namespace,
) -> int:
    if args.command == "dump":
        return run_dump_command(client, args)
    if args.command == "putyaml":
        return run_putyaml_command(client, args)
    if args.command == "keys":
        return run_keys_command(client, args)
    parser.error(f"Unsupported command: {args.command}")
    return 2
