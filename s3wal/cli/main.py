#!/usr/bin/env python3
"""
Command-line tool for inspecting and driving an S3 write-ahead log.

Usage:
    s3wal --bucket my-bucket --prefix wal-demo recover
    s3wal --bucket my-bucket --prefix wal-demo append "Record #1"
    s3wal --bucket my-bucket --prefix wal-demo read 1
    s3wal --bucket my-bucket --prefix wal-demo last
    s3wal --bucket my-bucket --prefix wal-demo truncate 3

Bucket, prefix and region default to AWS_BUCKET_NAME, AWS_PREFIX and
AWS_REGION, which may also be set in a .env file.
"""

import argparse
import sys
from typing import Optional, Sequence

import yaml

from s3wal.core.log.errors import WALError
from s3wal.core.log.log import WriteAheadLog
from s3wal.storage.base import ObjectStore
from s3wal.storage.s3 import S3ObjectStore
from s3wal.utils.config import Config
from s3wal.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)


def offset_arg(value: str) -> int:
    """Parse a non-negative offset argument."""
    if not (value.isascii() and value.isdigit()):
        raise argparse.ArgumentTypeError(f"invalid offset: {value!r}")
    return int(value)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="s3wal",
        description="Write-ahead log stored as one object per record in S3",
    )

    parser.add_argument('--config', type=str, default=None, help='Path to YAML configuration file')
    parser.add_argument(
        '--env-file',
        type=str,
        default=None,
        help='Path to a .env file (default: .env in the working directory)'
    )
    parser.add_argument('--bucket', type=str, default=None, help='S3 bucket name')
    parser.add_argument('--prefix', type=str, default=None, help='Key prefix for the WAL')
    parser.add_argument('--region', type=str, default=None, help='AWS region')
    parser.add_argument(
        '--endpoint-url',
        type=str,
        default=None,
        help='Custom S3 endpoint (MinIO, LocalStack, ...)'
    )
    parser.add_argument(
        '--log-level',
        type=str,
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: from config)'
    )

    commands = parser.add_subparsers(dest='command', metavar='<command>')
    commands.required = True

    append = commands.add_parser('append', help='Append a record')
    append.add_argument('data', help='Record payload (UTF-8 text)')

    read = commands.add_parser('read', help='Read the record at an offset')
    read.add_argument('offset', type=offset_arg)

    commands.add_parser('last', help='Read the record with the highest offset')

    truncate = commands.add_parser('truncate', help='Delete records after an offset')
    truncate.add_argument('offset', type=offset_arg)

    commands.add_parser('recover', help='Print the highest offset in the store')

    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Layer command-line flags over file and environment configuration."""
    config = Config(args.config, env_file=args.env_file)
    overrides = {
        "storage.bucket": args.bucket,
        "storage.prefix": args.prefix,
        "storage.region": args.region,
        "storage.endpoint_url": args.endpoint_url,
        "logging.level": args.log_level,
    }
    for key, value in overrides.items():
        if value is not None:
            config.set(key, value)
    return config


def run(args: argparse.Namespace, wal: WriteAheadLog) -> None:
    """Execute one command against the log and print its result."""
    if args.command == 'append':
        data = args.data.encode('utf-8')
        offset = wal.append(data)
        print(f"Appended record at offset: {offset}, data: {args.data}")

    elif args.command == 'read':
        record = wal.read(args.offset)
        print(f"Offset: {record.offset}, Data: {record.data.decode('utf-8', errors='replace')}")

    elif args.command == 'last':
        record = wal.last_record()
        print(
            f"Last record: offset={record.offset}, "
            f"data={record.data.decode('utf-8', errors='replace')}"
        )

    elif args.command == 'truncate':
        wal.truncate(args.offset)
        print(f"Truncated WAL after offset {args.offset}")

    elif args.command == 'recover':
        print(f"Last offset: {wal.recover()}")


def main(argv: Optional[Sequence[str]] = None, store: Optional[ObjectStore] = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        config = build_config(args)

        configure_logging(
            log_level=config.get("logging.level", "INFO"),
            log_format=config.get("logging.format", "console"),
            log_output=config.get("logging.output", "stderr"),
        )

        if store is None:
            store = S3ObjectStore.from_config(config)
        wal = WriteAheadLog(
            store,
            prefix=config.get("storage.prefix", ""),
            delete_batch_size=config.get("storage.delete_batch_size"),
        )

        # offsets are assigned from the cached length
        if args.command == 'append':
            wal.recover()

        run(args, wal)

    except (WALError, ValueError, OSError, yaml.YAMLError) as e:
        logger.debug("Command failed", command=args.command, error=str(e))
        print(f"{args.command} failed: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == '__main__':
    sys.exit(main())
