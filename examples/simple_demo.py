#!/usr/bin/env python3
"""
Simple demo of the s3wal write-ahead log.

Runs against an in-memory store by default; pass --bucket to use S3.

    python examples/simple_demo.py
    python examples/simple_demo.py --bucket my-bucket --prefix wal-demo
"""

import argparse

from s3wal.core.log.errors import RecordNotFoundError
from s3wal.core.log.log import WriteAheadLog
from s3wal.storage.memory import InMemoryObjectStore
from s3wal.storage.s3 import S3ObjectStore
from s3wal.utils.config import Config
from s3wal.utils.logging import configure_logging


def main():
    parser = argparse.ArgumentParser(description="s3wal demo")
    parser.add_argument("--bucket", default=None)
    parser.add_argument("--prefix", default="wal-demo")
    args = parser.parse_args()

    configure_logging(log_level="WARNING", log_format="console")

    if args.bucket:
        config = Config()
        config.set("storage.bucket", args.bucket)
        store = S3ObjectStore.from_config(config)
    else:
        store = InMemoryObjectStore(page_size=2)

    wal = WriteAheadLog(store, prefix=args.prefix)

    print("=" * 60)
    print("s3wal - Write-Ahead Log Demo")
    print("=" * 60)

    print(f"\n[1] Recovering... last offset: {wal.recover()}")

    print("\n[2] Appending 5 records...")
    for i in range(1, 6):
        data = f"Record #{i}".encode("utf-8")
        offset = wal.append(data)
        print(f"  Appended record at offset: {offset}, data: {data.decode()}")

    record = wal.read(3)
    print(f"\n[3] Read record at offset 3: {record.data.decode()}")

    last = wal.last_record()
    print(f"\n[4] Last record: offset={last.offset}, data={last.data.decode()}")

    after = last.offset - 2
    print(f"\n[5] Truncating after offset {after}...")
    wal.truncate(after)
    print(f"  Last offset after truncate: {wal.recover()}")

    for offset in (after + 1, after + 2):
        try:
            wal.read(offset)
        except RecordNotFoundError as e:
            print(f"  Read {offset}: {e}")

    print("\n" + "=" * 60)
    print("Demo complete")
    print("=" * 60)


if __name__ == "__main__":
    main()
