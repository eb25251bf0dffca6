# Command line front end: sort record files, build indices and look up keys.
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from rid_index.components.index_file import index_path_for, index_records
from rid_index.components.sorter import sort_records
from rid_index.core.config import IndexConfig, load_config
from rid_index.core.errors import RidIndexError
from rid_index.core.store import IndexedRecordStore


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="rid-index", description="Sort, index and query record files by key"
    )
    p.add_argument("--config", type=Path, help="TOML file with a [rid_index] table")
    p.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("sort", help="Sort a record file by key")
    s.add_argument("input", type=Path, help="Input record file")
    s.add_argument("-o", "--output", type=Path, help="Output file (default: <stem>_rid_sorted)")
    s.add_argument("--buffer-records", type=int, help="Records per in-memory sort run")

    i = sub.add_parser("index", help="Build an index for a sorted record file")
    i.add_argument("input", type=Path, help="Sorted record file")
    i.add_argument("--index", type=Path, help="Index file (default: input + suffix)")
    i.add_argument("--chunk-size", type=int, help="Records per indexed segment")

    g = sub.add_parser("get", help="Print all records with the given keys")
    g.add_argument("input", type=Path, help="Sorted record file")
    g.add_argument("keys", nargs="+", help="Keys to look up")
    g.add_argument("--index", type=Path, help="Index file (default: input + suffix)")
    return p


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
        stream=sys.stderr,
    )


def _run(args: argparse.Namespace, config: IndexConfig) -> int:
    if args.command == "sort":
        buffer_records = config.sort_buffer_records if args.buffer_records is None else args.buffer_records
        out = sort_records(args.input, args.output, buffer_records=buffer_records)
        print(out)
        return 0

    if args.command == "index":
        chunk_size = config.chunk_size if args.chunk_size is None else args.chunk_size
        index_path = args.index or index_path_for(args.input, config.index_suffix)
        out = index_records(args.input, index_path, chunk_size, config.compress_level)
        print(out)
        return 0

    status = 0
    with IndexedRecordStore(args.input, config, index_path=args.index) as store:
        for key in args.keys:
            records = store.get(key)
            if not records:
                logging.warning("No records for %s", key)
                status = 1
            for record in records:
                payload = record.payload.decode("utf-8", errors="replace")
                print(f"{record.key}\t{record.offset}\t{payload}")
    return status


def main(argv: list[str] | None = None) -> int:
    argv = argv if argv is not None else sys.argv[1:]
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else IndexConfig()
        return _run(args, config)
    except (RidIndexError, FileNotFoundError, ValueError) as e:
        logging.error("%s", e)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
