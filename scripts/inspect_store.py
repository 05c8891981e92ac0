#!/usr/bin/env python3
"""Small CLI to inspect the records of a persistent map store.

Loads the store into a `PersistentBytesMap` and prints the number of
records, the list of keys or the value stored under one key. Opening a
store creates the namespace if it is missing.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Optional, Sequence

from hashmap_lib.config import load_config
from hashmap_lib.hashmap import PersistentBytesMap


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Inspect a persistent hash map store")
    p.add_argument("-c", "--config", help="YAML config file (data_dir, db_file, namespace)")
    p.add_argument("--data-dir", help="Directory of the store (overrides config)")
    p.add_argument("--db-file", help="Store file name (overrides config)")
    p.add_argument("--namespace", help="Namespace to read (overrides config)")
    p.add_argument("-k", "--key", help="Print the value stored under this key")
    p.add_argument("-j", "--json", action="store_true", help="Pretty-print values as JSON when possible")
    p.add_argument("--count", action="store_true", help="Only print the number of records")
    return p.parse_args(argv)


def format_value(data: bytes, as_json: bool) -> str:
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        return repr(data)
    if as_json:
        try:
            return json.dumps(json.loads(text), indent=2)
        except ValueError:
            pass
    return text


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    try:
        cfg = load_config(args.config)
    except ValueError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    data_dir = args.data_dir or cfg.data_dir
    db_file = args.db_file or cfg.db_file
    namespace = args.namespace or cfg.namespace

    store = PersistentBytesMap(data_dir, db_file, namespace, open_timeout=cfg.open_timeout)
    if store.load_error is not None:
        print(f"Error: cannot read {Path(data_dir) / db_file}: {store.load_error}", file=sys.stderr)
        return 3

    if args.count:
        print(store.count())
        return 0

    if args.key is not None:
        value = store.find_by_key(args.key)
        if value is None:
            print(f"Key not found: {args.key}", file=sys.stderr)
            return 4
        print(format_value(value, args.json))
        return 0

    for key in sorted(store.get_all()):
        print(key)
    print(f"{store.count()} records in [{namespace}]", file=sys.stderr)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
