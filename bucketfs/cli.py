"""
Operator harness for browsing and editing a bucket through the file system view.

Usage: python -m bucketfs ls /docs --filter "*.pdf"
"""
from __future__ import annotations

import argparse
import shutil
import sys
from pathlib import Path

from bucketfs.config import load_config
from bucketfs.core.errors import ConfigurationError, ObjectNotFoundError
from bucketfs.core.logging import log_context, setup_logger
from bucketfs.storage.bucket_filesystem import MIN_TIMESTAMP, BucketFileSystem

EXIT_OK = 0
EXIT_NOT_FOUND = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bucketfs", description=__doc__.strip().splitlines()[0])
    commands = parser.add_subparsers(dest="command", required=True)

    ls = commands.add_parser("ls", help="List directories and files")
    ls.add_argument("path", nargs="?", default="/")
    ls.add_argument("--filter", default="*.*")

    cat = commands.add_parser("cat", help="Write a file to stdout")
    cat.add_argument("path")

    put = commands.add_parser("put", help="Upload a local file")
    put.add_argument("local")
    put.add_argument("path")

    rm = commands.add_parser("rm", help="Delete a file")
    rm.add_argument("path")

    rmdir = commands.add_parser("rmdir", help="Delete a directory and everything below it")
    rmdir.add_argument("path")

    url = commands.add_parser("url", help="Print the public URL of a path")
    url.add_argument("path")

    stat = commands.add_parser("stat", help="Show whether a file exists and when it changed")
    stat.add_argument("path")

    return parser


def run_command(fs: BucketFileSystem, args: argparse.Namespace) -> int:
    if args.command == "ls":
        for directory in fs.get_directories(args.path):
            print(directory)
        for name in fs.get_files(args.path, args.filter):
            print(name)
    elif args.command == "cat":
        with fs.open_file(args.path) as stream:
            shutil.copyfileobj(stream, sys.stdout.buffer)
    elif args.command == "put":
        with open(args.local, "rb") as handle:
            fs.add_file(args.path, handle)
        print(fs.get_url(args.path))
    elif args.command == "rm":
        fs.delete_file(args.path)
    elif args.command == "rmdir":
        fs.delete_directory(args.path)
    elif args.command == "url":
        print(fs.get_url(args.path))
    elif args.command == "stat":
        if not fs.file_exists(args.path):
            print(f"Not found: {args.path}")
            return EXIT_NOT_FOUND
        modified = fs.get_last_modified(args.path)
        print(f"{args.path}\tlast modified {modified.isoformat() if modified != MIN_TIMESTAMP else 'unknown'}")
    return EXIT_OK


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_CONFIG

    logger = setup_logger("bucketfs", config)
    fs = config.create_file_system()

    if args.command == "put" and not Path(args.local).exists():
        print(f"Error: File not found: {args.local}", file=sys.stderr)
        return EXIT_NOT_FOUND

    with log_context(logger, bucket=config.bucket_name, command=args.command):
        try:
            return run_command(fs, args)
        except ObjectNotFoundError as exc:
            logger.warning(f"{args.command} failed: {exc}")
            print(f"Not found: {args.path}", file=sys.stderr)
            return EXIT_NOT_FOUND


if __name__ == "__main__":
    sys.exit(main())
