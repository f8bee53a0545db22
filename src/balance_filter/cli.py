#!/usr/bin/env python3
"""Club balance filter - Entry point."""

import argparse
import logging
import os
import sys

from dotenv import load_dotenv

from .session import (
    EMPTY_NICKNAMES_WARNING,
    Session,
    download,
    run_filter,
    set_nickname_text,
    upload_balance_file,
    upload_name_file,
)
from .spreadsheet import filtered_filename
from .workbook import FileReadError, load_source

# Load environment variables from .env file
load_dotenv()

# Configuration
NAME_FILE = os.getenv('BALANCE_FILTER_NAME_FILE')
OUTPUT_DIR = os.getenv('BALANCE_FILTER_OUTPUT_DIR', '.')
LOG_LEVEL = os.getenv('BALANCE_FILTER_LOG_LEVEL', 'WARNING')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Filter a club member balance sheet by nickname")
    parser.add_argument("balance_file", help="Workbook with a 'Club Member Balance' sheet")
    parser.add_argument(
        "--names",
        default=NAME_FILE,
        help="Workbook (path or URL) with a 'Player overview' sheet of Nick/Name columns",
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--nicknames", help="File with one 'nickname' or 'nickname/line' per line ('-' for stdin)")
    group.add_argument("--nickname-text", help="Nickname list given inline, entries separated by newlines")
    parser.add_argument("--out-dir", default=OUTPUT_DIR, help="Directory for the filtered workbook")
    parser.add_argument("--log-level", default=LOG_LEVEL, help="Logging level (default: %(default)s)")
    return parser


def _read_nickname_text(args: argparse.Namespace) -> str:
    if args.nickname_text is not None:
        return args.nickname_text
    if args.nicknames == '-':
        return sys.stdin.read()
    if args.nicknames:
        with open(args.nicknames, encoding='utf-8') as f:
            return f.read()
    return ''


def main(argv: list[str] | None = None) -> int:
    """Main execution flow."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    print("=== Club Balance Filter ===\n")
    session = Session()

    try:
        filename, data = load_source(args.balance_file)
        if not upload_balance_file(session, filename, data):
            print(f"ERROR: {session.notice}")
            return 1
        print(f"Loaded {filename}")

        if args.names:
            name_filename, name_data = load_source(args.names)
            if not upload_name_file(session, name_filename, name_data):
                print(f"ERROR: {session.notice}")
                return 1
            print(f"Loaded {len(session.name_mapping)} name(s) from {name_filename}")
    except FileReadError as e:
        print(f"ERROR: {e}")
        return 1

    try:
        text = _read_nickname_text(args)
    except OSError as e:
        print(f"ERROR: Could not read nicknames: {e}")
        return 1

    set_nickname_text(session, text)
    if not session.nicknames:
        print(f"WARNING: {EMPTY_NICKNAMES_WARNING}")
    else:
        print(f"Nicknames:\n{session.nickname_text}\n")

    if not run_filter(session):
        print(f"ERROR: {session.notice}")
        return 1
    print(session.notice)

    filepath = os.path.join(args.out_dir, filtered_filename(session.filename))
    result = download(session, filepath)
    if result is None:
        print(f"ERROR: {session.notice}")
        return 1

    print(f"Filtered file saved to {filepath}")
    return 0


if __name__ == '__main__':
    sys.exit(main())
