"""Command line front end.

Subcommands:
  info       show header fields of a table file
  dump       print decoded rows as JSON lines
  roundtrip  read a table and write it back out
"""

import argparse
import json
import sys
import traceback
from typing import List, Optional

from wdbx.codec import DBReader, DBWriter
from wdbx.config.settings import Settings, load_settings
from wdbx.constants import APP_VERSION
from wdbx.definitions import DefinitionRegistry, load_definitions
from wdbx.errors import WDBXError
from wdbx.utils.logging import init_log_file, log_error, update_log_file_path


def _load_registry(args: argparse.Namespace, settings: Settings) -> DefinitionRegistry:
    path = args.definitions or settings.definitions_path
    if not path:
        raise WDBXError("No definitions file given (--definitions or definitions_path setting)")
    return load_definitions(path)


def cmd_info(args: argparse.Namespace, settings: Settings) -> None:
    with open(args.file, "rb") as f:
        data = f.read()
    header = DBReader(DefinitionRegistry(), settings).read_header(data)
    print(f"File: {args.file}")
    for key, value in header.describe().items():
        print(f"  {key}: {value}")


def cmd_dump(args: argparse.Namespace, settings: Settings) -> None:
    reader = DBReader(_load_registry(args, settings), settings)
    result = reader.read_file(args.file, args.table)
    rows = result.table.as_dicts()
    if args.limit is not None:
        rows = rows[: args.limit]
    for row in rows:
        print(json.dumps(row, ensure_ascii=False))
    for warning in result.warnings:
        print(f"warning: {warning}", file=sys.stderr)


def cmd_roundtrip(args: argparse.Namespace, settings: Settings) -> None:
    reader = DBReader(_load_registry(args, settings), settings)
    result = reader.read_file(args.file, args.table)
    written = DBWriter(settings).write_file(result.table, args.output)
    print(
        f"{args.file}: {len(result.table.rows)} rows -> "
        f"{args.output} ({len(written.data)} bytes)"
    )


def build_argparser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="wdbx", description="WDBC/WDB2/WDB5 table codec")
    ap.add_argument("--config", help="settings JSON file")
    ap.add_argument("--version", action="version", version=f"%(prog)s {APP_VERSION}")
    sub = ap.add_subparsers(dest="cmd")

    pi = sub.add_parser("info", help="show header fields")
    pi.add_argument("file")
    pi.set_defaults(func=cmd_info)

    pd = sub.add_parser("dump", help="print rows as JSON lines")
    pd.add_argument("file")
    pd.add_argument("--definitions", "-d")
    pd.add_argument("--table", "-t", help="definition name (defaults to file name)")
    pd.add_argument("--limit", type=int)
    pd.set_defaults(func=cmd_dump)

    pr = sub.add_parser("roundtrip", help="read a table and write it back")
    pr.add_argument("file")
    pr.add_argument("--definitions", "-d")
    pr.add_argument("--table", "-t", help="definition name (defaults to file name)")
    pr.add_argument("--output", "-o", required=True)
    pr.set_defaults(func=cmd_roundtrip)

    return ap


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_argparser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    settings = Settings.from_dict(load_settings(args.config))
    update_log_file_path(settings.log_dir)
    init_log_file()

    try:
        args.func(args, settings)
    except (WDBXError, OSError) as e:
        log_error(str(e), type(e).__name__, traceback.format_exc())
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
