"""Command line for ftpbridge.

Usage:
    ftpbridge [--url URL] [--utc-offset HOURS] COMMAND ...
    ftpbridge serve [--host HOST] [--port PORT] [--reload]
    ftpbridge list {recents,inbox,processed,today}
    ftpbridge rows
    ftpbridge upload FILE [FILE ...]
    ftpbridge delete NAME
    ftpbridge delete-all [--yes]
    ftpbridge watch [--interval SECONDS]
"""

import argparse
import asyncio
import json
import sys
from datetime import timezone
from pathlib import Path
from typing import List, Optional, Sequence

import httpx
from loguru import logger

from .client import (
    DEFAULT_BASE_URL,
    DEFAULT_POLL_INTERVAL,
    BridgeClient,
    BridgeClientError,
)
from .core.civil_time import fixed_offset, format_civil
from .core.environment import LayoutSettings
from .core.errors import ServiceError
from .core.spreadsheet import convert_spreadsheet, is_spreadsheet
from .schemas.files import CsvUpload, FileEntry

LISTINGS = {
    "recents": "list_recents",
    "inbox": "list_inbox",
    "processed": "list_processed",
    "today": "list_processed_today",
}


def format_entries(
    entries: Sequence[FileEntry], tz: Optional[timezone] = None
) -> str:
    """Render entries as an aligned table with dates in the business timezone."""
    if tz is None:
        tz = LayoutSettings().business_timezone
    if not entries:
        return "(no files)"
    width = max(len(entry.name) for entry in entries)
    lines = []
    for entry in entries:
        kind = "dir " if entry.is_directory else "file"
        lines.append(
            f"{kind}  {entry.name:<{width}}  {entry.size:>10}  "
            f"{format_civil(entry.date_modified, tz) or '-'}"
        )
    return "\n".join(lines)


def load_uploads(paths: Sequence[str]) -> List[CsvUpload]:
    """Read files for upload, converting workbooks to CSV."""
    uploads = []
    for raw_path in paths:
        path = Path(raw_path)
        content = path.read_bytes()
        if is_spreadsheet(path.name):
            uploads.append(convert_spreadsheet(path.name, content))
        else:
            uploads.append(CsvUpload(filename=path.name, content=content))
    return uploads


async def list_cmd(
    client: BridgeClient, which: str, tz: Optional[timezone] = None
) -> None:
    entries = await getattr(client, LISTINGS[which])()
    print(format_entries(entries, tz))


async def rows_cmd(client: BridgeClient) -> None:
    rows = await client.read_processed_rows()
    print(json.dumps(rows, indent=2, ensure_ascii=False))


async def upload_cmd(client: BridgeClient, paths: Sequence[str]) -> None:
    print(await client.upload_csv(load_uploads(paths)))


async def delete_cmd(client: BridgeClient, name: str) -> None:
    print(await client.delete_file(name))


async def delete_all_cmd(client: BridgeClient, assume_yes: bool) -> None:
    if not assume_yes:
        confirm = input("Delete every file in the inbox? [y/N] ")
        if confirm.strip().lower() not in ("y", "yes"):
            print("Aborted")
            return
    print(await client.delete_all())


async def watch_cmd(
    client: BridgeClient, interval: float, tz: Optional[timezone] = None
) -> None:
    async for snapshot in client.watch(interval=interval):
        print("\n== Inbox ==")
        print(format_entries(snapshot.inbox, tz))
        print("\n== Processed today ==")
        print(format_entries(snapshot.processed_today, tz))
        print(
            f"\n{len(snapshot.processed)} processed files in total, "
            f"{len(snapshot.recents)} recent uploads"
        )


def serve_cmd(args: argparse.Namespace) -> None:
    import uvicorn

    from .core.environment import get_config_service
    from .core.log_config import configure_logging

    config_service = get_config_service()
    api_settings = config_service.get_api_settings()
    service_settings = config_service.get_service_settings()
    configure_logging(service_settings)

    uvicorn.run(
        "ftpbridge.main:app",
        host=args.host or api_settings.api_host,
        port=args.port or api_settings.api_port,
        reload=args.reload or api_settings.reload,
        log_level="debug" if service_settings.debug else "info",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ftpbridge", description="Partner FTP inbox bridge"
    )
    parser.add_argument(
        "--url", default=DEFAULT_BASE_URL, help="Base URL of the ftpbridge API"
    )
    parser.add_argument(
        "--utc-offset",
        type=float,
        help="Hours from UTC for displayed dates (default: BUSINESS_UTC_OFFSET_HOURS)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host")
    serve_parser.add_argument("--port", type=int)
    serve_parser.add_argument("--reload", action="store_true")

    list_parser = subparsers.add_parser("list", help="List remote files")
    list_parser.add_argument("which", choices=sorted(LISTINGS))

    subparsers.add_parser("rows", help="Print rows of the processed CSV files")

    upload_parser = subparsers.add_parser(
        "upload", help="Upload CSV files, converting .xlsx workbooks first"
    )
    upload_parser.add_argument("files", nargs="+")

    delete_parser = subparsers.add_parser("delete", help="Delete one inbox file")
    delete_parser.add_argument("name")

    delete_all_parser = subparsers.add_parser(
        "delete-all", help="Delete every file in the inbox"
    )
    delete_all_parser.add_argument("--yes", action="store_true")

    watch_parser = subparsers.add_parser("watch", help="Poll the listings")
    watch_parser.add_argument("--interval", type=float, default=DEFAULT_POLL_INTERVAL)

    return parser


def display_timezone(args: argparse.Namespace) -> timezone:
    if args.utc_offset is not None:
        return fixed_offset(args.utc_offset)
    return LayoutSettings().business_timezone


async def run_client_command(args: argparse.Namespace) -> None:
    tz = display_timezone(args)
    async with BridgeClient(args.url) as client:
        if args.command == "list":
            await list_cmd(client, args.which, tz)
        elif args.command == "rows":
            await rows_cmd(client)
        elif args.command == "upload":
            await upload_cmd(client, args.files)
        elif args.command == "delete":
            await delete_cmd(client, args.name)
        elif args.command == "delete-all":
            await delete_all_cmd(client, args.yes)
        elif args.command == "watch":
            await watch_cmd(client, args.interval, tz)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "serve":
        serve_cmd(args)
        return 0

    try:
        asyncio.run(run_client_command(args))
    except (BridgeClientError, ServiceError) as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return 1
    except (httpx.HTTPError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted")
    return 0


if __name__ == "__main__":
    sys.exit(main())
