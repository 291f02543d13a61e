"""Command line interface for the ustream package."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import httpx
from dotenv import find_dotenv, load_dotenv
from rich.logging import RichHandler

from . import __version__
from .cli_progress import UploadProgress, render_items, render_upload_summary

VIDEO_COLUMNS = ("id", "title", "protect", "created_at")
PLAYLIST_COLUMNS = ("id", "title", "item_count", "is_enabled")


class CLIError(RuntimeError):
    """Raised when CLI validation/execution fails."""


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Default behavior is silent unless --debug, --log-level or LOG_LEVEL is
    provided. Returns a string describing effective mode.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    logging.disable(logging.NOTSET)

    env_level = os.getenv("LOG_LEVEL")
    if silent or (not debug and not log_level and not env_level):
        logging.disable(logging.CRITICAL)
        root_logger.setLevel(logging.CRITICAL + 1)
        return "silent"

    if debug:
        level = logging.DEBUG
    elif log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
    else:
        level = getattr(logging, env_level.upper(), logging.INFO)

    handler = RichHandler(
        rich_tracebacks=True,
        markup=True,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return logging.getLevelName(level)


def _load_environment(env_file: Optional[Path]) -> Optional[Path]:
    """
    Load USTREAM_* settings from a dotenv file into the process environment.

    An explicit ``--env-file`` must exist. Without one, the nearest ``.env``
    from the working directory upwards is used when there is one. Variables
    already set in the environment win. Returns the file that was loaded.
    """
    if env_file is not None:
        if not env_file.is_file():
            raise CLIError(f"env file not found: {env_file}")
    else:
        found = find_dotenv(usecwd=True)
        if not found:
            return None
        env_file = Path(found)

    load_dotenv(env_file, override=False)
    return env_file


def _build_config():
    from .models import ClientConfig

    config = ClientConfig.from_env()
    if not config.access_token and not (config.client_id and config.client_secret):
        raise CLIError(
            "set USTREAM_ACCESS_TOKEN or USTREAM_CLIENT_ID and USTREAM_CLIENT_SECRET"
        )
    return config


def _upload_options(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "title": args.title,
        "description": args.description,
        "protect": args.protect,
    }


async def _run_list(resource_name: str, args: argparse.Namespace) -> int:
    from . import UstreamClient

    async with UstreamClient(_build_config()) as ustream:
        if resource_name == "videos":
            page = await ustream.videos.list(args.channel_id, page_size=args.page_size)
            columns = VIDEO_COLUMNS
        else:
            page = await ustream.playlists.list(args.channel_id, page_size=args.page_size)
            columns = PLAYLIST_COLUMNS

        if args.all:
            items = [item async for item in page.iter_items()]
        else:
            items = list(page.items)

    render_items(resource_name.capitalize(), items, columns)
    if not args.all and page.has_next():
        print("More results available (use --all).")
    return 0


async def _run_upload(args: argparse.Namespace) -> int:
    from . import SourceFile, UstreamClient

    source = Path(args.file).expanduser()
    if not source.is_file():
        raise CLIError(f"source is not a file: {source}")

    config = _build_config()
    progress = UploadProgress(source)

    async with UstreamClient(config) as ustream:
        progress.attach(ustream.orchestrator.events)
        confirmation = await ustream.videos.upload(
            args.channel_id,
            SourceFile.from_path(source, chunk_size=config.ftp_chunk_size),
            _upload_options(args),
            progress_callback=progress.update,
        )

    print(f"channel_id={confirmation.channel_id} file_id={confirmation.file_id}")
    return 0


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ustream",
        description="List and upload videos through the Ustream API.",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"ustream {__version__}",
    )

    sub = parser.add_subparsers(dest="command")

    for name in ("videos", "playlists"):
        list_parser = sub.add_parser(name, help=f"List {name} of a channel")
        list_parser.add_argument("channel_id", help="Channel ID")
        list_parser.add_argument("--page-size", type=int, default=50, help="Results per page")
        list_parser.add_argument("--all", action="store_true", help="Follow paging to the last page")

    upload_parser = sub.add_parser("upload", help="Upload a video file to a channel")
    upload_parser.add_argument("channel_id", help="Channel ID")
    upload_parser.add_argument("file", type=Path, help="Video file to upload")
    upload_parser.add_argument("--title", default=None, help="Video title")
    upload_parser.add_argument("--description", default=None, help="Video description")
    upload_parser.add_argument(
        "--protect",
        choices=("public", "private"),
        default=None,
        help="Protection level (default: private)",
    )
    return parser


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        env_file = _load_environment(args.env_file)
    except CLIError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    if args.command is None:
        parser.print_help()
        return 0

    from .errors import UstreamError

    if args.command == "upload" and not args.silent:
        render_upload_summary(args.channel_id, args.file, _upload_options(args), env_file, log_mode)

    try:
        if args.command == "upload":
            return asyncio.run(_run_upload(args))
        return asyncio.run(_run_list(args.command, args))
    except (CLIError, UstreamError, httpx.HTTPError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
