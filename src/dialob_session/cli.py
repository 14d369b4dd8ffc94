"""Command line interface for inspecting and driving a remote session.

Every command pulls the full state first, applies its action through a
``Session`` (so the usual optimistic apply / flush / reconcile cycle runs),
and prints the resulting state as JSON on stdout.  Log output goes to stderr.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

from dotenv import load_dotenv

from . import __version__
from .config import Config, load_config
from .config_loader import discover_config_files, load_hierarchical_config
from .config_schema import UnifiedConfig, build_config
from .errors import DialobError
from .logger import setup_logging
from .session import Session, SessionState
from .validators import validate_item_id, validate_session_id

logger = logging.getLogger(__name__)


def _stderr_print(msg: str) -> None:
    """Print message to stderr for user feedback."""
    print(msg, file=sys.stderr, flush=True)


def parse_answer(raw: str) -> Any:
    """Interpret a command line answer as JSON, falling back to the raw string.

    ``42`` becomes an int, ``true`` a bool, ``["a","b"]`` a list and
    ``hello`` stays a string.
    """
    try:
        return json.loads(raw)
    except ValueError:
        return raw


def state_to_json(state: SessionState) -> str:
    """Render a snapshot as indented JSON (reverse map sets become sorted lists)."""
    data = state.model_dump(mode="json", exclude={"reverse_item_map"})
    data["reverse_item_map"] = {
        child: sorted(parents)
        for child, parents in sorted(state.reverse_item_map.items())
    }
    return json.dumps(data, indent=2, default=str)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dialob-session",
        description="Inspect and answer remote Dialob sessions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Print the full state of a session
  dialob-session --url https://forms.example.com/api/session pull 3f2a9c

  # Answer a question and print the reconciled state
  dialob-session answer 3f2a9c name '"Ada"'

  # Mark the session complete
  dialob-session complete 3f2a9c
        """,
    )
    parser.add_argument(
        "--url",
        help="Session API base URL (takes precedence over DIALOB_URL env var and config files)",
    )
    parser.add_argument("--username", help="Basic auth username")
    parser.add_argument(
        "--password",
        help="Basic auth password (visible in process list -- prefer DIALOB_PASSWORD env var)",
    )
    parser.add_argument("--token", help="Bearer token")
    parser.add_argument(
        "--insecure",
        action="store_true",
        help="Skip SSL certificate verification (use only for development)",
    )
    parser.add_argument(
        "--debug", action="store_true", help="Enable debug logging"
    )
    parser.add_argument("--log-file", help="Also write logs to this file")
    parser.add_argument(
        "--version",
        action="version",
        version=f"dialob-session version {__version__}",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    pull = sub.add_parser("pull", help="Print the full session state")
    pull.add_argument("session_id")

    answer = sub.add_parser("answer", help="Set the answer of an item")
    answer.add_argument("session_id")
    answer.add_argument("item_id")
    answer.add_argument(
        "value", help="Answer, parsed as JSON when possible"
    )

    for name, help_text in (
        ("complete", "Mark the session complete"),
        ("next", "Move to the next page"),
        ("previous", "Move to the previous page"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("session_id")

    return parser


def resolve_config(args: argparse.Namespace) -> tuple[Config, UnifiedConfig]:
    """Merge CLI args, environment, .env and YAML config files.

    Raises:
        ValueError: If the resulting configuration is invalid.
    """
    load_dotenv()

    unified = UnifiedConfig()
    yaml_fallbacks: dict[str, Any] | None = None
    if discover_config_files():
        unified = build_config(load_hierarchical_config())
        yaml_fallbacks = unified.dialob.model_dump(exclude_none=True)

    config = load_config(
        url=args.url,
        username=args.username,
        password=args.password,
        token=args.token,
        insecure=args.insecure,
        debug=args.debug,
        yaml_fallbacks=yaml_fallbacks,
    )
    return config, unified


async def run_command(args: argparse.Namespace, config: Config) -> SessionState:
    """Execute one CLI command against the session API."""
    async with Session.from_config(args.session_id, config) as session:
        session.on(
            "error",
            lambda kind, error: logger.error("%s error: %s", kind.value, error),
        )
        await session.pull()

        if args.command == "answer":
            session.set_answer(args.item_id, parse_answer(args.value))
        elif args.command == "complete":
            session.complete()
        elif args.command == "next":
            session.next()
        elif args.command == "previous":
            session.previous()

        await session.flush()
        return session.state


def main(argv: list[str] | None = None) -> int:
    """Entry point; returns the process exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    for value, check in (
        (args.session_id, validate_session_id),
        (getattr(args, "item_id", None), validate_item_id),
    ):
        if value is None:
            continue
        is_valid, reason = check(value)
        if not is_valid:
            parser.error(reason)

    try:
        config, unified = resolve_config(args)
    except ValueError as e:
        _stderr_print(f"ERROR: Configuration error: {e}")
        return 2

    setup_logging(
        debug=config.debug,
        log_file=args.log_file or unified.logging.file,
        debug_format=unified.logging.format,
        level=unified.logging.level,
    )
    logger.info("Session API: %s", config.api_url)

    try:
        state = asyncio.run(run_command(args, config))
    except DialobError as e:
        _stderr_print(f"ERROR: {e}")
        return 1
    except KeyboardInterrupt:
        _stderr_print("\nInterrupted.")
        return 130

    print(state_to_json(state))
    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":
    run()
