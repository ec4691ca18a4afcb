"""Command-line interface for the Bot SDK.

This module provides CLI commands for sending a message as a bot and for
signing or verifying webhook payloads when testing a webhook receiver.
Settings are read from the environment (BOT_TOKEN, CG_BASE_URL,
CG_REQUEST_TIMEOUT, WEBHOOK_SECRET, DEBUG_SDK, LOG_LEVEL).
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

import structlog

from cg_bot.api.client import BotClient
from cg_bot.api.errors import BotApiError
from cg_bot.config import Settings
from cg_bot.webhooks.security import create_signature_headers, verify_webhook

logger = structlog.get_logger(__name__)


def configure_logging(level: str) -> None:
    """Configure structlog to log to stderr, dropping events below the given level."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def read_payload(path: str) -> bytes:
    """Read a raw payload from a file, or stdin when path is "-"."""
    if path == "-":
        return sys.stdin.buffer.read()
    return Path(path).read_bytes()


async def send_command(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the 'send' command.

    Args:
        args: Parsed command-line arguments.
        settings: Settings loaded from the environment.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    try:
        client = BotClient.from_settings(settings)
    except ValueError:
        logger.error("bot_token_missing", hint="set BOT_TOKEN")
        return 1

    async with client:
        try:
            result = await client.send_message(
                args.community,
                args.channel,
                text=args.text,
                reply_to=args.reply_to,
            )
        except BotApiError as e:
            logger.error("send_failed", **e.to_dict())
            return 1

    print(json.dumps(result.to_api_dict(), indent=2))
    return 0


def sign_command(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the 'sign' command, printing signature headers as JSON."""
    secret = args.secret or settings.WEBHOOK_SECRET
    if not secret:
        logger.error("webhook_secret_missing", hint="pass --secret or set WEBHOOK_SECRET")
        return 1

    headers = create_signature_headers(
        read_payload(args.payload),
        secret,
        timestamp=args.timestamp,
    )
    print(json.dumps(headers, indent=2))
    return 0


def verify_command(args: argparse.Namespace, settings: Settings) -> int:
    """Execute the 'verify' command.

    Returns:
        Exit code (0 if the payload verifies, 1 otherwise).
    """
    secret = args.secret or settings.WEBHOOK_SECRET
    if not secret:
        logger.error("webhook_secret_missing", hint="pass --secret or set WEBHOOK_SECRET")
        return 1

    result = verify_webhook(
        read_payload(args.payload),
        args.signature,
        args.timestamp,
        secret,
        now=args.now,
    )

    print(
        json.dumps(
            {
                "valid": result.ok,
                "reason": result.reason.value if result.reason else None,
                "message": result.message,
                "age_ms": result.age_ms,
            },
            indent=2,
        )
    )
    return 0 if result else 1


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="cg-bot",
        description="Common Ground Bot SDK CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Send command
    send_parser = subparsers.add_parser("send", help="Send a text message to a channel")
    send_parser.add_argument("--community", required=True, help="Community ID")
    send_parser.add_argument("--channel", required=True, help="Channel ID")
    send_parser.add_argument("--text", required=True, help="Message text")
    send_parser.add_argument("--reply-to", help="Message ID to reply to")

    # Sign command
    sign_parser = subparsers.add_parser("sign", help="Sign a webhook payload")
    sign_parser.add_argument("payload", help="Path to raw payload file ('-' for stdin)")
    sign_parser.add_argument("--secret", help="Webhook secret (defaults to WEBHOOK_SECRET)")
    sign_parser.add_argument(
        "--timestamp",
        type=int,
        help="Epoch milliseconds to sign with (defaults to now)",
    )

    # Verify command
    verify_parser = subparsers.add_parser("verify", help="Verify a signed webhook payload")
    verify_parser.add_argument("payload", help="Path to raw payload file ('-' for stdin)")
    verify_parser.add_argument("--signature", required=True, help="X-CG-Signature value")
    verify_parser.add_argument("--timestamp", required=True, help="X-CG-Timestamp value")
    verify_parser.add_argument("--secret", help="Webhook secret (defaults to WEBHOOK_SECRET)")
    verify_parser.add_argument(
        "--now",
        type=int,
        help="Current time in epoch milliseconds (defaults to wall clock)",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point for CLI.

    Returns:
        Exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    settings = Settings.from_env()
    configure_logging("DEBUG" if settings.DEBUG_SDK else settings.LOG_LEVEL)

    # Run appropriate command
    if args.command == "send":
        return asyncio.run(send_command(args, settings))
    elif args.command == "sign":
        return sign_command(args, settings)
    elif args.command == "verify":
        return verify_command(args, settings)

    return 1


if __name__ == "__main__":
    sys.exit(main())
