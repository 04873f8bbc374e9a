#!/usr/bin/env python3
"""
Command-line interface for the Notel email & realtime backend.

Usage:
    python cli.py [command] [options]

Commands:
    serve       Start the API server
    test        Run the test suite
    send-share  Send one share email through the provider waterfall

Examples:
    python cli.py serve --reload
    python cli.py send-share friend@example.com https://notel.app/share/abc "Roadmap"
"""

import argparse
import logging
import subprocess
import sys


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = [sys.executable, "-m", "pytest"] + args
    subprocess.run(cmd)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    cmd = [sys.executable, "-m", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def run_send_share(
    recipient: str,
    share_url: str,
    title: str,
    content_type: str,
    sender_name: str,
    sender_email: str,
) -> int:
    """Send a share email and report how it went out. Returns the exit code."""
    from mail.dispatcher import build_share_dispatcher
    from mail.providers import EmailConfigurationError
    from shared.config import get_settings
    from shared.models import EmailMessage, ShareEmailRequest
    from shared.templates import render_share_email

    logging.basicConfig(level=logging.INFO, format="%(asctime)s | %(levelname)s | %(message)s")

    request = ShareEmailRequest(
        recipient_email=recipient,
        share_url=share_url,
        content_title=title,
        content_type=content_type,
        sender_name=sender_name,
        sender_email=sender_email,
    )
    subject, html, text = render_share_email(request)

    try:
        dispatcher = build_share_dispatcher(get_settings(), request)
    except EmailConfigurationError as e:
        print(f"Configuration error: {e}")
        return 2

    result = dispatcher.dispatch(EmailMessage(to=recipient, subject=subject, html=html, text=text))
    for attempt in result.attempts:
        print(f"  {attempt}" + (f" ({attempt.error})" if attempt.error else ""))
    print(f"Status: {result.status.value}" + (f" via {result.provider}" if result.provider else ""))
    return 0 if result.delivered else 1


def main() -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Notel email & realtime backend CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s serve --reload
  %(prog)s test -v
  %(prog)s send-share friend@example.com https://notel.app/share/abc "Roadmap" --type page
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    # Test command
    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    # Send-share command
    share_parser = subparsers.add_parser("send-share", help="Send one share email")
    share_parser.add_argument("recipient", help="Recipient email address")
    share_parser.add_argument("share_url", help="Link to the shared content")
    share_parser.add_argument("title", help="Title of the shared content")
    share_parser.add_argument("--type", dest="content_type", choices=["page", "event"], default="page")
    share_parser.add_argument("--sender-name", default="Notel")
    share_parser.add_argument("--sender-email", default="")

    args = parser.parse_args()

    if args.command == "serve":
        run_server(args.host, args.port, args.reload)
    elif args.command == "test":
        run_tests(args.pytest_args)
    elif args.command == "send-share":
        sys.exit(run_send_share(
            args.recipient,
            args.share_url,
            args.title,
            args.content_type,
            args.sender_name,
            args.sender_email,
        ))
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
