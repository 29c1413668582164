"""Command line entrypoint for running the FastAPI application with uvicorn."""

from __future__ import annotations

import argparse
import getpass
import logging
from typing import Sequence

import uvicorn

from ..config import ServerSettings
from ..database import configure_database
from ..user_management import SqlUserStore


def build_parser() -> argparse.ArgumentParser:
    """Construct the CLI argument parser for the web API runner."""

    parser = argparse.ArgumentParser(
        description="Run the audioshelf FastAPI application with uvicorn",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Hostname or IP address for the uvicorn server (default: %(default)s)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8085,
        help="TCP port for the uvicorn server (default: %(default)s)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload; useful during local development.",
    )
    parser.add_argument(
        "--log-level",
        default="info",
        choices=["critical", "error", "warning", "info", "debug", "trace"],
        help="Log level passed to uvicorn (default: %(default)s)",
    )
    parser.add_argument(
        "--create-admin",
        metavar="USERNAME",
        help="Create an admin account (password is prompted) and exit.",
    )
    return parser


def create_admin(username: str) -> None:
    """Prompt for a password and store ``username`` as an admin."""

    password = getpass.getpass(f"Password for {username}: ")
    database = configure_database(ServerSettings.from_env().database_url)
    try:
        record = SqlUserStore(database).create_user(username, password, admin=True)
    finally:
        database.dispose()
    print(f"Created admin '{record.username}' (id {record.id})")


def main(argv: Sequence[str] | None = None) -> None:
    """Parse CLI arguments and launch the uvicorn server."""

    parser = build_parser()
    args = parser.parse_args(argv)

    if args.create_admin:
        try:
            create_admin(args.create_admin)
        except ValueError as exc:
            parser.error(str(exc))
        return

    uvicorn.run(
        "audioshelf.webapi.application:create_app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
        factory=True,
    )


if __name__ == "__main__":  # pragma: no cover - CLI integration
    try:
        main()
    except KeyboardInterrupt:  # pragma: no cover - user initiated shutdown
        logging.getLogger(__name__).info("Server interrupted by user")
