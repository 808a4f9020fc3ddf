"""Admin commands for the crypto dashboard.

Usage:
    crypto-dashboard add-user --email a@x.com --name Alice [--password ...]
    crypto-dashboard list-users
    crypto-dashboard serve [--host HOST] [--port PORT] [--reload]

Without --password, add-user prompts for it (input hidden).
"""

from __future__ import annotations

import argparse
import getpass
import sys
from typing import List, Optional

from .config import HOST, PORT
from .errors import DashboardError
from .store import get_session, init_db


def _add_user(args: argparse.Namespace) -> int:
    from .credential_store import register

    password = args.password or getpass.getpass("Password: ")
    init_db()
    with get_session() as session:
        try:
            _, user = register(session, args.email, args.name, password)
        except DashboardError as e:
            print(f"Error: {e.message}", file=sys.stderr)
            return 1
    print(f"User created successfully with ID: {user.id}")
    print(f"Email: {user.email}")
    print(f"Name: {user.name}")
    return 0


def _list_users(args: argparse.Namespace) -> int:
    from .credential_store import list_users

    init_db()
    with get_session() as session:
        users = list_users(session)
    if not users:
        print("No users found in database.")
        return 0

    print(f"Found {len(users)} user(s):\n")
    for i, user in enumerate(users, start=1):
        print(f"{i}. ID: {user.id}")
        print(f"   Email: {user.email}")
        print(f"   Name: {user.name}")
        print(f"   Created: {user.created_at}")
        print()
    return 0


def _serve(args: argparse.Namespace) -> int:
    import uvicorn

    print(f"Starting API server on {args.host}:{args.port}")
    print(f"  - GET http://{args.host}:{args.port}/health")
    uvicorn.run(
        "crypto_dashboard.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="crypto-dashboard", description="Crypto dashboard admin commands.")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("add-user", help="Create a user directly in the database")
    p.add_argument("--email", required=True)
    p.add_argument("--name", required=True)
    p.add_argument("--password", help="Prompted for when omitted")
    p.set_defaults(func=_add_user)

    p = sub.add_parser("list-users", help="List every registered user")
    p.set_defaults(func=_list_users)

    p = sub.add_parser("serve", help="Run the API with uvicorn")
    p.add_argument("--host", default=HOST, help=f"Host to bind to (default: {HOST})")
    p.add_argument("--port", type=int, default=PORT, help=f"Port to bind to (default: {PORT})")
    p.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    p.set_defaults(func=_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
