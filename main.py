#!/usr/bin/env python3
"""
Credential service -- command-line administration.

Runs the same credential components as the HTTP API directly against the
configured database. Useful for seeding accounts and checking logins without
starting the server.

Usage:
  python main.py signup --name "Ada Lovelace" --email ada@example.com
  python main.py login --email ada@example.com
  python main.py decode <token>
  python main.py --db sqlite:////tmp/users.db signup --name Ada --email ada@example.com --password s3cret

Omitting --password prompts for it without echo.

Environment variables:
  ACCESS_KEY     Token signing key (required unless DEBUG=true).
  DATABASE_URL   SQLAlchemy URL of the credential database.
  BCRYPT_ROUNDS  bcrypt cost factor for new accounts (default 10).
"""

import argparse
import getpass
import json
import sys
from typing import Optional

from auth.credentials import CredentialRegistrar, CredentialVerifier
from auth.errors import InternalError, InvalidCredentials
from auth.passwords import BcryptHasher
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings


def _read_password(args: argparse.Namespace) -> str:
    """Return --password, or prompt for it when omitted."""
    if args.password is not None:
        return args.password
    return getpass.getpass("Password: ")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credential-service",
        description="Register accounts, check logins, and inspect access tokens.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py signup --name "Ada Lovelace" --email ada@example.com
  python main.py login --email ada@example.com --password s3cret
  python main.py decode eyJhbGciOiJIUzI1NiIs...
        """,
    )
    parser.add_argument(
        "--db",
        metavar="URL",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL setting)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    signup = sub.add_parser("signup", help="Create a credential record")
    signup.add_argument("--name", required=True)
    signup.add_argument("--email", required=True)
    signup.add_argument("--password", default=None, help="Prompted for when omitted")

    login = sub.add_parser("login", help="Verify credentials and print an access token")
    login.add_argument("--email", required=True)
    login.add_argument("--password", default=None, help="Prompted for when omitted")

    decode = sub.add_parser("decode", help="Print the identity reference embedded in a token")
    decode.add_argument("token")

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 2

    settings = get_settings()
    issuer = TokenIssuer(settings.access_key, algorithm=settings.jwt_algorithm)

    if args.command == "decode":
        identity_ref = issuer.decode(args.token)
        if identity_ref is None:
            print("  [!] Token is invalid or was signed with a different key.", file=sys.stderr)
            return 1
        print(identity_ref)
        return 0

    store = UserStore(db_url=args.db or settings.database_url)
    hasher = BcryptHasher(rounds=settings.bcrypt_rounds)
    try:
        if args.command == "signup":
            record = CredentialRegistrar(store, hasher).register(args.name, args.email, _read_password(args))
            print(json.dumps({"_id": record.id, "name": record.name, "email": record.email}, indent=2))
            return 0

        # login
        record = CredentialVerifier(store, hasher).verify(args.email, _read_password(args))
        print(json.dumps({"token": issuer.issue(record.id), "userId": record.id}, indent=2))
        return 0
    except InvalidCredentials as exc:
        print(f"  [!] {exc.message}", file=sys.stderr)
        return 1
    except InternalError as exc:
        print(f"  [!] Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        store.close()


if __name__ == "__main__":
    sys.exit(main())
