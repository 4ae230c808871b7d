#!/usr/bin/env python3
"""
Maintenance commands for the farm directory database.

Usage:
    python -m farm_directory.cli init-db
    python -m farm_directory.cli seed-admin --email admin@example.com --password "..."
    python -m farm_directory.cli seed-user --email testuser@example.com
    python -m farm_directory.cli list-users

The database comes from DATABASE_URL (or --db). If --password is omitted
you are prompted for it.
"""
from __future__ import annotations

import argparse
import getpass
import os
import sys

import pandas as pd

from farm_directory import crud
from farm_directory.auth_service import AuthService
from farm_directory.config import DEFAULT_DATABASE_URL
from farm_directory.db import init_db, make_engine, make_sessionmaker
from farm_directory.errors import ValidationError
from farm_directory.lifecycle import AccountStatus, Role

USER_COLUMNS = ["id", "email", "name", "role", "status"]


def users_frame(users) -> pd.DataFrame:
    rows = [{c: getattr(u, c) for c in USER_COLUMNS} for u in users]
    return pd.DataFrame(rows, columns=USER_COLUMNS)


def _seed(session_factory, args, *, role: Role, status: AccountStatus) -> int:
    password = args.password or getpass.getpass("Password: ")
    auth = AuthService(bcrypt_rounds=args.rounds)
    with session_factory() as db:
        existing = crud.get_user_by_email(db, args.email)
        if existing:
            print(f"[!] User already exists: {existing.email}")
            return 0
        try:
            user = auth.create_account(
                db, email=args.email, password=password, name=args.name, role=role, status=status
            )
        except ValidationError as e:
            print(f"[!] {e.message}", file=sys.stderr)
            return 1
    print(f"[+] User created: {user.email} (role: {user.role}, status: {user.status})")
    return 0


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Farm directory maintenance.")
    ap.add_argument("--db", default=None, help=f"SQLAlchemy URL (default: $DATABASE_URL or {DEFAULT_DATABASE_URL})")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables")

    for name, default_name in (("seed-admin", "Admin User"), ("seed-user", "Test User")):
        p = sub.add_parser(name)
        p.add_argument("--email", required=True)
        p.add_argument("--password")
        p.add_argument("--name", default=default_name)
        p.add_argument("--rounds", type=int, default=10, help="bcrypt cost factor")

    sub.add_parser("list-users", help="Print all accounts")

    args = ap.parse_args(argv)

    engine = make_engine(args.db or os.getenv("DATABASE_URL", DEFAULT_DATABASE_URL))
    init_db(engine)
    session_factory = make_sessionmaker(engine)

    if args.command == "init-db":
        print("[+] Tables created")
        return 0
    if args.command == "seed-admin":
        return _seed(session_factory, args, role=Role.ADMIN, status=AccountStatus.APPROVED)
    if args.command == "seed-user":
        return _seed(session_factory, args, role=Role.USER, status=AccountStatus.PENDING_APPROVAL)

    with session_factory() as db:
        frame = users_frame(crud.list_users(db))
    if frame.empty:
        print("No users found.")
    else:
        print(frame.to_string(index=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
