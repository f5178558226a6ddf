#!/usr/bin/env python3
"""
TaskBoard -- administrative command line.

Usage:
  python main.py init-db
  python main.py create-admin admin@example.com 'S3cret!pass'
  python main.py seed
  python main.py serve --host 0.0.0.0 --port 8000

Registration over HTTP always creates `user` accounts; create-admin is the
only way to obtain the admin role.

Environment variables:
  DATABASE_URL  SQLAlchemy URL (default: sqlite file next to this script)
  SECRET_KEY    Required unless DEBUG=true (settings are validated on every command)
  BCRYPT_ROUNDS Cost factor for hashed passwords (default 10)
"""

import argparse
import logging
import sys

from sqlalchemy.exc import IntegrityError

from auth.models import Role, User
from auth.store import UserStore
from auth.tokens import BcryptHasher
from core.config import get_settings
from core.database import init_schema, make_engine
from tasks.models import Task, TaskStatus
from tasks.service import parse_due_date
from tasks.store import TaskStore

logger = logging.getLogger("taskboard.cli")

_DEMO_USERS = [
    ("admin@example.com", "Admin123!", Role.admin),
    ("user1@example.com", "User123!", Role.user),
    ("user2@example.com", "User123!", Role.user),
    ("user3@example.com", "User123!", Role.user),
]

# (title, description, status, due date, index into _DEMO_USERS)
_DEMO_TASKS = [
    ("Setup project environment", "Configure development environment and install dependencies",
     TaskStatus.done, "2025-11-20", 0),
    ("Implement authentication system", "Create login and registration functionality with JWT",
     TaskStatus.done, "2025-11-22", 0),
    ("Design database schema", "Create entity models and relationships for the application",
     TaskStatus.in_progress, "2025-11-25", 1),
    ("Implement task CRUD operations", "Create endpoints for creating, reading, updating, and deleting tasks",
     TaskStatus.in_progress, "2025-11-28", 1),
    ("Add input validation", "Implement proper validation for all API endpoints",
     TaskStatus.todo, "2025-12-01", 2),
    ("Write unit tests", "Add comprehensive test coverage for all services and controllers",
     TaskStatus.todo, "2025-12-05", 2),
    ("Setup CI/CD pipeline", "Configure automated testing and deployment",
     TaskStatus.todo, "2025-12-10", 3),
    ("Add API documentation", "Generate OpenAPI documentation for all endpoints",
     TaskStatus.todo, "2025-12-15", 3),
]


def _stores(db_url: str) -> tuple[UserStore, TaskStore]:
    engine = make_engine(db_url)
    init_schema(engine)
    return UserStore(engine), TaskStore(engine)


def _hasher() -> BcryptHasher:
    return BcryptHasher(rounds=get_settings().bcrypt_rounds)


def cmd_init_db(args: argparse.Namespace) -> int:
    _stores(args.database_url)
    print(f"  Schema ready at {args.database_url}")
    return 0


def cmd_create_admin(args: argparse.Namespace) -> int:
    """Create an admin account, or promote an existing account to admin."""
    users, _ = _stores(args.database_url)
    if len(args.password) < 6 or len(args.password.encode("utf-8")) > 72:
        print("  [!] Password must be 6-72 bytes long.")
        return 1

    existing = users.get_by_email(args.email)
    if existing is not None:
        users.set_role(existing.id, Role.admin)
        logger.warning("Promoted existing account %s to admin", existing.id)
        print(f"  Promoted {args.email} to admin.")
        return 0

    try:
        user_id = users.create_user(
            User(email=args.email, hashed_password=_hasher().hash(args.password), role=Role.admin)
        )
    except IntegrityError:
        print(f"  [!] {args.email} was created concurrently; re-run to promote it.")
        return 1
    print(f"  Created admin {args.email} ({user_id}).")
    return 0


def cmd_seed(args: argparse.Namespace) -> int:
    """Insert demo users and tasks. Skips entirely when any user already exists."""
    users, tasks = _stores(args.database_url)
    if users.has_users():
        print("  Users already exist, skipping seed.")
        return 0

    hasher = _hasher()
    user_ids = [
        users.create_user(User(email=email, hashed_password=hasher.hash(password), role=role))
        for email, password, role in _DEMO_USERS
    ]
    for title, description, status, due, owner in _DEMO_TASKS:
        tasks.create_task(
            Task(
                title=title,
                description=description,
                status=status,
                due_date=parse_due_date(due),
                user_id=user_ids[owner],
            )
        )
    print(f"  Seeded {len(user_ids)} users and {len(_DEMO_TASKS)} tasks.")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    uvicorn.run("asgi:app", host=args.host, port=args.port, reload=args.reload)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskboard",
        description="TaskBoard administrative commands.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py init-db
  python main.py create-admin admin@example.com 'S3cret!pass'
  python main.py seed
  DATABASE_URL=postgresql://user:pw@host/db python main.py init-db
        """,
    )
    parser.add_argument(
        "--database-url",
        default=None,
        metavar="URL",
        help="SQLAlchemy database URL (default: DATABASE_URL or the local sqlite file)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    init_db = sub.add_parser("init-db", help="Create database tables")
    init_db.set_defaults(func=cmd_init_db)

    admin = sub.add_parser("create-admin", help="Create or promote an admin account")
    admin.add_argument("email")
    admin.add_argument("password")
    admin.set_defaults(func=cmd_create_admin)

    seed = sub.add_parser("seed", help="Insert demo users and tasks into an empty database")
    seed.set_defaults(func=cmd_seed)

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")
    serve.set_defaults(func=cmd_serve)
    return parser


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)-5s %(name)s %(message)s")
    args = build_parser().parse_args(argv)
    if args.database_url is None:
        args.database_url = get_settings().database_url
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
