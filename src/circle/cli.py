"""
Command line front end for the circle core.
Run: python -m circle <command> (with .env or CIRCLE_* env vars set).
"""

import argparse
import asyncio
import getpass
import logging
import sys
from pathlib import Path

from circle.application import (
    CacheStatus,
    LoginRequest,
    RegisterRequest,
    TransferFormat,
)
from circle.bootstrap import CircleApp, build_app
from circle.config import Settings, load_settings
from circle.domain import CircleError, Contact, PageRequest, SessionExpired

logger = logging.getLogger(__name__)


def _format_contact(c: Contact) -> str:
    """One contact as card: name, title, emails, phones."""
    lines = [f"#{c.id} {c.full_name}"]
    if c.title:
        lines.append(f"  {c.title}")
    for e in c.emails:
        lines.append(f"  email: {e.email} ({e.type.value})")
    for p in c.phones:
        lines.append(f"  phone: {p.phone_number} ({p.type.value})")
    return "\n".join(lines)


def _print_entry(entry) -> int:
    if entry.status is CacheStatus.ERROR:
        print(f"Error: {entry.error}", file=sys.stderr)
        return 1
    page = entry.data
    for contact in page.content:
        print(_format_contact(contact))
    shown = page.number + 1 if page.total_pages else 0
    print(f"-- page {shown}/{page.total_pages}, {page.total_elements} contacts")
    return 0


async def _run(app: CircleApp, args: argparse.Namespace) -> int:
    cmd = args.command
    logger.debug("Running %s against %s", cmd, app.settings.api_url)
    if cmd == "login":
        password = args.password or getpass.getpass("Password: ")
        session = await app.session.login(LoginRequest(username=args.username, password=password))
        print(f"Logged in as {session.user.full_name}")
        return 0
    if cmd == "register":
        password = args.password or getpass.getpass("Password: ")
        session = await app.session.register(
            RegisterRequest(
                first_name=args.first_name,
                last_name=args.last_name,
                password=password,
                email=args.email,
                phone_number=args.phone,
            )
        )
        print(f"Registered {session.user.full_name}")
        return 0
    if cmd == "logout":
        app.session.logout()
        print("Logged out")
        return 0
    if not app.session.is_authenticated:
        print("Not logged in. Run: python -m circle login <username>", file=sys.stderr)
        return 2
    if cmd == "whoami":
        user = await app.session.refresh_user()
        print(f"{user.full_name} <{user.email or '-'}>")
        return 0
    page = PageRequest(page=getattr(args, "page", 0), size=getattr(args, "size", 10))
    if cmd == "list":
        return _print_entry(await app.directory.list_contacts(page))
    if cmd == "search":
        return _print_entry(await app.directory.search_contacts(args.query, page))
    if cmd == "show":
        entry = await app.directory.get_contact(args.id)
        if entry.status is CacheStatus.ERROR:
            print(f"Error: {entry.error}", file=sys.stderr)
            return 1
        print(_format_contact(entry.data))
        return 0
    if cmd == "delete":
        await app.directory.delete_contact(args.id)
        print(f"Deleted contact {args.id}")
        return 0
    if cmd == "import":
        result = await app.transfer.import_path(args.file)
        print(f"{result.message} from {result.filename}")
        return 0
    if cmd == "export":
        payload = await app.transfer.export(TransferFormat(args.format))
        path = payload.save(args.output)
        print(f"Saved {path}")
        return 0
    raise ValueError(f"Unknown command: {cmd}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="circle", description="Personal contact directory client")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("login")
    p.add_argument("username")
    p.add_argument("--password")

    p = sub.add_parser("register")
    p.add_argument("first_name")
    p.add_argument("last_name")
    p.add_argument("--email")
    p.add_argument("--phone")
    p.add_argument("--password")

    sub.add_parser("logout")
    sub.add_parser("whoami")

    for name in ("list", "search"):
        p = sub.add_parser(name)
        if name == "search":
            p.add_argument("query")
        p.add_argument("--page", type=int, default=0)
        p.add_argument("--size", type=int, default=10)

    for name in ("show", "delete"):
        p = sub.add_parser(name)
        p.add_argument("id", type=int)

    p = sub.add_parser("import")
    p.add_argument("file", type=Path)

    p = sub.add_parser("export")
    p.add_argument("format", choices=[f.value for f in TransferFormat])
    p.add_argument("--output", type=Path, default=Path.cwd())
    return parser


async def _main(args: argparse.Namespace, settings: Settings) -> int:
    async with build_app(settings) as app:
        try:
            return await _run(app, args)
        except SessionExpired as exc:
            print(f"Session expired ({exc.message}). Please log in again.", file=sys.stderr)
            return 2
        except CircleError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            for name, msg in getattr(exc, "field_errors", {}).items():
                print(f"  {name}: {msg}", file=sys.stderr)
            return 1


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=getattr(logging, settings.log_level, logging.INFO),
    )
    return asyncio.run(_main(args, settings))
