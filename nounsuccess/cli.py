"""
CLI (Command Line Interface).

Terminal front-end for the Noun Success student dashboard, e.g.:

    nounsuccess dashboard
    nounsuccess exams | jobs | forum | progress
    nounsuccess materials [--search TEXT] [--limit N]
    nounsuccess chat send "Explain recursion"
    nounsuccess chat history
    nounsuccess viewer <material_id> [--download DIR] [--zoom 1.5]
    nounsuccess whoami
    nounsuccess session cookie connect.sid=...
    nounsuccess session clear

Return codes: 0 ok, 1 an error panel was shown, 2 usage error.
"""

from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from rich.console import Console

from nounsuccess.api import ApiClient
from nounsuccess.cache import QueryCache
from nounsuccess.chat import ChatSession
from nounsuccess.config import Settings, load_settings, setup_logging
from nounsuccess.errors import ChatBusyError, NounSuccessError, TransportError
from nounsuccess.model import SessionUser
from nounsuccess.render import print_error, print_history, print_viewer, print_views
from nounsuccess.storage import clear_session, load_session, save_session
from nounsuccess.viewer import open_material
from nounsuccess.widgets import (
    ERROR,
    WidgetView,
    dashboard,
    exams_view,
    forum_view,
    jobs_view,
    materials_view,
    progress_view,
)

log = logging.getLogger(__name__)


@dataclass
class Context:
    settings: Settings
    client: ApiClient
    cache: QueryCache
    console: Console


def _settings_from_args(args: argparse.Namespace) -> Settings:
    settings = load_settings()
    if args.api_url:
        settings.api_url = args.api_url.rstrip("/")
    if args.timeout:
        settings.timeout = args.timeout
    if args.session:
        settings.session_path = Path(args.session).expanduser()
    if args.no_fallback:
        settings.offline_fallback = False
    if args.verbose:
        settings.log_level = "DEBUG"
    return settings


def _build_context(settings: Settings) -> Context:
    """
    Wire client -> cache once per invocation; commands get everything injected.
    """
    session = load_session(settings.session_path)
    client = ApiClient(
        settings.api_url,
        timeout=settings.timeout,
        cookies=session.cookies,
        fallback=settings.offline_fallback,
    )
    cache = QueryCache(client.get, stale_time=settings.stale_time)
    return Context(settings=settings, client=client, cache=cache, console=Console())


def _show_views(ctx: Context, views: list[WidgetView]) -> int:
    print_views(views, ctx.console)
    return 1 if any(v.state == ERROR for v in views) else 0


def _cmd_widget(ctx: Context, view_fn: Callable[[QueryCache], WidgetView]) -> int:
    return _show_views(ctx, [view_fn(ctx.cache)])


def _cmd_dashboard(ctx: Context) -> int:
    session = load_session(ctx.settings.session_path)
    if session.user:
        ctx.console.print(f"[bold]Welcome back, {session.user.first_name}![/]")
    return _show_views(ctx, dashboard(ctx.cache))


def _cmd_chat(args: argparse.Namespace, ctx: Context) -> int:
    def notify(title: str, description: str) -> None:
        print_error(description, title=title)

    chat = ChatSession(ctx.client, ctx.cache, notify=notify)

    if args.chat_command == "send":
        prompt = (args.prompt or "").strip()
        if not prompt:
            print("Please provide a prompt.")
            return 1
        try:
            chat.send_message(prompt)
        except ChatBusyError as exc:
            print_error(str(exc))
            return 1
        except NounSuccessError:
            # already shown by the notifier
            return 1

    print_history(chat.history(), ctx.console)
    return 0


def _cmd_viewer(args: argparse.Namespace, ctx: Context) -> int:
    try:
        viewer = open_material(ctx.client, args.material_id)
    except NounSuccessError as exc:
        print_error(str(exc), title="Material")
        return 1

    if args.zoom is not None:
        viewer.set_zoom(args.zoom)
    viewer.load()
    print_viewer(viewer, ctx.console)
    if viewer.error:
        return 1

    if args.download:
        try:
            out = viewer.download(args.download)
        except NounSuccessError as exc:
            print_error(str(exc), title="Download")
            return 1
        ctx.console.print(f"Saved to: {out}")
    return 0


def _print_user(user: SessionUser) -> None:
    extra = f" ({user.school})" if user.school else ""
    print(f"{user.first_name} <{user.email}>{extra}")


def _cmd_whoami(ctx: Context) -> int:
    session = load_session(ctx.settings.session_path)
    try:
        user = ctx.client.current_user()
    except TransportError as exc:
        # offline: answer from the stored session, leave it untouched
        log.warning("%s", exc)
        if session.user is None:
            print_error(str(exc))
            return 1
        print("(offline, last known user)")
        _print_user(session.user)
        return 0
    except NounSuccessError as exc:
        print_error(str(exc))
        return 1

    session.user = user
    save_session(session, ctx.settings.session_path)

    if user is None:
        print("Not logged in.")
        return 1
    _print_user(user)
    return 0


def _cmd_session(args: argparse.Namespace, settings: Settings) -> int:
    path = settings.session_path
    if args.session_command == "clear":
        removed = clear_session(path)
        print("Session cleared." if removed else "No stored session.")
        return 0

    name, sep, value = (args.cookie or "").partition("=")
    name = name.strip()
    if not sep or not name:
        print("Please provide the cookie as NAME=VALUE.")
        return 1

    session = load_session(path)
    session.cookies[name] = value.strip()
    save_session(session, path)
    print(f"Stored cookie: {name}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """
    Build the argparse CLI parser with sub-commands.
    """
    parser = argparse.ArgumentParser(prog="nounsuccess", description="Noun Success student dashboard")
    parser.add_argument("--api-url", type=str, default=None, help="API base URL (default: $NOUNSUCCESS_API_URL)")
    parser.add_argument("--timeout", type=float, default=None, help="Request timeout in seconds")
    parser.add_argument("--session", type=str, default=None, help="Path of the stored session file")
    parser.add_argument("--no-fallback", action="store_true", help="Fail instead of showing empty data when offline")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("dashboard", help="Show all dashboard widgets")
    sub.add_parser("exams", help="Upcoming exams")
    sub.add_parser("jobs", help="Job opportunities")
    sub.add_parser("forum", help="Forum highlights")
    sub.add_parser("progress", help="Recent progress")

    p_materials = sub.add_parser("materials", help="Course materials")
    p_materials.add_argument("--search", type=str, default=None, help="Filter by title, type or content")
    p_materials.add_argument("--limit", type=int, default=6, help="Maximum number of materials to show")

    p_chat = sub.add_parser("chat", help="AI tutor chat")
    chat_sub = p_chat.add_subparsers(dest="chat_command", required=True)
    p_send = chat_sub.add_parser("send", help="Send a prompt to the tutor")
    p_send.add_argument("prompt", type=str, help="Question for the tutor")
    chat_sub.add_parser("history", help="Show the conversation")

    p_viewer = sub.add_parser("viewer", help="Open a course material PDF")
    p_viewer.add_argument("material_id", type=int, help="Material ID")
    p_viewer.add_argument("--download", type=str, default=None, help="Directory to save the PDF into")
    p_viewer.add_argument("--zoom", type=float, default=None, help="Zoom factor (0.5 - 3.0)")

    sub.add_parser("whoami", help="Show the logged-in user")

    p_session = sub.add_parser("session", help="Manage the stored session")
    session_sub = p_session.add_subparsers(dest="session_command", required=True)
    p_cookie = session_sub.add_parser("cookie", help="Store a session cookie")
    p_cookie.add_argument("cookie", type=str, help="NAME=VALUE")
    session_sub.add_parser("clear", help="Forget the stored session")

    return parser


def main(argv: list[str] | None = None) -> None:
    """
    CLI entry point. Parses args, dispatches to command handlers,
    and exits via SystemExit with a return code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = _settings_from_args(args)
    setup_logging(settings.log_level)
    log.debug("using API at %s (fallback=%s)", settings.api_url, settings.offline_fallback)

    if args.command == "session":
        raise SystemExit(_cmd_session(args, settings))

    ctx = _build_context(settings)

    if args.command == "dashboard":
        raise SystemExit(_cmd_dashboard(ctx))
    if args.command == "exams":
        raise SystemExit(_cmd_widget(ctx, exams_view))
    if args.command == "jobs":
        raise SystemExit(_cmd_widget(ctx, jobs_view))
    if args.command == "forum":
        raise SystemExit(_cmd_widget(ctx, forum_view))
    if args.command == "progress":
        raise SystemExit(_cmd_widget(ctx, progress_view))
    if args.command == "materials":
        raise SystemExit(_show_views(ctx, [materials_view(ctx.cache, args.search, args.limit)]))
    if args.command == "chat":
        raise SystemExit(_cmd_chat(args, ctx))
    if args.command == "viewer":
        raise SystemExit(_cmd_viewer(args, ctx))
    if args.command == "whoami":
        raise SystemExit(_cmd_whoami(ctx))

    raise SystemExit(2)
