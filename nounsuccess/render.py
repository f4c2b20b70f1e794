"""
Terminal rendering of widget views with rich.
"""

from __future__ import annotations

from typing import Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from nounsuccess.model import ChatHistory
from nounsuccess.viewer import DocumentViewer
from nounsuccess.widgets import (
    EMPTY,
    ERROR,
    INFO,
    LOADING,
    URGENT,
    WARNING,
    JobItem,
    MaterialItem,
    PostItem,
    ProgressItem,
    UpcomingExam,
    WidgetView,
    days_label,
)

SEVERITY_STYLE = {URGENT: "bold red", WARNING: "yellow", INFO: "blue"}

# rich has no "gray"/"orange"/"purple" defaults matching the web badges exactly
BADGE_STYLE = {
    "green": "green",
    "blue": "blue",
    "yellow": "yellow",
    "purple": "magenta",
    "orange": "dark_orange",
    "gray": "grey50",
}

EMPTY_MESSAGES = {
    "Forum Highlights": "No discussions yet. Create a post to get started.",
    "Job Opportunities": "No opportunities available right now. Check back later.",
    "Upcoming Exams": "No upcoming exams. Browse exam prep materials meanwhile.",
    "Recent Progress": "No activity yet. Start with exam prep.",
    "Course Materials": "No course materials available yet.",
}


def _exam_table(items: list[UpcomingExam]) -> Table:
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("Course")
    table.add_column("Title")
    table.add_column("Date")
    table.add_column("In", justify="right")
    for e in items:
        table.add_row(
            e.code,
            e.title,
            e.date.strftime("%Y-%m-%d"),
            Text(days_label(e.days_until), style=SEVERITY_STYLE[e.severity]),
        )
    return table


def _progress_table(items: list[ProgressItem]) -> Table:
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("Type")
    table.add_column("Activity")
    table.add_column("When")
    table.add_column("Score", justify="right")
    for p in items:
        table.add_row(p.type, p.title, p.when, f"{p.score}%")
    return table


def _jobs_table(items: list[JobItem]) -> Table:
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("Title")
    table.add_column("Company")
    table.add_column("Location")
    table.add_column("Type")
    table.add_column("Posted")
    for j in items:
        table.add_row(j.title, j.company, j.location, Text(j.type_label, style=BADGE_STYLE[j.badge]), j.posted)
    return table


def _forum_table(items: list[PostItem]) -> Table:
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("")
    table.add_column("Author")
    table.add_column("Title")
    table.add_column("Posted")
    for p in items:
        table.add_row(p.initial, p.author, p.title, p.posted)
    return table


def _materials_table(items: list[MaterialItem]) -> Table:
    table = Table(box=box.SIMPLE, show_header=True)
    table.add_column("ID", justify="right")
    table.add_column("Title")
    table.add_column("Type")
    table.add_column("")
    for m in items:
        title = Text(m.title)
        if m.downloadable:
            title.append(" (pdf)", style="dim")
        table.add_row(str(m.id), title, m.type, m.detail)
    return table


def render_view(view: WidgetView) -> Panel:
    if view.state == LOADING:
        return Panel(Text("Loading...", style="dim"), title=view.name)
    if view.state == ERROR:
        body = Text(view.error or "", style="red")
        if view.retry_hint:
            body.append(f"\n{view.retry_hint}", style="dim")
        return Panel(body, title=view.name, border_style="red")
    if view.state == EMPTY:
        message = view.empty_message or EMPTY_MESSAGES.get(view.name, "Nothing to show.")
        return Panel(Text(message, style="dim"), title=view.name)

    first = view.items[0]
    if isinstance(first, UpcomingExam):
        content = _exam_table(view.items)
    elif isinstance(first, ProgressItem):
        content = _progress_table(view.items)
    elif isinstance(first, JobItem):
        content = _jobs_table(view.items)
    elif isinstance(first, MaterialItem):
        content = _materials_table(view.items)
    else:
        content = _forum_table(view.items)
    return Panel(content, title=view.name)


def print_views(views: list[WidgetView], console: Optional[Console] = None) -> None:
    console = console or Console()
    for view in views:
        console.print(render_view(view))


def print_history(history: ChatHistory, console: Optional[Console] = None) -> None:
    console = console or Console()
    if not history.messages:
        console.print(Text("No messages yet. Ask the tutor something.", style="dim"))
    for msg in history.messages:
        who = Text("You", style="bold cyan") if msg.is_user_message else Text("Tutor", style="bold green")
        console.print(who, msg.content)
    usage = history.usage
    limit = "unlimited" if usage.prompt_limit is None else str(usage.prompt_limit)
    console.print(Text(f"Prompts used: {usage.prompts_used} / {limit}", style="dim"))


def print_viewer(viewer: DocumentViewer, console: Optional[Console] = None) -> None:
    console = console or Console()
    lines = Text()
    lines.append(f"Source: {viewer.src}\n")
    lines.append(f"Zoom: {round(viewer.zoom * 100)}%\n")
    lines.append(f"Status: {viewer.status}")
    if viewer.error:
        lines.append(f"\n{viewer.error}", style="red")
    console.print(Panel(lines, title=viewer.display_title, border_style="red" if viewer.error else "blue"))


def print_error(message: str, console: Optional[Console] = None, title: str = "Error") -> None:
    console = console or Console(stderr=True)
    console.print(Panel(Text(message, style="red"), title=title, border_style="red"))
