"""Interactive CLI application."""
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.prompt import Prompt, IntPrompt
from rich.table import Table

from practice_review.catalog import group_by_topic
from practice_review.dashboard import get_review_stats, list_with_status
from practice_review.db import init_db, get_db_path
from practice_review.errors import NotAuthenticated, ReviewError
from practice_review.importer import import_problems
from practice_review.models import ReviewOutcome, SettingsUpdate, TodayQueue
from practice_review.submit import submit_review
from practice_review.today import build_today_queue
from practice_review.users import login, logout, resolve_current_user, update_settings

console = Console()

EXIT_WORDS = ("q", "quit", "menu")
OUTCOME_CHOICES = {
    "1": ReviewOutcome.FAILED,
    "2": ReviewOutcome.STRUGGLED,
    "3": ReviewOutcome.SOLVED,
    "4": ReviewOutcome.INSTANT,
}
DIFFICULTY_COLORS = {"Easy": "green", "Medium": "yellow", "Hard": "red", "Unknown": "dim"}
STATUS_COLORS = {"due": "red", "reviewed": "green", "new": "cyan", "ok": "dim"}


class SessionExitRequested(Exception):
    """The learner asked to leave a review session early."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def show_welcome():
    console.print(Panel(
        "[bold]Practice Review[/bold]\n[dim]Spaced repetition for solved problems[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("today", "Today's review queue"),
        ("browse", "Solved problems by topic"),
        ("dashboard", "Progress and statistics"),
        ("settings", "Daily goal and pacing"),
        ("import", "Import solved problems"),
        ("login", "Switch user"),
        ("logout", "Sign out"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def difficulty_text(difficulty: str) -> str:
    color = DIFFICULTY_COLORS.get(difficulty, "dim")
    return f"[{color}]{difficulty}[/{color}]"


def run_review_session(db_path: str, user_id: int, queue: TodayQueue, position: int = 0) -> int:
    """Walk the queue from ``position`` and return the position reached.

    Raises SessionExitRequested when the learner quits; items before the
    current one are already saved.
    """
    items = queue.items
    while position < len(items):
        item = items[position]
        problem = item.problem
        badge = " [magenta]NEW[/magenta]" if item.is_new else ""
        tags = ", ".join(problem.tags) or "no tags"
        console.print(Panel(
            f"[bold]{problem.title}[/bold]{badge}\n"
            f"{difficulty_text(problem.difficulty.value)}  [dim]{tags}[/dim]\n"
            f"[dim]{problem.slug}[/dim]",
            title=f"Problem {position + 1}/{len(items)}", border_style="cyan",
        ))
        answer = session_prompt(
            "How did it go? (1=failed, 2=struggled, 3=solved, 4=instant, s=skip)",
            choices=[*OUTCOME_CHOICES, "s", *EXIT_WORDS],
        )
        if answer != "s":
            result = submit_review(db_path, user_id, problem.slug, OUTCOME_CHOICES[answer])
            console.print(
                f"[green]Next review in {result.next_interval} day(s)[/green] "
                f"[dim]({result.next_review_at.isoformat()})[/dim]\n"
            )
        position += 1
    return position


def cmd_login(db_path: str):
    username = Prompt.ask("Username").strip()
    if not username:
        console.print("[red]Username is required.[/red]")
        return
    user = login(db_path, username)
    console.print(f"[green]Signed in as {user.username}.[/green]")


def cmd_logout(db_path: str):
    logout(db_path)
    console.print("[dim]Signed out.[/dim]")


def cmd_today(db_path: str):
    user = resolve_current_user(db_path)
    queue = build_today_queue(db_path, user.id, user.settings)
    console.print(Panel(
        f"Completed [bold]{queue.completed_today}[/bold] of {queue.total}"
        f"  |  Due: [bold]{len(queue.due_items)}[/bold]  New: [bold]{len(queue.new_items)}[/bold]",
        title=f"Today's Review ({queue.date.isoformat()})",
    ))
    if not queue.items:
        message = "Daily goal met!" if queue.goal_met else "Nothing to review right now."
        console.print(f"[green]{message}[/green]")
        return
    try:
        position = run_review_session(db_path, user.id, queue)
    except SessionExitRequested:
        console.print("[dim]Session paused. Progress so far is saved.[/dim]")
        return
    console.print(f"[bold green]Done! Reviewed {position} problem(s).[/bold green]")


def cmd_browse(db_path: str):
    user = resolve_current_user(db_path)
    entries = list_with_status(db_path, user.id)
    if not entries:
        console.print("[yellow]No problems yet. Use 'import' to add your solved problems.[/yellow]")
        return
    status = {e["problem"].slug: e["status"] for e in entries}
    for topic, problems in group_by_topic(e["problem"] for e in entries):
        table = Table(title=f"{topic} ({len(problems)})", title_justify="left")
        table.add_column("Problem", style="cyan")
        table.add_column("Difficulty")
        table.add_column("Status")
        for p in problems:
            s = status[p.slug]
            color = STATUS_COLORS[s]
            table.add_row(p.title, difficulty_text(p.difficulty.value), f"[{color}]{s}[/{color}]")
        console.print(table)


def cmd_dashboard(db_path: str):
    user = resolve_current_user(db_path)
    stats = get_review_stats(db_path, user.id)
    settings = user.settings
    done = stats["completed_today"]
    goal = settings.daily_goal
    filled = min(20, int(done / goal * 20))
    bar = f"[green]{'█' * filled}{'░' * (20 - filled)}[/green]"
    console.print(Panel(f"[bold]{user.username}[/bold]", title="Review Dashboard", border_style="blue"))
    console.print(f"\n  Today: [bold]{done}/{goal}[/bold] {bar}  Due now: [bold]{stats['due_now']}[/bold]\n")

    table = Table(title="Catalog")
    table.add_column("Difficulty")
    table.add_column("Problems", justify="right")
    for difficulty, count in stats["by_difficulty"].items():
        if count:
            table.add_row(difficulty_text(difficulty), str(count))
    console.print(table)
    console.print(f"\n  Problems: [bold]{stats['catalog_size']}[/bold]  |  "
                  f"In review: [bold]{stats['reviewed']}[/bold]  |  "
                  f"Goal: [bold]{settings.daily_goal}[/bold]  |  "
                  f"New/day: [bold]{settings.max_new_per_day}[/bold]  |  "
                  f"Wait after solving: [bold]{settings.default_interval}d[/bold]")


def cmd_settings(db_path: str):
    user = resolve_current_user(db_path)
    s = user.settings
    console.print(f"  [cyan]1[/cyan]) Daily goal           {s.daily_goal}  [dim](1-20)[/dim]")
    console.print(f"  [cyan]2[/cyan]) Max new per day      {s.max_new_per_day}  [dim](1-10)[/dim]")
    console.print(f"  [cyan]3[/cyan]) Days before first review  {s.default_interval}  [dim](1-30)[/dim]")
    field = Prompt.ask("Change which setting", choices=["1", "2", "3"])
    value = IntPrompt.ask("New value")
    name = {"1": "daily_goal", "2": "max_new_per_day", "3": "default_interval"}[field]
    updated = update_settings(db_path, user.id, SettingsUpdate(**{name: value}))
    console.print(f"[green]Saved.[/green] [dim]{updated.to_dict()}[/dim]")


def cmd_import(db_path: str):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_problems(db_path, file_path)
    console.print(f"[green]Imported {result['count']} problems from {result['filename']}[/green]")


COMMANDS = {
    "today": cmd_today,
    "browse": cmd_browse,
    "dashboard": cmd_dashboard,
    "settings": cmd_settings,
    "import": cmd_import,
    "login": cmd_login,
    "logout": cmd_logout,
}


def main(argv=None):
    argv = sys.argv[1:] if argv is None else argv
    configure_logging(verbose="--verbose" in argv)
    db_path = get_db_path()
    init_db(db_path)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        if choice in ("quit", "exit", "q"):
            console.print("[dim]See you tomorrow![/dim]")
            break
        command = COMMANDS.get(choice)
        if command is None:
            console.print("[red]Unknown command. Try again.[/red]")
            continue
        try:
            command(db_path)
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except NotAuthenticated:
            console.print("[yellow]Please sign in first.[/yellow]")
            cmd_login(db_path)
        except ReviewError as e:
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
