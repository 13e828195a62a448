"""Interactive CLI application."""
import logging
import sys

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from vocab_srs.config import settings
from vocab_srs.db import init_db
from vocab_srs.errors import ItemNotFound, PersistenceWriteFailure
from vocab_srs.items import add_item
from vocab_srs.models import ReviewSession
from vocab_srs.session import ReviewSessionManager
from vocab_srs.session_store import SessionStore
from vocab_srs.stats import get_activity_data

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "quit", "menu")
RATING_CHOICES = ["0", "1", "2", "3", "4", "5"]


class SessionExitRequested(Exception):
    """The user asked to leave the current review session."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str]) -> int:
    answer = session_prompt(prompt, choices=choices + list(EXIT_WORDS), show_choices=False)
    return int(answer)


def show_welcome():
    console.print(Panel(
        "[bold]Vocabulary Review[/bold]\n[dim]Spaced repetition for your word deck[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("review", "Review due and new words"),
        ("stats", "Deck statistics"),
        ("add", "Add a word or phrase"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def run_review_session(manager: ReviewSessionManager, session: ReviewSession) -> None:
    """Walk the remaining cards of a session; raises SessionExitRequested on 'q'."""
    total = len(session.cards)
    while not session.is_complete:
        card = session.current_card
        console.print(Panel(
            f"[bold]{card.text}[/bold]",
            title=f"Card {session.current_index + 1}/{total}", border_style="cyan",
        ))
        session_prompt("[dim]Press Enter to reveal (q to stop)[/dim]", default="")
        body = card.definition or "[dim]No definition[/dim]"
        if card.example:
            body += f"\n[italic]{card.example}[/italic]"
        console.print(Panel(body, border_style="green"))
        rating = session_int_prompt(
            "Rate yourself (0-2=again, 3=hard, 4=good, 5=easy)", choices=RATING_CHOICES,
        )
        try:
            manager.process_review(session, card.id, rating)
        except ItemNotFound:
            console.print(f"[yellow]'{card.text}' is no longer in your deck, skipping it.[/yellow]")
            try:
                manager.skip_card(session)
            except PersistenceWriteFailure as e:
                console.print(f"[yellow]Warning: {e}. Progress may not survive a restart.[/yellow]")
        except PersistenceWriteFailure as e:
            console.print(f"[yellow]Warning: {e}. Progress may not survive a restart.[/yellow]")
        console.print()


def cmd_review(manager: ReviewSessionManager, session_key: str, max_cards: int):
    session = manager.resume_or_start(session_key, max_cards)
    if not session.cards:
        console.print("[yellow]Nothing to review right now![/yellow]")
        return
    if session.current_index:
        console.print(f"[dim]Resuming at card {session.current_index + 1} of {len(session.cards)}[/dim]")
    console.print(f"\n[bold]Review Session[/bold] — {len(session.cards)} cards\n")
    try:
        run_review_session(manager, session)
    except SessionExitRequested:
        console.print("[dim]Session paused. Run 'review' to pick up where you left off.[/dim]")
        return
    manager.complete(session)
    stats = session.session_stats
    console.print(Panel(
        f"Reviewed [bold]{stats.reviewed}[/bold]  |  Correct [bold]{stats.correct}[/bold]\n"
        f"[red]Again {stats.again}[/red]  [dark_orange]Hard {stats.hard}[/dark_orange]  "
        f"[blue]Good {stats.good}[/blue]  [green]Easy {stats.easy}[/green]",
        title="Session Complete", border_style="green",
    ))


def cmd_stats(manager: ReviewSessionManager):
    stats = manager.get_stats()
    table = Table(title="Deck Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right")
    table.add_row("Total cards", str(stats.total_cards))
    table.add_row("Due today", str(stats.due_today))
    table.add_row("New", str(stats.new_cards))
    table.add_row("Learning", str(stats.learning_cards))
    table.add_row("Review", str(stats.review_cards))
    table.add_row("Mature", str(stats.mature_cards))
    table.add_row("Total reviews", str(stats.total_reviews))
    table.add_row("Accuracy", f"{stats.accuracy_rate}%")
    table.add_row("Current streak", f"{stats.current_streak} days")
    console.print(table)

    week = get_activity_data(manager.db_path, days=7, today=manager.clock().date())
    line = "  ".join(f"{d['date'][5:]}: [bold]{d['reviews']}[/bold]" for d in week)
    console.print(f"\n  Last 7 days  {line}")


def cmd_add(db_path: str):
    text = Prompt.ask("Word or phrase").strip()
    if not text:
        console.print("[red]Nothing entered.[/red]")
        return
    item_type = "phrase" if " " in text else "word"
    definition = Prompt.ask("Definition", default="")
    example = Prompt.ask("Example sentence", default="") or None
    card = add_item(db_path, text, definition=definition, item_type=item_type, example=example)
    console.print(f"[green]Added {card.item_type} '{card.text}' — first review {card.next_review_date.date()}[/green]")


def main():
    logging.basicConfig(
        level=logging.WARNING,
        format="%(levelname)s:%(name)s:%(message)s",
        stream=sys.stderr,
    )
    db_path = settings.db_path
    init_db(db_path)
    store = SessionStore.from_settings(settings)
    manager = ReviewSessionManager(db_path, store)

    show_welcome()

    try:
        while True:
            show_menu()
            choice = Prompt.ask("\n[bold]>[/bold]", default="review").strip().lower()
            try:
                if choice == "review":
                    cmd_review(manager, settings.session_key, settings.max_cards)
                elif choice == "stats":
                    cmd_stats(manager)
                elif choice == "add":
                    cmd_add(db_path)
                elif choice in ("quit", "exit", "q"):
                    console.print("[dim]See you next review![/dim]")
                    break
                else:
                    console.print("[red]Unknown command. Try again.[/red]")
            except KeyboardInterrupt:
                console.print("\n[dim]Use 'quit' to exit.[/dim]")
            except Exception as e:
                logger.exception("Command %r failed", choice)
                console.print(f"[red]Error: {e}[/red]")
    finally:
        store.close()


if __name__ == "__main__":
    main()
