"""Interactive CLI application."""
import logging

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, FloatPrompt, IntPrompt, Prompt
from rich.table import Table

from yks_tracker.config import load_settings
from yks_tracker.errors import TrackerError
from yks_tracker.flashcards import check_answer, get_due_cards, record_wrong_answer, review_card
from yks_tracker.log import configure_logging
from yks_tracker.models import EXAM_TYPES, PRIORITIES, TASK_CATEGORIES
from yks_tracker.scoring import (
    calc_exam_net, calc_net, calc_obp, clamp_answer_count, get_subject_solved_stats, goal_progress,
)
from yks_tracker.seed import seed_all
from yks_tracker.store import create_store
from yks_tracker.topics import get_priority_topics

console = Console()
logger = logging.getLogger(__name__)

TYT_SECTIONS = ("turkce", "sosyal", "matematik", "fen")
AYT_SECTIONS = ("matematik", "fizik", "kimya", "biyoloji")
PRIORITY_STYLES = {"critical": "bold red", "high": "dark_orange", "medium": "yellow", "low": "green"}


class SessionExitRequested(Exception):
    """Raised when the user types q or menu during a drill."""


def session_prompt(prompt: str, **kwargs) -> str:
    answer = Prompt.ask(prompt, **kwargs)
    if answer.strip().lower() in ("q", "menu"):
        raise SessionExitRequested()
    return answer


def session_choice(prompt: str, choices: list) -> str:
    return session_prompt(prompt, choices=list(choices) + ["q"])


def short_id(record_id: str) -> str:
    return record_id[:8]


def resolve(records: list, prefix: str):
    """Find the single record whose id starts with prefix, else None."""
    matches = [r for r in records if r.id.startswith(prefix.strip())]
    return matches[0] if len(matches) == 1 else None


def show_welcome():
    console.print(Panel(
        "[bold]YKS Tracker[/bold]\n[dim]TYT / AYT hazırlık takibi[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("tasks", "List, add, complete or delete tasks"),
        ("today", "Today's tasks"),
        ("summary", "Daily productivity summary"),
        ("log", "Log a question-solving session"),
        ("exams", "Exam results and subject nets"),
        ("flashcards", "Drill due flashcards"),
        ("topics", "Priority topics and solved-question stats"),
        ("net", "Net and OBP calculator"),
        ("goals", "Goal progress"),
        ("mood", "Record today's mood"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def print_tasks(tasks: list, title: str = "Tasks") -> None:
    if not tasks:
        console.print("[yellow]No tasks.[/yellow]")
        return
    table = Table(title=title)
    table.add_column("ID", style="dim")
    table.add_column("Title")
    table.add_column("Priority")
    table.add_column("Category", style="cyan")
    table.add_column("Due")
    table.add_column("Done", justify="center")
    for t in tasks:
        table.add_row(
            short_id(t.id), t.title, t.priority, t.category, t.due_date or "",
            "[green]✓[/green]" if t.completed else "",
        )
    console.print(table)


def cmd_tasks(store):
    print_tasks(store.get_tasks())
    action = Prompt.ask("Action", choices=["add", "toggle", "delete", "back"], default="back")
    if action == "add":
        title = Prompt.ask("Title")
        priority = Prompt.ask("Priority", choices=list(PRIORITIES), default="medium")
        category = Prompt.ask("Category", choices=list(TASK_CATEGORIES), default="genel")
        due = Prompt.ask("Due date (YYYY-MM-DD, empty for none)", default="")
        task = store.create_task(title=title, priority=priority, category=category, due_date=due or None)
        console.print(f"[green]Added task {short_id(task.id)}[/green]")
    elif action in ("toggle", "delete"):
        task = resolve(store.get_tasks(), Prompt.ask("Task ID"))
        if task is None:
            console.print("[red]No such task.[/red]")
        elif action == "toggle":
            updated = store.toggle_task_complete(task.id)
            console.print(f"[green]{updated.title}: {'done' if updated.completed else 'reopened'}[/green]")
        else:
            store.delete_task(task.id)
            console.print("[green]Deleted.[/green]")


def cmd_today(store):
    print_tasks(store.get_tasks_by_date(store.clock().date().isoformat()), title="Today's Tasks")


def cmd_summary(store, days: int):
    table = Table(title=f"Last {days} Days")
    table.add_column("Date")
    table.add_column("Completed", justify="right")
    table.add_column("Total", justify="right")
    table.add_column("Productivity")
    for day in store.get_daily_summary(days):
        filled = day["productivity"] // 5
        bar = f"[green]{'█' * filled}{'░' * (20 - filled)}[/green]"
        table.add_row(day["date"], str(day["tasks_completed"]), str(day["total_tasks"]),
                      f"{bar} {day['productivity']}%")
    console.print(table)


def cmd_log(store):
    exam_type = Prompt.ask("Exam type", choices=list(EXAM_TYPES), default="TYT")
    subject = Prompt.ask("Subject")
    correct = IntPrompt.ask("Correct", default=0)
    wrong = IntPrompt.ask("Wrong", default=0)
    blank = IntPrompt.ask("Blank", default=0)
    minutes = IntPrompt.ask("Minutes spent", default=0)
    topics = Prompt.ask("Wrong topics (comma separated)", default="")
    log = store.create_question_log(
        exam_type=exam_type, subject=subject,
        correct_count=correct, wrong_count=wrong, blank_count=blank,
        time_spent_minutes=minutes or None,
        study_date=store.clock().date().isoformat(),
        wrong_topics=[t.strip() for t in topics.split(",") if t.strip()],
    )
    console.print(f"[green]Logged {log.total_questions} questions, net {calc_net(correct, wrong):.2f}[/green]")


def _ask_sections(exam_type: str) -> dict:
    sections = TYT_SECTIONS if exam_type == "TYT" else AYT_SECTIONS
    subjects = {}
    for section in sections:
        console.print(f"[bold]{section}[/bold]")
        correct = clamp_answer_count(exam_type, section, IntPrompt.ask("  Correct", default=0))
        wrong = clamp_answer_count(exam_type, section, IntPrompt.ask("  Wrong", default=0))
        topics = Prompt.ask("  Wrong topics (comma separated)", default="")
        subjects[section] = {
            "correct": correct,
            "wrong": wrong,
            "blank": 0,
            "wrong_topics": [t.strip() for t in topics.split(",") if t.strip()],
        }
    return subjects


def cmd_exams(store):
    exams = store.get_exam_results()
    if exams:
        table = Table(title="Exam Results")
        table.add_column("ID", style="dim")
        table.add_column("Exam")
        table.add_column("Date")
        table.add_column("TYT", justify="right")
        table.add_column("AYT", justify="right")
        for e in exams:
            table.add_row(short_id(e.id), e.exam_name, e.exam_date, f"{e.tyt_net:.2f}", f"{e.ayt_net:.2f}")
        console.print(table)
    action = Prompt.ask("Action", choices=["add", "delete", "back"], default="back")
    if action == "add":
        name = Prompt.ask("Exam name")
        exam_date = Prompt.ask("Exam date", default=store.clock().date().isoformat())
        exam_type = Prompt.ask("Exam type", choices=list(EXAM_TYPES), default="TYT")
        subjects = _ask_sections(exam_type)
        exam = store.create_exam_result(
            exam_name=name, exam_date=exam_date, exam_type=exam_type, subjects_data=subjects,
        )
        for subject, counts in subjects.items():
            store.create_exam_subject_net(
                exam_id=exam.id, exam_type=exam_type, subject=subject,
                correct_count=counts["correct"], wrong_count=counts["wrong"],
            )
        console.print(f"[green]Saved {exam.exam_name}: TYT {exam.tyt_net:.2f} / AYT {exam.ayt_net:.2f}[/green]")
    elif action == "delete":
        exam = resolve(exams, Prompt.ask("Exam ID"))
        if exam is None:
            console.print("[red]No such exam.[/red]")
        else:
            store.delete_exam_result(exam.id)
            console.print("[green]Deleted exam and its subject nets.[/green]")


def run_flashcard_session(store, cards: list) -> int:
    """Drill cards until done or the user quits. Returns number reviewed."""
    if not cards:
        console.print("[yellow]No flashcards due right now![/yellow]")
        return 0
    console.print(f"\n[bold]Flashcard Session[/bold] · {len(cards)} cards [dim](q to stop)[/dim]\n")
    reviewed = 0
    try:
        for i, card in enumerate(cards, 1):
            title = f"Card {i}/{len(cards)} · {card.subject}" + (f" · {card.topic}" if card.topic else "")
            console.print(Panel(card.question, title=title, border_style="cyan"))
            answer = session_prompt("Your answer", default="")
            if check_answer(card, answer):
                console.print("[green]Correct![/green]")
            else:
                record_wrong_answer(store, card, answer)
                console.print(Panel(card.answer, border_style="green"))
            rating = session_choice("How was it?", ["easy", "medium", "hard"])
            review_card(store, card.id, rating)
            reviewed += 1
    except SessionExitRequested:
        console.print("[dim]Session stopped.[/dim]")
    return reviewed


def cmd_flashcards(store, limit: int):
    run_flashcard_session(store, get_due_cards(store, limit=limit))


def cmd_topics(store):
    topics = get_priority_topics(store)
    if topics:
        table = Table(title="Priority Topics")
        table.add_column("Topic")
        table.add_column("Mentions", justify="right")
        table.add_column("Frequency", justify="right")
        table.add_column("Priority")
        for t in topics:
            style = PRIORITY_STYLES[t["priority"]]
            table.add_row(t["topic"], str(t["wrong_mentions"]), f"{t['mention_frequency']:.0f}%",
                          f"[{style}]{t['priority'].upper()}[/{style}]")
        console.print(table)
    else:
        console.print("[green]No recurring wrong topics yet.[/green]")

    stats = get_subject_solved_stats(store)
    if stats:
        table = Table(title="Solved Questions by Subject")
        table.add_column("Subject", style="cyan")
        table.add_column("Questions", justify="right")
        table.add_column("Minutes", justify="right")
        table.add_column("Min/Question", justify="right")
        for s in stats:
            table.add_row(s["subject"], str(s["total_questions"]), str(s["total_time_minutes"]),
                          f"{s['average_time_per_question']:.2f}")
        console.print(table)


def cmd_net():
    results = {}
    for exam_type, sections in (("TYT", TYT_SECTIONS), ("AYT", AYT_SECTIONS)):
        console.print(f"\n[bold]{exam_type}[/bold]")
        pairs = []
        for section in sections:
            correct = clamp_answer_count(exam_type, section, IntPrompt.ask(f"  {section} correct", default=0))
            wrong = clamp_answer_count(exam_type, section, IntPrompt.ask(f"  {section} wrong", default=0))
            pairs.append((correct, wrong))
        results[exam_type] = calc_exam_net(pairs)
    diploma = FloatPrompt.ask("Diploma score", default=85.0)
    placed = Confirm.ask("Placed in a program last year?", default=False)
    console.print(Panel(
        f"TYT net: [bold]{results['TYT']:.2f}[/bold]\n"
        f"AYT net: [bold]{results['AYT']:.2f}[/bold]\n"
        f"OBP: [bold]{calc_obp(diploma, placed):.2f}[/bold]",
        title="Results", border_style="magenta",
    ))


def cmd_goals(store):
    goals = store.get_goals()
    if not goals:
        console.print("[yellow]No goals yet.[/yellow]")
        return
    table = Table(title="Goals")
    table.add_column("Goal")
    table.add_column("Current", justify="right")
    table.add_column("Target", justify="right")
    table.add_column("Progress")
    for g in goals:
        pct = goal_progress(g)
        filled = int(pct / 5)
        table.add_row(g.title, f"{g.current_value:g} {g.unit}", f"{g.target_value:g} {g.unit}",
                      f"[cyan]{'█' * filled}{'░' * (20 - filled)}[/cyan] {pct}%")
    console.print(table)


def cmd_mood(store):
    latest = store.get_latest_mood()
    if latest:
        console.print(f"[dim]Last mood: {latest.mood}[/dim]")
    mood = Prompt.ask("Mood")
    note = Prompt.ask("Note", default="")
    store.create_mood(mood=mood, note=note or None)
    console.print("[green]Saved.[/green]")


def main():
    settings = load_settings()
    configure_logging(settings.log_level)
    store = create_store(settings)
    if settings.seed_samples:
        seed_all(store)

    show_welcome()

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="today").strip().lower()
        try:
            if choice == "tasks":
                cmd_tasks(store)
            elif choice == "today":
                cmd_today(store)
            elif choice == "summary":
                cmd_summary(store, settings.summary_days)
            elif choice == "log":
                cmd_log(store)
            elif choice == "exams":
                cmd_exams(store)
            elif choice == "flashcards":
                cmd_flashcards(store, settings.due_limit)
            elif choice == "topics":
                cmd_topics(store)
            elif choice == "net":
                cmd_net()
            elif choice == "goals":
                cmd_goals(store)
            elif choice == "mood":
                cmd_mood(store)
            elif choice in ("quit", "exit", "q"):
                console.print("[dim]İyi çalışmalar![/dim]")
                break
            else:
                console.print("[red]Unknown command. Try again.[/red]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TrackerError as e:
            logger.warning("Command %s failed: %s", choice, e)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
