"""Interactive CLI application."""
import logging
import os
import time
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Confirm, IntPrompt, Prompt
from rich.table import Table

from satact_tutor.config import ENV_CONFIG, load_settings
from satact_tutor.context import TutorContext, build_context
from satact_tutor.dashboard import (
    calc_readiness_score, get_readiness_color, get_readiness_label, get_study_stats,
    get_subject_scores,
)
from satact_tutor.errors import NoContentAvailable, TutorError
from satact_tutor.exam import ExamPhase, LiveExam
from satact_tutor.importer import import_question_bank
from satact_tutor.logging_config import setup_logging
from satact_tutor.models import PracticeSession, Question, SubjectArea, TestResult, TestType

logger = logging.getLogger(__name__)

console = Console()

EXIT_WORDS = ("q", "menu")
SKIP_WORD = "s"
LETTERS = "abcdefgh"


class SessionExitRequested(Exception):
    """Raised when the user leaves a running practice session or exam."""


def session_prompt(prompt: str, choices: Optional[list[str]] = None, **kwargs) -> str:
    if choices is not None:
        choices = [*choices, *EXIT_WORDS]
    answer = Prompt.ask(prompt, choices=choices, **kwargs)
    if answer.strip().lower() in EXIT_WORDS:
        raise SessionExitRequested()
    return answer


def session_int_prompt(prompt: str, choices: list[str], **kwargs) -> int:
    return int(session_prompt(prompt, choices=choices, **kwargs))


def show_welcome():
    console.print(Panel(
        "[bold]SAT / ACT Prep[/bold]\n[dim]Adaptive practice and full-length tests[/dim]",
        title="Welcome", border_style="blue",
    ))


def show_menu():
    console.print("\n[bold]Commands:[/bold]")
    commands = [
        ("login", "Choose who is studying"),
        ("practice", "Adaptive practice session"),
        ("exam", "Full-length timed test"),
        ("dashboard", "Readiness + progress"),
        ("review", "Drill weak subjects"),
        ("history", "Past sessions and test results"),
        ("import", "Add a question bank"),
        ("logout", "Log out"),
        ("quit", "Exit"),
    ]
    for cmd, desc in commands:
        console.print(f"  [cyan]{cmd:<14}[/cyan] {desc}")


def show_question(number: str, question: Question) -> list[str]:
    console.print(f"[bold]{number}.[/bold] {question.content}\n")
    letters = list(LETTERS[:len(question.options)])
    for letter, option in zip(letters, question.options):
        console.print(f"  [cyan]{letter})[/cyan] {option}")
    return letters


def run_practice_session(ctx: TutorContext, session: PracticeSession, start_index: int = 0) -> Optional[PracticeSession]:
    questions = [ctx.questions.by_id(o.question_id) for o in session.questions]
    # a resumed session keeps the time already recorded against its answers
    started = time.monotonic() - sum(o.time_spent for o in session.questions)
    console.print(f"\n[bold]Practice[/bold] — {len(questions)} questions\n")
    for i in range(start_index, len(questions)):
        q = questions[i]
        letters = show_question(f"Q{i + 1}", q)
        asked = time.monotonic()
        answer = session_prompt("\nYour answer", choices=letters)
        selected = letters.index(answer.strip().lower())
        is_correct = q.is_correct(selected)
        session = ctx.practice.answer(i, selected, round(time.monotonic() - asked), is_correct)
        if is_correct:
            console.print("[green]Correct![/green]")
        else:
            console.print(f"[red]Incorrect.[/red] Answer: [green]{LETTERS[q.correct_answer]}[/green]")
        if q.explanation:
            console.print(f"[dim]{q.explanation}[/dim]")
        console.print(f"[dim]Score so far: {session.score}%[/dim]\n")
    finished = ctx.practice.finish(round(time.monotonic() - started))
    console.print(f"[bold]Score: {finished.score}% ({finished.total_questions} questions, {finished.duration}s)[/bold]\n")
    return finished


def _first_unanswered(session: PracticeSession) -> int:
    for i, outcome in enumerate(session.questions):
        if not outcome.answered:
            return i
    return len(session.questions)


def run_exam(ctx: TutorContext, live: LiveExam) -> TestResult:
    started = time.monotonic() - sum(a.time_spent for a in live.result.answers)
    section_index = live.section_index
    question_index = 0
    if live.phase == ExamPhase.IN_PROGRESS:
        question_index = live.question_index + 1
    elif live.phase == ExamPhase.SECTION_COMPLETE:
        question_index = len(live.section.questions)

    while True:
        section = live.test.sections[section_index]
        if question_index == 0:
            console.print(Panel(
                f"{section.subject.label} — {len(section.questions)} questions, {section.duration} minutes",
                title=f"Section {section_index + 1} of {len(live.test.sections)}", border_style="cyan",
            ))
        for qi in range(question_index, len(section.questions)):
            question = ctx.questions.by_id(section.questions[qi])
            remaining = live.section_time_remaining(section_index)
            if remaining == 0:
                console.print("[yellow]Time is up for this section.[/yellow]")
            else:
                console.print(f"[dim]{remaining // 60}:{remaining % 60:02d} left in section[/dim]")
            letters = show_question(f"{section_index + 1}.{qi + 1}", question)
            asked = time.monotonic()
            answer = session_prompt("\nYour answer ([cyan]s[/cyan] to skip)", choices=[*letters, SKIP_WORD])
            answer = answer.strip().lower()
            selected = None if answer == SKIP_WORD else letters.index(answer)
            live = ctx.exams.answer(
                section_index, qi, question.id, selected, question.is_correct(selected),
                round(time.monotonic() - asked),
            )
        if live.is_final_section:
            break
        console.print("[green]Section complete.[/green]")
        if not Confirm.ask("Continue to the next section?", default=True):
            raise SessionExitRequested()
        live = ctx.exams.advance_section()
        section_index, question_index = live.section_index, 0

    result = ctx.exams.finish(round(time.monotonic() - started))
    show_result(live, result)
    return result


def show_result(live: LiveExam, result: TestResult) -> None:
    table = Table(title=f"{live.test.name} — Results")
    table.add_column("Section", style="cyan")
    table.add_column("Raw", justify="right")
    table.add_column("Scaled", justify="right")
    for section in live.test.sections:
        score = result.score.by_section[section.subject]
        table.add_row(section.subject.label, f"{score.raw}/{len(section.questions)}", str(score.scaled))
    console.print(table)
    console.print(f"[bold]Overall: {result.score.overall}[/bold]\n")


def cmd_login(ctx: TutorContext):
    user_id = Prompt.ask("User name")
    ctx.auth.login(user_id)
    ctx.tracker.initialize(ctx.auth.require_user())
    console.print(f"[green]Welcome, {user_id}![/green]")


def cmd_logout(ctx: TutorContext):
    ctx.auth.logout()
    console.print("[dim]Logged out.[/dim]")


def choose_subject(ctx: TutorContext, user_id: str) -> SubjectArea:
    recommended = ctx.tracker.recommended(user_id)
    console.print("\n[bold]Subjects[/bold] (recommended first)")
    ordered = recommended + [s for s in SubjectArea if s not in recommended]
    for i, subject in enumerate(ordered, 1):
        console.print(f"  [cyan]{i}[/cyan]) {subject.value}")
    choice = IntPrompt.ask("Select subject", choices=[str(i) for i in range(1, len(ordered) + 1)], default=1)
    return ordered[choice - 1]


def practice_subject(ctx: TutorContext, user_id: str, subject: SubjectArea, count: int):
    questions = ctx.selector.select_questions(user_id, subject, count)
    if not questions:
        raise NoContentAvailable(f"No questions available for {subject.value}")
    difficulty = ctx.tracker.recommended_difficulty(user_id, subject)
    console.print(f"[dim]{subject.value} at {difficulty.value} difficulty[/dim]")
    session = ctx.practice.start([subject], questions)
    run_practice_session(ctx, session)


def cmd_practice(ctx: TutorContext):
    user_id = ctx.auth.require_user()
    live = ctx.practice.current()
    if live is not None:
        action = Prompt.ask("You have an unfinished session", choices=["resume", "discard", "cancel"], default="resume")
        if action == "cancel":
            return
        if action == "resume":
            run_practice_session(ctx, live, start_index=_first_unanswered(live))
            return
    subject = choose_subject(ctx, user_id)
    count = IntPrompt.ask("Number of questions", default=ctx.settings.practice_question_count)
    practice_subject(ctx, user_id, subject, count)


def cmd_exam(ctx: TutorContext):
    ctx.auth.require_user()
    live = ctx.exams.current()
    if live is not None:
        action = Prompt.ask(f"You have an unfinished {live.test.name}", choices=["resume", "discard", "cancel"], default="resume")
        if action == "cancel":
            return
        if action == "resume":
            run_exam(ctx, live)
            return
    tests = list(ctx.tests)
    for i, test in enumerate(tests, 1):
        console.print(f"  [cyan]{i}[/cyan]) {test.name} [dim]({test.total_duration} min)[/dim]")
    choice = IntPrompt.ask("Select test", choices=[str(i) for i in range(1, len(tests) + 1)])
    run_exam(ctx, ctx.exams.start(tests[choice - 1].id))


def cmd_dashboard(ctx: TutorContext):
    user_id = ctx.auth.require_user()
    console.print(Panel(f"[bold]{user_id}[/bold]", title="Readiness Dashboard", border_style="blue"))
    for test_type in TestType:
        score = calc_readiness_score(ctx.tracker, user_id, test_type)
        color = get_readiness_color(score)
        bar_filled = int(score / 5)
        bar = f"[{color}]{'█' * bar_filled}{'░' * (20 - bar_filled)}[/{color}]"
        console.print(f"  {test_type.value}: [bold]{score}%[/bold] {bar} [{color}]{get_readiness_label(score)}[/{color}]")

    table = Table(title="Subject Breakdown")
    table.add_column("Subject", style="cyan")
    table.add_column("Answered", justify="right")
    table.add_column("Correct", justify="right")
    table.add_column("Level")
    table.add_column("Status")
    for row in get_subject_scores(ctx.tracker, user_id):
        color = get_readiness_color(row["score"]) if row["answered"] else "dim"
        table.add_row(row["name"], str(row["answered"]), f"{row['score']}%", row["level"], f"[{color}]{row['label']}[/{color}]")
    console.print(table)

    stats = get_study_stats(ctx.practice, ctx.exams, user_id)
    console.print(f"\n  Practice: [bold]{stats['practice_sessions']}[/bold]  |  "
                  f"Tests: [bold]{stats['tests_completed']}[/bold]  |  "
                  f"Avg Practice: [bold]{stats['avg_practice_score']}%[/bold]  |  "
                  f"Study: [bold]{stats['study_minutes']} min[/bold]")
    console.print(f"  Best SAT: [bold]{stats['highest_sat']}[/bold]  |  Best ACT: [bold]{stats['highest_act']}[/bold]")


def cmd_review(ctx: TutorContext):
    user_id = ctx.auth.require_user()
    console.print("\n[bold]Weak Subject Review[/bold]\n")
    table = Table(title="Weakest Subjects")
    table.add_column("Test")
    table.add_column("Subject")
    table.add_column("Correct", justify="right")
    for test_type in TestType:
        for subject in ctx.tracker.weakest_subjects(user_id, test_type, ctx.settings.recommended_limit):
            perf = ctx.tracker.subject_performance(user_id, subject)
            rate = f"{perf.correct_rate * 100:.0f}%" if perf.questions_answered else "—"
            table.add_row(test_type.value, subject.label, rate)
    console.print(table)
    target = ctx.tracker.recommended(user_id)[0]
    if Confirm.ask(f"Drill {target.value} now?", default=True):
        practice_subject(ctx, user_id, target, count=5)


def cmd_history(ctx: TutorContext):
    user_id = ctx.auth.require_user()
    table = Table(title="Recent Practice")
    table.add_column("Date")
    table.add_column("Subjects")
    table.add_column("Score", justify="right")
    for s in ctx.practice.recent_sessions(user_id=user_id):
        table.add_row(s.date[:16], ", ".join(a.value for a in s.subject_areas), f"{s.score}%")
    console.print(table)
    table = Table(title="Recent Tests")
    table.add_column("Date")
    table.add_column("Test")
    table.add_column("Overall", justify="right")
    for r in ctx.exams.recent_results(user_id=user_id):
        table.add_row(r.date[:16], r.test_id, str(r.score.overall))
    console.print(table)


def cmd_import(ctx: TutorContext):
    file_path = Prompt.ask("File path")
    if not Path(file_path).exists():
        console.print(f"[red]File not found: {file_path}[/red]")
        return
    result = import_question_bank(ctx.store, file_path, ctx.questions.ids())
    console.print(f"[green]Imported {result['count']} questions from {result['filename']} "
                  f"({', '.join(result['subjects']) or 'none'}).[/green] They are available from the next start.")


COMMANDS = {
    "login": cmd_login,
    "logout": cmd_logout,
    "practice": cmd_practice,
    "exam": cmd_exam,
    "dashboard": cmd_dashboard,
    "review": cmd_review,
    "history": cmd_history,
    "import": cmd_import,
}


def main():
    settings = load_settings(os.environ.get(ENV_CONFIG))
    setup_logging(settings.log_level, console=console)
    ctx = build_context(settings)

    show_welcome()
    if ctx.auth.current_user_id:
        console.print(f"[dim]Logged in as {ctx.auth.current_user_id}[/dim]")

    while True:
        show_menu()
        choice = Prompt.ask("\n[bold]>[/bold]", default="practice").strip().lower()
        try:
            if choice in ("quit", "exit", "q"):
                console.print("[dim]Good luck on test day![/dim]")
                break
            command = COMMANDS.get(choice)
            if command is None:
                console.print("[red]Unknown command. Try again.[/red]")
                continue
            command(ctx)
        except SessionExitRequested:
            console.print("[dim]Paused. Your progress is kept until you finish or start over.[/dim]")
        except KeyboardInterrupt:
            console.print("\n[dim]Use 'quit' to exit.[/dim]")
        except TutorError as e:
            console.print(f"[red]{e}[/red]")
        except Exception as e:
            logger.exception("Command %s failed", choice)
            console.print(f"[red]Error: {e}[/red]")


if __name__ == "__main__":
    main()
