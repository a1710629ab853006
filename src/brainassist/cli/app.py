"""Main CLI application using Typer."""
import asyncio
from pathlib import Path

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..chat import AVATARS, GenerationOptions, Message, StreamState, TranscriptEvent, encode_file
from ..chat.models import FORMATS, LEVELS, TONES
from ..modes import ChatMode, list_modes, resolve
from .providers import close_workspace, open_workspace

# Load environment variables
load_dotenv()

# Create Typer app
app = typer.Typer(
    name="brainassist",
    help="Multi-mode study assistant backed by Google Gemini",
    no_args_is_help=True,
    add_completion=True,
)
projects_app = typer.Typer(help="Manage saved projects", no_args_is_help=True)
profile_app = typer.Typer(help="Show or edit the user profile", no_args_is_help=True)
tasks_app = typer.Typer(help="Manage planning tasks", no_args_is_help=True)
timetable_app = typer.Typer(help="Show or edit the weekly timetable", no_args_is_help=True)
study_app = typer.Typer(help="Log study sessions and grades", no_args_is_help=True)
app.add_typer(projects_app, name="projects")
app.add_typer(profile_app, name="profile")
app.add_typer(tasks_app, name="tasks")
app.add_typer(timetable_app, name="timetable")
app.add_typer(study_app, name="study")

# Console for rich output
console = Console()

PRIORITY_STYLES = {"high": "red", "medium": "yellow", "low": "green"}


def _short(item_id: str) -> str:
    return item_id[:8]


def _match_id(items, prefix: str):
    """Find the single item whose id starts with prefix.

    Raises:
        typer.Exit: If no item or several items match
    """
    matches = [item for item in items if item.id.startswith(prefix)]
    if len(matches) != 1:
        reason = "No item" if not matches else "Several items"
        console.print(f"[red]Error: {reason} match id '{prefix}'[/red]")
        raise typer.Exit(code=1)
    return matches[0]


def _pick(value: str, choices: tuple[str, ...], option: str) -> str:
    if value not in choices:
        console.print(f"[red]Error: {option} must be one of: {', '.join(choices)}[/red]")
        raise typer.Exit(code=1)
    return value


@app.command(name="tui")
def tui_command(
    mode: ChatMode = typer.Option(
        ChatMode.LEARNING,
        "--mode",
        "-m",
        help="Initial assistant mode"
    ),
    personalize: bool = typer.Option(
        False,
        "--personalize",
        "-p",
        help="Share the user profile with the assistant on the first message"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Show log panel with level: debug (all), info, warning, or error"
    ),
):
    """Launch the interactive TUI."""
    async def _tui():
        from ..ui import run_textual_tui

        workspace = await open_workspace(console, mode=mode, personalize=personalize, load=False)
        try:
            await run_textual_tui(workspace, log_level=log_level)
        finally:
            await workspace.repository.store.disconnect()
            console.print("\n[dim]À bientôt ![/dim]")

    try:
        asyncio.run(_tui())
    except KeyboardInterrupt:
        pass


@app.command()
def ask(
    prompt: str = typer.Argument(..., help="Question or instruction"),
    mode: ChatMode = typer.Option(
        ChatMode.LEARNING,
        "--mode",
        "-m",
        help="Assistant mode"
    ),
    level: str = typer.Option(LEVELS[0], "--level", help="Target level"),
    response_format: str = typer.Option(FORMATS[0], "--format", help="Response format"),
    tone: str = typer.Option(TONES[0], "--tone", help="Tone / style"),
    attach: list[Path] = typer.Option(
        [],
        "--attach",
        "-a",
        exists=True,
        dir_okay=False,
        help="File to attach (image, PDF, text, Word); repeatable"
    ),
    personalize: bool = typer.Option(
        False,
        "--personalize",
        "-p",
        help="Share the user profile with the assistant"
    ),
    render: bool = typer.Option(
        False,
        "--render",
        "-r",
        help="Render formatting, math and code once the reply is complete"
    ),
    log_level: str | None = typer.Option(
        None,
        "--log-level",
        "-l",
        help="Print events at level: debug, info, warning, or error"
    ),
):
    """Send one message and stream the reply."""
    options = GenerationOptions(
        level=_pick(level, LEVELS, "--level"),
        response_format=_pick(response_format, FORMATS, "--format"),
        tone=_pick(tone, TONES, "--tone"),
    )
    try:
        attachments = [encode_file(path) for path in attach]
    except (OSError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(code=1)

    async def _ask():
        try:
            workspace = await open_workspace(
                console, mode=mode, personalize=personalize, log_level=log_level
            )
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)

        printed = 0

        def echo(event: TranscriptEvent, message: Message | None) -> None:
            nonlocal printed
            if render or message is None or message.role != "model" or message.is_error:
                return
            if event is TranscriptEvent.UPDATED:
                console.print(message.text[printed:], end="", markup=False, highlight=False)
                printed = len(message.text)

        unsubscribe = workspace.transcript.subscribe(echo)
        try:
            workspace.set_options(options)
            profile = workspace.mode_profile
            console.print(f"[bold {profile.color}]{profile.icon} {profile.assistant_label}[/bold {profile.color}]")
            if render:
                with console.status("[dim]Génération...[/dim]"):
                    outcome = await workspace.send(prompt, attachments)
            else:
                outcome = await workspace.send(prompt, attachments)
                if printed:
                    console.print()
        finally:
            unsubscribe()
            await close_workspace(workspace)

        if outcome is None:
            console.print("[red]Error: Nothing to send[/red]")
            raise typer.Exit(code=1)
        if outcome.state is StreamState.FAILED:
            text = outcome.error.text if outcome.error else "Unknown error"
            console.print(f"[red]Error: {text}[/red]")
            raise typer.Exit(code=1)
        if outcome.state is StreamState.CANCELLED:
            console.print("[yellow]Génération interrompue.[/yellow]")
            return

        if render and outcome.text:
            _print_rendered(outcome.text, profile.color)
        if outcome.usage:
            console.print(f"[dim]Tokens: {outcome.usage.get('total_tokens', 0)}[/dim]")

    try:
        asyncio.run(_ask())
    except KeyboardInterrupt:
        console.print("\n[yellow]Génération interrompue.[/yellow]")


def _print_rendered(text: str, accent: str) -> None:
    from ..rendering import CodeBlock, MathRenderer
    from ..rendering import render as parse
    from ..ui.formatting import render_code, render_prose, split_code_blocks

    math = MathRenderer(ready=True)
    for section in split_code_blocks(parse(text)):
        if isinstance(section, CodeBlock):
            title = section.language or "code"
            console.print(Panel(render_code(section), title=title, title_align="left", border_style="dim"))
        else:
            console.print(render_prose(section, math, accent))


@app.command()
def optimize(
    draft: str = typer.Argument(..., help="Draft prompt to rewrite"),
    mode: ChatMode = typer.Option(
        ChatMode.LEARNING,
        "--mode",
        "-m",
        help="Mode whose domain frames the rewrite"
    ),
):
    """Rewrite a draft into a clearer, better-structured prompt."""
    async def _optimize():
        workspace = await open_workspace(console, mode=mode)
        try:
            if workspace.session.provider is None:
                console.print("[red]Error: LLM provider not configured[/red]")
                raise typer.Exit(code=1)
            optimized = await workspace.optimize_prompt(draft)
        finally:
            await close_workspace(workspace)
        console.print(optimized, markup=False, highlight=False)

    asyncio.run(_optimize())


@app.command()
def modes():
    """List the assistant modes."""
    table = Table(title="Modes")
    table.add_column("Mode", style="bold cyan")
    table.add_column("Label")
    table.add_column("Model")
    table.add_column("Temperature", justify="right")
    table.add_column("Top-K", justify="right")

    for profile in list_modes():
        table.add_row(
            profile.mode.value,
            f"{profile.icon} {profile.label}",
            profile.model_name,
            f"{profile.temperature:.1f}",
            str(profile.top_k),
        )
    console.print(table)


# Projects

@projects_app.command("list")
def projects_list():
    """List saved projects, newest first."""
    async def _list():
        workspace = await open_workspace(console, with_llm=False)
        try:
            projects = list(workspace.projects)
        finally:
            await close_workspace(workspace)

        if not projects:
            console.print("[dim]No projects yet.[/dim]")
            return
        table = Table()
        table.add_column("ID", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Mode")
        table.add_column("Created")
        for project in projects:
            table.add_row(
                _short(project.id),
                project.title,
                resolve(project.mode).label,
                project.created_at.strftime("%Y-%m-%d"),
            )
        console.print(table)

    asyncio.run(_list())


@projects_app.command("add")
def projects_add(
    title: str = typer.Argument(..., help="Project title"),
    mode: ChatMode = typer.Option(ChatMode.LEARNING, "--mode", "-m", help="Project mode"),
    description: str = typer.Option("", "--description", "-d", help="Project description"),
):
    """Save a project with a mode-specific starter prompt."""
    async def _add():
        workspace = await open_workspace(console, mode=mode, with_llm=False)
        try:
            project = await workspace.save_project(title, description)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Project saved:[/green] {_short(project.id)} {project.title}")
        console.print(Panel(project.prompt, title="Starter prompt", border_style="dim"))

    asyncio.run(_add())


@projects_app.command("delete")
def projects_delete(
    project_id: str = typer.Argument(..., help="Project id (or unique prefix)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation prompt"),
):
    """Delete a saved project."""
    async def _delete():
        workspace = await open_workspace(console, with_llm=False)
        try:
            project = _match_id(workspace.projects, project_id)
            if not yes and not typer.confirm(f"Delete project '{project.title}'?"):
                console.print("[dim]Aborted.[/dim]")
                return
            await workspace.delete_project(project.id)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Deleted project:[/green] {project.title}")

    asyncio.run(_delete())


# Profile

@profile_app.command("show")
def profile_show():
    """Show the user profile and its edit history."""
    async def _show():
        workspace = await open_workspace(console, with_llm=False)
        try:
            profile = workspace.profile
        finally:
            await close_workspace(workspace)

        table = Table(show_header=False, box=None)
        table.add_column("Field", style="bold cyan", width=12)
        table.add_column("Value")
        table.add_row("Name", profile.name)
        table.add_row("Avatar", f"{profile.avatar_id} ({AVATARS.get(profile.avatar_id, '?')})")
        table.add_row("Bio", profile.bio)
        table.add_row("Updated", profile.updated_at.strftime("%Y-%m-%d %H:%M"))
        console.print(table)

        if profile.history:
            history = Table(title="History")
            history.add_column("Saved")
            history.add_column("Name")
            history.add_column("Avatar")
            for snapshot in reversed(profile.history):
                history.add_row(snapshot.saved_at.strftime("%Y-%m-%d %H:%M"), snapshot.name, snapshot.avatar_id)
            console.print(history)

    asyncio.run(_show())


@profile_app.command("set")
def profile_set(
    name: str | None = typer.Option(None, "--name", "-n", help="Display name"),
    bio: str | None = typer.Option(None, "--bio", "-b", help="Short biography"),
    avatar: str | None = typer.Option(None, "--avatar", "-a", help=f"Avatar: {', '.join(AVATARS)}"),
):
    """Update the user profile; unspecified fields keep their value."""
    async def _set():
        workspace = await open_workspace(console, with_llm=False)
        try:
            current = workspace.profile
            profile = await workspace.save_profile(
                name=current.name if name is None else name,
                bio=current.bio if bio is None else bio,
                avatar_id=current.avatar_id if avatar is None else avatar,
            )
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Profile saved:[/green] {profile.name}")

    asyncio.run(_set())


# Tasks

@tasks_app.command("list")
def tasks_list():
    """List planning tasks."""
    async def _list():
        workspace = await open_workspace(console, with_llm=False)
        try:
            tasks = list(workspace.tasks)
        finally:
            await close_workspace(workspace)

        if not tasks:
            console.print("[dim]No tasks yet.[/dim]")
            return
        table = Table()
        table.add_column("ID", style="dim")
        table.add_column("")
        table.add_column("Task", style="bold")
        table.add_column("Due")
        table.add_column("Priority")
        table.add_column("Comment")
        for task in tasks:
            style = PRIORITY_STYLES[task.priority]
            table.add_row(
                _short(task.id),
                "[green]✓[/green]" if task.is_completed else "·",
                task.title,
                task.due_date or "-",
                f"[{style}]{task.priority}[/{style}]",
                task.comment,
            )
        console.print(table)

    asyncio.run(_list())


@tasks_app.command("add")
def tasks_add(
    title: str = typer.Argument(..., help="Task title"),
    due: str = typer.Option("", "--due", help="Due date (YYYY-MM-DD)"),
    comment: str = typer.Option("", "--comment", "-c", help="Free-text comment"),
    priority: str = typer.Option("medium", "--priority", "-p", help="high, medium or low"),
):
    """Add a planning task."""
    _pick(priority, tuple(PRIORITY_STYLES), "--priority")

    async def _add():
        workspace = await open_workspace(console, with_llm=False)
        try:
            task = await workspace.add_task(title, due_date=due, comment=comment, priority=priority)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Task added:[/green] {_short(task.id)} {task.title}")

    asyncio.run(_add())


@tasks_app.command("done")
def tasks_done(task_id: str = typer.Argument(..., help="Task id (or unique prefix)")):
    """Toggle a task's completion."""
    async def _done():
        workspace = await open_workspace(console, with_llm=False)
        try:
            task = await workspace.toggle_task(_match_id(workspace.tasks, task_id).id)
        finally:
            await close_workspace(workspace)
        state = "done" if task.is_completed else "open"
        console.print(f"[green]Task {state}:[/green] {task.title}")

    asyncio.run(_done())


@tasks_app.command("remove")
def tasks_remove(task_id: str = typer.Argument(..., help="Task id (or unique prefix)")):
    """Remove a task."""
    async def _remove():
        workspace = await open_workspace(console, with_llm=False)
        try:
            task = _match_id(workspace.tasks, task_id)
            await workspace.remove_task(task.id)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Task removed:[/green] {task.title}")

    asyncio.run(_remove())


# Timetable

@timetable_app.command("show")
def timetable_show():
    """Print the timetable."""
    async def _show():
        workspace = await open_workspace(console, with_llm=False)
        try:
            content = workspace.timetable.content
        finally:
            await close_workspace(workspace)
        if content.strip():
            console.print(Panel(content, title="Emploi du temps", border_style="cyan"))
        else:
            console.print("[dim]No timetable yet.[/dim]")

    asyncio.run(_show())


@timetable_app.command("set")
def timetable_set(
    content: str | None = typer.Argument(None, help="Timetable text"),
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        exists=True,
        dir_okay=False,
        help="Read the timetable from a text file"
    ),
):
    """Replace the timetable."""
    if file is not None:
        content = file.read_text(encoding="utf-8")
    if content is None:
        console.print("[red]Error: Provide timetable text or --file[/red]")
        raise typer.Exit(code=1)

    async def _set():
        workspace = await open_workspace(console, with_llm=False)
        try:
            await workspace.set_timetable(content)
        finally:
            await close_workspace(workspace)
        console.print("[green]Timetable saved.[/green]")

    asyncio.run(_set())


# Study analytics

@study_app.command("session")
def study_session(
    subject: str = typer.Argument(..., help="Subject studied"),
    minutes: int = typer.Argument(..., min=0, help="Duration in minutes"),
):
    """Log a study session."""
    async def _session():
        workspace = await open_workspace(console, with_llm=False)
        try:
            session = await workspace.add_study_session(subject, minutes)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Logged:[/green] {session.subject} ({session.duration_minutes} min)")

    asyncio.run(_session())


@study_app.command("grade")
def study_grade(
    subject: str = typer.Argument(..., help="Subject"),
    grade: float = typer.Argument(..., min=0, help="Grade obtained"),
    max_grade: float = typer.Option(20, "--max", help="Maximum grade"),
):
    """Record a grade."""
    async def _grade():
        workspace = await open_workspace(console, with_llm=False)
        try:
            record = await workspace.add_grade(subject, grade, max_grade)
        except ValueError as e:
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(code=1)
        finally:
            await close_workspace(workspace)
        console.print(f"[green]Recorded:[/green] {record.subject} {record.grade:g}/{record.max_grade:g}")

    asyncio.run(_grade())


@study_app.command("show")
def study_show():
    """Show logged study time and grades."""
    async def _show():
        workspace = await open_workspace(console, with_llm=False)
        try:
            sessions = list(workspace.study_sessions)
            grades = list(workspace.grades)
        finally:
            await close_workspace(workspace)

        if not sessions and not grades:
            console.print("[dim]No study data yet.[/dim]")
            return

        totals: dict[str, int] = {}
        for session in sessions:
            totals[session.subject] = totals.get(session.subject, 0) + session.duration_minutes
        hours, minutes = divmod(sum(totals.values()), 60)

        table = Table(title=f"Study time: {hours}h {minutes}m")
        table.add_column("Subject", style="bold cyan")
        table.add_column("Minutes", justify="right")
        for subject, total in sorted(totals.items(), key=lambda item: -item[1]):
            table.add_row(subject, str(total))
        console.print(table)

        if grades:
            grade_table = Table(title="Grades")
            grade_table.add_column("Date")
            grade_table.add_column("Subject", style="bold")
            grade_table.add_column("Grade", justify="right")
            for record in grades:
                grade_table.add_row(
                    record.date.strftime("%Y-%m-%d"),
                    record.subject,
                    f"{record.grade:g}/{record.max_grade:g}",
                )
            console.print(grade_table)

    asyncio.run(_show())


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
