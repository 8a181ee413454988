"""Survey Center CLI - database setup, seeding, and maintenance."""

from __future__ import annotations

import asyncio
import uuid

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

app = typer.Typer(
    name="survey-center",
    help="Survey Center maintenance commands",
    no_args_is_help=True,
)
console = Console()


@app.command("init-db")
def init_db():
    """Create all tables (SQLite / local development)."""
    from .database import create_tables

    asyncio.run(create_tables())
    console.print("[green]Tables created.[/green]")


@app.command("seed-defaults")
def seed_defaults():
    """Insert the built-in templates if no template exists yet."""
    from .database import async_session_factory
    from .services import template_svc

    async def _seed():
        async with async_session_factory() as db:
            return await template_svc.ensure_defaults(db)

    created = asyncio.run(_seed())
    if not created:
        console.print("[yellow]Templates already exist; nothing seeded.[/yellow]")
        return
    for template in created:
        console.print(f"[green]+[/green] {template.name} [dim]{template.id}[/dim]")


@app.command("sweep-expired")
def sweep_expired():
    """Expire pending assignments whose deadline has passed."""
    from .database import async_session_factory
    from .services.assignment_svc import expire_overdue

    async def _sweep():
        async with async_session_factory() as db:
            return await expire_overdue(db)

    count = asyncio.run(_sweep())
    console.print(f"Expired [bold]{count}[/bold] assignment(s).")


@app.command("set-password")
def set_password(
    code: str = typer.Argument(..., help="Student code"),
    password: str = typer.Option(..., prompt=True, hide_input=True, confirmation_prompt=True),
):
    """Set a student's portal password."""
    from .database import async_session_factory
    from .services import student_svc

    async def _set():
        async with async_session_factory() as db:
            student = await student_svc.get_by_code(db, code)
            if not student:
                return None
            return await student_svc.set_password(db, student.id, password)

    student = asyncio.run(_set())
    if not student:
        console.print(f"[red]No student with code {code.upper()}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Password updated for {student.code} ({student.full_name}).[/green]")


@app.command("stats")
def stats(
    template_id: str = typer.Option(None, "--template", "-t", help="Template id"),
    class_id: str = typer.Option(None, "--class", "-c", help="Class id"),
):
    """Show response rate and average scores."""
    from .database import async_session_factory
    from .services import stats_svc

    async def _stats():
        async with async_session_factory() as db:
            return await stats_svc.compute_statistics(
                db,
                template_id=uuid.UUID(template_id) if template_id else None,
                class_id=class_id,
            )

    result = asyncio.run(_stats())
    console.print(
        Panel(
            f"Assigned: {result['totalAssigned']}\n"
            f"Submitted: {result['totalSubmitted']}\n"
            f"Response rate: {result['responseRate']}%",
            title="Survey Statistics",
        )
    )

    table = Table(title="Average Scores")
    table.add_column("Category", style="cyan")
    table.add_column("Score", style="green")
    for category, score in result["averageScores"].items():
        table.add_row(category, str(score))
    console.print(table)


if __name__ == "__main__":
    app()
