"""CLI commands for PrepTrack.

Commands:
- init-db: Create the database schema
- seed-syllabus: Write the default NEET/JEE chapter lists
- create-admin: Bootstrap an admin or sub-admin account
- generate-code / list-codes: Manage premium codes
- list-users: Show registered users
- timetable: Generate a revision timetable with the configured LLM
- serve: Run the web API
"""

from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from preptrack.config.app_config import load_app_config
from preptrack.core import premium, syllabus
from preptrack.core.errors import PrepTrackError
from preptrack.core.timetable import generate_revision_timetable
from preptrack.core.users import UserProfile, create_staff_user, get_user_by_email, list_users
from preptrack.db.database import init_db as do_init_db
from preptrack.llm.client import LLMClient, LLMError

app = typer.Typer(
    name="preptrack",
    help="NEET/JEE preparation tracker: syllabus progress, goals and admin console.",
    no_args_is_help=True,
)

console = Console()

DbOption = typer.Option(None, "--db", help="Database file (default from config)")


def _open_db(db: Path | None) -> Path:
    """Initialize the database at the given or configured path."""
    path = db or load_app_config().db_path
    do_init_db(path)
    return path


def _staff_or_exit(email: str) -> UserProfile:
    """Resolve a staff account by email, or exit with an error."""
    profile = get_user_by_email(email)
    if profile is None or not profile.is_staff:
        console.print(f"[red]✗ No admin or sub-admin account with email {email}[/red]")
        raise typer.Exit(code=1)
    return profile


@app.command(name="init-db")
def init_db(db: Path | None = DbOption) -> None:
    """Create the database schema (idempotent)."""
    path = _open_db(db)
    console.print(f"[green]✓ Database ready[/green] [dim]{path}[/dim]")


@app.command(name="seed-syllabus")
def seed_syllabus(
    db: Path | None = DbOption,
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing syllabus"),
) -> None:
    """Write the default chapter lists for every exam and subject."""
    _open_db(db)
    if syllabus.is_seeded() and not force:
        console.print("[yellow]⚠ Syllabus already seeded (use --force to overwrite)[/yellow]")
        return
    rows = syllabus.seed_default_syllabus()
    console.print(f"[green]✓ Seeded {rows} subjects[/green]")


@app.command(name="create-admin")
def create_admin(
    email: str = typer.Argument(..., help="Account email"),
    name: str = typer.Option(..., "--name", "-n", help="Display name"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
    role: str = typer.Option("admin", "--role", "-r", help="admin or subadmin"),
    db: Path | None = DbOption,
) -> None:
    """Create an admin or sub-admin account."""
    _open_db(db)
    try:
        profile = create_staff_user(name, email, password, role=role)
    except PrepTrackError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(f"[green]✓ Created {profile.role}[/green] {profile.display_name}")
    console.print(f"  [dim]uid:[/dim]   {profile.uid}")
    console.print(f"  [dim]email:[/dim] {profile.email}")


@app.command(name="generate-code")
def generate_code(
    admin_email: str = typer.Option(..., "--admin", "-a", help="Email of the issuing admin"),
    count: int = typer.Option(1, "--count", "-c", min=1, max=100, help="Number of codes"),
    db: Path | None = DbOption,
) -> None:
    """Generate single-use premium codes."""
    _open_db(db)
    admin = _staff_or_exit(admin_email)
    try:
        codes = [premium.generate_code(admin) for _ in range(count)]
    except PrepTrackError as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    for code in codes:
        console.print(f"[green]✓[/green] [bold]{code.code}[/bold]")


@app.command(name="list-codes")
def list_codes(
    admin_email: str = typer.Option(..., "--admin", "-a", help="Email of a staff account"),
    db: Path | None = DbOption,
) -> None:
    """List unredeemed premium codes."""
    _open_db(db)
    codes = premium.list_codes(_staff_or_exit(admin_email))
    if not codes:
        console.print("[yellow]No unredeemed codes[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Code")
    table.add_column("Created")
    table.add_column("By", style="dim")
    for code in codes:
        table.add_row(code.code, code.created_at, code.created_by)
    console.print(table)


@app.command(name="list-users")
def list_users_command(db: Path | None = DbOption) -> None:
    """List registered users."""
    _open_db(db)
    profiles = list_users()
    if not profiles:
        console.print("[yellow]No users yet[/yellow]")
        return

    console.print(f"\n[bold]Users ({len(profiles)}):[/bold]\n")
    table = Table(show_header=True, header_style="bold")
    table.add_column("Name")
    table.add_column("Email")
    table.add_column("Role")
    table.add_column("Exam")
    table.add_column("Status")
    table.add_column("Streak", justify="right")
    for p in profiles:
        state = "[red]banned[/red]" if p.ban_is_active() else p.effective_account_status
        table.add_row(
            p.display_name,
            p.email,
            p.role,
            p.exam or "-",
            state,
            str(p.current_streak),
        )
    console.print(table)


@app.command()
def timetable(
    subject: str = typer.Argument(..., help="Subject name, e.g. Physics"),
    exam: str = typer.Option("NEET", "--exam", "-e", help="NEET or JEE"),
    provider: str | None = typer.Option(None, "--provider", "-p", help="LLM provider from config"),
) -> None:
    """Generate a 7-day revision timetable (prints HTML)."""
    try:
        client = LLMClient(provider=provider)
        html = generate_revision_timetable(subject, exam, client=client)
    except (PrepTrackError, LLMError) as e:
        console.print(f"[red]✗ {e}[/red]")
        raise typer.Exit(code=1)

    console.print(html, markup=False, highlight=False)


@app.command()
def serve(
    host: str = typer.Option("127.0.0.1", "--host", help="Bind address"),
    port: int = typer.Option(8000, "--port", help="Port"),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the web API with uvicorn."""
    import uvicorn

    console.print(f"[green]✓ Serving PrepTrack API on http://{host}:{port}[/green]")
    uvicorn.run("preptrack.web.api:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    app()
