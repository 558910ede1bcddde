import typer
import json
import logging
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table

from founderhub.canvas import SECTION_TITLES, normalize_section
from founderhub.models import CANVAS_SECTIONS
from founderhub.services.implementations import PresetFileChooser
from founderhub.utils.logging import quiet_console_logging, setup_logging
from founderhub.utils.config import get_configuration_summary
from founderhub.utils.exceptions import FounderHubError, ValidationError
from founderhub.utils.formatting import format_file_size
from founderhub.utils.validation import FUNDING_PHASES, sanitize_path_input
from founderhub.workspace import Workspace, open_workspace

app = typer.Typer(add_completion=False, help="FounderHub - Manage your startup profile and pitch deck")
deck_app = typer.Typer(help="Pitch deck upload and status")
team_app = typer.Typer(help="Team members")
canvas_app = typer.Typer(help="Business Model Canvas")
profile_app = typer.Typer(help="Company overview and funding details")
app.add_typer(deck_app, name="deck")
app.add_typer(team_app, name="team")
app.add_typer(canvas_app, name="canvas")
app.add_typer(profile_app, name="profile")
console = Console()


@app.callback()
def _init(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: bool = typer.Option(True, "--log-file/--no-log-file", help="Write logs to file")
):
    """Initialize logging for all commands."""
    setup_logging(logging.DEBUG if verbose else logging.INFO, log_file=log_file)


def _open() -> Workspace:
    """Open the workspace, sign in and load every session."""
    workspace = open_workspace()
    workspace.ensure_signed_in()
    workspace.load()
    return workspace


def _fail(e: Exception) -> None:
    if isinstance(e, ValidationError):
        console.print(f"[red]Validation Error: {e}[/red]")
    elif isinstance(e, FounderHubError):
        console.print(f"[red]Error: {e.message}[/red]")
    else:
        console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(1)


def _print_deck(workspace: Workspace) -> None:
    deck = workspace.pitch_deck
    table = Table(title="Pitch Deck", show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", justify="right")
    table.add_column("File", style="cyan")
    table.add_column("Type", style="white")
    table.add_column("Size", justify="right")
    table.add_column("Preview", style="dim")
    for i, entry in enumerate(deck.entries):
        size = format_file_size(entry.file.size_bytes) if entry.file.size_bytes else "-"
        preview = entry.thumbnail.kind.value.replace("_", " ")
        table.add_row(
            str(i),
            f"{entry.thumbnail.icon.glyph} {entry.file.name}",
            entry.file.extension.upper() or "?",
            size,
            preview,
        )
    console.print(table)

    if deck.is_submitted:
        console.print(
            f"[green]✓[/green] Submitted on [cyan]{deck.submitted_at:%Y-%m-%d %H:%M}[/cyan]"
        )
    else:
        console.print("[yellow]Not submitted[/yellow]")


@deck_app.command("status")
def cmd_deck_status():
    """Show the stored pitch deck and its submission state."""
    try:
        workspace = _open()
        _print_deck(workspace)
    except Exception as e:
        _fail(e)


@deck_app.command("upload")
def cmd_deck_upload(
    files: List[Path] = typer.Argument(..., help="Pitch deck files (pdf or video)"),
    submit: bool = typer.Option(True, "--submit/--stage-only", help="Submit after staging"),
):
    """Validate, preview and submit pitch deck files."""
    try:
        paths = [Path(sanitize_path_input(str(f))) for f in files]
        workspace = _open()
        deck = workspace.pitch_deck

        result = deck.add_files(PresetFileChooser(paths))
        for failure in result.errors:
            console.print(f"[red]✗[/red] {failure.file_name}: {failure.reason}")
        if result.cancelled or not result.accepted:
            console.print("[yellow]No files were staged[/yellow]")
            raise typer.Exit(1 if result.errors else 0)

        console.print(f"[green]✓[/green] Staged {len(result.accepted)} file(s)")
        if not submit:
            _print_deck(workspace)
            return

        with console.status("Uploading pitch deck..."):
            outcome = deck.submit()
        if outcome.submitted:
            console.print(f"[green]✓[/green] {outcome.message}")
        else:
            console.print(f"[yellow]{outcome.message}[/yellow]")
        _print_deck(workspace)
    except typer.Exit:
        raise
    except Exception as e:
        _fail(e)


@team_app.command("list")
def cmd_team_list(
    role: Optional[str] = typer.Option(None, "--role", "-r", help="Only members whose role contains this text")
):
    """List team members."""
    try:
        team = _open().team
        members = team.members_by_role(role) if role else team.members

        table = Table(title="Team", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("Role", style="white")
        table.add_column("LinkedIn", style="dim")
        for member in members:
            table.add_row(member.id, member.name, member.role, member.linkedin_url or "")
        console.print(table)
        console.print(f"Team completion: [cyan]{team.completion_percentage:.0f}%[/cyan]")
    except Exception as e:
        _fail(e)


@team_app.command("add")
def cmd_team_add(
    name: str = typer.Argument(..., help="Full name"),
    role: str = typer.Argument(..., help="Role, e.g. CEO"),
    linkedin: Optional[str] = typer.Option(None, "--linkedin", "-l", help="LinkedIn profile URL"),
):
    """Add a team member."""
    try:
        member = _open().team.add_member(name, role, linkedin)
        console.print(f"[green]✓[/green] Added {member.name} ({member.role})")
    except Exception as e:
        _fail(e)


@team_app.command("remove")
def cmd_team_remove(member_id: str = typer.Argument(..., help="Member ID from `team list`")):
    """Remove a team member."""
    try:
        member = _open().team.remove_member(member_id)
        console.print(f"[green]✓[/green] Removed {member.name}")
    except Exception as e:
        _fail(e)


@team_app.command("export")
def cmd_team_export(
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write JSON to this file")
):
    """Export team data as JSON."""
    try:
        data = json.dumps(_open().team.export(), indent=2, default=str)
        if output:
            output.write_text(data, encoding="utf-8")
            console.print(f"[green]✓[/green] Exported to [cyan]{output}[/cyan]")
        else:
            console.print_json(data)
    except Exception as e:
        _fail(e)


@canvas_app.command("show")
def cmd_canvas_show():
    """Show the canvas sections and completion."""
    try:
        canvas = _open().canvas
        table = Table(title="Business Model Canvas", show_header=True, header_style="bold magenta")
        table.add_column("Section", style="cyan", no_wrap=True)
        table.add_column("", justify="center")
        table.add_column("Text", style="white")
        for section in CANVAS_SECTIONS:
            done = "[green]✓[/green]" if canvas.is_section_complete(section) else "[dim]·[/dim]"
            table.add_row(SECTION_TITLES[section], done, canvas.section_text(section))
        console.print(table)
        console.print(
            f"Completed [cyan]{canvas.completed_sections}/{len(CANVAS_SECTIONS)}[/cyan] "
            f"({canvas.completion_percentage:.0f}%)"
        )
    except Exception as e:
        _fail(e)


@canvas_app.command("set")
def cmd_canvas_set(
    section: str = typer.Argument(..., help="Section name, e.g. key-partners"),
    text: str = typer.Argument(..., help="Section text"),
):
    """Update one canvas section and save."""
    try:
        canvas = _open().canvas
        canvas.update_section(section, text)
        canvas.save()
        console.print(
            f"[green]✓[/green] Saved {SECTION_TITLES[normalize_section(section)]} "
            f"({canvas.completion_percentage:.0f}% complete)"
        )
    except Exception as e:
        _fail(e)


@profile_app.command("show")
def cmd_profile_show():
    """Show company overview and funding details."""
    try:
        workspace = _open()
        overview = workspace.overview.profile
        funding = workspace.funding.profile

        table = Table(title="Startup Profile")
        table.add_column("Field", style="cyan")
        table.add_column("Value", style="yellow")
        table.add_row("Company", overview.company_name)
        table.add_row("Tagline", overview.tagline)
        table.add_row("Industry", overview.industry)
        table.add_row("Region", overview.region)
        table.add_row("Idea", funding.idea_description)
        table.add_row("Funding Goal", f"${funding.funding_goal:,}" if funding.funding_goal else "")
        table.add_row("Funding Phase", funding.funding_phase or "")
        table.add_row("Avatar", funding.avatar_url or "")
        console.print(table)
    except Exception as e:
        _fail(e)


@profile_app.command("set")
def cmd_profile_set(
    company_name: Optional[str] = typer.Option(None, "--company", help="Company name"),
    tagline: Optional[str] = typer.Option(None, "--tagline", help="One-line tagline"),
    industry: Optional[str] = typer.Option(None, "--industry", help="Industry"),
    region: Optional[str] = typer.Option(None, "--region", help="Region"),
):
    """Update the company overview."""
    try:
        overview = _open().overview
        updates = {
            "company_name": company_name,
            "tagline": tagline,
            "industry": industry,
            "region": region,
        }
        for name, value in updates.items():
            if value is not None:
                overview.update_field(name, value)
        overview.save()
        console.print(f"[green]✓[/green] Profile saved ({overview.completion_percentage:.0f}% complete)")
    except Exception as e:
        _fail(e)


@profile_app.command("funding")
def cmd_profile_funding(
    idea: Optional[str] = typer.Option(None, "--idea", help="Describe your startup idea"),
    goal: Optional[str] = typer.Option(None, "--goal", help="Funding goal, e.g. 250,000"),
    phase: Optional[str] = typer.Option(None, "--phase", help=f"One of: {', '.join(FUNDING_PHASES)}"),
    avatar: Optional[Path] = typer.Option(None, "--avatar", help="Profile image to upload"),
):
    """Update funding details and optionally upload an avatar."""
    try:
        funding = _open().funding
        if idea is not None:
            funding.update_idea_description(idea)
        if goal is not None:
            funding.update_funding_goal(goal)
        if phase is not None:
            funding.update_funding_phase(phase)
        if any(v is not None for v in (idea, goal, phase)):
            funding.save()
            console.print("[green]✓[/green] Funding details saved")
        if avatar is not None:
            url = funding.upload_avatar(Path(sanitize_path_input(str(avatar))))
            console.print(f"[green]✓[/green] Avatar uploaded: [cyan]{url}[/cyan]")
    except Exception as e:
        _fail(e)


@app.command("dashboard")
def cmd_dashboard():
    """Show the founder dashboard."""
    try:
        summary = _open().dashboard()

        table = Table(title=summary.company_name or "Startup Dashboard")
        table.add_column("Area", style="cyan")
        table.add_column("Status", style="yellow")
        table.add_row("Tagline", summary.tagline)
        table.add_row("Profile", f"{summary.profile_completion:.0f}% complete")
        if summary.funding_goal:
            table.add_row("Funding", f"${summary.funding_goal:,} ({summary.funding_phase or 'no phase'})")
        deck = f"{summary.pitch_deck_file_count} file(s)"
        if summary.pitch_deck_submitted:
            deck += f", submitted {summary.pitch_deck_submitted_at:%Y-%m-%d}"
        table.add_row("Pitch Deck", deck)
        table.add_row(
            "Team",
            f"{summary.team_member_count} member(s), {summary.team_completion:.0f}% complete",
        )
        if summary.leadership:
            table.add_row("Leadership", ", ".join(summary.leadership))
        table.add_row(
            "Business Model Canvas",
            f"{summary.canvas_completed_sections}/9 sections ({summary.canvas_completion:.0f}%)",
        )
        console.print(table)
    except Exception as e:
        _fail(e)


@app.command("login")
def cmd_login(
    email: Optional[str] = typer.Option(None, "--email", help="Account email (defaults to FOUNDERHUB_EMAIL)"),
    password: Optional[str] = typer.Option(None, "--password", help="Account password", hide_input=True),
):
    """Check that sign-in works with the given or configured credentials."""
    try:
        user_id = open_workspace().sign_in(email, password)
        console.print(f"[green]✓[/green] Signed in as [cyan]{user_id}[/cyan]")
    except Exception as e:
        _fail(e)


@app.command("tui")
def cmd_tui():
    """Open the interactive terminal UI."""
    from cli.tui import run
    quiet_console_logging()
    run()


@app.command("config")
def cmd_config():
    """Show current configuration."""
    table = Table(title="FounderHub Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="yellow")

    config = get_configuration_summary()

    table.add_row("Backend", config['backend'])
    table.add_row("Storage Mode", config['storage_mode'])
    table.add_row("Supabase URL", config['supabase_url'])
    table.add_row("Supabase Key", config['supabase_key'])
    table.add_row("User Email", config['user_email'])
    table.add_row("Pitch Deck Bucket", config['pitch_deck_bucket'])
    table.add_row("Avatar Bucket", config['avatar_bucket'])
    table.add_row("Max Pitch Deck Size", f"{config['max_pitch_deck_mb']} MB")
    table.add_row("Max Avatar Size", f"{config['max_avatar_mb']} MB")
    table.add_row("Pitch Deck Types", config['pitch_deck_extensions'])
    table.add_row("Thumbnail Width", str(config['thumbnail_max_width']))
    table.add_row("Thumbnail Quality", str(config['thumbnail_quality']))
    table.add_row(
        "FFmpeg Binary",
        f"{config['ffmpeg_binary']} ({'found' if config['ffmpeg_available'] else 'not found'})",
    )
    table.add_row("Data Directory", config['data_directory'])
    table.add_row("Thumbnail Directory", config['thumbnail_directory'])

    console.print(table)


def main():
    app()


if __name__ == "__main__":
    main()
