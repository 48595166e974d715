"""
Command-line interface for project-pm.

Provides commands for:
- scan: Reconcile GitHub repositories with local checkouts and write the manifest
- show: Display the current manifest
- overlaps: Display capabilities shared by several projects
- init: Write a default configuration file
"""

import asyncio
import logging
import os
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from project_pm import __version__
from project_pm.config import (
    ENV_FILE,
    PortfolioConfig,
    apply_environment,
    load_config,
    resolve_credentials,
    save_default_config,
)
from project_pm.errors import ConfigError, ManifestError
from project_pm.github_client import GitHubClient
from project_pm.manifest import read_manifest
from project_pm.overlaps import find_overlaps
from project_pm.reconciler import Reconciler, summarize
from project_pm.schemas import ProjectManifest, ProjectStatus

# Configure logging
logging.basicConfig(
    level=logging.INFO if not os.environ.get("PROJECT_PM_DEBUG") else logging.DEBUG,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# CLI app
app = typer.Typer(
    name="project-pm",
    help="Inventory of your GitHub repositories and local checkouts",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

STATUS_STYLES = {
    ProjectStatus.ACTIVE: "green",
    ProjectStatus.RECENT: "cyan",
    ProjectStatus.STALE: "yellow",
    ProjectStatus.PAUSED: "magenta",
    ProjectStatus.ABANDONED: "red",
}


def get_config(config_path: Path | None = None) -> PortfolioConfig:
    """Load configuration with environment overrides; exit on invalid config."""
    load_dotenv(ENV_FILE)
    try:
        return apply_environment(load_config(config_path))
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold]project-pm[/bold] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True,
                     help="Show version and exit"),
    ] = None,
) -> None:
    """project-pm - personal project portfolio scanner."""


def _manifest_path(config: PortfolioConfig, data_dir: Path | None) -> Path:
    if data_dir is not None:
        return data_dir / config.output.manifest_file
    return config.output.manifest_path


def _load_manifest_or_exit(path: Path) -> ProjectManifest:
    manifest = read_manifest(path)
    if manifest is None:
        console.print(f"[yellow]No data yet.[/yellow] Run [bold]project-pm scan[/bold] to create {path}")
        raise typer.Exit(0)
    return manifest


@app.command()
def scan(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to configuration file")] = None,
    data_dir: Annotated[Optional[Path], typer.Option("--data-dir", "-d", help="Directory for manifest and overrides")] = None,
    local_dir: Annotated[Optional[Path], typer.Option("--local-dir", "-l", help="Root directory of local checkouts")] = None,
    org: Annotated[Optional[str], typer.Option("--org", help="Scan an organization instead of your own repos")] = None,
) -> None:
    """
    Scan repositories and write the manifest.

    Lists GitHub repositories, matches them with local checkouts, applies
    overrides and writes manifest.json.
    """
    cfg = get_config(config_file)

    updates = {}
    if data_dir is not None:
        updates["output"] = cfg.output.model_copy(update={"data_dir": str(data_dir)})
    if local_dir is not None:
        updates["local"] = cfg.local.model_copy(update={"projects_dir": str(local_dir)})
    if org:
        updates["github"] = cfg.github.model_copy(update={"org": org})
    if updates:
        cfg = cfg.model_copy(update=updates)

    try:
        credentials = resolve_credentials(cfg)
    except ConfigError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        if e.suggestion:
            console.print(f"[dim]{e.suggestion}[/dim]")
        raise typer.Exit(1)

    console.print(Panel(
        f"[bold]Scanning repositories of:[/bold] {cfg.github.org or credentials.username}\n"
        f"Local checkouts: {cfg.local.projects_dir or '[dim]none[/dim]'}",
        title="project-pm",
    ))

    async def _run() -> ProjectManifest:
        async with GitHubClient(
            credentials.token,
            api_url=cfg.github.api_url,
            timeout=cfg.github.timeout_seconds,
        ) as client:
            return await Reconciler(cfg, credentials, client).run()

    try:
        manifest = asyncio.run(_run())
    except ManifestError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    console.print()
    console.print(f"[green]✓[/green] Reconciled [bold]{len(manifest.projects)}[/bold] projects")

    table = Table(title="Summary")
    table.add_column("Status")
    table.add_column("Projects", justify="right")
    for status, count in summarize(manifest.projects).items():
        style = STATUS_STYLES[ProjectStatus(status)]
        table.add_row(f"[{style}]{status}[/{style}]", str(count))
    console.print(table)

    console.print()
    console.print(f"[dim]Manifest saved to:[/dim] {cfg.output.manifest_path}")


@app.command()
def show(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to configuration file")] = None,
    data_dir: Annotated[Optional[Path], typer.Option("--data-dir", "-d", help="Directory holding manifest.json")] = None,
    status: Annotated[Optional[str], typer.Option("--status", "-s", help="Only show projects with this status")] = None,
) -> None:
    """
    Show the projects in the current manifest.
    """
    cfg = get_config(config_file)
    manifest = _load_manifest_or_exit(_manifest_path(cfg, data_dir))

    projects = manifest.projects
    if status:
        try:
            wanted = ProjectStatus(status.lower())
        except ValueError:
            console.print(f"[red]Error:[/red] Unknown status: {status}")
            console.print(f"Valid statuses: {', '.join(s.value for s in ProjectStatus)}")
            raise typer.Exit(1)
        projects = [p for p in projects if p.computed_status == wanted]

    table = Table(title=f"Projects ({manifest.generated_at})")
    table.add_column("Name", style="bold")
    table.add_column("Status")
    table.add_column("Source")
    table.add_column("Last commit")
    table.add_column("Stack")
    table.add_column("Capabilities")

    for project in projects:
        style = STATUS_STYLES[project.computed_status]
        table.add_row(
            project.name,
            f"[{style}]{project.computed_status.value}[/{style}]",
            project.source.value,
            project.last_commit_date or "-",
            ", ".join(project.tech_stack),
            ", ".join(project.capabilities),
        )

    console.print(table)


@app.command()
def overlaps(
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to configuration file")] = None,
    data_dir: Annotated[Optional[Path], typer.Option("--data-dir", "-d", help="Directory holding manifest.json")] = None,
) -> None:
    """
    Show capabilities implemented by more than one project.
    """
    cfg = get_config(config_file)
    manifest = _load_manifest_or_exit(_manifest_path(cfg, data_dir))

    groups = find_overlaps(manifest.projects)
    if not groups:
        console.print("[green]No overlapping capabilities found.[/green]")
        return

    table = Table(title="Capability Overlaps")
    table.add_column("Capability", style="cyan")
    table.add_column("Count", justify="right")
    table.add_column("Projects")
    for capability, group in groups.items():
        table.add_row(capability, str(len(group)), ", ".join(p.name for p in group))

    console.print(table)


@app.command()
def init(
    path: Annotated[Path, typer.Option("--path", "-p", help="Where to write the config file")] = Path("project-pm.toml"),
    force: Annotated[bool, typer.Option("--force", "-f", help="Overwrite an existing file")] = False,
) -> None:
    """
    Write a default configuration file.
    """
    if path.exists() and not force:
        console.print(f"[yellow]Config already exists:[/yellow] {path} (use --force to overwrite)")
        raise typer.Exit(1)

    saved = save_default_config(path)
    console.print(f"[green]✓[/green] Wrote default configuration to {saved}")


if __name__ == "__main__":
    app()
