"""
Commandes CLI de synchronisation (sync, identify).
"""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from kinosync.adapters.cli.helpers import (
    console,
    display_outcome,
    display_sync_report,
    with_container,
)
from kinosync.services.library_sync import ItemState

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Fichier de configuration JSON"),
]


def sync(
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Simule sans modifier la bibliotheque"),
    ] = False,
    config: ConfigOption = None,
) -> None:
    """Synchronise la bibliotheque : identification, liens, nettoyage."""
    asyncio.run(_sync_async(config_file=config, dry_run=dry_run))


@with_container()
async def _sync_async(container) -> None:
    """Implementation async de la commande sync."""
    settings = container.config()
    if not settings.directories:
        console.print("[red]Aucun repertoire source configure.[/red]")
        raise typer.Exit(1)
    if not settings.movies_output and not settings.series_output:
        console.print("[red]Aucune racine de sortie configuree.[/red]")
        raise typer.Exit(1)

    if settings.dry_run:
        console.print("[yellow]Mode simulation : aucune modification.[/yellow]")

    report = await container.library_synchronizer().run()
    display_sync_report(report)

    if report.count(ItemState.SYNC_ERROR):
        raise typer.Exit(1)


def identify(
    path: Annotated[Path, typer.Argument(help="Fichier ou dossier a identifier")],
    config: ConfigOption = None,
) -> None:
    """Identifie un element sans rien creer dans la bibliotheque."""
    asyncio.run(_identify_async(path.expanduser(), config_file=config))


@with_container()
async def _identify_async(container, path: Path) -> None:
    """Implementation async de la commande identify."""
    if not path.exists():
        console.print(f"[red]Chemin introuvable : {path}[/red]")
        raise typer.Exit(1)

    outcome = await container.library_synchronizer().identify_only(path)
    display_outcome(path, outcome)
