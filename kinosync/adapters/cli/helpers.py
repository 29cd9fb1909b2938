"""
Utilitaires partages pour les commandes CLI de KinoSync.

Ce module fournit :
- console : instance Rich Console partagee
- cli_state : options globales de verbosite (-v/-q)
- build_container : container initialise depuis un fichier de configuration
- with_container : decorateur injectant un container initialise puis ferme
- display_sync_report / display_outcome : rendu Rich des resultats
"""

from functools import wraps
from pathlib import Path
from typing import Any, Optional

import typer
from dependency_injector import providers
from rich.console import Console
from rich.table import Table

from kinosync.config import load_settings
from kinosync.container import Container, shutdown
from kinosync.logging_config import configure_logging, verbosity_level
from kinosync.services.cascade import Resolved
from kinosync.services.identifier import AmbiguousSplit, IdentifyOutcome
from kinosync.services.library_sync import ItemState, SyncReport

console = Console()

cli_state = {"verbose": 0, "quiet": False}

STATE_LABELS = {
    ItemState.LINKED: "Lies",
    ItemState.ALREADY_SYNCED: "Deja synchronises",
    ItemState.AMBIGUOUS_SPLIT: "Dossiers decoupes",
    ItemState.SKIPPED: "Ignores (sans video)",
    ItemState.FAILED: "Non identifies",
    ItemState.SYNC_ERROR: "Erreurs de fichiers",
}


def build_container(config_file: Optional[Path] = None, **overrides: Any) -> Container:
    """
    Cree le container a partir de la configuration et configure le logging.

    Args:
        config_file: Fichier JSON de configuration (optionnel)
        overrides: Valeurs de Settings imposees par la ligne de commande
    """
    try:
        settings = load_settings(config_file)
    except (OSError, ValueError) as exc:
        console.print(f"[red]Configuration invalide : {exc}[/red]")
        raise typer.Exit(1) from exc
    if overrides:
        settings = settings.model_copy(update=overrides)

    configure_logging(
        log_level=verbosity_level(settings.log_level, cli_state["verbose"], cli_state["quiet"]),
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )

    container = Container()
    container.config.override(providers.Object(settings))
    return container


def with_container(**overrides: Any):
    """
    Decorateur qui injecte un container initialise en premier argument.

    La fonction decoree recoit config_file en argument nomme ; les clients
    HTTP et le cache sont fermes a la fin de la commande.

    Usage:
        @with_container()
        async def my_command(container, ...):
            settings = container.config()
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, config_file: Optional[Path] = None, dry_run: bool = False, **kwargs):
            options = dict(overrides)
            if dry_run:
                options["dry_run"] = True
            container = build_container(config_file, **options)
            try:
                return await func(container, *args, **kwargs)
            finally:
                await shutdown(container)
        return wrapper
    return decorator


def display_sync_report(report: SyncReport) -> None:
    """Affiche le bilan d'une passe sous forme de tableau Rich."""
    table = Table(title="Bilan de synchronisation", show_header=True)
    table.add_column("Etat", style="cyan")
    table.add_column("Nombre", justify="right")
    table.add_column("Details", style="dim")

    for state, label in STATE_LABELS.items():
        items = [item for item in report.items if item.state == state]
        details = ""
        if state in (ItemState.FAILED, ItemState.SYNC_ERROR):
            details = ", ".join(item.source_path.name for item in items[:3])
        table.add_row(label, str(len(items)), details)

    table.add_row("Liens crees", str(report.links_created), "")
    table.add_row("Entrees orphelines supprimees", str(report.removed), "")
    if report.sweep is not None and report.sweep.failed:
        failed = report.sweep.failed
        table.add_row(
            "Suppressions en echec", str(len(failed)), ", ".join(path.name for path in failed[:3])
        )
    console.print(table)


def display_outcome(path: Path, outcome: IdentifyOutcome) -> None:
    """Affiche le resultat de l'identification d'un element."""
    if isinstance(outcome, Resolved):
        record = outcome.record
        kind = "serie" if record.is_series else "film"
        console.print(f"[green]{path.name}[/green] -> {record.display_name} ({kind})")
        console.print(f"  Identite : {record.identity}  score {outcome.score} via {outcome.source}")
        if record.canonical_url:
            console.print(f"  {record.canonical_url}")
    elif isinstance(outcome, AmbiguousSplit):
        console.print(
            f"[yellow]{path.name}[/yellow] : {len(outcome.video_files)} films "
            f"independants, traitement fichier par fichier"
        )
    else:
        console.print(f"[red]{path.name}[/red] : non identifie ({outcome.reason})")
        if outcome.best_record is not None:
            console.print(
                f"  Meilleur candidat : {outcome.best_record.display_name} "
                f"score {outcome.best_score}"
            )
