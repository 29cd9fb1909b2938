"""
Point d'entree CLI de KinoSync.

Les options globales de verbosite sont lues ici ; chaque commande construit
son container (configuration, logging, clients) via with_container.
"""

from pathlib import Path
from typing import Annotated, Optional

import typer

from kinosync import __version__
from kinosync.adapters.cli.commands import identify, sync
from kinosync.adapters.cli.helpers import build_container, cli_state, console

app = typer.Typer(
    name="kinosync",
    help="Organisation d'une videotheque en bibliotheque de liens symboliques",
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """KinoSync - bibliotheque de films et series pour Kodi/Jellyfin."""
    if quiet:
        cli_state["quiet"] = True
    else:
        cli_state["verbose"] = verbose


app.command()(sync)
app.command()(identify)


@app.command()
def info(
    config: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Fichier de configuration JSON"),
    ] = None,
) -> None:
    """Affiche la configuration actuelle."""
    settings = build_container(config).config()

    def enabled(flag: bool) -> str:
        return "activee" if flag else "desactivee"

    console.print("[bold]Configuration KinoSync[/bold]")
    console.print(f"Repertoires sources : {', '.join(map(str, settings.directories)) or '-'}")
    console.print(f"Sortie films : {', '.join(map(str, settings.movies_output)) or '-'}")
    console.print(f"Sortie series : {', '.join(map(str, settings.series_output)) or '-'}")
    console.print(f"API TMDB : {enabled(settings.tmdb_enabled)}")
    console.print(f"API Kinopoisk : {enabled(settings.kinopoisk_enabled)}")
    console.print(f"Assistant IA : {enabled(settings.ai_enabled)}")
    console.print(f"Transmission : {enabled(settings.torrents_enabled)}")
    console.print(f"Cache : {settings.cache_dir}{' (hors ligne)' if settings.offline else ''}")
    console.print(f"Repertoires en parallele : {settings.max_parallel_directories}")
    console.print(f"Niveau de log : {settings.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"KinoSync v{__version__}")


def main() -> None:
    """Point d'entree de l'application."""
    app()


if __name__ == "__main__":
    main()
