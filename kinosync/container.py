"""
Container d'injection de dependances via dependency-injector.

Possede les parametres, le cache, les clients des fournisseurs et les services
d'une passe. Aucun etat global : tout ce qui est partage passe par ce container.
"""

from pathlib import Path
from typing import Optional

from dependency_injector import containers, providers

from .adapters.api.ai_assistant import AnthropicAssistant
from .adapters.api.cache import APICache
from .adapters.api.imdb_client import IMDbClient
from .adapters.api.kinopoisk_client import KinopoiskClient
from .adapters.api.tmdb_client import TMDBClient
from .adapters.file_system import FileSystemAdapter
from .adapters.images import ImageDownloader
from .adapters.nfo_writer import NfoWriter
from .adapters.torrents.rutracker import RutrackerClient
from .adapters.torrents.transmission import TransmissionSource
from .config import Settings
from .core.ports import IMetadataProvider
from .services.cascade import CascadeResolver, Thresholds
from .services.identifier import ItemIdentifier
from .services.library_sync import LibrarySynchronizer
from .services.linker import LibraryLinker
from .services.orphan_sweep import OrphanSweeper


def _enabled(enabled: bool, instance):
    return instance if enabled else None


def _movie_providers(
    settings: Settings, tmdb: TMDBClient, imdb: IMDbClient, kinopoisk: KinopoiskClient
) -> list[IMetadataProvider]:
    """Fournisseurs de films, dans l'ordre de la cascade (TMDB principal)."""
    chain: list[IMetadataProvider] = []
    if settings.tmdb_enabled:
        chain.append(tmdb)
    chain.append(imdb)
    if settings.kinopoisk_enabled:
        chain.append(kinopoisk)
    return chain


def _series_providers(
    settings: Settings, tmdb_series: TMDBClient, kinopoisk_series: KinopoiskClient
) -> list[IMetadataProvider]:
    chain: list[IMetadataProvider] = []
    if settings.tmdb_enabled:
        chain.append(tmdb_series)
    if settings.kinopoisk_enabled:
        chain.append(kinopoisk_series)
    return chain


def _output_roots(settings: Settings) -> list[Path]:
    return list(settings.movies_output) + list(settings.series_output)


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Utilisation :
        container = Container()
        container.config.override(providers.Object(load_settings(path)))
        report = await container.library_synchronizer().run()
        await shutdown(container)
    """

    config = providers.Singleton(Settings)

    # Cache API - Singleton partage entre clients
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.cache_dir,
        offline=config.provided.offline,
    )

    # Clients des fournisseurs
    tmdb_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
    )
    tmdb_series_client = providers.Singleton(
        TMDBClient,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        series_only=True,
    )
    imdb_client = providers.Singleton(IMDbClient, cache=api_cache)
    kinopoisk_client = providers.Singleton(
        KinopoiskClient,
        api_key=config.provided.kinopoisk_api_key,
        cache=api_cache,
    )
    kinopoisk_series_client = providers.Singleton(
        KinopoiskClient,
        api_key=config.provided.kinopoisk_api_key,
        cache=api_cache,
        series_only=True,
    )
    ai_client = providers.Singleton(
        AnthropicAssistant,
        api_key=config.provided.anthropic_api_key,
        cache=api_cache,
        model=config.provided.ai_model,
    )
    transmission_client = providers.Singleton(
        TransmissionSource,
        rpc_url=config.provided.transmission_rpc,
    )
    rutracker_client = providers.Singleton(RutrackerClient, cache=api_cache)

    # Variantes optionnelles (None si non configurees)
    ai_assistant = providers.Callable(
        _enabled, enabled=config.provided.ai_enabled, instance=ai_client
    )
    torrent_source = providers.Callable(
        _enabled, enabled=config.provided.torrents_enabled, instance=transmission_client
    )
    tmdb_lookup = providers.Callable(
        _enabled, enabled=config.provided.tmdb_enabled, instance=tmdb_client
    )
    poster_provider = providers.Callable(
        _enabled, enabled=config.provided.kinopoisk_enabled, instance=kinopoisk_client
    )

    # Adapters de la bibliotheque
    file_system = providers.Singleton(FileSystemAdapter)
    nfo_writer = providers.Singleton(NfoWriter)
    image_downloader = providers.Singleton(ImageDownloader)

    thresholds = providers.Singleton(
        Thresholds,
        early_exit=config.provided.early_exit_score,
        accept=config.provided.accept_score,
        ambiguous_accept=config.provided.ambiguous_accept_score,
        page_soft_limit=config.provided.page_soft_limit,
        page_soft_score=config.provided.page_soft_score,
        two_part_similarity=config.provided.two_part_similarity,
        poster_fallback=config.provided.poster_fallback_score,
    )

    # Services
    resolver = providers.Singleton(
        CascadeResolver,
        providers=providers.Callable(
            _movie_providers, config, tmdb_client, imdb_client, kinopoisk_client
        ),
        series_providers=providers.Callable(
            _series_providers, config, tmdb_series_client, kinopoisk_series_client
        ),
        ai_assistant=ai_assistant,
        details_provider=tmdb_lookup,
        id_lookup=tmdb_lookup,
        poster_provider=poster_provider,
        thresholds=thresholds,
    )

    identifier = providers.Singleton(
        ItemIdentifier,
        resolver=resolver,
        torrent_source=torrent_source,
        tracker_client=rutracker_client,
        id_lookup=tmdb_lookup,
    )

    linker = providers.Singleton(
        LibraryLinker,
        symlinks=file_system,
        sidecars=nfo_writer,
        movies_roots=config.provided.movies_output,
        series_roots=config.provided.series_output,
        images=image_downloader,
        series_provider=tmdb_lookup,
        dry_run=config.provided.dry_run,
    )

    sweeper = providers.Singleton(
        OrphanSweeper,
        symlinks=file_system,
        output_roots=providers.Callable(_output_roots, config),
        source_roots=config.provided.directories,
        dry_run=config.provided.dry_run,
    )

    library_synchronizer = providers.Singleton(
        LibrarySynchronizer,
        identifier=identifier,
        linker=linker,
        sweeper=sweeper,
        source_roots=config.provided.directories,
        max_parallel_directories=config.provided.max_parallel_directories,
    )


async def shutdown(container: Optional[Container]) -> None:
    """Ferme les clients HTTP et le cache du container."""
    if container is None:
        return
    for client in (
        container.tmdb_client(),
        container.tmdb_series_client(),
        container.imdb_client(),
        container.kinopoisk_client(),
        container.kinopoisk_series_client(),
        container.ai_client(),
        container.transmission_client(),
        container.rutracker_client(),
        container.image_downloader(),
    ):
        await client.close()
    container.api_cache().close()
