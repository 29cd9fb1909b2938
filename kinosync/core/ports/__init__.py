"""
Ports (interfaces abstraites) de la couche domaine.

Les services dependent de ces interfaces, jamais des adaptateurs concrets.

Exports:
- IMetadataProvider, ISeriesProvider, IDetailsProvider, IExternalIdLookup, IAIAssistant
- ITorrentSource, ITrackerClient, TrackerTopic
- ISymlinkManager, ISidecarWriter, IImageDownloader
"""

from kinosync.core.ports.api_clients import (
    IAIAssistant,
    IDetailsProvider,
    IExternalIdLookup,
    IMetadataProvider,
    ISeriesProvider,
)
from kinosync.core.ports.file_system import IImageDownloader, ISidecarWriter, ISymlinkManager
from kinosync.core.ports.torrents import ITorrentSource, ITrackerClient, TrackerTopic

__all__ = [
    "IAIAssistant",
    "IDetailsProvider",
    "IExternalIdLookup",
    "IImageDownloader",
    "IMetadataProvider",
    "ISeriesProvider",
    "ISidecarWriter",
    "ISymlinkManager",
    "ITorrentSource",
    "ITrackerClient",
    "TrackerTopic",
]
