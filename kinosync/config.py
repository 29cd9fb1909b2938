"""
Configuration de l'application via pydantic-settings.

La configuration est chargee depuis les variables d'environnement avec le prefixe
KINOSYNC_, un fichier .env optionnel, et un fichier JSON optionnel (--config)
dont les valeurs priment sur l'environnement.

Les cles API sont optionnelles : un fournisseur sans cle est simplement
considere comme indisponible par la cascade.
"""

import json
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_PROJECT_ROOT = Path(__file__).parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    """Parametres de l'application avec support des variables d'environnement.

    Tous les parametres peuvent etre surcharges via des variables d'environnement
    avec le prefixe KINOSYNC_.
    Exemple : KINOSYNC_LOG_LEVEL=DEBUG
    Les listes s'ecrivent en JSON : KINOSYNC_DIRECTORIES='["/mnt/a", "/mnt/b"]'

    Les chemins sont automatiquement etendus (~ -> repertoire home).
    """

    model_config = SettingsConfigDict(
        env_prefix="KINOSYNC_",
        env_file=_ENV_FILE if _ENV_FILE.exists() else ".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Repertoires sources et racines de sortie
    directories: list[Path] = Field(default_factory=list)
    movies_output: list[Path] = Field(default_factory=list)
    series_output: list[Path] = Field(default_factory=list)

    # Cles API (OPTIONNELLES)
    tmdb_api_key: Optional[str] = Field(default=None)
    kinopoisk_api_key: Optional[str] = Field(default=None)
    anthropic_api_key: Optional[str] = Field(default=None)
    ai_model: str = Field(default="claude-sonnet-4-20250514")

    # Client torrent (URL RPC Transmission, optionnelle)
    transmission_rpc: Optional[str] = Field(default=None)

    # Cache des fournisseurs
    cache_dir: Path = Field(default=Path("~/.cache/kinosync"))
    offline: bool = Field(default=False)

    # Seuils de la cascade
    early_exit_score: int = Field(default=90, ge=0, le=100)
    accept_score: int = Field(default=70, ge=0, le=100)
    ambiguous_accept_score: int = Field(default=80, ge=0, le=100)
    page_soft_limit: int = Field(default=4, ge=1)
    page_soft_score: int = Field(default=80, ge=0, le=100)
    two_part_similarity: int = Field(default=90, ge=0, le=100)
    poster_fallback_score: int = Field(default=80, ge=0, le=100)

    # Traitement
    max_parallel_directories: int = Field(default=1, ge=1)
    dry_run: bool = Field(default=False)

    # Logging (fichier + stderr, rotation 10MB, 5 fichiers de retention)
    log_level: str = Field(default="INFO")
    log_file: Path = Field(default=Path("logs/kinosync.log"))
    log_rotation_size: str = Field(default="10 MB")
    log_retention_count: int = Field(default=5)

    @field_validator("cache_dir", "log_file", mode="before")
    @classmethod
    def expand_path(cls, v: str | Path) -> Path:
        """Etend ~ vers le repertoire home dans les chemins."""
        return Path(v).expanduser()

    @field_validator("directories", "movies_output", "series_output", mode="before")
    @classmethod
    def expand_paths(cls, v: list[str | Path]) -> list[Path]:
        return [Path(item).expanduser() for item in v or []]

    @property
    def tmdb_enabled(self) -> bool:
        return bool(self.tmdb_api_key)

    @property
    def kinopoisk_enabled(self) -> bool:
        return bool(self.kinopoisk_api_key)

    @property
    def ai_enabled(self) -> bool:
        return bool(self.anthropic_api_key)

    @property
    def torrents_enabled(self) -> bool:
        return bool(self.transmission_rpc)


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Charge les parametres, en appliquant un fichier JSON optionnel.

    Les cles du fichier sont les noms des champs de Settings ; un repertoire
    designe son fichier config.json.

    Raises:
        OSError: Si le fichier ne peut pas etre lu
        ValueError: Si le JSON ou une valeur est invalide
    """
    if config_file is None:
        return Settings()
    config_file = config_file.expanduser()
    if config_file.is_dir():
        config_file = config_file / "config.json"
    data = json.loads(config_file.read_text(encoding="utf-8"))
    return Settings(**data)
