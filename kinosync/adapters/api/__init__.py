"""
Clients des fournisseurs de metadonnees.

- TMDB : recherche, details, /find et episodes
- IMDb : page de recherche HTML
- Kinopoisk : api.kinopoisk.dev
- Anthropic : assistant IA de correction des titres

Infrastructure partagee:
- APICache : cache persistant avec TTL differencies, mode hors ligne
- RateLimitError / with_retry / request_with_retry : relance sur 429
"""

from kinosync.adapters.api.cache import APICache
from kinosync.adapters.api.retry import RateLimitError, request_with_retry, with_retry

__all__ = [
    "APICache",
    "RateLimitError",
    "request_with_retry",
    "with_retry",
]
