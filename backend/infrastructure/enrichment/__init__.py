"""
Media metadata gateway (TMDb).
"""

_tmdb_client = None


def get_tmdb_client():
    """Lazy singleton builder for the TMDb client.

    Returns None when TMDb auth is not configured.
    """
    global _tmdb_client
    if _tmdb_client is not None:
        return _tmdb_client

    from infrastructure.config.settings import TMDB_API_KEY, TMDB_API_TOKEN

    # Prefer v4 bearer token, but allow v3 API key for local dev.
    if not (TMDB_API_TOKEN or TMDB_API_KEY):
        return None

    from infrastructure.enrichment.tmdb_client import TMDBClient

    _tmdb_client = TMDBClient(api_token=TMDB_API_TOKEN or None, api_key=TMDB_API_KEY or None)
    return _tmdb_client


__all__ = ["get_tmdb_client"]
