"""
Infrastructure layer (no watchlist rules).

Adapters behind the application ports: Redis/in-memory list storage, the
device-local slot store, and the TMDb/Gemini HTTP clients.
"""

__all__ = [
    "config",
    "enrichment",
    "integrations",
    "llm",
    "persistence",
    "utils",
]
