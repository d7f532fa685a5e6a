from __future__ import annotations

from setuptools import find_packages, setup

_LAYERS = ["config", "domain", "application", "infrastructure", "server"]

setup(
    name="cineverse-backend",
    version="0.1.0",
    # Repo convention: backend code lives under `backend/`, each layer is a
    # top-level import (`import domain`, `import server`).
    package_dir={"": "backend"},
    packages=find_packages(
        where="backend",
        include=[*_LAYERS, *(f"{layer}.*" for layer in _LAYERS)],
    ),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "starlette",
        "uvicorn>=0.29",
        "pydantic>=2.6",
        "python-dotenv>=1.0",
        "aiohttp>=3.9",
        "redis>=5.0",
    ],
    extras_require={
        # Test runner plus the HTTP client FastAPI's TestClient is built on.
        "test": ["pytest>=8.0", "httpx>=0.27"],
    },
    entry_points={
        "console_scripts": [
            "cineverse-local-watchlist=infrastructure.integrations.local_watchlist.main:main",
        ],
    },
)
