from __future__ import annotations

from typing import Optional, Protocol


class TextGenerationPort(Protocol):
    async def generate_text(self, prompt: str) -> Optional[str]:
        """Return the model's text, or None when the upstream call fails."""
        ...

    async def close(self) -> None:
        ...
