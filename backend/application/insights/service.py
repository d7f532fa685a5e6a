from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from typing import List, Optional

from application.ports.text_generation_port import TextGenerationPort

_FENCE_RE = re.compile(r"```(?:json)?", re.IGNORECASE)


def build_summary_prompt(movie_title: str) -> str:
    return (
        f'Based on the movie titled "{movie_title}", write a short, compelling, and completely '
        "spoiler-free paragraph explaining why someone should watch it. Focus on the mood, "
        "themes, and what makes it unique."
    )


def build_vibe_prompt(title: str, overview: str) -> str:
    return (
        "You are a movie recommendation expert. Based on the following movie, generate a "
        'one-sentence, spoiler-free "vibe check" that captures its emotional tone, and 5 '
        'thematic "smart tags".\n\n'
        f'Title: "{title}"\n'
        f'Description: "{overview}"\n\n'
        'Provide the response strictly as a valid JSON object with the keys "vibe_check" '
        '(a string) and "smart_tags" (an array of strings). Do not include any markdown formatting.'
    )


@dataclass(frozen=True)
class VibeCheck:
    vibe_check: str
    smart_tags: List[str] = field(default_factory=list)


def parse_vibe_response(text: Optional[str]) -> Optional[VibeCheck]:
    """Parse the model's JSON answer; code fences are stripped first."""
    cleaned = _FENCE_RE.sub("", text or "").strip()
    if not cleaned:
        return None
    try:
        data = json.loads(cleaned)
    except ValueError:
        return None
    if not isinstance(data, dict):
        return None
    vibe = str(data.get("vibe_check") or "").strip()
    tags = data.get("smart_tags")
    if not vibe or not isinstance(tags, list):
        return None
    return VibeCheck(vibe_check=vibe, smart_tags=[str(t).strip() for t in tags if str(t).strip()])


class MediaInsightsService:
    def __init__(self, *, generator: TextGenerationPort) -> None:
        self._generator = generator

    async def complete(self, prompt: str) -> Optional[str]:
        return await self._generator.generate_text(prompt)

    async def summary(self, movie_title: str) -> Optional[str]:
        text = await self._generator.generate_text(build_summary_prompt(movie_title))
        return text.strip() if text else None

    async def vibe(self, title: str, overview: str) -> Optional[VibeCheck]:
        return parse_vibe_response(await self._generator.generate_text(build_vibe_prompt(title, overview)))
