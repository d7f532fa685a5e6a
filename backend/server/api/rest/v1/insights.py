from __future__ import annotations

from typing import Any, Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from application.insights.service import MediaInsightsService
from server.api.rest.dependencies import get_insights_service
from server.models.schemas import PromptRequest, SummaryRequest, VibeResponse

router = APIRouter(prefix="/api", tags=["insights"])


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/gemini")
async def gemini_prompt(
    req: PromptRequest,
    service: Optional[MediaInsightsService] = Depends(get_insights_service),
) -> Any:
    if service is None:
        return _error(500, "Gemini AI API Key not found.")
    prompt = (req.prompt or "").strip()
    if not prompt:
        return _error(400, "Prompt is required.")
    text = await service.complete(prompt)
    if text is None:
        return _error(500, "Failed to get response from AI")
    return {"response": text}


@router.post("/ai/summary")
async def ai_summary(
    req: SummaryRequest,
    service: Optional[MediaInsightsService] = Depends(get_insights_service),
) -> Any:
    if service is None:
        return _error(500, "Gemini AI API Key not found.")
    title = (req.movie_title or "").strip()
    if not title:
        return _error(400, "Movie title is required.")
    summary = await service.summary(title)
    if summary is None:
        return _error(500, "Failed to generate AI summary.")
    return {"summary": summary}


@router.get("/ai/vibe", response_model=VibeResponse)
async def ai_vibe(
    title: Optional[str] = Query(default=None),
    overview: Optional[str] = Query(default=None),
    service: Optional[MediaInsightsService] = Depends(get_insights_service),
) -> Any:
    if service is None:
        return _error(500, "Gemini AI API Key not found.")
    if not (title or "").strip() or not (overview or "").strip():
        return _error(400, "Missing title or overview parameters.")
    vibe = await service.vibe(title.strip(), overview.strip())
    if vibe is None:
        return _error(502, "Failed to get AI insights from Gemini.")
    return {"vibe_check": vibe.vibe_check, "smart_tags": vibe.smart_tags}
