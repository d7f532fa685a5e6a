import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exception_handlers import http_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.settings import SERVER_LOG_LEVEL, UVICORN_CONFIG
from server.api.rest.dependencies import shutdown_dependencies
from server.api.rest.v1.watchlist import WATCHLIST_PATH, method_not_allowed
from server.api_router import api_router

logging.basicConfig(
    level=getattr(logging, str(SERVER_LOG_LEVEL).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Cineverse API", description="Watchlist store plus TMDb and Gemini proxies")

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are caller-fixable: 400, not FastAPI's default 422."""
    logger.info("rejected request %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


@app.exception_handler(StarletteHTTPException)
async def watchlist_http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing 405s on the watchlist path advertise every allowed method, not just the first route's."""
    if exc.status_code == 405 and request.url.path.rstrip("/") == WATCHLIST_PATH:
        return method_not_allowed()
    return await http_exception_handler(request, exc)


@app.on_event("shutdown")
async def shutdown_event():
    """Release Redis pools and HTTP sessions."""
    await shutdown_dependencies()


if __name__ == "__main__":
    uvicorn.run("server.main:app", **UVICORN_CONFIG)
