"""ResearchBot — FastAPI server answering questions grounded in scraped URLs.

Endpoints
---------
- ``GET  /health``     — health check + which integrations are configured
- ``POST /api/chat``   — scrape the given URLs and answer the query (rate limited)
- ``POST /api/share``  — store a conversation for sharing (7-day expiry)
- ``GET  /api/share``  — load a shared conversation by ``?id=``

Errors are returned as ``{"error": "<message>"}``; internal details are
logged server-side only.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from researchbot.answer_generator import AnswerGenerationError
from researchbot.config import config
from researchbot.models import (
    ChatRequest,
    ChatResponse,
    Conversation,
    HealthResponse,
    SharedConversationResponse,
    ShareResponse,
)
from researchbot.rate_limiter import RateLimitMiddleware
from researchbot.services import Services, build_services
from researchbot.share_store import ShareStoreError

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
for _name in ("httpx", "openai", "playwright", "upstash_redis"):
    logging.getLogger(_name).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """An error that maps directly onto an HTTP status + ``{"error"}`` body."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message


# ---------------------------------------------------------------------------
# FastAPI lifespan — build service handles once per process
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the service handles on startup, release them on shutdown."""
    logger.info("[RESEARCHBOT] Server starting up...")
    app.state.services = build_services(config)
    logger.info("[RESEARCHBOT] Services ready.")

    yield

    logger.info("[RESEARCHBOT] Server shutting down...")
    await app.state.services.aclose()


app = FastAPI(
    title="ResearchBot",
    description="Answers questions grounded in the content of user-supplied URLs",
    version="0.1.0",
    lifespan=lifespan,
)
app.add_middleware(RateLimitMiddleware)


@app.exception_handler(ApiError)
async def _api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse({"error": exc.message}, status_code=exc.status_code)


def get_services(request: Request) -> Services:
    """Dependency: the process-wide :class:`Services` built in the lifespan."""
    return request.app.state.services


async def _read_json(request: Request) -> object:
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        return None


# ---------------------------------------------------------------------------
# API Endpoints
# ---------------------------------------------------------------------------

@app.get("/health", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)):
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        llm_configured=services.answer_generator is not None,
        share_configured=services.share_store is not None,
        rate_limit_configured=services.ratelimit is not None,
    )


@app.post("/api/chat", response_model=ChatResponse)
async def chat(request: Request, services: Services = Depends(get_services)):
    """Scrape the requested URLs and answer the query from their content."""
    if services.answer_generator is None:
        logger.error("[RESEARCHBOT] Chat request rejected: GROQ_API_KEY not set")
        raise ApiError(500, "Server configuration error: GROQ_API_KEY not set")

    try:
        payload = ChatRequest.model_validate(await _read_json(request))
    except ValidationError:
        raise ApiError(400, "Invalid request. Provide a query and URLs.")

    logger.info(
        "[RESEARCHBOT] Chat request: %d urls, query='%s'",
        len(payload.urls),
        payload.query[:100],
    )

    try:
        sources = await services.source_collector.collect(payload.urls)
        if not sources:
            raise ApiError(
                404,
                "Could not scrape any content from the provided URLs. "
                "Please check the URLs and try again.",
            )
        return await services.answer_generator.generate(payload.query, sources)
    except ApiError:
        raise
    except AnswerGenerationError as e:
        raise ApiError(500, str(e))
    except Exception:
        logger.error("[RESEARCHBOT] Error processing chat request", exc_info=True)
        raise ApiError(500, "An unexpected error occurred")


@app.post("/api/share", response_model=ShareResponse)
async def share_conversation(request: Request, services: Services = Depends(get_services)):
    """Store a conversation so it can be opened from a shareable link."""
    data = await _read_json(request)
    if not isinstance(data, dict) or not data.get("conversation"):
        logger.warning("[RESEARCHBOT] Share request without conversation data")
        raise ApiError(400, "No conversation data provided")

    try:
        conversation = Conversation.model_validate(data["conversation"])
    except ValidationError:
        raise ApiError(400, "Invalid conversation data")

    if services.share_store is None:
        logger.error("[RESEARCHBOT] Share requested but the share store is not configured")
        raise ApiError(500, "Failed to share conversation")

    try:
        conversation_id = await services.share_store.save(conversation)
    except ShareStoreError:
        logger.error("[RESEARCHBOT] Failed to store conversation %s", conversation.id, exc_info=True)
        raise ApiError(500, "Failed to share conversation")

    return ShareResponse(id=conversation_id)


@app.get("/api/share", response_model=SharedConversationResponse)
async def get_shared_conversation(id: str | None = None, services: Services = Depends(get_services)):
    """Load a shared conversation by id."""
    if not id:
        raise ApiError(400, "Conversation ID is required")

    if services.share_store is None:
        logger.error("[RESEARCHBOT] Shared conversation requested but the share store is not configured")
        raise ApiError(500, "Failed to retrieve conversation")

    try:
        conversation = await services.share_store.load(id)
    except ShareStoreError:
        logger.error("[RESEARCHBOT] Failed to load conversation %s", id, exc_info=True)
        raise ApiError(500, "Failed to retrieve conversation")

    if conversation is None:
        raise ApiError(404, "Conversation not found")
    return SharedConversationResponse(conversation=conversation)


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    """Launch the ResearchBot server."""
    port = config.port

    logger.info("[RESEARCHBOT] Starting server on port %d", port)
    logger.info("[RESEARCHBOT] Health: http://localhost:%d/health", port)
    logger.info("[RESEARCHBOT] Chat:   http://localhost:%d/api/chat", port)
    logger.info("[RESEARCHBOT] Share:  http://localhost:%d/api/share", port)

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="info")


if __name__ == "__main__":
    main()
