import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from nutriguard import __version__
from nutriguard.api import analysis, conditions, history, ingredients
from nutriguard.database import init_db
from nutriguard.services.exceptions import (
    EmptyResponseError,
    InferenceError,
    MalformedResponseError,
    MissingCredentialError,
    RateLimitError,
    ServiceUnavailableError,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    yield


app = FastAPI(title="NutriGuard", version=__version__, lifespan=lifespan)


# =============================================================================
# AI error mapping
# =============================================================================

ERROR_STATUS = {
    MissingCredentialError: 503,
    ServiceUnavailableError: 503,
    RateLimitError: 429,
    EmptyResponseError: 502,
    MalformedResponseError: 502,
}


@app.exception_handler(InferenceError)
async def inference_exception_handler(request: Request, exc: InferenceError):
    """
    Surface AI failures from care plan and recipe generation.

    Food scans never reach this handler except for a missing credential,
    since they fall back to a placeholder result.
    """
    status_code = ERROR_STATUS.get(type(exc), 502)
    logger.warning(
        "AI request failed: path=%s, error=%s: %s",
        request.url.path,
        type(exc).__name__,
        exc,
    )
    return JSONResponse(
        status_code=status_code,
        content={"detail": str(exc), "error": type(exc).__name__},
    )


# Include routers
app.include_router(conditions.router)
app.include_router(ingredients.router)
app.include_router(analysis.router)
app.include_router(history.router)


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
