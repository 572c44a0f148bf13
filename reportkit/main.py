import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi import Request
from fastapi import status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from reportkit.api.routes import router
from reportkit.core.config import settings
from reportkit.core.exceptions import CapabilityMismatchError
from reportkit.core.exceptions import DuplicatePluginError
from reportkit.core.exceptions import PipelineError
from reportkit.core.exceptions import PluginNotFoundError
from reportkit.core.exceptions import PluginValidationError
from reportkit.core.exceptions import SpecificationNotFoundError
from reportkit.core.logging import setup_logging
from reportkit.plugins.discovery import discover_plugins
from reportkit.plugins.registry import registry
from reportkit.services.llm import LLMError

setup_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    count = discover_plugins(registry)
    logger.info("Application startup complete: %d plugins registered", count)
    yield


app = FastAPI(title="reportkit", lifespan=lifespan)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    logger.error("HTTP exception: %s (status: %s)", exc.detail, exc.status_code)
    return JSONResponse({"detail": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.error("Request validation failed: %s", exc.errors(), exc_info=False)
    return JSONResponse(
        {"error": "Input validation failed", "details": jsonable_encoder(exc.errors())},
        status_code=422,
    )


@app.exception_handler(PipelineError)
async def pipeline_exception_handler(_request: Request, exc: PipelineError) -> JSONResponse:
    if isinstance(exc, (PluginNotFoundError, SpecificationNotFoundError)):
        status_code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, PluginValidationError):
        return JSONResponse({"error": str(exc), "errors": exc.errors, "warnings": exc.warnings}, status_code=422)
    elif isinstance(exc, DuplicatePluginError):
        status_code = status.HTTP_409_CONFLICT
    elif isinstance(exc, CapabilityMismatchError):
        return JSONResponse({"error": str(exc), "capabilities": exc.capabilities}, status_code=400)
    else:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    logger.error("%s: %s", type(exc).__name__, str(exc))
    return JSONResponse({"error": str(exc)}, status_code=status_code)


@app.exception_handler(LLMError)
async def llm_exception_handler(_request: Request, exc: LLMError) -> JSONResponse:
    logger.error("LLM error (%s): %s", exc.provider, str(exc))
    return JSONResponse({"error": str(exc)}, status_code=status.HTTP_502_BAD_GATEWAY)


@app.get("/health", status_code=status.HTTP_200_OK, tags=["Health"])
async def health_check() -> dict[str, str]:
    return {"status": "ok"}


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allowed_origins,
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["*"],
)
app.include_router(router)
