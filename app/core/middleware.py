from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from app.config.settings import Settings
import time
import logging

logger = logging.getLogger(__name__)

PROCESS_TIME_HEADER = "X-Process-Time"


def _log_level_for(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


def setup_middleware(app: FastAPI, settings: Settings):
    """CORS para los orígenes configurados y registro de cada petición"""

    # La API solo expone GET y POST
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "Accept"],
        expose_headers=[PROCESS_TIME_HEADER],
        max_age=3600
    )

    @app.middleware("http")
    async def log_requests(request, call_next):
        started = time.perf_counter()

        response = await call_next(request)

        elapsed = time.perf_counter() - started
        response.headers[PROCESS_TIME_HEADER] = f"{elapsed:.4f}"
        logger.log(
            _log_level_for(response.status_code),
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed * 1000:.1f} ms)"
        )

        return response
