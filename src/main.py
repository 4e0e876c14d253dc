"""Entry point for the realtime voice gateway."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.plivo_routes import router as plivo_router
from api.routes import router as api_router
from config.settings import get_settings
from realtime.errors import RelayError, UpstreamError

LOGGER = logging.getLogger(__name__)

VERSION = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    LOGGER.info(
        "Realtime gateway starting (env=%s, backend=%s)",
        settings.environment,
        settings.backend_url or "<unset>",
    )
    yield
    LOGGER.info("Realtime gateway shutting down")


settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(
    title="Realtime Voice Gateway",
    description="Relays WebRTC and Plivo session setup to a realtime voice AI backend.",
    version=VERSION,
    lifespan=lifespan,
)

# Browsers send only Content-Type; preflights asking for other headers are refused.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type"],
)


@app.exception_handler(RelayError)
async def relay_error_handler(request: Request, exc: RelayError) -> Response:
    if isinstance(exc, UpstreamError):
        return Response(content=exc.body, status_code=exc.status_code, media_type=exc.media_type)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError) -> Response:
    LOGGER.info("Rejected request body on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request body", "details": jsonable_encoder(exc.errors())},
    )


app.include_router(api_router, prefix="/api")
app.include_router(plivo_router, prefix="/api")


@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": VERSION}


def run() -> None:
    import uvicorn

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    run()
