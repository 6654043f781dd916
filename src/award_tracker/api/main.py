from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from award_tracker.config import load_env_files, log_level
from award_tracker.errors import ServiceError

from .http_logging import install_http_logging
from .routes.ai import router as ai_router
from .routes.data import router as data_router
from .routes.health import router as health_router

logger = logging.getLogger("award_tracker.api")


def _configure_logging() -> None:
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    logging.getLogger("award_tracker").setLevel(log_level())
    logging.getLogger("api.http").setLevel(logging.INFO)


def create_app() -> FastAPI:
    load_env_files()
    _configure_logging()

    app = FastAPI(title="award-tracker-service", version="1.0.0")

    @app.exception_handler(ServiceError)
    async def _service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("[api] %s %s path=%s", exc.status_code, exc, request.url.path)
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=HTTP_400_BAD_REQUEST,
            content={"error": "Invalid request.", "details": jsonable_errors(exc)},
        )

    app.include_router(health_router)
    app.include_router(ai_router)
    app.include_router(data_router)
    install_http_logging(app)
    return app


def jsonable_errors(exc: RequestValidationError) -> list:
    out = []
    for err in exc.errors():
        out.append({"loc": [str(p) for p in err.get("loc", ())], "msg": str(err.get("msg", ""))})
    return out

