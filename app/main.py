from __future__ import annotations

import logging
import os

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles

from app.api.routers import projects, ui
from app.api.templating import STATIC_DIR
from app.infra.db import check_db_ready
from app.infra.logging_setup import configure_logging
from app.infra.platform import load_platform_domain_suffix

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging()
    # Fails at process start rather than per request when the suffix is unusable.
    domain_suffix = load_platform_domain_suffix()

    app = FastAPI(
        title="sandbox-console",
        description="Project console for cloud development sandboxes.",
        version="0.1.0",
    )
    app.state.platform_domain_suffix = domain_suffix

    app.include_router(projects.router, prefix="/api", tags=["projects"])
    app.include_router(ui.router, tags=["ui"])
    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> Response:
        logger.exception("unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        if request.url.path.startswith("/api/"):
            return JSONResponse(status_code=500, content={"detail": "internal server error"})
        return ui.render_server_error(request)

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz() -> dict[str, object]:
        db_ok = check_db_ready()
        checks = {"db": "ok" if db_ok else "fail"}
        if not db_ok:
            raise HTTPException(
                status_code=503,
                detail={"status": "not_ready", "checks": checks},
            )
        return {"status": "ready", "checks": checks}

    logger.info("sandbox-console ready; sandbox domain suffix %s", domain_suffix)
    return app


app = create_app()


def serve() -> None:
    host = os.getenv("APP_HOST", "0.0.0.0")
    port = int(os.getenv("APP_PORT", "8000"))
    uvicorn.run("app.main:app", host=host, port=port)


if __name__ == "__main__":
    serve()
