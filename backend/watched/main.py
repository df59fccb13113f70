from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.orm import Session

from watched.core.config import settings
from watched.core.exceptions import WatchedException
from watched.core.logging import setup_logging
from watched.core.security_headers import install_security_headers_middleware
from watched.db.session import get_db
from watched.routers import admin, ai, comments, movies, posts, users

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    setup_logging(settings.LOG_LEVEL)
    settings.validate_runtime_security()

    app = FastAPI(title=settings.APP_NAME)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=settings.allowed_hosts,
    )
    install_security_headers_middleware(app, settings)

    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
    app.include_router(comments.router, prefix="/api/comments", tags=["comments"])
    app.include_router(movies.router, prefix="/api/movies", tags=["movies"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])
    app.include_router(ai.router, prefix="/api/AI", tags=["ai"])

    @app.exception_handler(WatchedException)
    async def handle_watched_exception(_: Request, exc: WatchedException) -> JSONResponse:
        headers = exc.headers if getattr(exc, "headers", None) else None
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.info("Validation failed on %s %s", request.method, request.url.path)
        error = WatchedException(
            "Invalid request body.",
            error_code="VALIDATION_ERROR",
            details={"errors": jsonable_encoder(exc.errors())},
        )
        return JSONResponse(status_code=error.status_code, content=error.to_dict())

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/db-ping", tags=["health"])
    def db_ping(db: Session = Depends(get_db)) -> dict[str, str]:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "reachable"}

    return app


app = create_app()
