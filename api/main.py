import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from auth import router as auth_router
from auth import security
from bookmarks import router as bookmarks_router
from core import db
from core.config import Settings, load_settings
from core.errors import ServiceError, UnauthorizedError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    if settings.uses_default_secret:
        logger.warning("jwt_secret_default in use; set JWT_SECRET outside development")

    # Initialize the DB pool once per process.
    await db.init_pool(settings)
    try:
        if settings.db_auto_create_schema:
            await db.ensure_schema()
        yield
    finally:
        await db.close_pool()


async def _service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, UnauthorizedError) else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message},
        headers=headers,
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )

    app = FastAPI(lifespan=lifespan)
    # Signing key is fixed for the life of the process.
    app.state.settings = settings
    app.state.tokens = security.TokenCodec(
        secret=settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    # Allow local frontend dev server to call this API from the browser.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ServiceError, _service_error_handler)

    app.include_router(auth_router.router, tags=["auth"])
    app.include_router(bookmarks_router.router, tags=["bookmarks"])

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok"}

    @app.get("/")
    def root() -> dict:
        return {"message": "bookmark api"}

    return app


app = create_app()
