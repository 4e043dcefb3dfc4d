import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from grouptrips import __version__
from grouptrips.api import create_api_router
from grouptrips.core.config import get_settings
from grouptrips.infrastructure.database import dispose_engine, init_db

settings = get_settings()
logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(level=settings.logging.level.upper(), format=settings.logging.format)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    logger.info("%s %s started (%s)", settings.project_name, __version__, settings.environment)
    yield
    await dispose_engine()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title=settings.project_name,
        description="Creates group trips once their payment has been verified",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.payments.app_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(create_api_router(settings.api_prefix))

    @app.get("/health", tags=["health"])
    async def health() -> dict:
        return {"status": "ok", "version": __version__}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("grouptrips.main:app", host=settings.host, port=settings.port, reload=settings.server.reload)
