import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from flashdeck.config import settings
from flashdeck.db import init_all_databases
from flashdeck.middleware import RequestLogMiddleware

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_all_databases(settings.data_dir)
    logger.info("Data directory: %s", settings.data_dir)
    yield


def create_app() -> FastAPI:
    application = FastAPI(
        title="FlashDeck Backend", version="0.1.0", lifespan=lifespan
    )

    application.add_middleware(RequestLogMiddleware)
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["*"],
    )

    from flashdeck.routers import cards, decks, generate, health, proxy, study

    application.include_router(health.router, tags=["health"])
    application.include_router(decks.router, prefix="/decks", tags=["decks"])
    application.include_router(study.router, prefix="/decks", tags=["study"])
    application.include_router(generate.router, prefix="/decks", tags=["generate"])
    application.include_router(cards.router, prefix="/cards", tags=["cards"])
    application.include_router(proxy.router, prefix="/api/ollama", tags=["ollama"])

    # Mounted last so API routes take precedence
    if settings.static_dir and settings.static_dir.is_dir():
        application.mount(
            "/", StaticFiles(directory=settings.static_dir, html=True), name="static"
        )

    return application


app = create_app()
