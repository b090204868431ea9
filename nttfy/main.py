from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from nttfy.api.v1 import auth, catalog, playback, playlists, theme, lyrics, toast, websocket
from nttfy.config import get_settings
from nttfy.context import AppContext, build_context
from nttfy.core.logging import setup_logging, get_logger

# Configure logging before anything else
setup_logging()
logger = get_logger(__name__)


def create_app(context: AppContext | None = None) -> FastAPI:
    """
    Build the API. The services are created (or taken from `context`)
    and their persisted state loaded before the first request is served.
    """
    settings = get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Application startup: loading theme and playlists...")
        app.state.context = context or build_context(settings)
        await app.state.context.startup()

        yield

        logger.info("Application shutdown: releasing audio and timers...")
        try:
            await app.state.context.shutdown()
        except Exception as e:
            logger.error(f"Error during shutdown: {e}", exc_info=True)

    app = FastAPI(
        title="NTTfy",
        description="Headless client core for the NTTfy music streaming app",
        version="1.0.0",
        debug=settings.debug,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    prefix = settings.api_v1_prefix
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["Authentication"])
    app.include_router(catalog.router, prefix=f"{prefix}/catalog", tags=["Catalog"])
    app.include_router(playback.router, prefix=f"{prefix}/playback", tags=["Playback"])
    app.include_router(playlists.router, prefix=f"{prefix}/playlists", tags=["Playlists"])
    app.include_router(theme.router, prefix=f"{prefix}/theme", tags=["Theme"])
    app.include_router(lyrics.router, prefix=f"{prefix}/lyrics", tags=["Lyrics"])
    app.include_router(toast.router, prefix=f"{prefix}/toast", tags=["Toast"])
    app.include_router(websocket.router, tags=["WebSocket"])

    @app.get("/")
    async def root():
        return {"message": "Welcome to NTTfy!", "status": "running"}

    @app.get("/health")
    async def health_check():
        return {"status": "healthy"}

    return app


app = create_app()
