"""Video converter service.

Exposes the plugin hooks over HTTP so a hosting platform can forward its
``FileWillBeUploaded`` and ``MessageHasBeenPosted`` calls to this process.

Modules:
    - hooks: upload conversion and preview reply hooks
    - transcoder: ffmpeg invocation
    - platform: Mattermost REST client
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from videoconv import __version__
from videoconv.config import get_settings
from videoconv.hooks.router import get_plugin, router as hooks_router, set_plugin
from videoconv.plugin import VideoConverterPlugin

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

# httpx/httpcore log every request to the Mattermost API.
for _noisy in ("httpx", "httpcore", "httpcore.http11", "httpcore.connection"):
    logging.getLogger(_noisy).setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup/shutdown events."""
    # Startup
    settings = get_settings()

    # Apply configured log level to root logger so that
    # `logging.level: "debug"` in videoconv.settings.yaml activates DEBUG output.
    configured_level = getattr(logging, settings.logging.level.upper(), None)
    if configured_level is not None:
        logging.getLogger().setLevel(configured_level)
        logger.info("Root logger level set to %s", settings.logging.level.upper())

    set_plugin(VideoConverterPlugin.from_settings(settings))

    yield  # Application runs here

    # Shutdown
    close = getattr(get_plugin().api, "close", None)
    if close is not None:
        close()
    set_plugin(None)
    logger.info("Application shutdown complete")


# Create FastAPI application with metadata
app = FastAPI(
    title="Video Converter",
    description="Converts uploaded MOV videos to MP4 and posts preview images",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(hooks_router)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint.

    Returns:
        dict: Status object indicating the server is running.
    """
    return {"status": "ok"}
