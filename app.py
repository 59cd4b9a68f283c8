import sys

from memebot.application import build_app
from memebot.config import Settings, validate_environment_variables
from memebot.errors import MemeBotError
from memebot.logger import logger

# Validate environment variables at startup
validate_environment_variables()

settings = Settings.from_env()

try:
    # Loads the images once; the Slack events route and the image routes
    # share this single FastAPI app.
    fastapi_app = build_app(settings)
except MemeBotError as e:
    logger.critical("Error starting memebot: %s", e)
    sys.exit(1)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app:fastapi_app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.env != "prod",
    )
