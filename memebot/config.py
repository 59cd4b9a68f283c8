"""
Configuration and environment variable validation.
"""
import os
import socket
import sys
from dataclasses import dataclass

from memebot.logger import logger

DEFAULT_PORT = 8080
DEFAULT_KEYWORD_PATTERN = r"(\w+)$"
DEFAULT_IMAGE_EXTENSIONS = "jpg,png,gif"
DEFAULT_REPLY_TIMEOUT_SECONDS = 5.0

TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in TRUE_VALUES


@dataclass(frozen=True)
class Settings:
    images_dir: str
    keyword_pattern: str = DEFAULT_KEYWORD_PATTERN
    image_extensions: tuple[str, ...] = tuple(DEFAULT_IMAGE_EXTENSIONS.split(","))
    serve_host: str = "localhost"
    port: int = DEFAULT_PORT
    serve_display_port: int = DEFAULT_PORT
    require_mention: bool = True
    reply_timeout: float = DEFAULT_REPLY_TIMEOUT_SECONDS
    env: str = "dev"
    slack_bot_token: str = ""
    slack_signing_secret: str = ""

    @property
    def parse_all_messages(self) -> bool:
        return not self.require_mention

    @classmethod
    def from_env(cls) -> "Settings":
        port = int(os.getenv("PORT", DEFAULT_PORT))
        display_port = int(os.getenv("SERVE_DISPLAY_PORT") or 0) or port
        extensions = os.getenv("IMAGE_EXTENSIONS", DEFAULT_IMAGE_EXTENSIONS)

        return cls(
            images_dir=os.getenv("MEMEBOT_IMAGES_DIR", ""),
            keyword_pattern=os.getenv("KEYWORD_PATTERN") or DEFAULT_KEYWORD_PATTERN,
            image_extensions=tuple(ext.strip() for ext in extensions.split(",") if ext.strip()),
            serve_host=os.getenv("SERVE_HOST") or socket.gethostname(),
            port=port,
            serve_display_port=display_port,
            require_mention=_get_bool("REQUIRE_MENTION", True),
            reply_timeout=float(os.getenv("REPLY_TIMEOUT_SECONDS", DEFAULT_REPLY_TIMEOUT_SECONDS)),
            env=os.getenv("ENV", "dev"),
            slack_bot_token=os.getenv("SLACK_BOT_TOKEN", ""),
            slack_signing_secret=os.getenv("SLACK_SIGNING_SECRET", ""),
        )


def validate_environment_variables(require_slack: bool = True) -> None:
    """
    Validate all required environment variables at startup.
    Exits the application with a clear error message if any are missing.
    """
    required_vars = {
        "MEMEBOT_IMAGES_DIR": "Directory containing images named like keyword1[,keyword2,...].jpg",
    }
    if require_slack:
        required_vars.update({
            "SLACK_BOT_TOKEN": "Slack bot token for authentication",
            "SLACK_SIGNING_SECRET": "Slack signing secret for request verification",
        })

    optional_vars = {
        "KEYWORD_PATTERN": f"Case-insensitive regex with capture groups (defaults to {DEFAULT_KEYWORD_PATTERN})",
        "IMAGE_EXTENSIONS": f"Comma-separated image extensions (defaults to {DEFAULT_IMAGE_EXTENSIONS})",
        "SERVE_HOST": "Hostname used in image links (defaults to this machine's hostname)",
        "PORT": f"Server port (defaults to {DEFAULT_PORT} if not set)",
        "SERVE_DISPLAY_PORT": "Port used in image links (defaults to PORT)",
        "REQUIRE_MENTION": "If false, keywords are matched on every message (defaults to true)",
        "REPLY_TIMEOUT_SECONDS": f"Drop replies not ready in time (defaults to {DEFAULT_REPLY_TIMEOUT_SECONDS})",
        "ENV": "Environment (prod/dev, defaults to dev if not set)",
    }

    missing_vars = []

    for var_name, description in required_vars.items():
        value = os.getenv(var_name)
        if not value or not value.strip():
            missing_vars.append(f"  - {var_name}: {description}")
            logger.error(f"Missing required environment variable: {var_name}")

    if missing_vars:
        error_message = (
            "Missing required environment variables:\n"
            + "\n".join(missing_vars)
            + "\n\nPlease set these variables before starting the application."
        )
        logger.critical(error_message)
        print(error_message, file=sys.stderr)
        sys.exit(1)

    # Log optional variables status
    for var_name, description in optional_vars.items():
        value = os.getenv(var_name)
        if not value or not value.strip():
            logger.info(f"Optional environment variable not set: {var_name} - {description}")
        else:
            logger.debug(f"Environment variable set: {var_name}")

    if not _get_bool("REQUIRE_MENTION", True):
        logger.warning("Filtering by mentions is disabled. May be spammy.")

    logger.info("Environment variable validation completed successfully")
