"""Typer app configuration and logging setup."""

from __future__ import annotations

import logging
import warnings
from pathlib import Path

import typer
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# httpx cleanup warnings are cosmetic
warnings.filterwarnings("ignore", message=".*Event loop is closed.*")
warnings.filterwarnings("ignore", category=ResourceWarning)

app = typer.Typer(
    name="carousel",
    help="Turn stories into Instagram carousels",
    add_completion=False,
)

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(message)s"


def register_commands() -> None:
    """Register all carousel commands."""
    from .commands import cache_cleanup, health, list_stories, preview, render, share, status

    app.command(name="list")(list_stories)
    app.command(name="preview")(preview)
    app.command(name="render")(render)
    app.command(name="share")(share)
    app.command(name="status")(status)
    app.command(name="health")(health)
    app.command(name="cache-cleanup")(cache_cleanup)


def _file_logger(name: str, path: Path, level: int = logging.INFO) -> None:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    logger.handlers = []  # Clear any existing handlers
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)


def setup_logging(log_dir: Path | None = None) -> None:
    """Configure logging for CLI.

    - Suppresses console output from libraries
    - Pipeline, render and monitor loggers write to logs/carousel.log
    - Instagram API calls go to logs/instagram_api.log
    """
    if log_dir is None:
        log_dir = Path(__file__).parent.parent.parent.parent / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)

    # Remove any default console handlers from root logger
    root_logger = logging.getLogger()
    root_logger.handlers = []
    root_logger.setLevel(logging.CRITICAL)

    for logger_name in ["httpx", "httpcore", "urllib3", "asyncio"]:
        logger = logging.getLogger(logger_name)
        logger.setLevel(logging.WARNING)
        logger.propagate = False

    for logger_name in ["carousel.pipeline", "carousel.render", "carousel.monitor"]:
        _file_logger(logger_name, log_dir / "carousel.log")
    _file_logger("instagram_api", log_dir / "instagram_api.log")


# Initialize logging on module import
setup_logging()

register_commands()


def main() -> None:
    """CLI entry point."""
    app()
