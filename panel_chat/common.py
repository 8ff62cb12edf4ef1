"""Logging setup shared by the CLI and the web UI bridge."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from rich.console import Console
from rich.logging import RichHandler

if TYPE_CHECKING:
    from pathlib import Path

    from fastapi import Request

logger = logging.getLogger(__name__)

NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


def setup_rich_logging(
    log_level: str = "warning",
    *,
    log_file: Path | None = None,
    console: Console | None = None,
) -> None:
    """Configure logging to use Rich for consistent, pretty output.

    This configures:
    - All Python loggers to use RichHandler
    - Uvicorn's loggers to use the same format
    - An optional plain-text mirror in `log_file`

    Args:
        log_level: Logging level (debug, info, warning, error).
        log_file: Optional file that receives every record as well.
        console: Optional Rich console to use (creates new one if not provided).

    """
    level = getattr(logging, log_level.upper(), logging.WARNING)
    rich_console = console or Console(stderr=True)

    handler = RichHandler(
        console=rich_console,
        show_time=True,
        show_level=True,
        show_path=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    handlers: list[logging.Handler] = [handler]

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"),
        )
        handlers.append(file_handler)

    root = logging.getLogger()
    root.handlers.clear()
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)

    for uvicorn_logger_name in ("uvicorn", "uvicorn.error"):
        uvicorn_logger = logging.getLogger(uvicorn_logger_name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
        uvicorn_logger.setLevel(level)

    # Suppress noisy logs from libraries
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


async def log_requests_middleware(
    request: Request,
    call_next: Any,
) -> Any:
    """Log basic request information and warn on errors."""
    client_ip = request.client.host if request.client else "unknown"
    logger.info("%s %s from %s", request.method, request.url.path, client_ip)

    response = await call_next(request)

    if response.status_code >= 400:  # noqa: PLR2004
        logger.warning(
            "Request failed: %s %s -> %d",
            request.method,
            request.url.path,
            response.status_code,
        )

    return response
