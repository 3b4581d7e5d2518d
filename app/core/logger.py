"""Loguru setup for the club activity sync service.

Every record carries a ``service`` extra so lines from this process can be
told apart when several services share a log drain. Set ``LOG_JSON`` to
emit one JSON object per line instead of the human-readable format.
"""

import sys
from pathlib import Path

from loguru import logger

SERVICE_NAME = "club-sync"

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[service]}</magenta> | <cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DDTHH:mm:ss.SSSZZ} | {level: <8} | {extra[service]} | {name}:{line} - {message}"


def setup_logger(
    level: str = "INFO",
    log_file: str | None = None,
    *,
    json_logs: bool = False,
    rotation: str = "10 MB",
    retention: str = "7 days",
) -> None:
    """Replace loguru's default sink with the service's sinks.

    Args:
        level: Minimum level for every sink
        log_file: Optional file sink, rotated and zip-compressed
        json_logs: Serialize records as JSON instead of formatted text
        rotation: Size or interval that triggers rotation of the file sink
        retention: How long rotated files are kept
    """
    logger.remove()
    logger.configure(extra={"service": SERVICE_NAME})

    if json_logs:
        logger.add(sys.stderr, level=level, serialize=True)
    else:
        logger.add(sys.stderr, format=CONSOLE_FORMAT, level=level, colorize=True)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_path,
            format=FILE_FORMAT,
            level=level,
            serialize=json_logs,
            rotation=rotation,
            retention=retention,
            compression="zip",
            backtrace=True,
            diagnose=False,  # locals may hold access tokens
        )

    logger.info(f"Logger initialized with level={level} json={json_logs} file={log_file or '-'}")


def mask_token(token: str | None) -> str:
    """Return a loggable form of a credential: first 4 chars only."""
    if not token:
        return "<empty>"
    return f"{token[:4]}…"
