"""
core/logging.py

Logging setup, applied once at startup (main.py, seed and init scripts).
- Colored console output through colorlog
- logs/app.log (rotating, 1MB x 5) and logs/error.log for ERROR and above
- logs/requests.log for the per-request lines of the `app.requests` logger
- LOG_LEVEL sets the root level; LOG_TO_FILE=false keeps everything on the console
"""

from logging.config import dictConfig
from pathlib import Path
from typing import Any

from app.core.config import settings

LOG_FORMAT = "[%(asctime)s] %(levelname)s [%(name)s] in %(module)s: %(message)s"
MAX_LOG_BYTES = 1 * 1024 * 1024
LOG_BACKUPS = 5


def _rotating(path: Path, level: str = "NOTSET") -> dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "filename": str(path),
        "maxBytes": MAX_LOG_BYTES,
        "backupCount": LOG_BACKUPS,
        "level": level,
        "formatter": "default",
        "encoding": "utf-8",
    }


def build_logging_config(level: str, log_dir: Path | None) -> dict[str, Any]:
    """
    dictConfig payload for the given root level. File handlers are only
    attached when `log_dir` is given.
    """
    handlers: dict[str, Any] = {
        "console": {"class": "logging.StreamHandler", "formatter": "color"},
    }
    root_handlers = ["console"]
    request_handlers = []
    if log_dir is not None:
        handlers["file"] = _rotating(log_dir / "app.log")
        handlers["error_file"] = _rotating(log_dir / "error.log", level="ERROR")
        handlers["requests_file"] = _rotating(log_dir / "requests.log")
        root_handlers += ["file", "error_file"]
        request_handlers.append("requests_file")

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {"format": LOG_FORMAT},
            "color": {
                "()": "colorlog.ColoredFormatter",
                "format": f"%(log_color)s{LOG_FORMAT}",
                "log_colors": {
                    "DEBUG": "cyan",
                    "INFO": "green",
                    "WARNING": "yellow",
                    "ERROR": "red",
                    "CRITICAL": "bold_red",
                },
            },
        },
        "handlers": handlers,
        "loggers": {
            "uvicorn": {"level": "WARNING"},
            "sqlalchemy": {"level": "WARNING"},
            # request lines also reach the root handlers through propagation
            "app.requests": {"handlers": request_handlers},
        },
        "root": {"level": level.upper(), "handlers": root_handlers},
    }


def init_logging() -> None:
    log_dir = settings.log_path if settings.LOG_TO_FILE else None
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
    dictConfig(build_logging_config(settings.LOG_LEVEL, log_dir))
