"""
Logging setup for the TalentMatch API.

``configure_for_environment`` picks a profile from ``ENVIRONMENT``
(production, development or testing) and applies it with ``dictConfig``.
Every module logger lives under the ``talentmatch`` namespace.
"""
import functools
import logging
import logging.config
import os
import time
from datetime import datetime
from pathlib import Path
from typing import Any, Dict

ROOT_LOGGER = "talentmatch"

FORMATS = {
    "simple": "%(levelname)s - %(name)s - %(message)s",
    "detailed": "%(asctime)s | %(levelname)-8s | %(name)-36s | %(funcName)-20s:%(lineno)-4d | %(message)s",
}

# level, write log files, console format
PROFILES = {
    "production": (None, True, "detailed"),
    "development": ("DEBUG", True, "detailed"),
    "testing": ("WARNING", False, "simple"),
}

# Third-party loggers that drown out the service at DEBUG
NOISY_LOGGERS = {
    "pdfminer": "ERROR",
    "urllib3": "WARNING",
    "pymongo": "WARNING",
    "pinecone": "WARNING",
}


def _file_handler(path: Path, level: str) -> Dict[str, Any]:
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": "detailed",
        "filename": str(path),
        "maxBytes": 10 * 1024 * 1024,
        "backupCount": 5,
        "encoding": "utf8",
    }


def setup_logging(level: str = "INFO", write_files: bool = True, console_format: str = "detailed") -> None:
    """Apply console logging, plus daily rotating files under ``LOG_DIR`` when ``write_files``"""
    handlers: Dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": console_format,
            "stream": "ext://sys.stdout",
        }
    }

    if write_files:
        log_dir = Path(os.getenv("LOG_DIR", "logs"))
        log_dir.mkdir(parents=True, exist_ok=True)
        day = datetime.now().strftime("%Y%m%d")
        handlers["file"] = _file_handler(log_dir / f"talentmatch_{day}.log", level)
        handlers["error_file"] = _file_handler(log_dir / f"talentmatch_errors_{day}.log", "ERROR")

    loggers: Dict[str, Any] = {name: {"level": lvl} for name, lvl in NOISY_LOGGERS.items()}
    loggers["uvicorn"] = {"level": "INFO", "handlers": ["console"], "propagate": False}
    loggers["uvicorn.access"] = {"level": "INFO", "handlers": ["console"], "propagate": False}

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: {"format": fmt, "datefmt": "%Y-%m-%d %H:%M:%S"} for name, fmt in FORMATS.items()},
        "handlers": handlers,
        "root": {"level": level, "handlers": list(handlers)},
        "loggers": loggers,
    })

    get_logger("logging").info(f"Logging configured - level {level}, files {'on' if write_files else 'off'}")


def configure_for_environment() -> None:
    environment = os.getenv("ENVIRONMENT", "development").lower()
    level, write_files, console_format = PROFILES.get(environment, PROFILES["production"])
    setup_logging(
        level=level or os.getenv("LOG_LEVEL", "INFO").upper(),
        write_files=write_files,
        console_format=console_format,
    )


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``talentmatch`` namespace, e.g. ``talentmatch.services.matching``"""
    if name == ROOT_LOGGER or name.startswith(ROOT_LOGGER + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def log_api_call(operation: str):
    """Log start, duration and failure of an async route handler"""
    def decorator(func):
        logger = get_logger(f"api.{operation}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            start = time.perf_counter()
            logger.info(f"{operation} started")
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                elapsed = time.perf_counter() - start
                logger.error(f"{operation} failed after {elapsed:.3f}s: {e}", extra={"execution_time": elapsed})
                raise
            elapsed = time.perf_counter() - start
            logger.info(f"{operation} completed in {elapsed:.3f}s", extra={"execution_time": elapsed})
            return result

        return wrapper
    return decorator


class PerformanceMonitor:
    """Times a pipeline stage; warns when it runs past ``threshold_ms``"""

    def __init__(self, operation_name: str, logger: logging.Logger = None, threshold_ms: float = 1000):
        self.operation_name = operation_name
        self.logger = logger or get_logger("performance")
        self.threshold_ms = threshold_ms
        self.start_time = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        elapsed_ms = (time.perf_counter() - self.start_time) * 1000
        if exc_type is not None:
            self.logger.error(f"{self.operation_name} failed after {elapsed_ms:.0f}ms: {exc_val}")
        elif elapsed_ms > self.threshold_ms:
            self.logger.warning(f"{self.operation_name} took {elapsed_ms:.0f}ms (threshold {self.threshold_ms:.0f}ms)")
        else:
            self.logger.info(f"{self.operation_name} completed in {elapsed_ms:.0f}ms")
