"""Logging setup shared by the API process and the scripts."""
import logging

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, force=True)
    # uvicorn access lines duplicate the request logger
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def format_duration(ms: float) -> str:
    """Human-readable duration: 85ms, 1.25s, 2.00min."""
    if ms < 1000:
        return f"{int(ms)}ms"
    if ms < 60_000:
        return f"{ms / 1000:.2f}s"
    return f"{ms / 60_000:.2f}min"
