from __future__ import annotations
import logging

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(level: str | None = None) -> None:
    """Configure root logging once.

    Repeated calls are no-ops so reloads and test runs don't stack handlers.
    """
    if logging.getLogger().handlers:
        return
    if level is None:
        from jobhub.core.config import settings

        level = settings.log_level
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
