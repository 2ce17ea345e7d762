import logging
import sys

from portfolio_tracker.config import get_settings

_NOISY_LOGGERS = ("sqlalchemy", "httpx", "httpcore")


def setup_logging(level: str | None = None) -> None:
    """Send application logs to stdout; repeated calls only adjust the level."""
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, (level or get_settings().log_level).upper(), logging.INFO))
    if any(getattr(h, "_portfolio_tracker", False) for h in root_logger.handlers):
        return

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s', datefmt='%Y-%m-%d %H:%M:%S')
    )
    handler._portfolio_tracker = True  # type: ignore[attr-defined]
    root_logger.addHandler(handler)

    # Quote lookups and SQL statements are too chatty at INFO
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
