from __future__ import annotations

import logging
import sys


LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())
    if any(getattr(handler, "_blog_auth", False) for handler in root.handlers):
        return
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler._blog_auth = True  # type: ignore[attr-defined]
    root.addHandler(handler)


def mask_secret(value: str | None, *, keep: int = 8) -> str:
    """Prefix of a token or code that is safe to log."""
    if not value:
        return "<empty>"
    if len(value) <= keep:
        return "***"
    return f"{value[:keep]}..."
