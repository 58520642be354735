"""Logging utilities for diagnostics and safe credential handling."""

import logging
import os


def get_logger(name: str = "formgen") -> logging.Logger:
    """Get or create the application logger (or one of its children)."""
    logger = logging.getLogger(name)
    root = logging.getLogger("formgen")
    if root.handlers:
        return logger

    level = os.getenv("FORMGEN_LOG_LEVEL", "INFO").upper()
    root.setLevel(getattr(logging, level, logging.INFO))

    fmt = logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(fmt)
    root.addHandler(stream_handler)

    return logger


def safe_key_fingerprint(key: str) -> str:
    """Return a safe fingerprint of an API key or token for logging (never the full value)."""
    if not isinstance(key, str) or not key:
        return "<empty>"
    tail = key[-4:] if len(key) >= 4 else key
    return f"len={len(key)} tail=***{tail}"
