# storefront/utils/logging.py
import logging
import re
from typing import Pattern

from storefront.utils.settings import LOG_LEVEL

LOG_FORMAT = "%(asctime)s | %(name)-25s | %(levelname)-8s | %(message)s"


class SecretMaskingFilter(logging.Filter):
    """
    Masks credentials before a record reaches a handler.

    Auth tokens travel in headers and local storage, so anything that
    looks like a bearer token, a token assignment or a password is
    replaced with a [REDACTED_*] marker.
    """

    PATTERNS: list[tuple[Pattern, str]] = [
        (re.compile(r"(Bearer\s+)([A-Za-z0-9_\-\.]+)", re.IGNORECASE), r"\1[REDACTED_BEARER_TOKEN]"),
        (re.compile(r'(token["\']?\s*[:=]\s*["\']?)([A-Za-z0-9_\-\.:]{8,})(["\']?)', re.IGNORECASE), r"\1[REDACTED_TOKEN]\3"),
        (re.compile(r'(password["\']?\s*[:=]\s*["\']?)([^\s"\']+)(["\']?)', re.IGNORECASE), r"\1[REDACTED_PASSWORD]\3"),
    ]

    def _mask(self, text: str) -> str:
        for pattern, replacement in self.PATTERNS:
            text = pattern.sub(replacement, text)
        return text

    def filter(self, record: logging.LogRecord) -> bool:
        if record.msg:
            record.msg = self._mask(str(record.msg))

        if record.args and isinstance(record.args, tuple):
            record.args = tuple(
                self._mask(arg) if isinstance(arg, str) else arg
                for arg in record.args
            )

        return True


def setup_logging(level: str | None = None) -> None:
    """Configure the root logger once, at process start."""
    log_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    handler.addFilter(SecretMaskingFilter())

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)

    root_logger.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
