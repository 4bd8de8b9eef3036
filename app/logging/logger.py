import logging
import sys
from typing import TextIO

LOGGER_NAME = "docrecovery"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


class _ContextFormatter(logging.Formatter):
    """Appends ``key=value`` context passed to ``Log`` calls after the message."""

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        line = super().formatMessage(record)
        context = getattr(record, "context", None)
        if context:
            line += " " + " ".join(f"{key}={value}" for key, value in context.items())
        return line


class Log:
    """Process-wide recovery log.

    Keyword arguments become trailing ``key=value`` fields, e.g.
    ``Log.error("Recovery failed", document_id="N-1", code="MISSING_KEY")``.
    Never pass decryption keys.
    """

    _logger: logging.Logger = logging.getLogger(LOGGER_NAME)
    _handler: logging.Handler | None = None

    @classmethod
    def configure(cls, log_level: str, stream: TextIO | None = None) -> None:
        """Set the level and attach a single handler (stdout unless given)."""
        cls._logger.setLevel(log_level.upper())
        if cls._handler is None:
            cls._handler = logging.StreamHandler(stream or sys.stdout)
            cls._handler.setFormatter(_ContextFormatter(LOG_FORMAT))
            cls._logger.addHandler(cls._handler)

    @classmethod
    def info(cls, message: str, **context: object) -> None:
        cls._logger.info(message, extra={"context": context})

    @classmethod
    def error(cls, message: str, **context: object) -> None:
        cls._logger.error(message, extra={"context": context})

    @classmethod
    def warning(cls, message: str, **context: object) -> None:
        cls._logger.warning(message, extra={"context": context})

    @classmethod
    def debug(cls, message: str, **context: object) -> None:
        cls._logger.debug(message, extra={"context": context})

    @classmethod
    def exception(cls, message: str, **context: object) -> None:
        """Log at ERROR with the active traceback; call from an ``except`` block."""
        cls._logger.exception(message, extra={"context": context})
