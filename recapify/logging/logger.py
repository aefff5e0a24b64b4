import contextvars
import logging
import sys
from collections.abc import Generator
from contextlib import contextmanager

_current_document: contextvars.ContextVar[str] = contextvars.ContextVar(
    "recapify_document", default="-"
)


class _DocumentFilter(logging.Filter):
    """Stamps each record with the document the current thread is working on."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.document = _current_document.get()
        return True


class Log:
    """Centralized logging; every line carries the thread and the document in scope."""

    _logger: logging.Logger = logging.getLogger("recapify")
    _logger.addFilter(_DocumentFilter())

    @classmethod
    def configure(cls, log_level: str) -> None:
        """Configure the logger with the specified level and stdout handler."""
        cls._logger.setLevel(log_level.upper())
        if not cls._logger.handlers:
            handler = logging.StreamHandler(sys.stdout)
            handler.setFormatter(
                logging.Formatter(
                    "%(asctime)s [%(levelname)s] %(threadName)s doc=%(document)s %(message)s"
                )
            )
            cls._logger.addHandler(handler)

    @classmethod
    @contextmanager
    def document_scope(cls, document_id: str) -> Generator[None, None, None]:
        """Tag every record logged inside the block with `document_id`."""
        token = _current_document.set(document_id)
        try:
            yield
        finally:
            _current_document.reset(token)

    @classmethod
    def info(cls, message: str, **kwargs: object) -> None:
        cls._logger.info(message, extra=kwargs)

    @classmethod
    def error(cls, message: str, **kwargs: object) -> None:
        cls._logger.error(message, extra=kwargs)

    @classmethod
    def warning(cls, message: str, **kwargs: object) -> None:
        cls._logger.warning(message, extra=kwargs)

    @classmethod
    def debug(cls, message: str, **kwargs: object) -> None:
        cls._logger.debug(message, extra=kwargs)
