"""Structured reporting for failures that are logged instead of raised."""

from typing import Any, Protocol

from loguru import logger


class ErrorReporter(Protocol):
    """Receives errors swallowed by best-effort operations."""

    def report(self, error: BaseException, *, operation: str, **context: Any) -> None:
        ...


class LoguruErrorReporter:
    """Default reporter: one structured warning per swallowed error."""

    def report(self, error: BaseException, *, operation: str, **context: Any) -> None:
        logger.opt(exception=error).bind(operation=operation, **context).warning(
            "{} failed: {}", operation, error
        )
