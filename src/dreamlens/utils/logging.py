"""Logging utilities for DreamLens.

Every analysis or image request gets a short correlation id so the log
lines of one request (selection, stage 1, the stage-2 fan-out) can be
grouped even when several requests interleave on the event loop.
"""

from __future__ import annotations

import logging
import time
import uuid
from contextvars import ContextVar, Token
from typing import Any

log = logging.getLogger("dreamlens")

_request_id: ContextVar[str | None] = ContextVar("dreamlens_request_id", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def current_request_id() -> str | None:
    """Return the correlation id of the running request, if any."""
    return _request_id.get()


class RequestContext:
    """Bind a correlation id and key=value context to a block of work.

    Nested contexts inherit the enclosing id unless one is given, so an
    adapter opened inside a service call logs under the same id.

    Example:
        async with RequestContext(task="text", provider="Claude") as ctx:
            ctx.info("Starting analysis")
            ...
            ctx.info("Done", symbols=4)
    """

    def __init__(
        self,
        request_id: str | None = None,
        *,
        logger: logging.Logger | None = None,
        **context: Any,
    ):
        self.request_id = request_id or current_request_id() or new_request_id()
        self.context = {k: v for k, v in context.items() if v is not None}
        self.logger = logger or log
        self.start_time = time.perf_counter()
        self._token: Token[str | None] | None = None

    def __enter__(self) -> RequestContext:
        self._token = _request_id.set(self.request_id)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._token is not None:
            _request_id.reset(self._token)
            self._token = None
        return False

    async def __aenter__(self) -> RequestContext:
        return self.__enter__()

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return self.__exit__(exc_type, exc_val, exc_tb)

    @property
    def elapsed_ms(self) -> float:
        return (time.perf_counter() - self.start_time) * 1000

    def bind(self, **extra: Any) -> RequestContext:
        """Return a child context sharing this id with extra fields."""
        return RequestContext(
            self.request_id, logger=self.logger, **{**self.context, **extra}
        )

    def format(self, msg: str, **extra: Any) -> str:
        fields = {**self.context, **extra}
        if not fields:
            return f"[{self.request_id}] {msg}"
        rendered = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"[{self.request_id}] {msg} | {rendered}"

    def debug(self, msg: str, **extra: Any) -> None:
        self.logger.debug(self.format(msg, **extra))

    def info(self, msg: str, **extra: Any) -> None:
        self.logger.info(self.format(msg, **extra))

    def warning(self, msg: str, **extra: Any) -> None:
        self.logger.warning(self.format(msg, **extra))

    def error(self, msg: str, **extra: Any) -> None:
        self.logger.error(self.format(msg, **extra))

    def exception(self, msg: str, **extra: Any) -> None:
        self.logger.exception(self.format(msg, **extra))
