# -*- coding: utf-8 -*-
"""
Per-call request tracking.
"""
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

REQUEST_ID_HEADER = "X-Request-ID"

# Context variable for request ID (accessible across async calls)
request_id_ctx: ContextVar[str | None] = ContextVar("request_id", default=None)


def get_request_id() -> str | None:
    """Get current request ID from context."""
    return request_id_ctx.get()


@contextmanager
def request_scope(request_id: str | None = None) -> Iterator[str]:
    """Bind a request ID for the duration of one logical screenshot call."""
    request_id = request_id or str(uuid.uuid4())
    token = request_id_ctx.set(request_id)
    try:
        yield request_id
    finally:
        request_id_ctx.reset(token)
