"""Per-request context utilities."""
from __future__ import annotations

from contextvars import ContextVar

request_id_ctx_var: ContextVar[str | None] = ContextVar("request_id", default=None)
user_id_ctx_var: ContextVar[str | None] = ContextVar("user_id", default=None)


def get_request_id() -> str | None:
    return request_id_ctx_var.get()


def get_user_id() -> str | None:
    return user_id_ctx_var.get()


def bind_user_id(user_id: object) -> None:
    """Attach the acting user to log records emitted for the rest of the request."""
    user_id_ctx_var.set(str(user_id) if user_id is not None else None)
