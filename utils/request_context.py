from __future__ import annotations

from contextvars import ContextVar, Token

_request_id_var: ContextVar[str] = ContextVar("primoboost_request_id", default="")


def bind_request_id(rid: str) -> Token:
    return _request_id_var.set(rid or "")


def get_request_id() -> str:
    return _request_id_var.get() or ""


def reset_request_id(token: Token) -> None:
    _request_id_var.reset(token)
