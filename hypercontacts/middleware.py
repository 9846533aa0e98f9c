"""Middleware for CORS headers, error responses, request logging and crashes."""

from __future__ import annotations

import traceback
from datetime import datetime, timezone
from http import HTTPStatus
from typing import Callable, Optional, Type, TypeVar

from werkzeug.wrappers import Request, Response

from .logger import Logger
from .response import ErrorDocument, RequestError
from .validate import FieldErrors
from .web import Handler, respond_json
from .webcontext import ShutdownError, get_values

E = TypeVar("E", bound=BaseException)
Middleware = Callable[[Handler], Handler]


def _find(err: BaseException, cls: Type[E]) -> Optional[E]:
    """Search ``err`` and everything it wraps for an instance of ``cls``."""
    seen: set[int] = set()
    stack: list[BaseException] = [err]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, cls):
            return current
        if current.__cause__ is not None:
            stack.append(current.__cause__)
        inner = getattr(current, "error", None)
        if isinstance(inner, BaseException):
            stack.append(inner)
    return None


def cors_middleware(origin: str) -> Middleware:
    """Add the CORS response headers for ``origin``."""

    def middleware(handler: Handler) -> Handler:
        def wrapped(request: Request) -> Optional[Response]:
            response = handler(request)
            if response is None:
                response = Response()
            response.headers["Access-Control-Allow-Origin"] = origin
            response.headers["Access-Control-Allow-Methods"] = "POST, GET, OPTIONS, PUT DELETE"
            response.headers["Access-Control-Allow-Headers"] = (
                "Accept, Content-Type, Content-Length, Accept-Encoding, X-CSRF-Token, Authorization"
            )
            response.headers["Access-Control-Max-Age"] = "86400"
            return response

        return wrapped

    return middleware


def errors_middleware(log: Logger) -> Middleware:
    """Turn raised errors into JSON error documents and log them."""

    def middleware(handler: Handler) -> Handler:
        def wrapped(request: Request) -> Optional[Response]:
            try:
                return handler(request)
            except Exception as err:
                log.error("message", err=str(err))

                req_err = _find(err, RequestError)
                if req_err is not None:
                    inner = req_err.error
                    field_errors = _find(inner, FieldErrors) if isinstance(inner, BaseException) else None
                    if field_errors is not None:
                        doc = ErrorDocument("data validation error", field_errors.fields())
                    else:
                        doc = ErrorDocument(str(req_err))
                    status = req_err.status
                else:
                    status = HTTPStatus.INTERNAL_SERVER_ERROR
                    doc = ErrorDocument(status.phrase)

                return respond_json(doc.to_dict(), int(status))

        return wrapped

    return middleware


def _remote_addr(request: Request) -> str:
    addr = request.remote_addr or ""
    port = request.environ.get("REMOTE_PORT")
    return f"{addr}:{port}" if port else addr


def logging_middleware(log: Logger) -> Middleware:
    """Log the start and completion of each request."""

    def middleware(handler: Handler) -> Handler:
        def wrapped(request: Request) -> Optional[Response]:
            values = get_values()
            path = request.path
            raw_query = request.environ.get("QUERY_STRING", "")
            if raw_query:
                path = f"{path}?{raw_query}"
            remote = _remote_addr(request)

            log.info("request started", method=request.method, path=path, remoteaddr=remote)
            try:
                return handler(request)
            finally:
                started = values.now
                now = datetime.now(started.tzinfo) if started.tzinfo else datetime.now()
                log.info(
                    "request completed",
                    method=request.method,
                    path=path,
                    remoteaddr=remote,
                    statusCode=values.status_code,
                    since=str(now - started),
                )

        return wrapped

    return middleware


_EXPECTED = (RequestError, FieldErrors, ShutdownError)


def panics_middleware() -> Middleware:
    """Convert unexpected exceptions into an error carrying the stack trace."""

    def middleware(handler: Handler) -> Handler:
        def wrapped(request: Request) -> Optional[Response]:
            try:
                return handler(request)
            except _EXPECTED:
                raise
            except Exception as exc:
                trace = traceback.format_exc()
                raise RuntimeError(f"PANIC [{exc}] TRACE[{trace}]") from None

        return wrapped

    return middleware


__all__ = [
    "cors_middleware",
    "errors_middleware",
    "logging_middleware",
    "panics_middleware",
    "datetime",
    "timezone",
]