"""A small routing layer over WSGI with request values and response helpers."""

from __future__ import annotations

import dataclasses
import json
import re
import signal
import types
import xml.etree.ElementTree as ET
from datetime import datetime
from typing import Any, Callable, Optional, Union, get_args, get_origin

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.utils import redirect as _werkzeug_redirect
from werkzeug.wrappers import Request, Response

from .webcontext import Middleware, Values, request_values, set_status_code, wrap_middleware

HTML_MIME = "text/html"
HXML_MIME = "application/vnd.hyperview+xml"
PATH_PARAMS_KEY = "hypercontacts.path_params"

Handler = Callable[[Request], Optional[Response]]
ShutdownFunc = Callable[[int], None]

_REST = "_rest"
_WILDCARD_REST = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\.\.\.\}")
_WILDCARD = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


def _to_rules(pattern: str) -> list[str]:
    """Turn a ``/a/{id}`` style pattern into werkzeug rule strings.

    A pattern ending in ``/`` matches every path below it, ``{$}`` anchors the
    end, ``{name...}`` captures the remainder and a trailing ``*`` segment
    matches any remainder.
    """
    exact = pattern.endswith("{$}")
    if exact:
        pattern = pattern[: -len("{$}")]
    if pattern.endswith("/*"):
        pattern = pattern[:-1] + f"<path:{_REST}>"
    pattern = _WILDCARD_REST.sub(r"<path:\1>", pattern)
    pattern = _WILDCARD.sub(r"<\1>", pattern)
    rules = [pattern]
    if pattern.endswith("/") and not exact:
        rules.append(pattern + f"<path:{_REST}>")
    return rules


def _warrants_shutdown(err: BaseException) -> bool:
    """Client disconnects are expected; anything else asks for a shutdown."""
    seen: set[int] = set()
    stack: list[BaseException] = [err]
    while stack:
        current = stack.pop()
        if id(current) in seen:
            continue
        seen.add(id(current))
        if isinstance(current, (BrokenPipeError, ConnectionResetError)):
            return False
        inner = getattr(current, "error", None)
        if isinstance(inner, BaseException):
            stack.append(inner)
        if current.__cause__ is not None:
            stack.append(current.__cause__)
    return True


class App:
    """Routes requests to handlers wrapped in the application middleware."""

    def __init__(self, shutdown: ShutdownFunc, *args: Middleware) -> None:
        self._shutdown = shutdown
        self._mw: list[Middleware] = list(args)
        self._map = Map()
        self._endpoints: dict[str, Handler] = {}
        self._patterns: set[tuple[str, str]] = set()

    def signal_shutdown(self) -> None:
        """Ask the owner of the app to shut down gracefully."""
        self._shutdown(signal.SIGTERM)

    def enable_cors(self, middleware: Middleware) -> None:
        """Add ``middleware`` to the chain and answer OPTIONS on every path."""
        self._mw.append(middleware)

        def preflight(request: Request) -> Response:
            return respond_json("OK", 200)

        self._register("OPTIONS", "/", wrap_middleware(self._mw, preflight))

    def handle_no_middleware(self, method: str, group: str, path: str, handler: Handler) -> None:
        """Register ``handler`` without any middleware."""
        self._register(method, _final_path(group, path), handler)

    def handle(self, method: str, group: str, path: str, handler: Handler, *args: Middleware) -> None:
        """Register ``handler`` wrapped in route middleware, then app middleware."""
        handler = wrap_middleware(args, handler)
        handler = wrap_middleware(self._mw, handler)
        self._register(method, _final_path(group, path), handler)

    def __call__(self, environ: dict, start_response: Callable) -> Any:
        adapter = self._map.bind_to_environ(environ)
        try:
            endpoint, params = adapter.match()
        except HTTPException as exc:
            return exc(environ, start_response)
        environ[PATH_PARAMS_KEY] = {k: v for k, v in params.items() if k != _REST}
        response = self._endpoints[endpoint](Request(environ))
        return response(environ, start_response)

    def _register(self, method: str, path: str, handler: Handler) -> None:
        key = (method.upper(), path)
        if key in self._patterns:
            raise ValueError(f"pattern {method} {path} is already registered")
        self._patterns.add(key)

        endpoint = str(len(self._endpoints))
        self._endpoints[endpoint] = self._serve(handler)
        for rule in _to_rules(path):
            self._map.add(Rule(rule, endpoint=endpoint, methods=[method.upper()]))

    def _serve(self, handler: Handler) -> Handler:
        def serve(request: Request) -> Response:
            with request_values(Values()):
                try:
                    response = handler(request)
                except Exception as exc:
                    if _warrants_shutdown(exc):
                        self.signal_shutdown()
                    return Response()
            return response if response is not None else Response()

        return serve


def _final_path(group: str, path: str) -> str:
    return f"/{group}{path}" if group else path


def param(request: Request, key: str) -> str:
    """Return the path parameter ``key``, or an empty string."""
    return request.environ.get(PATH_PARAMS_KEY, {}).get(key, "")


def query_string(request: Request, key: str) -> str:
    """Return the first query value for ``key``, or an empty string."""
    return request.args.get(key, "")


_TYPE_NAMES: dict[str, Any] = {
    "str": str,
    "int": int,
    "bool": bool,
    "float": float,
    "list": list,
    "dict": dict,
    "List": list,
    "Dict": dict,
    "Any": Any,
    "None": type(None),
}


def _resolve(annotation: Any) -> Any:
    """Resolve a field annotation that may be held as a string."""
    if not isinstance(annotation, str):
        return annotation
    text = annotation.strip()
    optional = re.fullmatch(r"(?:typing\.)?Optional\[(.+)\]", text)
    if optional:
        return Optional[_resolve(optional.group(1))]
    generic = re.fullmatch(r"(?:typing\.)?(list|dict|List|Dict)\[.*\]", text)
    if generic:
        return _TYPE_NAMES[generic.group(1)]
    parts = [part.strip() for part in text.split("|")]
    if len(parts) > 1:
        others = [part for part in parts if part != "None"]
        if len(others) == 1:
            inner = _resolve(others[0])
            return Optional[inner] if len(others) < len(parts) else inner
        return Any
    return _TYPE_NAMES.get(text, Any)


def _zero(tp: Any) -> Any:
    origin = get_origin(tp)
    if origin in (Union, types.UnionType) and type(None) in get_args(tp):
        return None
    if tp is str:
        return ""
    if tp is bool:
        return False
    if tp is int:
        return 0
    if tp is float:
        return 0.0
    if tp in (list, dict) or origin in (list, dict):
        return (origin or tp)()
    return None


def _coerce(name: str, tp: Any, value: Any) -> Any:
    if value is None:
        return _zero(tp)
    origin = get_origin(tp)
    if origin in (Union, types.UnionType):
        inner = [a for a in get_args(tp) if a is not type(None)]
        return _coerce(name, inner[0], value) if len(inner) == 1 else value
    if tp is str and not isinstance(value, str):
        raise TypeError(f"{name}: expected a string")
    if tp is bool and not isinstance(value, bool):
        raise TypeError(f"{name}: expected a boolean")
    if tp is int and (isinstance(value, bool) or not isinstance(value, int)):
        raise TypeError(f"{name}: expected an integer")
    if tp is float:
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise TypeError(f"{name}: expected a number")
        return float(value)
    return value


def _build(model_type: type, payload: dict[str, Any]) -> Any:
    kwargs: dict[str, Any] = {}
    for f in dataclasses.fields(model_type):
        if not f.init:
            continue
        name = f.metadata.get("json", f.name).split(",", 1)[0]
        tp = _resolve(f.type)
        has_default = f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING
        if name != "-" and name in payload:
            kwargs[f.name] = _coerce(name, tp, payload[name])
        elif not has_default:
            kwargs[f.name] = _zero(tp)
    return model_type(**kwargs)


def decode(request: Request, model_type: type) -> Any:
    """Read a JSON object from the body into a dataclass and validate it.

    Unknown members are ignored. Raises ValueError when the body cannot be
    decoded or when the model's ``validate`` method fails.
    """
    if not dataclasses.is_dataclass(model_type) or not isinstance(model_type, type):
        raise TypeError(f"decode needs a dataclass type, got {model_type!r}")
    try:
        payload = json.loads(request.get_data(cache=True))
        if not isinstance(payload, dict):
            raise TypeError("expected a JSON object")
        model = _build(model_type, payload)
    except (ValueError, TypeError) as exc:
        raise ValueError(f"unable to decode payload: {exc}") from exc

    validator = getattr(model, "validate", None)
    if callable(validator):
        try:
            validator()
        except Exception as exc:
            raise ValueError(f"unable to validate payload: {exc}") from exc
    return model


def render_html(html: str, status_code: int) -> Response:
    """Return an HTML response with the given status."""
    set_status_code(status_code)
    return Response(html, status=status_code, mimetype=HTML_MIME)


def render_xml(data: Union[str, bytes, ET.Element], status_code: int) -> Response:
    """Return a Hyperview XML response.

    ``status_code`` is recorded for request logging only; the HTTP status
    sent stays 200.
    """
    set_status_code(status_code)
    if isinstance(data, ET.Element):
        body: Union[str, bytes] = ET.tostring(data, encoding="unicode")
    elif isinstance(data, (str, bytes)):
        body = data
    else:
        raise TypeError(f"cannot render {type(data).__name__} as XML")
    response = Response(body)
    response.headers["Content-Type"] = HXML_MIME
    return response


def _json_default(obj: Any) -> Any:
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, datetime):
        return obj.isoformat()
    raise TypeError(f"{type(obj).__name__} is not JSON serializable")


def respond_json(data: Any, status_code: int) -> Response:
    """Return ``data`` as a JSON response; 204 carries no body."""
    set_status_code(status_code)
    if status_code == 204:
        return Response(status=204)
    body = json.dumps(data, default=_json_default, separators=(",", ":"), ensure_ascii=False)
    return Response(body, status=status_code, mimetype="application/json")


def redirect(request: Request, path: str) -> Response:
    """Redirect with 303 See Other, keeping the request's query string."""
    raw_query = request.environ.get("QUERY_STRING", "")
    if raw_query:
        path += "?" + raw_query
    return _werkzeug_redirect(path, code=303)