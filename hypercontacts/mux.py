"""Assembly of the web application with its middleware and routes."""

from __future__ import annotations

import html
import os
from dataclasses import dataclass
from typing import Any, Callable, Optional
from urllib.parse import quote

from werkzeug.exceptions import NotFound
from werkzeug.security import safe_join
from werkzeug.utils import redirect as _werkzeug_redirect
from werkzeug.utils import send_from_directory
from werkzeug.wrappers import Request, Response

from .logger import Logger
from .middleware import cors_middleware, errors_middleware, logging_middleware, panics_middleware
from .session import SessionStore
from .web import App, Handler, ShutdownFunc


@dataclass
class WebAppConfig:
    """Systems that handlers need."""

    build: str
    shutdown: ShutdownFunc
    log: Logger
    session: Optional[SessionStore] = None


@dataclass
class Options:
    """Optional features of the web application."""

    cors_origin: str = ""
    static_fs: Optional[Handler] = None


Option = Callable[[Options], None]
RouteAdder = Callable[[App, WebAppConfig], Any]


def with_cors(origin: str) -> Option:
    """Enable CORS for ``origin``."""

    def apply(opts: Options) -> None:
        opts.cors_origin = origin

    return apply


def _listing(path: str, directory: str) -> Response:
    lines = ['<!doctype html>\n<meta name="viewport" content="width=device-width">\n<pre>\n']
    for entry in sorted(os.scandir(directory), key=lambda e: e.name):
        name = entry.name + ("/" if entry.is_dir() else "")
        lines.append(f'<a href="{html.escape(quote(name))}">{html.escape(name)}</a>\n')
    lines.append("</pre>\n")
    return Response("".join(lines), mimetype="text/html")


def with_static_fs(directory: str) -> Option:
    """Serve files below ``directory``; the request path is the file path."""
    root = os.fspath(directory)

    def serve(request: Request) -> Response:
        relative = request.path.lstrip("/")
        target = safe_join(root, relative) if relative else root
        if target is None:
            return NotFound().get_response(request.environ)
        if os.path.isdir(target):
            if not request.path.endswith("/"):
                return _werkzeug_redirect(request.path + "/", code=301)
            if os.path.isfile(os.path.join(target, "index.html")):
                relative = relative + "index.html"
            else:
                return _listing(request.path, target)
        try:
            return send_from_directory(root, relative, request.environ)
        except NotFound as exc:
            return exc.get_response(request.environ)

    def apply(opts: Options) -> None:
        opts.static_fs = serve

    return apply


def web_app(config: WebAppConfig, routes: RouteAdder, *args: Option) -> App:
    """Build the application with logging, error and crash middleware."""
    opts = Options()
    for option in args:
        option(opts)

    app = App(
        config.shutdown,
        logging_middleware(config.log),
        errors_middleware(config.log),
        panics_middleware(),
    )

    if opts.cors_origin:
        app.enable_cors(cors_middleware(opts.cors_origin))

    if opts.static_fs is not None:
        app.handle_no_middleware("GET", "", "/static/*", opts.static_fs)

    routes(app, config)
    return app