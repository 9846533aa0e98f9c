"""Starts the contacts web service."""

from __future__ import annotations

import argparse
import os
import queue
import signal
import sys
import threading
from typing import Any, Optional, Sequence

from werkzeug.serving import make_server

from .contacts import ContactsCore
from .dataapi import routes as dataapi_routes
from .logger import Level, Logger
from .mux import WebAppConfig, web_app, with_static_fs
from .routes import routes as hypermedia_routes
from .session import SessionStore
from .web import App
from .webcontext import get_trace_id

BUILD = "test"
SERVICE_NAME = "HTMX"
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 42069
SHUTDOWN_TIMEOUT = 5.0

DB_PATH_ENV = "HYPERCONTACTS_DB"
DEFAULT_DB_PATH = "business/contacts/contacts.json"
SESSION_KEY_ENV = "HYPERCONTACTS_SESSION_KEY"
STATIC_DIR = "app/hypermedia/web/static"


def _db_path() -> str:
    return os.environ.get(DB_PATH_ENV, DEFAULT_DB_PATH)


def add_routes(app: App, config: Any) -> None:
    """Load the contacts store and register every route group on ``app``."""
    core = ContactsCore(config.log, _db_path())
    hypermedia_routes(app, config.log, core)
    dataapi_routes(app, config.log, core)


def _install_signal_handlers(events: "queue.Queue[tuple[str, Any]]") -> dict[int, Any]:
    if threading.current_thread() is not threading.main_thread():
        return {}

    def forward(signum: int, frame: Any) -> None:
        events.put(("signal", signum))

    previous = {}
    for sig in (signal.SIGINT, signal.SIGTERM):
        previous[sig] = signal.signal(sig, forward)
    return previous


def _restore_signal_handlers(previous: dict[int, Any]) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


def _signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)


def run(log: Logger, config: WebAppConfig, host: str, port: int) -> None:
    """Serve until a shutdown signal arrives; raise RuntimeError on server failure."""
    events: "queue.Queue[tuple[str, Any]]" = queue.Queue()
    previous = _install_signal_handlers(events)
    try:
        options = [with_static_fs(STATIC_DIR)] if os.path.isdir(STATIC_DIR) else []
        app = web_app(config, add_routes, *options)

        try:
            server = make_server(host, port, app, threaded=True)
        except OSError as exc:
            raise RuntimeError(f"server error: {exc}") from exc

        def serve() -> None:
            try:
                server.serve_forever()
            except Exception as exc:
                events.put(("error", exc))

        log.info("startup", status="api router started", host=f"{host}:{port}")
        threading.Thread(target=serve, name="http-server", daemon=True).start()

        while True:
            try:
                kind, value = events.get(timeout=0.2)
            except queue.Empty:
                continue
            break

        if kind == "error":
            server.server_close()
            raise RuntimeError(f"server error: {value}") from value

        name = _signal_name(value)
        log.info("shutdown", status="shutdown started", signal=name)
        try:
            stopper = threading.Thread(target=server.shutdown, name="http-shutdown", daemon=True)
            stopper.start()
            stopper.join(SHUTDOWN_TIMEOUT)
            server.server_close()
            if stopper.is_alive():
                raise RuntimeError("could not stop server gracefully")
        finally:
            log.info("shutdown", status="shutdown complete", signal=name)
    finally:
        _restore_signal_handlers(previous)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the contacts service; return the process exit status."""
    parser = argparse.ArgumentParser(description="Serve the contacts application.")
    parser.add_argument("--host", default=DEFAULT_HOST, help="address to listen on")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="port to listen on")
    args = parser.parse_args(argv)

    log = Logger(sys.stdout, Level.INFO, SERVICE_NAME, get_trace_id)

    try:
        config = WebAppConfig(
            build=BUILD,
            shutdown=signal.raise_signal,
            log=log,
            session=SessionStore(os.environ.get(SESSION_KEY_ENV, "")),
        )
        run(log, config, args.host, args.port)
    except Exception as exc:
        log.error("startup", error=str(exc))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())