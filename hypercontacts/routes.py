"""Routes of the hypermedia front ends."""

from __future__ import annotations

from werkzeug.wrappers import Request, Response

from .contacts import ContactsCore
from .logger import Logger
from .mobile.handlers import MobileHandlers
from .response import RequestError
from .web import HTML_MIME, HXML_MIME, App, redirect


def root_redirect(request: Request) -> Response:
    """Send Hyperview clients to the mobile app and browsers to the web app."""
    accept = request.headers.get("Accept", "")
    if HXML_MIME in accept:
        return redirect(request, "/mobile/contacts")
    if HTML_MIME in accept:
        return redirect(request, "/contacts")
    raise RequestError(ValueError("invalid accept headers"), 400)


def routes(app: App, log: Logger, core: ContactsCore) -> None:
    """Register the root redirect and the mobile routes on ``app``."""
    app.handle("GET", "", "/", root_redirect)
    _mobile_routes(app, log, core)


def _mobile_routes(app: App, log: Logger, core: ContactsCore) -> None:
    mobile = "mobile"
    handlers = MobileHandlers(log, core)
    app.handle("GET", mobile, "/contacts", handlers.query)
    app.handle("GET", mobile, "/contacts/new", handlers.create_form)
    app.handle("POST", mobile, "/contacts/new", handlers.create)
    app.handle("GET", mobile, "/contacts/{id}", handlers.query_by_id)
    app.handle("GET", mobile, "/contacts/{id}/edit", handlers.update_form)
    app.handle("POST", mobile, "/contacts/{id}/edit", handlers.update)
    # Hyperview does not send DELETE requests.
    app.handle("POST", mobile, "/contacts/{id}/delete", handlers.delete)
    app.handle("GET", mobile, "/contacts/{id}/email", handlers.validate_email)