"""The JSON data API for contacts."""

from __future__ import annotations

import re
import sys
from dataclasses import dataclass, field
from typing import Any, Optional

from werkzeug.wrappers import Request, Response

from .contacts import Contact, ContactsCore
from .logger import Logger
from .response import RequestError
from .validate import check
from .web import App, decode, param, query_string, respond_json

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    return int(text)


@dataclass(frozen=True)
class ContactAPI:
    """A contact as the API shows it."""

    id: int
    first_name: str
    last_name: str
    phone: str
    email: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first": self.first_name,
            "last": self.last_name,
            "phone": self.phone,
            "email": self.email,
        }


@dataclass
class NewContact:
    """The body of a create request."""

    first_name: str = field(default="", metadata={"json": "first_name", "validate": "required"})
    last_name: str = field(default="", metadata={"json": "last_name", "validate": "required"})
    phone: str = field(default="", metadata={"json": "phone", "validate": "required"})
    email: str = field(default="", metadata={"json": "email", "validate": "required,email"})

    def validate(self) -> None:
        check(self)

    def to_db(self) -> Contact:
        return Contact(
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            email=self.email,
        )


@dataclass
class UpdateContact:
    """The body of an update request; absent fields stay unchanged."""

    first_name: Optional[str] = field(default=None, metadata={"json": "first_name"})
    last_name: Optional[str] = field(default=None, metadata={"json": "last_name"})
    phone: Optional[str] = field(default=None, metadata={"json": "phone"})
    email: Optional[str] = field(default=None, metadata={"json": "email"})

    def validate(self) -> None:
        check(self)


def _contact_to_api(contact: Contact) -> ContactAPI:
    return ContactAPI(
        id=contact.id,
        first_name=contact.first_name,
        last_name=contact.last_name,
        phone=contact.phone,
        email=contact.email,
    )


def new_response(contacts: list[Contact], total: int, page: int, rows: int) -> dict[str, Any]:
    """Build the body of a query response."""
    pages = total // rows
    if total % rows != 0:
        pages += 1
    return {
        "contacts": [_contact_to_api(c) for c in contacts],
        "page": page,
        "pages": pages,
        "total": total,
    }


class ContactsHandlers:
    """Handlers for the contacts API."""

    def __init__(self, log: Logger, core: ContactsCore) -> None:
        self._log = log
        self._core = core

    def query(self, request: Request) -> Response:
        query = query_string(request, "q")

        page = 1
        page_str = query_string(request, "page")
        if page_str:
            try:
                page = _atoi(page_str)
            except ValueError:
                pass

        rows = sys.maxsize
        rows_str = query_string(request, "rows")
        if rows_str:
            try:
                rows = _atoi(rows_str)
            except ValueError:
                pass

        contacts = self._core.query(query, page, rows)
        return respond_json(new_response(contacts, self._core.count(), page, rows), 200)

    def create(self, request: Request) -> Response:
        try:
            new_contact = decode(request, NewContact)
        except ValueError as exc:
            raise RequestError(exc, 400) from exc

        created = self._core.create(new_contact.to_db())
        return respond_json(_contact_to_api(created), 201)

    def query_by_id(self, request: Request) -> Response:
        try:
            contact_id = _atoi(param(request, "id"))
        except ValueError as exc:
            raise RequestError(exc, 400) from exc

        try:
            contact = self._core.query_by_id(contact_id)
        except LookupError as exc:
            raise RequestError(exc, 500) from exc

        return respond_json(_contact_to_api(contact), 200)

    def update(self, request: Request) -> Response:
        try:
            changes = decode(request, UpdateContact)
        except ValueError as exc:
            raise RequestError(exc, 400) from exc

        contact = self._core.query_by_id(_atoi(param(request, "id")))

        updates = {
            name: value
            for name in ("first_name", "last_name", "email", "phone")
            if (value := getattr(changes, name)) is not None
        }
        contact = Contact(**{**contact.__dict__, **updates})

        try:
            self._core.update(contact)
        except LookupError as exc:
            raise RequestError(exc, 500) from exc

        return respond_json(_contact_to_api(contact), 200)

    def delete(self, request: Request) -> Response:
        contact_id = _atoi(param(request, "id"))
        try:
            self._core.delete(contact_id)
        except LookupError as exc:
            raise RequestError(exc, 500) from exc

        return respond_json(None, 204)


def routes(app: App, log: Logger, core: ContactsCore) -> None:
    """Register the version 1 contacts API on ``app``."""
    v1 = "api/v1"
    handlers = ContactsHandlers(log, core)
    app.handle("GET", v1, "/contacts", handlers.query)
    app.handle("POST", v1, "/contacts", handlers.create)
    app.handle("GET", v1, "/contacts/{id}", handlers.query_by_id)
    app.handle("PUT", v1, "/contacts/{id}", handlers.update)
    app.handle("DELETE", v1, "/contacts/{id}", handlers.delete)