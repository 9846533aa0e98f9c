"""Request handlers for the Hyperview mobile contacts screens."""

from __future__ import annotations

import re

from werkzeug.wrappers import Request, Response

from ..contacts import Contact, ContactsCore
from ..logger import Logger
from ..validate import FieldErrors, check
from ..web import param, query_string, render_xml
from .hxml import to_xml
from .views import (
    ContactErrors,
    ContactMobile,
    UpdateContact,
    check_email_err,
    deleted,
    edit,
    form_fields,
    index,
    new_form,
    rows,
    show,
)

DEFAULT_ROWS = 20

_INT_RE = re.compile(r"[+-]?[0-9]+")
_TRUE = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid syntax: {text!r}")
    return int(text)


def _parse_bool(text: str) -> bool:
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"invalid syntax: {text!r}")


def _form_value(request: Request, key: str) -> str:
    """Return the body form value for ``key``, else the query value, else ''."""
    if key in request.form:
        return request.form[key]
    return request.args.get(key, "")


def _field_errors(exc: FieldErrors) -> ContactErrors:
    fields = exc.fields()
    return ContactErrors(
        first_name=fields.get("first_name", ""),
        last_name=fields.get("last_name", ""),
        phone=fields.get("phone", ""),
        email=fields.get("email", ""),
    )


def contact_to_mobile(contact: Contact) -> ContactMobile:
    """Return the mobile view of a stored contact."""
    return ContactMobile(
        id=contact.id,
        first_name=contact.first_name,
        last_name=contact.last_name,
        phone=contact.phone,
        email=contact.email,
    )


class MobileHandlers:
    """Handlers behind the /mobile routes."""

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

        rows_only = False
        rows_only_str = query_string(request, "rows_only")
        if rows_only_str:
            try:
                rows_only = _parse_bool(rows_only_str)
            except ValueError:
                pass

        found = [contact_to_mobile(c) for c in self._core.query(query, page, DEFAULT_ROWS)]

        if rows_only:
            return render_xml(to_xml(rows(found, page)), 200)
        return render_xml(to_xml(index(found, page)), 200)

    def create_form(self, request: Request) -> Response:
        return render_xml(to_xml(new_form(UpdateContact())), 200)

    def create(self, request: Request) -> Response:
        contact = UpdateContact(
            first_name=_form_value(request, "first_name"),
            last_name=_form_value(request, "last_name"),
            phone=_form_value(request, "phone"),
            email=_form_value(request, "email"),
        )

        try:
            check(contact)
        except FieldErrors as exc:
            contact.field_errs = _field_errors(exc)
            return render_xml(to_xml(form_fields(contact, False)), 400)

        try:
            created = self._core.create(contact.to_db())
        except LookupError as exc:
            contact.internal_errors = str(exc)
            return render_xml(to_xml(form_fields(contact, False)), 500)

        contact.id = created.id
        return render_xml(to_xml(form_fields(contact, True, "Contact added")), 201)

    def query_by_id(self, request: Request) -> Response:
        contact = self._core.query_by_id(_atoi(param(request, "id")))
        return render_xml(to_xml(show(contact_to_mobile(contact))), 200)

    def update_form(self, request: Request) -> Response:
        contact = self._core.query_by_id(_atoi(param(request, "id")))
        form = UpdateContact(
            id=contact.id,
            first_name=contact.first_name,
            last_name=contact.last_name,
            phone=contact.phone,
            email=contact.email,
        )
        return render_xml(to_xml(edit(form)), 200)

    def update(self, request: Request) -> Response:
        contact = self._core.query_by_id(_atoi(param(request, "id")))

        form = UpdateContact(
            id=contact.id,
            first_name=_form_value(request, "first_name"),
            last_name=_form_value(request, "last_name"),
            phone=_form_value(request, "phone"),
            email=_form_value(request, "email"),
        )

        try:
            check(form)
        except FieldErrors as exc:
            form.field_errs = _field_errors(exc)
            return render_xml(to_xml(form_fields(form, False)), 200)

        try:
            self._core.update(form.to_db())
        except LookupError as exc:
            form.internal_errors = str(exc)
            return render_xml(to_xml(form_fields(form, False)), 500)

        return render_xml(to_xml(form_fields(form, True, "Contact updated")), 200)

    def validate_email(self, request: Request) -> Response:
        contact_id = _atoi(param(request, "id"))
        email = _form_value(request, "email")

        form = UpdateContact(id=contact_id, email=email)

        if not self._core.unique_email(contact_id, email.lower()):
            form.field_errs = ContactErrors(email="This email is taken")
            return render_xml(to_xml(check_email_err(form)), 400)

        # The text element is still needed, carrying an empty error.
        return render_xml(to_xml(check_email_err(form)), 200)

    def delete(self, request: Request) -> Response:
        self._core.delete(_atoi(param(request, "id")))
        return render_xml(to_xml(deleted("Contact deleted")), 204)