"""Hyperview screens and fragments for browsing and editing contacts."""

from __future__ import annotations

from dataclasses import dataclass, field

from ..contacts import Contact
from .hxml import (
    NAMESPACE,
    NAMESPACE_ALERT,
    NAMESPACE_COMMS,
    NAMESPACE_SWIPE,
    AlertOption,
    Behavior,
    BehaviorAlertOpts,
    Doc,
    Form,
    Header,
    Item,
    Items,
    List,
    Spinner,
    SwipeButton,
    SwipeMainParams,
    SwipeRow,
    SwipeRowParams,
    Text,
    TextField,
    View,
)
from .layout import layout, show_toasts

PAGE_SIZE_WITH_MORE = 10


@dataclass(frozen=True)
class ContactMobile:
    """A contact as the mobile screens show it."""

    id: int = 0
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""


@dataclass
class ContactErrors:
    """Validation messages for each editable field."""

    first_name: str = field(default="", metadata={"json": "first"})
    last_name: str = field(default="", metadata={"json": "last"})
    phone: str = field(default="", metadata={"json": "phone"})
    email: str = field(default="", metadata={"json": "email"})


@dataclass
class UpdateContact:
    """Form values of a contact being created or edited, with their errors."""

    id: int = field(default=0, metadata={"json": "id"})
    first_name: str = field(default="", metadata={"json": "first_name", "validate": "required"})
    last_name: str = field(default="", metadata={"json": "last_name", "validate": "required"})
    phone: str = field(default="", metadata={"json": "phone", "validate": "required"})
    email: str = field(default="", metadata={"json": "email", "validate": "required,email"})
    field_errs: ContactErrors = field(default_factory=ContactErrors, metadata={"json": "field_errors"})
    internal_errors: str = field(default="", metadata={"json": "internal_errors"})

    def to_db(self) -> Contact:
        """Return the stored form of these values."""
        return Contact(
            id=self.id,
            first_name=self.first_name,
            last_name=self.last_name,
            phone=self.phone,
            email=self.email,
        )


def _delete_alert(first_name: str, target: str, contact_id: int) -> BehaviorAlertOpts:
    return BehaviorAlertOpts(
        behavior=Behavior(
            xmlns_alert=NAMESPACE_ALERT,
            trigger="press",
            action="alert",
            alert_title="Confirm delete",
            alert_message=f"Are you sure you want to delete {first_name}?",
        ),
        alert_options=[
            AlertOption(
                label="Confirm",
                behavior=Behavior(
                    trigger="press",
                    action="append",
                    target=target,
                    href=f"/mobile/contacts/{contact_id}/delete",
                    verb="post",
                ),
            ),
            AlertOption(label="Cancel"),
        ],
    )


def deleted(toast_msg: str) -> View:
    """Fragment that shows a toast, announces the change and goes back."""
    events = [
        Behavior(trigger="load", action="dispatch-event", event_name="contact-updated"),
        Behavior(trigger="load", action="back"),
    ]
    return View(xmlns=NAMESPACE, behaviors=show_toasts(toast_msg) + events)


def edit(contact: UpdateContact) -> Doc:
    """The screen for editing an existing contact."""
    header = Header(
        style="buttons-row",
        texts=[
            Text(
                style="header-button",
                content="Back",
                behavior=Behavior(trigger="press", action="back"),
            )
        ],
    )

    form = Form(
        views=[
            View(id="form-fields", views=[form_fields(contact, False)]),
            View(
                style="buttons-row-bottom",
                views=[
                    View(
                        behaviors=[
                            Behavior(
                                trigger="press",
                                action="replace-inner",
                                target="form-fields",
                                href=f"/mobile/contacts/{contact.id}/edit",
                                verb="post",
                            )
                        ],
                        texts=[Text(style="bottom-button-label", content="Save")],
                    ),
                    View(
                        behaviors=[
                            Behavior(
                                trigger="press",
                                action="reload",
                                href=f"/mobile/contacts/{contact.id}",
                            )
                        ],
                        texts=[Text(style="bottom-button-label", content="Cancel")],
                    ),
                    View(
                        behavior_with_alert_opts=_delete_alert(contact.first_name, "form-fields", contact.id),
                        texts=[Text(style="bottom-button-label button-delete", content="Delete")],
                    ),
                ],
            ),
        ]
    )

    doc = layout()
    doc.screen.body.header = header
    doc.screen.body.view.form = form
    return doc


def form_fields(contact: UpdateContact, saved: bool, *args: str) -> View:
    """The editable fields of a contact; once saved, toasts and a reload follow."""
    first = View(
        style="edit-field",
        text_field=TextField(
            style="edit-field-text", name="first_name", placeholder="First name", value=contact.first_name
        ),
    )
    last = View(
        style="edit-field",
        text_field=TextField(
            style="edit-field-text", name="last_name", placeholder="Last name", value=contact.last_name
        ),
    )
    email = View(
        xmlns=NAMESPACE,
        style="edit-field",
        text_field=TextField(
            style="edit-field-text",
            name="email",
            placeholder="Email",
            value=contact.email,
            debounce="200",
            behavior=Behavior(
                trigger="change",
                action="replace",
                target="edit-email-error",
                href=f"/mobile/contacts/{contact.id}/email",
                verb="get",
            ),
        ),
        texts=[check_email_err(contact)],
    )
    phone = View(
        style="edit-field",
        text_field=TextField(style="edit-field-text", name="phone", placeholder="Phone", value=contact.phone),
    )

    errs = contact.field_errs
    if errs.first_name:
        first.texts.append(Text(style="edit-field-error", content=errs.first_name))
    if errs.last_name:
        last.texts.append(Text(style="edit-field-error", content=errs.last_name))
    if errs.phone:
        phone.texts.append(Text(id="edit-email-error", style="edit-field-error", content=errs.phone))

    view = View(xmlns=NAMESPACE, style="edit-group", views=[first, last, email, phone])

    # Hyperview cannot follow server-directed redirects.
    if saved:
        events = [
            Behavior(trigger="load", action="dispatch-event", event_name="contact-updated"),
            Behavior(trigger="load", action="reload", href=f"/mobile/contacts/{contact.id}"),
        ]
        view.behaviors = show_toasts(*args) + events

    return view


def check_email_err(contact: UpdateContact) -> Text:
    """The email error text, hidden when there is no error."""
    message = contact.field_errs.email
    return Text(
        xmlns=NAMESPACE,
        id="edit-email-error",
        style="edit-field-error" if message else "hide",
        content=message,
    )


def index(contacts: list[ContactMobile], page: int) -> Doc:
    """The searchable contacts list screen."""
    header = Header(
        style="buttons-row",
        texts=[
            Text(style="header-title", content="Contacts.app"),
            Text(
                style="header-button",
                content="Add",
                behavior=Behavior(trigger="press", action="new", href="/mobile/contacts/new"),
            ),
        ],
    )

    rows_href = "/mobile/contacts?rows_only=true"
    form = Form(
        behaviors=[
            Behavior(
                trigger="on-event",
                event_name="contact-updated",
                action="replace-inner",
                target="contacts-list",
                href=rows_href,
                verb="get",
            )
        ],
        text_field=TextField(
            name="q",
            placeholder="Search...",
            style="search-field",
            debounce="200",
            behavior=Behavior(
                trigger="change",
                action="replace-inner",
                target="contacts-list",
                href=rows_href,
                verb="get",
            ),
        ),
        list=List(
            id="contacts-list",
            behavior=Behavior(
                trigger="refresh",
                action="replace-inner",
                target="contacts-list",
                href=rows_href,
                verb="get",
            ),
            items=rows(contacts, page),
        ),
    )

    doc = layout()
    doc.screen.body.header = header
    doc.screen.body.view.form = form
    return doc


def new_form(contact: UpdateContact) -> Doc:
    """The screen for adding a contact."""
    header = Header(
        style="buttons-row",
        texts=[
            Text(
                style="header-button",
                content="Close",
                behavior=Behavior(trigger="press", action="close"),
            )
        ],
    )

    form = Form(
        views=[
            View(style="edit-fields", id="form-fields", views=[form_fields(contact, False)]),
            View(
                style="buttons-row",
                texts=[
                    Text(
                        style="bottom-button-label",
                        content="Add Contact",
                        behavior=Behavior(
                            trigger="press",
                            action="replace-inner",
                            target="form-fields",
                            href="/mobile/contacts/new",
                            verb="post",
                        ),
                    )
                ],
            ),
        ]
    )

    doc = layout()
    doc.screen.body.header = header
    doc.screen.body.view.form = form
    return doc


def _label(contact: ContactMobile) -> str:
    if contact.first_name:
        return f"{contact.first_name} {contact.last_name}"
    if contact.phone:
        return contact.phone
    if contact.email:
        return contact.email
    return ""


def _contact_item(contact: ContactMobile) -> Item:
    item_id = f"item-{contact.id}"
    return Item(
        key=str(contact.id),
        id=item_id,
        swipe_row=SwipeRowParams(
            swipe_row=SwipeRow(xmlns_swipe=NAMESPACE_SWIPE),
            swipe_main=SwipeMainParams(
                view=View(
                    style="contact-item",
                    texts=[Text(style="contact-item-label", content=_label(contact))],
                    behaviors=[
                        Behavior(trigger="press", action="push", href=f"/mobile/contacts/{contact.id}")
                    ],
                )
            ),
            swipe_buttons=[
                SwipeButton(
                    view=View(
                        style="swipe-button",
                        behaviors=[
                            Behavior(
                                trigger="press",
                                action="push",
                                href=f"/mobile/contacts/{contact.id}/edit",
                            )
                        ],
                        texts=[Text(style="bottom-button-label", content="Edit")],
                    )
                ),
                SwipeButton(
                    view=View(
                        style="swipe-button",
                        behavior_with_alert_opts=_delete_alert(contact.first_name, item_id, contact.id),
                        texts=[Text(style="button-delete", content="Delete")],
                    )
                ),
            ],
        ),
    )


def rows(contacts: list[ContactMobile], page: int) -> Items:
    """The list entries for ``contacts``, followed by a load-more slot."""
    if not contacts:
        return Items()

    entries = [_contact_item(contact) for contact in contacts]

    if len(contacts) == PAGE_SIZE_WITH_MORE:
        entries.append(
            Item(
                id="load-more",
                key="load-more",
                style="load-more-item",
                behavior=Behavior(
                    trigger="visible",
                    action="replace",
                    target="load-more",
                    href=f"/mobile/contacts?rows_only=true&page={page + 1}",
                    verb="get",
                ),
                spinner=Spinner(),
            )
        )
    else:
        entries.append(Item())

    return Items(xmlns=NAMESPACE, items=entries)


def show(contact: ContactMobile) -> Doc:
    """The screen showing one contact's details."""
    header = Header(
        style="buttons-row",
        texts=[
            Text(
                style="header-button",
                content="Back",
                behavior=Behavior(trigger="press", action="back"),
            ),
            Text(
                style="header-button",
                content="Edit",
                behavior=Behavior(
                    trigger="press",
                    action="reload",
                    href=f"/mobile/contacts/{contact.id}/edit",
                ),
            ),
        ],
    )

    details = View(
        style="details",
        texts=[Text(style="contact-name", content=f"{contact.first_name} {contact.last_name}")],
        views=[
            View(
                style="contact-section",
                behaviors=[
                    Behavior(
                        xmlns_comms=NAMESPACE_COMMS,
                        trigger="press",
                        action="open-phone",
                        comms_phone_number=contact.phone,
                    )
                ],
                texts=[
                    Text(style="contact-section-label", content="Phone"),
                    Text(style="contact-section-info", content=contact.phone),
                ],
            ),
            View(
                style="contact-section",
                behaviors=[
                    Behavior(
                        xmlns_comms=NAMESPACE_COMMS,
                        trigger="press",
                        action="open-email",
                        comms_email_addr=contact.email,
                    )
                ],
                texts=[
                    Text(style="contact-section-label", content="Email"),
                    Text(style="contact-section-info", content=contact.email),
                ],
            ),
        ],
    )

    doc = layout()
    doc.screen.body.header = header
    doc.screen.body.view.views = [details]
    return doc