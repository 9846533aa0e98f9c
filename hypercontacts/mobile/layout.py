"""The shared screen layout, styles and toast behaviors of the mobile app."""

from __future__ import annotations

from .hxml import NAMESPACE, NAMESPACE_TOAST, Behavior, Body, Doc, Screen, Style, Styles, View


def layout() -> Doc:
    """Return a fresh document with the app's styles and an empty main view."""
    return Doc(
        xmlns=NAMESPACE,
        screen=Screen(
            styles=Styles(styles=styles()),
            body=Body(style="body", safe_area=True, view=View(style="main")),
        ),
    )


def styles() -> list[Style]:
    """Return the style rules used by every screen."""
    return [
        # Main
        Style(id="body", flex="1"),
        Style(id="main", flex="1", background_color="#eee"),
        Style(id="header-title", font_size="16", color="black", font_weight="500"),
        Style(
            id="buttons-row",
            background_color="white",
            border_bottom_color="#ccc",
            border_bottom_width="1",
            flex_direction="row",
            height="50",
            align_items="center",
            justify_content="space-between",
            padding_horizontal="22",
        ),
        Style(
            id="buttons-row-bottom",
            bottom="0",
            background_color="white",
            border_bottom_color="#ccc",
            border_bottom_width="1",
            flex_direction="row",
            height="50",
            align_items="center",
            justify_content="space-between",
            padding_horizontal="22",
        ),
        # Index
        Style(
            id="header",
            flex_direction="row",
            justify_content="space-between",
            align_items="center",
            border_bottom_color="#ccc",
            border_bottom_width="1",
            padding_left="24",
            padding_right="24",
            padding_vertical="16",
            background_color="white",
        ),
        Style(
            id="search-field",
            padding_horizontal="24",
            padding_vertical="8",
            border_bottom_width="1",
            border_bottom_color="#ddd",
            background_color="#eee",
        ),
        Style(
            id="contact-item",
            border_bottom_color="#ddd",
            border_bottom_width="1",
            padding_left="24",
            padding_right="24",
            padding_vertical="16",
            background_color="white",
        ),
        Style(id="contact-item-label", font_weight="500"),
        Style(id="load-more-item", padding_vertical="16"),
        # Show
        Style(id="header-button", font_size="20", color="blue"),
        Style(id="contact-name", font_size="24", text_align="center", margin_vertical="32", font_weight="500"),
        Style(
            id="contact-section",
            margin="8",
            background_color="white",
            border_radius="8",
            padding="8",
            margin_horizontal="14",
        ),
        Style(id="contact-section-label", font_size="12", color="#aaa", margin_bottom="4"),
        Style(id="contact-section-info", font_size="18", color="blue", margin_bottom="4"),
        # Edit
        Style(id="edit-group", margin_vertical="8"),
        Style(
            id="edit-field",
            text_align="center",
            border_bottom_width="1",
            border_color="#ddd",
            padding_horizontal="24",
            padding_vertical="16",
            background_color="white",
        ),
        Style(id="edit-field-error", color="red", font_size="12", margin_top="4"),
        Style(id="hide", display="none"),
        Style(id="bottom-button-label", color="blue", font_weight="500"),
        Style(id="button-delete", color="red", font_weight="500"),
        Style(id="swipe-button", height="100%", justify_content="center", text_align="center", padding_left="24"),
    ]


def show_toasts(*args: str) -> list[Behavior]:
    """Return one toast behavior, fired on load, for each message."""
    return [
        Behavior(xmlns_toast=NAMESPACE_TOAST, trigger="load", action="show-toast", toast_text=message)
        for message in args
    ]