"""Element model for Hyperview XML documents and its serialisation."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, fields
from typing import Optional

NAMESPACE = "https://hyperview.org/hyperview"
NAMESPACE_ALERT = "https://hyperview.org/hyperview-alert"
NAMESPACE_COMMS = "https://hypermedia.systems/hyperview/communications"
NAMESPACE_TOAST = "https://hypermedia.systems/hyperview/toast"
NAMESPACE_SWIPE = "https://hypermedia.systems/hyperview/swipeable"


def _set(element: ET.Element, name: str, value: str) -> None:
    if value:
        element.set(name, value)


def _append(parent: ET.Element, node: Optional["_Node"]) -> None:
    if node is not None:
        parent.append(node._element())


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


class _Node:
    """Something that renders as one XML element."""

    def _element(self) -> ET.Element:
        raise NotImplementedError


@dataclass
class Behavior(_Node):
    """An action run when its trigger fires."""

    trigger: str = ""
    action: str = ""
    target: str = ""
    href: str = ""
    verb: str = ""
    event_name: str = ""
    xmlns_alert: str = ""
    alert_title: str = ""
    alert_message: str = ""
    xmlns_comms: str = ""
    comms_phone_number: str = ""
    comms_email_addr: str = ""
    xmlns_toast: str = ""
    toast_text: str = ""

    def _apply(self, element: ET.Element) -> None:
        _set(element, "trigger", self.trigger)
        _set(element, "action", self.action)
        _set(element, "target", self.target)
        _set(element, "href", self.href)
        _set(element, "verb", self.verb)
        _set(element, "event-name", self.event_name)
        _set(element, "xmlns:alert", self.xmlns_alert)
        _set(element, "alert:title", self.alert_title)
        _set(element, "alert:message", self.alert_message)
        _set(element, "xmlns:comms", self.xmlns_comms)
        _set(element, "comms:phone-number", self.comms_phone_number)
        _set(element, "comms:email-address", self.comms_email_addr)
        _set(element, "xmlns:toast", self.xmlns_toast)
        _set(element, "toast:text", self.toast_text)

    def _element(self) -> ET.Element:
        element = ET.Element("behavior")
        self._apply(element)
        return element


@dataclass
class AlertOption(_Node):
    """One button of an alert."""

    label: str = ""
    behavior: Optional[Behavior] = None

    def _element(self) -> ET.Element:
        element = ET.Element("alert:option")
        _set(element, "alert:label", self.label)
        _append(element, self.behavior)
        return element


@dataclass
class BehaviorAlertOpts(_Node):
    """A behavior element carrying alert options as children."""

    behavior: Behavior = field(default_factory=Behavior)
    alert_options: list[AlertOption] = field(default_factory=list)

    def _element(self) -> ET.Element:
        element = self.behavior._element()
        for option in self.alert_options:
            _append(element, option)
        return element


@dataclass
class Text(_Node):
    """A text element."""

    content: str = ""
    style: str = ""
    id: str = ""
    xmlns: str = ""
    behavior: Optional[Behavior] = None
    debounce: str = ""

    def _element(self) -> ET.Element:
        element = ET.Element("text")
        _set(element, "xmlns", self.xmlns)
        _set(element, "id", self.id)
        _set(element, "style", self.style)
        _set(element, "debounce", self.debounce)
        if self.content:
            element.text = self.content
        _append(element, self.behavior)
        return element


@dataclass
class TextField(_Node):
    """An editable text input."""

    name: str = ""
    value: str = ""
    placeholder: str = ""
    style: str = ""
    behavior: Optional[Behavior] = None
    debounce: str = ""

    def _element(self) -> ET.Element:
        element = ET.Element("text-field")
        _set(element, "name", self.name)
        _set(element, "value", self.value)
        _set(element, "placeholder", self.placeholder)
        _set(element, "style", self.style)
        _set(element, "debounce", self.debounce)
        _append(element, self.behavior)
        return element


@dataclass
class Spinner(_Node):
    """A loading indicator."""

    def _element(self) -> ET.Element:
        return ET.Element("spinner")


@dataclass
class View(_Node):
    """A container element."""

    xmlns: str = ""
    id: str = ""
    style: str = ""
    form: Optional["Form"] = None
    behaviors: list[Behavior] = field(default_factory=list)
    behavior_with_alert_opts: Optional[BehaviorAlertOpts] = None
    text_field: Optional[TextField] = None
    texts: list[Text] = field(default_factory=list)
    views: list["View"] = field(default_factory=list)

    def _element(self) -> ET.Element:
        element = ET.Element("view")
        _set(element, "xmlns", self.xmlns)
        _set(element, "id", self.id)
        _set(element, "style", self.style)
        _append(element, self.form)
        for behavior in self.behaviors:
            _append(element, behavior)
        _append(element, self.behavior_with_alert_opts)
        _append(element, self.text_field)
        for text in self.texts:
            _append(element, text)
        for view in self.views:
            _append(element, view)
        return element


@dataclass
class SwipeRow(_Node):
    """The attributes of a swipeable row."""

    xmlns_swipe: str = ""
    style: str = ""

    def _element(self) -> ET.Element:
        element = ET.Element("swipe:row")
        _set(element, "xmlns:swipe", self.xmlns_swipe)
        _set(element, "style", self.style)
        return element


@dataclass
class SwipeMainParams(_Node):
    """The main, always visible, part of a swipeable row."""

    view: Optional[View] = None

    def _element(self) -> ET.Element:
        element = ET.Element("swipe:main")
        _append(element, self.view)
        return element


@dataclass
class SwipeButton(_Node):
    """A button revealed by swiping a row."""

    view: Optional[View] = None

    def _element(self) -> ET.Element:
        element = ET.Element("swipe:button")
        _append(element, self.view)
        return element


@dataclass
class SwipeRowParams(_Node):
    """A swipeable row with its main part and buttons."""

    swipe_row: SwipeRow = field(default_factory=SwipeRow)
    swipe_main: SwipeMainParams = field(default_factory=SwipeMainParams)
    swipe_buttons: list[SwipeButton] = field(default_factory=list)

    def _element(self) -> ET.Element:
        element = self.swipe_row._element()
        _append(element, self.swipe_main)
        for button in self.swipe_buttons:
            _append(element, button)
        return element


@dataclass
class Item(_Node):
    """One entry of a list."""

    id: str = ""
    key: str = ""
    style: str = ""
    text: Optional[Text] = None
    behavior: Optional[Behavior] = None
    spinner: Optional[Spinner] = None
    swipe_row: Optional[SwipeRowParams] = None

    def _element(self) -> ET.Element:
        element = ET.Element("item")
        _set(element, "id", self.id)
        _set(element, "key", self.key)
        _set(element, "style", self.style)
        _append(element, self.text)
        _append(element, self.behavior)
        _append(element, self.spinner)
        _append(element, self.swipe_row)
        return element


@dataclass
class Items(_Node):
    """The entries of a list."""

    xmlns: str = ""
    items: list[Item] = field(default_factory=list)

    def _element(self) -> ET.Element:
        element = ET.Element("items")
        _set(element, "xmlns", self.xmlns)
        for item in self.items:
            _append(element, item)
        return element


@dataclass
class List(_Node):
    """A list whose behavior attributes sit on the list element itself."""

    id: str = ""
    items: Items = field(default_factory=Items)
    behavior: Optional[Behavior] = None

    def _element(self) -> ET.Element:
        element = ET.Element("list")
        element.set("id", self.id)
        if self.behavior is not None:
            self.behavior._apply(element)
        _append(element, self.items)
        return element


@dataclass
class Form(_Node):
    """A form whose inputs are sent with its behaviors."""

    text_field: Optional[TextField] = None
    list: Optional[List] = None
    views: list[View] = field(default_factory=list)
    behaviors: list[Behavior] = field(default_factory=list)

    def _element(self) -> ET.Element:
        element = ET.Element("form")
        _append(element, self.text_field)
        _append(element, self.list)
        for view in self.views:
            _append(element, view)
        for behavior in self.behaviors:
            _append(element, behavior)
        return element


@dataclass
class Header(_Node):
    """The header bar of a screen."""

    style: str = ""
    texts: list[Text] = field(default_factory=list)
    behavior: Optional[Behavior] = None

    def _element(self) -> ET.Element:
        element = ET.Element("header")
        _set(element, "style", self.style)
        for text in self.texts:
            _append(element, text)
        _append(element, self.behavior)
        return element


@dataclass
class Style(_Node):
    """A named style rule; empty properties are left out."""

    id: str = ""
    align_items: str = ""
    background_color: str = ""
    bottom: str = ""
    border_bottom: str = ""
    border_bottom_width: str = ""
    border_radius: str = ""
    border_color: str = ""
    border_top_color: str = ""
    border_top_width: str = ""
    border_bottom_color: str = ""
    color: str = ""
    display: str = ""
    flex: str = ""
    flex_direction: str = ""
    font_size: str = ""
    font_weight: str = ""
    height: str = ""
    justify_content: str = ""
    left: str = ""
    margin: str = ""
    margin_top: str = ""
    margin_bottom: str = ""
    margin_horizontal: str = ""
    margin_vertical: str = ""
    padding: str = ""
    padding_top: str = ""
    padding_bottom: str = ""
    padding_left: str = ""
    padding_right: str = ""
    padding_horizontal: str = ""
    padding_vertical: str = ""
    position: str = ""
    right: str = ""
    text_align: str = ""
    width: str = ""

    def _element(self) -> ET.Element:
        element = ET.Element("style")
        for f in fields(self):
            _set(element, _camel(f.name), getattr(self, f.name))
        return element


@dataclass
class Styles(_Node):
    """The style rules of a screen."""

    styles: list[Style] = field(default_factory=list)

    def _element(self) -> ET.Element:
        element = ET.Element("styles")
        for style in self.styles:
            _append(element, style)
        return element


@dataclass
class Body(_Node):
    """The body of a screen."""

    style: str = ""
    safe_area: bool = False
    header: Header = field(default_factory=Header)
    view: View = field(default_factory=View)

    def _element(self) -> ET.Element:
        element = ET.Element("body")
        _set(element, "style", self.style)
        element.set("safe-area", "true" if self.safe_area else "false")
        _append(element, self.header)
        _append(element, self.view)
        return element


@dataclass
class Screen(_Node):
    """One screen with its styles and body."""

    styles: Styles = field(default_factory=Styles)
    body: Body = field(default_factory=Body)

    def _element(self) -> ET.Element:
        element = ET.Element("screen")
        _append(element, self.styles)
        _append(element, self.body)
        return element


@dataclass
class Doc(_Node):
    """A whole Hyperview document."""

    xmlns: str = ""
    screen: Screen = field(default_factory=Screen)

    def _element(self) -> ET.Element:
        element = ET.Element("doc")
        element.set("xmlns", self.xmlns)
        _append(element, self.screen)
        return element


def to_xml(node: _Node) -> ET.Element:
    """Build the XML element tree for ``node``."""
    if not isinstance(node, _Node):
        raise TypeError(f"cannot render {type(node).__name__} as Hyperview XML")
    return node._element()