import xml.etree.ElementTree as ET

import pytest

from hypercontacts.mobile.hxml import (
    NAMESPACE,
    NAMESPACE_ALERT,
    NAMESPACE_SWIPE,
    AlertOption,
    Behavior,
    BehaviorAlertOpts,
    Body,
    Doc,
    Form,
    Header,
    Item,
    Items,
    List,
    Screen,
    Spinner,
    Style,
    Styles,
    SwipeButton,
    SwipeMainParams,
    SwipeRow,
    SwipeRowParams,
    Text,
    TextField,
    View,
    to_xml,
)


def test_behavior_omits_empty_attributes():
    out = ET.tostring(to_xml(Behavior(trigger="press", action="back")), encoding="unicode")
    assert out == '<behavior trigger="press" action="back" />'


def test_behavior_prefixed_attributes_written_literally():
    el = to_xml(Behavior(xmlns_alert=NAMESPACE_ALERT, alert_title="Confirm delete", event_name="e"))
    assert el.get("xmlns:alert") == NAMESPACE_ALERT
    assert el.get("alert:title") == "Confirm delete"
    assert el.get("event-name") == "e"
    assert "alert:message" not in el.attrib


def test_text_content_then_behavior():
    el = to_xml(Text(content="Back", style="header-button", behavior=Behavior(action="back")))
    assert el.tag == "text"
    assert el.text == "Back"
    assert [c.tag for c in el] == ["behavior"]
    assert el.get("style") == "header-button"


def test_list_carries_behavior_attributes_inline():
    lst = List(id="contacts-list", behavior=Behavior(trigger="refresh", verb="get"),
               items=Items(xmlns=NAMESPACE, items=[Item(id="item-1", key="1")]))
    el = to_xml(lst)
    assert list(el.attrib) == ["id", "trigger", "verb"]
    assert [c.tag for c in el] == ["items"]
    assert el[0].get("xmlns") == NAMESPACE
    assert el[0][0].get("key") == "1"


def test_list_id_always_present():
    assert to_xml(List()).get("id") == ""


def test_behavior_alert_options():
    opts = BehaviorAlertOpts(
        behavior=Behavior(action="alert"),
        alert_options=[AlertOption(label="Confirm", behavior=Behavior(verb="post")), AlertOption(label="Cancel")],
    )
    el = to_xml(opts)
    assert el.tag == "behavior"
    assert el.get("action") == "alert"
    assert [c.tag for c in el] == ["alert:option", "alert:option"]
    assert el[0].get("alert:label") == "Confirm"
    assert el[0][0].get("verb") == "post"
    assert len(el[1]) == 0


def test_swipe_row_structure():
    row = SwipeRowParams(
        swipe_row=SwipeRow(xmlns_swipe=NAMESPACE_SWIPE),
        swipe_main=SwipeMainParams(view=View(style="contact-item")),
        swipe_buttons=[SwipeButton(view=View(style="swipe-button"))],
    )
    el = to_xml(Item(swipe_row=row))
    swipe = el[0]
    assert swipe.tag == "swipe:row"
    assert swipe.get("xmlns:swipe") == NAMESPACE_SWIPE
    assert [c.tag for c in swipe] == ["swipe:main", "swipe:button"]
    assert swipe[1][0].get("style") == "swipe-button"


def test_view_child_order():
    view = View(
        id="v",
        form=Form(),
        behaviors=[Behavior(action="a")],
        behavior_with_alert_opts=BehaviorAlertOpts(),
        text_field=TextField(name="q"),
        texts=[Text(content="t")],
        views=[View()],
    )
    assert [c.tag for c in to_xml(view)] == ["form", "behavior", "behavior", "text-field", "text", "view"]


def test_form_child_order():
    form = Form(text_field=TextField(), list=List(), views=[View()], behaviors=[Behavior()])
    assert [c.tag for c in to_xml(form)] == ["text-field", "list", "view", "behavior"]


def test_style_attribute_names_are_camel_case():
    el = to_xml(Style(id="main", background_color="#eee", padding_horizontal="22"))
    assert el.attrib == {"id": "main", "backgroundColor": "#eee", "paddingHorizontal": "22"}


def test_doc_round_trip_structure():
    doc = Doc(xmlns=NAMESPACE, screen=Screen(
        styles=Styles(styles=[Style(id="body")]),
        body=Body(style="body", safe_area=True, header=Header(style="buttons-row")),
    ))
    parsed = ET.fromstring(ET.tostring(to_xml(doc)))
    assert parsed.get("xmlns") == NAMESPACE
    screen = parsed.find("screen")
    assert [c.tag for c in screen] == ["styles", "body"]
    body = screen.find("body")
    assert body.get("safe-area") == "true"
    assert [c.tag for c in body] == ["header", "view"]


def test_body_safe_area_false():
    assert to_xml(Body()).get("safe-area") == "false"


def test_spinner_and_empty_item():
    item = to_xml(Item(spinner=Spinner()))
    assert [c.tag for c in item] == ["spinner"]
    assert to_xml(Item()).attrib == {}


def test_to_xml_rejects_other_types():
    with pytest.raises(TypeError):
        to_xml("view")