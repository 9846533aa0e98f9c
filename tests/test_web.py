import io
import signal
import uuid
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Optional

import pytest
from werkzeug.test import Client, EnvironBuilder
from werkzeug.wrappers import Request, Response

from hypercontacts.validate import FieldErrors, check
from hypercontacts.web import (
    HTML_MIME,
    HXML_MIME,
    App,
    decode,
    param,
    query_string,
    redirect,
    render_html,
    render_xml,
    respond_json,
)
from hypercontacts.webcontext import ZERO_TRACE_ID, Values, get_trace_id, request_values


def make_request(path="/", method="GET", **kwargs):
    return Request(EnvironBuilder(path=path, method=method, **kwargs).get_environ())


@dataclass
class Person:
    first: str = field(metadata={"json": "first_name", "validate": "required"})
    email: str = field(metadata={"json": "email", "validate": "required,email"})
    age: int = field(default=0, metadata={"json": "age"})
    nick: Optional[str] = field(default=None, metadata={"json": "nick"})

    def validate(self):
        check(self)


def test_param_reads_path_value():
    app = App(lambda sig: None)
    app.handle("GET", "", "/items/{id}", lambda r: Response(param(r, "id")))
    resp = Client(app).get("/items/42")
    assert resp.get_data(as_text=True) == "42"


def test_param_missing_is_empty():
    app = App(lambda sig: None)
    app.handle("GET", "", "/items", lambda r: Response("[" + param(r, "id") + "]"))
    assert Client(app).get("/items").get_data(as_text=True) == "[]"


def test_query_string():
    request = make_request("/x", query_string="q=abc")
    assert query_string(request, "q") == "abc"
    assert query_string(request, "page") == ""


def test_group_prefix():
    app = App(lambda sig: None)
    app.handle("GET", "api/v1", "/contacts", lambda r: Response("ok"))
    client = Client(app)
    assert client.get("/api/v1/contacts").get_data(as_text=True) == "ok"
    assert client.get("/contacts").status_code == HTTPStatus.NOT_FOUND


def test_wrong_method_is_rejected():
    app = App(lambda sig: None)
    app.handle("GET", "", "/contacts", lambda r: Response("ok"))
    assert Client(app).post("/contacts").status_code == HTTPStatus.METHOD_NOT_ALLOWED


def test_get_route_answers_head():
    app = App(lambda sig: None)
    app.handle("GET", "", "/contacts", lambda r: Response("ok"))
    assert Client(app).head("/contacts").status_code == HTTPStatus.OK


def test_root_pattern_matches_every_path():
    app = App(lambda sig: None)
    app.handle("GET", "", "/", lambda r: Response("root:" + r.path))
    app.handle("GET", "", "/contacts", lambda r: Response("contacts"))
    client = Client(app)
    assert client.get("/some/where").get_data(as_text=True) == "root:/some/where"
    assert client.get("/contacts").get_data(as_text=True) == "contacts"


def test_literal_segment_beats_wildcard():
    app = App(lambda sig: None)
    app.handle("GET", "", "/contacts/{id}", lambda r: Response("id"))
    app.handle("GET", "", "/contacts/count", lambda r: Response("count"))
    assert Client(app).get("/contacts/count").get_data(as_text=True) == "count"


def test_middleware_order():
    calls = []

    def tag(name):
        def mw(handler):
            def wrapped(request):
                calls.append(name)
                response = handler(request)
                response.headers.add("X-Trail", name)
                return response

            return wrapped

        return mw

    app = App(lambda sig: None, tag("app1"), tag("app2"))
    app.handle("GET", "", "/x", lambda r: Response("x"), tag("route"))
    resp = Client(app).get("/x")
    assert resp.get_data(as_text=True) == "x"
    assert resp.headers.getlist("X-Trail") == ["route", "app2", "app1"]
    assert calls == ["app1", "app2", "route"]


def test_handler_runs_with_fresh_trace_id():
    app = App(lambda sig: None)
    app.handle("GET", "", "/t", lambda r: Response(get_trace_id()))
    trace = Client(app).get("/t").get_data(as_text=True)
    assert str(uuid.UUID(trace)) == trace
    assert trace != ZERO_TRACE_ID


def test_error_signals_shutdown():
    signals = []
    app = App(signals.append)

    def broken(request):
        raise RuntimeError("integrity")

    app.handle("GET", "", "/x", broken)
    resp = Client(app).get("/x")
    assert signals == [signal.SIGTERM]
    assert resp.get_data() == b""


def test_broken_pipe_does_not_signal_shutdown():
    signals = []
    app = App(signals.append)

    def gone(request):
        raise BrokenPipeError()

    app.handle_no_middleware("GET", "", "/x", gone)
    Client(app).get("/x")
    assert signals == []


def test_handle_no_middleware_skips_app_middleware():
    seen = []

    def mw(handler):
        def wrapped(request):
            seen.append(request.path)
            return handler(request)

        return wrapped

    app = App(lambda sig: None, mw)
    app.handle_no_middleware("GET", "", "/raw", lambda r: Response("raw"))
    assert Client(app).get("/raw").get_data(as_text=True) == "raw"
    assert seen == []


def test_enable_cors_answers_options_everywhere():
    def mark(handler):
        def wrapped(request):
            response = handler(request)
            response.headers["X-Marked"] = "yes"
            return response

        return wrapped

    app = App(lambda sig: None)
    app.enable_cors(mark)
    resp = Client(app).options("/any/path")
    assert resp.status_code == HTTPStatus.OK
    assert resp.get_data(as_text=True) == '"OK"'
    assert resp.headers["X-Marked"] == "yes"


def test_duplicate_registration_raises():
    app = App(lambda sig: None)
    app.handle("GET", "", "/x", lambda r: Response())
    with pytest.raises(ValueError):
        app.handle("GET", "", "/x", lambda r: Response())


def test_decode_reads_json_names_and_ignores_unknown():
    request = make_request(
        method="POST",
        json={"first_name": "Ann", "email": "ann@example.com", "extra": 1, "age": 30},
    )
    person = decode(request, Person)
    assert person == Person(first="Ann", email="ann@example.com", age=30, nick=None)


def test_decode_wrong_type_raises():
    request = make_request(method="POST", json={"first_name": 5, "email": "ann@example.com"})
    with pytest.raises(ValueError, match="unable to decode payload"):
        decode(request, Person)


def test_decode_invalid_json_raises():
    request = make_request(method="POST", data="{not json")
    with pytest.raises(ValueError, match="unable to decode payload"):
        decode(request, Person)


def test_decode_validation_failure_keeps_field_errors():
    request = make_request(method="POST", json={"email": "nope"})
    with pytest.raises(ValueError, match="unable to validate payload") as info:
        decode(request, Person)
    cause = info.value.__cause__
    assert isinstance(cause, FieldErrors)
    assert set(cause.fields()) == {"first_name", "email"}


def test_render_html_sets_status_and_records_it():
    values = Values()
    with request_values(values):
        resp = render_html("<p>hi</p>", 400)
    assert resp.status_code == 400
    assert resp.mimetype == HTML_MIME
    assert values.status_code == 400


def test_render_xml_keeps_http_200_and_records_status():
    values = Values()
    with request_values(values):
        resp = render_xml(ET.Element("doc", {"a": "1"}), 201)
    assert resp.status_code == HTTPStatus.OK
    assert resp.headers["Content-Type"] == HXML_MIME
    assert resp.get_data(as_text=True) == '<doc a="1" />'
    assert values.status_code == 201


def test_render_xml_rejects_other_types():
    with pytest.raises(TypeError):
        render_xml(123, 200)


def test_respond_json_no_content_has_no_body():
    resp = respond_json({"a": 1}, 204)
    assert resp.status_code == 204
    assert resp.get_data() == b""


def test_respond_json_uses_to_dict():
    class Doc:
        def to_dict(self):
            return {"error": "x"}

    resp = respond_json(Doc(), 400)
    assert resp.status_code == 400
    assert resp.mimetype == "application/json"
    assert resp.get_json() == {"error": "x"}


def test_redirect_keeps_query():
    request = make_request("/old", query_string="q=joe&page=2")
    resp = redirect(request, "/contacts")
    assert resp.status_code == HTTPStatus.SEE_OTHER
    assert resp.headers["Location"] == "/contacts?q=joe&page=2"


def test_redirect_without_query():
    resp = redirect(make_request("/old"), "/contacts")
    assert resp.headers["Location"] == "/contacts"