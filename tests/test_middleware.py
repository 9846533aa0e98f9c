import io
import json

import pytest
from werkzeug.test import EnvironBuilder
from werkzeug.wrappers import Request, Response

from hypercontacts.logger import Level, Logger
from hypercontacts.middleware import (
    cors_middleware,
    errors_middleware,
    logging_middleware,
    panics_middleware,
)
from hypercontacts.response import RequestError
from hypercontacts.validate import FieldError, FieldErrors
from hypercontacts.web import respond_json
from hypercontacts.webcontext import Values, request_values


def make_request(path="/", method="GET", **kwargs):
    return Request(EnvironBuilder(path=path, method=method, **kwargs).get_environ())


def make_log():
    stream = io.StringIO()
    return Logger(stream, Level.DEBUG, "TEST", None), stream


def records(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines()]


def raising(exc):
    def handler(request):
        raise exc

    return handler


def test_cors_sets_headers():
    handler = cors_middleware("http://localhost:3000")(lambda r: Response("ok"))
    resp = handler(make_request())
    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert resp.headers["Access-Control-Allow-Methods"] == "POST, GET, OPTIONS, PUT DELETE"
    assert resp.headers["Access-Control-Max-Age"] == "86400"
    assert resp.get_data(as_text=True) == "ok"


def test_errors_passes_success_through():
    log, stream = make_log()
    handler = errors_middleware(log)(lambda r: Response("fine"))
    assert handler(make_request()).get_data(as_text=True) == "fine"
    assert stream.getvalue() == ""


def test_errors_request_error_uses_status_and_message():
    log, stream = make_log()
    handler = errors_middleware(log)(raising(RequestError(ValueError("bad input"), 400)))
    resp = handler(make_request())
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "bad input"}
    assert records(stream)[0]["level"] == "ERROR"


def test_errors_field_errors_become_fields():
    log, _ = make_log()
    fe = FieldErrors([FieldError("email", "bad email")])
    handler = errors_middleware(log)(raising(RequestError(fe, 400)))
    resp = handler(make_request())
    assert resp.get_json() == {"error": "data validation error", "fields": {"email": "bad email"}}


def test_errors_field_errors_found_through_cause():
    log, _ = make_log()
    fe = FieldErrors([FieldError("phone", "This field is required")])
    try:
        raise ValueError("unable to validate payload") from fe
    except ValueError as wrapped:
        err = RequestError(wrapped, 400)
    resp = errors_middleware(log)(raising(err))(make_request())
    assert resp.get_json()["fields"] == {"phone": "This field is required"}


def test_errors_unexpected_is_internal_server_error():
    log, _ = make_log()
    resp = errors_middleware(log)(raising(KeyError("x")))(make_request())
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal Server Error"}


def test_errors_records_status_for_logging():
    log, _ = make_log()
    values = Values()
    with request_values(values):
        errors_middleware(log)(raising(RequestError("nope", 404)))(make_request())
    assert values.status_code == 404


def test_logging_writes_start_and_completion():
    log, stream = make_log()
    handler = logging_middleware(log)(lambda r: respond_json({"ok": True}, 201))
    with request_values(Values()):
        handler(make_request("/contacts", query_string="q=a"))
    started, completed = records(stream)
    assert started["msg"] == "request started"
    assert started["path"] == "/contacts?q=a"
    assert started["method"] == "GET"
    assert completed["msg"] == "request completed"
    assert completed["statusCode"] == 201


def test_logging_logs_completion_when_handler_raises():
    log, stream = make_log()
    handler = logging_middleware(log)(raising(RuntimeError("x")))
    with request_values(Values()):
        with pytest.raises(RuntimeError):
            handler(make_request("/x"))
    assert [r["msg"] for r in records(stream)] == ["request started", "request completed"]


def test_panics_wraps_unexpected_errors():
    handler = panics_middleware()(raising(ZeroDivisionError("boom")))
    with pytest.raises(RuntimeError) as info:
        handler(make_request())
    assert str(info.value).startswith("PANIC [boom] TRACE[")
    assert info.value.__cause__ is None


def test_panics_lets_request_errors_through():
    err = RequestError("bad", 400)
    with pytest.raises(RequestError) as info:
        panics_middleware()(raising(err))(make_request())
    assert info.value is err


def test_panic_becomes_internal_error_through_chain():
    log, _ = make_log()
    handler = errors_middleware(log)(panics_middleware()(raising(IndexError("oops"))))
    resp = handler(make_request())
    assert resp.status_code == 500