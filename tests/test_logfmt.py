import io
import json

import pytest

from hypercontacts.logfmt import ZERO_TRACE_ID, format_line, main


def _line(**fields):
    return json.dumps(fields)


def test_known_fields_in_order():
    line = _line(time="t", level="INFO", msg="startup", service="HTMX", file="main.go:1", trace_id="abc", extra="x")
    assert format_line(line) == "HTMX: t: main.go:1: INFO: abc: startup: extra[x]"


def test_missing_trace_id_uses_zero():
    out = format_line(_line(service="HTMX", msg="m"))
    assert ZERO_TRACE_ID in out


def test_non_json_passes_without_filter():
    assert format_line("plain text") == "plain text"


def test_non_json_dropped_with_filter():
    assert format_line("plain text", "htmx") is None


@pytest.mark.parametrize("service", ["htmx", "HTMX", "HtMx"])
def test_filter_matches_case_insensitive(service):
    line = _line(service="HTMX", msg="m")
    assert format_line(line, service) == format_line(line)


def test_filter_rejects_other_service():
    assert format_line(_line(service="HTMX", msg="m"), "sales") is None


def test_large_number_uses_exponent():
    out = format_line(_line(service="s", count=1000000))
    assert out.endswith("count[1e+06]")


def test_integral_number_and_bool():
    out = format_line(_line(service="s", statusCode=200, ok=True))
    assert out.endswith("statusCode[200]: ok[true]")


def test_main_reads_stdin(monkeypatch, capsys):
    lines = [_line(service="HTMX", msg="a"), "raw", _line(service="OTHER", msg="b")]
    monkeypatch.setattr("sys.stdin", io.StringIO("\n".join(lines) + "\n"))
    assert main([]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [format_line(lines[0]), "raw", format_line(lines[2])]


def test_main_service_filter(monkeypatch, capsys):
    lines = [_line(service="HTMX", msg="a"), "raw", _line(service="OTHER", msg="b")]
    monkeypatch.setattr("sys.stdin", io.StringIO("\r\n".join(lines)))
    assert main(["-service", "htmx"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [format_line(lines[0])]