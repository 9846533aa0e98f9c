"""Turns structured JSON log lines into readable text."""

from __future__ import annotations

import argparse
import json
import math
import sys
from decimal import Decimal
from typing import Any, Optional, Sequence

ZERO_TRACE_ID = "00000000-0000-0000-0000-000000000000"
_KNOWN = ("service", "time", "file", "level", "trace_id", "msg")


def _format_float(x: float) -> str:
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    number = Decimal(repr(x)).normalize()
    sign, digits, exponent = number.as_tuple()
    exp10 = len(digits) + int(exponent) - 1
    if exp10 < -4 or exp10 >= 6:
        text = "".join(map(str, digits))
        mantissa = text[0] + ("." + text[1:] if len(text) > 1 else "")
        esign = "-" if exp10 < 0 else "+"
        return f"{'-' if sign else ''}{mantissa}e{esign}{abs(exp10):02d}"
    return format(number, "f")


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return _format_float(float(value))
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "[" + " ".join(_format_value(v) for v in value) + "]"
    if isinstance(value, dict):
        return "map[" + " ".join(f"{k}:{_format_value(value[k])}" for k in sorted(value)) + "]"
    return str(value)


def _format_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if value is None:
        return "%!s(<nil>)"
    if isinstance(value, bool):
        return f"%!s(bool={_format_value(value)})"
    if isinstance(value, (int, float)):
        return f"%!s(float64={_format_value(value)})"
    return _format_value(value)


def format_line(line: str, service: str = "") -> Optional[str]:
    """Return the readable form of one log line, or None when it is filtered out."""
    service = service.lower()
    try:
        record = json.loads(line)
    except ValueError:
        record = None
    if not isinstance(record, dict):
        return None if service else line

    if service:
        name = record.get("service")
        if not isinstance(name, str) or name.lower() != service:
            return None

    trace_id = ZERO_TRACE_ID
    if "trace_id" in record:
        trace_id = _format_value(record["trace_id"])

    parts = [
        _format_string(record.get("service")),
        _format_string(record.get("time")),
        _format_string(record.get("file")),
        _format_string(record.get("level")),
        trace_id,
        _format_string(record.get("msg")),
    ]
    parts.extend(f"{k}[{_format_value(v)}]" for k, v in record.items() if k not in _KNOWN)
    return ": ".join(parts)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Read log lines from stdin and print them in readable form."""
    parser = argparse.ArgumentParser(description="Make structured log output readable.")
    parser.add_argument("-service", "--service", default="", help="filter which service to see")
    args = parser.parse_args(argv)
    service = args.service.lower()

    try:
        for raw in sys.stdin:
            line = raw[:-1] if raw.endswith("\n") else raw
            if line.endswith("\r"):
                line = line[:-1]
            out = format_line(line, service)
            if out is not None:
                print(out)
    except (OSError, UnicodeDecodeError) as exc:
        print(exc, file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())