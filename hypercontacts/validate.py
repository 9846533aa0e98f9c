"""Tag-driven validation of dataclass models with field-level errors."""

from __future__ import annotations

import dataclasses
import json
import re
from dataclasses import dataclass
from typing import Any, Optional

_UCS = "\u00a0-\ud7ff\uf900-\ufdcf\ufdf0-\uffef"
_ATEXT = rf"[a-zA-Z0-9!#$%&'*+\-/=?^_`{{|}}~{_UCS}]"
_LOCAL = rf"{_ATEXT}+(?:\.{_ATEXT}+)*"
_QUOTED = (
    r'"(?:[\x01-\x08\x0b\x0c\x0e-\x1f\x20\x21\x23-\x5b\x5d-\x7e\t'
    + _UCS
    + r"]|\\[\x01-\x09\x0b\x0c\x0d-\x7f])*\""
)
_ALNUM = rf"[a-zA-Z0-9{_UCS}]"
_INNER = rf"[a-zA-Z0-9\-.~{_UCS}]"
_LABEL = rf"(?:{_ALNUM}(?:{_INNER}*{_ALNUM})?)"
_ALPHA = rf"[a-zA-Z{_UCS}]"
_TLD = rf"(?:{_ALPHA}(?:{_INNER}*{_ALPHA})?)"
_EMAIL_RE = re.compile(rf"^(?:{_LOCAL}|{_QUOTED})@(?:{_LABEL}\.)+{_TLD}\.?$")


@dataclass(frozen=True)
class FieldError:
    """A problem with one named field."""

    field: str
    error: str


class FieldErrors(Exception):
    """A collection of field errors raised by validation."""

    def __init__(self, errors: list[FieldError]) -> None:
        self.errors = list(errors)
        super().__init__(str(self))

    def __str__(self) -> str:
        return json.dumps([{"field": e.field, "error": e.error} for e in self.errors])

    def __iter__(self):
        return iter(self.errors)

    def __len__(self) -> int:
        return len(self.errors)

    def fields(self) -> dict[str, str]:
        """Map each failing field name to its message."""
        return {e.field: e.error for e in self.errors}


def new_fields_error(field: str, message: Any) -> FieldErrors:
    """Build a FieldErrors holding a single field error."""
    return FieldErrors([FieldError(field, str(message))])


def _has_value(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    if isinstance(value, (int, float, complex)):
        return value != 0
    return True


def _passes(tag: str, value: Any) -> bool:
    if tag == "required":
        return _has_value(value)
    if tag == "email":
        if value is None:
            return False
        if not isinstance(value, str):
            raise TypeError(f"email validation needs a string, got {type(value).__name__}")
        return _EMAIL_RE.match(value) is not None
    raise ValueError(f"undefined validation tag: {tag!r}")


def _message(tag: str, name: str) -> str:
    if tag == "required":
        return "This field is required"
    if tag == "email":
        return f"{name} must be a valid email address"
    return f"{name} failed on the {tag!r} tag"


def _field_name(f: dataclasses.Field) -> str:
    name = f.metadata.get("json", f.name).split(",", 1)[0]
    return "" if name == "-" else name


def _collect(model: Any) -> list[FieldError]:
    errors: list[FieldError] = []
    for f in dataclasses.fields(model):
        value = getattr(model, f.name)
        spec: Optional[str] = f.metadata.get("validate")
        if spec:
            tags = [t.strip() for t in spec.split(",") if t.strip()]
            if "omitempty" in tags and not _has_value(value):
                tags = []
            for tag in (t for t in tags if t != "omitempty"):
                if not _passes(tag, value):
                    name = _field_name(f)
                    errors.append(FieldError(name, _message(tag, name)))
                    break
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            errors.extend(_collect(value))
    return errors


def check(model: Any) -> None:
    """Validate a dataclass instance against its ``validate`` metadata.

    Raises FieldErrors listing every field that failed.
    """
    if not dataclasses.is_dataclass(model) or isinstance(model, type):
        raise TypeError(f"check needs a dataclass instance, got {type(model).__name__}")
    errors = _collect(model)
    if errors:
        raise FieldErrors(errors)