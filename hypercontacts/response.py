"""Response documents and the request error carrying an HTTP status."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class PageDocument(Generic[T]):
    """A page of query results."""

    items: list[T]
    total: int
    page: int
    rows_per_page: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": list(self.items),
            "total": self.total,
            "page": self.page,
            "rowsPerPage": self.rows_per_page,
        }


@dataclass
class ErrorDocument:
    """The body sent to clients when a request fails."""

    error: str
    fields: Optional[dict[str, str]] = field(default=None)

    def to_dict(self) -> dict[str, Any]:
        doc: dict[str, Any] = {"error": self.error}
        if self.fields:
            doc["fields"] = dict(self.fields)
        return doc


class RequestError(Exception):
    """An expected failure that maps to a specific HTTP status."""

    def __init__(self, error: Any, status: int) -> None:
        super().__init__(str(error))
        self.error = error
        self.status = status

    def __str__(self) -> str:
        return str(self.error)