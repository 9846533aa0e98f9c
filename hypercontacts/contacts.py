"""The in-memory contacts store loaded from a JSON file."""

from __future__ import annotations

import dataclasses
import json
import os
import threading
from dataclasses import dataclass
from operator import attrgetter
from typing import Any, Union

from .archiver import ArchiveView, Archiver
from .logger import Logger


@dataclass(frozen=True)
class Contact:
    """One stored contact."""

    id: int = 0
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    email: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Contact":
        return cls(
            id=int(data.get("id", 0)),
            first_name=data.get("first", ""),
            last_name=data.get("last", ""),
            phone=data.get("phone", ""),
            email=data.get("email", ""),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "first": self.first_name,
            "last": self.last_name,
            "phone": self.phone,
            "email": self.email,
        }


class ContactNotFoundError(LookupError):
    """No contact has the requested id."""


class ContactsCore:
    """Queries and changes the set of contacts."""

    def __init__(self, log: Logger, db_path: Union[str, os.PathLike]) -> None:
        self._log = log
        path = os.fspath(db_path)
        with open(path, encoding="utf-8") as fh:
            raw = json.load(fh)
        if not isinstance(raw, list):
            raise ValueError(f"{path}: expected a JSON array of contacts")
        self._db: list[Contact] = [Contact.from_dict(item) for item in raw]
        self._archiver = Archiver(path)
        self._lock = threading.RLock()

    def query(self, query: str = "", page: int = 1, rows: int = 10) -> list[Contact]:
        """Return one page of contacts, sorted by first name, matching ``query``.

        Raises IndexError when the page bounds fall outside the results.
        """
        with self._lock:
            start = (page - 1) * rows
            end = start + rows

            if not query:
                results = self._db
            else:
                self._log.info("searching", query=query)
                results = [
                    c
                    for c in self._db
                    if query in c.first_name
                    or query in c.last_name
                    or query in c.email
                    or query in c.phone
                ]

            if start > len(self._db):
                return []
            end = min(end, len(results))

            results.sort(key=attrgetter("first_name"))

            if start < 0 or start > end:
                raise IndexError(f"slice bounds out of range [{start}:{end}]")
            return results[start:end]

    def query_by_id(self, contact_id: int) -> Contact:
        """Return the contact with ``contact_id``."""
        self._log.info("searching by id", id=contact_id)
        with self._lock:
            for contact in self._db:
                if contact.id == contact_id:
                    return contact
        raise ContactNotFoundError("not found")

    def unique_email(self, contact_id: int, email: str) -> bool:
        """Report whether no other contact uses ``email``."""
        self._log.info("checking unique email", email=email)
        with self._lock:
            return not any(c.email == email and c.id != contact_id for c in self._db)

    def create(self, contact: Contact) -> Contact:
        """Store ``contact`` with the id after the last stored one and return it."""
        self._log.info("creating", newContact=contact.to_dict())
        with self._lock:
            latest_id = self._db[-1].id
            created = dataclasses.replace(contact, id=latest_id + 1)
            self._db.append(created)
            return created

    def update(self, contact: Contact) -> None:
        """Replace the stored contact that has the same id."""
        self._log.info("updating", contact=contact.to_dict())
        with self._lock:
            for index, existing in enumerate(self._db):
                if existing.id == contact.id:
                    self._db[index] = contact
                    return
        raise ContactNotFoundError("contact not found")

    def delete(self, contact_id: int) -> None:
        """Remove the contact with ``contact_id``."""
        self._log.info("deleting", id=contact_id)
        with self._lock:
            for index, existing in enumerate(self._db):
                if existing.id == contact_id:
                    del self._db[index]
                    return
        raise ContactNotFoundError("contact not found")

    def count(self) -> int:
        """Return the number of stored contacts."""
        with self._lock:
            return len(self._db)

    def archive(self) -> threading.Thread:
        """Start building the archive; returns the worker thread."""
        self._log.info("archiving")
        return self._archiver.run()

    def archive_rm(self) -> None:
        """Discard the archive and return to waiting."""
        self._log.info("removing archive file")
        self._archiver.reset()

    def archive_poll(self) -> ArchiveView:
        """Return the archive job's state."""
        self._log.info("polling")
        return self._archiver.poll()

    def archive_file(self) -> str:
        """Return the path of the archive file."""
        self._log.info("retrieving archive file")
        return self._archiver.file()