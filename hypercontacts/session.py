"""Signed-cookie sessions used to carry flash messages between requests."""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
import time
from typing import Any

from werkzeug.wrappers import Request, Response

SESSION_KEY = "default_session"
FLASH_KEY = "flash"
MAX_AGE = 86400 * 30


def _b64encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64decode(text: str) -> bytes:
    padded = text + "=" * (-len(text) % 4)
    return base64.urlsafe_b64decode(padded.encode("ascii"))


class SessionStore:
    """Stores session values in an HMAC-signed cookie."""

    def __init__(self, secret_key: str = "") -> None:
        self._key = secret_key.encode() if secret_key else secrets.token_bytes(32)
        self._cache_key = f"hypercontacts.session.{id(self)}"

    def add_flash(self, request: Request, response: Response, value: str) -> None:
        """Append a flash message and save the session on ``response``.

        Raises ValueError if the request carries a cookie that fails verification.
        """
        session = self._load(request)
        session.setdefault(FLASH_KEY, []).append(value)
        self._save(response, session)

    def pop_flashes(self, request: Request, response: Response) -> list[str]:
        """Remove and return the pending flash messages."""
        try:
            session = self._load(request)
        except ValueError:
            return []
        flashes = session.pop(FLASH_KEY, [])
        self._save(response, session)
        return [f for f in flashes if isinstance(f, str)]

    def _sign(self, data: str) -> str:
        mac = hmac.new(self._key, f"{SESSION_KEY}|{data}".encode(), hashlib.sha256)
        return _b64encode(mac.digest())

    def _encode(self, session: dict[str, Any]) -> str:
        payload = json.dumps({"t": int(time.time()), "v": session}, separators=(",", ":"))
        data = _b64encode(payload.encode())
        return f"{data}.{self._sign(data)}"

    def _decode(self, cookie: str) -> dict[str, Any]:
        data, sep, signature = cookie.partition(".")
        if not sep or not hmac.compare_digest(signature, self._sign(data)):
            raise ValueError("session cookie failed verification")
        try:
            payload = json.loads(_b64decode(data))
            stamp = int(payload["t"])
            values = payload["v"]
        except (ValueError, KeyError, TypeError) as exc:
            raise ValueError("session cookie is malformed") from exc
        if time.time() - stamp > MAX_AGE:
            raise ValueError("session cookie expired")
        if not isinstance(values, dict):
            raise ValueError("session cookie is malformed")
        return values

    def _load(self, request: Request) -> dict[str, Any]:
        cached = request.environ.get(self._cache_key)
        if cached is not None:
            return cached
        cookie = request.cookies.get(SESSION_KEY)
        session = self._decode(cookie) if cookie else {}
        request.environ[self._cache_key] = session
        return session

    def _save(self, response: Response, session: dict[str, Any]) -> None:
        response.set_cookie(SESSION_KEY, self._encode(session), max_age=MAX_AGE, path="/")