"""Summary: Parser for the decrypted GitHub authentication sessions.

Importance: Turns decrypted bytes into session records and picks the usable token.
Alternatives: Regex the access token out of the plaintext.
"""

from __future__ import annotations

import json
from typing import Iterable

from copilotquota.errors import MalformedSession
from copilotquota.models import SessionRecord


def parse_sessions(plaintext: bytes) -> list[SessionRecord]:
    """Summary: Decode a JSON array of session objects, ignoring unknown fields.

    Importance: Newer editor versions add fields; only accessToken is required.
    Alternatives: Validate against a strict schema.
    """

    try:
        payload = json.loads(plaintext.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MalformedSession("Decrypted VS Code session data is not valid JSON") from exc
    if not isinstance(payload, list):
        raise MalformedSession("Decrypted VS Code session data is not a list")
    records = []
    for index, item in enumerate(payload):
        if not isinstance(item, dict):
            raise MalformedSession(f"VS Code session {index} is not an object")
        token = item.get("accessToken")
        if not isinstance(token, str):
            raise MalformedSession(f"VS Code session {index} has no accessToken string")
        records.append(SessionRecord(access_token=token))
    return records


def select_token(records: Iterable[SessionRecord]) -> str | None:
    """Return the first non-empty access token in array order."""
    for record in records:
        if record.access_token:
            return record.access_token
    return None
