"""Summary: Decoder for the editor's v10 encrypted secret container.

Importance: Validates the stored blob before any key material is fetched.
Alternatives: Try decryption blindly and rely on padding errors.
"""

from __future__ import annotations

import json

from copilotquota.crypto import BLOCK_SIZE
from copilotquota.errors import UnsupportedFormat
from copilotquota.models import EncryptedContainer


VERSION_TAG = b"v10"


def decode(raw: str | bytes) -> EncryptedContainer:
    """Summary: Parse a Buffer JSON envelope and split it into tag and ciphertext.

    Importance: The state database stores the encrypted secret as serialized Node.js Buffer JSON.
    Alternatives: Store the ciphertext base64-encoded.
    """

    return decode_bytes(decode_buffer_json(raw))


def decode_buffer_json(raw: str | bytes) -> bytes:
    """Summary: Convert {"type":"Buffer","data":[...]} into bytes.

    Importance: Rejects envelopes that are not byte buffers before touching the secret store.
    Alternatives: Accept any JSON list of integers.
    """

    try:
        payload = json.loads(raw)
    except (TypeError, ValueError) as exc:
        raise UnsupportedFormat("Unsupported VS Code secret format") from exc
    if not isinstance(payload, dict):
        raise UnsupportedFormat("Unsupported VS Code secret format")
    if payload.get("type", "Buffer") != "Buffer":
        raise UnsupportedFormat(f"Unsupported VS Code secret type: {payload.get('type')}")
    data = payload.get("data")
    if not isinstance(data, list):
        raise UnsupportedFormat("Unsupported VS Code secret format")
    try:
        return bytes(data)
    except (TypeError, ValueError) as exc:
        raise UnsupportedFormat("VS Code secret buffer holds non-byte values") from exc


def decode_bytes(data: bytes) -> EncryptedContainer:
    """Summary: Validate the v10 tag and return the remaining ciphertext.

    Importance: The container format is fixed upstream; other tags are never decrypted.
    Alternatives: Negotiate the format from the tag.
    """

    if not data.startswith(VERSION_TAG):
        raise UnsupportedFormat("Unsupported VS Code secret format")
    ciphertext = data[len(VERSION_TAG):]
    if len(ciphertext) % BLOCK_SIZE:
        raise UnsupportedFormat(
            f"VS Code secret ciphertext is not a multiple of {BLOCK_SIZE} bytes"
        )
    return EncryptedContainer(version_tag=VERSION_TAG, ciphertext=ciphertext)


def encode_bytes(ciphertext: bytes) -> bytes:
    """Prefix ciphertext with the v10 tag."""
    return VERSION_TAG + ciphertext


def encode_buffer_json(data: bytes) -> str:
    """Serialize bytes as Buffer JSON, matching what the editor writes."""
    return json.dumps({"type": "Buffer", "data": list(data)}, separators=(",", ":"))
