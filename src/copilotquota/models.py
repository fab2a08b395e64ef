"""Summary: Domain model dataclasses for Copilot Quota.

Importance: Defines the values passed between providers, the chain, and the quota client.
Alternatives: Use Pydantic models or plain dictionaries.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass(frozen=True)
class Credential:
    """Summary: A resolved bearer token plus a label describing where it came from.

    Importance: The only value handed to the quota client; never written to disk.
    Alternatives: Pass bare token strings and lose the origin for diagnostics.
    """

    token: str
    source: str

    def __post_init__(self) -> None:
        if not self.token:
            raise ValueError("Credential token must not be empty")

    def __repr__(self) -> str:
        return f"Credential(token='***', source={self.source!r})"


@dataclass(frozen=True)
class ProviderFailure:
    """Summary: One provider's failure inside a chain resolution.

    Importance: Lets the caller explain which provider failed and why.
    Alternatives: Keep only the last error message.
    """

    provider_name: str
    message: str


@dataclass(frozen=True)
class EncryptedContainer:
    """Summary: A parsed v10 container, split into version tag and ciphertext.

    Importance: Separates format validation from decryption.
    Alternatives: Slice raw bytes inline in the provider.
    """

    version_tag: bytes
    ciphertext: bytes


@dataclass(frozen=True)
class SessionRecord:
    """Summary: One authentication session decoded from the editor secret."""

    access_token: str


@dataclass(frozen=True)
class ProductCandidate:
    """Summary: An editor product whose state database may exist on disk.

    Importance: Order of candidates decides precedence between installs.
    Alternatives: Scan the application support directory for any editor.
    """

    product_name: str
    database_path: Path


@dataclass(frozen=True)
class PremiumQuota:
    """Summary: Snapshot of premium interaction quota for the signed-in user.

    Importance: Normalizes the quota payload for CLI and API rendering.
    Alternatives: Pass the raw JSON payload to renderers.
    """

    login: str
    entitlement: int | None
    remaining: int | None
    unlimited: bool
    fetched_at: datetime

    def percent_remaining(self) -> float | None:
        """Return the remaining share in percent, or None when it cannot be computed."""
        if self.unlimited or self.remaining is None or not self.entitlement:
            return None
        return (self.remaining / self.entitlement) * 100
