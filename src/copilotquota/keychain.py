"""Summary: Secret-store accessors for the editor's safe storage password.

Importance: The AES key is derived from a password the editor keeps in the OS credential store.
Alternatives: Shell out to platform tools such as `security find-generic-password`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Mapping

import keyring
from keyring.errors import KeyringError

from copilotquota.errors import InvalidSecretEncoding, MissingSecret


logger = logging.getLogger(__name__)

SAFE_STORAGE_SUFFIX = " Safe Storage"


def safe_storage_service(product_name: str) -> str:
    """Return the service name the editor uses for its safe storage password."""
    return f"{product_name}{SAFE_STORAGE_SUFFIX}"


class SecretStore(ABC):
    """Summary: Abstract lookup of a secret by exact service name.

    Importance: Keeps the editor provider independent of the platform backend.
    Alternatives: Call keyring directly from the provider.
    """

    @abstractmethod
    def lookup(self, service_name: str) -> str:
        """Summary: Return the stored secret as stripped UTF-8 text.

        Importance: Feeds the key derivation step.
        Alternatives: Return raw bytes and decode at the call site.
        """


class KeyringSecretStore(SecretStore):
    """Summary: Secret store backed by the `keyring` package.

    Importance: Maps to macOS Keychain, Windows Credential Locker, or Secret Service.
    Alternatives: Use secretstorage or pyobjc directly.
    """

    def lookup(self, service_name: str) -> str:
        """Summary: Find the password stored under service_name.

        Importance: Electron stores the password under "<Product> Safe Storage" with
        an account of "<Product> Key", so that account is tried when the backend
        cannot match on service alone.
        Alternatives: Require users to configure the account name.
        """

        for account in _candidate_accounts(service_name):
            try:
                if account is None:
                    credential = keyring.get_credential(service_name, None)
                    secret = credential.password if credential is not None else None
                else:
                    secret = keyring.get_password(service_name, account)
            except KeyringError as exc:
                raise MissingSecret(f"Keychain unavailable for {service_name}: {exc}") from exc
            except UnicodeDecodeError as exc:
                raise InvalidSecretEncoding(f"Invalid keychain data: {service_name}") from exc
            if secret is not None:
                logger.debug("Found secret-store entry for %s.", service_name)
                return _as_text(secret, service_name)
        raise MissingSecret(f"Missing keychain item: {service_name}")


class MappingSecretStore(SecretStore):
    """Summary: In-memory secret store keyed by exact service name.

    Importance: Supports tests and hosts that already hold the password.
    Alternatives: Install a keyring backend for every test run.
    """

    def __init__(self, secrets: Mapping[str, str | bytes]) -> None:
        self._secrets = dict(secrets)

    def lookup(self, service_name: str) -> str:
        if service_name not in self._secrets:
            raise MissingSecret(f"Missing keychain item: {service_name}")
        return _as_text(self._secrets[service_name], service_name)


def _candidate_accounts(service_name: str) -> list[str | None]:
    accounts: list[str | None] = [None]
    if service_name.endswith(SAFE_STORAGE_SUFFIX):
        product = service_name[: -len(SAFE_STORAGE_SUFFIX)]
        accounts.extend([f"{product} Key", product])
    return accounts


def _as_text(secret: str | bytes, service_name: str) -> str:
    if isinstance(secret, bytes):
        try:
            secret = secret.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise InvalidSecretEncoding(f"Invalid keychain data: {service_name}") from exc
    return secret.strip()
