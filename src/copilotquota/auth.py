"""Summary: Token provider interface and the ordered provider chain.

Importance: Tries each credential source in priority order and explains every failure.
Alternatives: Hardcode a single credential source.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Sequence

from copilotquota.errors import AllProvidersFailed, NoProvidersConfigured, user_facing_message
from copilotquota.models import Credential, ProviderFailure


logger = logging.getLogger(__name__)

PROVIDER_LABELS = {
    "vscode": "VS Code",
    "gh": "GitHub CLI (gh)",
}


class TokenProvider(ABC):
    """Summary: Abstract source of a GitHub bearer token.

    Importance: Lets the chain stay generic over editor, CLI, and test providers.
    Alternatives: Use provider-specific functions with if/else dispatch.
    """

    kind: str = ""

    @abstractmethod
    def fetch_token(self) -> Credential:
        """Summary: Return a credential or raise a CredentialError explaining why not.

        Importance: Drives every credential resolution.
        Alternatives: Return None on failure and lose the reason.
        """


def provider_label(provider: TokenProvider) -> str:
    """Return the display name for a provider, falling back to its class name."""
    return PROVIDER_LABELS.get(provider.kind, type(provider).__name__)


class ProviderChain(TokenProvider):
    """Summary: Tries providers strictly in order and returns the first credential.

    Importance: The common case is the first provider succeeding, so later ones never run.
    Alternatives: Query providers concurrently and pick the fastest.
    """

    kind = "chain"

    def __init__(self, providers: Sequence[TokenProvider]) -> None:
        self._providers = list(providers)

    @property
    def providers(self) -> list[TokenProvider]:
        return list(self._providers)

    def fetch_token(self) -> Credential:
        return self.resolve()

    def resolve(self) -> Credential:
        """Summary: Resolve a credential, aggregating failures when none is found.

        Importance: Callers render per-provider guidance from the aggregate error.
        Alternatives: Retry failing providers with backoff.
        """

        if not self._providers:
            raise NoProvidersConfigured()
        failures: list[ProviderFailure] = []
        for provider in self._providers:
            name = provider_label(provider)
            try:
                credential = provider.fetch_token()
            except Exception as exc:
                message = user_facing_message(exc)
                logger.info("Provider %s failed: %s", name, message)
                failures.append(ProviderFailure(provider_name=name, message=message))
                continue
            logger.info("Resolved GitHub token from %s.", credential.source)
            return credential
        raise AllProvidersFailed(failures)
