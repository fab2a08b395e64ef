"""Summary: Error taxonomy for credential resolution and quota lookups.

Importance: Lets callers tell "not installed" apart from "not signed in" without parsing text.
Alternatives: Raise RuntimeError with formatted strings everywhere.
"""

from __future__ import annotations

from copilotquota.models import ProviderFailure


class CredentialError(Exception):
    """Summary: Base class for every credential resolution failure.

    Importance: Carries the user-facing message shown next to the provider name.
    Alternatives: Use plain exception arguments and str(exc).
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreUnavailable(CredentialError):
    """Raised when the editor state database cannot be opened read-only."""


class StoreError(CredentialError):
    """Raised on I/O or corruption errors while querying the state database."""


class UnsupportedFormat(CredentialError):
    """Raised when a stored secret is not a recognised v10 container."""


class MissingSecret(CredentialError):
    """Raised when the platform secret store has no entry for a service name."""


class InvalidSecretEncoding(CredentialError):
    """Raised when a stored secret is not valid UTF-8 text."""


class DecryptFailed(CredentialError):
    """Raised when the block cipher rejects the key, ciphertext, or padding."""


class MalformedSession(CredentialError):
    """Raised when decrypted session data is not an array of session objects."""


class NotInstalled(CredentialError):
    """Raised when no candidate editor installation has a state database."""


class NotSignedIn(CredentialError):
    """Raised when state databases exist but none holds a GitHub session."""


class ToolNotInstalled(CredentialError):
    """Raised when the external CLI cannot be found."""


class ToolNotAuthenticated(CredentialError):
    """Raised when the external CLI reports that the user is not logged in."""


class ToolCommandFailed(CredentialError):
    """Raised for any other external CLI failure."""


class NoProvidersConfigured(CredentialError):
    """Raised when a provider chain is resolved with no providers."""

    def __init__(self, message: str = "No auth providers configured") -> None:
        super().__init__(message)


class AllProvidersFailed(CredentialError):
    """Summary: Aggregate failure after every provider in a chain was tried.

    Importance: Preserves per-provider attribution so callers can render setup guidance.
    Alternatives: Surface only the last provider error.
    """

    def __init__(self, failures: list[ProviderFailure]) -> None:
        self.failures = list(failures)
        super().__init__("No GitHub auth token found")

    def describe(self) -> list[str]:
        """Return one "<provider>: <message>" line per failure, in chain order."""
        return [f"{failure.provider_name}: {failure.message}" for failure in self.failures]


class QuotaError(Exception):
    """Summary: Failure while fetching quota data with a resolved credential.

    Importance: Keeps HTTP problems separate from credential problems.
    Alternatives: Reuse CredentialError for network failures.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class Unauthorized(QuotaError):
    """Raised when the quota endpoint rejects the bearer token."""


def user_facing_message(exc: BaseException) -> str:
    """Summary: Render an exception as the short text shown to users.

    Importance: Keeps provider failure messages consistent across CLI and API.
    Alternatives: Format exceptions at each call site.
    """

    if isinstance(exc, (CredentialError, QuotaError)):
        return exc.message
    text = str(exc).strip()
    return text or "Error"
