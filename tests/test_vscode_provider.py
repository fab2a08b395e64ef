"""Summary: Tests for the VS Code safe-storage token provider.

Importance: Covers candidate precedence and the not-installed / not-signed-in distinction.
Alternatives: Validate against a real editor install manually.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from conftest import create_state_db
from copilotquota.errors import (
    DecryptFailed,
    MalformedSession,
    MissingSecret,
    NotInstalled,
    NotSignedIn,
    UnsupportedFormat,
)
from copilotquota.keychain import MappingSecretStore, SecretStore
from copilotquota.vscode import GITHUB_AUTH_SECRET_KEY, VSCodeTokenProvider, build_candidates


PASSWORDS = {
    "Code - Insiders Safe Storage": "insiders-password",
    "Code Safe Storage": "correct-password",
    "VSCodium Safe Storage": "codium-password",
}


def _provider(tmp_path: Path, products: tuple[str, ...] = ("Code - Insiders", "Code", "VSCodium")) -> VSCodeTokenProvider:
    return VSCodeTokenProvider(
        candidates=build_candidates(products, tmp_path),
        secret_store=MappingSecretStore(PASSWORDS),
    )


def test_build_candidates_uses_global_storage_path(tmp_path: Path) -> None:
    """Summary: Verify candidate paths point at the global storage database.

    Importance: Matches the editor's on-disk layout.
    Alternatives: Search the directory tree.
    """

    candidates = build_candidates(("Code",), tmp_path)
    assert candidates[0].product_name == "Code"
    assert candidates[0].database_path == tmp_path / "Code" / "User" / "globalStorage" / "state.vscdb"


def test_decrypts_token_end_to_end(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Decrypt a v10 secret written with the editor's parameters.

    Importance: Exercises store, container, secret store, KDF, cipher, and parser together.
    Alternatives: Test each unit in isolation only.
    """

    make_install("Code", sessions=[{"accessToken": "tok_123"}], password="correct-password")
    credential = _provider(tmp_path).fetch_token()
    assert credential.token == "tok_123"
    assert "Code" in credential.source
    assert credential.source == "VS Code (Code)"


def test_earlier_candidate_wins(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Ensure earlier products take precedence.

    Importance: Insiders users expect their primary install to win.
    Alternatives: Pick the newest database.
    """

    make_install("Code", sessions=[{"accessToken": "stable"}], password="correct-password")
    make_install("Code - Insiders", sessions=[{"accessToken": "insiders"}], password="insiders-password")
    assert _provider(tmp_path).fetch_token().token == "insiders"


def test_no_database_is_not_installed(tmp_path: Path) -> None:
    """Summary: Ensure no databases means not installed.

    Importance: Setup guidance points to installing the editor.
    Alternatives: Report not signed in.
    """

    with pytest.raises(NotInstalled) as excinfo:
        _provider(tmp_path).fetch_token()
    assert excinfo.value.message == "VS Code auth data not found"


def test_missing_key_is_not_signed_in(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Ensure an install without a session is not signed in.

    Importance: Users are told to sign in instead of reinstalling.
    Alternatives: Report not installed.
    """

    make_install("Code")
    with pytest.raises(NotSignedIn) as excinfo:
        _provider(tmp_path).fetch_token()
    assert excinfo.value.message == "Not signed in via VS Code"


def test_only_empty_tokens_is_not_signed_in(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Ensure sessions with only empty tokens count as not signed in.

    Importance: Blank tokens cannot authenticate.
    Alternatives: Return an empty credential.
    """

    make_install("Code", sessions=[{"accessToken": ""}], password="correct-password")
    with pytest.raises(NotSignedIn):
        _provider(tmp_path).fetch_token()


def test_failing_candidate_falls_through_to_next(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: A broken install does not hide a working one later in the list.

    Importance: Users often have stale data from one product next to a working install.
    Alternatives: Abort on the first error.
    """

    make_install("Other", sessions=[{"accessToken": "x"}])
    make_install("Code", sessions=[{"accessToken": "tok_stable"}], password="correct-password")
    assert _provider(tmp_path, ("Other", "Code")).fetch_token().token == "tok_stable"


def test_candidate_error_beats_not_signed_in(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Ensure a real candidate error wins over a plain not-signed-in outcome.

    Importance: The error is more useful for fixing setup.
    Alternatives: Always report not signed in.
    """

    make_install("Other", sessions=[{"accessToken": "x"}])
    make_install("Code")
    with pytest.raises(MissingSecret) as excinfo:
        _provider(tmp_path, ("Other", "Code")).fetch_token()
    assert "Other Safe Storage" in excinfo.value.message


def test_unsupported_container_is_reported(tmp_path: Path) -> None:
    """Summary: Ensure unsupported secret formats are reported.

    Importance: Other encryption versions need a clear message.
    Alternatives: Skip the candidate silently.
    """

    create_state_db(
        tmp_path / "Code" / "User" / "globalStorage" / "state.vscdb",
        {GITHUB_AUTH_SECRET_KEY: '{"type":"Buffer","data":[118,49,49,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0,0]}'},
    )
    with pytest.raises(UnsupportedFormat):
        _provider(tmp_path, ("Code",)).fetch_token()


def test_wrong_password_fails_to_decrypt(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Ensure a wrong keychain password fails decryption or parsing.

    Importance: A mismatched keychain item must not yield a token.
    Alternatives: Trust any decrypted output.
    """

    make_install("Code", sessions=[{"accessToken": "tok"}], password="correct-password")
    provider = VSCodeTokenProvider(
        candidates=build_candidates(("Code",), tmp_path),
        secret_store=MappingSecretStore({"Code Safe Storage": "not-the-password"}),
    )
    with pytest.raises((DecryptFailed, MalformedSession)):
        provider.fetch_token()


class RaisingForProductStore(SecretStore):
    """Summary: Secret store whose backend blows up for one product.

    Importance: Models keyring backends that raise errors outside the credential taxonomy.
    Alternatives: Patch the keyring module globally.
    """

    def __init__(self, broken_service: str, passwords: dict[str, str]) -> None:
        self._broken_service = broken_service
        self._inner = MappingSecretStore(passwords)

    def lookup(self, service_name: str) -> str:
        if service_name == self._broken_service:
            raise RuntimeError("backend exploded")
        return self._inner.lookup(service_name)


def test_unexpected_error_falls_through_to_next(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: An error outside the credential taxonomy still moves on to the next install.

    Importance: A flaky keychain backend for one product must not hide a working install.
    Alternatives: Let unexpected errors abort the whole provider.
    """

    make_install("Broken", sessions=[{"accessToken": "x"}])
    make_install("Code", sessions=[{"accessToken": "tok_ok"}], password="correct-password")
    provider = VSCodeTokenProvider(
        candidates=build_candidates(("Broken", "Code"), tmp_path),
        secret_store=RaisingForProductStore("Broken Safe Storage", PASSWORDS),
    )
    assert provider.fetch_token().token == "tok_ok"


def test_unexpected_error_is_reported_when_last(tmp_path: Path, make_install: Callable[..., Path]) -> None:
    """Summary: Ensure an unexpected error from the only install is re-raised.

    Importance: The chain records it as the provider's failure.
    Alternatives: Convert it to not signed in.
    """

    make_install("Broken", sessions=[{"accessToken": "x"}])
    provider = VSCodeTokenProvider(
        candidates=build_candidates(("Broken",), tmp_path),
        secret_store=RaisingForProductStore("Broken Safe Storage", PASSWORDS),
    )
    with pytest.raises(RuntimeError, match="backend exploded"):
        provider.fetch_token()
