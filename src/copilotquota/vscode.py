"""Summary: Token provider that reads the GitHub session stored by VS Code.

Importance: Most Copilot users are already signed in through their editor.
Alternatives: Ask users to paste a personal access token.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from copilotquota import container, crypto
from copilotquota.auth import TokenProvider
from copilotquota.config import DEFAULT_PRODUCT_NAMES, AppConfig, default_app_support_dir
from copilotquota.errors import NotInstalled, NotSignedIn, user_facing_message
from copilotquota.keychain import KeyringSecretStore, SecretStore, safe_storage_service
from copilotquota.models import Credential, ProductCandidate
from copilotquota.sessions import parse_sessions, select_token
from copilotquota.storage.state_store import StateStore


logger = logging.getLogger(__name__)

GITHUB_AUTH_SECRET_KEY = 'secret://{"extensionId":"vscode.github-authentication","key":"github.auth"}'
STATE_DB_RELATIVE_PATH = Path("User") / "globalStorage" / "state.vscdb"


def build_candidates(
    product_names: Sequence[str] = DEFAULT_PRODUCT_NAMES,
    app_support_dir: Path | None = None,
) -> list[ProductCandidate]:
    """Summary: Map product names to their expected state database paths.

    Importance: Candidate order decides which install wins when several exist.
    Alternatives: Glob the application support directory.
    """

    base = app_support_dir or default_app_support_dir()
    return [
        ProductCandidate(product_name=name, database_path=base / name / STATE_DB_RELATIVE_PATH)
        for name in product_names
    ]


class VSCodeTokenProvider(TokenProvider):
    """Summary: Decrypts the GitHub authentication session from VS Code's safe storage.

    Importance: Avoids a separate sign-in when the editor already holds a token.
    Alternatives: Drive the editor's extension API.
    """

    kind = "vscode"

    def __init__(
        self,
        candidates: Sequence[ProductCandidate] | None = None,
        secret_store: SecretStore | None = None,
    ) -> None:
        """Summary: Initialize the provider with candidates and a secret store.

        Importance: Both are injectable so tests never touch the real keychain.
        Alternatives: Resolve them lazily on every fetch.
        """

        self._candidates = list(candidates) if candidates is not None else build_candidates()
        self._secret_store = secret_store or KeyringSecretStore()

    @classmethod
    def from_config(cls, config: AppConfig, secret_store: SecretStore | None = None) -> "VSCodeTokenProvider":
        return cls(
            candidates=build_candidates(config.product_names, config.app_support_dir),
            secret_store=secret_store,
        )

    @property
    def candidates(self) -> list[ProductCandidate]:
        return list(self._candidates)

    def fetch_token(self) -> Credential:
        """Summary: Return the first credential found across candidates.

        Importance: One broken install must not hide a working one.
        Alternatives: Stop at the first install found on disk.
        """

        saw_database = False
        last_error: Exception | None = None
        for candidate in self._candidates:
            if not candidate.database_path.is_file():
                logger.debug("No state database for %s.", candidate.product_name)
                continue
            saw_database = True
            try:
                credential = self._fetch_candidate(candidate)
            except Exception as exc:
                logger.info("VS Code candidate %s failed: %s", candidate.product_name, user_facing_message(exc))
                last_error = exc
                continue
            if credential is not None:
                return credential
        if last_error is not None:
            raise last_error
        if saw_database:
            raise NotSignedIn("Not signed in via VS Code")
        raise NotInstalled("VS Code auth data not found")

    def _fetch_candidate(self, candidate: ProductCandidate) -> Credential | None:
        """Summary: Run the lookup, decode, derive, decrypt, and parse steps for one install.

        Importance: Returns None when the install simply has no GitHub session.
        Alternatives: Raise NotSignedIn per candidate.
        """

        raw = StateStore(candidate.database_path).get(GITHUB_AUTH_SECRET_KEY)
        if raw is None:
            return None
        encrypted = container.decode(raw)
        password = self._secret_store.lookup(safe_storage_service(candidate.product_name))
        key = crypto.derive_key(password)
        plaintext = crypto.decrypt(encrypted.ciphertext, key)
        token = select_token(parse_sessions(plaintext))
        if token is None:
            return None
        return Credential(token=token, source=f"VS Code ({candidate.product_name})")
