"""Summary: Token provider that asks the GitHub CLI for its stored token.

Importance: Fallback for users who are signed in with `gh` but not through the editor.
Alternatives: Read gh's hosts.yml directly.
"""

from __future__ import annotations

import logging
import subprocess
from typing import Sequence

from copilotquota.auth import TokenProvider
from copilotquota.config import AppConfig
from copilotquota.errors import ToolCommandFailed, ToolNotAuthenticated, ToolNotInstalled
from copilotquota.models import Credential


logger = logging.getLogger(__name__)

GH_TOKEN_ARGS = ("auth", "token")

# Matched case-insensitively against gh's stderr. gh does not promise stable
# wording, so a change upstream only degrades the message category.
NOT_INSTALLED_MARKERS = ("no such file", "not found", "env: gh")
NOT_AUTHENTICATED_MARKERS = ("gh auth login", "not logged", "authentication", "credentials")


class GitHubCliTokenProvider(TokenProvider):
    """Summary: Runs `gh auth token` and returns its stdout as the credential.

    Importance: Works on any platform where gh is installed.
    Alternatives: Use the gh extension API.
    """

    kind = "gh"

    def __init__(self, command: str = "gh", timeout: float | None = 15.0) -> None:
        self._command = command
        self._timeout = timeout

    @classmethod
    def from_config(cls, config: AppConfig) -> "GitHubCliTokenProvider":
        return cls(command=config.gh_command, timeout=config.gh_timeout)

    @property
    def argv(self) -> list[str]:
        return [self._command, *GH_TOKEN_ARGS]

    def fetch_token(self) -> Credential:
        """Summary: Invoke gh and classify failures into actionable categories.

        Importance: "Not installed" and "not logged in" need different guidance.
        Alternatives: Surface gh's raw stderr.
        """

        try:
            result = subprocess.run(
                self.argv,
                capture_output=True,
                text=True,
                timeout=self._timeout,
                check=False,
            )
        except FileNotFoundError as exc:
            raise ToolNotInstalled("GitHub CLI (gh) not installed") from exc
        except subprocess.TimeoutExpired as exc:
            raise ToolCommandFailed("gh timed out") from exc
        except OSError as exc:
            raise classify_failure(str(exc)) from exc

        if result.returncode != 0:
            logger.debug("gh exited with status %s.", result.returncode)
            raise classify_failure(result.stderr)

        token = result.stdout.strip()
        if not token:
            raise ToolCommandFailed("gh returned empty token")
        return Credential(token=token, source="gh")


def classify_failure(error_text: str | None) -> Exception:
    """Summary: Map gh error output to a credential error.

    Importance: Best-effort text matching; unknown wording falls through to a generic failure.
    Alternatives: Parse gh exit codes only.
    """

    message = (error_text or "").strip()
    lowered = message.lower()
    if _contains_any(lowered, NOT_INSTALLED_MARKERS):
        return ToolNotInstalled("GitHub CLI (gh) not installed")
    if _contains_any(lowered, NOT_AUTHENTICATED_MARKERS):
        return ToolNotAuthenticated("GitHub CLI not authenticated (run: gh auth login)")
    return ToolCommandFailed(message or "Command failed")


def _contains_any(text: str, markers: Sequence[str]) -> bool:
    return any(marker in text for marker in markers)
