"""Summary: Quota refresh and status rendering services.

Importance: Turns quota results and resolution failures into text users can act on.
Alternatives: Format output separately in every surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from copilotquota.auth import ProviderChain, provider_label
from copilotquota.config import AppConfig
from copilotquota.errors import AllProvidersFailed, Unauthorized, user_facing_message
from copilotquota.models import Credential, PremiumQuota, ProviderFailure
from copilotquota.quota import fetch_premium_quota


logger = logging.getLogger(__name__)

SETUP_LINKS = (
    ("Install VS Code", "https://code.visualstudio.com/"),
    ("Install GitHub CLI (gh)", "https://cli.github.com/"),
    ("Sign in with gh", "https://cli.github.com/manual/gh_auth_login"),
)
USAGE_URL = "https://github.com/settings/billing"


@dataclass(frozen=True)
class QuotaStatus:
    """Summary: Outcome of one refresh, either a quota snapshot or an error.

    Importance: Surfaces render from one value instead of try/except blocks.
    Alternatives: Let exceptions reach the surfaces.
    """

    quota: PremiumQuota | None = None
    error: str | None = None
    failures: list[ProviderFailure] = field(default_factory=list)
    needs_setup: bool = False
    unauthorized: bool = False

    @property
    def ok(self) -> bool:
        return self.quota is not None


@dataclass(frozen=True)
class QuotaService:
    """Summary: Resolves credentials and fetches quota for the configured providers.

    Importance: Each refresh is independent; nothing is cached between calls.
    Alternatives: Keep the last good token in memory.
    """

    config: AppConfig
    chain: ProviderChain

    def resolve_credential(self) -> Credential:
        return self.chain.resolve()

    def provider_names(self) -> list[str]:
        return [provider_label(provider) for provider in self.chain.providers]

    def refresh(self) -> QuotaStatus:
        """Summary: Fetch quota once and capture any failure as a status.

        Importance: A failed refresh is an expected state, not a crash.
        Alternatives: Retry inside the service.
        """

        try:
            quota = fetch_premium_quota(self.config, self.chain)
        except AllProvidersFailed as exc:
            logger.info("No GitHub auth token found.")
            return QuotaStatus(error=exc.message, failures=exc.failures, needs_setup=True)
        except Unauthorized as exc:
            return QuotaStatus(error=exc.message, needs_setup=True, unauthorized=True)
        except Exception as exc:
            logger.warning("Quota refresh failed: %s", exc)
            return QuotaStatus(error=user_facing_message(exc))
        return QuotaStatus(quota=quota)


def format_quota_line(quota: PremiumQuota) -> str:
    if quota.unlimited:
        return "Premium requests: Unlimited"
    if quota.remaining is not None and quota.entitlement is not None:
        return f"Premium requests: {quota.remaining} / {quota.entitlement} remaining"
    return "Premium requests: —"


def format_percent(quota: PremiumQuota) -> str:
    if quota.unlimited:
        return "∞"
    percent = quota.percent_remaining()
    if percent is None:
        return "—"
    return f"{percent:.1f}%"


def format_status(status: QuotaStatus, app_name: str = "Copilot Quota") -> list[str]:
    """Summary: Render a status as the lines shown by the CLI.

    Importance: Mirrors the menu layout: user, quota, remaining share, and setup help.
    Alternatives: Emit JSON only.
    """

    lines = [app_name]
    if status.quota is not None:
        quota = status.quota
        lines.append(f"User: {quota.login}")
        lines.append(format_quota_line(quota))
        lines.append(f"Remaining: {format_percent(quota)}")
        lines.append(f"Last updated: {quota.fetched_at.strftime('%H:%M')}")
        lines.append(f"Usage details: {USAGE_URL}")
        return lines

    lines.append("User: —")
    lines.append(f"Premium requests: {status.error or 'Error'}")
    lines.append("Last updated: —")
    if status.needs_setup:
        lines.append("")
        lines.append("Setup required")
        if status.failures:
            lines.extend(f"  {failure.provider_name}: {failure.message}" for failure in status.failures)
        else:
            lines.append("  Sign in via VS Code or GitHub CLI.")
        lines.extend(f"  {label}: {url}" for label, url in SETUP_LINKS)
    return lines


def status_payload(status: QuotaStatus) -> dict[str, object]:
    """Summary: Convert a status into a JSON-serializable dictionary.

    Importance: Shared by `quota --json` and the HTTP API.
    Alternatives: Serialize dataclasses with asdict.
    """

    if status.quota is not None:
        quota = status.quota
        return {
            "ok": True,
            "login": quota.login,
            "entitlement": quota.entitlement,
            "remaining": quota.remaining,
            "unlimited": quota.unlimited,
            "percent_remaining": quota.percent_remaining(),
            "fetched_at": quota.fetched_at.isoformat(),
        }
    return {
        "ok": False,
        "error": status.error,
        "needs_setup": status.needs_setup,
        "failures": [
            {"provider": failure.provider_name, "message": failure.message}
            for failure in status.failures
        ],
    }
