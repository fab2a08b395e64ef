"""Summary: Client for the Copilot premium interaction quota endpoint.

Importance: Exchanges a resolved credential for the numbers users want to see.
Alternatives: Use requests or the GitHub SDK.
"""

from __future__ import annotations

import json
import logging
import urllib.error
import urllib.request
from datetime import datetime
from typing import Any

from copilotquota.auth import TokenProvider
from copilotquota.config import AppConfig
from copilotquota.errors import QuotaError, Unauthorized
from copilotquota.models import PremiumQuota


logger = logging.getLogger(__name__)


def fetch_premium_quota(config: AppConfig, provider: TokenProvider) -> PremiumQuota:
    """Summary: Resolve a token and fetch premium interaction quota.

    Importance: Credential errors propagate unchanged so callers can show setup steps.
    Alternatives: Cache the token between refreshes.
    """

    credential = provider.fetch_token()
    payload = _get_json(config, credential.token)
    quota = parse_quota_payload(payload)
    logger.info("Fetched quota for %s using %s.", quota.login, credential.source)
    return quota


def parse_quota_payload(payload: dict[str, Any], fetched_at: datetime | None = None) -> PremiumQuota:
    """Summary: Normalize the copilot_internal/user payload.

    Importance: Missing sections yield None values instead of errors.
    Alternatives: Validate with a strict Pydantic model.
    """

    snapshots = payload.get("quota_snapshots") or {}
    premium = snapshots.get("premium_interactions") or {}
    return PremiumQuota(
        login=payload.get("login") or "—",
        entitlement=_optional_int(premium.get("entitlement")),
        remaining=_optional_int(premium.get("remaining")),
        unlimited=bool(premium.get("unlimited", False)),
        fetched_at=fetched_at or datetime.now(),
    )


def build_request(config: AppConfig, token: str) -> urllib.request.Request:
    return urllib.request.Request(
        config.api_url,
        headers={
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
            "X-GitHub-Api-Version": config.api_version,
            "User-Agent": config.user_agent,
        },
        method="GET",
    )


def _get_json(config: AppConfig, token: str) -> dict[str, Any]:
    """Summary: Send the authenticated GET request and parse JSON.

    Importance: Maps 401 to a sign-in hint and other statuses to short messages.
    Alternatives: Return raw HTTP responses to the caller.
    """

    request = build_request(config, token)
    try:
        with urllib.request.urlopen(request, timeout=config.request_timeout) as response:
            raw = response.read().decode("utf-8")
    except urllib.error.HTTPError as exc:
        if exc.code == 401:
            raise Unauthorized("Unauthorized (sign in again)", status_code=401) from exc
        raise QuotaError(f"HTTP {exc.code}", status_code=exc.code) from exc
    except (urllib.error.URLError, TimeoutError) as exc:
        raise QuotaError("Network error") from exc
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise QuotaError("Invalid quota response") from exc
    if not isinstance(payload, dict):
        raise QuotaError("Invalid quota response")
    return payload


def _optional_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None
