"""Summary: FastAPI application exposing credential and quota status.

Importance: Lets widgets, scripts, and status bars read the quota without running the CLI.
Alternatives: Use a CLI-only workflow or a different web framework.
"""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Header, HTTPException
from pydantic import BaseModel

from copilotquota.app import build_services
from copilotquota.config import AppConfig
from copilotquota.errors import AllProvidersFailed, CredentialError
from copilotquota.services import QuotaService, status_payload


class FailureModel(BaseModel):
    """Summary: One provider failure in an API response."""

    provider: str
    message: str


class AuthStatusResponse(BaseModel):
    """Summary: Credential resolution result without the token itself.

    Importance: The token never leaves the process over HTTP.
    Alternatives: Return the token to trusted local clients.
    """

    ok: bool
    source: str | None = None
    error: str | None = None
    failures: list[FailureModel] = []


def create_app(config: AppConfig, services: QuotaService | None = None) -> FastAPI:
    """Summary: Create a FastAPI app wired to the quota service.

    Importance: Ensures the API layer shares the same configuration and providers.
    Alternatives: Instantiate services globally outside the factory.
    """

    if not logging.getLogger().handlers:
        logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    app = FastAPI(title=f"{config.app_name} API", version="0.1.0")
    services = services or build_services(config)

    def require_api_key(x_api_key: str | None = Header(default=None)) -> None:
        """Summary: Enforce API key authentication when configured.

        Importance: Adds a minimal guard when the API listens beyond localhost.
        Alternatives: Use OAuth or session-based authentication.
        """

        if not config.api_key:
            return
        if x_api_key != config.api_key:
            raise HTTPException(status_code=401, detail="Invalid API key")

    @app.get("/health")
    def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/providers", dependencies=[Depends(require_api_key)])
    def providers() -> dict[str, list[str]]:
        return {
            "providers": services.provider_names(),
            "vscode_products": list(config.product_names),
        }

    @app.get("/auth", response_model=AuthStatusResponse, dependencies=[Depends(require_api_key)])
    def auth_status() -> AuthStatusResponse:
        """Summary: Report which provider currently yields a credential.

        Importance: Helps users debug setup without exposing the token; failures map to 503.
        Alternatives: Only report failures through /quota.
        """

        try:
            credential = services.resolve_credential()
        except AllProvidersFailed as exc:
            failed = AuthStatusResponse(
                ok=False,
                error=exc.message,
                failures=[
                    FailureModel(provider=failure.provider_name, message=failure.message)
                    for failure in exc.failures
                ],
            )
            raise HTTPException(status_code=503, detail=failed.model_dump()) from exc
        except CredentialError as exc:
            failed = AuthStatusResponse(ok=False, error=exc.message)
            raise HTTPException(status_code=503, detail=failed.model_dump()) from exc
        return AuthStatusResponse(ok=True, source=credential.source)

    @app.get("/quota", dependencies=[Depends(require_api_key)])
    def quota() -> dict[str, object]:
        """Summary: Fetch the premium request quota.

        Importance: Maps setup problems to 503 and rejected tokens to 401.
        Alternatives: Always return 200 with an error field.
        """

        status = services.refresh()
        payload = status_payload(status)
        if status.ok:
            return payload
        if status.unauthorized:
            raise HTTPException(status_code=401, detail=payload)
        raise HTTPException(status_code=503, detail=payload)

    return app
