"""Summary: Application factory wiring providers and services.

Importance: Centralizes dependency creation for the CLI and API layers.
Alternatives: Instantiate providers manually in each entrypoint.
"""

from __future__ import annotations

from copilotquota.auth import ProviderChain, TokenProvider
from copilotquota.config import AppConfig
from copilotquota.gh import GitHubCliTokenProvider
from copilotquota.keychain import SecretStore
from copilotquota.services import QuotaService
from copilotquota.vscode import VSCodeTokenProvider


def default_providers(config: AppConfig, secret_store: SecretStore | None = None) -> list[TokenProvider]:
    """Summary: Build the default provider order: VS Code first, then the GitHub CLI.

    Importance: The editor session needs no extra setup, so it is tried first.
    Alternatives: Let users reorder providers in configuration.
    """

    return [
        VSCodeTokenProvider.from_config(config, secret_store=secret_store),
        GitHubCliTokenProvider.from_config(config),
    ]


def build_chain(config: AppConfig, secret_store: SecretStore | None = None) -> ProviderChain:
    return ProviderChain(default_providers(config, secret_store=secret_store))


def build_services(config: AppConfig, chain: ProviderChain | None = None) -> QuotaService:
    """Summary: Build the quota service from configuration.

    Importance: Provides a single construction path for the application.
    Alternatives: Instantiate services directly within the CLI entrypoint.
    """

    return QuotaService(config=config, chain=chain or build_chain(config))
