"""Summary: Application configuration for Copilot Quota.

Importance: Centralizes environment, .env, and config defaults for consistent behavior.
Alternatives: Use a dedicated settings library like Pydantic Settings.
"""

from __future__ import annotations

import json
import os
import sys
from dataclasses import dataclass
from pathlib import Path


DEFAULT_PRODUCT_NAMES = ("Code - Insiders", "Code", "VSCodium")

DEFAULTS: dict[str, str] = {
    "vscode_products": "",
    "app_support_dir": "",
    "gh_command": "gh",
    "gh_timeout": "15",
    "api_url": "https://api.github.com/copilot_internal/user",
    "api_version": "2025-05-01",
    "request_timeout": "10",
    "bundle_id": "dev.staticvar.copilot-quota-menubar",
    "app_name": "Copilot Quota",
    "user_agent": "",
    "api_host": "127.0.0.1",
    "api_port": "8765",
    "api_key": "",
    "refresh_seconds": "300",
}


@dataclass(frozen=True)
class AppConfig:
    """Summary: Holds configuration values for providers, the quota client, and surfaces.

    Importance: Ensures all components derive settings from a single source of truth.
    Alternatives: Read environment variables ad hoc inside each provider.
    """

    product_names: tuple[str, ...]
    app_support_dir: Path
    gh_command: str
    gh_timeout: float
    api_url: str
    api_version: str
    request_timeout: float
    bundle_id: str
    app_name: str
    user_agent: str
    api_host: str
    api_port: int
    api_key: str
    refresh_seconds: int

    @staticmethod
    def from_env(defaults_path: Path | None = None, dotenv_path: Path | None = None) -> "AppConfig":
        """Summary: Build configuration from defaults, .env, and environment.

        Importance: Keeps every variable defined in one defaults table while allowing overrides.
        Alternatives: Parse only environment variables without a defaults file.
        """

        defaults = dict(DEFAULTS)
        defaults.update(load_defaults(defaults_path or Path("config") / "defaults.json"))
        load_dotenv(dotenv_path or Path(".env"))
        bundle_id = _env("COPILOT_QUOTA_BUNDLE_ID") or defaults["bundle_id"]
        app_support = _env("COPILOT_QUOTA_APP_SUPPORT_DIR") or defaults["app_support_dir"]
        return AppConfig(
            product_names=parse_product_names(
                _env("COPILOT_QUOTA_VSCODE_PRODUCTS") or defaults["vscode_products"]
            ),
            app_support_dir=Path(app_support).expanduser() if app_support else default_app_support_dir(),
            gh_command=_env("COPILOT_QUOTA_GH_COMMAND") or defaults["gh_command"],
            gh_timeout=float(_env("COPILOT_QUOTA_GH_TIMEOUT") or defaults["gh_timeout"]),
            api_url=_env("COPILOT_QUOTA_API_URL") or defaults["api_url"],
            api_version=_env("COPILOT_QUOTA_API_VERSION") or defaults["api_version"],
            request_timeout=float(
                _env("COPILOT_QUOTA_REQUEST_TIMEOUT") or defaults["request_timeout"]
            ),
            bundle_id=bundle_id,
            app_name=_env("COPILOT_QUOTA_APP_NAME") or defaults["app_name"],
            user_agent=_env("COPILOT_QUOTA_USER_AGENT") or defaults["user_agent"] or bundle_id,
            api_host=_env("COPILOT_QUOTA_API_HOST") or defaults["api_host"],
            api_port=int(_env("COPILOT_QUOTA_API_PORT") or defaults["api_port"]),
            api_key=_env("COPILOT_QUOTA_API_KEY") or defaults["api_key"],
            refresh_seconds=int(
                _env("COPILOT_QUOTA_REFRESH_SECONDS") or defaults["refresh_seconds"]
            ),
        )


def parse_product_names(raw: str | None) -> tuple[str, ...]:
    """Summary: Parse a comma-separated product list, falling back to the defaults.

    Importance: Lets users point the editor provider at forks or renamed installs.
    Alternatives: Require a JSON list in the environment.
    """

    if raw:
        parsed = tuple(part.strip() for part in raw.split(",") if part.strip())
        if parsed:
            return parsed
    return DEFAULT_PRODUCT_NAMES


def default_app_support_dir() -> Path:
    """Summary: Resolve the per-user application support directory for this platform.

    Importance: Editors keep their global state under this directory.
    Alternatives: Hardcode the macOS location.
    """

    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    if sys.platform == "win32":
        appdata = os.getenv("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"
    xdg = os.getenv("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg)
    return Path.home() / ".config"


def load_defaults(path: Path) -> dict[str, str]:
    """Summary: Load configuration defaults from JSON when the file exists.

    Importance: Lets deployments ship overrides without touching the environment.
    Alternatives: Inline defaults in the AppConfig initializer only.
    """

    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8"))
    return {key: str(value) for key, value in data.items()}


def load_dotenv(path: Path) -> None:
    """Summary: Load key-value pairs from a .env file into the environment.

    Importance: Keeps local overrides out of shell profiles.
    Alternatives: Use python-dotenv.
    """

    if not path.exists():
        return
    for raw_line in path.read_text(encoding="utf-8").splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        os.environ.setdefault(key.strip(), value.strip())


def _env(key: str) -> str | None:
    value = os.getenv(key)
    if value is None:
        return None
    value = value.strip()
    return value or None
