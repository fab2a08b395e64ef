"""Summary: Shared fixtures for building editor state databases.

Importance: Tests exercise real SQLite files and real AES ciphertext.
Alternatives: Mock the store and cipher in every test.
"""

from __future__ import annotations

import json
import sqlite3
from pathlib import Path
from typing import Any, Callable

import pytest

from copilotquota import container, crypto
from copilotquota.config import AppConfig
from copilotquota.vscode import GITHUB_AUTH_SECRET_KEY, STATE_DB_RELATIVE_PATH


def create_state_db(path: Path, items: dict[str, str] | None = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    connection = sqlite3.connect(path)
    try:
        connection.execute("CREATE TABLE ItemTable (key TEXT UNIQUE ON CONFLICT REPLACE, value BLOB)")
        for key, value in (items or {}).items():
            connection.execute("INSERT INTO ItemTable (key, value) VALUES (?, ?)", (key, value))
        connection.commit()
    finally:
        connection.close()
    return path


def encrypted_sessions(sessions: Any, password: str) -> str:
    plaintext = json.dumps(sessions).encode("utf-8")
    ciphertext = crypto.encrypt(plaintext, crypto.derive_key(password))
    return container.encode_buffer_json(container.encode_bytes(ciphertext))


@pytest.fixture
def make_install(tmp_path: Path) -> Callable[..., Path]:
    """Summary: Create an editor install with an optional encrypted GitHub session.

    Importance: Mirrors the on-disk layout under the application support directory.
    Alternatives: Point providers at hand-built paths in every test.
    """

    def _make(product: str, sessions: Any = None, password: str = "correct-password") -> Path:
        items = {}
        if sessions is not None:
            items[GITHUB_AUTH_SECRET_KEY] = encrypted_sessions(sessions, password)
        return create_state_db(tmp_path / product / STATE_DB_RELATIVE_PATH, items)

    return _make


def build_config(**overrides: Any) -> AppConfig:
    values: dict[str, Any] = {
        "product_names": ("Code - Insiders", "Code", "VSCodium"),
        "app_support_dir": Path("/nonexistent"),
        "gh_command": "gh",
        "gh_timeout": 5.0,
        "api_url": "https://api.github.com/copilot_internal/user",
        "api_version": "2025-05-01",
        "request_timeout": 5.0,
        "bundle_id": "dev.staticvar.copilot-quota-menubar",
        "app_name": "Copilot Quota",
        "user_agent": "dev.staticvar.copilot-quota-menubar",
        "api_host": "127.0.0.1",
        "api_port": 8765,
        "api_key": "",
        "refresh_seconds": 300,
    }
    values.update(overrides)
    return AppConfig(**values)
