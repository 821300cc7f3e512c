"""SQLite key-value persistence for user settings."""

from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from docs_agent.config import AgentSettings
from docs_agent.types import EditResult

LOGGER = logging.getLogger(__name__)

SETTINGS_KEYS = ("provider", "api_key", "model", "max_tokens", "temperature", "save_history")


class SQLiteSettingsStore:
    """Stores ``AgentSettings`` fields as rows of a ``kv`` table."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        _ensure_kv_table(self.path)

    def load_settings(self) -> AgentSettings:
        with sqlite3.connect(self.path) as conn:
            rows = conn.execute(
                f"SELECT key, value FROM kv WHERE key IN ({', '.join('?' for _ in SETTINGS_KEYS)})",
                SETTINGS_KEYS,
            ).fetchall()
        data: dict[str, Any] = {key: value for key, value in rows if value != ""}
        return AgentSettings.model_validate(data)

    def save_settings(self, settings: AgentSettings) -> EditResult:
        values = {
            "provider": settings.provider,
            "api_key": settings.api_key.get_secret_value(),
            "model": settings.model or "",
            "max_tokens": str(settings.max_tokens),
            "temperature": str(settings.temperature),
            "save_history": "true" if settings.save_history else "false",
        }
        try:
            with sqlite3.connect(self.path) as conn:
                conn.executemany(
                    "INSERT INTO kv(key, value) VALUES(?, ?) ON CONFLICT(key) DO UPDATE SET value=excluded.value",
                    list(values.items()),
                )
                conn.commit()
        except sqlite3.Error as exc:
            LOGGER.error("Failed to save settings to %s: %s", self.path, exc)
            return EditResult(success=False, error=f"Failed to save settings: {exc}")
        LOGGER.info("Settings saved (provider=%s)", settings.provider)
        return EditResult(success=True)

    def status(self) -> dict[str, Any]:
        """Settings summary without the key itself."""
        return self.load_settings().status()


def _ensure_kv_table(db_path: Path) -> None:
    with sqlite3.connect(db_path) as conn:
        conn.execute(
            "CREATE TABLE IF NOT EXISTS kv (key TEXT PRIMARY KEY, value TEXT NOT NULL)"
        )
        conn.commit()
