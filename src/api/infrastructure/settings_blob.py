"""Persisted local settings.

The admin UI keeps one settings blob (selected client, branding, feature
toggles) under a fixed key. Here the blob lives in a JSON file so the demo
CLI can read and reset the same selection. The loaders themselves only ever
receive the selected client as an opaque string.

Blobs carry a ``version``. Older blobs are upgraded by ``migrate_settings``
when they are read, so there is a single current shape and nothing is kept
in sync between two representations.
"""

from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Callable, Mapping
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

SETTINGS_KEY = "flows-admin-demo-settings"
CURRENT_VERSION = 2
DEFAULT_BRANDING = "thepia-default"

logger = structlog.get_logger()


class LocalSettings(BaseModel):
    """Current (version 2) shape of the settings blob.

    Field aliases are the blob's own camelCase keys.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    version: int = CURRENT_VERSION
    selected_client: str = Field(default="", alias="selectedClient")
    selected_branding: str = Field(default=DEFAULT_BRANDING, alias="selectedBranding")
    allow_real_clients: bool = Field(default=False, alias="allowRealClients")
    last_updated: str | None = Field(default=None, alias="lastUpdated")

    def to_blob(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class SettingsMigrationError(ValueError):
    """Raised for blobs that cannot be upgraded to the current version."""


def migrate_settings(blob: Mapping[str, Any]) -> dict[str, Any]:
    """Upgrade a stored blob to the current version.

    Version 1 blobs have no ``version`` key and store the selection as a
    flat ``selectedClientId``; version 2 renames it to ``selectedClient``.

    Raises:
        SettingsMigrationError: The blob is from a newer release, or its
            version is not a number
    """
    data = dict(blob)
    version = data.get("version", 1)
    if not isinstance(version, int) or isinstance(version, bool):
        raise SettingsMigrationError(f"Invalid settings version: {version!r}")
    if version > CURRENT_VERSION:
        raise SettingsMigrationError(
            f"Settings version {version} is newer than supported ({CURRENT_VERSION})"
        )

    if version < 2:
        legacy_client = data.pop("selectedClientId", None)
        if legacy_client and not data.get("selectedClient"):
            data["selectedClient"] = str(legacy_client)
        # v1 tracked brandings inline; the registry owns them now.
        data.pop("availableBrandings", None)
        data["version"] = 2

    return data


class SettingsBlobStore:
    """Reads and writes the settings blob in a JSON file.

    The file may hold other keys besides ``key``; they are preserved on write.
    A missing, unreadable or invalid blob loads as defaults and is logged,
    never raised, the same way the UI falls back to defaults.

    Example:
        store = SettingsBlobStore(Path("~/.flows-admin/settings.json").expanduser())
        store.select_client("hygge-hvidlog")
        assert store.load().selected_client == "hygge-hvidlog"
    """

    def __init__(
        self,
        path: Path,
        key: str = SETTINGS_KEY,
        clock: Callable[[], datetime] | None = None,
    ):
        self._path = path
        self._key = key
        self._clock = clock or (lambda: datetime.now(UTC))

    @property
    def path(self) -> Path:
        return self._path

    def _read_file(self) -> dict[str, Any]:
        try:
            content = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(
                "settings_file_unreadable", path=str(self._path), error=str(e)
            )
            return {}
        if not isinstance(content, dict):
            logger.warning("settings_file_invalid", path=str(self._path))
            return {}
        return content

    def _write_file(self, content: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(content, f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def load(self) -> LocalSettings:
        """Load the blob, migrated to the current version."""
        blob = self._read_file().get(self._key)
        if blob is None:
            return LocalSettings()
        if not isinstance(blob, dict):
            logger.warning("settings_blob_invalid", key=self._key)
            return LocalSettings()
        try:
            return LocalSettings.model_validate(migrate_settings(blob))
        except (SettingsMigrationError, ValidationError) as e:
            logger.warning("settings_blob_invalid", key=self._key, error=str(e))
            return LocalSettings()

    def save(self, settings: LocalSettings) -> LocalSettings:
        """Write the blob, stamping ``lastUpdated``."""
        stamped = settings.model_copy(
            update={"last_updated": self._clock().isoformat()}
        )
        content = self._read_file()
        content[self._key] = stamped.to_blob()
        self._write_file(content)
        return stamped

    def update(self, **changes: Any) -> LocalSettings:
        """Apply field changes (by field name) to the stored blob and save it."""
        current = self.load()
        return self.save(
            LocalSettings.model_validate({**current.model_dump(), **changes})
        )

    def select_client(self, client: str) -> LocalSettings:
        return self.update(selected_client=client)

    def selected_client(self, default: str = "") -> str:
        """The selected client, or ``default`` when none is stored."""
        return self.load().selected_client or default

    def clear(self) -> bool:
        """Remove the blob; returns whether one was stored."""
        content = self._read_file()
        if self._key not in content:
            return False
        del content[self._key]
        self._write_file(content)
        return True
