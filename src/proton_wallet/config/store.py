"""Persisted user config and address book.

Both files are plain JSON in the profile directory. A file that fails to
parse is never reported to the user: its bytes are copied aside to
``<name>.notvalid.json`` and the defaults take its place.
"""

from __future__ import annotations

import json
import logging
import shutil
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field

from proton_wallet.config.defaults import ADDRESS_BOOK_FILE, CONFIG_FILE, default_config
from proton_wallet.errors.definitions import ErrConfigNotLoaded

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from pathlib import Path

logger = logging.getLogger(__name__)


def _backup_path(path: Path) -> Path:
    return path.with_name(f"{path.stem}.notvalid{path.suffix}")


def _back_up_corrupt(path: Path, reason: str = "is not valid JSON") -> Path:
    """Copy an unusable file aside and return the backup location."""
    backup = _backup_path(path)
    shutil.copyfile(path, backup)
    logger.warning("%s %s, copied it to %s", path.name, reason, backup)
    return backup


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


class ConfigStore:
    """Owner of the ``config.json`` record.

    Usage::

        store = ConfigStore(profile_dir)
        config = store.load()
        store.set("darkMode", True)
    """

    def __init__(
        self,
        directory: Path,
        *,
        defaults: Mapping[str, Any] | None = None,
        first_run_overrides: Callable[[], Mapping[str, Any]] | None = None,
    ) -> None:
        """Initialize the store (nothing is read until ``load()``).

        Args:
            directory: Profile directory holding ``config.json``.
            defaults: Compiled-in defaults; the package defaults when omitted.
            first_run_overrides: Called once when no config file exists yet;
                its values are layered over the defaults (e.g. system dark mode).
        """
        self._directory = directory
        self._path = directory / CONFIG_FILE
        self._defaults = dict(defaults) if defaults is not None else default_config()
        self._first_run_overrides = first_run_overrides
        self._config: dict[str, Any] | None = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def is_loaded(self) -> bool:
        return self._config is not None

    @property
    def config(self) -> dict[str, Any]:
        """A copy of the in-memory config record."""
        if self._config is None:
            raise ErrConfigNotLoaded
        return dict(self._config)

    def load(self) -> dict[str, Any]:
        """Read, repair and merge the persisted config, then write it back.

        Returns:
            The merged config (defaults overlaid by persisted values).
        """
        persisted = self._read_persisted()
        if persisted is None:
            merged = dict(self._defaults)
            if not self._path.exists() and self._first_run_overrides is not None:
                logger.info("Creating new config.")
                merged.update(self._first_run_overrides())
        else:
            merged = {**self._defaults, **persisted}
        self._config = merged
        self._write()
        return dict(merged)

    def get(self, key: str, default: Any = None) -> Any:
        if self._config is None:
            raise ErrConfigNotLoaded
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Update one key and rewrite the whole record to disk."""
        if self._config is None:
            raise ErrConfigNotLoaded
        logger.debug("Config update: %s set to %r", key, value)
        self._config[key] = value
        self._write()

    def _read_persisted(self) -> dict[str, Any] | None:
        if not self._path.exists():
            return None
        raw = self._path.read_bytes()
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError):
            _back_up_corrupt(self._path)
            return None
        if not isinstance(data, dict):
            _back_up_corrupt(self._path)
            return None
        return data

    def _write(self) -> None:
        self._path.write_text(json.dumps(self._config, indent=4), encoding="utf-8")
        logger.debug("Wrote config file to disk.")


# ---------------------------------------------------------------------------
# Address book
# ---------------------------------------------------------------------------


class AddressBookEntry(BaseModel):
    """One saved contact. Unknown keys written by other versions are kept."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str
    address: str
    payment_id: str = Field(default="", alias="paymentID")

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_unset=True)


class AddressBookStore:
    """Owner of ``addressBook.json`` (a JSON array of entries)."""

    def __init__(self, directory: Path) -> None:
        self._path = directory / ADDRESS_BOOK_FILE
        self._entries: list[AddressBookEntry] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def entries(self) -> list[AddressBookEntry]:
        return list(self._entries)

    def load(self) -> list[AddressBookEntry]:
        """Read the address book, initialising it to ``[]`` if absent or corrupt."""
        if not self._path.exists():
            self._entries = []
            self._write()
            return []

        raw = self._path.read_bytes()
        try:
            data = json.loads(raw)
        except (UnicodeDecodeError, json.JSONDecodeError):
            data = None
        if not isinstance(data, list):
            _back_up_corrupt(self._path)
            self._entries = []
            self._write()
            return []

        entries = []
        malformed = False
        for item in data:
            try:
                entries.append(AddressBookEntry.model_validate(item))
            except ValueError:
                logger.warning("Skipping malformed address book entry: %r", item)
                malformed = True
        if malformed:
            _back_up_corrupt(self._path, "has malformed entries")
        self._entries = entries
        return list(entries)

    def save(self, entries: list[AddressBookEntry]) -> None:
        self._entries = list(entries)
        self._write()

    def add(self, entry: AddressBookEntry) -> None:
        self._entries.append(entry)
        self._write()

    def _write(self) -> None:
        payload = [entry.to_json() for entry in self._entries]
        self._path.write_text(json.dumps(payload, indent=4), encoding="utf-8")
