"""
Clinic state stores.

The clinic keeps four collections (patients, episodes, visits, referrals) and
one settings document. A store loads and saves them wholesale; alert state is
never stored, it is derived again after every save.
"""

import json
import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from footclinic.models.records import ClinicalSettings, ClinicState
from footclinic.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class StateStore(ABC):
    """Base class for all clinic state backends."""

    backend: str = ""

    @abstractmethod
    def load_state(self) -> ClinicState:
        """Return the current clinic state."""

    @abstractmethod
    def save_state(self, state: ClinicState) -> None:
        """Replace the stored collections with ``state``."""

    @abstractmethod
    def get_settings(self) -> ClinicalSettings:
        """Return the clinical settings (defaults if never saved)."""

    @abstractmethod
    def save_settings(self, settings: ClinicalSettings) -> None:
        """Replace the clinical settings document."""


class InMemoryStateStore(StateStore):
    """Process-local store. Used by default and in tests."""

    backend = "memory"

    def __init__(self, state: Optional[ClinicState] = None, settings: Optional[ClinicalSettings] = None):
        self._state = state or ClinicState()
        self._settings = settings or ClinicalSettings()
        self._lock = threading.Lock()

    def load_state(self) -> ClinicState:
        with self._lock:
            return self._state.model_copy(deep=True)

    def save_state(self, state: ClinicState) -> None:
        with self._lock:
            self._state = state.model_copy(deep=True)

    def get_settings(self) -> ClinicalSettings:
        with self._lock:
            return self._settings.model_copy(deep=True)

    def save_settings(self, settings: ClinicalSettings) -> None:
        with self._lock:
            self._settings = settings.model_copy(deep=True)


class JsonFileStateStore(StateStore):
    """
    Flat JSON file store.

    File layout::

        {
          "appState": {"patients": [], "episodes": [], "visits": [], "referrals": []},
          "settings": {"activeScales": {...}, "updatedAt": ..., "updatedBy": ...}
        }

    The file is created on first use.
    """

    backend = "json-file"

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()
        if not self.path.exists():
            self._write({
                "appState": ClinicState().to_json(),
                "settings": ClinicalSettings().to_json(),
            })
            logger.info(f"Created clinic data file at {self.path}")

    def _read(self) -> dict:
        # ValueError covers both JSONDecodeError and UnicodeDecodeError
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, ValueError) as e:
            raise StorageError(f"Cannot read {self.path}: {e}", backend=self.backend) from e
        if not isinstance(data, dict):
            raise StorageError(
                f"{self.path} does not hold a clinic document",
                backend=self.backend,
                details={"found": type(data).__name__},
            )
        return data

    def _validate(self, model, payload, what: str):
        try:
            return model.model_validate(payload or {})
        except ValidationError as e:
            raise StorageError(
                f"Stored {what} in {self.path} is invalid",
                backend=self.backend,
                details={"errors": e.errors(include_url=False, include_context=False)},
            ) from e

    def _write(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        try:
            with tmp.open("w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            tmp.replace(self.path)
        except OSError as e:
            raise StorageError(f"Cannot write {self.path}: {e}", backend=self.backend) from e

    def load_state(self) -> ClinicState:
        with self._lock:
            data = self._read()
        return self._validate(ClinicState, data.get("appState"), "clinic state")

    def save_state(self, state: ClinicState) -> None:
        with self._lock:
            data = self._read()
            data["appState"] = state.to_json()
            self._write(data)
        logger.debug(
            f"Saved state: {len(state.patients)} patients, {len(state.episodes)} episodes, "
            f"{len(state.visits)} visits, {len(state.referrals)} referrals"
        )

    def get_settings(self) -> ClinicalSettings:
        with self._lock:
            data = self._read()
        return self._validate(ClinicalSettings, data.get("settings"), "clinical settings")

    def save_settings(self, settings: ClinicalSettings) -> None:
        with self._lock:
            data = self._read()
            data["settings"] = settings.to_json()
            self._write(data)


def build_store(data_path: str = "") -> StateStore:
    """JSON file store when a path is configured, in-memory otherwise."""
    if data_path:
        logger.info(f"Using JSON file store at {data_path}")
        return JsonFileStateStore(data_path)
    logger.info("Using in-memory store")
    return InMemoryStateStore()
