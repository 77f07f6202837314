"""Camera profile configuration store."""

import json
import logging
import threading
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, TypeAdapter, ValidationError, field_validator

from .errors import CameraConfigError

logger = logging.getLogger(__name__)


class CameraConfig(BaseModel):
    """Binds a physical camera to the spots it may report on."""

    model_config = ConfigDict(frozen=True)

    camera_id: str
    visible_spots: tuple[str, ...]  # Allow-list, in display order
    alignment_hint: str

    @field_validator("visible_spots")
    @classmethod
    def reject_duplicates(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Spot identifiers must be unique within a camera."""
        duplicates = sorted({s for s in v if v.count(s) > 1})
        if duplicates:
            raise ValueError(f"duplicate spot identifiers: {duplicates}")
        return v


_CONFIGS_ADAPTER = TypeAdapter(dict[str, CameraConfig])


class CameraConfigStore:
    """
    Lazily loaded, process-wide cache of camera profiles.

    The JSON document at ``path`` is read on first use. The first successful
    load is kept for the lifetime of the store; later calls never touch the
    file again. A failed load caches nothing, so the next call retries.
    """

    def __init__(self, path: str | Path):
        """
        Initialize the store.

        Args:
            path: Path to the camera configuration JSON document
        """
        self.path = Path(path)
        self._configs: Optional[dict[str, CameraConfig]] = None
        self._lock = threading.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._configs is not None

    def load(self) -> dict[str, CameraConfig]:
        """
        Return all camera profiles keyed by camera key.

        Raises:
            CameraConfigError: If the document is missing or malformed
        """
        configs = self._configs
        if configs is not None:
            return configs

        with self._lock:
            # Another thread may have finished loading while we waited
            if self._configs is None:
                self._configs = self._read()
            return self._configs

    def get(self, key: str) -> Optional[CameraConfig]:
        """Get the profile for a camera key, or None if it is not configured."""
        return self.load().get(key)

    def _read(self) -> dict[str, CameraConfig]:
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise CameraConfigError(f"Cannot read camera config {self.path}: {e}") from e
        except ValueError as e:
            raise CameraConfigError(f"Camera config {self.path} is not valid JSON: {e}") from e

        try:
            configs = _CONFIGS_ADAPTER.validate_python(data)
        except ValidationError as e:
            raise CameraConfigError(f"Camera config {self.path} is malformed: {e}") from e

        logger.info(f"Loaded {len(configs)} camera profile(s) from {self.path}")
        return configs
