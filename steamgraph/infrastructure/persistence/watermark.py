"""File-backed persistence for the sync watermark.

The watermark is a small JSON document. A missing file is the normal
bootstrap state and yields an empty watermark. A present but unreadable file
is also treated as empty, with a warning, because discarding it silently
would trigger an unexpected full re-sync.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from steamgraph.domain.models import SyncWatermark
from steamgraph.infrastructure.observability import get_logger

logger = get_logger(__name__)

# Keys written by earlier releases, still honoured on read, with the divisor
# that converts their stored value. ``lastAppTime`` was kept in milliseconds.
_LEGACY_KEYS = {
    "taxonomy_hash": ("lastTagHash", 1),
    "catalog_cursor": ("lastAppTime", 1000),
}


class WatermarkStoreError(Exception):
    """Raised when the watermark cannot be written."""


def _coerce(value: Any) -> int | None:
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError(f"expected an integer, got {value!r}")
    if isinstance(value, (int, str)):
        return int(value)
    raise ValueError(f"expected an integer, got {value!r}")


class WatermarkStore:
    """Load and save :class:`SyncWatermark` values as JSON on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> SyncWatermark:
        """Return the stored watermark, or an empty one if none is usable."""
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return SyncWatermark.empty()
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read watermark %s: %s", self.path, exc)
            return SyncWatermark.empty()

        try:
            data = json.loads(raw)
            if not isinstance(data, dict):
                raise ValueError(f"expected an object, got {type(data).__name__}")
            values: dict[str, int | None] = {}
            for key, (legacy_key, divisor) in _LEGACY_KEYS.items():
                if key in data:
                    values[key] = _coerce(data[key])
                    continue
                legacy = _coerce(data.get(legacy_key))
                values[key] = legacy // divisor if legacy is not None else None
        except ValueError as exc:
            logger.warning(
                "Ignoring corrupt watermark %s (%s); the next pass runs a full sync",
                self.path,
                exc,
            )
            return SyncWatermark.empty()

        return SyncWatermark(**values)

    def save(self, watermark: SyncWatermark) -> None:
        """Atomically replace the stored watermark.

        Raises:
            WatermarkStoreError: If the file cannot be written.
        """
        tmp_name: str | None = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(watermark.to_dict(), f, indent=2)
            os.replace(tmp_name, self.path)
            tmp_name = None
        except OSError as exc:
            logger.error("Failed to write watermark %s: %s", self.path, exc)
            raise WatermarkStoreError(f"Failed to write watermark {self.path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass

    def reset(self) -> bool:
        """Delete the stored watermark. Returns True if a file was removed."""
        try:
            self.path.unlink()
        except FileNotFoundError:
            return False
        return True


__all__ = ["WatermarkStore", "WatermarkStoreError"]
