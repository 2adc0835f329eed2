"""
JSON file timestamp store.

Document layout (key names are stable):

    {"tabTimestamps": {"<tab id>": <epoch ms>}, "settings": {"maxAgeDays": 7}}

Writes go to a sibling temp file that is fsynced and then renamed over the
target, so a failed save never leaves a half-written document behind.
An existing file keeps its permission bits; a new one is created 0600.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Union

from ..errors import StoreError
from ..settings import Settings, settings_from_dict
from ..spi.timestamp_store import StoredState

logger = logging.getLogger(__name__)


class JsonFileStore:
    def __init__(self, path: Union[str, Path]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> StoredState:
        doc = self._read()
        raw = doc.get("tabTimestamps") or {}
        if not isinstance(raw, dict):
            raise StoreError("tabTimestamps is not an object.", details={"path": str(self._path)})
        try:
            timestamps = {int(k): int(v) for k, v in raw.items()}
        except (TypeError, ValueError) as exc:
            raise StoreError(
                f"Malformed timestamp entry: {exc}", details={"path": str(self._path)}
            ) from exc
        return StoredState(timestamps=timestamps, settings=settings_from_dict(doc.get("settings")))

    def save_timestamps(self, timestamps: Dict[int, int]) -> None:
        doc = self._read()
        doc["tabTimestamps"] = {str(k): int(v) for k, v in timestamps.items()}
        self._write(doc)

    def save_settings(self, settings: Settings) -> None:
        doc = self._read()
        doc["settings"] = settings.to_dict()
        self._write(doc)

    def _read(self) -> Dict[str, Any]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as exc:
            raise StoreError(f"Cannot read {self._path}: {exc}") from exc
        try:
            doc = json.loads(text) if text.strip() else {}
        except ValueError as exc:
            raise StoreError(f"Corrupt state file {self._path}: {exc}") from exc
        if not isinstance(doc, dict):
            raise StoreError(f"Corrupt state file {self._path}: top level is not an object.")
        return doc

    def _write(self, doc: Dict[str, Any]) -> None:
        directory = self._path.parent
        tmp_name = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self._path.name}.", dir=str(directory))
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(doc, fh, sort_keys=True)
                fh.flush()
                os.fsync(fh.fileno())
            if self._path.exists():
                os.chmod(tmp_name, stat.S_IMODE(self._path.stat().st_mode))
            os.replace(tmp_name, self._path)
            tmp_name = None
        except OSError as exc:
            raise StoreError(f"Cannot write {self._path}: {exc}") from exc
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    logger.debug("Could not remove temp file %s", tmp_name)
