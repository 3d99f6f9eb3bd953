from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from roi_analyzer.adapters.logging_utils import get_logger
from roi_analyzer.domain.ports import KeyValueStore, StorageError

logger = get_logger(__name__)


class CorruptStoreFile(StorageError):
    """The file exists and is readable but does not hold a JSON object."""


class JsonFileKeyValueStore(KeyValueStore):
    """
    All keys live in one JSON object on disk. Every `set` rewrites the file
    through a temp file + os.replace, so readers never see a half-written file.

    A corrupt file fails reads. The first write after that moves it aside
    to `<name>.corrupt` and starts a fresh object.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)

    @property
    def quarantine_path(self) -> Path:
        return self.path.with_name(self.path.name + ".corrupt")

    def _read(self) -> dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            raise CorruptStoreFile(f"{self.path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"cannot read {self.path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise CorruptStoreFile(f"{self.path} is not valid JSON: {e}") from e
        if not isinstance(data, dict):
            raise CorruptStoreFile(f"{self.path} does not hold a JSON object")
        return data

    def _read_for_write(self) -> dict[str, str]:
        try:
            return self._read()
        except CorruptStoreFile as e:
            try:
                os.replace(self.path, self.quarantine_path)
            except OSError as move_err:
                raise StorageError(f"cannot move aside corrupt {self.path}: {move_err}") from move_err
            logger.warning(
                "store_file_quarantined",
                extra={"context": {"path": str(self.path), "moved_to": str(self.quarantine_path), "error": str(e)}},
            )
            return {}

    def _write(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2)
                os.replace(tmp, self.path)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        value = self._read().get(key)
        if value is None:
            return None
        return str(value)

    def set(self, key: str, value: str) -> None:
        data = self._read_for_write()
        data[key] = value
        self._write(data)

    def delete(self, key: str) -> None:
        data = self._read_for_write()
        if key in data:
            del data[key]
            self._write(data)
