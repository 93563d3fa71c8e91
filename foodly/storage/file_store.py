"""
JSON file token store.

Values live in a single JSON object on disk, one entry per key, mirroring the way a
browser keeps its local storage. Writes go to a temporary file in the same directory
and are moved into place with os.replace(), so the file is always either the old or
the new version.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from foodly.config import StorageConfig

from .base import TokenStore

logger = logging.getLogger(__name__)


class FileTokenStore(TokenStore):
    """
    Token store backed by a JSON file.

    Attributes:
        path: Location of the JSON file (created on first write)
    """

    def __init__(self, path: Optional[Path] = None) -> None:
        """
        Args:
            path: File to use (optional, reads FOODLY_TOKEN_PATH or ~/.foodly/storage.json)
        """
        self.path = Path(path) if path is not None else StorageConfig.get_token_path()

    def _read_all(self) -> Dict[str, str]:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, ValueError) as e:
            # Unreadable storage behaves like empty storage; the next write repairs it
            logger.warning("Ignoring unreadable token store %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring token store %s: expected a JSON object", self.path)
            return {}
        return {str(k): v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".storage-", suffix=".json", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key not in data:
            return
        del data[key]
        self._write_all(data)
