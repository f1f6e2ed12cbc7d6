"""
File-system storage: one pretty-printed JSON file per key.
"""

import json
from pathlib import Path
from typing import Any, Optional, Union

from .base import StorageBackend


class JSONFileStorage(StorageBackend):
    """Stores each key as ``<data_dir>/<key>.json``"""

    def __init__(self, data_dir: Union[str, Path]):
        super().__init__()
        self.data_dir = Path(data_dir)

    def _path(self, key: str) -> Path:
        return self.data_dir / f"{key}.json"

    def load(self, key: str) -> Optional[Any]:
        path = self._path(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, ValueError) as e:
            self.logger.error(f"Error reading {key}: {e}")
            return None

    def save(self, key: str, value: Any) -> bool:
        path = self._path(key)
        tmp_path = path.with_suffix(".json.tmp")
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(value, f, indent=2, ensure_ascii=False)
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as e:
            self.logger.error(f"Error saving {key} to {path}: {e}")
            return False

        self.logger.debug(f"Saved {key} to {path}")
        return True
