"""
File-backed storage: a JSON key/value store and an append-only JSON-lines dataset.
"""
import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional, Union


class JsonFileStore:
    """Key/value store with one file per key under `root`."""

    def __init__(self, root: Union[str, Path]):
        self.root = Path(root)
        self._lock = threading.Lock()

    def _path(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or key.startswith("."):
            raise ValueError(f"Invalid store key: {key!r}")
        return self.root / key

    def get_value(self, key: str) -> Optional[Any]:
        """Decoded JSON for keys ending in .json (or with no suffix), text otherwise."""
        path = self._path(key)
        if not path.exists():
            return None
        text = path.read_text(encoding="utf-8")
        if path.suffix in ("", ".json"):
            return json.loads(text)
        return text

    def set_value(self, key: str, value: Any) -> Path:
        """
        Write a value atomically (temp file + rename), so readers never see
        a partial write. Strings are written verbatim, everything else as JSON.
        """
        path = self._path(key)
        payload = value if isinstance(value, str) else json.dumps(value, indent=2, default=str)

        with self._lock:
            self.root.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{key}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
        return path


class JsonlDataset:
    """Append-only dataset stored as JSON lines."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def push_data(self, rows: Iterable[dict]) -> int:
        lines = [json.dumps(row, default=str) for row in rows]
        if not lines:
            return 0
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write("\n".join(lines) + "\n")
        return len(lines)

    def iter_rows(self) -> Iterator[dict]:
        if not self.path.exists():
            return
        with open(self.path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if line:
                    yield json.loads(line)
