"""
JSON key-value directory.

Each collection is one ``<name>.json`` file holding its records and id
counters. Files are replaced atomically (temp file + ``os.replace``) so a
crash never leaves a half-written file. Inside ``atomic()`` writes stay in
memory and are flushed together on exit, or discarded on error.
"""

import copy
import json
import os
import tempfile
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from facturier.config import get_logger
from facturier.core.exceptions import StorageError

logger = get_logger(__name__)


def _empty_collection() -> dict[str, Any]:
    return {"counters": {}, "records": []}


class JsonKeyValueStore:
    """Directory of JSON collections with buffered atomic writes."""

    def __init__(self, directory: Path):
        self.directory = directory
        self._cache: dict[str, dict[str, Any]] = {}
        self._dirty: set[str] = set()
        self._in_atomic: ContextVar[bool] = ContextVar(
            f"json_atomic_{id(self)}", default=False
        )

    def initialize(self) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        logger.info("json_store_initialized", directory=str(self.directory))

    def _path(self, name: str) -> Path:
        return self.directory / f"{name}.json"

    def _read(self, name: str) -> dict[str, Any]:
        path = self._path(name)
        if not path.exists():
            return _empty_collection()
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(
                f"Cannot read collection '{name}': {e}",
                code="STORAGE_READ_FAILED",
                details={"collection": name, "path": str(path)},
            ) from e
        if not isinstance(data, dict) or "records" not in data:
            raise StorageError(
                f"Collection '{name}' has an unexpected layout",
                code="STORAGE_READ_FAILED",
                details={"collection": name, "path": str(path)},
            )
        data.setdefault("counters", {})
        return data

    def _write(self, name: str) -> None:
        path = self._path(name)
        payload = json.dumps(self._cache[name], ensure_ascii=False, indent=2)
        try:
            fd, tmp_name = tempfile.mkstemp(
                dir=self.directory, prefix=f".{name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except OSError as e:
            raise StorageError(
                f"Cannot write collection '{name}': {e}",
                code="STORAGE_WRITE_FAILED",
                details={"collection": name, "path": str(path)},
            ) from e

    def load(self, name: str) -> dict[str, Any]:
        """Return the live collection document; mutate it, then ``save``."""
        if name not in self._cache:
            self._cache[name] = self._read(name)
        return self._cache[name]

    def save(self, name: str) -> None:
        """Persist a collection now, or at the end of the current ``atomic()``."""
        if self._in_atomic.get():
            self._dirty.add(name)
        else:
            self._write(name)

    @asynccontextmanager
    async def atomic(self) -> AsyncIterator[None]:
        """Buffer saves and flush them once; restore memory on error."""
        if self._in_atomic.get():
            yield
            return

        snapshot = copy.deepcopy(self._cache)
        token = self._in_atomic.set(True)
        try:
            yield
        except BaseException:
            self._rollback(snapshot)
            raise
        finally:
            self._in_atomic.reset(token)

        dirty, self._dirty = sorted(self._dirty), set()
        written: list[str] = []
        try:
            # Collections first loaded inside the block: disk still holds their prior state
            for name in dirty:
                if name not in snapshot:
                    snapshot[name] = self._read(name)
            for name in dirty:
                self._write(name)
                written.append(name)
        except BaseException:
            self._rollback(snapshot)
            for name in written:
                self._write(name)
            raise

    def _rollback(self, snapshot: dict[str, dict[str, Any]]) -> None:
        self._cache = snapshot
        self._dirty.clear()
        logger.debug("json_atomic_rolled_back")


class JsonCollection:
    """Records of one collection, addressed by integer ``id``."""

    def __init__(self, kv: JsonKeyValueStore, name: str):
        self._kv = kv
        self.name = name

    def _doc(self) -> dict[str, Any]:
        return self._kv.load(self.name)

    def all(self) -> list[dict[str, Any]]:
        return [copy.deepcopy(r) for r in self._doc()["records"]]

    def get(self, record_id: int) -> dict[str, Any] | None:
        for record in self._doc()["records"]:
            if record["id"] == record_id:
                return copy.deepcopy(record)
        return None

    def allocate(self, counter: str = "id") -> int:
        """Next value of a monotonic counter; deleted ids are never reused."""
        counters = self._doc()["counters"]
        counters[counter] = counters.get(counter, 0) + 1
        return counters[counter]

    def bump(self, value: int, counter: str = "id") -> None:
        """Make sure the counter is at least ``value`` (after restoring ids)."""
        counters = self._doc()["counters"]
        counters[counter] = max(counters.get(counter, 0), value)

    def put(self, record: dict[str, Any]) -> None:
        """Insert or replace the record with the same id."""
        records = self._doc()["records"]
        for index, existing in enumerate(records):
            if existing["id"] == record["id"]:
                records[index] = copy.deepcopy(record)
                break
        else:
            records.append(copy.deepcopy(record))
        self._kv.save(self.name)

    def delete(self, record_id: int) -> bool:
        doc = self._doc()
        remaining = [r for r in doc["records"] if r["id"] != record_id]
        if len(remaining) == len(doc["records"]):
            return False
        doc["records"] = remaining
        self._kv.save(self.name)
        return True
