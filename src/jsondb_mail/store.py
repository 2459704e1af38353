# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Flat-file JSON collection store.

Each collection is a single ``<name>.json`` document under one base
directory. Operations are synchronous and unlocked: concurrent writers on the
same collection race at the filesystem level and the last write wins.

Every mutating operation (save, delete, explicit backup) first snapshots the
current file through :class:`~jsondb_mail.backup.BackupManager`.

Example:
    Basic usage::

        store = CollectionStore("/data/database")
        store.initialize()
        store.save_productivity([{"id": 1, "hours": 8}])
        store.get_productivity()  # [{"id": 1, "hours": 8}]
"""

from __future__ import annotations

import json
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from .backup import BackupManager
from .errors import CollectionNotFound, InvalidInput, StoreIOError
from .logger import get_logger
from .prometheus import StoreMetrics

PRODUCTIVITY_COLLECTION = "productividad"
NOT_APPLICABLE = "N/A"
_FORBIDDEN_NAME_CHARS = ("/", "\\", "\x00")


def _format_mtime(timestamp: float) -> str:
    """Format a file modification time as ISO-8601 UTC with milliseconds."""
    moment = datetime.fromtimestamp(timestamp, tz=timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _record_count(data: Any) -> Optional[int]:
    return len(data) if isinstance(data, list) else None


class CollectionStore:
    """Read and write one JSON document per collection name."""

    def __init__(
        self,
        base_path: str | Path,
        *,
        backups: BackupManager | None = None,
        metrics: StoreMetrics | None = None,
        logger=None,
    ):
        self.base_path = Path(base_path).resolve()
        self.backups = backups or BackupManager(self.base_path)
        self.metrics = metrics or StoreMetrics()
        self.logger = logger or get_logger("CollectionStore")

    def initialize(self) -> None:
        """Create the base directory. Call once before serving requests."""
        if not self.base_path.exists():
            self.base_path.mkdir(parents=True)
            self.logger.info("Database directory created: %s", self.base_path)

    # ------------------------------------------------------------------ helpers
    @contextmanager
    def _operation(self, operation: str) -> Iterator[None]:
        """Count ``operation`` and wrap filesystem or decoding failures."""
        self.metrics.inc_operation(operation)
        try:
            yield
        except (OSError, ValueError) as exc:
            self.metrics.inc_error(operation)
            self.logger.error("Store operation %s failed: %s", operation, exc)
            raise StoreIOError(str(exc)) from exc
        except (InvalidInput, CollectionNotFound):
            self.metrics.inc_error(operation)
            raise

    @staticmethod
    def validate_name(name: Any) -> str:
        """Return ``name`` when it is usable as a file stem, else raise."""
        if not isinstance(name, str) or not name.strip():
            raise InvalidInput("A collection name is required")
        if name in (".", "..") or any(ch in name for ch in _FORBIDDEN_NAME_CHARS):
            raise InvalidInput(f"Invalid collection name: {name!r}")
        return name

    def path_for(self, name: str) -> Path:
        return self.base_path / f"{self.validate_name(name)}.json"

    def _read(self, path: Path) -> Any:
        with path.open("r", encoding="utf-8") as fp:
            return json.load(fp)

    def _write(self, path: Path, data: Any) -> None:
        path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")

    def _backup(self, name: str, path: Path) -> Optional[Path]:
        target = self.backups.create(name, path)
        if target is not None:
            self.metrics.inc_backup()
        return target

    def _collection_files(self) -> List[Path]:
        return sorted(path for path in self.base_path.glob("*.json") if path.is_file())

    # --------------------------------------------------------------- operations
    def save(self, name: str, data: Any) -> Optional[int]:
        """Back up and overwrite ``name`` with ``data``.

        Returns the number of records written when ``data`` is a list.
        """
        path = self.path_for(name)
        with self._operation("save"):
            self._backup(name, path)
            self._write(path, data)
        count = _record_count(data)
        if count is None:
            self.logger.info("%s saved", name)
        else:
            self.logger.info("%s saved: %d records", name, count)
        return count

    def save_productivity(self, data: Any) -> int:
        """Save the productivity collection, which must be a JSON array."""
        if not isinstance(data, list):
            self.metrics.inc_operation("save")
            self.metrics.inc_error("save")
            raise InvalidInput("Invalid data: an array is required")
        self.save(PRODUCTIVITY_COLLECTION, data)
        return len(data)

    def get(self, name: str) -> Any:
        """Return the parsed document, or ``None`` when it does not exist."""
        path = self.path_for(name)
        with self._operation("get"):
            if not path.is_file():
                return None
            data = self._read(path)
        self.logger.debug("%s read", name)
        return data

    def get_productivity(self) -> Any:
        data = self.get(PRODUCTIVITY_COLLECTION)
        return [] if data is None else data

    def list_collections(self) -> List[Dict[str, Any]]:
        """Describe every collection file, skipping the backups directory."""
        collections: List[Dict[str, Any]] = []
        with self._operation("list"):
            for path in self._collection_files():
                stat = path.stat()
                count = _record_count(self._read(path))
                collections.append(
                    {
                        "name": path.stem,
                        "size": stat.st_size,
                        "modified": _format_mtime(stat.st_mtime),
                        "records": NOT_APPLICABLE if count is None else count,
                    }
                )
        return collections

    def delete(self, name: str) -> None:
        """Back up and remove ``name``; raise when it does not exist."""
        path = self.path_for(name)
        with self._operation("delete"):
            if not path.is_file():
                raise CollectionNotFound(name)
            self._backup(name, path)
            path.unlink()
        self.logger.info("%s deleted", name)

    def backup(self, name: str) -> Optional[Path]:
        """Snapshot ``name`` if it exists.

        A missing collection is a silent no-op: ``None`` is returned and the
        caller still reports success.
        """
        path = self.path_for(name)
        with self._operation("backup"):
            target = self._backup(name, path)
        if target is None:
            self.logger.debug("Backup skipped, %s does not exist", name)
        return target

    def stats(self) -> Dict[str, Any]:
        """Aggregate size and record counts over all collection files."""
        total_size = 0
        total_records = 0
        with self._operation("stats"):
            files = self._collection_files()
            for path in files:
                total_size += path.stat().st_size
                total_records += _record_count(self._read(path)) or 0
        return {
            "collections": len(files),
            "totalSize": f"{total_size / 1024:.2f} KB",
            "totalRecords": total_records,
            "path": str(self.base_path),
        }
