# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Timestamped snapshots of collection files.

A backup is a plain copy of ``<collection>.json`` written to the ``backups``
subdirectory of the store as ``<collection>_<YYYY-MM-DDTHH-MM-SS>.json``
(UTC, second resolution). Backups are taken inline, before the mutating
operation that triggered them, and are never pruned.

Two snapshots of the same collection taken within the same second share a
name; the later copy overwrites the earlier one.
"""

from __future__ import annotations

import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable

from .logger import get_logger

BACKUP_DIRNAME = "backups"
TIMESTAMP_FORMAT = "%Y-%m-%dT%H-%M-%S"

Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BackupManager:
    """Write-only snapshot history for a collection store directory."""

    def __init__(
        self,
        base_path: str | Path,
        *,
        dirname: str = BACKUP_DIRNAME,
        clock: Clock | None = None,
        logger=None,
    ):
        self.base_path = Path(base_path)
        self.backup_dir = self.base_path / dirname
        self._clock = clock or _utc_now
        self.logger = logger or get_logger("BackupManager")

    def timestamp(self) -> str:
        """Return the current UTC time as used in backup file names."""
        now = self._clock()
        if now.tzinfo is not None:
            now = now.astimezone(timezone.utc)
        return now.strftime(TIMESTAMP_FORMAT)

    @staticmethod
    def backup_name(collection: str, timestamp: str) -> str:
        return f"{collection}_{timestamp}.json"

    def create(self, collection: str, source: Path) -> Path | None:
        """Copy ``source`` into the backup directory.

        Returns the path of the new snapshot, or ``None`` when ``source``
        does not exist. ``OSError`` raised by the copy propagates to the
        caller.
        """
        if not source.is_file():
            return None
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        target = self.backup_dir / self.backup_name(collection, self.timestamp())
        shutil.copy2(source, target)
        self.logger.info("Backup created: %s", target.name)
        return target

    def list_backups(self, collection: str | None = None) -> list[Path]:
        """Return existing snapshots, newest first.

        When ``collection`` is given only its snapshots are returned.
        """
        if not self.backup_dir.is_dir():
            return []
        files = [path for path in self.backup_dir.glob("*.json") if path.is_file()]
        if collection:
            # names may hold glob metacharacters, so match the prefix literally;
            # "report_2024..." must not match snapshots of "report_final"
            prefix = f"{collection}_"
            files = [
                path for path in files
                if path.stem.startswith(prefix) and _is_timestamp(path.stem[len(prefix):])
            ]
        return sorted(files, key=lambda path: path.stem.rsplit("_", 1)[-1], reverse=True)


def _is_timestamp(value: str) -> bool:
    try:
        datetime.strptime(value, TIMESTAMP_FORMAT)
    except ValueError:
        return False
    return True
