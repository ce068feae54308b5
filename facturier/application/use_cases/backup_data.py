"""
Backup Use Cases.

Export every business record to a JSON document and restore it.
"""

import json
from typing import Any

from facturier.config import get_logger
from facturier.core.exceptions import BackupFormatError
from facturier.core.interfaces.storage import IStorage
from facturier.infrastructure.export.backup import (
    BackupData,
    RestoreSummary,
    export_backup,
    restore_backup,
)

logger = get_logger(__name__)


class ExportBackupUseCase:
    """Snapshot the whole data set."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def execute(self) -> BackupData:
        return await export_backup(self._storage)

    @staticmethod
    def to_json(backup: BackupData) -> str:
        return backup.model_dump_json(indent=2)


class RestoreBackupUseCase:
    """Apply a backup on top of the current data, all or nothing."""

    def __init__(self, storage: IStorage):
        self._storage = storage

    async def execute(self, payload: dict[str, Any]) -> RestoreSummary:
        return await restore_backup(self._storage, payload)

    async def execute_json(self, text: str | bytes) -> RestoreSummary:
        """
        Restore from raw file content.

        Raises:
            BackupFormatError: Not JSON, or not a backup object.
        """
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning("backup_not_json", error=str(e))
            raise BackupFormatError("file is not valid JSON") from e
        if not isinstance(payload, dict):
            raise BackupFormatError("top-level value must be an object")
        return await self.execute(payload)
