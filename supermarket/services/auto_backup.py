import asyncio
import logging
from datetime import datetime, timedelta
from pathlib import Path

from supermarket.core.clock import Clock, local_now
from supermarket.core.exceptions import StorageIOError
from supermarket.schemas.backup import BackupStatus, ExportResult
from supermarket.services.backup_service import BackupService

logger = logging.getLogger(__name__)

MARKER_NAME = ".last-backup"


class AutoBackupScheduler:
    """
    Runs an unattended backup every `auto_backup_days` days.
    Zero or a negative interval disables it. The time of the last backup
    survives restarts in a marker file next to the backups.
    """

    CHECK_INTERVAL = 60 * 60  # 1 hour

    def __init__(self, backup_service: BackupService, auto_backup_days: int, clock: Clock = local_now):
        self.backup_service = backup_service
        self.auto_backup_days = auto_backup_days
        self.clock = clock

    @property
    def marker_path(self) -> Path:
        return self.backup_service.files.backup_dir / MARKER_NAME

    def last_backup_time(self) -> datetime | None:
        try:
            return datetime.fromisoformat(self.marker_path.read_text(encoding="utf-8").strip())
        except FileNotFoundError:
            return None
        except ValueError:
            logger.warning(f"Ignoring unreadable backup marker {self.marker_path}")
            return None

    def _record_backup(self, moment: datetime) -> None:
        try:
            self.marker_path.parent.mkdir(parents=True, exist_ok=True)
            self.marker_path.write_text(moment.isoformat(), encoding="utf-8")
        except OSError as e:
            raise StorageIOError(f"Could not record backup time in {self.marker_path}") from e

    def next_backup_time(self) -> datetime | None:
        last = self.last_backup_time()
        if self.auto_backup_days <= 0 or last is None:
            return None
        return last + timedelta(days=self.auto_backup_days)

    def is_due(self, now: datetime | None = None) -> bool:
        if self.auto_backup_days <= 0:
            return False
        last = self.last_backup_time()
        if last is None:
            return True
        return (now or self.clock()) - last >= timedelta(days=self.auto_backup_days)

    def status(self) -> BackupStatus:
        return BackupStatus(
            auto_backup_days=self.auto_backup_days,
            last_backup_time=self.last_backup_time(),
            next_backup_time=self.next_backup_time(),
        )

    async def run_if_due(self, now: datetime | None = None) -> ExportResult | None:
        now = now or self.clock()
        if not self.is_due(now):
            return None

        return await self.run_now(now)

    async def run_now(self, now: datetime | None = None) -> ExportResult:
        result = await self.backup_service.auto_export_data()
        self._record_backup(now or self.clock())
        return result

    async def tick(self) -> ExportResult | None:
        """One scheduled check. Any failure is logged and left for the next check."""
        try:
            return await self.run_if_due()
        except Exception:
            logger.error("Automatic backup failed", exc_info=True)
            return None

    async def run_forever(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self.CHECK_INTERVAL)
