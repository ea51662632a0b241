import logging
from datetime import datetime
from pathlib import Path

from supermarket.core.clock import Clock, local_now, store_timezone
from supermarket.core.exceptions import NotFoundError, StorageIOError, ValidationError
from supermarket.schemas.backup import BackupFileInfo
from supermarket.storage.base import JSON_FILTERS, BackupStorageInterface

logger = logging.getLogger(__name__)


def backup_timestamp(moment: datetime) -> str:
    return moment.strftime("%Y-%m-%d-%H-%M-%S")


class LocalBackupStorage(BackupStorageInterface):
    """
    Backups kept in a single directory on the local disk.

    Headless stand-in for the desktop dialogs: "save" picks a name inside
    the backup directory and "open" picks the newest backup there.
    """

    def __init__(self, backup_dir: Path | str, clock: Clock = local_now):
        self.backup_dir = Path(backup_dir)
        self.clock = clock

    def _inside_backup_dir(self, path: Path) -> bool:
        return path.resolve().is_relative_to(self.backup_dir.resolve())

    async def choose_save_path(self, default_name: str, filters: list[dict] = JSON_FILTERS) -> str | None:
        return str(self.backup_dir / default_name)

    async def choose_open_path(self, filters: list[dict] = JSON_FILTERS) -> str | None:
        files = await self.list_files()
        return files[0].path if files else None

    async def write_file(self, path: str, content: str) -> None:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(content, encoding="utf-8")
            logger.info(f"Backup written: {target}")
        except OSError as e:
            logger.error(f"Backup write failed for {target}: {e}")
            raise StorageIOError(f"Could not write {target}") from e

    async def read_file(self, path: str) -> str:
        source = Path(path)
        if not source.is_file():
            raise NotFoundError(f"Backup file {source} does not exist")
        try:
            return source.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Backup read failed for {source}: {e}")
            raise StorageIOError(f"Could not read {source}") from e

    async def list_files(self) -> list[BackupFileInfo]:
        """JSON backups in the backup directory, most recently modified first."""
        if not self.backup_dir.exists():
            return []

        tz = store_timezone()
        files = []
        try:
            for entry in self.backup_dir.iterdir():
                if not entry.is_file() or entry.suffix != ".json":
                    continue
                stats = entry.stat()
                created = getattr(stats, "st_birthtime", stats.st_ctime)
                files.append(BackupFileInfo(
                    name=entry.name,
                    path=str(entry),
                    size=stats.st_size,
                    created_at=datetime.fromtimestamp(created, tz),
                    modified_at=datetime.fromtimestamp(stats.st_mtime, tz),
                ))
        except OSError as e:
            raise StorageIOError(f"Could not list {self.backup_dir}") from e

        return sorted(files, key=lambda f: f.modified_at, reverse=True)

    async def delete_file(self, path: str) -> None:
        target = Path(path)

        # Only ever delete inside the backup directory
        if not self._inside_backup_dir(target):
            logger.warning(f"Refused to delete file outside the backup directory: {target}")
            raise ValidationError("Invalid file path")

        if not target.is_file():
            raise NotFoundError(f"Backup file {target} does not exist")

        try:
            target.unlink()
        except OSError as e:
            raise StorageIOError(f"Could not delete {target}") from e
        logger.info(f"Backup deleted: {target}")

    async def direct_backup(self, content: str, filename: str | None = None) -> str:
        """Write straight into the backup directory, no dialog involved."""
        name = filename or f"supermarket_backup_{backup_timestamp(self.clock())}.json"
        target = self.backup_dir / name
        if not self._inside_backup_dir(target):
            raise ValidationError(f"Invalid backup file name: {name}")

        await self.write_file(str(target), content)
        return str(target)
