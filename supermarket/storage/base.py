from abc import ABC, abstractmethod
from pathlib import Path

from supermarket.schemas.backup import BackupFileInfo

JSON_FILTERS = [{"name": "JSON", "extensions": ["json"]}]


class BackupStorageInterface(ABC):
    """File-system operations the backup pipeline needs from its host shell."""

    backup_dir: Path

    @abstractmethod
    async def choose_save_path(self, default_name: str, filters: list[dict] = JSON_FILTERS) -> str | None:
        pass

    @abstractmethod
    async def choose_open_path(self, filters: list[dict] = JSON_FILTERS) -> str | None:
        pass

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        pass

    @abstractmethod
    async def read_file(self, path: str) -> str:
        pass

    @abstractmethod
    async def list_files(self) -> list[BackupFileInfo]:
        pass

    @abstractmethod
    async def delete_file(self, path: str) -> None:
        pass

    @abstractmethod
    async def direct_backup(self, content: str, filename: str | None = None) -> str:
        pass
