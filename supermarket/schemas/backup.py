from datetime import datetime
from typing import Any, List

from pydantic import ConfigDict, Field, StrictStr

from supermarket.schemas.common import StoreModel

BACKUP_VERSION = "1.0"


class BackupSnapshot(StoreModel):
    """
    Shape check for a backup file. Records are kept raw here: each one is
    validated on its own while restoring so a single bad row cannot sink
    the whole file.
    """
    model_config = ConfigDict(populate_by_name=False)

    version: StrictStr
    export_time: StrictStr
    categories: List[Any]
    products: List[Any]
    orders: List[Any]
    order_items: List[Any]


class FailedRecord(StoreModel):
    record: Any
    reason: str


class EntityReport(StoreModel):
    succeeded: List[str] = Field(default_factory=list)
    failed: List[FailedRecord] = Field(default_factory=list)


class ImportReport(StoreModel):
    categories: EntityReport = Field(default_factory=EntityReport)
    products: EntityReport = Field(default_factory=EntityReport)
    orders: EntityReport = Field(default_factory=EntityReport)
    order_items: EntityReport = Field(default_factory=EntityReport)

    @property
    def failed_count(self) -> int:
        return sum(
            len(r.failed) for r in (self.categories, self.products, self.orders, self.order_items)
        )


class ExportResult(StoreModel):
    path: str
    export_time: str


class BackupFileInfo(StoreModel):
    name: str
    path: str
    size: int
    created_at: datetime
    modified_at: datetime


class BackupStatus(StoreModel):
    auto_backup_days: int
    last_backup_time: datetime | None
    next_backup_time: datetime | None


class ExportRequest(StoreModel):
    name: str | None = Field(None, description="File name inside the backup directory")


class ImportRequest(StoreModel):
    """Either a backup file name from the backup directory or the snapshot itself."""
    name: str | None = None
    data: Any = None
