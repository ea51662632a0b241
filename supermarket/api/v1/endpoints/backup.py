import logging
from pathlib import Path
from typing import List

from fastapi import APIRouter, Depends, status

from supermarket.core.deps import get_auto_backup, get_backup_service
from supermarket.core.exceptions import ValidationError
from supermarket.schemas.backup import (
    BackupFileInfo,
    BackupStatus,
    ExportRequest,
    ExportResult,
    ImportReport,
    ImportRequest,
)
from supermarket.services.auto_backup import AutoBackupScheduler
from supermarket.services.backup_service import BackupService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/backup",
    tags=["Backup"],
)


def _resolve_in_backup_dir(service: BackupService, name: str) -> str:
    """Map a client supplied file name onto the backup directory, refusing anything that escapes it."""
    backup_dir = service.files.backup_dir.resolve()
    target = (backup_dir / name).resolve()
    if not target.is_relative_to(backup_dir) or target == backup_dir:
        raise ValidationError("Invalid file path")
    return str(target)


@router.post("/export", response_model=ExportResult)
async def export_backup(
    body: ExportRequest | None = None,
    service: BackupService = Depends(get_backup_service),
):
    path = _resolve_in_backup_dir(service, body.name) if body and body.name else None
    return await service.export_data(path)


@router.post("/import", response_model=ImportReport)
async def import_backup(
    body: ImportRequest,
    service: BackupService = Depends(get_backup_service),
):
    """
    Replace everything with a snapshot. Without `name` or `data` the
    newest file in the backup directory is used.
    """
    if body.data is not None:
        return await service.import_data(data=body.data)
    path = _resolve_in_backup_dir(service, body.name) if body.name else None
    return await service.import_data(path=path)


@router.post("/auto", response_model=ExportResult | None)
async def run_auto_backup(
    force: bool = False,
    scheduler: AutoBackupScheduler = Depends(get_auto_backup),
):
    """Run the scheduled backup now if due, or unconditionally with `force`."""
    if force:
        return await scheduler.run_now()
    return await scheduler.run_if_due()


@router.get("/status", response_model=BackupStatus)
async def backup_status(scheduler: AutoBackupScheduler = Depends(get_auto_backup)):
    return scheduler.status()


@router.get("/files", response_model=List[BackupFileInfo])
async def list_backup_files(service: BackupService = Depends(get_backup_service)):
    return await service.files.list_files()


@router.delete("/files/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_backup_file(name: str, service: BackupService = Depends(get_backup_service)):
    await service.files.delete_file(str(Path(service.files.backup_dir) / name))
