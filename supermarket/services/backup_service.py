import json
import logging
from typing import Any, Awaitable, Callable

from pydantic import ValidationError as PydanticValidationError

from supermarket.core.clock import Clock, local_now
from supermarket.core.exceptions import InvalidFormatError, OperationCancelledError, SupermarketError
from supermarket.crud.store import ObjectStore
from supermarket.schemas.backup import (
    BACKUP_VERSION,
    BackupSnapshot,
    EntityReport,
    ExportResult,
    FailedRecord,
    ImportReport,
)
from supermarket.services.category_service import CategoryService
from supermarket.services.order_service import OrderService
from supermarket.services.product_service import ProductService
from supermarket.storage.base import JSON_FILTERS, BackupStorageInterface
from supermarket.storage.local_storage import backup_timestamp

logger = logging.getLogger(__name__)


class BackupService:
    """
    Whole-store export to a JSON snapshot, and restore from one.

    Restore validates the snapshot's shape before anything is cleared, so a
    malformed file never destroys data. Once clearing has happened, records
    are restored one by one and a bad record is reported rather than
    aborting the rest.
    """

    def __init__(
        self,
        store: ObjectStore,
        category_service: CategoryService,
        product_service: ProductService,
        order_service: OrderService,
        files: BackupStorageInterface,
        clock: Clock = local_now,
    ):
        self.store = store
        self.category_service = category_service
        self.product_service = product_service
        self.order_service = order_service
        self.files = files
        self.clock = clock

    # --- EXPORT ---

    async def export_snapshot(self) -> BackupSnapshot:
        categories = await self.category_service.get_all()
        products = await self.product_service.get_all()
        orders = await self.order_service.get_all_orders()
        order_items = await self.order_service.get_all_order_items()

        return BackupSnapshot(
            version=BACKUP_VERSION,
            exportTime=self.clock().strftime("%Y/%m/%d %H:%M:%S"),
            categories=[c.to_store() for c in categories],
            products=[p.to_store() for p in products],
            orders=[o.to_store() for o in orders],
            orderItems=[i.to_store() for i in order_items],
        )

    async def export_json(self) -> tuple[BackupSnapshot, str]:
        snapshot = await self.export_snapshot()
        content = json.dumps(snapshot.to_store(), ensure_ascii=False, indent=2)
        return snapshot, content

    async def export_data(self, path: str | None = None) -> ExportResult:
        """Write a snapshot to path, asking the shell for one when not given."""
        snapshot, content = await self.export_json()

        if path is None:
            default_name = f"supermarket_backup_{backup_timestamp(self.clock())}.json"
            path = await self.files.choose_save_path(default_name, JSON_FILTERS)
            if path is None:
                logger.info("Export cancelled by user.")
                raise OperationCancelledError("Export cancelled")

        await self.files.write_file(path, content)

        logger.info(
            f"Exported backup to {path}: {len(snapshot.categories)} categories, "
            f"{len(snapshot.products)} products, {len(snapshot.orders)} orders, "
            f"{len(snapshot.order_items)} order items"
        )
        return ExportResult(path=path, export_time=snapshot.export_time)

    async def auto_export_data(self) -> ExportResult:
        """Unattended backup into the shell's backup directory."""
        snapshot, content = await self.export_json()
        path = await self.files.direct_backup(content)

        logger.info(f"Automatic backup written to {path}")
        return ExportResult(path=path, export_time=snapshot.export_time)

    # --- IMPORT ---

    @staticmethod
    def validate_snapshot(raw: Any) -> BackupSnapshot:
        if not isinstance(raw, dict):
            raise InvalidFormatError("Backup file must contain a JSON object")
        try:
            snapshot = BackupSnapshot.model_validate(raw)
        except PydanticValidationError as e:
            fields = sorted({str(err["loc"][0]) for err in e.errors() if err.get("loc")})
            raise InvalidFormatError(f"Invalid backup file format: {', '.join(fields)}") from e

        if snapshot.version != BACKUP_VERSION:
            logger.warning(f"Importing backup version {snapshot.version}; expected {BACKUP_VERSION}")
        return snapshot

    async def _load(self, path: str | None, content: str | None, data: Any) -> Any:
        if data is not None:
            return data

        if content is None:
            if path is None:
                path = await self.files.choose_open_path(JSON_FILTERS)
                if path is None:
                    logger.info("Import cancelled by user.")
                    raise OperationCancelledError("Import cancelled")
            content = await self.files.read_file(path)

        try:
            return json.loads(content)
        except json.JSONDecodeError as e:
            raise InvalidFormatError(f"Backup file is not valid JSON: {e.msg}") from e

    async def clear_all_data(self) -> None:
        self.category_service.clear_cache()
        for collection in self.store.collections():
            await collection.clear()
        logger.info("All collections cleared.")

    @staticmethod
    async def _restore_each(
        label: str,
        records: list[Any],
        recover: Callable[[Any], Awaitable[Any]],
    ) -> EntityReport:
        report = EntityReport()
        for record in records:
            try:
                restored = await recover(record)
                report.succeeded.append(restored.id)
            except SupermarketError as e:
                logger.warning(f"Skipped {label} record during import: {e}", extra={"entity": label})
                report.failed.append(FailedRecord(record=record, reason=str(e)))
        return report

    async def import_data(
        self,
        path: str | None = None,
        content: str | None = None,
        data: Any = None,
    ) -> ImportReport:
        """
        Replace the whole store with a snapshot.

        Source is, in order of preference, an already parsed object, a JSON
        string, a file path, or whatever file the shell lets the user pick.
        """
        snapshot = self.validate_snapshot(await self._load(path, content, data))

        await self.clear_all_data()

        # Dependency order: a product needs its category, an item its order
        report = ImportReport(
            categories=await self._restore_each("category", snapshot.categories, self.category_service.recover),
            products=await self._restore_each("product", snapshot.products, self.product_service.recover),
            orders=await self._restore_each("order", snapshot.orders, self.order_service.recover_order),
            order_items=await self._restore_each("order item", snapshot.order_items, self.order_service.recover_order_item),
        )

        logger.info(
            f"Import finished: {len(report.categories.succeeded)} categories, "
            f"{len(report.products.succeeded)} products, {len(report.orders.succeeded)} orders, "
            f"{len(report.order_items.succeeded)} order items; {report.failed_count} records skipped"
        )
        return report
