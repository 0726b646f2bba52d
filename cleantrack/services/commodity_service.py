from typing import Any, Dict
import logging

from ..core.clock import utc_now_iso
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.result import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)


class CommodityService:
    """Commodity catalog CRUD. IDs are push keys generated by the database."""

    def __init__(self):
        self.db = database_service

    async def get_all_commodities(self) -> ServiceResult:
        try:
            success, commodities, error = await self.db.get_all_documents(COLLECTIONS['commodities'])
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok(commodities=commodities)
        except Exception as e:
            logger.error(f"Error listing commodities: {e}")
            return ServiceResult.fail(str(e))

    async def get_commodity_by_id(self, commodity_id: str) -> ServiceResult:
        try:
            if not commodity_id:
                return ServiceResult.fail("Commodity ID is required", ErrorKind.VALIDATION)

            success, commodity, error = await self.db.get_document(COLLECTIONS['commodities'], commodity_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not commodity:
                return ServiceResult.fail("Commodity not found", ErrorKind.NOT_FOUND)
            return ServiceResult.ok(commodity=commodity)
        except Exception as e:
            logger.error(f"Error getting commodity {commodity_id}: {e}")
            return ServiceResult.fail(str(e))

    async def create_commodity(self, commodity_data: Dict[str, Any]) -> ServiceResult:
        try:
            now = utc_now_iso()
            commodity = {
                **{k: v for k, v in commodity_data.items() if k != "id"},
                "createdAt": now,
                "updatedAt": now,
            }

            success, commodity_id, error = await self.db.create_document(COLLECTIONS['commodities'], commodity)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)

            commodity["id"] = commodity_id
            logger.info(f"Created commodity {commodity_id}")
            return ServiceResult.ok(commodityId=commodity_id, commodity=commodity)
        except Exception as e:
            logger.error(f"Error creating commodity: {e}")
            return ServiceResult.fail(str(e))

    async def update_commodity(self, commodity_id: str, update_data: Dict[str, Any]) -> ServiceResult:
        try:
            if not commodity_id:
                return ServiceResult.fail("Commodity ID is required", ErrorKind.VALIDATION)

            patch = {k: v for k, v in update_data.items() if k not in ("id", "createdAt")}
            patch["updatedAt"] = utc_now_iso()

            success, error = await self.db.update_document(COLLECTIONS['commodities'], commodity_id, patch)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok(updatedAt=patch["updatedAt"])
        except Exception as e:
            logger.error(f"Error updating commodity {commodity_id}: {e}")
            return ServiceResult.fail(str(e))

    async def delete_commodity(self, commodity_id: str) -> ServiceResult:
        try:
            if not commodity_id:
                return ServiceResult.fail("Commodity ID is required", ErrorKind.VALIDATION)

            success, error = await self.db.delete_document(COLLECTIONS['commodities'], commodity_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok()
        except Exception as e:
            logger.error(f"Error deleting commodity {commodity_id}: {e}")
            return ServiceResult.fail(str(e))


commodity_service = CommodityService()
