from typing import Any, Dict
import logging

from ..core.clock import utc_now_iso
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.result import ErrorKind, ServiceResult

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self):
        self.db = database_service

    async def get_all_users(self) -> ServiceResult:
        try:
            success, users, error = await self.db.get_all_documents(COLLECTIONS['users'])
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok(users=users)
        except Exception as e:
            logger.error(f"Error listing users: {e}")
            return ServiceResult.fail(str(e))

    async def get_user_by_id(self, user_id: str) -> ServiceResult:
        try:
            if not user_id:
                return ServiceResult.fail("User ID is required", ErrorKind.VALIDATION)

            success, user, error = await self.db.get_document(COLLECTIONS['users'], user_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not user:
                return ServiceResult.fail("User not found", ErrorKind.NOT_FOUND)
            return ServiceResult.ok(user=user)
        except Exception as e:
            logger.error(f"Error getting user {user_id}: {e}")
            return ServiceResult.fail(str(e))

    async def update_user(self, user_id: str, update_data: Dict[str, Any]) -> ServiceResult:
        try:
            if not user_id:
                return ServiceResult.fail("User ID is required", ErrorKind.VALIDATION)

            patch = {k: v for k, v in update_data.items() if k not in ("id", "createdAt")}
            patch["updatedAt"] = utc_now_iso()

            success, error = await self.db.update_document(COLLECTIONS['users'], user_id, patch)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)

            logger.info(f"Updated user {user_id}: {sorted(patch)}")
            return ServiceResult.ok(updatedAt=patch["updatedAt"])
        except Exception as e:
            logger.error(f"Error updating user {user_id}: {e}")
            return ServiceResult.fail(str(e))

    async def delete_user(self, user_id: str) -> ServiceResult:
        """Removes the profile only; the sign-in account is left to the identity provider."""
        try:
            if not user_id:
                return ServiceResult.fail("User ID is required", ErrorKind.VALIDATION)

            success, error = await self.db.delete_document(COLLECTIONS['users'], user_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)

            logger.info(f"Deleted user profile {user_id}")
            return ServiceResult.ok()
        except Exception as e:
            logger.error(f"Error deleting user {user_id}: {e}")
            return ServiceResult.fail(str(e))


user_service = UserService()
