#routers/users
from fastapi import APIRouter, HTTPException, Depends
from typing import Any, Dict
import logging

from ..auth.dependencies import require_admin
from ..models.user import UserUpdate
from ..services.user_service import user_service
from .responses import envelope_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["user-management"])


@router.get("/", response_model=Dict[str, Any])
async def list_users(current_user: dict = Depends(require_admin)):
    try:
        result = await user_service.get_all_users()
        return envelope_or_raise(result, count=len(result.get("users", [])))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing users: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{user_id}", response_model=Dict[str, Any])
async def get_user(user_id: str, current_user: dict = Depends(require_admin)):
    try:
        return envelope_or_raise(await user_service.get_user_by_id(user_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{user_id}", response_model=Dict[str, Any])
async def update_user(user_id: str, payload: UserUpdate, current_user: dict = Depends(require_admin)):
    """Update role, permissions, dealer assignments or name of a user."""
    try:
        patch = payload.model_dump(mode="json", exclude_unset=True)
        if not patch:
            raise HTTPException(status_code=400, detail="No fields to update")
        return envelope_or_raise(await user_service.update_user(user_id, patch), message="User updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error updating user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{user_id}", response_model=Dict[str, Any])
async def delete_user(user_id: str, current_user: dict = Depends(require_admin)):
    if user_id == current_user.get("uid"):
        raise HTTPException(status_code=400, detail="You cannot delete your own account")
    try:
        return envelope_or_raise(await user_service.delete_user(user_id), message="User deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error deleting user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
