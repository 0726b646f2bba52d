from fastapi import APIRouter, HTTPException, Depends
from typing import Any, Dict
import logging

from ..auth.dependencies import get_current_user, require_admin
from ..models.database_models import CommodityCreate, CommodityUpdate
from ..services.commodity_service import commodity_service
from .responses import envelope_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/commodities",
    tags=["Commodities"],
    responses={404: {"description": "Not found"}}
)


@router.get("/", response_model=Dict[str, Any])
async def list_commodities(current_user: Dict[str, Any] = Depends(get_current_user)):
    try:
        result = await commodity_service.get_all_commodities()
        return envelope_or_raise(result, count=len(result.get("commodities", [])))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing commodities: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{commodity_id}", response_model=Dict[str, Any])
async def get_commodity(commodity_id: str, current_user: Dict[str, Any] = Depends(get_current_user)):
    try:
        return envelope_or_raise(await commodity_service.get_commodity_by_id(commodity_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching commodity {commodity_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/", response_model=Dict[str, Any])
async def create_commodity(payload: CommodityCreate, current_user: Dict[str, Any] = Depends(require_admin)):
    """Create a catalog item (Admin only)"""
    try:
        data = payload.model_dump(mode="json", exclude_none=True)
        return envelope_or_raise(await commodity_service.create_commodity(data), message="Commodity created")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error creating commodity: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{commodity_id}", response_model=Dict[str, Any])
async def update_commodity(commodity_id: str, payload: CommodityUpdate, current_user: Dict[str, Any] = Depends(require_admin)):
    try:
        patch = payload.model_dump(mode="json", exclude_unset=True)
        if not patch:
            raise HTTPException(status_code=400, detail="No fields to update")
        return envelope_or_raise(await commodity_service.update_commodity(commodity_id, patch), message="Commodity updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error updating commodity {commodity_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{commodity_id}", response_model=Dict[str, Any])
async def delete_commodity(commodity_id: str, current_user: Dict[str, Any] = Depends(require_admin)):
    try:
        return envelope_or_raise(await commodity_service.delete_commodity(commodity_id), message="Commodity deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error deleting commodity {commodity_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
