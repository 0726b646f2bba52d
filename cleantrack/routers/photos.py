from fastapi import APIRouter, HTTPException, Depends, File, Form, UploadFile
from typing import Any, Dict, List
import logging

from ..auth.dependencies import get_current_user
from ..services.photo_service import photo_service
from .responses import envelope_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/photos", tags=["Photos"])


@router.post("/compress", response_model=Dict[str, Any])
async def compress_photos(
    files: List[UploadFile] = File(...),
    folder: str = Form("general"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """Compress uploaded images to JPEG data URLs, in upload order."""
    try:
        result = await photo_service.save_multiple_photo_urls(files, folder)
        return envelope_or_raise(result, count=len(result.get("photos", [])))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error compressing photos: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/local", response_model=Dict[str, Any])
async def store_local_photo(
    file: UploadFile = File(...),
    report_id: str = Form(...),
    photo_type: str = Form(...),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        result = await photo_service.save_photo_to_local_storage(file, report_id, photo_type)
        return envelope_or_raise(result)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error storing photo for report {report_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/local/{storage_key}", response_model=Dict[str, Any])
async def get_local_photo(storage_key: str, current_user: Dict[str, Any] = Depends(get_current_user)):
    try:
        return envelope_or_raise(await photo_service.get_photo_from_local_storage(storage_key))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error reading photo {storage_key}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/local/{storage_key}", response_model=Dict[str, Any])
async def delete_local_photo(storage_key: str, current_user: Dict[str, Any] = Depends(get_current_user)):
    try:
        return envelope_or_raise(await photo_service.delete_photo_from_local_storage(storage_key))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error deleting photo {storage_key}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
