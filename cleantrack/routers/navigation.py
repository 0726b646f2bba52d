from fastapi import APIRouter, Depends, Query
from typing import Any, Dict

from ..auth.dependencies import get_current_user
from ..services.navigation_service import build_header, role_display_name

router = APIRouter(prefix="/navigation", tags=["Navigation"])


@router.get("/", response_model=Dict[str, Any])
async def get_navigation(
    path: str = Query("/", description="Path currently shown by the client"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    """Header (toolbar buttons + avatar menu) the current user is allowed to see."""
    header = build_header(current_user, path)
    return {
        "success": True,
        "role": current_user.get("role"),
        "role_label": role_display_name(current_user.get("role")),
        "header": header.model_dump() if header else None,
    }
