from fastapi import APIRouter, HTTPException, Depends, Path, status
from typing import Dict, Any
import logging

from ..auth.dependencies import get_current_user, require_dealer_or_admin, require_role
from ..models.database_models import ReportCreate, ReportUpdate
from ..services.navigation_service import can_submit_report
from ..services.report_service import report_service
from .responses import envelope_or_raise

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    responses={404: {"description": "Not found"}}
)

REPORT_WRITERS = ["admin", "routeman", "operator"]


@router.get("/", response_model=Dict[str, Any])
async def list_reports(current_user: Dict[str, Any] = Depends(require_role(["admin", "routeman", "viewer"]))):
    try:
        result = await report_service.get_all_reports()
        return envelope_or_raise(result, count=len(result.get("reports", [])))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing reports: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/mine", response_model=Dict[str, Any])
async def list_my_reports(current_user: Dict[str, Any] = Depends(get_current_user)):
    try:
        result = await report_service.get_user_reports(current_user.get("uid"))
        return envelope_or_raise(result, count=len(result.get("reports", [])))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing reports of {current_user.get('uid')}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/count/today", response_model=Dict[str, Any])
async def count_reports_today(current_user: Dict[str, Any] = Depends(get_current_user)):
    return {"success": True, "count": await report_service.get_daily_report_count()}


@router.get("/dealer/{dealer_id}", response_model=Dict[str, Any])
async def list_dealer_reports(
    dealer_id: str = Path(..., description="Dealer user ID"),
    current_user: Dict[str, Any] = Depends(require_dealer_or_admin)
):
    """Reports of the operators assigned to a dealer (the dealer itself or an admin)."""
    try:
        result = await report_service.get_dealer_reports(dealer_id)
        return envelope_or_raise(result, count=len(result.get("reports", [])))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error listing dealer reports for {dealer_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.get("/{report_id}", response_model=Dict[str, Any])
async def get_report(
    report_id: str = Path(..., description="Report ID, e.g. DGS-00120250301"),
    current_user: Dict[str, Any] = Depends(get_current_user)
):
    try:
        return envelope_or_raise(await report_service.get_report_by_id(report_id))
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error fetching report {report_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.post("/", response_model=Dict[str, Any])
async def create_report(
    payload: ReportCreate,
    current_user: Dict[str, Any] = Depends(require_role(REPORT_WRITERS))
):
    if not can_submit_report(current_user.get("role"), current_user.get("permissions"), payload.reportType):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not permitted to submit {payload.reportType.value} reports"
        )
    try:
        data = payload.model_dump(mode="json", exclude_none=True)
        data["userId"] = current_user["uid"]
        if current_user.get("name"):
            data["userName"] = current_user["name"]
        return envelope_or_raise(await report_service.create_report(data), message="Report created")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error creating report: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.patch("/{report_id}", response_model=Dict[str, Any])
async def update_report(
    report_id: str,
    payload: ReportUpdate,
    current_user: Dict[str, Any] = Depends(require_role(REPORT_WRITERS))
):
    try:
        patch = payload.model_dump(mode="json", exclude_unset=True)
        if not patch:
            raise HTTPException(status_code=400, detail="No fields to update")

        existing = await report_service.get_report_by_id(report_id)
        report = envelope_or_raise(existing)["report"]
        if current_user.get("role") not in ("admin", "routeman") and report.get("userId") != current_user["uid"]:
            raise HTTPException(status_code=403, detail="You can only update your own reports")

        return envelope_or_raise(await report_service.update_report(report_id, patch), message="Report updated")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error updating report {report_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")


@router.delete("/{report_id}", response_model=Dict[str, Any])
async def delete_report(
    report_id: str,
    current_user: Dict[str, Any] = Depends(require_role(["admin"]))
):
    try:
        return envelope_or_raise(await report_service.delete_report(report_id), message="Report deleted")
    except HTTPException:
        raise
    except Exception as e:
        logger.exception(f"Error deleting report {report_id}: {e}")
        raise HTTPException(status_code=500, detail="Internal server error")
