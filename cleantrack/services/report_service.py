from typing import Any, Dict, List, Optional
from datetime import datetime, timezone
import logging

from ..core.clock import to_iso, utc_now, utc_now_iso
from ..database.collections import COLLECTIONS
from ..database.database_service import database_service
from ..models.result import ErrorKind, ServiceResult
from .report_id_service import report_id_service

logger = logging.getLogger(__name__)

# Keys a patch is never allowed to overwrite
IMMUTABLE_FIELDS = ("id", "createdAt")

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def _created_at_key(report: Dict[str, Any]) -> datetime:
    try:
        parsed = datetime.fromisoformat(str(report.get("createdAt")).replace("Z", "+00:00"))
    except ValueError:
        return _OLDEST
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


class ReportService:
    def __init__(self):
        self.db = database_service
        self.id_service = report_id_service

    async def get_all_reports(self) -> ServiceResult:
        try:
            success, reports, error = await self.db.get_all_documents(COLLECTIONS['reports'])
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok(reports=reports)
        except Exception as e:
            logger.error(f"Error listing reports: {e}")
            return ServiceResult.fail(str(e))

    async def get_user_reports(self, user_id: str) -> ServiceResult:
        """Reports owned by ``user_id`` (indexed userId query)."""
        try:
            if not user_id:
                return ServiceResult.fail("User ID is required", ErrorKind.VALIDATION)

            success, reports, error = await self.db.query_documents(
                COLLECTIONS['reports'], [("userId", "==", user_id)]
            )
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok(reports=reports)
        except Exception as e:
            logger.error(f"Error listing reports of user {user_id}: {e}")
            return ServiceResult.fail(str(e))

    async def get_daily_report_count(self) -> int:
        return await self.id_service.get_daily_report_count()

    async def generate_report_id(self, day: Optional[datetime] = None) -> str:
        return await self.id_service.generate_report_id(day)

    async def create_report(self, report_data: Dict[str, Any]) -> ServiceResult:
        """
        Store a new report under a freshly generated ID. The write overwrites
        whatever sits at that path.
        """
        try:
            # One clock read: the ID date and createdAt must name the same day
            created = utc_now()
            report_id = await self.generate_report_id(created)

            now = to_iso(created)
            report = {
                **{k: v for k, v in report_data.items() if k not in IMMUTABLE_FIELDS},
                "id": report_id,
                "createdAt": now,
                "updatedAt": now,
            }

            success, _, error = await self.db.create_document(
                COLLECTIONS['reports'], report, document_id=report_id
            )
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)

            logger.info(f"Created report {report_id} for user {report.get('userId')}")
            return ServiceResult.ok(reportId=report_id, report=report)
        except Exception as e:
            logger.error(f"Error creating report: {e}")
            return ServiceResult.fail(str(e))

    async def update_report(self, report_id: str, update_data: Dict[str, Any]) -> ServiceResult:
        try:
            if not report_id:
                return ServiceResult.fail("Report ID is required", ErrorKind.VALIDATION)

            patch = {k: v for k, v in update_data.items() if k not in IMMUTABLE_FIELDS}
            patch["updatedAt"] = utc_now_iso()

            success, error = await self.db.update_document(COLLECTIONS['reports'], report_id, patch)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            return ServiceResult.ok(updatedAt=patch["updatedAt"])
        except Exception as e:
            logger.error(f"Error updating report {report_id}: {e}")
            return ServiceResult.fail(str(e))

    async def delete_report(self, report_id: str) -> ServiceResult:
        try:
            if not report_id:
                return ServiceResult.fail("Report ID is required", ErrorKind.VALIDATION)

            success, report, error = await self.db.get_document(COLLECTIONS['reports'], report_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not report:
                return ServiceResult.fail("Report not found", ErrorKind.NOT_FOUND)

            # Photos are stored inline (data/external URLs) so nothing else to clean up
            success, error = await self.db.delete_document(COLLECTIONS['reports'], report_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)

            logger.info(f"Deleted report {report_id}")
            return ServiceResult.ok()
        except Exception as e:
            logger.error(f"Error deleting report {report_id}: {e}")
            return ServiceResult.fail(str(e))

    async def get_report_by_id(self, report_id: str) -> ServiceResult:
        try:
            if not report_id:
                return ServiceResult.fail("Report ID is required", ErrorKind.VALIDATION)

            success, report, error = await self.db.get_document(COLLECTIONS['reports'], report_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not report:
                return ServiceResult.fail("Report not found", ErrorKind.NOT_FOUND)
            return ServiceResult.ok(report=report)
        except Exception as e:
            logger.error(f"Error getting report {report_id}: {e}")
            return ServiceResult.fail(str(e))

    async def get_dealer_reports(self, dealer_id: str) -> ServiceResult:
        """
        Reports of every operator assigned to the dealer, newest first.
        Operators are fetched one after another; an operator whose reports
        cannot be read is skipped.
        """
        try:
            if not dealer_id:
                return ServiceResult.fail("Dealer ID is required", ErrorKind.VALIDATION)

            success, dealer, error = await self.db.get_document(COLLECTIONS['users'], dealer_id)
            if not success:
                return ServiceResult.fail(error, ErrorKind.STORAGE)
            if not dealer:
                return ServiceResult.fail("Dealer not found", ErrorKind.NOT_FOUND)

            assigned_operators = dealer.get("assignedOperators") or []
            # Sparse arrays come back from the realtime database as {index: value}
            if isinstance(assigned_operators, dict):
                assigned_operators = list(assigned_operators.values())
            assigned_operators = [op for op in assigned_operators if op]
            if not assigned_operators:
                return ServiceResult.ok(reports=[])

            reports: List[Dict[str, Any]] = []
            for operator_id in assigned_operators:
                operator_reports = await self.get_user_reports(operator_id)
                if operator_reports.success:
                    reports.extend(operator_reports["reports"])
                else:
                    logger.warning(f"Skipping reports of operator {operator_id}: {operator_reports.error}")

            return ServiceResult.ok(reports=sorted(reports, key=_created_at_key, reverse=True))
        except Exception as e:
            logger.error(f"Error getting dealer reports for {dealer_id}: {e}")
            return ServiceResult.fail(str(e))


report_service = ReportService()
