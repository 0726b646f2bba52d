from ..database.database_service import database_service
from ..database.collections import COLLECTIONS
from ..core.clock import utc_now
from ..core.config import settings
from datetime import datetime
from typing import Optional
import logging
import random

logger = logging.getLogger(__name__)


class ReportIdGenerationError(Exception):
    pass


class ReportIdService:
    def __init__(self):
        self.db = database_service

    @staticmethod
    def format_report_id(sequence: int, day: datetime) -> str:
        """
        Report ID format: DGS-<sequence><YYYYMMDD>, e.g. DGS-00320250301.
        The sequence is zero padded to 3 digits and grows past 999 unpadded.
        """
        return f"{settings.REPORT_ID_PREFIX}-{sequence:03d}{day.strftime('%Y%m%d')}"

    async def _count_reports_on(self, day: datetime) -> int:
        success, reports, error = await self.db.get_all_documents(COLLECTIONS['reports'])
        if not success:
            raise ReportIdGenerationError(f"Failed to read reports: {error}")

        prefix = day.strftime("%Y-%m-%d")
        return sum(
            1 for report in reports
            if isinstance(report.get("createdAt"), str) and report["createdAt"].startswith(prefix)
        )

    async def get_daily_report_count(self) -> int:
        """Number of reports whose createdAt falls on the current UTC day (0 on any failure)."""
        try:
            return await self._count_reports_on(utc_now())
        except Exception as e:
            logger.error(f"Error counting today's reports: {e}")
            return 0

    async def _next_sequence(self, day: datetime) -> int:
        if not settings.REPORT_ID_USE_COUNTER:
            return await self._count_reports_on(day) + 1

        counter_id = f"reports_{day.strftime('%Y%m%d')}"
        success, current, error = await self.db.get_counter(counter_id)
        if not success:
            raise ReportIdGenerationError(f"Failed to read report counter: {error}")

        # First report of the day through the counter: continue after any reports already stored
        seed = current if isinstance(current, int) else await self._count_reports_on(day)

        success, value, error = await self.db.increment_counter(counter_id, seed)
        if not success or not isinstance(value, int):
            raise ReportIdGenerationError(f"Failed to increment report counter: {error}")
        return value

    async def generate_report_id(self, day: Optional[datetime] = None) -> str:
        """
        Next report ID for today. Never fails: if the sequence cannot be
        determined a random 3-digit sequence is used instead.
        """
        day = day or utc_now()
        try:
            sequence = await self._next_sequence(day)
        except Exception as e:
            sequence = random.randint(100, 999)
            logger.warning(f"Report sequence unavailable ({e}), using random sequence {sequence}")

        report_id = self.format_report_id(sequence, day)
        logger.info(f"Generated report ID: {report_id}")
        return report_id


report_id_service = ReportIdService()
