"""Report endpoints under ``/reports``."""

from __future__ import annotations

from datetime import date
from typing import Optional

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService
from school_erp.reports.schemas import ClassReport, StudentReport


def report_params(
    subject_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
) -> dict[str, Optional[str]]:
    return {
        "subjectId": subject_id,
        "dateFrom": date_from.isoformat() if date_from else None,
        "dateTo": date_to.isoformat() if date_to else None,
    }


class ReportsService(ResourceService):
    endpoint = "/reports"

    async def get_class_report(
        self,
        class_id: str,
        *,
        subject_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ApiResponse:
        response = await self.client.get(
            self.url("class", class_id), self.token, report_params(subject_id, date_from, date_to)
        )
        return response.map(ClassReport.model_validate)

    async def get_student_report(
        self,
        student_id: str,
        *,
        subject_id: Optional[str] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> ApiResponse:
        response = await self.client.get(
            self.url("student", student_id), self.token, report_params(subject_id, date_from, date_to)
        )
        return response.map(StudentReport.model_validate)
