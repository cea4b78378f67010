"""Attendance REST resource under ``/attendance``."""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.attendance.schemas import (
    AttendanceBySection,
    AttendanceReport,
    AttendanceStats,
    BulkAttendanceRequest,
    BulkAttendanceResult,
    MarkAttendanceRequest,
    StudentAttendanceRecord,
)


class AttendanceService(ResourceService[StudentAttendanceRecord]):
    endpoint = "/attendance"
    model = StudentAttendanceRecord
    list_keys = ("attendance", "items", "data")

    async def get_by_date_and_section(self, section_id: str, on: date) -> ApiResponse:
        response = await self.client.get(
            self.url("students", "section"),
            self.token,
            {"sectionId": section_id, "date": on.isoformat()},
        )
        return response.map(AttendanceBySection.model_validate)

    async def get_student_attendance(self, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        response = await self.client.get(self.url("students"), self.token, params)
        return response.map(self.parse_list)

    async def mark_student(self, request: MarkAttendanceRequest) -> ApiResponse:
        response = await self.client.post(self.url("students"), to_body(request), self.token)
        return response.map(self.parse)

    async def bulk_mark(self, request: BulkAttendanceRequest) -> ApiResponse:
        response = await self.client.post(self.url("students", "bulk"), to_body(request), self.token)
        return response.map(BulkAttendanceResult.model_validate)

    async def get_report(self, section_id: str, start: date, end: date) -> ApiResponse:
        response = await self.client.get(
            self.url("students", "report"),
            self.token,
            {"sectionId": section_id, "startDate": start.isoformat(), "endDate": end.isoformat()},
        )
        return response.map(AttendanceReport.model_validate)

    async def get_stats(self, on: Optional[date] = None) -> ApiResponse:
        response = await self.client.get(
            self.url("stats"), self.token, {"date": on.isoformat() if on else None}
        )
        return response.map(AttendanceStats.model_validate)
