"""Academic REST resources: classes/sections, branches, students, transfers."""

from __future__ import annotations

from typing import Any, Optional

from school_erp.academics.schemas import (
    BatchTransferRecord,
    BranchRecord,
    BulkTransferRequest,
    ClassRecord,
    StudentRecord,
    TransferRequest,
)
from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.common.pagination import extract_items


class ClassesService(ResourceService[ClassRecord]):
    endpoint = "/classes"
    model = ClassRecord

    async def get_sections(self, class_id: str) -> ApiResponse:
        return await self.client.get(self.url(class_id, "sections"), self.token)

    async def get_students(self, class_id: str, section_id: Optional[str] = None) -> ApiResponse:
        response = await self.client.get(
            self.url(class_id, "students"),
            self.token,
            {"sectionId": section_id},
        )
        return response.map(
            lambda data: [StudentRecord.model_validate(s) for s in extract_items(data, ("students", "data"))]
        )

    async def create_section(self, class_id: str, payload: Any) -> ApiResponse:
        return await self.client.post(self.url(class_id, "sections"), to_body(payload), self.token)

    async def update_section(self, section_id: str, payload: Any) -> ApiResponse:
        return await self.client.put(self.url("sections", section_id), to_body(payload), self.token)

    async def delete_section(self, section_id: str) -> ApiResponse:
        return await self.client.delete(self.url("sections", section_id), self.token)


class BranchesService(ResourceService[BranchRecord]):
    endpoint = "/branches"
    model = BranchRecord


class StudentsService(ResourceService[StudentRecord]):
    endpoint = "/students"
    model = StudentRecord
    list_keys = ("students", "items", "data")


class TransfersService(ResourceService[BatchTransferRecord]):
    """Batch transfers. History is read-only; a transfer is created once."""

    endpoint = "/transfers"
    transfer_endpoint = "/students/transfer"
    model = BatchTransferRecord
    list_keys = ("data", "transfers", "items")

    async def get_history(self, params: Optional[dict[str, Any]] = None) -> ApiResponse:
        return await self.get_all(params)

    async def get_student_history(self, student_id: str) -> ApiResponse:
        response = await self.client.get(self.url("student", student_id), self.token)
        return response.map(self.parse_list)

    async def transfer(self, request: TransferRequest) -> ApiResponse:
        response = await self.client.post(self.transfer_endpoint, to_body(request), self.token)
        return response.map(self.parse)

    async def bulk_transfer(self, request: BulkTransferRequest) -> ApiResponse:
        return await self.client.post(self.url("bulk"), to_body(request), self.token)

