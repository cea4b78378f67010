"""Word-file test upload under ``/tests/upload``."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.assessments.schemas import CreatedTest, ParseResult
from school_erp.common.constants import DOCX_CONTENT_TYPE


def created_test(data: Any) -> CreatedTest:
    """The create endpoint answers ``{test, questionsCreated}`` or the bare test."""
    if isinstance(data, dict) and isinstance(data.get("test"), dict):
        return CreatedTest.model_validate({**data["test"], "questionsCreated": data.get("questionsCreated", 0)})
    return CreatedTest.model_validate(data)


class TestUploadService(ResourceService[CreatedTest]):
    __test__ = False  # not a pytest class

    endpoint = "/tests/upload"
    model = CreatedTest

    async def parse_with_pattern(self, file_path: Path, pattern_id: str) -> ApiResponse:
        response = await self.client.upload(
            self.url("parse"),
            file_path,
            token=self.token,
            fields={"patternId": pattern_id},
            content_type=DOCX_CONTENT_TYPE,
        )
        return response.map(ParseResult.model_validate)

    async def create_test_from_parsed(self, payload: Any) -> ApiResponse:
        response = await self.client.post(self.url("create"), to_body(payload), self.token)
        return response.map(created_test)
