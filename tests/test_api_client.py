"""API client test suite — query params, multipart encoding, envelope
normalisation, transport failures and the generic resource service."""

from __future__ import annotations

import httpx
import pytest

from school_erp.api.client import ApiClient, build_query_params, encode_multipart
from school_erp.api.envelope import ApiResponse
from school_erp.api.service import ResourceService, to_body
from school_erp.common.constants import DEFAULT_ERROR_MESSAGE, TripStatus
from school_erp.common.exceptions import ApiRequestError
from school_erp.common.schemas import Record
from school_erp.config import settings
from school_erp.transportation.schemas import TripForm


def _client(handler) -> ApiClient:
    return ApiClient("http://api.test/api/v1", transport=httpx.MockTransport(handler))


# ═════════════════════════════════════════════════════════════════════
# 1. REQUEST BUILDING
# ═════════════════════════════════════════════════════════════════════


class TestQueryParams:

    def test_drops_empty_values(self):
        assert build_query_params({"a": None, "b": "", "c": "x"}) == {"c": "x"}

    def test_stringifies_bools_numbers_and_enums(self):
        params = build_query_params({"active": True, "limit": 10, "status": TripStatus.in_progress})
        assert params == {"active": "true", "limit": "10", "status": "IN_PROGRESS"}

    def test_none_gives_empty_dict(self):
        assert build_query_params(None) == {}


class TestMultipart:

    def test_fields_and_file_parts(self):
        body, content_type = encode_multipart(
            {"patternId": "p-1"},
            {"file": ("paper.docx", b"DOCX", "application/octet-stream")},
            boundary="XYZ",
        )
        assert content_type == "multipart/form-data; boundary=XYZ"
        assert b'name="patternId"\r\n\r\np-1\r\n' in body
        assert b'name="file"; filename="paper.docx"' in body
        assert b"DOCX\r\n" in body
        assert body.endswith(b"--XYZ--\r\n")

    def test_random_boundary(self):
        _, first = encode_multipart({}, {})
        _, second = encode_multipart({}, {})
        assert first != second


# ═════════════════════════════════════════════════════════════════════
# 2. ENVELOPE NORMALISATION
# ═════════════════════════════════════════════════════════════════════


class TestNormalize:

    def test_success_unwraps_data(self):
        response = ApiClient._normalize(200, {"success": True, "data": {"id": "1"}, "message": "ok"})
        assert response.success and response.data == {"id": "1"} and response.message == "ok"

    def test_success_without_data_keeps_body(self):
        response = ApiClient._normalize(200, {"status": "healthy"})
        assert response.data == {"status": "healthy"}

    def test_bare_list_body(self):
        assert ApiClient._normalize(200, [1, 2]).data == [1, 2]

    def test_error_prefers_message_over_error(self):
        response = ApiClient._normalize(409, {"success": False, "error": "Conflict", "message": "Already exists"})
        assert not response.success
        assert response.error == "Already exists"
        assert response.status_code == 409

    def test_error_falls_back_to_error_then_default(self):
        assert ApiClient._normalize(400, {"error": "Bad"}).error == "Bad"
        assert ApiClient._normalize(500, "boom").error == DEFAULT_ERROR_MESSAGE


class TestApiResponse:

    def test_unwrap_failure_raises(self):
        with pytest.raises(ApiRequestError):
            ApiResponse.fail("nope", 400).unwrap()

    def test_map_skips_failures_and_empty_data(self):
        failed = ApiResponse.fail("nope")
        assert failed.map(lambda d: 1 / 0) is failed
        empty = ApiResponse.ok(None)
        assert empty.map(lambda d: 1 / 0) is empty

    def test_map_transforms_data(self):
        assert ApiResponse.ok([1, 2], "m").map(len).data == 2


# ═════════════════════════════════════════════════════════════════════
# 3. TRANSPORT
# ═════════════════════════════════════════════════════════════════════


class TestTransport:

    async def test_bearer_and_json_headers(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["auth"] = request.headers.get("Authorization")
            seen["type"] = request.headers.get("Content-Type")
            seen["url"] = str(request.url)
            return httpx.Response(200, json={"success": True, "data": []})

        async with _client(handler) as api:
            response = await api.get("/drivers", "tok", {"search": "ram", "page": None})
        assert response.success
        assert seen["auth"] == "Bearer tok"
        assert seen["type"] == "application/json"
        assert seen["url"] == "http://api.test/api/v1/drivers?search=ram"

    async def test_school_header(self):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request.headers.get("X-School-Id"))
            return httpx.Response(200, json={"success": True})

        async with _client(handler) as api:
            await api.get("/health")
        transport = httpx.MockTransport(handler)
        async with ApiClient("http://api.test/api/v1", transport=transport, school_id="school-x") as api:
            await api.get("/health")
        async with ApiClient("http://api.test/api/v1", transport=transport, school_id="") as api:
            await api.get("/health")
        assert seen == [settings.SCHOOL_ID, "school-x", None]

    async def test_network_error_becomes_failed_envelope(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as api:
            response = await api.post("/auth/login", {})
        assert not response.success
        assert "connection refused" in response.error
        assert response.status_code is None

    async def test_non_json_body_becomes_failed_envelope(self):
        async with _client(lambda request: httpx.Response(502, text="<html>bad gateway</html>")) as api:
            response = await api.get("/health")
        assert not response.success

    async def test_upload_missing_file(self, tmp_path):
        async with _client(lambda request: httpx.Response(200, json={})) as api:
            response = await api.upload("/tests/upload/parse", tmp_path / "missing.docx")
        assert not response.success


# ═════════════════════════════════════════════════════════════════════
# 4. RESOURCE SERVICE
# ═════════════════════════════════════════════════════════════════════


class Widget(Record):
    name: str = ""


class WidgetService(ResourceService[Widget]):
    endpoint = "/widgets"
    model = Widget
    list_keys = ("widgets", "data")


class _Token:
    access_token = "tok"


class TestResourceService:

    def test_url_joins_parts(self):
        service = WidgetService(ApiClient("http://x"), _Token())
        assert service.url("w1", "start") == "/widgets/w1/start"

    def test_parse_list_accepts_nested_lists(self):
        service = WidgetService(ApiClient("http://x"), _Token())
        parsed = service.parse_list({"widgets": [{"id": "1", "name": "a"}], "pagination": {}})
        assert [w.name for w in parsed] == ["a"]
        assert service.parse_list({"unexpected": 1}) == []

    def test_to_body_serialises_forms_with_aliases(self):
        body = to_body(TripForm(route_id="r1", vehicle_id="v1", driver_id="d1", trip_date="2025-01-01"))
        assert body["routeId"] == "r1"
        assert "route_id" not in body
        assert to_body({"raw": 1}) == {"raw": 1}

    async def test_action_posts_to_record_subpath(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append((request.method, request.url.path))
            return httpx.Response(200, json={"success": True, "data": {"id": "w1", "name": "started"}})

        async with _client(handler) as api:
            response = await WidgetService(api, _Token()).action("w1", "start")
        assert calls == [("POST", "/api/v1/widgets/w1/start")]
        assert isinstance(response.data, Widget) and response.data.name == "started"
