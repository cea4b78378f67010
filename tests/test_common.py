"""Common module tests — local filters and search, debounce, notifier,
pagination helpers and the generic CRUD page cycle (via the branches page)."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from school_erp.academics.pages import BranchesPage
from school_erp.academics.schemas import BranchForm
from school_erp.academics.service import BranchesService
from school_erp.common.constants import MenuStatus, ToastVariant, TripStatus
from school_erp.common.debounce import Debouncer
from school_erp.common.filters import apply_filters, apply_search, get_field
from school_erp.common.notifications import Notifier
from school_erp.common.pagination import PaginationMeta, extract_items, extract_meta, paginate
from school_erp.mess.schemas import MenuRecord


# ═════════════════════════════════════════════════════════════════════
# 1. FILTERS / SEARCH
# ═════════════════════════════════════════════════════════════════════

RECORDS = [
    {"name": "Route North", "status": "ACTIVE", "date": date(2025, 1, 5), "driver": {"name": "Ravi"}},
    {"name": "Route South", "status": "INACTIVE", "date": date(2025, 2, 1), "driver": None},
    {"name": "Shuttle", "status": "ACTIVE", "date": date(2025, 3, 1), "driver": {"name": "Asha"}},
]


class TestFilters:

    def test_get_field_dotted_and_missing(self):
        assert get_field(RECORDS[0], "driver.name") == "Ravi"
        assert get_field(RECORDS[1], "driver.name") is None

    def test_search_across_fields_case_insensitive(self):
        assert [r["name"] for r in apply_search(RECORDS, "route", ("name",))] == ["Route North", "Route South"]
        assert [r["name"] for r in apply_search(RECORDS, "ASHA", ("name", "driver.name"))] == ["Shuttle"]
        assert apply_search(RECORDS, "   ", ("name",)) == RECORDS

    def test_operators(self):
        assert len(apply_filters(RECORDS, {"status": "ACTIVE"})) == 2
        assert len(apply_filters(RECORDS, {"name__ilike": "south"})) == 1
        assert len(apply_filters(RECORDS, {"date__from": date(2025, 2, 1)})) == 2
        assert len(apply_filters(RECORDS, {"date__to": date(2025, 1, 31)})) == 1
        assert len(apply_filters(RECORDS, {"status__in": ["INACTIVE"]})) == 1

    def test_all_and_empty_values_are_skipped(self):
        assert apply_filters(RECORDS, {"status": "all", "name": "", "driver": None}) == RECORDS

    def test_enum_values_compare_by_wire_value(self):
        trips = [{"status": "IN_PROGRESS"}, {"status": "PENDING"}]
        assert apply_filters(trips, {"status": TripStatus.in_progress}) == [trips[0]]

    def test_search_matches_enum_by_displayed_value(self):
        menus = [
            MenuRecord(day_of_week="MONDAY", status=MenuStatus.draft),
            MenuRecord(day_of_week="TUESDAY", status=MenuStatus.pending),
        ]
        fields = ("day_of_week", "season", "status")
        assert apply_search(menus, "menustatus", fields) == []
        assert apply_search(menus, "status", fields) == []
        assert apply_search(menus, "pend", fields) == [menus[1]]
        assert len(apply_filters(menus, {"status__ilike": "draft"})) == 1


# ═════════════════════════════════════════════════════════════════════
# 2. PAGINATION
# ═════════════════════════════════════════════════════════════════════


class TestPagination:

    def test_paginate_clamps_page_and_limit(self):
        items, meta = paginate(list(range(25)), page=0, limit=10)
        assert items == list(range(10))
        assert meta.page == 1 and meta.total_pages == 3
        assert meta.has_next and not meta.has_prev

    def test_extract_items_and_meta(self):
        assert extract_items({"students": [1]}, ("students",)) == [1]
        assert extract_items("nope") == []
        meta = extract_meta({"pagination": {"page": 2, "limit": 5, "total": 11, "totalPages": 3}})
        assert isinstance(meta, PaginationMeta)
        assert meta.page == 2
        assert extract_meta([]) is None


# ═════════════════════════════════════════════════════════════════════
# 3. DEBOUNCE / NOTIFIER
# ═════════════════════════════════════════════════════════════════════


class TestDebouncer:

    async def test_burst_runs_once_with_last_value(self):
        seen = []

        async def record(value):
            seen.append(value)

        debouncer = Debouncer(record, delay=0.01)
        for value in ("a", "ab", "abc"):
            debouncer.trigger(value)
        await debouncer.flush()
        assert seen == ["abc"]
        assert not debouncer.pending

    async def test_cancel(self):
        seen = []

        async def record():
            seen.append(1)

        debouncer = Debouncer(record, delay=0.05)
        debouncer.trigger()
        debouncer.cancel()
        await asyncio.sleep(0.08)
        assert seen == []

    async def test_failure_is_logged_not_raised(self):
        async def boom():
            raise RuntimeError("x")

        debouncer = Debouncer(boom, delay=0)
        debouncer.trigger()
        await debouncer.flush()


class TestNotifier:

    def test_collects_and_forwards(self):
        forwarded = []
        notifier = Notifier(forwarded.append)
        notifier.success("Saved")
        notifier.error("Broken")
        assert [t.description for t in forwarded] == ["Saved", "Broken"]
        assert notifier.last.variant is ToastVariant.destructive
        assert [t.description for t in notifier.errors] == ["Broken"]
        notifier.clear()
        assert notifier.last is None


# ═════════════════════════════════════════════════════════════════════
# 4. CRUD PAGE CYCLE
# ═════════════════════════════════════════════════════════════════════


@pytest.fixture
def branches_page(client, auth, notifier) -> BranchesPage:
    return BranchesPage(BranchesService(client, auth), notifier=notifier, debounce_seconds=0)


class TestCrudPage:

    async def test_load(self, branches_page: BranchesPage):
        assert await branches_page.load()
        assert [b.code for b in branches_page.records] == ["MAIN"]
        assert not branches_page.is_loading

    async def test_submit_rejects_missing_required_fields(self, branches_page: BranchesPage, notifier):
        branches_page.form = BranchForm(name="North")
        assert not await branches_page.submit()
        assert branches_page.form_errors == {"code": "Code is required"}
        assert notifier.toasts == []

    async def test_create_then_edit(self, branches_page: BranchesPage, notifier):
        await branches_page.load()
        branches_page.form = BranchForm(name="North Campus", code="NORTH", city="Pune")
        assert await branches_page.submit()
        assert notifier.last.description == "Branch created successfully"
        assert {b.code for b in branches_page.records} == {"MAIN", "NORTH"}
        assert branches_page.form == BranchForm()

        north = next(b for b in branches_page.records if b.code == "NORTH")
        branches_page.edit(north)
        assert branches_page.form.city == "Pune"
        branches_page.form.city = "Mumbai"
        assert await branches_page.submit()
        assert notifier.last.description == "Branch updated successfully"
        assert next(b for b in branches_page.records if b.code == "NORTH").city == "Mumbai"
        assert branches_page.editing_id is None

    async def test_duplicate_code_surfaces_server_error(self, branches_page: BranchesPage, notifier):
        branches_page.form = BranchForm(name="Copy", code="MAIN")
        assert not await branches_page.submit()
        assert notifier.last.is_error
        assert "code already exists" in notifier.last.description

    async def test_delete_needs_confirmation(self, client, auth, notifier):
        prompts = []
        page = BranchesPage(BranchesService(client, auth), notifier=notifier,
                            confirm=lambda message: prompts.append(message) or False)
        await page.load()
        branch_id = page.records[0].id
        assert not await page.delete(branch_id)
        assert prompts == ['Are you sure you want to delete "Main Campus"?']

        page.confirm = lambda message: True
        assert await page.delete(branch_id)
        assert page.records == []

    async def test_failed_load_keeps_previous_records(self, branches_page: BranchesPage, notifier, store):
        await branches_page.load()
        before = list(branches_page.records)
        branches_page.service.endpoint = "/no-such-resource"
        assert not await branches_page.load()
        assert branches_page.records == before
        assert notifier.last.is_error

    async def test_server_search_is_debounced(self, branches_page: BranchesPage, client, auth):
        await branches_page.load()
        branches_page.set_search("zzz")
        await branches_page.flush_search()
        assert branches_page.records == []
        assert branches_page.visible == []
