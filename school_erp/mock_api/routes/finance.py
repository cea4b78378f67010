"""Finance router — fee structures, pending dues, the payment report and invoices.

Routes:
    /fees/structure          — Fee structure CRUD
    GET /fees/dues           — Dues not yet paid (student brief embedded)
    GET /fees/report         — Payment totals between dateFrom and dateTo
    /invoices                — Invoice CRUD
"""

from __future__ import annotations

from collections import defaultdict
from typing import Optional

from fastapi import APIRouter, Depends, Request

from school_erp.mock_api.crud import bad_request, crud_router, listing, ok
from school_erp.mock_api.store import MemoryStore, get_store

fees_router = APIRouter()
structures = APIRouter()
invoices_router = APIRouter()

PAID = "PAID"


def _positive_amount(store: MemoryStore, record: dict) -> dict:
    try:
        amount = float(record.get("amount", 0))
    except (TypeError, ValueError):
        raise bad_request("amount must be a number", "amount")
    if amount < 0:
        raise bad_request("amount must not be negative", "amount")
    return record


crud_router(
    "fee-structures",
    router=structures,
    defaults=lambda: {"frequency": "ANNUAL", "isActive": True},
    required=("name", "amount"),
    before_create=_positive_amount,
    before_update=_positive_amount,
)


@fees_router.get("/dues")
async def pending_dues(request: Request, store: MemoryStore = Depends(get_store)):
    dues = []
    for due in store["fee-dues"].list():
        if due.get("status") == PAID:
            continue
        student = store["students"].first(id=due.get("studentId"))
        due["student"] = {
            "id": student["id"],
            "firstName": student.get("firstName"),
            "lastName": student.get("lastName"),
            "admissionNo": student.get("admissionNo"),
        } if student else None
        dues.append(due)
    dues.sort(key=lambda d: d.get("dueDate") or "")
    return listing(dues, request.query_params)


@fees_router.get("/report")
async def payment_report(
    dateFrom: Optional[str] = None,
    dateTo: Optional[str] = None,
    store: MemoryStore = Depends(get_store),
):
    start, end = (dateFrom or "")[:10], (dateTo or "")[:10]
    if start and end and start > end:
        raise bad_request("dateFrom must not be after dateTo", "dateFrom")
    payments = [
        p for p in store["payments"].list()
        if (not start or p.get("paidAt", "")[:10] >= start) and (not end or p.get("paidAt", "")[:10] <= end)
    ]
    by_method: dict[str, float] = defaultdict(float)
    for payment in payments:
        by_method[payment.get("method") or "OTHER"] += float(payment.get("amount") or 0)
    outstanding = sum(float(d.get("amountDue") or 0) for d in store["fee-dues"].list() if d.get("status") != PAID)
    return ok({
        "dateRange": {"from": dateFrom, "to": dateTo},
        "summary": {
            "totalCollected": round(sum(by_method.values()), 2),
            "paymentsCount": len(payments),
            "outstanding": round(outstanding, 2),
        },
        "byMethod": [{"method": m, "amount": round(a, 2)} for m, a in sorted(by_method.items())],
        "payments": payments,
    })


fees_router.include_router(structures, prefix="/structure")

crud_router(
    "invoices",
    router=invoices_router,
    defaults=lambda: {"status": "PENDING", "items": []},
    required=("studentId", "amount"),
    before_create=_positive_amount,
)
