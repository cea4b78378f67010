"""Smoke-check runner: result model, HTTP context and report.

A suite is an ordered list of named checks. Each check is a function of
the shared ``SmokeContext`` that returns a short detail string on success
and raises on failure. Later checks read what earlier ones stored on the
context (token, created ids), so a failing ``required`` check skips the
rest of its suite.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

import requests

from school_erp.config import settings

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════════════════
# Check result model
# ══════════════════════════════════════════════════════════════════════


class CheckResult:
    """Single smoke check result."""

    def __init__(self, name: str, passed: bool, message: str,
                 detail: str = "", severity: str = "error"):
        self.name = name
        self.passed = passed
        self.message = message
        self.detail = detail
        self.severity = severity  # "error", "warning", "info"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "passed": self.passed,
            "message": self.message,
            "detail": self.detail,
            "severity": self.severity,
        }

    def __str__(self) -> str:
        icon = "✅" if self.passed else ("⚠️" if self.severity == "warning" else "❌")
        s = f"{icon} {self.name}: {self.message}"
        if self.detail:
            s += f"\n     └─ {self.detail}"
        return s


class SmokeFailure(Exception):
    """A check's expectation did not hold."""


# ══════════════════════════════════════════════════════════════════════
# HTTP context
# ══════════════════════════════════════════════════════════════════════


class SmokeContext:
    """
    Shared state for one suite run.

    *session* is anything with a ``requests.Session``-style ``request``
    method; tests pass a Starlette ``TestClient`` bound to the mock API.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        session: Any = None,
        timeout: Optional[float] = None,
        school_id: Optional[str] = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.session = session if session is not None else requests.Session()
        self.timeout = timeout if timeout is not None else settings.REQUEST_TIMEOUT_SECONDS
        self.school_id = school_id
        self.token: Optional[str] = None
        self.state: dict[str, Any] = {}

    def request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = dict(kwargs.pop("headers", None) or {})
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        if self.school_id:
            headers["X-School-Id"] = self.school_id
        return self.session.request(
            method,
            f"{self.base_url}{path}",
            headers=headers,
            timeout=self.timeout,
            **kwargs,
        )

    def get(self, path: str, **kwargs: Any) -> Any:
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> Any:
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> Any:
        return self.request("PUT", path, **kwargs)

    def login(self, email: Optional[str] = None, password: Optional[str] = None) -> dict:
        resp = self.post(
            "/auth/login",
            json={
                "email": email or settings.SMOKE_ADMIN_EMAIL,
                "password": password or settings.SMOKE_ADMIN_PASSWORD,
            },
        )
        body = expect(resp, 200, what="Login")
        data = body.get("data") or {}
        self.token = data.get("accessToken")
        if not self.token:
            raise SmokeFailure("No access token in login response")
        return data


def expect(resp: Any, *statuses: int, what: str = "Request") -> dict:
    """Assert the status code and ``success: true``; return the JSON body."""
    statuses = statuses or (200,)
    if resp.status_code not in statuses:
        raise SmokeFailure(f"{what} failed: {resp.status_code} (expected {'/'.join(map(str, statuses))})")
    try:
        body = resp.json()
    except ValueError as exc:
        raise SmokeFailure(f"{what} returned invalid JSON") from exc
    if isinstance(body, dict) and body.get("success") is False:
        raise SmokeFailure(f"{what} returned success:false: {body.get('error')}")
    return body


# ══════════════════════════════════════════════════════════════════════
# Suites
# ══════════════════════════════════════════════════════════════════════

CheckFn = Callable[[SmokeContext], Optional[str]]


@dataclass
class Check:
    name: str
    run: CheckFn
    required: bool = False


@dataclass
class Suite:
    name: str
    title: str
    checks: list[Check] = field(default_factory=list)
    school_id: Optional[str] = None

    def check(self, name: str, *, required: bool = False) -> Callable[[CheckFn], CheckFn]:
        """Decorator registering a check in declaration order."""
        def register(fn: CheckFn) -> CheckFn:
            self.checks.append(Check(name, fn, required))
            return fn
        return register

    def run(self, ctx: SmokeContext) -> list[CheckResult]:
        results: list[CheckResult] = []
        for index, check in enumerate(self.checks):
            result = run_check(check, ctx)
            results.append(result)
            if not result.passed and check.required:
                for skipped in self.checks[index + 1:]:
                    results.append(CheckResult(
                        skipped.name, False,
                        f"Skipped ({check.name} failed)",
                        severity="warning",
                    ))
                break
        return results


def run_check(check: Check, ctx: SmokeContext) -> CheckResult:
    try:
        detail = check.run(ctx) or ""
    except SmokeFailure as e:
        logger.warning("%s: %s", check.name, e)
        return CheckResult(check.name, False, str(e))
    except requests.exceptions.ConnectionError as e:
        logger.error("%s: cannot connect: %s", check.name, e)
        return CheckResult(check.name, False, "Cannot connect to API", str(e))
    except Exception as e:
        logger.exception("%s crashed", check.name)
        return CheckResult(check.name, False, f"Check failed: {type(e).__name__}", str(e))
    return CheckResult(check.name, True, "PASSED", detail)


def run_suites(
    suites: list[Suite],
    base_url: Optional[str] = None,
    *,
    session: Any = None,
    timeout: Optional[float] = None,
) -> dict[str, list[CheckResult]]:
    """Run each suite with a fresh context; results keyed by suite name."""
    report: dict[str, list[CheckResult]] = {}
    for suite in suites:
        logger.info("Running %s smoke suite", suite.name)
        ctx = SmokeContext(base_url, session=session, timeout=timeout, school_id=suite.school_id)
        report[suite.name] = suite.run(ctx)
    return report


# ══════════════════════════════════════════════════════════════════════
# Report
# ══════════════════════════════════════════════════════════════════════


def all_passed(report: dict[str, list[CheckResult]]) -> bool:
    return all(r.passed for results in report.values() for r in results)


def exit_code(report: dict[str, list[CheckResult]]) -> int:
    return 0 if all_passed(report) else 1


def format_report(report: dict[str, list[CheckResult]], titles: Optional[dict[str, str]] = None) -> str:
    lines: list[str] = []
    for name, results in report.items():
        title = (titles or {}).get(name, name)
        lines += ["", "=" * 60, f"  {title}", "=" * 60, ""]
        lines += [str(result) for result in results]

        passed = sum(1 for r in results if r.passed)
        failed = len(results) - passed
        lines += ["", f"Results: {passed} passed, {failed} failed"]

    total = sum(len(results) for results in report.values())
    failed = sum(1 for results in report.values() for r in results if not r.passed)
    lines.append("")
    lines.append("=" * 60)
    if failed == 0:
        lines.append(f"  ✅ ALL {total} CHECKS PASSED")
    else:
        lines.append(f"  ❌ {failed}/{total} CHECKS FAILED")
    lines.append("=" * 60)
    return "\n".join(lines)


def report_json(report: dict[str, list[CheckResult]]) -> str:
    return json.dumps(
        {
            "suites": {name: [r.to_dict() for r in results] for name, results in report.items()},
            "all_passed": all_passed(report),
        },
        indent=2,
        ensure_ascii=False,
    )
