# src/worklog/reports/time_report.py

"""
Time-tracking reports built from the ledger.

Two shapes over the same grouping:
- self report: one user's entries per UTC calendar day
- admin report: every user's entries per day, with a per-user breakdown,
  auto vs. manual minutes and a grand summary

Reports are computed on demand. A scope with no entries yields is_empty=True
rather than an empty list, so callers can tell "no data yet" from "zero".
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..core.ports import LedgerRepo
from ..tasks.task_models import DailyLedgerRow, DailyUserLedgerRow

logger = logging.getLogger(__name__)

_EMPTY_SELF_MESSAGE = "No time logged yet. Log time on a task or complete one to get started!"
_EMPTY_ADMIN_MESSAGE = "No time has been logged by any user yet."


@dataclass(frozen=True, slots=True)
class DayTotal:
    date: str
    total_minutes: int
    log_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "total_minutes": self.total_minutes,
            "log_count": self.log_count,
        }


@dataclass(frozen=True, slots=True)
class SelfReport:
    user_id: str
    days: list[DayTotal]
    is_empty: bool
    message: str

    @property
    def total_minutes(self) -> int:
        return sum(d.total_minutes for d in self.days)

    def to_dict(self) -> dict[str, Any]:
        return {
            "isAdmin": False,
            "isEmpty": self.is_empty,
            "message": self.message,
            "days": [d.to_dict() for d in self.days],
        }


@dataclass(frozen=True, slots=True)
class UserBreakdown:
    user_id: str
    username: str
    minutes: int
    log_count: int
    auto: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "username": self.username,
            "minutes": self.minutes,
            "log_count": self.log_count,
            "is_auto_logged": self.auto,
        }


@dataclass(slots=True)
class AdminDay:
    date: str
    total_minutes: int = 0
    log_count: int = 0
    auto_logged_minutes: int = 0
    manual_logged_minutes: int = 0
    users: list[UserBreakdown] = field(default_factory=list)

    def add(self, row: DailyUserLedgerRow) -> None:
        self.users.append(
            UserBreakdown(
                user_id=row.user_id,
                username=row.username or row.user_id,
                minutes=row.minutes,
                log_count=row.log_count,
                auto=row.auto,
            )
        )
        self.total_minutes += row.minutes
        self.log_count += row.log_count
        if row.auto:
            self.auto_logged_minutes += row.minutes
        else:
            self.manual_logged_minutes += row.minutes

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date,
            "total_minutes": self.total_minutes,
            "log_count": self.log_count,
            "auto_logged_minutes": self.auto_logged_minutes,
            "manual_logged_minutes": self.manual_logged_minutes,
            "users": [u.to_dict() for u in self.users],
        }


@dataclass(frozen=True, slots=True)
class AdminSummary:
    total_days: int
    total_minutes: int
    auto_logged_minutes: int
    manual_logged_minutes: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_days": self.total_days,
            "total_minutes": self.total_minutes,
            "auto_logged_minutes": self.auto_logged_minutes,
            "manual_logged_minutes": self.manual_logged_minutes,
        }


@dataclass(frozen=True, slots=True)
class AdminReport:
    days: list[AdminDay]
    summary: AdminSummary
    is_empty: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "isAdmin": True,
            "isEmpty": self.is_empty,
            "message": self.message,
            "days": [d.to_dict() for d in self.days],
            "summary": self.summary.to_dict(),
        }


def _day_totals(rows: list[DailyLedgerRow]) -> list[DayTotal]:
    return [DayTotal(date=r.date, total_minutes=r.total_minutes, log_count=r.log_count) for r in rows]


def _group_by_date(rows: list[DailyUserLedgerRow]) -> list[AdminDay]:
    # Rows arrive newest day first; dict keeps that order.
    by_date: dict[str, AdminDay] = {}
    for row in rows:
        day = by_date.get(row.date)
        if day is None:
            day = by_date[row.date] = AdminDay(date=row.date)
        day.add(row)
    return list(by_date.values())


def _summarize(days: list[AdminDay]) -> AdminSummary:
    return AdminSummary(
        total_days=len(days),
        total_minutes=sum(d.total_minutes for d in days),
        auto_logged_minutes=sum(d.auto_logged_minutes for d in days),
        manual_logged_minutes=sum(d.manual_logged_minutes for d in days),
    )


def self_report(repo: LedgerRepo, requester_id: str) -> SelfReport:
    days = _day_totals(repo.daily_totals_for_user(requester_id))
    if not days:
        return SelfReport(user_id=requester_id, days=[], is_empty=True, message=_EMPTY_SELF_MESSAGE)
    return SelfReport(
        user_id=requester_id,
        days=days,
        is_empty=False,
        message=f"Time logged on {len(days)} day(s)",
    )


def admin_report(repo: LedgerRepo) -> AdminReport:
    days = _group_by_date(repo.daily_totals_by_user())
    summary = _summarize(days)
    if not days:
        return AdminReport(days=[], summary=summary, is_empty=True, message=_EMPTY_ADMIN_MESSAGE)
    return AdminReport(
        days=days,
        summary=summary,
        is_empty=False,
        message=f"Time logged on {summary.total_days} day(s) across all users",
    )


def build_report(repo: LedgerRepo, requester_id: str, is_admin: bool) -> SelfReport | AdminReport:
    """Self report for regular users, admin-wide report for admins."""
    logger.debug("Building time report user=%s admin=%s", requester_id, is_admin)
    if is_admin:
        return admin_report(repo)
    return self_report(repo, requester_id)
