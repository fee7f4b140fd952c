"""
Dashboard metrics.

Totals are computed server-side over the records the caller may
see (all of them for admins, their own otherwise), optionally
restricted to a date window.
"""

from datetime import timedelta

from sqlalchemy.orm import Session

from backoffice.services.deposit_service import BANK_DEPOSITS, DEPOSITS, DepositService
from backoffice.time_utils import parse_iso, utcnow


def _number(value) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


def _line_total(items) -> float:
    if not isinstance(items, list):
        return 0.0
    return sum(_number(item.get("amount")) for item in items if isinstance(item, dict))


def in_date_range(date_str: str | None, date_filter: str, date_from: str, date_to: str, now=None) -> bool:
    """
    A custom dateFrom/dateTo window wins over the named filter.
    Records with an unreadable date only show up unfiltered.
    """
    now = now or utcnow()
    if not date_from and not date_to and date_filter not in ("today", "week", "month"):
        return True

    date = parse_iso(date_str)
    if date is None:
        return False

    if date_from or date_to:
        start = parse_iso(date_from)
        end = parse_iso(date_to)
        if start and date < start:
            return False
        if end and date > end:
            return False
        return True

    if date_filter == "today":
        return date.date() == now.date()
    if date_filter == "week":
        return now - timedelta(days=7) <= date <= now
    # month: same day last calendar month, clamped to 28 for short months
    month_ago = now.replace(
        year=now.year if now.month > 1 else now.year - 1,
        month=now.month - 1 if now.month > 1 else 12,
        day=min(now.day, 28),
    )
    return month_ago <= date <= now


class DashboardService:

    def __init__(self, db: Session):
        self.deposits = DepositService(db, DEPOSITS)
        self.bank_deposits = DepositService(db, BANK_DEPOSITS)

    def metrics(self, caller, date_filter: str = "all", date_from: str = "", date_to: str = "") -> dict:
        now = utcnow()
        deposits = [
            d for d in self.deposits.visible_to(caller)
            if in_date_range(d.get("date"), date_filter, date_from, date_to, now)
        ]
        withdrawals = [
            w for w in self.bank_deposits.visible_to(caller)
            if in_date_range(w.get("date"), date_filter, date_from, date_to, now)
        ]

        total_deposits = sum(
            _number(d.get("localDeposit"))
            + _number(d.get("usdtDeposit"))
            + _number(d.get("cashDeposit"))
            for d in deposits
        )
        total_withdrawals = sum(_number(w.get("amount")) for w in withdrawals)
        total_balance = total_deposits - total_withdrawals
        total_expenses = sum(_line_total(d.get("expenses")) for d in deposits)
        balance_excluding_expenses = total_balance - total_expenses
        total_incentives = sum(_line_total(d.get("clientIncentives")) for d in deposits)

        return {
            "metrics": {
                "totalDeposits": total_deposits,
                "totalWithdrawals": total_withdrawals,
                "totalBalance": total_balance,
                "totalCompanyExpenses": total_expenses,
                "balanceExcludingExpenses": balance_excluding_expenses,
                "totalClientIncentives": total_incentives,
                "netProfit": balance_excluding_expenses - total_incentives,
            },
            "counts": {
                "depositsCount": len(deposits),
                "withdrawalsCount": len(withdrawals),
            },
            "dateRange": {
                "dateFilter": date_filter,
                "dateFrom": date_from,
                "dateTo": date_to,
            },
        }
