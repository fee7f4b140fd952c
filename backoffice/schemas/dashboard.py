"""
Pydantic schemas for the dashboard metrics response.
"""

from backoffice.schemas.base import CamelModel


class Metrics(CamelModel):
    total_deposits: float
    total_withdrawals: float
    total_balance: float
    total_company_expenses: float
    balance_excluding_expenses: float
    total_client_incentives: float
    net_profit: float


class Counts(CamelModel):
    deposits_count: int
    withdrawals_count: int


class DateRange(CamelModel):
    date_filter: str
    date_from: str
    date_to: str


class DashboardResponse(CamelModel):
    success: bool = True
    metrics: Metrics
    counts: Counts
    date_range: DateRange
