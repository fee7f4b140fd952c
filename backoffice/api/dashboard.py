"""
Dashboard endpoint.
"""

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from backoffice.api.deps import get_gate
from backoffice.models.base import get_db
from backoffice.models.enums import Action, Resource
from backoffice.schemas.dashboard import DashboardResponse
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.dashboard_service import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("/metrics", response_model=DashboardResponse)
def dashboard_metrics(
    authorization: str | None = Header(default=None),
    date_filter: str = Query(default="all", alias="dateFilter"),
    date_from: str = Query(default="", alias="dateFrom"),
    date_to: str = Query(default="", alias="dateTo"),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Summary totals only, never the underlying records."""
    caller = gate.authorize(
        authorization, Resource.DASHBOARD, Action.VIEW,
        "No permission to view dashboard",
    )
    result = DashboardService(db).metrics(
        caller, date_filter=date_filter, date_from=date_from, date_to=date_to,
    )
    return {"success": True, **result}
