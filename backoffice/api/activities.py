"""
Audit trail endpoints.
"""

from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from backoffice.api.deps import client_ip, get_gate
from backoffice.exceptions import InvalidInputError
from backoffice.models.base import get_db
from backoffice.models.enums import ActivityAction
from backoffice.schemas.base import SuccessResponse
from backoffice.schemas.staff import ActivityListResponse, BulkDeleteRequest, BulkDeleteResponse
from backoffice.services.activity_service import ActivityLog
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.kv_store import KeyValueStore

router = APIRouter(prefix="/activities", tags=["Activities"])


@router.get("", response_model=ActivityListResponse)
def list_activities(
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    """Newest first. Non-admins only see their own entries."""
    caller = gate.authorize(authorization)
    log = ActivityLog(KeyValueStore(db))
    return {"activities": log.list_for(caller.id, see_all=caller.is_admin)}


@router.delete("/{activity_id}", response_model=SuccessResponse)
def delete_activity(
    activity_id: str,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    caller = gate.authorize(authorization)
    gate.require_super_admin(caller, "Only Super Admin can delete activity logs")

    log = ActivityLog(KeyValueStore(db))
    log.delete([activity_id])
    log.record(
        caller.id, caller.name, ActivityAction.DELETE_ACTIVITY,
        "Deleted activity log", f"Activity ID: {activity_id}", client_ip(request),
    )
    db.commit()
    return {"success": True}


@router.post("/bulk-delete", response_model=BulkDeleteResponse)
def bulk_delete_activities(
    body: BulkDeleteRequest,
    request: Request,
    authorization: str | None = Header(default=None),
    db: Session = Depends(get_db),
    gate: AuthorizationGate = Depends(get_gate),
):
    caller = gate.authorize(authorization)
    gate.require_super_admin(caller, "Only Super Admin can bulk delete activities")
    if not body.activity_ids:
        raise InvalidInputError("Activity IDs array is required")

    log = ActivityLog(KeyValueStore(db))
    deleted = log.delete(body.activity_ids)
    log.record(
        caller.id, caller.name, ActivityAction.BULK_DELETE_ACTIVITIES,
        f"Bulk deleted {deleted} activity logs", "", client_ip(request),
    )
    db.commit()
    return {"success": True, "deletedCount": deleted}
