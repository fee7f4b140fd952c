"""
Shared FastAPI dependencies.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from backoffice.models.base import get_db
from backoffice.services.authorization import AuthorizationGate
from backoffice.services.identity_provider import IdentityProvider, LocalIdentityProvider


def get_identity_provider(db: Session = Depends(get_db)) -> IdentityProvider:
    return LocalIdentityProvider(db)


def get_gate(
    db: Session = Depends(get_db),
    identity_provider: IdentityProvider = Depends(get_identity_provider),
) -> AuthorizationGate:
    return AuthorizationGate(db, identity_provider)


def client_ip(request: Request) -> str:
    """Best-effort caller IP from proxy headers; "Unknown" otherwise."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    for header in ("x-real-ip", "cf-connecting-ip"):
        value = request.headers.get(header)
        if value:
            return value
    return "Unknown"
