# pyright: reportMissingTypeStubs=false
"""
Authentication and authorization dependencies for FastAPI.

Provides dependency injection functions for actor authentication,
role-based access control, and business ownership enforcement.
"""

import logging
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from core.constants import ROLE_CUSTOMER, ROLE_BUSINESS_OWNER
from services.jwt_service import jwt_service, TokenPayload
from models import Business
from utils.business_queries import get_business_or_404

logger = logging.getLogger(__name__)


class ActorContext:
    """Authenticated actor extracted from the identity provider's JWT."""

    def __init__(self, user_id: str, role: str, name: Optional[str] = None):
        self.user_id = user_id
        self.role = role  # "customer" or "business_owner"
        self.name = name

    def is_customer(self) -> bool:
        return self.role == ROLE_CUSTOMER

    def is_business_owner(self) -> bool:
        return self.role == ROLE_BUSINESS_OWNER

    def owns(self, business: Business) -> bool:
        """Check if this actor owns the given business."""
        return self.is_business_owner() and business.owner_id == self.user_id

    def __repr__(self) -> str:
        return f"ActorContext(user_id='{self.user_id}', role='{self.role}')"


# HTTP Bearer token security scheme
security = HTTPBearer(auto_error=False)


def get_token_payload(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security)
) -> Optional[TokenPayload]:
    """Extract and validate JWT token payload."""
    if not credentials:
        return None

    return jwt_service.verify_token(credentials.credentials)


def get_current_actor(
    payload: Optional[TokenPayload] = Depends(get_token_payload),
) -> ActorContext:
    """Get authenticated actor context from JWT token."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication credentials not provided"
        )

    if payload.role not in (ROLE_CUSTOMER, ROLE_BUSINESS_OWNER):
        logger.warning(f"Rejected token with unknown role '{payload.role}' for subject {payload.sub}")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid user role"
        )

    return ActorContext(user_id=payload.sub, role=payload.role, name=payload.name)


# Role-based authorization dependencies
def require_customer(actor: ActorContext = Depends(get_current_actor)) -> ActorContext:
    """Require customer role."""
    if not actor.is_customer():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Customer access required"
        )
    return actor


def require_business_owner(actor: ActorContext = Depends(get_current_actor)) -> ActorContext:
    """Require business owner role."""
    if not actor.is_business_owner():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Business owner access required"
        )
    return actor


# Business isolation enforcement
def ensure_business_owner(db: Session, business_id: int, actor: ActorContext) -> Business:
    """
    Enforce business isolation - owners can only manage their own business.

    Args:
        db: Database session
        business_id: Business the request targets
        actor: Authenticated actor

    Returns:
        The Business row

    Raises:
        HTTPException: 404 if the business doesn't exist, 403 if the actor doesn't own it
    """
    business = get_business_or_404(db, business_id)

    if not actor.owns(business):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied to this business"
        )
    return business
