"""
Utility functions for consistent business lookups.

Services and routers resolve a business the same way so a missing business
always surfaces as the same 404.
"""

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from models import Business


def get_business_or_404(db: Session, business_id: int) -> Business:
    """
    Get business by ID.

    Args:
        db: Database session
        business_id: Business ID

    Returns:
        Business object

    Raises:
        HTTPException: 404 if the business doesn't exist
    """
    business = db.query(Business).filter(Business.id == business_id).first()
    if not business:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Business not found"
        )
    return business
