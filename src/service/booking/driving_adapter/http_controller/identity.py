"""
Request identity

The upstream auth gateway authenticates customers and forwards who they are
in X-Customer-* headers. X-Session-Id is the anonymous browser session that
owns holds; it is independent of the customer.
"""

from typing import Optional

from fastapi import Depends, Header

from src.platform.exception.exceptions import AuthRequiredError, ValidationError
from src.service.booking.app.dto.customer_identity_dto import CustomerIdentity


async def get_session_id(x_session_id: Optional[str] = Header(default=None)) -> Optional[str]:
    return x_session_id.strip() if x_session_id and x_session_id.strip() else None


async def require_session_id(session_id: Optional[str] = Depends(get_session_id)) -> str:
    if session_id is None:
        raise ValidationError('X-Session-Id header is required')
    return session_id


async def get_customer(
    x_customer_phone: Optional[str] = Header(default=None),
    x_customer_name: Optional[str] = Header(default=None),
    x_customer_email: Optional[str] = Header(default=None),
) -> Optional[CustomerIdentity]:
    if not x_customer_phone or not x_customer_phone.strip():
        return None
    return CustomerIdentity(
        phone=x_customer_phone.strip(),
        name=(x_customer_name or '').strip(),
        email=x_customer_email or None,
    )


async def require_customer(
    customer: Optional[CustomerIdentity] = Depends(get_customer),
) -> CustomerIdentity:
    if customer is None:
        raise AuthRequiredError()
    return customer
