"""Request dependencies: caller identity and service lookup."""

from typing import Optional

from fastapi import Depends, Header, Request

from membership_service.errors import InvalidArgumentError, UnauthenticatedError
from membership_service.models import Actor, UserRole
from membership_service.services.admin_service import AdminService
from membership_service.services.container import ServiceContainer
from membership_service.services.subscription_engine import SubscriptionEngine


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def get_engine(container: ServiceContainer = Depends(get_container)) -> SubscriptionEngine:
    return container.engine


def get_admin_service(container: ServiceContainer = Depends(get_container)) -> AdminService:
    return container.admin


def get_actor(
    x_user_id: Optional[str] = Header(None, description="Authenticated user id"),
    x_user_role: Optional[str] = Header(None, description="Role of the authenticated user"),
) -> Actor:
    """Caller identity, as asserted by the upstream auth layer.

    Raises:
        UnauthenticatedError: If X-User-Id is missing
        InvalidArgumentError: If X-User-Role is not a known role
    """
    if not x_user_id or not x_user_id.strip():
        raise UnauthenticatedError("X-User-Id header is required")

    role = UserRole.USER
    if x_user_role:
        try:
            role = UserRole(x_user_role.strip().lower())
        except ValueError:
            raise InvalidArgumentError(f"Unknown role: {x_user_role}")

    return Actor(user_id=x_user_id.strip(), role=role)
