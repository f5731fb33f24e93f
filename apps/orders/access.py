"""
Caller identity and access checks for the order lifecycle.

The HTTP layer builds a Requester from whatever authenticated the request;
the lifecycle controller only ever sees the Requester and an AccessPolicy.
"""
from dataclasses import dataclass
from typing import Any

from apps.core.exceptions import UnauthorizedException


@dataclass(frozen=True)
class Requester:
    """Authenticated caller: user id plus role."""
    user_id: Any
    is_admin: bool = False

    @classmethod
    def from_user(cls, user) -> "Requester":
        return cls(user_id=user.pk, is_admin=bool(user.is_staff))


class AccessPolicy:
    """
    Ownership and role rules for orders.
    """

    def is_owner(self, order, requester: Requester) -> bool:
        return str(order.user_id) == str(requester.user_id)

    def ensure_owner_or_admin(self, order, requester: Requester, action: str) -> None:
        if requester.is_admin or self.is_owner(order, requester):
            return
        raise UnauthorizedException(f"{action} this order")

    def ensure_admin(self, requester: Requester, action: str) -> None:
        if not requester.is_admin:
            raise UnauthorizedException(action)
