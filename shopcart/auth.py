"""
Authentication helpers.

The signed-in user is an external session object; shopcart only needs its
roles (for role-restricted prices) and an async token fetch.
"""

from __future__ import annotations

from typing import Dict, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class SessionUser(Protocol):
    """User/session object provided by the host application."""

    roles: Sequence[str]

    async def jwt(self) -> str:
        """Return a fresh access token."""
        ...


def has_any_role(user: Optional[SessionUser]) -> bool:
    """
    True when the user holds at least one role.

    Role-restricted prices are unlocked by holding ANY role, not the role
    named on the price.
    """
    if user is None:
        return False
    return bool(getattr(user, "roles", None))


async def auth_headers(user: Optional[SessionUser]) -> Dict[str, str]:
    """Bearer header for the user, or no headers for anonymous calls."""
    if user is None:
        return {}
    token = await user.jwt()
    return {"Authorization": f"Bearer {token}"}
