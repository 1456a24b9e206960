"""Minimal user dependency.

Stub implementation that reads the acting user from a bearer token of the form
``<username>`` or ``<username>:<display name>``. Real authentication lives
outside this service.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.planner.models.checklist import CheckedBy


async def get_current_user(
    authorization: Annotated[str | None, Header()] = None,
    x_avatar_url: Annotated[str | None, Header()] = None,
) -> CheckedBy:
    """Extract the acting user from the authorization header.

    Raises:
        HTTPException: If the header is missing or malformed
    """
    if not authorization or not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Bearer token required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token = authorization[7:].strip()  # Strip "Bearer "
    username, _, display_name = token.partition(":")
    if not username:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Empty username in token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return CheckedBy(username=username, display_name=display_name or username, avatar_url=x_avatar_url)
