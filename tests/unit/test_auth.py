"""Unit tests for the acting-user dependency."""

import pytest
from fastapi import HTTPException

from backend.planner.api.auth import get_current_user


@pytest.mark.asyncio
async def test_get_current_user_username_only() -> None:
    """Test bare username token uses the username as display name."""
    user = await get_current_user(authorization="Bearer alice")

    assert user.username == "alice"
    assert user.display_name == "alice"
    assert user.avatar_url is None


@pytest.mark.asyncio
async def test_get_current_user_with_display_name_and_avatar() -> None:
    """Test username:display token and avatar header."""
    user = await get_current_user(
        authorization="Bearer bob:Bob Tanaka",
        x_avatar_url="https://img.example/bob.png",
    )

    assert user.username == "bob"
    assert user.display_name == "Bob Tanaka"
    assert user.avatar_url == "https://img.example/bob.png"


@pytest.mark.asyncio
async def test_get_current_user_missing_header() -> None:
    """Test missing header raises 401."""
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(authorization=None)

    assert exc_info.value.status_code == 401


@pytest.mark.asyncio
async def test_get_current_user_invalid_scheme() -> None:
    """Test non-bearer scheme raises 401."""
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(authorization="Basic YWxpY2U6c2VjcmV0")

    assert exc_info.value.status_code == 401
    assert "Bearer token required" in exc_info.value.detail


@pytest.mark.asyncio
async def test_get_current_user_empty_username() -> None:
    """Test token without a username raises 401."""
    with pytest.raises(HTTPException) as exc_info:
        await get_current_user(authorization="Bearer :Nobody")

    assert exc_info.value.status_code == 401
