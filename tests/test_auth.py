"""Tests for bearer token handling."""
from datetime import timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from fastapi.testclient import TestClient
from jose import JWTError, jwt

from app.core.auth import create_access_token, decode_access_token, get_current_account
from app.core.config import settings
from app.main import app


def credentials(token):
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestAccessToken:
    """Test JWT creation and decoding."""

    def test_token_carries_account_id(self):
        token = create_access_token("acct_123")
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

        assert payload["sub"] == "acct_123"
        assert payload["exp"] > payload["iat"]

    @pytest.mark.asyncio
    async def test_valid_token_resolves_account(self):
        account = await get_current_account(credentials(create_access_token("acct_123")))

        assert account.account_id == "acct_123"

    @pytest.mark.asyncio
    async def test_expired_token_rejected(self):
        token = create_access_token("acct_123", expires_delta=timedelta(minutes=-5))

        with pytest.raises(HTTPException) as exc_info:
            await get_current_account(credentials(token))

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_garbage_token_rejected(self):
        with pytest.raises(HTTPException) as exc_info:
            await get_current_account(credentials("not-a-jwt"))

        assert exc_info.value.status_code == 401


def test_endpoints_require_bearer_token():
    response = TestClient(app).get("/api/v1/customers/")

    assert response.status_code in (401, 403)


def test_token_without_account_type_rejected():
    foreign = jwt.encode({"sub": "acct_123"}, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)

    with pytest.raises(JWTError):
        decode_access_token(foreign)
