from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer
from app.core.config import settings

security = HTTPBearer()

TOKEN_TYPE = "account"


@dataclass(frozen=True)
class AccountContext:
    """Business account the current request acts on."""
    account_id: str


def create_access_token(account_id: str, expires_delta: timedelta | None = None) -> str:
    """Issue a bearer token scoped to one business account."""
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.JWT_EXPIRATION_MINUTES)
    claims = {
        "sub": account_id,
        "typ": TOKEN_TYPE,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + lifetime).timestamp()),
    }
    return jwt.encode(claims, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> str:
    """Return the account id carried by ``token``; raises JWTError if it is unusable."""
    claims = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    account_id = claims.get("sub")
    if not account_id or claims.get("typ") != TOKEN_TYPE:
        raise JWTError("Token does not identify an account")
    return account_id


async def get_current_account(credentials = Depends(security)) -> AccountContext:
    """Resolve the business account from the bearer token."""
    try:
        account_id = decode_access_token(credentials.credentials)
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"}
        )
    return AccountContext(account_id=account_id)
