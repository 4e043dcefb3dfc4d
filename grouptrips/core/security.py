"""JWT helpers identifying the acting user."""
from datetime import datetime, timedelta, timezone
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from grouptrips.core.config import get_settings
from grouptrips.schemas import TokenData

settings = get_settings()
security = HTTPBearer()
optional_security = HTTPBearer(auto_error=False)


def create_access_token(actor_id: str, email: Optional[str] = None, expires_delta: Optional[timedelta] = None) -> str:
    expire_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = {
        "sub": actor_id,
        "exp": datetime.now(timezone.utc) + expire_delta,
    }
    if email:
        payload["email"] = email
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


def decode_access_token(token: str) -> TokenData:
    try:
        payload = jwt.decode(token, settings.secret_key, algorithms=[settings.algorithm])
    except JWTError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials") from exc

    actor_id = payload.get("sub")
    if not actor_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Could not validate credentials")
    return TokenData(actor_id=actor_id, email=payload.get("email"))


async def get_current_actor(credentials: HTTPAuthorizationCredentials = Depends(security)) -> TokenData:
    return decode_access_token(credentials.credentials)


async def get_optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(optional_security),
) -> Optional[TokenData]:
    """Identity may not be resolved yet when the payment return lands."""
    if credentials is None:
        return None
    return decode_access_token(credentials.credentials)
