"""
JWT handling for tenant-scoped bearer tokens

Tokens are issued by the identity collaborator. The engine encodes them only
for tests and tooling; every request decodes one into ``TokenClaims``.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from jose import JWTError, jwt
from typing import Optional
import uuid
import structlog

from agenda.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


@dataclass(frozen=True)
class TokenClaims:
    user_id: uuid.UUID
    tenant_id: uuid.UUID
    role: str


def create_access_token(
    user_id: uuid.UUID,
    tenant_id: uuid.UUID,
    role: str,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Sign a token carrying the caller, its tenant and its role"""
    issued_at = datetime.utcnow()
    expire = issued_at + (expires_delta or timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES))

    to_encode = {
        "sub": str(user_id),
        "tenant_id": str(tenant_id),
        "role": role,
        "exp": expire,
        "iat": issued_at,
    }
    return jwt.encode(to_encode, settings.JWT_SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> Optional[TokenClaims]:
    """Claims of a valid token, or None when the signature, expiry or ids are bad"""
    try:
        payload = jwt.decode(token, settings.JWT_SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError as e:
        logger.debug(f"Rejected access token: {e}")
        return None

    try:
        return TokenClaims(
            user_id=uuid.UUID(payload.get("sub")),
            tenant_id=uuid.UUID(payload.get("tenant_id")),
            role=(payload.get("role") or "").lower(),
        )
    except (TypeError, ValueError):
        logger.debug("Rejected access token: missing or malformed user or tenant id")
        return None
