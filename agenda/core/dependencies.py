"""
Authentication and authorization dependencies for FastAPI
"""

from dataclasses import dataclass
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from typing import FrozenSet, Mapping
import uuid
import structlog

from agenda.core.auth import decode_access_token
from agenda.core.permissions import (
    Permission, ROLE_PERMISSIONS, get_permissions_for_role, has_permission
)

logger = structlog.get_logger(__name__)
security = HTTPBearer()


@dataclass(frozen=True)
class RequestContext:
    """Caller identity resolved from the bearer token"""
    user_id: uuid.UUID
    tenant_id: uuid.UUID
    role: str
    permissions: FrozenSet[Permission]


def get_role_matrix() -> Mapping[str, FrozenSet[Permission]]:
    """Role matrix injected into permission checks (override in tests)"""
    return ROLE_PERMISSIONS


async def get_request_context(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    matrix: Mapping[str, FrozenSet[Permission]] = Depends(get_role_matrix),
) -> RequestContext:
    """Get user, tenant and role from JWT token"""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    claims = decode_access_token(credentials.credentials)
    if claims is None:
        raise credentials_exception

    logger.debug(f"User authenticated: {claims.user_id} (tenant {claims.tenant_id}, role {claims.role})")
    return RequestContext(
        user_id=claims.user_id,
        tenant_id=claims.tenant_id,
        role=claims.role,
        permissions=get_permissions_for_role(claims.role, matrix),
    )


def require_permission(required_permission: Permission):
    """Dependency factory to check permissions"""
    async def check_permission(
        context: RequestContext = Depends(get_request_context),
    ) -> RequestContext:
        if not has_permission(required_permission, context.permissions):
            logger.warning(
                f"Permission {required_permission.value} denied for role {context.role}"
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission required: {required_permission.value}",
            )
        return context
    return check_permission
