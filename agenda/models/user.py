"""
Staff user model with roles and tenant scoping
"""

from sqlmodel import Field, SQLModel
from datetime import datetime
from typing import Optional
from enum import Enum
import uuid


class UserRole(str, Enum):
    """User roles for RBAC"""
    OWNER = "owner"
    ADMIN = "admin"
    EMPLOYEE = "empleado"
    RECEPTIONIST = "recepcionista"


class UserStatus(str, Enum):
    """Lifecycle of a staff account (users are never deleted)"""
    ACTIVE = "active"
    DEACTIVATED = "deactivated"


class User(SQLModel, table=True):
    """Staff member of a tenant"""

    __tablename__ = "users"

    id: uuid.UUID = Field(default_factory=uuid.uuid4, primary_key=True)
    tenant_id: uuid.UUID = Field(foreign_key="tenants.id", index=True, description="Tenant ID for multi-tenant isolation")

    email: str = Field(index=True, max_length=255)
    first_name: str = Field(max_length=100)
    last_name: str = Field(default="", max_length=100)

    # RBAC
    role: UserRole = Field(default=UserRole.EMPLOYEE)

    # Lifecycle
    status: UserStatus = Field(default=UserStatus.ACTIVE, index=True)
    deactivated_at: Optional[datetime] = None

    # Timestamps
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: Optional[datetime] = None

    def deactivate(self) -> None:
        """Soft delete: the account stops counting towards the plan"""
        if self.status == UserStatus.DEACTIVATED:
            raise ValueError("User is already deactivated")
        self.status = UserStatus.DEACTIVATED
        self.deactivated_at = datetime.utcnow()
        self.updated_at = datetime.utcnow()
