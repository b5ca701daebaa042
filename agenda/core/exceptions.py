"""
Scheduling error taxonomy

Every rejected operation raises one of these. The API layer turns them into
JSON responses through a single exception handler registered in main.
"""

from typing import Any, Dict, Optional

from fastapi import status


class SchedulingError(Exception):
    """Base class for all engine errors"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "scheduling_error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.code, "detail": self.detail}


class NotFoundError(SchedulingError):
    """Entity absent or owned by another tenant"""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class UnauthorizedError(SchedulingError):
    """Caller lacks the permission for the operation"""

    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"


class BadRequestError(SchedulingError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "bad_request"


class ConflictError(SchedulingError):
    """Candidate range overlaps an active appointment"""

    status_code = status.HTTP_409_CONFLICT
    code = "conflict"

    def __init__(self, detail: str, conflicting_appointment_id: Optional[Any] = None):
        super().__init__(detail)
        self.conflicting_appointment_id = conflicting_appointment_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.conflicting_appointment_id is not None:
            data["conflicting_appointment_id"] = str(self.conflicting_appointment_id)
        return data


QUOTA_LABELS = {
    "usuarios": "user",
    "clientes": "client",
    "citas_mes": "monthly appointment",
    "servicios": "service",
}


class QuotaExceededError(SchedulingError):
    """Plan limit reached for a resource kind"""

    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "quota_exceeded"

    def __init__(self, kind: str, current: int, limit: int):
        label = QUOTA_LABELS.get(kind, kind)
        super().__init__(f"{label} limit of {limit} reached ({current} in use)")
        self.kind = kind
        self.current = current
        self.limit = limit

    def __eq__(self, other):
        if not isinstance(other, QuotaExceededError):
            return NotImplemented
        return (self.kind, self.current, self.limit) == (other.kind, other.current, other.limit)

    def __hash__(self):
        return hash((self.kind, self.current, self.limit))

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"kind": self.kind, "current": self.current, "limit": self.limit})
        return data


class FeatureNotAvailableError(SchedulingError):
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    code = "feature_not_available"

    def __init__(self, feature: str, plan_tier: str):
        super().__init__(f"Feature '{feature}' is not available on the {plan_tier} plan")
        self.feature = feature
        self.plan_tier = plan_tier


class ConfigurationError(SchedulingError):
    """Unknown feature name or plan tier missing from the limits table"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "configuration_error"
