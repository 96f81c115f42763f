"""
Requests component - Maintenance request lifecycle.
"""

from ._impl import (
    APPROVER_ROLES,
    TRANSITIONS,
    RequestService,
    RequestValidationError,
    approval_limit,
    can_transition,
)
from .ports import ClockPort, RequestNotifierPort, RequestRepoPort, UserLookupPort

__all__ = [
    "APPROVER_ROLES",
    "TRANSITIONS",
    "ClockPort",
    "RequestNotifierPort",
    "RequestRepoPort",
    "RequestService",
    "RequestValidationError",
    "UserLookupPort",
    "approval_limit",
    "can_transition",
]
