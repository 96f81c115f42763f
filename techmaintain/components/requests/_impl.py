"""
RequestService - Maintenance request lifecycle.

Handles request creation, state transitions and the request history log.

State machine:
- new       -> assigned | cancelled
- assigned  -> solved | cancelled | new (unassign)
- solved    -> new (reopen)
- cancelled -> new (reopen)

Solving also requires the request to be approved. Approval is granted by
an admin or maintenance user whose approval limit for the request's
location covers its estimated cost.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import get_args
from uuid import UUID

from techmaintain.domain.entities import (
    MaintenanceRequest,
    RequestHistoryEntry,
    RequestPriority,
    RequestState,
    User,
)

from .ports import ClockPort, RequestNotifierPort, RequestRepoPort, UserLookupPort

logger = logging.getLogger(__name__)

PRIORITIES = get_args(RequestPriority)

TRANSITIONS: dict[str, tuple[str, ...]] = {
    "new": ("assigned", "cancelled"),
    "assigned": ("solved", "cancelled", "new"),
    "solved": ("new",),
    "cancelled": ("new",),
}

APPROVER_ROLES = ("admin", "maintenance")
CLOSED_STATES = ("solved", "cancelled")


@dataclass(frozen=True)
class RequestValidationError:
    """Request validation error."""

    code: str
    message: str
    field: str | None = None


def can_transition(current: RequestState, target: RequestState) -> bool:
    """Whether the state machine allows current -> target."""
    return target in TRANSITIONS.get(current, ())


def approval_limit(user: User, request: MaintenanceRequest) -> float | None:
    """User's approval limit for the request's location, None when unset."""
    return user.approval_limits.get(request.location_id or "")


class RequestService:
    """
    Request service.

    Manages maintenance requests and their history.
    """

    def __init__(
        self,
        repo: RequestRepoPort,
        notifier: RequestNotifierPort | None = None,
        clock: ClockPort | None = None,
        users: UserLookupPort | None = None,
    ) -> None:
        """Initialize service."""
        self._repo = repo
        self._notifier = notifier
        self._clock = clock
        self._users = users

    def _now(self) -> datetime:
        if self._clock:
            return self._clock.now()
        return datetime.now()

    # --- Queries ---

    def get_by_id(self, request_id: UUID) -> MaintenanceRequest | None:
        """Get request by ID."""
        return self._repo.get_by_id(request_id)

    def list(
        self,
        maintenance_id: UUID | None = None,
        state: RequestState | None = None,
    ) -> list[MaintenanceRequest]:
        """List requests, newest first."""
        return self._repo.list_filtered(maintenance_id=maintenance_id, state=state)

    # --- Commands ---

    def create(
        self,
        tech_id: str,
        author_id: str,
        description: str,
        title: str = "",
        priority: RequestPriority = "basic",
        solver_id: str | None = None,
        planned_resolution_date: date | None = None,
        location_id: str | None = None,
        estimated_cost: float = 0,
        estimated_time: float = 0,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """
        Create a request.

        A request with a solver starts assigned, otherwise new. Every new
        request starts unapproved.

        Returns:
            Tuple of (request, errors). Request is None if validation fails.
        """
        errors: list[RequestValidationError] = []
        if not tech_id or not tech_id.strip():
            errors.append(
                RequestValidationError(
                    code="tech_required", message="Technology is required", field="tech_id"
                )
            )
        if not description or not description.strip():
            errors.append(
                RequestValidationError(
                    code="description_required",
                    message="Description is required",
                    field="description",
                )
            )
        if priority not in PRIORITIES:
            errors.append(
                RequestValidationError(
                    code="priority_invalid",
                    message=f"Priority must be one of: {', '.join(PRIORITIES)}",
                    field="priority",
                )
            )
        if estimated_cost < 0:
            errors.append(
                RequestValidationError(
                    code="cost_invalid",
                    message="Estimated cost cannot be negative",
                    field="estimated_cost",
                )
            )
        if estimated_time < 0:
            errors.append(
                RequestValidationError(
                    code="time_invalid",
                    message="Estimated time cannot be negative",
                    field="estimated_time",
                )
            )
        if errors:
            return None, errors

        now = self._now()
        request = MaintenanceRequest(
            tech_id=tech_id.strip(),
            author_id=author_id,
            title=title.strip() or "New request",
            description=description.strip(),
            priority=priority,
            solver_id=solver_id or None,
            state="assigned" if solver_id else "new",
            planned_resolution_date=planned_resolution_date,
            location_id=location_id or None,
            estimated_cost=estimated_cost,
            estimated_time=estimated_time,
            created_at=now,
            history=[
                RequestHistoryEntry(
                    timestamp=now, user_id=author_id, action="created", note="Request created"
                )
            ],
        )
        saved = self._repo.save(request)

        if self._notifier:
            self._notifier.request_created(saved, author_id)
        return saved, []

    def assign(
        self,
        request_id: UUID,
        solver_id: str,
        user_id: str,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """Assign a solver; notifies them unless self-assigned."""
        if not solver_id:
            return None, [
                RequestValidationError(
                    code="solver_required", message="Solver is required", field="solver_id"
                )
            ]

        request, errors = self._transition(
            request_id,
            "assigned",
            user_id,
            action="assigned",
            note=f"Assigned to {solver_id}",
            changes={"solver_id": solver_id},
            allow_same_state=True,
        )
        if request is not None and self._notifier:
            self._notifier.request_assigned(request, user_id)
        return request, errors

    def unassign(
        self,
        request_id: UUID,
        user_id: str,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """Return an assigned request to the new state."""
        return self._transition(
            request_id, "new", user_id, action="unassigned", changes={"solver_id": None}
        )

    def solve(
        self,
        request_id: UUID,
        user_id: str,
        note: str = "",
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """Mark an assigned, approved request solved."""
        request = self._repo.get_by_id(request_id)
        if request is not None and request.state == "assigned" and not request.is_approved:
            return None, [
                RequestValidationError(
                    code="not_approved",
                    message="Request must be approved before it can be solved",
                    field="is_approved",
                )
            ]
        return self._transition(request_id, "solved", user_id, action="solved", note=note)

    def set_approval(
        self,
        request_id: UUID,
        approved: bool,
        user_id: str,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """
        Approve a request or revoke its approval.

        The acting user must be an active admin or maintenance user with an
        approval limit set for the request's location that covers the
        estimated cost. Approval of a zero-cost request cannot be revoked.

        Returns:
            Tuple of (request, errors). Request is None if the change is refused.
        """
        request = self._repo.get_by_id(request_id)
        if request is None:
            return None, [
                RequestValidationError(
                    code="request_not_found",
                    message=f"Request with ID {request_id} not found",
                )
            ]
        if request.state in CLOSED_STATES:
            return None, [
                RequestValidationError(
                    code="request_closed",
                    message=f"Cannot change approval of a {request.state} request",
                    field="state",
                )
            ]

        user = self._users.get_by_id(user_id) if self._users else None
        if user is None or user.is_blocked or user.role not in APPROVER_ROLES:
            return None, [
                RequestValidationError(
                    code="approval_forbidden",
                    message="Only admin and maintenance users can approve requests",
                )
            ]

        limit = approval_limit(user, request)
        if limit is None:
            return None, [
                RequestValidationError(
                    code="approval_limit_missing",
                    message="No approval limit set for this location",
                    field="location_id",
                )
            ]
        if limit < request.estimated_cost:
            return None, [
                RequestValidationError(
                    code="approval_limit_exceeded",
                    message=(
                        f"Estimated cost {request.estimated_cost} exceeds approval limit {limit}"
                    ),
                    field="estimated_cost",
                )
            ]

        if approved and request.is_approved:
            return None, [
                RequestValidationError(
                    code="already_approved", message="Request is already approved"
                )
            ]
        if not approved and not request.is_approved:
            return None, [
                RequestValidationError(code="not_approved", message="Request is not approved")
            ]
        if not approved and request.estimated_cost == 0:
            return None, [
                RequestValidationError(
                    code="approval_not_revocable",
                    message="Approval of a request without cost cannot be revoked",
                    field="estimated_cost",
                )
            ]

        action = "approved" if approved else "approval_revoked"
        entry = RequestHistoryEntry(timestamp=self._now(), user_id=user_id, action=action)
        saved = self._repo.save(
            request.model_copy(
                update={"is_approved": approved, "history": [*request.history, entry]}
            )
        )
        logger.info("Request %s %s by %s", request_id, action, user_id)
        return saved, []

    def cancel(
        self,
        request_id: UUID,
        user_id: str,
        reason: str,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """Cancel a request; a reason is mandatory."""
        if not reason or not reason.strip():
            return None, [
                RequestValidationError(
                    code="reason_required",
                    message="Cancellation reason is required",
                    field="reason",
                )
            ]
        return self._transition(
            request_id,
            "cancelled",
            user_id,
            action="cancelled",
            note=reason.strip(),
            changes={"cancellation_reason": reason.strip()},
        )

    def reopen(
        self,
        request_id: UUID,
        user_id: str,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        """Reopen a solved or cancelled request."""
        return self._transition(
            request_id,
            "new",
            user_id,
            action="reopened",
            changes={"solver_id": None, "cancellation_reason": None},
        )

    def _transition(
        self,
        request_id: UUID,
        target: RequestState,
        user_id: str,
        action: str,
        note: str = "",
        changes: dict[str, object] | None = None,
        allow_same_state: bool = False,
    ) -> tuple[MaintenanceRequest | None, list[RequestValidationError]]:
        request = self._repo.get_by_id(request_id)
        if request is None:
            return None, [
                RequestValidationError(
                    code="request_not_found",
                    message=f"Request with ID {request_id} not found",
                )
            ]

        same = allow_same_state and request.state == target
        if not same and not can_transition(request.state, target):
            return None, [
                RequestValidationError(
                    code="invalid_transition",
                    message=f"Cannot change state from '{request.state}' to '{target}'",
                    field="state",
                )
            ]

        entry = RequestHistoryEntry(timestamp=self._now(), user_id=user_id, action=action, note=note)
        update: dict[str, object] = dict(changes or {})
        update["state"] = target
        update["history"] = [*request.history, entry]

        saved = self._repo.save(request.model_copy(update=update))
        logger.info("Request %s: %s -> %s by %s", request_id, request.state, target, user_id)
        return saved, []
