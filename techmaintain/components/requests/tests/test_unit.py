"""
Requests component unit tests.

Tests for request creation and the state machine.
"""

from __future__ import annotations

from datetime import date, datetime
from uuid import UUID, uuid4

import pytest

from techmaintain.components.requests import RequestService, approval_limit, can_transition
from techmaintain.domain.entities import MaintenanceRequest, RequestState, User

# --- Mocks ---


class MockRequestRepo:
    """In-memory request repository for testing."""

    def __init__(self) -> None:
        self._items: dict[UUID, MaintenanceRequest] = {}

    def get_by_id(self, request_id: UUID) -> MaintenanceRequest | None:
        return self._items.get(request_id)

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        self._items[request.id] = request
        return request

    def list_filtered(
        self, maintenance_id: UUID | None = None, state: RequestState | None = None
    ) -> list[MaintenanceRequest]:
        items = [
            r
            for r in self._items.values()
            if (maintenance_id is None or r.maintenance_id == maintenance_id)
            and (state is None or r.state == state)
        ]
        return sorted(items, key=lambda r: r.created_at, reverse=True)


class MockNotifier:
    def __init__(self) -> None:
        self.created: list[tuple[UUID, str]] = []
        self.assigned: list[tuple[UUID, str]] = []

    def request_created(self, request: MaintenanceRequest, actor_id: str) -> list[str]:
        self.created.append((request.id, actor_id))
        return []

    def request_assigned(self, request: MaintenanceRequest, actor_id: str) -> str | None:
        self.assigned.append((request.id, actor_id))
        return None


class MockUserRepo:
    def __init__(self, *users: User) -> None:
        self._items = {u.id: u for u in users}

    def get_by_id(self, user_id: str) -> User | None:
        return self._items.get(user_id)


class StepClock:
    """Clock advancing one minute per call."""

    def __init__(self) -> None:
        self._minute = 0

    def now(self) -> datetime:
        self._minute += 1
        return datetime(2024, 5, 2, 8, self._minute)


@pytest.fixture
def repo() -> MockRequestRepo:
    return MockRequestRepo()


@pytest.fixture
def notifier() -> MockNotifier:
    return MockNotifier()


@pytest.fixture
def users() -> MockUserRepo:
    return MockUserRepo(
        User(id="u-lead", name="Lead", role="admin", approval_limits={"": 500, "hall-a": 5000}),
        User(id="u-tech", name="Tech", role="maintenance", approval_limits={"": 100}),
        User(id="u-operator", name="Operator", role="operator", approval_limits={"": 1000}),
        User(
            id="u-blocked", name="Gone", role="admin", is_blocked=True, approval_limits={"": 1000}
        ),
    )


@pytest.fixture
def service(repo: MockRequestRepo, notifier: MockNotifier, users: MockUserRepo) -> RequestService:
    return RequestService(repo, notifier=notifier, clock=StepClock(), users=users)


def create(service: RequestService, **kwargs: object) -> MaintenanceRequest:
    data: dict[str, object] = {
        "tech_id": "pump-3",
        "author_id": "u-operator",
        "description": "Leaking seal",
    }
    data.update(kwargs)
    request, errors = service.create(**data)  # type: ignore[arg-type]
    assert errors == []
    assert request is not None
    return request


# --- Creation ---


class TestCreateRequest:
    """Test request creation."""

    def test_create_new(self, service: RequestService, notifier: MockNotifier) -> None:
        request = create(service)

        assert request.state == "new"
        assert request.solver_id is None
        assert request.priority == "basic"
        assert request.history[0].action == "created"
        assert notifier.created == [(request.id, "u-operator")]

    def test_create_with_solver_is_assigned(self, service: RequestService) -> None:
        request = create(service, solver_id="u-tech", planned_resolution_date=date(2024, 5, 10))
        assert request.state == "assigned"
        assert request.planned_resolution_date == date(2024, 5, 10)

    def test_create_requires_tech_and_description(self, service: RequestService) -> None:
        request, errors = service.create(tech_id="", author_id="u", description=" ")
        assert request is None
        assert {e.code for e in errors} == {"tech_required", "description_required"}

    def test_create_invalid_priority(self, service: RequestService) -> None:
        _, errors = service.create(
            tech_id="pump-3", author_id="u", description="x", priority="whenever"  # type: ignore[arg-type]
        )
        assert errors[0].code == "priority_invalid"

    def test_create_with_cost_and_location(self, service: RequestService) -> None:
        request = create(service, location_id="hall-a", estimated_cost=120.5, estimated_time=2)
        assert request.location_id == "hall-a"
        assert request.estimated_cost == 120.5
        assert request.estimated_time == 2
        assert request.is_approved is False

    def test_create_negative_estimates(self, service: RequestService) -> None:
        _, errors = service.create(
            tech_id="pump-3", author_id="u", description="x", estimated_cost=-1, estimated_time=-2
        )
        assert {e.code for e in errors} == {"cost_invalid", "time_invalid"}


# --- State Machine ---


class TestTransitions:
    """Test request state transitions."""

    @pytest.mark.parametrize(
        ("current", "target", "allowed"),
        [
            ("new", "assigned", True),
            ("new", "solved", False),
            ("assigned", "solved", True),
            ("assigned", "new", True),
            ("solved", "cancelled", False),
            ("solved", "new", True),
            ("cancelled", "new", True),
            ("cancelled", "assigned", False),
        ],
    )
    def test_can_transition(self, current: RequestState, target: RequestState, allowed: bool) -> None:
        assert can_transition(current, target) is allowed

    def test_assign_then_solve(self, service: RequestService, notifier: MockNotifier) -> None:
        request = create(service)

        assigned, errors = service.assign(request.id, "u-tech", "u-lead")
        assert errors == []
        assert assigned is not None
        assert assigned.state == "assigned"
        assert assigned.solver_id == "u-tech"
        assert notifier.assigned == [(request.id, "u-lead")]

        approved, errors = service.set_approval(request.id, True, "u-lead")
        assert errors == []
        assert approved is not None
        assert approved.is_approved is True

        solved, errors = service.solve(request.id, "u-tech", note="Seal replaced")
        assert errors == []
        assert solved is not None
        assert solved.state == "solved"
        assert [h.action for h in solved.history] == ["created", "assigned", "approved", "solved"]
        assert solved.history[-1].note == "Seal replaced"

    def test_reassign(self, service: RequestService) -> None:
        request = create(service, solver_id="u-tech")
        reassigned, errors = service.assign(request.id, "u-other", "u-lead")
        assert errors == []
        assert reassigned is not None
        assert reassigned.solver_id == "u-other"

    def test_solve_new_request_rejected(self, service: RequestService) -> None:
        request = create(service)
        solved, errors = service.solve(request.id, "u-tech")
        assert solved is None
        assert errors[0].code == "invalid_transition"

    def test_cancel_requires_reason(self, service: RequestService) -> None:
        request = create(service)
        cancelled, errors = service.cancel(request.id, "u-lead", "  ")
        assert cancelled is None
        assert errors[0].code == "reason_required"

    def test_cancel_and_reopen(self, service: RequestService) -> None:
        request = create(service, solver_id="u-tech")

        cancelled, _ = service.cancel(request.id, "u-lead", "Duplicate")
        assert cancelled is not None
        assert cancelled.state == "cancelled"
        assert cancelled.cancellation_reason == "Duplicate"

        reopened, errors = service.reopen(request.id, "u-lead")
        assert errors == []
        assert reopened is not None
        assert reopened.state == "new"
        assert reopened.solver_id is None
        assert reopened.cancellation_reason is None

    def test_unassign(self, service: RequestService) -> None:
        request = create(service, solver_id="u-tech")
        unassigned, _ = service.unassign(request.id, "u-lead")
        assert unassigned is not None
        assert unassigned.state == "new"
        assert unassigned.solver_id is None

    def test_reopen_open_request_rejected(self, service: RequestService) -> None:
        request = create(service)
        _, errors = service.reopen(request.id, "u-lead")
        assert errors[0].code == "invalid_transition"

    def test_missing_request(self, service: RequestService) -> None:
        _, errors = service.solve(uuid4(), "u-tech")
        assert errors[0].code == "request_not_found"


# --- Approval ---


class TestApproval:
    """Test approval rights and the solve gate."""

    def test_solve_unapproved_rejected(self, service: RequestService) -> None:
        request = create(service, solver_id="u-tech")
        solved, errors = service.solve(request.id, "u-tech")
        assert solved is None
        assert errors[0].code == "not_approved"

    def test_approve_within_location_limit(self, service: RequestService) -> None:
        request = create(service, location_id="hall-a", estimated_cost=4000)
        approved, errors = service.set_approval(request.id, True, "u-lead")
        assert errors == []
        assert approved is not None
        assert approved.is_approved is True
        assert approved.history[-1].action == "approved"
        assert approved.history[-1].user_id == "u-lead"

    def test_limit_exceeded(self, service: RequestService) -> None:
        request = create(service, estimated_cost=250)
        approved, errors = service.set_approval(request.id, True, "u-tech")
        assert approved is None
        assert errors[0].code == "approval_limit_exceeded"

    def test_limit_missing_for_location(self, service: RequestService) -> None:
        request = create(service, location_id="hall-a", estimated_cost=10)
        _, errors = service.set_approval(request.id, True, "u-tech")
        assert errors[0].code == "approval_limit_missing"

    @pytest.mark.parametrize("user_id", ["u-operator", "u-blocked", "u-unknown"])
    def test_approval_forbidden(self, service: RequestService, user_id: str) -> None:
        request = create(service)
        _, errors = service.set_approval(request.id, True, user_id)
        assert errors[0].code == "approval_forbidden"

    def test_already_approved(self, service: RequestService) -> None:
        request = create(service)
        service.set_approval(request.id, True, "u-tech")
        _, errors = service.set_approval(request.id, True, "u-tech")
        assert errors[0].code == "already_approved"

    def test_revoke(self, service: RequestService) -> None:
        request = create(service, estimated_cost=50)
        service.set_approval(request.id, True, "u-tech")
        revoked, errors = service.set_approval(request.id, False, "u-lead")
        assert errors == []
        assert revoked is not None
        assert revoked.is_approved is False
        assert revoked.history[-1].action == "approval_revoked"

    def test_revoke_unapproved(self, service: RequestService) -> None:
        request = create(service, estimated_cost=50)
        _, errors = service.set_approval(request.id, False, "u-lead")
        assert errors[0].code == "not_approved"

    def test_zero_cost_approval_not_revocable(self, service: RequestService) -> None:
        request = create(service)
        service.set_approval(request.id, True, "u-tech")
        _, errors = service.set_approval(request.id, False, "u-tech")
        assert errors[0].code == "approval_not_revocable"

    def test_closed_request(self, service: RequestService) -> None:
        request = create(service, solver_id="u-tech")
        service.cancel(request.id, "u-lead", "Duplicate")
        _, errors = service.set_approval(request.id, True, "u-lead")
        assert errors[0].code == "request_closed"

    def test_missing_request(self, service: RequestService) -> None:
        _, errors = service.set_approval(uuid4(), True, "u-lead")
        assert errors[0].code == "request_not_found"

    def test_without_user_lookup_nobody_may_approve(self, repo: MockRequestRepo) -> None:
        service = RequestService(repo, clock=StepClock())
        request = create(service)
        _, errors = service.set_approval(request.id, True, "u-lead")
        assert errors[0].code == "approval_forbidden"

    def test_approval_limit_lookup(self) -> None:
        user = User(id="u", name="U", approval_limits={"": 10, "hall-a": 99})
        assert approval_limit(user, MaintenanceRequest(tech_id="t", author_id="a")) == 10
        located = MaintenanceRequest(tech_id="t", author_id="a", location_id="hall-a")
        assert approval_limit(user, located) == 99
        elsewhere = MaintenanceRequest(tech_id="t", author_id="a", location_id="hall-b")
        assert approval_limit(user, elsewhere) is None


# --- Queries ---


class TestListRequests:
    """Test request listing."""

    def test_newest_first(self, service: RequestService) -> None:
        first = create(service, title="first")
        second = create(service, title="second")
        assert [r.id for r in service.list()] == [second.id, first.id]

    def test_filter_by_state(self, service: RequestService) -> None:
        create(service)
        assigned = create(service, solver_id="u-tech")
        assert [r.id for r in service.list(state="assigned")] == [assigned.id]
