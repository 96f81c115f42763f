"""
SQLite repository integration tests.

Every repository runs against a freshly migrated database file.
"""

from datetime import date, datetime, timedelta
from uuid import uuid4

import pytest

from techmaintain.adapters.clock import FixedClock
from techmaintain.adapters.dev_email import DevEmailAdapter
from techmaintain.adapters.store import Store
from techmaintain.app_shell.container import build_services
from techmaintain.domain.entities import (
    MaintenanceLog,
    MaintenanceRequest,
    MaintenanceTemplate,
    QueuedEmail,
    RequestHistoryEntry,
    User,
)


def make_template(**kwargs) -> MaintenanceTemplate:
    data = {
        "tech_id": "press-7",
        "title": "Hydraulic check",
        "description": "Check pressure",
        "interval_days": 30,
        "allowed_days": [1, 2, 3, 4, 5],
        "responsible_person_ids": ["u-tech"],
        "last_generated_date": date(2024, 5, 1),
        "created_at": date(2024, 1, 1),
    }
    data.update(kwargs)
    return MaintenanceTemplate(**data)


class TestTemplateRepo:
    def test_round_trip(self, sqlite_store: Store) -> None:
        template = sqlite_store.templates.save(make_template(supplier_id="acme"))

        loaded = sqlite_store.templates.get_by_id(template.id)

        assert loaded == template
        assert loaded.allowed_days == [1, 2, 3, 4, 5]
        assert loaded.last_generated_date == date(2024, 5, 1)

    def test_save_updates_existing(self, sqlite_store: Store) -> None:
        template = sqlite_store.templates.save(make_template())
        sqlite_store.templates.save(
            template.model_copy(update={"last_generated_date": date(2024, 5, 31)})
        )

        assert len(sqlite_store.templates.list_all()) == 1
        assert sqlite_store.templates.get_by_id(template.id).last_generated_date == date(2024, 5, 31)

    def test_list_active_and_delete(self, sqlite_store: Store) -> None:
        on = sqlite_store.templates.save(make_template(title="On"))
        off = sqlite_store.templates.save(make_template(title="Off", is_active=False))

        assert [t.id for t in sqlite_store.templates.list_active()] == [on.id]

        sqlite_store.templates.delete(off.id)
        assert sqlite_store.templates.get_by_id(off.id) is None

    def test_missing(self, sqlite_store: Store) -> None:
        assert sqlite_store.templates.get_by_id(uuid4()) is None

    def test_missing_created_at_stays_empty(self, sqlite_store: Store) -> None:
        template = sqlite_store.templates.save(make_template(created_at=None))
        assert sqlite_store.templates.get_by_id(template.id).created_at is None


class TestRequestRepo:
    def test_round_trip_with_history(self, sqlite_store: Store) -> None:
        request = MaintenanceRequest(
            tech_id="pump-3",
            maintenance_id=uuid4(),
            title="Leak",
            author_id="u-op",
            solver_id="u-tech",
            state="assigned",
            priority="urgent",
            planned_resolution_date=date(2024, 5, 31),
            history=[
                RequestHistoryEntry(
                    timestamp=datetime(2024, 5, 30, 9), user_id="u-op", action="created"
                ),
                RequestHistoryEntry(
                    timestamp=datetime(2024, 5, 30, 10),
                    user_id="u-admin",
                    action="assigned",
                    note="Tom is on site",
                ),
            ],
        )
        sqlite_store.requests.save(request)

        loaded = sqlite_store.requests.get_by_id(request.id)

        assert loaded == request
        assert [h.action for h in loaded.history] == ["created", "assigned"]

    def test_round_trip_approval_fields(self, sqlite_store: Store) -> None:
        request = sqlite_store.requests.save(
            MaintenanceRequest(
                tech_id="pump-3",
                author_id="u-op",
                location_id="hall-a",
                estimated_cost=149.5,
                estimated_time=2.5,
            )
        )
        sqlite_store.requests.save(request.model_copy(update={"is_approved": True}))

        loaded = sqlite_store.requests.get_by_id(request.id)

        assert loaded.location_id == "hall-a"
        assert loaded.estimated_cost == 149.5
        assert loaded.estimated_time == 2.5
        assert loaded.is_approved is True

    def test_queries(self, sqlite_store: Store) -> None:
        template_id = uuid4()
        base = datetime(2024, 5, 1, 8)
        old = sqlite_store.requests.save(
            MaintenanceRequest(
                tech_id="a",
                author_id="system",
                maintenance_id=template_id,
                planned_resolution_date=date(2024, 5, 1),
                created_at=base,
            )
        )
        new = sqlite_store.requests.save(
            MaintenanceRequest(
                tech_id="a",
                author_id="system",
                maintenance_id=template_id,
                state="assigned",
                solver_id="u-tech",
                planned_resolution_date=date(2024, 5, 31),
                created_at=base + timedelta(days=30),
            )
        )
        sqlite_store.requests.save(MaintenanceRequest(tech_id="b", author_id="u-op"))

        by_template = sqlite_store.requests.list_filtered(maintenance_id=template_id)
        assert [r.id for r in by_template] == [new.id, old.id]
        assert [r.id for r in sqlite_store.requests.list_filtered(state="assigned")] == [new.id]
        assert sqlite_store.requests.count_by_maintenance(template_id) == 2
        assert len(sqlite_store.requests.list_all()) == 3

        found = sqlite_store.requests.find_by_maintenance_and_date(template_id, date(2024, 5, 31))
        assert found is not None and found.id == new.id
        assert (
            sqlite_store.requests.find_by_maintenance_and_date(template_id, date(2024, 6, 1))
            is None
        )


class TestLogRepo:
    def test_round_trip_and_cascade(self, sqlite_store: Store) -> None:
        template = sqlite_store.templates.save(make_template())
        log = sqlite_store.logs.save(
            MaintenanceLog(
                maintenance_id=template.id,
                status="success",
                planned_date=date(2024, 5, 31),
                executed_at=datetime(2024, 5, 31, 0, 1),
                request_id=uuid4(),
                template_snapshot={"title": "Hydraulic check", "interval_days": 30},
            )
        )

        (loaded,) = sqlite_store.logs.list_for_template(template.id)
        assert loaded == log

        sqlite_store.templates.delete(template.id)
        assert sqlite_store.logs.list_for_template(template.id) == []


class TestEmailQueueRepo:
    def test_pending_and_update(self, sqlite_store: Store) -> None:
        base = datetime(2024, 5, 31, 0, 1)
        first = sqlite_store.emails.save(
            QueuedEmail(to_address="a@x", subject="s", body="b", created_at=base)
        )
        sqlite_store.emails.save(
            QueuedEmail(to_address="b@x", subject="s", body="b", attempts=3, created_at=base)
        )

        assert [e.id for e in sqlite_store.emails.list_pending(max_attempts=3)] == [first.id]

        sqlite_store.emails.save(first.model_copy(update={"sent_at": base}))
        assert sqlite_store.emails.list_pending(max_attempts=3) == []
        assert len(sqlite_store.emails.list_all()) == 2

    def test_recent_and_lookup(self, sqlite_store: Store) -> None:
        base = datetime(2024, 5, 31, 0, 1)
        older = sqlite_store.emails.save(
            QueuedEmail(to_address="a@x", subject="s", body="b", created_at=base)
        )
        newer = sqlite_store.emails.save(
            QueuedEmail(
                to_address="b@x", subject="s", body="b", created_at=base + timedelta(minutes=1)
            )
        )

        assert [e.id for e in sqlite_store.emails.list_recent()] == [newer.id, older.id]
        assert [e.id for e in sqlite_store.emails.list_recent(limit=1)] == [newer.id]
        assert sqlite_store.emails.get_by_id(older.id) == older
        assert sqlite_store.emails.get_by_id(uuid4()) is None


class TestUserRepo:
    def test_seeded_users(self, sqlite_store: Store) -> None:
        users = {u.id: u for u in sqlite_store.users.list_all()}
        assert set(users) == {"u-admin", "u-tech", "u-op"}
        assert users["u-tech"].role == "maintenance"
        assert users["u-admin"].approval_limits == {"": 1000, "hall-a": 5000}

    def test_update_user(self, sqlite_store: Store) -> None:
        user = sqlite_store.users.get_by_id("u-tech")
        sqlite_store.users.save(
            user.model_copy(update={"is_blocked": True, "approval_limits": {"hall-b": 50}})
        )
        updated = sqlite_store.users.get_by_id("u-tech")
        assert updated.is_blocked is True
        assert updated.approval_limits == {"hall-b": 50}

    def test_missing_user(self, sqlite_store: Store) -> None:
        assert sqlite_store.users.get_by_id("nobody") is None
        assert isinstance(sqlite_store.users.save(User(name="New")), User)


class TestGenerationOverSQLite:
    """The scheduled pass against the real schema."""

    @pytest.fixture
    def clock(self) -> FixedClock:
        return FixedClock(datetime(2024, 5, 31, 0, 1))

    def test_generate_due_is_idempotent(self, sqlite_store: Store, rules, clock) -> None:
        services = build_services(sqlite_store, rules, clock, DevEmailAdapter())
        template = sqlite_store.templates.save(make_template(allowed_days=[]))

        first = services.runner.generate_due()
        second = services.runner.generate_due()

        assert first.generated == 1
        assert second.generated == 0
        (request,) = sqlite_store.requests.list_filtered(maintenance_id=template.id)
        assert request.planned_resolution_date == date(2024, 5, 31)
        assert request.state == "assigned"
        assert sqlite_store.templates.get_by_id(template.id).last_generated_date == date(
            2024, 5, 31
        )
        (log,) = sqlite_store.logs.list_for_template(template.id)
        assert log.status == "success"
        assert [e.to_address for e in sqlite_store.emails.list_all()] == ["tom@example.com"]

    def test_run_now_then_not_due(self, sqlite_store: Store, rules, clock) -> None:
        services = build_services(sqlite_store, rules, clock, DevEmailAdapter())
        template = sqlite_store.templates.save(make_template(allowed_days=[]))

        request, updated, errors = services.templates.run_now(template.id)

        assert errors == []
        assert request is not None
        assert services.runner.generate_due().generated == 0
        next_date, _ = services.templates.next_run(template.id)
        assert next_date == date(2024, 6, 30)
