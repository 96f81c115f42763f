"""
In-memory repositories.

Dict-backed implementations of every store port. Used by the ``memory``
backend and by tests; contents vanish with the process.

The worker thread and API requests share one store, so every method holds
the repository lock and reads iterate a snapshot taken under it.
"""

from __future__ import annotations

from collections.abc import Hashable
from datetime import date
from threading import Lock
from typing import Generic, TypeVar
from uuid import UUID

from techmaintain.domain.entities import (
    MaintenanceLog,
    MaintenanceRequest,
    MaintenanceTemplate,
    QueuedEmail,
    RequestState,
    User,
)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


class _LockedItems(Generic[K, V]):
    def __init__(self) -> None:
        self._items: dict[K, V] = {}
        self._lock = Lock()

    def _get(self, key: K) -> V | None:
        with self._lock:
            return self._items.get(key)

    def _put(self, key: K, value: V) -> V:
        with self._lock:
            self._items[key] = value
        return value

    def _pop(self, key: K) -> None:
        with self._lock:
            self._items.pop(key, None)

    def _snapshot(self) -> list[V]:
        with self._lock:
            return list(self._items.values())


class InMemoryTemplateRepo(_LockedItems[UUID, MaintenanceTemplate]):
    def get_by_id(self, template_id: UUID) -> MaintenanceTemplate | None:
        return self._get(template_id)

    def save(self, template: MaintenanceTemplate) -> MaintenanceTemplate:
        return self._put(template.id, template)

    def delete(self, template_id: UUID) -> None:
        self._pop(template_id)

    def list_all(self) -> list[MaintenanceTemplate]:
        return self._snapshot()

    def list_active(self) -> list[MaintenanceTemplate]:
        return [t for t in self._snapshot() if t.is_active]


class InMemoryRequestRepo(_LockedItems[UUID, MaintenanceRequest]):
    def get_by_id(self, request_id: UUID) -> MaintenanceRequest | None:
        return self._get(request_id)

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        return self._put(request.id, request)

    def list_all(self) -> list[MaintenanceRequest]:
        return self._snapshot()

    def list_filtered(
        self,
        maintenance_id: UUID | None = None,
        state: RequestState | None = None,
    ) -> list[MaintenanceRequest]:
        items = [
            r
            for r in self._snapshot()
            if (maintenance_id is None or r.maintenance_id == maintenance_id)
            and (state is None or r.state == state)
        ]
        items.sort(key=lambda r: r.created_at, reverse=True)
        return items

    def find_by_maintenance_and_date(
        self,
        maintenance_id: UUID,
        planned_date: date,
    ) -> MaintenanceRequest | None:
        for r in self._snapshot():
            if r.maintenance_id == maintenance_id and r.planned_resolution_date == planned_date:
                return r
        return None

    def count_by_maintenance(self, maintenance_id: UUID) -> int:
        return sum(1 for r in self._snapshot() if r.maintenance_id == maintenance_id)


class InMemoryMaintenanceLogRepo(_LockedItems[UUID, MaintenanceLog]):
    def save(self, log: MaintenanceLog) -> MaintenanceLog:
        return self._put(log.id, log)

    def list_for_template(self, maintenance_id: UUID) -> list[MaintenanceLog]:
        items = [log for log in self._snapshot() if log.maintenance_id == maintenance_id]
        items.sort(key=lambda log: log.created_at, reverse=True)
        return items


class InMemoryEmailQueueRepo(_LockedItems[UUID, QueuedEmail]):
    def get_by_id(self, email_id: UUID) -> QueuedEmail | None:
        return self._get(email_id)

    def save(self, email: QueuedEmail) -> QueuedEmail:
        return self._put(email.id, email)

    def list_pending(self, max_attempts: int, limit: int = 10) -> list[QueuedEmail]:
        pending = [
            e for e in self._snapshot() if e.sent_at is None and e.attempts < max_attempts
        ]
        pending.sort(key=lambda e: e.created_at)
        return pending[:limit]

    def list_recent(self, limit: int = 100) -> list[QueuedEmail]:
        items = sorted(self._snapshot(), key=lambda e: e.created_at, reverse=True)
        return items[:limit]

    def list_all(self) -> list[QueuedEmail]:
        return self._snapshot()


class InMemoryUserRepo(_LockedItems[str, User]):
    def __init__(self, users: list[User] | None = None) -> None:
        super().__init__()
        for user in users or []:
            self._items[user.id] = user

    def get_by_id(self, user_id: str) -> User | None:
        return self._get(user_id)

    def save(self, user: User) -> User:
        return self._put(user.id, user)

    def list_all(self) -> list[User]:
        return self._snapshot()
