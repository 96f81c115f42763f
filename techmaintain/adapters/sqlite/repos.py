"""
SQLite repositories.

Implements the store ports on top of stdlib sqlite3. Calendar dates are
stored as ``YYYY-MM-DD`` text, timestamps as ISO text, and list/dict
columns as JSON.
"""

from __future__ import annotations

import json
import sqlite3
from datetime import date, datetime
from typing import Any
from uuid import UUID

from techmaintain.domain.entities import (
    MaintenanceLog,
    MaintenanceRequest,
    MaintenanceTemplate,
    QueuedEmail,
    RequestHistoryEntry,
    RequestState,
    User,
)

# -----------------------------------------------------------------------------
# Helper functions
# -----------------------------------------------------------------------------


def dict_factory(cursor: sqlite3.Cursor, row: tuple[Any, ...]) -> dict[str, Any]:
    """Convert SQLite row to dictionary."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


def parse_dt(s: str | None) -> datetime | None:
    """Parse ISO datetime string."""
    return datetime.fromisoformat(s) if s else None


def parse_uuid(s: str | None) -> UUID | None:
    """Parse UUID string."""
    return UUID(s) if s else None


def iso(value: date | datetime | None) -> str | None:
    return value.isoformat() if value else None


# -----------------------------------------------------------------------------
# Base SQLite Repository
# -----------------------------------------------------------------------------


class SQLiteRepoBase:
    """Base class for SQLite repositories."""

    def __init__(self, db_path: str, connection: sqlite3.Connection | None = None):
        self.db_path = db_path
        self._external_conn = connection

    def _get_conn(self) -> sqlite3.Connection:
        """Get database connection (uses external if provided)."""
        if self._external_conn is not None:
            return self._external_conn

        conn = sqlite3.connect(self.db_path)
        conn.row_factory = dict_factory
        conn.execute("PRAGMA foreign_keys = ON;")
        return conn

    def _should_close(self) -> bool:
        """Whether to close connection after use."""
        return self._external_conn is None

    def _fetch_one(self, sql: str, params: tuple[Any, ...]) -> dict[str, Any] | None:
        conn = self._get_conn()
        try:
            row: dict[str, Any] | None = conn.execute(sql, params).fetchone()
            return row
        finally:
            if self._should_close():
                conn.close()

    def _fetch_all(self, sql: str, params: tuple[Any, ...] = ()) -> list[dict[str, Any]]:
        conn = self._get_conn()
        try:
            rows: list[dict[str, Any]] = conn.execute(sql, params).fetchall()
            return rows
        finally:
            if self._should_close():
                conn.close()

    def _execute(self, sql: str, params: tuple[Any, ...]) -> None:
        conn = self._get_conn()
        try:
            conn.execute(sql, params)
            if self._should_close():
                conn.commit()
        except Exception:
            if self._should_close():
                conn.rollback()
            raise
        finally:
            if self._should_close():
                conn.close()


# -----------------------------------------------------------------------------
# Maintenance Templates
# -----------------------------------------------------------------------------


class SQLiteTemplateRepo(SQLiteRepoBase):
    """SQLite implementation of the template repository ports."""

    def get_by_id(self, template_id: UUID) -> MaintenanceTemplate | None:
        row = self._fetch_one("SELECT * FROM maintenances WHERE id = ?", (str(template_id),))
        return self._map_row(row) if row else None

    def save(self, template: MaintenanceTemplate) -> MaintenanceTemplate:
        self._execute(
            """
            INSERT INTO maintenances (
                id, tech_id, title, description, interval_days, allowed_days,
                is_active, type, supplier_id, responsible_person_ids,
                last_generated_date, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                tech_id=excluded.tech_id,
                title=excluded.title,
                description=excluded.description,
                interval_days=excluded.interval_days,
                allowed_days=excluded.allowed_days,
                is_active=excluded.is_active,
                type=excluded.type,
                supplier_id=excluded.supplier_id,
                responsible_person_ids=excluded.responsible_person_ids,
                last_generated_date=excluded.last_generated_date
            """,
            (
                str(template.id),
                template.tech_id,
                template.title,
                template.description,
                template.interval_days,
                json.dumps(template.allowed_days),
                int(template.is_active),
                template.type,
                template.supplier_id,
                json.dumps(template.responsible_person_ids),
                iso(template.last_generated_date),
                iso(template.created_at),
            ),
        )
        return template

    def delete(self, template_id: UUID) -> None:
        self._execute("DELETE FROM maintenances WHERE id = ?", (str(template_id),))

    def list_all(self) -> list[MaintenanceTemplate]:
        rows = self._fetch_all("SELECT * FROM maintenances ORDER BY title COLLATE NOCASE")
        return [self._map_row(r) for r in rows]

    def list_active(self) -> list[MaintenanceTemplate]:
        rows = self._fetch_all(
            "SELECT * FROM maintenances WHERE is_active = 1 ORDER BY title COLLATE NOCASE"
        )
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> MaintenanceTemplate:
        # Date columns go through the model's normalizers, which accept
        # both plain dates and full timestamps written by older data.
        return MaintenanceTemplate(
            id=UUID(row["id"]),
            tech_id=row["tech_id"],
            title=row["title"],
            description=row["description"] or "",
            interval_days=row["interval_days"],
            allowed_days=json.loads(row["allowed_days"] or "[]"),
            is_active=bool(row["is_active"]),
            type=row["type"],
            supplier_id=row["supplier_id"],
            responsible_person_ids=json.loads(row["responsible_person_ids"] or "[]"),
            last_generated_date=row["last_generated_date"],
            created_at=row["created_at"],
        )


# -----------------------------------------------------------------------------
# Maintenance Requests
# -----------------------------------------------------------------------------


class SQLiteRequestRepo(SQLiteRepoBase):
    """SQLite implementation of the request repository ports."""

    def get_by_id(self, request_id: UUID) -> MaintenanceRequest | None:
        row = self._fetch_one("SELECT * FROM requests WHERE id = ?", (str(request_id),))
        return self._map_row(row) if row else None

    def save(self, request: MaintenanceRequest) -> MaintenanceRequest:
        self._execute(
            """
            INSERT INTO requests (
                id, tech_id, maintenance_id, title, description, author_id,
                solver_id, priority, state, planned_resolution_date,
                cancellation_reason, created_at, history, location_id,
                estimated_cost, estimated_time, is_approved
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                tech_id=excluded.tech_id,
                title=excluded.title,
                description=excluded.description,
                solver_id=excluded.solver_id,
                priority=excluded.priority,
                state=excluded.state,
                planned_resolution_date=excluded.planned_resolution_date,
                cancellation_reason=excluded.cancellation_reason,
                history=excluded.history,
                location_id=excluded.location_id,
                estimated_cost=excluded.estimated_cost,
                estimated_time=excluded.estimated_time,
                is_approved=excluded.is_approved
            """,
            (
                str(request.id),
                request.tech_id,
                str(request.maintenance_id) if request.maintenance_id else None,
                request.title,
                request.description,
                request.author_id,
                request.solver_id,
                request.priority,
                request.state,
                iso(request.planned_resolution_date),
                request.cancellation_reason,
                request.created_at.isoformat(),
                json.dumps([h.model_dump(mode="json") for h in request.history]),
                request.location_id,
                request.estimated_cost,
                request.estimated_time,
                int(request.is_approved),
            ),
        )
        return request

    def list_all(self) -> list[MaintenanceRequest]:
        rows = self._fetch_all("SELECT * FROM requests ORDER BY created_at DESC")
        return [self._map_row(r) for r in rows]

    def list_filtered(
        self,
        maintenance_id: UUID | None = None,
        state: RequestState | None = None,
    ) -> list[MaintenanceRequest]:
        query = "SELECT * FROM requests WHERE 1=1"
        params: list[Any] = []
        if maintenance_id is not None:
            query += " AND maintenance_id = ?"
            params.append(str(maintenance_id))
        if state is not None:
            query += " AND state = ?"
            params.append(state)
        query += " ORDER BY created_at DESC"
        return [self._map_row(r) for r in self._fetch_all(query, tuple(params))]

    def find_by_maintenance_and_date(
        self,
        maintenance_id: UUID,
        planned_date: date,
    ) -> MaintenanceRequest | None:
        row = self._fetch_one(
            "SELECT * FROM requests WHERE maintenance_id = ? AND planned_resolution_date = ?"
            " LIMIT 1",
            (str(maintenance_id), planned_date.isoformat()),
        )
        return self._map_row(row) if row else None

    def count_by_maintenance(self, maintenance_id: UUID) -> int:
        row = self._fetch_one(
            "SELECT COUNT(*) AS n FROM requests WHERE maintenance_id = ?",
            (str(maintenance_id),),
        )
        return int(row["n"]) if row else 0

    def _map_row(self, row: dict[str, Any]) -> MaintenanceRequest:
        return MaintenanceRequest(
            id=UUID(row["id"]),
            tech_id=row["tech_id"],
            maintenance_id=parse_uuid(row["maintenance_id"]),
            title=row["title"] or "",
            description=row["description"] or "",
            author_id=row["author_id"],
            solver_id=row["solver_id"],
            priority=row["priority"],
            state=row["state"],
            planned_resolution_date=row["planned_resolution_date"],
            cancellation_reason=row["cancellation_reason"],
            created_at=datetime.fromisoformat(row["created_at"]),
            history=[RequestHistoryEntry(**h) for h in json.loads(row["history"] or "[]")],
            location_id=row["location_id"],
            estimated_cost=row["estimated_cost"] or 0,
            estimated_time=row["estimated_time"] or 0,
            is_approved=bool(row["is_approved"]),
        )


# -----------------------------------------------------------------------------
# Generation Log
# -----------------------------------------------------------------------------


class SQLiteMaintenanceLogRepo(SQLiteRepoBase):
    """SQLite implementation of MaintenanceLogRepoPort."""

    def save(self, log: MaintenanceLog) -> MaintenanceLog:
        self._execute(
            """
            INSERT INTO maintenance_logs (
                id, maintenance_id, status, planned_date, created_at,
                executed_at, error_message, request_id, template_snapshot
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                status=excluded.status,
                executed_at=excluded.executed_at,
                error_message=excluded.error_message,
                request_id=excluded.request_id
            """,
            (
                str(log.id),
                str(log.maintenance_id),
                log.status,
                log.planned_date.isoformat(),
                log.created_at.isoformat(),
                iso(log.executed_at),
                log.error_message,
                str(log.request_id) if log.request_id else None,
                json.dumps(log.template_snapshot),
            ),
        )
        return log

    def list_for_template(self, maintenance_id: UUID) -> list[MaintenanceLog]:
        rows = self._fetch_all(
            "SELECT * FROM maintenance_logs WHERE maintenance_id = ? ORDER BY created_at DESC",
            (str(maintenance_id),),
        )
        return [self._map_row(r) for r in rows]

    def _map_row(self, row: dict[str, Any]) -> MaintenanceLog:
        return MaintenanceLog(
            id=UUID(row["id"]),
            maintenance_id=UUID(row["maintenance_id"]),
            status=row["status"],
            planned_date=date.fromisoformat(row["planned_date"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            executed_at=parse_dt(row["executed_at"]),
            error_message=row["error_message"],
            request_id=parse_uuid(row["request_id"]),
            template_snapshot=json.loads(row["template_snapshot"] or "{}"),
        )


# -----------------------------------------------------------------------------
# Email Queue
# -----------------------------------------------------------------------------


class SQLiteEmailQueueRepo(SQLiteRepoBase):
    """SQLite implementation of EmailQueueRepoPort."""

    def get_by_id(self, email_id: UUID) -> QueuedEmail | None:
        row = self._fetch_one("SELECT * FROM email_queue WHERE id = ?", (str(email_id),))
        return self._map_row(row) if row else None

    def save(self, email: QueuedEmail) -> QueuedEmail:
        self._execute(
            """
            INSERT INTO email_queue (
                id, to_address, subject, body, attempts, sent_at, error, created_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                attempts=excluded.attempts,
                sent_at=excluded.sent_at,
                error=excluded.error
            """,
            (
                str(email.id),
                email.to_address,
                email.subject,
                email.body,
                email.attempts,
                iso(email.sent_at),
                email.error,
                email.created_at.isoformat(),
            ),
        )
        return email

    def list_pending(self, max_attempts: int, limit: int = 10) -> list[QueuedEmail]:
        rows = self._fetch_all(
            "SELECT * FROM email_queue WHERE sent_at IS NULL AND attempts < ?"
            " ORDER BY created_at LIMIT ?",
            (max_attempts, limit),
        )
        return [self._map_row(r) for r in rows]

    def list_recent(self, limit: int = 100) -> list[QueuedEmail]:
        rows = self._fetch_all(
            "SELECT * FROM email_queue ORDER BY created_at DESC LIMIT ?",
            (limit,),
        )
        return [self._map_row(r) for r in rows]

    def list_all(self) -> list[QueuedEmail]:
        return [self._map_row(r) for r in self._fetch_all("SELECT * FROM email_queue")]

    def _map_row(self, row: dict[str, Any]) -> QueuedEmail:
        return QueuedEmail(
            id=UUID(row["id"]),
            to_address=row["to_address"],
            subject=row["subject"],
            body=row["body"],
            attempts=row["attempts"],
            sent_at=parse_dt(row["sent_at"]),
            error=row["error"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


# -----------------------------------------------------------------------------
# Users
# -----------------------------------------------------------------------------


class SQLiteUserRepo(SQLiteRepoBase):
    """SQLite implementation of UserRepoPort."""

    def get_by_id(self, user_id: str) -> User | None:
        row = self._fetch_one("SELECT * FROM users WHERE id = ?", (user_id,))
        return self._map_row(row) if row else None

    def save(self, user: User) -> User:
        self._execute(
            """
            INSERT INTO users (
                id, name, email, phone, role, is_blocked, created_at, approval_limits
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name=excluded.name,
                email=excluded.email,
                phone=excluded.phone,
                role=excluded.role,
                is_blocked=excluded.is_blocked,
                approval_limits=excluded.approval_limits
            """,
            (
                user.id,
                user.name,
                user.email,
                user.phone,
                user.role,
                int(user.is_blocked),
                user.created_at.isoformat(),
                json.dumps(user.approval_limits),
            ),
        )
        return user

    def list_all(self) -> list[User]:
        return [self._map_row(r) for r in self._fetch_all("SELECT * FROM users ORDER BY name")]

    def _map_row(self, row: dict[str, Any]) -> User:
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"] or "",
            phone=row["phone"] or "",
            role=row["role"],
            is_blocked=bool(row["is_blocked"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            approval_limits=json.loads(row["approval_limits"] or "{}"),
        )
