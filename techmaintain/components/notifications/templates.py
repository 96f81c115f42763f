"""
HTML bodies for notification emails.
"""

from __future__ import annotations

import html
from collections.abc import Sequence

from techmaintain.domain.entities import MaintenanceRequest

PRIORITY_LABELS = {
    "basic": ("Basic", "#2563eb"),
    "priority": ("Priority", "#d97706"),
    "urgent": ("Urgent", "#dc2626"),
}


def _layout(title: str, content: str) -> str:
    return (
        "<!DOCTYPE html>"
        '<html><body style="font-family: Arial, sans-serif; color: #1e293b;">'
        '<div style="max-width: 600px; margin: 0 auto; padding: 20px;">'
        f'<h2 style="color: #0f172a;">{html.escape(title)}</h2>'
        f"{content}"
        '<p style="font-size: 12px; color: #94a3b8;">'
        "This message was generated automatically, please do not reply."
        "</p></div></body></html>"
    )


def render_new_request_email(priority: str, description: str) -> str:
    """Body for a newly created (or generated) request."""
    label, color = PRIORITY_LABELS.get(priority, (priority, "#475569"))
    content = (
        f'<p>Priority: <strong style="color: {color};">{html.escape(label)}</strong></p>'
        f'<p style="background: #f8fafc; padding: 12px;">{html.escape(description or "-")}</p>'
        "<p>Please check the maintenance system for details.</p>"
    )
    return _layout("New maintenance request", content)


def render_assignment_email(request: MaintenanceRequest) -> str:
    """Body for a request assigned to a solver."""
    content = (
        f"<p>You have been assigned the request <strong>{html.escape(request.title)}</strong>.</p>"
        f'<p style="background: #f8fafc; padding: 12px;">'
        f"{html.escape(request.description or '-')}</p>"
    )
    if request.planned_resolution_date:
        content += f"<p>Deadline: {request.planned_resolution_date.strftime('%d.%m.%Y')}</p>"
    return _layout("Request assigned", content)


def _table(requests: Sequence[MaintenanceRequest], title: str) -> str:
    if not requests:
        return ""
    rows = "".join(
        "<tr>"
        f"<td>{r.planned_resolution_date.strftime('%d.%m.%Y') if r.planned_resolution_date else '-'}</td>"
        f"<td>{html.escape(r.tech_id)}</td>"
        f"<td>{html.escape(r.title)}</td>"
        f"<td>{html.escape(r.priority)}</td>"
        "</tr>"
        for r in requests
    )
    return (
        f"<h3>{html.escape(title)}</h3>"
        '<table border="1" cellpadding="5" cellspacing="0" '
        'style="border-collapse: collapse; width: 100%;">'
        '<thead><tr style="background-color: #f2f2f2;">'
        "<th>Date</th><th>Asset</th><th>Title</th><th>Priority</th>"
        "</tr></thead>"
        f"<tbody>{rows}</tbody></table><br/>"
    )


def render_overdue_digest(
    assigned: Sequence[MaintenanceRequest],
    unassigned: Sequence[MaintenanceRequest],
) -> str:
    """Body for the daily overdue digest."""
    content = (
        "<p>The following requests are past their planned resolution date.</p>"
        + _table(assigned, "Assigned to you")
        + _table(unassigned, "Unassigned")
    )
    return _layout("Overdue requests", content)
