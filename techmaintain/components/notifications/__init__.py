"""
Notifications component - Email outbox and request notifications.
"""

from ._impl import (
    DEFAULT_CONFIG,
    EmailOutbox,
    NotificationConfig,
    QueueProcessResult,
    RequestNotifier,
    find_overdue,
    queue_overdue_digests,
)
from .ports import (
    ClockPort,
    EmailPort,
    EmailQueueRepoPort,
    OpenRequestRepoPort,
    UserRepoPort,
)
from .templates import (
    render_assignment_email,
    render_new_request_email,
    render_overdue_digest,
)

__all__ = [
    # Services
    "EmailOutbox",
    "RequestNotifier",
    "find_overdue",
    "queue_overdue_digests",
    # Config / results
    "DEFAULT_CONFIG",
    "NotificationConfig",
    "QueueProcessResult",
    # Ports
    "ClockPort",
    "EmailPort",
    "EmailQueueRepoPort",
    "OpenRequestRepoPort",
    "UserRepoPort",
    # Templates
    "render_assignment_email",
    "render_new_request_email",
    "render_overdue_digest",
]
