"""
Service wiring.

Builds the component services on top of one store so the API, the CLI and
the worker share identical behavior.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from techmaintain.adapters.dev_email import DevEmailAdapter
from techmaintain.adapters.smtp_email import SMTPConfig, SMTPEmailAdapter
from techmaintain.adapters.store import Store
from techmaintain.app_shell.config import Settings
from techmaintain.components.notifications import (
    EmailOutbox,
    NotificationConfig,
    RequestNotifier,
)
from techmaintain.components.recurrence import ClockPort, RecurrenceConfig
from techmaintain.components.requests import RequestService
from techmaintain.components.runner import RunnerConfig, TemplateRunner
from techmaintain.components.templates import TemplateService
from techmaintain.core.ports.email import EmailPort
from techmaintain.rules.models import Rules

logger = logging.getLogger(__name__)


@dataclass
class Services:
    store: Store
    rules: Rules
    recurrence: RecurrenceConfig
    outbox: EmailOutbox
    notifier: RequestNotifier
    runner: TemplateRunner
    templates: TemplateService
    requests: RequestService


def create_email_sender(settings: Settings) -> EmailPort:
    """SMTP when a host is configured, otherwise the logging adapter."""
    if not settings.smtp_host:
        return DevEmailAdapter()
    return SMTPEmailAdapter(
        SMTPConfig(
            host=settings.smtp_host,
            port=settings.smtp_port,
            user=settings.smtp_user,
            password=settings.smtp_password,
            secure=settings.smtp_secure,
            sender=settings.email_from,
        )
    )


def build_services(
    store: Store,
    rules: Rules,
    clock: ClockPort,
    sender: EmailPort | None = None,
) -> Services:
    recurrence = RecurrenceConfig(weekday_search_limit=rules.scheduling.weekday_search_limit)
    notification_config = NotificationConfig(
        batch_size=rules.notifications.batch_size,
        max_attempts=rules.notifications.max_attempts,
        fallback_recipient=rules.notifications.fallback_recipient,
    )

    outbox = EmailOutbox(store.emails, sender=sender, clock=clock, config=notification_config)
    notifier = RequestNotifier(outbox, store.users, config=notification_config)
    runner = TemplateRunner(
        templates=store.templates,
        requests=store.requests,
        logs=store.logs,
        notifier=notifier,
        clock=clock,
        config=RunnerConfig(
            author_id=rules.scheduling.system_author_id,
            priority=rules.scheduling.generated_priority,
            recurrence=recurrence,
        ),
    )
    return Services(
        store=store,
        rules=rules,
        recurrence=recurrence,
        outbox=outbox,
        notifier=notifier,
        runner=runner,
        templates=TemplateService(
            store.templates,
            requests=store.requests,
            runner=runner,
            clock=clock,
            recurrence=recurrence,
        ),
        requests=RequestService(
            store.requests, notifier=notifier, clock=clock, users=store.users
        ),
    )
