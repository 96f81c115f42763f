import argparse
import logging
import sys
from datetime import time
from uuid import UUID

from techmaintain.adapters.clock import SystemClock
from techmaintain.adapters.store import create_store
from techmaintain.adapters.worker import MaintenanceWorker
from techmaintain.app_shell.config import Settings, validate_settings
from techmaintain.app_shell.container import Services, build_services, create_email_sender
from techmaintain.rules.loader import load_rules

logger = logging.getLogger("cli")


def get_services(settings: Settings) -> Services:
    try:
        rules = load_rules(settings.rules_path)
        validate_settings(settings, rules)
    except (FileNotFoundError, ValueError) as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    store = create_store(settings)
    return build_services(store, rules, SystemClock(), create_email_sender(settings))


def handle_migrate(settings: Settings) -> None:
    from techmaintain.adapters.sqlite.migrator import SQLiteMigrator

    settings.data_dir.mkdir(parents=True, exist_ok=True)
    applied = SQLiteMigrator(settings.db_path, str(settings.migrations_dir)).run_migrations()
    print(f"Applied {len(applied)} migrations to {settings.db_path}.")


def handle_generate(services: Services) -> None:
    summary = services.runner.generate_due()
    print(
        f"{summary.run_date.isoformat()}: {summary.generated} generated, "
        f"{summary.skipped} skipped, {summary.failed} failed."
    )


def handle_send_emails(services: Services) -> None:
    result = services.outbox.process_queue()
    print(f"Sent {result.sent} emails, {result.failed} failed.")


def handle_overdue(services: Services) -> None:
    from techmaintain.components.notifications import queue_overdue_digests

    count = queue_overdue_digests(
        services.store.requests,
        services.store.users,
        services.outbox,
        SystemClock().now().date(),
    )
    print(f"Queued {count} overdue digests.")


def handle_next_run(services: Services, args: argparse.Namespace) -> None:
    try:
        template_id = UUID(args.template_id)
    except ValueError:
        logger.error("Invalid template id: %s", args.template_id)
        sys.exit(1)

    next_date, errors = services.templates.next_run(template_id)
    if errors:
        logger.error(errors[0].message)
        sys.exit(1)
    print(next_date.isoformat() if next_date else "inactive")


def handle_worker(services: Services) -> None:
    hour, minute = services.rules.worker.overdue_hour_minute
    worker = MaintenanceWorker(
        services,
        SystemClock(),
        poll_interval_seconds=services.rules.worker.poll_interval_seconds,
        overdue_at=time(hour, minute),
    )
    worker.run_forever()


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)

    parser = argparse.ArgumentParser(description="TechMaintain maintenance CLI")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("migrate", help="Apply pending SQLite migrations")
    subparsers.add_parser("generate", help="Generate requests for templates due today")
    subparsers.add_parser("send-emails", help="Drain one batch of the email queue")
    subparsers.add_parser("overdue", help="Queue overdue digests now")

    next_run_parser = subparsers.add_parser("next-run", help="Show a template's next run date")
    next_run_parser.add_argument("template_id", help="Template UUID")

    subparsers.add_parser("worker", help="Run the background worker in the foreground")

    args = parser.parse_args(argv)
    settings = Settings()

    if args.command == "migrate":
        handle_migrate(settings)
        return

    services = get_services(settings)

    if args.command == "generate":
        handle_generate(services)
    elif args.command == "send-emails":
        handle_send_emails(services)
    elif args.command == "overdue":
        handle_overdue(services)
    elif args.command == "next-run":
        handle_next_run(services, args)
    elif args.command == "worker":
        handle_worker(services)


if __name__ == "__main__":
    main()
