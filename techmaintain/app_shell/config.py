import logging
import os
from pathlib import Path

from techmaintain.rules.models import Rules

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[2]
BACKENDS = ("sqlite", "memory")


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """Process settings read from the environment."""

    def __init__(self) -> None:
        self.base_dir = Path(os.getcwd())
        self.data_dir = Path(os.environ.get("TECHMAINTAIN_DATA_DIR", "./data"))
        self.db_path = str(self.data_dir / "techmaintain.db")
        self.backend = os.environ.get("TECHMAINTAIN_BACKEND", "sqlite").strip().lower()

        rules_path = os.environ.get("TECHMAINTAIN_RULES_PATH")
        if rules_path:
            self.rules_path = Path(rules_path)
        elif (self.base_dir / "rules.yaml").exists():
            self.rules_path = self.base_dir / "rules.yaml"
        else:
            self.rules_path = PROJECT_ROOT / "rules.yaml"

        self.migrations_dir = Path(
            os.environ.get("TECHMAINTAIN_MIGRATIONS_DIR", PROJECT_ROOT / "migrations")
        )

        # SMTP; no host means emails are logged by the dev adapter
        self.smtp_host = os.environ.get("SMTP_HOST") or None
        self.smtp_port = int(os.environ.get("SMTP_PORT", "587"))
        self.smtp_user = os.environ.get("SMTP_USER") or None
        self.smtp_password = os.environ.get("SMTP_PASS") or None
        self.smtp_secure = _env_bool("SMTP_SECURE")
        self.email_from = os.environ.get("EMAIL_FROM", "noreply@example.com")


def validate_settings(settings: Settings, rules: Rules) -> None:
    """
    Validate operational requirements before startup.
    Raises ValueError on misconfiguration.
    """
    if settings.backend not in BACKENDS:
        raise ValueError(
            f"Unknown TECHMAINTAIN_BACKEND '{settings.backend}' "
            f"(expected one of: {', '.join(BACKENDS)})"
        )

    if settings.backend == "sqlite" and not settings.migrations_dir.is_dir():
        raise ValueError(f"Migrations directory not found: {settings.migrations_dir}")

    if settings.smtp_host is None:
        logger.warning("SMTP_HOST not set; emails will be logged instead of sent")

    logger.info(
        "Configuration validated (backend=%s, poll=%ss)",
        settings.backend,
        rules.worker.poll_interval_seconds,
    )
