from functools import lru_cache

from fastapi import Depends, Header

from techmaintain.adapters.clock import SystemClock
from techmaintain.adapters.store import Store, create_store
from techmaintain.app_shell.config import Settings
from techmaintain.app_shell.container import Services, build_services, create_email_sender
from techmaintain.components.notifications import EmailOutbox
from techmaintain.components.requests import RequestService
from techmaintain.components.templates import TemplateService
from techmaintain.rules.loader import load_rules
from techmaintain.rules.models import Rules


# --- Settings ---
@lru_cache
def get_settings() -> Settings:
    return Settings()


# --- Rules ---
@lru_cache
def get_rules() -> Rules:
    return load_rules(get_settings().rules_path)


# --- Store ---
@lru_cache
def get_store() -> Store:
    """Process-wide store; the memory backend must survive across requests."""
    return create_store(get_settings())


# Time adapter for deterministic time operations
_clock_instance: SystemClock | None = None


def get_clock() -> SystemClock:
    """Get clock singleton."""
    global _clock_instance
    if _clock_instance is None:
        _clock_instance = SystemClock()
    return _clock_instance


# --- Component Services ---
def get_services(
    store: Store = Depends(get_store),
    rules: Rules = Depends(get_rules),
    clock: SystemClock = Depends(get_clock),
    settings: Settings = Depends(get_settings),
) -> Services:
    return build_services(store, rules, clock, create_email_sender(settings))


def get_template_service(services: Services = Depends(get_services)) -> TemplateService:
    """Get template component service."""
    return services.templates


def get_request_service(services: Services = Depends(get_services)) -> RequestService:
    """Get request component service."""
    return services.requests


def get_outbox(services: Services = Depends(get_services)) -> EmailOutbox:
    """Get email outbox."""
    return services.outbox


# --- Acting user ---
def get_actor_id(x_user_id: str | None = Header(default=None)) -> str:
    """Acting user from the X-User-Id header (authentication happens upstream)."""
    return x_user_id or "anonymous"
