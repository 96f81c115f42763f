import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from techmaintain.adapters.clock import FixedClock
from techmaintain.api.deps import get_clock, get_rules, get_services
from techmaintain.api.main import health_check
from techmaintain.api.routes import dashboard, emails, maintenance, requests
from techmaintain.app_shell.container import Services
from techmaintain.rules.models import Rules


@pytest.fixture
def app(services: Services, rules: Rules, clock: FixedClock) -> FastAPI:
    """Test app over the in-memory store and a fixed clock."""
    app = FastAPI()
    app.include_router(maintenance.router, prefix="/api/maintenance")
    app.include_router(requests.router, prefix="/api/requests")
    app.include_router(dashboard.router, prefix="/api/dashboard")
    app.include_router(emails.router, prefix="/api/emails")
    app.add_api_route("/health", health_check)

    app.dependency_overrides[get_services] = lambda: services
    app.dependency_overrides[get_rules] = lambda: rules
    app.dependency_overrides[get_clock] = lambda: clock
    return app


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)
