from collections.abc import AsyncIterator, Iterator
from types import MappingProxyType

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from structlog.testing import CapturingLogger

from idrepo.config import ResponseConfig
from idrepo.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    ComponentCreationError,
    IdRepoAppError,
)
from idrepo.handlers import register_error_handlers
from idrepo.middleware import RequestContextMiddleware
from idrepo.schemas.request import IdRequest
from idrepo.security import bind_user, reset_user
from idrepo.services import classifier
from idrepo.services.translator import ExceptionTranslator
from tests.factories import RESPONSE_IDS, VERSION, make_app_error


@pytest.fixture
def response_config() -> ResponseConfig:
    return ResponseConfig(ids=MappingProxyType(dict(RESPONSE_IDS)), version=VERSION)


@pytest.fixture
def translator(response_config: ResponseConfig) -> ExceptionTranslator:
    return ExceptionTranslator(response_config)


@pytest.fixture
def handler_logs(monkeypatch: pytest.MonkeyPatch) -> CapturingLogger:
    """Record every log call made by the classification handlers."""
    capturing = CapturingLogger()
    monkeypatch.setattr(classifier, "logger", capturing)
    return capturing


@pytest.fixture
def current_user() -> Iterator[str]:
    token = bind_user("registration-officer")
    yield "registration-officer"
    reset_user(token)


@pytest.fixture
def app(translator: ExceptionTranslator) -> FastAPI:
    """Application with the error handlers and routes that fail on purpose."""
    app = FastAPI()
    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app, translator)

    @app.post("/identity")
    async def create_identity(body: IdRequest) -> dict[str, str]:
        return {"id": body.id}

    @app.post("/identity/deactivate")
    async def deactivate(body: IdRequest) -> dict[str, str]:
        return {"id": body.id}

    @app.post("/identity/reactivate")
    async def reactivate(body: IdRequest) -> dict[str, str]:
        return {"id": body.id}

    @app.get("/ok")
    async def ok() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/access-denied")
    async def access_denied() -> None:
        raise AccessDeniedError("role not allowed")

    @app.get("/lazy-validator")
    async def lazy_validator() -> None:
        raise ComponentCreationError("masterDataValidator") from AuthenticationError()

    @app.get("/forbidden")
    async def forbidden() -> None:
        raise AuthenticationError("KER-ATH-403", "Forbidden", 403)

    @app.get("/app-error")
    async def app_error() -> None:
        raise make_app_error(
            ("IDR-IDS-001", "UIN not found"),
            ("IDR-IDS-002", "UIN not found"),
            ("IDR-IDS-003", "Record is deactivated"),
        )

    @app.patch("/identity/status")
    async def update_status() -> None:
        raise IdRepoAppError("IDR-IDS-004", "Invalid status", operation="deactivate")

    @app.api_route("/unexpected", methods=["GET", "DELETE"])
    async def unexpected() -> None:
        raise RuntimeError("database connection lost")

    return app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[AsyncClient]:
    """HTTP client that gets error responses instead of re-raised exceptions."""
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client
