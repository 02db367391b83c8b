"""Integration tests for the FastAPI error handlers."""

import pytest
from fastapi.testclient import TestClient
from httpx import AsyncClient

from idrepo.config import Settings
from idrepo.constants import AuthAdapterErrorCode, IdRepoErrorConstants
from idrepo.main import create_app
from idrepo.middleware import REQUEST_ID_HEADER
from idrepo.security import bind_user, get_user, reset_user
from tests.factories import RESPONSE_IDS, VERSION

VALID_REQUEST = {
    "id": "mosip.id.deactivate",
    "version": "v1",
    "requesttime": "2024-01-31T10:15:30.123Z",
    "request": {"registrationId": "10001100010000120240131101530"},
}


def _with_requesttime(requesttime: str) -> dict[str, object]:
    return {**VALID_REQUEST, "requesttime": requesttime}


# ---------------------------------------------------------------------------
# Malformed request time
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize("operation", ["deactivate", "reactivate"])
async def test_bad_requesttime_on_status_change(client: AsyncClient, operation: str) -> None:
    resp = await client.post(f"/identity/{operation}", json=_with_requesttime("31/01/2024 10:15"))
    assert resp.status_code == 200
    body = resp.json()
    assert body["id"] == RESPONSE_IDS[operation]
    assert body["version"] == VERSION
    assert body["errors"] == [
        {
            "code": IdRepoErrorConstants.INVALID_INPUT_PARAMETER.error_code,
            "message": "Invalid Input Parameter - requesttime",
        }
    ]


@pytest.mark.asyncio
async def test_bad_requesttime_on_create_uses_method(client: AsyncClient) -> None:
    resp = await client.post("/identity", json=_with_requesttime("2024-01-31T10:15:30Z"))
    body = resp.json()
    assert resp.status_code == 200
    assert body["id"] == RESPONSE_IDS["create"]
    assert body["errors"][0]["message"] == "Invalid Input Parameter - requesttime"


@pytest.mark.asyncio
async def test_valid_request_passes(client: AsyncClient) -> None:
    resp = await client.post("/identity/deactivate", json=VALID_REQUEST)
    assert resp.status_code == 200
    assert resp.json() == {"id": "mosip.id.deactivate"}


# ---------------------------------------------------------------------------
# Invalid request
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_missing_field_is_invalid_request(client: AsyncClient) -> None:
    body = {key: value for key, value in VALID_REQUEST.items() if key != "requesttime"}
    resp = await client.post("/identity", json=body)
    assert resp.status_code == 200
    assert resp.json()["errors"] == [
        {
            "code": IdRepoErrorConstants.INVALID_REQUEST.error_code,
            "message": IdRepoErrorConstants.INVALID_REQUEST.error_message,
        }
    ]


@pytest.mark.asyncio
async def test_unparseable_json_is_invalid_request(client: AsyncClient) -> None:
    resp = await client.post(
        "/identity", content=b'{"id": ', headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 200
    assert resp.json()["errors"][0]["code"] == IdRepoErrorConstants.INVALID_REQUEST.error_code


@pytest.mark.asyncio
async def test_unknown_route_is_invalid_request(client: AsyncClient) -> None:
    resp = await client.get("/no-such-route")
    body = resp.json()
    assert resp.status_code == 200
    assert body["id"] == RESPONSE_IDS["read"]
    assert body["errors"][0]["code"] == IdRepoErrorConstants.INVALID_REQUEST.error_code


@pytest.mark.asyncio
async def test_wrong_method_is_invalid_request(client: AsyncClient) -> None:
    resp = await client.patch("/ok")
    assert resp.status_code == 200
    assert resp.json()["id"] == RESPONSE_IDS["update"]


# ---------------------------------------------------------------------------
# Authorization and authentication
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_access_denied_is_200(client: AsyncClient) -> None:
    resp = await client.get("/access-denied")
    assert resp.status_code == 200
    assert resp.json()["errors"] == [
        {
            "code": IdRepoErrorConstants.AUTHORIZATION_FAILED.error_code,
            "message": IdRepoErrorConstants.AUTHORIZATION_FAILED.error_message,
        }
    ]


@pytest.mark.asyncio
async def test_lazy_component_auth_failure_is_401(client: AsyncClient) -> None:
    resp = await client.get("/lazy-validator")
    assert resp.status_code == 401
    assert resp.json()["errors"] == [
        {
            "code": AuthAdapterErrorCode.UNAUTHORIZED.error_code,
            "message": AuthAdapterErrorCode.UNAUTHORIZED.error_message,
        }
    ]


@pytest.mark.asyncio
async def test_declared_auth_status_is_used(client: AsyncClient) -> None:
    resp = await client.get("/forbidden")
    assert resp.status_code == 403
    assert resp.json()["errors"] == [{"code": "KER-ATH-403", "message": "Forbidden"}]


# ---------------------------------------------------------------------------
# Application and unexpected errors
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_app_error_messages_are_deduplicated(client: AsyncClient) -> None:
    resp = await client.get("/app-error")
    assert resp.status_code == 200
    assert resp.json() == {
        "id": RESPONSE_IDS["read"],
        "version": VERSION,
        "errors": [
            {"code": "IDR-IDS-001", "message": "UIN not found"},
            {"code": "IDR-IDS-003", "message": "Record is deactivated"},
        ],
    }


@pytest.mark.asyncio
async def test_app_error_operation_overrides_method(client: AsyncClient) -> None:
    resp = await client.patch("/identity/status")
    assert resp.json()["id"] == RESPONSE_IDS["deactivate"]


@pytest.mark.asyncio
async def test_unexpected_error_is_unknown(client: AsyncClient) -> None:
    resp = await client.get("/unexpected")
    assert resp.status_code == 200
    assert resp.json()["errors"] == [
        {
            "code": IdRepoErrorConstants.UNKNOWN_ERROR.error_code,
            "message": IdRepoErrorConstants.UNKNOWN_ERROR.error_message,
        }
    ]


@pytest.mark.asyncio
async def test_unmapped_method_omits_id(client: AsyncClient) -> None:
    resp = await client.delete("/unexpected")
    body = resp.json()
    assert "id" not in body
    assert body["version"] == VERSION


# ---------------------------------------------------------------------------
# Middleware and app factory
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient) -> None:
    resp = await client.get("/ok", headers={REQUEST_ID_HEADER: "req-42"})
    assert resp.headers[REQUEST_ID_HEADER] == "req-42"


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient) -> None:
    resp = await client.get("/access-denied")
    assert resp.headers[REQUEST_ID_HEADER]


@pytest.mark.asyncio
async def test_request_user_does_not_outlive_the_request(client: AsyncClient) -> None:
    token = bind_user("registration-officer")
    try:
        await client.get("/access-denied")
        assert get_user() == "registration-officer"
    finally:
        reset_user(token)


def test_create_app_uses_settings() -> None:
    app = create_app(Settings(app_version="v9", response_ids={"read": "custom.read"}))
    client = TestClient(app)

    assert client.get("/health").json() == {"status": "ok"}
    resp = client.get("/missing")
    assert resp.status_code == 200
    assert resp.json()["id"] == "custom.read"
    assert resp.json()["version"] == "v9"
