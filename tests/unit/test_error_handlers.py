"""Unit tests for the failure classification and envelope handlers."""

from __future__ import annotations

from datetime import datetime

from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.crud import Rejected
from app.core.crud import rejected_response
from app.core.errors import AuthenticationFailure
from app.core.errors import AuthorizationFailure
from app.core.errors import BusinessRuleError
from app.core.errors import InfrastructureError
from app.core.errors import ValidationFailure
from app.core.errors import register_error_handlers
from app.core.errors import success_response
from app.core.permissions import Action
from app.core.permissions import PermissionRequirement
from app.schemas.envelope import ErrorDetail
from app.schemas.task import TaskCreateResult


def _build_client() -> TestClient:
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/query")
    def query(limit: int) -> dict[str, int]:
        return {"limit": limit}

    @app.get("/ok")
    def ok():
        return success_response(TaskCreateResult(id_task=12), status_code=201)

    @app.get("/business")
    def business() -> None:
        raise BusinessRuleError("Category does not exist")

    @app.get("/infrastructure")
    def infrastructure() -> None:
        try:
            raise ConnectionError("db-host-17 refused connection")
        except ConnectionError as exc:
            raise InfrastructureError() from exc

    @app.get("/crash")
    def crash() -> None:
        raise RuntimeError("secret stack detail")

    @app.get("/http")
    def http_error() -> None:
        raise StarletteHTTPException(status_code=404, detail="Task not found")

    @app.get("/rejected/validation")
    def rejected_validation():
        failure = ValidationFailure(details=(ErrorDetail(field="title", issue="too short"),))
        return rejected_response(Rejected(failure=failure))

    @app.get("/rejected/forbidden")
    def rejected_forbidden():
        failure = AuthorizationFailure(missing=(PermissionRequirement("TASK", Action.DELETE),))
        return rejected_response(Rejected(failure=failure))

    @app.get("/rejected/unauthorized")
    def rejected_unauthorized():
        return rejected_response(Rejected(failure=AuthenticationFailure(message="Missing x-user-id header")))

    return TestClient(app, raise_server_exceptions=False)


def _assert_envelope(payload: dict, *, success: bool) -> None:
    assert payload["success"] is success
    parsed = datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00"))
    assert parsed.tzinfo is not None
    assert ("data" in payload) != ("error" in payload)


def test_success_envelope_uses_camel_case_payload() -> None:
    response = _build_client().get("/ok")

    assert response.status_code == 201
    payload = response.json()
    _assert_envelope(payload, success=True)
    assert payload["data"] == {"idTask": 12}


def test_request_validation_errors_are_normalized_to_envelope() -> None:
    response = _build_client().get("/query")

    assert response.status_code == 400
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"]["code"] == "validation_error"
    assert payload["error"]["message"] == "Request validation failed"
    assert payload["error"]["details"][0]["field"] == "limit"


def test_business_rule_errors_are_client_errors() -> None:
    response = _build_client().get("/business")

    assert response.status_code == 400
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"] == {
        "code": "business_rule_violation",
        "message": "Category does not exist",
    }


def test_infrastructure_errors_use_constant_message() -> None:
    response = _build_client().get("/infrastructure")

    assert response.status_code == 500
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"] == {
        "code": "internal_error",
        "message": "An unexpected error occurred",
    }
    assert "db-host-17" not in response.text


def test_unhandled_exceptions_do_not_leak_details() -> None:
    response = _build_client().get("/crash")

    assert response.status_code == 500
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"] == {
        "code": "internal_error",
        "message": "An unexpected error occurred",
    }
    assert "secret stack detail" not in response.text


def test_http_errors_are_wrapped_in_shared_envelope() -> None:
    response = _build_client().get("/http")

    assert response.status_code == 404
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"] == {"code": "not_found", "message": "Task not found"}


def test_unknown_routes_are_wrapped_in_shared_envelope() -> None:
    response = _build_client().get("/missing")

    assert response.status_code == 404
    assert response.json()["error"]["code"] == "not_found"


def test_rejected_validation_maps_to_400_with_details() -> None:
    response = _build_client().get("/rejected/validation")

    assert response.status_code == 400
    assert response.json()["error"] == {
        "code": "validation_error",
        "message": "Request validation failed",
        "details": [{"field": "title", "issue": "too short"}],
    }


def test_rejected_authorization_maps_to_403() -> None:
    response = _build_client().get("/rejected/forbidden")

    assert response.status_code == 403
    error = response.json()["error"]
    assert error["code"] == "forbidden"
    assert error["details"] == [{"field": "permission", "issue": "TASK:DELETE"}]


def test_rejected_authentication_maps_to_401() -> None:
    response = _build_client().get("/rejected/unauthorized")

    assert response.status_code == 401
    assert response.json()["error"] == {
        "code": "unauthorized",
        "message": "Missing x-user-id header",
    }
