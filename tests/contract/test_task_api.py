"""Contract tests for task API endpoints."""

from __future__ import annotations

from datetime import datetime

from fastapi.testclient import TestClient
import pytest

from app.api.tasks import get_procedure_executor
from app.core.permissions import Action
from app.core.permissions import PermissionRequirement
from app.core.security import GrantPermissionChecker
from app.core.security import get_permission_checker
from app.db.procedures import ProcedureError

API_PREFIX = "/api/v1/internal"


def _assert_envelope(payload: dict, *, success: bool) -> None:
    assert payload["success"] is success
    parsed = datetime.fromisoformat(payload["timestamp"].replace("Z", "+00:00"))
    assert parsed.tzinfo is not None
    if success:
        assert "data" in payload and "error" not in payload
    else:
        assert "error" in payload and "data" not in payload
        assert isinstance(payload["error"]["code"], str) and payload["error"]["code"]
        assert isinstance(payload["error"]["message"], str) and payload["error"]["message"]


def _assert_task_detail_contract(task: dict) -> None:
    for field in (
        "idTask",
        "title",
        "description",
        "dueDate",
        "dueTime",
        "priority",
        "status",
        "idCategory",
        "estimatedTime",
        "dateCreated",
        "dateModified",
    ):
        assert field in task


def _create_task(client: TestClient, **fields) -> int:
    response = client.post(f"{API_PREFIX}/task", json={"title": "Buy milk", **fields})
    assert response.status_code == 201, response.text
    return response.json()["data"]["idTask"]


class _ExplodingExecutor:
    def execute(self, *args, **kwargs):
        raise AssertionError("service must not be called for rejected requests")


@pytest.fixture
def no_service_calls(api_app):
    api_app.dependency_overrides[get_procedure_executor] = lambda: _ExplodingExecutor()
    yield


def test_task_crud_contract(client: TestClient, make_category) -> None:
    category_id = make_category(name="Groceries")

    response = client.post(
        f"{API_PREFIX}/task",
        json={
            "title": "Buy milk",
            "description": "Semi-skimmed",
            "dueDate": "2026-10-20",
            "dueTime": "18:30:00",
            "priority": 1,
            "idCategory": category_id,
            "estimatedTime": 15,
        },
    )
    assert response.status_code == 201
    created = response.json()
    _assert_envelope(created, success=True)
    task_id = created["data"]["idTask"]
    assert isinstance(task_id, int)

    response = client.get(f"{API_PREFIX}/task")
    assert response.status_code == 200
    listed = response.json()
    _assert_envelope(listed, success=True)
    assert [item["idTask"] for item in listed["data"]] == [task_id]
    summary = listed["data"][0]
    _assert_task_detail_contract(summary)
    assert summary["subtaskCount"] == 0
    assert summary["completedSubtaskCount"] == 0
    assert summary["attachmentCount"] == 0

    response = client.get(f"{API_PREFIX}/task/{task_id}")
    assert response.status_code == 200
    retrieved = response.json()
    _assert_envelope(retrieved, success=True)
    assert set(retrieved["data"]) == {"task", "subtasks", "tags", "attachments"}
    task = retrieved["data"]["task"]
    _assert_task_detail_contract(task)
    assert task["dueDate"] == "2026-10-20"
    assert task["dueTime"] == "18:30:00"
    assert task["idCategory"] == category_id
    assert task["estimatedTime"] == 15

    response = client.put(
        f"{API_PREFIX}/task/{task_id}",
        json={"title": "Buy oat milk", "priority": 2, "status": 1},
    )
    assert response.status_code == 200
    updated = response.json()
    _assert_envelope(updated, success=True)
    assert updated["data"] == {"success": True}

    response = client.delete(f"{API_PREFIX}/task/{task_id}")
    assert response.status_code == 200
    deleted = response.json()
    _assert_envelope(deleted, success=True)
    assert deleted["data"] == {"success": True}

    response = client.get(f"{API_PREFIX}/task/{task_id}")
    assert response.status_code == 400
    missing = response.json()
    _assert_envelope(missing, success=False)
    assert missing["error"]["code"] == "business_rule_violation"


def test_create_then_get_round_trip_defaults_to_pending(client: TestClient) -> None:
    task_id = _create_task(client, priority=1)

    task = client.get(f"{API_PREFIX}/task/{task_id}").json()["data"]["task"]

    assert task["title"] == "Buy milk"
    assert task["priority"] == 1
    assert task["status"] == 0
    assert task["description"] == ""


def test_create_without_priority_defaults_to_medium(client: TestClient) -> None:
    task_id = _create_task(client)

    task = client.get(f"{API_PREFIX}/task/{task_id}").json()["data"]["task"]

    assert task["priority"] == 1


@pytest.mark.parametrize(
    ("body", "field"),
    [
        ({"title": "ab"}, "title"),
        ({"title": "x" * 101}, "title"),
        ({"title": "Buy milk", "priority": 3}, "priority"),
        ({"title": "Buy milk", "description": "d" * 1001}, "description"),
        ({"title": "Buy milk", "estimatedTime": 4}, "estimatedTime"),
        ({"title": "Buy milk", "estimatedTime": 1441}, "estimatedTime"),
        ({"title": "Buy milk", "idCategory": 0}, "idCategory"),
        ({"title": "Buy milk", "dueDate": "not-a-date"}, "dueDate"),
        ({"title": "Buy milk", "dueDate": 0}, "dueDate"),
        ({"title": "Buy milk", "dueTime": 3600}, "dueTime"),
        ({"title": "Buy milk", "idCategory": 2147483648}, "idCategory"),
        ({"description": "no title"}, "title"),
    ],
)
def test_create_rejects_bound_violations_without_calling_service(
    client: TestClient,
    no_service_calls,
    body: dict,
    field: str,
) -> None:
    response = client.post(f"{API_PREFIX}/task", json=body)

    assert response.status_code == 400
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"]["code"] == "validation_error"
    assert field in {detail["field"] for detail in payload["error"]["details"]}


def test_malformed_json_body_is_a_validation_error(client: TestClient, no_service_calls) -> None:
    response = client.post(
        f"{API_PREFIX}/task",
        content=b"{not json",
        headers={"content-type": "application/json"},
    )

    assert response.status_code == 400
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"]["details"] == [{"field": "body", "issue": "Malformed JSON body"}]


def test_non_numeric_id_is_a_validation_error(client: TestClient, no_service_calls) -> None:
    response = client.get(f"{API_PREFIX}/task/abc")

    assert response.status_code == 400
    assert response.json()["error"]["details"][0]["field"] == "id"


@pytest.mark.parametrize("method", ["get", "delete"])
def test_id_beyond_column_range_is_a_validation_error(client: TestClient, no_service_calls, method: str) -> None:
    response = getattr(client, method)(f"{API_PREFIX}/task/2147483648")

    assert response.status_code == 400
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"]["code"] == "validation_error"
    assert payload["error"]["details"][0]["field"] == "id"


def test_largest_id_reaches_the_business_rules(client: TestClient) -> None:
    response = client.get(f"{API_PREFIX}/task/2147483647")

    assert response.status_code == 400
    assert response.json()["error"]["code"] == "business_rule_violation"


def test_due_date_and_time_accept_iso_strings(client: TestClient) -> None:
    task_id = _create_task(client, dueDate="2026-12-24", dueTime="07:15:00")

    task = client.get(f"{API_PREFIX}/task/{task_id}").json()["data"]["task"]

    assert (task["dueDate"], task["dueTime"]) == ("2026-12-24", "07:15:00")


def test_update_requires_priority_and_status(client: TestClient, no_service_calls) -> None:
    response = client.put(f"{API_PREFIX}/task/1", json={"title": "Buy milk"})

    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["error"]["details"]}
    assert fields == {"priority", "status"}


def test_list_rejects_out_of_range_filters(client: TestClient, no_service_calls) -> None:
    response = client.get(f"{API_PREFIX}/task", params={"status": 4, "priority": -1})

    assert response.status_code == 400
    fields = {detail["field"] for detail in response.json()["error"]["details"]}
    assert fields == {"status", "priority"}


def test_missing_permission_is_forbidden(api_app, client: TestClient, no_service_calls) -> None:
    api_app.dependency_overrides[get_permission_checker] = lambda: GrantPermissionChecker(
        [PermissionRequirement("TASK", Action.READ)]
    )

    response = client.delete(f"{API_PREFIX}/task/1")

    assert response.status_code == 403
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"]["code"] == "forbidden"

    assert client.get(f"{API_PREFIX}/task/abc").status_code == 400


def test_unknown_category_is_a_business_rule_error(client: TestClient, make_category) -> None:
    deleted_category = make_category(name="Old", deleted=True)

    for category_id in (999, deleted_category):
        response = client.post(f"{API_PREFIX}/task", json={"title": "Buy milk", "idCategory": category_id})
        assert response.status_code == 400
        payload = response.json()
        _assert_envelope(payload, success=False)
        assert payload["error"] == {
            "code": "business_rule_violation",
            "message": "Category does not exist",
        }


def test_infrastructure_failures_return_generic_error(api_app, client: TestClient) -> None:
    class _BrokenExecutor:
        def execute(self, *args, **kwargs):
            raise ProcedureError(8114, "Error converting data type nvarchar to int on host db-7")

    api_app.dependency_overrides[get_procedure_executor] = lambda: _BrokenExecutor()

    response = client.get(f"{API_PREFIX}/task")

    assert response.status_code == 500
    payload = response.json()
    _assert_envelope(payload, success=False)
    assert payload["error"] == {"code": "internal_error", "message": "An unexpected error occurred"}
    assert "db-7" not in response.text


def test_health(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}
