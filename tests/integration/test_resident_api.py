"""Integration tests for the resident endpoints.

Tests the CRUD routes with real database and HTTP endpoints:
1. Create → read → update → delete
2. Paging and filtering through flat query parameters
3. Error responses (not found, malformed filter, validation, constraints)
4. Audit entries for mutations
"""

import pytest
from fastapi.testclient import TestClient

pytestmark = pytest.mark.integration

RESIDENTS = "/api/residents"


def _create(client: TestClient, **fields) -> dict:
    response = client.post(f"{RESIDENTS}/", json=fields)
    assert response.status_code == 201, response.text
    return response.json()


def _seed(client: TestClient) -> list[dict]:
    return [
        _create(client, name="Alice", room="A1", age=34),
        _create(client, name="Bob", room="A1", age=71),
        _create(client, name="Carol", room="B2", age=52),
        _create(client, name="Dave", room="B2", age=19),
        _create(client, name="Erin", room="C3", age=88),
    ]


def test_health_check(client: TestClient):
    """Test the root endpoint reports the service as running."""
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "running"


def test_resident_lifecycle(client: TestClient, fake_audit_sink):
    """Test create → get → update → delete through the HTTP API."""
    # Step 1: Create
    created = _create(client, name="Alice", room="A1", age=34, phone="555-0101")
    resident_id = created["id"]
    assert resident_id is not None
    assert created["name"] == "Alice"

    # Step 2: Read back
    response = client.get(f"{RESIDENTS}/{resident_id}")
    assert response.status_code == 200
    assert response.json()["room"] == "A1"
    assert response.json()["created_at"] is not None

    # Step 3: Partial update
    response = client.put(f"{RESIDENTS}/{resident_id}", json={"room": "B2"})
    assert response.status_code == 200
    updated = response.json()
    assert updated["room"] == "B2"
    assert updated["name"] == "Alice"
    assert updated["age"] == 34

    # Step 4: Delete, twice
    response = client.delete(f"{RESIDENTS}/{resident_id}")
    assert response.status_code == 200
    assert response.json() is True

    response = client.delete(f"{RESIDENTS}/{resident_id}")
    assert response.status_code == 200
    assert response.json() is False

    # Step 5: Gone
    response = client.get(f"{RESIDENTS}/{resident_id}")
    assert response.status_code == 404

    assert fake_audit_sink.actions == [
        "Create Resident",
        "Update Resident",
        "Delete Resident",
        "Delete Resident",
    ]


def test_list_defaults(client: TestClient):
    """Test GET / returns the first page with metadata."""
    _seed(client)

    response = client.get(f"{RESIDENTS}/")

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 5
    assert body["pages"] == 1
    assert body["page"] == 0
    assert body["pageSize"] == 10
    assert len(body["data"]) == 5


def test_list_with_flat_filter(client: TestClient):
    """Test where/order/page parameters on the list endpoint."""
    _seed(client)

    response = client.get(
        f"{RESIDENTS}/",
        params={"where.age.gte": "30", "order": "-age", "pageSize": "2", "page": "1"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 4
    assert body["pages"] == 2
    assert body["page"] == 1
    assert [doc["name"] for doc in body["data"]] == ["Carol", "Alice"]


def test_list_with_projection(client: TestClient):
    """Test select returns only the selected fields populated."""
    _seed(client)

    response = client.get(
        f"{RESIDENTS}/", params={"select": "name", "where.room": "A1", "order": "name"}
    )

    body = response.json()
    assert [doc["name"] for doc in body["data"]] == ["Alice", "Bob"]
    assert all(doc["room"] is None for doc in body["data"])


def test_list_with_in_operator(client: TestClient):
    """Test set membership through comma-separated values."""
    _seed(client)

    response = client.get(f"{RESIDENTS}/", params={"where.room.in": "A1,C3"})

    assert response.json()["total"] == 3


def test_list_all(client: TestClient):
    """Test GET /all is unbounded."""
    for i in range(12):
        _create(client, name=f"Resident {i}", room="D4")

    response = client.get(f"{RESIDENTS}/all")

    assert response.status_code == 200
    assert len(response.json()) == 12


def test_find_one(client: TestClient):
    """Test GET /findOne applies the filter."""
    _seed(client)

    response = client.get(f"{RESIDENTS}/findOne", params={"where.room": "B2", "order": "age"})

    assert response.status_code == 200
    assert response.json()["name"] == "Dave"


def test_find_one_without_match(client: TestClient):
    """Test GET /findOne reports absence as 404."""
    response = client.get(f"{RESIDENTS}/findOne", params={"where.room": "Z9"})

    assert response.status_code == 404
    assert response.json()["error_code"] == "ENTITY_NOT_FOUND"


def test_get_by_room(client: TestClient):
    """Test the resident-specific room listing."""
    _seed(client)

    response = client.get(f"{RESIDENTS}/room/A1")

    assert response.status_code == 200
    assert [doc["name"] for doc in response.json()] == ["Alice", "Bob"]


def test_get_absent_resident(client: TestClient):
    """Test 404 with the standard error body."""
    response = client.get(f"{RESIDENTS}/999")

    assert response.status_code == 404
    body = response.json()
    assert body["error_code"] == "ENTITY_NOT_FOUND"
    assert body["detail"] == "Not found Resident with id 999"


def test_update_absent_resident(client: TestClient, fake_audit_sink):
    """Test updating an absent id is 404 and still audited."""
    response = client.put(f"{RESIDENTS}/999", json={"room": "B2"})

    assert response.status_code == 404
    assert fake_audit_sink.actions == ["Update Resident"]


@pytest.mark.parametrize(
    "params",
    [
        {"where.nickname": "Al"},
        {"where.age": "old"},
        {"where.age.like": "3"},
        {"order": "nickname"},
        {"filter": "{broken"},
        {"pageSize": "0"},
        {"pageSize": "1001"},
        {"page": str(10**19)},
        {"select": ""},
    ],
)
def test_malformed_filter(client: TestClient, params):
    """Test malformed filters are 400, never match-all."""
    response = client.get(f"{RESIDENTS}/", params=params)

    assert response.status_code == 400
    assert response.json()["error_code"] == "MALFORMED_FILTER"


def test_filter_on_unset_optional_field(client: TestClient):
    """Test a JSON null matches residents whose age is unset."""
    _seed(client)
    _create(client, name="Frank", room="C3")

    response = client.get(f"{RESIDENTS}/", params={"filter": '{"where": {"age": null}}'})

    assert response.status_code == 200
    assert [doc["name"] for doc in response.json()["data"]] == ["Frank"]


def test_update_null_on_required_field(client: TestClient):
    """Test clearing a required field is a validation error and stores nothing."""
    created = _create(client, name="Alice", room="A1", age=34)

    response = client.put(f"{RESIDENTS}/{created['id']}", json={"name": None})

    assert response.status_code == 422
    assert response.json()["error_code"] == "VALIDATION_ERROR"
    assert client.get(f"{RESIDENTS}/{created['id']}").json()["name"] == "Alice"


def test_update_clears_optional_field(client: TestClient):
    """Test an Optional field can be cleared with null."""
    created = _create(client, name="Alice", room="A1", age=34)

    response = client.put(f"{RESIDENTS}/{created['id']}", json={"age": None})

    assert response.status_code == 200
    assert response.json()["age"] is None
    assert client.get(f"{RESIDENTS}/{created['id']}").json()["age"] is None


def test_create_missing_required_field(client: TestClient):
    """Test body validation errors are 422."""
    response = client.post(f"{RESIDENTS}/", json={"name": "Alice"})

    assert response.status_code == 422
    body = response.json()
    assert body["error_code"] == "VALIDATION_ERROR"
    assert any(error["field"] == "body.room" for error in body["errors"])


def test_create_invalid_entity(client: TestClient):
    """Test entity invariants are 400."""
    response = client.post(f"{RESIDENTS}/", json={"name": "  ", "room": "A1"})

    assert response.status_code == 400
    assert response.json()["error_code"] == "INVALID_ENTITY_STATE"


def test_update_breaking_invariant(client: TestClient):
    """Test an update producing an invalid entity is rejected and not stored."""
    created = _create(client, name="Alice", room="A1", age=34)

    response = client.put(f"{RESIDENTS}/{created['id']}", json={"age": -1})

    assert response.status_code == 400
    assert client.get(f"{RESIDENTS}/{created['id']}").json()["age"] == 34


def test_duplicate_phone_is_conflict(client: TestClient, fake_audit_sink):
    """Test storage constraint violations surface as 409."""
    _create(client, name="Alice", room="A1", phone="555-0101")

    response = client.post(f"{RESIDENTS}/", json={"name": "Bob", "room": "A1", "phone": "555-0101"})

    assert response.status_code == 409
    assert response.json()["error_code"] == "CONSTRAINT_VIOLATION"
    assert fake_audit_sink.actions == ["Create Resident", "Create Resident"]


def test_invalid_path_identifier(client: TestClient):
    """Test a non-integer id is a validation error."""
    response = client.get(f"{RESIDENTS}/abc")

    assert response.status_code == 422


def test_reads_are_not_audited(client: TestClient, fake_audit_sink):
    """Test only mutations produce audit entries."""
    client.get(f"{RESIDENTS}/")
    client.get(f"{RESIDENTS}/all")
    client.get(f"{RESIDENTS}/1")

    assert fake_audit_sink.entries == []
