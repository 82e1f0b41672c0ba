"""User route tests — filtering, search and CRUD through the FastAPI app.

Tests cover:
    - GET /users: no criteria, prefix criteria, AND semantics, whitespace criteria
    - GET /users/search: OR across first/last name, blank query
    - POST: 201, field validation (400 with field), duplicate email (409)
    - GET/PUT/DELETE by id, including 404 and email conflicts on update
    - Request body schema errors -> 400 VALIDATION_ERROR envelope
"""

import logging

USERS = "/api/v1/users"


def _body(**overrides) -> dict:
    body = {
        "first_name": "Bob",
        "last_name": "Stone",
        "email": "bob.stone@example.com",
        "phone": "5553334444",
    }
    body.update(overrides)
    return body


def _names(response) -> list[str]:
    return [u["first_name"] for u in response.json()["users"]]


# --- filtering ---------------------------------------------------------------

async def test_list_without_criteria_returns_everyone(client, seeded_users):
    response = await client.get(USERS)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 4
    assert _names(response) == ["John", "Jane", "Jonathan", "Alice"]


async def test_first_name_prefix(client, seeded_users):
    response = await client.get(USERS, params={"first_name": "jo"})
    assert _names(response) == ["John", "Jonathan"]


async def test_criteria_combine_with_and(client, seeded_users):
    response = await client.get(
        USERS, params={"first_name": "JO", "phone": "555"},
    )
    assert _names(response) == ["John"]


async def test_email_matches_substring(client, seeded_users):
    response = await client.get(USERS, params={"email": "EXAMPLE.COM"})
    assert _names(response) == ["John", "Jane"]


async def test_whitespace_criteria_impose_no_constraint(client, seeded_users):
    response = await client.get(
        USERS, params={"first_name": "   ", "last_name": ""},
    )
    assert response.json()["total"] == 4


async def test_no_match_is_empty_list(client, seeded_users):
    response = await client.get(USERS, params={"last_name": "zz"})
    assert response.status_code == 200
    assert response.json() == {"users": [], "total": 0}


# --- search ------------------------------------------------------------------

async def test_search_matches_first_or_last_name(client, seeded_users):
    # "Jonathan" by first name, "Wonder" by last name
    response = await client.get(f"{USERS}/search", params={"q": "ON"})
    assert _names(response) == ["Jonathan", "Alice"]


async def test_search_blank_query_returns_everyone(client, seeded_users):
    response = await client.get(f"{USERS}/search")
    assert response.json()["total"] == 4


# --- create ------------------------------------------------------------------

async def test_create_user(client):
    response = await client.post(USERS, json=_body(first_name="  Bob  "))
    assert response.status_code == 201
    data = response.json()
    assert data["first_name"] == "Bob"
    assert data["full_name"] == "Bob Stone"
    assert data["id"] >= 1

    fetched = await client.get(f"{USERS}/{data['id']}")
    assert fetched.json()["email"] == "bob.stone@example.com"


async def test_create_rejects_invalid_email(client):
    response = await client.post(USERS, json=_body(email="not-an-email"))
    assert response.status_code == 400
    error = response.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert error["field"] == "email"


async def test_create_rejects_blank_required_field(client):
    response = await client.post(USERS, json=_body(last_name="   "))
    assert response.status_code == 400
    assert response.json()["error"]["field"] == "last_name"


async def test_create_rejects_missing_field(client):
    body = _body()
    del body["phone"]
    response = await client.post(USERS, json=body)
    assert response.status_code == 400
    details = response.json()["error"]["details"]
    assert any(d["field"].endswith("phone") for d in details)


async def test_create_duplicate_email_conflicts(client, seeded_users):
    response = await client.post(USERS, json=_body(email="john.doe@example.com"))
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "DUPLICATE_EMAIL"


# --- read / update / delete --------------------------------------------------

async def test_get_missing_user_is_404(client):
    response = await client.get(f"{USERS}/999")
    assert response.status_code == 404
    assert response.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_update_user(client, seeded_users):
    jane = seeded_users[1]
    response = await client.put(
        f"{USERS}/{jane.id}",
        json=_body(first_name="Janet", email="jane.smith@example.com", dob="1991-07-04"),
    )
    assert response.status_code == 200
    data = response.json()
    assert data["first_name"] == "Janet"
    assert data["dob"] == "1991-07-04"


async def test_update_to_other_users_email_conflicts(client, seeded_users):
    jane = seeded_users[1]
    response = await client.put(
        f"{USERS}/{jane.id}", json=_body(email="john.doe@example.com"),
    )
    assert response.status_code == 409


async def test_email_conflict_logged_with_user_and_email(client, seeded_users, caplog):
    jane = seeded_users[1]
    with caplog.at_level(logging.WARNING, logger="usermanagement.api.error_handlers"):
        response = await client.put(
            f"{USERS}/{jane.id}", json=_body(email="john.doe@example.com"),
        )

    error = response.json()["error"]
    assert error["code"] == "DUPLICATE_EMAIL"
    assert error["field"] == "email"
    assert error["context"]["user_id"] == jane.id
    assert "john.doe@example.com" not in response.text

    conflicts = [r for r in caplog.records if getattr(r, "email", None)]
    assert len(conflicts) == 1
    assert conflicts[0].email == "john.doe@example.com"
    assert conflicts[0].user_id == jane.id


async def test_update_missing_user_is_404(client):
    response = await client.put(f"{USERS}/999", json=_body())
    assert response.status_code == 404


async def test_update_rejects_invalid_dob(client, seeded_users):
    response = await client.put(
        f"{USERS}/{seeded_users[0].id}", json=_body(dob="2023-02-29"),
    )
    assert response.status_code == 400
    assert response.json()["error"]["field"] == "dob"


async def test_delete_user(client, seeded_users):
    user_id = seeded_users[2].id
    response = await client.delete(f"{USERS}/{user_id}")
    assert response.status_code == 204

    assert (await client.get(f"{USERS}/{user_id}")).status_code == 404
    assert (await client.delete(f"{USERS}/{user_id}")).status_code == 404
