import pytest
from fastapi.testclient import TestClient

from auth import dependencies as auth_dependencies
from conftest import word_row
from core.errors import BackendFault
from main import app

ACTIVE_USER = {"id": 7, "activated": True}


@pytest.fixture
def client():
    # No context manager: the lifespan (DB pool) is not started.
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def signed_in(client):
    async def current_user():
        return ACTIVE_USER

    app.dependency_overrides[auth_dependencies.get_current_user] = current_user
    return client


def test_healthcheck(client):
    response = client.get("/v1/healthcheck")
    assert response.status_code == 200
    assert response.json()["status"] == "available"


def test_words_require_bearer_token(client):
    response = client.get("/v1/words")
    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"


def test_malformed_bearer_token_is_unauthorized(client, fake_db):
    response = client.get("/v1/words", headers={"Authorization": "Bearer short"})
    assert response.status_code == 401
    assert fake_db.calls == []


def test_inactive_user_is_forbidden(client):
    async def current_user():
        return {"id": 7, "activated": False}

    app.dependency_overrides[auth_dependencies.get_current_user] = current_user
    assert client.get("/v1/words").status_code == 403


def test_create_word_sets_location(signed_in, fake_db, created_at):
    fake_db.queue({"id": 21, "created_at": created_at, "version": 1})

    response = signed_in.post("/v1/words", json={"text": "lucid", "difficulty": "medium", "user_id": 7})

    assert response.status_code == 201
    assert response.headers["Location"] == "/v1/words/21"
    body = response.json()["word"]
    assert body["related_words"] == []
    assert "version" not in body


def test_invalid_word_is_422_with_field_map(signed_in, fake_db):
    response = signed_in.post("/v1/words", json={"text": "", "difficulty": "meh", "user_id": 0})
    assert response.status_code == 422
    assert set(response.json()["detail"]) == {"text", "difficulty", "user_id"}


def test_missing_word_is_404(signed_in, fake_db):
    fake_db.queue(None)
    assert signed_in.get("/v1/words/5").status_code == 404


def test_non_numeric_word_id_is_404_without_a_lookup(signed_in, fake_db):
    assert signed_in.get("/v1/words/abc").status_code == 404
    assert signed_in.patch("/v1/words/abc", json={"difficulty": "hard"}).status_code == 404
    assert signed_in.delete("/v1/words/abc").status_code == 404
    assert fake_db.calls == []


def test_edit_conflict_is_409(signed_in, fake_db):
    fake_db.queue(word_row(id=5), None)
    response = signed_in.patch("/v1/words/5", json={"difficulty": "hard"})
    assert response.status_code == 409
    assert "edit conflict" in response.json()["detail"]


def test_delete_missing_word_is_404(signed_in, fake_db):
    fake_db.queue(0)
    assert signed_in.delete("/v1/words/5").status_code == 404


def test_list_words_returns_metadata(signed_in, fake_db):
    fake_db.queue([dict(word_row(id=1), total_records=1)])

    response = signed_in.get("/v1/words", params={"difficulty": "Medium", "sort": "-text"})

    assert response.status_code == 200
    body = response.json()
    assert [w["text"] for w in body["words"]] == ["lucid"]
    assert body["metadata"] == {
        "current_page": 1,
        "page_size": 20,
        "first_page": 1,
        "last_page": 1,
        "total_records": 1,
    }


def test_long_text_filter_is_searched_not_rejected(signed_in, fake_db):
    fake_db.queue([])
    text = "a" * 600

    response = signed_in.get("/v1/words", params={"text": text})

    assert response.status_code == 200
    assert response.json()["words"] == []
    assert text in fake_db.last_args


def test_bad_page_values_share_one_field_map(signed_in, fake_db):
    response = signed_in.get("/v1/words", params={"page": "x", "page_size": "0"})
    assert response.status_code == 422
    assert set(response.json()["detail"]) == {"page", "page_size"}
    assert fake_db.calls == []


def test_bad_sort_never_reaches_the_database(signed_in, fake_db):
    response = signed_in.get("/v1/words", params={"sort": "password_hash"})
    assert response.status_code == 422
    assert response.json()["detail"] == {"sort": "invalid sort value"}
    assert fake_db.calls == []


def test_backend_fault_is_opaque(signed_in, fake_db):
    fake_db.queue(BackendFault())
    response = signed_in.get("/v1/words/5")
    assert response.status_code == 500
    assert response.json() == {"detail": "the server encountered a problem and could not process your request"}


def test_activation_with_bad_token_is_422(client, fake_db):
    response = client.put("/v1/users/activated", json={"token": "nope"})
    assert response.status_code == 422
    assert response.json()["detail"] == {"token": "must be 26 bytes long"}
