"""API tests for the vault and generator routes."""

import pytest
from fastapi.testclient import TestClient

from passvault.api import security
from passvault.api.main import create_app
from passvault.config import Settings


@pytest.fixture
def client(tmp_path):
    settings = Settings(
        encryption_key="route-test-key",
        db_path=tmp_path / "vault.db",
        audit_log_dir=tmp_path / "audit_logs",
    )
    app = create_app(settings)
    with TestClient(app) as c:
        yield c


def _headers(owner="alice"):
    headers = {"X-Session-Token": security.get_session_token()}
    if owner is not None:
        headers["X-User-Id"] = owner
    return headers


def _payload(**overrides):
    body = {
        "title": "Gmail Account",
        "username": "me@gmail.com",
        "secret": "hunter2-Secret!",
        "url": "https://mail.google.com",
        "notes": "",
        "tags": ["Personal"],
    }
    body.update(overrides)
    return body


class TestAuth:

    def test_health_is_open(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "healthy"}

    def test_missing_token(self, client):
        resp = client.get("/api/vault/items", headers={"X-User-Id": "alice"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Unauthorized"

    def test_wrong_token(self, client):
        resp = client.get(
            "/api/vault/items",
            headers={"X-Session-Token": "nope", "X-User-Id": "alice"},
        )
        assert resp.status_code == 401

    @pytest.mark.parametrize("owner", [None, "", "   "])
    def test_missing_owner(self, client, owner):
        resp = client.get("/api/vault/items", headers=_headers(owner))
        assert resp.status_code == 401

    def test_generator_requires_token(self, client):
        resp = client.post("/api/generator/generate", json={})
        assert resp.status_code == 401

    def test_session_token_handed_out_over_http(self, client):
        resp = client.get("/api/session")
        assert resp.status_code == 200
        token = resp.json()["session_token"]

        resp = client.get(
            "/api/vault/items",
            headers={"X-Session-Token": token, "X-User-Id": "alice"},
        )
        assert resp.status_code == 200
        assert resp.json() == []

    def test_session_token_changes_per_startup(self, client, tmp_path):
        first = client.get("/api/session").json()["session_token"]
        other = create_app(Settings(
            encryption_key="route-test-key",
            db_path=tmp_path / "other.db",
            audit_log_dir=tmp_path / "audit_logs",
        ))
        with TestClient(other) as second_client:
            second = second_client.get("/api/session").json()["session_token"]
        assert first != second


class TestVaultItems:

    def test_create_returns_201_with_plaintext(self, client):
        resp = client.post("/api/vault/items", json=_payload(), headers=_headers())
        assert resp.status_code == 201
        body = resp.json()
        assert body["secret"] == "hunter2-Secret!"
        assert body["owner_id"] == "alice"
        assert body["tags"] == ["Personal"]
        assert body["id"]

    def test_password_alias_accepted(self, client):
        payload = _payload()
        payload["password"] = payload.pop("secret")
        resp = client.post("/api/vault/items", json=payload, headers=_headers())
        assert resp.status_code == 201
        assert resp.json()["secret"] == "hunter2-Secret!"

    @pytest.mark.parametrize("field_name", ["title", "username", "secret"])
    def test_missing_required_field(self, client, field_name):
        payload = _payload()
        del payload[field_name]
        resp = client.post("/api/vault/items", json=payload, headers=_headers())
        assert resp.status_code == 400
        assert resp.json()["detail"] == f"{field_name} is required"

    def test_blank_username(self, client):
        resp = client.post("/api/vault/items", json=_payload(username="  "), headers=_headers())
        assert resp.status_code == 400

    @pytest.mark.parametrize("field_name", ["title", "username", "secret"])
    def test_null_required_field(self, client, field_name):
        resp = client.post("/api/vault/items", json=_payload(**{field_name: None}),
                           headers=_headers())
        assert resp.status_code == 400
        assert resp.json()["detail"] == f"{field_name} is required"

    def test_null_optional_fields(self, client):
        resp = client.post("/api/vault/items", json=_payload(tags=None, url=None, notes=None),
                           headers=_headers())
        assert resp.status_code == 201
        body = resp.json()
        assert body["tags"] == []
        assert body["url"] == ""
        assert body["notes"] == ""

    def test_list_and_search(self, client):
        client.post("/api/vault/items", json=_payload(title="GitHub", tags=["Work"], url=""),
                    headers=_headers())
        client.post("/api/vault/items", json=_payload(title="Netflix", tags=["Fun"], url=""),
                    headers=_headers())

        resp = client.get("/api/vault/items", headers=_headers())
        assert resp.status_code == 200
        assert [i["title"] for i in resp.json()] == ["Netflix", "GitHub"]

        resp = client.get("/api/vault/items", params={"search": "WO"}, headers=_headers())
        assert [i["title"] for i in resp.json()] == ["GitHub"]

        resp = client.get("/api/vault/items", params={"search": ""}, headers=_headers())
        assert len(resp.json()) == 2

    def test_owners_isolated(self, client):
        created = client.post("/api/vault/items", json=_payload(), headers=_headers("alice")).json()

        assert client.get("/api/vault/items", headers=_headers("bob")).json() == []

        resp = client.get(f"/api/vault/items/{created['id']}", headers=_headers("bob"))
        assert resp.status_code == 404

        resp = client.put(f"/api/vault/items/{created['id']}", json=_payload(title="x"),
                          headers=_headers("bob"))
        assert resp.status_code == 404

        resp = client.delete(f"/api/vault/items/{created['id']}", headers=_headers("bob"))
        assert resp.status_code == 404

        resp = client.get(f"/api/vault/items/{created['id']}", headers=_headers("alice"))
        assert resp.status_code == 200
        assert resp.json()["title"] == "Gmail Account"

    def test_update(self, client):
        created = client.post("/api/vault/items", json=_payload(), headers=_headers()).json()
        resp = client.put(
            f"/api/vault/items/{created['id']}",
            json=_payload(secret="n3w-Secret", notes="rotated"),
            headers=_headers(),
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["secret"] == "n3w-Secret"
        assert body["notes"] == "rotated"
        assert body["created_at"] == created["created_at"]

        fetched = client.get(f"/api/vault/items/{created['id']}", headers=_headers()).json()
        assert fetched["secret"] == "n3w-Secret"

    def test_update_validation(self, client):
        created = client.post("/api/vault/items", json=_payload(), headers=_headers()).json()
        resp = client.put(f"/api/vault/items/{created['id']}", json=_payload(title=""),
                          headers=_headers())
        assert resp.status_code == 400

    def test_delete(self, client):
        created = client.post("/api/vault/items", json=_payload(), headers=_headers()).json()
        resp = client.delete(f"/api/vault/items/{created['id']}", headers=_headers())
        assert resp.status_code == 200
        assert resp.json() == {"message": "Vault item deleted successfully"}

        resp = client.get(f"/api/vault/items/{created['id']}", headers=_headers())
        assert resp.status_code == 404
        assert resp.json()["detail"] == "item not found"

    def test_unknown_item(self, client):
        resp = client.delete("/api/vault/items/missing", headers=_headers())
        assert resp.status_code == 404


class TestGenerator:

    def test_generate_defaults(self, client):
        resp = client.post("/api/generator/generate", json={}, headers=_headers(None))
        assert resp.status_code == 200
        body = resp.json()
        assert len(body["credential"]) == 16
        assert set(body["strength"]) == {"score", "feedback", "category", "label"}

    def test_generate_options(self, client):
        resp = client.post(
            "/api/generator/generate",
            json={"length": 30, "use_upper": False, "use_symbols": False},
            headers=_headers(None),
        )
        credential = resp.json()["credential"]
        assert len(credential) == 30
        assert credential == credential.lower()
        assert credential.isalnum()

    def test_generate_no_classes(self, client):
        resp = client.post(
            "/api/generator/generate",
            json={"use_upper": False, "use_lower": False, "use_digits": False, "use_symbols": False},
            headers=_headers(None),
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "At least one character type must be selected"

    def test_rejected_generation_is_audited(self, client, tmp_path):
        client.post(
            "/api/generator/generate",
            json={"use_upper": False, "use_lower": False, "use_digits": False, "use_symbols": False},
            headers=_headers(None),
        )
        log_files = list((tmp_path / "audit_logs").glob("audit_*.log"))
        content = "".join(f.read_text(encoding="utf-8") for f in log_files)
        assert "Credential generation rejected" in content
        assert "vault.error" in content

    @pytest.mark.parametrize("length", [0, 257])
    def test_generate_length_bounds(self, client, length):
        resp = client.post("/api/generator/generate", json={"length": length}, headers=_headers(None))
        assert resp.status_code == 422

    def test_strength(self, client):
        resp = client.post("/api/generator/strength", json={"credential": "password"},
                           headers=_headers(None))
        assert resp.status_code == 200
        assert resp.json() == {
            "score": 2,
            "feedback": ["add uppercase letters", "add numbers", "add special characters"],
            "category": "VeryWeak",
            "label": "Very Weak",
        }

    def test_generated_credential_can_be_stored(self, client):
        credential = client.post("/api/generator/generate", json={"length": 20},
                                 headers=_headers(None)).json()["credential"]
        resp = client.post("/api/vault/items", json=_payload(secret=credential), headers=_headers())
        assert resp.status_code == 201
        fetched = client.get(f"/api/vault/items/{resp.json()['id']}", headers=_headers()).json()
        assert fetched["secret"] == credential


class TestLifespan:

    def test_store_released_on_shutdown(self, tmp_path):
        settings = Settings(
            encryption_key="k",
            db_path=tmp_path / "vault.db",
            audit_log_dir=tmp_path / "audit_logs",
        )
        app = create_app(settings)
        with TestClient(app):
            assert app.state.vault_store is not None
            assert app.state.vault_store.database.is_initialized
        assert app.state.vault_store is None
        assert (tmp_path / "vault.db").exists()
