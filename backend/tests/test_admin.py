import pytest

from newsflow.storage import StorageError


@pytest.fixture
def bob(make_client, signup):
    client = make_client()
    client.user = signup(client, "bob")
    return client


def test_admin_routes_require_admin(user_client):
    for path in ("/api/admin/users", "/api/admin/saved-articles", "/api/admin/logs"):
        resp = user_client.get(path)
        assert resp.status_code == 403
        assert resp.json() == {"message": "Forbidden - Admin access required"}


def test_admin_routes_require_login(make_client):
    assert make_client().get("/api/admin/users").status_code == 401


def test_list_users(admin_client, bob):
    resp = admin_client.get("/api/admin/users")
    assert resp.status_code == 200
    usernames = {u["username"] for u in resp.json()}
    assert usernames == {"root_admin", "bob"}
    assert all("password" not in u for u in resp.json())


def test_list_all_saved_articles(admin_client, bob):
    bob.post("/api/saved-articles", json={"article_id": "a1", "title": "One", "url": "https://a.example.com/1"})
    admin_client.post("/api/saved-articles", json={"article_id": "a2", "title": "Two", "url": "https://a.example.com/2"})
    resp = admin_client.get("/api/admin/saved-articles")
    assert sorted(a["article_id"] for a in resp.json()) == ["a1", "a2"]


def test_grant_and_revoke_admin_are_logged(admin_client, bob):
    target = bob.user["id"]
    resp = admin_client.put(f"/api/admin/users/{target}/admin-status", json={"isAdmin": True})
    assert resp.status_code == 200
    assert resp.json()["is_admin"] is True
    assert bob.get("/api/admin/users").status_code == 200

    resp = admin_client.put(f"/api/admin/users/{target}/admin-status", json={"isAdmin": False})
    assert resp.json()["is_admin"] is False
    assert bob.get("/api/admin/users").status_code == 403

    logs = admin_client.get("/api/admin/logs").json()
    assert [log["action"] for log in logs] == ["REVOKE_ADMIN", "GRANT_ADMIN"]
    assert all(log["target_type"] == "USER" and log["target_id"] == str(target) for log in logs)
    assert all(log["admin_id"] == admin_client.user["id"] for log in logs)


def test_cannot_change_own_admin_status(admin_client):
    me = admin_client.user["id"]
    resp = admin_client.put(f"/api/admin/users/{me}/admin-status", json={"isAdmin": False})
    assert resp.status_code == 400
    assert resp.json() == {"message": "Cannot change your own admin status"}
    assert admin_client.get("/api/admin/logs").json() == []


def test_admin_status_must_be_boolean(admin_client, bob):
    resp = admin_client.put(f"/api/admin/users/{bob.user['id']}/admin-status", json={"isAdmin": "yes"})
    assert resp.status_code == 400


def test_admin_status_unknown_user(admin_client):
    resp = admin_client.put("/api/admin/users/9999/admin-status", json={"isAdmin": True})
    assert resp.status_code == 404
    assert resp.json() == {"message": "User not found"}
    assert admin_client.get("/api/admin/logs").json() == []


def test_delete_user_cascades(admin_client, bob, storage):
    target = bob.user["id"]
    bob.put("/api/interests", json={"categories": ["science"]})
    bob.post("/api/gemini-key", json={"gemini_key": "AIza-bob"})
    bob.post("/api/saved-articles", json={"article_id": "b1", "title": "Bob's", "url": "https://b.example.com/1"})

    resp = admin_client.delete(f"/api/admin/users/{target}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "User deleted successfully"}

    assert storage.get_user(target) is None
    assert storage.get_interests(target) is None
    assert storage.get_api_key(target) is None
    assert storage.get_saved_articles(target) == []
    assert bob.get("/api/user").status_code == 401

    logs = admin_client.get("/api/admin/logs").json()
    assert len(logs) == 1
    assert logs[0]["action"] == "DELETE_USER"
    assert logs[0]["target_id"] == str(target)
    assert "bob" in logs[0]["details"]


def test_cannot_delete_self(admin_client, storage):
    me = admin_client.user["id"]
    resp = admin_client.delete(f"/api/admin/users/{me}")
    assert resp.status_code == 400
    assert resp.json() == {"message": "Cannot delete your own account"}
    assert storage.get_user(me) is not None


def test_delete_unknown_user(admin_client):
    resp = admin_client.delete("/api/admin/users/9999")
    assert resp.status_code == 404
    assert admin_client.get("/api/admin/logs").json() == []


def test_create_log_requires_fields(admin_client):
    resp = admin_client.post("/api/admin/logs", json={"action": "NOTE", "target_type": "USER"})
    assert resp.status_code == 400
    assert resp.json() == {"message": "action, target_type, and target_id are required"}


def test_create_and_read_logs_newest_first(admin_client):
    first = admin_client.post("/api/admin/logs", json={"action": "NOTE", "target_type": "USER", "target_id": 7})
    assert first.status_code == 201
    assert first.json()["target_id"] == "7"
    assert first.json()["admin_id"] == admin_client.user["id"]

    admin_client.post(
        "/api/admin/logs",
        json={"action": "REVIEW", "target_type": "ARTICLE", "target_id": "a1", "details": {"flag": "spam"}},
    )
    logs = admin_client.get("/api/admin/logs").json()
    assert [log["action"] for log in logs] == ["REVIEW", "NOTE"]
    assert logs[0]["details"] == {"flag": "spam"}


def test_non_admin_cannot_mutate(user_client, bob, storage):
    target = bob.user["id"]

    resp = user_client.delete(f"/api/admin/users/{target}")
    assert resp.status_code == 403
    assert resp.json() == {"message": "Forbidden - Admin access required"}

    assert user_client.put(f"/api/admin/users/{target}/admin-status", json={"isAdmin": True}).status_code == 403
    assert user_client.put(f"/api/admin/users/{user_client.user['id']}/admin-status", json={"isAdmin": True}).status_code == 403
    resp = user_client.post("/api/admin/logs", json={"action": "NOTE", "target_type": "USER", "target_id": target})
    assert resp.status_code == 403

    assert storage.get_user(target) is not None
    assert storage.get_user(target).is_admin is False
    assert storage.get_user(user_client.user["id"]).is_admin is False
    assert storage.get_admin_logs() == []


def test_non_admin_delete_of_unknown_id_is_forbidden(user_client):
    assert user_client.delete("/api/admin/users/5").status_code == 403


@pytest.mark.parametrize("is_admin", [True, False])
def test_self_admin_status_rejected_for_any_payload(admin_client, storage, is_admin):
    me = admin_client.user["id"]
    resp = admin_client.put(f"/api/admin/users/{me}/admin-status", json={"isAdmin": is_admin})
    assert resp.status_code == 400
    assert storage.get_user(me).is_admin is True
    assert storage.get_admin_logs() == []


def _fail_log_write(monkeypatch, storage):
    def broken(log):
        raise StorageError("log table unavailable")
    monkeypatch.setattr(storage, "_new_admin_log", broken)


def test_delete_is_undone_when_log_write_fails(admin_client, bob, storage, monkeypatch):
    target = bob.user["id"]
    bob.put("/api/interests", json={"categories": ["science"]})
    _fail_log_write(monkeypatch, storage)

    resp = admin_client.delete(f"/api/admin/users/{target}")
    assert resp.status_code == 500
    assert storage.get_user(target) is not None
    assert storage.get_interests(target) is not None
    assert storage.get_admin_logs() == []


def test_admin_status_is_undone_when_log_write_fails(admin_client, bob, storage, monkeypatch):
    target = bob.user["id"]
    _fail_log_write(monkeypatch, storage)

    resp = admin_client.put(f"/api/admin/users/{target}/admin-status", json={"isAdmin": True})
    assert resp.status_code == 500
    assert storage.get_user(target).is_admin is False
    assert storage.get_admin_logs() == []
