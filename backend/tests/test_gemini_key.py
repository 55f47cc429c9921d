def test_key_not_set(user_client):
    resp = user_client.get("/api/gemini-key")
    assert resp.status_code == 404
    assert resp.json() == {"message": "API key not found"}


def test_save_then_replace_key(user_client):
    resp = user_client.post("/api/gemini-key", json={"gemini_key": "AIza-first"})
    assert resp.status_code == 201
    assert resp.json()["gemini_key"] == "AIza-first"

    resp = user_client.post("/api/gemini-key", json={"gemini_key": "AIza-second"})
    assert resp.status_code == 200

    resp = user_client.get("/api/gemini-key")
    assert resp.status_code == 200
    assert resp.json()["gemini_key"] == "AIza-second"


def test_empty_key_rejected(user_client):
    resp = user_client.post("/api/gemini-key", json={"gemini_key": ""})
    assert resp.status_code == 400


def test_key_requires_login(client):
    assert client.get("/api/gemini-key").status_code == 401


def test_validate_well_formed_key(user_client, gemini_api):
    resp = user_client.post("/api/gemini-key/validate", json={"gemini_key": "AIzaSyValid"})
    assert resp.status_code == 200
    assert resp.json()["valid"] is True
    assert len(gemini_api.requests) == 1
    assert gemini_api.requests[0].url.params["key"] == "AIzaSyValid"


def test_validate_rejects_wrong_prefix_without_network(user_client, gemini_api):
    resp = user_client.post("/api/gemini-key/validate", json={"gemini_key": "sk-not-google"})
    assert resp.status_code == 200
    assert resp.json()["valid"] is False
    assert gemini_api.requests == []


def test_validate_rejected_by_gemini(user_client, gemini_api):
    gemini_api.error = (400, "API key not valid. Please pass a valid API key.")
    resp = user_client.post("/api/gemini-key/validate", json={"gemini_key": "AIzaSyRevoked"})
    assert resp.json() == {"valid": False, "reason": "Invalid API key"}


def test_validate_does_not_store_key(user_client):
    user_client.post("/api/gemini-key/validate", json={"gemini_key": "AIzaSyValid"})
    assert user_client.get("/api/gemini-key").status_code == 404
