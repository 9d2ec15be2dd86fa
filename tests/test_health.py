def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_unknown_token_is_unauthorized(client):
    r = client.get("/list/all", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid token"}


def test_missing_credentials_is_unauthorized(client):
    r = client.get("/list/all")
    assert r.status_code == 401
    assert "error" in r.json()
