from leadboard.crypto import API_KEY_PREFIX
from leadboard.db import APIKey


def test_get_key_before_creating_is_not_found(client, seed, alice):
    r = client.get("/key/", headers=seed.headers(alice.user_id))
    assert r.status_code == 404
    assert r.json() == {"error": "api key not found"}


def test_create_key_is_idempotent_and_stored_encrypted(client, database, seed, alice):
    headers = seed.headers(alice.user_id)
    first = client.get("/key/api", headers=headers).json()["data"]["value"]
    second = client.get("/key/api", headers=headers).json()["data"]["value"]
    assert first == second
    assert first.startswith(API_KEY_PREFIX)

    shown = client.get("/key/", headers=headers).json()["data"]
    assert shown["key"] == first
    assert shown["name"] == "API"

    with database.transaction("read") as session:
        stored = session.query(APIKey).filter(APIKey.user_id == alice.user_id).one()
        assert first not in stored.value
        assert stored.hash != first


def test_bulk_prospect_appends_in_order(client, seed, alice):
    key = client.get("/key/api", headers=seed.headers(alice.user_id)).json()["data"]["value"]
    lst = seed.new_list(alice.user_id)
    existing = seed.card(lst, 3.0)

    r = client.post(
        "/api/bulk-prospect",
        json={
            "list_id": lst,
            "prospects": [
                {"name": "Ada", "profile_url": "https://example.com/ada"},
                {"name": "Grace", "ai_summary": "compilers"},
            ],
        },
        headers={"X-API-Key": key},
    )
    assert r.status_code == 200, r.text
    ada, grace = r.json()["data"]["ids"]
    assert seed.orders(lst) == [(existing, 3.0), (ada, 4.0), (grace, 5.0)]

    detail = client.get(f"/card/{ada}", headers=seed.headers(alice.user_id)).json()["data"]
    assert detail["profile_url"] == "https://example.com/ada"


def test_bulk_prospect_rejects_bad_keys(client, seed, alice):
    lst = seed.new_list(alice.user_id)
    body = {"list_id": lst, "prospects": [{"name": "Ada"}]}

    r = client.post("/api/bulk-prospect", json=body)
    assert r.status_code == 401
    assert r.json() == {"error": "API key required in 'X-API-Key' header"}

    r = client.post("/api/bulk-prospect", json=body, headers={"X-API-Key": API_KEY_PREFIX + "nope"})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid API key"}
    assert seed.orders(lst) == []


def test_bulk_prospect_into_foreign_list_is_not_found(client, seed, alice, bob):
    key = client.get("/key/api", headers=seed.headers(alice.user_id)).json()["data"]["value"]
    theirs = seed.new_list(bob.user_id)
    r = client.post(
        "/api/bulk-prospect",
        json={"list_id": theirs, "prospects": [{"name": "Ada"}]},
        headers={"X-API-Key": key},
    )
    assert r.status_code == 404
    assert seed.orders(theirs) == []


def test_bulk_prospect_needs_prospects(client, seed, alice):
    key = client.get("/key/api", headers=seed.headers(alice.user_id)).json()["data"]["value"]
    lst = seed.new_list(alice.user_id)
    r = client.post(
        "/api/bulk-prospect", json={"list_id": lst, "prospects": []}, headers={"X-API-Key": key}
    )
    assert r.status_code == 400


def test_key_under_rotated_secret_is_a_storage_error(client, services, seed, alice):
    headers = seed.headers(alice.user_id)
    client.get("/key/api", headers=headers)
    services.keys.secret = "ZYXWVUTSRQPONMLKJIHGFEDCBA987654"

    r = client.get("/key/", headers=headers)
    assert r.status_code == 500
    assert r.json() == {"error": "failed to decrypt api key"}
