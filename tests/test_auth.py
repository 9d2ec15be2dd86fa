import pytest
from jose import jwt

from leadboard.auth import (
    create_access_token,
    create_state_token,
    decode_access_token,
    verify_state_token,
)
from leadboard.crypto import decrypt_value, encrypt_value, generate_api_key
from leadboard.errors import AuthError, StorageError
from leadboard.schemas import GoogleProfile

SECRET = "abcdefghijklmnopqrstuvwxyz012345"


def test_encrypt_round_trip_uses_fresh_iv():
    value = generate_api_key()
    a, b = encrypt_value(SECRET, value), encrypt_value(SECRET, value)
    assert a != b
    assert decrypt_value(SECRET, a) == value


def test_decrypt_rejects_garbage():
    with pytest.raises(StorageError):
        decrypt_value(SECRET, "zz")
    with pytest.raises(StorageError):
        decrypt_value(SECRET, "00ff")
    with pytest.raises(StorageError):
        encrypt_value("short", "x")


def test_decrypt_with_another_secret_fails_cleanly():
    stored = encrypt_value(SECRET, "lb_sk_" + "k" * 32)
    with pytest.raises(StorageError, match="failed to decrypt api key"):
        decrypt_value("ZYXWVUTSRQPONMLKJIHGFEDCBA987654", stored)


def test_access_token_round_trip(settings):
    assert decode_access_token(settings, create_access_token(settings, 42)) == 42


def test_expired_or_foreign_token_is_rejected(settings):
    expired = jwt.encode({"sub": "1", "exp": 1}, settings.jwt_secret, algorithm="HS256")
    with pytest.raises(AuthError, match="invalid token"):
        decode_access_token(settings, expired)
    forged = jwt.encode({"sub": "1"}, "other-secret", algorithm="HS256")
    with pytest.raises(AuthError):
        decode_access_token(settings, forged)


def test_state_token_must_be_a_state_token(settings):
    verify_state_token(settings, create_state_token(settings))
    with pytest.raises(AuthError, match="invalid oauth state"):
        verify_state_token(settings, create_access_token(settings, 1))


def test_token_for_deleted_user_is_unauthorized(client, seed):
    headers = seed.headers(9999)
    r = client.get("/user/me", headers=headers)
    assert r.status_code == 401
    assert r.json() == {"error": "unauthorized"}


def test_cookie_token_is_accepted(client, seed, settings, alice):
    client.cookies.set("Authorization", create_access_token(settings, alice.user_id))
    r = client.get("/user/me")
    assert r.status_code == 200
    assert r.json()["data"]["email"] == "alice@example.com"


def test_redirect_uri_carries_state(client, settings):
    url = client.get("/oauth/google/redirect-uri").json()["data"]["redirect_url"]
    assert url.startswith("https://accounts.google.com/o/oauth2/auth?")
    assert "state=" in url


def test_google_callback_signs_up_once(client, services, settings, monkeypatch):
    monkeypatch.setattr(
        services.google,
        "exchange",
        lambda code: GoogleProfile(email="linus@example.com", name="Linus", picture="p.png"),
    )
    state = create_state_token(settings)

    r = client.get("/oauth/google/callback", params={"code": "abc", "state": state})
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert data["user"]["email"] == "linus@example.com"
    assert "Authorization" in r.cookies
    headers = {"Authorization": f"Bearer {data['token']}"}

    lists = client.get("/list/all", headers=headers).json()["data"]["lists"]
    assert [l["name"] for l in lists] == ["New Leads", "Follow Up", "Qualified", "Rejected"]
    assert len(client.get("/tag/", headers=headers).json()["data"]["tags"]) == 5

    again = client.get("/oauth/google/callback", params={"code": "abc", "state": state})
    assert again.json()["data"]["user"]["id"] == data["user"]["id"]
    assert len(client.get("/list/all", headers=headers).json()["data"]["lists"]) == 4


def test_google_callback_rejects_bad_state(client, services, monkeypatch):
    monkeypatch.setattr(services.google, "exchange", lambda code: pytest.fail("should not exchange"))
    r = client.get("/oauth/google/callback", params={"code": "abc", "state": "forged"})
    assert r.status_code == 401
    assert r.json() == {"error": "invalid oauth state"}
