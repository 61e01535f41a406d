"""Bearer-token handling shared by every authenticated endpoint."""

import os
import time

import jwt

from conftest import auth_headers, make_token


def test_health_needs_no_token(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json() == {"status": "ok"}


def test_missing_token_is_unauthenticated(client):
    res = client.get("/conversations")
    assert res.status_code == 401


def test_garbage_token_is_unauthenticated(client):
    res = client.get("/conversations", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Invalid token"


def test_token_signed_with_wrong_key_is_rejected(client):
    token = jwt.encode({"sub": "user_x"}, "some-other-signing-secret-of-decent-length", algorithm="HS256")
    res = client.get("/unread", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_expired_token_is_rejected(client):
    token = jwt.encode(
        {"sub": "user_x", "exp": int(time.time()) - 3600},
        os.environ["AUTH_JWT_SECRET"],
        algorithm="HS256",
    )
    res = client.get("/unread", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401
    assert res.json()["detail"] == "Token expired"


def test_token_without_subject_is_rejected(client):
    token = jwt.encode(
        {"exp": int(time.time()) + 60}, os.environ["AUTH_JWT_SECRET"], algorithm="HS256"
    )
    res = client.get("/unread", headers={"Authorization": f"Bearer {token}"})
    assert res.status_code == 401


def test_valid_token_for_unsynced_user_is_not_found(client):
    res = client.get("/unread", headers=auth_headers("user_never_synced"))
    assert res.status_code == 404
    assert res.json()["detail"] == "User not found"


def test_valid_token_for_synced_user_is_accepted(client, alice):
    res = client.get("/unread", headers=alice.headers)
    assert res.status_code == 200
    assert res.json() == {"unread": []}


def test_debug_greeting_route_is_gone(client, alice):
    res = client.get("/protected", headers=alice.headers)
    assert res.status_code == 404


def test_requests_carry_request_id(client):
    res = client.get("/health")
    assert res.headers.get("X-Request-ID")


def test_make_token_round_trips_subject():
    payload = jwt.decode(
        make_token("user_abc"), os.environ["AUTH_JWT_SECRET"], algorithms=["HS256"]
    )
    assert payload["sub"] == "user_abc"
