"""Tests for /reactions: toggle semantics and access checks."""

import uuid

import pytest

from app.reactions.service import SUPPORTED_EMOJIS, summarize


@pytest.fixture()
def message(client, alice, bob, open_direct, send):
    conversation_id = open_direct(alice, bob)
    return send(alice, conversation_id, "react to me")


def _toggle(client, user, message_id, emoji="👍"):
    return client.post(
        "/reactions", json={"message_id": message_id, "emoji": emoji}, headers=user.headers
    )


def test_toggle_twice_returns_to_empty(client, db, bob, message):
    added = _toggle(client, bob, message)
    assert added.status_code == 200
    assert added.json() == {"added": True}
    assert len(db.rows("reactions")) == 1

    removed = _toggle(client, bob, message)
    assert removed.json() == {"removed": True}
    assert db.rows("reactions") == []


def test_user_may_add_several_emoji(client, db, bob, message):
    for emoji in SUPPORTED_EMOJIS:
        assert _toggle(client, bob, message, emoji).json() == {"added": True}

    assert len(db.rows("reactions")) == len(SUPPORTED_EMOJIS)


def test_reactions_are_per_user(client, db, alice, bob, message):
    _toggle(client, alice, message)
    _toggle(client, bob, message)
    _toggle(client, bob, message)

    rows = db.rows("reactions")
    assert len(rows) == 1
    assert rows[0]["user_id"] == alice.id


def test_unsupported_emoji_is_rejected(client, db, bob, message):
    res = _toggle(client, bob, message, "🦄")
    assert res.status_code == 422
    assert db.rows("reactions") == []


def test_outsider_cannot_react(client, db, carol, message):
    res = _toggle(client, carol, message)
    assert res.status_code == 403
    assert db.rows("reactions") == []


def test_reacting_to_missing_message_is_not_found(client, bob):
    res = _toggle(client, bob, str(uuid.uuid4()))
    assert res.status_code == 404


def test_list_reactions_with_summary(client, alice, bob, message):
    _toggle(client, alice, message, "❤️")
    _toggle(client, bob, message, "❤️")
    _toggle(client, bob, message, "😂")

    res = client.get(f"/reactions/{message}", headers=alice.headers)

    assert res.status_code == 200
    body = res.json()
    assert len(body["reactions"]) == 3
    assert body["summary"] == [
        {"emoji": "❤️", "count": 2, "reacted_by_me": True},
        {"emoji": "😂", "count": 1, "reacted_by_me": False},
    ]


def test_outsider_cannot_list_reactions(client, carol, message):
    res = client.get(f"/reactions/{message}", headers=carol.headers)
    assert res.status_code == 403


def test_summarize_follows_picker_order():
    rows = [
        {"emoji": "😢", "user_id": "u1"},
        {"emoji": "👍", "user_id": "u2"},
    ]
    assert [s["emoji"] for s in summarize(rows, "u1")] == ["👍", "😢"]
