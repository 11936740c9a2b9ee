"""Messages API tests — conversations and history over REST."""

import uuid

import pytest

from volunteerhub.services.message_store import MessageStore


@pytest.mark.asyncio
async def test_conversations(client, db_session, make_user, auth_headers):
    alice = await make_user("Alice")
    bob = await make_user("Bob", "ngo")
    carol = await make_user("Carol")
    store = MessageStore(db_session)
    await store.create(alice.id, bob.id, "hi")
    await store.create(carol.id, alice.id, "hello")

    r = await client.get("/api/v1/messages/conversations", headers=auth_headers(alice))
    assert r.status_code == 200
    conversations = r.json()["conversations"]
    assert [c["name"] for c in conversations] == ["Carol", "Bob"]
    assert set(conversations[0]) == {"id", "name", "role", "avatarUrl"}


@pytest.mark.asyncio
async def test_conversations_empty(client, make_user, auth_headers):
    alice = await make_user("Alice")

    r = await client.get("/api/v1/messages/conversations", headers=auth_headers(alice))
    assert r.json() == {"conversations": []}


@pytest.mark.asyncio
async def test_history(client, db_session, make_user, auth_headers):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    store = MessageStore(db_session)
    await store.create(alice.id, bob.id, "first")
    await store.create(bob.id, alice.id, "second")

    r = await client.get(f"/api/v1/messages/{bob.id}", headers=auth_headers(alice))
    assert r.status_code == 200
    messages = r.json()["messages"]
    assert [m["content"] for m in messages] == ["first", "second"]
    assert messages[0]["senderId"]["id"] == str(alice.id)
    assert messages[0]["receiverId"] == str(bob.id)
    assert messages[1]["senderId"]["name"] == "Bob"
    assert messages[0]["createdAt"]


@pytest.mark.asyncio
async def test_history_limit(client, db_session, make_user, auth_headers):
    alice = await make_user("Alice")
    bob = await make_user("Bob")
    store = MessageStore(db_session)
    for i in range(5):
        await store.create(alice.id, bob.id, f"m{i}")

    r = await client.get(
        f"/api/v1/messages/{bob.id}", params={"limit": 2}, headers=auth_headers(alice)
    )
    assert [m["content"] for m in r.json()["messages"]] == ["m3", "m4"]


@pytest.mark.asyncio
async def test_history_limit_out_of_range(client, make_user, auth_headers):
    alice = await make_user("Alice")
    bob = await make_user("Bob")

    r = await client.get(
        f"/api/v1/messages/{bob.id}", params={"limit": 0}, headers=auth_headers(alice)
    )
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_history_unknown_user(client, make_user, auth_headers):
    alice = await make_user("Alice")

    r = await client.get(f"/api/v1/messages/{uuid.uuid4()}", headers=auth_headers(alice))
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_history_bad_id(client, make_user, auth_headers):
    alice = await make_user("Alice")

    r = await client.get("/api/v1/messages/not-a-uuid", headers=auth_headers(alice))
    assert r.status_code == 422


@pytest.mark.asyncio
async def test_requires_auth(client):
    r = await client.get("/api/v1/messages/conversations")
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_live_send_visible_in_history(
    client, gateway, make_user, token_for, auth_headers, connection
):
    """A message sent over the live channel shows up in both parties' REST views."""
    alice = await make_user("Alice")
    bob = await make_user("Bob", "ngo")
    session = await gateway.connect(connection("a"), token_for(alice))

    await gateway.send_message(session, {"receiverId": str(bob.id), "content": "Saturday?"})

    r = await client.get(f"/api/v1/messages/{alice.id}", headers=auth_headers(bob))
    assert [m["content"] for m in r.json()["messages"]] == ["Saturday?"]
    r = await client.get("/api/v1/notifications", headers=auth_headers(bob))
    assert r.json()["unreadCount"] == 1
