"""Connection registry tests.

Covers:
1. Multiple handles per user (tabs/devices)
2. Entry removal when the last handle goes away
3. Idempotent register, silent unregister of unknown handles
4. Lookup snapshots are unaffected by later mutation
"""

import asyncio
import uuid

import pytest


@pytest.mark.asyncio
async def test_two_handles_then_unregister_one_then_last(registry, connection):
    """Both tabs are found; closing one leaves the other; closing both removes the user."""
    user = uuid.uuid4()
    tab1, tab2 = connection("tab1"), connection("tab2")

    await registry.register(user, tab1)
    await registry.register(user, tab2)
    assert await registry.lookup(user) == {tab1, tab2}

    await registry.unregister(user, tab1)
    assert await registry.lookup(user) == {tab2}
    assert user in registry

    await registry.unregister(user, tab2)
    assert await registry.lookup(user) == frozenset()
    assert user not in registry
    assert registry.online_users() == 0


@pytest.mark.asyncio
async def test_register_is_idempotent(registry, connection):
    user = uuid.uuid4()
    tab = connection()

    await registry.register(user, tab)
    await registry.register(user, tab)

    assert await registry.lookup(user) == {tab}
    assert registry.connection_count() == 1


@pytest.mark.asyncio
async def test_unregister_unknown_handle_is_noop(registry, connection):
    user = uuid.uuid4()
    tab = connection()

    await registry.unregister(user, tab)  # never registered
    await registry.register(user, tab)
    await registry.unregister(uuid.uuid4(), tab)  # wrong user

    assert await registry.lookup(user) == {tab}


@pytest.mark.asyncio
async def test_lookup_of_unknown_user_is_empty(registry):
    assert await registry.lookup(uuid.uuid4()) == frozenset()


@pytest.mark.asyncio
async def test_handle_belongs_to_one_user_at_a_time(registry, connection):
    alice, bob = uuid.uuid4(), uuid.uuid4()
    tab = connection()

    await registry.register(alice, tab)
    await registry.register(bob, tab)

    assert await registry.lookup(alice) == frozenset()
    assert alice not in registry
    assert await registry.lookup(bob) == {tab}


@pytest.mark.asyncio
async def test_lookup_returns_snapshot(registry, connection):
    """Mutations after lookup don't change the set being iterated."""
    user = uuid.uuid4()
    tab1, tab2 = connection("tab1"), connection("tab2")
    await registry.register(user, tab1)

    snapshot = await registry.lookup(user)
    await registry.register(user, tab2)
    await registry.unregister(user, tab1)

    assert snapshot == {tab1}
    assert await registry.lookup(user) == {tab2}


@pytest.mark.asyncio
async def test_concurrent_register_and_unregister(registry, connection):
    user = uuid.uuid4()
    tabs = [connection(f"tab{i}") for i in range(50)]

    await asyncio.gather(*(registry.register(user, t) for t in tabs))
    assert len(await registry.lookup(user)) == 50

    await asyncio.gather(*(registry.unregister(user, t) for t in tabs[:49]))
    assert await registry.lookup(user) == {tabs[49]}
