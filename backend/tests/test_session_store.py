"""Tests for the in-memory SessionStore."""
import asyncio

import pytest

from orienta.ai_provider.prompts import SYSTEM_PROMPT
from orienta.chat.schemas import Role, Turn
from orienta.chat.store import SessionStore


def _user(text: str) -> Turn:
    return Turn(role=Role.USER, content=text)


def _assistant(text: str) -> Turn:
    return Turn(role=Role.ASSISTANT, content=text)


def _exchange(store: SessionStore, session_id: str, i: int) -> int:
    store.append(session_id, _user(f"u{i}"))
    store.append(session_id, _assistant(f"a{i}"))
    return store.truncate(session_id)


class TestSessionLifecycle:
    """Creation, append and clear."""

    def test_new_session_holds_only_system_turn(self, store):
        transcript = store.get_or_create("s1")
        assert len(transcript) == 1
        assert transcript[0].role == Role.SYSTEM
        assert transcript[0].content == SYSTEM_PROMPT

    def test_get_or_create_returns_copy(self, store):
        transcript = store.get_or_create("s1")
        transcript.append(_user("not stored"))
        assert len(store.get_or_create("s1")) == 1

    def test_append_creates_missing_session(self, store):
        length = store.append("s1", _user("hola"))
        assert length == 2
        assert store.exists("s1")

    def test_append_rejects_system_turn(self, store):
        with pytest.raises(ValueError):
            store.append("s1", Turn(role=Role.SYSTEM, content="otro prompt"))

    def test_turns_are_immutable(self):
        turn = _user("hola")
        with pytest.raises(Exception):
            turn.content = "cambiado"

    def test_clear_removes_session(self, store):
        store.append("s1", _user("hola"))
        assert store.clear("s1") is True
        assert not store.exists("s1")
        assert store.get_or_create("s1") == [store.system_turn]

    def test_clear_unknown_session_is_noop(self, store):
        assert store.clear("missing") is False
        assert len(store) == 0

    def test_sessions_are_isolated(self, store):
        store.append("a", _user("uno"))
        store.append("b", _user("dos"))
        assert [t.content for t in store.get_or_create("a")][1:] == ["uno"]
        assert [t.content for t in store.get_or_create("b")][1:] == ["dos"]


class TestTruncation:
    """Sliding-window truncation of transcripts."""

    def test_length_grows_by_two_up_to_five_exchanges(self, store):
        for n in range(1, 6):
            assert _exchange(store, "s1", n) == 1 + 2 * n

    def test_length_stabilises_at_eleven(self, store):
        lengths = [_exchange(store, "s1", n) for n in range(1, 12)]
        assert lengths[5:] == [11] * 6

    def test_keeps_system_turn_and_most_recent_exchanges(self, store):
        for n in range(1, 9):
            _exchange(store, "s1", n)
        transcript = store.get_or_create("s1")
        assert transcript[0].role == Role.SYSTEM
        assert [t.content for t in transcript[1:]] == [
            "u4", "a4", "u5", "a5", "u6", "a6", "u7", "a7", "u8", "a8",
        ]

    def test_twelve_entries_are_not_truncated(self, store):
        # A dangling user turn can leave an even length; 12 is still allowed
        for n in range(1, 6):
            _exchange(store, "s1", n)
        store.append("s1", _user("dangling"))
        assert store.truncate("s1") == 12

    def test_truncate_missing_session(self, store):
        assert store.truncate("missing") == 0

    def test_custom_window(self):
        store = SessionStore(system_prompt="sys", max_length=4, keep_recent=2)
        for n in range(1, 4):
            _exchange(store, "s1", n)
        assert [t.content for t in store.get_or_create("s1")] == ["sys", "u3", "a3"]

    def test_invalid_window_rejected(self):
        with pytest.raises(ValueError):
            SessionStore(system_prompt="sys", max_length=10, keep_recent=10)


class TestSessionLock:
    """Per-session serialisation."""

    @pytest.mark.asyncio
    async def test_same_session_is_serialised(self, store):
        order = []

        async def worker(tag: str):
            async with store.lock("s1"):
                order.append(f"{tag}-start")
                await asyncio.sleep(0.01)
                order.append(f"{tag}-end")

        await asyncio.gather(worker("a"), worker("b"))
        assert order in (
            ["a-start", "a-end", "b-start", "b-end"],
            ["b-start", "b-end", "a-start", "a-end"],
        )

    @pytest.mark.asyncio
    async def test_different_sessions_do_not_block(self, store):
        entered = asyncio.Event()

        async def holder():
            async with store.lock("a"):
                await asyncio.wait_for(entered.wait(), timeout=1)

        async def other():
            async with store.lock("b"):
                entered.set()

        await asyncio.gather(holder(), other())
        assert entered.is_set()

    @pytest.mark.asyncio
    async def test_lock_table_empties_after_use(self, store):
        for i in range(100):
            async with store.lock(f"s{i}"):
                store.append(f"s{i}", _user("hola"))
            store.clear(f"s{i}")
        assert len(store) == 0
        assert store._locks == {}
        assert store._lock_users == {}

    @pytest.mark.asyncio
    async def test_waiters_share_one_lock_until_last_leaves(self, store):
        release = asyncio.Event()
        seen = []

        async def holder():
            async with store.lock("s1"):
                await release.wait()

        async def waiter():
            async with store.lock("s1"):
                seen.append(len(store._locks))

        tasks = [asyncio.create_task(holder()), asyncio.create_task(waiter())]
        await asyncio.sleep(0.01)
        assert store._lock_users == {"s1": 2}
        store.clear("s1")
        release.set()
        await asyncio.gather(*tasks)

        assert seen == [1]
        assert store._locks == {}
