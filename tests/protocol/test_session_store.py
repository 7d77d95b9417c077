from __future__ import annotations

import threading

import pytest

from duckchess.engine.game import Game
from duckchess.protocol.http.session import InMemorySessionStore


def test_create_get_set_delete() -> None:
    store = InMemorySessionStore()
    gid = store.create()
    game = store.get(gid)
    assert isinstance(game, Game)

    replacement = Game.from_fen("4k3/8/8/8/8/8/8/4K3 w - - 0 1")
    store.set(gid, replacement)
    assert store.get(gid) is replacement

    assert store.delete(gid)
    assert store.get(gid) is None
    assert not store.delete(gid)


def test_set_unknown_id_raises() -> None:
    store = InMemorySessionStore()
    with pytest.raises(KeyError):
        store.set("missing", Game.new())


def test_concurrent_creates_get_unique_ids() -> None:
    store = InMemorySessionStore()
    ids: list[str] = []
    lock = threading.Lock()

    def worker() -> None:
        for _ in range(20):
            gid = store.create(Game.new())
            with lock:
                ids.append(gid)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(set(ids)) == 80
    assert len(store) == 80
