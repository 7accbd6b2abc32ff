from concurrent.futures import ThreadPoolExecutor
from uuid import uuid4

from score_store import InMemoryScoreStore


def test_put_and_get():
    store = InMemoryScoreStore()
    store.put("abc", 28)
    assert store.get("abc") == 28
    assert "abc" in store
    assert len(store) == 1


def test_get_unknown_id_returns_zero():
    store = InMemoryScoreStore()
    assert store.get("missing") == 0
    assert "missing" not in store
    assert len(store) == 0


def test_get_is_repeatable():
    store = InMemoryScoreStore()
    store.put("abc", 109)
    assert [store.get("abc") for _ in range(5)] == [109] * 5


def test_concurrent_put_and_get():
    store = InMemoryScoreStore()
    receipt_ids = [str(uuid4()) for _ in range(2000)]

    def put_then_get(indexed_id):
        points, receipt_id = indexed_id
        store.put(receipt_id, points)
        return store.get(receipt_id) == points

    with ThreadPoolExecutor(max_workers=50) as pool:
        assert all(pool.map(put_then_get, enumerate(receipt_ids)))
    assert len(store) == len(receipt_ids)
