import threading

from storage.local_cache import LocalCache


def test_values_survive_a_new_instance(tmp_path):
    path = tmp_path / "store.json"
    LocalCache(path).set_json("submissions", [{"referenceId": "PJ-2026-12345"}])
    assert LocalCache(path).get_json("submissions") == [{"referenceId": "PJ-2026-12345"}]


def test_absent_key_is_none(cache):
    assert cache.get("adminSettings") is None
    assert cache.get_json("adminSettings") is None


def test_invalid_json_value_reads_as_absent(cache):
    cache.set("adminSettings", "{not json")
    cache.set_json("submissions", [])
    assert cache.get_json("adminSettings") is None
    assert cache.get_json("submissions") == []


def test_corrupt_file_reads_as_empty(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[[[", encoding="utf-8")
    c = LocalCache(path)
    assert c.get("submissions") is None
    c.set("submissions", "[]")
    assert c.get("submissions") == "[]"



def test_concurrent_updates_keep_every_write(cache):
    def worker(n):
        for i in range(20):
            cache.update_json("submissions", lambda cur, v=f"{n}-{i}": [*(cur or []), v])

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    stored = cache.get_json("submissions")
    assert len(stored) == 160
    assert not list(cache.path.parent.glob("*.tmp"))
