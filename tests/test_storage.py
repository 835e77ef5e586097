import pytest

from phrase_stories.errors import PersistenceError
from phrase_stories.storage import LocalStore


def test_save_and_load(tmp_path):
    store = LocalStore(tmp_path / "state")
    store.save("thread_id", "thread_abc")
    store.save("nested", {"a": [1, 2], "b": "汉字"})

    assert store.load("thread_id") == "thread_abc"
    assert store.load("nested") == {"a": [1, 2], "b": "汉字"}
    assert store.exists("nested")
    assert not list((tmp_path / "state").glob("*.tmp"))


def test_missing_key_is_none(tmp_path):
    assert LocalStore(tmp_path).load("nothing") is None


def test_corrupt_record_raises(tmp_path):
    (tmp_path / "broken.json").write_text("[1, 2", encoding="utf-8")
    with pytest.raises(PersistenceError):
        LocalStore(tmp_path).load("broken")


def test_unserializable_value_raises(tmp_path):
    with pytest.raises(PersistenceError):
        LocalStore(tmp_path).save("bad", {"x": object()})


def test_delete(tmp_path):
    store = LocalStore(tmp_path)
    store.save("k", 1)
    store.delete("k")
    store.delete("k")
    assert store.load("k") is None
