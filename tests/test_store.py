import json
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from pathlib import Path

import pytest

from newsletter.db.store import SubscriberStore
from newsletter.errors import DeserializationError, NotFoundError
from newsletter.models.subscriber import build_subscriber


def test_write_then_read_returns_equal_subscriber(store, subscriber) -> None:
    assert store.write(subscriber) is True
    assert store.read(subscriber.email) == subscriber


def test_write_creates_storage_directory(tmp_path, subscriber) -> None:
    store = SubscriberStore(tmp_path / "nested" / "storage")
    assert store.write(subscriber)
    stored = json.loads((tmp_path / "nested" / "storage" / subscriber.email).read_text(encoding="utf-8"))
    assert stored["birthDay"] == "2000-12-25"
    assert stored["consent"] == "true"


def test_second_write_is_refused_and_keeps_first_record(store, subscriber) -> None:
    assert store.write(subscriber)
    other = build_subscriber(email=subscriber.email, birth_day=date(1999, 1, 1), newsletter_id="other")
    assert store.write(other) is False

    fresh = SubscriberStore(store.storage_path)
    assert fresh.read(subscriber.email) == subscriber


def test_read_unknown_email_raises_not_found(store) -> None:
    with pytest.raises(NotFoundError):
        store.read("nobody@example.com")


def test_read_rejects_keys_outside_storage(store) -> None:
    with pytest.raises(NotFoundError):
        store.read("../etc/passwd")


def test_corrupt_file_raises_deserialization_error(store) -> None:
    store.storage_path.mkdir(parents=True, exist_ok=True)
    (store.storage_path / "broken@example.com").write_text('{"email": "broken@ex', encoding="utf-8")
    with pytest.raises(DeserializationError):
        store.read("broken@example.com")


def test_incomplete_record_raises_deserialization_error(store) -> None:
    store.storage_path.mkdir(parents=True, exist_ok=True)
    (store.storage_path / "partial@example.com").write_text(json.dumps({"email": "partial@example.com"}), encoding="utf-8")
    with pytest.raises(DeserializationError):
        store.read("partial@example.com")


def test_read_is_cached_for_process_lifetime(store, subscriber) -> None:
    assert store.write(subscriber)
    first = store.read(subscriber.email)

    # External edits are not observed once a record is cached.
    (store.storage_path / subscriber.email).write_text("garbage", encoding="utf-8")
    assert store.read(subscriber.email) is first


def test_concurrent_first_writes_only_one_succeeds(store) -> None:
    candidates = [
        build_subscriber(email="race@example.com", birth_day=date(2000, 1, 1), newsletter_id=f"n{i}")
        for i in range(16)
    ]
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(store.write, candidates))

    assert results.count(True) == 1
    assert store.read("race@example.com") in candidates


def test_exists(store, subscriber) -> None:
    assert not store.exists(subscriber.email)
    store.write(subscriber)
    assert store.exists(subscriber.email)


def test_non_utf8_file_raises_deserialization_error(store) -> None:
    store.storage_path.mkdir(parents=True, exist_ok=True)
    (store.storage_path / "bin@example.com").write_bytes(b"\xff\xfe\x00garbage")
    with pytest.raises(DeserializationError):
        store.read("bin@example.com")


def test_exists_is_false_for_overlong_name(store) -> None:
    assert store.exists("a" * 300 + "@example.com") is False


def test_write_returns_false_when_storage_path_is_a_file(tmp_path, subscriber) -> None:
    blocker = tmp_path / "storage"
    blocker.write_text("not a directory", encoding="utf-8")
    store = SubscriberStore(blocker)
    assert store.write(subscriber) is False


class _FailingFile:
    def __init__(self, fh) -> None:
        self._fh = fh

    def __enter__(self) -> "_FailingFile":
        return self

    def __exit__(self, *exc_info) -> None:
        self._fh.close()

    def write(self, data: str) -> int:
        raise OSError(28, "No space left on device")


def test_failed_write_removes_partial_file(store, subscriber, monkeypatch) -> None:
    original_open = Path.open

    def failing_open(self, *args, **kwargs):
        return _FailingFile(original_open(self, *args, **kwargs))

    with monkeypatch.context() as patched:
        patched.setattr(Path, "open", failing_open)
        assert store.write(subscriber) is False

    assert not (store.storage_path / subscriber.email).exists()
    assert store.write(subscriber) is True
