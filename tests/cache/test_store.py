"""Tests for cache store read/write, expiry, and degradation."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from stepgate.cache import CacheLookup, FileCacheStore, InMemoryCacheStore, cache_file_name
from stepgate.constants.cache import CACHE_VALIDITY_SECONDS


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture(params=["file", "memory"])
def store(request: pytest.FixtureRequest, tmp_path: Path, clock: FakeClock) -> FileCacheStore | InMemoryCacheStore:
    if request.param == "file":
        return FileCacheStore(tmp_path / "cache", clock=clock)
    return InMemoryCacheStore(clock=clock)


def test_put_then_get_returns_value(store: FileCacheStore | InMemoryCacheStore) -> None:
    store.put("directory_scan", {"dirs": ["src", "docs"]})

    lookup = store.get("directory_scan")

    assert lookup.found is True
    assert lookup.value == {"dirs": ["src", "docs"]}
    assert lookup.age == pytest.approx(0.0)


def test_missing_key_misses(store: FileCacheStore | InMemoryCacheStore) -> None:
    assert store.get("never-written") == CacheLookup.miss()


def test_entry_expires_after_validity_window(store: FileCacheStore | InMemoryCacheStore, clock: FakeClock) -> None:
    store.put("scan", 1)

    clock.advance(CACHE_VALIDITY_SECONDS)
    assert store.get("scan").found is True

    clock.advance(1)
    assert store.get("scan").found is False


def test_age_reflects_elapsed_time(store: FileCacheStore | InMemoryCacheStore, clock: FakeClock) -> None:
    store.put("scan", 1)
    clock.advance(3600)

    assert store.get("scan").age == pytest.approx(3600)


def test_invalidate_removes_entry(store: FileCacheStore | InMemoryCacheStore) -> None:
    store.put("scan", 1)
    store.invalidate("scan")
    store.invalidate("scan")

    assert store.get("scan").found is False


def test_put_after_expiry_overwrites(store: FileCacheStore | InMemoryCacheStore, clock: FakeClock) -> None:
    store.put("scan", "old")
    clock.advance(CACHE_VALIDITY_SECONDS + 10)
    store.put("scan", "new")

    lookup = store.get("scan")

    assert lookup.found is True
    assert lookup.value == "new"


def test_expired_entry_stays_on_disk(tmp_path: Path, clock: FakeClock) -> None:
    store = FileCacheStore(tmp_path / "cache", clock=clock)
    store.put("scan", [1, 2])
    clock.advance(CACHE_VALIDITY_SECONDS * 2)

    assert store.get("scan").found is False
    payload = json.loads(store.path_for("scan").read_text(encoding="utf-8"))
    assert payload["value"] == [1, 2]


def test_write_leaves_no_temp_files(tmp_path: Path) -> None:
    store = FileCacheStore(tmp_path / "cache")
    store.put("a", 1)
    store.put("a", 2)

    assert sorted(path.name for path in (tmp_path / "cache").iterdir()) == ["a.json"]


def test_corrupted_entry_is_a_miss(tmp_path: Path) -> None:
    store = FileCacheStore(tmp_path / "cache")
    store.put("scan", 1)
    store.path_for("scan").write_text("{not json", encoding="utf-8")

    assert store.get("scan").found is False


def test_foreign_payload_is_a_miss(tmp_path: Path) -> None:
    store = FileCacheStore(tmp_path / "cache")
    store.path_for("scan").parent.mkdir(parents=True)
    store.path_for("scan").write_text('{"version": 1, "key": "other", "written_at": 1, "value": 1}', encoding="utf-8")

    assert store.get("scan").found is False


def _write_raw_entry(store: FileCacheStore, key: str, written_at: str) -> None:
    path = store.path_for(key)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        f'{{"version": 1, "key": "{key}", "written_at": {written_at}, "value": 1}}',
        encoding="utf-8",
    )


@pytest.mark.parametrize("written_at", ["1e12", "Infinity", "NaN"])
def test_entry_stamped_in_the_future_is_a_miss(tmp_path: Path, clock: FakeClock, written_at: str) -> None:
    store = FileCacheStore(tmp_path / "cache", clock=clock)
    _write_raw_entry(store, "scan", written_at)

    clock.advance(10 * 24 * 60 * 60)

    assert store.get("scan").found is False


def test_clock_moving_backwards_expires_entry(clock: FakeClock) -> None:
    store = InMemoryCacheStore(clock=clock)
    store.put("scan", 1)

    clock.advance(-30)
    lookup = store.get("scan")
    assert lookup.found is True
    assert lookup.age == 0.0

    clock.advance(-2 * 60 * 60)
    assert store.get("scan").found is False


def test_permission_error_on_lookup_is_a_miss(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    store = FileCacheStore(tmp_path / "cache")
    store.put("scan", 1)

    def deny(self: Path) -> bool:
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "is_file", deny)

    assert store.get("scan").found is False
    assert store.disabled is False


def test_unwritable_directory_degrades_to_misses(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")
    store = FileCacheStore(blocker / "cache")

    store.put("scan", 1)

    assert store.disabled is True
    assert store.get("scan").found is False
    store.invalidate("scan")


def test_deleting_cache_directory_only_loses_entries(tmp_path: Path) -> None:
    directory = tmp_path / "cache"
    store = FileCacheStore(directory)
    store.put("scan", 1)

    for path in directory.iterdir():
        path.unlink()
    directory.rmdir()

    assert store.get("scan").found is False
    store.put("scan", 2)
    assert store.get("scan").value == 2


@pytest.mark.parametrize(
    ("key", "expected"),
    [
        ("step.test_execution", "step.test_execution.json"),
        ("../escape", "_escape.json"),
        ("a/b c", "a_b_c.json"),
        ("", "_.json"),
    ],
)
def test_cache_file_name_is_safe(key: str, expected: str) -> None:
    assert cache_file_name(key) == expected
