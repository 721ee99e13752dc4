from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from dupscan.scanner.errors import HashError
from dupscan.scanner.hasher import hash_file
from dupscan.scanner.models import FileRecord, ScanIssue
from dupscan.scanner.pool import HashWorkerPool, default_worker_count


def _drain(pool: HashWorkerPool) -> list:
    return list(pool.results())


def test_default_worker_count_is_positive():
    assert default_worker_count() >= 1


def test_pool_defaults_to_cpu_count():
    pool = HashWorkerPool()
    try:
        assert pool.workers == default_worker_count()
    finally:
        pool.close_intake()
        pool.join()


def test_pool_rejects_zero_workers():
    with pytest.raises(ValueError):
        HashWorkerPool(0)


def test_every_path_hashed_exactly_once(tmp_path: Path):
    paths = []
    for idx in range(50):
        target = tmp_path / f"file_{idx}.txt"
        target.write_text(f"content {idx % 5}")
        paths.append(str(target))

    pool = HashWorkerPool(4)
    for path in paths:
        pool.submit(path)
    pool.close_intake()
    results = _drain(pool)

    assert all(isinstance(item, FileRecord) for item in results)
    assert sorted(item.path for item in results) == sorted(paths)
    for item in results:
        assert (item.digest, item.size_bytes) == hash_file(item.path)


def test_results_close_only_after_intake_closed(tmp_path: Path):
    target = tmp_path / "one.txt"
    target.write_text("x")
    pool = HashWorkerPool(2)
    pool.submit(str(target))

    collected: list = []
    consumer = threading.Thread(target=lambda: collected.extend(pool.results()), daemon=True)
    consumer.start()
    consumer.join(timeout=0.3)

    # The stream stays open while the intake is still open.
    assert consumer.is_alive()

    pool.close_intake()
    consumer.join(timeout=5)

    assert not consumer.is_alive()
    assert [item.path for item in collected] == [str(target)]


def test_hash_errors_are_isolated_per_file(caplog: pytest.LogCaptureFixture):
    def fake_hasher(path: str, chunk_size: int):
        if path == "bad":
            raise HashError("Failed to hash bad: boom", "FILE_UNREADABLE")
        return f"digest-{path}", len(path)

    pool = HashWorkerPool(3, hasher=fake_hasher)
    for path in ("good-1", "bad", "good-2"):
        pool.submit(path)
    pool.close_intake()

    with caplog.at_level("WARNING"):
        results = _drain(pool)

    records = [item for item in results if isinstance(item, FileRecord)]
    issues = [item for item in results if isinstance(item, ScanIssue)]
    assert sorted(r.path for r in records) == ["good-1", "good-2"]
    assert issues == [ScanIssue(path="bad", code="FILE_UNREADABLE", message="Failed to hash bad: boom")]
    assert "Error calculating hash for bad" in caplog.text


def test_unreadable_real_file_is_skipped(tmp_path: Path):
    good = tmp_path / "good.txt"
    good.write_text("ok")

    pool = HashWorkerPool(2)
    pool.submit(str(good))
    pool.submit(str(tmp_path / "vanished.txt"))
    pool.close_intake()
    results = _drain(pool)

    assert [item.path for item in results if isinstance(item, FileRecord)] == [str(good)]
    assert [item.code for item in results if isinstance(item, ScanIssue)] == ["FILE_UNREADABLE"]


def test_slow_file_does_not_block_other_workers():
    release = threading.Event()

    def fake_hasher(path: str, chunk_size: int):
        if path == "slow":
            release.wait(timeout=5)
        return path, 0

    pool = HashWorkerPool(2, hasher=fake_hasher)
    pool.submit("slow")
    time.sleep(0.05)
    pool.submit("fast")

    stream = pool.results()
    first = next(stream)
    assert first.path == "fast"

    release.set()
    pool.close_intake()
    rest = list(stream)
    assert [item.path for item in rest] == ["slow"]


def test_close_intake_is_idempotent_and_blocks_submit():
    pool = HashWorkerPool(2, hasher=lambda path, size: (path, 0))
    pool.close_intake()
    pool.close_intake()

    with pytest.raises(RuntimeError):
        pool.submit("late")

    assert _drain(pool) == []
    pool.join(timeout=5)


def test_reported_issue_travels_on_result_stream():
    pool = HashWorkerPool(1, hasher=lambda path, size: (path, 0))
    issue = ScanIssue(path="/root", code="WALK_ERROR", message="listing failed")
    pool.report(issue)
    pool.close_intake()

    assert _drain(pool) == [issue]
