"""Tests for tdcrawl.aggregator."""

from __future__ import annotations

import threading

import pytest

from tdcrawl.aggregator import FeatureIndex
from tdcrawl.models import TestDataMethod


def _record(repo: str, method: str, feature: str = "checkout") -> TestDataMethod:
    return TestDataMethod(
        repo=repo,
        feature=feature,
        class_name="PayFlowTest",
        method_name=method,
        annotation_attrs={},
        path=f"src/{feature}/test/PayFlowTest.java",
    )


def test_concurrent_appends_keep_every_record() -> None:
    index = FeatureIndex()
    workers = 32
    barrier = threading.Barrier(workers)

    def append(worker: int) -> None:
        barrier.wait()
        index.append("checkout", [_record(f"repo{worker}", "payWithCard")])

    threads = [threading.Thread(target=append, args=(i,)) for i in range(workers)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    snapshot = index.snapshot()
    assert list(snapshot) == ["checkout"]
    assert len(snapshot["checkout"]) == workers
    assert {record.repo for record in snapshot["checkout"]} == {f"repo{i}" for i in range(workers)}


def test_batches_are_appended_contiguously() -> None:
    index = FeatureIndex()
    barrier = threading.Barrier(8)

    def append(worker: int) -> None:
        batch = [_record(f"repo{worker}", f"m{n}") for n in range(50)]
        barrier.wait()
        index.append("checkout", batch)

    threads = [threading.Thread(target=append, args=(i,)) for i in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    records = index.snapshot()["checkout"]
    assert len(records) == 400
    for start in range(0, 400, 50):
        chunk = records[start : start + 50]
        assert len({record.repo for record in chunk}) == 1
        assert [record.method_name for record in chunk] == [f"m{n}" for n in range(50)]


def test_duplicates_are_retained() -> None:
    index = FeatureIndex()
    record = _record("automation_demo", "payWithCard")

    index.append("checkout", [record])
    index.append("checkout", [record])

    assert index.snapshot()["checkout"] == [record, record]
    assert index.total() == 2
    assert len(index) == 1


def test_empty_feature_is_rejected() -> None:
    with pytest.raises(ValueError):
        FeatureIndex().append("", [_record("r", "m")])


def test_snapshot_is_a_copy() -> None:
    index = FeatureIndex()
    index.append("login", [_record("r", "m", feature="login")])

    snapshot = index.snapshot()
    snapshot["login"].clear()
    snapshot["extra"] = []

    assert len(index.snapshot()["login"]) == 1
    assert "extra" not in index.snapshot()
