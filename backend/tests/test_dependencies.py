from __future__ import annotations

import asyncio

import pytest
from fastapi import BackgroundTasks

from lease_tracker.backend import SupabaseBackend
from lease_tracker.dependencies import get_access_token, get_deferred_work, get_viewer_backend


def test_bearer_token_is_extracted() -> None:
    assert get_access_token("Bearer abc ") == "abc"
    assert get_access_token("bearer abc") == "abc"
    assert get_access_token("Basic abc") is None
    assert get_access_token("Bearer ") is None
    assert get_access_token(None) is None


def test_deferred_work_runs_after_queueing_in_order() -> None:
    tasks = BackgroundTasks()
    work = get_deferred_work(tasks)
    seen: list[str] = []

    async def record(label: str) -> None:
        seen.append(label)

    async def close() -> None:
        seen.append("closed")

    work.add_cleanup(close)
    work(record, "first")
    work(record, "second")
    assert seen == []
    assert len(tasks.tasks) == 1

    asyncio.run(tasks())
    assert seen == ["first", "second", "closed"]


def test_cleanups_run_when_deferred_call_fails() -> None:
    work = get_deferred_work(BackgroundTasks())
    closed: list[bool] = []

    async def explode() -> None:
        raise RuntimeError("write failed")

    async def close() -> None:
        closed.append(True)

    work(explode)
    work.add_cleanup(close)
    with pytest.raises(RuntimeError):
        asyncio.run(work.run())
    assert closed == [True]


def test_viewer_backend_carries_caller_token() -> None:
    work = get_deferred_work(BackgroundTasks())
    backend = asyncio.run(get_viewer_backend("viewer-token", work))

    assert isinstance(backend, SupabaseBackend)
    session = backend.client.session  # type: ignore[union-attr]
    assert session.headers["authorization"] == "Bearer viewer-token"

    asyncio.run(work.run())
    assert session.is_closed
