from __future__ import annotations

import asyncio

import pytest

from stepwise.core import BoundaryViolation, ContextError, ContextFinishedError, ResumableContext


class Handle:
    """Stands in for the scheduler: exposes the yield primitive."""

    def __init__(self) -> None:
        self.context: ResumableContext | None = None
        self.log: list[str] = []

    def refresh(self):
        return self.context.suspend()


def make_context(task) -> tuple[ResumableContext, Handle]:
    handle = Handle()
    handle.context = ResumableContext(task, handle)
    return handle.context, handle


def test_step_runs_until_refresh() -> None:
    async def task(h: Handle) -> None:
        h.log.append("a")
        await h.refresh()
        h.log.append("b")
        await h.refresh()
        h.log.append("c")

    ctx, handle = make_context(task)
    assert ctx.is_alive()
    assert handle.log == []

    ctx.step()
    assert handle.log == ["a"]
    assert ctx.is_alive()

    ctx.step()
    assert handle.log == ["a", "b"]

    ctx.step()
    assert handle.log == ["a", "b", "c"]
    assert not ctx.is_alive()
    assert ctx.steps == 3


def test_refresh_evaluates_to_none() -> None:
    seen = []

    async def task(h: Handle) -> None:
        seen.append(await h.refresh())

    ctx, _ = make_context(task)
    ctx.step()
    ctx.step()
    assert seen == [None]


def test_refresh_inside_nested_coroutines() -> None:
    async def inner(h: Handle) -> int:
        await h.refresh()
        return 41

    async def task(h: Handle) -> None:
        value = await inner(h)
        h.log.append(str(value + 1))

    ctx, handle = make_context(task)
    ctx.step()
    assert handle.log == []
    ctx.step()
    assert handle.log == ["42"]
    assert not ctx.is_alive()


def test_step_after_finish_fails_loudly() -> None:
    async def task(h: Handle) -> None:
        return None

    ctx, _ = make_context(task)
    ctx.step()
    assert not ctx.is_alive()
    with pytest.raises(ContextFinishedError):
        ctx.step()


def test_task_error_propagates_and_ends_context() -> None:
    async def task(h: Handle) -> None:
        await h.refresh()
        raise KeyError("boom")

    ctx, _ = make_context(task)
    ctx.step()
    with pytest.raises(KeyError):
        ctx.step()
    assert not ctx.is_alive()


def test_suspend_outside_step_is_boundary_violation() -> None:
    async def task(h: Handle) -> None:
        await h.refresh()

    ctx, _ = make_context(task)
    with pytest.raises(BoundaryViolation):
        ctx.suspend()


def test_reentrant_step_is_boundary_violation() -> None:
    async def task(h: Handle) -> None:
        h.context.step()

    ctx, _ = make_context(task)
    with pytest.raises(BoundaryViolation, match="re-entered"):
        ctx.step()
    assert not ctx.is_alive()
    assert not ctx.running


def test_foreign_awaitable_is_boundary_violation() -> None:
    cleaned_up = []

    async def task(h: Handle) -> None:
        try:
            await asyncio.sleep(0)
        finally:
            cleaned_up.append(True)

    ctx, _ = make_context(task)
    with pytest.raises(BoundaryViolation, match="foreign event loop"):
        ctx.step()
    assert not ctx.is_alive()
    assert cleaned_up == [True]


def test_discard_runs_finally_blocks() -> None:
    released = []

    async def task(h: Handle) -> None:
        try:
            while True:
                await h.refresh()
        finally:
            released.append("file closed")

    ctx, _ = make_context(task)
    ctx.step()
    ctx.step()
    ctx.discard()
    assert released == ["file closed"]
    assert not ctx.is_alive()

    # Discarding twice is harmless
    ctx.discard()
    assert released == ["file closed"]


def test_discard_before_first_step_never_runs_task() -> None:
    ran = []

    async def task(h: Handle) -> None:
        ran.append(True)

    ctx, _ = make_context(task)
    ctx.discard()
    assert ran == []
    with pytest.raises(ContextFinishedError):
        ctx.step()


def test_discard_survives_a_failing_finally_block(caplog) -> None:
    async def task(h: Handle) -> None:
        try:
            while True:
                await h.refresh()
        finally:
            raise OSError("close failed")

    ctx, _ = make_context(task)
    ctx.step()
    ctx.discard()

    assert not ctx.is_alive()
    assert "Task raised while being discarded" in caplog.text


def test_plain_function_is_rejected() -> None:
    def task(h: Handle) -> None:
        pass

    with pytest.raises(ContextError):
        ResumableContext(task, Handle())
