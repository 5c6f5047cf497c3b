import time

from cmdispatch.context import Context, background


def test_background():
    ctx = background()
    assert ctx.deadline is None
    assert not ctx.cancelled
    assert ctx.value("missing") is None
    assert ctx.value("missing", 1) == 1


def test_cancel_is_shared_with_children():
    parent = background()
    child = parent.with_value("user", "alice")
    assert child.value("user") == "alice"
    assert parent.value("user") is None
    parent.cancel()
    assert child.cancelled


def test_with_timeout():
    ctx = background().with_timeout(0)
    assert ctx.cancelled
    assert not background().with_timeout(60).cancelled


def test_with_timeout_keeps_earlier_deadline():
    ctx = Context(deadline=time.monotonic() + 1).with_timeout(3600)
    assert ctx.deadline < time.monotonic() + 2


def test_values_are_read_only():
    values = {"a": 1}
    ctx = Context(values=values)
    values["a"] = 2
    assert ctx.value("a") == 1
