import pytest

from appkit.core.context import Context, background, contextize_handler, decontextize_handler
from fakes import FakeWriter, make_request


def test_background_is_shared_and_empty():
    assert background() is background()
    assert background().value("anything") is None
    assert background().value("anything", "fallback") == "fallback"


def test_with_value_derives_without_mutating():
    root = background()
    child = root.with_value("user", "ann")
    grandchild = child.with_value("user", "bob")

    assert root.value("user") is None
    assert child.value("user") == "ann"
    assert grandchild.value("user") == "bob"


def test_values_are_inherited():
    ctx = background().with_value("a", 1).with_value("b", 2)
    assert (ctx.value("a"), ctx.value("b")) == (1, 2)


def test_object_keys_do_not_collide_with_strings():
    key = object()
    ctx = background().with_value(key, "private").with_value("key", "public")
    assert ctx.value(key) == "private"
    assert ctx.value("key") == "public"


def test_none_key_is_rejected():
    with pytest.raises(ValueError):
        Context().with_value(None, 1)


def test_contextize_handler_forwards_everything():
    calls = []
    ctx = background().with_value("k", "v")
    handle = contextize_handler(ctx, lambda *args: calls.append(args))

    w, request, params = FakeWriter(), make_request(), {"id": "1"}
    assert handle(w, request, params) is None

    assert len(calls) == 1
    got_ctx, got_w, got_request, got_params = calls[0]
    assert got_ctx is ctx
    assert (got_w, got_request, got_params) == (w, request, params)


def test_decontextize_handler_drops_the_context():
    calls = []
    handle = decontextize_handler(lambda *args: calls.append(args))

    w, request = FakeWriter(), make_request()
    handle(background(), w, request, {})

    assert calls == [(w, request, {})]
