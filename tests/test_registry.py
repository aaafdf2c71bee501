"""Tests for OperationRegistry."""

import dataclasses

import pytest

from conftest import build_echo
from triport.core.errors import ConfigurationError
from triport.core.registry import ListingContext, OperationRegistry


def _registry(*names):
    reg = OperationRegistry()
    for name in names:
        reg.register(build_echo(name=name, summary=f"{name} summary"))
    return reg


class TestRegistration:
    def test_starts_empty(self):
        reg = OperationRegistry()
        assert reg.list() == []
        assert reg.version == 0
        assert len(reg) == 0

    def test_register_and_get(self, echo_operation):
        reg = OperationRegistry()
        reg.register(echo_operation)
        assert reg.get("echo") is echo_operation
        assert "echo" in reg

    def test_get_missing_returns_none(self):
        assert OperationRegistry().get("nonexistent") is None

    def test_list_keeps_registration_order(self):
        reg = _registry("b", "a", "c")
        assert [op.name for op in reg.list()] == ["b", "a", "c"]
        assert reg.names() == ["b", "a", "c"]

    def test_list_returns_a_copy(self):
        reg = _registry("a")
        reg.list().clear()
        assert len(reg.list()) == 1

    def test_duplicate_fails_without_changing_state(self):
        reg = _registry("a", "b")
        original = reg.get("a")
        etag_before = reg.etag

        with pytest.raises(ConfigurationError, match='Endpoint with name "a" already registered'):
            reg.register(build_echo(name="a", summary="replacement"))

        assert reg.get("a") is original
        assert reg.names() == ["a", "b"]
        assert reg.etag == etag_before
        assert reg.version == 0

    def test_rejects_non_operation(self):
        with pytest.raises(ConfigurationError):
            OperationRegistry().register({"name": "x"})


class TestEtag:
    def test_quoted_and_stable(self):
        reg = _registry("a")
        etag = reg.etag
        assert etag.startswith('"') and etag.endswith('"')
        assert len(etag) == 18
        assert reg.etag == etag

    def test_identical_sequences_give_identical_etags(self):
        assert _registry("a", "b").etag == _registry("a", "b").etag

    def test_order_sensitive(self):
        assert _registry("a", "b").etag != _registry("b", "a").etag

    def test_register_changes_etag(self):
        reg = _registry("a")
        before = reg.etag
        reg.register(build_echo(name="b"))
        assert reg.etag != before

    def test_signal_changes_etag_and_version(self):
        reg = _registry("a")
        before = reg.etag
        reg.signal_changed()
        assert reg.version == 1
        assert reg.etag != before

    def test_known_digest(self):
        import hashlib

        reg = OperationRegistry()
        reg.register(build_echo(name="echo", summary="Echo endpoint", description="Echoes back the message"))
        payload = "v0:echo:Echo endpoint:Echoes back the message"
        expected = '"' + hashlib.sha256(payload.encode()).hexdigest()[:16] + '"'
        assert reg.etag == expected

    def test_missing_description_hashes_as_empty(self):
        import hashlib

        reg = OperationRegistry()
        reg.register(build_echo(name="x", summary="S", description=None))
        expected = '"' + hashlib.sha256(b"v0:x:S:").hexdigest()[:16] + '"'
        assert reg.etag == expected


class TestListeners:
    def test_each_listener_called_once_in_order(self):
        reg = OperationRegistry()
        calls = []
        reg.on_changed(lambda: calls.append("first"))
        reg.on_changed(lambda: calls.append("second"))

        reg.signal_changed()

        assert calls == ["first", "second"]

    def test_unsubscribe_stops_only_that_listener(self):
        reg = OperationRegistry()
        calls = []
        unsubscribe = reg.on_changed(lambda: calls.append("a"))
        reg.on_changed(lambda: calls.append("b"))

        unsubscribe()
        reg.signal_changed()

        assert calls == ["b"]

    def test_unsubscribe_is_idempotent(self):
        reg = OperationRegistry()
        calls = []
        unsubscribe = reg.on_changed(lambda: calls.append("a"))
        unsubscribe()
        unsubscribe()
        reg.signal_changed()
        assert calls == []

    def test_same_listener_twice_is_two_subscriptions(self):
        reg = OperationRegistry()
        calls = []

        def listener():
            calls.append(1)

        first = reg.on_changed(listener)
        reg.on_changed(listener)
        reg.signal_changed()
        assert len(calls) == 2

        first()
        reg.signal_changed()
        assert len(calls) == 3

    def test_failing_listener_does_not_block_others(self):
        reg = OperationRegistry()
        calls = []

        def broken():
            raise RuntimeError("listener bug")

        reg.on_changed(broken)
        reg.on_changed(lambda: calls.append("after"))

        reg.signal_changed()

        assert calls == ["after"]
        assert reg.version == 1

    def test_register_does_not_notify(self):
        reg = OperationRegistry()
        calls = []
        reg.on_changed(lambda: calls.append(1))
        reg.register(build_echo())
        assert calls == []


class TestEnricher:
    def test_no_enricher_returns_list(self):
        reg = _registry("a", "b")
        assert reg.list_enriched(ListingContext("rest")) == reg.list()

    def test_enricher_filters_by_transport(self):
        reg = _registry("public", "internal-x")
        reg.set_enricher(
            lambda ops, ctx: [op for op in ops if ctx.transport != "rest" or not op.name.startswith("internal-")]
        )
        assert [op.name for op in reg.list_enriched(ListingContext("rest"))] == ["public"]
        assert len(reg.list_enriched(ListingContext("mcp"))) == 2

    def test_enricher_cannot_mutate_stored_operations(self):
        reg = _registry("a")

        def annotate(ops, ctx):
            return [dataclasses.replace(op, summary=f"[{ctx.transport}] {op.summary}") for op in ops]

        reg.set_enricher(annotate)
        assert reg.list_enriched(ListingContext("cli"))[0].summary == "[cli] a summary"
        assert reg.get("a").summary == "a summary"

    def test_enricher_receives_snapshot(self):
        reg = _registry("a", "b")

        def drop_all(ops, ctx):
            ops.clear()
            return ops

        reg.set_enricher(drop_all)
        assert reg.list_enriched(ListingContext("rest")) == []
        assert reg.names() == ["a", "b"]

    def test_repeatable_and_clearable(self):
        reg = _registry("a", "b")
        reg.set_enricher(lambda ops, ctx: list(reversed(ops)))
        ctx = ListingContext("mcp", session_id="s1")
        assert reg.list_enriched(ctx) == reg.list_enriched(ctx)

        reg.set_enricher(None)
        assert reg.list_enriched(ctx) == reg.list()

    def test_set_enricher_replaces(self):
        reg = _registry("a", "b")
        reg.set_enricher(lambda ops, ctx: ops[:1])
        reg.set_enricher(lambda ops, ctx: ops[1:])
        assert [op.name for op in reg.list_enriched(ListingContext("cli"))] == ["b"]
