"""Tests for span context aggregation."""

from opentelemetry.trace import NonRecordingSpan, SpanContext, TraceFlags

from spanlog.span_handlers.aggregator import CONTEXT_FIELDS_TO_IGNORE, aggregate_span_context


class TestAggregateSpanContext:
    """Test cases for aggregate_span_context."""

    def test_empty_chain_has_no_context(self):
        assert aggregate_span_context([]) is None

    def test_current_span_without_event_has_no_context(self, registry, tracer):
        with tracer.start_as_current_span("root", attributes={"route": "/pay"}):
            with tracer.start_as_current_span("child"):
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate is None

    def test_event_on_ancestor_only_is_not_selected(self, registry, tracer):
        with tracer.start_as_current_span("root") as root:
            root.add_event("started")
            with tracer.start_as_current_span("child"):
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate is None

    def test_selects_last_event_of_current_span(self, registry, tracer):
        with tracer.start_as_current_span("root"):
            with tracer.start_as_current_span("child") as child:
                child.add_event("first", {"n": 1})
                child.add_event("second", {"n": 2})
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.event.name == "second"
        assert dict(aggregate.event.attributes) == {"n": 2}

    def test_distinct_keys_are_all_merged(self, registry, tracer):
        with tracer.start_as_current_span("a", attributes={"key_a": 1}):
            with tracer.start_as_current_span("b", attributes={"key_b": 2}):
                with tracer.start_as_current_span("c", attributes={"key_c": 3}) as current:
                    current.add_event("done")
                    aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.context == {"key_a": 1, "key_b": 2, "key_c": 3}

    def test_duplicate_key_keeps_root_value(self, registry, tracer):
        with tracer.start_as_current_span("root", attributes={"tenant": "root-tenant"}):
            with tracer.start_as_current_span("child", attributes={"tenant": "child-tenant"}) as child:
                child.add_event("done")
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.context == {"tenant": "root-tenant"}

    def test_ignored_keys_never_reach_context(self, registry, tracer):
        ignored = {key: "x" for key in CONTEXT_FIELDS_TO_IGNORE}
        with tracer.start_as_current_span("root", attributes={**ignored, "route": "/pay"}) as span:
            span.add_event("done")
            aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.context == {"route": "/pay"}

    def test_thread_fields_come_from_current_span_only(self, registry, tracer):
        with tracer.start_as_current_span("root", attributes={"thread.id": "7", "thread.name": "worker-7"}):
            with tracer.start_as_current_span("child") as child:
                child.add_event("done")
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.thread_id == ""
        assert aggregate.thread_name == ""

    def test_thread_fields_of_current_span(self, registry, tracer):
        with tracer.start_as_current_span("root", attributes={"thread.name": "outer"}):
            with tracer.start_as_current_span("child", attributes={"thread.id": 12, "thread.name": "inner"}) as child:
                child.add_event("done")
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.thread_id == "12"
        assert aggregate.thread_name == "inner"

    def test_root_and_current_identity(self, registry, tracer):
        with tracer.start_as_current_span("orders.http.request") as root:
            with tracer.start_as_current_span("orders.billing.charge_card") as child:
                child.add_event("done")
                aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.root.span_id == root.get_span_context().span_id
        assert aggregate.root.name == "orders.http.request"
        assert aggregate.current.span_id == child.get_span_context().span_id
        assert aggregate.current.name == "orders.billing.charge_card"

    def test_array_values_degrade_in_context(self, registry, tracer):
        with tracer.start_as_current_span("root", attributes={"tags": ["a", "b"]}) as span:
            span.add_event("done")
            aggregate = aggregate_span_context(registry.ancestry())

        assert aggregate.context == {"tags": ""}

    def test_spans_without_data_are_skipped(self, registry, tracer):
        remote = NonRecordingSpan(SpanContext(
            trace_id=0x1234, span_id=0x99, is_remote=True, trace_flags=TraceFlags(TraceFlags.SAMPLED)
        ))
        with tracer.start_as_current_span("local", attributes={"route": "/pay"}) as span:
            span.add_event("done")
            aggregate = aggregate_span_context([remote, span])

        assert aggregate.context == {"route": "/pay"}
        assert aggregate.root.span_id == 0x99
        assert aggregate.root.name == ""

    def test_current_span_without_data_has_no_context(self):
        remote = NonRecordingSpan(SpanContext(trace_id=0x1234, span_id=0x99, is_remote=True))

        assert aggregate_span_context([remote]) is None
