"""Tests for OpenTelemetry tracing helpers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from opentelemetry import trace

from mcpifier.utils.telemetry import (
    _INSTRUMENTATION_NAME,
    ATTR_RPC_METHOD,
    ATTR_TOOL_NAME,
    ATTR_TRANSPORT,
    configure_telemetry,
    get_tracer,
)


class TestGetTracer:
    def test_returns_tracer(self) -> None:
        assert isinstance(get_tracer("test.module"), trace.Tracer)

    def test_default_name(self) -> None:
        assert isinstance(get_tracer(), trace.Tracer)

    def test_noop_span_accepts_attributes(self) -> None:
        tracer = get_tracer("test.noop")
        with tracer.start_as_current_span("mcpifier.rpc.dispatch") as span:
            span.set_attribute(ATTR_RPC_METHOD, "tools/list")


class TestConfigureTelemetry:
    def test_raises_without_sdk(self) -> None:
        with patch.dict("sys.modules", {"opentelemetry.sdk.resources": None}):
            with pytest.raises(ImportError, match="mcpifier\\[otel\\]"):
                configure_telemetry()

    def test_otlp_raises_without_exporter(self) -> None:
        try:
            import opentelemetry.sdk.trace  # noqa: F401
        except ImportError:
            pytest.skip("opentelemetry-sdk not installed")

        with patch.dict(
            "sys.modules",
            {"opentelemetry.exporter.otlp.proto.grpc.trace_exporter": None},
        ):
            with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
                configure_telemetry(otlp_endpoint="http://localhost:4317")


class TestAttributeConstants:
    @pytest.mark.parametrize("attr", [ATTR_RPC_METHOD, ATTR_TOOL_NAME, ATTR_TRANSPORT])
    def test_namespaced(self, attr: str) -> None:
        assert attr.startswith("mcpifier.")

    def test_instrumentation_name(self) -> None:
        assert _INSTRUMENTATION_NAME == "mcpifier"
