"""
Tests for OpenTelemetry instrumentation.
"""

import os
from unittest.mock import MagicMock, patch

import pytest

from mcpdemo.dispatcher import Dispatcher
from mcpdemo.errors import DomainError, NotFoundError
from mcpdemo.telemetry import OtelConfig, OtelManager, init_otel, is_otel_enabled


class TestIsOtelEnabled:
    """Tests for is_otel_enabled utility."""

    def test_disabled_by_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert is_otel_enabled() is False

    @pytest.mark.parametrize("value", ["true", "1", "yes", "TRUE"])
    def test_enabled_values(self, value):
        with patch.dict(os.environ, {"OTEL_ENABLED": value}, clear=True):
            assert is_otel_enabled() is True

    def test_other_values_disable(self):
        with patch.dict(os.environ, {"OTEL_ENABLED": "off"}, clear=True):
            assert is_otel_enabled() is False


class TestOtelConfig:
    """Tests for OtelConfig dataclass."""

    def test_from_env_default_values(self):
        with patch.dict(os.environ, {}, clear=True):
            config = OtelConfig.from_env()

        assert config.enabled is False
        assert config.service_name == "mcpdemo"
        assert config.endpoint == "http://localhost:4317"

    def test_from_env_custom_values(self):
        with patch.dict(
            os.environ,
            {
                "OTEL_ENABLED": "true",
                "OTEL_SERVICE_NAME": "demo-server",
                "OTEL_EXPORTER_OTLP_ENDPOINT": "http://collector:4317",
            },
            clear=True,
        ):
            config = OtelConfig.from_env()

        assert config.enabled is True
        assert config.service_name == "demo-server"
        assert config.endpoint == "http://collector:4317"

    def test_from_env_with_default_service_name(self):
        with patch.dict(os.environ, {}, clear=True):
            config = OtelConfig.from_env(default_service_name="basic-mcp-server")
        assert config.service_name == "basic-mcp-server"


class TestInitOtel:
    def test_disabled_init_returns_false(self):
        with patch.dict(os.environ, {}, clear=True), patch("mcpdemo.telemetry._initialized", False):
            assert init_otel("svc") is False

    def test_second_init_is_noop(self):
        with patch("mcpdemo.telemetry._initialized", True):
            assert init_otel("svc") is False


class TestOtelManager:
    """Tests for OtelManager with the no-op providers."""

    def test_span_yields_span(self):
        otel = OtelManager("test-server")
        with otel.capability_span("tool", "hello") as span:
            span.set_attribute("custom", "value")

    def test_span_reraises(self):
        otel = OtelManager("test-server")
        with pytest.raises(ValueError, match="boom"):
            with otel.span("failing"):
                raise ValueError("boom")

    def test_record_call(self):
        otel = OtelManager("test-server")
        otel.record_call("tool", "hello", duration_ms=1.5)
        otel.record_call("tool", "hello", duration_ms=2.5, success=False)


class TestDispatcherInstrumentation:
    """Tests that the dispatcher reports every invocation."""

    @pytest.mark.asyncio
    async def test_successful_call_recorded(self, registry):
        otel = MagicMock(spec=OtelManager)
        dispatcher = Dispatcher(registry, otel)

        await dispatcher.call_tool("hello", {"name": "Alice"})

        otel.capability_span.assert_called_once_with("tool", "hello")
        kind, name, _, success = otel.record_call.call_args.args
        assert (kind, name, success) == ("tool", "hello", True)

    @pytest.mark.asyncio
    async def test_failed_calls_recorded(self, registry):
        otel = MagicMock(spec=OtelManager)
        dispatcher = Dispatcher(registry, otel)

        with pytest.raises(DomainError):
            await dispatcher.call_tool("calculate", {"operation": "divide", "a": 1, "b": 0})
        with pytest.raises(NotFoundError):
            await dispatcher.read_resource("demo://missing")

        recorded = [(c.args[0], c.args[1], c.args[3]) for c in otel.record_call.call_args_list]
        assert recorded == [("tool", "calculate", False), ("resource", "demo://missing", False)]
