from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest
from flask import Flask

from docdrafts.config import Settings, load_settings
from docdrafts.tracing import configure_tracing


@pytest.fixture
def app():
    return Flask(__name__)


def test_tracing_disabled(app):
    with patch("docdrafts.tracing.trace.set_tracer_provider") as mock_set_provider:
        assert configure_tracing(app, Settings(otel_enabled=False)) is False
        mock_set_provider.assert_not_called()


@patch("docdrafts.tracing.TracerProvider")
@patch("docdrafts.tracing.OTLPSpanExporter")
@patch("docdrafts.tracing.BatchSpanProcessor")
@patch("docdrafts.tracing.trace.set_tracer_provider")
@patch("docdrafts.tracing.FlaskInstrumentor")
def test_tracing_enabled_with_otlp_endpoint(
    mock_flask_inst,
    mock_set_provider,
    mock_batch_processor,
    mock_otlp_exporter,
    mock_tracer_provider,
    app,
):
    mock_provider = MagicMock()
    mock_tracer_provider.return_value = mock_provider
    settings = load_settings(
        {
            "DOCDRAFTS_OTEL_ENABLED": "true",
            "DOCDRAFTS_OTEL_SERVICE_NAME": "drafts-test",
            "OTEL_EXPORTER_OTLP_ENDPOINT": "http://localhost:4317",
        }
    )

    assert configure_tracing(app, settings) is True

    resource_arg = mock_tracer_provider.call_args[1]["resource"]
    assert resource_arg.attributes["service.name"] == "drafts-test"
    mock_otlp_exporter.assert_called_once_with(endpoint="http://localhost:4317", insecure=True)
    mock_batch_processor.assert_called_once_with(mock_otlp_exporter.return_value)
    mock_provider.add_span_processor.assert_called_once_with(mock_batch_processor.return_value)
    mock_set_provider.assert_called_once_with(mock_provider)
    mock_flask_inst.return_value.instrument_app.assert_called_once_with(app)


@patch("docdrafts.tracing.TracerProvider")
@patch("docdrafts.tracing.ConsoleSpanExporter")
@patch("docdrafts.tracing.BatchSpanProcessor")
@patch("docdrafts.tracing.trace.set_tracer_provider")
@patch("docdrafts.tracing.FlaskInstrumentor")
def test_tracing_falls_back_to_console(
    mock_flask_inst,
    mock_set_provider,
    mock_batch_processor,
    mock_console_exporter,
    mock_tracer_provider,
    app,
):
    configure_tracing(app, Settings(otel_enabled=True))

    resource_arg = mock_tracer_provider.call_args[1]["resource"]
    assert resource_arg.attributes["service.name"] == "docdrafts"
    mock_console_exporter.assert_called_once()
    mock_batch_processor.assert_called_once_with(mock_console_exporter.return_value)
    mock_set_provider.assert_called_once_with(mock_tracer_provider.return_value)
    mock_flask_inst.return_value.instrument_app.assert_called_once_with(app)
