"""Tests for the written analyses, with and without the LLM."""
from datetime import datetime, timedelta
from zoneinfo import ZoneInfo

import pytest
import requests

from salondesk.analysis.engine import NO_AGENDA_MESSAGE, NO_INVOICES_MESSAGE, LLMAnalyst
from salondesk.analysis.parser import GAP, TEXT, TITLE, parse_analysis
from salondesk.core.models import CalendarEvent
from salondesk.processing.invoices import aggregate_invoices

from conftest import FakeHttp, FakeResponse

MADRID = ZoneInfo("Europe/Madrid")
NOW = datetime(2024, 8, 20, 9, 0, tzinfo=MADRID)


@pytest.fixture
def invoices(dummy_rows, settings):
    return aggregate_invoices(dummy_rows, settings).invoices


@pytest.fixture
def enable_ai(monkeypatch):
    monkeypatch.setenv("AI_ANALYSIS_DISABLED", "0")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")


def _completion(text):
    return FakeResponse({"choices": [{"message": {"content": text}}]})


def test_invoice_fallback_report(invoices):
    analyst = LLMAnalyst()

    report = analyst.analyze_invoices(invoices, NOW)

    assert not analyst.enabled
    assert report.startswith("**ANÁLISIS FINANCIERO**")
    assert "- Ingresos Totales (Periodo): 100,50 €" in report
    assert "- Tasa de Pago: 0%" in report
    assert "- Profesional con más ingresos: Maria" in report


def test_invoice_fallback_without_data():
    assert LLMAnalyst().analyze_invoices([], NOW) == NO_INVOICES_MESSAGE


def test_agenda_analysis_without_upcoming_events():
    past = CalendarEvent(
        uid="old",
        start=NOW - timedelta(days=3),
        end=NOW - timedelta(days=3) + timedelta(minutes=30),
        title="Corte",
        professional="Ana",
    )

    assert LLMAnalyst().analyze_agenda([past], NOW) == NO_AGENDA_MESSAGE


def test_agenda_fallback_report():
    events = [
        CalendarEvent(uid=str(i), start=NOW + timedelta(hours=i), end=NOW + timedelta(hours=i, minutes=30),
                      title="Corte", professional="Joana", service="Corte")
        for i in range(3)
    ]

    report = LLMAnalyst().analyze_agenda(events, NOW)

    assert "- Citas Programadas: 3" in report
    assert "- Profesional con Más Carga: Joana" in report


def test_communication_fallback_report(dummy_rows):
    messages = [
        {"direction": "inbound", "created_at": "2024-08-01T10:00:00Z"},
        {"direction": "outbound", "created_at": "2024-08-01T10:05:00Z"},
        {"direction": "inbound", "created_at": "2024-08-02T09:00:00Z"},
    ]

    report = LLMAnalyst().analyze_communication(messages, dummy_rows)

    assert "- Volumen Total: 3" in report
    assert "- Balance (Entrantes/Salientes): 2/1" in report
    assert "- Reservas por WhatsApp: 3 de 8" in report


def test_conversation_summary_fallback():
    analyst = LLMAnalyst()

    assert analyst.summarize_conversation([]) == "Conversación sin mensajes."
    assert analyst.summarize_conversation(["Hola", "  ", "Quiero cita "]) == (
        "Conversación de 2 mensajes. Último mensaje: Quiero cita"
    )


def test_llm_result_is_used_and_cached(enable_ai, invoices):
    http = FakeHttp(_completion("**RESUMEN**\nTodo en orden"))
    analyst = LLMAnalyst(session=http)

    first = analyst.analyze_invoices(invoices, NOW)
    second = analyst.analyze_invoices(invoices, NOW)

    assert first == second == "**RESUMEN**\nTodo en orden"
    assert len(http.calls) == 1
    call = http.calls[0]
    assert call["url"].endswith("/chat/completions")
    assert call["headers"]["Authorization"] == "Bearer sk-test"
    assert call["json"]["messages"][1]["content"].startswith("Datos de Facturas (JSON):")


def test_llm_failure_falls_back(enable_ai, invoices, caplog):
    analyst = LLMAnalyst(session=FakeHttp(error=requests.ConnectionError("offline")))

    with caplog.at_level("WARNING"):
        report = analyst.analyze_invoices(invoices, NOW)

    assert report.startswith("**ANÁLISIS FINANCIERO**")
    assert "LLM analysis failed" in caplog.text


def test_llm_malformed_response_falls_back(enable_ai, invoices):
    analyst = LLMAnalyst(session=FakeHttp(FakeResponse({"unexpected": True})))

    assert analyst.analyze_invoices(invoices, NOW).startswith("**ANÁLISIS FINANCIERO**")


def test_parse_analysis_blocks():
    blocks = parse_analysis("**MÉTRICAS**\n\n- Total: 3\n****")

    assert [block.kind for block in blocks] == [TITLE, GAP, TEXT, TEXT]
    assert blocks[0].text == "MÉTRICAS"
    assert blocks[3].text == "****"


def test_session_without_api_key_stays_offline(monkeypatch, invoices):
    monkeypatch.setenv("AI_ANALYSIS_DISABLED", "0")
    http = FakeHttp(_completion("never used"))
    analyst = LLMAnalyst(session=http)

    report = analyst.analyze_invoices(invoices, NOW)

    assert not analyst.enabled
    assert report.startswith("**ANÁLISIS FINANCIERO**")
    assert http.calls == []
