"""LLM-backed business analyses with deterministic fallback reports."""
from __future__ import annotations

import hashlib
import json
import logging
import os
from collections import Counter
from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Iterable, List, Mapping, Optional

import requests

from salondesk.analysis import prompts
from salondesk.core.models import STATUS_PAID, CalendarEvent, Invoice
from salondesk.core.utils import get_config_value, load_env_file
from salondesk.processing.agenda import agenda_summary, events_next_days
from salondesk.processing.channels import WHATSAPP, channel_of

logger = logging.getLogger(__name__)
DEFAULT_SECRET_FILE = Path("secrets") / "openai.env"
_AI_ENV_LOADED = False

NO_AGENDA_MESSAGE = "No hay citas en los próximos 7 días para analizar."
NO_INVOICES_MESSAGE = (
    "Aún no hay suficientes datos de facturación para un análisis profundo. "
    "Una recomendación inicial es asegurar que todas las citas se facturen correctamente."
)


def _ensure_ai_env() -> None:
    """Load AI credentials from a local secrets file once per process."""

    global _AI_ENV_LOADED
    if _AI_ENV_LOADED:
        return

    _AI_ENV_LOADED = True
    secret_location = os.getenv("AI_SECRET_FILE")
    path = Path(secret_location).expanduser() if secret_location else DEFAULT_SECRET_FILE
    load_env_file(path)


def _euros(value: float) -> str:
    return f"{value:,.2f} €".replace(",", "X").replace(".", ",").replace("X", ".")


def _top(counter: Counter) -> str:
    if not counter:
        return "sin datos"
    return counter.most_common(1)[0][0]


class LLMAnalyst:
    """Generates the dashboard's written analyses.

    Calls an OpenAI-compatible chat completions endpoint when an API key is
    configured; otherwise, or when ``AI_ANALYSIS_DISABLED=1``, builds a
    report from the numbers alone.
    """

    def __init__(self, session: Optional[requests.Session] = None) -> None:
        _ensure_ai_env()
        self.api_key = get_config_value("OPENAI_API_KEY") or None
        self.model = get_config_value("OPENAI_MODEL", "gpt-4o-mini")
        self.base_url = get_config_value("OPENAI_BASE_URL", "https://api.openai.com/v1")
        self.disabled = get_config_value("AI_ANALYSIS_DISABLED", "0") == "1"
        self.session = session or (requests.Session() if self.api_key else None)
        self._cache: dict[str, str] = {}

    @property
    def enabled(self) -> bool:
        return not self.disabled and bool(self.api_key) and self.session is not None

    def analyze_invoices(self, invoices: List[Invoice], now: datetime) -> str:
        if self.enabled:
            payload = json.dumps([invoice.to_dict() for invoice in invoices], ensure_ascii=False)
            result = self._complete(prompts.INVOICE_ANALYSIS, f"Datos de Facturas (JSON):\n{payload}")
            if result:
                return result
        return self._invoice_fallback(invoices, now)

    def analyze_agenda(self, events: List[CalendarEvent], now: datetime) -> str:
        upcoming = events_next_days(events, now)
        if not upcoming:
            return NO_AGENDA_MESSAGE
        if self.enabled:
            result = self._complete(prompts.AGENDA_ANALYSIS, f"Datos de Citas:\n{agenda_summary(upcoming)}")
            if result:
                return result
        return self._agenda_fallback(upcoming)

    def analyze_communication(
        self, messages: List[Mapping[str, Any]], reservations: List[Mapping[str, Any]]
    ) -> str:
        if self.enabled:
            content = (
                f"Mensajes (JSON):\n{json.dumps(list(messages), ensure_ascii=False, default=str)}\n\n"
                f"Reservas (JSON):\n{json.dumps(list(reservations), ensure_ascii=False, default=str)}"
            )
            result = self._complete(prompts.COMMUNICATION_ANALYSIS, content)
            if result:
                return result
        return self._communication_fallback(messages, reservations)

    def summarize_conversation(self, messages: Iterable[str]) -> str:
        lines = [line for line in messages if line and line.strip()]
        if not lines:
            return "Conversación sin mensajes."
        if self.enabled:
            conversation = "\n".join(f"- {line}" for line in lines)
            result = self._complete(prompts.CONVERSATION_SUMMARY, f"Conversation:\n{conversation}")
            if result:
                return result
        return f"Conversación de {len(lines)} mensajes. Último mensaje: {lines[-1].strip()}"

    def _complete(self, system_prompt: str, user_content: str) -> Optional[str]:
        """Return the model's text, or ``None`` so callers fall back."""

        cache_key = hashlib.sha256(f"{system_prompt}\n{user_content}".encode("utf-8")).hexdigest()
        if cache_key in self._cache:
            return self._cache[cache_key]

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_content},
            ],
            "temperature": 0.3,
        }
        try:
            response = self.session.post(
                f"{self.base_url}/chat/completions",
                headers={"Authorization": f"Bearer {self.api_key}", "Content-Type": "application/json"},
                json=payload,
                timeout=60,
            )
            response.raise_for_status()
            content = response.json()["choices"][0]["message"]["content"]
        except (requests.RequestException, KeyError, IndexError, ValueError) as exc:
            logger.warning("LLM analysis failed, using fallback report: %s", exc)
            return None

        text = (content or "").strip()
        if text:
            self._cache[cache_key] = text
        return text or None

    def _invoice_fallback(self, invoices: List[Invoice], now: datetime) -> str:
        if not invoices:
            return NO_INVOICES_MESSAGE

        total = sum(inv.total_price for inv in invoices)
        last_30 = sum(inv.total_price for inv in invoices if inv.date >= now - timedelta(days=30))
        last_7 = sum(inv.total_price for inv in invoices if inv.date >= now - timedelta(days=7))
        paid = sum(1 for inv in invoices if inv.status == STATUS_PAID)

        by_professional: Counter = Counter()
        by_service: Counter = Counter()
        for invoice in invoices:
            for item in invoice.items:
                by_professional[item.professional or "Sin asignar"] += item.price
                by_service[item.service or "Sin servicio"] += item.price

        return "\n".join(
            [
                "**ANÁLISIS FINANCIERO**",
                "",
                "**MÉTRICAS CLAVE**",
                f"- Ingresos Totales (Periodo): {_euros(total)}",
                f"- Ingresos (Últimos 30 días): {_euros(last_30)}",
                f"- Ingresos (Últimos 7 días): {_euros(last_7)}",
                f"- Ticket Promedio: {_euros(total / len(invoices))}",
                f"- Tasa de Pago: {round(paid / len(invoices) * 100)}%",
                "",
                "**TENDENCIAS Y PATRONES**",
                f"- Profesional con más ingresos: {_top(by_professional)}",
                f"- Servicio más rentable: {_top(by_service)}",
            ]
        )

    def _agenda_fallback(self, upcoming: List[CalendarEvent]) -> str:
        per_day = Counter(event.start.date().isoformat() for event in upcoming)
        ranked = per_day.most_common()
        busiest = ", ".join(day for day, _ in ranked[:2])
        quietest = ", ".join(day for day, _ in ranked[::-1][:2])
        professionals = Counter(event.professional for event in upcoming if event.professional)
        services = Counter((event.service or event.title) for event in upcoming if event.service or event.title)

        return "\n".join(
            [
                "**ANÁLISIS DE AGENDA - PRÓXIMOS 7 DÍAS**",
                "",
                "**MÉTRICAS CLAVE**",
                f"- Citas Programadas: {len(upcoming)}",
                f"- Días de Mayor Actividad: {busiest}",
                f"- Días de Menor Actividad: {quietest}",
                f"- Profesional con Más Carga: {_top(professionals)}",
                f"- Servicio Más Solicitado: {_top(services)}",
            ]
        )

    def _communication_fallback(
        self, messages: List[Mapping[str, Any]], reservations: List[Mapping[str, Any]]
    ) -> str:
        inbound = sum(1 for message in messages if message.get("direction", "inbound") == "inbound")
        days = {str(message.get("created_at", ""))[:10] for message in messages if message.get("created_at")}
        average = round(len(messages) / len(days)) if days else 0
        from_whatsapp = sum(1 for row in reservations if channel_of(dict(row)) == WHATSAPP)

        return "\n".join(
            [
                "**MÉTRICAS CLAVE**",
                f"- Volumen Total: {len(messages)}",
                f"- Promedio Diario: {average}",
                f"- Balance (Entrantes/Salientes): {inbound}/{len(messages) - inbound}",
                f"- Reservas por WhatsApp: {from_whatsapp} de {len(reservations)}",
            ]
        )

