"""Streamlit dashboard for clients, invoices, agenda, messages, and booking channels."""
import time
from datetime import datetime, timedelta
from datetime import time as dt_time
from pathlib import Path
from typing import List, Optional

import streamlit as st
from supabase import PostgrestAPIError

# Allow running via "streamlit run salondesk/ui/dashboard.py" without installing the package
# by ensuring the repository root is on ``sys.path``.
if __package__ in {None, ""}:
    import sys

    sys.path.append(str(Path(__file__).resolve().parents[2]))

from salondesk.analysis.engine import LLMAnalyst
from salondesk.analysis.parser import GAP, TITLE, parse_analysis
from salondesk.backend.store import ProfileStore, create_backend_client
from salondesk.core.errors import AccessDeniedError, ConfigurationError, WebhookError
from salondesk.core.logging import configure_logging
from salondesk.core.models import CalendarEvent
from salondesk.core.settings import DashboardSettings, Profile, Session
from salondesk.core.utils import get_config_value
from salondesk.ingestion.webhooks import fetch_agenda_events, fetch_reservations, send_appointment_action
from salondesk.messaging.inbox import ChatInbox
from salondesk.processing.agenda import agenda_stats, events_on
from salondesk.processing.channels import channel_breakdown
from salondesk.processing.clients import aggregate_clients, client_kpis
from salondesk.processing.invoices import ALL, aggregate_invoices, filter_invoices, invoice_kpis, toggle_status
from salondesk.processing.sync import SyncController
from salondesk.reporting.templates import clients_to_rows, invoices_to_rows


def _backend_store() -> Optional[ProfileStore]:
    if "store" not in st.session_state:
        try:
            st.session_state.store = ProfileStore(create_backend_client())
        except ConfigurationError:
            st.session_state.store = None
    return st.session_state.store


def _current_session(store: Optional[ProfileStore]) -> Session:
    """Sign in through Supabase; without a backend, run as the local admin."""

    if store is None:
        if get_config_value("SALONDESK_LOCAL_ADMIN", "0") == "1":
            return Session(Profile(id="local", full_name="Local admin", is_admin=True))
        return Session()

    if "profile" not in st.session_state:
        with st.sidebar.form("login"):
            email = st.text_input("Email")
            password = st.text_input("Contraseña", type="password")
            submitted = st.form_submit_button("Entrar")
        if not submitted:
            return Session()
        try:
            st.session_state.profile = store.sign_in(email, password)
        except AccessDeniedError as exc:
            st.sidebar.error(str(exc))
            return Session()
    return Session(st.session_state.profile)


def _settings(store: Optional[ProfileStore]) -> DashboardSettings:
    if "settings" not in st.session_state:
        base = DashboardSettings.from_env()
        st.session_state.settings = base.with_overrides(store.load_admin_settings()) if store else base
    return st.session_state.settings


def _controller(name: str, settings: DashboardSettings) -> SyncController:
    key = f"controller_{name}"
    if key not in st.session_state:
        aggregate = aggregate_clients if name == "clientes" else aggregate_invoices
        st.session_state[key] = SyncController(
            fetch=lambda: fetch_reservations(settings),
            aggregate=lambda rows: aggregate(rows, settings),
            label=name,
        )
    return st.session_state[key]


def _sync(controller: SyncController, session: Session, manual: bool) -> None:
    stamp_key = f"last_sync_{controller.label}"
    message, level = controller.refresh(session, manual=manual)
    st.session_state[stamp_key] = time.time()
    if message:
        getattr(st, level, st.info)(message)


def _maybe_sync(controller: SyncController, session: Session, settings: DashboardSettings) -> None:
    """Initial load, manual button, or auto-sync when the interval elapsed."""

    stamp_key = f"last_sync_{controller.label}"
    manual = st.button("Sincronizar", key=f"sync_{controller.label}")
    last = st.session_state.get(stamp_key)
    interval = settings.sync_interval_minutes * 60
    due = last is None or (interval and time.time() - last >= interval)
    if manual or due:
        _sync(controller, session, manual=manual)


def _render_state_problems(controller: SyncController) -> bool:
    """Show access/config/fetch problems; return True when nothing else should render."""

    state = controller.state
    if state.access_denied:
        st.error("Acceso denegado: no tienes permiso para ver esta sección.")
        return True
    if state.config_error:
        st.warning(state.config_error)
        return not state.has_data
    if state.error:
        st.error(state.error)
        return not state.has_data
    return False


def _render_analysis(text: str) -> None:
    for block in parse_analysis(text):
        if block.kind == TITLE:
            st.markdown(f"#### {block.text}")
        elif block.kind != GAP:
            st.write(block.text)


def clients_tab(session: Session, settings: DashboardSettings) -> None:
    controller = _controller("clientes", settings)
    _maybe_sync(controller, session, settings)
    if _render_state_problems(controller):
        return

    clients = controller.state.data.clients
    kpis = client_kpis(clients)
    cols = st.columns(3)
    cols[0].metric("Clientes", kpis["total"])
    cols[1].metric("Visitas promedio", kpis["avg_visits"])
    cols[2].metric("Filas descartadas", controller.state.skipped)
    st.dataframe(clients_to_rows(clients), use_container_width=True, hide_index=True)


def invoices_tab(session: Session, settings: DashboardSettings, analyst: LLMAnalyst) -> None:
    controller = _controller("facturas", settings)
    _maybe_sync(controller, session, settings)
    if _render_state_problems(controller):
        return

    now = datetime.now(settings.zone)
    invoices = controller.state.data.invoices
    kpis = invoice_kpis(invoices, now)
    cols = st.columns(3)
    cols[0].metric("Facturado este mes", f"{kpis['billed_this_month']:.2f} €")
    cols[1].metric("Facturas", kpis["total_invoices"])
    cols[2].metric("Pendientes", kpis["pending_invoices"])

    search = st.text_input("Buscar cliente o factura")
    status = st.selectbox("Estado", [ALL, "Pagado", "Pendiente"])
    professionals = sorted({item.professional for inv in invoices for item in inv.items if item.professional})
    professional = st.selectbox("Profesional", [ALL, *professionals])
    visible = filter_invoices(invoices, search=search, status=status, professional=professional)
    st.dataframe(invoices_to_rows(visible), use_container_width=True, hide_index=True)

    number = st.selectbox("Cambiar estado de la factura", [""] + [inv.invoice_number for inv in visible])
    if number and st.button("Alternar Pagado/Pendiente"):
        controller.state.data.invoices = toggle_status(invoices, number)
        st.info("Estado actualizado localmente; se perderá en la próxima sincronización.")

    if st.button("Analizar facturación con IA"):
        with st.spinner("Generando análisis..."):
            _render_analysis(analyst.analyze_invoices(invoices, now))


def agenda_tab(session: Session, settings: DashboardSettings, analyst: LLMAnalyst) -> None:
    now = datetime.now(settings.zone)
    day = st.date_input("Día", value=now.date())
    try:
        events = fetch_agenda_events(settings, day)
    except (ConfigurationError, WebhookError) as exc:
        st.error(f"Error al cargar la agenda: {exc}")
        return

    stats = agenda_stats(events, day, now)
    cols = st.columns(4)
    cols[0].metric("Citas (día)", stats["total"])
    cols[1].metric("Pendientes", stats["pending"])
    cols[2].metric("Completadas", stats["completed"])
    cols[3].metric("Próx. 7 días", stats["next_7_days"])
    st.dataframe(
        [
            {"Hora": f"{ev.start:%H:%M}", "Servicio": ev.service or ev.title, "Profesional": ev.professional,
             "Cliente": ev.client_name or ""}
            for ev in events_on(events, day)
        ],
        use_container_width=True,
        hide_index=True,
    )
    if st.button("Analizar semana con IA"):
        _render_analysis(analyst.analyze_agenda(events, now))

    _appointment_controls(settings, day, events_on(events, day))


def _appointment_controls(settings: DashboardSettings, day, day_events: List[CalendarEvent]) -> None:
    """Create/delete forms; changes show up on the next agenda fetch."""

    with st.expander("Nueva cita"):
        with st.form("nueva_cita"):
            start_time = st.time_input("Hora", value=dt_time(10, 0))
            minutes = st.number_input("Duración (min)", min_value=15, max_value=240, value=30, step=15)
            service = st.text_input("Servicio")
            professional = st.text_input("Profesional")
            client_name = st.text_input("Cliente")
            client_phone = st.text_input("Teléfono")
            submitted = st.form_submit_button("Crear cita")
        if submitted:
            start = datetime.combine(day, start_time, tzinfo=settings.zone)
            event = CalendarEvent(
                uid="",
                start=start,
                end=start + timedelta(minutes=int(minutes)),
                title=service,
                professional=professional,
                client_name=client_name or None,
                client_phone=client_phone or None,
                service=service or None,
            )
            _send_appointment(settings, "create", event, "Cita enviada.")

    if day_events:
        labels = {f"{ev.start:%H:%M} {ev.service or ev.title} ({ev.professional})": ev for ev in day_events}
        choice = st.selectbox("Cita a eliminar", list(labels))
        if st.button("Eliminar cita"):
            _send_appointment(settings, "delete", labels[choice], "Cita eliminada.")


def _send_appointment(settings: DashboardSettings, action: str, event: CalendarEvent, done: str) -> None:
    try:
        send_appointment_action(settings, action, event)
    except (ConfigurationError, WebhookError) as exc:
        st.error(f"No se pudo actualizar la agenda: {exc}")
        return
    st.success(done)


def messages_tab(session: Session, settings: DashboardSettings, store: Optional[ProfileStore],
                 analyst: LLMAnalyst) -> None:
    if not session.is_admin:
        st.error("Acceso denegado: no tienes permiso para ver esta sección.")
        return
    if store is None:
        st.info("Configura SUPABASE_URL y SUPABASE_KEY para ver los mensajes.")
        return

    try:
        inbox = ChatInbox(store.load_chats())
    except PostgrestAPIError as exc:
        st.error(f"No se pudieron cargar los chats: {exc}")
        return
    if not inbox.chats:
        st.info("No hay conversaciones.")
        return

    names = {f"{chat.name} ({chat.unread})" if chat.unread else chat.name: chat.id for chat in inbox.chats}
    chat_id = names[st.selectbox("Conversación", list(names))]
    try:
        rows = store.load_messages(chat_id)
    except PostgrestAPIError as exc:
        st.error(f"No se pudieron cargar los mensajes: {exc}")
        return
    for row in rows:
        inbox.apply_inserted_message(row)
    inbox.mark_read(chat_id)

    chat = inbox.get(chat_id)
    for message in chat.messages:
        role = "user" if message.direction == "inbound" else "assistant"
        with st.chat_message(role):
            st.write(message.body)
            st.caption(f"{message.created_at.astimezone(settings.zone):%d/%m %H:%M}")

    cols = st.columns(2)
    if cols[0].button("Resumir conversación"):
        st.info(analyst.summarize_conversation([message.body for message in chat.messages]))
    if cols[1].button("Analizar comunicación con IA"):
        try:
            reservations = fetch_reservations(settings)
        except (ConfigurationError, WebhookError) as exc:
            st.warning(f"Análisis sin reservas: {exc}")
            reservations = []
        messages = [
            {"direction": message.direction, "created_at": message.created_at.isoformat(), "body": message.body}
            for message in chat.messages
        ]
        _render_analysis(analyst.analyze_communication(messages, reservations))


def channels_tab(session: Session, settings: DashboardSettings) -> None:
    if not session.is_admin:
        st.error("Acceso denegado: no tienes permiso para ver esta sección.")
        return
    try:
        rows = fetch_reservations(settings)
    except (ConfigurationError, WebhookError) as exc:
        st.error(f"Error al cargar los datos: {exc}")
        return
    summary = channel_breakdown(rows, settings, datetime.now(settings.zone))
    cols = st.columns(3)
    cols[0].metric("Reservas", summary["total"])
    cols[1].metric("WhatsApp", summary["from_whatsapp"])
    cols[2].metric("Teléfono", summary["from_telefono"])
    if summary["daily"]:
        st.bar_chart(summary["daily"], x="date", y=["whatsapp", "telefono"])


def main() -> None:
    configure_logging()
    st.set_page_config(page_title="Salon dashboard", layout="wide")
    st.title("Panel del salón")

    store = _backend_store()
    session = _current_session(store)
    settings = _settings(store)
    try:
        settings.zone
    except ConfigurationError as exc:
        st.warning(str(exc))
        return
    analyst = LLMAnalyst()

    clients, invoices, agenda, messages, channels = st.tabs(
        ["Clientes", "Facturas", "Agenda", "Mensajes", "Canales"]
    )
    with clients:
        clients_tab(session, settings)
    with invoices:
        invoices_tab(session, settings, analyst)
    with agenda:
        agenda_tab(session, settings, analyst)
    with messages:
        messages_tab(session, settings, store, analyst)
    with channels:
        channels_tab(session, settings)


if __name__ == "__main__":
    main()
