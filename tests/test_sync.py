"""Tests for the sync controller: access, errors, and stale results."""
import pytest

from salondesk.core.errors import ConfigurationError, WebhookError
from salondesk.core.settings import DashboardSettings, Profile, Session
from salondesk.processing.clients import aggregate_clients
from salondesk.processing.sync import SyncController


@pytest.fixture
def controller(dummy_rows, settings):
    return SyncController(
        fetch=lambda: dummy_rows,
        aggregate=lambda rows: aggregate_clients(rows, settings),
        label="clientes",
    )


def _raise(exc):
    def _fetch():
        raise exc

    return _fetch


def test_non_admin_is_denied_without_fetching(controller):
    calls = []
    controller.fetch = lambda: calls.append("fetched")
    viewer = Session(Profile(id="u-2", is_admin=False))

    feedback = controller.refresh(viewer, manual=True)

    assert feedback == (None, None)
    assert controller.state.access_denied is True
    assert calls == []


def test_initial_load_populates_state(controller, admin_session):
    feedback = controller.refresh(admin_session)

    assert feedback == (None, None)
    assert controller.state.has_data
    assert len(controller.state.data.clients) == 3
    assert controller.state.skipped == 3
    assert controller.state.error is None


def test_manual_sync_reports_success(controller, admin_session):
    message, level = controller.refresh(admin_session, manual=True)

    assert level == "success"
    assert "clientes" in message


def test_configuration_error_is_reported(controller, admin_session):
    controller.fetch = _raise(ConfigurationError("reservations_webhook_url is not configured"))

    assert controller.refresh(admin_session) == (None, None)
    assert "not configured" in controller.state.config_error

    message, level = controller.refresh(admin_session, manual=True)
    assert level == "warning"
    assert "not configured" in message


def test_fetch_failure_keeps_previous_data(controller, admin_session):
    controller.refresh(admin_session)
    previous = controller.state.data
    controller.fetch = _raise(WebhookError("Network error: timeout"))

    message, level = controller.refresh(admin_session, manual=True)

    assert level == "error"
    assert message == "Error loading clientes: Network error: timeout"
    assert controller.state.data is previous
    assert controller.state.error == message


def test_success_clears_previous_error(controller, admin_session, dummy_rows):
    controller.fetch = _raise(WebhookError("boom"))
    controller.refresh(admin_session)
    assert controller.state.error

    controller.fetch = lambda: dummy_rows
    controller.refresh(admin_session)

    assert controller.state.error is None
    assert controller.state.has_data


def test_stale_generation_is_discarded(controller):
    older = controller.begin()
    newer = controller.begin()

    assert controller.complete(newer, "fresh") is True
    assert controller.complete(older, "stale") is False
    assert controller.fail(older, "late failure") is False
    assert controller.state.data == "fresh"
    assert controller.state.error is None


def test_results_resolving_in_order_are_all_applied(controller):
    first = controller.begin()
    assert controller.complete(first, "one") is True
    second = controller.begin()
    assert controller.complete(second, "two") is True
    assert controller.state.data == "two"


def test_unknown_timezone_is_reported_as_configuration(dummy_rows, admin_session):
    misconfigured = DashboardSettings(reservations_webhook_url="https://hooks.example.test/sheet",
                                      timezone="Europe/Madird")
    controller = SyncController(
        fetch=lambda: dummy_rows,
        aggregate=lambda rows: aggregate_clients(rows, misconfigured),
        label="clientes",
    )

    message, level = controller.refresh(admin_session, manual=True)

    assert level == "warning"
    assert "Europe/Madird" in message
    assert "Europe/Madird" in controller.state.config_error
    assert not controller.state.has_data
