"""Tests for the console presenter and status summary."""

import logging
from zoneinfo import ZoneInfo

import pytest

from kollektiv_widget.adapters.console import ConsolePresenter
from kollektiv_widget.adapters.console.console_presenter import format_relative
from kollektiv_widget.application.status_summary import next_departure, summarize
from kollektiv_widget.domain.models import MonitorState, NotificationStatus, TransportMode
from kollektiv_widget.domain.models.status_summary import NO_DEPARTURES_TEXT
from tests.fakes import BASE_TIME, make_departure, make_route


@pytest.mark.parametrize(
    ("minutes", "expected"),
    [(-2, "now"), (0.5, "now"), (5, "5m"), (60, "1h"), (80, "1h20m")],
)
def test_format_relative(minutes: float, expected: str) -> None:
    assert format_relative(make_departure(minutes), BASE_TIME) == expected


def test_summary_picks_earliest_departure_across_routes() -> None:
    departures = {
        "a": (make_departure(7),),
        "b": (make_departure(4, mode=TransportMode.TRAM),),
    }

    summary = summarize(departures, BASE_TIME)

    assert summary.text == "4m"
    assert summary.transport_mode is TransportMode.TRAM


def test_summary_says_now_for_departure_within_the_minute() -> None:
    assert summarize({"a": (make_departure(0.5),)}, BASE_TIME).text == "Now"


def test_summary_without_departures_is_a_dash() -> None:
    summary = summarize({"a": ()}, BASE_TIME)

    assert summary.text == NO_DEPARTURES_TEXT
    assert summary.transport_mode is None


def test_next_departure_ignores_departed() -> None:
    upcoming = make_departure(3)

    assert next_departure({"a": (make_departure(-1), upcoming)}, BASE_TIME) == upcoming


def make_state(**overrides) -> MonitorState:
    route = make_route()
    values = {
        "routes": (route,),
        "departures": {route.id: (make_departure(3), make_departure(65))},
        "last_updated": BASE_TIME,
        "notification_status": NotificationStatus.enabled(),
        "summary": summarize({route.id: (make_departure(3),)}, BASE_TIME),
    }
    values.update(overrides)
    return MonitorState(**values)


def test_render_lists_routes_and_status_line() -> None:
    presenter = ConsolePresenter(ZoneInfo("Europe/Oslo"))

    lines = presenter.render(make_state())

    assert lines[0] == "Bus 31 to Tonsenhagen @ Jernbanetorget: 3m (11:03), 1h5m (12:05)"
    assert lines[1] == "Next: 3m | Notifications active | updated 11:00:00"


def test_render_marks_failed_routes() -> None:
    route = make_route()
    presenter = ConsolePresenter(ZoneInfo("Europe/Oslo"))

    lines = presenter.render(make_state(departures={route.id: ()}, failed_route_ids=frozenset({route.id})))

    assert lines[0].endswith("update failed")


def test_on_state_changed_logs_lines(caplog: pytest.LogCaptureFixture) -> None:
    presenter = ConsolePresenter(ZoneInfo("Europe/Oslo"))

    with caplog.at_level(logging.INFO):
        presenter.on_state_changed(make_state())

    assert "Bus 31 to Tonsenhagen" in caplog.text


def test_on_state_changed_without_routes_hints_how_to_add(caplog: pytest.LogCaptureFixture) -> None:
    presenter = ConsolePresenter()

    with caplog.at_level(logging.INFO):
        presenter.on_state_changed(make_state(routes=(), departures={}))

    assert "kollektiv-config add" in caplog.text
