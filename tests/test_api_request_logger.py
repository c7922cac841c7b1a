"""Tests for API request logger."""

from unittest.mock import MagicMock, patch

import pytest

from kollektiv_widget.adapters.api_request_logger import (
    log_api_request,
    should_log_requests,
)


class TestShouldLogRequests:
    """Tests for should_log_requests function."""

    def test_when_env_not_set_then_returns_false(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Given KW_LOG_REQUESTS not set, when checking, then returns False."""
        monkeypatch.delenv("KW_LOG_REQUESTS", raising=False)

        assert should_log_requests() is False

    @pytest.mark.parametrize(("value", "expected"), [("true", True), ("True", True), ("false", False)])
    def test_env_value_is_case_insensitive(
        self, monkeypatch: pytest.MonkeyPatch, value: str, expected: bool
    ) -> None:
        monkeypatch.setenv("KW_LOG_REQUESTS", value)

        assert should_log_requests() is expected


class TestLogApiRequest:
    """Tests for log_api_request function."""

    @patch("kollektiv_widget.adapters.api_request_logger.should_log_requests", return_value=False)
    @patch("kollektiv_widget.adapters.api_request_logger.logger")
    def test_when_logging_disabled_then_does_not_log(
        self, mock_logger: MagicMock, _mock_should_log: MagicMock
    ) -> None:
        log_api_request("GET", "https://api.entur.io/geocoder/v1/search")

        mock_logger.info.assert_not_called()

    @patch("kollektiv_widget.adapters.api_request_logger.should_log_requests", return_value=True)
    @patch("kollektiv_widget.adapters.api_request_logger.logger")
    def test_when_logging_enabled_with_params_then_logs_full_url(
        self, mock_logger: MagicMock, _mock_should_log: MagicMock
    ) -> None:
        """Given logging enabled with params, when calling, then logs URL with sorted params."""
        log_api_request(
            "GET", "https://api.entur.io/geocoder/v1/search", params={"text": "jern", "size": 10}
        )

        message = mock_logger.info.call_args[0][0]
        assert "GET https://api.entur.io/geocoder/v1/search?size=10&text=jern" in message

    @patch("kollektiv_widget.adapters.api_request_logger.should_log_requests", return_value=True)
    @patch("kollektiv_widget.adapters.api_request_logger.logger")
    def test_when_url_has_existing_params_then_appends_params(
        self, mock_logger: MagicMock, _mock_should_log: MagicMock
    ) -> None:
        log_api_request("GET", "https://example.com/api?existing=1", params={"new": 2})

        assert "https://example.com/api?existing=1&new=2" in mock_logger.info.call_args[0][0]

    @patch("kollektiv_widget.adapters.api_request_logger.should_log_requests", return_value=True)
    @patch("kollektiv_widget.adapters.api_request_logger.logger")
    def test_client_name_is_logged_and_secrets_are_redacted(
        self, mock_logger: MagicMock, _mock_should_log: MagicMock
    ) -> None:
        """Given identifying and secret headers, when logging, then only the secrets are redacted."""
        log_api_request(
            "POST",
            "https://api.entur.io/journey-planner/v3/graphql",
            headers={"ET-Client-Name": "acme-widget", "Authorization": "Bearer secret-token"},
        )

        message = mock_logger.info.call_args[0][0]
        assert "acme-widget" in message
        assert "***REDACTED***" in message
        assert "secret-token" not in message

    @patch("kollektiv_widget.adapters.api_request_logger.should_log_requests", return_value=True)
    @patch("kollektiv_widget.adapters.api_request_logger.logger")
    def test_graphql_payload_is_logged_as_json(
        self, mock_logger: MagicMock, _mock_should_log: MagicMock
    ) -> None:
        payload = {"query": "query { stopPlace }", "variables": {"stopId": "NSR:StopPlace:58366"}}

        log_api_request("POST", "https://api.entur.io/journey-planner/v3/graphql", payload=payload)

        message = mock_logger.info.call_args[0][0]
        assert "Payload:" in message
        assert '"stopId": "NSR:StopPlace:58366"' in message

    @patch("kollektiv_widget.adapters.api_request_logger.should_log_requests", return_value=True)
    @patch("kollektiv_widget.adapters.api_request_logger.logger")
    def test_string_payload_is_logged_verbatim(
        self, mock_logger: MagicMock, _mock_should_log: MagicMock
    ) -> None:
        log_api_request("POST", "https://example.com/api", payload="raw body")

        assert "Payload: raw body" in mock_logger.info.call_args[0][0]
