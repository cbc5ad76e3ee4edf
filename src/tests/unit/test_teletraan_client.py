"""Tests for the Teletraan client."""

import json
from unittest.mock import patch

import httpx
import pytest

from host_lifecycle.clients import TeletraanClient
from host_lifecycle.config import TeletraanSettings
from host_lifecycle.exceptions import LifecycleConfigurationError, TokenNotConfiguredError
from host_lifecycle.models import StatusVerdict


class TestAuthentication:
    def test_configured_token_header(self, client):
        """Test the configured token is sent as 'token <value>'."""
        assert client._get_token_header() == "token test-token"

    def test_override_token_wins(self, client):
        assert client._get_token_header("override") == "token override"

    def test_empty_override_falls_back(self, client):
        assert client._get_token_header("") == "token test-token"

    def test_missing_token_raises(self, tokenless_client):
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client._get_token_header()

    def test_override_without_configured_token(self, tokenless_client, teletraan):
        """Test a per-call token is enough when none is configured."""
        teletraan.respond(204)

        assert tokenless_client.replace_host("i-123", "c-1", override_token="per-call") is True
        assert teletraan.requests[0].headers["Authorization"] == "token per-call"

    def test_configuration_error_is_distinct(self):
        assert issubclass(TokenNotConfiguredError, LifecycleConfigurationError)


class TestMissingTokenSendsNothing:
    def test_replace(self, tokenless_client, teletraan):
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client.replace_host("i-123", "c-1")

        assert teletraan.requests == []

    def test_terminate(self, tokenless_client, teletraan):
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client.terminate_host("i-123", "c-1")

        assert teletraan.requests == []

    def test_status_queries(self, tokenless_client, teletraan):
        """Test status queries raise instead of reporting False/None."""
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client.get_host_status_history("host-a")
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client.is_host_terminated("host-a")
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client.is_host_pending_termination("host-a")
        with pytest.raises(TokenNotConfiguredError):
            tokenless_client.check_host_status("host-a")

        assert teletraan.requests == []


class TestReplaceHost:
    def test_accepted_with_204(self, client, teletraan):
        """Test replace request wire shape and 204 acceptance."""
        teletraan.respond(204)

        assert client.replace_host("i-123", "c-1") is True

        request = teletraan.requests[0]
        assert request.method == "DELETE"
        assert str(request.url) == "https://teletraan.example.com/v1/prod/clusters/c-1/replace"
        assert json.loads(request.content) == ["i-123"]
        assert request.headers["Authorization"] == "token test-token"
        assert request.headers["Content-Type"] == "application/json"

    def test_accepted_with_200(self, client, teletraan):
        teletraan.respond(200, json={})

        assert client.replace_host("i-123", "c-1") is True

    @pytest.mark.parametrize("status_code", [201, 202, 400, 401, 404, 409, 500, 503])
    def test_other_status_fails(self, client, teletraan, status_code):
        teletraan.respond(status_code)

        assert client.replace_host("i-123", "c-1") is False

    def test_transport_error_fails(self, client, teletraan):
        """Test connection errors are reported as False, not raised."""
        teletraan.fail(httpx.ConnectError("Connection refused"))

        assert client.replace_host("i-123", "c-1") is False

    def test_timeout_fails(self, client, teletraan):
        teletraan.fail(httpx.ReadTimeout("Timeout"))

        assert client.replace_host("i-123", "c-1") is False

    def test_empty_instance_id_fails_without_request(self, client, teletraan):
        assert client.replace_host("", "c-1") is False
        assert teletraan.requests == []

    def test_repeated_calls_are_not_deduplicated(self, client, teletraan):
        teletraan.respond(204)

        client.replace_host("i-123", "c-1")
        client.replace_host("i-123", "c-1")

        assert len(teletraan.requests) == 2


class TestTerminateHost:
    def test_accepted(self, client, teletraan):
        teletraan.respond(200)

        assert client.terminate_host("i-9", "c-2") is True

        request = teletraan.requests[0]
        assert request.method == "DELETE"
        assert str(request.url) == "https://teletraan.example.com/v1/prod/clusters/c-2/terminate"
        assert json.loads(request.content) == ["i-9"]

    def test_rejected(self, client, teletraan):
        teletraan.respond(403)

        assert client.terminate_host("i-9", "c-2") is False

    def test_transport_error_fails(self, client, teletraan):
        teletraan.fail(httpx.ConnectError("Connection refused"))

        assert client.terminate_host("i-9", "c-2") is False


class TestHostStatusHistory:
    def test_returns_raw_body(self, client, teletraan):
        teletraan.respond(200, json=[{"pendingTerminate": False}])

        body = client.get_host_status_history("host-a")

        assert json.loads(body) == [{"pendingTerminate": False}]
        request = teletraan.requests[0]
        assert request.method == "GET"
        assert str(request.url) == "https://teletraan.example.com/v1/hosts/host-a"
        assert request.headers["Authorization"] == "token test-token"

    def test_non_200_is_none(self, client, teletraan):
        teletraan.respond(204)

        assert client.get_host_status_history("host-a") is None

    def test_transport_error_is_none(self, client, teletraan):
        teletraan.fail(httpx.ConnectError("Connection refused"))

        assert client.get_host_status_history("host-a") is None


class TestTerminationChecks:
    def test_empty_history(self, client, teletraan):
        """Test an empty history reads as terminated for both checks."""
        teletraan.respond(200, json=[])

        assert client.is_host_terminated("host-a") is True
        assert client.is_host_pending_termination("host-a") is True

    def test_only_first_record_inspected(self, client, teletraan):
        teletraan.respond(200, json=[{"pendingTerminate": True}, {"pendingTerminate": False}])

        assert client.is_host_pending_termination("host-a") is True
        assert client.is_host_terminated("host-a") is False

    def test_present_host(self, client, teletraan):
        teletraan.respond(200, json=[{"pendingTerminate": False}])

        assert client.is_host_pending_termination("host-a") is False
        assert client.is_host_terminated("host-a") is False

    def test_server_error_is_false(self, client, teletraan):
        """Test HTTP 500 gives False for both checks without raising."""
        teletraan.respond(500)

        assert client.is_host_pending_termination("host-a") is False
        assert client.is_host_terminated("host-a") is False

    def test_unreachable_is_false(self, client, teletraan):
        teletraan.fail(httpx.ConnectError("Connection refused"))

        assert client.is_host_pending_termination("host-a") is False
        assert client.is_host_terminated("host-a") is False

    def test_malformed_body_is_false(self, client, teletraan):
        teletraan.respond(200, text="<html>maintenance</html>")

        assert client.is_host_pending_termination("host-a") is False
        assert client.is_host_terminated("host-a") is False

    def test_non_boolean_flag_is_false(self, client, teletraan):
        """Test a non-boolean pendingTerminate flag is not read as pending."""
        teletraan.respond(200, json=[{"pendingTerminate": 1}])

        assert client.is_host_pending_termination("host-a") is False
        assert not client.check_host_status("host-a").is_known

    def test_host_name_escaped(self, client, teletraan):
        teletraan.respond(200, json=[])

        client.is_host_terminated("host?a#b")

        request = teletraan.requests[0]
        assert request.url.raw_path == b"/v1/hosts/host%3Fa%23b"
        assert request.url.query == b""

    def test_override_token_used(self, client, teletraan):
        teletraan.respond(200, json=[])

        client.is_host_terminated("host-a", override_token="other")

        assert teletraan.requests[0].headers["Authorization"] == "token other"


class TestCheckHostStatus:
    def test_confirmed_verdict(self, client, teletraan):
        teletraan.respond(200, json=[{"pendingTerminate": True}])

        check = client.check_host_status("host-a")

        assert check.verdict == StatusVerdict.PENDING_TERMINATION

    def test_unknown_when_unreachable(self, client, teletraan):
        """Test an unreachable service is unknown, not a negative verdict."""
        teletraan.respond(500)

        check = client.check_host_status("host-a")

        assert not check.is_known
        assert check.reason == "Host status could not be fetched"


class TestRebind:
    def test_returns_new_handle(self, client, teletraan):
        teletraan.respond(204)

        rebound = client.rebind(environment="canary", token="canary-token")
        rebound.replace_host("i-1", "c-1")

        assert client.environment == "prod"
        assert client.token == "test-token"
        assert rebound.environment == "canary"
        request = teletraan.requests[0]
        assert str(request.url) == "https://teletraan.example.com/v1/canary/clusters/c-1/replace"
        assert request.headers["Authorization"] == "token canary-token"

    def test_shares_connection_pool(self, client):
        rebound = client.rebind(url="https://other.example.com/v1/")

        assert rebound.client is client.client
        assert rebound.url == "https://other.example.com/v1"

    def test_closing_rebound_handle_keeps_pool(self, client):
        rebound = client.rebind(token="t2")

        rebound.close()

        assert not client.client.is_closed


class TestLifecycle:
    def test_from_settings(self):
        settings = TeletraanSettings(
            url="https://teletraan.example.com/v1/",
            token="abc",
            environment="staging",
            timeout_seconds=3.0,
        )

        with TeletraanClient.from_settings(settings) as client:
            assert client.url == "https://teletraan.example.com/v1"
            assert client.environment == "staging"
            assert client.token == "abc"
            assert client.client.timeout.read == 3.0

        assert client.client.is_closed

    def test_does_not_close_injected_client(self, endpoint):
        http_client = httpx.Client()

        with TeletraanClient(endpoint, http_client=http_client):
            pass

        assert not http_client.is_closed
        http_client.close()


class TestCallLogging:
    def test_change_start_event_has_host_context(self, client, teletraan):
        """Test the call-start event names the host it is about."""
        teletraan.respond(204)

        with patch("host_lifecycle.clients.teletraan.log_external_call_start") as mock_start:
            client.replace_host("i-123", "c-1")

        _, kwargs = mock_start.call_args
        assert kwargs["instance_id"] == "i-123"
        assert kwargs["cluster_id"] == "c-1"
        assert kwargs["url"] == "https://teletraan.example.com/v1/prod/clusters/c-1/replace"

    def test_status_start_event_has_host_name(self, client, teletraan):
        teletraan.respond(200, json=[])

        with patch("host_lifecycle.clients.teletraan.log_external_call_start") as mock_start:
            client.is_host_terminated("host-a")

        _, kwargs = mock_start.call_args
        assert kwargs["host_name"] == "host-a"
