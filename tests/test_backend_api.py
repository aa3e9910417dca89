"""Unit tests for the backend REST client."""

from unittest.mock import patch

import pytest
import requests

from app.services.backend_api import (
    BackendAPIClient,
    BackendAPIError,
    parse_log_lines,
    unwrap_collection,
)
from tests.helpers import make_response

REQUEST = "app.services.backend_api.requests.request"


class TestUnwrapCollection:
    def test_bare_array(self):
        assert unwrap_collection([{"id": 1}]) == [{"id": 1}]

    def test_data_envelope(self):
        assert unwrap_collection({"data": [{"id": 1}], "success": True}) == [{"id": 1}]

    def test_domain_envelope_key(self):
        payload = {"taxInvoices": [{"invoiceId": "A"}]}

        assert unwrap_collection(payload, ("taxInvoices", "data")) == [{"invoiceId": "A"}]

    @pytest.mark.parametrize("payload", [
        {"success": True, "message": "No members found", "data": None},
        {"pendingRequest": {"billingId": "B1"}},
        {},
    ])
    def test_envelope_without_list_is_empty(self, payload):
        assert unwrap_collection(payload) == []

    @pytest.mark.parametrize("payload", [None, "text", 42])
    def test_malformed_payload(self, payload):
        with pytest.raises(BackendAPIError):
            unwrap_collection(payload)


class TestClientRequests:
    def test_bearer_token_is_attached(self):
        client = BackendAPIClient(token="abc", base_url="https://api.example")

        with patch(REQUEST, return_value=make_response([])) as request:
            client.get_collection("/api/vehicle/get_vehicles")

        method, url = request.call_args.args
        assert method == "GET"
        assert url == "https://api.example/api/vehicle/get_vehicles"
        assert request.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"
        assert request.call_args.kwargs["timeout"] == client.timeout

    def test_no_token_no_header(self):
        client = BackendAPIClient(token=None, base_url="https://api.example")

        with patch(REQUEST, return_value=make_response({"message": "sent"})) as request:
            client.post("/api/auth/request_otp", {"phone": "9999999999"})

        assert "Authorization" not in request.call_args.kwargs["headers"]
        assert request.call_args.kwargs["data"] == '{"phone": "9999999999"}'

    def test_error_message_from_body(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response({"message": "Unauthorized"}, status_code=401)):
            with pytest.raises(BackendAPIError) as exc:
                client.get_collection("/api/member/get_members")

        assert exc.value.message == "Unauthorized"
        assert exc.value.status_code == 401

    def test_error_message_default(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response(text="<html>oops</html>", status_code=500)):
            with pytest.raises(BackendAPIError) as exc:
                client.get_collection("/api/member/get_members")

        assert exc.value.message == "API error: 500"

    def test_network_failure(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, side_effect=requests.ConnectionError("refused")):
            with pytest.raises(BackendAPIError) as exc:
                client.get_collection("/api/member/get_members")

        assert exc.value.status_code is None

    def test_malformed_json(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response(text="not json")):
            with pytest.raises(BackendAPIError):
                client.get_collection("/api/member/get_members")

    def test_get_record_unwraps_envelope(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response({"data": {"membershipId": "M1"}})):
            assert client.get_record("/api/member/get_member/M1") == {"membershipId": "M1"}

    def test_get_record_empty_list_is_not_found(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response([])):
            with pytest.raises(BackendAPIError) as exc:
                client.get_record("/api/member/get_member/M1")

        assert exc.value.status_code == 404

    def test_token_is_not_sent_to_other_origins(self):
        client = BackendAPIClient(token="abc", base_url="https://api.example")

        with patch(REQUEST, return_value=make_response(text="ok")) as request:
            client.get_text("https://notify.example/api/logs?type=combined")
            client.get_text("https://api.example.evil/api/logs")

        for call in request.call_args_list:
            assert "Authorization" not in call.kwargs["headers"]

    def test_token_is_sent_to_absolute_backend_url(self):
        client = BackendAPIClient(token="abc", base_url="https://api.example/")

        with patch(REQUEST, return_value=make_response({"status": "OK"})) as request:
            client.request_json("GET", "https://api.example/api/health/check")

        assert request.call_args.kwargs["headers"]["Authorization"] == "Bearer abc"

    def test_absolute_url_is_kept(self):
        client = BackendAPIClient(token=None, base_url="https://api.example")

        with patch(REQUEST, return_value=make_response({"status": "OK"})) as request:
            client.request_json("GET", "https://other.example/api/health/check")

        assert request.call_args.args[1] == "https://other.example/api/health/check"


class TestLogs:
    def test_parse_log_lines(self):
        text = (
            "[2024-05-01 10:00:00] INFO server started\n"
            "\n"
            "[2024-05-01 10:01:00] ERROR db timeout\n"
            "plain line\n"
        )

        entries = parse_log_lines(text)

        assert len(entries) == 3
        assert entries[0]["timestamp"] == "2024-05-01 10:00:00"
        assert entries[0]["level"] == "INFO"
        assert entries[1]["level"] == "ERROR"
        assert entries[2]["level"] is None
        assert entries[2]["timestamp"] == ""

    def test_text_log_endpoint(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response(text="[t1] WARN disk low\n")):
            entries = client.get_log_entries("/api/logs/get_logs?type=combined")

        assert entries[0]["level"] == "WARN"

    def test_json_log_endpoint(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response([{"message": "x", "level": "INFO"}])):
            entries = client.get_log_entries("/api/logs/get_logs?type=combined")

        assert entries == [{"message": "x", "level": "INFO"}]

    def test_single_log_object_is_one_entry(self):
        client = BackendAPIClient(token="abc")

        with patch(REQUEST, return_value=make_response({"message": "boot", "level": "INFO"})):
            entries = client.get_log_entries("/api/logs/get_logs?type=error")

        assert entries == [{"message": "boot", "level": "INFO"}]
