"""
Tests for PaystackAdapter.

The HTTP layer is mocked; these tests pin the request we send and the way
each kind of Paystack answer is translated into RefundResult or a
PaystackError subclass.
"""

import pytest
import requests

from payments.adapters import PaystackAdapter, RefundResult
from payments.exceptions import (
    PaystackAPIError,
    PaystackError,
    PaystackTimeoutError,
    PaystackUnavailableError,
)


class TestCreateRefund:
    """Tests for PaystackAdapter.create_refund()."""

    def test_posts_transaction_and_amount(self, settings, mock_requests_post):
        settings.PAYSTACK_BASE_URL = "https://api.paystack.test/"
        settings.PAYSTACK_SECRET_KEY = "sk_test_secret"
        settings.PAYSTACK_API_TIMEOUT_SECONDS = 15

        PaystackAdapter.create_refund(transaction_reference="T685312322670591", amount_kobo=500000)

        mock_requests_post.assert_called_once_with(
            "https://api.paystack.test/refund",
            headers={
                "Authorization": "Bearer sk_test_secret",
                "Content-Type": "application/json",
            },
            json={"transaction": "T685312322670591", "amount": 500000},
            timeout=15,
        )

    def test_success_returns_refund_id(self, mock_requests_post, refund_queued_body):
        result = PaystackAdapter.create_refund("T685312322670591", 500000)

        assert isinstance(result, RefundResult)
        assert result.id == "3018284"
        assert result.message == "Refund has been queued for processing"
        assert result.raw_response == refund_queued_body()

    def test_success_without_id(self, mock_requests_post, paystack_response):
        mock_requests_post.return_value = paystack_response(
            body={"status": True, "message": "Refund queued", "data": {}}
        )

        result = PaystackAdapter.create_refund("T685312322670591", 500000)

        assert result.id is None

    def test_status_false_raises_api_error(self, mock_requests_post, paystack_response):
        body = {"status": False, "message": "Transaction has been fully reversed"}
        mock_requests_post.return_value = paystack_response(status_code=200, body=body)

        with pytest.raises(PaystackAPIError) as exc_info:
            PaystackAdapter.create_refund("T685312322670591", 500000)

        assert exc_info.value.message == "Transaction has been fully reversed"
        assert exc_info.value.response_body == body
        assert exc_info.value.error_code == "PAYSTACK_API_ERROR"

    def test_client_error_raises_api_error(self, mock_requests_post, paystack_response):
        body = {"status": False, "message": "Transaction reference not found"}
        mock_requests_post.return_value = paystack_response(status_code=404, body=body)

        with pytest.raises(PaystackAPIError) as exc_info:
            PaystackAdapter.create_refund("T0000", 500000)

        assert exc_info.value.status_code == 404
        assert exc_info.value.details["status_code"] == 404

    def test_server_error_raises_unavailable(self, mock_requests_post, paystack_response):
        mock_requests_post.return_value = paystack_response(
            status_code=502, text="<html>Bad Gateway</html>"
        )

        with pytest.raises(PaystackUnavailableError) as exc_info:
            PaystackAdapter.create_refund("T685312322670591", 500000)

        assert exc_info.value.status_code == 502
        assert exc_info.value.response_body == {
            "status": False,
            "message": "<html>Bad Gateway</html>",
        }

    def test_non_json_body_raises_api_error(self, mock_requests_post, paystack_response):
        mock_requests_post.return_value = paystack_response(status_code=200, text="OK")

        with pytest.raises(PaystackAPIError) as exc_info:
            PaystackAdapter.create_refund("T685312322670591", 500000)

        assert exc_info.value.message == "OK"

    def test_empty_message_uses_default(self, mock_requests_post, paystack_response):
        mock_requests_post.return_value = paystack_response(status_code=400, body={"status": False})

        with pytest.raises(PaystackAPIError, match="Paystack refund failed"):
            PaystackAdapter.create_refund("T685312322670591", 500000)

    def test_timeout(self, mock_requests_post):
        mock_requests_post.side_effect = requests.exceptions.Timeout("read timed out")

        with pytest.raises(PaystackTimeoutError) as exc_info:
            PaystackAdapter.create_refund("T685312322670591", 500000)

        assert exc_info.value.response_body is None
        assert exc_info.value.error_code == "PAYSTACK_TIMEOUT"

    def test_connection_error(self, mock_requests_post):
        mock_requests_post.side_effect = requests.exceptions.ConnectionError("DNS failure")

        with pytest.raises(PaystackUnavailableError) as exc_info:
            PaystackAdapter.create_refund("T685312322670591", 500000)

        assert exc_info.value.message == "Unable to connect to Paystack"
        assert exc_info.value.status_code is None

    @pytest.mark.parametrize(
        "side_effect",
        [
            requests.exceptions.Timeout(),
            requests.exceptions.ConnectionError(),
            requests.exceptions.ChunkedEncodingError("connection broken"),
            requests.exceptions.TooManyRedirects(),
            requests.exceptions.ContentDecodingError(),
            requests.exceptions.InvalidURL("bad url"),
        ],
    )
    def test_transport_errors_are_paystack_errors(self, mock_requests_post, side_effect):
        """The refund service falls back to the wallet on any PaystackError."""
        mock_requests_post.side_effect = side_effect

        with pytest.raises(PaystackError):
            PaystackAdapter.create_refund("T685312322670591", 500000)

    def test_broken_response_stream_is_unavailable(self, mock_requests_post):
        mock_requests_post.side_effect = requests.exceptions.ChunkedEncodingError(
            "connection broken"
        )

        with pytest.raises(PaystackUnavailableError) as exc_info:
            PaystackAdapter.create_refund("T685312322670591", 500000)

        assert exc_info.value.message == "Paystack request failed"
        assert exc_info.value.details["error_type"] == "ChunkedEncodingError"
