# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

import unittest
from unittest.mock import MagicMock, patch

import requests

from payments import paystack


def _response(status_code=200, body=None, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    if json_error:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


class PaystackClientTest(unittest.TestCase):

    def setUp(self):
        self.client = paystack.PaystackClient(
            "sk_test_123", base_url="https://api.paystack.co/", timeout=10
        )

    @patch("payments.paystack.requests.request")
    def test_initialize_transaction(self, mock_request):
        body = {
            "status": True,
            "message": "Authorization URL created",
            "data": {"authorization_url": "https://checkout.paystack.com/abc"},
        }
        mock_request.return_value = _response(body=body)

        result = self.client.initialize_transaction(
            email="jane@example.com",
            amount=50000,
            reference="ref_123",
            currency="KES",
            channels=["card"],
            metadata={"userId": "user_1"},
        )

        self.assertEqual(result, body)
        mock_request.assert_called_once_with(
            "POST",
            "https://api.paystack.co/transaction/initialize",
            headers={"Authorization": "Bearer sk_test_123"},
            timeout=10,
            json={
                "email": "jane@example.com",
                "amount": 50000,
                "reference": "ref_123",
                "currency": "KES",
                "channels": ["card"],
                "metadata": {"userId": "user_1"},
            },
        )

    @patch("payments.paystack.requests.request")
    def test_verify_transaction(self, mock_request):
        body = {"status": True, "data": {"amount": 50000, "status": "success"}}
        mock_request.return_value = _response(body=body)

        result = self.client.verify_transaction("ref/123")

        self.assertEqual(result, body)
        mock_request.assert_called_once_with(
            "GET",
            "https://api.paystack.co/transaction/verify/ref%2F123",
            headers={"Authorization": "Bearer sk_test_123"},
            timeout=10,
        )

    @patch("payments.paystack.requests.request")
    def test_http_error_carries_gateway_message(self, mock_request):
        mock_request.return_value = _response(
            status_code=400,
            body={"status": False, "message": "Transaction reference not found"},
        )

        with self.assertRaises(paystack.PaystackError) as cm:
            self.client.verify_transaction("ref_123")

        self.assertEqual(cm.exception.message, "Transaction reference not found")
        self.assertEqual(cm.exception.gateway_message, "Transaction reference not found")
        self.assertEqual(cm.exception.status_code, 400)

    @patch("payments.paystack.requests.request")
    def test_http_error_without_json_body(self, mock_request):
        mock_request.return_value = _response(
            status_code=502, json_error=ValueError("not json")
        )

        with self.assertRaises(paystack.PaystackError) as cm:
            self.client.verify_transaction("ref_123")

        self.assertEqual(cm.exception.message, "Paystack returned HTTP 502")
        self.assertIsNone(cm.exception.gateway_message)

    @patch("payments.paystack.requests.request")
    def test_unsuccessful_envelope(self, mock_request):
        mock_request.return_value = _response(
            body={"status": False, "message": "Invalid key"}
        )

        with self.assertRaises(paystack.PaystackError) as cm:
            self.client.initialize_transaction(
                "jane@example.com", 50000, "ref_123", "KES", ["card"], {}
            )

        self.assertEqual(cm.exception.message, "Invalid key")

    @patch("payments.paystack.requests.request")
    def test_network_error(self, mock_request):
        mock_request.side_effect = requests.ConnectionError("connection refused")

        with self.assertRaises(paystack.PaystackError) as cm:
            self.client.verify_transaction("ref_123")

        self.assertIn("Could not reach Paystack", cm.exception.message)
        self.assertIsNone(cm.exception.status_code)
        self.assertIsNone(cm.exception.gateway_message)


class ParseTransactionTest(unittest.TestCase):

    def test_parse_transaction_ignores_extra_fields(self):
        transaction = paystack.parse_transaction(
            {
                "id": 4099260516,
                "reference": "ref_123",
                "amount": 50000,
                "status": "success",
                "currency": "KES",
                "channel": "card",
                "customer": {"email": "jane@example.com"},
            }
        )

        self.assertEqual(transaction.amount, 50000)
        self.assertEqual(transaction.status, "success")
        self.assertEqual(transaction.channel, "card")
        self.assertIsNone(transaction.metadata)


if __name__ == "__main__":
    unittest.main()
