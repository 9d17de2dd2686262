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


import logging
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import quote

import requests
from dacite import from_dict, Config

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30  # seconds


class PaystackError(Exception):
    """Raised when Paystack cannot be reached or reports a failed request."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        gateway_message: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        # Only set from the `message` field of a Paystack response body.
        self.gateway_message = gateway_message


@dataclass
class PaystackTransaction:
    """The subset of a Paystack transaction payload used for settlement."""

    amount: int
    status: str
    reference: Optional[str] = None
    currency: Optional[str] = None
    channel: Optional[str] = None
    metadata: Any = None


def parse_transaction(data: dict) -> PaystackTransaction:
    """Parses the `data` object of a verify response."""
    return from_dict(
        data_class=PaystackTransaction,
        data=data,
        config=Config(check_types=False),
    )


class PaystackClient:
    """Minimal client for the Paystack transaction API."""

    def __init__(
        self,
        secret_key: Optional[str],
        base_url: str,
        timeout: float = REQUEST_TIMEOUT,
    ):
        self._secret_key = secret_key
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    def initialize_transaction(
        self,
        email: str,
        amount: int,
        reference: str,
        currency: str,
        channels: list[str],
        metadata: dict,
    ) -> dict:
        """
        Starts a payment session.

        Args:
            email (str): The customer's email address.
            amount (int): The amount in minor currency units.
            reference (str): The unique reference for this payment attempt.
            currency (str): The ISO currency code to charge in.
            channels (list[str]): The payment channels offered to the customer.
            metadata (dict): Arbitrary data attached to the transaction.

        Returns:
            dict: The Paystack response envelope ({status, message, data}).

        Raises:
            PaystackError: If the request fails or Paystack reports failure.
        """
        payload = {
            "email": email,
            "amount": amount,
            "reference": reference,
            "currency": currency,
            "channels": channels,
            "metadata": metadata,
        }
        return self._request("POST", "/transaction/initialize", json=payload)

    def verify_transaction(self, reference: str) -> dict:
        """
        Fetches the current state of a transaction.

        Returns:
            dict: The Paystack response envelope ({status, message, data}).

        Raises:
            PaystackError: If the request fails or Paystack reports failure.
        """
        path = f"/transaction/verify/{quote(reference, safe='')}"
        return self._request("GET", path)

    def _request(self, method: str, path: str, **kwargs) -> dict:
        headers = {"Authorization": f"Bearer {self._secret_key}"}
        try:
            response = requests.request(
                method,
                self._base_url + path,
                headers=headers,
                timeout=self._timeout,
                **kwargs,
            )
        except requests.RequestException as e:
            raise PaystackError(f"Could not reach Paystack: {e}") from e

        body = _json_body(response)
        gateway_message = body.get("message") or None
        if not response.ok:
            raise PaystackError(
                gateway_message or f"Paystack returned HTTP {response.status_code}",
                status_code=response.status_code,
                gateway_message=gateway_message,
            )
        if not body.get("status"):
            raise PaystackError(
                gateway_message or "Paystack reported an unsuccessful request",
                status_code=response.status_code,
                gateway_message=gateway_message,
            )
        return body


def _json_body(response: requests.Response) -> dict:
    try:
        body = response.json()
    except ValueError:
        logger.warning("Paystack returned a non-JSON body (HTTP %s)", response.status_code)
        return {}
    return body if isinstance(body, dict) else {}
