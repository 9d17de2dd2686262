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


"""
Payment initialization and verification/settlement for CareLink.

Verification is safe to retry: the transaction record is keyed by the gateway
reference and fully replaced on every successful verify.
"""

import logging
from dataclasses import asdict
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from dacite import DaciteError
from firebase_functions import https_fn
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from payments import commission
from payments.paystack import PaystackClient, PaystackError, parse_transaction
from shared.api import (
    InitializeTransactionResult,
    PremiumGrant,
    TransactionRecord,
    VerificationData,
    VerificationResult,
)
from shared.config import Settings
from shared.constants import (
    GATEWAY_SUCCESS_STATUS,
    MINOR_UNITS_PER_MAJOR_UNIT,
    PREMIUM_DURATION_DAYS,
    PREMIUM_THRESHOLD_AMOUNT,
    ROLE_CAREGIVER,
)
from shared.firebase_constants import TRANSACTIONS_COLLECTION, USERS_COLLECTION
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)

INITIALIZE_FAILED_MESSAGE = "Payment initialization failed."
VERIFY_FAILED_MESSAGE = "Payment verification failed."
VERIFY_SUCCESS_MESSAGE = "Transaction verified successfully."


def _is_missing(value: Any) -> bool:
    return value is None or value == ""


def _is_positive_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


class PaymentWorkflow:
    """Runs the Paystack payment flow against an injected gateway and Firestore client."""

    def __init__(self, gateway: PaystackClient, db, settings: Settings):
        self._gateway = gateway
        self._db = db
        self._settings = settings

    def initialize(
        self,
        email: str,
        amount: int,
        reference: str,
        channels: Optional[list[str]] = None,
        metadata: Optional[dict] = None,
    ) -> dict:
        """
        Starts a Paystack payment session.

        Args:
            email (str): The payer's email.
            amount (int): The amount in minor currency units.
            reference (str): A unique reference for this payment attempt.
            channels (list[str] | None): Payment channels, defaults to the configured list.
            metadata (dict | None): Extra data attached to the transaction.

        Returns:
            A dictionary representation of the InitializeTransactionResult object.
        """
        if _is_missing(email) or _is_missing(amount) or _is_missing(reference):
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "Missing email, amount, or reference.",
            )
        if not _is_positive_int(amount):
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "amount must be a positive integer in minor currency units.",
            )

        try:
            envelope = self._gateway.initialize_transaction(
                email=email,
                amount=amount,
                reference=reference,
                currency=self._settings.paystack_currency,
                channels=channels or list(self._settings.paystack_default_channels),
                metadata=metadata or {},
            )
        except PaystackError as e:
            logger.error(f"Paystack initialize failed for {reference}: {e.message}")
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL,
                e.gateway_message or INITIALIZE_FAILED_MESSAGE,
            )

        result = InitializeTransactionResult(
            status=True,
            message=envelope.get("message") or "",
            data=envelope.get("data") or {},
        )
        return asdict(result)

    def verify(self, reference: str, user_id: str, role: Optional[str]) -> dict:
        """
        Verifies a payment with Paystack and settles it.

        Writes the transaction record and, for qualifying caregiver payments,
        (re)starts the caregiver's 30-day premium window.

        Returns:
            A camelCase dictionary representation of the VerificationResult object.
        """
        if _is_missing(reference) or _is_missing(user_id):
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "Missing reference or userId.",
            )

        try:
            envelope = self._gateway.verify_transaction(reference)
        except PaystackError as e:
            logger.error(f"Paystack verify failed for {reference}: {e.message}")
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL,
                e.gateway_message or VERIFY_FAILED_MESSAGE,
            )

        try:
            result = self._settle(envelope.get("data") or {}, reference, user_id, role)
        except https_fn.HttpsError:
            raise
        except (DaciteError, ValueError) as e:
            logger.error(f"Invalid verify payload for {reference}: {e}")
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL, VERIFY_FAILED_MESSAGE
            )
        except Exception as e:
            logger.exception(f"Settlement failed for {reference}: {e}")
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL, VERIFY_FAILED_MESSAGE
            )

        return convert_keys(asdict(result), "snake_to_camel")

    def _settle(
        self, gateway_data: dict, reference: str, user_id: str, role: Optional[str]
    ) -> VerificationResult:
        transaction = parse_transaction(gateway_data)
        if transaction.status != GATEWAY_SUCCESS_STATUS:
            logger.warning(
                f"Transaction {reference} not successful: {transaction.status}"
            )
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INTERNAL, VERIFY_FAILED_MESSAGE
            )

        amount = (
            transaction.amount
            / MINOR_UNITS_PER_MAJOR_UNIT
            * self._settings.display_currency_rate
        )
        schedule = commission.get_schedule(self._settings.commission_schedule_version)
        split = commission.compute_split(amount, schedule)

        record = TransactionRecord(
            user_id=user_id,
            role=role,
            reference=reference,
            amount=amount,
            currency=self._settings.paystack_currency,
            caregiver_commission=split.caregiver_commission,
            client_fee=split.client_fee,
            total_revenue=split.total_revenue,
            commission_version=schedule.version,
            caregiver_rate=schedule.caregiver_rate,
            client_rate=schedule.client_rate,
            status=transaction.status,
            payment_type=transaction.channel,
        )
        record_json = convert_keys(asdict(record), "snake_to_camel")
        # Raw gateway payload is stored with Paystack's own keys.
        record_json["gatewayData"] = gateway_data
        # Sentinels must be added after asdict(), which deep-copies values.
        record_json["createdAt"] = SERVER_TIMESTAMP
        self._db.collection(TRANSACTIONS_COLLECTION).document(reference).set(
            record_json
        )
        logger.info(f"Recorded transaction {reference} for user {user_id}")

        premium_activated = role == ROLE_CAREGIVER and amount >= PREMIUM_THRESHOLD_AMOUNT
        if premium_activated:
            self._grant_premium(user_id)

        return VerificationResult(
            success=True,
            message=VERIFY_SUCCESS_MESSAGE,
            data=VerificationData(
                verified=True,
                status=transaction.status,
                amount=amount,
                currency=record.currency,
                caregiver_commission=split.caregiver_commission,
                client_fee=split.client_fee,
                total_revenue=split.total_revenue,
                commission_version=schedule.version,
                premium_activated=premium_activated,
            ),
        )

    def _grant_premium(self, user_id: str) -> None:
        """Overwrites the premium window; repeat payments restart it from now."""
        now = datetime.now(timezone.utc)
        grant = PremiumGrant(
            is_premium=True,
            premium_since=now,
            premium_expiry=now + timedelta(days=PREMIUM_DURATION_DAYS),
        )
        self._db.collection(USERS_COLLECTION).document(user_id).update(
            convert_keys(asdict(grant), "snake_to_camel")
        )
        logger.info(f"Activated premium for {user_id} until {grant.premium_expiry}")
