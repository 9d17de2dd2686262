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


# Cloud functions for the CareLink backend - payments + chat notifications.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Third-party library imports
from firebase_admin import initialize_app, firestore, messaging
from firebase_functions import https_fn, logger, options
from firebase_functions.firestore_fn import (
    on_document_created,
    Event,
    DocumentSnapshot,
)

# Local application imports
from notifications.chat_notifications import ChatNotifier
from payments import paystack
from payments.settlement import PaymentWorkflow
from shared.api import DeliveryResult
from shared.config import get_settings
from shared.firebase_constants import CONVERSATIONS_COLLECTION, MESSAGES_COLLECTION

initialize_app()


def _payment_workflow() -> PaymentWorkflow:
    settings = get_settings()
    gateway = paystack.PaystackClient(
        settings.paystack_secret_key,
        base_url=settings.paystack_base_url,
        timeout=settings.paystack_timeout_seconds,
    )
    return PaymentWorkflow(gateway=gateway, db=firestore.client(), settings=settings)


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def initialize_transaction(req: https_fn.CallableRequest) -> dict:
    """
    Starts a Paystack payment session for the client app.

    Args:
        req (https_fn.CallableRequest): The request, containing email, amount
            (minor units), reference, and optional channels and metadata.

    Returns:
        A dictionary representation of the InitializeTransactionResult object.
    """
    reference = req.data.get("reference")
    logger.info(f"Initializing transaction {reference}")
    return _payment_workflow().initialize(
        email=req.data.get("email"),
        amount=req.data.get("amount"),
        reference=reference,
        channels=req.data.get("channels"),
        metadata=req.data.get("metadata"),
    )


@https_fn.on_call(memory=options.MemoryOption.MB_256)
def verify_transaction(req: https_fn.CallableRequest) -> dict:
    """
    Verifies a Paystack payment, records it, and activates premium if it qualifies.

    Args:
        req (https_fn.CallableRequest): The request, containing reference, userId and role.

    Returns:
        A dictionary representation of the VerificationResult object.
    """
    reference = req.data.get("reference")
    user_id = req.data.get("userId")
    logger.info(f"Verifying transaction {reference} for user {user_id}")
    return _payment_workflow().verify(
        reference=reference,
        user_id=user_id,
        role=req.data.get("role"),
    )


@on_document_created(
    document=CONVERSATIONS_COLLECTION
    + "/{conversationId}/"
    + MESSAGES_COLLECTION
    + "/{messageId}",
)
def on_message_created(event: Event[DocumentSnapshot | None]) -> None:
    """
    Pushes a notification to the other participants of a conversation.
    Triggered by any new message document.
    """
    if event.data is None:
        return

    notify_message_created(
        conversation_id=event.params["conversationId"],
        message_id=event.params["messageId"],
        message_data=event.data.to_dict() or {},
    )


def notify_message_created(
    conversation_id: str, message_id: str, message_data: dict
) -> list[DeliveryResult]:
    """
    Runs the chat notification fan-out; never raises.

    Unexpected errors (e.g. the conversation read failing) are logged and the
    trigger still completes, so Cloud Functions does not retry the delivery.
    """
    try:
        notifier = ChatNotifier(
            db=firestore.client(),
            messaging_client=messaging,
            max_workers=get_settings().notification_max_workers,
        )
        return notifier.notify(conversation_id, message_id, message_data)
    except Exception as e:
        logger.error(
            f"Error sending notifications for {conversation_id}/{message_id}: {e}"
        )
        return []
