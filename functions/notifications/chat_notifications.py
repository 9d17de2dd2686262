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
Push notification fan-out for new chat messages.

Each recipient is handled on its own worker, and each of the recipient's
device tokens is sent on its own worker. All branches are joined before
`ChatNotifier.notify` returns; send errors are consumed per token.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional

from dacite import from_dict, Config
from firebase_admin import exceptions as firebase_exceptions
from firebase_admin import messaging
from google.cloud.firestore_v1 import ArrayRemove

from shared.api import ChatMessage, DeliveryResult
from shared.constants import (
    CHAT_MESSAGE_NOTIFICATION_TYPE,
    DEFAULT_SENDER_NAME,
    MAX_NOTIFICATION_BODY_LENGTH,
    TOKEN_LOG_PREFIX_LENGTH,
)
from shared.firebase_constants import (
    CONVERSATIONS_COLLECTION,
    CONVERSATION_PARTICIPANTS_FIELD,
    USERS_COLLECTION,
    USER_NAME_FIELD,
    USER_TOKENS_FIELD,
)
from shared.json_utils import convert_keys

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8

# Errors meaning the token will never be deliverable again.
INVALID_TOKEN_ERRORS = (
    messaging.UnregisteredError,
    firebase_exceptions.InvalidArgumentError,
)


def _token_prefix(token: str) -> str:
    return token[:TOKEN_LOG_PREFIX_LENGTH]


def get_recipients(participants: list[str], sender_id: str) -> list[str]:
    """Returns the participants other than the sender, in order, without duplicates."""
    return [p for p in dict.fromkeys(participants) if p and p != sender_id]


def truncate_body(text: Optional[str]) -> str:
    return (text or "")[:MAX_NOTIFICATION_BODY_LENGTH]


class ChatNotifier:
    """Sends a chat message notification to every other conversation participant."""

    def __init__(
        self, db, messaging_client=messaging, max_workers: int = DEFAULT_MAX_WORKERS
    ):
        self._db = db
        self._messaging = messaging_client
        self._max_workers = max(1, max_workers)

    def notify(
        self, conversation_id: str, message_id: str, message_data: dict
    ) -> list[DeliveryResult]:
        """
        Fans a newly created chat message out to the other participants.

        Args:
            conversation_id (str): The parent conversation id.
            message_id (str): The created message id.
            message_data (dict): The message document (camelCase keys).

        Returns:
            list[DeliveryResult]: One result per attempted token send.
        """
        message = from_dict(
            data_class=ChatMessage,
            data=convert_keys(message_data, "camel_to_snake"),
            config=Config(check_types=False),
        )

        conversation = (
            self._db.collection(CONVERSATIONS_COLLECTION).document(conversation_id).get()
        )
        if not conversation.exists:
            logger.info(f"Conversation {conversation_id} not found, nothing to notify")
            return []

        participants = (conversation.to_dict() or {}).get(
            CONVERSATION_PARTICIPANTS_FIELD
        ) or []
        recipients = get_recipients(participants, message.sender_id)
        if not recipients:
            logger.info(f"No recipients for message {message_id} in {conversation_id}")
            return []

        notification = messaging.Notification(
            title=self._get_sender_name(message.sender_id),
            body=truncate_body(message.text),
        )
        data = {
            "type": CHAT_MESSAGE_NOTIFICATION_TYPE,
            "conversationId": conversation_id,
            "messageId": message_id,
            "senderId": message.sender_id,
        }

        workers = min(self._max_workers, len(recipients))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._notify_recipient, recipient_id, notification, data)
                for recipient_id in recipients
            ]
            results = []
            for future in futures:
                results.extend(future.result())

        delivered = sum(1 for r in results if r.delivered)
        logger.info(
            f"Message {message_id}: delivered {delivered}/{len(results)} notifications "
            f"to {len(recipients)} recipients"
        )
        return results

    def _get_sender_name(self, sender_id: str) -> str:
        sender = self._db.collection(USERS_COLLECTION).document(sender_id).get()
        if not sender.exists:
            return DEFAULT_SENDER_NAME
        return (sender.to_dict() or {}).get(USER_NAME_FIELD) or DEFAULT_SENDER_NAME

    def _notify_recipient(
        self, recipient_id: str, notification: messaging.Notification, data: dict
    ) -> list[DeliveryResult]:
        try:
            user = self._db.collection(USERS_COLLECTION).document(recipient_id).get()
        except Exception as e:
            logger.exception(f"Failed to read tokens for {recipient_id}: {e}")
            return []

        user_data = (user.to_dict() or {}) if user.exists else {}
        tokens = list(dict.fromkeys(user_data.get(USER_TOKENS_FIELD) or []))
        if not tokens:
            logger.info(f"No device tokens for {recipient_id}, skipping")
            return []

        workers = min(self._max_workers, len(tokens))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(
                    self._send_to_token, recipient_id, token, notification, data
                )
                for token in tokens
            ]
            return [future.result() for future in futures]

    def _send_to_token(
        self,
        recipient_id: str,
        token: str,
        notification: messaging.Notification,
        data: dict,
    ) -> DeliveryResult:
        message = messaging.Message(token=token, notification=notification, data=data)
        try:
            self._messaging.send(message)
        except INVALID_TOKEN_ERRORS as e:
            logger.info(
                f"Invalid token {_token_prefix(token)}... for {recipient_id}: {e}"
            )
            return DeliveryResult(
                recipient_id=recipient_id,
                token=token,
                delivered=False,
                token_removed=self._remove_token(recipient_id, token),
                error=str(e),
            )
        except Exception as e:
            logger.error(
                f"Failed to notify {recipient_id} on token {_token_prefix(token)}...: {e}"
            )
            return DeliveryResult(
                recipient_id=recipient_id, token=token, delivered=False, error=str(e)
            )

        return DeliveryResult(recipient_id=recipient_id, token=token, delivered=True)

    def _remove_token(self, recipient_id: str, token: str) -> bool:
        """Removes exactly `token` from the recipient's token array."""
        try:
            self._db.collection(USERS_COLLECTION).document(recipient_id).update(
                {USER_TOKENS_FIELD: ArrayRemove([token])}
            )
        except Exception as e:
            logger.error(
                f"Failed to remove token {_token_prefix(token)}... for {recipient_id}: {e}"
            )
            return False
        return True
