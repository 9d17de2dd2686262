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


from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class InitializeTransactionResult:
    """Result of a `initialize_transaction` call."""

    status: bool
    message: str
    # Paystack session data (authorization_url, access_code, reference).
    data: dict[str, Any] = field(default_factory=dict)


@dataclass
class TransactionRecord:
    """Schema for a verified payment stored in Firestore, keyed by reference."""

    user_id: str
    role: Optional[str]
    reference: str
    amount: float
    currency: Optional[str]
    caregiver_commission: float
    client_fee: float
    total_revenue: float
    commission_version: str
    caregiver_rate: float
    client_rate: float
    status: str
    payment_type: Optional[str]


@dataclass
class PremiumGrant:
    """Fields written to a user document when premium is activated."""

    is_premium: bool
    premium_since: Any  # datetime, converted to a Firestore timestamp on write
    premium_expiry: Any


@dataclass
class VerificationData:
    verified: bool
    status: str
    amount: float
    currency: Optional[str]
    caregiver_commission: float
    client_fee: float
    total_revenue: float
    commission_version: str
    premium_activated: bool


@dataclass
class VerificationResult:
    """Result of a `verify_transaction` call."""

    success: bool
    message: str
    data: VerificationData


@dataclass
class ChatMessage:
    """The fields of a chat message document read by the notifier."""

    sender_id: str
    text: Optional[str] = None


@dataclass
class DeliveryResult:
    """Outcome of one push send to one device token."""

    recipient_id: str
    token: str
    delivered: bool
    token_removed: bool = False
    error: Optional[str] = None
