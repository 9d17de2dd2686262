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


ROLE_CAREGIVER = "caregiver"

# Premium entitlement for caregivers, in display currency units.
PREMIUM_THRESHOLD_AMOUNT = 300
PREMIUM_DURATION_DAYS = 30

# Paystack reports amounts in minor units (kobo, cents).
MINOR_UNITS_PER_MAJOR_UNIT = 100
GATEWAY_SUCCESS_STATUS = "success"

DEFAULT_SENDER_NAME = "Someone"
MAX_NOTIFICATION_BODY_LENGTH = 100
CHAT_MESSAGE_NOTIFICATION_TYPE = "chat_message"
TOKEN_LOG_PREFIX_LENGTH = 8
