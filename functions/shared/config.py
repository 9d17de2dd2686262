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
Environment-backed configuration for the CareLink functions.
"""

from __future__ import annotations

from functools import lru_cache
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded once per function instance from env (and `.env`)."""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Paystack
    paystack_secret_key: Optional[str] = Field(default=None)
    paystack_base_url: str = Field(default="https://api.paystack.co")
    paystack_currency: str = Field(default="KES")
    paystack_default_channels: List[str] = Field(
        default_factory=lambda: ["card", "mobile_money"]
    )
    paystack_timeout_seconds: float = Field(default=30.0)

    # Settlement
    commission_schedule_version: str = Field(default="v2")
    # Multiplier from gateway major units to the display currency.
    display_currency_rate: float = Field(default=1.0)

    # Chat notifications
    notification_max_workers: int = Field(default=8)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
