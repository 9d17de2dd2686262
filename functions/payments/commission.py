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


from dataclasses import dataclass


@dataclass(frozen=True)
class CommissionSchedule:
    """Platform rates applied to a verified payment amount."""

    version: str
    caregiver_rate: float
    client_rate: float


@dataclass(frozen=True)
class CommissionSplit:
    caregiver_commission: float
    client_fee: float
    total_revenue: float


# Retired schedules stay registered so stored records can be re-derived from
# the version they were written with.
COMMISSION_SCHEDULES = {
    "v1": CommissionSchedule(version="v1", caregiver_rate=0.15, client_rate=0.02),
    "v2": CommissionSchedule(version="v2", caregiver_rate=0.05, client_rate=0.02),
}
CURRENT_SCHEDULE_VERSION = "v2"


def get_schedule(version: str = CURRENT_SCHEDULE_VERSION) -> CommissionSchedule:
    """
    Looks up a commission schedule by version.

    Raises:
        ValueError: If no schedule is registered for `version`.
    """
    try:
        return COMMISSION_SCHEDULES[version]
    except KeyError:
        raise ValueError(f"Unknown commission schedule version: {version}")


def compute_split(amount: float, schedule: CommissionSchedule) -> CommissionSplit:
    """Splits `amount` (display currency, major units) into platform revenue."""
    if amount < 0:
        raise ValueError(f"Amount must be non-negative, got {amount}")

    caregiver_commission = amount * schedule.caregiver_rate
    client_fee = amount * schedule.client_rate
    return CommissionSplit(
        caregiver_commission=caregiver_commission,
        client_fee=client_fee,
        total_revenue=caregiver_commission + client_fee,
    )
