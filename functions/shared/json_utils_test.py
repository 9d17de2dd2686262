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

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.json_utils import convert_keys


class ConvertKeysTest(unittest.TestCase):

    def test_snake_to_camel_nested(self):
        data = {
            "caregiver_commission": 25.0,
            "created_at": SERVER_TIMESTAMP,
            "data": {"premium_activated": True, "items": [{"user_id": "u1"}]},
        }

        converted = convert_keys(data, "snake_to_camel")

        self.assertEqual(
            converted,
            {
                "caregiverCommission": 25.0,
                "createdAt": SERVER_TIMESTAMP,
                "data": {"premiumActivated": True, "items": [{"userId": "u1"}]},
            },
        )
        self.assertIs(converted["createdAt"], SERVER_TIMESTAMP)

    def test_camel_to_snake(self):
        self.assertEqual(
            convert_keys({"senderId": "A", "text": "hi"}, "camel_to_snake"),
            {"sender_id": "A", "text": "hi"},
        )

    def test_unknown_direction(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "upper")


if __name__ == "__main__":
    unittest.main()
