import json

import pytest


US_RULES = [
    {
        "id": "US-RIDE",
        "name": "US ride hail",
        "priority": 10,
        "effective_from": "2024-09-01T00:00:00Z",
        "effective_to": "2024-09-30T23:59:59Z",
        "selectors": {"region": "US", "category": "ride_hail"},
        "effect": {"skip_steps_below": [{"step": "manager", "amount": 50, "currency": "USD"}]},
    },
    {
        "id": "US-OPEN",
        "name": "US open-ended",
        "priority": 20,
        "effective_from": "2024-10-01T00:00:00Z",
        "selectors": {"region": "US"},
        "effect": {"always_require_steps": ["compliance"]},
    },
]

EU_RULES = [
    {
        "id": "EU-RIDE",
        "name": "EU ride hail",
        "priority": 5,
        "effective_from": "2025-01-01T00:00:00Z",
        "selectors": {"region": "EU"},
        "effect": {"category_routes": {"ride_hail": ["hr"]}},
    }
]


@pytest.fixture
def write_policy_file(tmp_path):
    def _write(name: str, payload):
        path = tmp_path / name
        if isinstance(payload, str):
            path.write_text(payload)
        else:
            path.write_text(json.dumps(payload))
        return path

    return _write


@pytest.fixture
def policies_dir(tmp_path, write_policy_file):
    write_policy_file("us.json", US_RULES)
    write_policy_file("eu.json", EU_RULES)
    write_policy_file("categories.json", [{"id": "ride_hail", "label": "Ride hail"}])
    return tmp_path
