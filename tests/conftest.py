"""
Shared fixtures for the Foodly client tests.

- clock: controllable millisecond clock injected into the caches
- make_response: builds real requests.Response objects for a mocked requests.Session
- recipe_payload / page_payload: wire-format dictionaries as the backend sends them
- api: Mock(spec=ApiClient) with URL helpers wired like the real client
"""

import json
from typing import Any, Dict, List, Optional
from unittest.mock import Mock

import pytest
import requests

from foodly.api_client import ApiClient
from foodly.models import Pagination, Recipe

BASE_URL = "http://api.test"


class FakeClock:
    """Millisecond clock that only moves when told to."""

    def __init__(self, start_ms: int = 1_000_000) -> None:
        self.now = start_ms

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


def _make_response(status_code: int = 200, json_body: Any = None, text: Optional[str] = None) -> requests.Response:
    response = requests.Response()
    response.status_code = status_code
    response.reason = "OK" if status_code < 400 else "Error"
    response.encoding = "utf-8"
    if json_body is not None:
        response._content = json.dumps(json_body).encode("utf-8")
    else:
        response._content = (text or "").encode("utf-8")
    return response


def _recipe_payload(recipe_id: int = 1, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "id": recipe_id,
        "title": f"Recipe {recipe_id}",
        "servings": "4",
        "timer": 30,
        "kcal": 450,
        "carbs": 50,
        "proteins": 20,
        "fats": 10,
        "image": None,
        "instructions": ["Mix.", "Bake."],
        "ingredients": [{"unit": "g", "label": "flour", "amount": 500.0}],
        "tags": ["vegan"],
        "bookmarked": None,
        "owned": None,
        "created_at": "2023-07-10T12:00:00",
        "updated_at": "2023-07-11T12:00:00",
    }
    payload.update(overrides)
    return payload


def _page_payload(records: List[Dict[str, Any]], per_page: int = 12) -> Dict[str, Any]:
    return {"records": records, "total": len(records), "current_page": 1, "per_page": per_page}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def make_response():
    return _make_response


@pytest.fixture
def recipe_payload():
    return _recipe_payload


@pytest.fixture
def page_payload():
    return _page_payload


@pytest.fixture
def make_page():
    """Build a validated Pagination[Recipe] from recipe ids or payload dicts."""
    def _make(*items: Any) -> Pagination[Recipe]:
        records = [item if isinstance(item, dict) else _recipe_payload(item) for item in items]
        return Pagination[Recipe].model_validate(_page_payload(records))
    return _make


@pytest.fixture
def api() -> Mock:
    client = Mock(spec=ApiClient)
    client.base_url = BASE_URL
    client.recipe_url.side_effect = lambda recipe_id: f"{BASE_URL}/recipes/{recipe_id}"
    return client
