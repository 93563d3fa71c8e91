"""
End-to-end tests for RecipeBrowser against a routed, mocked requests.Session.

Each test wires the real ApiClient, caches and session store; only the HTTP layer is
replaced. The tests verify that:
- Login persists the token and the following refresh sends "Bearer <token>"
- Identity changes reload the list with the new identity
- A bookmark toggle shows up identically in the list and the detail view
"""

from unittest.mock import Mock

import pytest
import requests

from foodly.api_client import ApiClient
from foodly.browser import RecipeBrowser
from foodly.models import Tag
from foodly.storage import TOKEN_KEY, MemoryTokenStore

BASE = "http://api.test"


class Backend:
    """Minimal request router standing in for the Foodly backend."""

    def __init__(self, make_response, recipe_payload, page_payload):
        self.make_response = make_response
        self.recipe_payload = recipe_payload
        self.page_payload = page_payload
        self.calls = []
        self.bookmarked = set()

    def _recipes(self, token):
        records = []
        for recipe_id in (1, 2):
            bookmarked = (recipe_id in self.bookmarked) if token else None
            records.append(self.recipe_payload(recipe_id, bookmarked=bookmarked))
        return records

    def __call__(self, method, url, headers=None, timeout=None, **kwargs):
        auth = (headers or {}).get("Authorization")
        token = auth.split(" ", 1)[1] if auth else None
        self.calls.append((method, url, auth))

        if method == "POST" and url == f"{BASE}/login":
            if kwargs["json"] == {"username": "Guest", "password": "p4ssW0Rd!"}:
                return self.make_response(200, {"AuthToken": "abc"})
            return self.make_response(401, text="Failed to authorize access")
        if method == "GET" and url == f"{BASE}/profile":
            if token == "abc":
                return self.make_response(200, {"username": "Guest"})
            return self.make_response(401, text="Unauthorized")
        if method == "GET" and url.startswith(f"{BASE}/recipes/search/"):
            bookmarked = (9 in self.bookmarked) if token else None
            return self.make_response(200, self.page_payload([self.recipe_payload(9, bookmarked=bookmarked)]))
        if method == "GET" and url.startswith(f"{BASE}/recipes/"):
            recipe_id = int(url.rsplit("/", 1)[1])
            if recipe_id > 2:
                return self.make_response(404, text="Recipe not found.")
            return self.make_response(200, self._recipes(token)[recipe_id - 1])
        if method == "GET" and url.startswith(f"{BASE}/recipes"):
            return self.make_response(200, self.page_payload(self._recipes(token)))
        if method == "GET" and url == f"{BASE}/tags":
            return self.make_response(200, [{"label": "Vegan", "slug": "vegan"}])
        if method == "PUT" and url.startswith(f"{BASE}/bookmarks/"):
            if token != "abc":
                return self.make_response(401, text="Please log in to edit your bookmarks.")
            recipe_id = int(url.rsplit("/", 1)[1])
            self.bookmarked ^= {recipe_id}
            return self.make_response(200, recipe_id in self.bookmarked)
        return self.make_response(404, text="no route")

    def urls(self, method="GET"):
        return [url for m, url, _ in self.calls if m == method]


@pytest.fixture
def backend(make_response, recipe_payload, page_payload):
    return Backend(make_response, recipe_payload, page_payload)


@pytest.fixture
def storage():
    return MemoryTokenStore()


@pytest.fixture
def browser(backend, storage, clock):
    http = Mock(spec=requests.Session)
    http.request.side_effect = backend
    client = ApiClient(base_url=BASE, timeout=5, session=http)
    return RecipeBrowser(client=client, storage=storage, clock=clock)


class TestStartup:
    def test_anonymous_start_loads_list(self, browser, backend):
        session = browser.start()

        assert session.is_loading is False
        assert session.is_logged_in is False
        assert [r.id for r in browser.recipes] == [1, 2]
        assert browser.query.last_marker.token is None
        assert backend.urls() == [f"{BASE}/recipes"]

    def test_persisted_token_restored(self, browser, backend, storage):
        storage.set(TOKEN_KEY, "abc")

        browser.start()

        assert browser.session.is_logged_in is True
        assert backend.calls[-1] == ("GET", f"{BASE}/recipes", "Bearer abc")

    def test_expired_token_purged(self, browser, storage):
        storage.set(TOKEN_KEY, "expired")

        browser.start()

        assert storage.get(TOKEN_KEY) is None
        assert browser.session.is_logged_in is False


class TestLoginFlow:
    def test_login_then_refresh_sends_bearer(self, browser, backend, storage, clock):
        browser.start()
        clock.advance(1000)

        browser.login("Guest", "p4ssW0Rd!")

        assert browser.session.is_logged_in is True
        assert storage.get(TOKEN_KEY) == "abc"
        assert backend.calls[-1] == ("GET", f"{BASE}/recipes", "Bearer abc")
        assert browser.query.last_marker.token == "abc"
        assert all(r.bookmarked is False for r in browser.recipes)

    def test_logout_reloads_anonymously(self, browser, backend, clock):
        browser.start()
        clock.advance(1000)
        browser.login("Guest", "p4ssW0Rd!")
        clock.advance(1000)

        browser.logout()

        assert backend.calls[-1] == ("GET", f"{BASE}/recipes", None)
        assert all(r.bookmarked is None for r in browser.recipes)

    def test_login_right_after_start_reloads_with_token(self, browser, backend, clock):
        browser.start()
        clock.advance(80)

        browser.login("Guest", "p4ssW0Rd!")

        assert backend.calls[-1] == ("GET", f"{BASE}/recipes", "Bearer abc")
        assert browser.query.last_marker.token == "abc"
        assert browser.query.is_current is True
        assert all(r.bookmarked is False for r in browser.recipes)

    def test_logout_right_after_login_reloads_anonymously(self, browser, backend, clock):
        browser.start()
        browser.login("Guest", "p4ssW0Rd!")
        clock.advance(10)

        browser.logout()

        assert backend.calls[-1] == ("GET", f"{BASE}/recipes", None)
        assert browser.query.last_marker.token is None
        assert all(r.bookmarked is None for r in browser.recipes)


class TestBrowsing:
    def test_search_and_filter(self, browser, backend, clock):
        browser.start()
        clock.advance(1000)
        browser.search("pizza")
        clock.advance(1000)
        browser.filter_by_slugs(["vegan"])

        assert browser.query.search.filter == [Tag(label="Vegan", slug="vegan")]
        assert backend.urls()[-1] == f"{BASE}/recipes/search/pizza?page=1&per_page=12&tags[]=vegan"

    def test_search_right_after_start(self, browser, backend, clock):
        browser.start()
        clock.advance(50)

        assert browser.search("pizza") is True

        assert backend.urls()[-1] == f"{BASE}/recipes/search/pizza?page=1&per_page=12"
        assert [r.id for r in browser.recipes] == [9]
        assert browser.query.is_current is True

    def test_filter_right_after_search(self, browser, backend, clock):
        browser.start()
        browser.search("pizza")
        clock.advance(20)

        assert browser.filter_by_slugs(["vegan"]) is True
        assert backend.urls()[-1] == f"{BASE}/recipes/search/pizza?page=1&per_page=12&tags[]=vegan"

    def test_repeated_search_served_from_cache(self, browser, backend, clock):
        browser.start()
        browser.search("pizza")
        calls_before = len(backend.calls)
        clock.advance(10)

        assert browser.search("pizza") is False
        assert len(backend.calls) == calls_before

    def test_tag_catalog_expiry_follows_browser_clock(self, browser, backend, clock):
        browser.start()
        browser.filter_by_slugs(["vegan"])
        clock.advance(60_000)
        browser.filter_by_slugs([])
        assert backend.urls().count(f"{BASE}/tags") == 1

        clock.advance(3_600_000)
        browser.filter_by_slugs(["vegan"])
        assert backend.urls().count(f"{BASE}/tags") == 2

    def test_open_listed_recipe_makes_no_request(self, browser, backend):
        browser.start()
        calls_before = len(backend.calls)

        assert browser.open_recipe(2).id == 2
        assert len(backend.calls) == calls_before

    def test_open_unknown_recipe(self, browser, backend):
        browser.start()
        assert browser.open_recipe(3) is None
        assert browser.entity.error.status_code == 404

    def test_bookmark_consistent_in_list_and_detail(self, browser, clock):
        browser.start()
        clock.advance(1000)
        browser.login("Guest", "p4ssW0Rd!")
        browser.open_recipe(2)

        assert browser.toggle_bookmark(2) is True

        listed = next(r for r in browser.recipes if r.id == 2)
        assert listed.bookmarked is True
        assert browser.recipe.bookmarked is True

    def test_bookmark_logged_out_makes_no_request(self, browser, backend):
        browser.start()
        calls_before = len(backend.calls)

        assert browser.toggle_bookmark(1) is None
        assert len(backend.calls) == calls_before
