"""
Backend API Client Module.

This module is the **single source of truth** for all backend API communication.
Every HTTP call to the Foodly backend goes through ApiClient.

Key principles:
- Centralized error handling: transport failures become NetworkError, error responses
  become the matching ApiError subclass with the server's message attached
- Every request carries a timeout, so no call can hang indefinitely
- Parsed pydantic models are returned, never raw dicts
- No retries: retry policy belongs to the callers (the caches retry on the next trigger)

# NOTE: When adding new endpoints, follow this pattern:
    - Build the URL from self.base_url
    - Call self._send(...) (it adds the bearer header and the timeout)
    - Map non-2xx statuses to a typed error via self._raise_for_status(...)
    - Parse the body with self._json(...) and validate it into a model
"""

import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import ValidationError as SchemaError

from foodly.config import ApiConfig
from foodly.errors import (
    AuthError,
    FetchError,
    NetworkError,
    NotFoundError,
    StaleTokenError,
    ValidationError,
)
from foodly.models import Pagination, Recipe, Tag, User, UserProfile

logger = logging.getLogger(__name__)


def _auth_headers(token: Optional[str]) -> Dict[str, str]:
    """Helper to create the bearer header (empty when logged out)."""
    if not token:
        return {}
    return {"Authorization": f"Bearer {token}"}


def _error_message(response: requests.Response) -> str:
    text = (response.text or "").strip()
    return text or f"{response.status_code} {response.reason or ''}".strip()


class ApiClient:
    """
    Thin wrapper around a requests.Session bound to one backend.

    Attributes:
        base_url: Backend URL without trailing slash
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        """
        Initialize the client.

        Args:
            base_url: Backend URL (optional, reads FOODLY_API_URL if not provided)
            timeout: Timeout in seconds (optional, reads FOODLY_REQUEST_TIMEOUT if not provided)
            session: requests.Session to reuse (optional, a new one is created otherwise)
        """
        self.base_url = (base_url or ApiConfig.get_base_url()).rstrip("/")
        self.timeout = timeout if timeout is not None else ApiConfig.get_timeout()
        self.http = session or requests.Session()

    def recipes_url(self) -> str:
        return f"{self.base_url}/recipes"

    def recipe_url(self, recipe_id: int) -> str:
        return f"{self.base_url}/recipes/{int(recipe_id)}"

    def _send(
        self,
        method: str,
        url: str,
        token: Optional[str] = None,
        **kwargs: Any,
    ) -> requests.Response:
        """
        Issue a request and translate transport failures.

        Raises:
            NetworkError: On timeouts, connection errors or any other transport problem
        """
        headers = _auth_headers(token)
        logger.debug("%s %s (authenticated=%s)", method, url, bool(token))
        try:
            return self.http.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.Timeout as e:
            raise NetworkError(f"Request to {url} timed out after {self.timeout}s") from e
        except requests.exceptions.ConnectionError as e:
            raise NetworkError(f"Could not connect to {url}: {e}") from e
        except requests.exceptions.RequestException as e:
            raise NetworkError(f"Request to {url} failed: {e}") from e

    @staticmethod
    def _raise_for_status(
        response: requests.Response,
        mapping: Optional[Dict[int, type]] = None,
        default: type = FetchError,
    ) -> None:
        """
        Raise a typed ApiError for a non-2xx response.

        Args:
            response: Response to check
            mapping: Status code -> ApiError subclass for statuses with a specific meaning
            default: ApiError subclass for every other error status
        """
        if response.ok:
            return
        error_class = (mapping or {}).get(response.status_code, default)
        raise error_class(_error_message(response), status_code=response.status_code)

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise FetchError(f"Backend returned a non-JSON body: {e}", status_code=response.status_code) from e

    def fetch_recipe_page(self, url: str, token: Optional[str] = None) -> Pagination[Recipe]:
        """
        Fetch one page of recipes from a fully built list/search URL.

        Args:
            url: URL produced by build_recipes_url()
            token: Bearer token (optional; bookmarked/owned are resolved only when given)

        Returns:
            Pagination envelope with validated Recipe records

        Raises:
            NetworkError: Backend unreachable
            FetchError: Error status or malformed body
        """
        response = self._send("GET", url, token=token)
        self._raise_for_status(response)
        try:
            return Pagination[Recipe].model_validate(self._json(response))
        except SchemaError as e:
            raise FetchError(f"Unexpected recipe page payload: {e}", status_code=response.status_code) from e

    def fetch_recipe(self, recipe_id: int, token: Optional[str] = None) -> Recipe:
        """
        Fetch a single recipe.

        Raises:
            NotFoundError: No recipe with this id (404)
            FetchError: Any other error status or malformed body
            NetworkError: Backend unreachable
        """
        response = self._send("GET", self.recipe_url(recipe_id), token=token)
        self._raise_for_status(response, {404: NotFoundError})
        try:
            return Recipe.model_validate(self._json(response))
        except SchemaError as e:
            raise FetchError(f"Unexpected recipe payload: {e}", status_code=response.status_code) from e

    def toggle_bookmark(self, recipe_id: int, token: str) -> bool:
        """
        Toggle the bookmark of a recipe for the token's user.

        Returns:
            The new bookmark state as reported by the backend

        Raises:
            AuthError: Token missing or refused (401)
            FetchError: Any other error status, or a body that is not a boolean
            NetworkError: Backend unreachable
        """
        response = self._send("PUT", f"{self.base_url}/bookmarks/{int(recipe_id)}", token=token)
        self._raise_for_status(response, {401: AuthError})
        data = self._json(response)
        if not isinstance(data, bool):
            raise FetchError(f"Expected a boolean bookmark state, got {data!r}", status_code=response.status_code)
        return data

    def list_bookmarks(self, token: str, page: int = 1, per_page: int = 12) -> Pagination[Recipe]:
        """
        Fetch the recipes bookmarked by the token's user.

        Raises:
            AuthError: Token missing or refused (401)
            FetchError: Any other error status or malformed body
            NetworkError: Backend unreachable
        """
        response = self._send(
            "GET",
            f"{self.base_url}/bookmarks",
            token=token,
            params={"page": page, "per_page": per_page},
        )
        self._raise_for_status(response, {401: AuthError})
        try:
            return Pagination[Recipe].model_validate(self._json(response))
        except SchemaError as e:
            raise FetchError(f"Unexpected bookmark page payload: {e}", status_code=response.status_code) from e

    def list_tags(self) -> List[Tag]:
        """
        Fetch every tag known to the backend.

        Raises:
            FetchError: Error status or malformed body
            NetworkError: Backend unreachable
        """
        response = self._send("GET", f"{self.base_url}/tags")
        self._raise_for_status(response)
        data = self._json(response)
        if not isinstance(data, list):
            raise FetchError(f"Expected a list of tags, got {type(data).__name__}", status_code=response.status_code)
        try:
            return [Tag.model_validate(item) for item in data]
        except SchemaError as e:
            raise FetchError(f"Unexpected tag payload: {e}", status_code=response.status_code) from e

    def login(self, username: str, password: str) -> str:
        """
        Exchange credentials for a bearer token.

        Returns:
            The AuthToken issued by the backend

        Raises:
            AuthError: Invalid input, unknown user or wrong password (400/401/404)
            FetchError: Server error, or no AuthToken in the response
            NetworkError: Backend unreachable
        """
        response = self._send(
            "POST",
            f"{self.base_url}/login",
            json={"username": username, "password": password},
        )
        self._raise_for_status(response, {400: AuthError, 401: AuthError, 404: AuthError})
        data = self._json(response)
        token = data.get("AuthToken") if isinstance(data, dict) else None
        if not isinstance(token, str) or not token:
            raise FetchError("Login response did not contain an AuthToken string", status_code=response.status_code)
        return token

    def register(self, username: str, password: str) -> User:
        """
        Create a new user. Does not log in.

        The backend reports duplicate usernames as a server error, so every error
        response is treated as a rejection of the submitted data.

        Raises:
            ValidationError: The backend rejected the request (message verbatim)
            NetworkError: Backend unreachable
        """
        response = self._send(
            "POST",
            f"{self.base_url}/register",
            json={"username": username, "password": password},
        )
        self._raise_for_status(response, default=ValidationError)
        try:
            return User.model_validate(self._json(response))
        except SchemaError as e:
            raise FetchError(f"Unexpected user payload: {e}", status_code=response.status_code) from e

    def get_profile(self, token: str) -> UserProfile:
        """
        Look up the profile of the token's user; used to validate a persisted token.

        Raises:
            StaleTokenError: Token expired or invalid (401)
            FetchError: Any other error status or malformed body
            NetworkError: Backend unreachable
        """
        response = self._send("GET", f"{self.base_url}/profile", token=token)
        self._raise_for_status(response, {401: StaleTokenError})
        try:
            return UserProfile.model_validate(self._json(response))
        except SchemaError as e:
            raise FetchError(f"Unexpected profile payload: {e}", status_code=response.status_code) from e

    def close(self) -> None:
        self.http.close()
