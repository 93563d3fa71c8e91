"""
Session store: the single owner of the client's identity.

SessionStore holds the current Session snapshot (is_loading, is_logged_in, token),
persists the bearer token through a TokenStore and exposes register/login/logout.
Other components never write the session; they receive snapshots pushed to them.

Error policy:
- register() and login() raise typed errors (ValidationError, AuthError, NetworkError,
  FetchError) so the caller can show the server's message
- rehydrate() never raises: a refused token is purged, any other failure keeps the token
  for the next start and leaves the session logged out
- logout() is local only

# NOTE: Concurrent login() calls are not serialized; the last one to finish wins.
"""

import logging

from foodly.api_client import ApiClient
from foodly.errors import FoodlyError, StaleTokenError
from foodly.models import Session, User
from foodly.storage import TOKEN_KEY, TokenStore

logger = logging.getLogger(__name__)


class SessionStore:
    """
    Owner of the authenticated session.

    Attributes:
        client: ApiClient used for /login, /register and /profile
        storage: TokenStore holding the persisted token
    """

    def __init__(self, client: ApiClient, storage: TokenStore) -> None:
        self.client = client
        self.storage = storage
        self._session = Session()

    @property
    def session(self) -> Session:
        """Current (immutable) session snapshot."""
        return self._session

    def _update(self, **changes) -> None:
        # rebuilt rather than model_copy'd so the token invariant is validated
        self._session = Session(**{**self._session.model_dump(), **changes})

    def rehydrate(self) -> Session:
        """
        Restore the session from the persisted token.

        The token is validated against /profile:
        - success: logged in with the persisted token
        - 401 (StaleTokenError): token deleted, logged out
        - any other failure: logged out, token kept for the next attempt

        Returns:
            The resulting session (is_loading is always False afterwards)
        """
        try:
            self._restore()
        finally:
            self._update(is_loading=False)
        return self._session

    def _restore(self) -> None:
        token = self.storage.get(TOKEN_KEY)
        if not token:
            logger.debug("No persisted token; starting logged out")
            return
        try:
            profile = self.client.get_profile(token)
        except StaleTokenError as e:
            logger.info("Persisted token was refused (%s); removing it", e.message)
            self.storage.delete(TOKEN_KEY)
            return
        except FoodlyError as e:
            logger.warning("Could not validate persisted token, staying logged out: %s", e)
            return

        if profile.username:
            self._update(is_logged_in=True, token=token)
            logger.info("Session restored for user %r", profile.username)

    def register(self, username: str, password: str) -> User:
        """
        Create a new account. The session is not logged in afterwards.

        Raises:
            ValidationError: The backend rejected the credentials (e.g. duplicate username)
            NetworkError: Backend unreachable
        """
        self._update(is_loading=True)
        try:
            user = self.client.register(username, password)
            logger.info("Registered user %r", user.username)
            return user
        except FoodlyError as e:
            logger.warning("Registration of %r failed: %s", username, e)
            raise
        finally:
            self._update(is_loading=False)

    def login(self, username: str, password: str) -> None:
        """
        Log in and persist the issued token.

        Raises:
            AuthError: Invalid credentials (server message attached)
            NetworkError: Backend unreachable
            FetchError: Unexpected server error
        """
        self._update(is_loading=True)
        try:
            token = self.client.login(username, password)
        except FoodlyError as e:
            logger.warning("Login of %r failed: %s", username, e)
            raise
        else:
            self.storage.set(TOKEN_KEY, token)
            self._update(is_logged_in=True, token=token)
            logger.info("Logged in as %r", username)
        finally:
            self._update(is_loading=False)

    def logout(self) -> None:
        """Forget the token locally; no network call is made."""
        self.storage.delete(TOKEN_KEY)
        self._session = Session(is_loading=False, is_logged_in=False, token=None)
        logger.info("Logged out")
