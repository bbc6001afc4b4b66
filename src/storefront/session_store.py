"""Session store holding the logged-in identity."""

import logging
import threading

from . import config
from .models import UserIdentity
from .persistence import StateRepository

logger = logging.getLogger(__name__)


class SessionStore:
    """Holds the current identity, or none.

    Login is a trusted assignment; no credentials are checked. Logging out
    does not touch the cart or the order history.
    """

    def __init__(self, repository: StateRepository, guest_id: str = config.GUEST_USER_ID):
        self.repository = repository
        self.guest_id = guest_id
        self._lock = threading.RLock()
        self._user: UserIdentity | None = None

        state = repository.load()
        if state and state.get("user"):
            self._user = UserIdentity.from_dict(state["user"])

    def _commit(self, user: UserIdentity | None) -> None:
        self.repository.save(
            {
                "user": user.to_dict() if user else None,
                "is_authenticated": user is not None,
            }
        )
        self._user = user

    @property
    def user(self) -> UserIdentity | None:
        with self._lock:
            return self._user

    @property
    def is_authenticated(self) -> bool:
        with self._lock:
            return self._user is not None

    @property
    def owner_id(self) -> str:
        """ID to record as an order owner: the user's, or the guest sentinel."""
        with self._lock:
            return self._user.id if self._user else self.guest_id

    def login(self, identity: UserIdentity) -> None:
        """Replace the current identity unconditionally."""
        with self._lock:
            self._commit(identity)
        logger.info("User logged in", extra={"user_id": identity.id})

    def logout(self) -> None:
        """Clear the current identity."""
        with self._lock:
            previous = self._user
            self._commit(None)
        if previous:
            logger.info("User logged out", extra={"user_id": previous.id})
