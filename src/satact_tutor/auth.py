"""Current-user tracking for the engine."""
import logging
from typing import Optional

from satact_tutor.db import KeyValueStore
from satact_tutor.errors import AuthRequired

logger = logging.getLogger(__name__)

CURRENT_USER_KEY = "current-user"


class AuthContext:
    """Holds the id of the logged-in user, remembered across runs in the store."""

    def __init__(self, store: KeyValueStore):
        self.store = store
        self._user_id: Optional[str] = None
        self._loaded = False

    @property
    def current_user_id(self) -> Optional[str]:
        if not self._loaded:
            user = self.store.get(CURRENT_USER_KEY)
            self._user_id = user["id"] if user else None
            self._loaded = True
        return self._user_id

    def require_user(self) -> str:
        user_id = self.current_user_id
        if not user_id:
            raise AuthRequired()
        return user_id

    def login(self, user_id: str, name: str = "") -> str:
        user_id = user_id.strip()
        if not user_id:
            raise ValueError("user id must not be empty")
        self.store.set(CURRENT_USER_KEY, {"id": user_id, "name": name or user_id})
        self._user_id = user_id
        self._loaded = True
        logger.info("Logged in as %s", user_id)
        return user_id

    def logout(self) -> None:
        self.store.delete(CURRENT_USER_KEY)
        self._user_id = None
        self._loaded = True
