"""
Client-side authentication state.

The front end keeps the signin result as three strings in local storage
(`authToken`, `userRole`, `userName`). `AuthStateProvider` turns them into an
`Identity` for the views. It trusts whatever is stored: the token is not
decoded, and its signature and expiry are left to the API.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

logger = logging.getLogger(__name__)

TOKEN_KEY = "authToken"
ROLE_KEY = "userRole"
NAME_KEY = "userName"

DEFAULT_CLAIM = "User"


class MemoryStorage:
    def __init__(self, items: Optional[Dict[str, str]] = None):
        self._items = dict(items or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """Local storage persisted as a flat JSON object on disk."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        with open(self.path, mode="r", encoding="utf-8") as fh:
            return json.load(fh)

    def _save(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, mode="w", encoding="utf-8") as fh:
            json.dump(items, fh)

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if items.pop(key, None) is not None:
            self._save(items)


@dataclass(frozen=True)
class Identity:
    is_authenticated: bool
    name: Optional[str] = None
    role: Optional[str] = None
    authentication_type: Optional[str] = None

    def is_in_role(self, role: str) -> bool:
        return self.is_authenticated and self.role == role


ANONYMOUS = Identity(is_authenticated=False)


class AuthStateProvider:
    def __init__(self, storage):
        self.storage = storage
        self._listeners: List[Callable[[Identity], None]] = []

    def get_authentication_state(self) -> Identity:
        token = self.storage.get_item(TOKEN_KEY)
        if not token or not token.strip():
            return ANONYMOUS

        return Identity(
            is_authenticated=True,
            name=self._claim(NAME_KEY),
            role=self._claim(ROLE_KEY),
            authentication_type="jwt",
        )

    def _claim(self, key: str) -> str:
        # Only an absent entry falls back; a stored empty string is kept.
        value = self.storage.get_item(key)
        return DEFAULT_CLAIM if value is None else value

    def subscribe(self, listener: Callable[[Identity], None]) -> Callable[[], None]:
        """Register a callback for state changes. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify_authentication_state_changed(self) -> None:
        state = self.get_authentication_state()
        for listener in list(self._listeners):
            listener(state)

    def store_session(self, signin_response: Mapping[str, Any]) -> None:
        """Persist the body returned by a signin endpoint."""
        user = signin_response.get("user") or {}
        self.storage.set_item(TOKEN_KEY, signin_response["token"])
        self.storage.set_item(ROLE_KEY, user.get("role") or DEFAULT_CLAIM)
        self.storage.set_item(NAME_KEY, user.get("fullName") or DEFAULT_CLAIM)
        logger.debug(f"Stored session for {user.get('email')}")
        self.notify_authentication_state_changed()

    def clear_session(self) -> None:
        for key in (TOKEN_KEY, ROLE_KEY, NAME_KEY):
            self.storage.remove_item(key)
        self.notify_authentication_state_changed()
