"""User store - in-memory storage for user accounts."""

import threading
from typing import Dict, List, Optional

from membership_service.models import User
from membership_service.repositories.base import UserNotFoundError, UserRepository


class InMemoryUserStore(UserRepository):
    """In-memory storage for user accounts."""

    def __init__(self):
        self._users: Dict[str, User] = {}
        self._lock = threading.RLock()

    def add(self, user: User) -> User:
        """Add a user.

        Raises:
            ValueError: If user id already exists
        """
        with self._lock:
            if user.id in self._users:
                raise ValueError(f"User with id '{user.id}' already exists")
            self._users[user.id] = user.model_copy(deep=True)
            return user.model_copy(deep=True)

    def get_by_id(self, user_id: str) -> User:
        """Get user by id.

        Raises:
            UserNotFoundError: If user id not found
        """
        user = self.find_by_id(user_id)
        if user is None:
            raise UserNotFoundError(f"User not found: {user_id}", context={"user_id": user_id})
        return user

    def find_by_id(self, user_id: str) -> Optional[User]:
        with self._lock:
            user = self._users.get(user_id)
            return user.model_copy(deep=True) if user else None

    def update(self, user: User) -> User:
        with self._lock:
            if user.id not in self._users:
                raise UserNotFoundError(f"User not found: {user.id}", context={"user_id": user.id})
            self._users[user.id] = user.model_copy(deep=True)
            return user.model_copy(deep=True)

    def remove(self, user_id: str) -> None:
        with self._lock:
            if user_id not in self._users:
                raise UserNotFoundError(f"User not found: {user_id}", context={"user_id": user_id})
            del self._users[user_id]

    def get_all(self) -> List[User]:
        with self._lock:
            return [u.model_copy(deep=True) for u in self._users.values()]

    def clear(self) -> None:
        with self._lock:
            self._users.clear()
