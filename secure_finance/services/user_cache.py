import threading
from typing import Dict, Optional

from secure_finance.logging_config import get_logger

logger = get_logger(__name__)


class UserIdCache:
    """
    Username -> user id lookup, filled lazily on authentication.

    Entries are dropped when the account is deleted or renamed, so a
    reused username never resolves to the old account's id.
    """

    def __init__(self):
        self._ids: Dict[str, int] = {}
        self._lock = threading.Lock()

    def get(self, username: str) -> Optional[int]:
        with self._lock:
            return self._ids.get(username)

    def put(self, username: str, user_id: int) -> None:
        with self._lock:
            self._ids[username] = user_id

    def invalidate(self, username: str) -> None:
        with self._lock:
            if self._ids.pop(username, None) is not None:
                logger.debug("Dropped cached id for user '%s'", username)

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)
