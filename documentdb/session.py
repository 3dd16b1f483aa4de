"""
Session token tracking.

Records the most recent session token observed per resource scope so that
later session-consistency reads can ask for read-your-writes.
"""

import logging
import threading
from typing import Dict, Optional

logger = logging.getLogger(__name__)


class SessionTracker:
    """
    Process-wide map of scope key -> latest session token.

    Keys are collection links for collection-contained resources, database
    links for database-scoped ones and "" for the account. Concurrent updates
    to one key are last-writer-wins.
    """

    def __init__(self) -> None:
        self._tokens: Dict[str, str] = {}
        self._lock = threading.Lock()

    def record(self, scope: str, token: Optional[str]) -> None:
        """
        Store a newly observed token for a scope.

        Args:
            scope: Scope key
            token: Session token from a response; empty values are ignored
        """
        if not token:
            return
        with self._lock:
            previous = self._tokens.get(scope)
            self._tokens[scope] = token
        if previous != token:
            logger.debug(f"Session token updated for scope '{scope}'")

    def lookup(self, scope: str) -> Optional[str]:
        """Latest token recorded for a scope, or None."""
        with self._lock:
            return self._tokens.get(scope)

    def clear(self, scope: Optional[str] = None) -> None:
        """Forget one scope, or all of them."""
        with self._lock:
            if scope is None:
                self._tokens.clear()
            else:
                self._tokens.pop(scope, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tokens)
