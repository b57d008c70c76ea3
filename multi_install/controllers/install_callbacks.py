"""Games reported as installed by the host's completion notifications.

The host may deliver notifications on its own thread while the batch
coordinator reads and clears the set from the event loop, so every access
goes through a lock. Listeners are called outside the lock.
"""

import logging
import threading
from typing import Callable, FrozenSet, List

logger = logging.getLogger(__name__)


class InstallCallbackSet:
    """Thread-safe set of game ids seen in "game installed" notifications."""

    def __init__(self):
        self._ids = set()
        self._lock = threading.Lock()
        self._listeners: List[Callable[[str], None]] = []

    def add(self, game_id: str) -> None:
        game_id = str(game_id)
        with self._lock:
            self._ids.add(game_id)
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(game_id)
            except Exception as e:
                logger.error(f"[Callbacks] Listener failed for {game_id}: {e}", exc_info=True)

    def __contains__(self, game_id) -> bool:
        with self._lock:
            return str(game_id) in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)

    def snapshot(self) -> FrozenSet[str]:
        with self._lock:
            return frozenset(self._ids)

    def clear(self) -> None:
        with self._lock:
            self._ids.clear()

    def subscribe(self, listener: Callable[[str], None]) -> None:
        """Call ``listener(game_id)`` for every id added from now on."""
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Callable[[str], None]) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)
