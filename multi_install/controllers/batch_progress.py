"""Batch progress tracking and cancellation.

The coordinator is the only writer; the frontend polls ``to_dict()`` to
render the progress dialog and calls ``CancelToken.request()`` when the user
presses Cancel.
"""

import threading
from typing import Dict, Any, Optional


class CancelToken:
    """Cooperative cancellation flag, settable from any thread."""

    def __init__(self):
        self._event = threading.Event()

    def request(self) -> None:
        self._event.set()

    def is_requested(self) -> bool:
        return self._event.is_set()

    def reset(self) -> None:
        self._event.clear()


class BatchProgress:
    """Track batch install progress for the host's progress dialog."""

    def __init__(self):
        self.current = 0
        self.maximum = 0
        self.text = ""
        self.status = "idle"  # idle, running, completed, cancelled, failed
        self.error: Optional[str] = None
        self._lock = threading.Lock()

    def start(self, maximum: int) -> None:
        with self._lock:
            self.current = 0
            self.maximum = maximum
            self.text = ""
            self.status = "running"
            self.error = None

    def set_text(self, text: str) -> None:
        with self._lock:
            self.text = text

    def advance(self) -> int:
        """Count one more game as processed."""
        with self._lock:
            self.current += 1
            return self.current

    def finish(self, status: str, error: Optional[str] = None) -> None:
        with self._lock:
            self.status = status
            self.error = error

    def _calculate_progress(self) -> int:
        if self.maximum <= 0:
            return 100 if self.status in ('completed', 'cancelled', 'failed') else 0
        return int(min(self.current, self.maximum) * 100 / self.maximum)

    def to_dict(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'success': True,
                'current': self.current,
                'maximum': self.maximum,
                'text': self.text,
                'status': self.status,
                'progress_percent': self._calculate_progress(),
                'error': self.error,
            }
