"""
Toast notifications queued by the page controller and drained by the browser.
"""

import logging
from datetime import datetime
from typing import Dict, List

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(message)s')
logger = logging.getLogger(__name__)

DEFAULT_DURATION = 2000
DEFAULT_POSITION = 'top-right'


class ToastQueue:
    """Pending user-facing notifications."""

    def __init__(self):
        self._pending: List[Dict] = []

    @property
    def pending(self) -> List[Dict]:
        return list(self._pending)

    def push(self, kind: str, message: str, duration: int = DEFAULT_DURATION,
             position: str = DEFAULT_POSITION) -> Dict:
        toast = {
            'kind': kind,
            'message': message,
            'duration': duration,
            'position': position,
            'created_at': datetime.now().isoformat(),
        }
        self._pending.append(toast)
        return toast

    def success(self, message: str, duration: int = 3000, position: str = DEFAULT_POSITION) -> Dict:
        return self.push('success', message, duration, position)

    def error(self, message: str, duration: int = 5000, position: str = DEFAULT_POSITION) -> Dict:
        logger.warning(f"User error notification: {message}")
        return self.push('error', message, duration, position)

    def drain(self) -> List[Dict]:
        toasts, self._pending = self._pending, []
        return toasts
