"""
Latest-payload slot shared between the receive thread and the tick thread.
"""

import threading
from typing import Optional


class LatestPayload:
	"""
	Single overwrite-only slot holding the newest inbound text.

	Not a queue: each set() replaces the previous value, so payloads that
	arrive faster than the consumer ticks are lost. Only the most recent
	value is guaranteed to be observed.
	"""

	def __init__(self, value: Optional[str] = None):
		self._value = value
		self._lock = threading.Lock()

	def set(self, value: Optional[str]) -> None:
		with self._lock:
			self._value = value

	def get(self) -> Optional[str]:
		with self._lock:
			return self._value

	def __repr__(self) -> str:
		return f"LatestPayload({self.get()!r})"
