"""
Outbound queue for messages sent while no connection exists.
"""

import logging
import threading
from typing import List, Optional

logger = logging.getLogger(__name__)


class OutboundQueue:
	"""
	FIFO, unbounded buffer of pending outbound messages.

	Written by any sender thread and drained by the receive loop. The
	backing list is only allocated on the first append, and drain() swaps
	it out under the lock so a failure while flushing can never cause the
	same batch to be processed twice.
	"""

	def __init__(self):
		self._messages: Optional[List[str]] = None
		self._lock = threading.Lock()

	def append(self, message: str) -> None:
		"""Queue a message behind everything already pending."""
		with self._lock:
			if self._messages is None:
				self._messages = []
			self._messages.append(message)

	def drain(self) -> List[str]:
		"""
		Take ownership of all pending messages and clear the queue.

		Returns:
			List[str]: Pending messages in submission order (empty if none).
		"""
		with self._lock:
			messages, self._messages = self._messages, None
		return messages or []

	@property
	def is_allocated(self) -> bool:
		"""True once a message has been queued since the last drain."""
		with self._lock:
			return self._messages is not None

	def __len__(self) -> int:
		with self._lock:
			return len(self._messages) if self._messages else 0

	def __bool__(self) -> bool:
		return len(self) > 0
