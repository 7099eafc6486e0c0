"""
Event Dispatcher

Tick-driven hand-off from the background receive thread to a
single-threaded polling consumer.

Purpose:
	Lets a host that polls once per frame observe inbound data and
	connection failures without touching sockets or threads.

Workflow:
	1. Receive thread overwrites the LatestPayload slot and posts
	   Notifications from its own thread
	2. Host calls tick() once per frame
	3. tick() fires message_received if the payload changed by value
	4. tick() delivers every queued notification to its callbacks

ToDo:
	None
"""

import enum
import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from tick_tcp.payload_slot import LatestPayload

logger = logging.getLogger(__name__)


class NotificationKind(enum.Enum):
	"""Out-of-band events surfaced to the consumer on the tick thread."""
	CONNECTION_FAILED = "connection_failed"
	CONNECTION_CLOSED = "connection_closed"
	SEND_FAILED = "send_failed"


@dataclass(frozen=True)
class Notification:
	"""
	A single event posted by the connection or receive thread.

	Args:
		kind: What happened.
		reason: Human-readable description (never empty for failures).
		message: Outbound message involved, for SEND_FAILED.
	"""
	kind: NotificationKind
	reason: str = ""
	message: Optional[str] = None


MessageCallback = Callable[[str], None]
SendFailedCallback = Callable[[str, str], None]


class EventDispatcher:
	"""
	Delivers inbound payloads and notifications once per host tick.

	Args:
		payload: Slot written by the receive thread.
	"""

	def __init__(self, payload: Optional[LatestPayload] = None):
		self.payload = payload if payload is not None else LatestPayload()
		self._last_delivered: Optional[str] = None
		self._notifications: "queue.Queue[Notification]" = queue.Queue()
		self._callbacks: Dict[str, List[Callable]] = {
			"message_received": [],
			NotificationKind.CONNECTION_FAILED.value: [],
			NotificationKind.CONNECTION_CLOSED.value: [],
			NotificationKind.SEND_FAILED.value: [],
		}
		self._lock = threading.Lock()

	@property
	def last_delivered(self) -> Optional[str]:
		"""Value most recently handed to message_received callbacks."""
		return self._last_delivered

	# Registration

	def _add(self, name: str, callback: Callable) -> Callable:
		if not callable(callback):
			raise TypeError(f"callback must be callable, got {callback!r}")
		with self._lock:
			self._callbacks[name].append(callback)
		return callback

	def on_message_received(self, callback: MessageCallback) -> MessageCallback:
		"""Register callback(message); usable as a decorator."""
		return self._add("message_received", callback)

	def on_connection_failed(self, callback: MessageCallback) -> MessageCallback:
		"""Register callback(reason) for receive-loop errors."""
		return self._add(NotificationKind.CONNECTION_FAILED.value, callback)

	def on_connection_closed(self, callback: MessageCallback) -> MessageCallback:
		"""Register callback(reason) for graceful peer closes."""
		return self._add(NotificationKind.CONNECTION_CLOSED.value, callback)

	def on_send_failed(self, callback: SendFailedCallback) -> SendFailedCallback:
		"""Register callback(message, reason) for dropped writes."""
		return self._add(NotificationKind.SEND_FAILED.value, callback)

	def remove_callback(self, callback: Callable) -> bool:
		"""
		Unregister a callback from every event it was registered for.

		Returns:
			bool: True if it was registered at least once.
		"""
		removed = False
		with self._lock:
			for callbacks in self._callbacks.values():
				while callback in callbacks:
					callbacks.remove(callback)
					removed = True
		return removed

	# Cross-thread input

	def post(self, notification: Notification) -> None:
		"""Queue a notification for the next tick. Safe from any thread."""
		self._notifications.put(notification)

	@property
	def pending_notifications(self) -> int:
		return self._notifications.qsize()

	# Tick

	def tick(self) -> bool:
		"""
		Run one polling step.

		Purpose:
			The only point where data produced by the receive thread
			reaches the consumer.

		Workflow:
			1. Read the latest payload
			2. If it differs from the last delivered value, remember it and
			   fire message_received
			3. Drain queued notifications and fire their callbacks

		Returns:
			bool: True if message_received fired this tick.
		"""
		delivered = False
		current = self.payload.get()
		if current != self._last_delivered:
			self._last_delivered = current
			if current is not None:
				self._fire("message_received", current)
				delivered = True

		while True:
			try:
				notification = self._notifications.get_nowait()
			except queue.Empty:
				break
			if notification.kind is NotificationKind.SEND_FAILED:
				self._fire(notification.kind.value, notification.message, notification.reason)
			else:
				self._fire(notification.kind.value, notification.reason)

		return delivered

	def _fire(self, name: str, *args) -> None:
		with self._lock:
			callbacks = list(self._callbacks[name])
		for callback in callbacks:
			try:
				callback(*args)
			except Exception as e:
				logger.error(f"Error in {name} callback {callback!r}: {e}")
