"""
Receive Loop

Background thread that owns the read side of a connected socket.

Purpose:
	Flushes messages queued while disconnected, then reads the byte
	stream and overwrites the latest-payload slot with each read.

Workflow:
	1. Take the pending outbound queue and send it in order
	2. Block in recv() for up to buffer_size bytes
	3. Decode each non-empty read and overwrite the payload slot
	4. Exit on zero-length read (peer closed), socket error, or stop()

ToDo:
	None
"""

import logging
import socket
import threading
from typing import Callable, Optional

from tick_tcp.protocol import (
	DEFAULT_ENCODING,
	RECEIVE_BUFFER_SIZE,
	decode_payload,
	describe_error,
	format_error,
)

logger = logging.getLogger(__name__)


class ReceiveLoop:
	"""
	Reads one connected socket on a dedicated daemon thread.

	The loop never retries or reconnects. It reports how it ended through
	exactly one of on_failure / on_closed, or neither when stopped. The
	socket is closed on every exit path.

	Args:
		sock: Connected socket; the loop takes ownership of it.
		flush_pending: Sends the queued outbound messages in FIFO order.
		on_payload: Receives each decoded read.
		on_failure: Called once with (reason, error_text) on any error.
		on_closed: Called once when the peer closes the stream.
		buffer_size: Maximum bytes per read.
		encoding: Text codec for inbound data.
		name: Thread name.
	"""

	def __init__(
		self,
		sock: socket.socket,
		flush_pending: Callable[[], None],
		on_payload: Callable[[str], None],
		on_failure: Callable[[str, str], None],
		on_closed: Callable[[], None],
		buffer_size: int = RECEIVE_BUFFER_SIZE,
		encoding: str = DEFAULT_ENCODING,
		name: str = "tick-tcp-receive",
	):
		self._sock = sock
		self._flush_pending = flush_pending
		self._on_payload = on_payload
		self._on_failure = on_failure
		self._on_closed = on_closed
		self.buffer_size = buffer_size
		self.encoding = encoding
		self._stop = threading.Event()
		self._active = True
		self._thread = threading.Thread(target=self.run, name=name, daemon=True)

	@property
	def is_alive(self) -> bool:
		return self._thread.is_alive()

	@property
	def stop_requested(self) -> bool:
		return self._stop.is_set()

	def start(self) -> None:
		self._thread.start()

	def stop(self, timeout: Optional[float] = None) -> bool:
		"""
		Ask the loop to exit and wait for the thread.

		Shutting the socket down wakes a recv() that would otherwise block
		forever.

		Args:
			timeout: Seconds to wait for the thread (None waits forever).

		Returns:
			bool: True if the thread has exited.
		"""
		self._stop.set()
		try:
			self._sock.shutdown(socket.SHUT_RDWR)
		except OSError as e:
			logger.debug(f"Socket shutdown during stop: {e}")
		started = self._thread.ident is not None
		if started and self._thread is not threading.current_thread():
			self._thread.join(timeout)
		return not self._thread.is_alive()

	def run(self) -> None:
		"""Thread body."""
		try:
			while self._active and not self._stop.is_set():
				self._flush_pending()
				self._read_until_closed()
		except OSError as e:
			if self._stop.is_set():
				logger.debug(f"Receive loop stopped: {e}")
			else:
				logger.error(f"Socket exception: {format_error(e)}")
				self._on_failure(describe_error(e), format_error(e))
		except Exception as e:
			logger.error(f"Receive loop crashed: {format_error(e)}")
			self._on_failure(describe_error(e), format_error(e))
		finally:
			self._close_socket()

	def _read_until_closed(self) -> None:
		while not self._stop.is_set():
			data = self._sock.recv(self.buffer_size)
			if not data:
				self._active = False
				if not self._stop.is_set():
					logger.info("Server closed the connection")
					self._on_closed()
				return

			message = decode_payload(data, self.encoding)
			logger.debug(f"[S] {message}")
			self._on_payload(message)

	def _close_socket(self) -> None:
		try:
			self._sock.close()
		except OSError as e:
			logger.debug(f"Error closing socket: {e}")
