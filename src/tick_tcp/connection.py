"""
Connection Manager

Owns the TCP socket lifecycle for the polling client.

Purpose:
	Opens the connection, starts the background receive loop, and
	provides the synchronous send path. Messages sent while no
	connection exists are queued and flushed once connected.

Workflow:
	1. connect() opens a socket and starts a ReceiveLoop thread
	2. send() queues while disconnected, writes while connected
	3. ReceiveLoop flushes the queue, then reads until error or close
	4. Errors are logged and surfaced as notifications, never raised

ToDo:
	- Optional reconnect policy on top of the FAILED state
"""

import enum
import socket
import logging
import threading
from typing import Callable, Optional, Tuple

from tick_tcp.config import ClientConfig
from tick_tcp.dispatcher import EventDispatcher, Notification, NotificationKind
from tick_tcp.outbound_queue import OutboundQueue
from tick_tcp.protocol import encode_message, describe_error, format_error
from tick_tcp.receive_loop import ReceiveLoop

logger = logging.getLogger(__name__)


SocketFactory = Callable[[Tuple[str, int], Optional[float]], socket.socket]


class ConnectionState(enum.Enum):
	"""Lifecycle of a single connection."""
	DISCONNECTED = "disconnected"
	CONNECTING = "connecting"
	CONNECTED = "connected"
	FAILED = "failed"


class ConnectionManager:
	"""
	Fire-and-forget TCP connection with a pending outbound queue.

	Neither connect() nor send() raises for network errors. Failures are
	logged and posted to the dispatcher, which hands them to the consumer
	on its next tick.

	Args:
		config: Client configuration (uses defaults if None).
		dispatcher: Receives notifications and owns the payload slot.
		pending: Queue for messages sent while disconnected.
		socket_factory: Opens a connected socket from ((host, port), timeout).
			Defaults to socket.create_connection.
	"""

	def __init__(
		self,
		config: Optional[ClientConfig] = None,
		dispatcher: Optional[EventDispatcher] = None,
		pending: Optional[OutboundQueue] = None,
		socket_factory: Optional[SocketFactory] = None,
	):
		self.config = config or ClientConfig()
		self.dispatcher = dispatcher or EventDispatcher()
		self.payload = self.dispatcher.payload
		self.pending = pending if pending is not None else OutboundQueue()
		self._socket_factory = socket_factory or socket.create_connection

		self._state = ConnectionState.DISCONNECTED
		self._sock: Optional[socket.socket] = None
		self._loop: Optional[ReceiveLoop] = None
		self._address: Optional[Tuple[str, int]] = None
		self._state_lock = threading.Lock()
		# Held for every socket write, including queue flushes
		self._write_lock = threading.Lock()

	@property
	def state(self) -> ConnectionState:
		with self._state_lock:
			return self._state

	@property
	def is_connected(self) -> bool:
		"""
		Check if the socket is currently connected.

		Returns:
			bool: True if connected.
		"""
		return self.state is ConnectionState.CONNECTED

	@property
	def address(self) -> Optional[Tuple[str, int]]:
		"""Target of the most recent successful connect."""
		return self._address

	@property
	def pending_count(self) -> int:
		return len(self.pending)

	def connect(self, address: Optional[str] = None, port: Optional[int] = None) -> None:
		"""
		Open a TCP connection and start the receive loop.

		Purpose:
			Fire-and-forget connection setup. Nothing is returned; a failed
			attempt is logged and leaves the state FAILED.

		Workflow:
			1. Resolve defaults from config and validate arguments
			2. Ignore the call if already connecting or connected
			3. Open the socket (blocking reads, no timeout)
			4. Mark CONNECTED and start the ReceiveLoop thread

		Args:
			address: Host name or IP (config.host if None).
			port: TCP port (config.port if None).

		Raises:
			ValueError: If address is not a non-empty string or port is out of range.
		"""
		address = self.config.host if address is None else address
		port = self.config.port if port is None else port
		if not isinstance(address, str) or not address:
			raise ValueError(f"address must be a non-empty string, got {address!r}")
		if not isinstance(port, int) or not 0 <= port <= 65535:
			raise ValueError(f"port must be an int in 0-65535, got {port!r}")

		with self._state_lock:
			if self._state in (ConnectionState.CONNECTING, ConnectionState.CONNECTED):
				logger.warning(f"Connect to {address}:{port} ignored: already {self._state.value}")
				return
			self._state = ConnectionState.CONNECTING
			previous, self._loop = self._loop, None

		if previous is not None:
			previous.stop(self.config.join_timeout)

		sock = None
		try:
			sock = self._socket_factory((address, port), self.config.connect_timeout)
			sock.settimeout(None)
		except Exception as e:
			logger.error(f"On client connect exception: {format_error(e)}")
			if sock is not None:
				sock.close()
			with self._state_lock:
				if self._state is ConnectionState.CONNECTING:
					self._state = ConnectionState.FAILED
			return

		loop = ReceiveLoop(
			sock,
			flush_pending=self._flush_pending,
			on_payload=self.payload.set,
			on_failure=lambda reason, text: self._handle_failure(loop, reason, text),
			on_closed=lambda: self._handle_closed(loop),
			buffer_size=self.config.buffer_size,
			encoding=self.config.encoding,
			name=f"tick-tcp-receive-{address}:{port}",
		)

		with self._state_lock:
			if self._state is not ConnectionState.CONNECTING:
				# close() ran while the handshake was in flight
				sock.close()
				return
			self._sock = sock
			self._loop = loop
			self._address = (address, port)
			self._state = ConnectionState.CONNECTED

		logger.info(f"Connected to {address}:{port}")
		loop.start()

	def send(self, message: str) -> None:
		"""
		Send a message, or queue it if not connected.

		Args:
			message: Text to send.

		Raises:
			TypeError: If message is not a string.
		"""
		if not isinstance(message, str):
			raise TypeError(f"message must be str, got {type(message).__name__}")

		with self._state_lock:
			if self._state is not ConnectionState.CONNECTED:
				self.pending.append(message)
				logger.debug(f"Tried to send message whilst not connected, queued. {message}")
				return
			sock = self._sock

		with self._write_lock:
			self._flush_locked(sock)
			self._write(sock, message)

	def close(self, timeout: Optional[float] = None) -> None:
		"""
		Stop the receive loop and release the socket.

		Pending messages stay queued for the next connect.

		Args:
			timeout: Seconds to wait for the thread (config.join_timeout if None).
		"""
		with self._state_lock:
			loop, self._loop = self._loop, None
			self._sock = None
			previous = self._state
			self._state = ConnectionState.DISCONNECTED

		if loop is not None:
			if not loop.stop(timeout if timeout is not None else self.config.join_timeout):
				logger.warning("Receive thread did not exit before timeout")

		if previous is not ConnectionState.DISCONNECTED:
			logger.info("Connection closed")

	def _flush_pending(self) -> None:
		"""Send everything queued while disconnected. Runs on the receive thread."""
		with self._state_lock:
			sock = self._sock
		if sock is None:
			return
		with self._write_lock:
			self._flush_locked(sock)

	def _flush_locked(self, sock: socket.socket) -> None:
		# Caller holds _write_lock
		for message in self.pending.drain():
			self._write(sock, message)

	def _write(self, sock: socket.socket, message: str) -> None:
		data = encode_message(message, self.config.encoding)
		try:
			sock.sendall(data)
			logger.debug(f"[C] {message}")
		except OSError as e:
			logger.error(f"Socket exception while sending: {format_error(e)}")
			if self.config.mirror_errors_to_payload:
				self.payload.set(format_error(e))
			self.dispatcher.post(
				Notification(NotificationKind.SEND_FAILED, describe_error(e), message)
			)

	# Both handlers publish before the state flips, so a caller that sees
	# FAILED also sees the payload and notification on its next tick.

	def _handle_failure(self, loop: ReceiveLoop, reason: str, error_text: str) -> None:
		with self._state_lock:
			if self._loop is not loop:
				return
			self.payload.set(error_text)
			self.dispatcher.post(Notification(NotificationKind.CONNECTION_FAILED, reason))
			self._state = ConnectionState.FAILED
			self._sock = None

	def _handle_closed(self, loop: ReceiveLoop) -> None:
		with self._state_lock:
			if self._loop is not loop:
				return
			self.dispatcher.post(
				Notification(NotificationKind.CONNECTION_CLOSED, "Connection closed by peer")
			)
			self._state = ConnectionState.FAILED
			self._sock = None
