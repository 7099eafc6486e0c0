"""
Polling TCP client facade used by the host's frame loop.
"""

import logging
from typing import Optional

from tick_tcp.config import ClientConfig, Config
from tick_tcp.connection import ConnectionManager, ConnectionState, SocketFactory
from tick_tcp.dispatcher import EventDispatcher, MessageCallback, SendFailedCallback

logger = logging.getLogger(__name__)


class TickTcpClient:
	"""
	Bidirectional TCP client for hosts that poll once per frame.

	Wires a ConnectionManager to an EventDispatcher that share one
	latest-payload slot. Call tick() from the host's update loop; all
	callbacks run on that thread.

	Args:
		config: Client configuration (uses defaults if None).
		socket_factory: Optional replacement for socket.create_connection.

	Example:
		client = TickTcpClient(ClientConfig(port=9000))
		client.on_message_received(print)
		client.connect("127.0.0.1")
		while running:
			client.tick()
	"""

	def __init__(
		self,
		config: Optional[ClientConfig] = None,
		socket_factory: Optional[SocketFactory] = None,
	):
		self.config = config or ClientConfig()
		self.dispatcher = EventDispatcher()
		self.connection = ConnectionManager(
			config=self.config,
			dispatcher=self.dispatcher,
			socket_factory=socket_factory,
		)

	@classmethod
	def from_config_file(cls, path: str, **kwargs) -> "TickTcpClient":
		"""Create a client from the client section of a YAML config file."""
		return cls(Config.from_file(path).client_config(), **kwargs)

	@property
	def state(self) -> ConnectionState:
		return self.connection.state

	@property
	def is_connected(self) -> bool:
		return self.connection.is_connected

	@property
	def pending_count(self) -> int:
		return self.connection.pending_count

	@property
	def latest_payload(self) -> Optional[str]:
		"""Current slot value, which may not have been delivered yet."""
		return self.dispatcher.payload.get()

	def connect(self, address: Optional[str] = None, port: Optional[int] = None) -> None:
		self.connection.connect(address, port)

	def send(self, message: str) -> None:
		self.connection.send(message)

	def tick(self) -> bool:
		return self.dispatcher.tick()

	def close(self, timeout: Optional[float] = None) -> None:
		self.connection.close(timeout)

	def on_message_received(self, callback: MessageCallback) -> MessageCallback:
		return self.dispatcher.on_message_received(callback)

	def on_connection_failed(self, callback: MessageCallback) -> MessageCallback:
		return self.dispatcher.on_connection_failed(callback)

	def on_connection_closed(self, callback: MessageCallback) -> MessageCallback:
		return self.dispatcher.on_connection_closed(callback)

	def on_send_failed(self, callback: SendFailedCallback) -> SendFailedCallback:
		return self.dispatcher.on_send_failed(callback)

	def remove_callback(self, callback) -> bool:
		return self.dispatcher.remove_callback(callback)

	def __enter__(self) -> "TickTcpClient":
		return self

	def __exit__(self, exc_type, exc, tb) -> None:
		self.close()
