"""
Shared pytest fixtures for test suite.
Provides a scripted TCP server, an in-memory fake socket, and polling helpers.
"""

import queue
import socket
import threading
import time
from typing import Callable, List, Optional

import pytest

from tick_tcp import ClientConfig, TickTcpClient


# ===== Helpers =====

def _wait_until(predicate: Callable[[], bool], timeout: float = 5.0, interval: float = 0.005) -> bool:
	"""Poll predicate until it is true or timeout expires."""
	deadline = time.monotonic() + timeout
	while time.monotonic() < deadline:
		if predicate():
			return True
		time.sleep(interval)
	return predicate()


class ScriptedServer:
	"""
	Single-client TCP server driven from the test thread.

	Accepts one connection on a background thread and records every byte
	the client sends. The test writes to the client with send().
	"""

	def __init__(self, host: str = "127.0.0.1"):
		self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
		self._listener.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
		self._listener.bind((host, 0))
		self._listener.listen(1)
		self._listener.settimeout(5.0)
		self.host, self.port = self._listener.getsockname()[:2]

		self._client: Optional[socket.socket] = None
		self._connected = threading.Event()
		self._received = bytearray()
		self._lock = threading.Lock()
		self._thread = threading.Thread(target=self._serve, daemon=True)
		self._thread.start()

	def _serve(self) -> None:
		try:
			client, _ = self._listener.accept()
		except OSError:
			return
		self._client = client
		self._connected.set()
		while True:
			try:
				data = client.recv(4096)
			except OSError:
				return
			if not data:
				return
			with self._lock:
				self._received.extend(data)

	@property
	def received(self) -> bytes:
		with self._lock:
			return bytes(self._received)

	def wait_for_client(self, timeout: float = 5.0) -> bool:
		return self._connected.wait(timeout)

	def wait_for_received(self, size: int, timeout: float = 5.0) -> bytes:
		"""Wait until at least size bytes arrived and return them all."""
		_wait_until(lambda: len(self.received) >= size, timeout)
		return self.received

	def send(self, data: bytes) -> None:
		assert self._client is not None, "no client connected"
		self._client.sendall(data)

	def close_client(self) -> None:
		"""Close the accepted connection gracefully (FIN)."""
		if self._client is None:
			return
		try:
			self._client.shutdown(socket.SHUT_RDWR)
		except OSError:
			pass
		self._client.close()

	def stop(self) -> None:
		self.close_client()
		self._listener.close()
		self._thread.join(timeout=2.0)


class FakeSocket:
	"""
	In-memory stand-in for a connected socket.

	recv() blocks until the test feeds bytes or an exception; sendall()
	records writes or raises the configured error.
	"""

	def __init__(self):
		self._inbound: "queue.Queue" = queue.Queue()
		self._lock = threading.Lock()
		self._sent: List[bytes] = []
		self.send_error: Optional[OSError] = None
		self.timeout = "unset"
		self.shut_down = False
		self.closed = False

	def settimeout(self, timeout) -> None:
		self.timeout = timeout

	def feed(self, data: bytes) -> None:
		self._inbound.put(data)

	def fail(self, exc: BaseException) -> None:
		self._inbound.put(exc)

	def recv(self, bufsize: int) -> bytes:
		item = self._inbound.get()
		if isinstance(item, BaseException):
			raise item
		if not item:
			# Stay at EOF for any later reads
			self._inbound.put(b"")
		return item[:bufsize]

	def sendall(self, data: bytes) -> None:
		if self.send_error is not None:
			raise self.send_error
		with self._lock:
			self._sent.append(data)

	@property
	def sent(self) -> List[bytes]:
		with self._lock:
			return list(self._sent)

	def shutdown(self, how: int) -> None:
		if self.closed:
			raise OSError(9, "Bad file descriptor")
		self.shut_down = True
		self._inbound.put(b"")

	def close(self) -> None:
		self.closed = True


class FakeSocketFactory:
	"""socket_factory replacement that hands out FakeSockets in order."""

	def __init__(self, error: Optional[OSError] = None):
		self.error = error
		self.sockets: List[FakeSocket] = []
		self.calls = []

	def __call__(self, address, timeout):
		self.calls.append((address, timeout))
		if self.error is not None:
			raise self.error
		sock = FakeSocket()
		self.sockets.append(sock)
		return sock

	@property
	def last(self) -> FakeSocket:
		return self.sockets[-1]


# ===== Fixtures =====

@pytest.fixture
def wait_until():
	"""Polling helper: wait_until(predicate, timeout=5.0) -> bool."""
	return _wait_until


@pytest.fixture
def server():
	"""Scripted single-client TCP server on an ephemeral port."""
	srv = ScriptedServer()
	yield srv
	srv.stop()


@pytest.fixture
def free_port():
	"""A port with nothing listening on it."""
	with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
		s.bind(("127.0.0.1", 0))
		return s.getsockname()[1]


@pytest.fixture
def client():
	"""Client with default config, closed at teardown."""
	c = TickTcpClient(ClientConfig(join_timeout=2.0))
	yield c
	c.close()


@pytest.fixture
def fake_factory():
	return FakeSocketFactory()


@pytest.fixture
def fake_client(fake_factory):
	"""Client whose sockets come from fake_factory."""
	c = TickTcpClient(ClientConfig(), socket_factory=fake_factory)
	yield c
	c.close()


class Recorder:
	"""Collects callback invocations."""

	def __init__(self):
		self.calls = []

	def __call__(self, *args):
		self.calls.append(args[0] if len(args) == 1 else args)


@pytest.fixture
def recorder():
	return Recorder
