"""
Tick TCP Client Package

Minimal bidirectional TCP client for hosts that poll once per frame.

Purpose:
	Receives a byte stream on a background thread and exposes only the
	newest payload to a single-threaded consumer, while queueing sends
	made before the connection exists.

Workflow:
	1. TickTcpClient.connect() opens the socket (fire-and-forget)
	2. ReceiveLoop flushes queued sends and overwrites LatestPayload
	3. Host calls tick() each frame; EventDispatcher fires callbacks
	4. Failures arrive as notifications on the next tick

ToDo:
	- Optional message framing for streams that need it
"""

__version__ = "0.1.0"

from tick_tcp.client import TickTcpClient
from tick_tcp.config import ClientConfig, Config
from tick_tcp.connection import ConnectionManager, ConnectionState
from tick_tcp.dispatcher import EventDispatcher, Notification, NotificationKind
from tick_tcp.outbound_queue import OutboundQueue
from tick_tcp.payload_slot import LatestPayload
from tick_tcp.receive_loop import ReceiveLoop

__all__ = [
	"TickTcpClient",
	"ClientConfig",
	"Config",
	"ConnectionManager",
	"ConnectionState",
	"EventDispatcher",
	"Notification",
	"NotificationKind",
	"OutboundQueue",
	"LatestPayload",
	"ReceiveLoop",
]
