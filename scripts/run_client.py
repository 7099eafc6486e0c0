#!/usr/bin/env python
"""
Polling Client Console

Example host loop for the tick-driven TCP client.

Purpose:
	Stands in for a game/render loop: ticks the client at a fixed frame
	rate, prints inbound payloads and failures, and forwards each stdin
	line to the server.

Workflow:
	1. Load configuration from YAML (CLI flags override it)
	2. Register printing callbacks
	3. Start a stdin reader thread that calls send()
	4. Connect, then tick every frame until interrupted (stdin EOF
	   does not stop receiving)
	5. Close the client

Usage:
	python scripts/run_client.py --host 127.0.0.1 --port 5555
	python scripts/run_client.py --config configs/client_config.yaml --fps 30
"""

import argparse
import logging
import sys
import threading
import time
from pathlib import Path

import yaml

from tick_tcp import TickTcpClient, Config


PROJECT_ROOT = Path(__file__).parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "configs" / "client_config.yaml"

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="Tick-driven TCP client console")
	parser.add_argument("--config", type=str, default=str(DEFAULT_CONFIG_PATH),
						help="Path to client YAML config")
	parser.add_argument("--host", type=str, default=None, help="Server address")
	parser.add_argument("--port", type=int, default=None, help="Server port")
	parser.add_argument("--fps", type=float, default=60.0, help="Ticks per second")
	parser.add_argument("--verbose", action="store_true", help="Log per-message traffic")
	return parser.parse_args(argv)


def _read_stdin(client: TickTcpClient) -> None:
	"""Forward each input line to the server until EOF."""
	for line in sys.stdin:
		client.send(line.rstrip("\n"))
	logger.info("stdin closed; still receiving (Ctrl+C to quit)")


def run_frames(client: TickTcpClient, fps: float, stop: threading.Event) -> int:
	"""
	Tick the client once per frame until stop is set.

	Args:
		client: Client to tick.
		fps: Ticks per second (0 or less ticks as fast as possible).
		stop: Ends the loop when set.

	Returns:
		int: Number of frames run.
	"""
	frame_time = 1.0 / fps if fps > 0 else 0.0
	frames = 0
	while not stop.is_set():
		client.tick()
		frames += 1
		time.sleep(frame_time)
	# Deliver anything that arrived during the last frame
	client.tick()
	return frames


def main(argv=None) -> int:
	args = parse_args(argv)

	try:
		config = Config.from_file(args.config)
	except (ValueError, yaml.YAMLError) as e:
		logging.basicConfig(level=logging.INFO)
		logger.error(f"Could not load config {args.config}: {e}")
		return 2

	level = "DEBUG" if args.verbose else config.get("logging.level", "INFO")
	logging.basicConfig(
		level=getattr(logging, str(level).upper(), logging.INFO),
		format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
	)

	if args.host is not None:
		config.set("client.host", args.host)
	if args.port is not None:
		config.set("client.port", args.port)

	try:
		client_config = config.client_config()
	except ValueError as e:
		logger.error(f"Invalid configuration: {e}")
		return 2

	client = TickTcpClient(client_config)
	client.on_message_received(lambda message: print(f"[server] {message}"))
	client.on_connection_failed(lambda reason: print(f"[failed] {reason}"))
	client.on_connection_closed(lambda reason: print(f"[closed] {reason}"))
	client.on_send_failed(lambda message, reason: print(f"[dropped] {message!r}: {reason}"))

	threading.Thread(target=_read_stdin, args=(client,), daemon=True).start()

	client.connect()
	try:
		run_frames(client, args.fps, threading.Event())
	except KeyboardInterrupt:
		logger.info("Interrupted")
	finally:
		client.close()

	return 0


if __name__ == "__main__":
	sys.exit(main())
