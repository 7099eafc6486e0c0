"""
Wire Protocol

Raw text codec for the polling TCP client.

Purpose:
	Converts outbound strings to bytes and inbound reads back to text.
	There is no length prefix and no delimiter: whatever a single recv()
	returns is treated as one logical message.

Workflow:
	1. send() encodes the message with encode_message()
	2. The receive loop reads at most RECEIVE_BUFFER_SIZE bytes per call
	3. Each non-empty read is decoded with decode_payload()

ToDo:
	- Optional delimiter-based framing layer for peers that batch writes
"""

import logging

logger = logging.getLogger(__name__)


DEFAULT_ENCODING = "ascii"
RECEIVE_BUFFER_SIZE = 1024
REPLACEMENT_CHAR = "?"


def encode_message(message: str, encoding: str = DEFAULT_ENCODING) -> bytes:
	"""
	Encode an outbound message for the wire.

	Characters the encoding cannot represent become '?'.

	Args:
		message: Text to send.
		encoding: Codec name.

	Returns:
		bytes: Encoded message.

	Raises:
		TypeError: If message is not a string.
	"""
	if not isinstance(message, str):
		raise TypeError(f"message must be str, got {type(message).__name__}")
	return message.encode(encoding, errors="replace")


def decode_payload(data: bytes, encoding: str = DEFAULT_ENCODING) -> str:
	"""
	Decode one inbound read into text.

	Undecodable bytes become '?' rather than U+FFFD, the same as the
	outbound replacement character.

	Args:
		data: Bytes returned by a single recv().
		encoding: Codec name.

	Returns:
		str: Decoded payload.
	"""
	text = data.decode(encoding, errors="replace")
	return text.replace("\ufffd", REPLACEMENT_CHAR)


def describe_error(exc: BaseException) -> str:
	"""Short, never-empty reason string for a socket error."""
	reason = str(exc)
	return reason if reason else type(exc).__name__


def format_error(exc: BaseException) -> str:
	"""Full error text (class name and message) as stored in the payload slot."""
	return f"{type(exc).__name__}: {describe_error(exc)}"
