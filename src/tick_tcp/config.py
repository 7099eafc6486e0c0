"""
Configuration module for loading and managing client config files.
"""

import codecs
import yaml
from pathlib import Path
from typing import Dict, Any, Optional
from dataclasses import dataclass, field, fields, asdict

from tick_tcp.protocol import DEFAULT_ENCODING, RECEIVE_BUFFER_SIZE


# Default configuration values
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 5555
DEFAULT_JOIN_TIMEOUT = 2.0


def _is_int(value: Any) -> bool:
	# bool is an int subclass but never a valid port or size
	return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
	return _is_int(value) or isinstance(value, float)


@dataclass
class ClientConfig:
	"""
	Configuration for the polling TCP client.

	Args:
		host: Default address used when connect() is called without one.
		port: Default port used when connect() is called without one.
		buffer_size: Maximum bytes taken by a single read.
		encoding: Text codec used on the wire.
		connect_timeout: Seconds allowed for the TCP handshake (None = OS default).
		join_timeout: Seconds close() waits for the receive thread.
		mirror_errors_to_payload: Also write send-failure text into the
			latest-payload slot, as older hosts expect.
	"""
	host: str = DEFAULT_HOST
	port: int = DEFAULT_PORT
	buffer_size: int = RECEIVE_BUFFER_SIZE
	encoding: str = DEFAULT_ENCODING
	connect_timeout: Optional[float] = None
	join_timeout: float = DEFAULT_JOIN_TIMEOUT
	mirror_errors_to_payload: bool = False

	def __post_init__(self):
		"""
		Validate field values.

		Raises:
			ValueError: If any value has the wrong type or is out of range.
		"""
		if not isinstance(self.host, str) or not self.host:
			raise ValueError(f"host must be a non-empty string, got {self.host!r}")
		if not _is_int(self.port) or not 0 <= self.port <= 65535:
			raise ValueError(f"port must be an int in 0-65535, got {self.port!r}")
		if not _is_int(self.buffer_size) or self.buffer_size <= 0:
			raise ValueError(f"buffer_size must be a positive int, got {self.buffer_size!r}")
		if self.connect_timeout is not None and (
			not _is_number(self.connect_timeout) or self.connect_timeout <= 0
		):
			raise ValueError(f"connect_timeout must be a positive number, got {self.connect_timeout!r}")
		if not _is_number(self.join_timeout) or self.join_timeout <= 0:
			raise ValueError(f"join_timeout must be a positive number, got {self.join_timeout!r}")
		if not isinstance(self.mirror_errors_to_payload, bool):
			raise ValueError(
				f"mirror_errors_to_payload must be a bool, got {self.mirror_errors_to_payload!r}"
			)
		if not isinstance(self.encoding, str):
			raise ValueError(f"encoding must be a codec name, got {self.encoding!r}")
		try:
			codecs.lookup(self.encoding)
		except LookupError as e:
			raise ValueError(f"Unknown encoding: {self.encoding!r}") from e

	@classmethod
	def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
		"""
		Build a config from a plain dictionary.

		Args:
			data: Mapping of field names to values.

		Returns:
			ClientConfig: Validated configuration.

		Raises:
			ValueError: If data contains unknown keys or invalid values.
		"""
		if not isinstance(data, dict):
			raise ValueError(f"Client config must be a mapping, got {type(data).__name__}")
		known = {f.name for f in fields(cls)}
		unknown = set(data) - known
		if unknown:
			raise ValueError(f"Unknown client config keys: {sorted(unknown)}")
		return cls(**data)

	def to_dict(self) -> Dict[str, Any]:
		return asdict(self)


@dataclass
class Config:
	"""
	Configuration loaded from a YAML file.

	Attributes:
		client: Client connection settings
		logging: Logging settings used by the host script
	"""

	client: Dict[str, Any] = field(default_factory=dict)
	logging: Dict[str, Any] = field(default_factory=dict)

	@classmethod
	def from_file(cls, path: str = "configs/client_config.yaml") -> "Config":
		"""
		Load configuration from a YAML file.

		A missing file yields an empty configuration, so every value falls
		back to its ClientConfig default.

		Args:
			path: Path to the configuration file

		Returns:
			Config object with loaded configuration
		"""
		config = cls()
		if not Path(path).exists():
			return config

		with open(path, 'r') as f:
			data = yaml.safe_load(f) or {}

		if not isinstance(data, dict):
			raise ValueError(f"Config file {path} must contain a mapping")

		config.client = data.get("client") or {}
		config.logging = data.get("logging") or {}
		return config

	def client_config(self) -> ClientConfig:
		"""Build a validated ClientConfig from the client section."""
		return ClientConfig.from_dict(self.client)

	def get(self, key: str, default: Any = None) -> Any:
		"""
		Get configuration value by dot-separated key.

		Examples:
			config.get('client.port')
			config.get('logging.level')

		Args:
			key: Dot-separated configuration key
			default: Default value if key not found

		Returns:
			Configuration value or default
		"""
		parts = key.split('.')
		current = self.__dict__

		for part in parts:
			if isinstance(current, dict) and part in current:
				current = current[part]
			else:
				return default

		return current

	def set(self, key: str, value: Any) -> None:
		"""
		Set configuration value by dot-separated key.

		Args:
			key: Dot-separated configuration key
			value: Value to set
		"""
		parts = key.split('.')
		current = self.__dict__

		for part in parts[:-1]:
			if part not in current:
				current[part] = {}
			current = current[part]

		current[parts[-1]] = value

	def save(self, path: str = "configs/client_config.yaml") -> None:
		"""
		Save current configuration to a YAML file.

		Args:
			path: Destination file
		"""
		output_path = Path(path)
		output_path.parent.mkdir(parents=True, exist_ok=True)

		data = {}
		if self.client:
			data["client"] = self.client
		if self.logging:
			data["logging"] = self.logging

		with open(output_path, 'w') as f:
			yaml.dump(data, f, default_flow_style=False)
