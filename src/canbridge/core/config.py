"""
Configuration management for the CAN bridge.
Loads from YAML and provides type-safe access to settings.
"""

from dataclasses import dataclass, field
from typing import Dict, Tuple, Union
import yaml
from pathlib import Path

from canbridge.constants import (
    TopicConstants,
    MqttConstants,
    ZmqConstants,
    BridgeConstants,
    DEFAULT_ROUTE_TABLE,
)


def get_project_root() -> Path:
    """
    Find the project root directory by locating pyproject.toml.

    Returns:
        Path to project root directory
    """
    current = Path(__file__).resolve()
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent

    # Fallback: src/canbridge/core/config.py -> project root
    return Path(__file__).resolve().parents[3]


# Default config path at project root
DEFAULT_CONFIG_PATH = get_project_root() / "config.yaml"


@dataclass
class TransportConfig:
    """Which transport to use."""
    kind: str = "mqtt"  # 'mqtt' or 'zmq'
    client_id: str = MqttConstants.DEFAULT_CLIENT_ID


@dataclass
class MqttConfig:
    """MQTT broker connection settings."""
    host: str = MqttConstants.DEFAULT_HOST
    port: int = MqttConstants.DEFAULT_PORT
    keepalive: int = MqttConstants.DEFAULT_KEEPALIVE
    clean_session: bool = True
    qos: int = MqttConstants.QOS_AT_LEAST_ONCE
    retain: bool = MqttConstants.DEFAULT_RETAIN


@dataclass
class ZmqConfig:
    """ZMQ bus endpoints (clients connect to the local broker)."""
    sub_url: str = ZmqConstants.DEFAULT_SUB_URL
    pub_url: str = ZmqConstants.DEFAULT_PUB_URL


@dataclass
class TopicsConfig:
    """Subscriptions made at startup."""
    subscriptions: Tuple[str, ...] = TopicConstants.DEFAULT_SUBSCRIPTIONS


@dataclass
class BridgeConfig:
    """Bridge server behaviour."""
    verbose: bool = False
    stats_interval: float = BridgeConstants.DEFAULT_STATS_INTERVAL
    enable_footer: bool = True


@dataclass
class Config:
    """
    Master configuration container.

    Aggregates all subsystem configurations.
    """
    transport: TransportConfig = field(default_factory=TransportConfig)
    mqtt: MqttConfig = field(default_factory=MqttConfig)
    zmq: ZmqConfig = field(default_factory=ZmqConfig)
    topics: TopicsConfig = field(default_factory=TopicsConfig)
    bridge: BridgeConfig = field(default_factory=BridgeConfig)

    # Arbitration id -> topic for sim/canmessages
    routes: Dict[int, str] = field(default_factory=lambda: dict(DEFAULT_ROUTE_TABLE))


def parse_arbitration_id(value: Union[int, str]) -> int:
    """
    Parse an arbitration id from YAML.

    Accepts ints and strings in any base Python understands ("0x100", "256").
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid arbitration id: {value!r}")
    if isinstance(value, int):
        return value
    return int(str(value).strip(), 0)


def parse_routes(data: Dict) -> Dict[int, str]:
    return {parse_arbitration_id(k): str(v) for k, v in data.items()}


class ConfigManager:
    """
    Configuration manager with YAML loading.

    Usage:
        # Load from project root config.yaml (default)
        config = ConfigManager.load()

        # Load from specific path
        config = ConfigManager.load('path/to/config.yaml')

        # Use built-in defaults only
        config = ConfigManager.load('default')

        host = config.mqtt.host
    """

    @staticmethod
    def load(config_path: str | Path | None = None) -> Config:
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to YAML config file.
                        If None, tries to load from project root config.yaml.
                        If "default", uses built-in defaults without loading file.

        Returns:
            Config object with loaded settings
        """
        if config_path == "default":
            return Config()

        if config_path is None:
            config_path = DEFAULT_CONFIG_PATH

        path = Path(config_path)
        if not path.exists():
            print(f"Warning: Config file {config_path} not found. Using defaults.")
            return Config()

        try:
            with open(path, 'r') as f:
                data = yaml.safe_load(f) or {}

            return ConfigManager.from_dict(data)

        except (yaml.YAMLError, ValueError, TypeError, AttributeError) as e:
            print(f"Error loading config: {e}")
            print("Using default configuration.")
            return Config()

    @staticmethod
    def from_dict(data: Dict) -> Config:
        """
        Build a Config from a parsed YAML document.

        Missing sections and keys keep their defaults.
        """
        # Parse transport config
        transport_cfg = TransportConfig()
        if 'transport' in data:
            tr_data = data['transport']
            transport_cfg = TransportConfig(
                kind=tr_data.get('kind', transport_cfg.kind),
                client_id=tr_data.get('client_id', transport_cfg.client_id),
            )

        # Parse MQTT config
        mqtt_cfg = MqttConfig()
        if 'mqtt' in data:
            mqtt_data = data['mqtt']
            mqtt_cfg = MqttConfig(
                host=mqtt_data.get('host', mqtt_cfg.host),
                port=int(mqtt_data.get('port', mqtt_cfg.port)),
                keepalive=int(mqtt_data.get('keepalive', mqtt_cfg.keepalive)),
                clean_session=bool(mqtt_data.get('clean_session', mqtt_cfg.clean_session)),
                qos=int(mqtt_data.get('qos', mqtt_cfg.qos)),
                retain=bool(mqtt_data.get('retain', mqtt_cfg.retain)),
            )

        # Parse ZMQ config
        zmq_cfg = ZmqConfig()
        if 'zmq' in data:
            zmq_data = data['zmq']
            zmq_cfg = ZmqConfig(
                sub_url=zmq_data.get('sub_url', zmq_cfg.sub_url),
                pub_url=zmq_data.get('pub_url', zmq_cfg.pub_url),
            )

        # Parse topics config (convert list to tuple)
        topics_cfg = TopicsConfig()
        if 'topics' in data:
            subscriptions = data['topics'].get('subscriptions', topics_cfg.subscriptions)
            topics_cfg = TopicsConfig(subscriptions=tuple(subscriptions))

        # Parse bridge config
        bridge_cfg = BridgeConfig()
        if 'bridge' in data:
            br_data = data['bridge']
            bridge_cfg = BridgeConfig(
                verbose=bool(br_data.get('verbose', bridge_cfg.verbose)),
                stats_interval=float(br_data.get('stats_interval', bridge_cfg.stats_interval)),
                enable_footer=bool(br_data.get('enable_footer', bridge_cfg.enable_footer)),
            )

        # Parse route table (replaces the default table entirely)
        routes = dict(DEFAULT_ROUTE_TABLE)
        if data.get('routes'):
            routes = parse_routes(data['routes'])

        return Config(
            transport=transport_cfg,
            mqtt=mqtt_cfg,
            zmq=zmq_cfg,
            topics=topics_cfg,
            bridge=bridge_cfg,
            routes=routes,
        )

    @staticmethod
    def save(config: Config, config_path: str | Path) -> bool:
        """
        Save configuration to YAML file.

        Args:
            config: Config object to save
            config_path: Path to save YAML file

        Returns:
            True if successful
        """
        try:
            data = {
                'transport': {
                    'kind': config.transport.kind,
                    'client_id': config.transport.client_id,
                },
                'mqtt': {
                    'host': config.mqtt.host,
                    'port': config.mqtt.port,
                    'keepalive': config.mqtt.keepalive,
                    'clean_session': config.mqtt.clean_session,
                    'qos': config.mqtt.qos,
                    'retain': config.mqtt.retain,
                },
                'zmq': {
                    'sub_url': config.zmq.sub_url,
                    'pub_url': config.zmq.pub_url,
                },
                'topics': {
                    'subscriptions': list(config.topics.subscriptions),
                },
                'bridge': {
                    'verbose': config.bridge.verbose,
                    'stats_interval': config.bridge.stats_interval,
                    'enable_footer': config.bridge.enable_footer,
                },
                # Hex keys read better than decimal ids
                'routes': {f"0x{k:X}": v for k, v in sorted(config.routes.items())},
            }

            with open(config_path, 'w') as f:
                yaml.dump(data, f, default_flow_style=False, indent=2, sort_keys=False)

            return True

        except (OSError, yaml.YAMLError) as e:
            print(f"Error saving config: {e}")
            return False
