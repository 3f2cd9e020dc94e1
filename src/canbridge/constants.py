"""
Bridge Constants

CAN bridge specific constants.
Following clean code principles: NO MAGIC NUMBERS!
"""


class TopicConstants:
    """Topic names and prefixes handled by the bridge."""

    # Inbound topics
    CAN_MESSAGES = "can/messages"
    SIM_CAN_MESSAGES = "sim/canmessages"
    SIM_PREFIX = "sim/"

    # Outbound topics
    SENSOR_DETECTOR = "sensor/sensordetector"
    MOTO_PREFIX = "moto/"

    # Default subscriptions (MQTT wildcard syntax)
    DEFAULT_SUBSCRIPTIONS = ("sim/#", "can/messages")


class AlgorithmTypes:
    """Algorithm identifiers carried in CAN payloads."""

    BLIND_SPOT_DETECTION = "BlindSpotDetection"
    UNKNOWN = "Unknown"


class SideLabels:
    """Side labels reported by blind spot detection."""

    LEFT = "Esquerda"
    RIGHT = "Direita"


class SignalConstants:
    """Byte layout of the CAN data payload."""

    STATUS_INDEX = 0
    DISTANCE_LOW_INDEX = 1
    DISTANCE_HIGH_INDEX = 2
    SIDE_INDEX = 3

    STATUS_ACTIVE = 1    # data[0] value meaning "detected"
    SIDE_RIGHT = 1       # data[3] value meaning right side
    DISTANCE_SCALE = 100.0  # raw centimeters -> meters

    BYTE_MIN = 0
    BYTE_MAX = 255


class MqttConstants:
    """Defaults for the MQTT transport."""

    DEFAULT_HOST = "172.20.0.14"
    DEFAULT_PORT = 1883
    DEFAULT_KEEPALIVE = 60  # seconds
    DEFAULT_CLIENT_ID = "CanBridge"

    QOS_AT_LEAST_ONCE = 1
    DEFAULT_RETAIN = True


class ZmqConstants:
    """Defaults for the ZMQ transport and local broker."""

    # Clients connect here
    DEFAULT_SUB_URL = "tcp://localhost:5556"  # broker XPUB side
    DEFAULT_PUB_URL = "tcp://localhost:5555"  # broker XSUB side

    # Broker binds here
    DEFAULT_FRONTEND_URL = "tcp://*:5555"  # XSUB (from publishers)
    DEFAULT_BACKEND_URL = "tcp://*:5556"   # XPUB (to subscribers)


class BridgeConstants:
    """Constants for the bridge server loop."""

    DEFAULT_STATS_INTERVAL = 5.0   # seconds
    DEFAULT_LOOP_SLEEP = 0.01      # seconds
    DEFAULT_CONNECT_TIMEOUT = 10.0  # seconds
    LOG_PREFIX = "[Bridge]"


# Arbitration id -> outbound topic for sim/canmessages
DEFAULT_ROUTE_TABLE = {
    0x100: "simsensor/blindspot",
    0x101: "simsensor/pedestrian",
    0x102: "simsensor/frontalcollision",
    0x103: "simsensor/rearcollision",
}


# Convenience exports
__all__ = [
    'TopicConstants',
    'AlgorithmTypes',
    'SideLabels',
    'SignalConstants',
    'MqttConstants',
    'ZmqConstants',
    'BridgeConstants',
    'DEFAULT_ROUTE_TABLE',
]
