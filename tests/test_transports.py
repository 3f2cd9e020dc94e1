from types import SimpleNamespace

import pytest
import zmq
import paho.mqtt.client as mqtt

from canbridge.core.config import ConfigManager
from canbridge.errors import TransportError
from canbridge.integration.mqtt.client import MqttTransport, reason_code_to_int
from canbridge.integration.zmq.client import ZmqTransport, pattern_prefix, topic_matches
from canbridge.run import BridgeServer, apply_overrides, create_transport, parse_args


# =============================================================================
# MQTT
# =============================================================================

class FakeMqttClient:
    """Stands in for paho's Client; records calls."""

    def __init__(self, publish_rc=mqtt.MQTT_ERR_SUCCESS):
        self.publish_rc = publish_rc
        self.published = []
        self.subscribed = []
        self.on_connect = None
        self.on_disconnect = None
        self.on_message = None
        self.loop_running = False

    def connect(self, host, port, keepalive=60):
        self.on_connect(self, None, {}, 0, None)

    def loop_start(self):
        self.loop_running = True

    def loop_stop(self):
        self.loop_running = False

    def disconnect(self):
        pass

    def subscribe(self, pattern, qos=0):
        self.subscribed.append((pattern, qos))

    def publish(self, topic, payload, qos=0, retain=False):
        self.published.append((topic, payload, qos, retain))
        return SimpleNamespace(rc=self.publish_rc)


def test_mqtt_subscribes_on_connect():
    client = FakeMqttClient()
    transport = MqttTransport(client=client)
    transport.subscribe(["sim/#", "can/messages"])

    transport.connect()

    assert transport.is_connected()
    assert client.subscribed == [("sim/#", 1), ("can/messages", 1)]
    assert client.loop_running


def test_mqtt_resubscribes_after_reconnect():
    client = FakeMqttClient()
    transport = MqttTransport(client=client)
    transport.subscribe(["sim/#"])
    transport.connect()

    client.on_disconnect(client, None, {}, 7, None)
    assert not transport.is_connected()
    client.on_connect(client, None, {}, 0, None)

    assert client.subscribed == [("sim/#", 1), ("sim/#", 1)]


def test_mqtt_delivers_messages_to_handler():
    client = FakeMqttClient()
    transport = MqttTransport(client=client)
    received = []
    transport.set_handler(lambda topic, payload: received.append((topic, payload)))

    client.on_message(client, None, SimpleNamespace(topic="can/messages", payload=b"{}"))

    assert received == [("can/messages", b"{}")]


def test_mqtt_handler_errors_do_not_escape(capsys):
    client = FakeMqttClient()
    transport = MqttTransport(client=client)

    def explode(topic, payload):
        raise RuntimeError("boom")

    transport.set_handler(explode)
    client.on_message(client, None, SimpleNamespace(topic="sim/x", payload=b""))

    assert "boom" in capsys.readouterr().out


def test_mqtt_publish_passes_qos_and_retain():
    client = FakeMqttClient()
    transport = MqttTransport(client=client)

    transport.publish("sensor/sensordetector", "{}", qos=1, retain=True)

    assert client.published == [("sensor/sensordetector", "{}", 1, True)]


def test_mqtt_publish_failure_raises_transport_error():
    transport = MqttTransport(client=FakeMqttClient(publish_rc=mqtt.MQTT_ERR_QUEUE_SIZE))

    with pytest.raises(TransportError):
        transport.publish("t", "p")


def test_mqtt_connect_refused_raises_transport_error():
    client = FakeMqttClient()
    client.connect = lambda *args, **kwargs: (_ for _ in ()).throw(ConnectionRefusedError("refused"))
    transport = MqttTransport(client=client)

    with pytest.raises(TransportError):
        transport.connect()


def test_mqtt_close_stops_loop():
    client = FakeMqttClient()
    transport = MqttTransport(client=client)
    transport.connect()

    transport.close()

    assert not client.loop_running
    assert not transport.is_connected()


def test_reason_code_to_int():
    assert reason_code_to_int(0) == 0
    assert reason_code_to_int(SimpleNamespace(value=5)) == 5
    assert reason_code_to_int(object()) == -1


# =============================================================================
# ZMQ
# =============================================================================

@pytest.mark.parametrize("pattern, topic, expected", [
    ("sim/#", "sim/canmessages", True),
    ("sim/#", "sim/a/b/c", True),
    ("sim/#", "simx/a", False),
    ("can/messages", "can/messages", True),
    ("can/messages", "can/messages/extra", False),
    ("a/+/c", "a/b/c", True),
    ("a/+/c", "a/b/d", False),
])
def test_topic_matches(pattern, topic, expected):
    assert topic_matches(pattern, topic) is expected


def test_pattern_prefix():
    assert pattern_prefix("sim/#") == "sim/"
    assert pattern_prefix("a/+/c") == "a/"
    assert pattern_prefix("can/messages") == "can/messages"


class FakeSubSocket:
    def __init__(self, messages):
        self.messages = list(messages)

    def recv_multipart(self, flags=0):
        if not self.messages:
            raise zmq.Again()
        return self.messages.pop(0)


def test_zmq_poll_filters_prefix_overmatch():
    transport = ZmqTransport(context=zmq.Context.instance())
    transport.subscribe(["sim/#", "can/messages"])
    transport.sub_socket = FakeSubSocket([
        [b"can/messages", b"a"],
        [b"can/messages/extra", b"b"],
        [b"sim/speed", b"c"],
        [b"broken"],
    ])
    received = []
    transport.set_handler(lambda topic, payload: received.append((topic, payload)))

    assert transport.poll() is True
    assert received == [("can/messages", b"a"), ("sim/speed", b"c")]
    assert transport.poll() is False


def test_zmq_publish_sends_multipart():
    sent = []
    transport = ZmqTransport(context=zmq.Context.instance())
    transport.pub_socket = SimpleNamespace(send_multipart=sent.append)

    transport.publish("moto/speed", "42", qos=1, retain=True)

    assert sent == [[b"moto/speed", b"42"]]


# =============================================================================
# Server wiring
# =============================================================================

class FakeTransport:
    def __init__(self):
        self.handler = None
        self.patterns = []
        self.published = []
        self.closed = False

    def set_handler(self, handler):
        self.handler = handler

    def subscribe(self, patterns, qos=1):
        self.patterns.extend(patterns)

    def connect(self):
        pass

    def publish(self, topic, payload, qos=1, retain=True):
        self.published.append((topic, payload, qos, retain))

    def poll(self):
        return False

    def is_connected(self):
        return True

    def close(self):
        self.closed = True


def test_bridge_server_wires_dispatcher_to_transport():
    transport = FakeTransport()
    server = BridgeServer(ConfigManager.load("default"), transport)

    transport.handler("sim/speed", b"42")
    server.stop()

    assert transport.patterns == ["sim/#", "can/messages"]
    assert transport.published == [("moto/speed", b"42", 1, True)]
    assert server.get_stats()["redirected"] == 1
    assert transport.closed


def test_create_transport_by_kind():
    config = ConfigManager.load("default")
    assert isinstance(create_transport(config), MqttTransport)

    config.transport.kind = "zmq"
    assert isinstance(create_transport(config), ZmqTransport)

    config.transport.kind = "carrier-pigeon"
    with pytest.raises(ValueError):
        create_transport(config)


def test_cli_overrides_config():
    args = parse_args(["--transport", "zmq", "--host", "h", "--port", "1884", "--verbose", "--no-footer"])
    config = apply_overrides(ConfigManager.load("default"), args)

    assert config.transport.kind == "zmq"
    assert (config.mqtt.host, config.mqtt.port) == ("h", 1884)
    assert config.bridge.verbose is True
    assert config.bridge.enable_footer is False
