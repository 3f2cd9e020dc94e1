"""
MQTT Transport

paho-mqtt client wrapper used against the production broker (Mosquitto).

The network loop runs on paho's own thread (loop_start), so inbound
messages are delivered to the handler from that thread, one at a time.
Subscriptions are (re)issued in on_connect so they survive reconnects.

Usage:
    transport = MqttTransport(host="172.20.0.14", client_id="CanBridge")
    transport.set_handler(dispatcher.dispatch)
    transport.subscribe(["sim/#", "can/messages"])
    transport.connect()
    ...
    transport.close()
"""

import time
from typing import Iterable, List, Optional

import paho.mqtt.client as mqtt

from canbridge.constants import MqttConstants, BridgeConstants
from canbridge.core.interfaces import Transport, MessageHandler, Payload
from canbridge.errors import TransportError


def reason_code_to_int(reason_code: object) -> int:
    """Normalize paho v2 ReasonCode objects (and plain ints) to an int."""
    if isinstance(reason_code, int):
        return reason_code
    for attr in ("value", "rc", "code"):
        value = getattr(reason_code, attr, None)
        if isinstance(value, int):
            return value
    try:
        return int(reason_code)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return -1


class MqttTransport(Transport):
    """
    Transport over an MQTT broker.
    """

    def __init__(
        self,
        host: str = MqttConstants.DEFAULT_HOST,
        port: int = MqttConstants.DEFAULT_PORT,
        client_id: str = MqttConstants.DEFAULT_CLIENT_ID,
        keepalive: int = MqttConstants.DEFAULT_KEEPALIVE,
        clean_session: bool = True,
        connect_timeout: float = BridgeConstants.DEFAULT_CONNECT_TIMEOUT,
        client: Optional[mqtt.Client] = None,
    ):
        """
        Initialize MQTT transport.

        Args:
            host: Broker host
            port: Broker port
            client_id: MQTT client id
            keepalive: Keepalive interval in seconds
            clean_session: Start without persisted session state
            connect_timeout: Seconds to wait for CONNACK in connect()
            client: Pre-built paho client (optional, for testing)
        """
        self.host = host
        self.port = port
        self.keepalive = keepalive
        self.connect_timeout = connect_timeout

        if client is None:
            client = mqtt.Client(
                mqtt.CallbackAPIVersion.VERSION2,
                client_id=client_id,
                clean_session=clean_session,
            )
        self.client = client
        self.client.on_connect = self._on_connect
        self.client.on_disconnect = self._on_disconnect
        self.client.on_message = self._on_message

        self.handler: Optional[MessageHandler] = None
        self.subscriptions: List[tuple] = []
        self.connected = False
        self.loop_started = False

    # =========================================================================
    # paho callbacks (network thread)
    # =========================================================================

    def _on_connect(self, _client, _userdata, _flags, reason_code, _properties=None):
        rc = reason_code_to_int(reason_code)
        self.connected = rc == 0
        if rc != 0:
            print(f"[MQTT] Connect returned rc={rc}")
            return

        print(f"[MQTT] ✓ Connected to {self.host}:{self.port}")
        for pattern, qos in self.subscriptions:
            self.client.subscribe(pattern, qos=qos)
            print(f"[MQTT] ✓ Subscribed: {pattern} (qos={qos})")

    def _on_disconnect(self, _client, _userdata, _flags, reason_code, _properties=None):
        self.connected = False
        print(f"[MQTT] Disconnected rc={reason_code_to_int(reason_code)}")

    def _on_message(self, _client, _userdata, message):
        if self.handler is None:
            return
        # Handler errors must not kill paho's network thread
        try:
            self.handler(message.topic, message.payload)
        except Exception as e:
            print(f"[MQTT] ✗ Handler error on {message.topic}: {type(e).__name__}: {e}")

    # =========================================================================
    # Transport API
    # =========================================================================

    def set_handler(self, handler: MessageHandler) -> None:
        self.handler = handler

    def subscribe(self, patterns: Iterable[str], qos: int = MqttConstants.QOS_AT_LEAST_ONCE) -> None:
        for pattern in patterns:
            self.subscriptions.append((pattern, qos))
            if self.connected:
                self.client.subscribe(pattern, qos=qos)

    def connect(self) -> None:
        """
        Connect and start the network loop.

        Raises:
            TransportError: broker unreachable or no CONNACK within connect_timeout
        """
        print(f"[MQTT] Connecting to {self.host}:{self.port}...")
        try:
            self.client.connect(self.host, self.port, keepalive=self.keepalive)
        except OSError as e:
            raise TransportError(f"Cannot reach MQTT broker {self.host}:{self.port}: {e}") from e

        self.client.loop_start()
        self.loop_started = True

        deadline = time.monotonic() + self.connect_timeout
        while time.monotonic() < deadline:
            if self.connected:
                return
            time.sleep(0.1)

        raise TransportError(
            f"No CONNACK from {self.host}:{self.port} within {self.connect_timeout}s"
        )

    def publish(
        self,
        topic: str,
        payload: Payload,
        qos: int = MqttConstants.QOS_AT_LEAST_ONCE,
        retain: bool = MqttConstants.DEFAULT_RETAIN,
    ) -> None:
        """
        Queue a message for publishing (does not wait for PUBACK).

        Raises:
            TransportError: paho refused the message (e.g. queue full)
        """
        info = self.client.publish(topic, payload, qos=qos, retain=retain)
        if info.rc != mqtt.MQTT_ERR_SUCCESS and info.rc != mqtt.MQTT_ERR_NO_CONN:
            raise TransportError(f"MQTT publish failed rc={info.rc} topic={topic}")

    def poll(self) -> bool:
        # paho delivers on its own thread
        return False

    def is_connected(self) -> bool:
        return self.connected

    def close(self) -> None:
        """Disconnect and stop the network loop."""
        print("[MQTT] Shutting down...")
        try:
            self.client.disconnect()
        finally:
            if self.loop_started:
                self.client.loop_stop()
                self.loop_started = False
            self.connected = False
