"""
ZMQ Transport

Transport over a local ZMQ XSUB/XPUB bus (see broker.py).

Messages are multipart [topic, payload]. ZMQ only filters on topic
prefixes, so MQTT-style patterns are subscribed by their literal prefix
and matched exactly on receipt. ZMQ has no retained messages or QoS
levels; both publish arguments are accepted and ignored.

Usage:
    transport = ZmqTransport()
    transport.set_handler(dispatcher.dispatch)
    transport.subscribe(["sim/#", "can/messages"])
    transport.connect()

    while running:
        transport.poll()  # Non-blocking, dispatches pending messages
"""

import zmq
from typing import Iterable, List, Optional

from canbridge.constants import ZmqConstants, MqttConstants
from canbridge.core.interfaces import Transport, MessageHandler, Payload


def pattern_prefix(pattern: str) -> str:
    """
    Literal prefix of an MQTT pattern, usable as a ZMQ subscription.

    "sim/#" -> "sim/", "a/+/b" -> "a/", "can/messages" -> "can/messages"
    """
    cut = len(pattern)
    for wildcard in ("#", "+"):
        idx = pattern.find(wildcard)
        if idx != -1:
            cut = min(cut, idx)
    return pattern[:cut]


def topic_matches(pattern: str, topic: str) -> bool:
    """MQTT topic filter matching ('+' = one level, '#' = all remaining levels)."""
    pattern_levels = pattern.split("/")
    topic_levels = topic.split("/")

    for i, level in enumerate(pattern_levels):
        if level == "#":
            return True
        if i >= len(topic_levels):
            return False
        if level != "+" and level != topic_levels[i]:
            return False

    return len(pattern_levels) == len(topic_levels)


class ZmqTransport(Transport):
    """
    Transport over the ZMQ bus.
    """

    def __init__(
        self,
        sub_url: str = ZmqConstants.DEFAULT_SUB_URL,
        pub_url: str = ZmqConstants.DEFAULT_PUB_URL,
        context: Optional[zmq.Context] = None,
    ):
        """
        Initialize ZMQ transport.

        Args:
            sub_url: Broker XPUB endpoint (we receive from here)
            pub_url: Broker XSUB endpoint (we publish here)
            context: ZMQ context (optional, will create if not provided)
        """
        self.sub_url = sub_url
        self.pub_url = pub_url

        # Create or use provided context
        self.context = context if context else zmq.Context()
        self.owns_context = context is None

        self.sub_socket = None
        self.pub_socket = None
        self.handler: Optional[MessageHandler] = None
        self.patterns: List[str] = []
        self.connected = False

    def set_handler(self, handler: MessageHandler) -> None:
        self.handler = handler

    def subscribe(self, patterns: Iterable[str], qos: int = MqttConstants.QOS_AT_LEAST_ONCE) -> None:
        for pattern in patterns:
            self.patterns.append(pattern)
            if self.sub_socket is not None:
                self.sub_socket.setsockopt(zmq.SUBSCRIBE, pattern_prefix(pattern).encode('utf-8'))

    def connect(self) -> None:
        """Connect SUB and PUB sockets to the broker."""
        self.sub_socket = self.context.socket(zmq.SUB)
        self.sub_socket.setsockopt(zmq.LINGER, 0)
        self.sub_socket.connect(self.sub_url)
        for pattern in self.patterns:
            self.sub_socket.setsockopt(zmq.SUBSCRIBE, pattern_prefix(pattern).encode('utf-8'))
        print(f"[ZMQ] ✓ Subscriber: {self.sub_url}")

        self.pub_socket = self.context.socket(zmq.PUB)
        self.pub_socket.setsockopt(zmq.LINGER, 0)
        self.pub_socket.connect(self.pub_url)
        print(f"[ZMQ] ✓ Publisher: {self.pub_url}")

        self.connected = True

    def publish(
        self,
        topic: str,
        payload: Payload,
        qos: int = MqttConstants.QOS_AT_LEAST_ONCE,
        retain: bool = MqttConstants.DEFAULT_RETAIN,
    ) -> None:
        if isinstance(payload, str):
            payload = payload.encode('utf-8')
        self.pub_socket.send_multipart([topic.encode('utf-8'), payload])

    def _matches(self, topic: str) -> bool:
        return any(topic_matches(pattern, topic) for pattern in self.patterns)

    def poll(self) -> bool:
        """
        Dispatch all pending messages (non-blocking).

        Returns:
            True if at least one message was received, False otherwise
        """
        received = False
        while True:
            try:
                parts = self.sub_socket.recv_multipart(zmq.NOBLOCK)
            except zmq.Again:
                # No message available (normal)
                return received

            received = True
            if len(parts) < 2:
                print(f"[ZMQ] Invalid message: {len(parts)} parts")
                continue

            topic = parts[0].decode('utf-8', errors='replace')
            # Prefix subscriptions over-match (e.g. can/messages/x)
            if not self._matches(topic):
                continue

            if self.handler is not None:
                try:
                    self.handler(topic, parts[1])
                except Exception as e:
                    print(f"[ZMQ] ✗ Handler error on {topic}: {type(e).__name__}: {e}")

    def is_connected(self) -> bool:
        return self.connected

    def close(self) -> None:
        """Close sockets and cleanup resources."""
        print("[ZMQ] Shutting down...")
        if self.sub_socket is not None:
            self.sub_socket.close()
        if self.pub_socket is not None:
            self.pub_socket.close()
        self.connected = False

        # Terminate context if we own it
        if self.owns_context and self.context:
            self.context.term()
