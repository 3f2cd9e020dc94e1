"""
Dispatch Engine

Runs once per inbound message, on the transport's delivery thread:

    classify topic -> parse -> decode -> encode -> resolve route -> publish

Every message is processed to completion and failures stay local to that
message: decode errors, unmapped routes, unknown topics and publish
failures are logged and counted, never raised.
"""

from datetime import datetime
from typing import Callable, Dict, Mapping, Optional, Union

from canbridge.constants import BridgeConstants, MqttConstants
from canbridge.core.interfaces import Payload, Publisher
from canbridge.decoding.encoder import encode_result, utc_now
from canbridge.decoding.frames import parse_frame
from canbridge.decoding.signals import decode_signal
from canbridge.errors import DecodeError
from canbridge.routing.resolver import RouteAction, RouteDecision, RouteResolver

PublishFn = Callable[..., None]


class Dispatcher:
    """
    Decode/transform/route pipeline bound to a publish capability.

    Usage:
        dispatcher = Dispatcher(transport)
        transport.set_handler(dispatcher.dispatch)
    """

    def __init__(
        self,
        publisher: Union[Publisher, PublishFn],
        route_table: Optional[Mapping[int, str]] = None,
        clock: Callable[[], datetime] = utc_now,
        qos: int = MqttConstants.QOS_AT_LEAST_ONCE,
        retain: bool = MqttConstants.DEFAULT_RETAIN,
        verbose: bool = False,
    ):
        """
        Initialize dispatcher.

        Args:
            publisher: Publisher instance or a publish(topic, payload, qos=, retain=) callable
            route_table: Arbitration id -> topic for sim/canmessages
            clock: Returns the encoding instant (inject for deterministic tests)
            qos: QoS used for every publish
            retain: Retain flag used for every publish
            verbose: Log every received message and decoded frame
        """
        self._publish = publisher.publish if hasattr(publisher, "publish") else publisher
        self.resolver = RouteResolver(route_table)
        self.clock = clock
        self.qos = qos
        self.retain = retain
        self.verbose = verbose

        # Stats
        self.received_count = 0
        self.forward_count = 0
        self.redirect_count = 0
        self.drop_count = 0
        self.decode_error_count = 0
        self.publish_error_count = 0

    def _log(self, message: str):
        print(f"{BridgeConstants.LOG_PREFIX} {message}")

    def dispatch(self, topic: str, payload: Payload) -> Optional[RouteDecision]:
        """
        Process one inbound message.

        Args:
            topic: Inbound topic
            payload: Raw payload (str or bytes)

        Returns:
            RouteDecision taken, or None when the payload failed to decode
        """
        self.received_count += 1

        if self.verbose:
            self._log(f"Received topic={topic} payload={_preview(payload)}")

        rule = self.resolver.classify(topic)

        # Redirect and drop branches never look at the payload
        if rule is None or not rule.decodes:
            decision = self.resolver.resolve(topic)
            if decision.action is RouteAction.REDIRECT:
                if self._send(decision.topic, payload):
                    self.redirect_count += 1
                    if self.verbose:
                        self._log(f"(Simulation) {topic} -> redirected to {decision.topic}")
            else:
                self.drop_count += 1
                self._log(f"Dropped {topic}: {decision.reason}")
            return decision

        try:
            frame = parse_frame(payload, rule.shape)
        except DecodeError as e:
            self.decode_error_count += 1
            self._log(f"✗ Error decoding message on {topic}: {e}")
            return None

        if self.verbose:
            self._log(frame.describe())

        signal = decode_signal(frame.algorithm_id, frame.data)
        result = encode_result(frame, signal, self.clock())

        decision = self.resolver.resolve(topic, frame)
        if decision.action is RouteAction.DROP:
            self.drop_count += 1
            self._log(f"Dropped {topic}: {decision.reason}")
            return decision

        if self._send(decision.topic, result.to_json()):
            self.forward_count += 1
            if self.verbose:
                self._log(f"Message forwarded to {decision.topic}")

        return decision

    def _send(self, topic: str, payload: Payload) -> bool:
        try:
            self._publish(topic, payload, qos=self.qos, retain=self.retain)
            return True
        except Exception as e:
            self.publish_error_count += 1
            self._log(f"✗ Publish to {topic} failed: {type(e).__name__}: {e}")
            return False

    def get_stats(self) -> Dict[str, int]:
        """Get dispatcher statistics."""
        return {
            'received': self.received_count,
            'forwarded': self.forward_count,
            'redirected': self.redirect_count,
            'dropped': self.drop_count,
            'decode_errors': self.decode_error_count,
            'publish_errors': self.publish_error_count,
        }


def _preview(payload: Payload, limit: int = 200) -> str:
    if isinstance(payload, (bytes, bytearray)):
        text = payload.decode('utf-8', errors='replace')
    else:
        text = payload
    return text if len(text) <= limit else text[:limit] + "..."
