"""
Transport Interfaces

Abstract interfaces for the pub/sub transport.
Allows swapping between MQTT, ZMQ, or a fake (for testing).
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterable, Union

Payload = Union[str, bytes]

# Delivery callback: (topic, payload) -> None
MessageHandler = Callable[[str, Payload], None]


class Publisher(ABC):
    """
    Outbound publish capability handed to the dispatcher.

    Publishing is fire-and-forget: implementations queue the message and
    return; acknowledgement and retries belong to the transport.
    """

    @abstractmethod
    def publish(self, topic: str, payload: Payload, qos: int = 1, retain: bool = True) -> None:
        """
        Publish a message.

        Args:
            topic: Destination topic
            payload: Message body
            qos: Delivery guarantee (1 = at least once)
            retain: Broker keeps the message as the topic's last value
        """
        pass


class Transport(Publisher):
    """
    Full pub/sub client: connection, subscriptions and delivery.

    Implementations: MqttTransport, ZmqTransport
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the broker and start delivering messages."""
        pass

    @abstractmethod
    def subscribe(self, patterns: Iterable[str], qos: int = 1) -> None:
        """Subscribe to topic patterns (MQTT wildcard syntax)."""
        pass

    @abstractmethod
    def set_handler(self, handler: MessageHandler) -> None:
        """Register the callback invoked for every inbound message."""
        pass

    @abstractmethod
    def poll(self) -> bool:
        """
        Process pending inbound messages (non-blocking).

        Transports with their own network thread return False.
        """
        pass

    @abstractmethod
    def close(self) -> None:
        """Disconnect and cleanup resources."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Check if the transport is connected and ready."""
        pass
