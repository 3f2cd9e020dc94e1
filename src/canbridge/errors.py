"""
Bridge Errors

Exception hierarchy for the decode -> route pipeline.
None of these are fatal: the dispatcher logs them and drops the message.
"""

from typing import Optional


class BridgeError(Exception):
    """Base class for all bridge errors."""


class DecodeError(BridgeError):
    """Payload text could not be parsed as the expected JSON document."""


class UnmappedRoute(BridgeError):
    """A sim/canmessages frame carries an arbitration id with no route."""

    def __init__(self, arbitration_id: Optional[int]):
        if arbitration_id is None:
            super().__init__("No frame to route")
        else:
            super().__init__(f"ArbitrationId 0x{arbitration_id:X} not mapped to a specific topic")
        self.arbitration_id = arbitration_id


class UnrecognizedTopic(BridgeError):
    """Inbound topic matches none of the routing rules."""

    def __init__(self, topic: str):
        super().__init__(f"Topic not recognized: {topic}")
        self.topic = topic


class TransportError(BridgeError):
    """Connection or publish failure reported by a transport."""


__all__ = [
    'BridgeError',
    'DecodeError',
    'UnmappedRoute',
    'UnrecognizedTopic',
    'TransportError',
]
