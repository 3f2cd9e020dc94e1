"""
ZMQ Integration for the CAN bridge

Public API:
    Broker-side:
        - BusBroker: XSUB <-> XPUB forwarder

    Client-side:
        - ZmqTransport: Transport over the bus
"""

from .broker import BusBroker
from .client import ZmqTransport, topic_matches, pattern_prefix

__all__ = [
    "BusBroker",
    "ZmqTransport",
    "topic_matches",
    "pattern_prefix",
]
