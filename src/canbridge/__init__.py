"""
CAN Bridge

Routes CAN sensor frames between pub/sub topics, decoding per-algorithm
readings on the way.

Architecture:
    canbridge/
    ├── run.py             - BridgeServer, can-bridge entry point
    ├── decoding/          - CAN payload decoding
    │   ├── frames.py      - Payload parser (production / simulation shapes)
    │   ├── signals.py     - Signal codec (status, distance, side)
    │   └── encoder.py     - Output encoder (result document)
    ├── routing/           - Topic routing
    │   ├── resolver.py    - RouteResolver (forward / redirect / drop)
    │   └── dispatcher.py  - Dispatcher (per-message pipeline)
    └── integration/       - Transports
        ├── mqtt/          - MqttTransport (paho-mqtt)
        └── zmq/           - ZmqTransport, BusBroker

Usage:
    from canbridge import Dispatcher

    dispatcher = Dispatcher(publish)
    dispatcher.dispatch("can/messages", payload)

Public API:
- Dispatcher: decode -> route -> publish pipeline
- RouteResolver: topic routing rules
- parse_frame, decode_signal, encode_result: pipeline stages
"""

from .decoding import parse_frame, decode_signal, encode_result, CanFrame, FrameShape
from .routing import Dispatcher, RouteResolver, RouteAction

__version__ = "0.1.0"

__all__ = [
    'Dispatcher',
    'RouteResolver',
    'RouteAction',
    'parse_frame',
    'decode_signal',
    'encode_result',
    'CanFrame',
    'FrameShape',
]
