"""
Decoding subsystem

CAN payload -> CanFrame -> DecodedSignal -> OutboundResult.

Public API:
    - parse_frame, CanFrame, FrameShape: payload parser
    - decode_signal, DecodedSignal: signal codec
    - encode_result, OutboundResult: output encoder
"""

from .frames import CanFrame, FrameShape, parse_frame
from .signals import DecodedSignal, decode_signal
from .encoder import OutboundResult, encode_result, format_timestamp

__all__ = [
    'CanFrame',
    'FrameShape',
    'parse_frame',
    'DecodedSignal',
    'decode_signal',
    'OutboundResult',
    'encode_result',
    'format_timestamp',
]
