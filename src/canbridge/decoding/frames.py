"""
Payload Parser

Extracts a CanFrame from the two JSON payload shapes seen on the bus:

    Production (can/messages):
        {"AlgorithmID": "...", "CAN_Message": {"ArbitrationId": 256, "Data": [...]}}

    Simulation (sim/canmessages):
        {"algorithm_id": "...", "can_message": {"arbitration_id": 256, "data": [...]}}

The shapes only differ in key casing, so one parser handles both through
a FrameShape key set.
"""

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple, Union, Dict, Any

from canbridge.constants import AlgorithmTypes, SignalConstants
from canbridge.errors import DecodeError


@dataclass(frozen=True)
class FrameKeys:
    """JSON key names for one payload shape."""
    algorithm_id: str
    can_message: str
    arbitration_id: str
    data: str


class FrameShape(Enum):
    """Known payload shapes."""

    PRODUCTION = FrameKeys(
        algorithm_id="AlgorithmID",
        can_message="CAN_Message",
        arbitration_id="ArbitrationId",
        data="Data",
    )
    SIMULATION = FrameKeys(
        algorithm_id="algorithm_id",
        can_message="can_message",
        arbitration_id="arbitration_id",
        data="data",
    )

    @property
    def keys(self) -> FrameKeys:
        return self.value


@dataclass(frozen=True)
class CanFrame:
    """
    One CAN frame as received on the bus.

    Transient: built per inbound message, discarded after encoding.
    """
    algorithm_id: str = AlgorithmTypes.UNKNOWN
    arbitration_id: int = 0
    data: Tuple[int, ...] = field(default_factory=tuple)

    def describe(self) -> str:
        """Short human readable summary (hex id + data bytes)."""
        data_str = " ".join(str(b) for b in self.data)
        return f"Arbitration ID: 0x{self.arbitration_id:X} | Data Bytes: {data_str}"


def _reject_constant(name: str):
    # json accepts NaN / Infinity / -Infinity, which have no integer value
    raise DecodeError(f"Payload contains non-finite number {name}")


def _load_document(payload: Union[str, bytes]) -> Dict[str, Any]:
    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode('utf-8')
        except UnicodeDecodeError as e:
            raise DecodeError(f"Payload is not valid UTF-8: {e}") from e

    try:
        document = json.loads(payload, parse_constant=_reject_constant)
    except ValueError as e:
        # JSONDecodeError, or an integer literal past the digit limit
        raise DecodeError(f"Payload is not valid JSON: {e}") from e
    except RecursionError as e:
        raise DecodeError("Payload is nested too deeply") from e

    if not isinstance(document, dict):
        raise DecodeError(f"Expected a JSON object, got {type(document).__name__}")

    return document


def _is_integer(value: Any) -> bool:
    # bool is an int subclass; true/false are not bytes or ids
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_arbitration_id(raw: Any) -> int:
    if raw is None:
        return 0
    if not _is_integer(raw) or raw < 0:
        raise DecodeError(f"Invalid arbitration id: {raw!r}")
    return raw


def _parse_data(raw: Any) -> Tuple[int, ...]:
    if not isinstance(raw, list):
        return ()

    for value in raw:
        if not _is_integer(value):
            raise DecodeError(f"CAN data contains a non-integer value: {value!r}")
        if not SignalConstants.BYTE_MIN <= value <= SignalConstants.BYTE_MAX:
            raise DecodeError(f"CAN data byte out of range 0-255: {value}")

    return tuple(raw)


def parse_frame(payload: Union[str, bytes], shape: FrameShape) -> CanFrame:
    """
    Parse a raw payload into a CanFrame.

    Missing keys fall back to defaults: algorithm id "Unknown",
    arbitration id 0, empty data.

    Args:
        payload: Raw JSON text (str or UTF-8 bytes)
        shape: Which key casing to read

    Returns:
        CanFrame

    Raises:
        DecodeError: payload is not a parseable JSON object, or its
            arbitration id or data bytes are not valid CAN values
    """
    keys = shape.keys
    document = _load_document(payload)

    algorithm_id = document.get(keys.algorithm_id) or AlgorithmTypes.UNKNOWN
    if not isinstance(algorithm_id, str):
        algorithm_id = str(algorithm_id)

    arbitration_id = 0
    data: Tuple[int, ...] = ()

    can_message = document.get(keys.can_message)
    if isinstance(can_message, dict):
        arbitration_id = _parse_arbitration_id(can_message.get(keys.arbitration_id))
        data = _parse_data(can_message.get(keys.data))

    return CanFrame(
        algorithm_id=algorithm_id,
        arbitration_id=arbitration_id,
        data=data,
    )
