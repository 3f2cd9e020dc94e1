"""
Signal Codec

Turns the raw CAN data bytes into sensor readings.

Byte layout:
    data[0]          status flag (1 = detected)
    data[1], data[2] distance in centimeters, little endian (low, high)
    data[3]          side flag for blind spot detection (1 = right)

Short payloads are valid: every byte is guarded by a length check, so
decode_signal() never raises.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from canbridge.constants import AlgorithmTypes, SideLabels, SignalConstants


@dataclass(frozen=True)
class DecodedSignal:
    """
    Sensor reading decoded from one CAN frame.

    side is only set for blind spot detection.
    """
    status: bool
    distance_meters: float
    side: Optional[str] = None


def decode_distance(data: Sequence[int]) -> float:
    """
    Compose the 16-bit distance from data[1] (low) and data[2] (high).

    Returns:
        Distance in meters, 0.0 when fewer than 3 bytes are present
    """
    if len(data) <= SignalConstants.DISTANCE_HIGH_INDEX:
        return 0.0

    raw = (
        (data[SignalConstants.DISTANCE_HIGH_INDEX] << 8)
        | data[SignalConstants.DISTANCE_LOW_INDEX]
    )
    return raw / SignalConstants.DISTANCE_SCALE


def decode_side(data: Sequence[int]) -> str:
    if (
        len(data) > SignalConstants.SIDE_INDEX
        and data[SignalConstants.SIDE_INDEX] == SignalConstants.SIDE_RIGHT
    ):
        return SideLabels.RIGHT
    return SideLabels.LEFT


def decode_signal(algorithm_id: str, data: Sequence[int]) -> DecodedSignal:
    """
    Decode status, distance and (for blind spot detection) side.

    Args:
        algorithm_id: Algorithm identifier of the frame
        data: Ordered CAN data bytes (any length)

    Returns:
        DecodedSignal
    """
    status = (
        len(data) > SignalConstants.STATUS_INDEX
        and data[SignalConstants.STATUS_INDEX] == SignalConstants.STATUS_ACTIVE
    )

    side = None
    if algorithm_id == AlgorithmTypes.BLIND_SPOT_DETECTION:
        side = decode_side(data)

    return DecodedSignal(
        status=status,
        distance_meters=decode_distance(data),
        side=side,
    )
