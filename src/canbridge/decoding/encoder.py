"""
Output Encoder

Builds the normalized result document published for every decoded frame:

    {"AlgorithmID": "...", "Timestamp": "2025-01-31T12:00:00Z",
     "Status": true, "Data": {...}}
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, Any, Optional

from canbridge.constants import AlgorithmTypes
from canbridge.decoding.frames import CanFrame
from canbridge.decoding.signals import DecodedSignal


def format_timestamp(now: datetime) -> str:
    """Format an instant as ISO-8601 UTC with a 'Z' suffix."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class OutboundResult:
    """
    Result message published on the outbound topic.
    """
    algorithm_id: str
    timestamp: str
    status: bool
    data: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        """Wire document with the key names consumers expect."""
        return {
            'AlgorithmID': self.algorithm_id,
            'Timestamp': self.timestamp,
            'Status': self.status,
            'Data': dict(self.data),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(',', ':'))


def encode_result(
    frame: CanFrame,
    signal: DecodedSignal,
    now: Optional[datetime] = None,
) -> OutboundResult:
    """
    Build the outbound result for a decoded frame.

    Args:
        frame: Parsed CAN frame
        signal: Signal decoded from frame.data
        now: Encoding instant (defaults to current UTC time)

    Returns:
        OutboundResult
    """
    if now is None:
        now = utc_now()

    if frame.algorithm_id == AlgorithmTypes.BLIND_SPOT_DETECTION:
        data = {
            'Side': signal.side,
            'DistanceToVehicle': signal.distance_meters,
        }
    else:
        data = {
            'DistanceToVehicle': signal.distance_meters,
        }

    return OutboundResult(
        algorithm_id=frame.algorithm_id,
        timestamp=format_timestamp(now),
        status=signal.status,
        data=data,
    )
