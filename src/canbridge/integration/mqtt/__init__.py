"""
MQTT Integration for the CAN bridge

Public API:
    - MqttTransport: paho-mqtt backed Transport
"""

from .client import MqttTransport

__all__ = [
    "MqttTransport",
]
