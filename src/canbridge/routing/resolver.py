"""
Route Resolver

Decides where an inbound message goes. Rules are checked in order and
the first match wins; exact-topic rules come before prefix rules:

    1. can/messages     -> FORWARD  sensor/sensordetector (decoded)
    2. sim/canmessages  -> FORWARD  route table[arbitration id] (decoded)
                           DROP     when the id has no route
    3. sim/*            -> REDIRECT moto/* (raw payload)
    4. anything else    -> DROP

Stateless across messages. The route table is a read-only mapping.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple

from canbridge.constants import TopicConstants, DEFAULT_ROUTE_TABLE
from canbridge.decoding.frames import CanFrame, FrameShape
from canbridge.errors import BridgeError, UnmappedRoute, UnrecognizedTopic


class RouteAction(Enum):
    """Terminal outcome for one inbound message."""

    FORWARD = "forward"
    REDIRECT = "redirect"
    DROP = "drop"


@dataclass(frozen=True)
class RouteDecision:
    """Outbound topic and action for one message."""
    topic: Optional[str]
    action: RouteAction
    reason: Optional[BridgeError] = None  # set for DROP

    def __iter__(self):
        # Allows: topic, action = resolver.resolve(...)
        return iter((self.topic, self.action))


@dataclass(frozen=True)
class TopicRule:
    """
    One classification rule.

    shape is set for rules whose payload must be decoded into a CanFrame.
    """
    name: str
    matches: Callable[[str], bool]
    shape: Optional[FrameShape] = None

    @property
    def decodes(self) -> bool:
        return self.shape is not None


def freeze_route_table(routes: Mapping[int, str]) -> Mapping[int, str]:
    """Copy a route table into a read-only mapping."""
    return MappingProxyType({int(k): str(v) for k, v in routes.items()})


class RouteResolver:
    """
    Topic classification and outbound topic resolution.

    Usage:
        resolver = RouteResolver()
        rule = resolver.classify("sim/canmessages")
        decision = resolver.resolve("sim/canmessages", frame)
    """

    CAN_MESSAGES = TopicRule(
        name="can_messages",
        matches=lambda topic: topic == TopicConstants.CAN_MESSAGES,
        shape=FrameShape.PRODUCTION,
    )
    SIM_CAN_MESSAGES = TopicRule(
        name="sim_can_messages",
        matches=lambda topic: topic == TopicConstants.SIM_CAN_MESSAGES,
        shape=FrameShape.SIMULATION,
    )
    SIM_REDIRECT = TopicRule(
        name="sim_redirect",
        matches=lambda topic: topic.startswith(TopicConstants.SIM_PREFIX),
    )

    # Evaluation order: exact matches first, then prefixes
    RULES: Tuple[TopicRule, ...] = (CAN_MESSAGES, SIM_CAN_MESSAGES, SIM_REDIRECT)

    def __init__(self, route_table: Optional[Mapping[int, str]] = None):
        """
        Initialize resolver.

        Args:
            route_table: Arbitration id -> topic for sim/canmessages
                         (defaults to DEFAULT_ROUTE_TABLE)
        """
        if route_table is None:
            route_table = DEFAULT_ROUTE_TABLE
        self.route_table = freeze_route_table(route_table)

    def classify(self, topic: str) -> Optional[TopicRule]:
        """Return the first rule matching topic, or None."""
        for rule in self.RULES:
            if rule.matches(topic):
                return rule
        return None

    def resolve(self, topic: str, frame: Optional[CanFrame] = None) -> RouteDecision:
        """
        Resolve the outbound topic for an inbound message.

        Args:
            topic: Inbound topic
            frame: Parsed frame (needed for sim/canmessages only)

        Returns:
            RouteDecision
        """
        rule = self.classify(topic)

        if rule is self.CAN_MESSAGES:
            return RouteDecision(TopicConstants.SENSOR_DETECTOR, RouteAction.FORWARD)

        if rule is self.SIM_CAN_MESSAGES:
            arbitration_id = frame.arbitration_id if frame is not None else None
            target = self.route_table.get(arbitration_id)
            if target is None:
                return RouteDecision(None, RouteAction.DROP, UnmappedRoute(arbitration_id))
            return RouteDecision(target, RouteAction.FORWARD)

        if rule is self.SIM_REDIRECT:
            suffix = topic[len(TopicConstants.SIM_PREFIX):]
            return RouteDecision(TopicConstants.MOTO_PREFIX + suffix, RouteAction.REDIRECT)

        return RouteDecision(None, RouteAction.DROP, UnrecognizedTopic(topic))
